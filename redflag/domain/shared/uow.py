from abc import abstractmethod
from typing import Protocol

from redflag.domain.shared.port import Port


class UnitOfWork(Port, Protocol):
    """Transaction boundary for services that must commit part-way through.

    Most work commits once when its DI scope closes; services that call out
    to the network between writes commit explicitly so no transaction is
    held open across the call.
    """

    @abstractmethod
    async def commit(self) -> None: ...

    @abstractmethod
    async def rollback(self) -> None: ...
