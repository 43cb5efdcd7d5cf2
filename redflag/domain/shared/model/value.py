from typing import Generic, TypeVar
from uuid import UUID, uuid4

from pydantic import BaseModel, RootModel

T = TypeVar("T")


class ValueObject(BaseModel): ...


class RootValueObject(RootModel[T], Generic[T]): ...


class Identifier(RootModel[UUID]):
    """UUID-backed identifier. Subclasses give each aggregate its own id type."""

    @classmethod
    def generate(cls):
        return cls(uuid4())

    @classmethod
    def parse(cls, value: str):
        return cls(UUID(value))

    def __str__(self) -> str:
        return str(self.root)

    def __hash__(self) -> int:
        return hash(self.root)
