"""Base class for domain services."""

from dataclasses import dataclass
from typing import dataclass_transform


@dataclass_transform(kw_only_default=True)
class _ServiceMeta(type):
    def __new__(mcs, name: str, bases: tuple, namespace: dict):
        cls = super().__new__(mcs, name, bases, namespace)
        if any(isinstance(b, mcs) for b in bases):
            # repr off: services hold config with the session secret
            return dataclass(cls, kw_only=True, repr=False)
        return cls


class Service(metaclass=_ServiceMeta):
    """Domain service.

    Subclasses declare their collaborators as `_`-prefixed annotations and
    become keyword-only dataclasses, which is also how dishka builds them.
    """
