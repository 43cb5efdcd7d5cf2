"""Marker base for domain ports (interfaces implemented by infrastructure)."""

from typing import Protocol


class Port(Protocol):
    """Base for all ports. Adapters subclass a concrete port explicitly."""
