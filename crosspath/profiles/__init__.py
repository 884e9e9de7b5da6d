"""Registry of known computer profiles."""

from .registry import ComputerProfileRegistry

__all__ = ["ComputerProfileRegistry"]
