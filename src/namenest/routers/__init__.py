"""Router package exports."""

from . import health, names

__all__ = [
    "health",
    "names",
]
