"""Infrastructure layer implementations."""

from rmc.infrastructure import storage

__all__ = ["storage"]
