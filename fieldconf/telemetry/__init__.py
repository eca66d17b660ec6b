"""Load-phase logging."""

from .logger import LoadLogger

__all__ = ["LoadLogger"]
