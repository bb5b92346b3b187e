"""Route group exports."""

from . import charges, customers, health

__all__ = ["charges", "customers", "health"]
