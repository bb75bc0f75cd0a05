"""Selectors - read-only queries returning domain aggregates."""

from returns_kernel.selectors.return_selector import ReturnSelector

__all__ = ["ReturnSelector"]
