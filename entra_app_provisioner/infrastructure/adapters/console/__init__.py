"""Console output adapters."""

from .summary import ConsoleSummary

__all__ = ["ConsoleSummary"]
