"""Katika - artist portfolios rendered as PDF documents and static microsites."""

__version__ = "1.0.0"

__all__ = ["__version__"]
