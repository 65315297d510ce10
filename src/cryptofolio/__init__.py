"""Multi-exchange crypto portfolio valuation and synchronization."""

__version__ = "0.1.0"
