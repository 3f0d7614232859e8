"""MinerDeck - control surface for a local CPU mining engine."""

__version__ = "0.1.0"
