"""Rules engine and service layer for Carcassonne-style tile placement games."""

__version__ = "0.1.0"
