"""Estatesearch: keyword search, criteria filtering and relevance ranking for property listings."""

__version__ = "0.1.0"
