"""Loading listing collections from disk (command-line use only)."""

from estatesearch.storage.loader import load_listings

__all__ = ["load_listings"]
