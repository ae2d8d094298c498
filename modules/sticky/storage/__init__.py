"""
Storage Package.

The collection lives under one key of a key-value document and is always
written whole.
"""

from modules.sticky.storage.store import STORAGE_KEY, JsonFileStore, MemoryStore, Store

__all__ = [
    "JsonFileStore",
    "MemoryStore",
    "STORAGE_KEY",
    "Store",
]
