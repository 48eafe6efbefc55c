"""Durable key/value persistence shared by the core components.

Each component owns its own keys; nothing writes another component's keys.
"""

from .json_store import JsonFileStore, KeyValueStore, MemoryStore

__all__ = ["KeyValueStore", "JsonFileStore", "MemoryStore"]
