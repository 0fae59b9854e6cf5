"""Adapters module - Repository implementations for different storage backends.

This package contains concrete implementations (adapters) for the repository interface:
- json_store: JSON document on disk
- memory: In-process storage for tests and embedding
"""

from .json_store import JsonTaskRepository
from .memory import InMemoryTaskRepository

__all__ = [
    "JsonTaskRepository",
    "InMemoryTaskRepository",
]
