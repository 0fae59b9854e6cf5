"""Repository interfaces for Pomoplan."""

from .repository import TaskRepository

__all__ = ["TaskRepository"]
