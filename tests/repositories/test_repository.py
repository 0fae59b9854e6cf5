"""Unit tests for the abstract TaskRepository in repository.py.

Tests the `raise NotImplementedError` bodies by creating a concrete subclass
that delegates straight back to `super()`.
"""

from __future__ import annotations

import pytest

from pomoplan.repositories.repository import TaskRepository


class PassThroughRepository(TaskRepository):
    def load_tasks(self):
        return super().load_tasks()

    def save_tasks(self, tasks):
        return super().save_tasks(tasks)

    def load_settings(self):
        return super().load_settings()


def test_cannot_instantiate_abstract_base():
    with pytest.raises(TypeError):
        TaskRepository()


@pytest.mark.parametrize(
    "call,name",
    [
        (lambda r: r.load_tasks(), "load_tasks"),
        (lambda r: r.save_tasks([]), "save_tasks"),
        (lambda r: r.load_settings(), "load_settings"),
    ],
)
def test_base_methods_raise(call, name):
    with pytest.raises(NotImplementedError, match=name):
        call(PassThroughRepository())
