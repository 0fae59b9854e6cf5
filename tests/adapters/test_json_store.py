"""Tests for the JSON task repository."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, time

import pytest

from pomoplan.adapters.json_store import FORMAT_VERSION, JsonTaskRepository
from pomoplan.models import PersistenceError, Task
from pomoplan.models.focus.intervals import generate_intervals, new_progress


def sample_task() -> Task:
    intervals = generate_intervals(75, 25, 5)
    intervals[0].completed = True
    intervals[1].started_at = datetime(2025, 3, 5, 9, 25)
    return Task(
        name="Write report",
        priority="high",
        status="ongoing",
        estimated_minutes=75,
        start_date=date(2025, 3, 5),
        start_time=time(9, 0),
        recurring_days=[1, 3],
        intervals=intervals,
        progress=new_progress(intervals).model_copy(
            update={"completed_sessions": 1, "current_session": 1}
        ),
        tags=["work"],
    )


@pytest.fixture()
def store(tmp_path) -> JsonTaskRepository:
    return JsonTaskRepository(tmp_path / "tasks.json")


class TestLoad:
    def test_missing_file_is_empty(self, store):
        assert store.load_tasks() == []

    def test_save_then_load(self, store):
        task = sample_task()
        store.save_tasks([task])

        [loaded] = store.load_tasks()
        assert loaded == task
        assert loaded.intervals[1].started_at == datetime(2025, 3, 5, 9, 25)

    def test_document_is_versioned(self, store):
        store.save_tasks([sample_task()])
        document = json.loads(store.path.read_text(encoding="utf-8"))
        assert document["version"] == FORMAT_VERSION
        assert document["tasks"][0]["name"] == "Write report"
        assert document["tasks"][0]["start_time"] == "09:00:00"

    def test_bare_list_is_accepted(self, store):
        store.path.write_text(json.dumps([{"name": "Old format"}]), encoding="utf-8")
        [task] = store.load_tasks()
        assert task.name == "Old format"
        assert task.status == "pending"

    @pytest.mark.parametrize(
        "content",
        [
            "{not json",
            json.dumps({"version": 1}),
            json.dumps({"tasks": [{"status": "sleeping"}]}),
        ],
    )
    def test_corrupt_store_is_quarantined(self, store, content, caplog):
        store.path.write_text(content, encoding="utf-8")

        with caplog.at_level(logging.ERROR, logger="pomoplan"):
            assert store.load_tasks() == []

        corrupt = store.path.with_name("tasks.json.corrupt")
        assert corrupt.read_text(encoding="utf-8") == content
        assert not store.path.exists()
        assert "Unreadable task store" in caplog.text

    def test_unreadable_path_raises(self, tmp_path):
        (tmp_path / "tasks.json").mkdir()
        with pytest.raises(PersistenceError):
            JsonTaskRepository(tmp_path / "tasks.json").load_tasks()


class TestSave:
    def test_no_temporary_files_remain(self, store, tmp_path):
        store.save_tasks([sample_task()])
        store.save_tasks([])
        assert sorted(p.name for p in tmp_path.iterdir()) == ["tasks.json"]
        assert store.load_tasks() == []

    def test_creates_parent_directory(self, tmp_path):
        store = JsonTaskRepository(tmp_path / "nested" / "tasks.json")
        store.save_tasks([sample_task()])
        assert len(store.load_tasks()) == 1

    def test_write_failure_raises_persistence_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        store = JsonTaskRepository(blocker / "tasks.json")
        with pytest.raises(PersistenceError):
            store.save_tasks([sample_task()])


def test_settings_come_from_config_service(tmp_config, tmp_path):
    tmp_config.set("focus_duration", 40)
    store = JsonTaskRepository(tmp_path / "tasks.json", config_service=tmp_config)
    assert store.load_settings().focus_duration == 40
