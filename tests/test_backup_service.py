import os
import sys
import asyncio
import threading

import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from backup_schema import dumps
from backup_service import BackupService
from db import WorkoutStore
from exporter import DataExporter
from models import ExerciseGroup, RestPeriod
from seed_sample_data import seed_store


class GatedStore(WorkoutStore):
    """Store whose export pauses on the first fetch until released."""

    def __init__(self, db_path: str) -> None:
        super().__init__(db_path)
        self.entered = threading.Event()
        self.release = threading.Event()
        self.events: list[str] = []
        self.recording = False

    def fetch_all(self, kind: type) -> list:
        if self.recording and kind is ExerciseGroup and not self.entered.is_set():
            self.events.append("export started")
            self.entered.set()
            self.release.wait(5)
        result = super().fetch_all(kind)
        if self.recording and kind is RestPeriod:
            self.events.append("export finished")
        return result

    def create(self, kind: type, **fields):
        if self.recording and "import started" not in self.events:
            self.events.append("import started")
        return super().create(kind, **fields)


def _document_bytes(tmp_path) -> bytes:
    source = WorkoutStore(str(tmp_path / "source.db"))
    seed_store(source)
    return dumps(DataExporter(source).build_document()).encode("utf-8")


@pytest.mark.asyncio
async def test_async_wrappers(tmp_path):
    source = WorkoutStore(str(tmp_path / "source.db"))
    seed_store(source)
    out_dir = tmp_path / "out"
    out_dir.mkdir()

    exported = await BackupService(source).export_all_async(str(out_dir))
    assert exported.success
    assert exported.record_count == 6

    target = WorkoutStore(str(tmp_path / "target.db"))
    imported = await BackupService(target).import_all_async(exported.location)
    assert imported.success
    assert imported.record_count == 6
    assert target.counts() == source.counts()


@pytest.mark.asyncio
async def test_second_operation_waits_for_the_first(tmp_path):
    document = _document_bytes(tmp_path)
    store = GatedStore(str(tmp_path / "workout.db"))
    seed_store(store)
    service = BackupService(store)
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    store.recording = True

    export = asyncio.create_task(service.export_all_async(str(out_dir)))
    assert await asyncio.to_thread(store.entered.wait, 5)
    imported = asyncio.create_task(service.import_all_async(document))
    await asyncio.sleep(0.2)
    assert not imported.done()
    assert store.events == ["export started"]

    store.release.set()
    export_outcome, import_outcome = await asyncio.gather(export, imported)

    assert export_outcome.success
    assert export_outcome.record_count == 6
    assert import_outcome.success
    assert store.events == ["export started", "export finished", "import started"]
    assert store.count(ExerciseGroup) == 2
