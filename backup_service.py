import asyncio
import threading
from typing import Optional

from db import WorkoutStore
from exporter import DataExporter, ExportOutcome
from importer import DataImporter, ImportOutcome
from models import WorkoutProgram, program_is_complete
from settings_schema import SettingsSchema


class BackupService:
    """Export and import entry point used by the CLI and the REST API.

    Operations on one service are serialized: a second export or import
    waits until the running one has finished.
    """

    def __init__(
        self, store: WorkoutStore, settings: Optional[SettingsSchema] = None
    ) -> None:
        self.store = store
        self.settings = settings or SettingsSchema(db_path=store.db_path)
        self._lock = threading.Lock()

    def export_all(self, destination: Optional[str] = None) -> ExportOutcome:
        exporter = DataExporter(self.store, prefix=self.settings.backup_prefix)
        with self._lock:
            return exporter.export_all(destination or self.settings.backup_dir)

    def import_all(self, source, clear_existing: bool = False) -> ImportOutcome:
        importer = DataImporter(self.store)
        with self._lock:
            return importer.import_all(source, clear_existing=clear_existing)

    async def export_all_async(self, destination: Optional[str] = None) -> ExportOutcome:
        return await asyncio.to_thread(self.export_all, destination)

    async def import_all_async(
        self, source, clear_existing: bool = False
    ) -> ImportOutcome:
        return await asyncio.to_thread(self.import_all, source, clear_existing)

    def summary(self) -> dict:
        """Entity counts plus completion state of every program."""
        programs = []
        for program in self.store.fetch_all(WorkoutProgram):
            plans = self.store.plans_for_program(program)
            workouts = self.store.workouts_for_program(program)
            programs.append(
                {
                    "id": program.id,
                    "name": program.name,
                    "plans": len(plans),
                    "workouts": len(workouts),
                    "complete": bool(plans) and program_is_complete(plans, workouts),
                }
            )
        return {"counts": self.store.counts(), "programs": programs}
