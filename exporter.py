import datetime
import logging
import os
import tempfile
from dataclasses import dataclass
from typing import Callable, Optional

from backup_schema import (
    BACKUP_VERSION,
    BackupDocument,
    ExerciseGroupData,
    ExerciseData,
    WorkoutProgramData,
    WorkoutPlanData,
    WorkoutData,
    RestPeriodData,
    dumps,
    export_id,
    format_date,
    record_count,
)
from errors import BackupError
from file_access import scoped_write
from models import ExerciseGroup, Exercise, WorkoutProgram, WorkoutPlan, Workout, RestPeriod

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "altering_backup"


@dataclass
class ExportOutcome:
    success: bool
    location: Optional[str] = None
    record_count: int = 0
    error: Optional[Exception] = None


def _date(value: Optional[datetime.datetime]) -> Optional[str]:
    return format_date(value) if value is not None else None


class DataExporter:
    """Writes the whole entity graph of a store to one JSON backup file."""

    def __init__(
        self,
        store,
        clock: Optional[Callable[[], datetime.datetime]] = None,
        prefix: str = DEFAULT_PREFIX,
    ) -> None:
        self.store = store
        self.clock = clock or (lambda: datetime.datetime.now(datetime.timezone.utc))
        self.prefix = prefix

    def _ref(self, entity) -> Optional[str]:
        if entity is None or entity.id is None:
            return None
        return export_id(self.store.uri, entity)

    def build_document(self) -> BackupDocument:
        """Fetch every collection and convert it to flat records.

        Any store failure propagates; nothing is written.
        """
        groups = self.store.fetch_all(ExerciseGroup)
        exercises = self.store.fetch_all(Exercise)
        programs = self.store.fetch_all(WorkoutProgram)
        plans = self.store.fetch_all(WorkoutPlan)
        workouts = self.store.fetch_all(Workout)
        periods = self.store.fetch_all(RestPeriod)

        return BackupDocument(
            version=BACKUP_VERSION,
            export_date=format_date(self.clock()),
            exercise_groups=[
                ExerciseGroupData(id=self._ref(g), name=g.name) for g in groups
            ],
            exercises=[
                ExerciseData(id=self._ref(e), name=e.name, group_id=self._ref(e.group))
                for e in exercises
            ],
            workout_programs=[
                WorkoutProgramData(
                    id=self._ref(p), name=p.name, start=_date(p.start), end=_date(p.end)
                )
                for p in programs
            ],
            workout_plans=[
                WorkoutPlanData(
                    id=self._ref(p),
                    num_workouts=p.num_workouts,
                    exercise_id=self._ref(p.exercise),
                    program_ids=sorted(
                        self._ref(prog) for prog in p.programs if prog.id is not None
                    ),
                )
                for p in plans
            ],
            workouts=[
                WorkoutData(
                    id=self._ref(w),
                    completed=w.completed,
                    date=_date(w.date),
                    notes=w.notes,
                    exercise_id=self._ref(w.exercise),
                    program_id=self._ref(w.program),
                )
                for w in workouts
            ],
            rest_periods=[
                RestPeriodData(
                    id=self._ref(r),
                    start_date=_date(r.start_date),
                    end_date=_date(r.end_date),
                    explanation=r.explanation,
                )
                for r in periods
            ],
        )

    def _destination_path(self, destination: Optional[str]) -> str:
        if destination is None:
            destination = tempfile.gettempdir()
        if os.path.isdir(destination):
            stamp = int(self.clock().timestamp())
            base = os.path.join(destination, f"{self.prefix}_{stamp}")
            path = f"{base}.json"
            n = 1
            # never replace an earlier backup taken within the same second
            while os.path.exists(path):
                path = f"{base}_{n}.json"
                n += 1
            return path
        return destination

    def export_all(self, destination: Optional[str] = None) -> ExportOutcome:
        """Export every entity to ``destination`` (a directory or file path)."""
        try:
            document = self.build_document()
            path = self._destination_path(destination)
            with scoped_write(path) as handle:
                handle.write(dumps(document))
        except BackupError as e:
            logger.error("Export failed: %s", e)
            return ExportOutcome(success=False, error=e)
        except Exception as e:
            logger.exception("Unexpected error during export")
            return ExportOutcome(success=False, error=e)

        total = record_count(document)
        logger.info("Exported %d records to %s", total, path)
        return ExportOutcome(success=True, location=path, record_count=total)
