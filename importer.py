"""Restore a backup document into a store.

Entities are recreated stage by stage in dependency order (``IMPORT_STAGES``).
Each stage first creates bare entities for all of its records and registers
them in the shared :class:`IdMapping`, then walks the records again to set
relations by looking up export ids created by this or earlier stages. The
whole import runs inside one store transaction: on any failure nothing of it,
including the optional clear step, is kept.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from backup_schema import BackupDocument, loads, parse_date, record_count
from errors import (
    BackupError,
    DecodingError,
    ResourceAccessError,
    UnresolvedReference,
)
from file_access import scoped_read
from models import (
    ENTITY_TYPES,
    ExerciseGroup,
    Exercise,
    WorkoutProgram,
    WorkoutPlan,
    Workout,
    RestPeriod,
)

logger = logging.getLogger(__name__)


@dataclass
class ImportOutcome:
    success: bool
    record_count: int = 0
    message: str = ""
    error: Optional[Exception] = None
    warnings: List[UnresolvedReference] = field(default_factory=list)


class IdMapping:
    """Export id of a document record -> entity created for it in the store."""

    def __init__(self) -> None:
        self._entities: Dict[str, object] = {}

    def register(self, export_id: str, entity) -> None:
        self._entities[export_id] = entity

    def lookup(self, export_id: str, kind: type):
        entity = self._entities.get(export_id)
        if entity is None or not isinstance(entity, kind):
            return None
        return entity

    def __contains__(self, export_id: str) -> bool:
        return export_id in self._entities

    def __len__(self) -> int:
        return len(self._entities)


class ImportContext:
    def __init__(self) -> None:
        self.mapping = IdMapping()
        self.warnings: List[UnresolvedReference] = []

    def resolve(
        self, kind: type, target_id: Optional[str], owner: str, record_id: str, field_name: str
    ):
        """Look up a referenced entity; record a warning when it is missing."""
        if target_id is None:
            return None
        entity = self.mapping.lookup(target_id, kind)
        if entity is None:
            ref = UnresolvedReference(owner, record_id, field_name, target_id)
            logger.warning("Skipping reference: %s", ref)
            self.warnings.append(ref)
        return entity


def _optional_date(value: Optional[str]):
    return parse_date(value) if value is not None else None


def _link_exercise(ctx: ImportContext, exercise: Exercise, record) -> None:
    exercise.group = ctx.resolve(
        ExerciseGroup, record.group_id, "Exercise", record.id, "groupId"
    )


def _link_plan(ctx: ImportContext, plan: WorkoutPlan, record) -> None:
    plan.exercise = ctx.resolve(
        Exercise, record.exercise_id, "WorkoutPlan", record.id, "exerciseId"
    )
    programs = []
    for program_id in record.program_ids:
        program = ctx.resolve(
            WorkoutProgram, program_id, "WorkoutPlan", record.id, "programIds"
        )
        if program is not None and program not in programs:
            programs.append(program)
    plan.programs = programs


def _link_workout(ctx: ImportContext, workout: Workout, record) -> None:
    workout.exercise = ctx.resolve(
        Exercise, record.exercise_id, "Workout", record.id, "exerciseId"
    )
    workout.program = ctx.resolve(
        WorkoutProgram, record.program_id, "Workout", record.id, "programId"
    )


@dataclass(frozen=True)
class ImportStage:
    """One entity type of the pipeline.

    ``fields`` maps a document record to the scalar fields of a bare entity;
    ``link`` (if any) sets the relations of an already created entity.
    """

    section: str
    kind: type
    fields: Callable[[object], dict]
    link: Optional[Callable[[ImportContext, object, object], None]] = None

    def run(self, store, records: Sequence, ctx: ImportContext) -> int:
        created = []
        for record in records:
            entity = store.create(self.kind, **self.fields(record))
            ctx.mapping.register(record.id, entity)
            created.append((entity, record))
        if self.link is not None:
            for entity, record in created:
                self.link(ctx, entity, record)
                store.update(entity)
        logger.debug("Imported %d %s", len(created), self.kind.__name__)
        return len(created)


IMPORT_STAGES = (
    ImportStage("exercise_groups", ExerciseGroup, lambda r: {"name": r.name}),
    ImportStage("exercises", Exercise, lambda r: {"name": r.name}, _link_exercise),
    ImportStage(
        "workout_programs",
        WorkoutProgram,
        lambda r: {
            "name": r.name,
            "start": _optional_date(r.start),
            "end": _optional_date(r.end),
        },
    ),
    ImportStage(
        "workout_plans",
        WorkoutPlan,
        lambda r: {"num_workouts": r.num_workouts},
        _link_plan,
    ),
    ImportStage(
        "workouts",
        Workout,
        lambda r: {
            "completed": r.completed,
            "notes": r.notes,
            "date": _optional_date(r.date),
        },
        _link_workout,
    ),
    ImportStage(
        "rest_periods",
        RestPeriod,
        lambda r: {
            "start_date": _optional_date(r.start_date),
            "end_date": _optional_date(r.end_date),
            "explanation": r.explanation,
        },
    ),
)


class DataImporter:
    """Imports backup documents produced by :class:`exporter.DataExporter`."""

    def __init__(self, store, stages: Sequence[ImportStage] = IMPORT_STAGES) -> None:
        self.store = store
        self.stages = tuple(stages)

    def load(self, source) -> BackupDocument:
        """Read and validate ``source`` (a path, raw bytes or a document)."""
        if isinstance(source, BackupDocument):
            return source
        if isinstance(source, (bytes, bytearray)):
            return loads(bytes(source))
        path = os.fspath(source)
        with scoped_read(path) as handle:
            data = handle.read()
        return loads(data)

    def clear_all(self) -> None:
        """Delete every entity of every type. Irreversible once committed."""
        for kind in reversed(ENTITY_TYPES):
            self.store.delete_all(kind)

    def run_stages(self, document: BackupDocument) -> ImportContext:
        ctx = ImportContext()
        for stage in self.stages:
            stage.run(self.store, getattr(document, stage.section), ctx)
        return ctx

    def import_all(self, source, clear_existing: bool = False) -> ImportOutcome:
        try:
            document = self.load(source)
        except DecodingError as e:
            logger.error("Backup decoding failed: %s", e)
            return ImportOutcome(
                success=False, error=e, message=f"Failed to decode backup file: {e}"
            )
        except ResourceAccessError as e:
            logger.error("Backup file not accessible: %s", e)
            return ImportOutcome(
                success=False, error=e, message=f"Could not access backup file: {e}"
            )

        try:
            with self.store.transaction():
                if clear_existing:
                    self.clear_all()
                ctx = self.run_stages(document)
        except BackupError as e:
            logger.error("Import rolled back: %s", e)
            return ImportOutcome(success=False, error=e, message=f"Import failed: {e}")
        except Exception as e:
            logger.exception("Unexpected error during import")
            return ImportOutcome(
                success=False, error=e, message=f"Unexpected error: {e}"
            )

        total = record_count(document)
        logger.info(
            "Imported %d records (%d unresolved references)", total, len(ctx.warnings)
        )
        return ImportOutcome(
            success=True,
            record_count=total,
            message=f"Successfully imported {total} records",
            warnings=ctx.warnings,
        )
