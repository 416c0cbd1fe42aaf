"""Wire format of backup documents.

A backup is one JSON object with a ``version``, an ``exportDate`` and six
arrays of flat records. Records reference each other through export ids
minted by :func:`export_id`; those ids mean nothing outside the document.
"""

import datetime
import json
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from errors import DecodingError

BACKUP_VERSION = "1.0"


def format_date(value: datetime.datetime) -> str:
    """Render a datetime as ISO-8601 UTC with second precision."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    value = value.astimezone(datetime.timezone.utc)
    return value.isoformat(timespec="seconds").replace("+00:00", "Z")


def parse_date(value: str) -> datetime.datetime:
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed.astimezone(datetime.timezone.utc).replace(microsecond=0)


def export_id(store_uri: str, entity) -> str:
    return f"{store_uri}/{type(entity).__name__}/p{entity.id}"


class _Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, strict=True
    )


def _check_date(value: str) -> str:
    try:
        return format_date(parse_date(value))
    except ValueError:
        raise ValueError(f"invalid ISO-8601 date: {value!r}") from None


IsoDate = Annotated[str, AfterValidator(_check_date)]


class ExerciseGroupData(_Record):
    id: str
    name: Optional[str] = None


class ExerciseData(_Record):
    id: str
    name: Optional[str] = None
    group_id: Optional[str] = None


class WorkoutProgramData(_Record):
    id: str
    name: Optional[str] = None
    start: Optional[IsoDate] = None
    end: Optional[IsoDate] = None


class WorkoutPlanData(_Record):
    id: str
    num_workouts: int = Field(ge=0)
    exercise_id: Optional[str] = None
    program_ids: List[str]


class WorkoutData(_Record):
    id: str
    completed: bool
    date: Optional[IsoDate] = None
    notes: Optional[str] = None
    exercise_id: Optional[str] = None
    program_id: Optional[str] = None


class RestPeriodData(_Record):
    id: str
    start_date: Optional[IsoDate] = None
    end_date: Optional[IsoDate] = None
    explanation: Optional[str] = None


class BackupDocument(_Record):
    version: str
    export_date: IsoDate
    exercise_groups: List[ExerciseGroupData]
    exercises: List[ExerciseData]
    workout_programs: List[WorkoutProgramData]
    workout_plans: List[WorkoutPlanData]
    workouts: List[WorkoutData]
    rest_periods: List[RestPeriodData]


def record_count(document: BackupDocument) -> int:
    return (
        len(document.exercise_groups)
        + len(document.exercises)
        + len(document.workout_programs)
        + len(document.workout_plans)
        + len(document.workouts)
        + len(document.rest_periods)
    )


def dumps(document: BackupDocument) -> str:
    """Serialize with sorted keys so identical stores produce identical text."""
    data = document.model_dump(by_alias=True, exclude_none=True)
    return json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def loads(text: str | bytes) -> BackupDocument:
    try:
        return BackupDocument.model_validate_json(text)
    except ValidationError as e:
        err = e.errors()[0]
        location = ".".join(str(part) for part in err.get("loc", ())) or None
        raise DecodingError(err.get("msg", str(e)), location) from e
