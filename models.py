import datetime
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple


@dataclass(eq=False)
class ExerciseGroup:
    """A named bucket of exercises (e.g. "Legs")."""

    id: Optional[int] = None
    name: Optional[str] = None


@dataclass(eq=False)
class Exercise:
    id: Optional[int] = None
    name: Optional[str] = None
    group: Optional[ExerciseGroup] = None


@dataclass(eq=False)
class WorkoutProgram:
    id: Optional[int] = None
    name: Optional[str] = None
    start: Optional[datetime.datetime] = None
    end: Optional[datetime.datetime] = None


@dataclass(eq=False)
class WorkoutPlan:
    """Target number of workouts for one exercise inside one or more programs."""

    id: Optional[int] = None
    num_workouts: int = 0
    exercise: Optional[Exercise] = None
    programs: List[WorkoutProgram] = field(default_factory=list)


@dataclass(eq=False)
class Workout:
    id: Optional[int] = None
    date: Optional[datetime.datetime] = None
    notes: Optional[str] = None
    completed: bool = False
    exercise: Optional[Exercise] = None
    program: Optional[WorkoutProgram] = None


@dataclass(eq=False)
class RestPeriod:
    id: Optional[int] = None
    start_date: Optional[datetime.datetime] = None
    end_date: Optional[datetime.datetime] = None
    explanation: Optional[str] = None


ENTITY_TYPES = (
    ExerciseGroup,
    Exercise,
    WorkoutProgram,
    WorkoutPlan,
    Workout,
    RestPeriod,
)


def same_entity(a: object | None, b: object | None) -> bool:
    """Return True when both references point at the same stored row."""
    if a is None or b is None:
        return False
    if type(a) is not type(b):
        return False
    if a.id is None or b.id is None:
        return a is b
    return a.id == b.id


def display_name(entity: object | None, fallback: str = "None") -> str:
    """Name of a possibly deleted entity, for list and detail views."""
    if entity is None:
        return fallback
    name = getattr(entity, "name", None)
    return name if name else fallback


def workouts_for_plan(plan: WorkoutPlan, workouts: Iterable[Workout]) -> List[Workout]:
    """Completed workouts matching the plan's exercise, newest first.

    ``workouts`` should be the workouts of one program. Undated workouts are
    placed after dated ones and ordered by exercise name.
    """
    if plan.exercise is None:
        return []
    matching = [
        w for w in workouts if w.completed and same_entity(w.exercise, plan.exercise)
    ]
    dated = [w for w in matching if w.date is not None]
    undated = [w for w in matching if w.date is None]
    dated.sort(key=lambda w: w.date, reverse=True)
    undated.sort(key=lambda w: display_name(w.exercise, ""), reverse=True)
    return dated + undated


def plan_progress(plan: WorkoutPlan, workouts: Iterable[Workout]) -> Tuple[int, int]:
    """Return ``(done, target)`` for a plan within a program's workouts."""
    return len(workouts_for_plan(plan, workouts)), plan.num_workouts


def program_is_complete(
    plans: Iterable[WorkoutPlan], workouts: Iterable[Workout]
) -> bool:
    workouts = list(workouts)
    counts: dict[int, int] = {}
    for w in workouts:
        if w.completed and w.exercise is not None and w.exercise.id is not None:
            counts[w.exercise.id] = counts.get(w.exercise.id, 0) + 1
    for plan in plans:
        if plan.exercise is None or plan.exercise.id is None:
            return False
        if counts.get(plan.exercise.id, 0) != plan.num_workouts:
            return False
    return True
