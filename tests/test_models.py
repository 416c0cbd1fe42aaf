import os
import sys
import datetime

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from models import (
    Exercise,
    ExerciseGroup,
    Workout,
    WorkoutPlan,
    display_name,
    plan_progress,
    program_is_complete,
    same_entity,
    workouts_for_plan,
)


def _dt(day: int) -> datetime.datetime:
    return datetime.datetime(2024, 1, day, tzinfo=datetime.timezone.utc)


def test_workouts_for_plan_newest_first():
    squat = Exercise(id=1, name="Squat")
    bench = Exercise(id=2, name="Bench")
    plan = WorkoutPlan(id=1, num_workouts=3, exercise=squat)
    workouts = [
        Workout(id=1, date=_dt(1), completed=True, exercise=squat),
        Workout(id=2, date=_dt(5), completed=True, exercise=Exercise(id=1, name="Squat")),
        Workout(id=3, date=_dt(3), completed=False, exercise=squat),
        Workout(id=4, date=_dt(4), completed=True, exercise=bench),
        Workout(id=5, date=None, completed=True, exercise=squat),
    ]
    result = workouts_for_plan(plan, workouts)
    assert [w.id for w in result] == [2, 1, 5]
    assert plan_progress(plan, workouts) == (3, 3)


def test_plan_without_exercise_has_no_workouts():
    plan = WorkoutPlan(id=1, num_workouts=1)
    assert workouts_for_plan(plan, [Workout(id=1, completed=True)]) == []


def test_program_is_complete():
    squat = Exercise(id=1, name="Squat")
    plan = WorkoutPlan(id=1, num_workouts=2, exercise=squat)
    done = [
        Workout(id=1, completed=True, exercise=squat),
        Workout(id=2, completed=True, exercise=squat),
    ]
    assert program_is_complete([plan], done)
    assert not program_is_complete([plan], done[:1])
    assert not program_is_complete([plan], done + [Workout(id=3, completed=True, exercise=squat)])


def test_program_with_deleted_exercise_is_incomplete():
    plan = WorkoutPlan(id=1, num_workouts=0, exercise=None)
    assert not program_is_complete([plan], [])


def test_display_name_fallbacks():
    assert display_name(None) == "None"
    assert display_name(None, "Deleted") == "Deleted"
    assert display_name(ExerciseGroup(id=1, name=None), "none") == "none"
    assert display_name(ExerciseGroup(id=1, name="Legs")) == "Legs"


def test_same_entity():
    assert same_entity(Exercise(id=1), Exercise(id=1))
    assert not same_entity(Exercise(id=1), ExerciseGroup(id=1))
    assert not same_entity(Exercise(id=1), None)
    unsaved = Exercise()
    assert same_entity(unsaved, unsaved)
    assert not same_entity(unsaved, Exercise())
