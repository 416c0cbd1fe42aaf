import datetime

from db import WorkoutStore
from models import ExerciseGroup, Exercise, WorkoutProgram, WorkoutPlan, Workout


def seed_store(store: WorkoutStore) -> bool:
    """Insert a small leg program; returns False if the store has data."""
    if any(store.counts().values()):
        return False
    utc = datetime.timezone.utc
    with store.transaction():
        legs = store.create(ExerciseGroup, name="Legs")
        squat = store.create(Exercise, name="Squat", group=legs)
        program = store.create(
            WorkoutProgram,
            name="5k Program",
            start=datetime.datetime(2024, 1, 1, tzinfo=utc),
        )
        store.create(WorkoutPlan, num_workouts=5, exercise=squat, programs=[program])
        store.create(
            Workout,
            date=datetime.datetime(2024, 1, 2, 7, 30, tzinfo=utc),
            completed=True,
            exercise=squat,
            program=program,
        )
        store.create(
            Workout,
            date=datetime.datetime(2024, 1, 4, 7, 30, tzinfo=utc),
            notes="felt heavy",
            exercise=squat,
        )
    return True


def seed(db_path: str = "workout.db") -> None:
    if not seed_store(WorkoutStore(db_path)):
        print("Database already contains data")
        return
    print("Seed data inserted")


if __name__ == "__main__":
    seed()
