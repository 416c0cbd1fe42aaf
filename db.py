import sqlite3
import os
import threading
import datetime
from contextlib import contextmanager
from typing import Callable, Dict, Iterable, List, Tuple, Optional

from errors import StoreAccessError
from models import (
    ENTITY_TYPES,
    ExerciseGroup,
    Exercise,
    WorkoutProgram,
    WorkoutPlan,
    Workout,
    RestPeriod,
)


def _to_db_date(value: Optional[datetime.datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(datetime.timezone.utc).isoformat()


def _from_db_date(value: Optional[str]) -> Optional[datetime.datetime]:
    if not value:
        return None
    parsed = datetime.datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "exercise_groups": (
            """CREATE TABLE exercise_groups (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT
                );""",
            ["id", "name"],
        ),
        "exercises": (
            """CREATE TABLE exercises (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT,
                    group_id INTEGER
                );""",
            ["id", "name", "group_id"],
        ),
        "workout_programs": (
            """CREATE TABLE workout_programs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT,
                    start_date TEXT,
                    end_date TEXT
                );""",
            ["id", "name", "start_date", "end_date"],
        ),
        "workout_plans": (
            """CREATE TABLE workout_plans (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    num_workouts INTEGER NOT NULL DEFAULT 0 CHECK (num_workouts >= 0),
                    exercise_id INTEGER
                );""",
            ["id", "num_workouts", "exercise_id"],
        ),
        "workout_plan_programs": (
            """CREATE TABLE workout_plan_programs (
                    plan_id INTEGER NOT NULL,
                    program_id INTEGER NOT NULL,
                    PRIMARY KEY (plan_id, program_id)
                );""",
            ["plan_id", "program_id"],
        ),
        "workouts": (
            """CREATE TABLE workouts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    date TEXT,
                    notes TEXT,
                    completed INTEGER NOT NULL DEFAULT 0,
                    exercise_id INTEGER,
                    program_id INTEGER
                );""",
            ["id", "date", "notes", "completed", "exercise_id", "program_id"],
        ),
        "rest_periods": (
            """CREATE TABLE rest_periods (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    start_date TEXT,
                    end_date TEXT,
                    explanation TEXT
                );""",
            ["id", "start_date", "end_date", "explanation"],
        ),
    }

    def __init__(self, db_path: str = "workout.db") -> None:
        self._db_path = db_path
        self._local = threading.local()
        self._ensure_schema()

    @property
    def db_path(self) -> str:
        return self._db_path

    @property
    def _active(self) -> sqlite3.Connection | None:
        """Connection of the transaction open in the calling thread, if any."""
        return getattr(self._local, "conn", None)

    @_active.setter
    def _active(self, conn: sqlite3.Connection | None) -> None:
        self._local.conn = conn

    @contextmanager
    def _connection(self):
        if self._active is not None:
            yield self._active
            return
        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)
        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            conn.execute(f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;")
        conn.execute(f"DROP TABLE {table}_old;")


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def execute(self, query: str, params: Tuple = ()) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.lastrowid

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()

    def fetch_one(self, query: str, params: Tuple = ()) -> Optional[Tuple]:
        rows = self.fetch_all(query, params)
        return rows[0] if rows else None

    def _delete_all(self, table: str) -> None:
        self.execute(f"DELETE FROM {table};")

    def _count(self, table: str) -> int:
        return int(self.fetch_all(f"SELECT COUNT(*) FROM {table};")[0][0])


class ExerciseGroupRepository(BaseRepository):
    """Repository for exercise group table operations."""

    def add(self, name: Optional[str]) -> int:
        return self.execute("INSERT INTO exercise_groups (name) VALUES (?);", (name,))

    def fetch_all_groups(self) -> List[Tuple[int, Optional[str]]]:
        return self.fetch_all("SELECT id, name FROM exercise_groups ORDER BY id;")

    def fetch_detail(self, group_id: int) -> Optional[Tuple[int, Optional[str]]]:
        return self.fetch_one(
            "SELECT id, name FROM exercise_groups WHERE id = ?;", (group_id,)
        )

    def update(self, group_id: int, name: Optional[str]) -> None:
        self.execute(
            "UPDATE exercise_groups SET name = ? WHERE id = ?;", (name, group_id)
        )

    def remove(self, group_id: int) -> None:
        self.execute("DELETE FROM exercise_groups WHERE id = ?;", (group_id,))

    def delete_all(self) -> None:
        self._delete_all("exercise_groups")

    def count(self) -> int:
        return self._count("exercise_groups")


class ExerciseRepository(BaseRepository):
    """Repository for exercise table operations."""

    def add(self, name: Optional[str], group_id: Optional[int] = None) -> int:
        return self.execute(
            "INSERT INTO exercises (name, group_id) VALUES (?, ?);", (name, group_id)
        )

    def fetch_all_exercises(self) -> List[Tuple[int, Optional[str], Optional[int]]]:
        return self.fetch_all("SELECT id, name, group_id FROM exercises ORDER BY id;")

    def fetch_detail(
        self, exercise_id: int
    ) -> Optional[Tuple[int, Optional[str], Optional[int]]]:
        return self.fetch_one(
            "SELECT id, name, group_id FROM exercises WHERE id = ?;", (exercise_id,)
        )

    def fetch_for_group(self, group_id: int) -> List[Tuple[int, Optional[str]]]:
        return self.fetch_all(
            "SELECT id, name FROM exercises WHERE group_id = ? ORDER BY name;",
            (group_id,),
        )

    def update(
        self, exercise_id: int, name: Optional[str], group_id: Optional[int]
    ) -> None:
        self.execute(
            "UPDATE exercises SET name = ?, group_id = ? WHERE id = ?;",
            (name, group_id, exercise_id),
        )

    def remove(self, exercise_id: int) -> None:
        self.execute("DELETE FROM exercises WHERE id = ?;", (exercise_id,))

    def delete_all(self) -> None:
        self._delete_all("exercises")

    def count(self) -> int:
        return self._count("exercises")


class WorkoutProgramRepository(BaseRepository):
    """Repository for workout program table operations."""

    def add(
        self, name: Optional[str], start: Optional[str] = None, end: Optional[str] = None
    ) -> int:
        return self.execute(
            "INSERT INTO workout_programs (name, start_date, end_date) VALUES (?, ?, ?);",
            (name, start, end),
        )

    def fetch_all_programs(self) -> List[Tuple]:
        return self.fetch_all(
            "SELECT id, name, start_date, end_date FROM workout_programs ORDER BY id;"
        )

    def fetch_detail(self, program_id: int) -> Optional[Tuple]:
        return self.fetch_one(
            "SELECT id, name, start_date, end_date FROM workout_programs WHERE id = ?;",
            (program_id,),
        )

    def update(
        self,
        program_id: int,
        name: Optional[str],
        start: Optional[str],
        end: Optional[str],
    ) -> None:
        self.execute(
            "UPDATE workout_programs SET name = ?, start_date = ?, end_date = ? WHERE id = ?;",
            (name, start, end, program_id),
        )

    def remove(self, program_id: int) -> None:
        self.execute(
            "DELETE FROM workout_plan_programs WHERE program_id = ?;", (program_id,)
        )
        self.execute("DELETE FROM workout_programs WHERE id = ?;", (program_id,))

    def delete_all(self) -> None:
        self._delete_all("workout_programs")

    def count(self) -> int:
        return self._count("workout_programs")


class WorkoutPlanRepository(BaseRepository):
    """Repository for workout plans and their program memberships."""

    def add(self, num_workouts: int, exercise_id: Optional[int] = None) -> int:
        return self.execute(
            "INSERT INTO workout_plans (num_workouts, exercise_id) VALUES (?, ?);",
            (num_workouts, exercise_id),
        )

    def fetch_all_plans(self) -> List[Tuple[int, int, Optional[int]]]:
        return self.fetch_all(
            "SELECT id, num_workouts, exercise_id FROM workout_plans ORDER BY id;"
        )

    def fetch_detail(self, plan_id: int) -> Optional[Tuple[int, int, Optional[int]]]:
        return self.fetch_one(
            "SELECT id, num_workouts, exercise_id FROM workout_plans WHERE id = ?;",
            (plan_id,),
        )

    def fetch_program_links(self) -> List[Tuple[int, int]]:
        return self.fetch_all(
            "SELECT plan_id, program_id FROM workout_plan_programs ORDER BY plan_id, program_id;"
        )

    def fetch_program_ids(self, plan_id: int) -> List[int]:
        rows = self.fetch_all(
            "SELECT program_id FROM workout_plan_programs WHERE plan_id = ? ORDER BY program_id;",
            (plan_id,),
        )
        return [r[0] for r in rows]

    def fetch_for_program(self, program_id: int) -> List[int]:
        rows = self.fetch_all(
            "SELECT plan_id FROM workout_plan_programs WHERE program_id = ? ORDER BY plan_id;",
            (program_id,),
        )
        return [r[0] for r in rows]

    def update(
        self, plan_id: int, num_workouts: int, exercise_id: Optional[int]
    ) -> None:
        self.execute(
            "UPDATE workout_plans SET num_workouts = ?, exercise_id = ? WHERE id = ?;",
            (num_workouts, exercise_id, plan_id),
        )

    def set_programs(self, plan_id: int, program_ids: Iterable[int]) -> None:
        self.execute("DELETE FROM workout_plan_programs WHERE plan_id = ?;", (plan_id,))
        for pid in dict.fromkeys(program_ids):
            self.execute(
                "INSERT INTO workout_plan_programs (plan_id, program_id) VALUES (?, ?);",
                (plan_id, pid),
            )

    def remove(self, plan_id: int) -> None:
        self.execute("DELETE FROM workout_plan_programs WHERE plan_id = ?;", (plan_id,))
        self.execute("DELETE FROM workout_plans WHERE id = ?;", (plan_id,))

    def delete_all(self) -> None:
        self._delete_all("workout_plan_programs")
        self._delete_all("workout_plans")

    def count(self) -> int:
        return self._count("workout_plans")


class WorkoutRepository(BaseRepository):
    """Repository for workout table operations."""

    def add(
        self,
        date: Optional[str] = None,
        notes: Optional[str] = None,
        completed: bool = False,
        exercise_id: Optional[int] = None,
        program_id: Optional[int] = None,
    ) -> int:
        return self.execute(
            "INSERT INTO workouts (date, notes, completed, exercise_id, program_id) VALUES (?, ?, ?, ?, ?);",
            (date, notes, int(completed), exercise_id, program_id),
        )

    def fetch_all_workouts(self) -> List[Tuple]:
        return self.fetch_all(
            "SELECT id, date, notes, completed, exercise_id, program_id FROM workouts ORDER BY id;"
        )

    def fetch_detail(self, workout_id: int) -> Optional[Tuple]:
        return self.fetch_one(
            "SELECT id, date, notes, completed, exercise_id, program_id FROM workouts WHERE id = ?;",
            (workout_id,),
        )

    def fetch_for_program(self, program_id: int) -> List[int]:
        rows = self.fetch_all(
            "SELECT id FROM workouts WHERE program_id = ? ORDER BY id;", (program_id,)
        )
        return [r[0] for r in rows]

    def update(
        self,
        workout_id: int,
        date: Optional[str],
        notes: Optional[str],
        completed: bool,
        exercise_id: Optional[int],
        program_id: Optional[int],
    ) -> None:
        self.execute(
            "UPDATE workouts SET date = ?, notes = ?, completed = ?, exercise_id = ?, program_id = ? WHERE id = ?;",
            (date, notes, int(completed), exercise_id, program_id, workout_id),
        )

    def remove(self, workout_id: int) -> None:
        self.execute("DELETE FROM workouts WHERE id = ?;", (workout_id,))

    def delete_all(self) -> None:
        self._delete_all("workouts")

    def count(self) -> int:
        return self._count("workouts")


class RestPeriodRepository(BaseRepository):
    """Repository for rest period table operations."""

    def add(
        self,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        explanation: Optional[str] = None,
    ) -> int:
        return self.execute(
            "INSERT INTO rest_periods (start_date, end_date, explanation) VALUES (?, ?, ?);",
            (start_date, end_date, explanation),
        )

    def fetch_all_periods(self) -> List[Tuple]:
        return self.fetch_all(
            "SELECT id, start_date, end_date, explanation FROM rest_periods ORDER BY id;"
        )

    def fetch_detail(self, period_id: int) -> Optional[Tuple]:
        return self.fetch_one(
            "SELECT id, start_date, end_date, explanation FROM rest_periods WHERE id = ?;",
            (period_id,),
        )

    def update(
        self,
        period_id: int,
        start_date: Optional[str],
        end_date: Optional[str],
        explanation: Optional[str],
    ) -> None:
        self.execute(
            "UPDATE rest_periods SET start_date = ?, end_date = ?, explanation = ? WHERE id = ?;",
            (start_date, end_date, explanation, period_id),
        )

    def remove(self, period_id: int) -> None:
        self.execute("DELETE FROM rest_periods WHERE id = ?;", (period_id,))

    def delete_all(self) -> None:
        self._delete_all("rest_periods")

    def count(self) -> int:
        return self._count("rest_periods")


class WorkoutStore:
    """Entity-level store over the SQLite repositories.

    Relations are loaded as entity objects; ids pointing at deleted rows load
    as ``None`` (or are left out of a plan's program list). Any ``sqlite3``
    failure is raised as :class:`StoreAccessError`.
    """

    def __init__(self, db_path: str = "workout.db") -> None:
        self.db_path = db_path
        self.groups = ExerciseGroupRepository(db_path)
        self.exercises = ExerciseRepository(db_path)
        self.programs = WorkoutProgramRepository(db_path)
        self.plans = WorkoutPlanRepository(db_path)
        self.workouts = WorkoutRepository(db_path)
        self.rest_periods = RestPeriodRepository(db_path)
        self._local = threading.local()
        self._repos: Dict[type, BaseRepository] = {
            ExerciseGroup: self.groups,
            Exercise: self.exercises,
            WorkoutProgram: self.programs,
            WorkoutPlan: self.plans,
            Workout: self.workouts,
            RestPeriod: self.rest_periods,
        }

    @property
    def uri(self) -> str:
        return "sqlite://" + os.path.abspath(self.db_path)

    @property
    def _conn(self) -> sqlite3.Connection | None:
        return getattr(self._local, "conn", None)

    @property
    def in_transaction(self) -> bool:
        return self._conn is not None

    def _attach(self, conn: sqlite3.Connection | None) -> None:
        self._local.conn = conn
        for repo in self._repos.values():
            repo._active = conn

    @contextmanager
    def _guard(self, operation: str, kind: Optional[type] = None):
        try:
            yield
        except sqlite3.Error as e:
            raise StoreAccessError(
                operation, kind.__name__ if kind else None, str(e)
            ) from e

    def _repo(self, kind: type) -> BaseRepository:
        try:
            return self._repos[kind]
        except KeyError:
            raise ValueError(f"unsupported entity type: {kind!r}") from None

    @contextmanager
    def transaction(self):
        """Run a block on one connection; commit on success, roll back on error.

        Nested calls join the outer transaction.
        """
        if self._conn is not None:
            yield self
            return
        with self._guard("open"):
            conn = sqlite3.connect(self.db_path)
        self._attach(conn)
        try:
            yield self
            with self._guard("commit"):
                conn.commit()
        except BaseException:
            conn.rollback()
            raise
        finally:
            self._attach(None)
            conn.close()

    def commit(self) -> None:
        if self._conn is not None:
            with self._guard("commit"):
                self._conn.commit()

    def rollback(self) -> None:
        if self._conn is not None:
            with self._guard("rollback"):
                self._conn.rollback()

    # -- reads -------------------------------------------------------------

    def fetch_all(self, kind: type) -> list:
        with self._guard("fetch", kind):
            if kind is ExerciseGroup:
                return [self._group(r) for r in self.groups.fetch_all_groups()]
            if kind is Exercise:
                groups = self._index(ExerciseGroup)
                return [
                    self._exercise(r, groups.get)
                    for r in self.exercises.fetch_all_exercises()
                ]
            if kind is WorkoutProgram:
                return [self._program(r) for r in self.programs.fetch_all_programs()]
            if kind is WorkoutPlan:
                exercises = self._index(Exercise)
                programs = self._index(WorkoutProgram)
                links: Dict[int, List[int]] = {}
                for plan_id, program_id in self.plans.fetch_program_links():
                    links.setdefault(plan_id, []).append(program_id)
                return [
                    self._plan(r, links.get(r[0], []), exercises.get, programs.get)
                    for r in self.plans.fetch_all_plans()
                ]
            if kind is Workout:
                exercises = self._index(Exercise)
                programs = self._index(WorkoutProgram)
                return [
                    self._workout(r, exercises.get, programs.get)
                    for r in self.workouts.fetch_all_workouts()
                ]
            if kind is RestPeriod:
                return [self._rest_period(r) for r in self.rest_periods.fetch_all_periods()]
        raise ValueError(f"unsupported entity type: {kind!r}")

    def _index(self, kind: type) -> Dict[int, object]:
        return {e.id: e for e in self.fetch_all(kind)}

    def resolve(self, kind: type, entity_id: Optional[int]):
        """Return the entity with ``entity_id`` or ``None`` if it is gone."""
        if entity_id is None:
            return None
        with self._guard("resolve", kind):
            row = self._repo(kind).fetch_detail(entity_id)
            if row is None:
                return None
            if kind is ExerciseGroup:
                return self._group(row)
            if kind is Exercise:
                return self._exercise(row, lambda gid: self.resolve(ExerciseGroup, gid))
            if kind is WorkoutProgram:
                return self._program(row)
            if kind is WorkoutPlan:
                return self._plan(
                    row,
                    self.plans.fetch_program_ids(entity_id),
                    lambda eid: self.resolve(Exercise, eid),
                    lambda pid: self.resolve(WorkoutProgram, pid),
                )
            if kind is Workout:
                return self._workout(
                    row,
                    lambda eid: self.resolve(Exercise, eid),
                    lambda pid: self.resolve(WorkoutProgram, pid),
                )
            return self._rest_period(row)

    def count(self, kind: type) -> int:
        with self._guard("count", kind):
            return self._repo(kind).count()

    def counts(self) -> Dict[str, int]:
        return {kind.__name__: self.count(kind) for kind in ENTITY_TYPES}

    def workouts_for_program(self, program: WorkoutProgram) -> List[Workout]:
        with self._guard("fetch", Workout):
            ids = self.workouts.fetch_for_program(program.id)
        return [w for w in (self.resolve(Workout, wid) for wid in ids) if w]

    def plans_for_program(self, program: WorkoutProgram) -> List[WorkoutPlan]:
        with self._guard("fetch", WorkoutPlan):
            ids = self.plans.fetch_for_program(program.id)
        return [p for p in (self.resolve(WorkoutPlan, pid) for pid in ids) if p]

    # -- writes ------------------------------------------------------------

    def create(self, kind: type, **fields):
        """Insert a new entity built from ``fields`` and return it with its id."""
        entity = kind(**fields)
        with self._guard("create", kind):
            if kind is ExerciseGroup:
                entity.id = self.groups.add(entity.name)
            elif kind is Exercise:
                entity.id = self.exercises.add(entity.name, _ref(entity.group))
            elif kind is WorkoutProgram:
                entity.id = self.programs.add(
                    entity.name, _to_db_date(entity.start), _to_db_date(entity.end)
                )
            elif kind is WorkoutPlan:
                entity.id = self.plans.add(entity.num_workouts, _ref(entity.exercise))
                if entity.programs:
                    self.plans.set_programs(
                        entity.id, [p.id for p in entity.programs if p.id is not None]
                    )
            elif kind is Workout:
                entity.id = self.workouts.add(
                    _to_db_date(entity.date),
                    entity.notes,
                    entity.completed,
                    _ref(entity.exercise),
                    _ref(entity.program),
                )
            elif kind is RestPeriod:
                entity.id = self.rest_periods.add(
                    _to_db_date(entity.start_date),
                    _to_db_date(entity.end_date),
                    entity.explanation,
                )
            else:
                raise ValueError(f"unsupported entity type: {kind!r}")
        return entity

    def update(self, entity) -> None:
        """Persist the current field values of an already created entity."""
        kind = type(entity)
        if entity.id is None:
            raise ValueError(f"{kind.__name__} has not been created")
        with self._guard("update", kind):
            if kind is ExerciseGroup:
                self.groups.update(entity.id, entity.name)
            elif kind is Exercise:
                self.exercises.update(entity.id, entity.name, _ref(entity.group))
            elif kind is WorkoutProgram:
                self.programs.update(
                    entity.id,
                    entity.name,
                    _to_db_date(entity.start),
                    _to_db_date(entity.end),
                )
            elif kind is WorkoutPlan:
                self.plans.update(entity.id, entity.num_workouts, _ref(entity.exercise))
                self.plans.set_programs(
                    entity.id, [p.id for p in entity.programs if p.id is not None]
                )
            elif kind is Workout:
                self.workouts.update(
                    entity.id,
                    _to_db_date(entity.date),
                    entity.notes,
                    entity.completed,
                    _ref(entity.exercise),
                    _ref(entity.program),
                )
            elif kind is RestPeriod:
                self.rest_periods.update(
                    entity.id,
                    _to_db_date(entity.start_date),
                    _to_db_date(entity.end_date),
                    entity.explanation,
                )
            else:
                raise ValueError(f"unsupported entity type: {kind!r}")

    def delete(self, entity) -> None:
        """Delete one entity. References to it elsewhere are left dangling."""
        kind = type(entity)
        if entity.id is None:
            return
        with self._guard("delete", kind):
            self._repo(kind).remove(entity.id)
        entity.id = None

    def delete_all(self, kind: type) -> None:
        with self._guard("delete", kind):
            self._repo(kind).delete_all()

    # -- row mapping -------------------------------------------------------

    @staticmethod
    def _group(row: Tuple) -> ExerciseGroup:
        return ExerciseGroup(id=row[0], name=row[1])

    @staticmethod
    def _exercise(row: Tuple, group_of: Callable) -> Exercise:
        eid, name, group_id = row
        return Exercise(
            id=eid, name=name, group=group_of(group_id) if group_id else None
        )

    @staticmethod
    def _program(row: Tuple) -> WorkoutProgram:
        pid, name, start, end = row
        return WorkoutProgram(
            id=pid, name=name, start=_from_db_date(start), end=_from_db_date(end)
        )

    @staticmethod
    def _plan(
        row: Tuple, program_ids: List[int], exercise_of: Callable, program_of: Callable
    ) -> WorkoutPlan:
        pid, num_workouts, exercise_id = row
        programs = [program_of(p) for p in program_ids]
        return WorkoutPlan(
            id=pid,
            num_workouts=int(num_workouts),
            exercise=exercise_of(exercise_id) if exercise_id else None,
            programs=[p for p in programs if p is not None],
        )

    @staticmethod
    def _workout(row: Tuple, exercise_of: Callable, program_of: Callable) -> Workout:
        wid, date, notes, completed, exercise_id, program_id = row
        return Workout(
            id=wid,
            date=_from_db_date(date),
            notes=notes,
            completed=bool(completed),
            exercise=exercise_of(exercise_id) if exercise_id else None,
            program=program_of(program_id) if program_id else None,
        )

    @staticmethod
    def _rest_period(row: Tuple) -> RestPeriod:
        rid, start, end, explanation = row
        return RestPeriod(
            id=rid,
            start_date=_from_db_date(start),
            end_date=_from_db_date(end),
            explanation=explanation,
        )


def _ref(entity) -> Optional[int]:
    return entity.id if entity is not None else None
