import os
import sys
import shutil
import tempfile
import unittest
from unittest import mock

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from cli import main
from config import YamlConfig
from db import WorkoutStore
from models import Exercise, ExerciseGroup


class CLITestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.mkdtemp()
        self.db_path = os.path.join(self.tmp, "workout.db")
        self.yaml_path = os.path.join(self.tmp, "settings.yaml")
        self.out_dir = os.path.join(self.tmp, "exports")
        os.makedirs(self.out_dir)

    def tearDown(self) -> None:
        shutil.rmtree(self.tmp)

    def _run(self, *args: str) -> int:
        return main(["--settings", self.yaml_path, *args])

    def test_demo_export_import(self) -> None:
        self.assertEqual(self._run("demo", "--db", self.db_path), 0)
        self.assertEqual(
            self._run("export", "--db", self.db_path, "--out", self.out_dir), 0
        )
        files = os.listdir(self.out_dir)
        self.assertEqual(len(files), 1)
        self.assertTrue(files[0].startswith("altering_backup_"))

        restored = os.path.join(self.tmp, "restored.db")
        backup = os.path.join(self.out_dir, files[0])
        self.assertEqual(
            self._run("import", "--db", restored, "--in", backup, "--replace"), 0
        )
        store = WorkoutStore(restored)
        self.assertEqual(store.count(ExerciseGroup), 1)
        self.assertEqual(store.fetch_all(Exercise)[0].group.name, "Legs")

    def test_import_missing_file_fails(self) -> None:
        missing = os.path.join(self.tmp, "missing.json")
        self.assertEqual(self._run("import", "--db", self.db_path, "--in", missing), 1)

    def test_demo_uses_configured_database(self) -> None:
        YamlConfig(self.yaml_path).save({"db_path": self.db_path})
        with mock.patch.dict(os.environ):
            os.environ.pop("DB_PATH", None)
            self.assertEqual(self._run("demo"), 0)
        self.assertEqual(WorkoutStore(self.db_path).count(ExerciseGroup), 1)

    def test_summary(self) -> None:
        self._run("demo", "--db", self.db_path)
        self.assertEqual(self._run("summary", "--db", self.db_path), 0)


if __name__ == "__main__":
    unittest.main()
