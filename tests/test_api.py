import os
import sys
import json
import shutil
import tempfile
import unittest
from unittest import mock

from fastapi.testclient import TestClient

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from rest_api import BackupAPI
from db import WorkoutStore
from errors import StoreAccessError
from models import ExerciseGroup, Workout
from seed_sample_data import seed_store


class BackupAPITestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.mkdtemp()
        self.db_path = os.path.join(self.tmp, "workout.db")
        self.yaml_path = os.path.join(self.tmp, "settings.yaml")
        self.api = BackupAPI(db_path=self.db_path, yaml_path=self.yaml_path)
        self.client = TestClient(self.api.app)

    def tearDown(self) -> None:
        shutil.rmtree(self.tmp)

    def test_export_then_import(self) -> None:
        seed_store(self.api.store)
        resp = self.client.get("/backup/export")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.headers["X-Record-Count"], "6")
        self.assertIn("attachment", resp.headers["Content-Disposition"])
        data = resp.json()
        self.assertEqual(len(data["workouts"]), 2)

        other = BackupAPI(
            db_path=os.path.join(self.tmp, "other.db"), yaml_path=self.yaml_path
        )
        other_client = TestClient(other.app)
        resp = other_client.post(
            "/backup/import", params={"replace": "true"}, content=json.dumps(data)
        )
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["record_count"], 6)
        self.assertEqual(body["warnings"], [])
        self.assertEqual(other.store.count(Workout), 2)

    def test_merge_import_keeps_existing(self) -> None:
        seed_store(self.api.store)
        data = self.client.get("/backup/export").content
        resp = self.client.post("/backup/import", content=data)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(WorkoutStore(self.db_path).count(ExerciseGroup), 2)

    def test_invalid_document(self) -> None:
        resp = self.client.post("/backup/import", content=b'{"version": "1.0"}')
        self.assertEqual(resp.status_code, 400)
        self.assertTrue(resp.json()["detail"].startswith("Failed to decode"))

    def test_export_store_failure_is_a_client_error(self) -> None:
        failure = StoreAccessError("fetch", "ExerciseGroup", "disk I/O error")
        with mock.patch.object(self.api.store, "fetch_all", side_effect=failure):
            resp = self.client.get("/backup/export")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("disk I/O error", resp.json()["detail"])

    def test_export_unexpected_failure_is_a_server_error(self) -> None:
        with mock.patch.object(
            self.api.store, "fetch_all", side_effect=RuntimeError("boom")
        ):
            resp = self.client.get("/backup/export")
        self.assertEqual(resp.status_code, 500)

    def test_import_store_failure_is_a_client_error(self) -> None:
        seed_store(self.api.store)
        data = self.client.get("/backup/export").content
        failure = StoreAccessError("create", "ExerciseGroup", "disk I/O error")
        with mock.patch.object(self.api.store, "create", side_effect=failure):
            resp = self.client.post("/backup/import", content=data)
        self.assertEqual(resp.status_code, 400)
        self.assertTrue(resp.json()["detail"].startswith("Import failed"))
        self.assertEqual(WorkoutStore(self.db_path).count(ExerciseGroup), 1)

    def test_summary(self) -> None:
        seed_store(self.api.store)
        resp = self.client.get("/summary")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["counts"]["Workout"], 2)
        self.assertEqual(body["programs"][0]["name"], "5k Program")
        self.assertFalse(body["programs"][0]["complete"])


if __name__ == "__main__":
    unittest.main()
