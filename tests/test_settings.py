import os
import sys
import unittest
import tempfile

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from config import YamlConfig
from settings_schema import load_settings, validate_settings


class SettingsTest(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "settings.yaml")
        self._env = {k: os.environ.pop(k) for k in YamlConfig.ENV_OVERRIDES if k in os.environ}

    def tearDown(self) -> None:
        self.tmp.cleanup()
        for k in YamlConfig.ENV_OVERRIDES:
            os.environ.pop(k, None)
        os.environ.update(self._env)

    def test_missing_file_gives_defaults(self) -> None:
        settings = load_settings(self.path)
        self.assertEqual(settings.db_path, "workout.db")
        self.assertEqual(settings.backup_prefix, "altering_backup")
        self.assertEqual(settings.log_level, "INFO")

    def test_save_and_load(self) -> None:
        cfg = YamlConfig(self.path)
        cfg.save({"db_path": "gym.db", "log_level": "debug"})
        self.assertEqual(cfg.load()["db_path"], "gym.db")
        settings = load_settings(self.path)
        self.assertEqual(settings.log_level, "DEBUG")

    def test_environment_overrides_file(self) -> None:
        YamlConfig(self.path).save({"db_path": "gym.db"})
        os.environ["DB_PATH"] = "env.db"
        self.assertEqual(load_settings(self.path).db_path, "env.db")

    def test_invalid_settings(self) -> None:
        with self.assertRaises(ValueError):
            validate_settings({"log_level": "LOUD"})


if __name__ == "__main__":
    unittest.main()
