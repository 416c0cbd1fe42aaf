import tempfile

from pydantic import BaseModel, ValidationError, field_validator

from config import YamlConfig

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class SettingsSchema(BaseModel):
    db_path: str = "workout.db"
    backup_dir: str = tempfile.gettempdir()
    backup_prefix: str = "altering_backup"
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level: {value}")
        return level


def validate_settings(data: dict) -> SettingsSchema:
    try:
        return SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))


def load_settings(path: str = "settings.yaml") -> SettingsSchema:
    return validate_settings(YamlConfig(path).load())
