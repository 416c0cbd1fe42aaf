import argparse
import json
import logging
from typing import Optional

from backup_service import BackupService
from db import WorkoutStore
from seed_sample_data import seed_store
from settings_schema import SettingsSchema, load_settings


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _service(db_path: Optional[str], settings: SettingsSchema) -> BackupService:
    path = db_path or settings.db_path
    store = WorkoutStore(path)
    return BackupService(store, settings.model_copy(update={"db_path": path}))


def export_backup(db_path: str, out: Optional[str], settings: SettingsSchema) -> int:
    outcome = _service(db_path, settings).export_all(out)
    if not outcome.success:
        print(f"Export failed: {outcome.error}")
        return 1
    print(f"Exported {outcome.record_count} records to {outcome.location}")
    return 0


def import_backup(
    db_path: str, src: str, replace: bool, settings: SettingsSchema
) -> int:
    outcome = _service(db_path, settings).import_all(src, clear_existing=replace)
    print(outcome.message)
    for warning in outcome.warnings:
        print(f"  warning: {warning}")
    return 0 if outcome.success else 1


def demo_data(db_path: str) -> None:
    """Populate the database with demo data if empty."""
    if seed_store(WorkoutStore(db_path)):
        print("Demo data inserted")
    else:
        print("Database already contains data")


def summary(db_path: str, settings: SettingsSchema) -> None:
    print(json.dumps(_service(db_path, settings).summary(), indent=2))


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Workout backup utilities")
    parser.add_argument("--settings", default="settings.yaml")
    sub = parser.add_subparsers(dest="cmd", required=True)

    exp = sub.add_parser("export")
    exp.add_argument("--db", default=None)
    exp.add_argument("--out", default=None)

    imp = sub.add_parser("import")
    imp.add_argument("--db", default=None)
    imp.add_argument("--in", dest="src", required=True)
    imp.add_argument("--replace", action="store_true")

    demo = sub.add_parser("demo")
    demo.add_argument("--db", default=None)

    summ = sub.add_parser("summary")
    summ.add_argument("--db", default=None)

    args = parser.parse_args(argv)
    settings = load_settings(args.settings)
    configure_logging(settings.log_level)

    if args.cmd == "export":
        return export_backup(args.db, args.out, settings)
    elif args.cmd == "import":
        return import_backup(args.db, args.src, args.replace, settings)
    elif args.cmd == "demo":
        demo_data(args.db or settings.db_path)
    elif args.cmd == "summary":
        summary(args.db, settings)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
