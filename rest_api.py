import os
import tempfile

from fastapi import FastAPI, HTTPException, Request, Response

from backup_service import BackupService
from db import WorkoutStore
from errors import BackupError
from settings_schema import load_settings


def _status_for(error: Exception | None) -> int:
    return 400 if isinstance(error, BackupError) else 500


class BackupAPI:
    """Provides REST endpoints for backing up and restoring workout data."""

    def __init__(self, db_path: str | None = None, yaml_path: str = "settings.yaml") -> None:
        settings = load_settings(yaml_path)
        if db_path is not None:
            settings = settings.model_copy(update={"db_path": db_path})
        self.db_path = settings.db_path
        self.store = WorkoutStore(self.db_path)
        self.service = BackupService(self.store, settings)
        self.app = FastAPI()
        self.setup_routes()

    def setup_routes(self) -> None:
        @self.app.get("/health")
        def health():
            return {"status": "ok"}

        @self.app.get("/summary")
        def summary():
            return self.service.summary()

        @self.app.get("/backup/export")
        async def export_backup():
            with tempfile.TemporaryDirectory() as tmp:
                outcome = await self.service.export_all_async(tmp)
                if not outcome.success:
                    raise HTTPException(
                        status_code=_status_for(outcome.error), detail=str(outcome.error)
                    )
                with open(outcome.location, "rb") as f:
                    data = f.read()
            filename = os.path.basename(outcome.location)
            return Response(
                content=data,
                media_type="application/json",
                headers={
                    "Content-Disposition": f"attachment; filename={filename}",
                    "X-Record-Count": str(outcome.record_count),
                },
            )

        @self.app.post("/backup/import")
        async def import_backup(request: Request, replace: bool = False):
            body = await request.body()
            outcome = await self.service.import_all_async(body, clear_existing=replace)
            if not outcome.success:
                raise HTTPException(
                    status_code=_status_for(outcome.error), detail=outcome.message
                )
            return {
                "status": "imported",
                "record_count": outcome.record_count,
                "message": outcome.message,
                "warnings": [str(w) for w in outcome.warnings],
            }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(BackupAPI().app)
