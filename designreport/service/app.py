"""FastAPI application serving persisted report snapshots."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import uvicorn
from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..stores import SnapshotError, SnapshotStore


class HealthResponse(BaseModel):
    status: str


class ReportIndexResponse(BaseModel):
    reports: List[int]
    latest: int | None = None


def create_app(store: SnapshotStore) -> FastAPI:
    """Create the FastAPI application exposing stored reports."""

    app = FastAPI(title="Design Report Service", version="1.0.0")

    async def get_store() -> SnapshotStore:
        return store

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/reports", response_model=ReportIndexResponse)
    async def list_reports(
        snapshots: SnapshotStore = Depends(get_store),
    ) -> ReportIndexResponse:
        stamps = snapshots.timestamps()
        return ReportIndexResponse(reports=stamps, latest=stamps[0] if stamps else None)

    @app.get("/reports/latest")
    async def latest_report(
        snapshots: SnapshotStore = Depends(get_store),
    ) -> Dict[str, Any]:
        latest = snapshots.latest()
        if latest is None:
            raise HTTPException(status_code=404, detail="No reports have been written yet")
        return _load(snapshots, latest)

    @app.get("/reports/{timestamp}")
    async def get_report(
        timestamp: int,
        snapshots: SnapshotStore = Depends(get_store),
    ) -> Dict[str, Any]:
        return _load(snapshots, timestamp)

    @app.exception_handler(SnapshotError)
    async def snapshot_error_handler(
        _: Any, exc: SnapshotError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    return app


def _load(snapshots: SnapshotStore, timestamp: int) -> Dict[str, Any]:
    try:
        return snapshots.load(timestamp)
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"Report {timestamp} not found") from exc


def run_service(
    host: str = "127.0.0.1", port: int = 8000, *, reports_dir: Path
) -> None:  # pragma: no cover - integration path
    app = create_app(SnapshotStore(reports_dir))
    uvicorn.run(app, host=host, port=port)
