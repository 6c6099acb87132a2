"""FastAPI application entrypoint for modtrack service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..logging import configure_logging
from ..orchestrator import Orchestrator, RunOutcome


class RunRequest(BaseModel):
    path: str
    output_dir: Optional[str] = None
    dry_run: bool = False


class RunResponse(BaseModel):
    status: str
    modules_count: int
    modularized_count: int
    legacy_count: int
    snapshot_recorded: bool
    snapshot: Optional[Dict[str, Any]] = None
    json_path: Optional[str] = None
    html_path: Optional[str] = None


class HistoryResponse(BaseModel):
    snapshots: List[Dict[str, Any]]


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing modtrack operations."""
    app = FastAPI(title="Module Tracker Service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        # Lazy-instantiate per request to keep state predictable.
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/run", response_model=RunResponse)
    async def run_tracker(
        payload: RunRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> RunResponse:
        output_dir = Path(payload.output_dir) if payload.output_dir else None

        def _run() -> RunOutcome:
            return orchestrator.run(payload.path, output_dir=output_dir, dry_run=payload.dry_run)

        loop = asyncio.get_running_loop()
        outcome = await loop.run_in_executor(None, _run)

        recorded = outcome.snapshot is not None and not outcome.dry_run
        return RunResponse(
            status="dry-run" if outcome.dry_run else ("ok" if recorded else "unchanged"),
            modules_count=len(outcome.modules),
            modularized_count=outcome.modularized_count,
            legacy_count=outcome.legacy_count,
            snapshot_recorded=recorded,
            snapshot=outcome.snapshot.to_dict() if outcome.snapshot else None,
            json_path=str(outcome.json_path) if outcome.json_path else None,
            html_path=str(outcome.html_path) if outcome.html_path else None,
        )

    @app.get("/history", response_model=HistoryResponse)
    async def history(
        path: str,
        output_dir: Optional[str] = None,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> HistoryResponse:
        data = orchestrator.load_history(
            path, output_dir=Path(output_dir) if output_dir else None
        )
        return HistoryResponse(**data.to_dict())

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(
        _: Any, exc: FileNotFoundError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(
        _: Any, exc: RuntimeError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "0.0.0.0", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    configure_logging()
    app = create_app()
    uvicorn.run(app, host=host, port=port)
