"""FastAPI application entrypoint for gitcherry service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, List, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..classifier import run_cherry
from ..errors import RangeError, ResolutionError, UsageError, WalkSetupError
from ..git.repository import FULL_ABBREV, CommitSource, GitRepository
from ..models import ClassifiedCommit
from ..output import OutputFormatter


class CherryRequest(BaseModel):
    path: str
    upstream: Optional[str] = None
    head: str = "HEAD"
    limit: Optional[str] = None
    abbrev: int = FULL_ABBREV
    verbose: bool = False
    ignore_whitespace: bool = True


class CherryCommit(BaseModel):
    sign: str
    id: str
    oid: str
    author: str
    summary: str
    line: str


class CherryResponse(BaseModel):
    status: str
    commits: List[CherryCommit] = []


class HealthResponse(BaseModel):
    status: str


def _default_repository(path: str) -> CommitSource:
    repository = GitRepository(path)
    repository.ensure_repository()
    return repository


def create_app(
    repository_factory: Callable[[str], CommitSource] = _default_repository,
) -> FastAPI:
    """Create the FastAPI application exposing cherry comparisons."""

    app = FastAPI(title="gitcherry service", version="1.0.0")

    async def get_repository_factory() -> Callable[[str], CommitSource]:
        return repository_factory

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/cherry", response_model=CherryResponse)
    async def cherry(
        payload: CherryRequest,
        factory: Callable[[str], CommitSource] = Depends(get_repository_factory),
    ) -> CherryResponse:
        def _run() -> CherryResponse:
            # A fresh repository per request keeps graph caches request-scoped.
            source = factory(payload.path)
            commits = run_cherry(
                source,
                payload.upstream,
                payload.head,
                payload.limit,
                ignore_whitespace=payload.ignore_whitespace,
            )
            formatter = OutputFormatter(source, verbose=payload.verbose, abbrev=payload.abbrev)
            return CherryResponse(
                status="ok" if commits else "empty",
                commits=[_to_response(item, formatter, source) for item in commits],
            )

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _run)

    @app.exception_handler(UsageError)
    @app.exception_handler(RangeError)
    async def bad_request_handler(_: Any, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ResolutionError)
    async def not_found_handler(_: Any, exc: ResolutionError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc), "name": exc.name})

    @app.exception_handler(WalkSetupError)
    async def walk_failed_handler(_: Any, exc: WalkSetupError) -> JSONResponse:
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    return app


def _to_response(
    item: ClassifiedCommit, formatter: OutputFormatter, source: CommitSource
) -> CherryCommit:
    return CherryCommit(
        sign=item.sign,
        id=source.abbreviate(item.commit.oid, formatter.abbrev),
        oid=item.commit.oid,
        author=item.commit.author,
        summary=item.commit.summary,
        line=formatter.format(item),
    )


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    app = create_app()
    uvicorn.run(app, host=host, port=port)
