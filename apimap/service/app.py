"""FastAPI application entrypoint for apimap service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, Optional, TypeVar

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..pipeline import GenerationOutcome, Generator

_T = TypeVar("_T")


class RegistryRequest(BaseModel):
    path: str
    source: Optional[str] = None


class GenerateRequest(BaseModel):
    path: str
    source: Optional[str] = None
    output: Optional[str] = None
    format: Optional[str] = None
    export_name: Optional[str] = None
    dry_run: bool = False


class GenerateResponse(BaseModel):
    status: str
    output_path: str
    classes: int
    changed: bool
    diff: str
    dry_run: bool


class HealthResponse(BaseModel):
    status: str


def _default_generator() -> Generator:
    return Generator()


async def _run_blocking(func: Callable[[], _T]) -> _T:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func)


def create_app(
    generator_factory: Callable[[], Generator] = _default_generator,
) -> FastAPI:
    """Create the FastAPI application exposing registry generation."""

    app = FastAPI(title="apimap Service", version="1.0.0")

    async def get_generator() -> Generator:
        # A fresh generator per request keeps runs independent.
        return generator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/registry")
    async def registry(
        payload: RegistryRequest,
        generator: Generator = Depends(get_generator),
    ) -> Dict[str, Any]:
        result = await _run_blocking(
            lambda: generator.build_registry(payload.path, source=payload.source)
        )
        return result.to_dict()

    @app.post("/generate", response_model=GenerateResponse)
    async def generate(
        payload: GenerateRequest,
        generator: Generator = Depends(get_generator),
    ) -> GenerateResponse:
        def _run() -> GenerationOutcome:
            return generator.run(
                payload.path,
                source=payload.source,
                output=payload.output,
                fmt=payload.format,
                export_name=payload.export_name,
                dry_run=payload.dry_run,
            )

        outcome = await _run_blocking(_run)
        if outcome.changed:
            status = "preview" if outcome.dry_run else "written"
        else:
            status = "unchanged"
        return GenerateResponse(
            status=status,
            output_path=str(outcome.path),
            classes=len(outcome.registry),
            changed=outcome.changed,
            diff=outcome.diff,
            dry_run=outcome.dry_run,
        )

    @app.exception_handler(NotADirectoryError)
    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(
        _: Any, exc: OSError
    ) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(
        _: Any, exc: RuntimeError
    ) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(
        _: Any, exc: ValueError
    ) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)
