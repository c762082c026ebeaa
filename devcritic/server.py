from __future__ import annotations

from typing import Any

from fastapi import Body, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from devcritic import service
from devcritic.config import Config
from devcritic.github import GitHubNotFoundError


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def create_app(config: Config | None = None) -> FastAPI:
    config = config or Config.from_env()

    app = FastAPI(
        title="devcritic",
        description="Scored GitHub portfolio critiques",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error("Username is required", 400)

    @app.get("/api/health")
    def health() -> dict:
        return {"status": "ok", "service": "devcritic"}

    # Runs in FastAPI's threadpool.
    @app.post("/api/analyze")
    def analyze(payload: dict[str, Any] = Body(...)):
        raw = payload.get("username")
        if not raw or not isinstance(raw, str):
            return _error("Username is required", 400)

        username = service.sanitize_username(raw)
        if not username:
            return _error("Invalid username format", 400)

        try:
            return service.run_analysis(username, config)
        except GitHubNotFoundError as exc:
            logger.info("Profile not found: {}", username)
            return _error(str(exc), 404)
        except Exception:
            logger.opt(exception=True).error("Analysis failed for {}", username)
            return _error("Failed to analyze profile. Please try again.", 500)

    return app
