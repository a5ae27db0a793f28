"""
FlickPick — FastAPI Application Entry Point
"""

from __future__ import annotations

import logging
import time
import traceback
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy import text

from flickpick import database
from flickpick.api.v1 import auth, movies, users
from flickpick.config import Settings, get_settings
from flickpick.core.exceptions import FlickPickError, ValidationFailedError
from flickpick.core.log_config import configure_logging
from flickpick.core.security import PasswordHasher, TokenService

logger = logging.getLogger(__name__)


def _validation_errors(exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        errors.append({"field": ".".join(loc) or "body", "message": err.get("msg", "invalid value")})
    return errors


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application. Signing key, hasher, engine and CORS policy are fixed
    here from ``settings`` and stay immutable for the process lifetime.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    # ─── Lifespan ─────────────────────────────────────────────────────────────

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize DB tables on startup."""
        database.init_db(app.state.engine)
        logger.info("%s %s ready (%s)", settings.APP_TITLE, settings.APP_VERSION, settings.ENVIRONMENT)
        yield

    app = FastAPI(
        title=settings.APP_TITLE,
        version=settings.APP_VERSION,
        description="FlickPick — movie catalog API with user accounts and favorites.",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    if settings.DATABASE_URL == database.settings.DATABASE_URL:
        app.state.engine = database.engine
        app.state.session_factory = database.SessionLocal
    else:
        app.state.engine = database.build_engine(settings.DATABASE_URL)
        app.state.session_factory = database.make_session_factory(app.state.engine)
    app.state.password_hasher = PasswordHasher.from_settings(settings)
    app.state.token_service = TokenService.from_settings(settings)

    # ─── CORS ─────────────────────────────────────────────────────────────────

    origins = settings.ALLOWED_ORIGINS if settings.is_production else ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_timer(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        logger.debug(
            "%s %s → %d (%.3fs)", request.method, request.url.path, response.status_code, elapsed
        )
        return response

    # ─── Exception handlers ───────────────────────────────────────────────────

    @app.exception_handler(FlickPickError)
    async def flickpick_exception_handler(
        request: Request, exc: FlickPickError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.http_status_code,
            content=exc.to_dict(),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        error = ValidationFailedError(_validation_errors(exc))
        return JSONResponse(status_code=error.http_status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        if settings.ENVIRONMENT == "development" and settings.DEBUG:
            return JSONResponse(
                status_code=500,
                content={
                    "error_code": "INTERNAL_ERROR",
                    "message": str(exc),
                    "traceback": traceback.format_exc(),
                },
            )
        return JSONResponse(
            status_code=500,
            content={
                "error_code": "INTERNAL_ERROR",
                "message": "An internal error occurred.",
            },
        )

    # ─── Public endpoints ─────────────────────────────────────────────────────

    @app.get("/", response_class=PlainTextResponse, tags=["health"])
    async def welcome() -> str:
        return "Welcome to FlickPick!"

    @app.get("/health", tags=["health"])
    def health_check(request: Request) -> Dict[str, Any]:
        """Returns system health including DB connectivity."""
        db_ok = False
        try:
            with request.app.state.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            db_ok = True
        except Exception:
            logger.warning("Health check could not reach the database", exc_info=True)

        return {
            "status": "healthy" if db_ok else "degraded",
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "db_connected": db_ok,
        }

    # ─── Routers ──────────────────────────────────────────────────────────────

    app.include_router(auth.router)
    app.include_router(movies.router)
    app.include_router(users.router)

    return app


app = create_app()


if __name__ == "__main__":
    _settings = get_settings()
    uvicorn.run(
        "flickpick.main:app",
        host=_settings.HOST,
        port=_settings.PORT,
        reload=_settings.DEBUG,
        log_level="debug" if _settings.DEBUG else "info",
    )
