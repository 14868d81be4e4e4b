"""
FastAPI main application
Judging Engine - event judging workflow and score aggregation

Modular architecture with separated API routers in judging/api/:
- health.py: Health check
- config.py: Client-facing engine settings
- events.py: Event creation, detail, rubric and judging phase
- teams.py: Team roster, score matrix and team status
- judges.py: Judge profiles and per-judge progress
- submission.py: Score submission
- leaderboard.py: Leaderboard and head-to-head comparison

All routers access shared state via judging.state module.
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Optional
import logging
import os

from judging import state
from judging.config import load_config
from judging.core.store import JudgingStore
from judging.errors import (
    DuplicateSubmissionError,
    JudgingError,
    NotFoundError,
    PreconditionError,
    ValidationError,
)
from judging.models import Settings

# Import all API routers
from judging.api import health, events, teams, judges, submission, leaderboard
from judging.api import config as config_router


# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


ERROR_STATUS = {
    ValidationError: 400,
    NotFoundError: 404,
    DuplicateSubmissionError: 409,
    PreconditionError: 409,
}


async def judging_error_handler(request: Request, exc: JudgingError) -> JSONResponse:
    """Surface engine errors verbatim with a status code per error kind"""
    status_code = ERROR_STATUS.get(type(exc), 400)
    logger.info(f"↩️ {request.method} {request.url.path} -> {status_code} {exc.kind}: {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies in the same shape as engine validation errors"""
    first = exc.errors()[0]
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    error = ValidationError(first.get("msg", "Invalid request"), field=".".join(loc) or None)
    logger.info(f"↩️ {request.method} {request.url.path} -> 400 {error.kind}: {error.field} {error.message}")
    return JSONResponse(status_code=400, content=error.to_dict())


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application

    Args:
        settings: Engine settings; loaded from JUDGING_CONFIG
            (default config/judging.yaml) at startup when omitted
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events"""
        try:
            state.SETTINGS = settings or load_config(
                os.environ.get("JUDGING_CONFIG", "config/judging.yaml")
            )
            store = JudgingStore(state.SETTINGS.db_path)
            store.initialize()
            state.STORE = store
            logger.info(f"✅ Server started with store {state.SETTINGS.db_path}")
        except Exception as e:
            logger.error(f"❌ Failed to start judging engine: {e}")
            raise

        yield

        # Shutdown
        state.STORE = None
        logger.info("🛑 Server shutting down")

    app = FastAPI(
        title="Judging Engine",
        description="Judging workflow state machine and score aggregation for judged events",
        version="1.0.0",
        lifespan=lifespan,
    )

    # CORS middleware (allow all origins for development)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag"],
    )

    app.add_exception_handler(JudgingError, judging_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # ==================== INCLUDE ROUTERS ====================

    # Health check (GET /)
    app.include_router(health.router)

    # Config endpoint (GET /config)
    app.include_router(config_router.router)

    # Events (POST /events, GET /events/{id}, PATCH /events/{id}/phase, ...)
    app.include_router(events.router)

    # Teams (roster, score matrix, PATCH /teams/{id}/status)
    app.include_router(teams.router)

    # Judges (profiles, my-progress)
    app.include_router(judges.router)

    # Submission endpoints (POST /scores, PUT /scores)
    app.include_router(submission.router)

    # Leaderboard endpoints (GET /events/{id}/leaderboard, /compare)
    app.include_router(leaderboard.router)

    return app


app = create_app()


# ==================== RUN SERVER ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
