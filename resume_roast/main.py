"""Resume Roast API — structured resume critique and rewrite via an LLM.

Run: uvicorn resume_roast.main:app --reload --port 8001
Docs: http://localhost:8001/docs
"""

import asyncio
import contextlib
import traceback
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

load_dotenv(Path.cwd() / ".env")

from resume_roast.config import load_settings  # noqa: E402
from resume_roast.core.constants import SERVICE_VERSION  # noqa: E402
from resume_roast.core.errors import PipelineError  # noqa: E402
from resume_roast.core.logger import logger  # noqa: E402
from resume_roast.core.rate_limit import get_admission_controller, run_sweeper  # noqa: E402
from resume_roast.middleware import RequestIdMiddleware, request_id_var  # noqa: E402
from resume_roast.routes import health, roast  # noqa: E402

settings = load_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    stop_event = asyncio.Event()
    sweeper = asyncio.create_task(
        run_sweeper(get_admission_controller(), settings.rate_limit_sweep_seconds, stop_event)
    )
    logger.info(
        f"Resume Roast started: provider={settings.llm_provider} "
        f"limit={settings.rate_limit_requests}/{settings.rate_limit_window_seconds:g}s"
    )
    yield
    stop_event.set()
    if not sweeper.done():
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper


app = FastAPI(
    title="Resume Roast API",
    version=SERVICE_VERSION,
    description="Brutally honest resume critique and fact-preserving rewrites via LLM.",
    lifespan=lifespan,
)

ALLOWED_ORIGINS = settings.allowed_origins.split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)

# Request ID middleware (runs after CORS, before route handlers)
app.add_middleware(RequestIdMiddleware)


# ── Global exception handlers ────────────────────────────────────────


@app.exception_handler(PipelineError)
async def pipeline_exception_handler(request: Request, exc: PipelineError):
    rid = request_id_var.get("-")
    if exc.status_code >= 500:
        logger.error(f"Pipeline failed at {exc.stage} [{rid}]: {exc.detail}")
    else:
        logger.info(f"Request rejected at {exc.stage} [{rid}]: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={**exc.to_dict(), "request_id": rid},
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    rid = request_id_var.get("-")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "request_id": rid},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    rid = request_id_var.get("-")
    logger.error(f"Unhandled exception [{rid}]: {exc}\n{traceback.format_exc()}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "request_id": rid},
    )


app.include_router(health.router)
app.include_router(roast.router)
