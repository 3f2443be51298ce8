# main.py

from dotenv import load_dotenv
load_dotenv()

import logging
import time
import uuid
from datetime import datetime

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from admin_routes import router as admin_router
from dependencies import get_pipeline, get_store
from evaluation_config import (
    ENABLE_EVALUATION_SWEEP,
    EVALUATION_SWEEP_INTERVAL_SECONDS,
    is_webhook_signature_required,
)
from evaluation_jobs import run_evaluation_sweep
from voice_webhook import router as voice_router


# Request Logging Middleware
request_logger = logging.getLogger("request_logging")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        start_time = time.time()

        # Extract actor from path
        actor = "API"
        if request.url.path.startswith("/webhooks/"):
            actor = "VoiceProvider"
        elif request.url.path.startswith("/cron/"):
            actor = "Cron"
        elif request.url.path.startswith("/admin/"):
            actor = "Operator"

        response = await call_next(request)

        latency_ms = (time.time() - start_time) * 1000

        request_logger.info(
            "request_completed",
            extra={
                "request_id": request_id,
                "endpoint": request.url.path,
                "method": request.method,
                "actor": actor,
                "status_code": response.status_code,
                "latency_ms": round(latency_ms, 2),
            }
        )

        return response


app = FastAPI(title="Interview Evaluation Service")
app.add_middleware(RequestLoggingMiddleware)
app.include_router(voice_router, tags=["webhooks"])
app.include_router(admin_router, tags=["admin"])

if not is_webhook_signature_required():
    logging.getLogger("voice_webhook").warning("voice_webhook_secret_missing_startup")

# ------------------------------------------------------------------
# Scheduler setup
# ------------------------------------------------------------------
scheduler_logger = logging.getLogger("evaluation_scheduler")
scheduler_timezone = datetime.now().astimezone().tzinfo
scheduler = AsyncIOScheduler(timezone=scheduler_timezone)


def evaluation_sweep_job():
    job_corr = "evaluation_sweep_job"
    try:
        result = run_evaluation_sweep(get_store(), get_pipeline())
        scheduler_logger.info(
            "evaluation_sweep_job_complete",
            extra={"correlation_id": job_corr, "sweep": result.to_response()},
        )
    except Exception as exc:  # pragma: no cover
        scheduler_logger.exception(
            "evaluation_sweep_job_failed",
            extra={"correlation_id": job_corr, "error": str(exc)},
        )


def _register_scheduler_jobs() -> None:
    try:
        scheduler.add_job(
            evaluation_sweep_job,
            IntervalTrigger(seconds=EVALUATION_SWEEP_INTERVAL_SECONDS, timezone=scheduler_timezone),
            id="evaluation_sweep_job",
            name="evaluation_sweep_job",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
    except Exception as exc:  # pragma: no cover
        scheduler_logger.error(
            "[Scheduler] Failed to register jobs; disabling scheduler for this run.",
            exc_info=True,
            extra={"error": str(exc)},
        )


@app.on_event("startup")
async def start_scheduler() -> None:  # pragma: no cover - FastAPI lifecycle
    if not ENABLE_EVALUATION_SWEEP:
        scheduler_logger.info("[Scheduler] ENABLE_EVALUATION_SWEEP is false; skipping startup.")
        return

    _register_scheduler_jobs()
    if not scheduler.running:
        scheduler.start()
        scheduler_logger.info(
            "evaluation_scheduler_started",
            extra={"correlation_id": "scheduler", "interval_seconds": EVALUATION_SWEEP_INTERVAL_SECONDS},
        )


@app.on_event("shutdown")
async def stop_scheduler() -> None:  # pragma: no cover - FastAPI lifecycle
    if scheduler.running:
        scheduler.shutdown()


# ------------------------------------------------------------------
# Health check
# ------------------------------------------------------------------
def _healthy_response():
    return {"status": "ok"}


@app.get("/health")
def health():
    return _healthy_response()


@app.get("/healthz")
def healthz():
    return _healthy_response()
