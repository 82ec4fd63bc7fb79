"""Azure Functions entry point for the classifieds listing jobs."""
import json
from datetime import timedelta

import azure.functions as func
import structlog
from sqlalchemy import text

from classifieds.application.coordinators.idempotency_coordinator import IdempotencyCoordinator
from classifieds.application.use_cases.sweep_expired_idempotency_records import (
    SweepExpiredIdempotencyRecords,
)
from classifieds.config import settings
from classifieds.infrastructure.database.connection import AsyncSessionLocal
from classifieds.infrastructure.database.repositories.idempotency_repository import (
    SqlAlchemyIdempotencyRepository,
)
from classifieds.logging_config import configure_logging

configure_logging(settings.log_level, json_logs=settings.log_json)
logger = structlog.get_logger(__name__)

app = func.FunctionApp(http_auth_level=func.AuthLevel.FUNCTION)


def build_sweep_use_case() -> SweepExpiredIdempotencyRecords:
    coordinator = IdempotencyCoordinator(
        SqlAlchemyIdempotencyRepository(AsyncSessionLocal),
        ttl=timedelta(hours=settings.idempotency_ttl_hours),
    )
    return SweepExpiredIdempotencyRecords(coordinator)


# ============================================================================
# Health
# ============================================================================

@app.route(route="health", methods=["GET"])
async def health(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint."""
    db_status = "connected"
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except Exception as exc:
        db_status = f"error: {exc}"

    return func.HttpResponse(
        json.dumps({
            "status": "healthy" if db_status == "connected" else "degraded",
            "database": db_status,
        }),
        mimetype="application/json",
    )


# ============================================================================
# Idempotency record sweep
# ============================================================================

@app.schedule(
    schedule=settings.idempotency_sweep_schedule,
    arg_name="timer",
    run_on_startup=False,
)
async def sweep_idempotency_records(timer: func.TimerRequest) -> None:
    """
    Deletes idempotency records past their expiry.

    Expired records are already ignored by the publish workflow; this only
    reclaims the rows.
    """
    if timer.past_due:
        logger.warning("idempotency_sweep_past_due")

    try:
        removed = await build_sweep_use_case().execute()
    except Exception:
        logger.exception("idempotency_sweep_failed")
        raise

    logger.info("idempotency_sweep_finished", removed=removed)
