import asyncio

import pika
from fastapi import APIRouter, Depends
from sqlalchemy import text

from classifieds.api.dependencies import get_blob_storage
from classifieds.application.interfaces.blob_storage import BlobStorage
from classifieds.config import settings
from classifieds.infrastructure.database.connection import AsyncSessionLocal

router = APIRouter(tags=["health"])


def _ping_rabbitmq(url: str) -> None:
    connection = pika.BlockingConnection(pika.URLParameters(url))
    connection.close()


@router.get("/health")
async def health_check(blob_storage: BlobStorage = Depends(get_blob_storage)) -> dict:  # type: ignore[type-arg]
    """Liveness + dependency health check."""
    db_status = "connected"
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except Exception as exc:
        db_status = f"error: {exc}"

    rabbitmq_status = "disabled"
    if settings.event_publishing_enabled:
        rabbitmq_status = "connected"
        try:
            # pika blocks; keep it off the event loop
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, _ping_rabbitmq, settings.rabbitmq_url)
        except Exception as exc:
            rabbitmq_status = f"error: {exc}"

    overall = (
        "healthy"
        if db_status == "connected" and rabbitmq_status in ("connected", "disabled")
        else "degraded"
    )

    return {
        "status": overall,
        "database": db_status,
        "rabbitmq": rabbitmq_status,
        "blob_storage": type(blob_storage).__name__,
    }
