import structlog

from classifieds.application.coordinators.idempotency_coordinator import IdempotencyCoordinator

logger = structlog.get_logger(__name__)


class SweepExpiredIdempotencyRecords:
    """
    Use case: Physically delete idempotency records past their expiry.

    Runs on a schedule, outside any request. Workflows never delete records
    themselves; they only ignore expired ones.
    """

    def __init__(self, idempotency: IdempotencyCoordinator) -> None:
        self._idempotency = idempotency

    async def execute(self) -> int:
        removed = await self._idempotency.purge_expired()
        if removed:
            logger.info("idempotency_sweep_completed", removed=removed)
        return removed
