import json

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from classifieds.application.interfaces.audit_log_repository import AuditLogRepository
from classifieds.domain.entities.audit_log import AuditLog
from classifieds.infrastructure.database.models import AuditLogModel


class SqlAlchemyAuditLogRepository(AuditLogRepository):
    """Appends each entry in its own transaction, independent of the audited write."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append(self, entry: AuditLog) -> AuditLog:
        async with self._session_factory() as session, session.begin():
            session.add(
                AuditLogModel(
                    id=entry.id,
                    event_type=entry.event_type,
                    listing_id=entry.listing_id,
                    payload=json.loads(entry.payload),
                    created_at=entry.created_at,
                )
            )
        return entry
