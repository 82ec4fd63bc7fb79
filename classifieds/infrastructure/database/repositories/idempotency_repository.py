from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from classifieds.application.interfaces.idempotency_repository import IdempotencyRepository
from classifieds.domain.entities.idempotency_record import IdempotencyRecord
from classifieds.domain.exceptions import DuplicateKeyError
from classifieds.infrastructure.database.models import IdempotencyRecordModel


def _to_domain(model: IdempotencyRecordModel) -> IdempotencyRecord:
    return IdempotencyRecord(
        id=model.id,
        key=model.idempotency_key,
        listing_id=model.listing_id,
        result_payload=model.result_payload,
        status_code=model.status_code,
        created_at=model.created_at,
        expires_at=model.expires_at,
    )


class SqlAlchemyIdempotencyRepository(IdempotencyRepository):
    """
    The unique index on idempotency_key is the single source of truth.

    Inserts go through ``ON CONFLICT DO UPDATE ... WHERE expires_at <= :now``:
    a row that expired but has not been swept yet is replaced, a live row is
    left alone and the statement returns nothing, which is reported as
    DuplicateKeyError.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def save(self, record: IdempotencyRecord) -> IdempotencyRecord:
        stmt = pg_insert(IdempotencyRecordModel).values(
            id=record.id,
            idempotency_key=record.key,
            listing_id=record.listing_id,
            result_payload=record.result_payload,
            status_code=record.status_code,
            created_at=record.created_at,
            expires_at=record.expires_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[IdempotencyRecordModel.idempotency_key],
            set_={
                "id": stmt.excluded.id,
                "listing_id": stmt.excluded.listing_id,
                "result_payload": stmt.excluded.result_payload,
                "status_code": stmt.excluded.status_code,
                "created_at": stmt.excluded.created_at,
                "expires_at": stmt.excluded.expires_at,
            },
            where=IdempotencyRecordModel.expires_at <= record.created_at,
        ).returning(IdempotencyRecordModel.id)

        async with self._session_factory() as session, session.begin():
            result = await session.execute(stmt)
            if result.scalar_one_or_none() is None:
                raise DuplicateKeyError(record.key)
        return record

    async def get_by_key(self, key: str) -> IdempotencyRecord | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(IdempotencyRecordModel).where(IdempotencyRecordModel.idempotency_key == key)
            )
            model = result.scalar_one_or_none()
            return _to_domain(model) if model is not None else None

    async def delete_expired(self, now: datetime) -> int:
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                delete(IdempotencyRecordModel).where(IdempotencyRecordModel.expires_at <= now)
            )
            return result.rowcount or 0
