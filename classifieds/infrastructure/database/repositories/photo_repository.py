from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from classifieds.application.interfaces.photo_repository import PhotoRepository
from classifieds.domain.entities.listing_photo import ListingPhoto
from classifieds.infrastructure.database.models import ListingPhotoModel
from classifieds.infrastructure.database.repositories.listing_repository import (
    photo_to_domain,
    photo_to_model,
)


class SqlAlchemyPhotoRepository(PhotoRepository):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def save(self, photo: ListingPhoto) -> ListingPhoto:
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                select(func.count())
                .select_from(ListingPhotoModel)
                .where(ListingPhotoModel.listing_id == photo.listing_id)
            )
            session.add(photo_to_model(photo, position=result.scalar_one()))
        return photo

    async def list_for_listing(self, listing_id: UUID) -> list[ListingPhoto]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ListingPhotoModel)
                .where(ListingPhotoModel.listing_id == listing_id)
                .order_by(ListingPhotoModel.position.asc())
            )
            return [photo_to_domain(m) for m in result.scalars().all()]
