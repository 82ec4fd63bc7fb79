from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from classifieds.application.interfaces.listing_repository import ListingFilter, ListingRepository
from classifieds.domain.entities.listing import Listing
from classifieds.domain.entities.listing_photo import ListingPhoto
from classifieds.domain.exceptions import ConcurrentModificationError
from classifieds.domain.value_objects.money import Money
from classifieds.domain.value_objects.photo_metadata import PhotoMetadata
from classifieds.infrastructure.database.models import ListingModel, ListingPhotoModel


def photo_to_domain(model: ListingPhotoModel) -> ListingPhoto:
    return ListingPhoto(
        id=model.id,
        listing_id=model.listing_id,
        metadata=PhotoMetadata(
            filename=model.filename,
            content_type=model.content_type,
            size=model.file_size,
        ),
        storage_path=model.storage_path,
        created_at=model.created_at,
    )


def photo_to_model(photo: ListingPhoto, position: int) -> ListingPhotoModel:
    return ListingPhotoModel(
        id=photo.id,
        listing_id=photo.listing_id,
        position=position,
        filename=photo.filename,
        content_type=photo.content_type,
        file_size=photo.size,
        storage_path=photo.storage_path,
        created_at=photo.created_at,
    )


def _to_domain(model: ListingModel) -> Listing:
    return Listing.reconstitute(
        id=model.id,
        title=model.title,
        description=model.description,
        price=Money.of(model.price_amount, model.price_currency),
        category=model.category,
        status=model.status,
        created_at=model.created_at,
        updated_at=model.updated_at,
        version=model.version,
        photos=[photo_to_domain(p) for p in model.photos],
    )


def _to_model(listing: Listing, version: int) -> ListingModel:
    return ListingModel(
        id=listing.id,
        title=listing.title,
        description=listing.description,
        price_amount=listing.price.amount,
        price_currency=listing.price.currency,
        category=listing.category,
        status=listing.status,
        created_at=listing.created_at,
        updated_at=listing.updated_at,
        version=version,
        photos=[photo_to_model(p, i) for i, p in enumerate(listing.photos)],
    )


class SqlAlchemyListingRepository(ListingRepository):
    """
    SQLAlchemy implementation for listing persistence.

    Updates are a compare-and-swap on the version column:
    ``UPDATE listings ... WHERE id = :id AND version = :read_version``.
    Zero affected rows means another writer got there first.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def save(self, listing: Listing) -> Listing:
        try:
            async with self._session_factory() as session, session.begin():
                if listing.version is None:
                    new_version = 0
                    session.add(_to_model(listing, new_version))
                    await session.flush()
                else:
                    new_version = listing.version + 1
                    await self._compare_and_swap(session, listing, new_version)
                    await self._insert_new_photos(session, listing)
        except IntegrityError as exc:
            raise ConcurrentModificationError(listing.id, listing.version) from exc

        return listing.stored_as(new_version)

    async def _compare_and_swap(
        self, session: AsyncSession, listing: Listing, new_version: int
    ) -> None:
        result = await session.execute(
            update(ListingModel)
            .where(ListingModel.id == listing.id, ListingModel.version == listing.version)
            .values(
                title=listing.title,
                description=listing.description,
                price_amount=listing.price.amount,
                price_currency=listing.price.currency,
                category=listing.category,
                status=listing.status,
                updated_at=listing.updated_at,
                version=new_version,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConcurrentModificationError(listing.id, listing.version)

    async def _insert_new_photos(self, session: AsyncSession, listing: Listing) -> None:
        result = await session.execute(
            select(ListingPhotoModel.id).where(ListingPhotoModel.listing_id == listing.id)
        )
        stored_ids = set(result.scalars().all())
        for position, photo in enumerate(listing.photos):
            if photo.id not in stored_ids:
                session.add(photo_to_model(photo, position))
        await session.flush()

    async def get_by_id(self, listing_id: UUID) -> Listing | None:
        async with self._session_factory() as session:
            model = await session.get(ListingModel, listing_id)
            return _to_domain(model) if model is not None else None

    async def find_by_filter(self, criteria: ListingFilter) -> list[Listing]:
        conditions = []
        if criteria.query:
            conditions.append(
                or_(
                    ListingModel.title.icontains(criteria.query, autoescape=True),
                    ListingModel.description.icontains(criteria.query, autoescape=True),
                )
            )
        if criteria.category is not None:
            conditions.append(ListingModel.category == criteria.category)
        if criteria.status is not None:
            conditions.append(ListingModel.status == criteria.status)
        if criteria.min_price is not None:
            conditions.append(ListingModel.price_amount >= criteria.min_price)
        if criteria.max_price is not None:
            conditions.append(ListingModel.price_amount <= criteria.max_price)

        async with self._session_factory() as session:
            result = await session.execute(
                select(ListingModel)
                .where(*conditions)
                .order_by(ListingModel.created_at.desc())
            )
            return [_to_domain(m) for m in result.scalars().all()]
