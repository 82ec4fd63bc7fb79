from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel

from classifieds.domain.entities.listing import Listing
from classifieds.domain.entities.listing_photo import ListingPhoto
from classifieds.domain.enums.category import Category
from classifieds.domain.enums.currency import Currency
from classifieds.domain.enums.listing_status import ListingStatus


class CreateListingRequest(BaseModel):
    title: str
    description: str | None = None
    price: Decimal
    currency: Currency
    category: Category


class PriceResponse(BaseModel):
    amount: Decimal
    currency: Currency


class PhotoResponse(BaseModel):
    id: UUID
    filename: str
    content_type: str
    size: int
    storage_path: str
    created_at: datetime

    @classmethod
    def from_domain(cls, photo: ListingPhoto) -> "PhotoResponse":
        return cls(
            id=photo.id,
            filename=photo.filename,
            content_type=photo.content_type,
            size=photo.size,
            storage_path=photo.storage_path,
            created_at=photo.created_at,
        )


class ListingResponse(BaseModel):
    id: UUID
    title: str
    description: str
    price: PriceResponse
    category: Category
    status: ListingStatus
    version: int
    photo_count: int
    photos: list[PhotoResponse]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, listing: Listing) -> "ListingResponse":
        return cls(
            id=listing.id,
            title=listing.title,
            description=listing.description,
            price=PriceResponse(amount=listing.price.amount, currency=listing.price.currency),
            category=listing.category,
            status=listing.status,
            version=listing.version if listing.version is not None else 0,
            photo_count=listing.photo_count,
            photos=[PhotoResponse.from_domain(p) for p in listing.photos],
            created_at=listing.created_at,
            updated_at=listing.updated_at,
        )


class PhotoUploadResponse(BaseModel):
    listing_id: UUID
    photos: list[PhotoResponse]
    audit_failures: int = 0
