from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, File, Header, Query, UploadFile, status

from classifieds.api.dependencies import (
    get_archive_listing_use_case,
    get_create_listing_use_case,
    get_get_listing_use_case,
    get_list_listings_use_case,
    get_list_photos_use_case,
    get_publish_listing_use_case,
    get_upload_photos_use_case,
)
from classifieds.api.schemas.listing_schemas import (
    CreateListingRequest,
    ListingResponse,
    PhotoResponse,
    PhotoUploadResponse,
)
from classifieds.application.interfaces.listing_repository import ListingFilter
from classifieds.application.use_cases.archive_listing import ArchiveListing
from classifieds.application.use_cases.create_listing import CreateListing, CreateListingInput
from classifieds.application.use_cases.get_listing import GetListing, ListListingPhotos
from classifieds.application.use_cases.list_listings import ListListings
from classifieds.application.use_cases.publish_listing import (
    PublishListing,
    PublishListingInput,
)
from classifieds.application.use_cases.upload_listing_photos import (
    PhotoUpload,
    UploadListingPhotos,
    UploadListingPhotosInput,
)
from classifieds.domain.enums.category import Category
from classifieds.domain.enums.listing_status import ListingStatus
from classifieds.domain.value_objects.photo_metadata import MAX_FILE_SIZE_BYTES

router = APIRouter(prefix="/listings", tags=["listings"])


@router.post("", response_model=ListingResponse, status_code=status.HTTP_201_CREATED)
async def create_listing(
    body: CreateListingRequest,
    use_case: CreateListing = Depends(get_create_listing_use_case),
) -> ListingResponse:
    listing = await use_case.execute(
        CreateListingInput(
            title=body.title,
            description=body.description,
            price_amount=body.price,
            price_currency=body.currency,
            category=body.category,
        )
    )
    return ListingResponse.from_domain(listing)


@router.get("", response_model=list[ListingResponse])
async def list_listings(
    q: str | None = Query(default=None, max_length=200),
    category: Category | None = None,
    listing_status: ListingStatus | None = Query(default=None, alias="status"),
    min_price: Decimal | None = None,
    max_price: Decimal | None = None,
    use_case: ListListings = Depends(get_list_listings_use_case),
) -> list[ListingResponse]:
    """Browse listings, newest first. Every filter is optional."""
    listings = await use_case.execute(
        ListingFilter(
            query=q,
            category=category,
            status=listing_status,
            min_price=min_price,
            max_price=max_price,
        )
    )
    return [ListingResponse.from_domain(listing) for listing in listings]


@router.get("/{listing_id}", response_model=ListingResponse)
async def get_listing(
    listing_id: UUID,
    use_case: GetListing = Depends(get_get_listing_use_case),
) -> ListingResponse:
    return ListingResponse.from_domain(await use_case.execute(listing_id))


@router.post("/{listing_id}/publish", response_model=ListingResponse)
async def publish_listing(
    listing_id: UUID,
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    use_case: PublishListing = Depends(get_publish_listing_use_case),
) -> ListingResponse:
    """Publish a DRAFT listing. A spent Idempotency-Key is answered with 409."""
    result = await use_case.execute(
        PublishListingInput(listing_id=listing_id, idempotency_key=idempotency_key)
    )
    return ListingResponse.from_domain(result.listing)


@router.post("/{listing_id}/archive", response_model=ListingResponse)
async def archive_listing(
    listing_id: UUID,
    use_case: ArchiveListing = Depends(get_archive_listing_use_case),
) -> ListingResponse:
    result = await use_case.execute(listing_id)
    return ListingResponse.from_domain(result.listing)


@router.post(
    "/{listing_id}/photos",
    response_model=PhotoUploadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_photos(
    listing_id: UUID,
    files: list[UploadFile] = File(...),
    use_case: UploadListingPhotos = Depends(get_upload_photos_use_case),
) -> PhotoUploadResponse:
    """Attach a batch of photos. Either every file is stored or none is."""
    uploads = []
    for file in files:
        # One byte past the limit is enough for validation to reject it
        data = await file.read(MAX_FILE_SIZE_BYTES + 1)
        uploads.append(
            PhotoUpload.from_bytes(
                filename=file.filename or "",
                content_type=file.content_type or "application/octet-stream",
                data=data,
            )
        )

    result = await use_case.execute(UploadListingPhotosInput(listing_id=listing_id, files=uploads))
    return PhotoUploadResponse(
        listing_id=listing_id,
        photos=[PhotoResponse.from_domain(p) for p in result.photos],
        audit_failures=len(result.audit_failures),
    )


@router.get("/{listing_id}/photos", response_model=list[PhotoResponse])
async def list_photos(
    listing_id: UUID,
    use_case: ListListingPhotos = Depends(get_list_photos_use_case),
) -> list[PhotoResponse]:
    return [PhotoResponse.from_domain(p) for p in await use_case.execute(listing_id)]
