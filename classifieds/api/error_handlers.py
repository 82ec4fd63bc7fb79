import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from classifieds.domain.exceptions import ClassifiedsError, ErrorKind

logger = structlog.get_logger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.LISTING_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_STATE_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorKind.PHOTO_LIMIT_EXCEEDED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_PHOTO_FORMAT: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.IDEMPOTENCY_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.DUPLICATE_KEY: status.HTTP_409_CONFLICT,
    ErrorKind.CONCURRENT_MODIFICATION: status.HTTP_409_CONFLICT,
    ErrorKind.STORAGE_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.IDEMPOTENCY_RECORDING_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


async def classifieds_error_handler(request: Request, exc: ClassifiedsError) -> JSONResponse:
    status_code = STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    log = logger.error if status_code >= 500 else logger.info
    log(
        "request_failed",
        method=request.method,
        path=request.url.path,
        error=exc.kind.value,
        status_code=status_code,
        message=str(exc),
    )
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.kind.value, "message": str(exc), **exc.details()},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ClassifiedsError, classifieds_error_handler)  # type: ignore[arg-type]
