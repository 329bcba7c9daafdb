from fastapi import HTTPException, status

from community_media.domain.errors import (
    AssetValidationError,
    BatchTooLargeError,
    MediaError,
    NotFoundError,
    NotOwnedError,
    PathEscapeError,
    SizeExceededError,
    TooManyAssetsError,
)

# First match wins; subclasses before their bases
_STATUS_BY_ERROR: list[tuple[type[MediaError], int]] = [
    (BatchTooLargeError, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE),
    (SizeExceededError, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE),
    (TooManyAssetsError, status.HTTP_409_CONFLICT),
    (AssetValidationError, status.HTTP_400_BAD_REQUEST),
    (PathEscapeError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (NotOwnedError, status.HTTP_404_NOT_FOUND),
]


def to_http(error: MediaError) -> HTTPException:
    """Map a domain error to the HTTP error returned to the client."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return HTTPException(
                status_code=status_code,
                detail={"code": error.code, "message": str(error)},
            )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
