"""
Error taxonomy for media asset management.

Validation errors carry a stable ``code`` so batch ingestion can report
per-item failures without raising. ``PathEscapeError`` is a security
violation: its message never contains path details.
"""

from __future__ import annotations


class MediaError(Exception):
    """Base class for media errors."""

    code = "media_error"


# --- Validation ---


class AssetValidationError(MediaError):
    """Raised when an upload or request fails a policy check."""

    code = "invalid_upload"


class EmptyOrMissingError(AssetValidationError):
    code = "empty_or_missing"

    def __init__(self, filename: str | None = None) -> None:
        self.filename = filename
        super().__init__("File is empty or missing")


class UnsupportedTypeError(AssetValidationError):
    code = "unsupported_type"

    def __init__(self, content_type: str | None, reason: str | None = None) -> None:
        self.content_type = content_type
        super().__init__(reason or f"Unsupported file type: {content_type}")


class SizeExceededError(AssetValidationError):
    code = "size_exceeded"

    def __init__(self, kind: str, size: int, max_size: int) -> None:
        self.kind = kind
        self.size = size
        self.max_size = max_size
        super().__init__(
            f"File size {size} bytes exceeds maximum of {max_size} bytes for {kind}"
        )


class BatchTooLargeError(AssetValidationError):
    code = "batch_too_large"

    def __init__(self, count: int, max_count: int) -> None:
        self.count = count
        self.max_count = max_count
        super().__init__(f"Too many files in one upload: {count} (maximum {max_count})")


class TooManyAssetsError(AssetValidationError):
    code = "too_many_assets"

    def __init__(self, existing: int, incoming: int, limit: int) -> None:
        self.existing = existing
        self.incoming = incoming
        self.limit = limit
        super().__init__(
            f"Asset limit exceeded: {existing} existing + {incoming} new > {limit}"
        )


# --- Security ---


class PathEscapeError(MediaError):
    """Resolved storage path falls outside the storage root."""

    code = "path_escape"

    def __init__(self) -> None:
        super().__init__("Access denied")


# --- Lookup ---


class NotFoundError(MediaError):
    code = "not_found"

    def __init__(self, what: str) -> None:
        self.what = what
        super().__init__(f"Not found: {what}")


class NotOwnedError(MediaError):
    code = "not_owned"

    def __init__(self, asset_id: object, owner_id: object) -> None:
        self.asset_id = asset_id
        self.owner_id = owner_id
        super().__init__(f"Asset {asset_id} does not belong to owner {owner_id}")
