"""
Upload validation and storage-name allocation.

Both are pure: validation depends only on the upload and the ``UploadPolicy``
given at construction; allocation uses nothing from the client filename but
its extension.
"""

from __future__ import annotations

import hashlib
import re
from typing import BinaryIO
from uuid import uuid4

from community_media.domain.entities import ClassifiedType, StorageName
from community_media.domain.errors import (
    EmptyOrMissingError,
    SizeExceededError,
    UnsupportedTypeError,
)
from community_media.rules.models import KindRules, UploadPolicy

from .models import UploadInput

_EXTENSION_RE = re.compile(r"^[a-z0-9]{1,10}$")


def classify_mime_type(mime_type: str | None) -> ClassifiedType:
    """Classify by MIME prefix; anything unrecognised is a document."""
    if not mime_type:
        return "document"
    mime = mime_type.strip().lower()
    if mime.startswith("image/"):
        return "image"
    if mime.startswith("video/"):
        return "video"
    if mime.startswith("audio/"):
        return "audio"
    return "document"


def extract_extension(filename: str | None, fallback: str = ".dat") -> str:
    """Lower-cased extension with leading dot, or ``fallback``."""
    if not filename:
        return fallback
    base = re.split(r"[\\/]", filename)[-1]
    if "." not in base.strip("."):
        return fallback
    ext = base.rsplit(".", 1)[1].lower()
    if not _EXTENSION_RE.match(ext):
        return fallback
    return f".{ext}"


def allocate_storage_name(filename: str | None, fallback: str = ".dat") -> StorageName:
    """Random unique token plus the original extension."""
    return StorageName(f"{uuid4().hex}{extract_extension(filename, fallback)}")


def compute_sha256(data: bytes | BinaryIO) -> tuple[bytes, str]:
    """
    Read the upload and hash it.

    Returns tuple of (data_bytes, sha256_hex).
    """
    if isinstance(data, bytes):
        data_bytes = data
    else:
        data_bytes = data.read()
        if hasattr(data, "seek"):
            data.seek(0)

    return data_bytes, hashlib.sha256(data_bytes).hexdigest()


class AssetValidator:
    """Checks uploads against an immutable upload policy."""

    def __init__(self, policy: UploadPolicy) -> None:
        self.policy = policy

    def _rules_for(self, kind: ClassifiedType) -> KindRules | None:
        if kind == "image":
            return self.policy.image
        if kind == "video":
            return self.policy.video
        return None

    def validate(self, upload: UploadInput | None) -> ClassifiedType:
        """
        Classify an upload or raise.

        Raises EmptyOrMissingError, UnsupportedTypeError or SizeExceededError.
        A declared size of None skips the size check; ``check_size`` runs
        again on the bytes actually read.
        """
        if upload is None or upload.data is None:
            raise EmptyOrMissingError()
        if not upload.filename or not upload.filename.strip():
            raise EmptyOrMissingError()

        declared = upload.declared_size
        if declared is not None and declared <= 0:
            raise EmptyOrMissingError(upload.filename)

        if ".." in upload.filename:
            raise UnsupportedTypeError(
                upload.content_type,
                reason=f"Invalid file name: {upload.filename}",
            )

        kind = classify_mime_type(upload.content_type)
        rules = self._rules_for(kind)
        if rules is None:
            raise UnsupportedTypeError(upload.content_type)

        mime = (upload.content_type or "").strip().lower()
        if mime not in rules.allowed_mime_types:
            raise UnsupportedTypeError(
                upload.content_type,
                reason=(
                    f"Unsupported {kind} type: {upload.content_type}. "
                    f"Allowed types: {', '.join(rules.allowed_mime_types)}"
                ),
            )

        if declared is not None:
            self.check_size(kind, declared, upload.filename)
        return kind

    def check_size(self, kind: ClassifiedType, size: int, filename: str | None = None) -> None:
        if size <= 0:
            raise EmptyOrMissingError(filename)
        rules = self._rules_for(kind)
        if rules is None:
            raise UnsupportedTypeError(None, reason=f"Unsupported file type: {kind}")
        if size > rules.max_upload_bytes:
            raise SizeExceededError(kind, size, rules.max_upload_bytes)
