"""
Assets component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO

from community_media.domain.entities import AssetReference

# --- Input Models ---


@dataclass(frozen=True)
class UploadInput:
    """
    An upload as handed over by the transport layer.

    ``byte_size`` is the size the transport declared; when omitted it is taken
    from ``data`` if that is already bytes.
    """

    filename: str | None
    content_type: str | None
    data: bytes | BinaryIO | None
    byte_size: int | None = None

    @property
    def declared_size(self) -> int | None:
        if self.byte_size is not None:
            return self.byte_size
        if isinstance(self.data, bytes):
            return len(self.data)
        return None

    @classmethod
    def from_bytes(cls, filename: str, content_type: str, data: bytes) -> UploadInput:
        return cls(filename=filename, content_type=content_type, data=data, byte_size=len(data))


# --- Output Models ---


@dataclass(frozen=True)
class UploadFailure:
    """One rejected item of a batch, with an actionable message."""

    index: int
    filename: str | None
    code: str
    message: str


@dataclass(frozen=True)
class BatchOutput:
    """Output from batch attach: what was stored and what was rejected."""

    attached: list[AssetReference] = field(default_factory=list)
    failed: list[UploadFailure] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed
