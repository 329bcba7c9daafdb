"""
Assets component port definitions.
"""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Protocol
from uuid import UUID

from community_media.domain.entities import AssetReference


class AssetRefRepoPort(Protocol):
    """Repository interface for asset references."""

    def get_by_id(self, asset_id: UUID) -> AssetReference | None:
        """Get reference by ID."""
        ...

    def get_by_storage_name(self, storage_name: str) -> AssetReference | None:
        """Get reference by its storage name."""
        ...

    def list_by_owner(self, owner_id: UUID) -> list[AssetReference]:
        """All references of an owner, in display order."""
        ...

    def save(self, asset: AssetReference) -> AssetReference:
        """Save or update a reference."""
        ...

    def apply_changes(
        self,
        saved: Sequence[AssetReference],
        deleted: Sequence[UUID] = (),
    ) -> None:
        """Upsert ``saved`` and delete ``deleted`` in one transaction."""
        ...

    def delete_by_owner(self, owner_id: UUID) -> list[AssetReference]:
        """Delete every reference of an owner and return them."""
        ...


class StoragePort(Protocol):
    """Byte storage keyed by storage name."""

    def store(self, data: bytes, storage_name: str, *, replace: bool = False) -> str:
        """Write bytes; returns the path relative to the storage root."""
        ...

    def resolve(self, storage_name: str) -> Path:
        """Filesystem path for a stored name."""
        ...

    def read(self, storage_name: str) -> bytes:
        ...

    def exists(self, storage_name: str) -> bool:
        ...

    def delete(self, storage_name: str) -> None:
        """Idempotent delete."""
        ...

    def total_size(self) -> int:
        ...


class LockPort(Protocol):
    """Per-owner mutual exclusion."""

    def hold(self, owner_id: UUID) -> AbstractContextManager[None]:
        ...
