"""
Assets component - attach, remove and order media files owned by content items.

Write order:
- attach: bytes are stored before the reference is persisted
- remove: the reference is deleted before the bytes

A crash can leave an orphan file on disk, never a reference to a missing
file. All changes to one owner's collection run under that owner's lock and
go through ``domain.primary`` so the single-primary invariant holds.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from uuid import UUID

from community_media.adapters.locks import OwnerLockRegistry
from community_media.domain import primary
from community_media.domain.entities import (
    AssetReference,
    DisplayName,
    OwnerKind,
    StorageName,
    display_order_key,
)
from community_media.domain.errors import (
    AssetValidationError,
    BatchTooLargeError,
    NotFoundError,
    NotOwnedError,
    TooManyAssetsError,
)
from community_media.rules.models import MediaRules

from ._impl import AssetValidator, allocate_storage_name, compute_sha256
from .models import BatchOutput, UploadFailure, UploadInput
from .ports import AssetRefRepoPort, LockPort, StoragePort

logger = logging.getLogger(__name__)

STORAGE_ERROR_CODE = "storage_error"


class AssetService:
    def __init__(
        self,
        repo: AssetRefRepoPort,
        storage: StoragePort,
        rules: MediaRules,
        locks: LockPort | None = None,
    ) -> None:
        self.repo = repo
        self.storage = storage
        self.rules = rules
        self.validator = AssetValidator(rules.upload_policy())
        self.locks = locks if locks is not None else OwnerLockRegistry()

    # --- Internals ---

    def _check_capacity(
        self,
        owner_id: UUID,
        owner_kind: OwnerKind,
        existing: int,
        incoming: int,
    ) -> None:
        limit = self.rules.owners.limit_for(owner_kind)
        if existing + incoming > limit:
            logger.warning(
                "Owner %s (%s) would exceed asset limit: %d + %d > %d",
                owner_id,
                owner_kind,
                existing,
                incoming,
                limit,
            )
            raise TooManyAssetsError(existing, incoming, limit)

    def _store_bytes(self, data: bytes, filename: str | None) -> tuple[StorageName, str]:
        fallback = self.rules.storage.fallback_extension
        name = allocate_storage_name(filename, fallback)
        try:
            path = self.storage.store(data, name)
        except OSError as e:
            logger.warning("Write of %s failed (%s); retrying with a new name", name, e)
            name = allocate_storage_name(filename, fallback)
            path = self.storage.store(data, name)
        return name, path

    def _discard_file(self, storage_name: str) -> None:
        try:
            self.storage.delete(storage_name)
        except OSError:
            logger.exception("Could not delete file %s; leaving orphan", storage_name)

    def _owned(self, owner_id: UUID, asset_id: UUID) -> AssetReference:
        asset = self.repo.get_by_id(asset_id)
        if asset is None:
            raise NotFoundError(f"asset {asset_id}")
        if asset.owner_id != owner_id:
            raise NotOwnedError(asset_id, owner_id)
        return asset

    def _ingest(
        self,
        owner_id: UUID,
        owner_kind: OwnerKind,
        upload: UploadInput,
        collection: list[AssetReference],
    ) -> AssetReference:
        kind = self.validator.validate(upload)
        payload, sha256 = compute_sha256(upload.data)  # type: ignore[arg-type]
        self.validator.check_size(kind, len(payload), upload.filename)

        storage_name, storage_path = self._store_bytes(payload, upload.filename)

        asset = AssetReference(
            owner_id=owner_id,
            owner_kind=owner_kind,
            storage_name=storage_name,
            storage_path=storage_path,
            display_name=DisplayName(upload.filename or ""),
            declared_mime_type=upload.content_type or "",
            classified_type=kind,
            byte_size=len(payload),
            sha256=sha256,
        )
        changed = primary.on_attach(collection, asset)

        try:
            self.repo.apply_changes([*changed, asset])
        except Exception:
            self._discard_file(storage_name)
            raise

        collection.append(asset)
        logger.info(
            "Attached %s (%s, %d bytes) to %s %s at position %d%s",
            storage_name,
            asset.declared_mime_type,
            asset.byte_size,
            owner_kind,
            owner_id,
            asset.sort_position,
            " as primary" if asset.is_primary else "",
        )
        return asset

    # --- Attach ---

    def attach(
        self,
        owner_id: UUID,
        upload: UploadInput,
        *,
        owner_kind: OwnerKind = "gallery",
    ) -> AssetReference:
        """Validate, store and attach one upload. Validation errors propagate."""
        with self.locks.hold(owner_id):
            collection = self.repo.list_by_owner(owner_id)
            self._check_capacity(owner_id, owner_kind, len(collection), 1)
            try:
                return self._ingest(owner_id, owner_kind, upload, collection)
            except AssetValidationError as e:
                logger.warning(
                    "Rejected upload %r for %s: %s",
                    getattr(upload, "filename", None),
                    owner_id,
                    e,
                )
                raise

    def attach_batch(
        self,
        owner_id: UUID,
        uploads: Iterable[UploadInput],
        *,
        owner_kind: OwnerKind = "gallery",
    ) -> BatchOutput:
        """
        Attach several uploads in order.

        Batch size and owner capacity are checked before anything is written.
        Each item then succeeds or fails on its own: validation failures are
        reported in ``BatchOutput.failed`` and earlier items stay attached.
        A storage write that fails after its retry is reported the same way
        with code ``storage_error``; path escapes still propagate.
        """
        items = list(uploads)
        max_files = self.rules.batch.max_files
        if len(items) > max_files:
            raise BatchTooLargeError(len(items), max_files)

        attached: list[AssetReference] = []
        failed: list[UploadFailure] = []

        with self.locks.hold(owner_id):
            collection = self.repo.list_by_owner(owner_id)
            self._check_capacity(owner_id, owner_kind, len(collection), len(items))

            for index, upload in enumerate(items):
                filename = getattr(upload, "filename", None)
                try:
                    attached.append(self._ingest(owner_id, owner_kind, upload, collection))
                except AssetValidationError as e:
                    logger.warning(
                        "Rejected batch item %d (%r) for %s: %s", index, filename, owner_id, e
                    )
                    failed.append(
                        UploadFailure(
                            index=index,
                            filename=filename,
                            code=e.code,
                            message=str(e),
                        )
                    )
                except OSError as e:
                    logger.error(
                        "Could not store batch item %d (%r) for %s: %s",
                        index,
                        filename,
                        owner_id,
                        e,
                    )
                    failed.append(
                        UploadFailure(
                            index=index,
                            filename=filename,
                            code=STORAGE_ERROR_CODE,
                            message="The file could not be stored, please try again",
                        )
                    )

        return BatchOutput(attached=attached, failed=failed)

    def replace(self, owner_id: UUID, asset_id: UUID, upload: UploadInput) -> AssetReference:
        """
        Re-upload in place: new bytes under the existing storage name.

        Primary flag and position are unchanged. If the record cannot be
        saved the previous bytes are written back, so the file always matches
        its record.
        """
        with self.locks.hold(owner_id):
            asset = self._owned(owner_id, asset_id)
            kind = self.validator.validate(upload)
            payload, sha256 = compute_sha256(upload.data)  # type: ignore[arg-type]
            self.validator.check_size(kind, len(payload), upload.filename)

            previous = (
                self.storage.read(asset.storage_name)
                if self.storage.exists(asset.storage_name)
                else None
            )
            updated = asset.model_copy(
                update={
                    "storage_path": self.storage.store(
                        payload, asset.storage_name, replace=True
                    ),
                    "display_name": DisplayName(upload.filename or ""),
                    "declared_mime_type": upload.content_type or "",
                    "classified_type": kind,
                    "byte_size": len(payload),
                    "sha256": sha256,
                }
            )
            try:
                self.repo.save(updated)
            except Exception:
                logger.error(
                    "Saving replacement of %s failed; restoring previous content",
                    asset.storage_name,
                )
                if previous is None:
                    self._discard_file(asset.storage_name)
                else:
                    self.storage.store(previous, asset.storage_name, replace=True)
                raise

            logger.info("Replaced content of %s for %s", asset.storage_name, owner_id)
            return updated

    # --- Remove ---

    def remove(self, owner_id: UUID, asset_id: UUID) -> AssetReference:
        """Detach and delete one asset, re-electing the primary if needed."""
        with self.locks.hold(owner_id):
            asset = self._owned(owner_id, asset_id)
            remaining = [a for a in self.repo.list_by_owner(owner_id) if a.id != asset_id]
            changed = primary.on_remove(remaining, asset)

            self.repo.apply_changes(changed, [asset.id])
            self._discard_file(asset.storage_name)

            logger.info("Removed %s from %s", asset.storage_name, owner_id)
            for c in changed:
                if c.is_primary:
                    logger.info("Primary of %s moved to %s", owner_id, c.id)
            return asset

    def retain_only(self, owner_id: UUID, keep_ids: Iterable[UUID]) -> list[AssetReference]:
        """Remove every asset of the owner not listed in ``keep_ids``."""
        keep = set(keep_ids)
        with self.locks.hold(owner_id):
            collection = self.repo.list_by_owner(owner_id)
            unknown = keep - {a.id for a in collection}
            if unknown:
                raise NotOwnedError(next(iter(unknown)), owner_id)

            return [self.remove(owner_id, a.id) for a in collection if a.id not in keep]

    def delete_owner(self, owner_id: UUID) -> int:
        """Cascade delete of all references and bytes of an owner."""
        with self.locks.hold(owner_id):
            removed = self.repo.delete_by_owner(owner_id)
            for asset in removed:
                self._discard_file(asset.storage_name)

        logger.info("Deleted %d assets of owner %s", len(removed), owner_id)
        return len(removed)

    # --- Primary & ordering ---

    def set_primary(self, owner_id: UUID, asset_id: UUID) -> AssetReference:
        with self.locks.hold(owner_id):
            self._owned(owner_id, asset_id)
            collection = self.repo.list_by_owner(owner_id)
            changed = primary.set_primary(collection, asset_id, owner_id)
            self.repo.apply_changes(changed)

            logger.info("Primary of %s set to %s", owner_id, asset_id)
            return next(a for a in collection if a.id == asset_id)

    def reorder(self, owner_id: UUID, ordered_ids: Sequence[UUID]) -> list[AssetReference]:
        with self.locks.hold(owner_id):
            collection = self.repo.list_by_owner(owner_id)
            changed = primary.reorder(collection, ordered_ids, owner_id)
            self.repo.apply_changes(changed)
            return sorted(collection, key=display_order_key)

    def get_primary(self, owner_id: UUID) -> AssetReference | None:
        return primary.get_primary(self.repo.list_by_owner(owner_id))

    # --- Queries ---

    def list_assets(self, owner_id: UUID) -> list[AssetReference]:
        return sorted(self.repo.list_by_owner(owner_id), key=display_order_key)

    def get_asset(self, asset_id: UUID) -> AssetReference:
        asset = self.repo.get_by_id(asset_id)
        if asset is None:
            raise NotFoundError(f"asset {asset_id}")
        return asset

    def open_public(self, storage_name: str) -> tuple[Path, AssetReference]:
        """
        Translate a public ``/uploads/{name}`` request into a file path.

        Containment is checked on every call before the lookup.
        """
        path = self.storage.resolve(storage_name)
        asset = self.repo.get_by_storage_name(storage_name)
        if asset is None:
            raise NotFoundError(f"file {storage_name}")
        return path, asset

    def storage_usage(self) -> int:
        return self.storage.total_size()

