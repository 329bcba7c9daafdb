"""
Primary-member transitions over one owner's asset collection.

Invariant: a non-empty collection has exactly one primary asset, an empty
collection has none. Every transition mutates the references in place,
finishes with ``enforce`` and returns the references whose ``is_primary`` or
``sort_position`` changed, so the caller can persist them in one go.

Callers serialize transitions per owner (see ``adapters.locks``).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from uuid import UUID

from community_media.domain.entities import AssetReference, display_order_key
from community_media.domain.errors import NotOwnedError


def _snapshot(collection: Iterable[AssetReference]) -> dict[UUID, tuple[bool, int]]:
    return {a.id: (a.is_primary, a.sort_position) for a in collection}


def _changed(
    collection: Iterable[AssetReference],
    before: dict[UUID, tuple[bool, int]],
) -> list[AssetReference]:
    return [
        a
        for a in collection
        if before.get(a.id) != (a.is_primary, a.sort_position)
    ]


def count_primary(collection: Iterable[AssetReference]) -> int:
    return sum(1 for a in collection if a.is_primary)


def enforce(collection: Sequence[AssetReference]) -> list[AssetReference]:
    """
    Repair the invariant.

    No primary in a non-empty collection elects the lowest position; several
    primaries keep only the first in display order.
    """
    before = _snapshot(collection)
    ordered = sorted(collection, key=display_order_key)
    flagged = [a for a in ordered if a.is_primary]

    if ordered and not flagged:
        ordered[0].is_primary = True
    for extra in flagged[1:]:
        extra.is_primary = False

    return _changed(collection, before)


def on_attach(
    collection: Sequence[AssetReference],
    new: AssetReference,
) -> list[AssetReference]:
    """
    Append ``new`` to the collection.

    ``new`` is placed after the current last position and becomes primary only
    when the collection was empty. ``new`` itself is not included in the
    returned changes.
    """
    new.sort_position = max((a.sort_position for a in collection), default=-1) + 1
    new.is_primary = not collection

    changed = enforce([*collection, new])
    return [a for a in changed if a.id != new.id]


def on_remove(
    remaining: Sequence[AssetReference],
    removed: AssetReference,
) -> list[AssetReference]:
    """Re-elect a primary among ``remaining`` if ``removed`` held the flag."""
    before = _snapshot(remaining)
    if removed.is_primary and remaining:
        for asset in remaining:
            asset.is_primary = False
        lowest = min(remaining, key=lambda a: (a.sort_position, str(a.id)))
        lowest.is_primary = True

    enforce(remaining)
    return _changed(remaining, before)


def set_primary(
    collection: Sequence[AssetReference],
    asset_id: UUID,
    owner_id: UUID,
) -> list[AssetReference]:
    """Make ``asset_id`` the single primary asset of the collection."""
    target = next((a for a in collection if a.id == asset_id), None)
    if target is None:
        raise NotOwnedError(asset_id, owner_id)

    before = _snapshot(collection)
    for asset in collection:
        asset.is_primary = asset.id == asset_id

    enforce(collection)
    return _changed(collection, before)


def reorder(
    collection: Sequence[AssetReference],
    ordered_ids: Sequence[UUID],
    owner_id: UUID,
) -> list[AssetReference]:
    """
    Assign sequential 0-based positions following ``ordered_ids``.

    Members not listed keep their relative display order after the listed
    ones. Does not change primary flags.
    """
    by_id = {a.id: a for a in collection}
    for asset_id in ordered_ids:
        if asset_id not in by_id:
            raise NotOwnedError(asset_id, owner_id)

    before = _snapshot(collection)
    listed = list(dict.fromkeys(ordered_ids))
    seen = set(listed)
    unlisted = [a.id for a in sorted(collection, key=display_order_key) if a.id not in seen]
    for position, asset_id in enumerate([*listed, *unlisted]):
        by_id[asset_id].sort_position = position

    enforce(collection)
    return _changed(collection, before)


def get_primary(collection: Sequence[AssetReference]) -> AssetReference | None:
    """Flagged primary, falling back to the lowest position for unflagged data."""
    ordered = sorted(collection, key=display_order_key)
    for asset in ordered:
        if asset.is_primary:
            return asset
    return ordered[0] if ordered else None
