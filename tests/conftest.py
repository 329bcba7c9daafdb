from collections.abc import Sequence
from pathlib import Path
from uuid import UUID

import pytest

from community_media.adapters.fs.filestore import StorageGateway
from community_media.adapters.locks import OwnerLockRegistry
from community_media.adapters.sqlite.migrator import SQLiteMigrator
from community_media.components.assets import AssetService
from community_media.domain.entities import AssetReference, display_order_key
from community_media.rules.loader import load_rules
from community_media.rules.models import MediaRules

PROJECT_ROOT = Path(__file__).resolve().parents[1]
MIGRATIONS_DIR = PROJECT_ROOT / "migrations"
RULES_PATH = PROJECT_ROOT / "rules.yaml"


# --- Mock Repositories ---


class MockAssetRefRepo:
    """
    In-memory asset reference repository.

    Stores copies so callers only see changes they persisted, like a database.
    """

    def __init__(self) -> None:
        self._assets: dict[UUID, AssetReference] = {}
        self.apply_calls = 0

    def get_by_id(self, asset_id: UUID) -> AssetReference | None:
        asset = self._assets.get(asset_id)
        return asset.model_copy() if asset else None

    def get_by_storage_name(self, storage_name: str) -> AssetReference | None:
        for asset in self._assets.values():
            if asset.storage_name == storage_name:
                return asset.model_copy()
        return None

    def list_by_owner(self, owner_id: UUID) -> list[AssetReference]:
        owned = [a.model_copy() for a in self._assets.values() if a.owner_id == owner_id]
        return sorted(owned, key=display_order_key)

    def save(self, asset: AssetReference) -> AssetReference:
        self._assets[asset.id] = asset.model_copy()
        return asset

    def apply_changes(
        self,
        saved: Sequence[AssetReference],
        deleted: Sequence[UUID] = (),
    ) -> None:
        self.apply_calls += 1
        for asset_id in deleted:
            self._assets.pop(asset_id, None)
        for asset in saved:
            self._assets[asset.id] = asset.model_copy()

    def delete_by_owner(self, owner_id: UUID) -> list[AssetReference]:
        removed = [a for a in self._assets.values() if a.owner_id == owner_id]
        for asset in removed:
            del self._assets[asset.id]
        return removed


# --- Fixtures ---


@pytest.fixture
def media_rules() -> MediaRules:
    """Media rules from the project rules.yaml."""
    return load_rules(RULES_PATH).media


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "media.db")
    SQLiteMigrator(path, str(MIGRATIONS_DIR)).run_migrations()
    return path


@pytest.fixture
def storage(tmp_path):
    return StorageGateway(tmp_path / "uploads")


@pytest.fixture
def asset_repo():
    return MockAssetRefRepo()


@pytest.fixture
def asset_service(asset_repo, storage, media_rules):
    return AssetService(asset_repo, storage, media_rules, OwnerLockRegistry())
