import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from community_media.adapters.fs.filestore import StorageGateway
from community_media.adapters.locks import OwnerLockRegistry
from community_media.adapters.sqlite.repos import (
    SQLiteAssetRefRepo,
    SQLitePartnerRepo,
    SQLiteProjectRepo,
)
from community_media.components.assets import AssetService
from community_media.components.partners import PartnerService
from community_media.rules.loader import load_rules
from community_media.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("MEDIA_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "media.db")
        self.rules_path = Path(os.environ.get("MEDIA_RULES_PATH", self.base_dir / "rules.yaml"))
        self.migrations_dir = str(Path(__file__).resolve().parents[2] / "migrations")


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


# --- Repos ---
def get_asset_repo(settings: Settings = Depends(get_settings)) -> SQLiteAssetRefRepo:
    return SQLiteAssetRefRepo(settings.db_path)


def get_project_repo(settings: Settings = Depends(get_settings)) -> SQLiteProjectRepo:
    return SQLiteProjectRepo(settings.db_path)


def get_partner_repo(settings: Settings = Depends(get_settings)) -> SQLitePartnerRepo:
    return SQLitePartnerRepo(settings.db_path)


# --- Adapters ---
def get_storage(rules: Rules = Depends(get_rules)) -> StorageGateway:
    return StorageGateway(rules.media.storage.root)


# Owner locks must be shared by every request in the process
_lock_registry_instance: OwnerLockRegistry | None = None


def get_lock_registry() -> OwnerLockRegistry:
    """Get owner lock registry singleton."""
    global _lock_registry_instance
    if _lock_registry_instance is None:
        _lock_registry_instance = OwnerLockRegistry()
    return _lock_registry_instance


# --- Component Services ---
def get_asset_service(
    repo: SQLiteAssetRefRepo = Depends(get_asset_repo),
    storage: StorageGateway = Depends(get_storage),
    rules: Rules = Depends(get_rules),
    locks: OwnerLockRegistry = Depends(get_lock_registry),
) -> AssetService:
    """Get assets component service."""
    return AssetService(repo, storage, rules.media, locks)


def get_partner_service(
    repo: SQLitePartnerRepo = Depends(get_partner_repo),
    projects: SQLiteProjectRepo = Depends(get_project_repo),
    assets: AssetService = Depends(get_asset_service),
) -> PartnerService:
    """Get partners component service."""
    return PartnerService(repo, projects, assets)
