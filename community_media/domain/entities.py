from datetime import UTC, datetime
from typing import Literal, NewType
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# --- Names ---

# Allocator-generated identifier; the only name used for filesystem paths.
StorageName = NewType("StorageName", str)
# Client-supplied filename; free text for display only.
DisplayName = NewType("DisplayName", str)

PUBLIC_PREFIX = "/uploads/"

# --- Enums / Literals ---
ClassifiedType = Literal["image", "video", "document", "audio"]
OwnerKind = Literal["gallery", "team_member", "partner", "project"]


def utcnow() -> datetime:
    return datetime.now(UTC)


# --- Assets ---


class AssetReference(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    owner_id: UUID
    owner_kind: OwnerKind = "gallery"
    storage_name: StorageName
    storage_path: str
    display_name: DisplayName
    declared_mime_type: str
    classified_type: ClassifiedType
    byte_size: int = Field(gt=0)
    sha256: str = ""
    is_primary: bool = False
    sort_position: int = Field(default=0, ge=0)
    uploaded_at: datetime = Field(default_factory=utcnow)

    @property
    def public_path(self) -> str:
        return f"{PUBLIC_PREFIX}{self.storage_name}"


def display_order_key(asset: AssetReference) -> tuple[int, bool, str]:
    """Sort key: position, then primary first, then id."""
    return (asset.sort_position, not asset.is_primary, str(asset.id))


# --- Projects & Partners ---


class Project(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    title: str
    slug: str
    created_at: datetime = Field(default_factory=utcnow)


class Partner(BaseModel):
    """
    Partner attached to projects through two relations.

    ``legacy_project_id`` is the historical single-project link;
    ``project_ids`` is the many-to-many relation, kept in first-seen order
    without duplicates. ``associations.reconcile`` keeps them consistent.
    """

    id: UUID = Field(default_factory=uuid4)
    name: str
    description: str | None = None
    website_url: str | None = None
    logo_asset_id: UUID | None = None
    legacy_project_id: UUID | None = None
    project_ids: list[UUID] = Field(default_factory=list)
    sort_order: int = 0
    active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
