from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from community_media.components.assets import BatchOutput, UploadFailure
from community_media.domain.entities import AssetReference, ClassifiedType, OwnerKind, Partner


# --- Assets ---
class AssetResponse(BaseModel):
    id: UUID
    owner_id: UUID
    owner_kind: OwnerKind
    storage_name: str
    display_name: str
    declared_mime_type: str
    classified_type: ClassifiedType
    byte_size: int
    is_primary: bool
    sort_position: int
    uploaded_at: datetime
    public_path: str

    @classmethod
    def from_asset(cls, asset: AssetReference) -> "AssetResponse":
        return cls(
            id=asset.id,
            owner_id=asset.owner_id,
            owner_kind=asset.owner_kind,
            storage_name=asset.storage_name,
            display_name=asset.display_name,
            declared_mime_type=asset.declared_mime_type,
            classified_type=asset.classified_type,
            byte_size=asset.byte_size,
            is_primary=asset.is_primary,
            sort_position=asset.sort_position,
            uploaded_at=asset.uploaded_at,
            public_path=asset.public_path,
        )


class UploadFailureResponse(BaseModel):
    index: int
    filename: str | None = None
    code: str
    message: str

    @classmethod
    def from_failure(cls, failure: UploadFailure) -> "UploadFailureResponse":
        return cls(
            index=failure.index,
            filename=failure.filename,
            code=failure.code,
            message=failure.message,
        )


class BatchResponse(BaseModel):
    attached: list[AssetResponse] = []
    failed: list[UploadFailureResponse] = []

    @classmethod
    def from_output(cls, output: BatchOutput) -> "BatchResponse":
        return cls(
            attached=[AssetResponse.from_asset(a) for a in output.attached],
            failed=[UploadFailureResponse.from_failure(f) for f in output.failed],
        )


class ReorderRequest(BaseModel):
    asset_ids: list[UUID]


# --- Partners ---
class PartnerRequest(BaseModel):
    name: str
    description: str | None = None
    website_url: str | None = None
    legacy_project_id: UUID | None = None
    project_ids: list[UUID] = []
    sort_order: int = 0
    active: bool = True


class PartnerResponse(PartnerRequest):
    id: UUID
    logo_asset_id: UUID | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_partner(cls, partner: Partner) -> "PartnerResponse":
        return cls.model_validate(partner.model_dump())
