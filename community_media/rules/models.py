from pydantic import BaseModel, ConfigDict, Field, field_validator

from community_media.domain.entities import OwnerKind


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class KindRules(BaseModel):
    allowed_mime_types: list[str]
    max_upload_bytes: int = Field(gt=0)

    @field_validator("allowed_mime_types")
    @classmethod
    def _lowercase(cls, v: list[str]) -> list[str]:
        return [m.strip().lower() for m in v]


class StorageRules(BaseModel):
    root: str
    fallback_extension: str = ".dat"


class BatchRules(BaseModel):
    max_files: int = Field(gt=0)


class OwnerRules(BaseModel):
    max_assets: dict[OwnerKind, int]
    default_max_assets: int = 20

    def limit_for(self, kind: OwnerKind) -> int:
        return self.max_assets.get(kind, self.default_max_assets)


class UploadPolicy(BaseModel):
    """Immutable validation policy handed to the asset validator."""

    model_config = ConfigDict(frozen=True)

    image: KindRules
    video: KindRules
    fallback_extension: str = ".dat"


class MediaRules(BaseModel):
    storage: StorageRules
    images: KindRules
    videos: KindRules
    batch: BatchRules
    owners: OwnerRules

    def upload_policy(self) -> UploadPolicy:
        return UploadPolicy(
            image=self.images,
            video=self.videos,
            fallback_extension=self.storage.fallback_extension,
        )


class Rules(BaseModel):
    project: ProjectRules
    media: MediaRules
