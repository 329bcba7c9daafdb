from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile

from community_media.api.deps import get_partner_service
from community_media.api.errors import to_http
from community_media.api.schemas import AssetResponse, PartnerRequest, PartnerResponse
from community_media.components.assets import UploadInput
from community_media.components.partners import PartnerService
from community_media.domain.entities import Partner
from community_media.domain.errors import MediaError

router = APIRouter()


@router.post("", response_model=PartnerResponse, status_code=201)
def create_partner(
    request: PartnerRequest,
    service: PartnerService = Depends(get_partner_service),
) -> PartnerResponse:
    try:
        partner = service.create(Partner(**request.model_dump()))
    except MediaError as e:
        raise to_http(e) from e
    return PartnerResponse.from_partner(partner)


@router.get("/{partner_id}", response_model=PartnerResponse)
def get_partner(
    partner_id: UUID,
    service: PartnerService = Depends(get_partner_service),
) -> PartnerResponse:
    try:
        return PartnerResponse.from_partner(service.get(partner_id))
    except MediaError as e:
        raise to_http(e) from e


@router.put("/{partner_id}", response_model=PartnerResponse)
def update_partner(
    partner_id: UUID,
    request: PartnerRequest,
    service: PartnerService = Depends(get_partner_service),
) -> PartnerResponse:
    try:
        partner = service.get(partner_id)
        updated = partner.model_copy(update=request.model_dump())
        return PartnerResponse.from_partner(service.update(updated))
    except MediaError as e:
        raise to_http(e) from e


@router.delete("/{partner_id}", status_code=204)
def delete_partner(
    partner_id: UUID,
    service: PartnerService = Depends(get_partner_service),
) -> None:
    try:
        service.delete(partner_id)
    except MediaError as e:
        raise to_http(e) from e


@router.put("/{partner_id}/logo", response_model=AssetResponse)
def upload_logo(
    partner_id: UUID,
    file: UploadFile = File(...),
    service: PartnerService = Depends(get_partner_service),
) -> AssetResponse:
    """Upload or re-upload the partner logo."""
    upload = UploadInput(
        filename=file.filename,
        content_type=file.content_type,
        data=file.file,
        byte_size=file.size,
    )
    try:
        return AssetResponse.from_asset(service.set_logo(partner_id, upload))
    except MediaError as e:
        raise to_http(e) from e


@router.get("/by-project/{project_id}", response_model=list[PartnerResponse])
def list_partners_for_project(
    project_id: UUID,
    service: PartnerService = Depends(get_partner_service),
) -> list[PartnerResponse]:
    return [PartnerResponse.from_partner(p) for p in service.list_by_project(project_id)]
