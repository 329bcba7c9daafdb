"""
Assets API routes.

Upload into an owner's collection, list it, change its primary and order,
and serve stored files under the public ``/uploads/`` prefix.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile
from fastapi.responses import FileResponse, Response

from community_media.api.deps import get_asset_service
from community_media.api.errors import to_http
from community_media.api.schemas import AssetResponse, BatchResponse, ReorderRequest
from community_media.components.assets import AssetService, UploadInput
from community_media.domain.entities import OwnerKind
from community_media.domain.errors import MediaError, NotFoundError

router = APIRouter()
public_router = APIRouter()


@router.post("/{owner_id}/assets", response_model=BatchResponse)
def upload_assets(
    owner_id: UUID,
    files: list[UploadFile] = File(...),
    owner_kind: OwnerKind = Query("gallery"),
    service: AssetService = Depends(get_asset_service),
) -> BatchResponse:
    """Attach a batch of files; per-file rejections are listed in ``failed``."""
    uploads = [
        UploadInput(
            filename=f.filename,
            content_type=f.content_type,
            data=f.file,
            byte_size=f.size,
        )
        for f in files
    ]

    try:
        output = service.attach_batch(owner_id, uploads, owner_kind=owner_kind)
    except MediaError as e:
        raise to_http(e) from e

    return BatchResponse.from_output(output)


@router.get("/{owner_id}/assets", response_model=list[AssetResponse])
def list_assets(
    owner_id: UUID,
    service: AssetService = Depends(get_asset_service),
) -> list[AssetResponse]:
    return [AssetResponse.from_asset(a) for a in service.list_assets(owner_id)]


@router.delete("/{owner_id}/assets/{asset_id}", status_code=204)
def remove_asset(
    owner_id: UUID,
    asset_id: UUID,
    service: AssetService = Depends(get_asset_service),
) -> None:
    try:
        service.remove(owner_id, asset_id)
    except MediaError as e:
        raise to_http(e) from e


@router.put("/{owner_id}/assets/{asset_id}/primary", response_model=AssetResponse)
def set_primary(
    owner_id: UUID,
    asset_id: UUID,
    service: AssetService = Depends(get_asset_service),
) -> AssetResponse:
    try:
        return AssetResponse.from_asset(service.set_primary(owner_id, asset_id))
    except MediaError as e:
        raise to_http(e) from e


@router.put("/{owner_id}/assets/order", response_model=list[AssetResponse])
def reorder_assets(
    owner_id: UUID,
    request: ReorderRequest,
    service: AssetService = Depends(get_asset_service),
) -> list[AssetResponse]:
    try:
        ordered = service.reorder(owner_id, request.asset_ids)
    except MediaError as e:
        raise to_http(e) from e
    return [AssetResponse.from_asset(a) for a in ordered]


def build_etag(sha256: str) -> str:
    """ETag from the content hash; changes when the file is replaced in place."""
    return f'"{sha256[:16]}"'


def client_has_current(request: Request, etag: str) -> bool:
    if_none_match = request.headers.get("if-none-match")
    if not if_none_match:
        return False
    client_etags = [e.strip() for e in if_none_match.split(",")]
    return etag in client_etags or "*" in client_etags


@public_router.get("/{storage_name:path}")
def serve_upload(
    storage_name: str,
    request: Request,
    service: AssetService = Depends(get_asset_service),
) -> Response:
    """Serve a stored file with the MIME type recorded at upload."""
    try:
        path, asset = service.open_public(storage_name)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="File not found") from e
    except MediaError as e:
        raise to_http(e) from e

    if not asset.sha256:
        return FileResponse(path, media_type=asset.declared_mime_type)

    etag = build_etag(asset.sha256)
    if client_has_current(request, etag):
        return Response(status_code=304, headers={"ETag": etag})
    return FileResponse(path, media_type=asset.declared_mime_type, headers={"ETag": etag})
