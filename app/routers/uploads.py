import asyncio

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from app.models.user import User
from app.routers.deps import get_current_user, get_gallery_service
from app.schemas.base import MessageResponse
from app.schemas.upload import RearrangeRequest, UploadListResponse, UploadRead, UploadResponse
from app.services.gallery import GalleryService
from app.services.storage import parse_titles, read_image_file, read_image_files

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post("", response_model=UploadListResponse, status_code=status.HTTP_201_CREATED)
async def bulk_upload(
    images: list[UploadFile] | None = File(default=None),
    titles: str | None = Form(default=None),
    current_user: User = Depends(get_current_user),
    service: GalleryService = Depends(get_gallery_service),
) -> UploadListResponse:
    parsed_titles = parse_titles(titles)
    incoming = await read_image_files(images)
    created = await asyncio.to_thread(service.bulk_upload, current_user, incoming, parsed_titles)
    return UploadListResponse(
        message="Upload successful",
        uploads=[UploadRead.model_validate(upload) for upload in created],
    )


@router.get("", response_model=UploadListResponse)
def list_uploads(
    current_user: User = Depends(get_current_user),
    service: GalleryService = Depends(get_gallery_service),
) -> UploadListResponse:
    uploads = service.list_uploads(current_user)
    return UploadListResponse(message="Success", uploads=[UploadRead.model_validate(upload) for upload in uploads])


@router.post("/rearrange", response_model=MessageResponse)
def rearrange_uploads(
    payload: RearrangeRequest,
    current_user: User = Depends(get_current_user),
    service: GalleryService = Depends(get_gallery_service),
) -> MessageResponse:
    service.rearrange(current_user, payload.order)
    return MessageResponse(message="Uploads reordered successfully")


@router.put("/{upload_id}", response_model=UploadResponse)
async def edit_upload(
    upload_id: str,
    image: UploadFile | None = File(default=None),
    title: str | None = Form(default=None),
    current_user: User = Depends(get_current_user),
    service: GalleryService = Depends(get_gallery_service),
) -> UploadResponse:
    incoming = await read_image_file(image) if image is not None else None
    upload = await asyncio.to_thread(service.edit_upload, current_user, upload_id, title, incoming)
    return UploadResponse(message="Upload updated successfully", upload=UploadRead.model_validate(upload))


@router.delete("/{upload_id}", response_model=MessageResponse)
def delete_upload(
    upload_id: str,
    current_user: User = Depends(get_current_user),
    service: GalleryService = Depends(get_gallery_service),
) -> MessageResponse:
    service.delete_upload(current_user, upload_id)
    return MessageResponse(message="Upload deleted successfully")
