from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from pydantic import BaseModel

from app.deps import require_director, require_staff
from app.models.user import User
from app.services.image_storage import MAX_IMAGE_SIZE_BYTES, StoredImage, is_allowed_image, upload_image

router = APIRouter(prefix="/api", tags=["uploads"])
logger = logging.getLogger(__name__)


class UploadResponse(BaseModel):
    url: str
    public_id: str


class StaffUploadResponse(UploadResponse):
    secure_url: str


def read_image_upload(file: UploadFile | None) -> bytes:
    """Validate an uploaded image and return its bytes."""
    if file is None or not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")
    if not is_allowed_image(file.filename):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only .webp images allowed")

    content = file.file.read(MAX_IMAGE_SIZE_BYTES + 1)
    if len(content) > MAX_IMAGE_SIZE_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="File exceeds the 5MB limit",
        )
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty")
    return content


def store_image_upload(file: UploadFile | None, folder: str) -> StoredImage:
    content = read_image_upload(file)
    try:
        return upload_image(content, file.filename, folder, content_type=file.content_type or "image/webp")
    except Exception as exc:
        logger.exception("image upload failed folder=%s", folder)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Image upload failed",
        ) from exc


@router.post("/upload", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
def upload_generic_image(
    file: UploadFile | None = File(None),
    _user: User = Depends(require_staff),
):
    stored = store_image_upload(file, "uploads")
    return {"url": stored.url, "public_id": stored.public_id}


@router.post("/staff/upload", response_model=StaffUploadResponse, status_code=status.HTTP_201_CREATED)
def upload_staff_image(
    file: UploadFile | None = File(None),
    _user: User = Depends(require_director),
):
    stored = store_image_upload(file, "staff")
    return {"url": stored.url, "secure_url": stored.url, "public_id": stored.public_id}
