from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from uuid import uuid4

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {".webp"}
MAX_IMAGE_SIZE_BYTES = 5 * 1024 * 1024


@dataclass
class StoredImage:
    url: str
    public_id: str


def _get_required_env(var_name: str) -> str:
    value = os.getenv(var_name, "").strip()
    if not value:
        raise RuntimeError(f"Missing required environment variable: {var_name}")
    return value


def _get_r2_client():
    r2_account_id = _get_required_env("R2_ACCOUNT_ID")
    r2_access_key_id = _get_required_env("R2_ACCESS_KEY_ID")
    r2_secret_access_key = _get_required_env("R2_SECRET_ACCESS_KEY")

    import boto3

    return boto3.client(
        "s3",
        endpoint_url=f"https://{r2_account_id}.r2.cloudflarestorage.com",
        aws_access_key_id=r2_access_key_id,
        aws_secret_access_key=r2_secret_access_key,
        region_name="auto",
    )


def _sanitize_key_part(part: str) -> str:
    return part.strip().strip("/")


def is_allowed_image(filename: str | None) -> bool:
    return Path(filename or "").suffix.lower() in ALLOWED_IMAGE_EXTENSIONS


def upload_image(content: bytes, filename: str, folder: str, content_type: str = "image/webp") -> StoredImage:
    """Store ``content`` under ``<folder>/<uuid><ext>``; the object key doubles as the public id."""
    r2_bucket_name = _get_required_env("R2_BUCKET_NAME")
    r2_public_url = _get_required_env("R2_PUBLIC_URL").rstrip("/")

    extension = Path(filename or "").suffix.lower()
    object_key = f"{_sanitize_key_part(folder)}/{uuid4().hex}{extension}"

    _get_r2_client().upload_fileobj(
        BytesIO(content),
        r2_bucket_name,
        object_key,
        ExtraArgs={"ContentType": content_type},
    )
    logger.info("image uploaded key=%s size=%s", object_key, len(content))
    return StoredImage(url=f"{r2_public_url}/{object_key}", public_id=object_key)


def delete_image(public_id: str) -> None:
    r2_bucket_name = _get_required_env("R2_BUCKET_NAME")
    _get_r2_client().delete_object(Bucket=r2_bucket_name, Key=public_id)
    logger.info("image deleted key=%s", public_id)


def delete_image_quietly(public_id: str | None) -> bool:
    """Delete a replaced or orphaned asset; failures are logged, never raised."""
    if not public_id:
        return False
    try:
        delete_image(public_id)
    except Exception:
        logger.exception("image delete failed key=%s", public_id)
        return False
    return True
