"""Remote image hosting.

Workflows only see the ``MediaStore`` protocol; ``CloudinaryMediaStore`` is the
production implementation and tests swap in an in-memory one through the
``get_media_store`` dependency.
"""

import base64
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Protocol

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from app.core.config import Settings, get_settings
from app.core.errors import MediaStoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredMedia:
    url: str
    public_id: str


class MediaStore(Protocol):
    def store(self, data: bytes, content_type: str) -> StoredMedia: ...

    def delete(self, public_id: str) -> None: ...


class CloudinaryMediaStore:
    def __init__(self, settings: Settings) -> None:
        self.folder = settings.cloudinary_folder
        cloudinary.config(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            secure=True,
        )

    def store(self, data: bytes, content_type: str) -> StoredMedia:
        data_uri = f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"
        logger.info("uploading image", extra={"size_bytes": len(data), "content_type": content_type})
        try:
            result = cloudinary.uploader.upload(data_uri, folder=self.folder, resource_type="image")
        except CloudinaryError as exc:
            logger.error("image upload failed: %s", exc)
            raise MediaStoreError("Image upload failed") from exc
        return StoredMedia(url=result["secure_url"], public_id=result["public_id"])

    def delete(self, public_id: str) -> None:
        logger.info("deleting image", extra={"public_id": public_id})
        try:
            result = cloudinary.uploader.destroy(public_id, resource_type="image")
        except CloudinaryError as exc:
            logger.error("image delete failed: %s", exc)
            raise MediaStoreError("Image delete failed") from exc
        if result.get("result") not in {"ok", "not found"}:
            raise MediaStoreError(f"Image delete failed: {result.get('result')}")


@lru_cache(maxsize=1)
def get_media_store() -> MediaStore:
    return CloudinaryMediaStore(get_settings())
