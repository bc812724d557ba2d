import json

from fastapi import UploadFile

from app.core.config import get_settings
from app.core.errors import ValidationError
from app.services.gallery import IncomingFile

CHUNK_SIZE = 1024 * 1024


async def read_image_file(file: UploadFile) -> IncomingFile:
    """Buffer one multipart image, enforcing the type and size limits."""
    settings = get_settings()
    content_type = file.content_type or ""
    if not content_type.startswith("image/"):
        raise ValidationError("Only image files are allowed")

    max_bytes = settings.max_upload_size_mb * 1024 * 1024
    buffer = bytearray()
    try:
        while True:
            chunk = await file.read(CHUNK_SIZE)
            if not chunk:
                break
            buffer.extend(chunk)
            if len(buffer) > max_bytes:
                raise ValidationError(f"File size exceeds {settings.max_upload_size_mb}MB limit")
    finally:
        await file.close()
    if not buffer:
        raise ValidationError("Uploaded file is empty")
    return IncomingFile(data=bytes(buffer), content_type=content_type, original_name=file.filename or "")


async def read_image_files(files: list[UploadFile] | None) -> list[IncomingFile]:
    settings = get_settings()
    files = files or []
    if len(files) > settings.max_files_per_upload:
        raise ValidationError(f"Too many files uploaded (max {settings.max_files_per_upload})")
    return [await read_image_file(file) for file in files]


def parse_titles(raw: str | None) -> list[str | None]:
    """Decode the ``titles`` form field, a JSON array aligned with the uploaded files.

    A missing field counts as an empty list, so it only passes for an empty batch.
    """
    if raw is None or not raw.strip():
        return []
    try:
        titles = json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationError("Titles must be a JSON array") from None
    if not isinstance(titles, list) or not all(title is None or isinstance(title, str) for title in titles):
        raise ValidationError("Titles must be a JSON array of strings")
    return titles
