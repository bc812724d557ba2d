"""Per-user ordered image collections.

Every user's uploads carry an ``order`` forming the dense range ``1..N``.
Creation appends, deletion compacts the tail, and rearranging rewrites the
whole permutation. Each structural change runs under the owner's in-process
lock and inside one transaction that starts by locking the owner's row, so
concurrent requests for the same user cannot leave gaps or duplicates.
Media objects are written before the rows that reference them and removed
only after those rows are gone.
"""

import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationError
from app.models.upload import Upload
from app.models.user import User
from app.services.locks import user_lock
from app.services.media import MediaStore

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Image {n}"


@dataclass(frozen=True)
class IncomingFile:
    data: bytes
    content_type: str
    original_name: str = ""


def parse_upload_id(value: str | None, message: str = "Invalid upload id") -> str:
    try:
        return str(uuid.UUID(str(value)))
    except ValueError:
        raise ValidationError(message) from None


class GalleryService:
    def __init__(self, db: Session, media: MediaStore) -> None:
        self.db = db
        self.media = media

    def list_uploads(self, user: User) -> list[Upload]:
        return list(self.db.scalars(select(Upload).where(Upload.owner_id == user.id).order_by(Upload.order)))

    def bulk_upload(self, user: User, files: Sequence[IncomingFile], titles: Sequence[str | None]) -> list[Upload]:
        if not files:
            raise ValidationError("No files uploaded")
        if len(titles) != len(files):
            raise ValidationError("Number of titles must match number of files")

        created: list[Upload] = []
        for index, incoming in enumerate(files, start=1):
            title = (titles[index - 1] or "").strip() or DEFAULT_TITLE.format(n=index)
            stored = self.media.store(incoming.data, incoming.content_type)
            try:
                with user_lock(user.id):
                    self._lock_owner(user.id)
                    upload = Upload(
                        owner_id=user.id,
                        title=title,
                        image_url=stored.url,
                        public_id=stored.public_id,
                        order=self._count(user.id) + 1,
                    )
                    self.db.add(upload)
                    self.db.commit()
            except Exception:
                self.db.rollback()
                self._discard_media(stored.public_id)
                raise
            created.append(upload)
        # Each commit expired the rows created before it; load them before handing them back.
        for upload in created:
            self.db.refresh(upload)
        logger.info("bulk upload stored", extra={"user_id": user.id, "count": len(created)})
        return created

    def edit_upload(self, user: User, upload_id: str, title: str | None = None, file: IncomingFile | None = None) -> Upload:
        upload = self._get_owned(user, parse_upload_id(upload_id))
        if title is not None:
            title = title.strip()
            if not title:
                raise ValidationError("Title cannot be empty")
            upload.title = title

        replaced_public_id = None
        if file is not None:
            stored = self.media.store(file.data, file.content_type)
            replaced_public_id = upload.public_id
            upload.image_url = stored.url
            upload.public_id = stored.public_id
            try:
                self.db.commit()
            except Exception:
                self.db.rollback()
                self._discard_media(stored.public_id)
                raise
        else:
            self.db.commit()

        if replaced_public_id:
            self._discard_media(replaced_public_id)
        self.db.refresh(upload)
        return upload

    def delete_upload(self, user: User, upload_id: str) -> None:
        upload_id = parse_upload_id(upload_id)
        with user_lock(user.id):
            self._lock_owner(user.id)
            upload = self._get_owned(user, upload_id)
            removed_order = upload.order
            public_id = upload.public_id
            self.db.delete(upload)
            self.db.flush()
            self.db.execute(
                update(Upload)
                .where(Upload.owner_id == user.id, Upload.order > removed_order)
                .values(order=Upload.order - 1)
            )
            self.db.commit()
        logger.info("upload deleted", extra={"user_id": user.id, "upload_id": upload_id})
        if public_id:
            self._discard_media(public_id)

    def rearrange(self, user: User, ids: Sequence[str]) -> list[Upload]:
        requested = [parse_upload_id(value, "Invalid order") for value in ids]
        if len(set(requested)) != len(requested):
            raise ValidationError("Invalid order")

        with user_lock(user.id):
            self._lock_owner(user.id)
            owned = {upload.id: upload for upload in self.db.scalars(select(Upload).where(Upload.owner_id == user.id))}
            if len(owned) != len(requested) or any(upload_id not in owned for upload_id in requested):
                self.db.rollback()
                raise ValidationError("Invalid order")
            for position, upload_id in enumerate(requested, start=1):
                owned[upload_id].order = position
            self.db.commit()
        return self.list_uploads(user)

    def _get_owned(self, user: User, upload_id: str) -> Upload:
        upload = self.db.scalar(select(Upload).where(Upload.id == upload_id, Upload.owner_id == user.id))
        if upload is None:
            raise NotFoundError("Upload not found")
        return upload

    def _count(self, user_id: str) -> int:
        return self.db.scalar(select(func.count()).select_from(Upload).where(Upload.owner_id == user_id)) or 0

    def _lock_owner(self, user_id: str) -> None:
        # Row lock on databases that support FOR UPDATE; SQLite already serializes writers.
        self.db.execute(select(User.id).where(User.id == user_id).with_for_update())

    def _discard_media(self, public_id: str) -> None:
        try:
            self.media.delete(public_id)
        except Exception:
            logger.exception("orphaned media object left behind", extra={"public_id": public_id})
