import os
import uuid
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["ENVIRONMENT"] = "test"
os.environ["AUTO_CREATE_TABLES"] = "true"
os.environ["ACCESS_TOKEN_SECRET"] = "test-access-secret"
os.environ["REFRESH_TOKEN_SECRET"] = "test-refresh-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["CLOUDINARY_CLOUD_NAME"] = "test-cloud"
os.environ["CLOUDINARY_API_KEY"] = "test-key"
os.environ["CLOUDINARY_API_SECRET"] = "test-secret"

from app.core.errors import MediaStoreError
from app.core.security import hash_password
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.main import create_app
from app.models.user import User
from app.services.media import StoredMedia, get_media_store

PASSWORD = "Aa1!aaaa"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class FakeMediaStore:
    """In-memory stand-in for the hosted media provider."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.store_calls = 0
        self.fail_on_store_call: int | None = None
        self.fail_on_delete = False

    def store(self, data: bytes, content_type: str) -> StoredMedia:
        self.store_calls += 1
        if self.fail_on_store_call == self.store_calls:
            raise MediaStoreError("Image upload failed")
        public_id = f"user_uploads/{uuid.uuid4().hex}"
        self.objects[public_id] = data
        return StoredMedia(url=f"https://media.test/{public_id}.png", public_id=public_id)

    def delete(self, public_id: str) -> None:
        if self.fail_on_delete:
            raise MediaStoreError("Image delete failed")
        self.deleted.append(public_id)
        self.objects.pop(public_id, None)


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    path = Path("test.db")
    if path.exists():
        path.unlink()


@pytest.fixture()
def media_store() -> FakeMediaStore:
    return FakeMediaStore()


@pytest.fixture()
def client(media_store):
    app = create_app()
    app.dependency_overrides[get_media_store] = lambda: media_store
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture()
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def make_user(db_session):
    def _make_user(email: str = "a@x.com", phone: str = "1", password: str = PASSWORD) -> User:
        user = User(name="A", phone=phone, email=email, password_hash=hash_password(password))
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


def signup(client, email: str = "a@x.com", phone: str = "1", password: str = PASSWORD):
    return client.post(
        "/signup",
        json={
            "name": "A",
            "phone": phone,
            "email": email,
            "password": password,
            "confirmPassword": password,
        },
    )


def login(client, password: str = PASSWORD, **identifier):
    if not identifier:
        identifier = {"email": "a@x.com"}
    return client.post("/login", json={**identifier, "password": password})


@pytest.fixture()
def auth_client(client):
    assert signup(client).status_code == 201
    assert login(client).status_code == 200
    return client


def image_files(count: int, content_type: str = "image/png") -> list:
    return [("images", (f"photo{index}.png", PNG_BYTES, content_type)) for index in range(1, count + 1)]
