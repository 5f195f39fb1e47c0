import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.errors import register_exception_handlers
from app.deps import require_director, require_staff
from app.routers import uploads
from app.services import image_storage
from app.services.image_storage import MAX_IMAGE_SIZE_BYTES, StoredImage
from tests.fixtures_data import DIRECTOR, WEBP_BYTES

R2_ENV = {
    "R2_ACCOUNT_ID": "acct",
    "R2_ACCESS_KEY_ID": "key",
    "R2_SECRET_ACCESS_KEY": "secret",
    "R2_BUCKET_NAME": "maloofs",
    "R2_PUBLIC_URL": "https://cdn.example.com/",
}


class FakeR2Client:
    def __init__(self):
        self.uploads = []
        self.deletes = []

    def upload_fileobj(self, fileobj, bucket, key, ExtraArgs=None):
        self.uploads.append((bucket, key, fileobj.read(), ExtraArgs))

    def delete_object(self, Bucket, Key):
        self.deletes.append((Bucket, Key))


@pytest.fixture
def r2_client(monkeypatch):
    for name, value in R2_ENV.items():
        monkeypatch.setenv(name, value)
    client = FakeR2Client()
    monkeypatch.setattr(image_storage, "_get_r2_client", lambda: client)
    return client


def _build_client() -> TestClient:
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(uploads.router)
    app.dependency_overrides[require_staff] = lambda: DIRECTOR
    app.dependency_overrides[require_director] = lambda: DIRECTOR
    return TestClient(app)


def test_upload_image_stores_under_folder(r2_client):
    stored = image_storage.upload_image(WEBP_BYTES, "Dish.WEBP", "/maloofs/menu/")

    bucket, key, content, extra = r2_client.uploads[0]
    assert bucket == "maloofs"
    assert key.startswith("maloofs/menu/")
    assert key.endswith(".webp")
    assert content == WEBP_BYTES
    assert extra == {"ContentType": "image/webp"}
    assert stored == StoredImage(url=f"https://cdn.example.com/{key}", public_id=key)


def test_upload_image_requires_bucket_settings(monkeypatch):
    monkeypatch.delenv("R2_BUCKET_NAME", raising=False)

    with pytest.raises(RuntimeError, match="R2_BUCKET_NAME"):
        image_storage.upload_image(WEBP_BYTES, "a.webp", "uploads")


def test_delete_image_quietly(r2_client, monkeypatch):
    assert image_storage.delete_image_quietly("uploads/a.webp") is True
    assert r2_client.deletes == [("maloofs", "uploads/a.webp")]
    assert image_storage.delete_image_quietly(None) is False

    monkeypatch.delenv("R2_BUCKET_NAME")
    assert image_storage.delete_image_quietly("uploads/b.webp") is False


def test_generic_upload_returns_url_and_public_id(r2_client):
    client = _build_client()

    response = client.post("/api/upload", files={"file": ("photo.webp", WEBP_BYTES, "image/webp")})

    assert response.status_code == 201
    body = response.json()
    assert body["public_id"].startswith("uploads/")
    assert body["url"] == f"https://cdn.example.com/{body['public_id']}"


def test_staff_upload_includes_secure_url(r2_client):
    client = _build_client()

    response = client.post("/api/staff/upload", files={"file": ("chef.webp", WEBP_BYTES, "image/webp")})

    assert response.status_code == 201
    body = response.json()
    assert body["public_id"].startswith("staff/")
    assert body["secure_url"] == body["url"]


def test_upload_without_file_is_400(r2_client):
    client = _build_client()

    response = client.post("/api/upload")

    assert response.status_code == 400
    assert response.json() == {"detail": "No file uploaded"}


def test_upload_rejects_other_formats(r2_client):
    client = _build_client()

    response = client.post("/api/upload", files={"file": ("photo.jpg", b"\xff\xd8\xff", "image/jpeg")})

    assert response.status_code == 400
    assert r2_client.uploads == []


def test_upload_over_limit_is_413(r2_client):
    client = _build_client()
    oversized = b"0" * (MAX_IMAGE_SIZE_BYTES + 1)

    response = client.post("/api/upload", files={"file": ("big.webp", oversized, "image/webp")})

    assert response.status_code == 413
    assert r2_client.uploads == []


def test_storage_failure_is_reported_as_500(monkeypatch):
    def failing_upload(*args, **kwargs):
        raise RuntimeError("Missing required environment variable: R2_BUCKET_NAME")

    monkeypatch.setattr(uploads, "upload_image", failing_upload)
    client = _build_client()

    response = client.post("/api/upload", files={"file": ("photo.webp", WEBP_BYTES, "image/webp")})

    assert response.status_code == 500
    assert response.json() == {"detail": "Image upload failed"}
