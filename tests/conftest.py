from __future__ import annotations

import base64
import io

import pytest
from PIL import Image

from hoaxify.core import config as core_config
from hoaxify.core.security import hash_password
from hoaxify.db import models
from hoaxify.db import session as db_session
from hoaxify.repositories.sql_repository import SQLRepository

PASSWORD = "P4ssword"


@pytest.fixture()
def db_env(tmp_path, monkeypatch):
    """Configure a temporary SQLite database and upload folder, resetting settings/engine caches."""
    db_file = tmp_path / "test.db"
    upload_dir = tmp_path / "upload-test"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    monkeypatch.setenv("UPLOAD_DIR", str(upload_dir))
    monkeypatch.setenv("PROFILE_DIR", "profile")
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]

    engine = db_session.get_engine()
    models.Base.metadata.drop_all(bind=engine)
    db_session.create_all()

    yield core_config.get_settings()

    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
def repo(db_env):
    return SQLRepository()


@pytest.fixture()
def add_user(repo):
    """Insert a user with a known password; returns the stored row."""
    def _add(username="user1", email="user1@mail.com", password=PASSWORD, inactive=False):
        return repo.create_user(username, email, hash_password(password), inactive=inactive)

    return _add


def _encode(img: Image.Image, fmt: str) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture(scope="session")
def jpeg_bytes() -> bytes:
    return _encode(Image.new("RGB", (16, 16), (200, 30, 30)), "JPEG")


@pytest.fixture(scope="session")
def png_bytes() -> bytes:
    return _encode(Image.new("RGBA", (16, 16), (30, 200, 30, 255)), "PNG")


@pytest.fixture(scope="session")
def gif_bytes() -> bytes:
    return _encode(Image.new("P", (16, 16)), "GIF")


PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n"
TXT_BYTES = b"just some plain text, not an image\n"


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")
