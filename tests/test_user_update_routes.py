from __future__ import annotations

import base64
import time

import pytest
from fastapi.testclient import TestClient

from hoaxify.app import create_app
from hoaxify.services.image_service import MAX_IMAGE_BYTES

from conftest import PASSWORD, PDF_BYTES, TXT_BYTES, b64


@pytest.fixture()
def client(db_env):
    with TestClient(create_app()) as c:
        yield c


@pytest.fixture()
def profile_folder(db_env):
    return db_env.profile_folder


def _token(client, email="user1@mail.com", password=PASSWORD):
    return client.post("/api/1.0/auth", json={"email": email, "password": password}).json().get("token")


def _put(client, user_id, body=None, *, token=None, basic=None, headers=None):
    all_headers = dict(headers or {})
    if token:
        all_headers["Authorization"] = f"Bearer {token}"
    if basic:
        raw = f"{basic[0]}:{basic[1]}".encode()
        all_headers["Authorization"] = "Basic " + base64.b64encode(raw).decode()
    return client.put(f"/api/1.0/users/{user_id}", json=body, headers=all_headers)


def test_forbidden_without_authorization(client):
    response = _put(client, 5)
    assert response.status_code == 403


def test_forbidden_body_is_opaque(client):
    now_ms = int(time.time() * 1000)
    response = _put(client, 5)
    body = response.json()
    assert body["message"] == "You are not authorized to update user"
    assert body["path"] == "/api/1.0/users/5"
    assert body["timestamp"] >= now_ms
    assert set(body) == {"path", "timestamp", "message"}


@pytest.mark.parametrize(
    "language,message",
    [
        ("en", "You are not authorized to update user"),
        ("hi", "आप उपयोगकर्ता को अपडेट करने के लिए अधिकृत नहीं हैं"),
        ("hi-IN,hi;q=0.9,en;q=0.8", "आप उपयोगकर्ता को अपडेट करने के लिए अधिकृत नहीं हैं"),
        ("fr", "You are not authorized to update user"),
    ],
)
def test_forbidden_message_follows_accept_language(client, language, message):
    response = _put(client, 5, headers={"Accept-Language": language})
    assert response.status_code == 403
    assert response.json()["message"] == message


@pytest.mark.parametrize(
    "kwargs",
    [
        {"json": [1, 2]},
        {"json": "text"},
        {"content": b"{not json", "headers": {"Content-Type": "application/json"}},
    ],
)
def test_malformed_body_without_credentials_is_forbidden(client, add_user, kwargs):
    user = add_user()
    response = client.put(f"/api/1.0/users/{user.id}", **kwargs)
    assert response.status_code == 403
    assert response.json()["message"] == "You are not authorized to update user"


def test_malformed_body_from_owner_is_a_validation_failure(client, add_user, repo):
    user = add_user()
    response = _put(client, user.id, [1, 2], token=_token(client))
    assert response.status_code == 400
    assert response.json()["validationErrors"] == {"body": "Request body must be a JSON object"}
    assert repo.find_by_id(user.id).username == "user1"


@pytest.mark.parametrize(
    "basic",
    [("wronguser@mail.com", PASSWORD), ("user1@mail.com", "wrongpassword")],
)
def test_forbidden_with_bad_basic_credentials(client, add_user, basic):
    user = add_user()
    assert _put(client, user.id, {"username": "user1-updated"}, basic=basic).status_code == 403


def test_forbidden_responses_are_indistinguishable(client, add_user):
    u1 = add_user()
    add_user(username="user2", email="user2@mail.com")
    inactive = add_user(username="user3", email="user3@mail.com", inactive=True)
    u2_token = _token(client, "user2@mail.com")

    responses = [
        _put(client, u1.id, {"username": "x-updated"}),
        _put(client, u1.id, {"username": "x-updated"}, token="wrong-token"),
        _put(client, u1.id, {"username": "x-updated"}, token=u2_token),
        _put(client, inactive.id, {"username": "x-updated"}, basic=("user3@mail.com", PASSWORD)),
        _put(client, 9999, {"username": "x-updated"}, token=u2_token),
        _put(client, "abc", {"username": "x-updated"}, token=u2_token),
    ]
    assert {r.status_code for r in responses} == {403}
    assert {r.json()["message"] for r in responses} == {"You are not authorized to update user"}


def test_update_with_basic_credentials(client, add_user, repo):
    user = add_user()
    response = _put(client, user.id, {"username": "user1-updated"}, basic=("user1@mail.com", PASSWORD))
    assert response.status_code == 200
    assert repo.find_by_id(user.id).username == "user1-updated"


def test_end_to_end_owner_updates_and_other_user_is_refused(client, repo):
    client.post("/api/1.0/users", json={"username": "user1", "email": "user1@mail.com", "password": PASSWORD})
    client.post("/api/1.0/users", json={"username": "user2", "email": "user2@mail.com", "password": PASSWORD})
    u1 = repo.find_by_email("user1@mail.com")

    login = client.post("/api/1.0/auth", json={"email": "user1@mail.com", "password": PASSWORD})
    assert login.status_code == 200
    u1_token = login.json()["token"]

    ok = _put(client, u1.id, {"username": "new1"}, token=u1_token)
    assert ok.status_code == 200
    assert ok.json() == {"id": u1.id, "username": "new1", "email": "user1@mail.com", "image": None}
    assert repo.find_by_id(u1.id).username == "new1"

    denied = _put(client, u1.id, {"username": "stolen"}, token=_token(client, "user2@mail.com"))
    assert denied.status_code == 403
    assert repo.find_by_id(u1.id).username == "new1"


def test_image_update_stores_file_and_body_has_only_public_fields(client, add_user, repo, profile_folder, jpeg_bytes):
    user = add_user()
    response = _put(client, user.id, {"username": "user1-updated", "image": b64(jpeg_bytes)}, token=_token(client))
    assert response.status_code == 200
    assert list(response.json()) == ["id", "username", "email", "image"]
    stored = repo.find_by_id(user.id).image
    assert stored and stored == response.json()["image"]
    assert (profile_folder / stored).exists()


def test_second_upload_removes_first_file(client, add_user, profile_folder, jpeg_bytes):
    user = add_user()
    token = _token(client)
    first = _put(client, user.id, {"username": "user1-updated", "image": b64(jpeg_bytes)}, token=token).json()["image"]
    second = _put(client, user.id, {"username": "user1-updated", "image": b64(jpeg_bytes)}, token=token).json()["image"]
    assert not (profile_folder / first).exists()
    assert (profile_folder / second).exists()


def test_username_only_update_keeps_image(client, add_user, repo, profile_folder, png_bytes):
    user = add_user()
    token = _token(client)
    first = _put(client, user.id, {"username": "user1-updated", "image": b64(png_bytes)}, token=token).json()["image"]
    response = _put(client, user.id, {"username": "user1-updated-twice"}, token=token)
    assert response.json()["image"] == first
    assert (profile_folder / first).exists()
    assert repo.find_by_id(user.id).image == first


def test_exactly_two_megabytes_is_ok(client, add_user, jpeg_bytes):
    user = add_user()
    payload = jpeg_bytes + b"a" * (MAX_IMAGE_BYTES - len(jpeg_bytes))
    response = _put(client, user.id, {"username": "user1-updated", "image": b64(payload)}, token=_token(client))
    assert response.status_code == 200


def test_more_than_two_megabytes_is_rejected(client, add_user, repo, profile_folder, jpeg_bytes):
    user = add_user()
    payload = jpeg_bytes + b"a" * (MAX_IMAGE_BYTES + 1 - len(jpeg_bytes))
    response = _put(client, user.id, {"username": "user1-updated", "image": b64(payload)}, token=_token(client))
    assert response.status_code == 400
    assert response.json()["validationErrors"] == {"image": "Your profile image cannot be bigger than 2MB"}
    assert repo.find_by_id(user.id).username == "user1"
    assert list(profile_folder.iterdir()) == []


@pytest.mark.parametrize("kind,status", [("gif", 400), ("pdf", 400), ("txt", 400), ("jpg", 200), ("png", 200)])
def test_upload_status_by_content(client, add_user, gif_bytes, jpeg_bytes, png_bytes, kind, status):
    data = {"gif": gif_bytes, "pdf": PDF_BYTES, "txt": TXT_BYTES, "jpg": jpeg_bytes, "png": png_bytes}[kind]
    user = add_user()
    response = _put(client, user.id, {"username": "user1-updated", "image": b64(data)}, token=_token(client))
    assert response.status_code == status
    if status == 400:
        assert response.json()["validationErrors"] == {"image": "Only JPEG or PNG files are allowed"}


def test_validation_errors_for_fields(client, add_user):
    user = add_user()
    response = _put(client, user.id, {"username": None, "email": "changed@mail.com"}, token=_token(client))
    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Validation Failure"
    assert body["validationErrors"] == {
        "username": "Username cannot be null",
        "email": "E-mail cannot be changed",
    }


def test_stored_image_is_served_with_long_cache(client, add_user, jpeg_bytes):
    user = add_user()
    ref = _put(client, user.id, {"image": b64(jpeg_bytes)}, token=_token(client)).json()["image"]

    response = client.get(f"/images/{ref}")
    assert response.status_code == 200
    assert response.content == jpeg_bytes
    assert "max-age=31536000" in response.headers["cache-control"]


def test_missing_image_is_404(client):
    assert client.get("/images/123455").status_code == 404
