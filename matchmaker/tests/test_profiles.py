"""Tests for profile updates, the user directory, sealed photos and account deletion."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from matchmaker.core.app_factory import create_application
from matchmaker.domain.errors import NotFoundError

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00fake-image-data" * 32


def headers_for(user):
    return {"x-user-id": user["id"]}


def upload(client, data=PNG_BYTES, filename="me.png", content_type="image/png"):
    return client.post("/api/upload", files={"photo": (filename, data, content_type)})


def test_update_applies_allow_listed_fields(client, make_user):
    user = make_user("Aarav", "aarav@example.com")
    response = client.put(
        f"/api/users/{user['id']}",
        json={
            "location": "Pokhara",
            "profession": "Architect",
            "qualities": ["Honest", "Calm"],
            "lookingFor": "Someone kind",
            "showAge": False,
            "email": "hijack@example.com",
            "password": "new-password",
            "is_verified": 0,
        },
        headers=headers_for(user),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["location"] == "Pokhara"
    assert body["profession"] == "Architect"
    assert body["qualities"] == ["Honest", "Calm"]
    assert body["lookingFor"] == "Someone kind"
    assert body["showAge"] == 0
    assert body["email"] == "aarav@example.com"
    assert body["is_verified"] == 1
    assert "password_hash" not in body

    login = client.post("/api/login", json={"email": "aarav@example.com", "password": "password123"})
    assert login.status_code == 200
    assert login.json()["qualities"] == ["Honest", "Calm"]


def test_update_with_no_recognised_fields_is_noop(client, make_user):
    user = make_user("Aarav", "aarav@example.com")
    response = client.put(
        f"/api/users/{user['id']}", json={"email": "x@example.com"}, headers=headers_for(user)
    )
    assert response.status_code == 200
    assert response.json() == {}


def test_update_unknown_user(client):
    response = client.put("/api/users/missing", json={"name": "Ghost"}, headers={"x-user-id": "someone"})
    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}


def test_update_requires_identity(client, make_user):
    user = make_user("Aarav", "aarav@example.com")
    response = client.put(f"/api/users/{user['id']}", json={"name": "Hijacked"})
    assert response.status_code == 401
    assert [item["name"] for item in client.get("/api/users").json()] == ["Aarav"]


def test_update_ignores_null_required_fields(client, make_user):
    user = make_user("Aarav", "aarav@example.com", dob="1990-06-15")
    response = client.put(
        f"/api/users/{user['id']}",
        json={"name": None, "showAge": None, "showPhoto": None},
        headers=headers_for(user),
    )
    assert response.status_code == 200
    assert response.json() == {}

    response = client.put(
        f"/api/users/{user['id']}",
        json={"name": None, "showAge": None, "location": None},
        headers=headers_for(user),
    )
    body = response.json()
    assert body["name"] == "Aarav"
    assert body["showAge"] == 1
    assert body["location"] is None
    assert client.get("/api/users").json()[0]["age"] is not None


def test_signup_null_flags_keep_defaults(client, signup):
    signup("Aarav", "aarav@example.com", showAge=None, showPhoto=None)
    listed = client.get("/api/users").json()[0]
    assert listed["showAge"] == 1
    assert listed["showPhoto"] == 1


def test_directory_hides_private_fields(client, make_user):
    visible = make_user("Aarav", "aarav@example.com", dob="1990-06-15")
    hidden = make_user("Zara", "zara@example.com", dob="1995-01-01")
    client.put(
        f"/api/users/{hidden['id']}",
        json={"showAge": False, "showPhoto": False, "photo": "/api/images/z.png"},
        headers=headers_for(hidden),
    )

    response = client.get("/api/users")
    assert response.status_code == 200
    listing = {item["id"]: item for item in response.json()}
    assert set(listing) == {visible["id"], hidden["id"]}

    today = date.today()
    expected_age = today.year - 1990 - ((today.month, today.day) < (6, 15))
    assert listing[visible["id"]]["age"] == expected_age
    assert listing[visible["id"]]["dob"] == "1990-06-15"

    assert listing[hidden["id"]]["age"] is None
    assert listing[hidden["id"]]["dob"] is None
    assert listing[hidden["id"]]["photo"] is None
    for item in listing.values():
        assert "password_hash" not in item
        assert "verification_code" not in item


def test_photo_is_sealed_on_disk_and_served_decrypted(client, container, make_user):
    user = make_user("Aarav", "aarav@example.com")
    response = upload(client)
    assert response.status_code == 200
    url = response.json()["url"]
    assert url.startswith("/api/images/") and url.endswith(".png")

    stored = container.settings.upload_dir / url.rsplit("/", 1)[1]
    assert stored.is_file()
    assert stored.read_bytes() != PNG_BYTES
    assert PNG_BYTES[:8] not in stored.read_bytes()

    image = client.get(url)
    assert image.status_code == 200
    assert image.content == PNG_BYTES
    assert image.headers["content-type"] == "image/png"

    # Upload does not attach the photo; a profile update does.
    assert client.get("/api/users").json()[0]["photo"] is None
    attached = client.put(f"/api/users/{user['id']}", json={"photo": url}, headers=headers_for(user)).json()
    assert attached["photo"] == url


def test_upload_names_are_unique(client):
    first = upload(client).json()["url"]
    second = upload(client).json()["url"]
    assert first != second


def test_upload_rejects_empty_and_non_image(client):
    assert upload(client, data=b"").status_code == 400
    assert upload(client, data=b"hello", filename="notes.txt", content_type="text/plain").status_code == 400


def test_upload_rejects_oversized_file(app_env):
    app_env.setenv("MAX_UPLOAD_SIZE", "64")
    with TestClient(create_application()) as small_client:
        assert upload(small_client, data=PNG_BYTES[:64]).status_code == 200
        response = upload(small_client, data=PNG_BYTES[:65])
        assert response.status_code == 400
        assert response.json() == {"error": "File too large"}


def test_missing_image_is_not_found(client):
    response = client.get("/api/images/12345-1.png")
    assert response.status_code == 404
    assert "error" in response.json()


def test_corrupted_image_is_server_error(client, container):
    url = upload(client).json()["url"]
    stored = container.settings.upload_dir / url.rsplit("/", 1)[1]
    stored.write_bytes(stored.read_bytes()[:-3])
    response = client.get(url)
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to retrieve image"}


def test_fetch_photo_rejects_path_traversal(client, container, tmp_path):
    (tmp_path / "secret.png").write_bytes(b"outside the upload dir")
    with pytest.raises(NotFoundError):
        container.profile_service.fetch_photo("../secret.png")
    with pytest.raises(NotFoundError):
        container.profile_service.fetch_photo("..")


def test_delete_account_cascades(client, container, make_user):
    a = make_user("Aarav", "aarav@example.com")
    b = make_user("Zara", "zara@example.com")
    url = upload(client).json()["url"]
    client.put(f"/api/users/{a['id']}", json={"photo": url}, headers=headers_for(a))
    photo_path = container.settings.upload_dir / url.rsplit("/", 1)[1]

    ids = []
    for sender, receiver in ((a, b), (b, a)):
        ids.append(
            client.post(
                "/api/messages",
                json={"sender_id": sender["id"], "receiver_id": receiver["id"], "content": "hey"},
            ).json()["id"]
        )

    response = client.delete("/api/me", headers=headers_for(a))
    assert response.status_code == 200

    assert not photo_path.exists()
    for message_id in ids:
        assert container.database.fetch_one("SELECT id FROM messages WHERE id = ?", (message_id,)) is None
    assert [item["id"] for item in client.get("/api/users").json()] == [b["id"]]
    assert client.get("/api/conversations", headers=headers_for(b)).json() == []
    assert client.get(f"/api/messages/{a['id']}", headers=headers_for(b)).json() == []


def test_delete_account_requires_identity(client):
    assert client.delete("/api/me").status_code == 401


def test_api_responses_are_not_cacheable(client):
    response = client.get("/api/users")
    assert "no-store" in response.headers["cache-control"]
    assert response.headers["pragma"] == "no-cache"


def test_unknown_api_route_returns_json_404(client):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert "error" in response.json()
    assert "no-store" in response.headers["cache-control"]


def test_health(client):
    assert client.get("/health").json() == {"ok": True}
