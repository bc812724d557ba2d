import json
import uuid

from app.core.config import get_settings
from conftest import PASSWORD, image_files, login, signup


def _upload(client, count: int, titles=None):
    data = {"titles": json.dumps(titles)} if titles is not None else {}
    return client.post("/uploads", files=image_files(count), data=data)


def _listing(client) -> list[dict]:
    resp = client.get("/uploads")
    assert resp.status_code == 200, resp.text
    return resp.json()["uploads"]


def test_bulk_upload_appends_in_input_order(auth_client, media_store):
    resp = _upload(auth_client, 3, ["first", "second", "third"])

    assert resp.status_code == 201, resp.text
    uploads = resp.json()["uploads"]
    assert [item["order"] for item in uploads] == [1, 2, 3]
    assert [item["title"] for item in uploads] == ["first", "second", "third"]
    assert all(item["imageUrl"].startswith("https://media.test/") for item in uploads)
    assert len(media_store.objects) == 3

    more = _upload(auth_client, 2, ["fourth", "fifth"])
    assert [item["order"] for item in more.json()["uploads"]] == [4, 5]


def test_blank_or_null_titles_fall_back(auth_client):
    resp = _upload(auth_client, 3, ["named", "  ", None])

    assert resp.status_code == 201, resp.text
    assert [item["title"] for item in resp.json()["uploads"]] == ["named", "Image 2", "Image 3"]


def test_missing_titles_field_writes_nothing(auth_client, media_store):
    resp = _upload(auth_client, 3)

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Number of titles must match number of files"
    assert _listing(auth_client) == []
    assert media_store.store_calls == 0


def test_title_count_mismatch_writes_nothing(auth_client, media_store):
    resp = _upload(auth_client, 3, ["one", "two"])

    assert resp.status_code == 400
    assert _listing(auth_client) == []
    assert media_store.store_calls == 0


def test_bulk_upload_validation(auth_client):
    assert auth_client.post("/uploads", data={"titles": "[]"}).status_code == 400
    assert _upload(auth_client, 11).status_code == 400
    assert auth_client.post("/uploads", files=image_files(1, "text/plain")).status_code == 400
    assert auth_client.post("/uploads", files=image_files(1), data={"titles": "not json"}).status_code == 400
    assert _listing(auth_client) == []


def test_oversized_file_is_rejected(auth_client, monkeypatch):
    monkeypatch.setattr(get_settings(), "max_upload_size_mb", 1)
    big = [("images", ("big.png", b"\x00" * (1024 * 1024 + 1), "image/png"))]

    resp = auth_client.post("/uploads", files=big)

    assert resp.status_code == 400
    assert "1MB" in resp.json()["detail"]


def test_media_failure_keeps_committed_progress(auth_client, media_store):
    media_store.fail_on_store_call = 2

    resp = _upload(auth_client, 3, ["a", "b", "c"])

    assert resp.status_code == 500
    assert resp.json()["detail"] == "Internal server error"
    listing = _listing(auth_client)
    assert [(item["title"], item["order"]) for item in listing] == [("a", 1)]


def test_list_is_sorted_by_order(auth_client):
    _upload(auth_client, 3, ["a", "b", "c"])

    assert [item["order"] for item in _listing(auth_client)] == [1, 2, 3]


def test_edit_title_and_image(auth_client, media_store):
    created = _upload(auth_client, 2, ["a", "b"]).json()["uploads"]
    target = created[1]
    old_public_ids = set(media_store.objects)

    resp = auth_client.put(
        f"/uploads/{target['id']}",
        data={"title": "renamed"},
        files={"image": ("new.png", b"new-bytes", "image/png")},
    )

    assert resp.status_code == 200, resp.text
    upload = resp.json()["upload"]
    assert upload["title"] == "renamed"
    assert upload["order"] == 2
    assert upload["imageUrl"] != target["imageUrl"]
    assert len(media_store.deleted) == 1
    assert media_store.deleted[0] in old_public_ids
    assert b"new-bytes" in media_store.objects.values()


def test_edit_title_only_keeps_media(auth_client, media_store):
    target = _upload(auth_client, 1, ["a"]).json()["uploads"][0]

    resp = auth_client.put(f"/uploads/{target['id']}", data={"title": "b"})

    assert resp.status_code == 200
    assert resp.json()["upload"]["imageUrl"] == target["imageUrl"]
    assert media_store.deleted == []


def test_edit_with_failed_upload_keeps_old_image(auth_client, media_store):
    target = _upload(auth_client, 1, ["a"]).json()["uploads"][0]
    media_store.fail_on_store_call = media_store.store_calls + 1

    resp = auth_client.put(f"/uploads/{target['id']}", files={"image": ("new.png", b"x", "image/png")})

    assert resp.status_code == 500
    assert media_store.deleted == []
    assert _listing(auth_client)[0]["imageUrl"] == target["imageUrl"]


def test_edit_and_delete_reject_bad_ids(auth_client):
    missing = str(uuid.uuid4())

    assert auth_client.put("/uploads/not-an-id", data={"title": "x"}).status_code == 400
    assert auth_client.put(f"/uploads/{missing}", data={"title": "x"}).status_code == 404
    assert auth_client.delete("/uploads/undefined").status_code == 400
    assert auth_client.delete(f"/uploads/{missing}").status_code == 404


def test_other_users_uploads_are_not_found(client):
    signup(client)
    login(client)
    target = _upload(client, 1, ["mine"]).json()["uploads"][0]

    client.cookies.clear()
    signup(client, email="b@x.com", phone="2")
    login(client, email="b@x.com")

    assert client.put(f"/uploads/{target['id']}", data={"title": "x"}).status_code == 404
    assert client.delete(f"/uploads/{target['id']}").status_code == 404
    assert _listing(client) == []


def test_delete_compacts_following_orders(auth_client, media_store):
    created = _upload(auth_client, 4, ["a", "b", "c", "d"]).json()["uploads"]

    resp = auth_client.delete(f"/uploads/{created[1]['id']}")

    assert resp.status_code == 200, resp.text
    listing = _listing(auth_client)
    assert [(item["title"], item["order"]) for item in listing] == [("a", 1), ("c", 2), ("d", 3)]
    assert len(media_store.deleted) == 1


def test_delete_succeeds_when_media_cleanup_fails(auth_client, media_store):
    created = _upload(auth_client, 2, ["a", "b"]).json()["uploads"]
    media_store.fail_on_delete = True

    resp = auth_client.delete(f"/uploads/{created[0]['id']}")

    assert resp.status_code == 200
    assert [(item["title"], item["order"]) for item in _listing(auth_client)] == [("b", 1)]


def test_rearrange_applies_full_permutation(auth_client):
    created = _upload(auth_client, 3, ["a", "b", "c"]).json()["uploads"]
    ids = [item["id"] for item in created]

    resp = auth_client.post("/uploads/rearrange", json={"order": [ids[2], ids[0], ids[1]]})

    assert resp.status_code == 200, resp.text
    assert [(item["title"], item["order"]) for item in _listing(auth_client)] == [("c", 1), ("a", 2), ("b", 3)]


def test_rearrange_rejects_incomplete_or_foreign_lists(client):
    signup(client, email="b@x.com", phone="2")
    login(client, email="b@x.com")
    foreign = _upload(client, 1, ["theirs"]).json()["uploads"][0]["id"]
    client.cookies.clear()

    signup(client)
    login(client)
    ids = [item["id"] for item in _upload(client, 3, ["a", "b", "c"]).json()["uploads"]]

    bad_orders = [
        ids[:2],
        [ids[0], ids[1], foreign],
        [ids[0], ids[0], ids[1]],
        [ids[0], ids[1], "null"],
        ids + [foreign],
    ]
    for order in bad_orders:
        resp = client.post("/uploads/rearrange", json={"order": order})
        assert resp.status_code == 400, order
        assert resp.json()["detail"] == "Invalid order"

    assert client.post("/uploads/rearrange", json={"order": "nope"}).status_code == 400
    assert [(item["title"], item["order"]) for item in _listing(client)] == [("a", 1), ("b", 2), ("c", 3)]


def test_uploads_require_session(client):
    resp = client.post("/uploads", files=image_files(1))

    assert resp.status_code == 401
    assert resp.json()["shouldRefresh"] is True


def test_bearer_header_works_without_cookies(client):
    signup(client)
    token = login(client, password=PASSWORD).json()["accessToken"]
    client.cookies.clear()

    resp = client.get("/uploads", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 200
