from dataclasses import replace

import apis.comment
from core.common.app_settings import settings


def test_post_and_list_comments(client, make_reader, make_article):
    reader, headers = make_reader(name="Ann")
    article = make_article()

    resp = client.post(
        "/api/comments",
        json={"articleId": article["id"], "content": "  **Great** read\nthanks  "},
        headers=headers,
    )
    comment = resp.json()["data"]
    assert resp.status_code == 200
    assert comment["authorName"] == "Ann"
    assert comment["content"] == "**Great** read\nthanks"
    assert comment["contentHtml"] == "<strong>Great</strong> read<br>thanks"
    assert comment["reader"] == reader["id"]
    assert comment["status"] == "approved"

    listed = client.get(f"/api/comments/article/{article['id']}").json()["data"]
    assert [c["_id"] for c in listed] == [comment["_id"]]
    assert listed[0]["hasLiked"] is False


def test_post_comment_validation(client, make_reader, make_article):
    _, headers = make_reader()
    draft = make_article(status="draft")

    resp = client.post("/api/comments", json={"articleId": draft["id"], "content": "hi"}, headers=headers)
    assert resp.status_code == 404

    published = make_article()
    resp = client.post("/api/comments", json={"articleId": published["id"], "content": "   "}, headers=headers)
    assert resp.status_code == 400

    resp = client.post("/api/comments", json={"articleId": published["id"], "content": "hi"})
    assert resp.status_code == 401


def test_comments_disabled(client, db, make_reader, make_article):
    db.seed("site_configs", {"id": "default", "data": {"features": {"enableComments": False}}})
    _, headers = make_reader()
    article = make_article()
    resp = client.post("/api/comments", json={"articleId": article["id"], "content": "hi"}, headers=headers)
    assert resp.status_code == 403


def test_like_toggle(client, db, make_reader, make_article):
    _, headers = make_reader()
    article = make_article()
    (comment,) = db.seed(
        "comments",
        {"article_id": article["id"], "content": "x", "status": "approved", "liked_by": [], "likes": 0},
    )

    resp = client.post(f"/api/comments/{comment['id']}/like", headers=headers)
    assert resp.json()["data"] == {"likes": 1, "hasLiked": True}
    listed = client.get(f"/api/comments/article/{article['id']}", headers=headers).json()["data"]
    assert listed[0]["hasLiked"] is True

    resp = client.post(f"/api/comments/{comment['id']}/like", headers=headers)
    assert resp.json()["data"] == {"likes": 0, "hasLiked": False}


def test_only_owner_edits_or_deletes(client, db, make_reader, make_article):
    owner, owner_headers = make_reader()
    _, other_headers = make_reader()
    article = make_article()
    (comment,) = db.seed(
        "comments",
        {"article_id": article["id"], "reader_id": owner["id"], "content": "x", "status": "approved"},
    )

    resp = client.put(f"/api/comments/{comment['id']}", json={"content": "y"}, headers=other_headers)
    assert resp.status_code == 403

    resp = client.put(f"/api/comments/{comment['id']}", json={"content": "y"}, headers=owner_headers)
    assert resp.json()["data"]["isEdited"] is True
    assert resp.json()["data"]["content"] == "y"

    assert client.delete(f"/api/comments/{comment['id']}", headers=other_headers).status_code == 403
    assert client.delete(f"/api/comments/{comment['id']}", headers=owner_headers).status_code == 200
    assert db.table("comments") == []


def test_admin_moderation(client, db, make_admin, make_article):
    _, writer_headers = make_admin("writer")
    _, headers = make_admin("editor")
    article = make_article(title="Hot take")
    (comment,) = db.seed(
        "comments",
        {"article_id": article["id"], "content": "spam", "status": "approved", "created_at": "2024-01-01"},
    )

    assert client.get("/api/comments/admin/all", headers=writer_headers).status_code == 403

    body = client.get("/api/comments/admin/all", headers=headers).json()
    assert body["total"] == 1
    assert body["data"][0]["article"]["title"] == "Hot take"

    resp = client.patch(
        f"/api/comments/admin/{comment['id']}/status", json={"status": "spam"}, headers=headers
    )
    assert resp.json()["data"]["status"] == "spam"
    assert client.get(f"/api/comments/article/{article['id']}").json()["data"] == []

    resp = client.patch(
        f"/api/comments/admin/{comment['id']}/status", json={"status": "weird"}, headers=headers
    )
    assert resp.status_code == 400

    body = client.get("/api/comments/admin/all", params={"status": "spam"}, headers=headers).json()
    assert body["total"] == 1

    assert client.delete(f"/api/comments/admin/{comment['id']}", headers=headers).status_code == 200
    assert db.table("comments") == []


def test_comments_held_for_moderation(client, monkeypatch, make_admin, make_reader, make_article):
    monkeypatch.setattr(apis.comment, "settings", replace(settings, comment_auto_approve=False))
    _, headers = make_reader()
    _, admin_headers = make_admin("editor")
    article = make_article()

    resp = client.post(
        "/api/comments", json={"articleId": article["id"], "content": "first!"}, headers=headers
    )
    comment = resp.json()["data"]
    assert comment["status"] == "pending"
    assert client.get(f"/api/comments/article/{article['id']}").json()["data"] == []

    pending = client.get(
        "/api/comments/admin/all", params={"status": "pending"}, headers=admin_headers
    ).json()
    assert [c["_id"] for c in pending["data"]] == [comment["_id"]]

    client.patch(
        f"/api/comments/admin/{comment['_id']}/status",
        json={"status": "approved"},
        headers=admin_headers,
    )
    listed = client.get(f"/api/comments/article/{article['id']}").json()["data"]
    assert [c["_id"] for c in listed] == [comment["_id"]]
