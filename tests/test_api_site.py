import asyncio
from datetime import timedelta

import pytest

import apis.newsletter
from core.common.utils.timeutil import utcnow
from core.integrations.supabase.storage import supabase_storage_media
from core.lifecycle import sweep_hot_articles


def test_homepage_defaults(client):
    data = client.get("/api/homepage").json()["data"]
    assert data["heroArticle"] is None
    assert data["subFeaturedArticles"] == []
    assert data["breakingNews"] == {"active": False, "text": "", "link": ""}
    assert data["sections"] == []


def test_update_homepage(client, db, make_admin, make_article):
    _, headers = make_admin("editor")
    hero = make_article(title="Hero")
    sub = make_article(title="Sub")
    (category,) = db.seed("categories", {"name": "Tech", "slug": "tech"})

    resp = client.put(
        "/api/homepage",
        json={
            "heroArticle": hero["id"],
            "subFeaturedArticles": [sub["id"], sub["id"]],
            "breakingNews": {"active": True, "text": "Storm warning", "link": "/storm"},
            "sections": [
                {"category": category["id"], "layout": "list", "order": 3},
                {"category": category["id"], "order": 1},
            ],
        },
        headers=headers,
    )
    data = resp.json()["data"]
    assert resp.status_code == 200
    assert data["heroArticle"]["title"] == "Hero"
    assert [a["title"] for a in data["subFeaturedArticles"]] == ["Sub"]
    assert data["breakingNews"]["text"] == "Storm warning"
    assert [(s["layout"], s["order"]) for s in data["sections"]] == [("grid", 0), ("list", 1)]
    assert data["lastUpdated"]

    # 下线的文章不再出现在首页
    db.table("articles")[0]["status"] = "draft"
    data = client.get("/api/homepage").json()["data"]
    assert data["heroArticle"] is None
    assert len(data["subFeaturedArticles"]) == 1

    # 未提交的字段保持不变
    resp = client.put("/api/homepage", json={"breakingNews": {"active": False}}, headers=headers)
    assert len(resp.json()["data"]["sections"]) == 2


def test_homepage_validation(client, make_admin, make_article):
    _, headers = make_admin("editor")
    hero = make_article()
    subs = [make_article()["id"] for _ in range(7)]

    resp = client.put(
        "/api/homepage", json={"heroArticle": hero["id"], "subFeaturedArticles": [hero["id"]]}, headers=headers
    )
    assert resp.status_code == 400

    resp = client.put("/api/homepage", json={"subFeaturedArticles": subs}, headers=headers)
    assert resp.status_code == 400

    resp = client.put("/api/homepage", json={"heroArticle": "ghost"}, headers=headers)
    assert resp.status_code == 400

    resp = client.put("/api/homepage", json={"sections": [{"category": "ghost"}]}, headers=headers)
    assert resp.status_code == 400

    _, writer_headers = make_admin("writer")
    assert client.put("/api/homepage", json={}, headers=writer_headers).status_code == 403


def test_site_config(client, make_admin):
    data = client.get("/api/config").json()["data"]
    assert data["homeLayout"] == {"columns": 3}
    assert all(data["features"].values())

    _, editor_headers = make_admin("editor")
    assert client.put("/api/config", json={}, headers=editor_headers).status_code == 403

    admin, headers = make_admin("superadmin")
    resp = client.put(
        "/api/config",
        json={"features": {"enableComments": False}, "footer": {"copyrightText": "(c) News"}},
        headers=headers,
    )
    data = resp.json()["data"]
    assert data["features"]["enableComments"] is False
    assert data["features"]["enableSearch"] is True
    assert data["footer"]["copyrightText"] == "(c) News"
    assert data["updatedBy"] == admin["id"]

    resp = client.put("/api/config", json={"homeLayout": {"columns": 9}}, headers=headers)
    assert resp.status_code == 400
    assert client.get("/api/config").json()["data"]["features"]["enableComments"] is False


def test_subscribers(client, db, make_admin, make_reader):
    _, headers = make_admin("superadmin")
    sub, _ = make_reader(email="sub@example.com", name="Sub", is_subscriber=True, is_registered=False)
    make_reader(email="member@example.com", name="Member")
    db.seed("saved_articles", {"reader_id": sub["id"], "article_id": "a1"})

    body = client.get("/api/subscribers", params={"type": "subscribers"}, headers=headers).json()
    assert [r["email"] for r in body["data"]] == ["sub@example.com"]
    body = client.get("/api/subscribers", params={"search": "MEM"}, headers=headers).json()
    assert [r["email"] for r in body["data"]] == ["member@example.com"]
    assert client.get("/api/subscribers", params={"type": "vip"}, headers=headers).status_code == 400

    stats = client.get("/api/subscribers/stats", headers=headers).json()["data"]
    assert stats["total"] == 2
    assert stats["subscribers"] == 1
    assert stats["registered"] == 1
    assert stats["newThisWeek"] == 2

    resp = client.patch(f"/api/subscribers/{sub['id']}/suspend", headers=headers)
    assert resp.json()["data"]["status"] == "suspended"
    resp = client.patch(f"/api/subscribers/{sub['id']}/activate", headers=headers)
    assert resp.json()["data"]["status"] == "active"

    assert client.delete(f"/api/subscribers/{sub['id']}", headers=headers).status_code == 200
    assert db.table("saved_articles") == []
    assert client.delete(f"/api/subscribers/{sub['id']}", headers=headers).status_code == 404


def test_export_subscribers_with_query_token(client, make_admin, make_reader):
    _, headers = make_admin("superadmin")
    make_reader(email="sub@example.com", name="Sub", is_subscriber=True, interests=["Sports", "Health"])
    token = headers["Authorization"].split()[1]

    resp = client.get("/api/subscribers/export", params={"token": token})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "subscribers.csv" in resp.headers["content-disposition"]
    lines = resp.text.strip().splitlines()
    assert lines[0].startswith("Email,Name,Subscriber")
    assert lines[1].startswith("sub@example.com,Sub,True")
    assert "Sports; Health" in lines[1]

    assert client.get("/api/subscribers/export").status_code == 401


def test_audit_log_listing(client, make_admin):
    _, headers = make_admin("superadmin")
    client.post("/api/tags", json={"name": "Economy"}, headers=headers)
    client.post("/api/categories", json={"name": "Markets"}, headers=headers)

    body = client.get("/api/audit", headers=headers).json()
    assert body["total"] == 2
    body = client.get("/api/audit", params={"targetType": "tag"}, headers=headers).json()
    assert [log["targetName"] for log in body["data"]] == ["Economy"]
    assert body["data"][0]["performedByRole"] == "superadmin"

    _, editor_headers = make_admin("editor")
    assert client.get("/api/audit", headers=editor_headers).status_code == 403


def test_lifecycle(client, db, make_admin, make_article):
    _, headers = make_admin("superadmin")
    old = (utcnow() - timedelta(days=120)).isoformat()
    stale = make_article(title="Stale", published_at=old, views=3)
    make_article(title="Popular", published_at=old, views=5000)
    make_article(title="Fresh")
    make_article(title="Binned", is_deleted=True)

    stats = client.get("/api/lifecycle/stats", headers=headers).json()["data"]
    assert stats == {"active": 3, "archived": 0, "trash": 1}

    candidates = client.get("/api/lifecycle/candidates", headers=headers).json()["data"]
    assert [a["title"] for a in candidates] == ["Stale"]

    assert client.post("/api/lifecycle/archive", json={"articleIds": []}, headers=headers).status_code == 400
    resp = client.post("/api/lifecycle/archive", json={"articleIds": [stale["id"]]}, headers=headers)
    assert resp.json()["data"] == {"archived": 1}
    assert stale["lifecycle_stage"] == "archive"

    stats = client.get("/api/lifecycle/stats", headers=headers).json()["data"]
    assert stats == {"active": 2, "archived": 1, "trash": 1}


def test_sweep_moves_old_hot_articles_to_cold(db, make_article):
    old = (utcnow() - timedelta(days=30)).isoformat()
    aged = make_article(published_at=old)
    fresh = make_article()
    assert asyncio.run(sweep_hot_articles()) == 1
    assert aged["lifecycle_stage"] == "cold"
    assert fresh["lifecycle_stage"] == "hot"


def test_newsletter(client, monkeypatch, make_admin, make_reader):
    admin, headers = make_admin("superadmin")
    payload = {"subject": "Weekly", "html": "<p>Hello</p>"}

    monkeypatch.setattr(apis.newsletter, "mailer_configured", lambda: False)
    assert client.post("/api/newsletter/send", json=payload, headers=headers).status_code == 400

    sent = []
    queued = []
    monkeypatch.setattr(apis.newsletter, "mailer_configured", lambda: True)
    monkeypatch.setattr(
        apis.newsletter, "send_email", lambda to, subject, html: sent.append((to, subject)) or True
    )
    monkeypatch.setattr(
        apis.newsletter, "send_newsletter", lambda recipients, subject, html: queued.append(recipients)
    )

    resp = client.post("/api/newsletter/test", json=payload, headers=headers)
    assert resp.status_code == 200
    assert sent == [(admin["email"], "[TEST] Weekly")]

    assert client.post("/api/newsletter/send", json=payload, headers=headers).status_code == 400

    make_reader(email="b@example.com", is_subscriber=True)
    make_reader(email="a@example.com", is_subscriber=True)
    make_reader(email="off@example.com", is_subscriber=True, status="suspended")
    make_reader(email="member@example.com")
    resp = client.post("/api/newsletter/send", json=payload, headers=headers)
    assert resp.json()["data"] == {"recipients": 2}
    assert queued == [["a@example.com", "b@example.com"]]


def test_upload(client, monkeypatch, make_admin, make_reader):
    async def fake_upload(path, data, content_type="application/octet-stream"):
        return f"https://cdn.example.com/{path}"

    monkeypatch.setattr(supabase_storage_media, "upload_bytes", fake_upload)
    _, headers = make_admin("writer")
    files = {"image": ("photo.PNG", b"\x89PNG data", "image/png")}

    resp = client.post("/api/upload", params={"folder": "covers"}, files=files, headers=headers)
    url = resp.json()["data"]["url"]
    assert url.startswith("https://cdn.example.com/covers/")
    assert url.endswith(".png")

    _, reader_headers = make_reader()
    assert client.post("/api/upload", files=files, headers=reader_headers).status_code == 200
    assert client.post("/api/upload", files=files).status_code == 401

    resp = client.post("/api/upload", params={"folder": "../etc"}, files=files, headers=headers)
    assert resp.status_code == 400
    text_file = {"image": ("notes.txt", b"hello", "text/plain")}
    assert client.post("/api/upload", files=text_file, headers=headers).status_code == 400
    svg_file = {"image": ("logo.svg", b"<svg onload=\"alert(1)\"/>", "image/svg+xml")}
    assert client.post("/api/upload", files=svg_file, headers=headers).status_code == 400


def test_upload_failure_maps_to_bad_gateway(client, monkeypatch, make_admin):
    async def broken_upload(path, data, content_type="application/octet-stream"):
        raise RuntimeError("storage down")

    monkeypatch.setattr(supabase_storage_media, "upload_bytes", broken_upload)
    _, headers = make_admin("editor")
    files = {"image": ("photo.jpg", b"jpeg", "image/jpeg")}
    resp = client.post("/api/upload", files=files, headers=headers)
    assert resp.status_code == 502
    assert resp.json()["code"] == 50201


def test_subscriber_search_with_reserved_characters(client, make_admin, make_reader):
    _, headers = make_admin("superadmin")
    make_reader(email="smith@example.com", name="Smith, J. (Desk)")
    make_reader(email="other@example.com", name="Other")

    resp = client.get("/api/subscribers", params={"search": "Smith, J. (Desk)"}, headers=headers)
    assert resp.status_code == 200
    assert [r["email"] for r in resp.json()["data"]] == ["smith@example.com"]


def test_export_and_newsletter_reach_past_row_cap(client, db, monkeypatch, make_admin, make_reader):
    _, headers = make_admin("superadmin")
    for i in range(7):
        make_reader(email=f"sub{i}@example.com", is_subscriber=True)
    db.max_rows = db.page_size = 3

    lines = client.get("/api/subscribers/export", headers=headers).text.strip().splitlines()
    assert len(lines) == 8

    queued = []
    monkeypatch.setattr(apis.newsletter, "mailer_configured", lambda: True)
    monkeypatch.setattr(
        apis.newsletter, "send_newsletter", lambda recipients, subject, html: queued.append(recipients)
    )
    payload = {"subject": "Weekly", "html": "<p>Hello</p>"}
    resp = client.post("/api/newsletter/send", json=payload, headers=headers)
    assert resp.json()["data"] == {"recipients": 7}
    assert len(queued[0]) == 7


def test_archive_candidates_past_row_cap(client, db, make_admin, make_article):
    _, headers = make_admin("superadmin")
    old = (utcnow() - timedelta(days=120)).isoformat()
    for _ in range(5):
        make_article(published_at=old, views=0)
    db.max_rows = db.page_size = 2

    candidates = client.get("/api/lifecycle/candidates", headers=headers).json()["data"]
    assert len(candidates) == 5


@pytest.mark.parametrize(
    "method, path",
    [
        ("put", "/api/config"),
        ("get", "/api/subscribers"),
        ("get", "/api/lifecycle/stats"),
        ("post", "/api/newsletter/test"),
        ("get", "/api/users"),
    ],
)
def test_superadmin_only_endpoints(client, make_admin, method, path):
    _, headers = make_admin("editor")
    resp = client.request(method, path, json={}, headers=headers)
    assert resp.status_code == 403
    assert resp.json()["message"] == "Permission denied"
