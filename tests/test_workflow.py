import asyncio

import pytest
from fastapi import HTTPException

from core.articles.model import can_transition
from core.articles.workflow import (
    prepare_content,
    resolve_status,
    stamp_published,
    strip_curator_fields,
    toggle_publish_target,
    unique_slug,
)

WRITER = {"id": "w1", "role": "writer"}
TRUSTED_WRITER = {"id": "w2", "role": "writer", "direct_publish_enabled": True}
EDITOR = {"id": "e1", "role": "editor"}


def test_writer_publish_becomes_review():
    assert resolve_status(WRITER, "published") == "review"


def test_trusted_writer_and_editor_can_publish():
    assert resolve_status(TRUSTED_WRITER, "published") == "published"
    assert resolve_status(EDITOR, "published", "review") == "published"


def test_missing_status_keeps_current():
    assert resolve_status(WRITER, None) == "draft"
    assert resolve_status(WRITER, None, "review") == "review"


def test_writer_cannot_reject():
    with pytest.raises(HTTPException) as exc:
        resolve_status(WRITER, "rejected", "review")
    assert exc.value.status_code == 403


def test_invalid_status_and_transition():
    with pytest.raises(HTTPException) as exc:
        resolve_status(EDITOR, "archived")
    assert exc.value.status_code == 400

    with pytest.raises(HTTPException) as exc:
        resolve_status(EDITOR, "rejected", "draft")
    assert exc.value.detail["message"] == "Cannot change status from draft to rejected"


def test_transition_table():
    assert can_transition("published", "review")
    assert can_transition("inactive", "published")
    assert not can_transition("rejected", "published")
    assert can_transition("draft", "draft")


def test_toggle_publish_target():
    assert toggle_publish_target("published") == "draft"
    assert toggle_publish_target("inactive") == "published"


def test_strip_curator_fields_for_writers():
    data = {"title": "x", "is_featured": True, "is_trending": True}
    assert strip_curator_fields(WRITER, dict(data)) == {"title": "x"}
    assert strip_curator_fields(EDITOR, dict(data)) == data


def test_prepare_content_sanitizes_and_derives_intro():
    data = prepare_content(
        {"content": "<p>Hello world</p><script>x()</script>", "intro": " ", "tags": ["a", " a ", "", "b"]}
    )
    assert "<script" not in data["content"]
    assert data["intro"] == "Hello world"
    assert data["tags"] == ["a", "b"]


def test_prepare_content_keeps_explicit_intro():
    data = prepare_content({"content": "<p>Body</p>", "intro": "Custom"})
    assert data["intro"] == "Custom"


def test_stamp_published_only_first_time():
    assert "published_at" in stamp_published({}, "published", {})
    assert stamp_published({}, "published", {"published_at": "2024-01-01"}) == {}
    assert stamp_published({}, "draft", {}) == {}


def test_unique_slug_appends_suffix():
    taken = {"hello-world", "hello-world-2"}

    async def exists(slug):
        return slug in taken

    assert asyncio.run(unique_slug("Hello, World!", exists)) == "hello-world-3"


def test_unique_slug_rejects_empty():
    async def exists(slug):
        return False

    with pytest.raises(HTTPException):
        asyncio.run(unique_slug("!!!", exists))
