import pytest
from fastapi import HTTPException

from core.homepage import normalize_sections, normalize_sub_featured


def test_sub_featured_dedupes():
    assert normalize_sub_featured("h", ["a", "b", "a", ""]) == ["a", "b"]


def test_sub_featured_limit():
    with pytest.raises(HTTPException):
        normalize_sub_featured(None, [str(i) for i in range(7)])
    assert len(normalize_sub_featured(None, [str(i) for i in range(6)])) == 6


def test_hero_cannot_be_sub_featured():
    with pytest.raises(HTTPException) as exc:
        normalize_sub_featured("a", ["a", "b"])
    assert exc.value.status_code == 400


def test_sections_renumbered_in_order():
    sections = normalize_sections(
        [
            {"category_id": "c1", "order": 5},
            {"category_id": "c2", "order": 1, "layout": "list", "id": "keep"},
        ]
    )
    assert [s["category_id"] for s in sections] == ["c2", "c1"]
    assert [s["order"] for s in sections] == [0, 1]
    assert sections[0]["id"] == "keep"
    assert sections[1]["layout"] == "grid"
    assert sections[1]["id"]


def test_sections_reject_bad_layout_and_missing_category():
    with pytest.raises(HTTPException):
        normalize_sections([{"category_id": "c1", "layout": "mosaic"}])
    with pytest.raises(HTTPException):
        normalize_sections([{"layout": "grid"}])
