from datetime import datetime, timedelta, timezone

from core.lifecycle import is_archive_candidate, stage_for

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


def _published(days_ago, **extra):
    return {
        "status": "published",
        "published_at": (NOW - timedelta(days=days_ago)).isoformat(),
        "views": 0,
        **extra,
    }


def test_stage_for():
    assert stage_for(_published(2), hot_days=7, now=NOW) == "hot"
    assert stage_for(_published(8), hot_days=7, now=NOW) == "cold"
    assert stage_for(_published(1, lifecycle_stage="archive"), hot_days=7, now=NOW) == "archive"
    assert stage_for({"published_at": None}, hot_days=7, now=NOW) == "hot"


def test_archive_candidate():
    assert is_archive_candidate(_published(100, views=5), 90, 100, now=NOW)
    assert not is_archive_candidate(_published(100, views=500), 90, 100, now=NOW)
    assert not is_archive_candidate(_published(10), 90, 100, now=NOW)
    assert not is_archive_candidate(_published(100, status="draft"), 90, 100, now=NOW)
    assert not is_archive_candidate(_published(100, is_deleted=True), 90, 100, now=NOW)
    assert not is_archive_candidate(
        _published(100, lifecycle_stage="archive"), 90, 100, now=NOW
    )
