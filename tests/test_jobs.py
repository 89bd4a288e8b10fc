import asyncio
from datetime import timedelta

import init_sys
from core.common.app_settings import settings
from core.common.utils.timeutil import utcnow
from jobs import lifecycle as lifecycle_job


def test_run_sweep_once(db, make_article):
    old = (utcnow() - timedelta(days=settings.lifecycle_hot_days + 1)).isoformat()
    article = make_article(published_at=old)
    assert lifecycle_job.run_sweep_once() == 1
    assert article["lifecycle_stage"] == "cold"
    assert lifecycle_job.run_sweep_once() == 0


def test_lifecycle_loop_stops(db, monkeypatch):
    calls = []

    def fake_sweep():
        calls.append(1)
        lifecycle_job.stop_lifecycle_job()
        return 0

    monkeypatch.setattr(lifecycle_job, "run_sweep_once", fake_sweep)
    lifecycle_job._stop_event.clear()
    lifecycle_job.lifecycle_loop(interval=60)
    assert calls == [1]


def test_init_is_idempotent(db, auth):
    asyncio.run(init_sys.init())
    asyncio.run(init_sys.init())

    (admin,) = db.table("users")
    assert admin["role"] == "superadmin"
    assert admin["email"] == settings.superadmin_email.strip().lower()
    assert len(db.table("site_configs")) == 1
    assert len(db.table("homepage_configs")) == 1
    assert db.table("homepage_configs")[0]["id"] == "default"
