from __future__ import annotations

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _as_int(value: str | None, default: int) -> int:
    try:
        return int(value) if value is not None else default
    except Exception:
        return default


def _as_list(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class AppSettings:
    app_name: str
    site_url: str
    enable_job: bool
    auto_reload: bool
    threads: int
    port: int
    debug: bool
    log_level: str
    log_file: str
    cors_origins: list[str]
    otp_resend_seconds: int
    lifecycle_hot_days: int
    lifecycle_archive_days: int
    lifecycle_archive_max_views: int
    lifecycle_interval_seconds: int
    upload_max_bytes: int
    comment_max_length: int
    comment_auto_approve: bool
    email_api_url: str
    email_api_key: str
    email_from: str
    superadmin_email: str
    superadmin_password: str
    superadmin_name: str


def load_app_settings() -> AppSettings:
    return AppSettings(
        app_name=os.getenv("APP_NAME", "newsroom-cms"),
        site_url=os.getenv("SITE_URL", "http://localhost:3000").rstrip("/"),
        enable_job=_as_bool(os.getenv("ENABLE_JOB"), True),
        auto_reload=_as_bool(os.getenv("AUTO_RELOAD"), False),
        threads=max(1, _as_int(os.getenv("THREADS"), 1)),
        port=_as_int(os.getenv("PORT"), 5000),
        debug=_as_bool(os.getenv("DEBUG"), False),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_file=os.getenv("LOG_FILE", "./data/logs/newsroom"),
        cors_origins=_as_list(os.getenv("CORS_ORIGINS"), ["*"]),
        otp_resend_seconds=max(0, _as_int(os.getenv("OTP_RESEND_SECONDS"), 60)),
        lifecycle_hot_days=max(1, _as_int(os.getenv("LIFECYCLE_HOT_DAYS"), 7)),
        lifecycle_archive_days=max(
            1, _as_int(os.getenv("LIFECYCLE_ARCHIVE_DAYS"), 90)
        ),
        lifecycle_archive_max_views=_as_int(
            os.getenv("LIFECYCLE_ARCHIVE_MAX_VIEWS"), 100
        ),
        lifecycle_interval_seconds=max(
            60, _as_int(os.getenv("LIFECYCLE_INTERVAL_SECONDS"), 3600)
        ),
        upload_max_bytes=_as_int(os.getenv("UPLOAD_MAX_BYTES"), 5 * 1024 * 1024),
        comment_max_length=_as_int(os.getenv("COMMENT_MAX_LENGTH"), 2000),
        comment_auto_approve=_as_bool(os.getenv("COMMENT_AUTO_APPROVE"), True),
        email_api_url=os.getenv("EMAIL_API_URL", ""),
        email_api_key=os.getenv("EMAIL_API_KEY", ""),
        email_from=os.getenv("EMAIL_FROM", "Newsroom <newsletter@localhost>"),
        superadmin_email=os.getenv("SUPERADMIN_EMAIL", "admin@example.com"),
        superadmin_password=os.getenv("SUPERADMIN_PASSWORD", "admin@12345"),
        superadmin_name=os.getenv("SUPERADMIN_NAME", "Super Admin"),
    )


settings = load_app_settings()
