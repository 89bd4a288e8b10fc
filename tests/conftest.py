from typing import Any, Dict, Optional

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

import apis.reader
from core.articles import article_repo
from core.audit import audit_repo
from core.categories import category_repo
from core.comments import comment_repo
from core.common.utils.timeutil import now_iso
from core.homepage import homepage_repo
from core.integrations.supabase.auth import auth_manager
from core.readers import OtpThrottle, reader_repo
from core.site_config import site_config_repo
from core.tags import tag_repo
from core.users import user_repo
from fakes import VALID_OTP, FakeSupabase
from web import app

REPOS = (
    article_repo,
    audit_repo,
    category_repo,
    comment_repo,
    homepage_repo,
    reader_repo,
    site_config_repo,
    tag_repo,
    user_repo,
)



class FakeAuth:
    """替代 Supabase Auth：token 形如 token-<email>"""

    def __init__(self):
        self.passwords: Dict[str, str] = {}
        self.otp_sent: list = []
        self.google_users: Dict[str, Dict[str, Any]] = {}
        self.updates: list = []
        self.deleted: list = []

    def token_for(self, email: str) -> str:
        return f"token-{email}"

    async def get_user_by_token(self, token: str) -> Optional[Dict[str, Any]]:
        if not token.startswith("token-"):
            return None
        email = token[len("token-"):]
        return {"id": f"auth-{email}", "email": email}

    async def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        if self.passwords.get(email) != password:
            raise HTTPException(status_code=401, detail="Invalid email or password")
        return {
            "user": {"id": f"auth-{email}", "email": email},
            "session": {"access_token": self.token_for(email)},
        }

    async def send_email_otp(self, email: str) -> None:
        self.otp_sent.append(email)

    async def verify_email_otp(self, email: str, otp: str) -> Dict[str, Any]:
        if otp != VALID_OTP:
            raise HTTPException(status_code=400, detail="Invalid or expired verification code")
        return {
            "user": {"id": f"auth-{email}", "email": email},
            "session": {"access_token": self.token_for(email)},
        }

    async def sign_in_with_google(self, id_token: str) -> Dict[str, Any]:
        identity = self.google_users.get(id_token)
        if not identity:
            raise HTTPException(status_code=401, detail="Google authentication failed")
        return {"user": identity, "session": {"access_token": self.token_for(identity["email"])}}

    async def admin_create_user(self, email, password, metadata=None) -> Dict[str, Any]:
        self.passwords[email] = password
        return {"id": f"auth-{email}", "email": email, "user_metadata": metadata or {}}

    async def admin_update_user(self, auth_id: str, attributes: Dict[str, Any]) -> None:
        self.updates.append((auth_id, attributes))

    async def admin_delete_user(self, auth_id: str) -> None:
        self.deleted.append(auth_id)


@pytest.fixture
def db(monkeypatch):
    fake = FakeSupabase()
    for repo in REPOS:
        monkeypatch.setattr(repo, "client", fake)
    return fake


@pytest.fixture
def auth(monkeypatch):
    fake = FakeAuth()
    for name in (
        "get_user_by_token",
        "sign_in",
        "send_email_otp",
        "verify_email_otp",
        "sign_in_with_google",
        "admin_create_user",
        "admin_update_user",
        "admin_delete_user",
    ):
        monkeypatch.setattr(auth_manager, name, getattr(fake, name))
    return fake


@pytest.fixture
def client(db, auth, monkeypatch):
    monkeypatch.setattr(apis.reader, "otp_throttle", OtpThrottle(60))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_admin(db, auth):
    """创建后台用户，返回 (user, headers)"""

    def _make(role: str = "superadmin", **extra):
        email = extra.pop("email", f"{role}-{len(db.table('users'))}@example.com")
        (user,) = db.seed(
            "users",
            {
                "auth_id": f"auth-{email}",
                "name": extra.pop("name", role.title()),
                "email": email,
                "role": role,
                "status": "active",
                "direct_publish_enabled": False,
                "created_at": now_iso(),
                **extra,
            },
        )
        return user, {"Authorization": f"Bearer {auth.token_for(email)}"}

    return _make


@pytest.fixture
def make_reader(db, auth):
    def _make(**extra):
        email = extra.pop("email", f"reader-{len(db.table('readers'))}@example.com")
        (reader,) = db.seed(
            "readers",
            {
                "email": email,
                "name": extra.pop("name", "Reader"),
                "interests": ["Technology"],
                "is_subscriber": False,
                "is_registered": True,
                "status": "active",
                "created_at": now_iso(),
                **extra,
            },
        )
        return reader, {"Authorization": f"Bearer {auth.token_for(email)}"}

    return _make


@pytest.fixture
def make_article(db):
    def _make(**extra):
        title = extra.pop("title", f"Story {len(db.table('articles')) + 1}")
        (article,) = db.seed(
            "articles",
            {
                "title": title,
                "slug": extra.pop("slug", title.lower().replace(" ", "-")),
                "intro": "",
                "content": "<p>Body text</p>",
                "tags": [],
                "status": "published",
                "views": 0,
                "lifecycle_stage": "hot",
                "is_featured": False,
                "is_trending": False,
                "is_deleted": False,
                "published_at": now_iso(),
                "created_at": now_iso(),
                **extra,
            },
        )
        return article

    return _make
