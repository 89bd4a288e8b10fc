from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException

from core.articles import article_repo
from core.articles.model import ArticleStatus
from core.articles.present import present_articles
from core.auth import get_current_reader
from core.common.errors import bad_request, forbidden, internal_error, not_found, too_many_requests
from core.common.log import logger
from core.common.utils.text import is_valid_email, normalize_email
from core.common.utils.timeutil import now_iso
from core.integrations.supabase.auth import auth_manager
from core.readers import (
    AuthProvider,
    ReaderStatus,
    dedupe,
    invalid_interests,
    next_onboarding_step,
    otp_throttle,
    reader_repo,
)
from core.site_config import site_config_repo
from schemas import success_response, serialize
from schemas.reader import (
    GoogleLoginRequest,
    ReaderUpdate,
    SendOtpRequest,
    SubscribeRequest,
    VerifyOtpRequest,
)


router = APIRouter(prefix="/readers", tags=["读者"])


def _valid_email(email: str) -> str:
    email = normalize_email(email)
    if not is_valid_email(email):
        raise bad_request("Please enter a valid email address")
    return email


def _clean_interests(interests: Optional[List[str]]) -> Optional[List[str]]:
    if interests is None:
        return None
    interests = dedupe(i.strip() for i in interests if i and i.strip())
    unknown = invalid_interests(interests)
    if unknown:
        raise bad_request(f"Unknown interests: {', '.join(unknown)}")
    return interests


async def _upsert_reader(
    email: str,
    provider: str,
    name: Optional[str] = None,
    interests: Optional[List[str]] = None,
) -> tuple[Dict[str, Any], bool]:
    """登录成功后创建或更新读者记录，返回 (reader, 是否新注册)"""
    reader = await reader_repo.get_reader_by_email(email)
    now = now_iso()
    if reader and reader.get("status") == ReaderStatus.SUSPENDED.value:
        raise forbidden("Account is suspended")

    is_new = reader is None or not reader.get("is_registered")
    data: Dict[str, Any] = {"is_registered": True, "last_login": now}
    if name and name.strip():
        data["name"] = name.strip()
    if interests is not None:
        data["interests"] = interests

    if reader is None:
        data.update(
            {
                "email": email,
                "name": data.get("name", ""),
                "interests": data.get("interests", []),
                "is_subscriber": False,
                "auth_provider": provider,
                "status": ReaderStatus.ACTIVE.value,
                "registered_at": now,
                "created_at": now,
                "updated_at": now,
            }
        )
        return await reader_repo.create_reader(data), True

    if not reader.get("is_registered"):
        data["auth_provider"] = provider
        data["registered_at"] = now
    updated = await reader_repo.update_reader(reader["id"], data)
    return updated or {**reader, **data}, is_new


def _login_payload(token: str, reader: Dict[str, Any], is_new: bool) -> Dict[str, Any]:
    return {
        "token": token,
        "user": serialize(reader),
        "isNewUser": is_new,
        "nextStep": next_onboarding_step(reader),
    }


@router.post("/send-otp", summary="发送登录验证码")
async def send_otp(body: SendOtpRequest):
    email = _valid_email(body.email)
    if not otp_throttle.hit(email):
        wait = otp_throttle.retry_after(email)
        raise too_many_requests(f"Please wait {wait} seconds before requesting a new code")
    try:
        await auth_manager.send_email_otp(email)
    except Exception:
        # 发送失败不占用冷却时间
        otp_throttle.reset(email)
        raise
    return success_response({"email": email}, message="Verification code sent")


@router.post("/verify-otp", summary="校验验证码并登录")
async def verify_otp(body: VerifyOtpRequest):
    email = _valid_email(body.email)
    interests = _clean_interests(body.interests)
    try:
        result = await auth_manager.verify_email_otp(email, body.otp.strip())
        reader, is_new = await _upsert_reader(email, AuthProvider.OTP.value, body.name, interests)
        otp_throttle.reset(email)
        logger.info(f"读者登录成功: {email} new={is_new}")
        return success_response(
            _login_payload(result["session"]["access_token"], reader, is_new),
            message="Login successful",
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"读者验证码登录失败: {email} {e}")
        raise internal_error("Login failed")


@router.post("/google-login", summary="Google 登录")
async def google_login(body: GoogleLoginRequest):
    result = await auth_manager.sign_in_with_google(body.token)
    identity = result["user"]
    email = identity.get("email") or ""
    if not email:
        raise bad_request("Google account has no email address")
    metadata = identity.get("user_metadata") or {}
    try:
        reader = await reader_repo.get_reader_by_email(email)
        # 已有名字时不覆盖
        name = None if reader and reader.get("name") else (
            metadata.get("full_name") or metadata.get("name")
        )
        reader, is_new = await _upsert_reader(email, AuthProvider.GOOGLE.value, name)
        return success_response(
            _login_payload(result["session"]["access_token"], reader, is_new),
            message="Login successful",
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Google 登录失败: {email} {e}")
        raise internal_error("Login failed")


@router.get("/me", summary="获取当前读者")
async def get_me(reader: dict = Depends(get_current_reader)):
    return success_response(serialize(reader))


@router.put("/me", summary="更新读者资料")
async def update_me(body: ReaderUpdate, reader: dict = Depends(get_current_reader)):
    data: Dict[str, Any] = {}
    if body.name is not None:
        data["name"] = body.name.strip()
    interests = _clean_interests(body.interests)
    if interests is not None:
        data["interests"] = interests
    if not data:
        return success_response(serialize(reader))
    updated = await reader_repo.update_reader(reader["id"], data)
    return success_response(serialize(updated or {**reader, **data}), message="Profile updated")


@router.get("/saved-articles", summary="收藏的文章")
async def saved_articles(reader: dict = Depends(get_current_reader)):
    try:
        ids = await reader_repo.get_saved_article_ids(reader["id"])
        rows = await article_repo.get_articles_by_ids(ids)
        visible = {
            r["id"]: r
            for r in rows
            if r.get("status") == ArticleStatus.PUBLISHED.value and not r.get("is_deleted")
        }
        # 保持收藏时间倒序
        ordered = [visible[i] for i in ids if i in visible]
        return success_response(await present_articles(ordered))
    except Exception as e:
        logger.error(f"获取收藏失败: {reader['id']} {e}")
        raise internal_error("Failed to fetch saved articles")


@router.post("/saved-articles/{article_id}", summary="收藏文章")
async def save_article(article_id: str, reader: dict = Depends(get_current_reader)):
    article = await article_repo.get_article_by_id(article_id)
    if not article or article.get("is_deleted"):
        raise not_found("Article not found")
    if not await reader_repo.is_saved(reader["id"], article_id):
        await reader_repo.save_article(reader["id"], article_id)
    return success_response({"articleId": article_id, "saved": True}, message="Article saved")


@router.delete("/saved-articles/{article_id}", summary="取消收藏")
async def unsave_article(article_id: str, reader: dict = Depends(get_current_reader)):
    await reader_repo.unsave_article(reader["id"], article_id)
    return success_response({"articleId": article_id, "saved": False}, message="Article removed")


@router.post("/subscribe", summary="订阅邮件")
async def subscribe(body: SubscribeRequest):
    email = _valid_email(body.email)
    try:
        config = await site_config_repo.get_config()
        if not config["features"].get("enableEmailSubscribe", True):
            raise forbidden("Email subscription is disabled")

        now = now_iso()
        reader = await reader_repo.get_reader_by_email(email)
        if reader is None:
            await reader_repo.create_reader(
                {
                    "email": email,
                    "name": "",
                    "interests": [],
                    "is_subscriber": True,
                    "is_registered": False,
                    "status": ReaderStatus.ACTIVE.value,
                    "subscribed_at": now,
                    "created_at": now,
                    "updated_at": now,
                }
            )
        elif not reader.get("is_subscriber"):
            await reader_repo.update_reader(
                reader["id"], {"is_subscriber": True, "subscribed_at": now}
            )
        else:
            return success_response(message="You are already subscribed")
        return success_response(message="Subscribed successfully")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"订阅失败: {email} {e}")
        raise internal_error("Failed to subscribe")
