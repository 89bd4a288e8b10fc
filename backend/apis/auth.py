from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from core.audit import record_audit
from core.auth import get_current_admin
from core.common.errors import conflict, forbidden, unauthorized, bad_request
from core.common.log import logger
from core.common.utils.text import is_valid_email, normalize_email
from core.common.utils.timeutil import now_iso
from core.integrations.supabase.auth import auth_manager
from core.users import user_repo, public_user
from core.users.model import UserStatus
from schemas import success_response, error_response, serialize
from schemas.user import LoginRequest, PasswordChange, ProfileUpdate


router = APIRouter(prefix="/auth", tags=["后台认证"])


def _user_payload(user: Dict[str, Any]) -> Dict[str, Any]:
    return serialize(public_user(user))


@router.post("/login", summary="后台登录")
async def login(body: LoginRequest):
    email = normalize_email(body.email)
    try:
        user = await user_repo.get_user_by_email(email)
        if not user:
            raise unauthorized("Invalid email or password")
        if user.get("status") == UserStatus.SUSPENDED.value:
            raise forbidden("Account is suspended")

        try:
            result = await auth_manager.sign_in(email, body.password)
        except HTTPException:
            raise unauthorized("Invalid email or password")

        user = await user_repo.update_user(user["id"], {"last_login": now_iso()}) or user
        await record_audit("login", "user", user["id"], user.get("name", ""), user)
        return success_response(
            {"token": result["session"]["access_token"], "user": _user_payload(user)},
            message="Login successful",
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"后台登录失败: {email} {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_response(code=50001, message="Login failed"),
        )


@router.post("/verify", summary="校验后台 Token")
async def verify(current_user: dict = Depends(get_current_admin)):
    return success_response({"valid": True, "user": _user_payload(current_user)})


@router.get("/me", summary="获取当前后台用户")
async def me(current_user: dict = Depends(get_current_admin)):
    return success_response(_user_payload(current_user))


@router.put("/profile", summary="更新个人资料")
async def update_profile(
    body: ProfileUpdate,
    current_user: dict = Depends(get_current_admin),
):
    try:
        data: Dict[str, Any] = {}
        if body.name is not None:
            data["name"] = body.name.strip()
        if body.email is not None:
            email = normalize_email(body.email)
            if not is_valid_email(email):
                raise bad_request("Invalid email address")
            if email != current_user.get("email"):
                existing = await user_repo.get_user_by_email(email)
                if existing and existing["id"] != current_user["id"]:
                    raise conflict("Email already in use")
                if current_user.get("auth_id"):
                    await auth_manager.admin_update_user(
                        current_user["auth_id"], {"email": email, "email_confirm": True}
                    )
                data["email"] = email
        if not data:
            return success_response(_user_payload(current_user))

        updated = await user_repo.update_user(current_user["id"], data)
        await record_audit(
            "update", "user", current_user["id"], current_user.get("name", ""), current_user
        )
        return success_response(
            _user_payload(updated or {**current_user, **data}), message="Profile updated"
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"更新个人资料失败: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_response(code=50001, message="Failed to update profile"),
        )


@router.put("/password", summary="修改密码")
async def change_password(
    body: PasswordChange,
    current_user: dict = Depends(get_current_admin),
):
    try:
        # 先用旧密码登录一次确认身份
        try:
            await auth_manager.sign_in(current_user["email"], body.current_password)
        except HTTPException:
            raise bad_request("Current password is incorrect")

        if not current_user.get("auth_id"):
            raise bad_request("Account is not linked to an auth identity")
        await auth_manager.admin_update_user(
            current_user["auth_id"], {"password": body.new_password}
        )
        await record_audit(
            "update",
            "user",
            current_user["id"],
            current_user.get("name", ""),
            current_user,
            {"field": "password"},
        )
        return success_response(message="Password updated")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"修改密码失败: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_response(code=50001, message="Failed to update password"),
        )


@router.post("/logout", summary="退出登录")
async def logout():
    # Token 由客户端丢弃，服务端无状态
    return success_response(message="Logged out")
