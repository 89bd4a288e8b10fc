from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from core.articles import article_repo
from core.audit import record_audit
from core.auth import get_current_admin, require_permission
from core.common.errors import bad_request, conflict, forbidden, internal_error, not_found
from core.common.log import logger
from core.common.utils.text import is_valid_email, normalize_email
from core.common.utils.timeutil import now_iso
from core.integrations.supabase.auth import auth_manager
from core.users import user_repo, public_user, sort_users
from core.users.model import ROLE_VALUES, UserStatus
from core.users.permissions import can_manage_users, is_superadmin
from core.users.stats import compute_user_stats, resolve_window
from schemas import success_response, serialize
from schemas.user import DirectPublishToggle, PasswordReset, UserCreate, UserUpdate


router = APIRouter(prefix="/users", tags=["后台用户"])

require_user_admin = require_permission(can_manage_users)


def _present(user: Dict[str, Any]) -> Dict[str, Any]:
    return serialize(public_user(user))


async def _get_user(user_id: str) -> Dict[str, Any]:
    user = await user_repo.get_user_by_id(user_id)
    if not user:
        raise not_found("User not found")
    return user


@router.get("", summary="获取后台用户列表")
async def list_users(_current_user: dict = Depends(require_user_admin)):
    try:
        users = sort_users(await user_repo.get_users())
        return success_response([_present(u) for u in users])
    except Exception as e:
        logger.error(f"获取用户列表失败: {e}")
        raise internal_error("Failed to fetch users")


@router.post("", summary="创建后台用户")
async def create_user(
    body: UserCreate,
    current_user: dict = Depends(require_user_admin),
):
    email = normalize_email(body.email)
    if not is_valid_email(email):
        raise bad_request("Invalid email address")
    if body.role not in ROLE_VALUES:
        raise bad_request(f"Invalid role: {body.role}")
    try:
        if await user_repo.get_user_by_email(email):
            raise conflict("A user with this email already exists")

        identity = await auth_manager.admin_create_user(
            email, body.password, {"name": body.name, "role": body.role}
        )
        now = now_iso()
        user = await user_repo.create_user(
            {
                "auth_id": identity["id"],
                "name": body.name.strip(),
                "email": email,
                "role": body.role,
                "status": UserStatus.ACTIVE.value,
                "direct_publish_enabled": False,
                "created_at": now,
                "updated_at": now,
            }
        )
        await record_audit("create", "user", user.get("id"), body.name, current_user, {"role": body.role})
        return success_response(_present(user), message="User created")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"创建后台用户失败: {email} {e}")
        raise internal_error("Failed to create user")


@router.put("/{user_id}", summary="更新后台用户")
async def update_user(
    user_id: str,
    body: UserUpdate,
    current_user: dict = Depends(require_user_admin),
):
    user = await _get_user(user_id)
    data = body.model_dump(exclude_unset=True)
    try:
        if "role" in data:
            if data["role"] not in ROLE_VALUES:
                raise bad_request(f"Invalid role: {data['role']}")
            if user_id == current_user["id"] and data["role"] != user["role"]:
                raise forbidden("You cannot change your own role")
        if "name" in data:
            data["name"] = (data["name"] or "").strip() or user["name"]
        if "email" in data:
            email = normalize_email(data["email"])
            if not is_valid_email(email):
                raise bad_request("Invalid email address")
            if email != user["email"]:
                existing = await user_repo.get_user_by_email(email)
                if existing and existing["id"] != user_id:
                    raise conflict("A user with this email already exists")
                if user.get("auth_id"):
                    await auth_manager.admin_update_user(
                        user["auth_id"], {"email": email, "email_confirm": True}
                    )
            data["email"] = email

        updated = await user_repo.update_user(user_id, data)
        await record_audit("update", "user", user_id, data.get("name", user["name"]), current_user)
        return success_response(_present(updated or {**user, **data}), message="User updated")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"更新后台用户失败: {user_id} {e}")
        raise internal_error("Failed to update user")


@router.patch("/{user_id}/password", summary="重置用户密码")
async def reset_password(
    user_id: str,
    body: PasswordReset,
    current_user: dict = Depends(require_user_admin),
):
    user = await _get_user(user_id)
    if not user.get("auth_id"):
        raise bad_request("Account is not linked to an auth identity")
    await auth_manager.admin_update_user(user["auth_id"], {"password": body.password})
    await record_audit("update", "user", user_id, user["name"], current_user, {"field": "password"})
    return success_response(message="Password updated")


async def _set_status(user_id: str, status: str, current_user: dict) -> Dict[str, Any]:
    user = await _get_user(user_id)
    if user_id == current_user["id"] and status == UserStatus.SUSPENDED.value:
        raise forbidden("You cannot suspend your own account")
    updated = await user_repo.update_user(user_id, {"status": status})
    action = "suspend" if status == UserStatus.SUSPENDED.value else "activate"
    await record_audit(action, "user", user_id, user["name"], current_user)
    return updated or {**user, "status": status}


@router.patch("/{user_id}/suspend", summary="停用用户")
async def suspend_user(user_id: str, current_user: dict = Depends(require_user_admin)):
    user = await _set_status(user_id, UserStatus.SUSPENDED.value, current_user)
    return success_response(_present(user), message="User suspended")


@router.patch("/{user_id}/activate", summary="启用用户")
async def activate_user(user_id: str, current_user: dict = Depends(require_user_admin)):
    user = await _set_status(user_id, UserStatus.ACTIVE.value, current_user)
    return success_response(_present(user), message="User activated")


@router.patch("/{user_id}/direct-publish", summary="设置写手直发权限")
async def toggle_direct_publish(
    user_id: str,
    body: DirectPublishToggle,
    current_user: dict = Depends(require_user_admin),
):
    user = await _get_user(user_id)
    updated = await user_repo.update_user(user_id, {"direct_publish_enabled": body.enabled})
    await record_audit(
        "update", "user", user_id, user["name"], current_user,
        {"directPublishEnabled": body.enabled},
    )
    return success_response(_present(updated or {**user, "direct_publish_enabled": body.enabled}))


@router.delete("/{user_id}", summary="删除后台用户")
async def delete_user(user_id: str, current_user: dict = Depends(require_user_admin)):
    if user_id == current_user["id"]:
        raise forbidden("You cannot delete your own account")
    user = await _get_user(user_id)
    try:
        if user.get("auth_id"):
            await auth_manager.admin_delete_user(user["auth_id"])
        await user_repo.delete_user(user_id)
        await record_audit("delete", "user", user_id, user["name"], current_user)
        return success_response(message="User deleted")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"删除后台用户失败: {user_id} {e}")
        raise internal_error("Failed to delete user")


@router.get("/{user_id}/stats", summary="用户产出统计")
async def user_stats(
    user_id: str,
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    is_global: bool = Query(False, alias="global"),
    current_user: dict = Depends(get_current_admin),
):
    # 只能看自己的统计，superadmin 可以看任何人和全站
    if (is_global or user_id != current_user["id"]) and not is_superadmin(current_user):
        raise forbidden("You can only view your own stats")
    try:
        resolve_window(start_date, end_date)
    except ValueError as e:
        raise bad_request(str(e))
    try:
        filters: Dict[str, Any] = {"is_deleted": False}
        if not is_global:
            await _get_user(user_id)
            filters["author_id"] = user_id
        rows = await article_repo.get_stats_rows(filters)
        return success_response(compute_user_stats(rows, start_date, end_date))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"获取用户统计失败: {user_id} {e}")
        raise internal_error("Failed to fetch user stats")
