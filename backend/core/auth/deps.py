"""FastAPI 依赖：解析 Bearer Token，得到后台用户或读者。"""

from typing import Any, Callable, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.common.errors import forbidden, unauthorized
from core.integrations.supabase.auth import auth_manager
from core.readers import reader_repo
from core.readers.model import ReaderStatus
from core.users import user_repo
from core.users.model import UserStatus

security = HTTPBearer(auto_error=False)


async def get_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """优先取 Authorization 头；CSV 导出等浏览器直链场景允许 ?token="""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.query_params.get("token") or None


async def get_identity(
    token: Optional[str] = Depends(get_token),
) -> Optional[Dict[str, Any]]:
    if not token:
        return None
    # get_user_by_token 内部已处理异常并返回 None
    return await auth_manager.get_user_by_token(token)


async def get_current_admin(
    identity: Optional[Dict[str, Any]] = Depends(get_identity),
) -> Dict[str, Any]:
    """获取当前后台用户（必须登录且账号正常）"""
    if not identity:
        raise unauthorized("Not authenticated")
    user = await user_repo.get_user_by_email(identity["email"])
    if not user:
        raise unauthorized("Admin account not found")
    if user.get("status") == UserStatus.SUSPENDED.value:
        raise forbidden("Account is suspended")
    return user


async def get_current_admin_optional(
    identity: Optional[Dict[str, Any]] = Depends(get_identity),
) -> Optional[Dict[str, Any]]:
    """可选地获取后台用户（匿名或读者返回 None）"""
    if not identity:
        return None
    user = await user_repo.get_user_by_email(identity["email"])
    if not user or user.get("status") != UserStatus.ACTIVE.value:
        return None
    return user


def require_permission(check: Callable[[Dict[str, Any]], bool]):
    """按 core.users.permissions 中的能力函数校验后台用户"""

    async def _require(user: Dict[str, Any] = Depends(get_current_admin)) -> Dict[str, Any]:
        if not check(user):
            raise forbidden("Permission denied")
        return user

    return _require


async def get_current_reader(
    identity: Optional[Dict[str, Any]] = Depends(get_identity),
) -> Dict[str, Any]:
    """获取当前读者；Token 有效但读者记录不存在时固定返回 Reader not found"""
    if not identity:
        raise unauthorized("Not authenticated")
    reader = await reader_repo.get_reader_by_email(identity["email"])
    if not reader:
        raise unauthorized("Reader not found")
    if reader.get("status") == ReaderStatus.SUSPENDED.value:
        raise forbidden("Account is suspended")
    return reader


async def get_current_reader_optional(
    identity: Optional[Dict[str, Any]] = Depends(get_identity),
) -> Optional[Dict[str, Any]]:
    if not identity:
        return None
    reader = await reader_repo.get_reader_by_email(identity["email"])
    if not reader or reader.get("status") == ReaderStatus.SUSPENDED.value:
        return None
    return reader
