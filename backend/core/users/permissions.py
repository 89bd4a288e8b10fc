"""后台角色能力判断。

所有函数接收 users 表中的一行（dict），None 视为未登录。
"""

from typing import Any, Dict, Optional

from core.users.model import AdminRole

User = Optional[Dict[str, Any]]


def _role(user: User) -> str:
    return (user or {}).get("role") or ""


def is_superadmin(user: User) -> bool:
    return _role(user) == AdminRole.SUPERADMIN.value


def is_curator(user: User) -> bool:
    """编辑及以上：首页编排、推荐/热门标记、分类标签、评论审核、稿件审批"""
    return _role(user) in (AdminRole.SUPERADMIN.value, AdminRole.EDITOR.value)


def is_writer(user: User) -> bool:
    return _role(user) == AdminRole.WRITER.value


def can_publish(user: User) -> bool:
    if is_curator(user):
        return True
    return is_writer(user) and bool((user or {}).get("direct_publish_enabled"))


def can_manage_users(user: User) -> bool:
    return is_superadmin(user)


can_manage_lifecycle = is_superadmin
can_manage_subscribers = is_superadmin
can_view_audit = is_superadmin
can_edit_settings = is_superadmin
can_send_newsletter = is_superadmin


def can_edit_article(user: User, article: Dict[str, Any]) -> bool:
    """写手只能编辑自己的稿件"""
    if is_curator(user):
        return True
    return is_writer(user) and article.get("author_id") == (user or {}).get("id")
