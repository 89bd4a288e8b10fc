"""认证依赖模块。"""

from core.auth.deps import (
    get_current_admin,
    get_current_admin_optional,
    get_current_reader,
    get_current_reader_optional,
    get_identity,
    get_token,
    require_permission,
)

__all__ = [
    "get_current_admin",
    "get_current_admin_optional",
    "get_current_reader",
    "get_current_reader_optional",
    "get_identity",
    "get_token",
    "require_permission",
]
