from enum import Enum


class AdminRole(str, Enum):
    WRITER = "writer"
    EDITOR = "editor"
    SUPERADMIN = "superadmin"


class UserStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


# 用户列表排序：superadmin -> editor -> writer
ROLE_ORDER = {
    AdminRole.SUPERADMIN.value: 0,
    AdminRole.EDITOR.value: 1,
    AdminRole.WRITER.value: 2,
}

ROLE_VALUES = frozenset(ROLE_ORDER)

# 返回给前端时剔除的内部字段
PRIVATE_FIELDS = ("auth_id",)


def public_user(user: dict) -> dict:
    return {k: v for k, v in user.items() if k not in PRIVATE_FIELDS}


def sort_users(users: list[dict]) -> list[dict]:
    return sorted(
        users,
        key=lambda u: (ROLE_ORDER.get(u.get("role", ""), 99), (u.get("name") or "").lower()),
    )
