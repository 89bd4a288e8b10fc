"""后台用户领域模块。"""

from core.integrations.supabase.client import supabase_client
from core.users.repo import UserRepository
from core.users.model import AdminRole, UserStatus, public_user, sort_users


user_repo = UserRepository(supabase_client)

__all__ = ["user_repo", "UserRepository", "AdminRole", "UserStatus", "public_user", "sort_users"]
