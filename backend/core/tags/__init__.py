"""标签领域模块。"""

from core.integrations.supabase import supabase_client
from core.tags.repo import TagRepository


tag_repo = TagRepository(supabase_client)

__all__ = ["tag_repo", "TagRepository"]
