"""分类领域模块。"""

from core.integrations.supabase import supabase_client
from core.categories.repo import CategoryRepository
from core.categories.tree import (
    build_tree,
    descendant_ids,
    sort_categories,
    unknown_ids,
    would_create_cycle,
)


category_repo = CategoryRepository(supabase_client)

__all__ = [
    "category_repo",
    "CategoryRepository",
    "build_tree",
    "descendant_ids",
    "sort_categories",
    "unknown_ids",
    "would_create_cycle",
]
