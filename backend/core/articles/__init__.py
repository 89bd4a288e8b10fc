"""文章领域模块。"""

from core.articles.model import ArticleStatus, LifecycleStage, can_transition
from core.articles.repo import ArticleRepository, build_article_filters
from core.integrations.supabase.client import supabase_client


article_repo = ArticleRepository(supabase_client)

__all__ = [
    "article_repo",
    "ArticleRepository",
    "ArticleStatus",
    "LifecycleStage",
    "build_article_filters",
    "can_transition",
]
