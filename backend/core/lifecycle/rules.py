"""文章生命周期：hot（近期发布）/ cold / archive。"""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from core.articles.model import ArticleStatus, LifecycleStage
from core.common.utils.timeutil import parse_datetime, utcnow


def stage_for(
    article: Dict[str, Any], hot_days: int, now: Optional[datetime] = None
) -> str:
    """计算文章应处的阶段，已归档的保持 archive"""
    if article.get("lifecycle_stage") == LifecycleStage.ARCHIVE.value:
        return LifecycleStage.ARCHIVE.value
    published = parse_datetime(article.get("published_at"))
    if published is None:
        return LifecycleStage.HOT.value
    now = now or utcnow()
    if now - published <= timedelta(days=hot_days):
        return LifecycleStage.HOT.value
    return LifecycleStage.COLD.value


def is_archive_candidate(
    article: Dict[str, Any],
    archive_days: int,
    max_views: int,
    now: Optional[datetime] = None,
) -> bool:
    """已发布、未归档、发布超过 archive_days 天且浏览量低于 max_views"""
    if article.get("status") != ArticleStatus.PUBLISHED.value:
        return False
    if article.get("is_deleted"):
        return False
    if article.get("lifecycle_stage") == LifecycleStage.ARCHIVE.value:
        return False
    published = parse_datetime(article.get("published_at"))
    if published is None:
        return False
    now = now or utcnow()
    if now - published < timedelta(days=archive_days):
        return False
    return int(article.get("views") or 0) < max_views


def cutoff(days: int, now: Optional[datetime] = None) -> str:
    return ((now or utcnow()) - timedelta(days=days)).isoformat()
