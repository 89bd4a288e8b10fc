from typing import Any, Dict, List

from core.articles import article_repo
from core.articles.model import ArticleStatus, LifecycleStage
from core.articles.repo import LIST_COLUMNS
from core.common.app_settings import settings
from core.common.log import logger
from core.lifecycle.rules import cutoff, is_archive_candidate


async def lifecycle_stats() -> Dict[str, int]:
    active = await article_repo.count_articles(
        {"is_deleted": False, "lifecycle_stage": {"neq": LifecycleStage.ARCHIVE.value}}
    )
    archived = await article_repo.count_articles(
        {"is_deleted": False, "lifecycle_stage": LifecycleStage.ARCHIVE.value}
    )
    trash = await article_repo.count_articles({"is_deleted": True})
    return {"active": active, "archived": archived, "trash": trash}


async def archive_candidates() -> List[Dict[str, Any]]:
    """已发布超过归档天数且浏览量低的文章"""
    rows = await article_repo.get_articles(
        filters={
            "status": ArticleStatus.PUBLISHED.value,
            "is_deleted": False,
            "lifecycle_stage": {"neq": LifecycleStage.ARCHIVE.value},
            "published_at": {"lte": cutoff(settings.lifecycle_archive_days)},
            "views": {"lt": settings.lifecycle_archive_max_views},
        },
        columns=LIST_COLUMNS,
        order_by="published_at.asc",
    )
    return [
        r
        for r in rows
        if is_archive_candidate(
            r, settings.lifecycle_archive_days, settings.lifecycle_archive_max_views
        )
    ]


async def archive_articles(article_ids: List[str]) -> int:
    if not article_ids:
        return 0
    rows = await article_repo.update_articles(
        {"id": {"in": list(article_ids)}, "is_deleted": False},
        {"lifecycle_stage": LifecycleStage.ARCHIVE.value},
    )
    logger.info(f"归档文章 {len(rows)} 篇")
    return len(rows)


async def sweep_hot_articles() -> int:
    """把发布超过 hot 天数的文章降为 cold"""
    rows = await article_repo.update_articles(
        {
            "lifecycle_stage": LifecycleStage.HOT.value,
            "status": ArticleStatus.PUBLISHED.value,
            "published_at": {"lt": cutoff(settings.lifecycle_hot_days)},
        },
        {"lifecycle_stage": LifecycleStage.COLD.value},
    )
    if rows:
        logger.info(f"生命周期巡检：{len(rows)} 篇文章转为 cold")
    return len(rows)
