from fastapi import APIRouter, Depends, HTTPException

from core.articles.present import present_articles
from core.audit import record_audit
from core.auth import require_permission
from core.common.errors import bad_request, internal_error
from core.common.log import logger
from core.lifecycle import archive_articles, archive_candidates, lifecycle_stats
from core.users.permissions import can_manage_lifecycle
from schemas import success_response
from schemas.misc import ArchiveRequest


router = APIRouter(prefix="/lifecycle", tags=["内容生命周期"])

require_lifecycle = require_permission(can_manage_lifecycle)


@router.get("/stats", summary="生命周期统计")
async def get_stats(_current_user: dict = Depends(require_lifecycle)):
    try:
        return success_response(await lifecycle_stats())
    except Exception as e:
        logger.error(f"获取生命周期统计失败: {e}")
        raise internal_error("Failed to fetch lifecycle stats")


@router.get("/candidates", summary="待归档文章")
async def get_candidates(_current_user: dict = Depends(require_lifecycle)):
    try:
        return success_response(await present_articles(await archive_candidates()))
    except Exception as e:
        logger.error(f"获取待归档文章失败: {e}")
        raise internal_error("Failed to fetch archive candidates")


@router.post("/archive", summary="归档文章")
async def archive(body: ArchiveRequest, current_user: dict = Depends(require_lifecycle)):
    if not body.article_ids:
        raise bad_request("No articles selected")
    try:
        count = await archive_articles(body.article_ids)
        await record_audit(
            "archive", "article", None, f"{count} articles", current_user,
            {"articleIds": body.article_ids},
        )
        return success_response({"archived": count}, message=f"{count} articles archived")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"归档文章失败: {e}")
        raise internal_error("Failed to archive articles")
