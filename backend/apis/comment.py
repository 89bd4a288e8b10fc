from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from core.articles import article_repo
from core.articles.model import ArticleStatus
from core.audit import record_audit
from core.auth import get_current_reader, get_current_reader_optional, require_permission
from core.comments import (
    COMMENT_STATUS_VALUES,
    CommentStatus,
    comment_repo,
    render_comment,
    toggle_like,
)
from core.common.app_settings import settings
from core.common.errors import bad_request, forbidden, internal_error, not_found
from core.common.log import logger
from core.common.utils.timeutil import now_iso
from core.site_config import site_config_repo
from core.users.permissions import is_curator
from schemas import paginated_response, success_response, serialize
from schemas.comment import CommentCreate, CommentStatusUpdate, CommentUpdate


router = APIRouter(prefix="/comments", tags=["评论"])

require_curator = require_permission(is_curator)


def _present(comment: Dict[str, Any], reader: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    item = serialize(
        {k: v for k, v in comment.items() if k not in ("article_id", "reader_id")}
    )
    item["article"] = comment.get("article_id")
    item["reader"] = comment.get("reader_id")
    item["contentHtml"] = render_comment(comment.get("content") or "")
    item["hasLiked"] = bool(reader) and reader["id"] in (comment.get("liked_by") or [])
    return item


def _clean_content(content: str) -> str:
    content = (content or "").strip()
    if not content:
        raise bad_request("Comment cannot be empty")
    if len(content) > settings.comment_max_length:
        raise bad_request(
            f"Comment cannot exceed {settings.comment_max_length} characters"
        )
    return content


async def _get_owned(comment_id: str, reader: Dict[str, Any]) -> Dict[str, Any]:
    comment = await comment_repo.get_comment_by_id(comment_id)
    if not comment:
        raise not_found("Comment not found")
    if comment.get("reader_id") != reader["id"]:
        raise forbidden("You can only modify your own comments")
    return comment


@router.get("/article/{article_id}", summary="文章评论列表")
async def article_comments(
    article_id: str,
    reader: Optional[dict] = Depends(get_current_reader_optional),
):
    try:
        comments = await comment_repo.get_article_comments(
            article_id, CommentStatus.APPROVED.value
        )
        return success_response([_present(c, reader) for c in comments])
    except Exception as e:
        logger.error(f"获取评论失败: {article_id} {e}")
        raise internal_error("Failed to fetch comments")


@router.post("", summary="发表评论")
async def post_comment(body: CommentCreate, reader: dict = Depends(get_current_reader)):
    content = _clean_content(body.content)
    try:
        config = await site_config_repo.get_config()
        if not config["features"].get("enableComments", True):
            raise forbidden("Comments are disabled")

        article = await article_repo.get_article_by_id(body.article_id)
        if (
            not article
            or article.get("is_deleted")
            or article.get("status") != ArticleStatus.PUBLISHED.value
        ):
            raise not_found("Article not found")

        author_name = (
            (body.author_name or "").strip()
            or reader.get("name")
            or reader["email"].split("@")[0]
        )
        status = (
            CommentStatus.APPROVED.value
            if settings.comment_auto_approve
            else CommentStatus.PENDING.value
        )
        now = now_iso()
        comment = await comment_repo.create_comment(
            {
                "article_id": article["id"],
                "reader_id": reader["id"],
                "author_name": author_name,
                "content": content,
                "likes": 0,
                "liked_by": [],
                "status": status,
                "is_edited": False,
                "created_at": now,
                "updated_at": now,
            }
        )
        message = "Comment posted"
        if status == CommentStatus.PENDING.value:
            message = "Comment submitted for moderation"
        return success_response(_present(comment, reader), message=message)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"发表评论失败: {body.article_id} {e}")
        raise internal_error("Failed to post comment")


@router.post("/{comment_id}/like", summary="点赞 / 取消点赞")
async def like_comment(comment_id: str, reader: dict = Depends(get_current_reader)):
    comment = await comment_repo.get_comment_by_id(comment_id)
    if not comment or comment.get("status") != CommentStatus.APPROVED.value:
        raise not_found("Comment not found")
    liked_by, has_liked = toggle_like(comment, reader["id"])
    await comment_repo.update_comment(
        comment_id, {"liked_by": liked_by, "likes": len(liked_by)}
    )
    return success_response({"likes": len(liked_by), "hasLiked": has_liked})


@router.put("/{comment_id}", summary="编辑评论")
async def edit_comment(
    comment_id: str,
    body: CommentUpdate,
    reader: dict = Depends(get_current_reader),
):
    comment = await _get_owned(comment_id, reader)
    content = _clean_content(body.content)
    data = {"content": content, "is_edited": True, "edited_at": now_iso()}
    updated = await comment_repo.update_comment(comment_id, data)
    return success_response(_present(updated or {**comment, **data}, reader), message="Comment updated")


@router.delete("/{comment_id}", summary="删除评论")
async def delete_comment(comment_id: str, reader: dict = Depends(get_current_reader)):
    await _get_owned(comment_id, reader)
    await comment_repo.delete_comment(comment_id)
    return success_response(message="Comment deleted")


#! 以下为后台审核接口

@router.get("/admin/all", summary="后台评论列表")
async def admin_comments(
    status: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    _current_user: dict = Depends(require_curator),
):
    if status and status not in COMMENT_STATUS_VALUES:
        raise bad_request(f"Invalid status: {status}")
    try:
        filters = {"status": status} if status else None
        rows, total = await comment_repo.list_comments(
            filters, limit=limit, offset=(page - 1) * limit
        )
        articles = {
            a["id"]: a
            for a in await article_repo.get_articles_by_ids(
                list({r["article_id"] for r in rows if r.get("article_id")})
            )
        }
        items = []
        for row in rows:
            item = _present(row)
            article = articles.get(row.get("article_id"))
            if article:
                item["article"] = {
                    "_id": article["id"],
                    "title": article.get("title"),
                    "slug": article.get("slug"),
                }
            items.append(item)
        return paginated_response(items, total, page, limit)
    except Exception as e:
        logger.error(f"获取后台评论失败: {e}")
        raise internal_error("Failed to fetch comments")


@router.patch("/admin/{comment_id}/status", summary="修改评论状态")
async def set_comment_status(
    comment_id: str,
    body: CommentStatusUpdate,
    current_user: dict = Depends(require_curator),
):
    if body.status not in COMMENT_STATUS_VALUES:
        raise bad_request(f"Invalid status: {body.status}")
    comment = await comment_repo.get_comment_by_id(comment_id)
    if not comment:
        raise not_found("Comment not found")
    updated = await comment_repo.update_comment(comment_id, {"status": body.status})
    await record_audit(
        "update", "comment", comment_id, comment.get("author_name", ""), current_user,
        {"status": body.status},
    )
    return success_response(_present(updated or {**comment, "status": body.status}))


@router.delete("/admin/{comment_id}", summary="后台删除评论")
async def admin_delete_comment(
    comment_id: str,
    current_user: dict = Depends(require_curator),
):
    comment = await comment_repo.get_comment_by_id(comment_id)
    if not comment:
        raise not_found("Comment not found")
    await comment_repo.delete_comment(comment_id)
    await record_audit("delete", "comment", comment_id, comment.get("author_name", ""), current_user)
    return success_response(message="Comment deleted")
