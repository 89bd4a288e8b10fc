from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from core.articles import article_repo
from core.articles.model import ArticleStatus, LifecycleStage, TRASH, can_transition
from core.articles.present import present_article, present_articles
from core.articles.repo import build_article_filters
from core.articles.workflow import (
    prepare_content,
    resolve_status,
    stamp_published,
    strip_curator_fields,
    toggle_publish_target,
    unique_slug,
)
from core.audit import record_audit
from core.auth import get_current_admin, get_current_admin_optional
from core.categories import category_repo, descendant_ids
from core.comments import comment_repo
from core.common.errors import bad_request, conflict, forbidden, internal_error, not_found
from core.common.log import logger
from core.common.utils.text import slugify, split_keywords
from core.common.utils.timeutil import now_iso
from core.homepage import homepage_repo
from core.readers import reader_repo
from core.users.permissions import (
    can_edit_article,
    can_publish,
    is_curator,
    is_superadmin,
    is_writer,
)
from schemas import success_response, paginated_response
from schemas.article import ArticleCreate, ArticleReview, ArticleUpdate

router = APIRouter(prefix="/articles", tags=["文章管理"])


async def _resolve_category_filter(category: str) -> Optional[List[str]]:
    """分类参数可以是 slug 或 id，结果包含全部子分类；找不到返回 None"""
    categories = await category_repo.get_categories()
    match = next(
        (c for c in categories if c["id"] == category or c.get("slug") == category), None
    )
    if not match:
        return None
    return descendant_ids(categories, match["id"])


async def _check_category(category_id: Optional[str]) -> Optional[str]:
    if not category_id:
        return None
    if not await category_repo.get_category_by_id(category_id):
        raise bad_request("Category not found")
    return category_id


async def _get_editable(article_id: str, user: Dict[str, Any]) -> Dict[str, Any]:
    article = await article_repo.get_article_by_id(article_id)
    if not article:
        raise not_found("Article not found")
    if not can_edit_article(user, article):
        raise forbidden("You can only manage your own articles")
    return article


def _status_changes(data: Dict[str, Any], user: Dict[str, Any], article: Dict[str, Any], status: str):
    """状态变化时附带的字段"""
    data["status"] = status
    stamp_published(data, status, article)
    if status == ArticleStatus.PUBLISHED.value:
        data["editor_id"] = user["id"]
        if article.get("lifecycle_stage") != LifecycleStage.ARCHIVE.value:
            data["lifecycle_stage"] = LifecycleStage.HOT.value
    if status != ArticleStatus.REJECTED.value:
        data["rejection_reason"] = None
    return data


def _status_action(before: str, after: str, default: str = "update") -> str:
    if before != after and after == ArticleStatus.PUBLISHED.value:
        return "publish"
    if before == ArticleStatus.PUBLISHED.value and after != before:
        return "unpublish"
    return default


@router.get("", summary="获取文章列表")
async def list_articles(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    category: Optional[str] = None,
    tag: Optional[str] = None,
    search: Optional[str] = None,
    status: Optional[str] = None,
    is_trending: Optional[bool] = Query(None, alias="isTrending"),
    is_featured: Optional[bool] = Query(None, alias="isFeatured"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    current_user: Optional[dict] = Depends(get_current_admin_optional),
):
    try:
        trash = False
        if current_user is None:
            # 匿名与读者只能看到已发布文章
            status = ArticleStatus.PUBLISHED.value
        elif status == TRASH:
            trash, status = True, None

        category_ids = None
        if category:
            category_ids = await _resolve_category_filter(category)
            if category_ids is None:
                return paginated_response([], 0, page, limit)

        filters = build_article_filters(
            status=status,
            trash=trash,
            category_ids=category_ids,
            tag=tag,
            words=split_keywords(search) if search else None,
            is_trending=is_trending,
            is_featured=is_featured,
            author_id=current_user["id"] if is_writer(current_user) else None,
            start=start_date,
            end=end_date,
        )
        order = "published_at.desc" if current_user is None else "created_at.desc"
        rows, total = await article_repo.list_articles(
            filters, limit=limit, offset=(page - 1) * limit, order_by=order
        )
        return paginated_response(await present_articles(rows), total, page, limit)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"获取文章列表失败: {e}")
        raise internal_error("Failed to fetch articles")


@router.get("/stats", summary="文章统计")
async def article_stats(current_user: dict = Depends(get_current_admin)):
    try:
        filters: Dict[str, Any] = {"is_deleted": False}
        if is_writer(current_user):
            filters["author_id"] = current_user["id"]
        rows = await article_repo.get_stats_rows(filters)
        by_status = Counter(r.get("status") for r in rows)
        return success_response(
            {
                "total": len(rows),
                "published": by_status[ArticleStatus.PUBLISHED.value],
                "drafts": by_status[ArticleStatus.DRAFT.value],
                "review": by_status[ArticleStatus.REVIEW.value],
                "views": sum(int(r.get("views") or 0) for r in rows),
            }
        )
    except Exception as e:
        logger.error(f"获取文章统计失败: {e}")
        raise internal_error("Failed to fetch article stats")


@router.get("/id/{article_id}", summary="按 ID 获取文章（后台编辑）")
async def get_article_by_id(
    article_id: str,
    current_user: dict = Depends(get_current_admin),
):
    article = await _get_editable(article_id, current_user)
    return success_response(await present_article(article))


@router.get("/{article_id}/related", summary="相关文章")
async def related_articles(article_id: str):
    try:
        article = await article_repo.get_article_by_id(article_id)
        if not article:
            raise not_found("Article not found")
        rows = await article_repo.get_related(article, limit=4)
        return success_response(await present_articles(rows))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"获取相关文章失败: {e}")
        raise internal_error("Failed to fetch related articles")


@router.get("/{slug}", summary="按 slug 获取文章")
async def get_article_by_slug(
    slug: str,
    current_user: Optional[dict] = Depends(get_current_admin_optional),
):
    article = await article_repo.get_article_by_slug(slug)
    if not article:
        raise not_found("Article not found")
    published = (
        article.get("status") == ArticleStatus.PUBLISHED.value and not article.get("is_deleted")
    )
    if not published and current_user is None:
        raise not_found("Article not found")

    if published:
        try:
            article["views"] = await article_repo.increment_views(article)
        except Exception as e:
            logger.warning(f"浏览量更新失败: {article['id']} {e}")
    return success_response(await present_article(article))


@router.post("", summary="创建文章")
async def create_article(
    body: ArticleCreate,
    current_user: dict = Depends(get_current_admin),
):
    try:
        data = body.model_dump()
        category_id = await _check_category(data.pop("category", None))
        status = resolve_status(current_user, data.pop("status", None))
        data = prepare_content(strip_curator_fields(current_user, data))

        requested_slug = (data.pop("slug", None) or "").strip()
        if requested_slug:
            slug = slugify(requested_slug)
            if not slug:
                raise bad_request("Invalid slug")
            if await article_repo.slug_exists(slug):
                raise conflict("Slug already exists")
        else:
            slug = await unique_slug(data["title"], article_repo.slug_exists)

        now = now_iso()
        data.update(
            {
                "slug": slug,
                "category_id": category_id,
                "author_id": current_user["id"],
                "views": 0,
                "lifecycle_stage": LifecycleStage.HOT.value,
                "is_deleted": False,
                "created_at": now,
                "updated_at": now,
            }
        )
        _status_changes(data, current_user, {}, status)
        article = await article_repo.create_article(data)

        await record_audit("create", "article", article.get("id"), data["title"], current_user)
        if status == ArticleStatus.PUBLISHED.value:
            await record_audit("publish", "article", article.get("id"), data["title"], current_user)
        message = "Article created"
        if status == ArticleStatus.REVIEW.value:
            message = "Article submitted for review"
        return success_response(await present_article(article), message=message)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"创建文章失败: {e}")
        raise internal_error("Failed to create article")


@router.put("/{article_id}", summary="更新文章")
async def update_article(
    article_id: str,
    body: ArticleUpdate,
    current_user: dict = Depends(get_current_admin),
):
    try:
        article = await _get_editable(article_id, current_user)
        data = body.model_dump(exclude_unset=True)
        is_deleted = data.pop("is_deleted", None)

        if article.get("is_deleted"):
            if is_deleted is not False:
                raise bad_request("Article is in trash, restore it first")
            # 从回收站恢复：统一回到草稿
            restored = await article_repo.update_article(
                article_id,
                {
                    "is_deleted": False,
                    "deleted_at": None,
                    "deleted_by": None,
                    "status": ArticleStatus.DRAFT.value,
                },
            )
            await record_audit(
                "restore", "article", article_id, article.get("title", ""), current_user
            )
            return success_response(
                await present_article(restored or article), message="Article restored"
            )

        if "category" in data:
            data["category_id"] = await _check_category(data.pop("category"))
        status = resolve_status(current_user, data.pop("status", None), article["status"])
        data = prepare_content(strip_curator_fields(current_user, data))

        if "slug" in data:
            slug = slugify(data.get("slug") or data.get("title") or article["title"])
            if not slug:
                raise bad_request("Invalid slug")
            if await article_repo.slug_exists(slug, exclude_id=article_id):
                raise conflict("Slug already exists")
            data["slug"] = slug

        if status != article["status"]:
            _status_changes(data, current_user, article, status)

        updated = await article_repo.update_article(article_id, data)
        action = _status_action(article["status"], status)
        await record_audit(
            action,
            "article",
            article_id,
            data.get("title") or article.get("title", ""),
            current_user,
            {"fields": sorted(k for k in data if k != "updated_at")},
        )
        return success_response(
            await present_article(updated or {**article, **data}), message="Article updated"
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"更新文章失败: {article_id} {e}")
        raise internal_error("Failed to update article")


@router.patch("/{article_id}/publish", summary="发布 / 取消发布")
async def toggle_publish(
    article_id: str,
    current_user: dict = Depends(get_current_admin),
):
    if not can_publish(current_user):
        raise forbidden("You do not have permission to publish")
    article = await _get_editable(article_id, current_user)
    if article.get("is_deleted"):
        raise bad_request("Article is in trash")

    target = toggle_publish_target(article["status"])
    if not can_transition(article["status"], target):
        raise bad_request(f"Cannot change status from {article['status']} to {target}")
    try:
        data = _status_changes({}, current_user, article, target)
        updated = await article_repo.update_article(article_id, data)
        action = _status_action(article["status"], target)
        await record_audit(action, "article", article_id, article.get("title", ""), current_user)
        return success_response(
            await present_article(updated or {**article, **data}),
            message="Article published" if action == "publish" else "Article unpublished",
        )
    except Exception as e:
        logger.error(f"切换发布状态失败: {article_id} {e}")
        raise internal_error("Failed to toggle publish status")


@router.patch("/{article_id}/submit", summary="提交审核")
async def submit_for_review(
    article_id: str,
    current_user: dict = Depends(get_current_admin),
):
    article = await _get_editable(article_id, current_user)
    if article["status"] not in (ArticleStatus.DRAFT.value, ArticleStatus.REJECTED.value):
        raise bad_request("Only drafts or rejected articles can be submitted for review")
    try:
        data = _status_changes({}, current_user, article, ArticleStatus.REVIEW.value)
        updated = await article_repo.update_article(article_id, data)
        await record_audit("submit_review", "article", article_id, article.get("title", ""), current_user)
        return success_response(
            await present_article(updated or {**article, **data}),
            message="Article submitted for review",
        )
    except Exception as e:
        logger.error(f"提交审核失败: {article_id} {e}")
        raise internal_error("Failed to submit article")


@router.patch("/{article_id}/review", summary="审核稿件")
async def review_article(
    article_id: str,
    body: ArticleReview,
    current_user: dict = Depends(get_current_admin),
):
    if not is_curator(current_user):
        raise forbidden("Only editors can review articles")
    article = await article_repo.get_article_by_id(article_id)
    if not article:
        raise not_found("Article not found")
    if article["status"] != ArticleStatus.REVIEW.value:
        raise bad_request("Article is not awaiting review")
    try:
        if body.action == "approve":
            data = _status_changes({}, current_user, article, ArticleStatus.PUBLISHED.value)
        else:
            data = _status_changes({}, current_user, article, ArticleStatus.REJECTED.value)
            data["rejection_reason"] = (body.reason or "").strip() or None
        updated = await article_repo.update_article(article_id, data)
        await record_audit(
            body.action,
            "article",
            article_id,
            article.get("title", ""),
            current_user,
            {"reason": data.get("rejection_reason")} if body.action == "reject" else None,
        )
        return success_response(await present_article(updated or {**article, **data}))
    except Exception as e:
        logger.error(f"审核文章失败: {article_id} {e}")
        raise internal_error("Failed to review article")


@router.delete("/{article_id}", summary="删除文章")
async def delete_article(
    article_id: str,
    current_user: dict = Depends(get_current_admin),
):
    article = await _get_editable(article_id, current_user)
    try:
        if article.get("is_deleted"):
            if not is_superadmin(current_user):
                raise forbidden("Only superadmins can permanently delete articles")
            await comment_repo.delete_article_comments(article_id)
            await reader_repo.remove_article_refs(article_id)
            await homepage_repo.remove_article_refs(article_id)
            await article_repo.delete_article(article_id)
            await record_audit(
                "delete", "article", article_id, article.get("title", ""), current_user
            )
            return success_response(message="Article permanently deleted")

        await article_repo.update_article(
            article_id,
            {"is_deleted": True, "deleted_at": now_iso(), "deleted_by": current_user["id"]},
        )
        await record_audit("soft_delete", "article", article_id, article.get("title", ""), current_user)
        return success_response(message="Article moved to trash")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"删除文章失败: {article_id} {e}")
        raise internal_error("Failed to delete article")
