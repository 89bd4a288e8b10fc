"""稿件流转：状态解析、写入前整理、slug 去重。"""

from typing import Any, Awaitable, Callable, Dict, Optional

from core.articles.content_format import derive_intro, sanitize_html
from core.articles.model import ArticleStatus, STATUS_VALUES, can_transition
from core.common.errors import bad_request, forbidden
from core.common.utils.text import slugify
from core.common.utils.timeutil import now_iso
from core.users.permissions import can_publish, is_curator

# 仅编辑及以上可以设置的字段
CURATOR_FIELDS = ("is_featured", "is_trending")


def resolve_status(
    user: Dict[str, Any],
    requested: Optional[str],
    current: Optional[str] = None,
) -> str:
    """根据角色得出最终写入的状态

    没有直发权限的写手请求 published 时转为 review；
    rejected 只能由审核人员设置；非法流转返回 400。
    """
    if not requested:
        return current or ArticleStatus.DRAFT.value
    if requested not in STATUS_VALUES:
        raise bad_request(f"Invalid status: {requested}")

    target = requested
    if target == ArticleStatus.PUBLISHED.value and not can_publish(user):
        target = ArticleStatus.REVIEW.value
    if target == ArticleStatus.REJECTED.value and not is_curator(user):
        raise forbidden("Only editors can reject articles")

    if current and not can_transition(current, target):
        raise bad_request(f"Cannot change status from {current} to {target}")
    return target


def toggle_publish_target(current: str) -> str:
    if current == ArticleStatus.PUBLISHED.value:
        return ArticleStatus.DRAFT.value
    return ArticleStatus.PUBLISHED.value


def strip_curator_fields(user: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
    if is_curator(user):
        return data
    return {k: v for k, v in data.items() if k not in CURATOR_FIELDS}


def prepare_content(data: Dict[str, Any]) -> Dict[str, Any]:
    """清理正文 HTML；摘要为空时从正文截取"""
    if "content" in data:
        data["content"] = sanitize_html(data.get("content") or "")
        if not (data.get("intro") or "").strip():
            data["intro"] = derive_intro(data["content"])
    if "tags" in data:
        seen = []
        for name in data.get("tags") or []:
            name = (name or "").strip()
            if name and name not in seen:
                seen.append(name)
        data["tags"] = seen
    return data


def stamp_published(
    data: Dict[str, Any], status: str, current: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """首次发布时记录 published_at"""
    if status == ArticleStatus.PUBLISHED.value and not (current or {}).get("published_at"):
        data["published_at"] = now_iso()
    return data


async def unique_slug(
    source: str,
    exists: Callable[[str], Awaitable[bool]],
) -> str:
    """生成唯一 slug，冲突时追加 -2、-3 ..."""
    base = slugify(source)
    if not base:
        raise bad_request("Slug could not be derived from title")
    candidate = base
    suffix = 2
    while await exists(candidate):
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate
