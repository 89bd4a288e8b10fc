from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from core.articles import article_repo
from core.articles.model import ArticleStatus
from core.articles.present import present_articles
from core.audit import record_audit
from core.auth import require_permission
from core.categories import category_repo
from core.common.errors import bad_request, internal_error
from core.common.log import logger
from core.common.utils.timeutil import now_iso
from core.homepage import homepage_repo, normalize_sections, normalize_sub_featured
from core.users.permissions import is_curator
from schemas import success_response
from schemas.homepage import HomepageUpdate


router = APIRouter(prefix="/homepage", tags=["首页编排"])

require_curator = require_permission(is_curator)


async def _populate(homepage: Dict[str, Any]) -> Dict[str, Any]:
    """填充文章引用，未发布的文章直接丢弃"""
    hero_id = homepage.get("hero_article_id")
    sub_ids: List[str] = homepage.get("sub_featured_article_ids") or []
    ids = ([hero_id] if hero_id else []) + sub_ids
    rows = await article_repo.get_articles_by_ids(ids)
    live = [
        r for r in rows
        if r.get("status") == ArticleStatus.PUBLISHED.value and not r.get("is_deleted")
    ]
    presented = {item["_id"]: item for item in await present_articles(live)}

    category_ids = {c["id"] for c in await category_repo.get_categories()}
    sections = sorted(homepage.get("sections") or [], key=lambda s: s.get("order", 0))
    return {
        "heroArticle": presented.get(hero_id) if hero_id else None,
        "subFeaturedArticles": [presented[i] for i in sub_ids if i in presented],
        "breakingNews": homepage.get("breaking_news")
        or {"active": False, "text": "", "link": ""},
        "sections": [
            {
                "_id": s.get("id"),
                "category": s.get("category_id"),
                "layout": s.get("layout"),
                "order": s.get("order", 0),
                "active": s.get("active", True),
            }
            for s in sections
            if s.get("category_id") in category_ids
        ],
        "lastUpdated": homepage.get("last_updated"),
    }


@router.get("", summary="获取首页配置")
async def get_homepage():
    try:
        return success_response(await _populate(await homepage_repo.get_homepage()))
    except Exception as e:
        logger.error(f"获取首页配置失败: {e}")
        raise internal_error("Failed to fetch homepage")


@router.put("", summary="更新首页配置")
async def update_homepage(
    body: HomepageUpdate,
    current_user: dict = Depends(require_curator),
):
    try:
        current = await homepage_repo.get_homepage()
        data: Dict[str, Any] = {}
        fields = body.model_fields_set

        hero_id = current.get("hero_article_id")
        if "hero_article" in fields:
            hero_id = body.hero_article or None
            data["hero_article_id"] = hero_id
        sub_ids = current.get("sub_featured_article_ids") or []
        if "sub_featured_articles" in fields:
            sub_ids = body.sub_featured_articles or []
        sub_ids = normalize_sub_featured(hero_id, sub_ids)
        data["sub_featured_article_ids"] = sub_ids

        wanted = ([hero_id] if hero_id else []) + sub_ids
        if wanted:
            found = {r["id"] for r in await article_repo.get_articles_by_ids(wanted)}
            missing = [i for i in wanted if i not in found]
            if missing:
                raise bad_request(f"Articles not found: {', '.join(missing)}")

        if body.breaking_news is not None:
            data["breaking_news"] = body.breaking_news.model_dump()

        if body.sections is not None:
            raw = []
            for section in body.sections:
                item = section.model_dump(exclude_none=True)
                item["category_id"] = item.pop("category")
                raw.append(item)
            sections = normalize_sections(raw)
            known = {c["id"] for c in await category_repo.get_categories()}
            missing = [s["category_id"] for s in sections if s["category_id"] not in known]
            if missing:
                raise bad_request(f"Categories not found: {', '.join(missing)}")
            data["sections"] = sections

        data["last_updated"] = now_iso()
        data["updated_by"] = current_user["id"]
        saved = await homepage_repo.save_homepage({**current, **data})
        await record_audit("update", "homepage", saved.get("id"), "homepage", current_user)
        return success_response(await _populate(saved), message="Homepage updated")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"更新首页配置失败: {e}")
        raise internal_error("Failed to update homepage")
