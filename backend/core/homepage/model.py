import uuid
from enum import Enum
from typing import Any, Dict, List, Optional

from core.common.errors import bad_request

HOMEPAGE_ID = "default"
MAX_SUB_FEATURED = 6


class SectionLayout(str, Enum):
    GRID = "grid"
    LIST = "list"
    CAROUSEL = "carousel"


LAYOUT_VALUES = frozenset(s.value for s in SectionLayout)


def default_homepage() -> Dict[str, Any]:
    return {
        "id": HOMEPAGE_ID,
        "hero_article_id": None,
        "sub_featured_article_ids": [],
        "breaking_news": {"active": False, "text": "", "link": ""},
        "sections": [],
        "last_updated": None,
    }


def normalize_sub_featured(
    hero_id: Optional[str], sub_ids: List[str]
) -> List[str]:
    """去重并校验副推荐：最多 6 篇，且不能与头条重复"""
    ids: List[str] = []
    for article_id in sub_ids:
        if article_id and article_id not in ids:
            ids.append(article_id)
    if len(ids) > MAX_SUB_FEATURED:
        raise bad_request(f"At most {MAX_SUB_FEATURED} sub-featured articles are allowed")
    if hero_id and hero_id in ids:
        raise bad_request("Hero article cannot also be a sub-featured article")
    return ids


def normalize_sections(sections: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """按请求顺序重新编号 order（0..n-1），校验布局"""
    ordered = sorted(
        enumerate(sections), key=lambda pair: (pair[1].get("order", pair[0]), pair[0])
    )
    result = []
    for index, (_, section) in enumerate(ordered):
        layout = section.get("layout") or SectionLayout.GRID.value
        if layout not in LAYOUT_VALUES:
            raise bad_request(f"Invalid section layout: {layout}")
        if not section.get("category_id"):
            raise bad_request("Section category is required")
        result.append(
            {
                "id": section.get("id") or str(uuid.uuid4()),
                "category_id": section["category_id"],
                "layout": layout,
                "order": index,
                "active": bool(section.get("active", True)),
            }
        )
    return result
