"""文章输出：填充分类 / 作者引用，补充阅读时长。"""

from typing import Any, Dict, List

from core.articles.content_format import read_time
from core.categories import category_repo
from core.users import public_user, user_repo
from schemas.base import serialize


def _ref(row: Dict[str, Any], key: str, lookup: Dict[str, Dict[str, Any]]):
    ref_id = row.get(key)
    if not ref_id:
        return None
    return serialize(lookup[ref_id]) if ref_id in lookup else {"_id": ref_id}


async def present_articles(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """批量查询引用，避免逐条请求"""
    if not rows:
        return []
    category_ids = list({r["category_id"] for r in rows if r.get("category_id")})
    user_ids = list(
        {r[k] for r in rows for k in ("author_id", "editor_id") if r.get(k)}
    )
    categories = {c["id"]: c for c in await category_repo.get_categories_by_ids(category_ids)}
    users = {
        u["id"]: public_user(u) for u in await user_repo.get_users_by_ids(user_ids)
    }

    items = []
    for row in rows:
        item = serialize(
            {k: v for k, v in row.items() if k not in ("category_id", "author_id", "editor_id")}
        )
        item["category"] = _ref(row, "category_id", categories)
        item["author"] = _ref(row, "author_id", users)
        item["editor"] = _ref(row, "editor_id", users)
        if row.get("content") is not None:
            item["readTime"] = read_time(row["content"])
        items.append(item)
    return items


async def present_article(row: Dict[str, Any]) -> Dict[str, Any]:
    return (await present_articles([row]))[0]
