from collections import Counter
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from core.articles import article_repo
from core.articles.model import ArticleStatus
from core.audit import record_audit
from core.auth import get_current_admin_optional, require_permission
from core.categories import (
    build_tree,
    category_repo,
    sort_categories,
    unknown_ids,
    would_create_cycle,
)
from core.common.errors import bad_request, conflict, internal_error, not_found
from core.common.log import logger
from core.common.utils.text import slugify
from core.common.utils.timeutil import now_iso
from core.users.permissions import is_curator
from schemas import success_response, serialize
from schemas.category import CategoryCreate, CategoryReorder, CategoryUpdate

router = APIRouter(prefix="/categories", tags=["分类管理"])

require_curator = require_permission(is_curator)


def _present(row: Dict[str, Any], counts: Counter) -> Dict[str, Any]:
    item = serialize({k: v for k, v in row.items() if k not in ("parent_id", "children")})
    item["parent"] = row.get("parent_id")
    item["articleCount"] = counts.get(row["id"], 0)
    if "children" in row:
        item["children"] = [_present(child, counts) for child in row["children"]]
    return item


async def _published_counts() -> Counter:
    rows = await article_repo.get_articles(
        filters={"status": ArticleStatus.PUBLISHED.value, "is_deleted": False},
        columns="category_id",
        order_by="created_at.desc",
    )
    return Counter(r.get("category_id") for r in rows if r.get("category_id"))


@router.get("", summary="获取分类列表")
async def list_categories(
    tree: bool = Query(False),
    current_user: Optional[dict] = Depends(get_current_admin_optional),
):
    try:
        filters = None if current_user else {"is_active": True}
        rows = sort_categories(await category_repo.get_categories(filters))
        counts = await _published_counts()
        if tree:
            return success_response([_present(node, counts) for node in build_tree(rows)])
        return success_response([_present(row, counts) for row in rows])
    except Exception as e:
        logger.error(f"获取分类列表失败: {e}")
        raise internal_error("Failed to fetch categories")


@router.put("/reorder", summary="分类排序")
async def reorder_categories(
    body: CategoryReorder,
    current_user: dict = Depends(require_curator),
):
    try:
        rows = await category_repo.get_categories()
        missing = unknown_ids(rows, [item.id for item in body.categories])
        if missing:
            raise bad_request(f"Unknown categories: {', '.join(missing)}")

        for item in body.categories:
            data = item.model_dump(exclude_unset=True, exclude={"id"})
            await category_repo.update_category(item.id, data)
        await record_audit(
            "update", "category", None, "reorder", current_user,
            {"count": len(body.categories)},
        )
        return success_response(message="Categories reordered")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"分类排序失败: {e}")
        raise internal_error("Failed to reorder categories")


@router.get("/{slug}", summary="按 slug 获取分类")
async def get_category(slug: str):
    category = await category_repo.get_category_by_slug(slug)
    if not category:
        raise not_found("Category not found")
    counts = await _published_counts()
    return success_response(_present(category, counts))


@router.post("", summary="创建分类")
async def create_category(
    body: CategoryCreate,
    current_user: dict = Depends(require_curator),
):
    try:
        data = body.model_dump()
        slug = slugify(data.pop("slug", None) or data["name"])
        if not slug:
            raise bad_request("Invalid slug")
        if await category_repo.slug_exists(slug):
            raise conflict("Category slug already exists")

        parent_id = data.pop("parent", None) or None
        if parent_id and not await category_repo.get_category_by_id(parent_id):
            raise bad_request("Parent category not found")

        now = now_iso()
        data.update(
            {
                "slug": slug,
                "parent_id": parent_id,
                "created_at": now,
                "updated_at": now,
            }
        )
        category = await category_repo.create_category(data)
        await record_audit("create", "category", category.get("id"), data["name"], current_user)
        return success_response(_present(category, Counter()), message="Category created")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"创建分类失败: {e}")
        raise internal_error("Failed to create category")


@router.put("/{category_id}", summary="更新分类")
async def update_category(
    category_id: str,
    body: CategoryUpdate,
    current_user: dict = Depends(require_curator),
):
    try:
        category = await category_repo.get_category_by_id(category_id)
        if not category:
            raise not_found("Category not found")

        data = body.model_dump(exclude_unset=True)
        if "slug" in data:
            slug = slugify(data.get("slug") or data.get("name") or category["name"])
            if not slug:
                raise bad_request("Invalid slug")
            if await category_repo.slug_exists(slug, exclude_id=category_id):
                raise conflict("Category slug already exists")
            data["slug"] = slug

        if "parent" in data:
            parent_id = data.pop("parent") or None
            if parent_id:
                rows = await category_repo.get_categories()
                if not any(r["id"] == parent_id for r in rows):
                    raise bad_request("Parent category not found")
                if would_create_cycle(rows, category_id, parent_id):
                    raise bad_request("A category cannot be nested under itself or its descendants")
            data["parent_id"] = parent_id

        updated = await category_repo.update_category(category_id, data)
        await record_audit(
            "update", "category", category_id, data.get("name") or category["name"], current_user
        )
        counts = await _published_counts()
        return success_response(
            _present(updated or {**category, **data}, counts), message="Category updated"
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"更新分类失败: {category_id} {e}")
        raise internal_error("Failed to update category")


@router.delete("/{category_id}", summary="删除分类")
async def delete_category(
    category_id: str,
    current_user: dict = Depends(require_curator),
):
    try:
        category = await category_repo.get_category_by_id(category_id)
        if not category:
            raise not_found("Category not found")
        if await category_repo.count_children(category_id):
            raise bad_request("Category has subcategories, move or delete them first")

        # 文章解除分类关联
        detached = await article_repo.update_articles(
            {"category_id": category_id}, {"category_id": None}
        )
        await category_repo.delete_category(category_id)
        await record_audit(
            "delete", "category", category_id, category["name"], current_user,
            {"detachedArticles": len(detached)},
        )
        return success_response(message="Category deleted")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"删除分类失败: {category_id} {e}")
        raise internal_error("Failed to delete category")
