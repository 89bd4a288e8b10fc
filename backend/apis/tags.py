from fastapi import APIRouter, Depends, HTTPException

from core.audit import record_audit
from core.auth import require_permission
from core.common.errors import bad_request, conflict, internal_error, not_found
from core.common.log import logger
from core.common.utils.text import slugify
from core.common.utils.timeutil import now_iso
from core.tags import tag_repo
from core.users.permissions import is_curator
from schemas import success_response, serialize, serialize_many
from schemas.tag import TagCreate, TagUpdate


router = APIRouter(prefix="/tags", tags=["标签管理"])

require_curator = require_permission(is_curator)


@router.get("", summary="获取标签列表")
async def get_tags():
    """获取标签列表（按名称排序）"""
    try:
        tags = await tag_repo.get_tags()
        return success_response(serialize_many(tags))
    except Exception as e:
        logger.error(f"获取标签列表失败: {e}")
        raise internal_error("Failed to fetch tags")


@router.post("", summary="创建新标签")
async def create_tag(
    tag: TagCreate,
    current_user: dict = Depends(require_curator),
):
    """创建新标签"""
    try:
        name = tag.name.strip()
        slug = slugify(tag.slug or name)
        if not slug:
            raise bad_request("Invalid tag name")
        if await tag_repo.slug_exists(slug):
            raise conflict("Tag already exists")

        new_tag = await tag_repo.create_tag(
            {"name": name, "slug": slug, "created_at": now_iso()}
        )
        await record_audit("create", "tag", new_tag.get("id"), name, current_user)
        return success_response(serialize(new_tag), message="Tag created")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"创建标签失败: {e}")
        raise internal_error("Failed to create tag")


@router.put("/{tag_id}", summary="更新标签信息")
async def update_tag(
    tag_id: str,
    tag_data: TagUpdate,
    current_user: dict = Depends(require_curator),
):
    """更新标签；改名会同步修改文章上的标签"""
    try:
        existing_tag = await tag_repo.get_tag_by_id(tag_id)
        if not existing_tag:
            raise not_found("Tag not found")

        update_data = {}
        name = (tag_data.name or "").strip() or existing_tag["name"]
        if name != existing_tag["name"]:
            update_data["name"] = name
        if tag_data.slug is not None or "name" in update_data:
            slug = slugify(tag_data.slug or name)
            if not slug:
                raise bad_request("Invalid tag name")
            if await tag_repo.slug_exists(slug, exclude_id=tag_id):
                raise conflict("Tag already exists")
            update_data["slug"] = slug
        if not update_data:
            return success_response(serialize(existing_tag))

        updated_tag = await tag_repo.update_tag(tag_id, update_data)
        if "name" in update_data:
            count = await tag_repo.replace_on_articles(existing_tag["name"], name)
            logger.info(f"标签改名 {existing_tag['name']} -> {name}，同步 {count} 篇文章")
        await record_audit("update", "tag", tag_id, name, current_user)
        return success_response(serialize(updated_tag or {**existing_tag, **update_data}))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"更新标签失败: {tag_id} {e}")
        raise internal_error("Failed to update tag")


@router.delete("/{tag_id}", summary="删除标签")
async def delete_tag(
    tag_id: str,
    current_user: dict = Depends(require_curator),
):
    """删除标签，并从文章中移除"""
    try:
        existing_tag = await tag_repo.get_tag_by_id(tag_id)
        if not existing_tag:
            raise not_found("Tag not found")

        await tag_repo.replace_on_articles(existing_tag["name"], None)
        await tag_repo.delete_tag(tag_id)
        await record_audit("delete", "tag", tag_id, existing_tag["name"], current_user)
        return success_response(message="Tag deleted")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"删除标签失败: {tag_id} {e}")
        raise internal_error("Failed to delete tag")
