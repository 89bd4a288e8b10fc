from typing import Optional, List, Dict, Any

from core.common.utils.timeutil import now_iso


class TagRepository:

    TAG_TABLE = "tags"
    ARTICLE_TABLE = "articles"

    def __init__(self, client: Any):
        self.client = client

    async def get_tags(self):
        """获取所有标签"""
        return await self.client.select_all(self.TAG_TABLE, order="name.asc")

    async def get_tag_by_id(self, tag_id: str):
        """根据ID获取标签"""
        tags = await self.client.select(self.TAG_TABLE, filters={"id": tag_id})
        return tags[0] if tags else None

    async def slug_exists(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        filters: Dict[str, Any] = {"slug": slug}
        if exclude_id:
            filters["id"] = {"neq": exclude_id}
        return await self.client.count(self.TAG_TABLE, filters=filters) > 0

    async def create_tag(self, tag_data: Dict):
        """创建标签"""
        return await self.client.insert(self.TAG_TABLE, tag_data)

    async def update_tag(self, tag_id: str, tag_data: Dict):
        """更新标签"""
        rows = await self.client.update(
            self.TAG_TABLE, tag_data, filters={"id": tag_id}
        )
        return rows[0] if rows else None

    async def delete_tag(self, tag_id: str):
        """删除标签"""
        result = await self.client.delete(self.TAG_TABLE, filters={"id": tag_id})
        return bool(result)

    async def replace_on_articles(self, old_name: str, new_name: Optional[str]) -> int:
        """在文章 tags 数组中改名（new_name 为 None 时移除），返回受影响的文章数"""
        articles = await self.client.select_all(
            self.ARTICLE_TABLE, filters={"tags": {"cs": [old_name]}}, columns="id,tags"
        )
        for article in articles:
            tags: List[str] = []
            for name in article.get("tags") or []:
                if name == old_name:
                    name = new_name
                if name and name not in tags:
                    tags.append(name)
            await self.client.update(
                self.ARTICLE_TABLE,
                {"tags": tags, "updated_at": now_iso()},
                filters={"id": article["id"]},
            )
        return len(articles)
