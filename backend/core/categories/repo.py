from typing import Optional, List, Dict, Any

from core.common.utils.timeutil import now_iso


class CategoryRepository:

    CATEGORY_TABLE = "categories"

    def __init__(self, client: Any):
        self.client = client

    async def get_categories(self, filters: Optional[Dict] = None) -> List[Dict[str, Any]]:
        """获取分类（按 order、name 排序）"""
        return await self.client.select_all(
            self.CATEGORY_TABLE, filters=filters or None, order="order.asc,name.asc"
        )

    async def get_category_by_id(self, category_id: str) -> Optional[Dict[str, Any]]:
        rows = await self.client.select(
            self.CATEGORY_TABLE, filters={"id": category_id}, limit=1
        )
        return rows[0] if rows else None

    async def get_category_by_slug(self, slug: str) -> Optional[Dict[str, Any]]:
        rows = await self.client.select(
            self.CATEGORY_TABLE, filters={"slug": slug}, limit=1
        )
        return rows[0] if rows else None

    async def get_categories_by_ids(self, category_ids: List[str]) -> List[Dict[str, Any]]:
        if not category_ids:
            return []
        return await self.client.select(
            self.CATEGORY_TABLE,
            filters={"id": {"in": list(category_ids)}},
            columns="id,name,slug,color,icon",
        )

    async def slug_exists(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        filters: Dict[str, Any] = {"slug": slug}
        if exclude_id:
            filters["id"] = {"neq": exclude_id}
        return await self.client.count(self.CATEGORY_TABLE, filters=filters) > 0

    async def count_children(self, category_id: str) -> int:
        return await self.client.count(
            self.CATEGORY_TABLE, filters={"parent_id": category_id}
        )

    async def create_category(self, category_data: Dict) -> Dict[str, Any]:
        return await self.client.insert(self.CATEGORY_TABLE, category_data)

    async def update_category(
        self, category_id: str, category_data: Dict
    ) -> Optional[Dict[str, Any]]:
        category_data["updated_at"] = now_iso()
        rows = await self.client.update(
            self.CATEGORY_TABLE, category_data, filters={"id": category_id}
        )
        return rows[0] if rows else None

    async def delete_category(self, category_id: str) -> bool:
        rows = await self.client.delete(self.CATEGORY_TABLE, filters={"id": category_id})
        return bool(rows)
