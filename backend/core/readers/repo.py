from typing import Optional, List, Dict, Any, Tuple

from core.common.utils.timeutil import now_iso


class ReaderRepository:

    READER_TABLE = "readers"
    SAVED_TABLE = "saved_articles"

    def __init__(self, client: Any):
        self.client = client

    async def get_reader_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        rows = await self.client.select(
            self.READER_TABLE, filters={"email": email.lower()}, limit=1
        )
        return rows[0] if rows else None

    async def get_reader_by_id(self, reader_id: str) -> Optional[Dict[str, Any]]:
        rows = await self.client.select(
            self.READER_TABLE, filters={"id": reader_id}, limit=1
        )
        return rows[0] if rows else None

    async def list_readers(
        self,
        filters: Optional[Dict] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        rows = await self.client.select(
            self.READER_TABLE,
            filters=filters or None,
            order="created_at.desc",
            limit=limit,
            offset=offset,
        )
        total = await self.client.count(self.READER_TABLE, filters=filters or None)
        return rows, total

    async def get_all_readers(self, filters: Optional[Dict] = None) -> List[Dict[str, Any]]:
        """导出与群发用：分批读取全部匹配读者"""
        return await self.client.select_all(
            self.READER_TABLE, filters=filters or None, order="created_at.desc"
        )

    async def count_readers(self, filters: Optional[Dict] = None) -> int:
        return await self.client.count(self.READER_TABLE, filters=filters or None)

    async def create_reader(self, reader_data: Dict) -> Dict[str, Any]:
        return await self.client.insert(self.READER_TABLE, reader_data)

    async def update_reader(self, reader_id: str, reader_data: Dict) -> Optional[Dict[str, Any]]:
        reader_data["updated_at"] = now_iso()
        rows = await self.client.update(
            self.READER_TABLE, reader_data, filters={"id": reader_id}
        )
        return rows[0] if rows else None

    async def delete_reader(self, reader_id: str) -> bool:
        await self.client.delete(self.SAVED_TABLE, filters={"reader_id": reader_id})
        rows = await self.client.delete(self.READER_TABLE, filters={"id": reader_id})
        return bool(rows)

    #! 收藏

    async def get_saved_article_ids(self, reader_id: str) -> List[str]:
        rows = await self.client.select_all(
            self.SAVED_TABLE,
            filters={"reader_id": reader_id},
            columns="article_id",
            order="created_at.desc",
        )
        return [r["article_id"] for r in rows]

    async def is_saved(self, reader_id: str, article_id: str) -> bool:
        return await self.client.count(
            self.SAVED_TABLE, filters={"reader_id": reader_id, "article_id": article_id}
        ) > 0

    async def save_article(self, reader_id: str, article_id: str) -> None:
        await self.client.upsert(
            self.SAVED_TABLE,
            {"reader_id": reader_id, "article_id": article_id, "created_at": now_iso()},
            on_conflict="reader_id,article_id",
        )

    async def unsave_article(self, reader_id: str, article_id: str) -> None:
        await self.client.delete(
            self.SAVED_TABLE, filters={"reader_id": reader_id, "article_id": article_id}
        )

    async def remove_article_refs(self, article_id: str) -> int:
        rows = await self.client.delete(self.SAVED_TABLE, filters={"article_id": article_id})
        return len(rows)
