from typing import Optional, List, Dict, Any, Tuple

from core.common.utils.timeutil import now_iso


class CommentRepository:

    COMMENT_TABLE = "comments"

    def __init__(self, client: Any):
        self.client = client

    async def get_article_comments(
        self, article_id: str, status: str = "approved"
    ) -> List[Dict[str, Any]]:
        """文章下的评论（最新在前）"""
        return await self.client.select_all(
            self.COMMENT_TABLE,
            filters={"article_id": article_id, "status": status},
            order="created_at.desc",
        )

    async def list_comments(
        self,
        filters: Optional[Dict] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        rows = await self.client.select(
            self.COMMENT_TABLE,
            filters=filters or None,
            order="created_at.desc",
            limit=limit,
            offset=offset,
        )
        total = await self.client.count(self.COMMENT_TABLE, filters=filters or None)
        return rows, total

    async def get_comment_by_id(self, comment_id: str) -> Optional[Dict[str, Any]]:
        rows = await self.client.select(
            self.COMMENT_TABLE, filters={"id": comment_id}, limit=1
        )
        return rows[0] if rows else None

    async def create_comment(self, comment_data: Dict) -> Dict[str, Any]:
        return await self.client.insert(self.COMMENT_TABLE, comment_data)

    async def update_comment(self, comment_id: str, comment_data: Dict) -> Optional[Dict[str, Any]]:
        comment_data["updated_at"] = now_iso()
        rows = await self.client.update(
            self.COMMENT_TABLE, comment_data, filters={"id": comment_id}
        )
        return rows[0] if rows else None

    async def delete_comment(self, comment_id: str) -> bool:
        rows = await self.client.delete(self.COMMENT_TABLE, filters={"id": comment_id})
        return bool(rows)

    async def delete_article_comments(self, article_id: str) -> int:
        rows = await self.client.delete(self.COMMENT_TABLE, filters={"article_id": article_id})
        return len(rows)
