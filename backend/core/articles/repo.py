from datetime import datetime
from typing import Optional, List, Dict, Any, Tuple

from core.common.utils.timeutil import now_iso


# 列表页不需要正文，减少传输量
LIST_COLUMNS = (
    "id,title,slug,intro,featured_image,image_alt,category_id,tags,country,"
    "status,author_id,editor_id,views,lifecycle_stage,is_featured,is_trending,"
    "show_publish_date,published_at,is_deleted,deleted_at,created_at,updated_at"
)
STATS_COLUMNS = "id,status,views,author_id,created_at,published_at,is_deleted"


def build_article_filters(
    status: Optional[str] = None,
    trash: bool = False,
    category_ids: Optional[List[str]] = None,
    tag: Optional[str] = None,
    words: Optional[List[str]] = None,
    is_trending: Optional[bool] = None,
    is_featured: Optional[bool] = None,
    author_id: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> Dict[str, Any]:
    """组装文章列表过滤条件"""
    filters: Dict[str, Any] = {"is_deleted": trash}
    if status:
        filters["status"] = status
    if category_ids is not None:
        filters["category_id"] = {"in": category_ids}
    if tag:
        filters["tags"] = {"cs": [tag]}
    if words:
        conditions = []
        for word in words:
            conditions.append(("title", "ilike", f"%{word}%"))
            conditions.append(("intro", "ilike", f"%{word}%"))
        filters["or"] = conditions
    if is_trending is not None:
        filters["is_trending"] = is_trending
    if is_featured is not None:
        filters["is_featured"] = is_featured
    if author_id:
        filters["author_id"] = author_id
    created: Dict[str, str] = {}
    if start:
        created["gte"] = start.isoformat()
    if end:
        created["lte"] = end.isoformat()
    if created:
        filters["created_at"] = created
    return filters


class ArticleRepository:

    ARTICLE_TABLE = "articles"

    def __init__(self, client: Any):
        self.client = client

    async def list_articles(
        self,
        filters: Dict[str, Any],
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        order_by: str = "created_at.desc",
        columns: str = LIST_COLUMNS,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """分页查询文章，返回 (列表, 总数)"""
        rows = await self.client.select(
            self.ARTICLE_TABLE,
            filters=filters,
            columns=columns,
            limit=limit,
            offset=offset,
            order=order_by,
        )
        total = await self.client.count(self.ARTICLE_TABLE, filters=filters)
        return rows, total

    async def get_articles(
        self,
        filters: Optional[Dict] = None,
        order_by: str = "published_at.desc",
        columns: str = "*",
    ) -> List[Dict[str, Any]]:
        """读取全部匹配文章（分批），用于统计与批量处理"""
        return await self.client.select_all(
            self.ARTICLE_TABLE, filters=filters, columns=columns, order=order_by
        )

    async def get_article_by_id(self, article_id: str) -> Optional[Dict[str, Any]]:
        rows = await self.client.select(
            self.ARTICLE_TABLE, filters={"id": article_id}, limit=1
        )
        return rows[0] if rows else None

    async def get_article_by_slug(self, slug: str) -> Optional[Dict[str, Any]]:
        rows = await self.client.select(
            self.ARTICLE_TABLE, filters={"slug": slug}, limit=1
        )
        return rows[0] if rows else None

    async def get_articles_by_ids(self, article_ids: List[str]) -> List[Dict[str, Any]]:
        if not article_ids:
            return []
        return await self.client.select(
            self.ARTICLE_TABLE,
            filters={"id": {"in": list(article_ids)}},
            columns=LIST_COLUMNS,
        )

    async def slug_exists(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        filters: Dict[str, Any] = {"slug": slug}
        if exclude_id:
            filters["id"] = {"neq": exclude_id}
        return await self.client.count(self.ARTICLE_TABLE, filters=filters) > 0

    async def count_articles(self, filters: Optional[Dict] = None) -> int:
        return await self.client.count(self.ARTICLE_TABLE, filters=filters)

    async def get_stats_rows(self, filters: Optional[Dict] = None) -> List[Dict[str, Any]]:
        """统计用的精简字段"""
        return await self.client.select_all(
            self.ARTICLE_TABLE, filters=filters, columns=STATS_COLUMNS
        )

    async def get_related(
        self,
        article: Dict[str, Any],
        limit: int = 4,
    ) -> List[Dict[str, Any]]:
        """同分类或共享标签的已发布文章"""
        conditions = []
        if article.get("category_id"):
            conditions.append(("category_id", "eq", article["category_id"]))
        if article.get("tags"):
            conditions.append(("tags", "ov", list(article["tags"])))
        if not conditions:
            return []
        return await self.client.select(
            self.ARTICLE_TABLE,
            filters={
                "status": "published",
                "is_deleted": False,
                "id": {"neq": article["id"]},
                "or": conditions,
            },
            columns=LIST_COLUMNS,
            order="published_at.desc",
            limit=limit,
        )

    async def create_article(self, article_data: Dict) -> Dict[str, Any]:
        return await self.client.insert(self.ARTICLE_TABLE, article_data)

    async def update_article(self, article_id: str, article_data: Dict) -> Optional[Dict[str, Any]]:
        article_data["updated_at"] = now_iso()
        rows = await self.client.update(
            self.ARTICLE_TABLE, article_data, filters={"id": article_id}
        )
        return rows[0] if rows else None

    async def update_articles(self, filters: Dict, article_data: Dict) -> List[Dict[str, Any]]:
        """批量更新（分类解绑、标签改名、归档等）"""
        article_data["updated_at"] = now_iso()
        return await self.client.update(self.ARTICLE_TABLE, article_data, filters=filters)

    async def increment_views(self, article: Dict[str, Any]) -> int:
        views = int(article.get("views") or 0) + 1
        await self.client.update(
            self.ARTICLE_TABLE, {"views": views}, filters={"id": article["id"]}
        )
        return views

    async def delete_article(self, article_id: str) -> bool:
        rows = await self.client.delete(self.ARTICLE_TABLE, {"id": article_id})
        return bool(rows)
