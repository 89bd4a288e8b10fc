from typing import Any, Dict

from core.common.utils.timeutil import now_iso
from core.homepage.model import HOMEPAGE_ID, default_homepage


class HomepageRepository:

    HOMEPAGE_TABLE = "homepage_configs"

    def __init__(self, client: Any):
        self.client = client

    async def get_homepage(self) -> Dict[str, Any]:
        """首页配置只有一行，不存在时返回默认值"""
        rows = await self.client.select(
            self.HOMEPAGE_TABLE, filters={"id": HOMEPAGE_ID}, limit=1
        )
        if rows:
            return {**default_homepage(), **rows[0]}
        return default_homepage()

    async def save_homepage(self, data: Dict[str, Any]) -> Dict[str, Any]:
        rows = await self.client.upsert(
            self.HOMEPAGE_TABLE, {**data, "id": HOMEPAGE_ID}, on_conflict="id"
        )
        return {**default_homepage(), **(rows[0] if rows else data)}

    async def remove_article_refs(self, article_id: str) -> bool:
        """永久删除文章时清理头条与副推荐中的引用"""
        rows = await self.client.select(
            self.HOMEPAGE_TABLE, filters={"id": HOMEPAGE_ID}, limit=1
        )
        if not rows:
            return False
        homepage = rows[0]
        data: Dict[str, Any] = {}
        if homepage.get("hero_article_id") == article_id:
            data["hero_article_id"] = None
        sub_ids = homepage.get("sub_featured_article_ids") or []
        if article_id in sub_ids:
            data["sub_featured_article_ids"] = [i for i in sub_ids if i != article_id]
        if not data:
            return False
        data["last_updated"] = now_iso()
        await self.client.update(self.HOMEPAGE_TABLE, data, filters={"id": HOMEPAGE_ID})
        return True
