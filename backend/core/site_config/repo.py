from typing import Any, Dict, Optional

from core.common.log import logger
from core.common.utils.timeutil import now_iso
from core.site_config.model import DEFAULT_SITE_CONFIG, SITE_CONFIG_ID, deep_merge


class SiteConfigRepository:
    """站点配置（单行 JSON 文档）"""

    CONFIG_TABLE = "site_configs"

    def __init__(self, client: Any):
        self.client = client

    async def get_stored(self) -> Dict[str, Any]:
        rows = await self.client.select(
            self.CONFIG_TABLE, filters={"id": SITE_CONFIG_ID}, limit=1
        )
        return rows[0] if rows else {}

    async def get_config(self) -> Dict[str, Any]:
        """默认值与已保存配置深度合并"""
        row = await self.get_stored()
        config = deep_merge(DEFAULT_SITE_CONFIG, row.get("data") or {})
        config["updatedBy"] = row.get("updated_by")
        config["updatedAt"] = row.get("updated_at")
        return config

    async def save_config(
        self, update: Dict[str, Any], updated_by: Optional[str] = None
    ) -> Dict[str, Any]:
        row = await self.get_stored()
        data = deep_merge(row.get("data") or {}, update)
        await self.client.upsert(
            self.CONFIG_TABLE,
            {
                "id": SITE_CONFIG_ID,
                "data": data,
                "updated_by": updated_by,
                "updated_at": now_iso(),
            },
            on_conflict="id",
        )
        logger.info(f"站点配置已更新: {sorted(update)}")
        return await self.get_config()
