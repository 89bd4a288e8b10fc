from typing import Optional, List, Dict, Any, Tuple


class AuditRepository:
    """操作日志（只追加）"""

    AUDIT_TABLE = "audit_logs"

    def __init__(self, client: Any):
        self.client = client

    async def create_log(self, log_data: Dict) -> Dict[str, Any]:
        return await self.client.insert(self.AUDIT_TABLE, log_data)

    async def list_logs(
        self,
        filters: Optional[Dict] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        rows = await self.client.select(
            self.AUDIT_TABLE,
            filters=filters or None,
            order="created_at.desc",
            limit=limit,
            offset=offset,
        )
        total = await self.client.count(self.AUDIT_TABLE, filters=filters or None)
        return rows, total
