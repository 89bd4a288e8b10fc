from typing import Optional, Dict, Any, List

from core.common.utils.timeutil import now_iso


class UserRepository:

    USER_TABLE = "users"

    def __init__(self, client: Any):
        self.client = client

    async def get_users(self, filters: Optional[Dict] = None) -> List[Dict[str, Any]]:
        return await self.client.select_all(
            self.USER_TABLE, filters=filters or None, order="created_at.asc"
        )

    async def get_users_by_ids(self, user_ids: List[str]) -> List[Dict[str, Any]]:
        if not user_ids:
            return []
        return await self.client.select(
            self.USER_TABLE,
            filters={"id": {"in": list(user_ids)}},
            columns="id,name,email,role",
        )

    async def get_user_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        users = await self.client.select(self.USER_TABLE, filters={"id": user_id}, limit=1)
        return users[0] if users else None

    async def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        users = await self.client.select(
            self.USER_TABLE, filters={"email": email.lower()}, limit=1
        )
        return users[0] if users else None

    async def create_user(self, user_data: Dict) -> Dict[str, Any]:
        return await self.client.insert(self.USER_TABLE, user_data)

    async def update_user(self, user_id: str, user_data: Dict) -> Optional[Dict[str, Any]]:
        user_data["updated_at"] = now_iso()
        rows = await self.client.update(
            self.USER_TABLE, user_data, filters={"id": user_id}
        )
        return rows[0] if rows else None

    async def delete_user(self, user_id: str) -> bool:
        rows = await self.client.delete(self.USER_TABLE, filters={"id": user_id})
        return bool(rows)
