from typing import Optional, Dict, List, Union, Any, cast
from supabase import create_client, Client

from core.integrations.supabase.settings import settings
from core.common.log import logger


# 支持的过滤操作符 -> postgrest 请求构造器方法名
_FILTER_METHODS = {
    "eq": "eq",
    "neq": "neq",
    "gt": "gt",
    "gte": "gte",
    "lt": "lt",
    "lte": "lte",
    "like": "like",
    "ilike": "ilike",
    "in": "in_",
    "cs": "contains",
    "ov": "overlaps",
    "is": "is_",
}


def _format_or_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple, set)):
        return "(" + ",".join(_quote(v) for v in value) + ")"
    return str(value)


def _quote(value: Any) -> str:
    """字符串值加双引号，避免 , . : ( ) 被 or=(...) 语法当成分隔符"""
    if value is None or isinstance(value, (bool, int, float)):
        return _format_or_value(value)
    text = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


def _array_literal(values: Any) -> str:
    """数组列使用 {a,b} 字面量"""
    return "{" + ",".join(_quote(v) for v in values) + "}"


def build_or_clause(conditions: List[tuple]) -> str:
    """把 [(column, op, value), ...] 拼成 PostgREST 的 or=(...) 语法"""
    parts = []
    for column, op, value in conditions:
        if op not in _FILTER_METHODS:
            raise ValueError(f"不支持的过滤操作符: {op}")
        if op in ("cs", "ov") and isinstance(value, (list, tuple, set)):
            text = _array_literal(value)
        elif op == "is" or isinstance(value, (list, tuple, set)):
            text = _format_or_value(value)
        else:
            text = _quote(value)
        parts.append(f"{column}.{op}.{text}")
    return ",".join(parts)


def apply_filters(query, filters: Optional[Dict]):
    """将统一的过滤字典应用到查询构造器上

    - {"status": "published"}            等值
    - {"views": {"gte": 10}}              比较操作
    - {"or": [("title", "ilike", "%a%")]} OR 条件
    """
    if not filters:
        return query
    for key, value in filters.items():
        if key == "or":
            if value:
                query = query.or_(build_or_clause(value))
            continue
        if isinstance(value, dict):
            for op, val in value.items():
                method = _FILTER_METHODS.get(op)
                if method is None:
                    raise ValueError(f"不支持的过滤操作符: {op}")
                if op == "is":
                    val = _format_or_value(val)
                elif op in ("cs", "ov") and isinstance(val, (list, tuple, set)):
                    query = query.filter(key, op, _array_literal(val))
                    continue
                query = getattr(query, method)(key, val)
        else:
            query = query.eq(key, value)
    return query


def parse_order(order: str) -> tuple[str, bool]:
    """"publish_at.desc" -> ("publish_at", True)"""
    column, _, direction = order.partition(".")
    return column, direction.lower() == "desc"


class SupabaseClient:
    """Supabase数据库客户端（service role，绕过RLS）"""

    def __init__(self):
        self.url = settings.url
        self.key = settings.service_key
        self.client: Optional[Client] = None
        self._initialized = False

    def init(self):
        """初始化Supabase客户端"""
        if not self.url or not self.key:
            raise ValueError("SUPABASE_URL和SUPABASE_SERVICE_KEY环境变量必须设置")

        if self._initialized:
            return

        try:
            self.client = create_client(self.url, self.key)
            self._initialized = True
            logger.info("Supabase客户端初始化成功")
        except Exception as e:
            logger.error(f"Supabase客户端初始化失败: {e}")
            raise

    def valid(self) -> bool:
        return bool(self.url and self.key)

    def get_client(self) -> Client:
        """获取Supabase客户端实例"""
        if not self._initialized or not self.client:
            self.init()

        if not self.client:
            raise RuntimeError("Supabase客户端尚未成功初始化")

        return self.client

    def from_table(self, table_name: str):
        """获取表操作对象"""
        return self.get_client().table(table_name)

    #! 以下为基础CRUD操作
    async def select(
        self,
        table: str,
        filters: Optional[Dict] = None,
        columns: str = "*",
        order: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """查询数据"""
        try:
            query = apply_filters(self.from_table(table).select(columns), filters)

            if order:
                for part in order.split(","):
                    column, desc = parse_order(part.strip())
                    query = query.order(column, desc=desc)

            start = offset or 0
            if limit:
                query = query.range(start, start + limit - 1)
            elif start:
                query = query.offset(start)

            response = query.execute()
            return response.data if response.data else []

        except Exception as e:
            logger.error(f"查询表 {table} 失败: {e}")
            raise

    async def select_all(
        self,
        table: str,
        filters: Optional[Dict] = None,
        columns: str = "*",
        order: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """按 page_size 分批读取全部匹配行，绕过 PostgREST 单次返回上限"""
        page_size = settings.page_size
        # 分页需要稳定排序，末尾追加 id 兜底
        order = f"{order},id.asc" if order else "id.asc"
        rows: List[Dict[str, Any]] = []
        while True:
            batch = await self.select(
                table, filters=filters, columns=columns, order=order,
                limit=page_size, offset=len(rows),
            )
            rows.extend(batch)
            if len(batch) < page_size:
                return rows

    async def count(self, table: str, filters: Optional[Dict] = None) -> int:
        """统计记录数量"""
        try:
            query = self.from_table(table).select("id", count=cast(Any, "exact"))
            query = apply_filters(query, filters)
            response = query.execute()
            if getattr(response, "count", None) is not None:
                return int(response.count)
            return len(response.data or [])

        except Exception as e:
            logger.error(f"统计表 {table} 记录数量失败: {e}")
            raise

    async def insert(self, table: str, data: Dict) -> Dict[str, Any]:
        """插入数据"""
        try:
            response = self.from_table(table).insert(data).execute()
            return response.data[0] if response.data else {}
        except Exception as e:
            logger.error(f"插入数据到表 {table} 失败: {e}")
            raise

    async def update(self, table: str, data: Dict, filters: Dict) -> List[Dict[str, Any]]:
        """更新数据"""
        try:
            query = apply_filters(self.from_table(table).update(data), filters)
            response = query.execute()
            return response.data if response.data else []

        except Exception as e:
            logger.error(f"更新表 {table} 失败: {e}")
            raise

    async def delete(self, table: str, filters: Dict) -> List[Dict[str, Any]]:
        """删除数据"""
        if not filters:
            raise ValueError("删除操作必须提供过滤条件")
        try:
            query = apply_filters(self.from_table(table).delete(), filters)
            response = query.execute()
            return response.data if response.data else []

        except Exception as e:
            logger.error(f"删除表 {table} 数据失败: {e}")
            raise

    async def upsert(
        self,
        table: str,
        data: Union[Dict, List[Dict]],
        on_conflict: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """插入或更新数据"""
        try:
            if on_conflict:
                query = self.from_table(table).upsert(data, on_conflict=on_conflict)
            else:
                query = self.from_table(table).upsert(data)

            response = query.execute()
            return response.data or []

        except Exception as e:
            logger.error(f"Upsert数据到表 {table} 失败: {e}")
            raise


supabase_client = SupabaseClient()
