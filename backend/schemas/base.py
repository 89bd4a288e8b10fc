import math
from typing import Any, Dict, Iterable, List

from pydantic import BaseModel, ConfigDict

from core.common.utils.text import to_camel


class ApiModel(BaseModel):
    """请求体基类：前端传 camelCase，模型字段为 snake_case（与数据库列一致）"""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


def success_response(data=None, message="success", **extra):
    return {"success": True, "code": 0, "message": message, "data": data, **extra}


def error_response(code: int, message: str, data=None):
    return {"success": False, "code": code, "message": message, "data": data}


def paginated_response(items: List[Any], total: int, page: int, limit: int, **extra):
    pages = max(1, math.ceil(total / limit)) if limit else 1
    return success_response(
        items, count=len(items), total=total, page=page, pages=pages, **extra
    )


def serialize(value: Any) -> Any:
    """数据库行 -> 前端结构：snake_case 转 camelCase，id 转 _id（递归处理嵌套）"""
    if isinstance(value, dict):
        out: Dict[str, Any] = {}
        for key, item in value.items():
            name = "_id" if key == "id" else to_camel(key)
            out[name] = serialize(item)
        return out
    if isinstance(value, list):
        return [serialize(item) for item in value]
    return value


def serialize_many(rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [serialize(row) for row in rows]
