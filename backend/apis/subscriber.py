import csv
import io
from datetime import timedelta
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from core.audit import record_audit
from core.auth import require_permission
from core.common.errors import bad_request, internal_error, not_found
from core.common.log import logger
from core.common.utils.timeutil import utcnow
from core.readers import ReaderStatus, reader_repo
from core.users.permissions import can_manage_subscribers
from schemas import paginated_response, success_response, serialize


router = APIRouter(prefix="/subscribers", tags=["订阅用户"])

require_subscriber_admin = require_permission(can_manage_subscribers)

EXPORT_COLUMNS = [
    ("Email", "email"),
    ("Name", "name"),
    ("Subscriber", "is_subscriber"),
    ("Registered", "is_registered"),
    ("Status", "status"),
    ("Auth Provider", "auth_provider"),
    ("Interests", "interests"),
    ("Subscribed At", "subscribed_at"),
    ("Created At", "created_at"),
]


def _filters(type_: Optional[str], search: Optional[str]) -> Dict[str, Any]:
    filters: Dict[str, Any] = {}
    if type_ == "subscribers":
        filters["is_subscriber"] = True
    elif type_ == "registered":
        filters["is_registered"] = True
    elif type_:
        raise bad_request(f"Invalid type: {type_}")
    if search and search.strip():
        word = search.strip()
        filters["or"] = [("email", "ilike", f"%{word}%"), ("name", "ilike", f"%{word}%")]
    return filters


@router.get("", summary="订阅用户列表")
async def list_subscribers(
    type: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    _current_user: dict = Depends(require_subscriber_admin),
):
    filters = _filters(type, search)
    try:
        rows, total = await reader_repo.list_readers(
            filters, limit=limit, offset=(page - 1) * limit
        )
        return paginated_response([serialize(r) for r in rows], total, page, limit)
    except Exception as e:
        logger.error(f"获取订阅用户失败: {e}")
        raise internal_error("Failed to fetch subscribers")


@router.get("/stats", summary="订阅用户统计")
async def subscriber_stats(_current_user: dict = Depends(require_subscriber_admin)):
    try:
        week_ago = (utcnow() - timedelta(days=7)).isoformat()
        return success_response(
            {
                "total": await reader_repo.count_readers(),
                "subscribers": await reader_repo.count_readers({"is_subscriber": True}),
                "registered": await reader_repo.count_readers({"is_registered": True}),
                "active": await reader_repo.count_readers(
                    {"status": ReaderStatus.ACTIVE.value}
                ),
                "suspended": await reader_repo.count_readers(
                    {"status": ReaderStatus.SUSPENDED.value}
                ),
                "newThisWeek": await reader_repo.count_readers(
                    {"created_at": {"gte": week_ago}}
                ),
            }
        )
    except Exception as e:
        logger.error(f"获取订阅统计失败: {e}")
        raise internal_error("Failed to fetch subscriber stats")


@router.get("/export", summary="导出订阅用户 CSV")
async def export_subscribers(
    type: Optional[str] = None,
    current_user: dict = Depends(require_subscriber_admin),
):
    filters = _filters(type, None)
    try:
        rows = await reader_repo.get_all_readers(filters)
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow([title for title, _ in EXPORT_COLUMNS])
        for row in rows:
            values = []
            for _, key in EXPORT_COLUMNS:
                value = row.get(key)
                if isinstance(value, list):
                    value = "; ".join(value)
                values.append("" if value is None else value)
            writer.writerow(values)
        await record_audit(
            "export", "subscriber", None, "subscribers.csv", current_user, {"count": len(rows)}
        )
        return Response(
            content=buffer.getvalue(),
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="subscribers.csv"'},
        )
    except Exception as e:
        logger.error(f"导出订阅用户失败: {e}")
        raise internal_error("Failed to export subscribers")


async def _set_status(reader_id: str, status: str, current_user: dict):
    reader = await reader_repo.get_reader_by_id(reader_id)
    if not reader:
        raise not_found("Subscriber not found")
    updated = await reader_repo.update_reader(reader_id, {"status": status})
    action = "suspend" if status == ReaderStatus.SUSPENDED.value else "activate"
    await record_audit(action, "subscriber", reader_id, reader["email"], current_user)
    return serialize(updated or {**reader, "status": status})


@router.patch("/{reader_id}/suspend", summary="停用订阅用户")
async def suspend_subscriber(reader_id: str, current_user: dict = Depends(require_subscriber_admin)):
    reader = await _set_status(reader_id, ReaderStatus.SUSPENDED.value, current_user)
    return success_response(reader, message="Subscriber suspended")


@router.patch("/{reader_id}/activate", summary="启用订阅用户")
async def activate_subscriber(reader_id: str, current_user: dict = Depends(require_subscriber_admin)):
    reader = await _set_status(reader_id, ReaderStatus.ACTIVE.value, current_user)
    return success_response(reader, message="Subscriber activated")


@router.delete("/{reader_id}", summary="删除订阅用户")
async def delete_subscriber(reader_id: str, current_user: dict = Depends(require_subscriber_admin)):
    reader = await reader_repo.get_reader_by_id(reader_id)
    if not reader:
        raise not_found("Subscriber not found")
    try:
        await reader_repo.delete_reader(reader_id)
        await record_audit("delete", "subscriber", reader_id, reader["email"], current_user)
        return success_response(message="Subscriber deleted")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"删除订阅用户失败: {reader_id} {e}")
        raise internal_error("Failed to delete subscriber")
