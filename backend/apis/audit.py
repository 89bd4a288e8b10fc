from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from core.audit import audit_repo
from core.auth import require_permission
from core.common.errors import internal_error
from core.common.log import logger
from core.users.permissions import can_view_audit
from schemas import paginated_response, serialize


router = APIRouter(prefix="/audit", tags=["操作审计"])


@router.get("", summary="操作日志")
async def list_audit_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(30, ge=1, le=200),
    action: Optional[str] = None,
    target_type: Optional[str] = Query(None, alias="targetType"),
    performed_by: Optional[str] = Query(None, alias="performedBy"),
    _current_user: dict = Depends(require_permission(can_view_audit)),
):
    filters: Dict[str, Any] = {}
    if action:
        filters["action"] = action
    if target_type:
        filters["target_type"] = target_type
    if performed_by:
        filters["performed_by"] = performed_by
    try:
        rows, total = await audit_repo.list_logs(
            filters, limit=limit, offset=(page - 1) * limit
        )
        return paginated_response([serialize(r) for r in rows], total, page, limit)
    except Exception as e:
        logger.error(f"获取操作日志失败: {e}")
        raise internal_error("Failed to fetch audit logs")
