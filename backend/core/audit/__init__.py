"""操作审计领域模块。"""

from typing import Any, Dict, Optional

from core.common.log import logger
from core.common.utils.timeutil import now_iso
from core.integrations.supabase import supabase_client
from core.audit.repo import AuditRepository


audit_repo = AuditRepository(supabase_client)


async def record_audit(
    action: str,
    target_type: str,
    target_id: Optional[str],
    target_name: str = "",
    performed_by: Optional[Dict[str, Any]] = None,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """写入审计日志，失败只记 warning，不影响主流程"""
    user = performed_by or {}
    try:
        await audit_repo.create_log(
            {
                "action": action,
                "target_type": target_type,
                "target_id": target_id,
                "target_name": target_name,
                "performed_by": user.get("id"),
                "performed_by_name": user.get("name") or user.get("email") or "",
                "performed_by_role": user.get("role") or "",
                "details": details or {},
                "created_at": now_iso(),
            }
        )
    except Exception as e:
        logger.warning(f"写入审计日志失败: {action} {target_type}:{target_id} {e}")


__all__ = ["audit_repo", "AuditRepository", "record_audit"]
