from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException

from core.audit import record_audit
from core.auth import require_permission
from core.common.errors import internal_error
from core.common.log import logger
from core.site_config import site_config_repo, validate_config_update
from core.users.permissions import can_edit_settings
from schemas import success_response


router = APIRouter(prefix="/config", tags=["站点配置"])


@router.get("", summary="获取站点配置")
async def get_site_config():
    """公开接口：默认值与已保存配置合并后返回"""
    try:
        return success_response(await site_config_repo.get_config())
    except Exception as e:
        logger.error(f"获取站点配置失败: {e}")
        raise internal_error("Failed to fetch site config")


@router.put("", summary="更新站点配置")
async def update_site_config(
    payload: Dict[str, Any] = Body(...),
    current_user: dict = Depends(require_permission(can_edit_settings)),
):
    try:
        update = validate_config_update(payload)
        config = await site_config_repo.save_config(update, updated_by=current_user["id"])
        await record_audit(
            "update", "settings", "default", "site config", current_user,
            {"sections": sorted(update)},
        )
        return success_response(config, message="Settings updated")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"更新站点配置失败: {e}")
        raise internal_error("Failed to update site config")
