import asyncio

from core.common.app_settings import settings
from core.common.log import logger
from core.common.utils.text import normalize_email
from core.common.utils.timeutil import now_iso
from core.homepage import homepage_repo
from core.integrations.supabase.auth import auth_manager
from core.site_config import site_config_repo
from core.users import user_repo
from core.users.model import AdminRole, UserStatus


async def init_superadmin():
    email = normalize_email(settings.superadmin_email)
    try:
        if await user_repo.get_user_by_email(email):
            logger.info(f"超级管理员已存在: {email}")
            return

        identity = await auth_manager.admin_create_user(
            email,
            settings.superadmin_password,
            {"name": settings.superadmin_name, "role": AdminRole.SUPERADMIN.value},
        )
        now = now_iso()
        await user_repo.create_user(
            {
                "auth_id": identity["id"],
                "name": settings.superadmin_name,
                "email": email,
                "role": AdminRole.SUPERADMIN.value,
                "status": UserStatus.ACTIVE.value,
                "direct_publish_enabled": True,
                "created_at": now,
                "updated_at": now,
            }
        )
        logger.info(f"初始化超级管理员成功,请使用以下凭据登录：{email}")
    except Exception as e:
        logger.error(f"初始化超级管理员失败: {e}")


async def init_site_config():
    try:
        if await site_config_repo.get_stored():
            return
        await site_config_repo.save_config({})
        logger.info("已写入默认站点配置")
    except Exception as e:
        logger.error(f"初始化站点配置失败: {e}")


async def init_homepage():
    try:
        homepage = await homepage_repo.get_homepage()
        if homepage.get("last_updated"):
            return
        await homepage_repo.save_homepage({**homepage, "last_updated": now_iso()})
        logger.info("已写入默认首页配置")
    except Exception as e:
        logger.error(f"初始化首页配置失败: {e}")


async def init():
    await init_superadmin()
    await init_site_config()
    await init_homepage()


if __name__ == "__main__":
    asyncio.run(init())
