"""站点配置领域模块。"""

from core.integrations.supabase import supabase_client
from core.site_config.repo import SiteConfigRepository
from core.site_config.model import (
    DEFAULT_SITE_CONFIG,
    deep_merge,
    validate_config_update,
)


site_config_repo = SiteConfigRepository(supabase_client)

__all__ = [
    "site_config_repo",
    "SiteConfigRepository",
    "DEFAULT_SITE_CONFIG",
    "deep_merge",
    "validate_config_update",
]
