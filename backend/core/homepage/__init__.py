"""首页编排领域模块。"""

from core.integrations.supabase import supabase_client
from core.homepage.repo import HomepageRepository
from core.homepage.model import (
    HOMEPAGE_ID,
    MAX_SUB_FEATURED,
    SectionLayout,
    default_homepage,
    normalize_sections,
    normalize_sub_featured,
)


homepage_repo = HomepageRepository(supabase_client)

__all__ = [
    "homepage_repo",
    "HomepageRepository",
    "HOMEPAGE_ID",
    "MAX_SUB_FEATURED",
    "SectionLayout",
    "default_homepage",
    "normalize_sections",
    "normalize_sub_featured",
]
