import copy
from typing import Any, Dict

from core.common.errors import bad_request

SITE_CONFIG_ID = "default"

DEFAULT_FEATURES = {
    "enableEmailSubscribe": True,
    "enableTags": True,
    "enableComments": True,
    "enableDarkMode": True,
    "enableReadingTime": True,
    "enableRelatedArticles": True,
    "enableSocialShare": True,
    "enableSearch": True,
    "showAuthorName": True,
    "showCountryName": True,
    "showDateTime": True,
    "showSignInButton": True,
    "enableSaveForLater": True,
    "showPostIntro": True,
}

DEFAULT_SITE_CONFIG: Dict[str, Any] = {
    "homeLayout": {"columns": 3},
    "branding": {"logo": "", "favicon": ""},
    "features": DEFAULT_FEATURES,
    "socialLinks": {},
    "footer": {"copyrightText": "", "description": ""},
    "policies": {},
}

# 前端直接读写的顶层键，其余字段忽略
CONFIG_KEYS = frozenset(DEFAULT_SITE_CONFIG)


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """递归合并，override 中的字典与 base 合并，其他值直接覆盖"""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def validate_config_update(update: Dict[str, Any]) -> Dict[str, Any]:
    cleaned = {k: v for k, v in (update or {}).items() if k in CONFIG_KEYS}
    for key, value in cleaned.items():
        if not isinstance(value, dict):
            raise bad_request(f"{key} must be an object")

    columns = cleaned.get("homeLayout", {}).get("columns")
    if columns is not None:
        if isinstance(columns, bool) or not isinstance(columns, int) or not 1 <= columns <= 4:
            raise bad_request("homeLayout.columns must be between 1 and 4")

    for name, flag in cleaned.get("features", {}).items():
        if not isinstance(flag, bool):
            raise bad_request(f"features.{name} must be a boolean")

    for name, link in cleaned.get("socialLinks", {}).items():
        if not isinstance(link, dict):
            raise bad_request(f"socialLinks.{name} must be an object")
    return cleaned
