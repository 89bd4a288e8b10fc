import os
from typing import Dict
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class BucketConfig:
    name: str
    path: str
    expires: int


@dataclass(frozen=True)
class SupabaseSettings:
    url: str
    anon_key: str
    service_key: str
    buckets: Dict[str, BucketConfig]
    # 与 PostgREST max_rows 保持一致，批量读取按此大小分页
    page_size: int


def _load_settings() -> SupabaseSettings:
    buckets = {
        "media": BucketConfig(
            name=os.getenv("STORAGE_MEDIA_BUCKET", "media"),
            path=os.getenv("SUPABASE_MEDIA_PATH", "{folder}/{uuid}{ext}"),
            expires=0,
        ),
    }

    return SupabaseSettings(
        url=os.getenv("SUPABASE_URL", "").rstrip("/"),
        anon_key=os.getenv("SUPABASE_ANON_KEY", ""),
        service_key=os.getenv("SUPABASE_SERVICE_KEY", ""),
        buckets=buckets,
        page_size=int(os.getenv("SUPABASE_PAGE_SIZE", "1000")),
    )


settings = _load_settings()
