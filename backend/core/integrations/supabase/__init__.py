from core.integrations.supabase.settings import settings, SupabaseSettings, BucketConfig
from core.integrations.supabase.client import supabase_client, SupabaseClient
from core.integrations.supabase.auth import auth_manager, SupabaseAuthManager
from core.integrations.supabase.storage import supabase_storage_media, SupabaseStorage

__all__ = [
    "settings",
    "SupabaseSettings",
    "BucketConfig",
    "supabase_client",
    "SupabaseClient",
    "auth_manager",
    "SupabaseAuthManager",
    "supabase_storage_media",
    "SupabaseStorage",
]
