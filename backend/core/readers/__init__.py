"""读者领域模块。"""

from core.common.app_settings import settings
from core.integrations.supabase import supabase_client
from core.readers.repo import ReaderRepository
from core.readers.model import (
    AuthProvider,
    INTERESTS,
    OnboardingStep,
    ReaderStatus,
    dedupe,
    invalid_interests,
    next_onboarding_step,
)
from core.readers.otp_throttle import OtpThrottle


reader_repo = ReaderRepository(supabase_client)
otp_throttle = OtpThrottle(settings.otp_resend_seconds)

__all__ = [
    "reader_repo",
    "otp_throttle",
    "ReaderRepository",
    "OtpThrottle",
    "AuthProvider",
    "INTERESTS",
    "OnboardingStep",
    "ReaderStatus",
    "dedupe",
    "invalid_interests",
    "next_onboarding_step",
]
