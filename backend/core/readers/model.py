from enum import Enum
from typing import Any, Dict, Iterable, List


class ReaderStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class AuthProvider(str, Enum):
    OTP = "otp"
    GOOGLE = "google"


class OnboardingStep(str, Enum):
    EMAIL = "email"
    OTP = "otp"
    NAME = "name"
    INTERESTS = "interests"
    WELCOME = "welcome"


INTERESTS = (
    "World News",
    "Breaking News",
    "Politics",
    "Business & Economy",
    "Technology",
    "Sports",
    "Entertainment",
    "Health",
    "Stock Market",
)


def next_onboarding_step(reader: Dict[str, Any]) -> str:
    """验证码通过后的下一步：缺名字 -> name，缺兴趣 -> interests，否则 welcome"""
    if not (reader.get("name") or "").strip():
        return OnboardingStep.NAME.value
    if not reader.get("interests"):
        return OnboardingStep.INTERESTS.value
    return OnboardingStep.WELCOME.value


def invalid_interests(interests: Iterable[str]) -> List[str]:
    return [i for i in interests if i not in INTERESTS]


def dedupe(items: Iterable[str]) -> List[str]:
    out: List[str] = []
    for item in items:
        if item not in out:
            out.append(item)
    return out
