from enum import Enum
from typing import Dict, FrozenSet


class ArticleStatus(str, Enum):
    DRAFT = "draft"
    REVIEW = "review"
    PUBLISHED = "published"
    INACTIVE = "inactive"
    REJECTED = "rejected"


class LifecycleStage(str, Enum):
    HOT = "hot"
    COLD = "cold"
    ARCHIVE = "archive"


# 状态流转表：key 为当前状态，value 为允许流转到的目标状态
TRANSITIONS: Dict[str, FrozenSet[str]] = {
    ArticleStatus.DRAFT.value: frozenset({"review", "published"}),
    ArticleStatus.REVIEW.value: frozenset({"published", "rejected", "draft"}),
    ArticleStatus.REJECTED.value: frozenset({"review", "draft"}),
    ArticleStatus.PUBLISHED.value: frozenset({"draft", "inactive", "review"}),
    ArticleStatus.INACTIVE.value: frozenset({"published", "draft"}),
}

STATUS_VALUES = frozenset(s.value for s in ArticleStatus)

# 列表查询中的虚拟状态：回收站
TRASH = "trash"


def can_transition(current: str, target: str) -> bool:
    if current == target:
        return True
    return target in TRANSITIONS.get(current, frozenset())
