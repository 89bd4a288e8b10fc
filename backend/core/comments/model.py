from enum import Enum
from typing import Any, Dict, List, Tuple


class CommentStatus(str, Enum):
    APPROVED = "approved"
    PENDING = "pending"
    REJECTED = "rejected"
    SPAM = "spam"


COMMENT_STATUS_VALUES = frozenset(s.value for s in CommentStatus)


def toggle_like(comment: Dict[str, Any], reader_id: str) -> Tuple[List[str], bool]:
    """切换点赞，返回 (新的 liked_by, 当前是否已点赞)"""
    liked_by = [r for r in (comment.get("liked_by") or []) if r]
    if reader_id in liked_by:
        liked_by = [r for r in liked_by if r != reader_id]
        return liked_by, False
    liked_by.append(reader_id)
    return liked_by, True
