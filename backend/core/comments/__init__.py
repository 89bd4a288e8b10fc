"""评论领域模块。"""

from core.integrations.supabase import supabase_client
from core.comments.repo import CommentRepository
from core.comments.model import CommentStatus, COMMENT_STATUS_VALUES, toggle_like
from core.comments.render import render_comment


comment_repo = CommentRepository(supabase_client)

__all__ = [
    "comment_repo",
    "CommentRepository",
    "CommentStatus",
    "COMMENT_STATUS_VALUES",
    "toggle_like",
    "render_comment",
]
