from typing import Optional

from schemas.base import ApiModel


class CommentCreate(ApiModel):
    article_id: str
    content: str
    author_name: Optional[str] = None


class CommentUpdate(ApiModel):
    content: str


class CommentStatusUpdate(ApiModel):
    status: str
