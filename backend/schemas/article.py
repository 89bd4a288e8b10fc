from typing import List, Optional

from pydantic import Field

from schemas.base import ApiModel


class ArticleCreate(ApiModel):
    title: str = Field(min_length=1, max_length=300)
    slug: Optional[str] = None
    intro: Optional[str] = None
    content: str = ""
    featured_image: Optional[str] = None
    image_alt: Optional[str] = None
    category: Optional[str] = None
    tags: List[str] = []
    country: Optional[str] = None
    status: Optional[str] = None
    is_featured: bool = False
    is_trending: bool = False
    show_publish_date: bool = True


class ArticleUpdate(ApiModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=300)
    slug: Optional[str] = None
    intro: Optional[str] = None
    content: Optional[str] = None
    featured_image: Optional[str] = None
    image_alt: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    country: Optional[str] = None
    status: Optional[str] = None
    is_featured: Optional[bool] = None
    is_trending: Optional[bool] = None
    show_publish_date: Optional[bool] = None
    is_deleted: Optional[bool] = None


class ArticleReview(ApiModel):
    action: str = Field(pattern="^(approve|reject)$")
    reason: Optional[str] = None
