from typing import List, Optional

from pydantic import Field

from schemas.base import ApiModel


class CategoryCreate(ApiModel):
    name: str = Field(min_length=1, max_length=100)
    slug: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    meta_title: Optional[str] = None
    meta_keywords: Optional[str] = None
    parent: Optional[str] = None
    is_active: bool = True
    show_in_header: bool = False
    order: int = 0


class CategoryUpdate(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    slug: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    meta_title: Optional[str] = None
    meta_keywords: Optional[str] = None
    parent: Optional[str] = None
    is_active: Optional[bool] = None
    show_in_header: Optional[bool] = None
    order: Optional[int] = None


class CategoryOrderItem(ApiModel):
    id: str = Field(alias="_id")
    order: int
    is_active: Optional[bool] = None
    show_in_header: Optional[bool] = None


class CategoryReorder(ApiModel):
    categories: List[CategoryOrderItem]
