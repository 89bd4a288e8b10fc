from typing import Optional

from pydantic import Field

from schemas.base import ApiModel


class TagCreate(ApiModel):
    name: str = Field(min_length=1, max_length=60)
    slug: Optional[str] = None


class TagUpdate(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=60)
    slug: Optional[str] = None
