from typing import List, Optional

from pydantic import Field

from schemas.base import ApiModel


class BreakingNews(ApiModel):
    active: bool = False
    text: str = ""
    link: str = ""


class HomepageSection(ApiModel):
    id: Optional[str] = Field(default=None, alias="_id")
    category: str
    layout: str = "grid"
    order: Optional[int] = None
    active: bool = True


class HomepageUpdate(ApiModel):
    hero_article: Optional[str] = None
    sub_featured_articles: Optional[List[str]] = None
    breaking_news: Optional[BreakingNews] = None
    sections: Optional[List[HomepageSection]] = None
