from typing import List

from pydantic import Field

from schemas.base import ApiModel


class NewsletterRequest(ApiModel):
    subject: str = Field(min_length=1, max_length=200)
    html: str = Field(min_length=1)


class ArchiveRequest(ApiModel):
    article_ids: List[str]
