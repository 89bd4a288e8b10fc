"""文章生命周期模块。"""

from core.lifecycle.rules import cutoff, is_archive_candidate, stage_for
from core.lifecycle.service import (
    archive_articles,
    archive_candidates,
    lifecycle_stats,
    sweep_hot_articles,
)

__all__ = [
    "cutoff",
    "is_archive_candidate",
    "stage_for",
    "archive_articles",
    "archive_candidates",
    "lifecycle_stats",
    "sweep_hot_articles",
]
