from datetime import datetime, timedelta, date
from typing import Any, Dict, Iterable, List, Optional

from core.common.utils.timeutil import parse_datetime, utcnow

DEFAULT_WINDOW_DAYS = 30
MAX_WINDOW_DAYS = 366
BREAKDOWN_STATUSES = ("published", "draft", "review", "rejected")


def _day_start(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def resolve_window(
    start: Optional[datetime], end: Optional[datetime], now: Optional[datetime] = None
) -> tuple[date, date]:
    """统计窗口（按天，闭区间）；缺省为最近 30 天，最长 366 天"""
    now = now or utcnow()
    end_day = (end or now).date()
    start_day = (start.date() if start else end_day - timedelta(days=DEFAULT_WINDOW_DAYS - 1))
    if start_day > end_day:
        start_day, end_day = end_day, start_day
    if (end_day - start_day).days + 1 > MAX_WINDOW_DAYS:
        raise ValueError(f"Date range cannot exceed {MAX_WINDOW_DAYS} days")
    return start_day, end_day


def compute_user_stats(
    rows: Iterable[Dict[str, Any]],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """根据文章行计算作者（或全站）的产出统计

    dailyStats 覆盖窗口内每一天，没有产出的日期补 0。
    today / thisWeek / thisMonth 分别从当天零点、本周一、本月一日起算。
    """
    now = now or utcnow()
    start_day, end_day = resolve_window(start, end, now)

    articles = [r for r in rows if not r.get("is_deleted")]
    today_start = _day_start(now)
    week_start = today_start - timedelta(days=today_start.weekday())
    month_start = today_start.replace(day=1)

    buckets: Dict[date, Dict[str, Any]] = {}
    day = start_day
    while day <= end_day:
        buckets[day] = {"date": day.isoformat(), "count": 0, "views": 0}
        day += timedelta(days=1)

    today = this_week = this_month = 0
    total_views = 0
    breakdown = {status: 0 for status in BREAKDOWN_STATUSES}

    for article in articles:
        views = int(article.get("views") or 0)
        total_views += views
        status = article.get("status")
        if status in breakdown:
            breakdown[status] += 1

        created = parse_datetime(article.get("created_at"))
        if created is None:
            continue
        if created >= today_start:
            today += 1
        if created >= week_start:
            this_week += 1
        if created >= month_start:
            this_month += 1
        bucket = buckets.get(created.date())
        if bucket is not None:
            bucket["count"] += 1
            bucket["views"] += views

    total = len(articles)
    daily: List[Dict[str, Any]] = [buckets[d] for d in sorted(buckets)]
    return {
        "dailyStats": daily,
        "today": today,
        "thisWeek": this_week,
        "thisMonth": this_month,
        "total": total,
        "totalViews": total_views,
        "avgViewsPerArticle": round(total_views / total) if total else 0,
        "statusBreakdown": breakdown,
    }
