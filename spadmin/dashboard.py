"""
Dashboard statistics and chart series.

Shapes the numbers behind the dashboard cards and charts; drawing them
is left to whatever consumes this data.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from . import endpoints
from .client import ApiClient
from .errors import ApiError, SpadminError
from .normalize import format_numeric_date

MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

CHART_ERROR = "Unable to load chart data. Please try again later."
STATS_ERROR = "Unable to load dashboard statistics. Please try again later."

# (title, key in the stats body, link)
STAT_FIELDS = [
    ("Total Spas", "totalSpas", "/spas"),
    ("Total Users", "totalUsers", "/users"),
    ("Total Messages", "totalMessages", "/messages"),
    ("Total Applications", "totalApplications", "/applications"),
    ("Total Jobs", "totalJobs", "/jobs"),
    ("Total Subscribers", "totalsuscribers", "/suscribers"),
]


@dataclass
class StatCard:
    title: str
    value: int
    link: Optional[str] = None


def _body(response: Any) -> Any:
    if isinstance(response, dict) and "data" in response and response["data"] is not None:
        return response["data"]
    return response


def fetch_stats(client: ApiClient) -> List[StatCard]:
    """
    Load the headline counters.

    Site visit counters come from a separate endpoint that some deployments
    lack; its failure is logged and the counters read as zero.

    Raises:
        ApiError: The main stats endpoint failed
    """
    try:
        data = _body(client.get(endpoints.STATS_DASHBOARD)) or {}
    except ApiError as e:
        raise ApiError(STATS_ERROR, status=e.status) from e

    site: Dict[str, Any] = {}
    try:
        site = _body(client.get(endpoints.STATS_SITE)) or {}
    except ApiError as e:
        client.logger.warning("Site stats endpoint not available", error=e.message)

    cards = [
        StatCard("Total Website Visits", site.get("totalViews") or 0),
        StatCard("Unique Website Visitors", site.get("uniqueVisitors") or 0),
    ]
    for title, key, link in STAT_FIELDS:
        cards.append(StatCard(title, data.get(key) or 0, link))
    return cards


def fetch_chart_data(client: ApiClient) -> Dict[str, Any]:
    """Fetch the four chart sources concurrently; any failure fails them all."""
    paths = [
        endpoints.CHART_USERS,
        endpoints.CHART_JOBS,
        endpoints.CHART_MESSAGES,
        endpoints.STATS_DAILY_VISITS,
    ]
    try:
        users, jobs, messages, visits = client.fetch_all(paths)
    except SpadminError as e:
        client.logger.error("Error fetching chart data", error=str(e))
        raise ApiError(CHART_ERROR) from e
    return {
        "users": _body(users),
        "jobs": _body(jobs),
        "messages": _body(messages),
        "visits": _body(visits),
    }


def fetch_recent_activity(client: ApiClient) -> Any:
    return _body(client.get(endpoints.RECENT_ACTIVITY))


def monthly_series(data: Any) -> Dict[int, List[int]]:
    """Group ``[{_id: {year, month}, count}]`` rows into 12 monthly counts per year."""
    if not isinstance(data, list):
        return {}
    grouped: Dict[int, List[int]] = {}
    for row in data:
        key = row.get("_id") or {}
        year, month = key.get("year"), key.get("month")
        if not year or not month or not 1 <= month <= 12:
            continue
        grouped.setdefault(year, [0] * 12)[month - 1] = row.get("count") or 0
    return dict(sorted(grouped.items()))


def visit_series(data: Any) -> Dict[str, List[Any]]:
    if not isinstance(data, list) or not data:
        return {"labels": [], "views": []}
    return {
        "labels": [format_numeric_date(d.get("date")) for d in data],
        "views": [d.get("views") or 0 for d in data],
    }


def calculate_change(current: float, previous: float) -> Dict[str, Any]:
    """Percentage change between two readings, rounded to one decimal."""
    if not previous:
        return {"percentage": 0.0, "type": "neutral"}
    change = (current - previous) / previous * 100
    if change > 0:
        kind = "increase"
    elif change < 0:
        kind = "decrease"
    else:
        kind = "neutral"
    return {"percentage": round(abs(change), 1), "type": kind}
