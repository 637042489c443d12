"""
Tests for dashboard statistics and chart shaping.
"""

import pytest

from spadmin import endpoints
from spadmin.dashboard import (
    CHART_ERROR,
    STATS_ERROR,
    calculate_change,
    fetch_chart_data,
    fetch_recent_activity,
    fetch_stats,
    monthly_series,
    visit_series,
)
from spadmin.errors import ApiError


class TestFetchStats:
    """Test the headline counters."""

    def test_cards_from_both_endpoints(self, client, router):
        router.add("GET", endpoints.STATS_DASHBOARD, {"data": {"totalSpas": 12, "totalJobs": 40}})
        router.add("GET", endpoints.STATS_SITE, {"totalViews": 1500, "uniqueVisitors": 300})

        cards = {c.title: c for c in fetch_stats(client)}

        assert cards["Total Website Visits"].value == 1500
        assert cards["Unique Website Visitors"].value == 300
        assert cards["Total Spas"].value == 12
        assert cards["Total Spas"].link == "/spas"
        assert cards["Total Users"].value == 0

    def test_missing_site_stats_read_as_zero(self, client, router):
        """A deployment without site stats still shows the other cards."""
        router.add("GET", endpoints.STATS_DASHBOARD, {"totalUsers": 7})

        cards = {c.title: c.value for c in fetch_stats(client)}

        assert cards["Total Website Visits"] == 0
        assert cards["Total Users"] == 7

    def test_main_endpoint_failure(self, client, router):
        router.add("GET", endpoints.STATS_DASHBOARD, {}, status=500)
        with pytest.raises(ApiError) as info:
            fetch_stats(client)
        assert info.value.message == STATS_ERROR
        assert info.value.status == 500


class TestFetchChartData:
    """Test the concurrent chart group."""

    def test_all_sources(self, client, router):
        router.add("GET", endpoints.CHART_USERS, {"data": [{"_id": {"year": 2024, "month": 1}, "count": 3}]})
        router.add("GET", endpoints.CHART_JOBS, [])
        router.add("GET", endpoints.CHART_MESSAGES, [])
        router.add("GET", endpoints.STATS_DAILY_VISITS, [{"date": "2024-05-01", "views": 10}])

        data = fetch_chart_data(client)

        assert data["users"][0]["count"] == 3
        assert data["jobs"] == []
        assert data["visits"][0]["views"] == 10

    def test_one_failure_fails_all(self, client, router):
        router.add("GET", endpoints.CHART_USERS, [])
        router.add("GET", endpoints.CHART_JOBS, [])
        router.add("GET", endpoints.CHART_MESSAGES, {}, status=500)
        router.add("GET", endpoints.STATS_DAILY_VISITS, [])

        with pytest.raises(ApiError) as info:
            fetch_chart_data(client)
        assert info.value.message == CHART_ERROR


class TestSeries:
    """Test chart series shaping."""

    def test_monthly_series(self):
        rows = [
            {"_id": {"year": 2024, "month": 3}, "count": 5},
            {"_id": {"year": 2023, "month": 12}, "count": 2},
            {"_id": {"year": 2024, "month": 13}, "count": 9},
            {"_id": None, "count": 1},
        ]
        series = monthly_series(rows)

        assert list(series) == [2023, 2024]
        assert series[2023][11] == 2
        assert series[2024][2] == 5
        assert sum(series[2024]) == 5

    def test_monthly_series_bad_input(self):
        assert monthly_series(None) == {}
        assert monthly_series({"data": []}) == {}

    def test_visit_series(self):
        series = visit_series([{"date": "2024-05-01", "views": 10}, {"date": "2024-05-02"}])
        assert series == {"labels": ["5/1/2024", "5/2/2024"], "views": [10, 0]}
        assert visit_series([]) == {"labels": [], "views": []}


class TestCalculateChange:
    """Test percentage change between readings."""

    @pytest.mark.parametrize("current,previous,expected", [
        (150, 100, {"percentage": 50.0, "type": "increase"}),
        (50, 100, {"percentage": 50.0, "type": "decrease"}),
        (100, 100, {"percentage": 0.0, "type": "neutral"}),
        (10, 0, {"percentage": 0.0, "type": "neutral"}),
        (1, 3, {"percentage": 66.7, "type": "decrease"}),
    ])
    def test_calculate_change(self, current, previous, expected):
        assert calculate_change(current, previous) == expected


class TestRecentActivity:
    """Test the activity feed passthrough."""

    def test_unwraps_data(self, client, router):
        router.add("GET", "/activity/recent", {"data": [{"type": "job", "title": "Spa Therapist"}]})
        assert fetch_recent_activity(client) == [{"type": "job", "title": "Spa Therapist"}]
