"""
Tests for the HTTP client and its error mapping.
"""

from unittest.mock import Mock

import pytest
import requests

from spadmin.client import ApiClient, resource_name, unwrap_records
from spadmin.config import Settings
from spadmin.errors import (
    NETWORK_ERROR,
    NOT_FOUND,
    UNAUTHORIZED,
    ApiError,
    AuthError,
    NetworkError,
    NotFoundError,
    ServerError,
)


class TestRequests:
    """Test request building."""

    def test_bearer_token_and_headers(self, client, router):
        router.add("GET", "/spajobs", [])
        client.get("/spajobs", params={"page": 2})

        call = router.calls[0]
        assert call["headers"]["Authorization"] == "Bearer s3cret"
        assert call["headers"]["Accept"] == "application/json"
        assert call["headers"]["X-Requested-With"] == "XMLHttpRequest"
        assert call["params"] == {"page": 2}
        assert call["timeout"] == 15.0

    def test_no_token_no_authorization(self, client, router):
        client.token = None
        router.add("GET", "/stats", {})
        client.get("/stats")
        assert "Authorization" not in router.calls[0]["headers"]

    def test_post_sends_json(self, client, router):
        router.add("POST", "/messages", {"success": True})
        assert client.post("/messages", {"name": "x"}) == {"success": True}
        assert router.calls[0]["json"] == {"name": "x"}

    def test_empty_body_decodes_to_none(self, client, router):
        router.add("DELETE", "/suscribers/u1", None, status=204)
        assert client.delete("/suscribers/u1") is None

    def test_rejects_relative_base_url(self):
        with pytest.raises(ValueError):
            ApiClient("localhost:5000")

    @pytest.mark.parametrize("timeout", [0, -1, None])
    def test_rejects_non_positive_timeout(self, timeout):
        with pytest.raises(ValueError, match="timeout"):
            ApiClient("https://api.example.test", timeout=timeout)

    def test_from_settings(self):
        settings = Settings(api_url="https://api.example.test", token="abc", timeout=3)
        c = ApiClient.from_settings(settings, session=Mock(spec=requests.Session))
        assert c.base_url == "https://api.example.test"
        assert c.token == "abc"
        assert c.timeout == 3


class TestErrorMapping:
    """Test that every failure lands in the error taxonomy."""

    @pytest.mark.parametrize("status,cls", [
        (401, AuthError),
        (403, AuthError),
        (404, NotFoundError),
        (500, ServerError),
        (502, ServerError),
        (422, ServerError),
    ])
    def test_status_to_error_class(self, client, router, status, cls):
        router.add("GET", "/users", {}, status=status)
        with pytest.raises(cls) as info:
            client.get("/users")
        assert info.value.status == status

    def test_server_message_wins(self, client, router):
        router.add("DELETE", "/spajobs/j1", {"message": "Job has applications"}, status=409)
        with pytest.raises(ServerError, match="Job has applications"):
            client.delete("/spajobs/j1")

    def test_failed_response_is_logged(self, client, router, caplog):
        """Every status >= 400 logs the mapped message before raising."""
        router.add("DELETE", "/spajobs/j1", {"message": "Job has applications"}, status=409)
        with caplog.at_level("ERROR", logger="spadmin-test"):
            with pytest.raises(ServerError):
                client.delete("/spajobs/j1")

        assert "Request failed" in caplog.text
        assert '"status": 409' in caplog.text
        assert '"error": "Job has applications"' in caplog.text

    def test_error_key_is_also_read(self, client, router):
        router.add("GET", "/messages", {"error": "Bad date range"}, status=400)
        with pytest.raises(ServerError, match="Bad date range"):
            client.get("/messages")

    def test_default_messages(self, client, router):
        router.add("GET", "/users", None, status=401)
        with pytest.raises(AuthError) as info:
            client.get("/users")
        assert info.value.message == UNAUTHORIZED

        with pytest.raises(NotFoundError) as info:
            client.get("/nowhere")
        assert "No route" in info.value.message

        router.add("GET", "/gone", None, status=404)
        with pytest.raises(NotFoundError) as info:
            client.get("/gone")
        assert info.value.message == NOT_FOUND

    def test_connection_error_is_network_error(self, client, router):
        router.add("GET", "/stats", exc=requests.exceptions.ConnectionError("refused"))
        with pytest.raises(NetworkError) as info:
            client.get("/stats")
        assert info.value.message == NETWORK_ERROR
        assert info.value.status is None

    def test_timeout_is_network_error(self, client, router):
        router.add("GET", "/stats", exc=requests.exceptions.Timeout())
        with pytest.raises(NetworkError):
            client.get("/stats")

    def test_no_retry(self, client, router):
        router.add("GET", "/stats", {}, status=503)
        with pytest.raises(ServerError):
            client.get("/stats")
        assert len(router.calls) == 1

    def test_failures_are_counted(self, client, router, quiet_logger):
        router.add("GET", "/spajobs", [])
        router.add("GET", "/users", {}, status=500)
        client.get("/spajobs")
        with pytest.raises(ServerError):
            client.get("/users")

        metrics = quiet_logger.get_metrics()
        assert metrics["requests_made"] == 2
        assert metrics["requests_failed"] == 1
        assert metrics["errors_by_type"] == {"HTTPError_500": 1}
        assert metrics["resource_stats"]["spajobs"]["success_rate"] == 1.0


class TestLogin:
    """Test admin login."""

    def test_login_stores_token(self, client, router):
        client.token = None
        router.add("POST", "/admin/login", {"token": "fresh", "user": {"name": "Admin"}})

        client.login({"email": "admin@example.com", "password": "secret1"})

        assert client.token == "fresh"
        assert router.calls[0]["json"]["email"] == "admin@example.com"

    def test_login_token_in_data(self, client, router):
        router.add("POST", "/admin/login", {"data": {"token": "nested"}})
        client.login({"email": "a@b.co", "password": "secret1"})
        assert client.token == "nested"

    def test_login_without_token_fails(self, client, router):
        router.add("POST", "/admin/login", {"success": True})
        with pytest.raises(ApiError):
            client.login({"email": "a@b.co", "password": "secret1"})
        assert client.token == "s3cret"

    def test_bad_credentials(self, client, router):
        router.add("POST", "/admin/login", {"message": "Invalid credentials"}, status=401)
        with pytest.raises(AuthError, match="Invalid credentials"):
            client.login({"email": "a@b.co", "password": "wrong"})


class TestFetchAll:
    """Test the concurrent group fetch."""

    def test_results_in_input_order(self, client, router):
        router.add("GET", "/a", [1])
        router.add("GET", "/b", [2])
        router.add("GET", "/c", [3])
        assert client.fetch_all(["/a", "/b", "/c"]) == [[1], [2], [3]]

    def test_one_failure_fails_group(self, client, router):
        router.add("GET", "/a", [1])
        router.add("GET", "/b", {}, status=500)
        with pytest.raises(ServerError):
            client.fetch_all(["/a", "/b"])

    def test_empty_group(self, client):
        assert client.fetch_all([]) == []


class TestHelpers:
    """Test envelope unwrapping and resource naming."""

    def test_unwrap_records(self, quiet_logger):
        assert unwrap_records([{"a": 1}], quiet_logger) == [{"a": 1}]
        assert unwrap_records({"data": [{"a": 1}]}, quiet_logger) == [{"a": 1}]
        assert unwrap_records({"users": [{"a": 1}]}, quiet_logger) == [{"a": 1}]
        assert unwrap_records({"data": "nope"}, quiet_logger) == []
        assert unwrap_records(None, quiet_logger) == []

    def test_resource_name(self):
        assert resource_name("/spajobs/j1") == "spajobs"
        assert resource_name("/") == "root"
