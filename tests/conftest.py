"""
Pytest configuration and shared fixtures.
"""

import json
from typing import Any, Dict, List
from unittest.mock import Mock
from urllib.parse import urlparse

import pytest
import requests

from spadmin.client import ApiClient
from spadmin.logger import StructuredLogger, reset_logger

BASE_URL = "https://api.example.test/api/v1"


def make_response(status: int = 200, body: Any = None) -> requests.Response:
    """Build a real requests.Response carrying a JSON body."""
    resp = requests.Response()
    resp.status_code = status
    resp._content = b"" if body is None else json.dumps(body).encode("utf-8")
    return resp


class Router:
    """Answers session.request calls from a (method, path) table and records every call."""

    def __init__(self):
        self.routes: Dict[tuple, Any] = {}
        self.calls: List[Dict[str, Any]] = []

    def add(self, method: str, path: str, body: Any = None, status: int = 200, exc: Exception = None):
        self.routes[(method.upper(), path)] = exc if exc is not None else (status, body)

    def __call__(self, method, url, params=None, json=None, headers=None, timeout=None):
        path = urlparse(url).path
        if path.startswith("/api/v1"):
            path = path[len("/api/v1"):]
        self.calls.append({
            "method": method,
            "path": path,
            "params": params,
            "json": json,
            "headers": headers,
            "timeout": timeout,
        })
        route = self.routes.get((method.upper(), path))
        if route is None:
            return make_response(404, {"message": f"No route for {method} {path}"})
        if isinstance(route, Exception):
            raise route
        status, body = route
        return make_response(status, body)

    def methods(self) -> List[str]:
        return [f"{c['method']} {c['path']}" for c in self.calls]


@pytest.fixture(autouse=True)
def fresh_logger():
    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def quiet_logger() -> StructuredLogger:
    return StructuredLogger(name="spadmin-test", enable_console=False)


@pytest.fixture
def router() -> Router:
    return Router()


@pytest.fixture
def client(router, quiet_logger) -> ApiClient:
    session = Mock(spec=requests.Session)
    session.request.side_effect = router
    return ApiClient(BASE_URL, token="s3cret", session=session, logger=quiet_logger)


@pytest.fixture
def raw_jobs() -> List[Dict[str, Any]]:
    return [
        {
            "_id": "j1",
            "title": "Spa Therapist",
            "category": {"name": "Therapist"},
            "location": "Andheri",
            "state": "Maharashtra",
            "salary": 25000,
            "spa": {"_id": "s1", "name": "Lotus Spa"},
            "createdAt": "2024-03-01T10:00:00.000Z",
        },
        {
            "_id": "j2",
            "title": "Receptionist",
            "category": "Front Desk",
            "location": "Indiranagar",
            "state": "Karnataka",
            "salary": "Negotiable",
            "spa": {"_id": "s2", "name": "Orchid Wellness"},
            "createdAt": "2024-03-05T10:00:00.000Z",
        },
        {
            "_id": "j3",
            "title": "Senior Therapist",
            "category": {"name": "Therapist"},
            "location": "Koramangala",
            "state": "Karnataka",
            "salary": None,
            "spa": {"_id": "s1", "name": "Lotus Spa"},
            "createdAt": "2024-02-20T10:00:00.000Z",
        },
    ]


@pytest.fixture
def raw_spas() -> List[Dict[str, Any]]:
    return [
        {
            "_id": "s2",
            "name": "orchid Wellness",
            "phone": "+91 98450 12345",
            "website": "https://orchid.example.com",
            "address": {"street": "12 MG Road", "city": "Bengaluru", "state": "Karnataka"},
        },
        {
            "_id": "s1",
            "name": "Lotus Spa",
            "phone": "+91 98200 11111",
            "address": {"street": "4 Link Road", "city": "Mumbai", "state": "Maharashtra"},
        },
        {
            "_id": "s3",
            "name": "Aqua Retreat",
            "phone": "+91 98200 22222",
            "address": {"street": "9 Beach Road", "city": "Mumbai", "state": "Maharashtra"},
        },
    ]


@pytest.fixture
def raw_messages() -> List[Dict[str, Any]]:
    return [
        {
            "_id": "m1",
            "name": "Asha",
            "email": "asha@example.com",
            "subject": "jobs",
            "message": "Looking for therapist openings in Pune.",
            "createdAt": "2024-04-02T09:30:00.000Z",
        },
        {
            "_id": "m2",
            "name": "Ravi",
            "email": "ravi@example.com",
            "subject": "general",
            "message": "x" * 150,
            "status": "read",
            "createdAt": "2024-04-10T18:00:00.000Z",
        },
        {
            "_id": "m3",
            "name": "Meena",
            "email": "meena@example.com",
            "subject": "employer",
            "message": "We want to post jobs.",
            "createdAt": "2024-03-28T12:00:00.000Z",
        },
    ]


@pytest.fixture
def raw_subscribers() -> List[Dict[str, Any]]:
    return [
        {"_id": "u1", "email": "old@example.com", "phone": "9000000001", "createdAt": "2023-12-01T00:00:00Z"},
        {"_id": "u2", "email": "new@example.com", "phone": "9000000002", "createdAt": "2024-05-01T00:00:00Z"},
        {"_id": "u3", "email": "nodate@example.com"},
    ]


@pytest.fixture
def raw_applications() -> List[Dict[str, Any]]:
    return [
        {
            "_id": "a1",
            "status": "pending",
            "appliedAt": "2024-04-01T08:00:00Z",
            "candidate": {"fullName": "Kiran Rao", "email": "kiran@example.com", "phone": "9000011111", "resume": "/r/kiran.pdf"},
            "job": {"title": "Spa Therapist", "spa": {"name": "Lotus Spa"}},
        },
        {
            "_id": "a2",
            "status": "Shortlisted",
            "appliedAt": "2024-04-03T08:00:00Z",
            "guestInfo": {"firstname": "Neha", "lastname": "Shah", "email": "neha@example.com"},
            "job": {"title": "Receptionist", "spa": {"name": "Orchid Wellness"}},
        },
    ]
