from __future__ import annotations

import copy
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import httpx
import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from revenue_engine.core.config import Settings
from revenue_engine.core.errors import FetchError
from revenue_engine.schemas import QueryDescriptor, ReportSnapshot
from revenue_engine.services.reporting_client import ReportingApiClient

GENERATED_AT = datetime(2025, 1, 4, 8, 30, tzinfo=timezone.utc)

SAMPLE_PAYLOAD: dict[str, Any] = {
    "success": True,
    "data": {
        "summary": {
            "totalRevenue": 20000,
            "orderRevenue": 12000,
            "paymentRevenue": 8000,
            "totalOrders": 3,
            "totalPayments": 5,
            "premiumMemberCount": 4,
        },
        "commission": {"rate": 0.025, "grossTotal": 20000},
        "buckets": [
            {"key": "SUBSCRIPTIONS", "label": "Subscriptions", "count": 2, "amountSum": 5000},
            {"key": "COORDINATOR_EVENT_FEES", "count": 2, "amountSum": 2500},
            {"key": "STUDENT_EVENT_FEES", "count": 1, "amountSum": 500},
        ],
        "breakdowns": {
            "byUser": [
                {
                    "name": "Acme, Inc.",
                    "userType": "INSTITUTE",
                    "email": "ops@acme.test",
                    "uniqueId": "IN-0001",
                    "count": 1,
                    "totalAmount": 2500.5,
                },
            ],
            "byCoordinatorEvent": [
                {"coordinatorName": "Coach One", "eventName": "State Meet", "count": 2, "totalAmount": 2500},
            ],
            "byAthleteEvent": None,
        },
        "dailyRevenue": [
            {"date": "2025-01-01", "label": "Jan 1", "revenue": 100, "orders": 1, "payments": 2},
            {"date": "2025-01-02", "label": "Jan 2", "revenue": 0},
            {"date": "2025-01-03", "label": "Jan 3", "revenue": 50, "orders": 1},
        ],
        "topSpenders": [
            {"name": "A", "totalSpent": 5000, "orderCount": 1},
            {"name": "B", "totalSpent": 12000, "orderCount": 2},
        ],
        "recentTransactions": [
            {
                "id": "txn-2",
                "type": "SUBSCRIPTION_MONTHLY",
                "amount": 2500.5,
                "date": "2025-01-02T09:00:00Z",
                "description": "Monthly plan",
                "customer": {"name": "Acme, Inc.", "type": "INSTITUTE"},
                "commission": 10,
            },
            {
                "id": "txn-1",
                "type": "ORDER",
                "status": "SUCCESS",
                "amount": 1000,
                "date": "2025-01-03T10:00:00Z",
                "description": 'He said "hi"',
                "customer": {"name": "Coach One", "type": "COACH"},
                "eventName": "State Meet",
                "sport": "Athletics",
            },
        ],
        "eventWiseRevenue": [
            {"eventName": "State Meet", "sport": "Athletics", "orders": 1, "payments": 2, "totalAmount": 3500},
        ],
        "premiumMembers": [
            {
                "id": "coach-1",
                "name": "Coach One",
                "uniqueId": "CO-0001",
                "email": "coach@one.test",
                "phone": "+91 90000 00001",
                "subscriptionType": "ANNUAL",
                "subscriptionExpiresAt": "2025-06-30T00:00:00Z",
                "daysUntilExpiry": 177,
                "primarySport": "Athletics",
                "totalStudents": 12,
            },
        ],
        "membership": {"coaches": 4, "institutes": 1, "clubs": 0, "total": 5},
        "eventPayments": {"totalPayments": 2, "totalAmount": 1500},
        "lastUpdatedAt": "2025-01-03T12:00:00Z",
    },
}


class StubReportingClient:
    """In-memory reporting client recording every descriptor it is asked for."""

    def __init__(self, responses: list[ReportSnapshot | FetchError] | None = None) -> None:
        self.responses = list(responses or [])
        self.requests: list[QueryDescriptor] = []

    def fetch_snapshot(self, descriptor: QueryDescriptor, *, timeout: float | None = None) -> ReportSnapshot:
        self.requests.append(descriptor)
        response = self.responses.pop(0) if self.responses else ReportSnapshot()
        if isinstance(response, FetchError):
            raise response
        return response


@pytest.fixture()
def sample_payload() -> dict[str, Any]:
    return copy.deepcopy(SAMPLE_PAYLOAD)


@pytest.fixture()
def sample_snapshot(sample_payload: dict[str, Any]) -> ReportSnapshot:
    return ReportSnapshot.model_validate(sample_payload["data"])


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        export_dir=str(tmp_path / "exports"),
        reporting_api_url="http://reports.test/api/admin",
        enable_tracing=False,
        _env_file=None,
    )


@pytest.fixture()
def stub_client() -> StubReportingClient:
    return StubReportingClient()


@pytest.fixture()
def api_requests() -> list[httpx.Request]:
    return []


@pytest.fixture()
def http_client(api_requests: list[httpx.Request]) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        api_requests.append(request)
        return httpx.Response(200, content=json.dumps(SAMPLE_PAYLOAD), headers={"content-type": "application/json"})

    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.fixture()
def reporting_client(http_client: httpx.Client, settings: Settings) -> ReportingApiClient:
    return ReportingApiClient(settings.reporting_api_url, client=http_client)


@pytest.fixture()
def make_stub_client() -> type[StubReportingClient]:
    return StubReportingClient


@pytest.fixture()
def generated_at() -> datetime:
    return GENERATED_AT
