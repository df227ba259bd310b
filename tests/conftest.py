"""
Pytest configuration for the warehouse entry widget.

Provides fixtures for:
- Settings isolated from the developer's environment and `.env`
- A scripted fake of the chooser's query capability
- A recording notifier
"""

from __future__ import annotations

import asyncio
import base64
import json
import os
from typing import Any, Dict, List, Optional

import pytest

from warehouse_entry.config import Settings, get_settings
from warehouse_entry.domain.models import QueryRequest
from warehouse_entry.notifications import RecordingNotifier


def make_token(payload: Any, header: str = "eyJhbGciOiJIUzI1NiJ9") -> str:
    """Build a dotted bearer credential whose middle segment encodes `payload`."""
    raw = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
    segment = base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")
    return f"{header}.{segment}.signature"


def block_data(**overrides: str) -> Dict[str, str]:
    data = {
        "libraryName": "Main",
        "category": "Fasteners",
        "name": "Hex bolt",
        "unitPriceWithTax": "0.35",
        "quantity": "500",
        "taxRate": "13%",
        "supplier": "Acme",
        "sku": "HB-100",
        "createdAt": "2023-05-01 09:30:00",
        "createdBy": "bob",
    }
    data.update(overrides)
    return data


class FakeQuery:
    """
    Scripted query capability.

    Each call records its request and either returns the next scripted
    response, raises the next scripted exception, or waits on a gate so tests
    can control completion order.
    """

    def __init__(self, responses: Optional[List[Any]] = None) -> None:
        self.requests: List[QueryRequest] = []
        self.responses: List[Any] = list(responses or [])
        self.gates: List[asyncio.Event] = []

    def gate_next(self) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates.append(gate)
        return gate

    async def __call__(self, request: QueryRequest) -> Any:
        index = len(self.requests)
        self.requests.append(request)
        if index < len(self.gates):
            await self.gates[index].wait()
        response = self.responses[index] if index < len(self.responses) else {"items": []}
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def test_settings() -> Settings:
    """
    Settings with the documented defaults, independent of `.env`.
    """
    return Settings(_env_file=None)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def fake_query() -> FakeQuery:
    return FakeQuery()


@pytest.fixture(scope="session")
def test_dsn() -> str:
    """
    Database connection string for integration tests.
    """
    return (
        f"postgresql://{os.getenv('DB_USER', 'postgres')}:{os.getenv('DB_PASSWORD', 'postgres')}"
        f"@{os.getenv('DB_HOST', 'localhost')}:{os.getenv('DB_PORT', '5432')}"
        f"/{os.getenv('DB_NAME', 'qnotes')}"
    )


@pytest.fixture(name="make_token")
def make_token_fixture():
    return make_token


@pytest.fixture(name="block_data")
def block_data_fixture():
    return block_data


@pytest.fixture
def query_factory():
    return FakeQuery
