"""
Pytest configuration and shared fixtures.

All network traffic is mocked: either httpx.AsyncClient is patched, or a
scripted AsyncMock stands in for JsonHttpClient.
"""
from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from portent.config import get_settings


def make_response(payload: Any, status_code: int = 200) -> MagicMock:
    """Build an httpx-like response whose body is the JSON encoding of payload."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.content = json.dumps(payload).encode("utf-8")
    return resp


def inline_query_update(
    update_id: int,
    username: str | None = "alice",
    query_id: str = "q-1",
) -> dict[str, Any]:
    """Raw getUpdates entry carrying an inline query."""
    user: dict[str, Any] = {"id": 42, "is_bot": False, "first_name": "Alice"}
    if username is not None:
        user["username"] = username
    return {
        "update_id": update_id,
        "inline_query": {
            "id": query_id,
            "from": user,
            "query": "",
            "offset": "",
        },
    }


@pytest.fixture
def mock_httpx_client():
    """Patch httpx.AsyncClient; yields (client class mock, client instance mock)."""
    with patch("httpx.AsyncClient") as mock_cls:
        mock_client = AsyncMock()
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=False)
        mock_cls.return_value = mock_client
        yield mock_cls, mock_client


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
