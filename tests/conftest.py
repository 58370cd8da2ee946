"""
Pytest configuration and shared fixtures.

This module provides reusable fixtures for testing the tsdb_console package.
The database API is replaced by ``FakeBackend``, an in-memory implementation
of the REST endpoints wired into a ``MagicMock`` requests session.
"""

from __future__ import annotations

import copy
from collections.abc import Generator
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from tsdb_console.api.client import ConsoleApiClient
from tsdb_console.controller.view_state import ViewStateController
from tsdb_console.core import (
    ApiConfig,
    ConsoleConfig,
    ControllerConfig,
    NotificationConfig,
    reset_config,
    set_config,
)
from tsdb_console.notifications import NotificationChannel

API_BASE_URL = "http://tsdb.test"
API_ROOT = f"{API_BASE_URL}/api"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_response(status_code: int = 200, payload: Any = None, reason: str = "OK", raw: str | None = None) -> MagicMock:
    """Build a stand-in for requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.reason = reason
    if raw is not None:
        response.json.side_effect = requests.exceptions.JSONDecodeError("Expecting value", raw, 0)
    else:
        response.json.return_value = copy.deepcopy(payload)
    return response


class FakeBackend:
    """In-memory database API keyed by (method, path)."""

    def __init__(self) -> None:
        self.total_points = 98765
        self.business_configs: dict[str, dict[str, Any]] = {
            "stock": {
                "name": "Stock quotes",
                "description": "Level-1 stock ticks",
                "block_size": 60,
                "retention_days": 30,
                "compression": "lz4",
            },
            "market": {"name": "Market data"},
        }
        self.system_config: dict[str, Any] | None = {
            "server": {"port": 6379, "bind": "0.0.0.0", "max_connections": 10000},
            "storage": {"data_dir": "./data", "write_buffer_size": 67108864},
        }
        self.instance_configs: dict[str, dict[str, Any]] = {
            "inst-1": {"name": "Primary", "business_type": "stock", "node_id": "node-1"},
            "inst-2": {"name": "Replica", "business_type": "market", "node_id": "node-2"},
        }
        self.cluster: dict[str, Any] = {
            "status": "online",
            "leader": "node-1",
            "nodes": [
                {"id": "node-1", "address": "10.0.0.1:6379", "status": "online", "last_active": 1700000000000},
                {"id": "node-2", "address": "10.0.0.2:6379", "status": "offline", "last_active": None},
            ],
        }
        self.instances: dict[str, dict[str, Any]] = {
            f"inst-{i}": {
                "type": "stock" if i % 2 else "market",
                "status": "running" if i % 3 else "stopped",
                "last_update": 1700000000 + i,
                "data_points": i * 100,
            }
            for i in range(1, 24)
        }
        self.plugins: list[str] = ["compression-lz4", "replication", "backup"]
        self.performance: dict[str, Any] = {"write_rate": 1500, "query_rate": 320, "cache_hit_rate": 97.5}
        self.items: list[dict[str, Any]] = [
            {
                "timestamp": 1700000000000 + i,
                "value": 10.0 + i,
                "tags": {"type": ("stock", "market", "trade")[i % 3], "symbol": f"SYM{i:02d}"},
            }
            for i in range(30)
        ]

        self.requests: list[tuple[str, str, Any]] = []
        self._failures: dict[tuple[str, str], Any] = {}

    # ---- fault injection --------------------------------------------------

    def fail(self, method: str, path: str, status: int = 500, reason: str = "Internal Server Error") -> None:
        self._failures[(method, path)] = make_response(status, {"error": reason}, reason=reason)

    def fail_network(self, method: str, path: str) -> None:
        self._failures[(method, path)] = requests.exceptions.ConnectionError("Connection refused")

    def fail_malformed(self, method: str, path: str) -> None:
        self._failures[(method, path)] = make_response(200, raw="<html>not json</html>")

    def clear_failures(self) -> None:
        self._failures.clear()

    def calls_to(self, method: str, path: str) -> list[Any]:
        return [body for m, p, body in self.requests if m == method and p == path]

    # ---- request routing --------------------------------------------------

    def handle(self, method: str, url: str, json: Any = None, headers: Any = None, timeout: Any = None) -> MagicMock:
        assert url.startswith(API_ROOT), url
        path = url[len(API_ROOT):]
        self.requests.append((method, path, copy.deepcopy(json)))

        failure = self._failures.get((method, path))
        if isinstance(failure, Exception):
            raise failure
        if failure is not None:
            return failure

        route = self._routes().get((method, path))
        if route is None:
            return make_response(404, {"error": "not found"}, reason="Not Found")
        return route(json)

    def _routes(self) -> dict[tuple[str, str], Any]:
        return {
            ("GET", "/stats"): lambda body: make_response(payload={"storage": {"total_points": self.total_points}}),
            ("GET", "/metadata"): lambda body: make_response(payload={
                "config_count": self.config_count,
                "business_types": list(self.business_configs),
            }),
            ("GET", "/config"): lambda body: make_response(payload={
                "business_configs": self.business_configs,
                "system_config": self.system_config,
                "instance_configs": self.instance_configs,
            }),
            ("POST", "/config/update"): self._update_config,
            ("GET", "/cluster"): lambda body: make_response(payload=self.cluster),
            ("GET", "/business"): lambda body: make_response(payload={
                "instances": self.instances,
                "plugins": self.plugins,
                "performance": self.performance,
            }),
            ("GET", "/business/data"): lambda body: make_response(payload={"items": self.items}),
            ("POST", "/business/instance/create"): self._create_instance,
            ("POST", "/business/instance/start"): lambda body: self._set_status(body, "running"),
            ("POST", "/business/instance/stop"): lambda body: self._set_status(body, "stopped"),
            ("POST", "/business/instance/delete"): self._delete_instance,
        }

    @property
    def config_count(self) -> int:
        return len(self.business_configs) + len(self.instance_configs) + (1 if self.system_config else 0)

    def _update_config(self, body: dict[str, Any]) -> MagicMock:
        key, value = body["key"], body["value"]
        scope, _, name = key.partition(":")
        if scope == "instance":
            target = self.instance_configs
        elif scope == "business":
            target = self.business_configs
        elif key == "system:main":
            self.system_config = value
            return make_response(payload={"success": True})
        else:
            return make_response(400, {"error": "bad key"}, reason="Bad Request")

        if value is None:
            target.pop(name, None)
        else:
            target[name] = value
        return make_response(payload={"success": True})

    def _create_instance(self, body: dict[str, Any]) -> MagicMock:
        instance_id = body["instance_id"]
        if instance_id in self.instances:
            return make_response(409, {"error": "exists"}, reason="Conflict")
        self.instances[instance_id] = {
            "type": body["business_type"],
            "status": "stopped",
            "last_update": 1700001000,
            "data_points": 0,
        }
        return make_response(payload={"success": True})

    def _set_status(self, body: dict[str, Any], status: str) -> MagicMock:
        instance = self.instances.get(body["instance_id"])
        if instance is None:
            return make_response(404, {"error": "no such instance"}, reason="Not Found")
        instance["status"] = status
        return make_response(payload={"success": True})

    def _delete_instance(self, body: dict[str, Any]) -> MagicMock:
        if self.instances.pop(body["instance_id"], None) is None:
            return make_response(404, {"error": "no such instance"}, reason="Not Found")
        return make_response(payload={"success": True})


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def test_config() -> Generator[ConsoleConfig, None, None]:
    """Provide a test configuration."""
    config = ConsoleConfig(
        api=ApiConfig(base_url=API_BASE_URL, api_prefix="/api"),
        notifications=NotificationConfig(dismiss_after_seconds=3.0),
        controller=ControllerConfig(discard_stale_loads=True),
    )
    set_config(config)
    yield config
    reset_config()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def channel(test_config: ConsoleConfig, clock: FakeClock) -> NotificationChannel:
    return NotificationChannel(test_config.notifications, clock=clock)


# =============================================================================
# API Fixtures
# =============================================================================


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def api_client(
    test_config: ConsoleConfig,
    channel: NotificationChannel,
    backend: FakeBackend,
) -> Generator[ConsoleApiClient, None, None]:
    """API client whose session is routed to the fake backend."""
    client = ConsoleApiClient(test_config.api, notifier=channel)
    client._session.close()
    client._session = MagicMock()
    client._session.request.side_effect = backend.handle
    yield client
    client.close()


@pytest.fixture
def controller(
    api_client: ConsoleApiClient,
    channel: NotificationChannel,
    test_config: ConsoleConfig,
) -> ViewStateController:
    return ViewStateController(api_client, channel, test_config)


@pytest.fixture
def errors_since(channel: NotificationChannel):
    """Error notifications emitted after a given history index."""

    def _errors(start: int = 0) -> list[Any]:
        return [n for n in channel.history[start:] if n.severity.value == "error"]

    return _errors
