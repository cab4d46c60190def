"""Test configuration and fixtures for the offline queue.

RecordingSink: action sink double that records every call
Fixtures: config, connectivity and sink fixtures shared by all tests
"""
from dataclasses import dataclass, field
from typing import Any, Callable

import pytest

from truckq.config.settings import QueueConfig
from truckq.offline.connectivity import ConnectivityMonitor
from truckq.offline.intent import SinkResult


@dataclass
class RecordingSink:
    """Action sink double.

    Every call is recorded as (action_type, payload). Action types in
    fail_types fail; responses maps an action type to a fixed answer;
    on_call runs after recording, before answering.
    """
    fail_types: set = field(default_factory=set)
    responses: dict = field(default_factory=dict)
    on_call: Callable[[str, Any], None] | None = None
    calls: list = field(default_factory=list)

    def execute(self, action_type: str, payload: Any):
        self.calls.append((action_type, payload))
        if self.on_call is not None:
            self.on_call(action_type, payload)
        if action_type in self.responses:
            return self.responses[action_type]
        return action_type not in self.fail_types

    @property
    def action_types(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def config(tmp_path) -> QueueConfig:
    """Default config writing to a temporary queue file."""
    return QueueConfig(queue_path=tmp_path / "offline_queue.jsonl")


@pytest.fixture
def sink() -> RecordingSink:
    """Sink that accepts everything."""
    return RecordingSink()


@pytest.fixture
def monitor() -> ConnectivityMonitor:
    """Connectivity monitor that starts offline."""
    return ConnectivityMonitor(connected=False)


@pytest.fixture
def conflict_result() -> SinkResult:
    return SinkResult.conflict(
        local_data={"id": "ord_1", "status": "pending"},
        server_data={"id": "ord_1", "status": "ready"},
    )


@pytest.fixture(autouse=True)
def default_features(monkeypatch):
    """Pin feature flags to their shipped defaults for every test."""
    import truckq.config.features as features
    monkeypatch.setattr(features, "FEATURE_CONFLICT_HOLD_ENABLED", True)
    monkeypatch.setattr(features, "FEATURE_RETRY_BACKOFF_ENABLED", False)
    monkeypatch.setattr(features, "FEATURE_QUEUE_PERSISTENCE_ENABLED", False)
