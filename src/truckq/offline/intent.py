"""Intent records and the results that flow around them.

An Intent is a pending state-change request captured while offline.
It lives in the queue until it replays successfully, exhausts its retry
budget, or is parked as a conflict.
"""
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from truckq.core.constants import PRIORITY_RANK, REASON_RETRIES_EXHAUSTED
from truckq.core.receipt import StopRule


class MalformedIntent(StopRule):
    """Raised for actions without a usable type. A programmer error."""
    pass


class Priority(Enum):
    """Replay tiers. All HIGH drain before MEDIUM before LOW."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return PRIORITY_RANK[self.value]


class SinkOutcome(Enum):
    """What the action sink reported for one replay attempt."""
    SUCCESS = "success"
    FAILURE = "failure"
    CONFLICT = "conflict"


@dataclass
class Intent:
    """A queued action waiting for connectivity."""
    intent_id: str
    action_type: str
    payload: Any
    priority: Priority
    retries_remaining: int
    max_retries: int
    enqueued_at: int
    metadata: dict = field(default_factory=dict)
    created_ts: str | None = None
    last_error: str | None = None

    @property
    def attempts(self) -> int:
        """Failed attempts so far."""
        return self.max_retries - self.retries_remaining

    def sort_key(self) -> tuple[int, int]:
        return (self.priority.rank, self.enqueued_at)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["priority"] = self.priority.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Intent":
        return cls(
            intent_id=data["intent_id"],
            action_type=data["action_type"],
            payload=data.get("payload"),
            priority=Priority(data["priority"]),
            retries_remaining=data["retries_remaining"],
            max_retries=data["max_retries"],
            enqueued_at=data["enqueued_at"],
            metadata=data.get("metadata") or {},
            created_ts=data.get("created_ts"),
            last_error=data.get("last_error"),
        )


@dataclass
class SinkResult:
    """Detailed sink answer. Sinks may also just return a bool."""
    outcome: SinkOutcome
    data: Any = None
    error: str | None = None
    local_data: Any = None
    server_data: Any = None

    @classmethod
    def ok(cls, data: Any = None) -> "SinkResult":
        return cls(SinkOutcome.SUCCESS, data=data)

    @classmethod
    def failed(cls, error: str | None = None) -> "SinkResult":
        return cls(SinkOutcome.FAILURE, error=error)

    @classmethod
    def conflict(cls, local_data: Any, server_data: Any) -> "SinkResult":
        return cls(SinkOutcome.CONFLICT, local_data=local_data, server_data=server_data)


@dataclass
class FailureReport:
    """Permanent failure of a queued intent."""
    intent_id: str
    action_type: str
    metadata: dict
    reason: str = REASON_RETRIES_EXHAUSTED
    last_error: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Conflict:
    """An intent parked because the server holds newer data."""
    intent: Intent
    local_data: Any
    server_data: Any
    detected_ts: str

    def to_dict(self) -> dict:
        return {
            "intent": self.intent.to_dict(),
            "local_data": self.local_data,
            "server_data": self.server_data,
            "detected_ts": self.detected_ts,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Conflict":
        return cls(
            intent=Intent.from_dict(data["intent"]),
            local_data=data.get("local_data"),
            server_data=data.get("server_data"),
            detected_ts=data["detected_ts"],
        )
