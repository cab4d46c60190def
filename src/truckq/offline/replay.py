"""Replay driver for pushing queued intents through the action sink.

Drain process:
1. Check connectivity (before every intent, not just once, and again
   after any backoff wait)
2. Take the next intent in replay order
3. Hand it to the sink
4. Success: drop it. Failure: spend one retry and move it to the tail
   of its lane, or report it as exhausted when the budget hits zero.
   Conflict: park it until the host resolves it.
5. Emit a summary receipt and return to idle

Each drain pass attempts every intent at most once, so a pass always
terminates even when the sink fails every call.
"""
import random
import time
from dataclasses import dataclass, field
from typing import Any, Callable

from truckq.config import features
from truckq.config.settings import QueueConfig
from truckq.core.constants import (
    REASON_RETRIES_EXHAUSTED,
    SYNC_ERROR,
    SYNC_IDLE,
    SYNC_SYNCING,
)
from truckq.core.receipt import StopRule, emit_receipt, now_iso

from .intent import Conflict, FailureReport, Intent, Priority, SinkOutcome, SinkResult
from .queue import OfflineQueue


def backoff_delay_ms(
    attempts: int,
    config: QueueConfig,
    jitter: Callable[[], float] = random.random,
) -> float:
    """Exponential delay before retry number `attempts`.

    base * 2^attempts plus up to jitter_ms of noise, capped at cap_ms.
    """
    delay = config.backoff_base_ms * (2 ** attempts) + jitter() * config.backoff_jitter_ms
    return min(delay, config.backoff_cap_ms)


def call_sink(sink: Any, intent: Intent) -> SinkResult:
    """Invoke the sink for one intent and normalise its answer.

    Sinks are callables or objects with an execute() method, taking
    (action_type, payload) and returning a bool or a SinkResult.
    Exceptions raised by the sink count as failures.

    Raises:
        StopRule: If the sink returns anything else
    """
    execute = getattr(sink, "execute", sink)
    try:
        result = execute(intent.action_type, intent.payload)
    except Exception as e:
        return SinkResult.failed(f"{type(e).__name__}: {e}")

    if isinstance(result, SinkResult):
        return result
    if isinstance(result, bool):
        return SinkResult.ok() if result else SinkResult.failed()
    raise StopRule(
        f"Sink returned {type(result).__name__} for {intent.action_type}; "
        "expected bool or SinkResult"
    )


@dataclass
class ReplayResult:
    """Outcome of one drain call."""
    status: str
    succeeded: list[str] = field(default_factory=list)
    retried: list[str] = field(default_factory=list)
    failures: list[FailureReport] = field(default_factory=list)
    conflicts: list[str] = field(default_factory=list)
    attempted: list[str] = field(default_factory=list)
    remaining: int = 0

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "succeeded": list(self.succeeded),
            "retried": list(self.retried),
            "failures": [f.to_dict() for f in self.failures],
            "conflicts": list(self.conflicts),
            "attempted": list(self.attempted),
            "remaining": self.remaining,
        }


class ReplayDriver:
    """Drains an OfflineQueue through an action sink.

    Holds the sync state machine (idle -> syncing -> idle | error), the
    reentrancy guard and the parked conflicts.
    """

    def __init__(
        self,
        queue: OfflineQueue,
        sink: Any,
        is_connected: Callable[[], bool],
        config: QueueConfig | None = None,
        on_failure: Callable[[FailureReport], None] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        jitter: Callable[[], float] = random.random,
    ):
        self.queue = queue
        self.sink = sink
        self.is_connected = is_connected
        self.config = config or QueueConfig()
        self.on_failure = on_failure
        self.sleep = sleep
        self.jitter = jitter

        self.sync_state = SYNC_IDLE
        self.last_sync_time: str | None = None
        self.conflicts: list[Conflict] = []
        self._syncing = False

    def _set_state(self, state: str) -> None:
        self.sync_state = state
        if state == SYNC_IDLE:
            self.last_sync_time = now_iso()
        emit_receipt("sync_state", {
            "tenant_id": self.config.tenant_id,
            "sync_state": state,
            "queue_size": len(self.queue),
        })

    def drain(self, max_passes: int = 1) -> ReplayResult:
        """Replay queued intents in priority order.

        Args:
            max_passes: How many times to walk the queue. Intents that
                fail are retried on the next pass.

        Returns:
            ReplayResult; status is one of completed, interrupted,
            not_connected, queue_empty, already_syncing
        """
        if self._syncing:
            return ReplayResult(status="already_syncing", remaining=len(self.queue))
        if not self.is_connected():
            return ReplayResult(status="not_connected", remaining=len(self.queue))
        if not self.queue:
            return ReplayResult(status="queue_empty")

        self._syncing = True
        self._set_state(SYNC_SYNCING)
        result = ReplayResult(status="completed")
        try:
            for _ in range(max_passes):
                retried_before = len(result.retried)
                if not self._drain_pass(result):
                    result.status = "interrupted"
                    break
                if len(result.retried) == retried_before or not self.queue:
                    break
        except Exception:
            self._set_state(SYNC_ERROR)
            raise
        finally:
            self._syncing = False

        result.remaining = len(self.queue)
        self._set_state(SYNC_IDLE)
        emit_receipt("replay_summary", {
            "tenant_id": self.config.tenant_id,
            "status": result.status,
            "succeeded": len(result.succeeded),
            "retried": len(result.retried),
            "failed": len(result.failures),
            "conflicts": len(result.conflicts),
            "remaining": result.remaining,
        })
        return result

    def _drain_pass(self, result: ReplayResult) -> bool:
        """Walk the queue once. Returns False if connectivity dropped."""
        for intent in list(self.queue):
            if not self.is_connected():
                return False
            if self._wait_before_retry(intent) and not self.is_connected():
                return False
            self._attempt(intent, result)
        return True

    def _wait_before_retry(self, intent: Intent) -> bool:
        """Sleep out the backoff delay for a previously failed intent.

        Returns True if the driver slept.
        """
        if not features.FEATURE_RETRY_BACKOFF_ENABLED or intent.attempts == 0:
            return False
        delay_ms = backoff_delay_ms(intent.attempts, self.config, self.jitter)
        self.sleep(delay_ms / 1000.0)
        return True

    def _attempt(self, intent: Intent, result: ReplayResult) -> None:
        tenant_id = self.config.tenant_id

        result.attempted.append(intent.intent_id)
        emit_receipt("replay_attempt", {
            "tenant_id": tenant_id,
            "intent_id": intent.intent_id,
            "action_type": intent.action_type,
            "priority": intent.priority.value,
            "attempt": intent.attempts + 1,
        })

        # The intent stays queued until the sink has answered
        outcome = call_sink(self.sink, intent)
        self.queue.remove(intent.intent_id)

        if outcome.outcome is SinkOutcome.SUCCESS:
            result.succeeded.append(intent.intent_id)
            emit_receipt("replay_success", {
                "tenant_id": tenant_id,
                "intent_id": intent.intent_id,
                "action_type": intent.action_type,
            })
            return

        if outcome.outcome is SinkOutcome.CONFLICT and features.FEATURE_CONFLICT_HOLD_ENABLED:
            self.conflicts.append(Conflict(
                intent=intent,
                local_data=outcome.local_data,
                server_data=outcome.server_data,
                detected_ts=now_iso(),
            ))
            result.conflicts.append(intent.intent_id)
            emit_receipt("replay_conflict", {
                "tenant_id": tenant_id,
                "intent_id": intent.intent_id,
                "action_type": intent.action_type,
            })
            return

        intent.retries_remaining -= 1
        intent.last_error = outcome.error

        if intent.retries_remaining > 0:
            self.queue.requeue(intent)
            result.retried.append(intent.intent_id)
            emit_receipt("replay_retry", {
                "tenant_id": tenant_id,
                "intent_id": intent.intent_id,
                "action_type": intent.action_type,
                "retries_remaining": intent.retries_remaining,
                "error": intent.last_error,
            })
            return

        report = FailureReport(
            intent_id=intent.intent_id,
            action_type=intent.action_type,
            metadata=dict(intent.metadata),
            reason=REASON_RETRIES_EXHAUSTED,
            last_error=intent.last_error,
        )
        result.failures.append(report)
        emit_receipt("replay_exhausted", {
            "tenant_id": tenant_id,
            "intent_id": intent.intent_id,
            "action_type": intent.action_type,
            "reason": report.reason,
            "metadata": report.metadata,
        })
        if self.on_failure is not None:
            self.on_failure(report)

    def resolve_conflict(self, intent_id: str, use_server_data: bool) -> Intent | None:
        """Settle a parked conflict.

        Args:
            intent_id: Id of the parked intent
            use_server_data: True keeps the server's version and discards
                the local intent; False re-queues it at HIGH priority with
                a fresh retry budget

        Returns:
            The re-queued intent, or None when the server data wins

        Raises:
            KeyError: If no conflict is parked under intent_id
        """
        for index, conflict in enumerate(self.conflicts):
            if conflict.intent.intent_id == intent_id:
                break
        else:
            raise KeyError(intent_id)

        del self.conflicts[index]
        parked = conflict.intent

        requeued = None
        if not use_server_data:
            requeued = self.queue.enqueue(
                parked.action_type,
                parked.payload,
                Priority.HIGH,
                max_retries=parked.max_retries,
                metadata=parked.metadata,
            )

        emit_receipt("conflict_resolution", {
            "tenant_id": self.config.tenant_id,
            "intent_id": intent_id,
            "action_type": parked.action_type,
            "resolution": "server" if use_server_data else "local",
            "requeued_as": requeued.intent_id if requeued else None,
        })
        return requeued
