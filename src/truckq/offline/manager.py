"""Offline queue manager: the dispatch path the host sends actions through.

Wires the gate, the queue and the replay driver together:
- dispatch() routes each action (forward to the sink, or queue it)
- an offline -> online transition drains the queue
- exhausted intents are reported through on_failure
"""
from typing import Any, Callable

from truckq.config import features
from truckq.config.settings import QueueConfig
from truckq.core.receipt import emit_receipt

from .classify import Route, classify
from .connectivity import ConnectivityMonitor
from .intent import Conflict, FailureReport, Intent, MalformedIntent
from .queue import OfflineQueue
from .replay import ReplayDriver, ReplayResult
from .store import QueueStore


def validate_action(action: Any) -> str:
    """Return the action type or fail fast on a malformed action."""
    if not isinstance(action, dict):
        raise MalformedIntent(f"Action must be a dict, got {type(action).__name__}")
    action_type = action.get("type")
    if not isinstance(action_type, str) or not action_type:
        raise MalformedIntent("Action is missing a non-empty 'type'")
    return action_type


def extract_metadata(payload: Any, user_id: str | None) -> dict:
    """Correlation fields for a queued intent. Missing values stay unset."""
    metadata = {}
    if isinstance(payload, dict):
        order_id = payload.get("orderId") or payload.get("id")
        if order_id is not None:
            metadata["order_id"] = order_id
    if user_id is not None:
        metadata["user_id"] = user_id
    return metadata


class OfflineQueueManager:
    """Single owner of the offline queue."""

    def __init__(
        self,
        sink: Any,
        connectivity: ConnectivityMonitor | Callable[[], bool],
        config: QueueConfig | None = None,
        get_user_id: Callable[[], str | None] | None = None,
        on_failure: Callable[[FailureReport], None] | None = None,
        store: QueueStore | None = None,
        queue: OfflineQueue | None = None,
        **driver_options,
    ):
        self.config = (config or QueueConfig()).validate_or_raise()
        self.sink = sink
        self.get_user_id = get_user_id
        self.store = store
        if queue is None:
            queue = self.store.load() if self._persistence_on() else OfflineQueue()
        self.queue = queue

        self._unsubscribe = None
        if isinstance(connectivity, ConnectivityMonitor):
            self.is_connected = connectivity.is_connected
            self._unsubscribe = connectivity.subscribe(self.on_connectivity_change)
        else:
            self.is_connected = connectivity

        self.driver = ReplayDriver(
            self.queue,
            sink,
            self.is_connected,
            config=self.config,
            on_failure=on_failure,
            **driver_options,
        )
        if self._persistence_on():
            self.driver.conflicts.extend(self.store.load_conflicts())

    @property
    def conflicts(self) -> list[Conflict]:
        return self.driver.conflicts

    @property
    def sync_state(self) -> str:
        return self.driver.sync_state

    def dispatch(self, action: dict) -> Any:
        """Route one action.

        Returns:
            The sink's result for forwarded actions, or an acknowledgment
            dict with meta.queued / meta.offline set for queued ones

        Raises:
            MalformedIntent: If the action has no usable type
        """
        action_type = validate_action(action)
        connected = self.is_connected()
        decision = classify(action_type, connected, self.config)

        if decision.route is not Route.QUEUE:
            emit_receipt("intent_forwarded", {
                "tenant_id": self.config.tenant_id,
                "action_type": action_type,
                "route": decision.route.value,
                "connected": connected,
            })
            execute = getattr(self.sink, "execute", self.sink)
            return execute(action_type, action.get("payload"))

        intent = self._enqueue(action_type, action.get("payload"), decision.priority)
        return {
            **action,
            "meta": {
                **(action.get("meta") or {}),
                "queued": True,
                "offline": True,
                "intent_id": intent.intent_id,
            },
        }

    def _enqueue(self, action_type, payload, priority) -> Intent:
        user_id = self.get_user_id() if self.get_user_id else None
        intent = self.queue.enqueue(
            action_type,
            payload,
            priority,
            max_retries=self.config.max_retries,
            metadata=extract_metadata(payload, user_id),
        )
        emit_receipt("offline_enqueue", {
            "tenant_id": self.config.tenant_id,
            "intent_id": intent.intent_id,
            "action_type": action_type,
            "priority": priority.value,
            "retries_remaining": intent.retries_remaining,
            "queue_size": len(self.queue),
        })
        self._persist()
        return intent

    def sync(self, max_passes: int = 1) -> ReplayResult:
        """Drain the queue now.

        The queue is saved afterwards whenever anything was attempted,
        including when the drain stops on a StopRule part way through.
        """
        result = None
        try:
            result = self.driver.drain(max_passes=max_passes)
            return result
        finally:
            if result is None or result.attempted:
                self._persist()

    def on_connectivity_change(self, connected: bool) -> ReplayResult | None:
        """Connectivity listener. Going online triggers a drain."""
        if not connected:
            return None
        return self.sync()

    def resolve_conflict(self, intent_id: str, use_server_data: bool) -> Intent | None:
        requeued = self.driver.resolve_conflict(intent_id, use_server_data)
        self._persist()
        return requeued

    def status(self) -> dict:
        next_intent = self.queue.peek()
        return {
            "connected": self.is_connected(),
            "sync_state": self.driver.sync_state,
            "last_sync_time": self.driver.last_sync_time,
            "pending_count": len(self.queue),
            "by_priority": self.queue.counts(),
            "conflict_count": len(self.driver.conflicts),
            "next_intent": next_intent.intent_id if next_intent else None,
        }

    def _persistence_on(self) -> bool:
        return self.store is not None and features.FEATURE_QUEUE_PERSISTENCE_ENABLED

    def _persist(self):
        if self._persistence_on():
            self.store.save(self.queue, conflicts=self.driver.conflicts)

    def close(self):
        """Stop listening to connectivity changes."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
