"""Offline action queue for the food-truck ordering client.

Orders, profile edits and cart submissions made without a connection
are captured, held in priority order and replayed when the device is
back online. Orders first, then profile changes, then everything else.

Usage:
    from truckq.offline import ConnectivityMonitor, OfflineQueueManager

    monitor = ConnectivityMonitor(connected=False)
    manager = OfflineQueueManager(api_client.execute, monitor)

    ack = manager.dispatch({"type": "orders/createOrder", "payload": {...}})
    assert ack["meta"]["queued"]

    monitor.set_connected(True)   # drains the queue through api_client
"""
from truckq.offline.classify import (
    Classification,
    Route,
    classify,
    classify_priority,
    route_action,
)
from truckq.offline.connectivity import ConnectivityMonitor, probe
from truckq.offline.intent import (
    Conflict,
    FailureReport,
    Intent,
    MalformedIntent,
    Priority,
    SinkOutcome,
    SinkResult,
)
from truckq.offline.manager import OfflineQueueManager
from truckq.offline.queue import OfflineQueue
from truckq.offline.replay import ReplayDriver, ReplayResult, backoff_delay_ms
from truckq.offline.store import QueueStore

__all__ = [
    # Gate
    "Classification",
    "Route",
    "classify",
    "classify_priority",
    "route_action",
    # Records
    "Conflict",
    "FailureReport",
    "Intent",
    "MalformedIntent",
    "Priority",
    "SinkOutcome",
    "SinkResult",
    # Queue and replay
    "OfflineQueue",
    "ReplayDriver",
    "ReplayResult",
    "backoff_delay_ms",
    "OfflineQueueManager",
    # Connectivity and persistence
    "ConnectivityMonitor",
    "probe",
    "QueueStore",
]
