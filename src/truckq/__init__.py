"""
truckq - offline action queue for the food-truck ordering client

Actions dispatched while the device is offline are held in a
priority queue and replayed through the API client once connectivity
returns. Every transition emits a receipt.
"""

__version__ = "0.1.0"

from truckq.core.receipt import StopRule, dual_hash, emit_receipt, merkle
from truckq.config.settings import QueueConfig
from truckq.offline import (
    ConnectivityMonitor,
    FailureReport,
    MalformedIntent,
    OfflineQueue,
    OfflineQueueManager,
    Priority,
    QueueStore,
    SinkResult,
)

__all__ = [
    "dual_hash",
    "emit_receipt",
    "merkle",
    "StopRule",
    "QueueConfig",
    "ConnectivityMonitor",
    "FailureReport",
    "MalformedIntent",
    "OfflineQueue",
    "OfflineQueueManager",
    "Priority",
    "QueueStore",
    "SinkResult",
    "__version__",
]
