"""truckq constants and defaults.

All magic numbers live here. No exceptions.
"""
from pathlib import Path

# Retry budget per queued intent
DEFAULT_MAX_RETRIES = 3

# Actions intercepted and queued while offline
DEFAULT_QUEUEABLE_ACTION_TYPES = (
    "orders/createOrder",
    "orders/updateOrder",
    "user/updateUser",
    "cart/submitOrder",
)

# Control actions that always pass straight through
DEFAULT_ALWAYS_ONLINE_ACTION_TYPES = (
    "offlineQueue/sync",
    "connectivity/updateConnectivity",
)

# Priority markers, checked high first
DEFAULT_HIGH_PRIORITY_MARKERS = ("order",)
DEFAULT_MEDIUM_PRIORITY_MARKERS = ("user",)

# Tier rank used for replay ordering (lower drains first)
PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}

# Retry backoff: base * 2^attempts + jitter, capped
BACKOFF_BASE_MS = 1000
BACKOFF_JITTER_MS = 500
BACKOFF_CAP_MS = 30000

# Permanent failure reason
REASON_RETRIES_EXHAUSTED = "retries_exhausted"

# Sync states
SYNC_IDLE = "idle"
SYNC_SYNCING = "syncing"
SYNC_ERROR = "error"

# Persistence
DEFAULT_QUEUE_PATH = Path.home() / ".truckq" / "offline_queue.jsonl"
DEFAULT_STATE_FILENAME = "offline_state.json"

# Connectivity probe
DEFAULT_PROBE_HOST = "localhost"
DEFAULT_PROBE_PORT = 3001
DEFAULT_PROBE_TIMEOUT_S = 5.0

DEFAULT_TENANT_ID = "default"
