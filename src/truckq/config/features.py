"""Feature flags for truckq.

New behaviour beyond the basic gate/queue/replay loop starts DISABLED
unless it only makes the queue safer. Deployment sequence:
1. Gate + queue + replay (always on)
2. CONFLICT_HOLD (park server-side conflicts instead of retrying them)
3. RETRY_BACKOFF (exponential wait between replay attempts)
4. QUEUE_PERSISTENCE (save the queue after every change)
"""

# Park intents the sink reports as conflicting until the host resolves them
FEATURE_CONFLICT_HOLD_ENABLED = True

# Exponential backoff with jitter before re-attempting a failed intent
FEATURE_RETRY_BACKOFF_ENABLED = False

# Manager writes the queue to its store after enqueue and after each drain
FEATURE_QUEUE_PERSISTENCE_ENABLED = False
