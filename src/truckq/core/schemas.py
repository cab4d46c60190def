"""Receipt schema definitions and validation.

Constants:
    RECEIPT_SCHEMAS: Schema dicts keyed by receipt_type, one for every
        receipt the queue, replay driver, store and connectivity monitor emit
    REQUIRED_FIELDS: Fields required in all receipts

Functions:
    validate_receipt: Validate receipt against schema
"""
from .receipt import StopRule


# Required fields for all receipt types
REQUIRED_FIELDS = ["receipt_type", "ts", "tenant_id", "payload_hash"]

_BASE = {
    "receipt_type": str,
    "ts": str,
    "tenant_id": str,
    "payload_hash": str,
}


RECEIPT_SCHEMAS = {
    "offline_enqueue": {
        **_BASE,
        "intent_id": str,
        "action_type": str,
        "priority": str,
        "retries_remaining": int,
        "queue_size": int,
    },
    "intent_forwarded": {
        **_BASE,
        "action_type": str,
        "route": str,
        "connected": bool,
    },
    "replay_success": {
        **_BASE,
        "intent_id": str,
        "action_type": str,
    },
    "replay_retry": {
        **_BASE,
        "intent_id": str,
        "action_type": str,
        "retries_remaining": int,
        "error": (str, type(None)),
    },
    "replay_exhausted": {
        **_BASE,
        "intent_id": str,
        "action_type": str,
        "reason": str,
        "metadata": dict,
    },
    "replay_attempt": {
        **_BASE,
        "intent_id": str,
        "action_type": str,
        "priority": str,
        "attempt": int,
    },
    "replay_conflict": {
        **_BASE,
        "intent_id": str,
        "action_type": str,
    },
    "conflict_resolution": {
        **_BASE,
        "intent_id": str,
        "action_type": str,
        "resolution": str,
        "requeued_as": (str, type(None)),
    },
    "sync_state": {
        **_BASE,
        "sync_state": str,
        "queue_size": int,
    },
    "replay_summary": {
        **_BASE,
        "status": str,
        "succeeded": int,
        "retried": int,
        "failed": int,
        "conflicts": int,
        "remaining": int,
    },
    "queue_saved": {
        **_BASE,
        "path": str,
        "count": int,
        "conflict_count": int,
        "merkle_root": str,
    },
    "queue_loaded": {
        **_BASE,
        "path": str,
        "count": int,
        "conflict_count": int,
        "clock": int,
    },
    "connectivity_change": {
        **_BASE,
        "connected": bool,
        "status": str,
    },
}


def validate_receipt(receipt: dict) -> bool:
    """Validate receipt has required fields and matches schema.

    Receipt types without a registered schema (a host's own receipts)
    only need REQUIRED_FIELDS.

    Raises:
        StopRule: If validation fails (missing field or wrong type)
    """
    if not isinstance(receipt, dict):
        raise StopRule("Receipt must be a dict")

    for field in REQUIRED_FIELDS:
        if field not in receipt:
            raise StopRule(f"Missing required field: {field}")

    schema = RECEIPT_SCHEMAS.get(receipt["receipt_type"])
    if schema is None:
        return True

    for field, expected in schema.items():
        if field not in receipt:
            raise StopRule(f"{receipt['receipt_type']}: missing field {field}")
        value = receipt[field]
        # bool is an int subclass; don't let it satisfy int fields
        if expected is int and isinstance(value, bool):
            raise StopRule(f"{receipt['receipt_type']}: {field} must be int")
        if not isinstance(value, expected):
            raise StopRule(f"{receipt['receipt_type']}: {field} has wrong type")

    return True
