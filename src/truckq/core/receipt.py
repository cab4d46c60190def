"""Receipts: the audit trail of the offline queue.

Every state change the queue makes (an intent queued, forwarded,
replayed, retried, exhausted, parked, saved) is announced as one JSON
line on stdout. Hosts tail that stream the way they would tail a log.

Functions:
    now_iso: UTC timestamp used in receipts and intent records
    canonical_json: Stable JSON encoding shared by hashing and receipts
    dual_hash: 'sha256hex:blake3hex' digest for intent ids and roots
    emit_receipt: Print one receipt line and return it
    merkle: Root over saved intent records, checked when the queue reloads
    StopRule: Raised when the queue must not continue
"""
import hashlib
import json
from datetime import datetime, timezone

import blake3


class StopRule(Exception):
    """The queue refuses to continue (bad config, tampered file, bad sink answer).

    Never caught inside truckq. The host decides what to do.
    """
    pass


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def canonical_json(data, compact: bool = False) -> str:
    """Sorted-key JSON. Values JSON has no type for (Decimal, datetime)
    are encoded as str()."""
    separators = (",", ":") if compact else None
    return json.dumps(data, sort_keys=True, separators=separators, default=str)


def dual_hash(data: bytes | str | dict) -> str:
    """Digest 'sha256hex:blake3hex' (64 hex chars each side).

    Dicts are hashed over their compact canonical JSON, so two payloads
    with the same content hash the same regardless of key order.
    """
    if isinstance(data, dict):
        data = canonical_json(data, compact=True)
    if isinstance(data, str):
        data = data.encode("utf-8")

    return f"{hashlib.sha256(data).hexdigest()}:{blake3.blake3(data).hexdigest()}"


def emit_receipt(receipt_type: str, data: dict, tenant_id: str = "default") -> dict:
    """Announce one queue event.

    The receipt is data plus receipt_type, ts, tenant_id and a
    payload_hash of data. A tenant_id inside data (the truck the client
    runs on) wins over the argument.

    Args:
        receipt_type: Event name, one of the keys of core.schemas.RECEIPT_SCHEMAS
        data: Event fields
        tenant_id: Fallback tenant

    Returns:
        The receipt dict exactly as printed
    """
    receipt = {
        "receipt_type": receipt_type,
        "ts": now_iso(),
        "tenant_id": data.get("tenant_id", tenant_id),
        "payload_hash": dual_hash(canonical_json(data)),
        **data,
    }
    print(canonical_json(receipt), flush=True)
    return receipt


def merkle(items: list) -> str:
    """Root hash over saved intent records, in replay order.

    An empty queue has the root dual_hash(b"empty"). Levels with an odd
    number of hashes repeat their last hash.
    """
    if not items:
        return dual_hash(b"empty")

    level = [dual_hash(canonical_json(item)) for item in items]
    while len(level) > 1:
        if len(level) % 2:
            level.append(level[-1])
        level = [dual_hash(level[i] + level[i + 1]) for i in range(0, len(level), 2)]
    return level[0]
