"""Core subpackage for truckq receipt primitives.

Exports all from receipt.py, schemas.py, and constants.py.
"""
from .receipt import canonical_json, dual_hash, emit_receipt, merkle, now_iso, StopRule
from .schemas import RECEIPT_SCHEMAS, REQUIRED_FIELDS, validate_receipt
from .constants import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_QUEUEABLE_ACTION_TYPES,
    DEFAULT_ALWAYS_ONLINE_ACTION_TYPES,
    DEFAULT_HIGH_PRIORITY_MARKERS,
    DEFAULT_MEDIUM_PRIORITY_MARKERS,
    PRIORITY_RANK,
    REASON_RETRIES_EXHAUSTED,
)

__all__ = [
    # Receipt primitives
    "canonical_json",
    "now_iso",
    "dual_hash",
    "emit_receipt",
    "merkle",
    "StopRule",
    # Schemas
    "RECEIPT_SCHEMAS",
    "REQUIRED_FIELDS",
    "validate_receipt",
    # Constants
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_QUEUEABLE_ACTION_TYPES",
    "DEFAULT_ALWAYS_ONLINE_ACTION_TYPES",
    "DEFAULT_HIGH_PRIORITY_MARKERS",
    "DEFAULT_MEDIUM_PRIORITY_MARKERS",
    "PRIORITY_RANK",
    "REASON_RETRIES_EXHAUSTED",
]
