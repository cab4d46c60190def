"""Offline queue configuration.

Configuration for the gate, the priority classifier and the replay
driver. All settings can be overridden via environment variables with
the TRUCKQ_ prefix.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

from truckq.core.constants import (
    BACKOFF_BASE_MS,
    BACKOFF_CAP_MS,
    BACKOFF_JITTER_MS,
    DEFAULT_ALWAYS_ONLINE_ACTION_TYPES,
    DEFAULT_HIGH_PRIORITY_MARKERS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MEDIUM_PRIORITY_MARKERS,
    DEFAULT_QUEUE_PATH,
    DEFAULT_QUEUEABLE_ACTION_TYPES,
    DEFAULT_TENANT_ID,
)
from truckq.core.receipt import StopRule


def _split_env(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


@dataclass
class QueueConfig:
    """Offline queue configuration."""

    # Gate sets
    queueable_action_types: List[str] = field(
        default_factory=lambda: list(DEFAULT_QUEUEABLE_ACTION_TYPES)
    )
    always_online_action_types: List[str] = field(
        default_factory=lambda: list(DEFAULT_ALWAYS_ONLINE_ACTION_TYPES)
    )

    # Retry budget
    max_retries: int = DEFAULT_MAX_RETRIES

    # Priority markers; anything matching neither list is low
    priority_markers: Dict[str, List[str]] = field(default_factory=lambda: {
        "high": list(DEFAULT_HIGH_PRIORITY_MARKERS),
        "medium": list(DEFAULT_MEDIUM_PRIORITY_MARKERS),
    })

    # Backoff (only used when FEATURE_RETRY_BACKOFF_ENABLED)
    backoff_base_ms: int = BACKOFF_BASE_MS
    backoff_jitter_ms: int = BACKOFF_JITTER_MS
    backoff_cap_ms: int = BACKOFF_CAP_MS

    # Persistence
    queue_path: Path = DEFAULT_QUEUE_PATH

    tenant_id: str = DEFAULT_TENANT_ID

    @classmethod
    def from_env(cls) -> "QueueConfig":
        """Load configuration from environment variables."""
        config = cls()

        if "TRUCKQ_MAX_RETRIES" in os.environ:
            config.max_retries = int(os.environ["TRUCKQ_MAX_RETRIES"])
        if "TRUCKQ_QUEUEABLE_ACTIONS" in os.environ:
            config.queueable_action_types = _split_env(os.environ["TRUCKQ_QUEUEABLE_ACTIONS"])
        if "TRUCKQ_ALWAYS_ONLINE_ACTIONS" in os.environ:
            config.always_online_action_types = _split_env(os.environ["TRUCKQ_ALWAYS_ONLINE_ACTIONS"])
        if "TRUCKQ_HIGH_PRIORITY_MARKERS" in os.environ:
            config.priority_markers["high"] = _split_env(os.environ["TRUCKQ_HIGH_PRIORITY_MARKERS"])
        if "TRUCKQ_MEDIUM_PRIORITY_MARKERS" in os.environ:
            config.priority_markers["medium"] = _split_env(os.environ["TRUCKQ_MEDIUM_PRIORITY_MARKERS"])

        if "TRUCKQ_BACKOFF_BASE_MS" in os.environ:
            config.backoff_base_ms = int(os.environ["TRUCKQ_BACKOFF_BASE_MS"])
        if "TRUCKQ_BACKOFF_JITTER_MS" in os.environ:
            config.backoff_jitter_ms = int(os.environ["TRUCKQ_BACKOFF_JITTER_MS"])
        if "TRUCKQ_BACKOFF_CAP_MS" in os.environ:
            config.backoff_cap_ms = int(os.environ["TRUCKQ_BACKOFF_CAP_MS"])

        if "TRUCKQ_QUEUE_PATH" in os.environ:
            config.queue_path = Path(os.environ["TRUCKQ_QUEUE_PATH"])
        if "TRUCKQ_TENANT_ID" in os.environ:
            config.tenant_id = os.environ["TRUCKQ_TENANT_ID"]

        return config

    def validate(self) -> list[str]:
        """Validate configuration. Returns list of errors."""
        errors = []

        if self.max_retries < 1:
            errors.append(f"max_retries must be >= 1, got {self.max_retries}")

        overlap = set(self.queueable_action_types) & set(self.always_online_action_types)
        if overlap:
            errors.append(f"action types both queueable and always-online: {sorted(overlap)}")

        unknown_tiers = set(self.priority_markers) - {"high", "medium"}
        if unknown_tiers:
            errors.append(f"priority_markers only accepts high/medium, got {sorted(unknown_tiers)}")

        for name in ("backoff_base_ms", "backoff_jitter_ms", "backoff_cap_ms"):
            if getattr(self, name) < 0:
                errors.append(f"{name} must be >= 0, got {getattr(self, name)}")

        return errors

    def validate_or_raise(self) -> "QueueConfig":
        """Raise StopRule on the first configuration error."""
        errors = self.validate()
        if errors:
            raise StopRule(f"Invalid queue config: {'; '.join(errors)}")
        return self


# Default configuration instance
DEFAULT_CONFIG = QueueConfig()
