"""Configuration and feature flags."""
from .settings import DEFAULT_CONFIG, QueueConfig

__all__ = ["DEFAULT_CONFIG", "QueueConfig"]
