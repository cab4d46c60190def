"""Gate and priority classifier.

Routing rules, evaluated in order:
1. Always-online types are forwarded regardless of connectivity
2. Online: everything else is forwarded
3. Offline + queueable type: queued
4. Offline + unknown type: forwarded (the action handles offline itself)

Pure functions only. No receipts, no queue access.
"""
from dataclasses import dataclass
from enum import Enum

from truckq.config.settings import QueueConfig

from .intent import Priority


class Route(Enum):
    """Routing decision for one action."""
    ALWAYS_ONLINE = "always_online"
    ONLINE = "online"
    QUEUE = "queue"
    PASS_THROUGH = "pass_through"

    @property
    def forwards(self) -> bool:
        return self is not Route.QUEUE


@dataclass(frozen=True)
class Classification:
    """Routing decision plus the tier the action would queue into."""
    action_type: str
    route: Route
    priority: Priority


def _matches(action_type: str, patterns) -> bool:
    return any(pattern in action_type for pattern in patterns)


def classify_priority(action_type: str, config: QueueConfig) -> Priority:
    """Assign a replay tier from substring markers.

    Order markers are checked before user markers, so an action type
    carrying both is HIGH.
    """
    markers = config.priority_markers
    if _matches(action_type, markers.get("high", ())):
        return Priority.HIGH
    if _matches(action_type, markers.get("medium", ())):
        return Priority.MEDIUM
    return Priority.LOW


def route_action(action_type: str, connected: bool, config: QueueConfig) -> Route:
    """Decide whether an action is forwarded or queued."""
    if _matches(action_type, config.always_online_action_types):
        return Route.ALWAYS_ONLINE
    if connected:
        return Route.ONLINE
    if _matches(action_type, config.queueable_action_types):
        return Route.QUEUE
    return Route.PASS_THROUGH


def classify(action_type: str, connected: bool, config: QueueConfig) -> Classification:
    return Classification(
        action_type=action_type,
        route=route_action(action_type, connected, config),
        priority=classify_priority(action_type, config),
    )
