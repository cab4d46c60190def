"""Connectivity signal.

The host platform owns connectivity; this module just holds the latest
value and tells subscribers about transitions. probe() is a fallback
reachability check for hosts without a platform network signal.
"""
import socket
from typing import Callable

from truckq.core.constants import (
    DEFAULT_PROBE_HOST,
    DEFAULT_PROBE_PORT,
    DEFAULT_PROBE_TIMEOUT_S,
    DEFAULT_TENANT_ID,
)
from truckq.core.receipt import emit_receipt

Listener = Callable[[bool], None]


class ConnectivityMonitor:
    """Latest online/offline value plus transition listeners."""

    def __init__(self, connected: bool = False, tenant_id: str = DEFAULT_TENANT_ID):
        self._connected = connected
        self._listeners: list[Listener] = []
        self.tenant_id = tenant_id

    def is_connected(self) -> bool:
        return self._connected

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a transition listener. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_connected(self, connected: bool) -> bool:
        """Record a new value. Listeners only hear about real changes.

        Returns:
            True if the value changed
        """
        connected = bool(connected)
        if connected == self._connected:
            return False

        self._connected = connected
        emit_receipt("connectivity_change", {
            "tenant_id": self.tenant_id,
            "connected": connected,
            "status": "online" if connected else "offline",
        })
        for listener in list(self._listeners):
            listener(connected)
        return True


def probe(
    host: str = DEFAULT_PROBE_HOST,
    port: int = DEFAULT_PROBE_PORT,
    timeout: float = DEFAULT_PROBE_TIMEOUT_S,
) -> bool:
    """Check if the API host is reachable over TCP.

    Args:
        host: API host
        port: API port
        timeout: Connection timeout in seconds

    Returns:
        True if a TCP connection could be opened
    """
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False
