"""Gate commands: classify, connected."""
import click

from truckq.config.settings import QueueConfig
from truckq.core.constants import DEFAULT_PROBE_HOST, DEFAULT_PROBE_PORT
from truckq.offline.classify import classify as classify_action
from truckq.offline.connectivity import probe

from .output import print_json


@click.command()
@click.argument('action_type')
@click.option('--offline/--online', default=True, help='Connectivity to evaluate against')
def classify(action_type: str, offline: bool):
    """Show how an action would be routed and prioritised."""
    decision = classify_action(action_type, not offline, QueueConfig.from_env())
    print_json({
        "action_type": action_type,
        "connected": not offline,
        "route": decision.route.value,
        "queued": not decision.route.forwards,
        "priority": decision.priority.value,
    })


@click.command()
@click.option('--host', default=DEFAULT_PROBE_HOST, help='API host')
@click.option('--port', default=DEFAULT_PROBE_PORT, help='API port')
@click.option('--timeout', default=2.0, help='Probe timeout in seconds')
def connected(host: str, port: int, timeout: float):
    """Check if the API host is reachable."""
    reachable = probe(host, port, timeout)
    print_json({
        "connected": reachable,
        "status": "online" if reachable else "offline",
        "host": host,
        "port": port,
    })
