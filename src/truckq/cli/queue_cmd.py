"""Queue commands: status, show, add, clear."""
import json
import sys
from pathlib import Path

import click

from truckq.config.settings import QueueConfig
from truckq.core.receipt import StopRule
from truckq.offline.classify import Route, classify
from truckq.offline.manager import OfflineQueueManager
from truckq.offline.store import QueueStore

from .output import print_error, print_json, print_success, table


def _refuse_forward(action_type, payload):
    raise click.UsageError(f"{action_type} is not queueable")


@click.group()
@click.option('--path', 'queue_path', type=click.Path(dir_okay=False),
              help='Queue file (default: $TRUCKQ_QUEUE_PATH or ~/.truckq/offline_queue.jsonl)')
@click.pass_context
def queue(ctx, queue_path: str | None):
    """Persisted offline queue operations."""
    config = QueueConfig.from_env()
    if queue_path:
        config.queue_path = Path(queue_path)
    ctx.obj = {
        "config": config,
        "store": QueueStore(config.queue_path, tenant_id=config.tenant_id),
    }


@queue.command()
@click.pass_obj
def status(obj):
    """Show queue size, tiers and Merkle root."""
    try:
        offline_queue = obj["store"].load()
        next_intent = offline_queue.peek()
        print_json({
            "pending_count": len(offline_queue),
            "by_priority": offline_queue.counts(),
            "next_intent": next_intent.intent_id if next_intent else None,
            "merkle_root": obj["store"].load_state().get("merkle_root"),
            "conflict_count": len(obj["store"].load_conflicts()),
            "clock": offline_queue.clock,
        })
    except StopRule as e:
        print_error(f"Status check failed: {e}")
        sys.exit(1)


@queue.command('show')
@click.option('--limit', '-n', default=10, help='Number of intents to show')
@click.pass_obj
def show(obj, limit: int):
    """List pending intents in replay order."""
    try:
        offline_queue = obj["store"].load()
    except StopRule as e:
        print_error(f"Queue list failed: {e}")
        sys.exit(1)

    if not offline_queue:
        click.echo("Queue is empty")
        return

    intents = list(offline_queue)[:limit]
    click.echo(f"Showing {len(intents)} of {len(offline_queue)} pending intents:\n")
    table(
        ["#", "Intent", "Action", "Priority", "Retries"],
        [
            [str(i + 1), intent.intent_id, intent.action_type, intent.priority.value,
             f"{intent.retries_remaining}/{intent.max_retries}"]
            for i, intent in enumerate(intents)
        ],
    )


@queue.command('add')
@click.argument('action_type')
@click.option('--payload', default='{}', help='JSON payload')
@click.option('--user-id', default=None, help='User the action belongs to')
@click.pass_obj
def add(obj, action_type: str, payload: str, user_id: str | None):
    """Queue an action as if it was dispatched offline."""
    config = obj["config"]
    store = obj["store"]
    try:
        data = json.loads(payload)
    except ValueError as e:
        print_error(f"Invalid payload JSON: {e}")
        sys.exit(1)

    decision = classify(action_type, False, config)
    if decision.route is not Route.QUEUE:
        print_error(f"{action_type} is not queued offline (route: {decision.route.value})")
        sys.exit(1)

    try:
        manager = OfflineQueueManager(
            _refuse_forward,
            lambda: False,
            config=config,
            get_user_id=lambda: user_id,
            queue=store.load(),
        )
        ack = manager.dispatch({"type": action_type, "payload": data})
        store.save(manager.queue, conflicts=store.load_conflicts())
    except StopRule as e:
        print_error(f"Enqueue failed: {e}")
        sys.exit(1)

    print_success(f"Queued {ack['meta']['intent_id']} ({decision.priority.value})")


@queue.command()
@click.option('--yes', is_flag=True, help='Skip confirmation')
@click.pass_obj
def clear(obj, yes: bool):
    """Clear the persisted queue and its parked conflicts."""
    store = obj["store"]
    size = len(store.read_records()) + len(store.load_conflicts())
    if size == 0:
        click.echo("Queue already empty")
        return

    if yes or click.confirm(f"Clear {size} pending intents and conflicts?"):
        store.clear()
        print_success("Queue cleared")
