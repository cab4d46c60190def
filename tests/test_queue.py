"""Tests for the in-memory offline queue."""
import pytest

from truckq.core.receipt import StopRule
from truckq.offline.intent import Intent, Priority
from truckq.offline.queue import OfflineQueue


def _types(queue):
    return [intent.action_type for intent in queue]


class TestEnqueue:
    """Enqueue behaviour."""

    def test_enqueue_sets_retry_budget_and_stamp(self):
        queue = OfflineQueue()
        intent = queue.enqueue("orders/createOrder", {"id": 1}, Priority.HIGH, max_retries=5)

        assert intent.retries_remaining == 5
        assert intent.max_retries == 5
        assert intent.enqueued_at == 1
        assert intent.intent_id.startswith("intent_1_")
        assert intent.created_ts.endswith("Z")
        assert queue.clock == 1

    def test_default_retry_budget_is_three(self):
        intent = OfflineQueue().enqueue("orders/createOrder", {}, Priority.HIGH)
        assert intent.retries_remaining == 3

    def test_no_deduplication(self):
        """Same action twice is two intents."""
        queue = OfflineQueue()
        a = queue.enqueue("orders/createOrder", {"id": 1}, Priority.HIGH)
        b = queue.enqueue("orders/createOrder", {"id": 1}, Priority.HIGH)

        assert len(queue) == 2
        assert a.intent_id != b.intent_id

    def test_unset_metadata_fields_dropped(self):
        intent = OfflineQueue().enqueue(
            "user/updateUser", {}, Priority.MEDIUM,
            metadata={"user_id": "u1", "order_id": None},
        )
        assert intent.metadata == {"user_id": "u1"}

    def test_zero_retry_budget_rejected(self):
        with pytest.raises(StopRule):
            OfflineQueue().enqueue("orders/createOrder", {}, Priority.HIGH, max_retries=0)


class TestOrdering:
    """Replay order: tier first, then FIFO."""

    def test_tiers_drain_high_medium_low(self):
        queue = OfflineQueue()
        queue.enqueue("cart/submitOrder", {}, Priority.LOW)
        queue.enqueue("orders/createOrder", {}, Priority.HIGH)
        queue.enqueue("user/updateUser", {}, Priority.MEDIUM)

        assert _types(queue) == ["orders/createOrder", "user/updateUser", "cart/submitOrder"]

    def test_fifo_within_tier(self):
        queue = OfflineQueue()
        a = queue.enqueue("orders/createOrder", {"n": "A"}, Priority.HIGH)
        b = queue.enqueue("orders/updateOrder", {"n": "B"}, Priority.HIGH)

        assert queue.pop() is a
        assert queue.pop() is b
        assert queue.pop() is None

    def test_peek_does_not_remove(self):
        queue = OfflineQueue()
        a = queue.enqueue("orders/createOrder", {}, Priority.HIGH)

        assert queue.peek() is a
        assert len(queue) == 1

    def test_requeue_goes_to_tail_of_its_tier(self):
        queue = OfflineQueue()
        a = queue.enqueue("orders/createOrder", {}, Priority.HIGH)
        b = queue.enqueue("orders/updateOrder", {}, Priority.HIGH)
        c = queue.enqueue("user/updateUser", {}, Priority.MEDIUM)

        queue.remove(a.intent_id)
        queue.requeue(a)

        assert [i.intent_id for i in queue] == [b.intent_id, a.intent_id, c.intent_id]
        assert a.enqueued_at > c.enqueued_at

    def test_sort_key_matches_iteration_order(self):
        queue = OfflineQueue()
        queue.enqueue("cart/x", {}, Priority.LOW)
        queue.enqueue("orders/x", {}, Priority.HIGH)
        queue.enqueue("user/x", {}, Priority.MEDIUM)
        queue.enqueue("orders/y", {}, Priority.HIGH)

        intents = list(queue)
        assert intents == sorted(intents, key=Intent.sort_key)


class TestQueueOps:
    """Lookup, removal and bookkeeping."""

    def test_get_and_remove(self):
        queue = OfflineQueue()
        a = queue.enqueue("orders/createOrder", {}, Priority.HIGH)

        assert queue.get(a.intent_id) is a
        assert queue.remove(a.intent_id) is a
        assert queue.get(a.intent_id) is None
        assert queue.remove(a.intent_id) is None

    def test_counts_per_tier(self):
        queue = OfflineQueue()
        queue.enqueue("orders/a", {}, Priority.HIGH)
        queue.enqueue("orders/b", {}, Priority.HIGH)
        queue.enqueue("cart/c", {}, Priority.LOW)

        assert queue.counts() == {"high": 2, "medium": 0, "low": 1}

    def test_clear(self):
        queue = OfflineQueue()
        queue.enqueue("orders/a", {}, Priority.HIGH)
        queue.enqueue("cart/c", {}, Priority.LOW)

        assert queue.clear() == 2
        assert not queue
        assert queue.clock == 2

    def test_restore_keeps_stamps_and_order(self):
        source = OfflineQueue()
        source.enqueue("cart/c", {}, Priority.LOW)
        source.enqueue("orders/a", {}, Priority.HIGH)
        records = [Intent.from_dict(d) for d in reversed(source.snapshot())]

        restored = OfflineQueue()
        restored.restore(records)

        assert _types(restored) == ["orders/a", "cart/c"]
        assert restored.clock == 2
        nxt = restored.enqueue("orders/b", {}, Priority.HIGH)
        assert nxt.enqueued_at == 3

    def test_snapshot_serialises_priority(self):
        queue = OfflineQueue()
        queue.enqueue("user/updateUser", {"name": "Ana"}, Priority.MEDIUM)

        record = queue.snapshot()[0]
        assert record["priority"] == "medium"
        assert record["payload"] == {"name": "Ana"}
        assert Intent.from_dict(record).priority is Priority.MEDIUM

    def test_restore_merges_with_queued_intents(self):
        """Saved intents and intents queued since load replay oldest-first."""
        source = OfflineQueue()
        source.enqueue("orders/a", {}, Priority.HIGH)
        source.enqueue("orders/unsaved", {}, Priority.HIGH)
        source.enqueue("orders/c", {}, Priority.HIGH)
        saved = [Intent.from_dict(d) for d in source.snapshot() if d["action_type"] != "orders/unsaved"]

        queue = OfflineQueue(clock=1)
        queue.enqueue("orders/b", {}, Priority.HIGH)
        queue.enqueue("cart/z", {}, Priority.LOW)
        queue.restore(saved)

        assert _types(queue) == ["orders/a", "orders/b", "orders/c", "cart/z"]
        assert queue.clock == 3

    def test_restore_refuses_duplicate_ids(self):
        queue = OfflineQueue()
        queue.enqueue("orders/a", {}, Priority.HIGH)
        copies = [Intent.from_dict(d) for d in queue.snapshot()]

        with pytest.raises(StopRule):
            queue.restore(copies)
        assert len(queue) == 1
