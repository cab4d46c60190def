"""In-memory priority queue of offline intents.

One FIFO lane per priority tier. Iteration and pop order is always
HIGH lane, then MEDIUM, then LOW, each oldest-first. A logical clock
stamps every insertion, so (priority rank, enqueued_at) reproduces the
same order after a reload.

Design constraints:
- Single owner, no locking
- No deduplication: the same action enqueued twice is two intents
- Re-inserted intents go to the tail of their lane with a fresh stamp
"""
from collections import deque
from typing import Any, Iterator

from truckq.core.constants import DEFAULT_MAX_RETRIES
from truckq.core.receipt import StopRule, dual_hash, now_iso

from .intent import Intent, Priority


class OfflineQueue:
    """Priority-tiered FIFO of pending intents."""

    def __init__(self, clock: int = 0):
        self._lanes: dict[Priority, deque[Intent]] = {p: deque() for p in Priority}
        self._clock = clock

    @property
    def clock(self) -> int:
        """Last logical timestamp handed out."""
        return self._clock

    def _tick(self) -> int:
        self._clock += 1
        return self._clock

    def enqueue(
        self,
        action_type: str,
        payload: Any,
        priority: Priority,
        max_retries: int = DEFAULT_MAX_RETRIES,
        metadata: dict | None = None,
    ) -> Intent:
        """Append a new intent to the tail of its priority lane."""
        if max_retries < 1:
            raise StopRule(f"max_retries must be >= 1, got {max_retries}")

        seq = self._tick()
        digest = dual_hash({"seq": seq, "action_type": action_type, "payload": payload})
        intent = Intent(
            intent_id=f"intent_{seq}_{digest[:8]}",
            action_type=action_type,
            payload=payload,
            priority=priority,
            retries_remaining=max_retries,
            max_retries=max_retries,
            enqueued_at=seq,
            metadata={k: v for k, v in (metadata or {}).items() if v is not None},
            created_ts=now_iso(),
        )
        self._lanes[priority].append(intent)
        return intent

    def restore(self, intents: list[Intent]) -> None:
        """Load previously saved intents, keeping their stamps.

        Restored intents are merged with whatever is already queued, and
        each lane is re-sorted by enqueued_at.

        Raises:
            StopRule: If a restored intent_id is already queued
        """
        known = {i.intent_id for i in self}
        for intent in intents:
            if intent.intent_id in known:
                raise StopRule(f"Intent {intent.intent_id} is already queued")
            known.add(intent.intent_id)

        for priority in Priority:
            lane = list(self._lanes[priority])
            lane.extend(i for i in intents if i.priority is priority)
            self._lanes[priority] = deque(sorted(lane, key=Intent.sort_key))

        for intent in intents:
            self._clock = max(self._clock, intent.enqueued_at)

    def requeue(self, intent: Intent) -> Intent:
        """Put an intent back at the tail of its lane."""
        intent.enqueued_at = self._tick()
        self._lanes[intent.priority].append(intent)
        return intent

    def peek(self) -> Intent | None:
        for priority in Priority:
            lane = self._lanes[priority]
            if lane:
                return lane[0]
        return None

    def pop(self) -> Intent | None:
        """Remove and return the highest-priority, oldest intent."""
        for priority in Priority:
            lane = self._lanes[priority]
            if lane:
                return lane.popleft()
        return None

    def get(self, intent_id: str) -> Intent | None:
        for intent in self:
            if intent.intent_id == intent_id:
                return intent
        return None

    def remove(self, intent_id: str) -> Intent | None:
        for lane in self._lanes.values():
            for intent in lane:
                if intent.intent_id == intent_id:
                    lane.remove(intent)
                    return intent
        return None

    def clear(self) -> int:
        """Drop everything. Returns how many intents were removed."""
        count = len(self)
        for lane in self._lanes.values():
            lane.clear()
        return count

    def counts(self) -> dict[str, int]:
        return {p.value: len(self._lanes[p]) for p in Priority}

    def snapshot(self) -> list[dict]:
        """Intents as dicts, in replay order."""
        return [intent.to_dict() for intent in self]

    def __iter__(self) -> Iterator[Intent]:
        for priority in Priority:
            yield from list(self._lanes[priority])

    def __len__(self) -> int:
        return sum(len(lane) for lane in self._lanes.values())

    def __bool__(self) -> bool:
        return len(self) > 0
