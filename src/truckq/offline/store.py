"""File-backed persistence for the offline queue.

Optional: hosts that need the queue to survive a restart save it after
each change and load it on start-up.

Layout:
- <queue_path>: one JSON intent per line, in replay order
- <queue_path dir>/offline_state.json: logical clock, count, Merkle root,
  and the conflicts parked while waiting for the host to resolve them

The Merkle root is checked on load. A queue file that does not match
its state file is refused rather than replayed.

Payload values JSON cannot represent (Decimal, datetime, ...) are
written as their str() form, the same way dual_hash encodes them. After
a reload the sink sees the string, not the original object.
"""
import json
import os
from pathlib import Path

from truckq.core.constants import DEFAULT_QUEUE_PATH, DEFAULT_STATE_FILENAME, DEFAULT_TENANT_ID
from truckq.core.receipt import StopRule, emit_receipt, merkle, now_iso

from .intent import Conflict, Intent
from .queue import OfflineQueue


def _dumps(record: dict) -> str:
    return json.dumps(record, sort_keys=True, default=str)


class QueueStore:
    """Saves and restores an OfflineQueue as JSON lines."""

    def __init__(self, path: Path | str = DEFAULT_QUEUE_PATH, tenant_id: str = DEFAULT_TENANT_ID):
        self.path = Path(path)
        self.state_path = self.path.parent / DEFAULT_STATE_FILENAME
        self.tenant_id = tenant_id

    def _ensure_dir(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _write_atomic(self, path: Path, text: str):
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(text, encoding="utf-8")
        os.replace(tmp, path)

    def load_state(self) -> dict:
        if self.state_path.exists():
            with open(self.state_path, encoding="utf-8") as f:
                return json.load(f)
        return {
            "clock": 0,
            "count": 0,
            "merkle_root": None,
            "last_saved": None,
            "conflicts": [],
        }

    def save(self, queue: OfflineQueue, conflicts: list[Conflict] | None = None) -> dict:
        """Write the whole queue, its parked conflicts and the state file.

        Returns:
            The new state dict
        """
        self._ensure_dir()

        lines = [_dumps(record) for record in queue.snapshot()]
        records = [json.loads(line) for line in lines]
        root = merkle(records)
        parked = [json.loads(_dumps(c.to_dict())) for c in conflicts or []]

        self._write_atomic(self.path, "".join(line + "\n" for line in lines))
        state = {
            "clock": queue.clock,
            "count": len(records),
            "merkle_root": root,
            "last_saved": now_iso(),
            "conflicts": parked,
        }
        self._write_atomic(self.state_path, json.dumps(state, indent=2))

        emit_receipt("queue_saved", {
            "tenant_id": self.tenant_id,
            "path": str(self.path),
            "count": len(records),
            "conflict_count": len(parked),
            "merkle_root": root,
        })
        return state

    def read_records(self) -> list[dict]:
        if not self.path.exists():
            return []

        records = []
        with open(self.path, encoding="utf-8") as f:
            for line in f:
                if line.strip():
                    records.append(json.loads(line))
        return records

    def load(self) -> OfflineQueue:
        """Rebuild the queue from disk.

        Raises:
            StopRule: If the queue file does not match the saved Merkle root
        """
        state = self.load_state()
        records = self.read_records()

        if records or state.get("merkle_root") is not None:
            root = merkle(records)
            if root != state.get("merkle_root"):
                raise StopRule(
                    f"Queue file {self.path} does not match its saved Merkle root"
                )

        queue = OfflineQueue(clock=state.get("clock", 0))
        queue.restore([Intent.from_dict(r) for r in records])

        emit_receipt("queue_loaded", {
            "tenant_id": self.tenant_id,
            "path": str(self.path),
            "count": len(queue),
            "conflict_count": len(state.get("conflicts") or []),
            "clock": queue.clock,
        })
        return queue

    def load_conflicts(self) -> list[Conflict]:
        """Parked conflicts from the last save, oldest first."""
        return [Conflict.from_dict(c) for c in self.load_state().get("conflicts") or []]

    def clear(self):
        """Delete the queue and state files."""
        if self.path.exists():
            self.path.unlink()
        if self.state_path.exists():
            self.state_path.unlink()
