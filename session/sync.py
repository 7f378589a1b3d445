"""
Background sync of the local session to the hosted database.

The queue is drained on a fixed interval by tick() and flushed as soon as the
connection comes back. A failed operation is retried with exponential backoff
and dropped after SYNC_MAX_RETRIES attempts; nothing here ever raises into
the caller.
"""

import time
import logging
from dataclasses import dataclass, asdict
from typing import Callable, Optional

from config import SYNC_INTERVAL_SECONDS, SYNC_MAX_RETRIES, SYNC_RETRY_BACKOFF_SECONDS
from session.local_session import LocalSession
from session.models import utc_now_iso
from utils.backoff import Backoff

logger = logging.getLogger(__name__)


@dataclass
class SyncOperation:
    id: str
    type: str           # session | configuration | spin | acknowledgment
    operation: str      # insert | update
    data: dict
    timestamp: str
    retry_count: int = 0
    next_attempt_at: float = 0.0


class DatabaseSync:

    def __init__(self, local_session: LocalSession, adapter=None,
                 interval: float = SYNC_INTERVAL_SECONDS,
                 max_retries: int = SYNC_MAX_RETRIES,
                 backoff: Optional[Backoff] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.local_session = local_session
        self.adapter = None
        self.interval = interval
        self.max_retries = max_retries
        self.backoff = backoff or Backoff(SYNC_RETRY_BACKOFF_SECONDS)
        self.clock = clock
        self.is_online = True
        self.last_sync_time: Optional[str] = None
        self.queue: list[SyncOperation] = []
        self._synced: set = set()
        self._dropped: set = set()
        self._last_drain = clock()
        self._remove_listener = local_session.add_change_listener(self.queue_data_for_sync)
        if adapter is not None:
            self.set_adapter(adapter)

    # ── Wiring ──────────────────────────────────────────────────────

    def set_adapter(self, adapter):
        """Attach the hosted store and queue everything the session holds so far."""
        if not adapter.is_ready():
            logger.info("Database adapter not ready - staying local-only")
            return
        self.adapter = adapter
        self._queue_initial_session_insert()
        self.queue_data_for_sync()

    def set_online(self, online: bool):
        was_online = self.is_online
        self.is_online = online
        if online and not was_online:
            logger.info("Back online - resuming sync")
            self.process_queue(force=True)
        elif not online and was_online:
            logger.info("Offline - sync paused")

    def close(self):
        self._remove_listener()

    # ── Queueing ────────────────────────────────────────────────────

    def _queue_initial_session_insert(self):
        session = self.local_session.get_session_data()
        self.queue_operation(SyncOperation(
            id=f"session_insert_{session.id}",
            type="session",
            operation="insert",
            data=session.to_row(),
            timestamp=utc_now_iso(),
        ))

    def queue_data_for_sync(self):
        """Queue a session update plus every configuration, spin and acknowledgment not yet synced."""
        if self.adapter is None:
            return
        snapshot = self.local_session.get_data_for_sync()
        now = utc_now_iso()

        self.queue_operation(SyncOperation(
            id=f"session_update_{snapshot.session.id}",
            type="session",
            operation="update",
            data=snapshot.session.to_row(),
            timestamp=now,
        ))
        for config in snapshot.configurations:
            self.queue_operation(SyncOperation(
                id=f"config_{config.id}",
                type="configuration",
                operation="insert",
                data=asdict(config),
                timestamp=now,
            ))
        for spin in snapshot.spins:
            self.queue_operation(SyncOperation(
                id=f"spin_{spin.id}",
                type="spin",
                operation="insert",
                data=asdict(spin),
                timestamp=now,
            ))
            if spin.acknowledged_at:
                self.queue_operation(SyncOperation(
                    id=f"ack_{spin.id}",
                    type="acknowledgment",
                    operation="update",
                    data={
                        "id": spin.id,
                        "acknowledged_at": spin.acknowledged_at,
                        "acknowledge_method": spin.acknowledge_method,
                    },
                    timestamp=now,
                ))

    def queue_operation(self, operation: SyncOperation):
        """Add an operation, replacing any queued one with the same id."""
        # Only the session update is worth sending again once it has gone through
        repeatable = operation.type == "session" and operation.operation == "update"
        if not repeatable and (operation.id in self._synced or operation.id in self._dropped):
            return
        for existing in self.queue:
            if existing.id == operation.id:
                operation.retry_count = existing.retry_count
                operation.next_attempt_at = existing.next_attempt_at
        self.queue = [op for op in self.queue if op.id != operation.id]
        self.queue.append(operation)

    # ── Draining ────────────────────────────────────────────────────

    def tick(self):
        """Drain the queue if the sync interval has elapsed. Call this from the main loop."""
        now = self.clock()
        if now - self._last_drain >= self.interval:
            self._last_drain = now
            self.process_queue()

    def process_queue(self, force: bool = False) -> int:
        """
        Try every due operation once. With force, retry delays are ignored.
        Returns the number of operations that succeeded.
        """
        if self.adapter is None or not self.is_online or not self.queue:
            return 0

        now = self.clock()
        due = [op for op in self.queue if force or op.next_attempt_at <= now]
        if not due:
            return 0
        logger.info(f"Syncing {len(due)} operations...")

        finished = set()
        succeeded = 0
        for op in due:
            try:
                self._execute(op)
            except Exception as e:
                op.retry_count += 1
                if op.retry_count >= self.max_retries:
                    logger.error(f"Max retries reached for {op.id}, dropping operation: {e}")
                    finished.add(op.id)
                    self._dropped.add(op.id)
                else:
                    op.next_attempt_at = self.backoff.next_attempt_at(op.retry_count - 1, now)
                    logger.warning(
                        f"Sync failed for {op.id} (attempt {op.retry_count}/{self.max_retries}): {e}"
                    )
                continue
            finished.add(op.id)
            self._synced.add(op.id)
            succeeded += 1
            logger.debug(f"Synced: {op.type} {op.operation}")

        self.queue = [op for op in self.queue if op.id not in finished]
        if succeeded:
            self.last_sync_time = utc_now_iso()
            logger.info(f"Sync complete - {succeeded} operations succeeded")
        return succeeded

    def _execute(self, op: SyncOperation):
        if op.type == "session":
            if op.operation == "update":
                self.adapter.update_session(op.data["id"], op.data)
            else:
                self.adapter.insert_session(op.data)
        elif op.type == "configuration":
            self.adapter.insert_configuration(op.data)
        elif op.type == "spin":
            self.adapter.insert_spin(op.data)
        elif op.type == "acknowledgment":
            self.adapter.update_spin(
                op.data["id"], op.data["acknowledged_at"], op.data["acknowledge_method"],
            )
        else:
            raise ValueError(f"Unknown operation type: {op.type}")

    def next_due_in(self) -> Optional[float]:
        """Seconds until the earliest queued operation may run, or None if the queue is empty."""
        if not self.queue:
            return None
        return max(0.0, min(op.next_attempt_at for op in self.queue) - self.clock())

    def force_sync(self) -> int:
        self.queue_data_for_sync()
        return self.process_queue(force=True)

    def drain(self, timeout: float = 30.0, sleep: Callable[[float], None] = time.sleep) -> int:
        """
        Keep processing until the queue is empty or timeout seconds pass,
        sleeping through backoff delays. Used by the CLI before exiting.
        """
        deadline = self.clock() + timeout
        total = self.process_queue()
        while self.queue and self.adapter is not None and self.is_online:
            wait = self.next_due_in() or 0.0
            if self.clock() + wait > deadline:
                logger.warning(f"Gave up waiting on {len(self.queue)} queued operations")
                break
            if wait:
                sleep(wait)
            total += self.process_queue()
        return total

    def get_sync_status(self) -> dict:
        return {
            "is_online": self.is_online,
            "queue_length": len(self.queue),
            "last_sync_time": self.last_sync_time,
            "has_adapter": self.adapter is not None,
        }
