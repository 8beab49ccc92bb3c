"""Task store - the local mirror of the remote task list.

Holds the current best-known view of the collection in display order, plus
one PendingOperation per record with an unresolved remote call. All state is
in memory; nothing here performs I/O.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from todoledger.models import OperationKind, PendingOperation, TaskRecord

logger = logging.getLogger(__name__)


class TaskStore:
    """Ordered, key-indexed mirror with per-key pending operations.

    Records are keyed by their authoritative id, or by a temporary token
    while their create call is unresolved.
    """

    def __init__(self) -> None:
        self._order: list[str] = []
        self._records: dict[str, TaskRecord] = {}
        self._pending: dict[str, PendingOperation] = {}
        self.owner: str | None = None

    def __len__(self) -> int:
        return len(self.snapshot())

    def snapshot(self) -> list[TaskRecord]:
        """Return the visible records in display order.

        Optimistic creates and updates are included; records with a pending
        delete are hidden.
        """
        return [
            self._records[key]
            for key in self._order
            if not self._is_pending_delete(key)
        ]

    def get(self, key: str, *, include_hidden: bool = False) -> TaskRecord | None:
        """Get a record by id or temporary token."""
        if not include_hidden and self._is_pending_delete(key):
            return None
        return self._records.get(key)

    def pending(self, key: str) -> PendingOperation | None:
        return self._pending.get(key)

    def pending_operations(self) -> list[PendingOperation]:
        return list(self._pending.values())

    def apply_optimistic(
        self, op: PendingOperation, new_state: TaskRecord | None = None
    ) -> None:
        """Apply a mutation locally before the remote store confirms it.

        Args:
            op: Operation to track; its ``snapshot_before`` is filled in here
            new_state: Record after the mutation (unused for deletes)

        Raises:
            RuntimeError: If the target already has a pending operation
            KeyError: If an update or delete targets an unknown record
            ValueError: If a create has no new state or reuses a key
        """
        key = op.target_id
        if key in self._pending:
            raise RuntimeError(f"Operation already pending for {key}")

        if op.kind is OperationKind.CREATE:
            if new_state is None or key in self._records:
                raise ValueError(f"Cannot create {key}")
            op.snapshot_before = None
            self._records[key] = new_state
            self._order.append(key)
        else:
            if key not in self._records:
                raise KeyError(key)
            op.snapshot_before = self._records[key]
            if op.kind is OperationKind.UPDATE:
                if new_state is None:
                    raise ValueError(f"Update of {key} needs a new state")
                self._records[key] = new_state

        self._pending[key] = op
        logger.debug("optimistic %s applied to %s", op.kind.value, key)

    def commit(
        self, target_id: str, authoritative: TaskRecord | None = None
    ) -> TaskRecord | None:
        """Confirm the pending operation on ``target_id``.

        For a create, ``authoritative`` carries the id assigned by the remote
        store; it replaces the temporary token in place. If a refresh already
        inserted a record under that id, the duplicate is dropped, unless
        another operation is pending on it; then that record is kept and the
        token entry goes away.

        Returns:
            The committed record, or None after a delete or when nothing was
            pending (e.g. the store was reset meanwhile)
        """
        op = self._pending.pop(target_id, None)
        if op is None:
            return None

        if op.kind is OperationKind.DELETE:
            self._drop(target_id)
            return None

        record = authoritative or self._records[target_id]
        new_key = record.key
        if new_key != target_id:
            if new_key in self._pending:
                self._drop(target_id)
                return record
            if new_key in self._records:
                self._drop(new_key)
            self._order[self._order.index(target_id)] = new_key
            del self._records[target_id]
        self._records[new_key] = record
        return record

    def rollback(self, target_id: str) -> None:
        """Undo the pending operation on ``target_id``, restoring its snapshot."""
        op = self._pending.pop(target_id, None)
        if op is None:
            return

        if op.snapshot_before is None:
            self._drop(target_id)
        else:
            self._records[target_id] = op.snapshot_before
        logger.debug("rolled back %s on %s", op.kind.value, target_id)

    def merge(self, records: Iterable[TaskRecord]) -> None:
        """Merge an authoritative listing into the mirror.

        Existing positions are kept. Records with a pending operation keep
        their local state. Other known records take the remote value, or are
        removed when the listing no longer contains them. Unknown ids are
        appended in listing order.
        """
        remote: dict[str, TaskRecord] = {}
        for record in records:
            if record.id is not None and record.id not in remote:
                remote[record.id] = record

        kept: list[str] = []
        for key in self._order:
            if key in self._pending:
                kept.append(key)
            elif key in remote:
                self._records[key] = remote[key]
                kept.append(key)
            else:
                del self._records[key]
                logger.debug("dropped %s missing from remote listing", key)

        known = set(kept)
        for task_id, record in remote.items():
            if task_id not in known:
                self._records[task_id] = record
                kept.append(task_id)

        self._order = kept

    def reset(self) -> None:
        """Forget everything, including the owner the mirror belonged to."""
        self._order.clear()
        self._records.clear()
        self._pending.clear()
        self.owner = None

    def _is_pending_delete(self, key: str) -> bool:
        op = self._pending.get(key)
        return op is not None and op.kind is OperationKind.DELETE

    def _drop(self, key: str) -> None:
        self._records.pop(key, None)
        if key in self._order:
            self._order.remove(key)
