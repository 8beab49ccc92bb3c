"""Sync controller - optimistic mutations against a remote task store.

Turns a user intent (add, update, delete) into an optimistic local mutation,
a remote call, and a commit or rollback once the call resolves. Operations
on the same record are strictly serialized; operations on different records
run concurrently.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import uuid
from collections import deque
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from todoledger.models import (
    AccountContext,
    AuthenticationError,
    NotFoundError,
    OperationKind,
    Outcome,
    PendingOperation,
    RemoteRejection,
    SyncEvent,
    TaskCreate,
    TaskPriority,
    TaskRecord,
    TaskStatus,
    TaskUpdate,
    TodoLedgerError,
    ValidationError,
)
from todoledger.repositories import RemoteGateway
from todoledger.services.events import EventSink, LoggingEventSink
from todoledger.services.task_store import TaskStore

logger = logging.getLogger(__name__)

TEMP_ID_PREFIX = "tmp-"


@dataclass
class _Intent:
    """A requested operation, queued or in flight."""

    kind: OperationKind
    target_id: str
    account: AccountContext
    future: asyncio.Future
    create: TaskCreate | None = None
    update: TaskUpdate | None = None
    waiters: list[asyncio.Future] = field(default_factory=list)

    def futures(self) -> list[asyncio.Future]:
        return [self.future, *self.waiters]


class SyncController:
    """Keeps a TaskStore consistent with a RemoteGateway.

    Mutation entry points are plain methods that must be called while an
    event loop is running. They validate, apply the optimistic change and
    return a future resolving to the operation's final SyncEvent. Failures
    are reported through that event, never raised from the future, except
    for unexpected (non-todoledger) errors.
    """

    def __init__(
        self,
        gateway: RemoteGateway,
        store: TaskStore | None = None,
        events: EventSink | None = None,
        *,
        serialize_signed_calls: bool = True,
        coalesce_updates: bool = True,
        refresh_on_drift: bool = True,
    ):
        """Initialize the controller.

        Args:
            gateway: Authoritative task store
            store: Local mirror, a fresh one by default
            events: Where completed operations are reported
            serialize_signed_calls: Allow one signed call in flight at a time
            coalesce_updates: Merge consecutive queued updates on one record
            refresh_on_drift: Re-list after RemoteRejection/NotFoundError
        """
        self.gateway = gateway
        self.store = store if store is not None else TaskStore()
        self.events = events if events is not None else LoggingEventSink()
        self.serialize_signed_calls = serialize_signed_calls
        self.coalesce_updates = coalesce_updates
        self.refresh_on_drift = refresh_on_drift

        self._signing_lock = asyncio.Lock()
        self._inflight: dict[str, _Intent] = {}
        self._queues: dict[str, deque[_Intent]] = {}
        self._tasks: set[asyncio.Task] = set()
        self._epoch = 0

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    def snapshot(self) -> list[TaskRecord]:
        return self.store.snapshot()

    def is_busy(self, task_id: str) -> bool:
        """True while an operation on ``task_id`` is in flight or queued."""
        return task_id in self._inflight or bool(self._queues.get(task_id))

    async def refresh(self, account: AccountContext) -> list[TaskRecord]:
        """Re-list the owner's tasks and merge them into the mirror.

        A different owner than the one the mirror holds resets it first.
        Listings started before a reset are discarded.

        Raises:
            AuthenticationError: If no account is connected
            NetworkError: On transport failure
        """
        owner = account.require_owner()
        if self.store.owner not in (None, owner):
            logger.info("account changed from %s to %s", self.store.owner, owner)
            self.reset()

        epoch = self._epoch
        records = await self.gateway.list_all(owner)
        if epoch != self._epoch:
            logger.info("discarding listing for %s fetched before reset", owner)
            return self.store.snapshot()

        self.store.owner = owner
        self.store.merge(records)
        logger.debug("refreshed %d records for %s", len(records), owner)
        return self.store.snapshot()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(
        self,
        account: AccountContext,
        description: str,
        priority: TaskPriority | str = TaskPriority.NONE,
    ) -> asyncio.Future:
        """Create a task. It shows up in the snapshot immediately."""
        data = self._validate(TaskCreate, description=description, priority=priority)
        self._authorize(account)
        intent = _Intent(
            kind=OperationKind.CREATE,
            target_id=f"{TEMP_ID_PREFIX}{uuid.uuid4().hex}",
            account=account,
            future=self._new_future(),
            create=data,
        )
        self._start(intent)
        return intent.future

    def update(
        self,
        account: AccountContext,
        task_id: str,
        *,
        description: str | None = None,
        status: TaskStatus | str | None = None,
        priority: TaskPriority | str | None = None,
    ) -> asyncio.Future:
        """Change some fields of a task. Omitted fields are left unchanged."""
        update = self._validate(
            TaskUpdate, description=description, status=status, priority=priority
        )
        if update.is_empty():
            raise ValidationError("Nothing to update")
        self._authorize(account)
        self._require_known(task_id)
        return self._submit(
            _Intent(
                kind=OperationKind.UPDATE,
                target_id=task_id,
                account=account,
                future=self._new_future(),
                update=update,
            )
        )

    def delete(self, account: AccountContext, task_id: str) -> asyncio.Future:
        """Delete a task. It is hidden from the snapshot immediately."""
        self._authorize(account)
        self._require_known(task_id)
        return self._submit(
            _Intent(
                kind=OperationKind.DELETE,
                target_id=task_id,
                account=account,
                future=self._new_future(),
            )
        )

    def complete(self, account: AccountContext, task_id: str) -> asyncio.Future:
        return self.update(account, task_id, status=TaskStatus.COMPLETED)

    def reopen(self, account: AccountContext, task_id: str) -> asyncio.Future:
        return self.update(account, task_id, status=TaskStatus.TODO)

    def reset(self) -> None:
        """Drop the mirror, e.g. when the connected account changes.

        Queued operations fail with AuthenticationError. Calls already in
        flight still resolve and report events, but no longer touch the
        mirror.
        """
        self._epoch += 1
        queued = [intent for queue in self._queues.values() for intent in queue]
        self._queues.clear()
        self._inflight.clear()
        self.store.reset()
        for intent in queued:
            self._finish(
                intent,
                self._failure_event(
                    intent,
                    AuthenticationError("Account changed before the operation started"),
                ),
            )
        logger.info("mirror reset (epoch %d)", self._epoch)

    async def join(self) -> None:
        """Wait until no operation is in flight or queued."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(model: type, **fields: Any) -> Any:
        try:
            return model(**fields)
        except PydanticValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise ValidationError(details) from e

    def _authorize(self, account: AccountContext) -> None:
        account.require_signer()
        if self.store.owner is not None and self.store.owner != account.owner:
            raise AuthenticationError(
                f"Mirror belongs to {self.store.owner}; reset before switching accounts"
            )

    def _require_known(self, task_id: str) -> None:
        if self.store.get(task_id) is None and not self.is_busy(task_id):
            raise NotFoundError(f"Task {task_id} is not in the list")

    @staticmethod
    def _new_future() -> asyncio.Future:
        return asyncio.get_running_loop().create_future()

    def _submit(self, intent: _Intent) -> asyncio.Future:
        key = intent.target_id
        if not self.is_busy(key):
            self._start(intent)
            return intent.future

        queue = self._queues.setdefault(key, deque())
        last = queue[-1] if queue else None
        if (
            self.coalesce_updates
            and intent.kind is OperationKind.UPDATE
            and last is not None
            and last.kind is OperationKind.UPDATE
            and last.account == intent.account
        ):
            last.update = last.update.merged(intent.update)
            last.waiters.append(intent.future)
            logger.debug("coalesced update on %s", key)
        else:
            queue.append(intent)
            logger.debug("queued %s on %s (%d waiting)", intent.kind.value, key, len(queue))
        return intent.future

    def _start(self, intent: _Intent) -> None:
        """Apply the optimistic mutation and launch the remote call."""
        key = intent.target_id
        current = self.store.get(key)

        if intent.kind is OperationKind.CREATE:
            new_state = TaskRecord(
                temp_id=key,
                description=intent.create.description,
                priority=intent.create.priority,
            )
        elif current is None:
            self._finish(
                intent,
                self._failure_event(intent, NotFoundError(f"Task {key} no longer exists")),
            )
            return
        elif intent.kind is OperationKind.UPDATE:
            new_state = current.model_copy(update=intent.update.changes())
        else:
            new_state = None

        loop = asyncio.get_running_loop()
        op = PendingOperation(target_id=key, kind=intent.kind, epoch=self._epoch)
        self.store.apply_optimistic(op, new_state)
        if self.store.owner is None:
            self.store.owner = intent.account.owner
        self._inflight[key] = intent

        task = loop.create_task(self._run(intent, op))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.debug("%s on %s started", intent.kind.value, key)

    async def _run(self, intent: _Intent, op: PendingOperation) -> None:
        key = intent.target_id
        next_key = key
        try:
            result = await self._call_gateway(intent)
        except TodoLedgerError as e:
            self._finish(intent, self._rollback(intent, op, e))
            if (
                isinstance(e, RemoteRejection)
                and self.refresh_on_drift
                and op.epoch == self._epoch
            ):
                await self._refresh_after_drift(intent.account)
        except Exception as e:
            event = self._rollback(intent, op, e)
            self._finish(intent, event, error=e)
        else:
            event = self._commit(intent, op, result)
            self._finish(intent, event)
            if event.record is not None and event.record.id is not None:
                next_key = event.record.id
        finally:
            if self._inflight.get(key) is intent:
                del self._inflight[key]
            if op.epoch == self._epoch:
                if next_key != key:
                    self._rekey_queue(key, next_key)
                self._drain(next_key)

    async def _call_gateway(self, intent: _Intent) -> str | None:
        lock = self._signing_lock if self.serialize_signed_calls else contextlib.nullcontext()
        async with lock:
            if intent.kind is OperationKind.CREATE:
                return await self.gateway.create(
                    intent.account, intent.create.description, intent.create.priority
                )
            if intent.kind is OperationKind.UPDATE:
                await self.gateway.mutate(intent.account, intent.target_id, intent.update)
            else:
                await self.gateway.remove(intent.account, intent.target_id)
            return None

    def _commit(self, intent: _Intent, op: PendingOperation, result: str | None) -> SyncEvent:
        key = intent.target_id
        live = op.epoch == self._epoch

        record: TaskRecord | None
        if intent.kind is OperationKind.CREATE:
            optimistic = self.store.get(key) if live else None
            if optimistic is None:
                optimistic = TaskRecord(
                    description=intent.create.description,
                    priority=intent.create.priority,
                )
            record = optimistic.model_copy(update={"id": str(result), "temp_id": None})
        elif intent.kind is OperationKind.UPDATE:
            base = self.store.get(key) if live else None
            if base is None and op.snapshot_before is not None:
                base = op.snapshot_before.model_copy(update=intent.update.changes())
            record = base
        else:
            record = None

        if live:
            committed = self.store.commit(key, record)
            if committed is not None:
                record = committed

        logger.info("%s on %s confirmed", intent.kind.value, key)
        return SyncEvent(
            kind=intent.kind,
            target_id=key,
            outcome=Outcome.SUCCESS,
            record=record,
        )

    def _rollback(self, intent: _Intent, op: PendingOperation, error: Exception) -> SyncEvent:
        if op.epoch == self._epoch:
            self.store.rollback(intent.target_id)
        logger.warning(
            "%s on %s failed, rolled back: %s",
            intent.kind.value,
            intent.target_id,
            error,
        )
        return self._failure_event(intent, error)

    @staticmethod
    def _failure_event(intent: _Intent, error: Exception) -> SyncEvent:
        if isinstance(error, TodoLedgerError):
            kind = error.kind
            retryable = error.retryable
        else:
            kind = type(error).__name__
            retryable = False
        return SyncEvent(
            kind=intent.kind,
            target_id=intent.target_id,
            outcome=Outcome.FAILURE,
            error_kind=kind,
            message=str(error) or kind,
            retryable=retryable,
        )

    def _finish(
        self, intent: _Intent, event: SyncEvent, error: Exception | None = None
    ) -> None:
        self.events.emit(event)
        for future in intent.futures():
            if future.done():
                continue
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(event)

    async def _refresh_after_drift(self, account: AccountContext) -> None:
        try:
            await self.refresh(account)
        except TodoLedgerError as e:
            logger.warning("resync after drift failed: %s", e)

    def _rekey_queue(self, old_key: str, new_key: str) -> None:
        queue = self._queues.pop(old_key, None)
        if not queue:
            return
        for intent in queue:
            intent.target_id = new_key
        self._queues.setdefault(new_key, deque()).extend(queue)

    def _drain(self, key: str) -> None:
        queue = self._queues.get(key)
        while queue and key not in self._inflight:
            self._start(queue.popleft())
        if not queue:
            self._queues.pop(key, None)
