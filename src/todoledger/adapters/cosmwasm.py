"""CosmWasm adapter - RemoteGateway backed by a todo-list smart contract.

Reads go through the chain's LCD smart-query endpoint and need no signature.
Writes are contract executions submitted through the account's signer.
Status and priority values are normalized here: the contract speaks
snake_case (``to_do``, ``done``, ``none``), older deployments CamelCase.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from todoledger.api.client import ChainClient
from todoledger.models import (
    AccountContext,
    NetworkError,
    NotFoundError,
    RemoteRejection,
    TaskPriority,
    TaskRecord,
    TaskStatus,
    TaskUpdate,
    TodoLedgerError,
)
from todoledger.repositories import RemoteGateway

logger = logging.getLogger(__name__)

NEW_ENTRY_ID_ATTRIBUTE = "new_entry_id"

STATUS_TO_WIRE = {
    TaskStatus.TODO: "to_do",
    TaskStatus.IN_PROGRESS: "in_progress",
    TaskStatus.COMPLETED: "done",
    TaskStatus.CANCELLED: "cancelled",
}

PRIORITY_TO_WIRE = {
    TaskPriority.NONE: "none",
    TaskPriority.LOW: "low",
    TaskPriority.MEDIUM: "medium",
    TaskPriority.HIGH: "high",
}

_STATUS_FROM_WIRE = {
    "todo": TaskStatus.TODO,
    "inprogress": TaskStatus.IN_PROGRESS,
    "done": TaskStatus.COMPLETED,
    "completed": TaskStatus.COMPLETED,
    "cancelled": TaskStatus.CANCELLED,
    "canceled": TaskStatus.CANCELLED,
}

_PRIORITY_FROM_WIRE = {
    "none": TaskPriority.NONE,
    "low": TaskPriority.LOW,
    "medium": TaskPriority.MEDIUM,
    "high": TaskPriority.HIGH,
}


def _fold(value: Any) -> str:
    return str(value).replace("_", "").replace("-", "").casefold()


def parse_status(value: Any) -> TaskStatus:
    """Map a contract status value to TaskStatus.

    Raises:
        ValueError: If the value is not a known status
    """
    try:
        return _STATUS_FROM_WIRE[_fold(value)]
    except KeyError:
        raise ValueError(f"Unknown status {value!r}") from None


def parse_priority(value: Any) -> TaskPriority:
    """Map a contract priority value to TaskPriority.

    Raises:
        ValueError: If the value is not a known priority
    """
    try:
        return _PRIORITY_FROM_WIRE[_fold(value)]
    except KeyError:
        raise ValueError(f"Unknown priority {value!r}") from None


def entry_to_record(entry: dict[str, Any]) -> TaskRecord:
    """Convert a contract ``Entry`` into a TaskRecord."""
    return TaskRecord(
        id=str(entry["id"]),
        description=str(entry["description"]),
        status=parse_status(entry.get("status", "to_do")),
        priority=parse_priority(entry.get("priority", "none")),
    )


def _wire_id(task_id: str) -> int:
    try:
        return int(task_id)
    except ValueError:
        raise NotFoundError(f"{task_id!r} is not a contract entry id") from None


def find_attribute(result: dict[str, Any], key: str) -> str | None:
    """Find an event attribute in a broadcast result."""
    events = list(result.get("events") or [])
    for log in result.get("logs") or []:
        events.extend(log.get("events") or [])
    for event in events:
        for attribute in event.get("attributes") or []:
            if attribute.get("key") == key:
                return str(attribute.get("value"))
    return None


class CosmWasmGateway(RemoteGateway):
    """RemoteGateway implementation over a CosmWasm todo-list contract."""

    def __init__(self, client: ChainClient, contract_address: str, page_size: int = 30):
        """Initialize the gateway.

        Args:
            client: LCD client used for unsigned queries
            contract_address: Bech32 address of the todo-list contract
            page_size: Entries requested per ``query_list`` page
        """
        self.client = client
        self.contract_address = contract_address
        self.page_size = page_size

    async def list_all(self, owner: str) -> list[TaskRecord]:
        """List the owner's entries, walking every page of ``query_list``."""
        records: list[TaskRecord] = []
        start_after: int | None = None

        while True:
            query: dict[str, Any] = {"limit": self.page_size}
            if start_after is not None:
                query["start_after"] = start_after
            data = await self._query({"query_list": query})
            entries = (data or {}).get("entries") or []
            # The contract may cap limit; only an empty page ends the walk
            if not entries:
                break

            for entry in entries:
                if entry.get("owner") != owner:
                    continue
                try:
                    records.append(entry_to_record(entry))
                except (KeyError, ValueError) as e:
                    logger.warning("skipping malformed entry %r: %s", entry.get("id"), e)

            start_after = int(entries[-1]["id"])

        return records

    async def create(
        self,
        account: AccountContext,
        description: str,
        priority: TaskPriority,
    ) -> str:
        """Execute ``new_entry`` and return the id the contract assigned."""
        result = await self._execute(
            account,
            {
                "new_entry": {
                    "description": description,
                    "priority": PRIORITY_TO_WIRE[TaskPriority(priority)],
                    "owner": account.owner,
                }
            },
        )
        new_id = find_attribute(result, NEW_ENTRY_ID_ATTRIBUTE)
        if new_id is None:
            raise RemoteRejection(
                f"Transaction {result.get('transactionHash', '?')} reported no {NEW_ENTRY_ID_ATTRIBUTE}"
            )
        return new_id

    async def mutate(
        self, account: AccountContext, task_id: str, update: TaskUpdate
    ) -> None:
        """Execute ``update_entry`` with only the provided fields."""
        payload: dict[str, Any] = {"id": _wire_id(task_id)}
        if update.description is not None:
            payload["description"] = update.description
        if update.status is not None:
            payload["status"] = STATUS_TO_WIRE[update.status]
        if update.priority is not None:
            payload["priority"] = PRIORITY_TO_WIRE[update.priority]
        payload["owner"] = account.owner
        await self._execute(account, {"update_entry": payload})

    async def remove(self, account: AccountContext, task_id: str) -> None:
        """Execute ``delete_entry``."""
        await self._execute(
            account,
            {"delete_entry": {"id": _wire_id(task_id), "owner": account.owner}},
        )

    async def _query(self, query: dict[str, Any]) -> Any:
        try:
            return await self.client.query_smart(self.contract_address, query)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if 400 <= status < 500:
                raise RemoteRejection(f"Query rejected ({status}): {e.response.text}") from e
            raise NetworkError(f"LCD endpoint returned {status}") from e
        except httpx.RequestError as e:
            raise NetworkError(f"LCD endpoint unreachable: {e}") from e

    async def _execute(self, account: AccountContext, msg: dict[str, Any]) -> dict[str, Any]:
        signer = account.require_signer()
        try:
            result = await signer.execute(account.owner, self.contract_address, msg)
        except TodoLedgerError:
            raise
        except (httpx.HTTPError, OSError, asyncio.TimeoutError) as e:
            raise NetworkError(f"Broadcast failed: {str(e) or type(e).__name__}") from e

        code = result.get("code", 0)
        if code:
            raw_log = result.get("rawLog") or result.get("raw_log") or ""
            if "not found" in raw_log.lower():
                raise NotFoundError(raw_log)
            raise RemoteRejection(raw_log or f"Transaction failed with code {code}")

        logger.debug("executed %s in tx %s", next(iter(msg)), result.get("transactionHash"))
        return result
