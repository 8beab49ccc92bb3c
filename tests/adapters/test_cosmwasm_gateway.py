"""Tests for the CosmWasm gateway."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from fakes import OTHER_OWNER, OWNER, FakeSigner
from todoledger.adapters.cosmwasm import (
    CosmWasmGateway,
    entry_to_record,
    find_attribute,
    parse_priority,
    parse_status,
)
from todoledger.models import (
    AccountContext,
    AuthenticationError,
    NetworkError,
    NotFoundError,
    RemoteRejection,
    TaskPriority,
    TaskStatus,
    TaskUpdate,
)

CONTRACT = "mantra1contract"


def _entry(entry_id, description="Task", status="to_do", priority="none", owner=OWNER):
    return {
        "id": entry_id,
        "description": description,
        "status": status,
        "priority": priority,
        "owner": owner,
    }


def _http_error(status_code):
    request = httpx.Request("GET", "https://lcd.example/q")
    response = httpx.Response(status_code, request=request, text="bad query")
    return httpx.HTTPStatusError("error", request=request, response=response)


@pytest.fixture
def client():
    client = MagicMock()
    client.query_smart = AsyncMock()
    return client


@pytest.fixture
def gateway(client):
    return CosmWasmGateway(client, CONTRACT, page_size=2)


# ---------------------------------------------------------------------------
# Wire conversion
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "value,expected",
    [
        ("to_do", TaskStatus.TODO),
        ("ToDo", TaskStatus.TODO),
        ("in_progress", TaskStatus.IN_PROGRESS),
        ("InProgress", TaskStatus.IN_PROGRESS),
        ("done", TaskStatus.COMPLETED),
        ("Completed", TaskStatus.COMPLETED),
        ("cancelled", TaskStatus.CANCELLED),
    ],
)
def test_parse_status(value, expected):
    assert parse_status(value) is expected


def test_parse_status_unknown():
    with pytest.raises(ValueError):
        parse_status("archived")


def test_parse_priority():
    assert parse_priority("high") is TaskPriority.HIGH
    assert parse_priority("None") is TaskPriority.NONE
    with pytest.raises(ValueError):
        parse_priority("urgent")


def test_entry_to_record():
    record = entry_to_record(_entry(3, "Buy milk", "in_progress", "low"))

    assert record.id == "3"
    assert record.description == "Buy milk"
    assert record.status is TaskStatus.IN_PROGRESS
    assert record.priority is TaskPriority.LOW


def test_find_attribute_in_events_and_logs():
    flat = {"events": [{"type": "wasm", "attributes": [{"key": "new_entry_id", "value": "5"}]}]}
    nested = {
        "logs": [
            {"events": [{"type": "wasm", "attributes": [{"key": "new_entry_id", "value": 6}]}]}
        ]
    }

    assert find_attribute(flat, "new_entry_id") == "5"
    assert find_attribute(nested, "new_entry_id") == "6"
    assert find_attribute({}, "new_entry_id") is None


# ---------------------------------------------------------------------------
# list_all
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_all_walks_pages_and_filters_owner(gateway, client):
    client.query_smart.side_effect = [
        {"entries": [_entry(1), _entry(2, owner=OTHER_OWNER)]},
        {"entries": [_entry(3, "Walk dog", "done", "high")]},
        {"entries": []},
    ]

    records = await gateway.list_all(OWNER)

    assert [r.id for r in records] == ["1", "3"]
    assert records[1].status is TaskStatus.COMPLETED
    assert records[1].priority is TaskPriority.HIGH
    first, second, third = client.query_smart.await_args_list
    assert first.args == (CONTRACT, {"query_list": {"limit": 2}})
    assert second.args == (CONTRACT, {"query_list": {"limit": 2, "start_after": 2}})
    assert third.args == (CONTRACT, {"query_list": {"limit": 2, "start_after": 3}})


@pytest.mark.asyncio
async def test_list_all_empty(gateway, client):
    client.query_smart.return_value = {"entries": []}
    assert await gateway.list_all(OWNER) == []


@pytest.mark.asyncio
async def test_list_all_skips_malformed_entries(gateway, client):
    client.query_smart.side_effect = [
        {"entries": [_entry(1, status="archived"), _entry(4)]},
        {"entries": []},
    ]

    records = await gateway.list_all(OWNER)

    assert [r.id for r in records] == ["4"]


@pytest.mark.asyncio
async def test_list_all_reads_past_contract_limit_cap(client):
    """A contract returning fewer entries than asked for does not end the listing."""
    entries = [_entry(i) for i in range(1, 41)]

    async def capped_query(contract, query):
        params = query["query_list"]
        start = params.get("start_after", 0)
        page = [e for e in entries if e["id"] > start]
        return {"entries": page[: min(params["limit"], 30)]}

    client.query_smart.side_effect = capped_query
    gateway = CosmWasmGateway(client, CONTRACT, page_size=50)

    records = await gateway.list_all(OWNER)

    assert [r.id for r in records] == [str(i) for i in range(1, 41)]
    assert client.query_smart.await_count == 3


@pytest.mark.asyncio
async def test_list_all_maps_transport_errors(gateway, client):
    client.query_smart.side_effect = httpx.ConnectError("refused")
    with pytest.raises(NetworkError):
        await gateway.list_all(OWNER)

    client.query_smart.side_effect = _http_error(503)
    with pytest.raises(NetworkError):
        await gateway.list_all(OWNER)

    client.query_smart.side_effect = _http_error(400)
    with pytest.raises(RemoteRejection):
        await gateway.list_all(OWNER)


# ---------------------------------------------------------------------------
# Signed calls
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_returns_new_entry_id(gateway):
    signer = FakeSigner(
        [
            {
                "code": 0,
                "transactionHash": "ABC",
                "events": [
                    {"type": "wasm", "attributes": [{"key": "new_entry_id", "value": "42"}]}
                ],
            }
        ]
    )
    account = AccountContext(OWNER, signer)

    new_id = await gateway.create(account, "Buy milk", TaskPriority.LOW)

    assert new_id == "42"
    assert signer.calls == [
        (
            OWNER,
            CONTRACT,
            {"new_entry": {"description": "Buy milk", "priority": "low", "owner": OWNER}},
        )
    ]


@pytest.mark.asyncio
async def test_create_without_id_attribute_is_rejected(gateway):
    account = AccountContext(OWNER, FakeSigner())
    with pytest.raises(RemoteRejection):
        await gateway.create(account, "Buy milk", TaskPriority.NONE)


@pytest.mark.asyncio
async def test_mutate_sends_only_given_fields(gateway):
    signer = FakeSigner()
    account = AccountContext(OWNER, signer)

    await gateway.mutate(account, "7", TaskUpdate(status=TaskStatus.COMPLETED))

    assert signer.calls[0][2] == {"update_entry": {"id": 7, "status": "done", "owner": OWNER}}


@pytest.mark.asyncio
async def test_mutate_all_fields(gateway):
    signer = FakeSigner()
    account = AccountContext(OWNER, signer)

    await gateway.mutate(
        account,
        "7",
        TaskUpdate(description="New", status=TaskStatus.IN_PROGRESS, priority=TaskPriority.HIGH),
    )

    assert signer.calls[0][2] == {
        "update_entry": {
            "id": 7,
            "description": "New",
            "status": "in_progress",
            "priority": "high",
            "owner": OWNER,
        }
    }


@pytest.mark.asyncio
async def test_remove(gateway):
    signer = FakeSigner()
    await gateway.remove(AccountContext(OWNER, signer), "9")
    assert signer.calls[0][2] == {"delete_entry": {"id": 9, "owner": OWNER}}


@pytest.mark.asyncio
async def test_non_numeric_id_is_not_found(gateway):
    with pytest.raises(NotFoundError):
        await gateway.remove(AccountContext(OWNER, FakeSigner()), "tmp-abc")


@pytest.mark.asyncio
async def test_signed_call_requires_signer(gateway):
    with pytest.raises(AuthenticationError):
        await gateway.remove(AccountContext(OWNER), "9")


@pytest.mark.asyncio
async def test_failed_transaction_maps_to_rejection(gateway):
    signer = FakeSigner(
        [
            {"code": 5, "rawLog": "Unauthorized: only the owner can update"},
            {"code": 5, "raw_log": "entry 9 not found"},
        ]
    )
    account = AccountContext(OWNER, signer)

    with pytest.raises(RemoteRejection) as exc_info:
        await gateway.mutate(account, "9", TaskUpdate(description="x"))
    assert not isinstance(exc_info.value, NotFoundError)
    assert "Unauthorized" in str(exc_info.value)

    with pytest.raises(NotFoundError):
        await gateway.remove(account, "9")


@pytest.mark.asyncio
async def test_broadcast_transport_failure_is_network_error(gateway):
    signer = FakeSigner()
    signer.error = httpx.ReadTimeout("timed out")

    with pytest.raises(NetworkError, match="Broadcast failed"):
        await gateway.remove(AccountContext(OWNER, signer), "9")


@pytest.mark.asyncio
async def test_signer_errors_pass_through(gateway):
    signer = FakeSigner()
    signer.error = AuthenticationError("wallet locked")

    with pytest.raises(AuthenticationError, match="wallet locked"):
        await gateway.remove(AccountContext(OWNER, signer), "9")
