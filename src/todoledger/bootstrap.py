"""Wiring: build the account context and the sync controller from config."""

from __future__ import annotations

from todoledger.adapters.cosmwasm import CosmWasmGateway
from todoledger.adapters.signer import load_signer
from todoledger.api.client import ChainClient
from todoledger.config import Config
from todoledger.models import AccountContext
from todoledger.services.events import EventSink
from todoledger.services.sync_controller import SyncController
from todoledger.services.task_store import TaskStore


def build_account(config: Config) -> AccountContext:
    """Build the account context from the ``account`` section."""
    return AccountContext(
        owner=config.account.owner,
        signer=load_signer(config.account.signer, config.chain),
    )


def build_controller(
    config: Config, events: EventSink | None = None
) -> tuple[SyncController, ChainClient]:
    """Build a controller over the configured contract.

    Returns the controller together with its HTTP client so the caller can
    close it when done.
    """
    client = ChainClient(config.chain)
    gateway = CosmWasmGateway(
        client,
        config.chain.contract_address,
        page_size=config.chain.page_size,
    )
    controller = SyncController(
        gateway,
        TaskStore(),
        events,
        serialize_signed_calls=config.sync.serialize_signed_calls,
        coalesce_updates=config.sync.coalesce_updates,
        refresh_on_drift=config.sync.refresh_on_drift,
    )
    return controller, client
