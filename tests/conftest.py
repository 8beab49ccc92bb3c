"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from real filesystem/chain state.
"""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from fakes import OWNER, ControllableGateway, FakeSigner
from todoledger.models import AccountContext
from todoledger.services import MemoryEventSink, SyncController, TaskStore

# ---------------------------------------------------------------------------
# Filesystem isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path):
    """Point config and log directories at *tmp_path* and reset singletons."""
    import todoledger.config as config_mod
    import todoledger.utils.logger as logger_mod

    config_mod._config_manager = None
    logger_mod._logger = None
    logging.getLogger("todoledger").handlers.clear()

    with (
        patch("todoledger.config.user_config_dir", return_value=str(tmp_path / "config")),
        patch("todoledger.utils.logger.user_log_dir", return_value=str(tmp_path / "logs")),
    ):
        yield tmp_path

    config_mod._config_manager = None
    logger_mod._logger = None
    for handler in logging.getLogger("todoledger").handlers:
        handler.close()
    logging.getLogger("todoledger").handlers.clear()
    logging.getLogger("todoledger").propagate = True


# ---------------------------------------------------------------------------
# Sync layer
# ---------------------------------------------------------------------------


@pytest.fixture()
def signer() -> FakeSigner:
    return FakeSigner()


@pytest.fixture()
def account(signer) -> AccountContext:
    return AccountContext(owner=OWNER, signer=signer)


@pytest.fixture()
def gateway() -> ControllableGateway:
    return ControllableGateway()


@pytest.fixture()
def sink() -> MemoryEventSink:
    return MemoryEventSink()


@pytest.fixture()
def store() -> TaskStore:
    return TaskStore()


@pytest.fixture()
def controller(gateway, store, sink) -> SyncController:
    return SyncController(gateway, store, sink)
