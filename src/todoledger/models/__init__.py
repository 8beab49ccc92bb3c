"""todoledger domain models.

This package contains the pydantic models, enums and error types shared by
the mirror, the sync controller and the gateway adapters.
"""

from .account import AccountContext, Signer
from .core import (
    OperationKind,
    Outcome,
    PendingOperation,
    SyncEvent,
    TaskCreate,
    TaskPriority,
    TaskRecord,
    TaskStatus,
    TaskUpdate,
)
from .errors import (
    AuthenticationError,
    NetworkError,
    NotFoundError,
    RemoteRejection,
    TodoLedgerError,
    ValidationError,
)

__all__ = [
    # Task models
    "TaskRecord",
    "TaskCreate",
    "TaskUpdate",
    "TaskStatus",
    "TaskPriority",
    # Sync bookkeeping
    "OperationKind",
    "Outcome",
    "PendingOperation",
    "SyncEvent",
    # Account
    "AccountContext",
    "Signer",
    # Errors
    "TodoLedgerError",
    "ValidationError",
    "AuthenticationError",
    "NetworkError",
    "RemoteRejection",
    "NotFoundError",
]
