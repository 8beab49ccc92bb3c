"""Remote gateway abstraction.

This module defines the interface to the authoritative task store, following
the hexagonal architecture (Ports & Adapters) pattern. Each method is an
independent asynchronous call with no ordering guarantee relative to other
calls; the sync layer treats whatever they return as the source of truth.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from todoledger.models import AccountContext, TaskPriority, TaskRecord, TaskUpdate


class RemoteGateway(ABC):
    """Abstract base class for the authoritative task store.

    Reads are unsigned. Writes need the signer carried by the account
    context and raise ``AuthenticationError`` when it is missing.
    """

    @abstractmethod
    async def list_all(self, owner: str) -> list[TaskRecord]:
        """List every task owned by ``owner``.

        Args:
            owner: Owner address

        Returns:
            Committed TaskRecord objects, in no particular order

        Raises:
            NetworkError: On transport failure
        """
        raise NotImplementedError(
            "RemoteGateway.list_all() must be implemented by adapter"
        )

    @abstractmethod
    async def create(
        self,
        account: AccountContext,
        description: str,
        priority: TaskPriority,
    ) -> str:
        """Create a task.

        Args:
            account: Account context with owner and signer
            description: Trimmed, non-empty task text
            priority: Priority level

        Returns:
            Identifier assigned by the authority

        Raises:
            AuthenticationError: If the account has no signer
            RemoteRejection: If the authority rejects the payload
            NetworkError: On transport failure
        """
        raise NotImplementedError(
            "RemoteGateway.create() must be implemented by adapter"
        )

    @abstractmethod
    async def mutate(
        self, account: AccountContext, task_id: str, update: TaskUpdate
    ) -> None:
        """Apply a partial update. Omitted fields are left unchanged.

        Args:
            account: Account context with owner and signer
            task_id: Authoritative task id
            update: Fields to change

        Raises:
            NotFoundError: If the id is unknown to the authority
            AuthenticationError: If the account has no signer
            RemoteRejection: If the authority rejects the payload
            NetworkError: On transport failure
        """
        raise NotImplementedError(
            "RemoteGateway.mutate() must be implemented by adapter"
        )

    @abstractmethod
    async def remove(self, account: AccountContext, task_id: str) -> None:
        """Delete a task.

        Args:
            account: Account context with owner and signer
            task_id: Authoritative task id

        Raises:
            NotFoundError: If the id is unknown or already deleted
            AuthenticationError: If the account has no signer
            RemoteRejection: If the authority rejects the request
            NetworkError: On transport failure
        """
        raise NotImplementedError(
            "RemoteGateway.remove() must be implemented by adapter"
        )
