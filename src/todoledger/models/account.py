"""Account context passed into every sync operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from .errors import AuthenticationError


@runtime_checkable
class Signer(Protocol):
    """Signing capability supplied by a wallet integration.

    ``execute`` signs and broadcasts one contract execution and returns the
    broadcast result as a dict shaped like a cosmjs ``DeliverTxResponse``:
    ``code`` (0 on success), ``rawLog``/``raw_log``, ``transactionHash`` and
    ``events`` (list of ``{"type", "attributes": [{"key", "value"}]}``).
    """

    async def execute(
        self, sender: str, contract: str, msg: dict[str, Any]
    ) -> dict[str, Any]: ...


@dataclass(frozen=True)
class AccountContext:
    """The connected identity: owner address plus an optional signer."""

    owner: str | None
    signer: Signer | None = None

    @property
    def is_connected(self) -> bool:
        return bool(self.owner)

    @property
    def is_authenticated(self) -> bool:
        """True when the account can submit signed calls."""
        return self.is_connected and self.signer is not None

    def require_owner(self) -> str:
        if not self.owner:
            raise AuthenticationError("No account connected")
        return self.owner

    def require_signer(self) -> Signer:
        self.require_owner()
        if self.signer is None:
            raise AuthenticationError(
                f"No signer available for {self.owner}; connect a wallet first"
            )
        return self.signer
