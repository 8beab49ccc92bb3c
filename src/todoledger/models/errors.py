"""Error taxonomy for the sync layer.

Every failure the core reports is one of these. ``ValidationError`` never
reaches the remote store; the rest are raised by gateways and reported to
presentation through failure events after rollback.
"""


class TodoLedgerError(Exception):
    """Base class for all todoledger errors."""

    retryable = False

    @property
    def kind(self) -> str:
        """Stable error kind name carried in failure events."""
        return type(self).__name__


class ValidationError(TodoLedgerError):
    """Bad local input. No remote call and no optimistic mutation were made."""


class AuthenticationError(TodoLedgerError):
    """No usable signer or identity for the attempted operation."""


class NetworkError(TodoLedgerError):
    """Transport failure while talking to the remote store."""

    retryable = True


class RemoteRejection(TodoLedgerError):
    """The remote authority rejected the request on a business rule."""


class NotFoundError(RemoteRejection):
    """Target id is unknown to the authority, so the mirror is stale."""
