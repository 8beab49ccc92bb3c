"""
Exit codes for the todoledger CLI.

Each error kind of the sync layer maps to its own exit code so scripts can
tell a bad argument from a missing wallet or a flaky node.
"""

from todoledger.models import (
    AuthenticationError,
    NetworkError,
    NotFoundError,
    RemoteRejection,
    ValidationError,
)

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or validation error
ERROR_INVALID_ARGS = 2

# No account connected or no signer available
ERROR_AUTH_FAILURE = 3

# Network or node error (LCD unreachable, broadcast failed, timeout)
ERROR_NETWORK = 4

# Task not found on the contract
ERROR_NOT_FOUND = 5

# Contract rejected the transaction
ERROR_REJECTED = 6


_EXIT_CODES_BY_KIND = {
    ValidationError.__name__: ERROR_INVALID_ARGS,
    AuthenticationError.__name__: ERROR_AUTH_FAILURE,
    NetworkError.__name__: ERROR_NETWORK,
    NotFoundError.__name__: ERROR_NOT_FOUND,
    RemoteRejection.__name__: ERROR_REJECTED,
}


def exit_code_for(error_kind: str | None) -> int:
    """Get the exit code for an error kind name."""
    if error_kind is None:
        return SUCCESS
    return _EXIT_CODES_BY_KIND.get(error_kind, ERROR_GENERAL)


def get_exit_code_description(code: int) -> str:
    """Get a human-readable description of an exit code."""
    descriptions = {
        SUCCESS: "Command executed successfully",
        ERROR_GENERAL: "A general error occurred",
        ERROR_INVALID_ARGS: "Invalid arguments or validation error",
        ERROR_AUTH_FAILURE: "No account or signer - configure account.owner and account.signer",
        ERROR_NETWORK: "Network error - check the node and retry",
        ERROR_NOT_FOUND: "Task not found - the list was out of date",
        ERROR_REJECTED: "The contract rejected the transaction",
    }
    return descriptions.get(code, "Unknown error")
