"""todoledger - an optimistic local mirror of a task list kept on a CosmWasm contract."""

__version__ = "0.1.0"
