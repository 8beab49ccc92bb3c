"""Concrete gateway and signer adapters."""

from .cosmwasm import CosmWasmGateway
from .signer import load_signer

__all__ = ["CosmWasmGateway", "load_signer"]
