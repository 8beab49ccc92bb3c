"""Repository interfaces (ports) consumed by the sync layer."""

from .gateway import RemoteGateway

__all__ = ["RemoteGateway"]
