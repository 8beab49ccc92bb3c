"""Signer loading.

No signing happens in todoledger itself. A wallet integration provides a
factory ``package.module:callable`` that takes the ChainConfig and returns
an object satisfying the Signer protocol.
"""

from __future__ import annotations

import importlib
import inspect

from todoledger.config import ChainConfig
from todoledger.models import AuthenticationError, Signer


def load_signer(path: str | None, chain: ChainConfig) -> Signer | None:
    """Import and call a signer factory.

    Args:
        path: Factory location as ``package.module:callable``, or None
        chain: Chain configuration handed to the factory

    Returns:
        The signer, or None when no factory is configured

    Raises:
        AuthenticationError: If the factory cannot be loaded or returns
            something that is not a Signer
    """
    if not path:
        return None

    module_name, _, attr = path.partition(":")
    if not module_name or not attr:
        raise AuthenticationError(f"Signer factory must look like 'module:callable', got {path!r}")

    try:
        module = importlib.import_module(module_name)
        factory = getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise AuthenticationError(f"Cannot load signer factory {path!r}: {e}") from e

    signer = factory(chain)
    if not isinstance(signer, Signer) or not inspect.iscoroutinefunction(signer.execute):
        raise AuthenticationError(f"Signer factory {path!r} did not return a signer")
    return signer
