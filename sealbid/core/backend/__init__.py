"""
Backend Module.

One capability interface, two variants:
- DemoBackend: repository and resolution engine over the local store
- RemoteBackend: delegates to a remote execution client
"""

from sealbid.core.backend.base import AuctionBackend
from sealbid.core.backend.demo import DemoBackend
from sealbid.core.backend.remote import RemoteBackend, RemoteExecutionClient

__all__ = ["AuctionBackend", "DemoBackend", "RemoteBackend", "RemoteExecutionClient"]
