"""
Wallet collaborators.

External wallet SDKs are opaque: they connect and return an address, or
fail. Whether one is usable at all is decided once, at startup, by
detect_wallet_capability().
"""

from dataclasses import dataclass
from typing import Optional, Protocol, Union, runtime_checkable

from sealbid.crypto import generate_keypair, keypair_from_credentials


@runtime_checkable
class WalletProvider(Protocol):
    """External wallet SDK adapter."""

    async def connect(self, provider_id: Optional[str]) -> str: ...

    async def disconnect(self) -> None: ...

    async def current_account(self) -> Optional[str]: ...


@dataclass(frozen=True)
class Available:
    """An external wallet provider can be used."""
    provider_name: str = "external"


@dataclass(frozen=True)
class Unavailable:
    """No usable external wallet provider."""
    reason: str


WalletCapability = Union[Available, Unavailable]


def detect_wallet_capability(provider: Optional[object]) -> WalletCapability:
    """Probe a wallet provider object once."""
    if provider is None:
        return Unavailable("No wallet provider configured")
    if not isinstance(provider, WalletProvider):
        return Unavailable(f"{type(provider).__name__} does not implement connect/disconnect/current_account")
    return Available(provider_name=type(provider).__name__)


def demo_address(credentials: Optional[str] = None) -> str:
    """
    Address for a demo wallet.

    With credentials the address is stable for the same input; without,
    a fresh random keypair is generated.
    """
    if credentials is None:
        return generate_keypair().address
    return keypair_from_credentials(credentials).address
