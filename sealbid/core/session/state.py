"""
Session state and its persisted flag surface.

The flag keys below are read directly by UI collaborators, so their names
and values are a compatibility surface:

    appMode            "demo" | "real"
    walletMode         "demo" | "external"
    network            "local" | "remote"
    demoLoggedOut      "true" when the demo identity was explicitly disconnected
    externalLoggedOut  "true" when the external wallet was explicitly disconnected
    walletAddress      last connected address
    walletProvider     external wallet provider id
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Optional

# =============================================================================
# Flag Keys
# =============================================================================

APP_MODE_KEY = "appMode"
WALLET_MODE_KEY = "walletMode"
NETWORK_KEY = "network"
WALLET_ADDRESS_KEY = "walletAddress"
WALLET_PROVIDER_KEY = "walletProvider"
LOGGED_OUT_VALUE = "true"


# =============================================================================
# Enums
# =============================================================================


class AppMode(str, Enum):
    DEMO = "demo"
    REAL = "real"


class WalletMode(str, Enum):
    DEMO = "demo"
    EXTERNAL = "external"


class Network(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"


class ConnectionState(Enum):
    """Identity state of the session."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


def logged_out_key(mode: WalletMode) -> str:
    return f"{mode.value}LoggedOut"


def wallet_mode_for(app_mode: AppMode) -> WalletMode:
    """demo app mode uses demo wallets, real app mode uses external wallets."""
    return WalletMode.DEMO if app_mode == AppMode.DEMO else WalletMode.EXTERNAL


def app_mode_for(wallet_mode: WalletMode) -> AppMode:
    return AppMode.DEMO if wallet_mode == WalletMode.DEMO else AppMode.REAL


# =============================================================================
# Data Structures
# =============================================================================


@dataclass
class Session:
    """
    The resolved identity and mode/network context.

    Invariant: active_address is set only while state is CONNECTED and
    the current wallet mode is not explicitly disconnected.
    """
    app_mode: AppMode = AppMode.DEMO
    wallet_mode: WalletMode = WalletMode.DEMO
    network: Network = Network.LOCAL
    state: ConnectionState = ConnectionState.DISCONNECTED
    active_address: Optional[str] = None
    provider_id: Optional[str] = None
    explicitly_disconnected: Dict[WalletMode, bool] = field(
        default_factory=lambda: {mode: False for mode in WalletMode}
    )
    connection_error: Optional[str] = None

    @property
    def is_connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED and self.active_address is not None

    def copy(self) -> "Session":
        return replace(self, explicitly_disconnected=dict(self.explicitly_disconnected))


@dataclass(frozen=True)
class NetworkSwitch:
    """
    Outcome of a network change.

    Attributes:
        requested: Network the caller asked for
        network: Network actually in effect
        fell_back: True if the requested network was unreachable
        reason: Why the fallback happened
    """
    requested: Network
    network: Network
    fell_back: bool = False
    reason: Optional[str] = None
