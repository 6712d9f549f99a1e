"""
Session Module.

Resolves which wallet address may act:
- Session value and persisted flag keys
- Wallet provider protocol and capability detection
- SessionManager state machine (connect, disconnect, mode and network switches)
"""

from sealbid.core.session.state import (
    AppMode,
    ConnectionState,
    Network,
    NetworkSwitch,
    Session,
    WalletMode,
    logged_out_key,
    wallet_mode_for,
)

from sealbid.core.session.wallet import (
    Available,
    Unavailable,
    WalletCapability,
    WalletProvider,
    demo_address,
    detect_wallet_capability,
)

from sealbid.core.session.manager import (
    NetworkProbe,
    SessionManager,
)

__all__ = [
    # State
    "AppMode",
    "ConnectionState",
    "Network",
    "NetworkSwitch",
    "Session",
    "WalletMode",
    "logged_out_key",
    "wallet_mode_for",
    # Wallet
    "Available",
    "Unavailable",
    "WalletCapability",
    "WalletProvider",
    "demo_address",
    "detect_wallet_capability",
    # Manager
    "NetworkProbe",
    "SessionManager",
]
