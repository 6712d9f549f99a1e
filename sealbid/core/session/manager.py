"""
Session Manager - identity state machine.

States: DISCONNECTED -> CONNECTING -> CONNECTED -> DISCONNECTED.

Rehydration rules:
- demo identities are always restored (cheap to regenerate, safe to keep)
- external identities are restored only if the user did not explicitly
  disconnect and a wallet provider is available; an explicit logout must
  never silently resurrect

The only automatic recovery is the network fallback: an unreachable
remote network is replaced by the local one and the caller is told.
"""

from typing import Awaitable, Callable, Optional, Type, TypeVar, Union

from sealbid.core.errors import ConnectionRejected, ValidationError
from sealbid.core.session.state import (
    APP_MODE_KEY,
    LOGGED_OUT_VALUE,
    NETWORK_KEY,
    WALLET_ADDRESS_KEY,
    WALLET_MODE_KEY,
    WALLET_PROVIDER_KEY,
    AppMode,
    ConnectionState,
    Network,
    NetworkSwitch,
    Session,
    WalletMode,
    app_mode_for,
    logged_out_key,
    wallet_mode_for,
)
from sealbid.core.session.wallet import (
    Unavailable,
    WalletProvider,
    demo_address,
    detect_wallet_capability,
)
from sealbid.core.storage import PersistentStore
from sealbid.utils.logger import get_logger

logger = get_logger("session")

# Raises (usually BackendUnavailable) if the network's backend cannot be reached
NetworkProbe = Callable[[Network], Awaitable[None]]

E = TypeVar("E", AppMode, WalletMode, Network)


def _coerce(enum_cls: Type[E], value: Union[E, str]) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{enum_cls.__name__} must be one of: {allowed}; got {value!r}") from None


def _parse_flag(enum_cls: Type[E], raw: Optional[str], default: E) -> E:
    if raw is None:
        return default
    try:
        return enum_cls(raw)
    except ValueError:
        logger.warning(f"Ignoring unknown persisted {enum_cls.__name__} {raw!r}")
        return default


class SessionManager:
    """
    Owns the Session value and its persisted flags.

    One hydrate/persist boundary: nothing else reads or writes the flag keys.
    """

    def __init__(
        self,
        store: PersistentStore,
        wallet_provider: Optional[WalletProvider] = None,
        network_probe: Optional[NetworkProbe] = None,
        default_network: Network = Network.LOCAL,
    ):
        self.store = store
        self.wallet_provider = wallet_provider
        self.wallet_capability = detect_wallet_capability(wallet_provider)
        self.network_probe = network_probe
        self.default_network = Network(default_network)
        self.session = Session(network=self.default_network)

        if isinstance(self.wallet_capability, Unavailable):
            logger.debug(f"External wallets unavailable: {self.wallet_capability.reason}")

    # =========================================================================
    # Queries
    # =========================================================================

    def current_address(self) -> Optional[str]:
        """The address allowed to act, or None."""
        s = self.session
        if s.state != ConnectionState.CONNECTED:
            return None
        if s.explicitly_disconnected.get(s.wallet_mode, False):
            return None
        return s.active_address

    @property
    def is_connected(self) -> bool:
        return self.current_address() is not None

    @property
    def network(self) -> Network:
        return self.session.network

    def snapshot(self) -> Session:
        """Copy of the current session for display."""
        return self.session.copy()

    # =========================================================================
    # Hydration
    # =========================================================================

    async def hydrate(self) -> NetworkSwitch:
        """
        Rebuild the session from persisted flags.

        Returns:
            The network in effect (with fallback details if the persisted
            remote network was unreachable)
        """
        stored_wallet_mode = await self.store.get(WALLET_MODE_KEY)
        stored_app_mode = _parse_flag(AppMode, await self.store.get(APP_MODE_KEY), AppMode.DEMO)
        wallet_mode = _parse_flag(WalletMode, stored_wallet_mode, wallet_mode_for(stored_app_mode))

        session = Session(
            app_mode=app_mode_for(wallet_mode),
            wallet_mode=wallet_mode,
            network=_parse_flag(Network, await self.store.get(NETWORK_KEY), self.default_network),
        )
        for mode in WalletMode:
            flag = await self.store.get(logged_out_key(mode))
            session.explicitly_disconnected[mode] = flag == LOGGED_OUT_VALUE

        address = await self.store.get(WALLET_ADDRESS_KEY)
        if address:
            if wallet_mode == WalletMode.DEMO:
                self._mark_connected(session, address, None)
            elif session.explicitly_disconnected[WalletMode.EXTERNAL]:
                logger.info("External wallet was logged out; not restoring session")
            elif isinstance(self.wallet_capability, Unavailable):
                logger.warning(f"Not restoring external wallet {address[:10]}...: {self.wallet_capability.reason}")
            else:
                self._mark_connected(session, address, await self.store.get(WALLET_PROVIDER_KEY))

        self.session = session
        logger.info(f"Session hydrated: mode={session.app_mode.value}, "
                    f"network={session.network.value}, state={session.state.value}")

        return await self._ensure_reachable(session.network)

    # =========================================================================
    # Connect / Disconnect
    # =========================================================================

    async def connect(
        self,
        wallet_mode: Optional[Union[WalletMode, str]] = None,
        credentials: Optional[str] = None,
        provider_id: Optional[str] = None,
    ) -> str:
        """
        Resolve an identity for the current mode.

        Args:
            wallet_mode: Must match the current mode pairing (defaults to it)
            credentials: Demo only; derives a stable address
            provider_id: External only; which wallet to open

        Returns:
            The connected address

        Raises:
            ValidationError: mode mismatch or unusable credentials
            ConnectionRejected: the external wallet declined or is unavailable
        """
        mode = self.session.wallet_mode if wallet_mode is None else _coerce(WalletMode, wallet_mode)
        if mode != self.session.wallet_mode:
            raise ValidationError(
                f"Wallet mode {mode.value} does not match app mode "
                f"{self.session.app_mode.value}; switch mode first"
            )
        if self.session.state == ConnectionState.CONNECTING:
            raise ConnectionRejected("A connection attempt is already in progress")

        if self.session.state == ConnectionState.CONNECTED:
            await self._teardown(explicit=False)

        self.session.state = ConnectionState.CONNECTING
        try:
            if mode == WalletMode.DEMO:
                address = self._derive_demo_address(credentials)
                provider_id = None
            else:
                address = await self._connect_external(provider_id)
        except ConnectionRejected as e:
            self.session.connection_error = str(e)
            logger.warning(f"Connection rejected: {e}")
            raise
        else:
            self._mark_connected(self.session, address, provider_id)
        finally:
            # Abandoned or failed attempts (including cancellation) end disconnected
            if self.session.state == ConnectionState.CONNECTING:
                self.session.state = ConnectionState.DISCONNECTED

        self.session.explicitly_disconnected[mode] = False
        self.session.connection_error = None

        await self.store.set_many([
            (WALLET_ADDRESS_KEY, address),
            (WALLET_MODE_KEY, mode.value),
            (APP_MODE_KEY, self.session.app_mode.value),
            (WALLET_PROVIDER_KEY, provider_id),
        ])
        await self.store.delete(logged_out_key(mode))

        logger.info(f"Connected {mode.value} wallet {address[:10]}...")
        return address

    async def disconnect(self) -> None:
        """Explicit logout for the current wallet mode."""
        await self._teardown(explicit=True)

    def _derive_demo_address(self, credentials: Optional[str]) -> str:
        try:
            return demo_address(credentials)
        except ValueError as e:
            raise ValidationError(f"credentials: {e}") from e

    async def _connect_external(self, provider_id: Optional[str]) -> str:
        if isinstance(self.wallet_capability, Unavailable):
            raise ConnectionRejected(f"External wallet unavailable: {self.wallet_capability.reason}")

        try:
            address = await self.wallet_provider.connect(provider_id)
        except Exception as e:
            raise ConnectionRejected(f"Wallet connection failed: {e}") from e

        if not address:
            raise ConnectionRejected("Wallet returned no account")
        return address

    async def _teardown(self, explicit: bool) -> None:
        mode = self.session.wallet_mode
        was_connected = self.session.active_address is not None

        if mode == WalletMode.EXTERNAL and was_connected and self.wallet_provider is not None:
            try:
                await self.wallet_provider.disconnect()
            except Exception as e:
                logger.warning(f"Wallet provider disconnect failed: {e}")

        self.session.state = ConnectionState.DISCONNECTED
        self.session.active_address = None
        self.session.provider_id = None

        await self.store.delete_many([WALLET_ADDRESS_KEY, WALLET_PROVIDER_KEY])
        if explicit:
            self.session.explicitly_disconnected[mode] = True
            await self.store.set(logged_out_key(mode), LOGGED_OUT_VALUE)
            logger.info(f"Disconnected {mode.value} wallet")

    @staticmethod
    def _mark_connected(session: Session, address: str, provider_id: Optional[str]) -> None:
        session.state = ConnectionState.CONNECTED
        session.active_address = address
        session.provider_id = provider_id

    # =========================================================================
    # Mode / Network
    # =========================================================================

    async def switch_mode(self, app_mode: Union[AppMode, str]) -> None:
        """
        Change the app mode and its paired wallet mode.

        Disconnects first if connected; clears the previous mode's
        connection error.
        """
        new_mode = _coerce(AppMode, app_mode)
        if new_mode == self.session.app_mode:
            return

        if self.session.state == ConnectionState.CONNECTED:
            await self.disconnect()

        self.session.app_mode = new_mode
        self.session.wallet_mode = wallet_mode_for(new_mode)
        self.session.connection_error = None

        await self.store.set_many([
            (APP_MODE_KEY, new_mode.value),
            (WALLET_MODE_KEY, self.session.wallet_mode.value),
        ])
        logger.info(f"Switched to {new_mode.value} mode ({self.session.wallet_mode.value} wallet)")

    async def switch_network(self, network: Union[Network, str]) -> NetworkSwitch:
        """
        Change network. Disconnects first: an address on one network is
        not assumed valid on another.

        Returns:
            The network in effect; fell_back is True if the requested
            network was unreachable and local was used instead
        """
        new_network = _coerce(Network, network)
        if new_network == self.session.network:
            return NetworkSwitch(requested=new_network, network=new_network)

        if self.session.state == ConnectionState.CONNECTED:
            await self.disconnect()

        logger.info(f"Switching network: {self.session.network.value} -> {new_network.value}")
        self.session.network = new_network
        await self.store.set(NETWORK_KEY, new_network.value)

        return await self._ensure_reachable(new_network)

    async def _ensure_reachable(self, network: Network) -> NetworkSwitch:
        if network == Network.LOCAL or self.network_probe is None:
            return NetworkSwitch(requested=network, network=network)

        try:
            await self.network_probe(network)
        except Exception as e:
            reason = str(e) or type(e).__name__
            logger.warning(f"{network.value} network unreachable ({reason}); falling back to local")
            self.session.network = Network.LOCAL
            await self.store.set(NETWORK_KEY, Network.LOCAL.value)
            return NetworkSwitch(
                requested=network,
                network=Network.LOCAL,
                fell_back=True,
                reason=reason,
            )

        return NetworkSwitch(requested=network, network=network)
