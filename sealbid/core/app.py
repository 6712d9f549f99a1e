"""
Composition root.

build_app() wires one explicit instance of every component from an
EngineConfig; start() loads persisted state and restores the session.
There is no module-level service singleton.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from sealbid.core.auction import AuctionRepository, Clock, ResolutionEngine, system_clock
from sealbid.core.backend import AuctionBackend, DemoBackend, RemoteBackend, RemoteExecutionClient
from sealbid.core.config import EngineConfig, load_config
from sealbid.core.service import AuctionService
from sealbid.core.session import Network, NetworkSwitch, SessionManager, WalletProvider
from sealbid.core.storage import DurableSink, MemorySink, PersistentStore, SQLiteSink
from sealbid.utils.logger import get_logger

logger = get_logger("app")


@dataclass
class App:
    """Wired components for one process."""
    config: EngineConfig
    sink: DurableSink
    store: PersistentStore
    repository: AuctionRepository
    backends: Dict[Network, AuctionBackend]
    session: SessionManager
    service: AuctionService

    async def start(self) -> NetworkSwitch:
        """
        Load the store, prepare backends and hydrate the session.

        Returns:
            The network in effect after hydration
        """
        await self.store.load()
        await self.backends[Network.LOCAL].initialize()
        switch = await self.session.hydrate()
        if switch.fell_back:
            logger.warning(f"Using local network: {switch.reason}")
        return switch

    def close(self) -> None:
        if isinstance(self.sink, SQLiteSink):
            self.sink.close()


def build_app(
    config: Optional[EngineConfig] = None,
    wallet_provider: Optional[WalletProvider] = None,
    remote_client: Optional[RemoteExecutionClient] = None,
    clock: Clock = system_clock,
) -> App:
    """
    Wire the engine.

    Args:
        config: Engine configuration (load_config() if None)
        wallet_provider: External wallet adapter, if any
        remote_client: Transport to the remote auction contract, if deployed
        clock: Millisecond clock shared by every component

    Returns:
        App, not yet started
    """
    config = config or load_config()
    config.ensure_dirs()

    if config.persist:
        sink = SQLiteSink(config.db_path)
    else:
        sink = MemorySink()
    store = PersistentStore(sink)

    repository = AuctionRepository(store, clock=clock)
    engine = ResolutionEngine(repository, clock=clock)

    if remote_client is None and config.remote_url:
        logger.warning(f"Remote endpoint {config.remote_url} configured without a client; "
                       "remote network will be unavailable")

    backends: Dict[Network, AuctionBackend] = {
        Network.LOCAL: DemoBackend(repository, engine, seed_demo_auctions=config.seed_demo_auctions),
        Network.REMOTE: RemoteBackend(remote_client, timeout=config.remote_timeout),
    }

    async def probe(network: Network) -> None:
        await backends[network].ping()

    session = SessionManager(
        store,
        wallet_provider=wallet_provider,
        network_probe=probe,
        default_network=Network(config.default_network),
    )
    service = AuctionService(session, backends, clock=clock)

    logger.debug(f"App wired: persist={config.persist}, db={config.db_path if config.persist else ':memory:'}")
    return App(
        config=config,
        sink=sink,
        store=store,
        repository=repository,
        backends=backends,
        session=session,
        service=service,
    )
