"""
Engine configuration for sealbid.

Defines storage locations, the default network, and remote backend
settings. Values come from defaults, overridden by SEALBID_* environment
variables (optionally loaded from a .env file).
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "SEALBID_"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class EngineConfig:
    """Engine-wide configuration parameters"""

    # Storage
    data_dir: Path = field(default_factory=lambda: Path("~/.sealbid").expanduser())
    db_name: str = "sealbid.db"
    persist: bool = True  # False keeps everything in memory

    # Network
    default_network: str = "local"  # local | remote
    remote_url: Optional[str] = None  # Remote execution endpoint, None = not deployed
    remote_timeout: float = 10.0  # Seconds before a remote probe is unreachable

    # Demo backend
    seed_demo_auctions: bool = True

    # Logging
    log_dir: Path = Path("logs")
    log_to_file: bool = False

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name

    def ensure_dirs(self) -> None:
        """Create necessary directories"""
        if self.persist:
            self.data_dir.mkdir(exist_ok=True, parents=True)
        if self.log_to_file:
            self.log_dir.mkdir(exist_ok=True, parents=True)


def _env(name: str) -> Optional[str]:
    value = os.environ.get(ENV_PREFIX + name)
    if value is None or value.strip() == "":
        return None
    return value.strip()


def _env_bool(name: str, default: bool) -> bool:
    value = _env(name)
    if value is None:
        return default
    return value.lower() in _TRUE_VALUES


def load_config(env_file: Optional[str] = None, **overrides) -> EngineConfig:
    """
    Load configuration from environment variables.

    A .env file is read first (without overriding variables that are
    already set), then SEALBID_* variables override the defaults, then
    explicit keyword overrides win.

    Args:
        env_file: Optional path to a .env file. If None, python-dotenv
            searches the working directory.
        **overrides: EngineConfig fields to force

    Returns:
        EngineConfig instance
    """
    load_dotenv(dotenv_path=env_file, override=False)

    cfg = EngineConfig()

    data_dir = _env("DATA_DIR")
    if data_dir:
        cfg.data_dir = Path(data_dir).expanduser()
    cfg.db_name = _env("DB_NAME") or cfg.db_name
    cfg.persist = _env_bool("PERSIST", cfg.persist)

    network = _env("NETWORK")
    if network:
        if network not in ("local", "remote"):
            raise ValueError(f"{ENV_PREFIX}NETWORK must be 'local' or 'remote', got {network!r}")
        cfg.default_network = network
    cfg.remote_url = _env("REMOTE_URL") or cfg.remote_url
    timeout = _env("REMOTE_TIMEOUT")
    if timeout:
        cfg.remote_timeout = float(timeout)

    cfg.seed_demo_auctions = _env_bool("SEED_DEMO_AUCTIONS", cfg.seed_demo_auctions)

    log_dir = _env("LOG_DIR")
    if log_dir:
        cfg.log_dir = Path(log_dir).expanduser()
    cfg.log_to_file = _env_bool("LOG_TO_FILE", cfg.log_to_file)

    for key, value in overrides.items():
        if not hasattr(cfg, key):
            raise TypeError(f"Unknown config field: {key}")
        setattr(cfg, key, value)

    return cfg
