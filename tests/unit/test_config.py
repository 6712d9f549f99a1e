"""
Unit tests for engine configuration loading.
"""

from pathlib import Path

import pytest

from sealbid.core.config import EngineConfig, load_config


@pytest.fixture
def empty_env_file(tmp_path):
    path = tmp_path / ".env"
    path.write_text("")
    return str(path)


class TestEngineConfig:
    """Tests for defaults and derived paths."""

    def test_defaults(self):
        cfg = EngineConfig()
        assert cfg.db_name == "sealbid.db"
        assert cfg.persist
        assert cfg.default_network == "local"
        assert cfg.remote_url is None
        assert cfg.seed_demo_auctions

    def test_db_path(self, tmp_path):
        cfg = EngineConfig(data_dir=tmp_path, db_name="x.db")
        assert cfg.db_path == tmp_path / "x.db"

    def test_ensure_dirs(self, tmp_path):
        cfg = EngineConfig(data_dir=tmp_path / "data", log_dir=tmp_path / "logs", log_to_file=True)
        cfg.ensure_dirs()
        assert (tmp_path / "data").is_dir()
        assert (tmp_path / "logs").is_dir()

    def test_ensure_dirs_in_memory(self, tmp_path):
        cfg = EngineConfig(data_dir=tmp_path / "data", persist=False)
        cfg.ensure_dirs()
        assert not (tmp_path / "data").exists()


class TestLoadConfig:
    """Tests for environment and .env loading."""

    def test_environment_overrides(self, monkeypatch, empty_env_file, tmp_path):
        monkeypatch.setenv("SEALBID_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("SEALBID_PERSIST", "false")
        monkeypatch.setenv("SEALBID_NETWORK", "remote")
        monkeypatch.setenv("SEALBID_REMOTE_URL", "https://remote.example")
        monkeypatch.setenv("SEALBID_REMOTE_TIMEOUT", "2.5")
        monkeypatch.setenv("SEALBID_SEED_DEMO_AUCTIONS", "no")

        cfg = load_config(env_file=empty_env_file)

        assert cfg.data_dir == tmp_path
        assert not cfg.persist
        assert cfg.default_network == "remote"
        assert cfg.remote_url == "https://remote.example"
        assert cfg.remote_timeout == 2.5
        assert not cfg.seed_demo_auctions

    def test_dotenv_file(self, tmp_path):
        env_file = tmp_path / "custom.env"
        env_file.write_text("SEALBID_DB_NAME=from_file.db\nSEALBID_LOG_TO_FILE=1\n")

        cfg = load_config(env_file=str(env_file))

        assert cfg.db_name == "from_file.db"
        assert cfg.log_to_file

    def test_environment_wins_over_dotenv(self, monkeypatch, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("SEALBID_DB_NAME=from_file.db\n")
        monkeypatch.setenv("SEALBID_DB_NAME", "from_env.db")

        assert load_config(env_file=str(env_file)).db_name == "from_env.db"

    def test_keyword_overrides_win(self, monkeypatch, empty_env_file):
        monkeypatch.setenv("SEALBID_PERSIST", "true")
        cfg = load_config(env_file=empty_env_file, persist=False, data_dir=Path("/tmp/x"))
        assert not cfg.persist
        assert cfg.data_dir == Path("/tmp/x")

    def test_unknown_override(self, empty_env_file):
        with pytest.raises(TypeError):
            load_config(env_file=empty_env_file, colour="blue")

    def test_invalid_network(self, monkeypatch, empty_env_file):
        monkeypatch.setenv("SEALBID_NETWORK", "mainnet")
        with pytest.raises(ValueError):
            load_config(env_file=empty_env_file)

    def test_blank_values_ignored(self, monkeypatch, empty_env_file):
        monkeypatch.setenv("SEALBID_DB_NAME", "   ")
        assert load_config(env_file=empty_env_file).db_name == "sealbid.db"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
