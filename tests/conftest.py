"""Test configuration and fixtures for Stake Vault."""
import os
import pytest
from stakevault.core.config import VaultConfig
from stakevault.core.deployment import deploy


@pytest.fixture
def config():
    """Vault settings used across the suite: unbonding 20, settlement 30."""
    return VaultConfig(unbonding_window=20, settlement_window=30)


@pytest.fixture
def deployment(config):
    """Initialized vault (admin alice, rate 5) with a funded reward pool."""
    d = deploy("alice", reward_rate=5, config=config)
    d.token.mint(d.vault.address, 1_000_000)
    return d


@pytest.fixture
def vault(deployment):
    return deployment.vault


@pytest.fixture
def clock(deployment):
    return deployment.runtime.clock


@pytest.fixture
def mint_approved(deployment):
    """Mint assets and approve the vault to take them."""
    def _mint(owner: str = "bob", count: int = 1):
        ids = []
        for _ in range(count):
            asset_id = deployment.registry.mint(owner)
            deployment.registry.approve(owner, deployment.vault.address, asset_id)
            ids.append(asset_id)
        return ids
    return _mint


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Point vault persistence at a temporary directory."""
    monkeypatch.setenv("STAKEVAULT_DATA_DIR", str(tmp_path))
    return tmp_path


@pytest.fixture
def env_setup():
    """Set up environment variables for testing."""
    os.environ["STAKEVAULT_LOG_LEVEL"] = "DEBUG"
    yield
    del os.environ["STAKEVAULT_LOG_LEVEL"]
