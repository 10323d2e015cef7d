"""JSON persistence for a deployment."""
import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union
from loguru import logger
from pydantic import BaseModel

from .config import VaultConfig, get_data_dir
from .deployment import Deployment, assemble
from .events import EventLog
from .registry import AssetRegistry, AssetRegistryState
from .runtime import Runtime, TickClock
from .token import RewardToken, RewardTokenState
from .vault import StakingVault, VaultState

SCHEMA_VERSION = 1
STATE_FILE = "vault_state.json"


class StoreError(Exception):
    """Persisted state cannot be read."""


class StoredDeployment(BaseModel):
    schema_version: int = SCHEMA_VERSION
    tick: int
    config: VaultConfig
    vault: VaultState
    registry: AssetRegistryState
    token: RewardTokenState
    log: EventLog


class VaultStore:
    """Saves and loads a whole deployment as one JSON document."""

    def __init__(self, data_dir: Optional[Union[str, Path]] = None):
        self.data_dir = Path(data_dir) if data_dir else get_data_dir()
        self.path = self.data_dir / STATE_FILE

    def exists(self) -> bool:
        return self.path.exists()

    def save(self, deployment: Deployment) -> Path:
        if deployment.runtime.in_transaction:
            raise StoreError("Cannot save while a transaction is open")
        stored = StoredDeployment(
            tick=deployment.tick,
            config=deployment.config,
            vault=deployment.vault.state,
            registry=deployment.registry.state,
            token=deployment.token.state,
            log=deployment.runtime.log,
        )
        self.data_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=".vault_state.", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w') as f:
                f.write(stored.model_dump_json(indent=2))
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
        logger.debug(f"Saved vault state to {self.path}")
        return self.path

    def load(self) -> Deployment:
        """Rebuild the deployment saved at ``self.path``.

        Raises:
            StoreError: file missing, unreadable, or from an unknown schema
        """
        if not self.path.exists():
            raise StoreError(f"No vault state at {self.path}; run 'stake-vault init' first")
        try:
            with open(self.path) as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Cannot read {self.path}: {e}") from e

        version = raw.get("schema_version") if isinstance(raw, dict) else None
        if version != SCHEMA_VERSION:
            raise StoreError(f"Unsupported state schema version {version!r}")
        try:
            stored = StoredDeployment.model_validate(raw)
        except ValueError as e:
            raise StoreError(f"Corrupt vault state in {self.path}: {e}") from e

        runtime = Runtime(clock=TickClock(stored.tick), log=stored.log)
        registry = AssetRegistry(stored.registry)
        token = RewardToken(stored.token)
        vault = StakingVault(
            runtime,
            stored.config,
            state=stored.vault,
            asset_registry=registry,
            reward_token=token,
        )
        logger.debug(f"Loaded vault state from {self.path} at tick {stored.tick}")
        return assemble(stored.config, runtime, registry, token, vault)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
