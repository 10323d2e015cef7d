"""Wiring of a vault with its collaborators."""
from dataclasses import dataclass
from typing import Optional
from loguru import logger

from .config import VaultConfig
from .registry import AssetRegistry
from .runtime import Runtime, TickClock
from .token import RewardToken, RewardTokenState
from .vault import StakingVault


@dataclass
class Deployment:
    """A runtime with one vault, its asset registry and its reward token."""
    config: VaultConfig
    runtime: Runtime
    vault: StakingVault
    registry: AssetRegistry
    token: RewardToken

    @property
    def tick(self) -> int:
        return self.runtime.tick

    def advance(self, ticks: int = 1) -> int:
        return self.runtime.clock.advance(ticks)


def assemble(
    config: VaultConfig,
    runtime: Runtime,
    registry: AssetRegistry,
    token: RewardToken,
    vault: StakingVault,
) -> Deployment:
    runtime.attach(registry, token)
    return Deployment(config=config, runtime=runtime, vault=vault, registry=registry, token=token)


def deploy(
    admin: str,
    reward_rate: Optional[int] = None,
    config: Optional[VaultConfig] = None,
    start_tick: int = 0,
) -> Deployment:
    """Create and initialize a fresh vault with empty collaborators."""
    config = config or VaultConfig()
    runtime = Runtime(clock=TickClock(start_tick))
    registry = AssetRegistry()
    token = RewardToken(RewardTokenState(symbol=config.reward_symbol))
    vault = StakingVault(runtime, config)
    deployment = assemble(config, runtime, registry, token, vault)
    rate = config.initial_reward_rate if reward_rate is None else reward_rate
    vault.initialize(admin, token, registry, rate)
    logger.debug(f"Deployed vault {config.vault_address} at tick {start_tick}")
    return deployment
