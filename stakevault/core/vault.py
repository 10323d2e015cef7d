"""Staking vault: custody, unbonding, settlement and reward payout for NFTs.

Per-asset lifecycle::

    Staked --unstake--> Unbonding --withdraw--> Withdrawn --claim_rewards--> (deleted)

``withdraw`` and ``claim_rewards`` act on the caller's whole pending set and
succeed only if every pending asset is eligible.
"""
import copy
from typing import Iterable, List, Optional, Protocol, runtime_checkable
from loguru import logger
from pydantic import BaseModel, Field

from . import rewards
from .admin import set_paused, set_reward_rate, validate_identity, validate_reward_rate
from .config import VaultConfig
from .errors import (
    AlreadyInitialized,
    CustodyTransferDenied,
    DisbursementFailed,
    DuplicateAssetIds,
    EmptyBatch,
    InvalidDependency,
    NoPendingAssets,
    StakingError,
    ValidationError,
)
from .events import Initialized, RewardsClaimed, Staked, Unstaked, Withdrawn
from .guards import atomic, only_admin, when_not_paused
from .index import UserIndex
from .ledger import StakingLedger
from .runtime import Journaled, Runtime
from .stake import AssetState, StakedAsset


@runtime_checkable
class CustodyRegistry(Protocol):
    """What the vault needs from the asset registry."""

    def owner_of(self, asset_id: int) -> Optional[str]:
        ...

    def transfer_custody(self, operator: str, sender: str, recipient: str, asset_id: int) -> None:
        ...


@runtime_checkable
class RewardLedger(Protocol):
    """What the vault needs from the reward token."""

    def balance_of(self, account: str) -> int:
        ...

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        ...


class VaultState(BaseModel):
    """Everything the vault persists."""
    initialized: bool = False
    admin: Optional[str] = None
    reward_rate: int = 0
    paused: bool = False
    ledger: StakingLedger = Field(default_factory=StakingLedger)
    index: UserIndex = Field(default_factory=UserIndex)


def _batch(asset_ids: Iterable[int]) -> List[int]:
    ids = list(asset_ids)
    if not ids:
        raise EmptyBatch()
    for asset_id in ids:
        if isinstance(asset_id, bool) or not isinstance(asset_id, int):
            raise ValidationError(f"Asset ids must be integers, got {asset_id!r}")
    if len(set(ids)) != len(ids):
        raise DuplicateAssetIds()
    return ids


class StakingVault:
    """Aggregate owning the staking ledger, user index and admin settings."""

    def __init__(
        self,
        runtime: Runtime,
        config: Optional[VaultConfig] = None,
        state: Optional[VaultState] = None,
        asset_registry: Optional[CustodyRegistry] = None,
        reward_token: Optional[RewardLedger] = None,
    ):
        self.runtime = runtime
        self.config = config or VaultConfig()
        self.state = state or VaultState()
        self.asset_registry = asset_registry
        self.reward_token = reward_token
        self._entered = False
        runtime.attach(self)

    @property
    def address(self) -> str:
        """Escrow identity of the vault in the asset registry and token."""
        return self.config.vault_address

    @property
    def unbonding_window(self) -> int:
        return self.config.unbonding_window

    @property
    def settlement_window(self) -> int:
        return self.config.settlement_window

    @property
    def admin(self) -> Optional[str]:
        return self.state.admin

    @property
    def reward_rate(self) -> int:
        return self.state.reward_rate

    @property
    def paused(self) -> bool:
        return self.state.paused

    @property
    def initialized(self) -> bool:
        return self.state.initialized

    def snapshot(self) -> VaultState:
        return copy.deepcopy(self.state)

    def restore(self, snapshot: VaultState) -> None:
        self.state = snapshot

    def initialize(
        self,
        admin_identity: str,
        reward_token: RewardLedger,
        asset_registry: CustodyRegistry,
        reward_rate: int,
    ) -> None:
        """Wire dependencies and settings. Callable exactly once.

        Raises:
            AlreadyInitialized: the vault was initialized before
            ZeroAddress: empty admin identity
            InvalidDependency: a dependency lacks the required interface
            InvalidRewardRate: rate is not a positive integer
        """
        if self.state.initialized:
            raise AlreadyInitialized()
        validate_identity(admin_identity, "admin")
        if not isinstance(reward_token, RewardLedger):
            raise InvalidDependency(f"{reward_token!r} is not a reward ledger")
        if not isinstance(asset_registry, CustodyRegistry):
            raise InvalidDependency(f"{asset_registry!r} is not an asset registry")
        validate_reward_rate(reward_rate)
        self.runtime.attach(*(d for d in (asset_registry, reward_token) if isinstance(d, Journaled)))

        with self.runtime.transaction("initialize"):
            self.state.initialized = True
            self.state.admin = admin_identity
            self.state.reward_rate = reward_rate
            self.reward_token = reward_token
            self.asset_registry = asset_registry
            self.runtime.emit(Initialized(admin=admin_identity, reward_rate=reward_rate, tick=self.runtime.tick))
        logger.info(f"Vault {self.address} initialized: admin {admin_identity}, rate {reward_rate}")

    @atomic
    @when_not_paused
    def stake(self, caller: str, asset_ids: Iterable[int]) -> List[int]:
        """Move each asset into escrow and open its record.

        The caller must have approved the vault for every asset beforehand.
        """
        validate_identity(caller, "caller")
        ids = _batch(asset_ids)
        tick = self.runtime.tick
        for asset_id in ids:
            self._move(caller, self.address, asset_id)
            self.state.ledger.open(asset_id, caller, tick)
        self.runtime.emit(Staked(owner=caller, asset_ids=ids, tick=tick))
        logger.info(f"{caller} staked {ids} at tick {tick}")
        return ids

    @atomic
    def unstake(self, caller: str, asset_ids: Iterable[int]) -> List[int]:
        """Start the unbonding window for each asset and queue it for the caller."""
        ids = _batch(asset_ids)
        tick = self.runtime.tick
        for asset_id in ids:
            self.state.ledger.begin_unbonding(asset_id, caller, tick, self.unbonding_window)
            self.state.index.append(caller, asset_id)
        self.runtime.emit(Unstaked(owner=caller, asset_ids=ids, tick=tick))
        logger.info(f"{caller} unstaked {ids} at tick {tick}, unbonding until {tick + self.unbonding_window}")
        return ids

    @atomic
    def withdraw(self, caller: str) -> List[int]:
        """Return every unbonded pending asset to the caller.

        All pending assets still in escrow must be past their unbonding
        window, otherwise none is returned.
        """
        tick = self.runtime.tick
        ledger = self.state.ledger
        ids = [a for a in self.state.index.pending_of(caller) if not ledger.records[a].is_withdrawn]
        if not ids:
            raise NoPendingAssets(f"{caller} has no assets waiting to be withdrawn")
        for asset_id in ids:
            ledger.require_unbonded(asset_id, tick)
        for asset_id in ids:
            ledger.mark_withdrawn(asset_id, tick, self.settlement_window)
            self._move(self.address, caller, asset_id)
        self.runtime.emit(Withdrawn(owner=caller, asset_ids=ids, tick=tick))
        logger.info(f"{caller} withdrew {ids} at tick {tick}, settling until {tick + self.settlement_window}")
        return ids

    @atomic
    def claim_rewards(self, caller: str) -> int:
        """Settle the caller's pending assets and pay the reward.

        Records are deleted before payout; a refused payout rolls the deletion
        back with the rest of the transaction.
        """
        tick = self.runtime.tick
        settlement = rewards.settle(
            self.state.ledger, self.state.index, caller, tick, self.state.reward_rate
        )
        self._pay(caller, settlement.amount)
        self.runtime.emit(RewardsClaimed(
            owner=caller,
            asset_ids=settlement.asset_ids,
            amount=settlement.amount,
            reward_rate=settlement.reward_rate,
            tick=tick,
        ))
        logger.info(f"{caller} claimed {settlement.amount} for {settlement.asset_ids} at tick {tick}")
        return settlement.amount

    @atomic
    @only_admin
    def update_reward_rate(self, caller: str, new_rate: int) -> int:
        """Replace the per-tick reward rate and return the previous one."""
        event = set_reward_rate(self.state, new_rate, self.runtime.tick)
        self.runtime.emit(event)
        return event.old_rate

    @atomic
    @only_admin
    def pause(self, caller: str) -> None:
        """Stop accepting new stakes."""
        self.runtime.emit(set_paused(self.state, caller, True, self.runtime.tick))

    @atomic
    @only_admin
    def unpause(self, caller: str) -> None:
        self.runtime.emit(set_paused(self.state, caller, False, self.runtime.tick))

    def get_record(self, asset_id: int) -> Optional[StakedAsset]:
        """Copy of the record for ``asset_id``, or ``None`` once settled."""
        record = self.state.ledger.get(asset_id)
        return record.model_copy() if record else None

    def state_of(self, asset_id: int) -> Optional[AssetState]:
        return self.state.ledger.state_of(asset_id)

    def pending_of(self, account: str) -> List[int]:
        return self.state.index.pending_of(account)

    def assets_of(self, account: str) -> List[int]:
        """Ids of every asset ``account`` has in some stage of custody."""
        return self.state.ledger.assets_of(account)

    def preview_rewards(self, account: str) -> int:
        return rewards.preview_rewards(
            self.state.ledger, self.state.index, account, self.state.reward_rate
        )

    def _move(self, sender: str, recipient: str, asset_id: int) -> None:
        try:
            self.asset_registry.transfer_custody(self.address, sender, recipient, asset_id)
        except StakingError:
            raise
        except Exception as e:
            raise CustodyTransferDenied(f"Custody transfer failed: {e}", asset_id) from e

    def _pay(self, recipient: str, amount: int) -> None:
        try:
            ok = self.reward_token.transfer(self.address, recipient, amount)
        except StakingError:
            raise
        except Exception as e:
            raise DisbursementFailed(f"Reward transfer of {amount} failed: {e}") from e
        if not ok:
            raise DisbursementFailed(f"Reward token refused to pay {amount} to {recipient}")
