"""Reward calculation and settlement.

Reward accrues per tick from the moment an asset is staked until its
unbonding window ends, so the wait after ``unstake`` is paid too:

    reward = sum(unbonding_ends_at_tick - staked_at_tick) * rate

The rate is read at settlement time. A rate change therefore reprices every
position that has not been claimed yet.
"""
from dataclasses import dataclass
from typing import Iterable, List
from loguru import logger

from .errors import NothingToClaim, NoUnstakedAssets
from .index import UserIndex
from .ledger import StakingLedger
from .stake import StakedAsset


@dataclass
class Settlement:
    """Outcome of a successful settlement."""
    owner: str
    asset_ids: List[int]
    amount: int
    reward_rate: int


def compute_reward(records: Iterable[StakedAsset], rate: int) -> int:
    return sum(record.reward_span for record in records) * rate


def preview_rewards(ledger: StakingLedger, index: UserIndex, owner: str, rate: int) -> int:
    """Amount a claim would pay right now, ignoring the cooldown windows."""
    records = [ledger.get(a) for a in index.pending_of(owner)]
    return compute_reward([r for r in records if r is not None], rate)


def settle(ledger: StakingLedger, index: UserIndex, owner: str, tick: int, rate: int) -> Settlement:
    """Consume every pending record of ``owner`` and return what is owed.

    All pending assets must be withdrawn and past their settlement window;
    otherwise nothing is touched.

    Raises:
        NoUnstakedAssets: owner has nothing pending
        NotWithdrawn: a pending asset is still in escrow
        SettlementNotElapsed: a pending asset is still inside its settlement window
        NothingToClaim: the computed reward is zero
    """
    asset_ids = index.pending_of(owner)
    if not asset_ids:
        raise NoUnstakedAssets(f"{owner} has no unstaked assets to settle")

    records = [ledger.require_settled(asset_id, tick) for asset_id in asset_ids]
    amount = compute_reward(records, rate)
    if amount == 0:
        raise NothingToClaim(f"Reward for {owner} is zero")

    for asset_id in asset_ids:
        ledger.close(asset_id)
    index.remove(owner, asset_ids)
    logger.debug(f"Settled {len(asset_ids)} asset(s) for {owner}: {amount} at rate {rate}")
    return Settlement(owner=owner, asset_ids=asset_ids, amount=amount, reward_rate=rate)
