"""Staking ledger: one record per asset in custody."""
from typing import Dict, List, Optional
from loguru import logger
from pydantic import BaseModel

from .errors import (
    AlreadyStaked,
    AlreadyUnstaked,
    NotOwner,
    NotWithdrawn,
    SettlementNotElapsed,
    UnbondingNotElapsed,
)
from .stake import AssetState, StakedAsset


class StakingLedger(BaseModel):
    """Asset id -> lifecycle record.

    A record exists exactly while its asset is staked, unbonding or waiting
    for settlement. ``close`` removes it once the reward is paid.
    """
    records: Dict[int, StakedAsset] = {}

    def __contains__(self, asset_id: int) -> bool:
        return asset_id in self.records

    def __len__(self) -> int:
        return len(self.records)

    def get(self, asset_id: int) -> Optional[StakedAsset]:
        return self.records.get(asset_id)

    def state_of(self, asset_id: int) -> Optional[AssetState]:
        record = self.records.get(asset_id)
        return record.state if record else None

    def assets_of(self, owner: str) -> List[int]:
        return sorted(a for a, r in self.records.items() if r.owner == owner)

    def open(self, asset_id: int, owner: str, tick: int) -> StakedAsset:
        """Create the record for an asset that just entered escrow."""
        if asset_id in self.records:
            raise AlreadyStaked(asset_id=asset_id)
        record = StakedAsset(owner=owner, staked_at_tick=tick)
        self.records[asset_id] = record
        logger.debug(f"Asset {asset_id} staked by {owner} at tick {tick}")
        return record

    def begin_unbonding(self, asset_id: int, caller: str, tick: int, window: int) -> StakedAsset:
        """Staked -> Unbonding.

        Raises:
            NotOwner: no record, or the caller did not stake the asset
            AlreadyUnstaked: unstake was already requested
        """
        record = self.records.get(asset_id)
        if record is None or record.owner != caller:
            raise NotOwner(f"{caller} has not staked this asset", asset_id)
        if record.is_unstaked:
            raise AlreadyUnstaked(asset_id=asset_id)
        record.is_unstaked = True
        record.unstaked_at_tick = tick
        record.unbonding_ends_at_tick = tick + window
        logger.debug(f"Asset {asset_id} unbonding until tick {record.unbonding_ends_at_tick}")
        return record

    def require_unbonded(self, asset_id: int, tick: int) -> StakedAsset:
        record = self.records[asset_id]
        if tick <= record.unbonding_ends_at_tick:
            raise UnbondingNotElapsed(
                f"Unbonding ends at tick {record.unbonding_ends_at_tick}, now {tick}", asset_id
            )
        return record

    def mark_withdrawn(self, asset_id: int, tick: int, window: int) -> StakedAsset:
        """Unbonding -> Withdrawn."""
        record = self.require_unbonded(asset_id, tick)
        record.is_withdrawn = True
        record.settlement_ends_at_tick = tick + window
        logger.debug(f"Asset {asset_id} settling until tick {record.settlement_ends_at_tick}")
        return record

    def require_settled(self, asset_id: int, tick: int) -> StakedAsset:
        record = self.records[asset_id]
        if not record.is_withdrawn:
            raise NotWithdrawn(asset_id=asset_id)
        if tick <= record.settlement_ends_at_tick:
            raise SettlementNotElapsed(
                f"Settlement ends at tick {record.settlement_ends_at_tick}, now {tick}", asset_id
            )
        return record

    def close(self, asset_id: int) -> StakedAsset:
        """Withdrawn -> Settled: drop the record."""
        record = self.records.pop(asset_id)
        logger.debug(f"Asset {asset_id} settled")
        return record
