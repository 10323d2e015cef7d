"""Per-asset staking records."""
from enum import Enum
from pydantic import BaseModel


class AssetState(str, Enum):
    """Lifecycle stage of an asset still held in a record."""
    STAKED = "staked"
    UNBONDING = "unbonding"
    WITHDRAWN = "withdrawn"


class StakedAsset(BaseModel):
    """Record of an asset under some stage of vault custody."""
    owner: str
    staked_at_tick: int
    unstaked_at_tick: int = 0
    unbonding_ends_at_tick: int = 0
    settlement_ends_at_tick: int = 0
    is_unstaked: bool = False
    is_withdrawn: bool = False

    @property
    def state(self) -> AssetState:
        if self.is_withdrawn:
            return AssetState.WITHDRAWN
        if self.is_unstaked:
            return AssetState.UNBONDING
        return AssetState.STAKED

    @property
    def reward_span(self) -> int:
        """Ticks that earn reward: from staking to the end of unbonding.

        Zero while the asset is still staked, since unbonding has no end yet.
        """
        if not self.is_unstaked:
            return 0
        return self.unbonding_ends_at_tick - self.staked_at_tick
