"""Privileged settings: reward rate and the staking pause switch."""
from typing import Any, Optional
from loguru import logger

from .errors import AlreadyPaused, InvalidRewardRate, NotPaused, ZeroAddress
from .events import Paused, RewardRateUpdated, Unpaused


def validate_reward_rate(rate: Any) -> int:
    # bool is an int subclass but never a meaningful rate
    if isinstance(rate, bool) or not isinstance(rate, int) or rate <= 0:
        raise InvalidRewardRate(f"Reward rate must be a positive integer, got {rate!r}")
    return rate


def validate_identity(identity: Optional[str], role: str = "identity") -> str:
    if not isinstance(identity, str) or not identity.strip():
        raise ZeroAddress(f"{role} must be a non-empty string")
    return identity


def set_reward_rate(state, new_rate: Any, tick: int) -> RewardRateUpdated:
    """Replace the rate on ``state`` and describe the change."""
    new_rate = validate_reward_rate(new_rate)
    old_rate = state.reward_rate
    state.reward_rate = new_rate
    logger.info(f"Reward rate changed {old_rate} -> {new_rate} at tick {tick}")
    return RewardRateUpdated(old_rate=old_rate, new_rate=new_rate, tick=tick)


def set_paused(state, account: str, paused: bool, tick: int):
    """Flip the pause flag on ``state``; only a real change is accepted."""
    if paused and state.paused:
        raise AlreadyPaused()
    if not paused and not state.paused:
        raise NotPaused()
    state.paused = paused
    logger.info(f"Staking {'paused' if paused else 'resumed'} by {account} at tick {tick}")
    if paused:
        return Paused(account=account, tick=tick)
    return Unpaused(account=account, tick=tick)
