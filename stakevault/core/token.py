"""In-memory fungible reward token."""
import copy
from typing import Dict, Optional
from loguru import logger
from pydantic import BaseModel

from .errors import ZeroAddress


class RewardTokenState(BaseModel):
    """Serializable token balances."""
    symbol: str = "RWD"
    balances: Dict[str, int] = {}
    total_supply: int = 0


class RewardToken:
    """Balance ledger with boolean transfer semantics."""

    def __init__(self, state: Optional[RewardTokenState] = None):
        self.state = state or RewardTokenState()

    @property
    def symbol(self) -> str:
        return self.state.symbol

    @property
    def total_supply(self) -> int:
        return self.state.total_supply

    def balance_of(self, account: str) -> int:
        return self.state.balances.get(account, 0)

    def mint(self, to: str, amount: int) -> None:
        if not to:
            raise ZeroAddress("Cannot mint to an empty identity")
        if amount <= 0:
            raise ValueError("Mint amount must be positive")
        self.state.balances[to] = self.balance_of(to) + amount
        self.state.total_supply += amount
        logger.debug(f"Minted {amount} {self.symbol} to {to}")

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """Move ``amount`` from ``sender`` to ``recipient``.

        Returns:
            False when the sender's balance is short or the recipient is empty
        """
        if amount <= 0:
            raise ValueError("Transfer amount must be positive")
        if not recipient or self.balance_of(sender) < amount:
            logger.debug(f"Transfer of {amount} {self.symbol} from {sender} refused")
            return False
        self.state.balances[sender] = self.balance_of(sender) - amount
        self.state.balances[recipient] = self.balance_of(recipient) + amount
        return True

    def snapshot(self) -> RewardTokenState:
        return copy.deepcopy(self.state)

    def restore(self, snapshot: RewardTokenState) -> None:
        self.state = snapshot
