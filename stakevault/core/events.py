"""Events emitted by vault operations."""
from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, Field


class VaultEvent(BaseModel):
    """Base for committed vault events."""
    tick: int

    def involves(self, account: str) -> bool:
        """Whether the event concerns ``account``."""
        return account in (getattr(self, "owner", None), getattr(self, "account", None))


class Initialized(VaultEvent):
    name: Literal["Initialized"] = "Initialized"
    admin: str
    reward_rate: int


class Staked(VaultEvent):
    name: Literal["Staked"] = "Staked"
    owner: str
    asset_ids: List[int]


class Unstaked(VaultEvent):
    name: Literal["Unstaked"] = "Unstaked"
    owner: str
    asset_ids: List[int]


class Withdrawn(VaultEvent):
    name: Literal["Withdrawn"] = "Withdrawn"
    owner: str
    asset_ids: List[int]


class RewardsClaimed(VaultEvent):
    name: Literal["RewardsClaimed"] = "RewardsClaimed"
    owner: str
    asset_ids: List[int]
    amount: int
    reward_rate: int


class RewardRateUpdated(VaultEvent):
    name: Literal["RewardRateUpdated"] = "RewardRateUpdated"
    old_rate: int
    new_rate: int


class Paused(VaultEvent):
    name: Literal["Paused"] = "Paused"
    account: str


class Unpaused(VaultEvent):
    name: Literal["Unpaused"] = "Unpaused"
    account: str


AnyEvent = Annotated[
    Union[
        Initialized,
        Staked,
        Unstaked,
        Withdrawn,
        RewardsClaimed,
        RewardRateUpdated,
        Paused,
        Unpaused,
    ],
    Field(discriminator="name"),
]


class EventLog(BaseModel):
    """Append-only log of committed events."""
    events: List[AnyEvent] = []

    def append(self, event: VaultEvent) -> None:
        self.events.append(event)

    def extend(self, events: List[VaultEvent]) -> None:
        self.events.extend(events)

    def for_account(self, account: Optional[str] = None) -> List[VaultEvent]:
        if account is None:
            return list(self.events)
        return [e for e in self.events if e.involves(account)]

    def __len__(self) -> int:
        return len(self.events)
