"""Per-participant index of unstaked, not yet settled assets."""
from typing import Dict, Iterable, List
from pydantic import BaseModel


class UserIndex(BaseModel):
    """Participant -> asset ids in the order they were unstaked."""
    pending: Dict[str, List[int]] = {}

    def append(self, owner: str, asset_id: int) -> None:
        self.pending.setdefault(owner, []).append(asset_id)

    def pending_of(self, owner: str) -> List[int]:
        return list(self.pending.get(owner, []))

    def has_pending(self, owner: str) -> bool:
        return bool(self.pending.get(owner))

    def owners(self) -> List[str]:
        return sorted(self.pending)

    def remove(self, owner: str, asset_ids: Iterable[int]) -> None:
        """Drop settled ids; an owner with nothing left disappears from the index."""
        settled = set(asset_ids)
        remaining = [a for a in self.pending.get(owner, []) if a not in settled]
        if remaining:
            self.pending[owner] = remaining
        else:
            self.pending.pop(owner, None)
