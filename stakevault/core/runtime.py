"""Serialized execution runtime.

Operations run one at a time. ``Runtime.transaction()`` snapshots every
attached participant before the operation runs and restores all of them if it
raises. Events emitted inside a transaction reach the committed log only when
the outermost transaction finishes cleanly.
"""
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Protocol, runtime_checkable
from loguru import logger

from .events import EventLog, VaultEvent


@runtime_checkable
class Journaled(Protocol):
    """State holder that can be checkpointed and rolled back."""

    def snapshot(self) -> Any:
        ...

    def restore(self, snapshot: Any) -> None:
        ...


class TickClock:
    """Monotonically increasing tick counter."""

    def __init__(self, tick: int = 0):
        if tick < 0:
            raise ValueError("Tick cannot be negative")
        self._tick = tick

    @property
    def current(self) -> int:
        return self._tick

    def advance(self, ticks: int = 1) -> int:
        """Move the clock forward by ``ticks`` and return the new tick."""
        if ticks < 0:
            raise ValueError("Clock cannot move backwards")
        self._tick += ticks
        return self._tick

    def advance_to(self, tick: int) -> int:
        """Move the clock to an absolute tick no earlier than the current one."""
        if tick < self._tick:
            raise ValueError(f"Clock is at {self._tick}, cannot go back to {tick}")
        self._tick = tick
        return self._tick


class Runtime:
    """Single serialized transaction log shared by the vault and its collaborators."""

    def __init__(self, clock: Optional[TickClock] = None, log: Optional[EventLog] = None):
        self.clock = clock or TickClock()
        self.log = log or EventLog()
        self._participants: List[Journaled] = []
        self._buffers: List[List[VaultEvent]] = []

    @property
    def tick(self) -> int:
        return self.clock.current

    def attach(self, *participants: Journaled) -> None:
        """Register state holders that a transaction must roll back."""
        for participant in participants:
            if not isinstance(participant, Journaled):
                raise TypeError(f"{participant!r} cannot be journaled")
            if participant not in self._participants:
                self._participants.append(participant)

    @property
    def in_transaction(self) -> bool:
        return bool(self._buffers)

    @contextmanager
    def transaction(self, label: str = "transaction") -> Iterator[None]:
        snapshots = [(p, p.snapshot()) for p in self._participants]
        self._buffers.append([])
        try:
            yield
        except Exception as e:
            self._buffers.pop()
            for participant, snapshot in reversed(snapshots):
                participant.restore(snapshot)
            logger.warning(f"{label} rolled back at tick {self.tick}: {e}")
            raise
        events = self._buffers.pop()
        if self._buffers:
            self._buffers[-1].extend(events)
        else:
            self.log.extend(events)
            logger.debug(f"{label} committed at tick {self.tick} with {len(events)} event(s)")

    def emit(self, event: VaultEvent) -> None:
        """Record an event; outside a transaction it is committed at once."""
        if self._buffers:
            self._buffers[-1].append(event)
        else:
            self.log.append(event)
