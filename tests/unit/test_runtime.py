"""Unit tests for the transaction runtime and tick clock."""
import pytest
from stakevault.core.events import Paused, Unpaused
from stakevault.core.runtime import Runtime, TickClock
from stakevault.core.token import RewardToken


def test_clock_moves_forward_only():
    clock = TickClock(5)
    assert clock.current == 5
    assert clock.advance() == 6
    assert clock.advance(4) == 10
    assert clock.advance_to(10) == 10
    with pytest.raises(ValueError):
        clock.advance(-1)
    with pytest.raises(ValueError):
        clock.advance_to(9)
    with pytest.raises(ValueError):
        TickClock(-1)


def test_attach_requires_journaled():
    runtime = Runtime()
    with pytest.raises(TypeError):
        runtime.attach(object())


def test_transaction_commits_events():
    runtime = Runtime()
    with runtime.transaction("op"):
        runtime.emit(Paused(account="alice", tick=0))
        assert runtime.in_transaction
        assert len(runtime.log) == 0
    assert not runtime.in_transaction
    assert len(runtime.log) == 1


def test_transaction_rolls_back_participants_and_events():
    runtime = Runtime()
    token = RewardToken()
    runtime.attach(token)
    token.mint("vault", 10)

    with pytest.raises(RuntimeError):
        with runtime.transaction("op"):
            token.transfer("vault", "bob", 10)
            runtime.emit(Paused(account="alice", tick=0))
            raise RuntimeError("boom")

    assert token.balance_of("vault") == 10
    assert token.balance_of("bob") == 0
    assert len(runtime.log) == 0
    assert not runtime.in_transaction


def test_nested_transaction_defers_to_outer():
    runtime = Runtime()
    token = RewardToken()
    runtime.attach(token)
    token.mint("vault", 10)

    with pytest.raises(RuntimeError):
        with runtime.transaction("outer"):
            with runtime.transaction("inner"):
                token.transfer("vault", "bob", 3)
                runtime.emit(Paused(account="alice", tick=0))
            assert len(runtime.log) == 0
            raise RuntimeError("outer fails")

    assert token.balance_of("bob") == 0
    assert len(runtime.log) == 0


def test_emit_outside_transaction_commits_at_once():
    runtime = Runtime()
    runtime.emit(Unpaused(account="alice", tick=3))
    assert runtime.log.for_account("alice")[0].tick == 3
    assert runtime.log.for_account("bob") == []
