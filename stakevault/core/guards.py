"""Call guards for vault operations.

Each guard wraps a ``StakingVault`` method taking the caller identity as its
first argument.
"""
import functools
from typing import Callable, TypeVar

from .errors import NotAdmin, NotInitialized, ReentrantCall, VaultPaused

F = TypeVar("F", bound=Callable)


def atomic(func: F) -> F:
    """Run the operation once at a time inside a runtime transaction.

    A nested call (for example from a custody receiver hook) raises
    ``ReentrantCall``; any error rolls back the vault and its collaborators.
    """
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        if self._entered:
            raise ReentrantCall(f"{func.__name__} called during another vault operation")
        if not self.state.initialized:
            raise NotInitialized()
        self._entered = True
        try:
            with self.runtime.transaction(func.__name__):
                return func(self, *args, **kwargs)
        finally:
            self._entered = False
    return wrapper


def only_admin(func: F) -> F:
    @functools.wraps(func)
    def wrapper(self, caller: str, *args, **kwargs):
        if caller != self.state.admin:
            raise NotAdmin(f"{caller} is not the vault admin")
        return func(self, caller, *args, **kwargs)
    return wrapper


def when_not_paused(func: F) -> F:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        if self.state.paused:
            raise VaultPaused()
        return func(self, *args, **kwargs)
    return wrapper
