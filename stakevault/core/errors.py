"""Error taxonomy for the staking vault.

Every failure raised by a vault operation derives from ``StakingError`` and
falls into one of four categories:

- ``ValidationError``: malformed input. Resubmit with corrected arguments.
- ``AuthorizationError``: the caller is not allowed to do this.
- ``PreconditionNotMetError``: the request is valid but early or out of order.
  Retry later.
- ``ExternalCallFailure``: a collaborator (asset registry, reward token)
  refused the call.

Any of them aborts the whole operation and rolls back every change it made.
"""
from typing import Optional


class StakingError(Exception):
    """Base class for all vault errors."""

    def __init__(self, message: str = "", asset_id: Optional[int] = None):
        self.asset_id = asset_id
        if not message:
            message = self.__class__.__doc__ or self.__class__.__name__
        if asset_id is not None:
            message = f"{message} (asset {asset_id})"
        super().__init__(message)


class ValidationError(StakingError):
    """Invalid input."""


class AuthorizationError(StakingError):
    """Caller is not authorized."""


class PreconditionNotMetError(StakingError):
    """Operation is not yet permitted."""


class ExternalCallFailure(StakingError):
    """A collaborator rejected the call."""


class EmptyBatch(ValidationError):
    """Asset batch is empty."""


class DuplicateAssetIds(ValidationError):
    """Asset batch lists the same id more than once."""


class InvalidRewardRate(ValidationError):
    """Reward rate must be a positive integer."""


class ZeroAddress(ValidationError):
    """Identity must be a non-empty string."""


class InvalidDependency(ValidationError):
    """Dependency does not implement the required interface."""


class NotOwner(AuthorizationError):
    """Caller does not own the staked asset."""


class NotAdmin(AuthorizationError):
    """Caller is not the privileged identity."""


class AlreadyStaked(PreconditionNotMetError):
    """Asset already has a staking record."""


class AlreadyUnstaked(PreconditionNotMetError):
    """Asset was already unstaked."""


class UnbondingNotElapsed(PreconditionNotMetError):
    """Unbonding window has not elapsed."""


class NotWithdrawn(PreconditionNotMetError):
    """Asset has not been withdrawn yet."""


class SettlementNotElapsed(PreconditionNotMetError):
    """Settlement window has not elapsed."""


class NoPendingAssets(PreconditionNotMetError):
    """No unstaked assets are waiting to be withdrawn."""


class NoUnstakedAssets(PreconditionNotMetError):
    """No unstaked assets are waiting to be settled."""


class NothingToClaim(PreconditionNotMetError):
    """Computed reward is zero."""


class VaultPaused(PreconditionNotMetError):
    """Staking is paused."""


class AlreadyPaused(PreconditionNotMetError):
    """Vault is already paused."""


class NotPaused(PreconditionNotMetError):
    """Vault is not paused."""


class AlreadyInitialized(PreconditionNotMetError):
    """Vault was already initialized."""


class NotInitialized(PreconditionNotMetError):
    """Vault has not been initialized."""


class ReentrantCall(PreconditionNotMetError):
    """Vault operation re-entered while another one is running."""


class CustodyTransferDenied(ExternalCallFailure):
    """Asset registry refused the custody transfer."""


class DisbursementFailed(ExternalCallFailure):
    """Reward token refused the transfer."""
