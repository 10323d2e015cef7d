"""Stake Vault: NFT staking with unbonding and settlement windows."""
from .core.config import VaultConfig, load_config
from .core.deployment import Deployment, deploy
from .core.errors import (
    AuthorizationError,
    ExternalCallFailure,
    PreconditionNotMetError,
    StakingError,
    ValidationError,
)
from .core.stake import AssetState, StakedAsset
from .core.vault import StakingVault

__version__ = "0.1.0"
