"""Vault configuration."""
import os
import platform
from pathlib import Path
from typing import Optional, Union
from loguru import logger
from pydantic import BaseModel, Field, field_validator

DEFAULT_UNBONDING_WINDOW = 20
DEFAULT_SETTLEMENT_WINDOW = 30


def get_data_dir() -> Path:
    """Directory holding persisted vault state."""
    override = os.getenv("STAKEVAULT_DATA_DIR")
    if override:
        return Path(override)
    if os.name == 'nt':  # Windows
        return Path(os.getenv('APPDATA', Path.home())) / 'stake-vault'
    elif platform.system() == 'Darwin':  # macOS
        return Path.home() / 'Library' / 'Application Support' / 'stake-vault'
    else:  # Linux and others
        return Path.home() / '.config' / 'stake-vault'


class VaultConfig(BaseModel):
    """Deployment parameters, fixed for the lifetime of a vault."""
    unbonding_window: int = Field(default=DEFAULT_UNBONDING_WINDOW, ge=0)
    settlement_window: int = Field(default=DEFAULT_SETTLEMENT_WINDOW, ge=0)
    initial_reward_rate: int = Field(default=1, gt=0)
    vault_address: str = "stake-vault"
    reward_symbol: str = "RWD"

    @field_validator("vault_address")
    @classmethod
    def _non_empty_address(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("vault_address must not be empty")
        return value.strip()


def load_config(config_path: Optional[Union[str, Path]] = None) -> VaultConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to a YAML file; ``None`` gives the defaults

    Returns:
        Validated configuration, or the defaults if the file is unusable
    """
    if config_path is None:
        return VaultConfig()
    try:
        import yaml
        with open(config_path) as f:
            config_dict = yaml.safe_load(f) or {}
        return VaultConfig(**config_dict)
    except Exception as e:
        logger.error(f"Failed to load config from {config_path}: {e}")
        logger.info("Using default configuration")
        return VaultConfig()
