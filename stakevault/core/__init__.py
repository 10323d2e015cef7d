from pathlib import Path
from typing import Optional, Union
from loguru import logger


class VaultSession:
    """Loads the persisted deployment on first use and saves it back on demand."""

    def __init__(self, data_dir: Optional[Union[str, Path]] = None):
        from .store import VaultStore
        self.store = VaultStore(data_dir)
        self.deployment = None

    @property
    def data_dir(self) -> Path:
        return self.store.data_dir

    def has_deployment(self) -> bool:
        return self.deployment is not None or self.store.exists()

    def get_deployment(self):
        """Get or load the deployment"""
        if not self.deployment:
            self.deployment = self.store.load()
        return self.deployment

    def create_deployment(self, admin: str, reward_rate: Optional[int] = None, config=None):
        """Deploy a fresh vault, replacing whatever was saved before"""
        from .deployment import deploy
        if self.store.exists():
            logger.warning(f"Replacing existing vault state at {self.store.path}")
        self.deployment = deploy(admin, reward_rate=reward_rate, config=config)
        return self.deployment

    def save(self) -> Path:
        if not self.deployment:
            raise RuntimeError("Nothing to save: no deployment loaded")
        return self.store.save(self.deployment)
