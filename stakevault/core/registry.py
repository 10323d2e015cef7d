"""In-memory non-fungible asset registry."""
import copy
from typing import Callable, Dict, List, Optional, Set
from loguru import logger
from pydantic import BaseModel

from .errors import CustodyTransferDenied, ZeroAddress

ReceiverHook = Callable[[str, str, int], None]


class AssetRegistryState(BaseModel):
    """Serializable registry state."""
    next_id: int = 1
    owners: Dict[int, str] = {}
    token_uris: Dict[int, str] = {}
    approvals: Dict[int, str] = {}
    operators: Dict[str, List[str]] = {}


class AssetRegistry:
    """Mint-only asset registry with custody transfer and approvals.

    Receiver hooks registered for an address run after an asset lands there,
    with ``(operator, sender, asset_id)``. Whatever a hook raises propagates
    to the caller of ``transfer_custody``.
    """

    def __init__(self, state: Optional[AssetRegistryState] = None):
        self.state = state or AssetRegistryState()
        self._receivers: Dict[str, ReceiverHook] = {}

    def mint(self, to: str, token_uri: str = "") -> int:
        """Mint a new asset to ``to`` and return its id."""
        if not to:
            raise ZeroAddress("Cannot mint to an empty identity")
        asset_id = self.state.next_id
        self.state.next_id += 1
        self.state.owners[asset_id] = to
        if token_uri:
            self.state.token_uris[asset_id] = token_uri
        logger.debug(f"Minted asset {asset_id} to {to}")
        return asset_id

    def owner_of(self, asset_id: int) -> Optional[str]:
        return self.state.owners.get(asset_id)

    def token_uri(self, asset_id: int) -> str:
        return self.state.token_uris.get(asset_id, "")

    def assets_of(self, owner: str) -> List[int]:
        return sorted(a for a, o in self.state.owners.items() if o == owner)

    def approve(self, owner: str, operator: str, asset_id: int) -> None:
        """Let ``operator`` move a single asset owned by ``owner``."""
        if self.owner_of(asset_id) != owner:
            raise CustodyTransferDenied(f"{owner} cannot approve an asset it does not own", asset_id)
        self.state.approvals[asset_id] = operator

    def get_approved(self, asset_id: int) -> Optional[str]:
        return self.state.approvals.get(asset_id)

    def set_approval_for_all(self, owner: str, operator: str, approved: bool = True) -> None:
        operators: Set[str] = set(self.state.operators.get(owner, []))
        if approved:
            operators.add(operator)
        else:
            operators.discard(operator)
        self.state.operators[owner] = sorted(operators)

    def is_approved_for_all(self, owner: str, operator: str) -> bool:
        return operator in self.state.operators.get(owner, [])

    def register_receiver(self, address: str, hook: Optional[ReceiverHook]) -> None:
        """Install (or remove, with ``None``) the receive hook for ``address``."""
        if hook is None:
            self._receivers.pop(address, None)
        else:
            self._receivers[address] = hook

    def transfer_custody(self, operator: str, sender: str, recipient: str, asset_id: int) -> None:
        """Move ``asset_id`` from ``sender`` to ``recipient``.

        Raises:
            CustodyTransferDenied: sender does not own the asset, the operator
                is neither owner nor approved, or the recipient is empty
        """
        owner = self.owner_of(asset_id)
        if owner is None or owner != sender:
            raise CustodyTransferDenied(f"{sender} does not hold the asset", asset_id)
        if not recipient:
            raise CustodyTransferDenied("Recipient must be a non-empty identity", asset_id)
        authorized = (
            operator == owner
            or self.get_approved(asset_id) == operator
            or self.is_approved_for_all(owner, operator)
        )
        if not authorized:
            raise CustodyTransferDenied(f"{operator} is not approved to move the asset", asset_id)

        self.state.approvals.pop(asset_id, None)
        self.state.owners[asset_id] = recipient
        logger.debug(f"Asset {asset_id} moved {sender} -> {recipient}")

        hook = self._receivers.get(recipient)
        if hook is not None:
            hook(operator, sender, asset_id)

    def snapshot(self) -> AssetRegistryState:
        return copy.deepcopy(self.state)

    def restore(self, snapshot: AssetRegistryState) -> None:
        self.state = snapshot
