"""Token minting and transfers with ownership checks."""

from __future__ import annotations

import logging

from nftsig.app.ports import ConsentStorePort, LedgerPort, OwnershipPort, TokenRecord
from nftsig.errors import NotTokenOwnerError
from nftsig.utils.validation import normalize_address, require_token_id

logger = logging.getLogger(__name__)


class TokenRegistryService:
    """Mint and transfer tokens, optionally revoking consent on transfer."""

    def __init__(
        self,
        ownership: OwnershipPort,
        consents: ConsentStorePort,
        *,
        ledger_port: LedgerPort | None = None,
        revoke_on_transfer: bool = False,
    ) -> None:
        self.ownership = ownership
        self.consents = consents
        self.ledger = ledger_port
        self.revoke_on_transfer = revoke_on_transfer

    def mint(self, token_id: int, owner: str) -> TokenRecord:
        """Create ``token_id`` owned by ``owner``.

        Raises:
            TokenExistsError: If the token already exists
        """
        record = self.ownership.mint(require_token_id(token_id), normalize_address(owner))
        if self.ledger is not None:
            self.ledger.log("token_mint", token_id=token_id, actor=record.owner)
        return record

    def owner_of(self, token_id: int) -> str:
        return self.ownership.owner_of(require_token_id(token_id))

    def list_tokens(self) -> list[TokenRecord]:
        return self.ownership.list_tokens()

    def transfer(self, token_id: int, caller: str, new_owner: str) -> TokenRecord:
        """Move ``token_id`` from ``caller`` to ``new_owner``.

        Raises:
            UnknownTokenError: If the token was never minted
            NotTokenOwnerError: If ``caller`` is not the current owner
        """
        require_token_id(token_id)
        caller = normalize_address(caller)
        new_owner = normalize_address(new_owner)

        owner = self.ownership.owner_of(token_id)
        if owner != caller:
            raise NotTokenOwnerError(token_id, caller, owner)

        record = self.ownership.transfer(token_id, new_owner)

        revoked = 0
        if self.revoke_on_transfer:
            revoked = self.consents.revoke_all(token_id)
            if revoked:
                logger.info("Revoked %d consents for token %d on transfer", revoked, token_id)

        if self.ledger is not None:
            self.ledger.log(
                "token_transfer",
                token_id=token_id,
                actor=caller,
                args={"to": new_owner, "revoked_consents": revoked},
            )
        return record
