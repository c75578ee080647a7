"""Reference validator for the token-bound signature convention.

A token "signs" a message hash when its current owner marks consent for
that hash. Anyone may then ask :meth:`TokenSignatureService.is_valid_signature`
and receive ``MAGIC_VALUE`` or ``INVALID_VALUE``. Queries never write.

Consent is not tied to later owners: if the token changes hands, earlier
consent keeps answering valid unless the registry service is configured to
revoke it on transfer.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from nftsig.abi import INVALID_VALUE, MAGIC_VALUE, is_magic_value
from nftsig.app.ports import ConsentRecord, ConsentStorePort, LedgerPort, OwnershipPort
from nftsig.errors import NotTokenOwnerError
from nftsig.utils.hashing import consent_digest, format_message_hash, parse_message_hash
from nftsig.utils.signatures import recover_signer
from nftsig.utils.validation import normalize_address, require_token_id

logger = logging.getLogger(__name__)


class TokenSignatureService:
    """Record owner consent and answer ``isValidSignature`` queries."""

    def __init__(
        self,
        ownership: OwnershipPort,
        consents: ConsentStorePort,
        *,
        ledger_port: LedgerPort | None = None,
        namespace: str = "nftsig",
    ) -> None:
        """Initialize the service.

        Args:
            ownership: Source of truth for current token owners
            consents: Store of consent flags
            ledger_port: Optional audit ledger for consent changes
            namespace: Domain bound into off-chain consent signatures
        """
        self.ownership = ownership
        self.consents = consents
        self.ledger = ledger_port
        self.namespace = namespace

    def _require_owner(self, token_id: int, caller: str) -> str:
        owner = self.ownership.owner_of(token_id)
        if owner != caller:
            logger.warning("Rejected consent change on token %d by non-owner %s", token_id, caller)
            raise NotTokenOwnerError(token_id, caller, owner)
        return owner

    def mark_consent(
        self,
        token_id: int,
        message_hash: bytes | str,
        caller: str,
        *,
        method: str = "direct",
    ) -> ConsentRecord:
        """Mark ``message_hash`` as endorsed by ``token_id``.

        Raises:
            UnknownTokenError: If the token was never minted
            NotTokenOwnerError: If ``caller`` is not the current owner
        """
        require_token_id(token_id)
        hash_hex = format_message_hash(parse_message_hash(message_hash))
        owner = self._require_owner(token_id, normalize_address(caller))

        existing = self.consents.get(token_id, hash_hex)
        if existing is not None:
            return existing

        record = self.consents.mark(
            ConsentRecord(
                token_id=token_id,
                message_hash=hash_hex,
                marked_by=owner,
                marked_at=datetime.now(UTC).isoformat(),
                method=method,
            )
        )
        logger.info("Token %d consented to %s", token_id, hash_hex)

        if self.ledger is not None:
            self.ledger.log(
                "consent_mark",
                token_id=token_id,
                message_hash=hash_hex,
                actor=owner,
                args={"method": method},
            )
        return record

    def consent_payload(self, token_id: int, message_hash: bytes | str) -> bytes:
        """Digest the owner signs to authorize consent off-chain.

        The digest covers the pair's current revocation epoch, so signatures
        made before a revocation no longer recover to the owner.
        """
        epoch = self.consents.epoch(token_id, message_hash)
        return consent_digest(token_id, message_hash, self.namespace, epoch)

    def mark_consent_signed(
        self, token_id: int, message_hash: bytes | str, signature: bytes
    ) -> ConsentRecord:
        """Mark consent on behalf of whoever signed :meth:`consent_payload`.

        Raises:
            InvalidSignatureError: If the signature cannot be recovered
            NotTokenOwnerError: If the signer is not the current owner
        """
        signer = recover_signer(self.consent_payload(token_id, message_hash), signature)
        return self.mark_consent(token_id, message_hash, signer, method="signed")

    def revoke_consent(self, token_id: int, message_hash: bytes | str, caller: str) -> bool:
        """Withdraw consent. Only the current owner may revoke.

        Returns:
            True if a consent was removed
        """
        require_token_id(token_id)
        hash_hex = format_message_hash(parse_message_hash(message_hash))
        owner = self._require_owner(token_id, normalize_address(caller))

        removed = self.consents.revoke(token_id, hash_hex)
        if removed and self.ledger is not None:
            self.ledger.log("consent_revoke", token_id=token_id, message_hash=hash_hex, actor=owner)
        return removed

    def is_valid_signature(self, token_id: int, message_hash: bytes | str) -> bytes:
        """Answer ``isValidSignature(tokenId, hash)``.

        Read-only; open to any caller. Unminted tokens answer invalid rather
        than raising.
        """
        require_token_id(token_id)
        valid = self.consents.has_consent(token_id, parse_message_hash(message_hash))
        logger.debug("isValidSignature(%d) -> %s", token_id, valid)
        return MAGIC_VALUE if valid else INVALID_VALUE

    def is_valid(self, token_id: int, message_hash: bytes | str) -> bool:
        return is_magic_value(self.is_valid_signature(token_id, message_hash))

    def list_consents(self, token_id: int) -> list[ConsentRecord]:
        return self.consents.list_for_token(require_token_id(token_id))
