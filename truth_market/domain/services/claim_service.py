"""Claim catalogue: verify-and-record plus browsing of stored claims."""

import logging
from typing import Any, Dict, List, Optional

from ..errors import NotFoundError, ValidationError
from ..models.claim import ANONYMOUS, Claim, Verdict
from ..models.record import EPOCH
from ..ports.record_store import RecordStore
from .audit_service import AuditLogger
from .settlement_service import MIN_CLAIM_LENGTH
from .verification_service import VerificationService

logger = logging.getLogger(__name__)


def _newest_first(claims: List[Claim]) -> List[Claim]:
    return sorted(claims[::-1], key=lambda c: c.timestamp or EPOCH, reverse=True)


class ClaimService:
    """Verify user-submitted claims and expose the stored catalogue."""

    def __init__(
        self,
        store: RecordStore,
        verification_service: VerificationService,
        audit: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._verification = verification_service
        self._audit = audit

    async def verify_and_record(self, text: str, account_id: Optional[str] = None) -> Claim:
        """Verify a claim and store it under its submitter.

        Raises:
            ValidationError: If the text is missing or shorter than the minimum
        """
        text = (text or "").strip()
        if not text:
            raise ValidationError("claim", "Claim text is required")
        if len(text) < MIN_CLAIM_LENGTH:
            raise ValidationError("claim", f"Claim must be at least {MIN_CLAIM_LENGTH} characters long")

        logger.info(f"🔍 Verifying claim: {text[:100]}")
        outcome = await self._verification.verify(text)
        claim = await self._store.add_claim(Claim.from_outcome(text, outcome, account_id or ANONYMOUS))

        if self._audit is not None:
            self._audit.publish({
                "type": "ClaimVerification",
                "claimId": claim.id,
                "claim": claim.text,
                "verdict": claim.verdict.value,
                "confidence": claim.confidence,
                "timestamp": claim.timestamp.isoformat() if claim.timestamp else None,
            })
        return claim

    async def list_claims(
        self,
        limit: int = 50,
        offset: int = 0,
        verdict: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Page through claims, newest first, optionally filtered by verdict."""
        claims = await self._store.list_claims()
        if verdict:
            try:
                wanted = Verdict(verdict.upper())
            except ValueError:
                raise ValidationError("verdict", f"Unknown verdict: {verdict}")
            claims = [c for c in claims if c.verdict == wanted]

        claims = _newest_first(claims)
        total = len(claims)
        return {
            "claims": claims[offset:offset + limit],
            "pagination": {
                "total": total,
                "limit": limit,
                "offset": offset,
                "hasMore": offset + limit < total,
            },
        }

    async def recent(self, limit: int = 10) -> List[Claim]:
        return _newest_first(await self._store.list_claims())[:limit]

    async def get(self, claim_id: str) -> Claim:
        claim = await self._store.get_claim(claim_id)
        if claim is None:
            raise NotFoundError(f"Claim {claim_id} not found")
        return claim
