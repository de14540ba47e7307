"""Settlement engine: the purchase-and-reward pipeline for verified claims."""

import asyncio
import contextlib
import logging
import secrets
import time
from decimal import Decimal
from typing import AsyncIterator, Dict, List, Optional, Tuple

from ..errors import LedgerError, LedgerTimeoutError, ValidationError
from ..models.badge import (
    DEMO_SERIAL_PREFIX,
    DEMO_TOKEN_ID,
    DEMO_TRANSACTION_PREFIX,
    Badge,
    BadgeMetadata,
)
from ..models.claim import ANONYMOUS, Claim, Verdict, VerificationOutcome
from ..models.record import utc_now
from ..models.sale import AgentRef, Sale
from ..models.settlement import (
    BadgeAward,
    BuyerStats,
    RevenueDistribution,
    SettlementResult,
    SettlementStatus,
)
from ..models.user import User
from ..ports.ledger_provider import LedgerProvider, MintReceipt
from ..ports.record_store import RecordStore
from .agent_proof_service import AgentProofService
from .audit_service import AuditLogger
from .revenue import PRICE_PER_CLAIM, build_distribution, hbar_to_tinybars
from .tier_classifier import tier_for
from .verification_service import VerificationService

logger = logging.getLogger(__name__)

BADGE_THRESHOLD = 5
MIN_CLAIM_LENGTH = 10


def next_badge_in(purchase_count: int, threshold: int = BADGE_THRESHOLD) -> int:
    """Purchases left until the next badge."""
    return threshold - (purchase_count % threshold)


def _demo_suffix() -> str:
    return f"{int(time.time() * 1000)}_{secrets.token_hex(3)}"


class SettlementService:
    """Orchestrates a claim purchase from validation to badge minting.

    The sale write is the commit point: once it succeeds the purchase stands,
    even if the revenue transfer or the badge mint fails afterwards. Those
    failures are reported as warnings on the result.
    """

    def __init__(
        self,
        store: RecordStore,
        verification_service: VerificationService,
        ledger: LedgerProvider,
        treasury_account_id: str,
        agent_proofs: Optional[AgentProofService] = None,
        audit: Optional[AuditLogger] = None,
        badge_token_id: Optional[str] = None,
        badge_threshold: int = BADGE_THRESHOLD,
        price: Decimal = PRICE_PER_CLAIM,
    ):
        """Initialize the service.

        Args:
            store: Record store for claims, sales, users and badges
            verification_service: Gateway used for claims not yet verified TRUE
            ledger: Ledger adapter for transfers and mints
            treasury_account_id: Platform account; default seller and payer of shares
            agent_proofs: Optional agent registry gate
            audit: Optional audit logger for purchase messages
            badge_token_id: Badge collection id; None means mints are unavailable
            badge_threshold: Purchases per badge
            price: Fixed claim price in HBAR
        """
        self._store = store
        self._verification = verification_service
        self._ledger = ledger
        self._treasury = treasury_account_id
        self._agent_proofs = agent_proofs or AgentProofService()
        self._audit = audit
        self._badge_token_id = badge_token_id
        self._threshold = badge_threshold
        self._price = price
        self._price_tinybars = hbar_to_tinybars(price)
        # claim text -> [lock, holders and waiters]
        self._claim_locks: Dict[str, list] = {}

    @property
    def truth_agent_id(self) -> str:
        return self._agent_proofs.agent_id

    async def purchase_claim(
        self,
        claim_text: str,
        buyer_account_id: str,
        payment_proof_tx_id: str,
    ) -> SettlementResult:
        """Settle the purchase of a claim.

        Args:
            claim_text: Claim being bought
            buyer_account_id: Buyer's ledger account id
            payment_proof_tx_id: Id of the buyer's already-completed payment

        Returns:
            SUCCESS result with sale, buyer stats, revenue and badge info, or a
            REJECTED result when the claim does not verify as TRUE

        Raises:
            ValidationError: Missing or malformed input
            AgentUnavailableError: Registry configured but the agent cannot be proven
            StorageError: The sale could not be recorded
        """
        claim_text, buyer, payment_proof = self._validate(claim_text, buyer_account_id, payment_proof_tx_id)
        logger.info(f"💰 Processing purchase for {buyer}: {claim_text[:100]}")

        agent_proof = await self._agent_proofs.require_proof()

        claim = await self._resolve_claim(claim_text)
        if claim.verdict != Verdict.TRUE:
            logger.info(f"❌ Claim rejected: {claim.verdict.value} ({claim.confidence}%)")
            return SettlementResult(
                success=False,
                status=SettlementStatus.REJECTED,
                message="Only TRUE claims can be purchased",
                verification=VerificationOutcome(
                    verdict=claim.verdict,
                    confidence=claim.confidence,
                    reasoning=claim.reasoning,
                    verifier=claim.verifier,
                ),
            )

        seller = self._resolve_seller(claim, buyer)
        sale = await self._store.add_sale(
            Sale(
                claim=claim.text,
                verdict=claim.verdict,
                confidence=claim.confidence,
                reasoning=claim.reasoning,
                buyer=buyer,
                seller=seller,
                submitted_by=claim.submitted_by,
                price=self._price,
                price_tinybars=self._price_tinybars,
                transaction_id=payment_proof,
                agent=AgentRef(id=self.truth_agent_id, proof=agent_proof),
            )
        )
        logger.info(f"🧾 Sale {sale.id} recorded (seller {seller})")

        warnings: List[str] = []
        revenue = await self._distribute_revenue(seller, warnings)

        user = await self._store.increment_user_counters(buyer, purchases=1)
        award, user = await self._award_badge(user, warnings)

        result = SettlementResult(
            success=True,
            status=SettlementStatus.SUCCESS,
            message="🎉 Purchase successful! Badge minted!" if award.minted else "Purchase successful!",
            sale=sale,
            buyer=BuyerStats(
                account_id=buyer,
                purchase_count=user.purchase_count,
                badges_earned=user.badges_earned,
                next_badge_in=next_badge_in(user.purchase_count, self._threshold),
            ),
            agent=sale.agent.to_document(),
            revenue=revenue,
            badge=award,
            warnings=warnings,
        )

        if self._audit is not None:
            self._audit.publish({
                "type": "ClaimPurchase",
                "saleId": sale.id,
                "buyer": buyer,
                "claim": claim.text,
                "price": str(self._price),
                "timestamp": sale.timestamp.isoformat() if sale.timestamp else None,
            })

        return result

    def _validate(self, claim_text: str, buyer_account_id: str, payment_proof_tx_id: str) -> Tuple[str, str, str]:
        claim_text = (claim_text or "").strip()
        buyer = (buyer_account_id or "").strip()
        payment_proof = (payment_proof_tx_id or "").strip()

        if not claim_text:
            raise ValidationError("claim", "Claim text is required")
        if len(claim_text) < MIN_CLAIM_LENGTH:
            raise ValidationError("claim", f"Claim must be at least {MIN_CLAIM_LENGTH} characters long")
        if not buyer:
            raise ValidationError("buyerAccountId", "Buyer account id is required")
        if not payment_proof:
            raise ValidationError("paymentProofTxId", "Payment proof transaction id is required")
        if not self._ledger.verify_identity(buyer):
            raise ValidationError("buyerAccountId", "Invalid Hedera account ID format")
        return claim_text, buyer, payment_proof

    @contextlib.asynccontextmanager
    async def _claim_lock(self, claim_text: str) -> AsyncIterator[None]:
        entry = self._claim_locks.setdefault(claim_text, [asyncio.Lock(), 0])
        entry[1] += 1
        try:
            async with entry[0]:
                yield
        finally:
            entry[1] -= 1
            if entry[1] == 0:
                del self._claim_locks[claim_text]

    async def _resolve_claim(self, claim_text: str) -> Claim:
        """Return the stored TRUE claim for this text, verifying it first if needed.

        Resolution is serialised per claim text so concurrent first purchases
        share a single verification.
        """
        async with self._claim_lock(claim_text):
            existing = await self._store.get_claim_by_text(claim_text, verdict=Verdict.TRUE)
            if existing is not None:
                logger.info(f"♻️ Reusing verified claim {existing.id}")
                return existing

            outcome = await self._verification.verify(claim_text)
            claim = Claim.from_outcome(claim_text, outcome, self.truth_agent_id)
            if claim.verdict == Verdict.TRUE:
                return await self._store.get_or_add_claim(claim)
            return await self._store.add_claim(claim)

    def _resolve_seller(self, claim: Claim, buyer: str) -> str:
        submitter = claim.submitted_by
        if submitter in (ANONYMOUS, self.truth_agent_id, buyer, self._treasury) or not submitter:
            return self._treasury
        return submitter

    async def _distribute_revenue(self, seller: str, warnings: List[str]) -> RevenueDistribution:
        if seller == self._treasury:
            return build_distribution(self._price_tinybars, submitter=None)

        distribution = build_distribution(self._price_tinybars, submitter=seller)
        if distribution.submitter_share == 0:
            logger.info(f"💭 Submitter share for {seller} rounds to zero, no transfer")
            return distribution

        try:
            receipt = await self._ledger.transfer_value(self._treasury, seller, distribution.submitter_share)
        except LedgerError as e:
            logger.error(f"⚠️ Revenue transfer to {seller} failed: {e}")
            warnings.append(f"Revenue transfer to submitter failed: {e}")
            return distribution.model_copy(update={"transfer_error": str(e)})

        logger.info(f"💸 Paid {distribution.submitter_amount} HBAR to submitter {seller}")
        return distribution.model_copy(update={
            "transferred": receipt.success,
            "transfer_transaction_id": receipt.transaction_id,
        })

    async def _award_badge(self, user: User, warnings: List[str]) -> Tuple[BadgeAward, User]:
        count = user.purchase_count
        if count % self._threshold != 0:
            remaining = next_badge_in(count, self._threshold)
            logger.info(f"💭 {remaining} more purchase(s) until next badge for {user.account_id}")
            return BadgeAward(minted=False, next_in=remaining), user

        tier = tier_for(count)
        minted_at = utc_now()
        metadata = {
            "name": f"Truth Seeker Badge - {tier.value}",
            "tier": tier.value,
            "purchaseCount": count,
            "mintedAt": minted_at.isoformat(),
            "recipient": user.account_id,
            "description": f"Awarded for purchasing {count} verified claims",
        }
        logger.info(f"🎉 Threshold reached for {user.account_id}: minting {tier.value} badge")

        receipt: Optional[MintReceipt] = None
        error: Optional[str] = None
        try:
            receipt = await self._ledger.mint_membership_token(self._badge_token_id, metadata)
        except LedgerTimeoutError as e:
            error = f"Badge mint timed out: {e}"
        except LedgerError as e:
            error = f"Badge mint failed: {e}"

        if receipt is not None and receipt.success:
            token_id = receipt.token_id or self._badge_token_id
            serial_number = receipt.serial_number
            transaction_id = receipt.transaction_id
            demo = False
        else:
            if error is None:
                error = f"Badge minting unavailable: {receipt.reason if receipt else 'no receipt'}"
            suffix = _demo_suffix()
            token_id = self._badge_token_id or DEMO_TOKEN_ID
            serial_number = f"{DEMO_SERIAL_PREFIX}{suffix}"
            transaction_id = f"{DEMO_TRANSACTION_PREFIX}{suffix}"
            demo = True
            logger.warning(f"⚠️ {error}; recording demo badge")
            warnings.append(error)

        badge = await self._store.add_badge(
            Badge(
                recipient=user.account_id,
                tier=tier,
                purchase_count=count,
                token_id=token_id,
                serial_number=serial_number,
                transaction_id=transaction_id,
                metadata=BadgeMetadata(name=metadata["name"], description=metadata["description"]),
                demo=demo,
                minted_at=minted_at,
            )
        )
        user = await self._store.increment_user_counters(user.account_id, badges=1)
        logger.info(f"🏆 Badge {badge.metadata.name} (serial {badge.serial_number}) awarded to {user.account_id}")
        return BadgeAward(minted=True, badge=badge, demo=demo, error=error), user
