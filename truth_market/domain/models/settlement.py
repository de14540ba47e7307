"""Domain models describing the outcome of a purchase settlement."""

from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field

from .badge import Badge
from .claim import VerificationOutcome
from .record import MarketRecord
from .sale import Sale


class SettlementStatus(str, Enum):
    """Terminal states of the settlement pipeline."""

    SUCCESS = "SUCCESS"
    REJECTED = "REJECTED"
    FAILED = "FAILED"


class RevenueDistribution(MarketRecord):
    """Split of one sale's price, in tinybars, with display values in HBAR."""

    total_tinybars: int
    submitter_share: int
    agent_share: int
    platform_share: int
    total: Decimal
    submitter_amount: Decimal
    agent_amount: Decimal
    platform_amount: Decimal
    submitter: Optional[str] = None
    transferred: bool = False
    transfer_transaction_id: Optional[str] = None
    transfer_error: Optional[str] = None


class BuyerStats(MarketRecord):
    """Buyer counters after a purchase."""

    account_id: str
    purchase_count: int
    badges_earned: int
    next_badge_in: int


class BadgeAward(MarketRecord):
    """Badge outcome of a purchase: minted details, or how many purchases remain."""

    minted: bool
    badge: Optional[Badge] = None
    next_in: Optional[int] = None
    demo: bool = False
    error: Optional[str] = None


class SettlementResult(MarketRecord):
    """Aggregate result of ``SettlementService.purchase_claim``."""

    success: bool
    status: SettlementStatus
    message: str
    sale: Optional[Sale] = None
    buyer: Optional[BuyerStats] = None
    agent: Optional[Dict[str, Any]] = None
    revenue: Optional[RevenueDistribution] = None
    badge: Optional[BadgeAward] = None
    verification: Optional[VerificationOutcome] = None
    warnings: List[str] = Field(default_factory=list)
