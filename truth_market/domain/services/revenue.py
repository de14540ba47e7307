"""Pricing constants and the integer revenue split of a sale."""

from decimal import Decimal
from typing import Optional, Tuple

from ..models.settlement import RevenueDistribution

TINYBARS_PER_HBAR = 100_000_000
PRICE_PER_CLAIM = Decimal("0.01")

SUBMITTER_PERCENT = 70
AGENT_PERCENT = 20


def hbar_to_tinybars(amount: Decimal) -> int:
    """Convert an HBAR amount to integer tinybars; fractions of a tinybar are rejected."""
    tinybars = Decimal(amount) * TINYBARS_PER_HBAR
    if tinybars != tinybars.to_integral_value():
        raise ValueError(f"{amount} HBAR is not a whole number of tinybars")
    return int(tinybars)


def tinybars_to_hbar(amount: int) -> Decimal:
    """Convert integer tinybars to an HBAR display amount."""
    return Decimal(amount) / TINYBARS_PER_HBAR


PRICE_TINYBARS = hbar_to_tinybars(PRICE_PER_CLAIM)


def split_revenue(total_tinybars: int) -> Tuple[int, int, int]:
    """Split a total into (submitter, agent, platform) shares.

    Submitter and agent shares are floored; the platform share is the
    remainder, so the three parts always sum to ``total_tinybars``.
    """
    if total_tinybars < 0:
        raise ValueError("total must be non-negative")
    submitter = total_tinybars * SUBMITTER_PERCENT // 100
    agent = total_tinybars * AGENT_PERCENT // 100
    platform = total_tinybars - submitter - agent
    return submitter, agent, platform


def build_distribution(total_tinybars: int, submitter: Optional[str]) -> RevenueDistribution:
    """Bookkeeping for one sale.

    With no third-party submitter the whole price is retained by the platform.
    """
    if submitter is None:
        submitter_share, agent_share, platform_share = 0, 0, total_tinybars
    else:
        submitter_share, agent_share, platform_share = split_revenue(total_tinybars)

    return RevenueDistribution(
        total_tinybars=total_tinybars,
        submitter_share=submitter_share,
        agent_share=agent_share,
        platform_share=platform_share,
        total=tinybars_to_hbar(total_tinybars),
        submitter_amount=tinybars_to_hbar(submitter_share),
        agent_amount=tinybars_to_hbar(agent_share),
        platform_amount=tinybars_to_hbar(platform_share),
        submitter=submitter,
    )
