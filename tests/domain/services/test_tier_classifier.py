"""Tests for the badge tier classifier."""

import pytest

from truth_market.domain.models.badge import BadgeTier
from truth_market.domain.services.tier_classifier import tier_for


@pytest.mark.parametrize("count,tier", [
    (0, BadgeTier.BRONZE),
    (5, BadgeTier.BRONZE),
    (9, BadgeTier.BRONZE),
    (10, BadgeTier.UNCOMMON),
    (14, BadgeTier.UNCOMMON),
    (15, BadgeTier.RARE),
    (24, BadgeTier.RARE),
    (25, BadgeTier.EPIC),
    (49, BadgeTier.EPIC),
    (50, BadgeTier.LEGENDARY),
    (500, BadgeTier.LEGENDARY),
])
def test_tier_boundaries(count, tier):
    """Test inclusive lower bounds of each tier."""
    assert tier_for(count) == tier


def test_tier_is_monotonic():
    """Test tiers never drop as the purchase count grows."""
    order = list(BadgeTier)
    ranks = [order.index(tier_for(n)) for n in range(0, 101)]

    assert ranks == sorted(ranks)
