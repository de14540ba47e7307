"""Badge tier as a step function of cumulative purchases."""

from ..models.badge import BadgeTier

# Inclusive lower bounds, highest first.
TIER_THRESHOLDS = (
    (50, BadgeTier.LEGENDARY),
    (25, BadgeTier.EPIC),
    (15, BadgeTier.RARE),
    (10, BadgeTier.UNCOMMON),
)


def tier_for(purchase_count: int) -> BadgeTier:
    """Map a cumulative purchase count to its badge tier."""
    for minimum, tier in TIER_THRESHOLDS:
        if purchase_count >= minimum:
            return tier
    return BadgeTier.BRONZE
