"""Domain model for tiered collectible badges."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from .record import MarketRecord

DEMO_SERIAL_PREFIX = "demo_"
DEMO_TRANSACTION_PREFIX = "demo_tx_"
DEMO_TOKEN_ID = "0.0.DEMO_BADGE_TOKEN"


class BadgeTier(str, Enum):
    """Badge tiers, lowest first."""

    BRONZE = "BRONZE"
    UNCOMMON = "UNCOMMON"
    RARE = "RARE"
    EPIC = "EPIC"
    LEGENDARY = "LEGENDARY"


class BadgeMetadata(MarketRecord):
    """Human-facing badge metadata."""

    name: str
    description: str
    image: Optional[str] = None


class Badge(MarketRecord):
    """A badge awarded on every fifth purchase. Immutable once stored."""

    id: Optional[str] = None
    recipient: str
    tier: BadgeTier
    purchase_count: int = Field(..., ge=1, description="Purchase count at mint time")
    token_id: str
    serial_number: str
    transaction_id: str
    metadata: BadgeMetadata
    demo: bool = Field(default=False, description="True when no real token was minted")
    minted_at: Optional[datetime] = None

    class Config:
        """Pydantic model configuration."""
        frozen = True
