"""Domain model for marketplace buyers."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .record import MarketRecord


class User(MarketRecord):
    """Buyer profile with cumulative purchase and badge counters."""

    id: Optional[str] = None
    account_id: str = Field(..., description="Ledger account id, unique per user")
    purchase_count: int = Field(default=0, ge=0)
    badges_earned: int = Field(default=0, ge=0)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
