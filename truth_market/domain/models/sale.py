"""Domain model for completed claim sales."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import Field

from .claim import Verdict
from .record import MarketRecord


class AgentRef(MarketRecord):
    """Seller agent identity attached to a sale."""

    id: str
    proof: Optional[Dict[str, Any]] = None

    class Config:
        """Pydantic model configuration."""
        frozen = True


class Sale(MarketRecord):
    """A completed purchase of a TRUE claim. Immutable once stored."""

    id: Optional[str] = None
    claim: str = Field(..., description="Purchased claim text")
    verdict: Verdict
    confidence: int = Field(..., ge=0, le=100)
    reasoning: str
    buyer: str
    seller: str
    submitted_by: str
    price: Decimal = Field(..., description="Price in HBAR")
    price_tinybars: int = Field(..., ge=0, description="Price in the ledger's smallest unit")
    transaction_id: str = Field(..., description="Caller-supplied payment proof")
    agent: AgentRef
    timestamp: Optional[datetime] = None

    class Config:
        """Pydantic model configuration."""
        frozen = True
