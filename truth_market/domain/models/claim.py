"""Domain model for verified claims."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from .record import MarketRecord, utc_now

ANONYMOUS = "anonymous"


class Verdict(str, Enum):
    """Possible verification outcomes."""

    TRUE = "TRUE"
    FALSE = "FALSE"
    UNCERTAIN = "UNCERTAIN"


class VerificationOutcome(MarketRecord):
    """Result returned by the verification gateway."""

    verdict: Verdict = Field(..., description="Verification verdict")
    confidence: int = Field(..., ge=0, le=100, description="Confidence percentage")
    reasoning: str = Field(..., description="Explanation of the verdict")
    verifier: str = Field(..., description="Which verifier produced the verdict")
    raw_response: Optional[str] = Field(None, description="Unparsed verifier reply")
    cached: bool = Field(default=False, description="Whether the result came from the cache")
    timestamp: datetime = Field(default_factory=utc_now, description="When verification completed")

    class Config:
        """Pydantic model configuration."""
        frozen = True


class Claim(MarketRecord):
    """A short factual assertion together with its stored verdict.

    Purchases of identical text reuse a stored TRUE claim without calling the
    verifier again. FALSE and UNCERTAIN claims are kept for history only and
    are verified afresh on the next purchase attempt.
    """

    id: Optional[str] = Field(None, description="Generated record id")
    text: str = Field(..., description="The claim text")
    verdict: Verdict
    confidence: int = Field(..., ge=0, le=100)
    reasoning: str
    verifier: str
    submitted_by: str = Field(default=ANONYMOUS, description="Submitting account or 'anonymous'")
    timestamp: Optional[datetime] = None

    class Config:
        """Pydantic model configuration."""
        frozen = True
        json_schema_extra = {
            "example": {
                "id": "claim_1718000000000_a1b2c3",
                "text": "Water boils at 100°C at sea level",
                "verdict": "TRUE",
                "confidence": 98,
                "reasoning": "Water boils at 100°C (212°F) at standard atmospheric pressure.",
                "verifier": "Mock AI (Demo Mode)",
                "submittedBy": "0.0.1001",
            }
        }

    @classmethod
    def from_outcome(cls, text: str, outcome: VerificationOutcome, submitted_by: str) -> "Claim":
        """Build an unsaved claim record from a verification outcome."""
        return cls(
            text=text,
            verdict=outcome.verdict,
            confidence=outcome.confidence,
            reasoning=outcome.reasoning,
            verifier=outcome.verifier,
            submitted_by=submitted_by or ANONYMOUS,
        )
