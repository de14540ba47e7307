"""Environment-driven configuration for the marketplace."""

import logging
import os
from typing import Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

PLACEHOLDER_MARKER = "your-"


def _optional_env(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    if not value or PLACEHOLDER_MARKER in value:
        return None
    return value


class MarketConfig(BaseModel):
    """Top-level marketplace configuration."""

    operator_id: str = Field(default="0.0.0", description="Treasury/operator account id")
    operator_key: Optional[str] = Field(default=None, description="Operator signing credential")
    network: str = Field(default="testnet", description="Ledger network name")
    badge_token_id: Optional[str] = Field(default=None, description="Badge NFT collection id")
    topic_id: Optional[str] = Field(default=None, description="Consensus topic for audit messages")
    agent_registry_contract: Optional[str] = Field(default=None, description="Agent registry contract id")
    truth_agent_id: str = Field(default="truth-agent", description="Seller agent identity")
    data_dir: str = Field(default="data", description="Directory of the JSON record files")
    unknown_claim_policy: str = Field(default="coin_flip", description="'coin_flip' or 'uncertain'")
    frontend_url: str = Field(default="http://localhost:3000", description="Allowed CORS origin")

    @classmethod
    def from_env(cls) -> "MarketConfig":
        """Create configuration from environment variables."""
        config = cls(
            operator_id=os.getenv("OPERATOR_ID", "0.0.0"),
            operator_key=_optional_env("OPERATOR_KEY"),
            network=os.getenv("HEDERA_NETWORK", "testnet"),
            badge_token_id=_optional_env("BADGE_TOKEN_ID"),
            topic_id=_optional_env("TOPIC_ID"),
            agent_registry_contract=_optional_env("AGENT_REGISTRY_CONTRACT"),
            truth_agent_id=os.getenv("TRUTH_AGENT_ID", "truth-agent"),
            data_dir=os.getenv("DATA_DIR", "data"),
            unknown_claim_policy=os.getenv("UNKNOWN_CLAIM_POLICY", "coin_flip"),
            frontend_url=os.getenv("FRONTEND_URL", "http://localhost:3000"),
        )

        if not config.badge_token_id:
            logger.warning("⚠️ No BADGE_TOKEN_ID set - badges will be recorded in demo mode")
        if not config.topic_id:
            logger.warning("⚠️ No TOPIC_ID set - audit messages are disabled")
        if not config.agent_registry_contract:
            logger.info("🪪 Agent registry disabled (set AGENT_REGISTRY_CONTRACT to enable on-chain proofs)")
        return config
