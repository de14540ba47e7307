"""Hedera ledger adapter speaking to a signing gateway over HTTP."""

import json
import logging
import os
import re
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, Field

from ...domain.errors import LedgerError, LedgerTimeoutError
from ...domain.ports.ledger_provider import LedgerProvider, LedgerReceipt, MintReceipt

logger = logging.getLogger(__name__)

# shard.realm.num with an optional "-abcde" checksum
ACCOUNT_ID_PATTERN = re.compile(r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)(-[a-z]{5})?$")

SUCCESS_STATUS = "SUCCESS"


class LedgerGatewayConfig(BaseModel):
    """Configuration for the ledger gateway adapter."""

    base_url: str = Field(default="http://localhost:8545", description="Gateway base URL")
    operator_id: str = Field(default="0.0.0", description="Treasury/operator account id")
    operator_key: Optional[str] = Field(default=None, description="Operator signing credential")
    network: str = Field(default="testnet", description="Ledger network name")
    timeout: float = Field(default=10.0, description="Request timeout in seconds")

    @classmethod
    def from_env(cls) -> "LedgerGatewayConfig":
        """Create configuration from environment variables."""
        return cls(
            base_url=os.getenv("LEDGER_GATEWAY_URL", "http://localhost:8545"),
            operator_id=os.getenv("OPERATOR_ID", "0.0.0"),
            operator_key=os.getenv("OPERATOR_KEY") or None,
            network=os.getenv("HEDERA_NETWORK", "testnet"),
            timeout=float(os.getenv("LEDGER_TIMEOUT", "10")),
        )


def is_valid_account_id(account_id: str) -> bool:
    """Format check for ``shard.realm.num`` account ids."""
    return bool(account_id) and ACCOUNT_ID_PATTERN.match(account_id) is not None


class HederaGatewayAdapter(LedgerProvider):
    """Ledger adapter for Hedera via an operator-signing gateway.

    The gateway holds no keys of its own: the operator credential is sent as
    a bearer token and the gateway signs, submits and waits for the receipt.
    Every call returns only after the receipt is confirmed.
    """

    def __init__(
        self,
        config: Optional[LedgerGatewayConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the adapter.

        Args:
            config: Adapter configuration
            client: Pre-built HTTP client (tests)
        """
        self._config = config or LedgerGatewayConfig()
        self._client = client
        self._initialized = client is not None

    async def initialize(self) -> None:
        """Initialize the HTTP client."""
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self._config.operator_key:
                headers["Authorization"] = f"Bearer {self._config.operator_key}"
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url,
                timeout=self._config.timeout,
                headers=headers,
            )
        self._initialized = True
        logger.info(f"✅ Ledger gateway ready ({self._config.network}, operator {self._config.operator_id})")

    async def shutdown(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
        self._initialized = False

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self._client:
            raise LedgerError("Ledger gateway not initialized")

        try:
            response = await self._client.post(path, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException as e:
            raise LedgerTimeoutError(f"Ledger request {path} timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            raise LedgerError(
                f"Ledger request {path} failed: HTTP {e.response.status_code} {e.response.text}",
                status=str(e.response.status_code),
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise LedgerError(f"Ledger request {path} failed: {e}") from e

        status = str(body.get("status", ""))
        if status != SUCCESS_STATUS:
            raise LedgerError(f"Ledger request {path} returned status {status or 'UNKNOWN'}", status=status)
        return body

    async def transfer_value(
        self,
        from_account: str,
        to_account: str,
        amount_tinybars: int,
    ) -> LedgerReceipt:
        """Transfer tinybars from the operator account to another account."""
        if amount_tinybars <= 0:
            raise ValueError("Transfer amount must be positive")
        if from_account != self._config.operator_id:
            raise LedgerError(f"Only the operator account {self._config.operator_id} can be debited")
        if not is_valid_account_id(to_account):
            raise LedgerError(f"Invalid recipient account id: {to_account}")

        body = await self._post(
            "/transfers",
            {
                "from": from_account,
                "to": to_account,
                "amountTinybars": amount_tinybars,
            },
        )
        logger.info(f"💸 Transferred {amount_tinybars} tinybars {from_account} -> {to_account}")
        return LedgerReceipt(success=True, transaction_id=body.get("transactionId"), status=SUCCESS_STATUS)

    async def mint_membership_token(
        self,
        collection_id: Optional[str],
        metadata: Dict[str, Any],
    ) -> MintReceipt:
        """Mint one badge serial with JSON metadata attached."""
        if not collection_id:
            logger.info("⚠️ No badge collection configured, mint unavailable")
            return MintReceipt.unavailable()

        metadata_bytes = json.dumps(metadata, separators=(",", ":")).encode("utf-8")
        body = await self._post(
            f"/tokens/{collection_id}/mint",
            {"metadata": [metadata_bytes.hex()]},
        )

        serials = body.get("serials") or []
        if not serials:
            raise LedgerError(f"Mint of {collection_id} returned no serial number")

        logger.info(f"✅ NFT minted: token {collection_id}, serial #{serials[0]}")
        return MintReceipt(
            success=True,
            transaction_id=body.get("transactionId"),
            status=SUCCESS_STATUS,
            token_id=collection_id,
            serial_number=str(serials[0]),
        )

    async def submit_message(self, topic_id: str, payload: Dict[str, Any]) -> LedgerReceipt:
        """Submit a JSON message to a consensus topic."""
        body = await self._post(
            f"/topics/{topic_id}/messages",
            {"message": json.dumps(payload, default=str)},
        )
        return LedgerReceipt(success=True, transaction_id=body.get("transactionId"), status=SUCCESS_STATUS)

    def verify_identity(self, account_id: str) -> bool:
        """Validate an account id's format; no network call."""
        return is_valid_account_id(account_id)

    def operator_info(self) -> Dict[str, Optional[str]]:
        return {
            "operatorId": self._config.operator_id,
            "network": self._config.network,
            "gateway": self._config.base_url,
        }

    @property
    def is_available(self) -> bool:
        return self._initialized and self._client is not None
