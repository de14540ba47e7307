"""Port interface for the external distributed ledger."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic import BaseModel

UNAVAILABLE_STATUS = "UNAVAILABLE"


class LedgerReceipt(BaseModel):
    """Confirmed receipt of a ledger transaction."""

    success: bool
    transaction_id: Optional[str] = None
    status: str
    reason: Optional[str] = None


class MintReceipt(LedgerReceipt):
    """Receipt of a membership-token mint."""

    token_id: Optional[str] = None
    serial_number: Optional[str] = None

    @classmethod
    def unavailable(cls, reason: str = "badge token not configured") -> "MintReceipt":
        """Sentinel returned when no collection is configured to mint from."""
        return cls(success=False, status=UNAVAILABLE_STATUS, reason=reason)

    @property
    def is_unavailable(self) -> bool:
        """Whether this receipt is the "feature unavailable" sentinel."""
        return self.status == UNAVAILABLE_STATUS


class LedgerProvider(ABC):
    """Abstract interface for value transfers and token mints.

    Failures of the ledger itself raise ``LedgerError`` (``LedgerTimeoutError``
    on timeouts). A collection that was never configured is reported with
    ``MintReceipt.unavailable()`` instead, so callers can tell the two apart.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the ledger client."""
        pass

    @abstractmethod
    async def shutdown(self) -> None:
        """Close the ledger client."""
        pass

    @abstractmethod
    async def transfer_value(
        self,
        from_account: str,
        to_account: str,
        amount_tinybars: int,
    ) -> LedgerReceipt:
        """Move an integer amount of tinybars between two accounts.

        Args:
            from_account: Debited account (must be the operator/treasury)
            to_account: Credited account
            amount_tinybars: Positive amount in the smallest ledger unit

        Returns:
            Receipt of the confirmed transfer
        """
        pass

    @abstractmethod
    async def mint_membership_token(
        self,
        collection_id: Optional[str],
        metadata: Dict[str, Any],
    ) -> MintReceipt:
        """Mint one serial of a non-fungible collection.

        Args:
            collection_id: Token id of the collection, or None when unconfigured
            metadata: JSON-serializable metadata attached to the serial

        Returns:
            Mint receipt, or the unavailable sentinel
        """
        pass

    @abstractmethod
    async def submit_message(self, topic_id: str, payload: Dict[str, Any]) -> LedgerReceipt:
        """Append a JSON message to a consensus topic."""
        pass

    @abstractmethod
    def verify_identity(self, account_id: str) -> bool:
        """Validate the format of an account id without a network call."""
        pass

    @abstractmethod
    def operator_info(self) -> Dict[str, Optional[str]]:
        """Describe the operator account, topic and network."""
        pass

    @property
    def is_available(self) -> bool:
        """Whether the ledger client is ready."""
        return True
