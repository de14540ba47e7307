"""Domain error taxonomy for the truth marketplace."""

from typing import Optional


class MarketError(Exception):
    """Base class for marketplace errors."""

    code: str = "MARKET_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(MarketError):
    """Raised when a request is missing a field or a field is malformed.

    Rejected before any external call is made.
    """

    code = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str):
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class AgentUnavailableError(MarketError):
    """Raised when the agent registry is configured but the seller agent cannot be proven."""

    code = "AGENT_UNAVAILABLE"

    def __init__(self, agent_id: str, reason: str):
        super().__init__(f"Agent '{agent_id}' unavailable: {reason}")
        self.agent_id = agent_id
        self.reason = reason


class NotFoundError(MarketError):
    """Raised when a record does not exist."""

    code = "NOT_FOUND"


class StorageError(MarketError):
    """Raised when the durability layer fails to read or write a record."""

    code = "STORAGE_ERROR"


class LedgerError(MarketError):
    """Raised when a ledger operation fails (network, consensus, rejected receipt)."""

    code = "LEDGER_ERROR"

    def __init__(self, message: str, status: Optional[str] = None):
        super().__init__(message)
        self.status = status


class LedgerTimeoutError(LedgerError):
    """Raised when a ledger operation does not complete within its timeout."""

    code = "LEDGER_TIMEOUT"
