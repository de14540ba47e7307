"""Test configuration and common fixtures."""

import asyncio
import random
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio

from truth_market.domain.errors import LedgerError
from truth_market.domain.ports.ledger_provider import LedgerProvider, LedgerReceipt, MintReceipt
from truth_market.domain.services.verification_service import FallbackClassifier, VerificationService
from truth_market.infrastructure.ledger.hedera_gateway_adapter import is_valid_account_id
from truth_market.infrastructure.storage.json_record_store import JsonRecordStore

TREASURY = "0.0.5000"
BADGE_TOKEN = "0.0.7777"


class FakeLedger(LedgerProvider):
    """In-memory ledger recording every call."""

    def __init__(self):
        self.transfers: List[Dict[str, Any]] = []
        self.mints: List[Dict[str, Any]] = []
        self.messages: List[Dict[str, Any]] = []
        self.transfer_error: Optional[Exception] = None
        self.mint_error: Optional[Exception] = None
        self.message_failures = 0
        self._serial = 0

    async def initialize(self) -> None:
        pass

    async def shutdown(self) -> None:
        pass

    async def transfer_value(self, from_account: str, to_account: str, amount_tinybars: int) -> LedgerReceipt:
        if self.transfer_error is not None:
            raise self.transfer_error
        self.transfers.append({"from": from_account, "to": to_account, "amount": amount_tinybars})
        return LedgerReceipt(success=True, transaction_id=f"0.0.5000@{len(self.transfers)}", status="SUCCESS")

    async def mint_membership_token(self, collection_id: Optional[str], metadata: Dict[str, Any]) -> MintReceipt:
        if not collection_id:
            return MintReceipt.unavailable()
        if self.mint_error is not None:
            raise self.mint_error
        self._serial += 1
        self.mints.append({"collection": collection_id, "metadata": metadata})
        return MintReceipt(
            success=True,
            transaction_id=f"0.0.5000@mint{self._serial}",
            status="SUCCESS",
            token_id=collection_id,
            serial_number=str(self._serial),
        )

    async def submit_message(self, topic_id: str, payload: Dict[str, Any]) -> LedgerReceipt:
        if self.message_failures > 0:
            self.message_failures -= 1
            raise LedgerError("topic unavailable")
        self.messages.append({"topic": topic_id, "payload": payload})
        return LedgerReceipt(success=True, transaction_id=f"0.0.5000@msg{len(self.messages)}", status="SUCCESS")

    def verify_identity(self, account_id: str) -> bool:
        return is_valid_account_id(account_id)

    def operator_info(self) -> Dict[str, Optional[str]]:
        return {"operatorId": TREASURY, "network": "testnet", "gateway": "fake"}


class StubAIProvider:
    """AI provider returning canned replies and counting calls."""

    def __init__(self, reply: str = "TRUE - Verified. Confidence: 97%", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls: List[str] = []

    async def initialize(self) -> None:
        pass

    async def shutdown(self) -> None:
        pass

    async def classify_claim(self, claim_text: str) -> str:
        self.calls.append(claim_text)
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.reply

    @property
    def provider_name(self) -> str:
        return "GROQ AI (stub-model)"

    @property
    def model(self) -> str:
        return "stub-model"

    @property
    def is_available(self) -> bool:
        return True


@pytest.fixture
def ledger() -> FakeLedger:
    """Provide a fake ledger."""
    return FakeLedger()


@pytest.fixture
def ai_provider() -> StubAIProvider:
    """Provide a stub AI provider."""
    return StubAIProvider()


@pytest_asyncio.fixture
async def store() -> JsonRecordStore:
    """Provide an initialized in-memory record store."""
    record_store = JsonRecordStore()
    await record_store.initialize()
    return record_store


@pytest.fixture
def mock_verification() -> VerificationService:
    """Verification service without an AI provider (keyword fallback only)."""
    return VerificationService(None, fallback=FallbackClassifier(rng=random.Random(7)))
