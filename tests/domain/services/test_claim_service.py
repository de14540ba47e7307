"""Tests for the claim catalogue."""

import pytest

from truth_market.domain.errors import NotFoundError, ValidationError
from truth_market.domain.models.claim import Verdict
from truth_market.domain.services.audit_service import AuditLogger
from truth_market.domain.services.claim_service import ClaimService
from truth_market.domain.services.verification_service import VerificationService


@pytest.fixture
def claim_service(store, mock_verification):
    return ClaimService(store, mock_verification)


@pytest.mark.asyncio
async def test_verify_and_record_stores_submitter(claim_service, store):
    """Test a verified claim is stored under the submitting account."""
    claim = await claim_service.verify_and_record("Water boils at 100°C at sea level", "0.0.2002")

    assert claim.id.startswith("claim_")
    assert claim.verdict == Verdict.TRUE
    assert claim.submitted_by == "0.0.2002"
    assert claim.timestamp is not None
    assert await store.get_claim(claim.id) == claim


@pytest.mark.asyncio
async def test_verify_and_record_anonymous(claim_service):
    """Test claims without an account are anonymous."""
    claim = await claim_service.verify_and_record("  Hedera is carbon negative  ")

    assert claim.text == "Hedera is carbon negative"
    assert claim.submitted_by == "anonymous"


@pytest.mark.parametrize("text", ["", "   ", "short"])
@pytest.mark.asyncio
async def test_verify_and_record_rejects_short_text(claim_service, text):
    with pytest.raises(ValidationError) as exc_info:
        await claim_service.verify_and_record(text)

    assert exc_info.value.field == "claim"


@pytest.mark.asyncio
async def test_verification_is_audited(store, ledger, ai_provider):
    """Test a ClaimVerification message is published."""
    audit = AuditLogger(ledger, "0.0.9999")
    service = ClaimService(store, VerificationService(ai_provider), audit)

    claim = await service.verify_and_record("The Moon orbits the Earth", "0.0.2002")
    await audit.drain()

    payload = ledger.messages[0]["payload"]
    assert payload["type"] == "ClaimVerification"
    assert payload["claimId"] == claim.id
    assert payload["verdict"] == "TRUE"
    assert payload["confidence"] == 97


@pytest.mark.asyncio
async def test_list_claims_paginates_newest_first(claim_service):
    """Test pagination metadata and ordering."""
    texts = [
        "Water boils at 100°C at sea level",
        "Hedera is carbon negative",
        "Machines can process data faster than people",
    ]
    for text in texts:
        await claim_service.verify_and_record(text)

    page = await claim_service.list_claims(limit=2, offset=0)

    assert [c.text for c in page["claims"]] == [texts[2], texts[1]]
    assert page["pagination"] == {"total": 3, "limit": 2, "offset": 0, "hasMore": True}

    last = await claim_service.list_claims(limit=2, offset=2)
    assert [c.text for c in last["claims"]] == [texts[0]]
    assert last["pagination"]["hasMore"] is False


@pytest.mark.asyncio
async def test_list_claims_filters_by_verdict(store, ai_provider):
    """Test the verdict filter is case-insensitive."""
    service = ClaimService(store, VerificationService(ai_provider, cache_enabled=False))
    await service.verify_and_record("The Moon orbits the Earth")
    ai_provider.reply = "FALSE - It does not."
    await service.verify_and_record("The Sun orbits the Earth")

    page = await service.list_claims(verdict="false")

    assert [c.text for c in page["claims"]] == ["The Sun orbits the Earth"]
    assert page["pagination"]["total"] == 1


@pytest.mark.asyncio
async def test_list_claims_rejects_unknown_verdict(claim_service):
    with pytest.raises(ValidationError):
        await claim_service.list_claims(verdict="MAYBE")


@pytest.mark.asyncio
async def test_get_unknown_claim(claim_service):
    with pytest.raises(NotFoundError):
        await claim_service.get("claim_0_missing")


@pytest.mark.asyncio
async def test_recent_limits_results(claim_service):
    for text in ["Water boils at 100°C at sea level", "Hedera is carbon negative"]:
        await claim_service.verify_and_record(text)

    recent = await claim_service.recent(limit=1)

    assert [c.text for c in recent] == ["Hedera is carbon negative"]
