"""Tests for the ledger gateway adapter."""

import json

import httpx
import pytest

from truth_market.domain.errors import LedgerError, LedgerTimeoutError
from truth_market.infrastructure.ledger.hedera_gateway_adapter import (
    HederaGatewayAdapter,
    LedgerGatewayConfig,
    is_valid_account_id,
)

OPERATOR = "0.0.5000"


def make_adapter(handler) -> HederaGatewayAdapter:
    """Adapter whose HTTP client is served by ``handler``."""
    client = httpx.AsyncClient(base_url="http://gateway.test", transport=httpx.MockTransport(handler))
    return HederaGatewayAdapter(LedgerGatewayConfig(operator_id=OPERATOR), client=client)


@pytest.mark.parametrize("account_id,valid", [
    ("0.0.1001", True),
    ("0.0.123456-vfmkw", True),
    ("1.2.3", True),
    ("0.0", False),
    ("0.0.01", False),
    ("alice", False),
    ("", False),
])
def test_account_id_format(account_id, valid):
    assert is_valid_account_id(account_id) is valid


@pytest.mark.asyncio
async def test_transfer_value():
    """Test the transfer request body and receipt."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"status": "SUCCESS", "transactionId": "0.0.5000@1700000000.1"})

    adapter = make_adapter(handler)
    receipt = await adapter.transfer_value(OPERATOR, "0.0.2002", 700_000)

    assert receipt.success is True
    assert receipt.transaction_id == "0.0.5000@1700000000.1"
    assert requests[0].url.path == "/transfers"
    assert json.loads(requests[0].content) == {"from": OPERATOR, "to": "0.0.2002", "amountTinybars": 700_000}


@pytest.mark.asyncio
async def test_transfer_rejects_bad_arguments():
    """Test local checks before any request is made."""
    adapter = make_adapter(lambda request: pytest.fail("no request expected"))

    with pytest.raises(ValueError):
        await adapter.transfer_value(OPERATOR, "0.0.2002", 0)
    with pytest.raises(LedgerError):
        await adapter.transfer_value("0.0.9999", "0.0.2002", 10)
    with pytest.raises(LedgerError):
        await adapter.transfer_value(OPERATOR, "bob", 10)


@pytest.mark.asyncio
async def test_failed_receipt_status():
    """Test a non-SUCCESS receipt becomes a LedgerError with its status."""
    adapter = make_adapter(lambda request: httpx.Response(200, json={"status": "INSUFFICIENT_PAYER_BALANCE"}))

    with pytest.raises(LedgerError) as exc_info:
        await adapter.transfer_value(OPERATOR, "0.0.2002", 10)

    assert exc_info.value.status == "INSUFFICIENT_PAYER_BALANCE"


@pytest.mark.asyncio
async def test_http_error_status():
    adapter = make_adapter(lambda request: httpx.Response(502, text="bad gateway"))

    with pytest.raises(LedgerError) as exc_info:
        await adapter.transfer_value(OPERATOR, "0.0.2002", 10)

    assert exc_info.value.status == "502"


@pytest.mark.asyncio
async def test_timeout_maps_to_ledger_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    adapter = make_adapter(handler)

    with pytest.raises(LedgerTimeoutError):
        await adapter.transfer_value(OPERATOR, "0.0.2002", 10)


@pytest.mark.asyncio
async def test_mint_membership_token():
    """Test metadata is hex-encoded JSON and the serial is returned."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"status": "SUCCESS", "transactionId": "0.0.5000@1.2", "serials": [42]})

    adapter = make_adapter(handler)
    receipt = await adapter.mint_membership_token("0.0.7777", {"tier": "BRONZE", "purchaseCount": 5})

    assert receipt.token_id == "0.0.7777"
    assert receipt.serial_number == "42"
    assert requests[0].url.path == "/tokens/0.0.7777/mint"
    metadata_hex = json.loads(requests[0].content)["metadata"][0]
    assert json.loads(bytes.fromhex(metadata_hex)) == {"tier": "BRONZE", "purchaseCount": 5}


@pytest.mark.asyncio
async def test_mint_without_collection_is_unavailable():
    """Test the sentinel is returned without a request."""
    adapter = make_adapter(lambda request: pytest.fail("no request expected"))

    receipt = await adapter.mint_membership_token(None, {"tier": "BRONZE"})

    assert receipt.success is False
    assert receipt.is_unavailable


@pytest.mark.asyncio
async def test_mint_without_serial_fails():
    adapter = make_adapter(lambda request: httpx.Response(200, json={"status": "SUCCESS", "serials": []}))

    with pytest.raises(LedgerError):
        await adapter.mint_membership_token("0.0.7777", {"tier": "BRONZE"})


@pytest.mark.asyncio
async def test_submit_message():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"status": "SUCCESS", "transactionId": "0.0.5000@3.4"})

    adapter = make_adapter(handler)
    receipt = await adapter.submit_message("0.0.9999", {"type": "ClaimPurchase"})

    assert receipt.transaction_id == "0.0.5000@3.4"
    assert requests[0].url.path == "/topics/0.0.9999/messages"
    assert json.loads(json.loads(requests[0].content)["message"]) == {"type": "ClaimPurchase"}


@pytest.mark.asyncio
async def test_initialize_sets_bearer_credential():
    """Test the operator credential is sent as a bearer token."""
    adapter = HederaGatewayAdapter(LedgerGatewayConfig(operator_id=OPERATOR, operator_key="302e-secret"))

    await adapter.initialize()
    try:
        assert adapter.is_available
        assert adapter._client.headers["Authorization"] == "Bearer 302e-secret"
        assert adapter.operator_info()["operatorId"] == OPERATOR
    finally:
        await adapter.shutdown()

    assert not adapter.is_available
