"""Tests for the FastAPI application."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from truth_market.api.app import app
from truth_market.domain.errors import LedgerError, StorageError
from truth_market.infrastructure.config import MarketConfig
from truth_market.infrastructure.dependencies import ServiceContainer, get_service_container
from truth_market.infrastructure.storage.json_record_store import JsonRecordStore

BUYER = "0.0.1001"
WATER_CLAIM = "Water boils at 100°C at sea level"


class FailingRegistry:
    """Agent registry whose lookups always fail."""

    @property
    def is_enabled(self) -> bool:
        return True

    async def get_agent(self, agent_id):
        raise LedgerError("CONTRACT_REVERT_EXECUTED")

    async def shutdown(self) -> None:
        pass


@pytest.fixture
def record_store() -> JsonRecordStore:
    return JsonRecordStore()


@pytest.fixture
def make_client(record_store, ledger, ai_provider):
    """Start the app against an in-memory container."""
    clients = []

    def _make(**kwargs) -> TestClient:
        container = ServiceContainer(
            config=MarketConfig(operator_id="0.0.5000", badge_token_id="0.0.7777"),
            store=record_store,
            ledger=ledger,
            ai_provider=ai_provider,
            **kwargs,
        )
        app.dependency_overrides[get_service_container] = lambda: container
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()


def buy(client: TestClient, claim=WATER_CLAIM, buyer=BUYER, proof="tx1"):
    return client.post(
        "/api/marketplace/buy",
        json={"claim": claim, "buyerAccountId": buyer, "paymentProofTxId": proof},
    )


def test_health(client):
    """Test the health check reports component status."""
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["ai"]["available"] is True
    assert body["ledger"]["operatorId"] == "0.0.5000"
    assert body["agent"] == {"id": "truth-agent", "registryEnabled": False}
    assert body["audit"] == {"enabled": False}


def test_buy_claim(client):
    """Test a successful purchase returns 201 with camelCase fields."""
    response = buy(client)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["status"] == "SUCCESS"
    assert body["sale"]["claim"] == WATER_CLAIM
    assert body["sale"]["price"] == "0.01"
    assert body["sale"]["priceTinybars"] == 1_000_000
    assert body["buyer"] == {"accountId": BUYER, "purchaseCount": 1, "badgesEarned": 0, "nextBadgeIn": 4}
    assert body["badge"]["minted"] is False
    assert body["badge"]["nextIn"] == 4


def test_fifth_purchase_mints_badge(client):
    for i in range(1, 6):
        response = buy(client, proof=f"tx{i}")

    body = response.json()
    assert body["message"] == "🎉 Purchase successful! Badge minted!"
    assert body["badge"]["badge"]["tier"] == "BRONZE"
    assert body["buyer"]["badgesEarned"] == 1


def test_buy_rejected_claim(client, ai_provider):
    """Test a FALSE claim is refused with the verification payload."""
    ai_provider.reply = "FALSE - The Earth is an oblate spheroid."

    response = buy(client, claim="The Earth is flat and still")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "REJECTED"
    assert body["verification"]["verdict"] == "FALSE"
    assert body["sale"] is None


def test_buy_accepts_claim_text_field(client):
    """Test the body may name the claim as claimText."""
    response = client.post("/api/marketplace/buy", json={
        "claimText": WATER_CLAIM,
        "buyerAccountId": BUYER,
        "paymentProofTxId": "tx1",
    })

    assert response.status_code == 201
    assert response.json()["sale"]["claim"] == WATER_CLAIM


def test_buy_validation_error(client):
    response = buy(client, buyer="")

    assert response.status_code == 400
    body = response.json()
    assert body["field"] == "buyerAccountId"
    assert body["code"] == "VALIDATION_ERROR"


def test_buy_agent_unavailable(make_client):
    client = make_client(agent_registry=FailingRegistry())

    response = buy(client)

    assert response.status_code == 503
    assert response.json()["error"] == "Truth Agent not available"


def test_buy_storage_failure(client, record_store):
    """Test a failed sale write is reported as FAILED."""
    with patch.object(record_store, "add_sale", AsyncMock(side_effect=StorageError("disk full"))):
        response = buy(client)

    assert response.status_code == 500
    assert response.json()["status"] == "FAILED"


def test_sales_and_marketplace_stats(client):
    buy(client)
    buy(client, proof="tx2")

    sales = client.get("/api/marketplace/sales").json()
    assert sales["count"] == 2
    assert sales["sales"][0]["transactionId"] == "tx2"

    stats = client.get("/api/marketplace/stats").json()["stats"]
    assert stats["totalSales"] == 2
    assert stats["totalRevenue"] == "0.02"


def test_claim_endpoints(client):
    """Test verifying, listing and fetching claims."""
    created = client.post("/api/claims/verify", json={"claim": "The Moon orbits the Earth", "accountId": "0.0.2002"})
    assert created.status_code == 200
    claim = created.json()["claim"]
    assert claim["verdict"] == "TRUE"
    assert claim["submittedBy"] == "0.0.2002"

    listing = client.get("/api/claims", params={"limit": 10}).json()
    assert listing["pagination"]["total"] == 1

    assert client.get(f"/api/claims/{claim['id']}").json()["claim"]["id"] == claim["id"]
    assert client.get("/api/claims/recent").json()["count"] == 1
    assert client.get("/api/claims/claim_0_missing").status_code == 404
    assert client.get("/api/claims", params={"verdict": "MAYBE"}).status_code == 400


def test_user_endpoints(client):
    profile = client.get(f"/api/users/{BUYER}").json()["user"]
    assert profile["purchaseCount"] == 0

    buy(client)
    dashboard = client.get(f"/api/users/{BUYER}/dashboard").json()
    assert dashboard["stats"]["totalPurchases"] == 1
    assert dashboard["user"]["accountId"] == BUYER

    assert client.get("/api/users/0.0.4040/dashboard").status_code == 404
    assert client.get("/api/users").json()["total"] == 1


def test_badge_and_stats_endpoints(client):
    for i in range(5):
        buy(client, proof=f"tx{i}")

    assert client.get(f"/api/badges/{BUYER}").json()["count"] == 1
    assert client.get("/api/badges").json()["total"] == 1
    assert client.get("/api/badges/stats").json()["stats"]["tierDistribution"] == {"BRONZE": 1}

    stats = client.get("/api/stats").json()["stats"]
    assert stats["totalSales"] == 5
    assert client.get("/api/stats/leaderboard").json()["leaderboard"][0]["accountId"] == BUYER
    assert client.get("/api/stats/activity", params={"limit": 3}).json()["count"] == 3
    assert client.get("/api/stats/analytics").json()["analytics"]["overview"]["totalBadges"] == 1
