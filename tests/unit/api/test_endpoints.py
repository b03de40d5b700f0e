"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from tests.helpers import ALICE, AUTHORITY, BOB, BOOTSTRAP_FOREIGN, ONE, make_engine
from tokenomics.api.endpoints import get_engine
from tokenomics.api.main import app, status_for
from tokenomics.errors import (
    BucketLocked,
    ConservationViolation,
    EngineError,
    InsufficientAmount,
    Overflow,
    SlippageExceeded,
)


@pytest.fixture
def engine():
    """Fresh engine injected into the app."""
    engine = make_engine()
    app.dependency_overrides[get_engine] = lambda: engine
    yield engine
    app.dependency_overrides.clear()


@pytest.fixture
def client(engine):
    """Test client bound to the injected engine."""
    return TestClient(app)


def fund_and_buy(client, account=ALICE, amount=BOOTSTRAP_FOREIGN):
    client.post(f"/accounts/{account}/deposit", json={"amount": str(amount)})
    return client.post("/swap/buy", json={"account": account, "amountIn": str(amount)})


class TestStatusMapping:
    """Tests for engine error to HTTP status mapping."""

    @pytest.mark.parametrize(
        "error,status",
        [
            (BucketLocked("x"), 403),
            (SlippageExceeded("x"), 409),
            (Overflow("x"), 422),
            (ConservationViolation("x"), 500),
            (InsufficientAmount("x"), 400),
            (EngineError("x"), 400),
        ],
    )
    def test_status_for(self, error, status):
        """Each error class maps to a stable status."""
        assert status_for(error) == status


class TestReadEndpoints:
    """Tests for state and account reads."""

    def test_health(self, client):
        """Health check reports ok."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_initial_state(self, client):
        """A fresh engine has no supply and no pool price."""
        data = client.get("/state").json()
        assert data["supply"] == "0"
        assert data["spotPrice"] is None
        assert [b["id"] for b in data["buckets"]] == ["a", "b", "c", "d"]
        assert [b["locked"] for b in data["buckets"]] == [True, False, False, False]

    def test_deposit_and_read(self, client):
        """Deposits show up in the account balance."""
        response = client.post(f"/accounts/{BOB}/deposit", json={"amount": str(5 * ONE)})
        assert response.status_code == 200
        assert response.json()["foreign"] == str(5 * ONE)
        assert client.get(f"/accounts/{BOB}").json()["native"] == "0"


class TestSwapEndpoints:
    """Tests for quoting and swapping."""

    def test_quote_buy(self, client):
        """A bootstrap quote routes to the mint and shows the router fee."""
        response = client.post("/quote/buy", json={"amountIn": str(BOOTSTRAP_FOREIGN)})
        assert response.status_code == 200
        data = response.json()
        assert data["route"] == "mint"
        assert data["fee"] == str(5 * ONE)
        assert data["poolOut"] == "0"

    def test_buy_credits_native(self, client, engine):
        """A buy debits foreign and credits the native output."""
        response = fund_and_buy(client)
        assert response.status_code == 200
        data = response.json()
        account = client.get(f"/accounts/{ALICE}").json()
        assert account["native"] == data["amountOut"]
        assert account["foreign"] == "0"
        assert engine.pool.has_liquidity()

    def test_sell(self, client):
        """Native bought can be sold back through the pool."""
        bought = int(fund_and_buy(client).json()["amountOut"])
        response = client.post(
            "/swap/sell", json={"account": ALICE, "amountIn": str(bought // 2)}
        )
        assert response.status_code == 200
        assert response.json()["route"] == "pool"

    def test_insufficient_balance(self, client):
        """Buying without funds is a conflict."""
        response = client.post("/swap/buy", json={"account": BOB, "amountIn": str(ONE)})
        assert response.status_code == 409
        assert response.json()["code"] == "insufficient_balance"

    def test_bootstrap_minimum(self, client):
        """A first buy below the bootstrap minimum is rejected."""
        response = fund_and_buy(client, amount=10 * ONE)
        assert response.status_code == 400
        assert response.json()["code"] == "insufficient_amount"

    def test_slippage(self, client):
        """An unreachable minimum output is rejected and nothing changes."""
        client.post(f"/accounts/{ALICE}/deposit", json={"amount": str(BOOTSTRAP_FOREIGN)})
        response = client.post(
            "/swap/buy",
            json={
                "account": ALICE,
                "amountIn": str(BOOTSTRAP_FOREIGN),
                "minAmountOut": str(10**9 * ONE),
            },
        )
        assert response.status_code == 409
        assert response.json()["code"] == "slippage_exceeded"
        assert client.get("/state").json()["supply"] == "0"
        assert client.get(f"/accounts/{ALICE}").json()["foreign"] == str(BOOTSTRAP_FOREIGN)

    def test_invalid_amount(self, client):
        """Negative amounts fail request validation."""
        response = client.post("/swap/buy", json={"account": ALICE, "amountIn": "-5"})
        assert response.status_code == 422


class TestTreasuryEndpoints:
    """Tests for unwind and maintenance."""

    def test_unwind_requires_authority(self, client):
        """Only the authority may unwind."""
        fund_and_buy(client)
        response = client.post(
            "/treasury/unwind",
            json={"caller": BOB, "bucketId": "b", "lpAmount": "1", "destination": BOB},
        )
        assert response.status_code == 403
        assert response.json()["code"] == "unauthorized"

    def test_primary_bucket_locked(self, client):
        """The primary bucket refuses even the authority."""
        fund_and_buy(client)
        response = client.post(
            "/treasury/unwind",
            json={"caller": AUTHORITY, "bucketId": "a", "lpAmount": "1", "destination": BOB},
        )
        assert response.status_code == 403
        assert response.json()["code"] == "bucket_locked"

    def test_unwind_credits_destination(self, client, engine):
        """Unwound liquidity is paid to the destination account."""
        fund_and_buy(client)
        lp_amount = engine.allocator.bucket("b").lp_tokens
        response = client.post(
            "/treasury/unwind",
            json={
                "caller": AUTHORITY,
                "bucketId": "b",
                "lpAmount": str(lp_amount),
                "destination": BOB,
            },
        )
        assert response.status_code == 200
        data = response.json()
        account = client.get(f"/accounts/{BOB}").json()
        assert account["native"] == data["nativeOut"]
        assert account["foreign"] == data["foreignOut"]

    def test_process_pending(self, client):
        """A maintenance cycle reports its budget use."""
        response = client.post("/maintenance/process", json={"budget": 5})
        assert response.status_code == 200
        data = response.json()
        assert data["serviced"] == []
        assert data["budgetUsed"] == 0
