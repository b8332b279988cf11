"""API tests for wallet endpoints"""

import pytest

HEADERS = {"X-User-Id": "user_42"}


@pytest.mark.asyncio
class TestWalletApi:

    async def test_wallet_not_found_before_first_top_up(self, client):
        response = await client.get("/wallet", headers=HEADERS)

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "WALLET_NOT_FOUND"

    async def test_top_up_opens_and_credits_wallet(self, client):
        response = await client.post(
            "/wallet/top-up", json={"amount": "200.00", "idempotency_key": "topup_1"}, headers=HEADERS
        )

        assert response.status_code == 200
        data = response.json()
        assert float(data["balance_before"]) == 0.0
        assert float(data["balance_after"]) == 200.0
        assert data["idempotency_key"] == "topup_1"

        wallet = (await client.get("/wallet", headers=HEADERS)).json()
        assert float(wallet["balance"]) == 200.0
        assert wallet["total"] == 1
        assert wallet["entries"][0]["direction"] == "credit"
        assert wallet["entries"][0]["description"] == "Wallet top-up"

    async def test_top_up_is_idempotent(self, client):
        """
        Given: A top-up applied with key topup_1
        When: The same request is retried
        Then: Same entry returned, balance credited once
        """
        body = {"amount": "50", "idempotency_key": "topup_1"}

        first = await client.post("/wallet/top-up", json=body, headers=HEADERS)
        second = await client.post("/wallet/top-up", json=body, headers=HEADERS)

        assert first.json()["entry_id"] == second.json()["entry_id"]
        wallet = (await client.get("/wallet", headers=HEADERS)).json()
        assert float(wallet["balance"]) == 50.0
        assert wallet["total"] == 1

    async def test_key_reused_by_other_user(self, client):
        await client.post(
            "/wallet/top-up", json={"amount": "50", "idempotency_key": "topup_1"}, headers=HEADERS
        )

        response = await client.post(
            "/wallet/top-up",
            json={"amount": "50", "idempotency_key": "topup_1"},
            headers={"X-User-Id": "user_7"},
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "IDEMPOTENCY_KEY_CONFLICT"

    @pytest.mark.parametrize("amount", ["0", "-5", "1.1234567"])
    async def test_invalid_amount(self, client, amount):
        response = await client.post(
            "/wallet/top-up", json={"amount": amount}, headers=HEADERS
        )

        assert response.status_code == 422

    async def test_pagination(self, client):
        for key in ("a", "b", "c"):
            await client.post(
                "/wallet/top-up", json={"amount": "10", "idempotency_key": key}, headers=HEADERS
            )

        page = (await client.get("/wallet?limit=2&offset=0", headers=HEADERS)).json()

        assert page["total"] == 3
        assert len(page["entries"]) == 2
        assert page["limit"] == 2

    async def test_reconciliation_balanced_after_top_ups(self, client, fund_wallet):
        await fund_wallet(75, user_id="user_9")
        await client.post("/wallet/top-up", json={"amount": "25"}, headers=HEADERS)

        response = await client.get("/wallet/reconciliation", headers=HEADERS)

        assert response.status_code == 200
        data = response.json()
        assert data["total_wallets_checked"] == 2
        assert data["discrepancies_found"] == 0
