"""
API tests for payment/withdrawal methods, transactions and withdrawal requests.
"""

from decimal import Decimal

import pytest

from models import Transaction, User


def create_withdrawal_method(client, admin, **overrides):
    body = {
        "method_name_en": "bKash",
        "min_withdrawal": 100,
        "max_withdrawal": 5000,
        "withdrawal_fee": 2,
        "fee_type": "percentage",
    }
    body.update(overrides)
    response = client.post("/api/withdrawal-methods", json=body, headers=admin.headers)
    assert response.status_code == 201, response.get_json()
    return response.get_json()["data"]


def record_deposit(client, user, transaction_id="TX1001", amount=500):
    return client.post("/api/transactions", headers=user.headers, json={
        "amount": amount,
        "wallet_provider": "bKash",
        "transaction_id": transaction_id,
        "wallet_number": "01700000000",
    })


@pytest.fixture
def funded_user(client, admin, user):
    client.put(f"/api/users/balance/{user.id}", headers=admin.headers, json={"type": "deposit", "amount": 1000})
    return user


class TestMethods:

    def test_public_sees_active_only(self, client, admin):
        client.post("/api/payment-methods", json={"method_name_en": "Nagad"}, headers=admin.headers)
        client.post("/api/payment-methods", json={"method_name_en": "Rocket", "status": "Inactive"},
                    headers=admin.headers)

        public = client.get("/api/payment-methods").get_json()["data"]
        everything = client.get("/api/payment-methods", headers=admin.headers).get_json()["data"]

        assert [m["method_name_en"] for m in public] == ["Nagad"]
        assert len(everything) == 2

    def test_validation(self, client, admin):
        response = client.post("/api/payment-methods", headers=admin.headers,
                               json={"method_name_en": "Nagad", "text_color": "red"})

        assert response.status_code == 400
        assert "text_color must be a hex colour like #ffffff" in response.get_json()["errors"]

    def test_min_above_max_rejected(self, client, admin):
        response = client.post("/api/withdrawal-methods", headers=admin.headers,
                               json={"method_name_en": "bKash", "min_withdrawal": 500, "max_withdrawal": 100})

        assert response.status_code == 400

    def test_toggle_status(self, client, admin):
        method = create_withdrawal_method(client, admin)

        response = client.patch(f"/api/withdrawal-methods/{method['id']}/toggle-status", headers=admin.headers)

        assert response.get_json()["data"]["status"] == "Inactive"

    def test_create_requires_admin(self, client, user):
        response = client.post("/api/payment-methods", json={"method_name_en": "Nagad"}, headers=user.headers)

        assert response.status_code == 403


class TestTransactions:

    def test_created_pending(self, client, user):
        response = record_deposit(client, user)

        assert response.status_code == 201
        assert response.get_json()["data"]["status"] == "Pending"

    def test_duplicate_transaction_id(self, client, user):
        record_deposit(client, user)

        response = record_deposit(client, user)

        assert response.status_code == 400
        assert response.get_json()["message"] == "Transaction ID already exists"

    def test_missing_fields(self, client, user):
        response = client.post("/api/transactions", headers=user.headers, json={"amount": 10})

        assert response.status_code == 400

    def test_completing_deposit_credits_once(self, client, admin, user, fetch):
        tx_id = record_deposit(client, user).get_json()["data"]["id"]

        first = client.put(f"/api/transactions/{tx_id}/status", json={"status": "Completed"}, headers=admin.headers)
        client.put(f"/api/transactions/{tx_id}/status", json={"status": "Completed"}, headers=admin.headers)

        assert first.status_code == 200
        assert fetch(User, user.id, "balance", "deposit") == [Decimal("500"), Decimal("500")]

    def test_invalid_status(self, client, admin, user):
        tx_id = record_deposit(client, user).get_json()["data"]["id"]

        response = client.put(f"/api/transactions/{tx_id}/status", json={"status": "Done"}, headers=admin.headers)

        assert response.status_code == 400

    def test_my_transactions(self, client, user, make_user):
        other = make_user("bob")
        record_deposit(client, user, "TX1")
        record_deposit(client, other, "TX2")

        response = client.get("/api/transactions/my", headers=user.headers)

        body = response.get_json()
        assert [t["transaction_id"] for t in body["data"]] == ["TX1"]
        assert body["pagination"]["totalItems"] == 1

    def test_other_users_transaction_hidden(self, client, user, make_user):
        other = make_user("bob")
        tx_id = record_deposit(client, other, "TX2").get_json()["data"]["id"]

        assert client.get(f"/api/transactions/{tx_id}", headers=user.headers).status_code == 404

    def test_admin_listing_and_stats(self, client, admin, user):
        record_deposit(client, user, "TX1")
        record_deposit(client, user, "TX2", amount=250)

        listing = client.get("/api/transactions?status=Pending", headers=admin.headers).get_json()
        stats = client.get("/api/transactions/stats", headers=admin.headers).get_json()["data"]

        assert listing["pagination"]["totalItems"] == 2
        assert stats["totalTransactions"] == 2
        assert stats["totalAmount"] == 750.0


class TestReferralTransfers:

    @pytest.fixture
    def transfer_id(self, client, app, make_user, set_global_terms):
        set_global_terms(signupBonus=10, minWithdrawAmount=10)
        referrer = make_user("rita")
        client.post("/api/users/signup", json={"username": "rob", "email": "rob@example.com",
                                               "password": "secret123", "referredBy": referrer.referral_code})
        assert client.post("/api/referral/withdraw", headers=referrer.headers).status_code == 200
        with app.app_context():
            return Transaction.query.filter_by(wallet_provider="referral").one().id

    @pytest.mark.parametrize("provider", ["referral", " REFERRAL "])
    def test_users_cannot_record_reserved_provider(self, client, user, provider):
        response = client.post("/api/transactions", headers=user.headers, json={
            "amount": 5000,
            "wallet_provider": provider,
            "transaction_id": "TX-RES",
            "wallet_number": "01700000000",
            "transaction_type": "Transfer",
        })

        assert response.status_code == 400
        assert response.get_json()["message"] == "This wallet provider is reserved"

    def test_admin_cannot_delete(self, client, admin, transfer_id, fetch):
        response = client.delete(f"/api/transactions/{transfer_id}", headers=admin.headers)

        assert response.status_code == 400
        assert fetch(Transaction, transfer_id, "status") == "Completed"

    def test_admin_cannot_change_status(self, client, admin, transfer_id, fetch):
        response = client.put(f"/api/transactions/{transfer_id}/status", json={"status": "Failed"},
                              headers=admin.headers)

        assert response.status_code == 400
        assert fetch(Transaction, transfer_id, "status") == "Completed"


class TestWithdrawalRequests:

    def test_request_is_pending_with_fee(self, client, admin, funded_user, fetch):
        method = create_withdrawal_method(client, admin)

        response = client.post("/api/withdrawal-requests", headers=funded_user.headers, json={
            "withdrawal_method_id": method["id"], "amount": 200, "phone_number": "01700000000",
        })

        data = response.get_json()["data"]
        assert response.status_code == 201
        assert data["transaction"]["status"] == "Pending"
        assert data["withdrawalDetails"]["fee"] == 4.0
        assert data["withdrawalDetails"]["totalDeduction"] == 204.0
        assert fetch(User, funded_user.id, "balance") == Decimal("1000")

    def test_below_method_minimum(self, client, admin, funded_user):
        method = create_withdrawal_method(client, admin)

        response = client.post("/api/withdrawal-requests", headers=funded_user.headers, json={
            "withdrawal_method_id": method["id"], "amount": 50, "phone_number": "01700000000",
        })

        assert response.status_code == 400
        assert response.get_json()["data"]["minAmount"] == 100.0

    def test_insufficient_balance(self, client, admin, user):
        method = create_withdrawal_method(client, admin)

        response = client.post("/api/withdrawal-requests", headers=user.headers, json={
            "withdrawal_method_id": method["id"], "amount": 200, "phone_number": "01700000000",
        })

        assert response.status_code == 400
        assert response.get_json()["message"] == "Insufficient balance"

    def test_inactive_method(self, client, admin, funded_user):
        method = create_withdrawal_method(client, admin, status="Inactive")

        response = client.post("/api/withdrawal-requests", headers=funded_user.headers, json={
            "withdrawal_method_id": method["id"], "amount": 200, "phone_number": "01700000000",
        })

        assert response.status_code == 400

    def test_completion_debits_balance(self, client, admin, funded_user, fetch):
        method = create_withdrawal_method(client, admin)
        tx = client.post("/api/withdrawal-requests", headers=funded_user.headers, json={
            "withdrawal_method_id": method["id"], "amount": 200, "phone_number": "01700000000",
        }).get_json()["data"]["transaction"]

        client.patch(f"/api/transactions/{tx['id']}/status", json={"status": "Completed"}, headers=admin.headers)

        assert fetch(User, funded_user.id, "balance", "withdraw") == [Decimal("800"), Decimal("200")]

    def test_cancel_own_pending(self, client, admin, funded_user, fetch):
        method = create_withdrawal_method(client, admin)
        tx = client.post("/api/withdrawal-requests", headers=funded_user.headers, json={
            "withdrawal_method_id": method["id"], "amount": 200, "phone_number": "01700000000",
        }).get_json()["data"]["transaction"]

        response = client.patch(f"/api/withdrawal-requests/{tx['id']}/cancel", headers=funded_user.headers)
        again = client.patch(f"/api/withdrawal-requests/{tx['id']}/cancel", headers=funded_user.headers)

        assert response.status_code == 200
        assert fetch(Transaction, tx["id"], "status") == "Cancelled"
        assert again.status_code == 400

    def test_my_requests(self, client, admin, funded_user):
        method = create_withdrawal_method(client, admin)
        client.post("/api/withdrawal-requests", headers=funded_user.headers, json={
            "withdrawal_method_id": method["id"], "amount": 200, "phone_number": "01700000000",
        })

        response = client.get("/api/withdrawal-requests/my", headers=funded_user.headers)

        assert response.get_json()["count"] == 1
