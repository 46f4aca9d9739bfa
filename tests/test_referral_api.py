"""
API tests for the referral endpoints.
"""

from decimal import Decimal

import pytest

from models import ReferralTransaction, User


@pytest.fixture
def referred_pair(client, make_user, set_global_terms):
    """A referrer plus one referee who signed up with the referrer's code."""
    set_global_terms(signupBonus=10)
    referrer = make_user("rita")
    response = client.post("/api/users/signup", json={
        "username": "rob",
        "email": "rob@example.com",
        "password": "secret123",
        "referredBy": referrer.referral_code,
    })
    return referrer, response.get_json()["data"]["user"]


class TestGlobalSettings:

    def test_public_read(self, client):
        response = client.get("/api/referral/settings")

        assert response.status_code == 200
        assert response.get_json()["data"]["referralCommission"] == 25.0

    def test_update_requires_admin(self, client, user):
        response = client.put("/api/referral/settings", json={"signupBonus": 5}, headers=user.headers)

        assert response.status_code == 403
        assert response.get_json()["message"] == "Access denied. Admin only."

    def test_update_requires_token(self, client):
        assert client.put("/api/referral/settings", json={"signupBonus": 5}).status_code == 401

    def test_admin_update(self, client, admin):
        response = client.put("/api/referral/settings", json={"signupBonus": 15}, headers=admin.headers)

        assert response.status_code == 200
        assert client.get("/api/referral/settings").get_json()["data"]["signupBonus"] == 15.0

    def test_invalid_update(self, client, admin):
        response = client.put("/api/referral/settings", json={"referralCommission": 250}, headers=admin.headers)

        body = response.get_json()
        assert response.status_code == 400
        assert body["errors"] == ["Referral commission must be between 0 and 100"]


class TestUserSettings:

    def test_individual_settings_take_effect(self, client, admin, make_user, fetch):
        referrer = make_user("abby")

        response = client.put(f"/api/referral/admin/user-settings/{referrer.id}", headers=admin.headers,
                              json={"signupBonus": 50, "useGlobalSettings": False})

        data = response.get_json()["data"]
        assert response.status_code == 200
        assert data["source"] == "individual"
        assert data["effectiveSettings"]["signupBonus"] == 50.0

        client.post("/api/users/signup", json={
            "username": "newbie", "email": "newbie@example.com",
            "password": "secret123", "referredBy": referrer.referral_code,
        })
        assert fetch(User, referrer.id, "referral_earnings") == Decimal("50")

    def test_both_routes_accept_updates(self, client, admin, user):
        response = client.put(f"/api/referral/user-settings/{user.id}", headers=admin.headers,
                              json={"minWithdrawAmount": 20})

        assert response.get_json()["data"]["individualSettings"]["minWithdrawAmount"] == 20.0

    def test_unknown_user(self, client, admin):
        response = client.get("/api/referral/user-settings/9999", headers=admin.headers)

        assert response.status_code == 404
        assert response.get_json()["message"] == "User not found"

    def test_listing(self, client, admin, user):
        response = client.get("/api/referral/all-users-settings?search=alice", headers=admin.headers)

        users = response.get_json()["data"]["users"]
        assert [u["user"]["username"] for u in users] == ["alice"]


class TestCodes:

    def test_generate_code_returns_share_url(self, client, make_user):
        legacy = make_user("olduser", with_code=False)

        response = client.post("/api/referral/generate-code", headers=legacy.headers)

        data = response.get_json()["data"]
        assert data["referralCode"].startswith("OLD")
        assert data["shareUrl"] == f"http://frontend.test/signup?ref={data['referralCode']}"

    def test_validate_code(self, client, user):
        response = client.get(f"/api/referral/validate-code/{user.referral_code.lower()}")

        assert response.status_code == 200
        assert response.get_json()["data"]["referralCode"] == user.referral_code

    def test_validate_unknown_code(self, client):
        assert client.get("/api/referral/validate-code/NOPE99").status_code == 404


class TestUserReads:

    def test_stats(self, client, referred_pair):
        referrer, referee = referred_pair
        headers = referrer.headers

        stats = client.get("/api/referral/stats", headers=headers).get_json()["data"]

        assert stats["totalReferrals"] == 1
        assert stats["totalEarnings"] == 10.0
        assert stats["referredUsers"][0]["username"] == referee["username"]

    def test_info_and_transactions(self, client, referred_pair):
        referrer, _referee = referred_pair

        info = client.get("/api/referral/info", headers=referrer.headers).get_json()["data"]
        transactions = client.get("/api/referral/transactions", headers=referrer.headers).get_json()["data"]

        assert info["totalReferrals"] == 1
        assert len(transactions) == 1
        assert transactions[0]["status"] == "approved"

    def test_users_by_code_owner_only(self, client, referred_pair, make_user):
        referrer, _referee = referred_pair
        stranger = make_user("sam")

        own = client.get(f"/api/referral/users-by-code/{referrer.referral_code}", headers=referrer.headers)
        other = client.get(f"/api/referral/users-by-code/{referrer.referral_code}", headers=stranger.headers)

        assert own.get_json()["data"]["total"] == 1
        assert other.status_code == 403


class TestWithdraw:

    def test_below_minimum(self, client, referred_pair):
        referrer, _referee = referred_pair

        response = client.post("/api/referral/withdraw", headers=referrer.headers)

        assert response.status_code == 400

    def test_moves_to_balance(self, client, referred_pair, set_global_terms):
        referrer, _referee = referred_pair
        set_global_terms(minWithdrawAmount=10)

        response = client.post("/api/referral/withdraw", headers=referrer.headers)

        data = response.get_json()["data"]
        assert response.status_code == 200
        assert data["withdrawnAmount"] == 10.0
        assert data["referralEarnings"] == 0.0
        assert data["balance"] == 10.0


class TestAdmin:

    def test_fix_relationships_dry_run(self, client, admin, make_user, set_global_terms):
        set_global_terms(signupBonus=10)
        referrer = make_user("rita")
        make_user("rob", referred_by=referrer.referral_code)

        response = client.post("/api/referral/fix-relationships", json={"dryRun": True}, headers=admin.headers)

        data = response.get_json()["data"]
        assert data["dryRun"] is True
        assert len(data["created"]) == 1

    def test_fix_relationships_rejects_bad_types(self, client, admin):
        response = client.post("/api/referral/fix-relationships", json={"dryRun": "yes"}, headers=admin.headers)

        assert response.status_code == 400

    def test_reports(self, client, admin, referred_pair):
        for path in ("/api/referral/admin/all", "/api/referral/analytics",
                     "/api/referral/admin/system-overview", "/api/referral/debug",
                     "/api/referral/admin/settings"):
            response = client.get(path, headers=admin.headers)
            assert response.status_code == 200, path

    def test_impact_analysis(self, client, admin, referred_pair):
        referrer, _referee = referred_pair

        response = client.get(f"/api/referral/admin/impact-analysis/{referrer.id}", headers=admin.headers)

        assert response.status_code == 200

    def test_test_login_is_admin_only(self, client, user):
        response = client.post("/api/referral/test-login", json={"email": user.email}, headers=user.headers)

        assert response.status_code == 403

    def test_ledger_status_change_adjusts_earnings(self, client, admin, referred_pair, app, fetch):
        referrer, _referee = referred_pair
        with app.app_context():
            tx_id = ReferralTransaction.query.one().id

        response = client.put(f"/api/referral/transactions/{tx_id}", json={"status": "pending"},
                              headers=admin.headers)
        assert response.status_code == 200
        assert fetch(User, referrer.id, "referral_earnings") == Decimal("0")

        client.put(f"/api/referral/transactions/{tx_id}", json={"status": "approved"}, headers=admin.headers)
        assert fetch(User, referrer.id, "referral_earnings") == Decimal("10")

    def test_ledger_status_change_after_withdrawal(self, client, admin, referred_pair, app, set_global_terms):
        referrer, _referee = referred_pair
        set_global_terms(minWithdrawAmount=10)
        client.post("/api/referral/withdraw", headers=referrer.headers)
        with app.app_context():
            tx_id = ReferralTransaction.query.one().id

        response = client.put(f"/api/referral/transactions/{tx_id}", json={"status": "pending"},
                              headers=admin.headers)

        assert response.status_code == 400
