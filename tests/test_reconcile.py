from decimal import Decimal

from extensions import db
from models import ReferralTransaction, Transaction, TransactionStatus, TransactionType, User
from referral.processing import process_signup_referral, withdrawn_total
from referral.reconcile import earnings_drift, reconcile_referrals
from stores import get_store


def test_missing_bonus_is_created(ctx, new_user):
    get_store("referral").update({"signupBonus": 10})
    referrer = new_user("rita")
    referee = new_user("rob", referred_by=referrer.referral_code)

    report = reconcile_referrals()

    assert report.checked == 1
    assert len(report.created) == 1
    assert report.created[0]["refereeId"] == referee.id
    assert db.session.get(User, referrer.id).referral_earnings == Decimal("10")
    assert report.drift == []


def test_second_run_makes_no_writes(ctx, new_user):
    get_store("referral").update({"signupBonus": 10})
    referrer = new_user("rita")
    new_user("rob", referred_by=referrer.referral_code)
    new_user("ray", referred_by=referrer.referral_code)

    reconcile_referrals()
    again = reconcile_referrals()

    assert again.writes == 0
    assert again.already_credited == 2
    assert ReferralTransaction.query.count() == 2


def test_consistent_pair_is_a_no_op(ctx, new_user):
    get_store("referral").update({"signupBonus": 10})
    referrer = new_user("rita")
    process_signup_referral(new_user("rob", with_code=False), referrer.referral_code)

    report = reconcile_referrals()

    assert report.created == []
    assert report.already_credited == 1
    assert ReferralTransaction.query.count() == 1


def test_dry_run_reports_only(ctx, new_user):
    get_store("referral").update({"signupBonus": 10})
    referrer = new_user("rita")
    new_user("rob", referred_by=referrer.referral_code)

    report = reconcile_referrals(dry_run=True)

    assert len(report.created) == 1
    assert report.writes == 0
    assert ReferralTransaction.query.count() == 0


def test_orphans_are_reported(ctx, new_user):
    new_user("rob", referred_by="GONE42")

    report = reconcile_referrals()

    assert report.orphans[0]["referredBy"] == "GONE42"
    assert report.created == []


def test_code_filter(ctx, new_user):
    get_store("referral").update({"signupBonus": 10})
    rita = new_user("rita")
    sam = new_user("sam")
    new_user("rob", referred_by=rita.referral_code)
    new_user("ray", referred_by=sam.referral_code)

    report = reconcile_referrals(code=rita.referral_code.lower())

    assert report.checked == 1


def test_drift_is_reported_not_fixed(ctx, new_user):
    get_store("referral").update({"signupBonus": 10})
    referrer = new_user("rita")
    process_signup_referral(new_user("rob", with_code=False), referrer.referral_code)
    row = db.session.get(User, referrer.id)
    row.referral_earnings = Decimal("99")
    db.session.commit()

    report = reconcile_referrals()

    assert report.drift[0]["recorded"] == 99.0
    assert report.drift[0]["expected"] == 10.0
    assert earnings_drift(db.session.get(User, referrer.id)) == (Decimal("99.00"), Decimal("10.00"))


def test_drift_found_without_living_referee(ctx, new_user):
    referrer = new_user("rita", referral_earnings=Decimal("25"))

    report = reconcile_referrals()

    assert report.checked == 0
    assert report.drift[0]["referrerId"] == referrer.id
    assert report.drift[0]["expected"] == 0.0


def test_only_completed_transfers_count_as_withdrawn(ctx, new_user):
    rita = new_user("rita")
    for reference, status in (("RW-1", TransactionStatus.PENDING), ("RW-2", TransactionStatus.COMPLETED)):
        db.session.add(Transaction(
            amount=Decimal("40") if status is TransactionStatus.PENDING else Decimal("15"),
            wallet_provider="referral",
            transaction_id=reference,
            wallet_number="-",
            status=status.value,
            user_id=rita.id,
            transaction_type=TransactionType.TRANSFER.value,
        ))
    db.session.commit()

    assert withdrawn_total(rita.id) == Decimal("15")


class TestLedgerStaysBalanced:
    """Every path that touches referral money leaves reconcile with nothing to report."""

    @staticmethod
    def _signup(client, username, code):
        response = client.post("/api/users/signup", json={
            "username": username,
            "email": f"{username}@example.com",
            "password": "secret123",
            "referredBy": code,
        })
        assert response.status_code == 201, response.get_json()
        return response.get_json()["data"]["user"]["id"]

    def test_no_drift_after_every_money_path(self, client, app, admin, make_user, set_global_terms):
        set_global_terms(signupBonus=10, minWithdrawAmount=10)
        rita = make_user("rita")
        sam = make_user("sam")
        rob_id = self._signup(client, "rob", rita.referral_code)
        ray_id = self._signup(client, "ray", rita.referral_code)
        self._signup(client, "tom", sam.referral_code)

        assert client.post("/api/referral/withdraw", headers=rita.headers).status_code == 200
        una_id = self._signup(client, "una", rita.referral_code)

        with app.app_context():
            ledger = {row.referee_id: row.id for row in ReferralTransaction.query.all()}
        for referee_id, status in ((una_id, "pending"), (una_id, "approved"),
                                   (rob_id, "pending"), (rob_id, "paid")):
            response = client.put(f"/api/referral/transactions/{ledger[referee_id]}",
                                  json={"status": status}, headers=admin.headers)
            assert response.status_code == 200, response.get_json()

        assert client.delete(f"/api/users/{ray_id}", headers=admin.headers).status_code == 200
        assert client.delete(f"/api/users/{sam.id}", headers=admin.headers).status_code == 200

        deposit = client.post("/api/transactions", headers=rita.headers, json={
            "amount": 200, "wallet_provider": "bKash", "transaction_id": "TX-INV-1", "wallet_number": "01700000000",
        }).get_json()["data"]
        assert client.delete(f"/api/transactions/{deposit['id']}", headers=admin.headers).status_code == 200
        forged = client.post("/api/transactions", headers=rita.headers, json={
            "amount": 5000, "wallet_provider": "Referral", "transaction_id": "TX-INV-2",
            "wallet_number": "01700000000", "transaction_type": "Transfer",
        })
        assert forged.status_code == 400
        assert forged.get_json()["message"] == "This wallet provider is reserved"

        with app.app_context():
            transfer = Transaction.query.filter_by(wallet_provider="referral").one()
            transfer_id = transfer.id
        assert client.delete(f"/api/transactions/{transfer_id}", headers=admin.headers).status_code == 400
        assert client.put(f"/api/transactions/{transfer_id}/status", json={"status": "Cancelled"},
                          headers=admin.headers).status_code == 400

        with app.app_context():
            report = reconcile_referrals()
            assert report.drift == []
            assert report.created == []
            assert db.session.get(User, rita.id).referral_earnings == Decimal("10")
