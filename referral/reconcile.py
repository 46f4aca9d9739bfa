import logging
from dataclasses import dataclass, field
from decimal import Decimal
from sqlalchemy import func, or_
from extensions import db
from models import User, ReferralTransaction, ReferralTransactionStatus
from referral.processing import SIGNUP_KIND, credit_referrer, withdrawn_total
from referral.resolution import effective_settings
from referral.settings import global_terms


logger = logging.getLogger(__name__)


@dataclass
class ReconcileReport:
    dry_run: bool
    checked: int = 0
    already_credited: int = 0
    orphans: list = field(default_factory=list)
    created: list = field(default_factory=list)
    drift: list = field(default_factory=list)

    @property
    def writes(self):
        return 0 if self.dry_run else len(self.created)

    def to_dict(self):
        return {
            "dryRun": self.dry_run,
            "checked": self.checked,
            "alreadyCredited": self.already_credited,
            "orphans": self.orphans,
            "created": self.created,
            "drift": self.drift,
        }


def ledger_total(referrer_id):
    """Sum of approved and paid ledger amounts for a referrer."""
    total = db.session.query(func.coalesce(func.sum(ReferralTransaction.amount), 0)).filter(
        ReferralTransaction.referrer_id == referrer_id,
        ReferralTransaction.status.in_([
            ReferralTransactionStatus.APPROVED.value,
            ReferralTransactionStatus.PAID.value,
        ]),
    ).scalar()
    return Decimal(str(total))


def earnings_drift(referrer):
    """Recorded earnings minus what the ledger says they should be."""
    cents = Decimal("0.01")
    recorded = Decimal(str(referrer.referral_earnings or 0)).quantize(cents)
    expected = (ledger_total(referrer.id) - withdrawn_total(referrer.id)).quantize(cents)
    return recorded, expected


def _ledger_holders(code, extra_ids):
    """Referrers with ledger rows or recorded earnings, plus ``extra_ids``."""
    query = User.query.filter(or_(
        User.id.in_(db.session.query(ReferralTransaction.referrer_id)),
        User.referral_earnings != 0,
        User.id.in_(extra_ids),
    ))
    if code:
        query = query.filter(User.referral_code == code.strip().upper())
    return query.order_by(User.id).all()


def reconcile_referrals(code=None, dry_run=False):
    """
    Repair referred users whose signup bonus was never recorded.

    Users whose referrer no longer exists are reported as orphans and left
    untouched. Earnings drift is reported, never overwritten. Running twice
    in a row makes no writes the second time.
    """
    report = ReconcileReport(dry_run=dry_run)

    query = db.session.query(User.id, User.referred_by).filter(User.referred_by.isnot(None))
    if code:
        query = query.filter(User.referred_by == code.strip().upper())
    referees = query.order_by(User.id).all()

    terms = global_terms()
    referrers = {}
    touched = []

    for referee_id, referred_by in referees:
        report.checked += 1

        if referred_by not in referrers:
            referrers[referred_by] = User.query.filter_by(referral_code=referred_by).first()
        referrer = referrers[referred_by]
        if referrer is None:
            report.orphans.append({"userId": referee_id, "referredBy": referred_by})
            continue

        referrer_id = referrer.id
        if referrer_id not in touched:
            touched.append(referrer_id)

        credited = db.session.query(ReferralTransaction.id).filter_by(
            referee_id=referee_id, kind=SIGNUP_KIND
        ).first()
        if credited:
            report.already_credited += 1
            continue

        resolved, source = effective_settings(referrer, terms)
        amount = resolved.signup_bonus
        if amount <= 0:
            continue

        entry = {
            "refereeId": referee_id,
            "referrerId": referrer_id,
            "amount": float(amount),
            "source": source,
        }
        if not dry_run:
            tx_id = credit_referrer(referrer_id, referee_id, amount)
            if tx_id is None:
                report.already_credited += 1
                continue
            entry["transactionId"] = tx_id
            logger.info(f"Reconciled signup bonus for user {referee_id} -> referrer {referrer_id}")
        report.created.append(entry)

    for referrer in _ledger_holders(code, touched):
        referrer_id = referrer.id
        recorded, expected = earnings_drift(referrer)
        if recorded != expected:
            report.drift.append({
                "referrerId": referrer_id,
                "referralCode": referrer.referral_code,
                "recorded": float(recorded),
                "expected": float(expected),
                "difference": float(recorded - expected),
            })

    if report.orphans or report.drift:
        logger.warning(
            f"Referral reconciliation found {len(report.orphans)} orphans and {len(report.drift)} drifting referrers"
        )
    return report
