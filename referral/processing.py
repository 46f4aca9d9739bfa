# ==========================================================
#   Referral credit: signup bonus and earnings withdrawal
# ==========================================================
import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from sqlalchemy import update, func
from sqlalchemy.exc import IntegrityError
from extensions import db
from logger import referral_logger
from models import (User, ReferralTransaction, ReferralTransactionStatus, Transaction,
                    TransactionStatus, TransactionType)
from referral.errors import InsufficientEarningsError, ReferralError, SelfReferralError
from referral.resolution import effective_settings, terms_for_user
from referral.settings import global_terms


REFERRAL_WALLET_PROVIDER = "referral"
SIGNUP_KIND = "signup"


@dataclass
class BonusOutcome:
    granted: bool
    amount: Decimal
    referrer_id: int
    source: str
    transaction_id: Optional[int] = None
    reason: Optional[str] = None

    def to_dict(self):
        return {
            "granted": self.granted,
            "amount": float(self.amount),
            "referrerId": self.referrer_id,
            "source": self.source,
            "transactionId": self.transaction_id,
            "reason": self.reason,
        }


@dataclass
class BonusError:
    reason: str
    detail: str = ""

    def to_dict(self):
        return {"granted": False, "reason": self.reason, "detail": self.detail}


def credit_referrer(referrer_id, referee_id, amount, kind=SIGNUP_KIND):
    """
    Insert an approved ledger row and bump the referrer's earnings in one
    transaction. Returns the ledger id, or None if the referee was already
    credited for this kind.
    """
    tx = ReferralTransaction(
        referrer_id=referrer_id,
        referee_id=referee_id,
        amount=amount,
        status=ReferralTransactionStatus.APPROVED.value,
        kind=kind,
    )
    try:
        db.session.add(tx)
        db.session.flush()
        db.session.execute(
            update(User)
            .where(User.id == referrer_id)
            .values(referral_earnings=User.referral_earnings + amount),
            execution_options={"synchronize_session": False},
        )
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        referral_logger.info(f"Referee {referee_id} already credited for {kind}")
        return None
    return tx.id


def process_signup_referral(new_user, code):
    """
    Attach ``new_user`` to the owner of ``code`` and pay the signup bonus.

    Runs after the user row is committed and never raises: every failure
    comes back as a BonusError and is logged.
    """
    code = (code or "").strip().upper()
    user_id = new_user.id
    try:
        referrer = User.query.filter_by(referral_code=code).first()
        if referrer is None:
            referral_logger.info(f"Signup for user {user_id} used unknown referral code {code!r}")
            return BonusError("invalid_code", f"No user owns referral code {code}")
        if referrer.id == user_id:
            raise SelfReferralError("Users cannot refer themselves")

        new_user.referred_by = referrer.referral_code
        db.session.commit()

        terms, source = effective_settings(referrer, global_terms())
        amount = terms.signup_bonus
        if amount <= 0:
            return BonusOutcome(False, Decimal("0"), referrer.id, source, reason="no_bonus")

        referrer_id = referrer.id
        tx_id = credit_referrer(referrer_id, user_id, amount)
        if tx_id is None:
            return BonusOutcome(False, Decimal("0"), referrer_id, source, reason="already_credited")

        referral_logger.info(
            f"Credited referrer {referrer_id} with {amount} ({source}) for signup of user {user_id}"
        )
        return BonusOutcome(True, amount, referrer_id, source, transaction_id=tx_id)

    except SelfReferralError as e:
        return BonusError("self_referral", str(e))
    except Exception as e:
        db.session.rollback()
        referral_logger.error(f"Referral processing failed for user {user_id}: {e}", exc_info=True)
        return BonusError("processing_failed", str(e))


def _withdrawal_reference():
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    suffix = ''.join(secrets.choice(string.ascii_uppercase + string.digits) for _ in range(4))
    return f"RW{stamp}{suffix}"


def withdrawn_total(user_id):
    """Total referral earnings already moved into the user's balance (Completed transfers only)."""
    total = db.session.query(func.coalesce(func.sum(Transaction.amount), 0)).filter(
        Transaction.user_id == user_id,
        Transaction.wallet_provider == REFERRAL_WALLET_PROVIDER,
        Transaction.transaction_type == TransactionType.TRANSFER.value,
        Transaction.status == TransactionStatus.COMPLETED.value,
    ).scalar()
    return Decimal(str(total))


def withdraw_referral_earnings(user):
    """
    Move the user's referral earnings into their main balance.

    Requires earnings >= the effective minimum withdraw amount. Approved
    ledger rows become paid. Returns the amount moved.
    """
    terms, _source = terms_for_user(user)
    earnings = Decimal(str(user.referral_earnings or 0))
    if earnings < terms.min_withdraw_amount:
        raise InsufficientEarningsError(
            f"Minimum withdrawal amount is {terms.min_withdraw_amount}", terms.min_withdraw_amount
        )

    user_id = user.id
    try:
        result = db.session.execute(
            update(User)
            .where(User.id == user_id, User.referral_earnings >= earnings)
            .values(
                balance=User.balance + earnings,
                referral_earnings=User.referral_earnings - earnings,
            ),
            execution_options={"synchronize_session": False},
        )
        if result.rowcount != 1:
            raise ReferralError("Referral earnings changed, please retry")

        ReferralTransaction.query.filter_by(
            referrer_id=user_id, status=ReferralTransactionStatus.APPROVED.value
        ).update({"status": ReferralTransactionStatus.PAID.value}, synchronize_session=False)

        db.session.add(Transaction(
            amount=earnings,
            wallet_provider=REFERRAL_WALLET_PROVIDER,
            transaction_id=_withdrawal_reference(),
            wallet_number="-",
            status=TransactionStatus.COMPLETED.value,
            user_id=user_id,
            transaction_type=TransactionType.TRANSFER.value,
            description="Referral earnings moved to balance",
        ))
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    referral_logger.info(f"User {user_id} withdrew {earnings} referral earnings to balance")
    return earnings
