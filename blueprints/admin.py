#======================================================================================
#
# ADMIN DASHBOARD STATS
#
#=======================================================================================
from flask import Blueprint
from flask_login import login_required, current_user
from datetime import datetime, timezone
from sqlalchemy import func
import logging
from extensions import db
from models import (User, UserStatus, Transaction, TransactionStatus, TransactionType,
                    PaymentMethod, WithdrawalMethod, Promotion, Slider, TopWinner)
from referral.processing import withdrawn_total
from referral.reporting import admin_summary, user_stats
from blueprints.auth_helpers import admin_required
from utils import success_response, server_error

logger = logging.getLogger(__name__)

admin_bp = Blueprint("admin", __name__, url_prefix="/api/stats")


def _sum(column, *criteria):
    return float(db.session.query(func.coalesce(func.sum(column), 0)).filter(*criteria).scalar() or 0)


def _count_by(column, values, *criteria):
    rows = (db.session.query(column, func.count(Transaction.id), func.coalesce(func.sum(Transaction.amount), 0))
            .filter(*criteria)
            .group_by(column)
            .all())
    totals = {value: {"count": 0, "amount": 0.0} for value in values}
    for key, count, amount in rows:
        totals[key] = {"count": count, "amount": float(amount or 0)}
    return totals


@admin_bp.route("/admin", methods=["GET"])
@admin_required
def admin_stats():
    try:
        now = datetime.now(timezone.utc)
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        month = today.replace(day=1)

        users = {
            "total": User.query.count(),
            "active": User.query.filter_by(status=UserStatus.ACTIVE.value).count(),
            "banned": User.query.filter_by(status=UserStatus.BANNED.value).count(),
            "verified": User.query.filter_by(is_verified=True).count(),
            "today": User.query.filter(User.created_at >= today).count(),
            "thisMonth": User.query.filter(User.created_at >= month).count(),
        }
        balances = {
            "totalBalance": _sum(User.balance),
            "totalDeposit": _sum(User.deposit),
            "totalWithdraw": _sum(User.withdraw),
        }
        transactions = {
            "total": Transaction.query.count(),
            "byStatus": _count_by(Transaction.status, [s.value for s in TransactionStatus]),
            "byType": _count_by(Transaction.transaction_type, [t.value for t in TransactionType]),
            "depositsToday": _sum(Transaction.amount,
                                  Transaction.transaction_type == TransactionType.DEPOSIT.value,
                                  Transaction.status == TransactionStatus.COMPLETED.value,
                                  Transaction.created_at >= today),
            "pendingWithdrawals": Transaction.query.filter_by(
                transaction_type=TransactionType.WITHDRAWAL.value,
                status=TransactionStatus.PENDING.value).count(),
        }
        content = {
            "paymentMethods": PaymentMethod.query.count(),
            "withdrawalMethods": WithdrawalMethod.query.count(),
            "activePromotions": Promotion.query.filter_by(status="Active").count(),
            "activeSliders": Slider.query.filter_by(status="active").count(),
            "topWinners": TopWinner.query.count(),
        }
        return success_response({
            "users": users,
            "balances": balances,
            "transactions": transactions,
            "referrals": admin_summary(),
            "content": content,
            "generatedAt": now.isoformat(),
        })
    except Exception as e:
        logger.error(f"Admin stats error: {e}", exc_info=True)
        return server_error(e)


@admin_bp.route("/user", methods=["GET"])
@login_required
def my_stats():
    """Transaction and referral summary for the caller."""
    try:
        user = current_user._get_current_object()
        mine = Transaction.user_id == user.id
        return success_response({
            "balance": float(user.balance or 0),
            "deposit": float(user.deposit or 0),
            "withdraw": float(user.withdraw or 0),
            "transactions": {
                "total": Transaction.query.filter(mine).count(),
                "byStatus": _count_by(Transaction.status, [s.value for s in TransactionStatus], mine),
                "byType": _count_by(Transaction.transaction_type, [t.value for t in TransactionType], mine),
            },
            "referral": {
                **user_stats(user),
                "withdrawnEarnings": float(withdrawn_total(user.id)),
            },
        })
    except Exception as e:
        logger.error(f"User stats error: {e}", exc_info=True)
        return server_error(e)
