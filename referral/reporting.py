# ==========================================================
#   Referral read models for users and the admin panel
# ==========================================================
from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from sqlalchemy import func
from extensions import db
from models import User, ReferralTransaction, ReferralTransactionStatus
from referral.resolution import effective_settings
from referral.settings import ReferralTerms, global_terms


def _sum_by_status(**filters):
    rows = db.session.query(
        ReferralTransaction.status,
        func.coalesce(func.sum(ReferralTransaction.amount), 0),
        func.count(ReferralTransaction.id),
    ).filter_by(**filters).group_by(ReferralTransaction.status).all()
    totals = {s.value: {"amount": 0.0, "count": 0} for s in ReferralTransactionStatus}
    for status, amount, count in rows:
        totals[status] = {"amount": float(amount or 0), "count": count}
    return totals


def referred_users_of(user):
    if not user.referral_code:
        return []
    return user.referred_users.order_by(User.created_at.desc()).all()


def referral_info(user):
    referred = referred_users_of(user)
    transactions = (ReferralTransaction.query
                    .filter_by(referrer_id=user.id)
                    .order_by(ReferralTransaction.created_at.desc())
                    .all())
    return {
        "referralCode": user.referral_code,
        "referredBy": user.referred_by,
        "referralEarnings": float(user.referral_earnings or 0),
        "referredUsers": [u.to_summary() for u in referred],
        "totalReferrals": len(referred),
        "transactions": [t.to_dict() for t in transactions],
    }


def user_transactions(user):
    return (ReferralTransaction.query
            .filter((ReferralTransaction.referrer_id == user.id) | (ReferralTransaction.referee_id == user.id))
            .order_by(ReferralTransaction.created_at.desc(), ReferralTransaction.id.desc())
            .all())


def user_stats(user):
    referred = referred_users_of(user)
    totals = _sum_by_status(referrer_id=user.id)
    recent = (ReferralTransaction.query
              .filter_by(referrer_id=user.id)
              .order_by(ReferralTransaction.created_at.desc(), ReferralTransaction.id.desc())
              .limit(10)
              .all())
    return {
        "referralCode": user.referral_code,
        "totalReferrals": len(referred),
        "totalEarnings": float(user.referral_earnings or 0),
        "pendingEarnings": totals["pending"]["amount"],
        "approvedEarnings": totals["approved"]["amount"],
        "referredUsers": [u.to_summary() for u in referred],
        "recentTransactions": [t.to_dict() for t in recent],
    }


def admin_summary():
    with_codes = User.query.filter(User.referral_code.isnot(None)).count()
    referred = User.query.filter(User.referred_by.isnot(None)).count()
    tx_count = ReferralTransaction.query.count()
    tx_amount = db.session.query(func.coalesce(func.sum(ReferralTransaction.amount), 0)).scalar()
    total_earnings = db.session.query(func.coalesce(func.sum(User.referral_earnings), 0)).scalar()
    return {
        "totalUsersWithCodes": with_codes,
        "totalReferredUsers": referred,
        "totalTransactions": tx_count,
        "totalTransactionAmount": float(tx_amount or 0),
        "totalOutstandingEarnings": float(total_earnings or 0),
    }


def admin_user_row(user):
    return {
        "user": user.to_summary(),
        "referralCode": user.referral_code,
        "referredBy": user.referred_by,
        "referralEarnings": float(user.referral_earnings or 0),
        "totalReferrals": user.referred_users.count() if user.referral_code else 0,
        "useGlobalSettings": bool(user.use_global_settings),
    }


def recent_transactions(limit=50):
    return (ReferralTransaction.query
            .order_by(ReferralTransaction.created_at.desc(), ReferralTransaction.id.desc())
            .limit(limit)
            .all())


def top_referrers(limit=10):
    counts = (db.session.query(User.referred_by, func.count(User.id).label("referrals"))
              .filter(User.referred_by.isnot(None))
              .group_by(User.referred_by)
              .order_by(func.count(User.id).desc())
              .limit(limit)
              .all())
    result = []
    for code, referrals in counts:
        owner = User.query.filter_by(referral_code=code).first()
        if owner is None:
            continue
        result.append({
            "user": owner.to_summary(),
            "referralCode": code,
            "totalReferrals": referrals,
            "referralEarnings": float(owner.referral_earnings or 0),
        })
    return result


def analytics(months=12, weeks=8):
    """Referral counts over time, ledger amounts by month and status, top referrers."""
    now = datetime.now(timezone.utc)

    monthly = OrderedDict()
    cursor = now.replace(day=1)
    for _ in range(months):
        monthly[cursor.strftime("%Y-%m")] = 0
        cursor = (cursor - timedelta(days=1)).replace(day=1)
    monthly = OrderedDict(reversed(list(monthly.items())))

    weekly = OrderedDict()
    for offset in range(weeks - 1, -1, -1):
        weekly[(now - timedelta(weeks=offset)).strftime("%G-W%V")] = 0

    month_start = datetime.strptime(next(iter(monthly)), "%Y-%m").replace(tzinfo=timezone.utc)
    since = min(month_start, now - timedelta(weeks=weeks))

    signups = (db.session.query(User.created_at)
               .filter(User.referred_by.isnot(None), User.created_at >= since)
               .all())
    for (created_at,) in signups:
        month_key = created_at.strftime("%Y-%m")
        week_key = created_at.strftime("%G-W%V")
        if month_key in monthly:
            monthly[month_key] += 1
        if week_key in weekly:
            weekly[week_key] += 1

    amounts = OrderedDict((key, {s.value: 0.0 for s in ReferralTransactionStatus}) for key in monthly)
    ledger = (db.session.query(ReferralTransaction.created_at, ReferralTransaction.status, ReferralTransaction.amount)
              .filter(ReferralTransaction.created_at >= month_start)
              .all())
    for created_at, status, amount in ledger:
        key = created_at.strftime("%Y-%m")
        if key in amounts:
            amounts[key][status] = amounts[key].get(status, 0.0) + float(amount or 0)

    return {
        "overview": {**admin_summary(), "byStatus": _sum_by_status()},
        "monthlyReferrals": [{"month": k, "count": v} for k, v in monthly.items()],
        "weeklyReferrals": [{"week": k, "count": v} for k, v in weekly.items()],
        "monthlyAmounts": [{"month": k, **v} for k, v in amounts.items()],
        "topReferrers": top_referrers(),
    }


def system_overview():
    individual = User.query.filter(User.use_global_settings.is_(False)).count()
    total_users = User.query.count()
    referrer_codes = (db.session.query(User.referred_by)
                      .filter(User.referred_by.isnot(None))
                      .distinct()
                      .count())
    return {
        "globalSettings": global_terms().to_dict(),
        "users": {
            "total": total_users,
            "usingIndividualSettings": individual,
            "usingGlobalSettings": total_users - individual,
            "activeReferrers": referrer_codes,
        },
        "ledger": _sum_by_status(),
        "summary": admin_summary(),
    }


def impact_analysis(user):
    """How this user's settings change what their referrals earn them."""
    gterms = global_terms()
    individual = ReferralTerms.from_user(user)
    active, source = effective_settings(user, gterms)
    referral_count = user.referred_users.count() if user.referral_code else 0

    differences = {}
    ind_values, glob_values = individual.to_dict(), gterms.to_dict()
    for field, value in ind_values.items():
        if value != glob_values[field]:
            differences[field] = {"individual": value, "global": glob_values[field]}

    signup_gap = individual.signup_bonus - gterms.signup_bonus
    return {
        "user": user.to_summary(),
        "referralCode": user.referral_code,
        "activeSource": source,
        "activeSettings": active.to_dict(),
        "individualSettings": user.individual_settings_dict(),
        "globalSettings": glob_values,
        "differences": differences,
        "totalReferrals": referral_count,
        "referralEarnings": float(user.referral_earnings or 0),
        "ledger": _sum_by_status(referrer_id=user.id),
        "projectedSignupBonusDifferencePerReferral": float(signup_gap),
        "projectedSignupBonusDifferenceForCurrentReferrals": float(signup_gap * Decimal(referral_count)),
    }
