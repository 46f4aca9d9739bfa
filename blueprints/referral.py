#============================================================================================================
#
#     ----------------------------REFERRAL SYSTEM ROUTES-------------------------------------------
#
#============================================================================================================
from flask import Blueprint, abort, current_app, request
from flask_login import current_user, login_required
from sqlalchemy import or_, update
import logging
from extensions import db
from models import User, ReferralTransaction, ReferralTransactionStatus
from referral import reporting
from referral.codes import assign_referral_code
from referral.errors import InsufficientEarningsError, ReferralError
from referral.processing import withdraw_referral_earnings
from referral.reconcile import reconcile_referrals
from referral.resolution import effective_settings, login_projection
from referral.settings import global_terms, validate_terms
from stores import SettingsValidationError, get_store
from blueprints.auth_helpers import admin_required
from utils import get_pagination, paginate_query, success_response, error_response, server_error


logger = logging.getLogger(__name__)

referral_bp = Blueprint("referral", __name__, url_prefix="/api/referral")

COUNTED_STATUSES = (ReferralTransactionStatus.APPROVED.value, ReferralTransactionStatus.PAID.value)


def share_url(code):
    return f"{current_app.config['FRONTEND_URL'].rstrip('/')}/signup?ref={code}"


def _get_user_or_404(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        abort(404, description="User not found")
    return user


#=====================================================================
#      GLOBAL SETTINGS
#=====================================================================
@referral_bp.route("/settings", methods=["GET"])
def get_settings():
    try:
        return success_response(get_store("referral").get())
    except Exception as e:
        logger.error(f"Get referral settings error: {e}", exc_info=True)
        return server_error(e)


@referral_bp.route("/settings", methods=["PUT"])
@admin_required
def update_settings():
    data = request.get_json(silent=True)
    try:
        settings = get_store("referral").update(data)
        logger.info(f"Admin {current_user.id} updated global referral settings")
        return success_response(settings, "Referral settings updated successfully")
    except SettingsValidationError as e:
        return error_response("Validation failed", 400, e.errors)
    except Exception as e:
        db.session.rollback()
        logger.error(f"Update referral settings error: {e}", exc_info=True)
        return server_error(e)


@referral_bp.route("/admin/settings", methods=["GET"])
@admin_required
def admin_settings():
    total = User.query.count()
    individual = User.query.filter(User.use_global_settings.is_(False)).count()
    return success_response({
        "settings": get_store("referral").get(),
        "usage": {
            "totalUsers": total,
            "usersUsingGlobalSettings": total - individual,
            "usersUsingIndividualSettings": individual,
            "usersWithReferralCodes": User.query.filter(User.referral_code.isnot(None)).count(),
        },
    })


#=====================================================================
#      PER-USER (INDIVIDUAL) SETTINGS
#=====================================================================
def _user_settings_payload(user):
    terms, source = effective_settings(user, global_terms())
    return {
        "user": user.to_summary(),
        "referralCode": user.referral_code,
        "individualSettings": user.individual_settings_dict(),
        "globalSettings": get_store("referral").get(),
        "effectiveSettings": terms.to_dict(),
        "source": source,
    }


@referral_bp.route("/user-settings/<int:user_id>", methods=["GET"])
@admin_required
def get_user_settings(user_id):
    return success_response(_user_settings_payload(_get_user_or_404(user_id)))


@referral_bp.route("/user-settings/<int:user_id>", methods=["PUT"])
@referral_bp.route("/admin/user-settings/<int:user_id>", methods=["PUT"])
@admin_required
def update_user_settings(user_id):
    user = _get_user_or_404(user_id)
    try:
        changes = validate_terms(request.get_json(silent=True), individual=True)
    except SettingsValidationError as e:
        return error_response("Validation failed", 400, e.errors)

    try:
        for attr, value in changes.items():
            setattr(user, attr, value)
        db.session.commit()
        logger.info(f"Admin {current_user.id} updated referral settings of user {user_id}: {sorted(changes)}")
        return success_response(_user_settings_payload(user), "User referral settings updated successfully")
    except Exception as e:
        db.session.rollback()
        logger.error(f"Update user referral settings error: {e}", exc_info=True)
        return server_error(e)


@referral_bp.route("/all-users-settings", methods=["GET"])
@admin_required
def all_users_settings():
    page, limit = get_pagination(default_limit=20)
    query = User.query
    search = (request.args.get("search") or "").strip()
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(User.name.ilike(pattern), User.email.ilike(pattern),
                                 User.username.ilike(pattern), User.referral_code.ilike(pattern)))
    if request.args.get("individualOnly") == "true":
        query = query.filter(User.use_global_settings.is_(False))

    users, pagination = paginate_query(query.order_by(User.id), page, limit)
    return success_response({
        "users": [
            {
                "user": u.to_summary(),
                "referralCode": u.referral_code,
                "referralEarnings": float(u.referral_earnings or 0),
                "individualSettings": u.individual_settings_dict(),
            }
            for u in users
        ],
        "globalSettings": get_store("referral").get(),
        "pagination": pagination,
    })


#=====================================================================
#      CODES
#=====================================================================
@referral_bp.route("/generate-code", methods=["POST"])
@login_required
def generate_code():
    try:
        code = assign_referral_code(current_user._get_current_object())
        return success_response({"referralCode": code, "shareUrl": share_url(code)},
                                "Referral code ready")
    except ReferralError as e:
        return error_response(str(e), 500)
    except Exception as e:
        db.session.rollback()
        logger.error(f"Generate referral code error: {e}", exc_info=True)
        return server_error(e)


@referral_bp.route("/validate-code/<code>", methods=["GET"])
def validate_code(code):
    referrer = User.query.filter_by(referral_code=code.strip().upper()).first()
    if referrer is None:
        return error_response("Invalid referral code", 404)
    return success_response({
        "valid": True,
        "referralCode": referrer.referral_code,
        "referrerName": referrer.name or referrer.username,
    }, "Valid referral code")


#=====================================================================
#      USER-FACING READS
#=====================================================================
@referral_bp.route("/info", methods=["GET"])
@login_required
def referral_info():
    return success_response(reporting.referral_info(current_user))


@referral_bp.route("/transactions", methods=["GET"])
@login_required
def my_transactions():
    transactions = reporting.user_transactions(current_user)
    return success_response([t.to_dict() for t in transactions])


@referral_bp.route("/stats", methods=["GET"])
@login_required
def my_stats():
    return success_response(reporting.user_stats(current_user))


@referral_bp.route("/users-by-code/<code>", methods=["GET"])
@login_required
def users_by_code(code):
    code = code.strip().upper()
    if current_user.referral_code != code and not current_user.is_admin:
        abort(403, description="Access denied")
    users = User.query.filter_by(referred_by=code).order_by(User.created_at.desc()).all()
    return success_response({
        "referralCode": code,
        "users": [u.to_summary() for u in users],
        "total": len(users),
    })


@referral_bp.route("/withdraw", methods=["POST"])
@login_required
def withdraw():
    try:
        amount = withdraw_referral_earnings(current_user._get_current_object())
    except InsufficientEarningsError as e:
        return error_response(str(e), 400)
    except ReferralError as e:
        return error_response(str(e), 409)
    except Exception as e:
        logger.error(f"Referral withdraw error: {e}", exc_info=True)
        return server_error(e)

    return success_response({
        "withdrawnAmount": float(amount),
        "referralEarnings": float(current_user.referral_earnings or 0),
        "balance": float(current_user.balance or 0),
    }, "Referral earnings moved to your balance")


#=====================================================================
#      DIAGNOSTICS & RECONCILIATION (ADMIN)
#=====================================================================
@referral_bp.route("/test-login", methods=["POST"])
@admin_required
def test_login():
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    if not isinstance(email, str) or not email.strip():
        return error_response("Email is required", 400)

    user = User.query.filter_by(email=email.strip().lower()).first()
    if user is None:
        return error_response("User not found", 404)
    return success_response({
        "user": user.to_summary(),
        "referralCode": user.referral_code,
        "referredBy": user.referred_by,
        "referralSettings": login_projection(user),
    })


@referral_bp.route("/fix-relationships", methods=["POST"])
@admin_required
def fix_relationships():
    data = request.get_json(silent=True) or {}
    code = data.get("referralCode")
    dry_run = data.get("dryRun", False)
    if code is not None and not isinstance(code, str):
        return error_response("referralCode must be a string", 400)
    if not isinstance(dry_run, bool):
        return error_response("dryRun must be a boolean", 400)

    try:
        report = reconcile_referrals(code=code, dry_run=dry_run)
        logger.info(f"Admin {current_user.id} ran referral reconciliation (dry_run={dry_run}, code={code})")
        return success_response(report.to_dict(), "Referral relationships checked")
    except Exception as e:
        db.session.rollback()
        logger.error(f"Referral reconciliation error: {e}", exc_info=True)
        return server_error(e)


@referral_bp.route("/debug", methods=["GET"])
@admin_required
def debug():
    code = request.args.get("referralCode")
    report = reconcile_referrals(code=code, dry_run=True)
    return success_response({"report": report.to_dict(), "summary": reporting.admin_summary()})


#=====================================================================
#      ADMIN REPORTING
#=====================================================================
@referral_bp.route("/admin/all", methods=["GET"])
@admin_required
def admin_all():
    page, limit = get_pagination(default_limit=20)
    query = User.query.filter(User.referral_code.isnot(None)).order_by(User.created_at.desc(), User.id.desc())
    users, pagination = paginate_query(query, page, limit)
    return success_response({
        "users": [reporting.admin_user_row(u) for u in users],
        "recentTransactions": [t.to_dict() for t in reporting.recent_transactions(50)],
        "summary": reporting.admin_summary(),
        "pagination": pagination,
    })


@referral_bp.route("/analytics", methods=["GET"])
@admin_required
def analytics():
    try:
        return success_response(reporting.analytics())
    except Exception as e:
        logger.error(f"Referral analytics error: {e}", exc_info=True)
        return server_error(e)


@referral_bp.route("/admin/system-overview", methods=["GET"])
@admin_required
def system_overview():
    return success_response(reporting.system_overview())


@referral_bp.route("/admin/impact-analysis/<int:user_id>", methods=["GET"])
@admin_required
def impact_analysis(user_id):
    return success_response(reporting.impact_analysis(_get_user_or_404(user_id)))


@referral_bp.route("/transactions/<int:transaction_id>", methods=["PUT"])
@admin_required
def update_transaction_status(transaction_id):
    """
    Change a ledger row's status. Moving between pending and approved/paid
    adjusts the referrer's earnings in the same commit.
    """
    data = request.get_json(silent=True) or {}
    status = data.get("status")
    if status not in [s.value for s in ReferralTransactionStatus]:
        return error_response("Status must be 'pending', 'approved', or 'paid'", 400)

    tx = db.session.get(ReferralTransaction, transaction_id)
    if tx is None:
        return error_response("Referral transaction not found", 404)

    was_counted = tx.status in COUNTED_STATUSES
    now_counted = status in COUNTED_STATUSES
    try:
        if was_counted != now_counted:
            stmt = update(User).where(User.id == tx.referrer_id)
            if now_counted:
                stmt = stmt.values(referral_earnings=User.referral_earnings + tx.amount)
            else:
                stmt = stmt.where(User.referral_earnings >= tx.amount).values(
                    referral_earnings=User.referral_earnings - tx.amount
                )
            result = db.session.execute(stmt, execution_options={"synchronize_session": False})
            if result.rowcount != 1:
                db.session.rollback()
                return error_response("Referral earnings were already withdrawn", 400)

        tx.status = status
        db.session.commit()
        logger.info(f"Admin {current_user.id} set referral transaction {transaction_id} to {status}")
        return success_response(tx.to_dict(), "Referral transaction updated")
    except Exception as e:
        db.session.rollback()
        logger.error(f"Update referral transaction error: {e}", exc_info=True)
        return server_error(e)
