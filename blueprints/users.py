#======================================================================================
#
# ADMIN USER MANAGEMENT
#
#=======================================================================================
from flask import Blueprint, abort, request
from flask_login import current_user, login_required
from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError
import logging
from extensions import db
from models import User, UserStatus, ReferralTransaction, Transaction
from blueprints.auth import validate_profile_fields, duplicate_field_message
from blueprints.auth_helpers import admin_required
from utils import (validate_email, clean_text, parse_amount, get_pagination, paginate_query,
                   success_response, error_response, server_error)


logger = logging.getLogger(__name__)

users_bp = Blueprint("users", __name__, url_prefix="/api/users")

TEXT_FIELDS = {
    "name": "name",
    "username": "username",
    "country": "country",
    "currency": "currency",
    "phoneNumber": "phone_number",
    "player_id": "player_id",
    "promoCode": "promo_code",
    "birthday": "birthday",
    "bonusSelection": "bonus_selection",
    "profileImage": "profile_image",
}
MONEY_FIELDS = {"balance": "balance", "deposit": "deposit", "withdraw": "withdraw"}
ROLES = ("user", "admin")


def _referrer_info(user):
    if not user.referred_by:
        return None
    referrer = user.referrer
    if referrer is None:
        return None
    return {
        "name": referrer.name,
        "email": referrer.email,
        "username": referrer.username,
        "referralCode": referrer.referral_code,
    }


@users_bp.route("", methods=["GET"])
@admin_required
def list_users():
    try:
        page, limit = get_pagination()
        query = User.query

        status = request.args.get("status")
        if status:
            query = query.filter(User.status == status)
        role = request.args.get("role")
        if role:
            query = query.filter(User.role == role)
        if request.args.get("isVerified") is not None:
            query = query.filter(User.is_verified.is_(request.args.get("isVerified") == "true"))
        search = (request.args.get("search") or "").strip()
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                User.name.ilike(pattern),
                User.username.ilike(pattern),
                User.email.ilike(pattern),
                User.player_id.ilike(pattern),
                User.country.ilike(pattern),
            ))

        users, pagination = paginate_query(query.order_by(User.created_at.desc(), User.id.desc()), page, limit)
        pagination.update({
            "hasNextPage": page < pagination["totalPages"],
            "hasPrevPage": page > 1,
        })

        include_referrals = request.args.get("includeReferrals") == "true"
        items = []
        for user in users:
            item = user.to_dict()
            if include_referrals:
                item["referrerInfo"] = _referrer_info(user)
                item["referredUsers"] = [u.to_summary() for u in user.referred_users] if user.referral_code else []
            items.append(item)

        return success_response({"users": items, "pagination": pagination})
    except Exception as e:
        logger.error(f"List users error: {e}", exc_info=True)
        return server_error(e)


@users_bp.route("/<int:user_id>", methods=["GET"])
@login_required
def get_user(user_id):
    if current_user.id != user_id and not current_user.is_admin:
        abort(403, description="Access denied")
    user = db.session.get(User, user_id)
    if user is None:
        return error_response("User not found", 404)
    return success_response({"user": user.to_dict()})


def validate_user_update(data):
    errors = validate_profile_fields(data)
    if "email" in data:
        email = data.get("email")
        if not isinstance(email, str) or not validate_email(email.strip()):
            errors.append("Please provide a valid email address")
    if "username" in data:
        username = data.get("username")
        if not isinstance(username, str) or not 1 <= len(username.strip()) <= 100:
            errors.append("Username must be between 1 and 100 characters")
    if "status" in data and data["status"] not in [s.value for s in UserStatus]:
        errors.append("Status must be 'active', 'banned', or 'deactivated'")
    if "role" in data and data["role"] not in ROLES:
        errors.append("Role must be 'user' or 'admin'")
    if "isVerified" in data and not isinstance(data["isVerified"], bool):
        errors.append("isVerified must be a boolean value")
    for field in MONEY_FIELDS:
        if field in data:
            amount = parse_amount(data[field])
            if amount is None:
                errors.append(f"{field.capitalize()} must be a number")
            elif amount < 0:
                errors.append(f"{field.capitalize()} cannot be negative")
    return errors


@users_bp.route("/<int:user_id>", methods=["PUT"])
@admin_required
def update_user(user_id):
    data = request.get_json(silent=True) or {}
    errors = validate_user_update(data)
    if errors:
        return error_response("Validation failed", 400, errors)

    user = db.session.get(User, user_id)
    if user is None:
        return error_response("User not found", 404)

    try:
        for field, attr in TEXT_FIELDS.items():
            if field in data:
                setattr(user, attr, clean_text(data, field) or "")
        if "email" in data:
            user.email = data["email"].strip().lower()
        if "status" in data:
            user.status = data["status"]
        if "role" in data:
            user.role = data["role"]
        if "isVerified" in data:
            user.is_verified = data["isVerified"]
        for field, attr in MONEY_FIELDS.items():
            if field in data:
                setattr(user, attr, parse_amount(data[field]))

        db.session.commit()
        logger.info(f"Admin {current_user.id} updated user {user_id}")
        return success_response({"user": user.to_dict()}, "User updated successfully")
    except IntegrityError as e:
        db.session.rollback()
        return error_response(duplicate_field_message(e), 400)
    except Exception as e:
        db.session.rollback()
        logger.error(f"Update user error: {e}", exc_info=True)
        return server_error(e)


@users_bp.route("/<int:user_id>", methods=["DELETE"])
@admin_required
def delete_user(user_id):
    if current_user.id == user_id:
        return error_response("You cannot delete your own account", 400)

    user = db.session.get(User, user_id)
    if user is None:
        return error_response("User not found", 404)

    try:
        # Credits earned from this user stay with their referrers
        ReferralTransaction.query.filter_by(referee_id=user_id).update(
            {"referee_id": None}, synchronize_session=False
        )
        ReferralTransaction.query.filter_by(referrer_id=user_id).delete(synchronize_session=False)
        Transaction.query.filter_by(user_id=user_id).update({"user_id": None}, synchronize_session=False)
        db.session.delete(user)
        db.session.commit()
        logger.info(f"Admin {current_user.id} deleted user {user_id}")
        return success_response(message="User deleted successfully")
    except Exception as e:
        db.session.rollback()
        logger.error(f"Delete user error: {e}", exc_info=True)
        return server_error(e)


@users_bp.route("/balance/<int:user_id>", methods=["PUT"])
@admin_required
def update_user_balance(user_id):
    """Manual deposit or withdraw by an admin, applied as a SQL-side increment."""
    data = request.get_json(silent=True) or {}
    amount = data.get("amount")
    kind = data.get("type")

    if isinstance(amount, bool) or not isinstance(amount, (int, float)) or amount <= 0:
        return error_response("Valid amount is required", 400)
    if kind not in ("deposit", "withdraw"):
        return error_response('Type must be either "deposit" or "withdraw"', 400)

    user = db.session.get(User, user_id)
    if user is None:
        return error_response("User not found", 404)

    value = parse_amount(amount)
    try:
        stmt = update(User).where(User.id == user_id)
        if kind == "deposit":
            stmt = stmt.values(balance=User.balance + value, deposit=User.deposit + value)
        else:
            stmt = stmt.where(User.balance >= value).values(
                balance=User.balance - value, withdraw=User.withdraw + value
            )
        result = db.session.execute(stmt, execution_options={"synchronize_session": False})
        if result.rowcount != 1:
            db.session.rollback()
            return error_response("Insufficient balance", 400)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"Update balance error: {e}", exc_info=True)
        return server_error(e)

    db.session.refresh(user)
    logger.info(f"Admin {current_user.id} applied {kind} of {value} to user {user_id}")
    return success_response({
        "userId": user.id,
        "email": user.email,
        "type": kind,
        "amount": float(value),
        "description": data.get("description") or "",
        "balance": float(user.balance),
        "totalDeposit": float(user.deposit),
        "totalWithdraw": float(user.withdraw),
    }, "Deposit successful" if kind == "deposit" else "Withdrawal successful")
