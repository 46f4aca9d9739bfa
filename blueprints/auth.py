from flask import Blueprint, current_app, request
from flask_login import current_user, login_required
from sqlalchemy.exc import IntegrityError
import logging
import secrets
import string
import time
from extensions import db
from models import User
from referral.codes import assign_referral_code
from referral.processing import process_signup_referral
from referral.resolution import login_projection
from blueprints.auth_helpers import generate_token
from utils import validate_email, validate_phone, clean_text, success_response, error_response, server_error


logger = logging.getLogger(__name__)
#==================================================================================================================

bp = Blueprint("auth", __name__, url_prefix="/api/users")

PROFILE_FIELDS = {
    "name": "name",
    "country": "country",
    "currency": "currency",
    "phoneNumber": "phone_number",
    "birthday": "birthday",
    "bonusSelection": "bonus_selection",
    "profileImage": "profile_image",
}


def generate_player_id():
    stamp = str(int(time.time() * 1000))
    suffix = ''.join(secrets.choice(string.ascii_uppercase + string.digits) for _ in range(6))
    return f"P{stamp}{suffix}"


def validate_signup(data):
    errors = []
    username = clean_text(data, "username")
    if not username:
        errors.append("Username is required")
    elif not isinstance(username, str) or len(username) > 100:
        errors.append("Username must be between 1 and 100 characters")

    email = clean_text(data, "email")
    if not email:
        errors.append("Email is required")
    elif not isinstance(email, str) or not validate_email(email):
        errors.append("Please provide a valid email address")

    password = data.get("password")
    if not password:
        errors.append("Password is required")
    elif not isinstance(password, str) or len(password) < 6:
        errors.append("Password must be at least 6 characters")

    errors.extend(validate_profile_fields(data))
    return errors


def validate_profile_fields(data):
    errors = []
    for key in ("country", "currency", "phoneNumber", "name", "birthday", "bonusSelection", "profileImage"):
        if data.get(key) is not None and not isinstance(data.get(key), str):
            errors.append(f"{key} must be a string")
    if errors:
        return errors

    country = clean_text(data, "country")
    if country and not 2 <= len(country) <= 100:
        errors.append("Country must be between 2 and 100 characters")
    currency = clean_text(data, "currency")
    if currency and not 2 <= len(currency) <= 10:
        errors.append("Currency must be between 2 and 10 characters")
    phone = clean_text(data, "phoneNumber")
    if phone and not validate_phone(phone):
        errors.append("Please provide a valid phone number")
    name = clean_text(data, "name")
    if name and len(name) > 100:
        errors.append("Name cannot exceed 100 characters")
    return errors


def duplicate_field_message(exc):
    detail = str(getattr(exc, "orig", exc)).lower()
    for field in ("email", "username", "referral_code"):
        if field in detail:
            label = field.replace("_", " ").capitalize()
            return f"{label} is already registered"
    return "Account is already registered"


#===========================================================================
#      SIGN UP ROUTE.
#==============================================================================
@bp.route("/signup", methods=["POST"])
def signup():
    """
    Create a new user. The account is committed first; the referral code
    and referrer credit are handled afterwards and never fail the signup.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return error_response("Invalid or missing JSON body", 400)

    errors = validate_signup(data)
    if errors:
        return error_response("Validation failed", 400, errors)

    username = clean_text(data, "username")
    email = clean_text(data, "email").lower()
    referred_by = clean_text(data, "referredBy")

    try:
        if User.query.filter_by(email=email).first():
            return error_response("Email is already registered", 400)
        if User.query.filter_by(username=username).first():
            return error_response("Username is already registered", 400)

        user = User(
            name=username,
            username=username,
            email=email,
            country=clean_text(data, "country") or current_app.config["DEFAULT_COUNTRY"],
            currency=clean_text(data, "currency") or current_app.config["DEFAULT_CURRENCY"],
            phone_number=clean_text(data, "phoneNumber") or None,
            player_id=clean_text(data, "player_id") or generate_player_id(),
            promo_code=clean_text(data, "promoCode") or None,
            bonus_selection=clean_text(data, "bonusSelection") or "",
            birthday=clean_text(data, "birthday") or "",
        )
        user.set_password(data["password"])
        db.session.add(user)
        db.session.commit()
        current_app.logger.info(f"Registered user {user.id} ({email})")

    except IntegrityError as e:
        db.session.rollback()
        return error_response(duplicate_field_message(e), 400)
    except Exception as e:
        db.session.rollback()
        logger.error(f"Signup error: {e}", exc_info=True)
        return server_error(e, "Server error during registration")

    try:
        assign_referral_code(user)
    except Exception as e:
        db.session.rollback()
        logger.error(f"Referral code generation failed for user {user.id}: {e}", exc_info=True)

    referral = None
    if referred_by:
        referral = process_signup_referral(user, referred_by).to_dict()

    return success_response(
        {"user": user.to_dict(), "token": generate_token(user), "referral": referral},
        "User registered successfully",
        201,
    )


#===========================================================================
#      LOGIN ROUTE.
#==============================================================================
@bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return error_response("Invalid or missing JSON body", 400)

    email = clean_text(data, "email")
    email = email.lower() if isinstance(email, str) else ""
    password = data.get("password")
    errors = []
    if not email:
        errors.append("Email is required")
    elif not validate_email(email):
        errors.append("Please provide a valid email address")
    if not password or not isinstance(password, str):
        errors.append("Password is required")
    if errors:
        return error_response("Validation failed", 400, errors)

    try:
        user = User.query.filter_by(email=email).first()
        if not user or not user.check_password(password):
            return error_response("Invalid email or password", 401)
        if not user.is_active:
            return error_response(f"Account is {user.status}", 403)
    except Exception as e:
        logger.error(f"Login error: {e}", exc_info=True)
        return server_error(e, "Server error during login")

    try:
        assign_referral_code(user)
    except Exception as e:
        db.session.rollback()
        logger.error(f"Referral code generation failed during login for {email}: {e}", exc_info=True)

    referral_settings = None
    try:
        referral_settings = login_projection(user)
    except Exception as e:
        logger.error(f"Referral settings lookup failed for {email}: {e}", exc_info=True)

    body = {"user": user.to_dict(), "token": generate_token(user)}
    if referral_settings:
        body["referralSettings"] = referral_settings
    return success_response(body, "Login successful")


#===========================================================================
#      PROFILE, PASSWORD & BALANCE
#==============================================================================
@bp.route("/profile", methods=["GET"])
@login_required
def get_profile():
    return success_response({"user": current_user.to_dict()})


@bp.route("/profile", methods=["PUT"])
@login_required
def update_profile():
    data = request.get_json(silent=True) or {}
    errors = validate_profile_fields(data)
    if errors:
        return error_response("Validation failed", 400, errors)

    try:
        for field, attr in PROFILE_FIELDS.items():
            if field in data:
                value = clean_text(data, field)
                setattr(current_user, attr, value if value is not None else "")
        db.session.commit()
        return success_response({"user": current_user.to_dict()}, "Profile updated successfully")
    except Exception as e:
        db.session.rollback()
        logger.error(f"Profile update error for user {current_user.id}: {e}", exc_info=True)
        return server_error(e)


@bp.route("/change-password", methods=["PUT"])
@login_required
def change_password():
    data = request.get_json(silent=True) or {}
    current_password = data.get("currentPassword")
    new_password = data.get("newPassword")

    if not current_password or not new_password:
        return error_response("Current password and new password are required", 400)
    if not isinstance(new_password, str) or len(new_password) < 6:
        return error_response("New password must be at least 6 characters long", 400)
    if not current_user.check_password(current_password):
        return error_response("Current password is incorrect", 400)

    try:
        current_user.set_password(new_password)
        db.session.commit()
        return success_response(message="Password changed successfully")
    except Exception as e:
        db.session.rollback()
        logger.error(f"Change password error: {e}", exc_info=True)
        return server_error(e, "Server error during password change")


@bp.route("/balance", methods=["GET"])
@login_required
def get_balance():
    balance = float(current_user.balance or 0)
    deposit = float(current_user.deposit or 0)
    withdraw = float(current_user.withdraw or 0)
    return success_response({
        "balance": balance,
        "deposit": deposit,
        "withdraw": withdraw,
        "totalDeposit": deposit,
        "totalWithdraw": withdraw,
        "availableBalance": balance,
    })
