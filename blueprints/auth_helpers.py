from datetime import datetime, timedelta, timezone
from functools import wraps
import logging
import jwt
from flask import abort, current_app
from flask_login import current_user
from extensions import db, login_manager
from models import User


logger = logging.getLogger(__name__)

# ==========================================================
#                  BEARER TOKENS
# ==========================================================
def generate_token(user):
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "role": user.role,
        "iat": now,
        "exp": now + timedelta(days=current_app.config["JWT_EXPIRES_DAYS"]),
    }
    return jwt.encode(
        payload,
        current_app.config["JWT_SECRET_KEY"],
        algorithm=current_app.config["JWT_ALGORITHM"],
    )


def decode_token(token):
    """Return the payload of a valid token, or None."""
    try:
        return jwt.decode(
            token,
            current_app.config["JWT_SECRET_KEY"],
            algorithms=[current_app.config["JWT_ALGORITHM"]],
        )
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired bearer token")
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected invalid bearer token: {e}")
    return None


@login_manager.request_loader
def load_user_from_request(request):
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None

    payload = decode_token(header[len("Bearer "):].strip())
    if not payload:
        return None

    try:
        user = db.session.get(User, int(payload.get("sub")))
    except (TypeError, ValueError):
        return None
    if user is None or not user.is_active:
        return None
    return user


@login_manager.unauthorized_handler
def unauthorized():
    abort(401)


# ==========================================================
#                  ROLE GUARD
# ==========================================================
def admin_required(f):
    """
    Restrict a route to admins.
    - 401 when no valid bearer token was supplied.
    - 403 when the caller is authenticated but not an admin.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)
        if not current_user.is_admin:
            abort(403)
        return f(*args, **kwargs)

    return decorated_function
