import logging
import secrets
import string
from sqlalchemy.exc import IntegrityError
from extensions import db
from models import User
from referral.errors import ReferralError


logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
MAX_ATTEMPTS = 10
FALLBACK_LENGTH = 8
COMMIT_RETRIES = 3


def _random_chars(length):
    return ''.join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def generate_referral_code(username=None):
    """
    Candidate code: first three letters of the username plus three random
    characters, or six random characters when the username is too short.
    """
    if username and len(username) >= 3:
        return (username[:3] + _random_chars(3)).upper()
    return _random_chars(6)


def code_exists(code):
    return db.session.query(User.id).filter(User.referral_code == code).first() is not None


def find_unused_code(username=None):
    for _ in range(MAX_ATTEMPTS):
        code = generate_referral_code(username)
        if not code_exists(code):
            return code

    logger.warning(f"Referral code space exhausted for prefix of {username!r}; using fallback")
    for _ in range(MAX_ATTEMPTS):
        code = _random_chars(FALLBACK_LENGTH)
        if not code_exists(code):
            return code

    raise ReferralError("Unable to generate a unique referral code")


def assign_referral_code(user):
    """
    Return the user's referral code, generating and persisting one if missing.
    A unique-index violation on commit regenerates and retries.
    """
    if user.referral_code:
        return user.referral_code

    user_id = user.id
    for attempt in range(1, COMMIT_RETRIES + 1):
        code = find_unused_code(user.username)
        user.referral_code = code
        try:
            db.session.commit()
            logger.info(f"Assigned referral code {code} to user {user_id}")
            return code
        except IntegrityError:
            db.session.rollback()
            logger.warning(f"Referral code {code} collided on commit (attempt {attempt})")
            user = db.session.get(User, user_id)
            if user is None:
                raise ReferralError(f"User {user_id} disappeared while assigning a code")
            if user.referral_code:
                return user.referral_code

    raise ReferralError("Unable to persist a unique referral code")
