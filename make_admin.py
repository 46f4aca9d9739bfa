# make_admin.py
# Usage: python make_admin.py <email> [username]
# ADMIN_PASSWORD is only used when the account does not exist yet; change it after creation.

import os
import sys
from sqlalchemy.exc import IntegrityError

from app import create_app
from extensions import db
from models import User
from blueprints.auth import generate_player_id
from referral.codes import assign_referral_code

DEFAULT_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")


def make_admin(email, username=None):
    app = create_app()
    with app.app_context():
        email = email.strip().lower()
        user = User.query.filter_by(email=email).first()

        if user:
            print(f"Found user id={user.id}, email={user.email}. Promoting to admin...")
        else:
            username = username or email.split("@")[0]
            print(f"No user with email {email} found, creating {username}.")
            try:
                user = User(
                    username=username,
                    name=username,
                    email=email,
                    player_id=generate_player_id(),
                    country=app.config["DEFAULT_COUNTRY"],
                    currency=app.config["DEFAULT_CURRENCY"],
                )
                user.set_password(DEFAULT_PASSWORD)
                db.session.add(user)
                db.session.commit()
                print(f"Created user id={user.id} with email={email}.")
            except IntegrityError as e:
                db.session.rollback()
                print("IntegrityError while creating user (username or email taken):", e)
                user = User.query.filter_by(email=email).first()
                if not user:
                    raise RuntimeError("Failed to create or find user after IntegrityError.") from e

        user.role = "admin"
        db.session.commit()
        assign_referral_code(user)
        print(f"User (id={user.id}, email={user.email}) is now admin.")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        sys.exit("Usage: python make_admin.py <email> [username]")
    make_admin(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None)
