import os
from datetime import datetime, timezone
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from config import Config
from extensions import db, login_manager, init_extensions
from logger import setup_logging, app_logger
from models import User


# ------------------------------------------------------------------------------------------------------------------------
# Flask-Login user_loader
# ------------------------------------------------------------------------------------------------------------------------
@login_manager.user_loader
def load_user(user_id):
    try:
        return db.session.get(User, int(user_id))
    except (TypeError, ValueError):
        return None


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    setup_logging(app)

    # --------------------------------------------------------------------------------------------------------------------------
    # Initialize extensions
    # ----------------------------------------------------------------------------------------------------------------------------
    init_extensions(app)

    register_blueprints(app)
    register_error_handlers(app)

    # ------------------------------------------------------------------------------------------------------------------------
    # Schema and in-memory configuration stores
    # ------------------------------------------------------------------------------------------------------------------------
    with app.app_context():
        db.create_all()
        load_stores(app)

    @app.route("/healthz")
    def healthz():
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}, 200

    app_logger.info(f"Application created with {config_class.__name__}")
    return app


def register_blueprints(app):
    """Register all blueprints"""
    import blueprints.auth_helpers  # noqa: F401  registers the bearer token request_loader
    from blueprints.auth import bp as auth_bp
    from blueprints.users import users_bp
    from blueprints.referral import referral_bp
    from blueprints.payments import bp as payments_bp
    from blueprints.content import content_bp
    from blueprints.admin import admin_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(referral_bp)
    app.register_blueprint(payments_bp)
    app.register_blueprint(content_bp)
    app.register_blueprint(admin_bp)


def register_error_handlers(app):
    """Every abort() renders the same JSON shape as the route responses."""
    messages = {
        400: "Bad request",
        401: "Authentication required",
        403: "Access denied. Admin only.",
        404: "Resource not found",
        405: "Method not allowed",
    }

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        message = messages.get(e.code, e.name)
        if e.description and e.description != type(e).description:
            message = e.description
        return jsonify({"success": False, "message": message}), e.code

    @app.errorhandler(500)
    def handle_server_error(e):
        original = getattr(e, "original_exception", None) or e
        app.logger.error(f"Unhandled error: {original}", exc_info=original)
        db.session.rollback()
        body = {"success": False, "message": "Internal server error"}
        if app.debug:
            body["error"] = str(original)
        return jsonify(body), 500


def load_stores(app):
    from referral.settings import make_referral_store
    from stores import register_store
    from blueprints.content_helpers import make_content_stores

    register_store(app, "referral", make_referral_store()).reload()
    for name, store in make_content_stores().items():
        register_store(app, name, store).reload()


# ----------------------
# Local development
# ----------------------
if __name__ == "__main__":
    app = create_app()
    port = int(os.environ.get("PORT", 5000))
    app.run(debug=app.config.get("DEBUG", False), host="0.0.0.0", port=port)
