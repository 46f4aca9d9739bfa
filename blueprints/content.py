#==========================================================================================
#       SITE CONTENT: PROMOTIONS, SLIDERS, TOP WINNERS, SINGLETON SETTINGS AND THEME
#==========================================================================================
from collections import namedtuple
from flask import Blueprint, request
from flask_login import current_user
import logging
from extensions import db
from sqlalchemy import true
from models import Game, GameCategory, PopularGame, Promotion, Provider, Slider, TopWinner, UpcomingMatch
from stores import SettingsValidationError, get_store
from blueprints.auth_helpers import admin_required
from blueprints.content_helpers import (SETTINGS_SECTIONS, public_site_settings, validate_game,
                                        validate_game_category, validate_popular_game, validate_promotion,
                                        validate_provider, validate_slider, validate_top_winner,
                                        validate_upcoming_match)
from utils import success_response, error_response, server_error


logger = logging.getLogger(__name__)

content_bp = Blueprint("content", __name__, url_prefix="/api")


class Collection(namedtuple("Collection", "model validator label public_filter ordering filters in_use")):
    """One admin-managed list. ``filters`` narrows the list from query args; ``in_use`` blocks deletes."""

    def __new__(cls, model, validator, label, public_filter, ordering, filters=None, in_use=None):
        return super().__new__(cls, model, validator, label, public_filter, ordering, filters, in_use)


def _game_filters(query):
    for arg, column in (("category", Game.category_id), ("provider", Game.provider_id)):
        value = request.args.get(arg, type=int)
        if value:
            query = query.filter(column == value)
    flag = {"hot": Game.is_hot, "new": Game.is_new_game, "lobby": Game.is_lobby}.get(request.args.get("type"))
    if flag is not None:
        query = query.filter(flag.is_(True))
    return query


def _match_filters(query):
    category = request.args.get("category")
    if category:
        query = query.filter(UpcomingMatch.category == category)
    if request.args.get("isLive") in ("true", "false"):
        query = query.filter(UpcomingMatch.is_live.is_(request.args["isLive"] == "true"))
    return query


def _games_using(column):
    def check(item):
        count = Game.query.filter(column == item.id).count()
        return f"It is used by {count} game(s)" if count else None
    return check


COLLECTIONS = {
    "promotions": Collection(Promotion, validate_promotion, "Promotion",
                             lambda: Promotion.status == "Active",
                             lambda: (Promotion.created_at.desc(), Promotion.id.desc())),
    "sliders": Collection(Slider, validate_slider, "Slider",
                          lambda: Slider.status == "active",
                          lambda: (Slider.created_at.desc(), Slider.id.desc())),
    "top-winners": Collection(TopWinner, validate_top_winner, "Top winner",
                              lambda: TopWinner.is_live.is_(True),
                              lambda: (TopWinner.win_time.desc(), TopWinner.id.desc())),
    "providers": Collection(Provider, validate_provider, "Provider",
                            lambda: Provider.is_active.is_(True),
                            lambda: (Provider.name, Provider.id),
                            in_use=_games_using(Game.provider_id)),
    "game-categories": Collection(GameCategory, validate_game_category, "Game category",
                                  true,
                                  lambda: (GameCategory.created_at.desc(), GameCategory.id.desc()),
                                  in_use=_games_using(Game.category_id)),
    "games": Collection(Game, validate_game, "Game",
                        true,
                        lambda: (Game.created_at.desc(), Game.id.desc()),
                        filters=_game_filters),
    "popular-games": Collection(PopularGame, validate_popular_game, "Popular game",
                                lambda: PopularGame.is_active.is_(True),
                                lambda: (PopularGame.position, PopularGame.id)),
    "upcoming-matches": Collection(UpcomingMatch, validate_upcoming_match, "Upcoming match",
                                   true,
                                   lambda: (UpcomingMatch.match_date, UpcomingMatch.id),
                                   filters=_match_filters),
}
COLLECTION_RULE = ("<any('promotions','sliders','top-winners','providers','game-categories','games',"
                   "'popular-games','upcoming-matches'):collection>")


def _is_admin():
    return current_user.is_authenticated and current_user.is_admin


# -------------------------------------------------------------------------
#   Collections
# -------------------------------------------------------------------------
@content_bp.route(f"/{COLLECTION_RULE}", methods=["GET"])
def list_items(collection):
    entry = COLLECTIONS[collection]
    query = entry.model.query
    if not (_is_admin() and request.args.get("all") == "true"):
        query = query.filter(entry.public_filter())
    if entry.filters:
        query = entry.filters(query)
    limit = request.args.get("limit", type=int)
    query = query.order_by(*entry.ordering())
    if limit and limit > 0:
        query = query.limit(min(limit, 100))
    items = query.all()
    return success_response([i.to_dict() for i in items], count=len(items))


@content_bp.route(f"/{COLLECTION_RULE}/<int:item_id>", methods=["GET"])
def get_item(collection, item_id):
    entry = COLLECTIONS[collection]
    item = db.session.get(entry.model, item_id)
    if item is None:
        return error_response(f"{entry.label} not found", 404)
    return success_response(item.to_dict())


@content_bp.route(f"/{COLLECTION_RULE}", methods=["POST"])
@admin_required
def create_item(collection):
    entry = COLLECTIONS[collection]
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return error_response("Invalid or missing JSON body", 400)
    values, errors = entry.validator(data)
    if errors:
        return error_response("Validation failed", 400, errors)
    try:
        item = entry.model(**values)
        db.session.add(item)
        db.session.commit()
        logger.info(f"Admin {current_user.id} created {collection} item {item.id}")
        return success_response(item.to_dict(), f"{entry.label} created successfully", 201)
    except Exception as e:
        db.session.rollback()
        logger.error(f"Create {collection} error: {e}", exc_info=True)
        return server_error(e)


@content_bp.route(f"/{COLLECTION_RULE}/<int:item_id>", methods=["PUT"])
@admin_required
def update_item(collection, item_id):
    entry = COLLECTIONS[collection]
    item = db.session.get(entry.model, item_id)
    if item is None:
        return error_response(f"{entry.label} not found", 404)
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return error_response("Invalid or missing JSON body", 400)
    values, errors = entry.validator(data, partial=True, current=item)
    if errors:
        return error_response("Validation failed", 400, errors)
    try:
        for attr, value in values.items():
            setattr(item, attr, value)
        db.session.commit()
        return success_response(item.to_dict(), f"{entry.label} updated successfully")
    except Exception as e:
        db.session.rollback()
        logger.error(f"Update {collection} error: {e}", exc_info=True)
        return server_error(e)


@content_bp.route(f"/{COLLECTION_RULE}/<int:item_id>", methods=["DELETE"])
@admin_required
def delete_item(collection, item_id):
    entry = COLLECTIONS[collection]
    item = db.session.get(entry.model, item_id)
    if item is None:
        return error_response(f"{entry.label} not found", 404)
    blocker = entry.in_use(item) if entry.in_use else None
    if blocker:
        return error_response(f"{entry.label} cannot be deleted. {blocker}", 400)
    db.session.delete(item)
    db.session.commit()
    return success_response(message=f"{entry.label} deleted successfully")


# -------------------------------------------------------------------------
#   Singleton settings: banner text, contact settings, theme
# -------------------------------------------------------------------------
STORE_ROUTES = {
    "banner-text": ("banner", "Banner text"),
    "contact-settings": ("contact", "Contact settings"),
    "theme-config": ("theme", "Theme configuration"),
}
STORE_RULE = "<any('banner-text','contact-settings','theme-config'):setting>"


@content_bp.route(f"/{STORE_RULE}", methods=["GET"])
def get_setting(setting):
    name, _label = STORE_ROUTES[setting]
    try:
        return success_response(get_store(name).get())
    except Exception as e:
        logger.error(f"Get {setting} error: {e}", exc_info=True)
        return server_error(e)


@content_bp.route(f"/{STORE_RULE}", methods=["PUT"])
@admin_required
def update_setting(setting):
    name, label = STORE_ROUTES[setting]
    try:
        snapshot = get_store(name).update(request.get_json(silent=True))
        logger.info(f"Admin {current_user.id} updated {setting}")
        return success_response(snapshot, f"{label} updated successfully")
    except SettingsValidationError as e:
        return error_response("Validation failed", 400, e.errors)
    except Exception as e:
        db.session.rollback()
        logger.error(f"Update {setting} error: {e}", exc_info=True)
        return server_error(e)


@content_bp.route("/theme-config/reset", methods=["POST"])
@admin_required
def reset_theme():
    try:
        snapshot = get_store("theme").reset()
        logger.info(f"Admin {current_user.id} reset the theme configuration")
        return success_response(snapshot, "Theme configuration reset to defaults")
    except Exception as e:
        db.session.rollback()
        logger.error(f"Reset theme error: {e}", exc_info=True)
        return server_error(e)


# -------------------------------------------------------------------------
#   Site settings
# -------------------------------------------------------------------------
@content_bp.route("/settings", methods=["GET"])
def get_site_settings():
    snapshot = get_store("site").get()
    if not _is_admin():
        snapshot = public_site_settings(snapshot)
    return success_response({"settings": snapshot})


def _save_site_settings(data, message):
    try:
        snapshot = get_store("site").update(data)
    except SettingsValidationError as e:
        return error_response("Validation failed", 400, e.errors)
    except Exception as e:
        db.session.rollback()
        logger.error(f"Update site settings error: {e}", exc_info=True)
        return server_error(e)
    logger.info(f"Admin {current_user.id} updated site settings: {sorted(data)}")
    return success_response({"settings": snapshot}, message)


@content_bp.route("/settings", methods=["PUT"])
@admin_required
def update_site_settings():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return error_response("Invalid or missing JSON body", 400)
    return _save_site_settings(data, "Settings updated successfully")


@content_bp.route("/settings/<any('theme','organization','ui'):section>", methods=["PATCH"])
@content_bp.route("/settings/landing-page/<any('header','navigation','fonts'):page>", methods=["PATCH"])
@admin_required
def update_site_settings_section(section=None, page=None):
    """Partial update limited to the keys one settings screen edits."""
    section = section or f"landing-page/{page}"
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return error_response("Invalid or missing JSON body", 400)
    allowed = SETTINGS_SECTIONS[section]
    changes = {key: value for key, value in data.items() if key in allowed}
    if not changes:
        return error_response(f"Provide at least one of: {', '.join(allowed)}", 400)
    return _save_site_settings(changes, f"Settings section '{section}' updated successfully")


@content_bp.route("/settings/reset", methods=["POST"])
@admin_required
def reset_site_settings():
    try:
        snapshot = get_store("site").reset()
    except Exception as e:
        db.session.rollback()
        logger.error(f"Reset site settings error: {e}", exc_info=True)
        return server_error(e)
    logger.info(f"Admin {current_user.id} reset the site settings")
    return success_response({"settings": snapshot}, "Settings reset to default values successfully")


# -------------------------------------------------------------------------
#   Promo section
# -------------------------------------------------------------------------
@content_bp.route("/promo-section", methods=["GET"])
def get_promo_section():
    snapshot = get_store("promo").get()
    if not snapshot["isActive"] and not _is_admin():
        return error_response("Promo section is not active", 404)
    return success_response({"promoSection": snapshot})


@content_bp.route("/promo-section", methods=["PUT"])
@admin_required
def update_promo_section():
    try:
        snapshot = get_store("promo").update(request.get_json(silent=True))
    except SettingsValidationError as e:
        return error_response("Validation failed", 400, e.errors)
    except Exception as e:
        db.session.rollback()
        logger.error(f"Update promo section error: {e}", exc_info=True)
        return server_error(e)
    logger.info(f"Admin {current_user.id} updated the promo section")
    return success_response({"promoSection": snapshot}, "Promo section updated successfully")


@content_bp.route("/promo-section/toggle", methods=["PATCH"])
@admin_required
def toggle_promo_section():
    store = get_store("promo")
    try:
        snapshot = store.update({"isActive": not store.reload()["isActive"]})
    except Exception as e:
        db.session.rollback()
        logger.error(f"Toggle promo section error: {e}", exc_info=True)
        return server_error(e)
    state = "activated" if snapshot["isActive"] else "deactivated"
    return success_response({"promoSection": snapshot}, f"Promo section {state} successfully")
