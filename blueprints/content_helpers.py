import copy
import re
from datetime import datetime, timezone
from sqlalchemy import func
from extensions import db
from models import (BannerText, ContactSettings, ThemeConfig, THEME_DEFAULTS, PaymentMethod, PromoSection,
                    PROMO_SECTION_DEFAULTS, SiteSettings, SITE_SETTINGS_DEFAULTS, Provider, GameCategory, Game)
from stores import SettingsValidationError, SingletonStore
from utils import HEX_COLOR_RE, CSS_SIZE_RE, parse_amount, validate_email, validate_phone

URL_RE = re.compile(r'^https?://\S+$')

# =========================
# BANNER TEXT
# =========================
def validate_banner(data, _current):
    if not isinstance(data, dict):
        raise SettingsValidationError(["Request body must be a JSON object"])
    errors = []
    changes = {}
    for field, attr, label in (("englishText", "english_text", "English text"),
                               ("banglaText", "bangla_text", "Bangla text")):
        if field not in data:
            continue
        value = data[field]
        if not isinstance(value, str) or not value.strip():
            errors.append(f"{label} is required")
        elif len(value.strip()) > 500:
            errors.append(f"{label} cannot exceed 500 characters")
        else:
            changes[attr] = value.strip()
    if not changes and not errors:
        errors.append("englishText or banglaText is required")
    if errors:
        raise SettingsValidationError(errors)
    return changes

# =========================
# CONTACT SETTINGS
# =========================
CONTACT_FIELDS = {
    "service247Url": "service247_url",
    "whatsappUrl": "whatsapp_url",
    "telegramUrl": "telegram_url",
    "facebookUrl": "facebook_url",
}


def validate_contact(data, _current):
    if not isinstance(data, dict):
        raise SettingsValidationError(["Request body must be a JSON object"])
    errors = []
    changes = {}
    for field, attr in CONTACT_FIELDS.items():
        if field not in data:
            continue
        value = data[field]
        if value is None:
            value = ""
        if not isinstance(value, str):
            errors.append(f"{field} must be a string")
            continue
        value = value.strip()
        if value and not URL_RE.match(value):
            errors.append(f"{field} must be a valid http(s) URL")
            continue
        if len(value) > 500:
            errors.append(f"{field} cannot exceed 500 characters")
            continue
        changes[attr] = value
    if errors:
        raise SettingsValidationError(errors)
    return changes

# =========================
# THEME CONFIG
# =========================
def _is_color_key(key):
    return key.endswith("Color") or key.endswith("Bg")


def _is_size_key(key):
    return key.endswith("FontSize") or key in ("fontSize", "logoWidth")


def _merge_section(current, incoming, defaults, path, errors):
    """Merge ``incoming`` into ``current`` for keys known in ``defaults``."""
    merged = copy.deepcopy(current)
    for key, value in incoming.items():
        if key not in defaults:
            continue
        where = f"{path}.{key}"
        if isinstance(defaults[key], dict):
            if not isinstance(value, dict):
                errors.append(f"{where} must be an object")
                continue
            merged[key] = _merge_section(current.get(key, {}), value, defaults[key], where, errors)
            continue
        if not isinstance(value, str):
            errors.append(f"{where} must be a string")
        elif _is_color_key(key) and not HEX_COLOR_RE.match(value):
            errors.append(f"{where} must be a hex colour like #ffffff")
        elif _is_size_key(key) and not CSS_SIZE_RE.match(value):
            errors.append(f"{where} must be a size like 16px, 1rem, 1em or 100%")
        else:
            merged[key] = value
    return merged


def theme_sections(row):
    """Stored sections laid over the defaults."""
    sections = copy.deepcopy(THEME_DEFAULTS)
    stored = row.sections or {}
    errors = []
    for name, defaults in THEME_DEFAULTS.items():
        if isinstance(stored.get(name), dict):
            sections[name] = _merge_section(sections[name], stored[name], defaults, name, errors)
    return sections


def theme_snapshot(row):
    snapshot = theme_sections(row)
    snapshot.update({
        "id": row.id,
        "isActive": row.is_active,
        "updatedAt": row.updated_at.isoformat() if row.updated_at else None,
    })
    return snapshot


def validate_theme(data, current):
    if not isinstance(data, dict):
        raise SettingsValidationError(["Request body must be a JSON object"])
    errors = []
    sections = {name: copy.deepcopy(current.get(name, THEME_DEFAULTS[name])) for name in THEME_DEFAULTS}
    for name, defaults in THEME_DEFAULTS.items():
        if name not in data:
            continue
        if not isinstance(data[name], dict):
            errors.append(f"{name} must be an object")
            continue
        sections[name] = _merge_section(sections[name], data[name], defaults, name, errors)
    changes = {"sections": sections}
    if "isActive" in data:
        if isinstance(data["isActive"], bool):
            changes["is_active"] = data["isActive"]
        else:
            errors.append("isActive must be a boolean")
    if errors:
        raise SettingsValidationError(errors)
    return changes


def theme_defaults():
    return {"sections": copy.deepcopy(THEME_DEFAULTS), "is_active": True}


# =========================
# SITE SETTINGS
# =========================
IMAGE_RE = re.compile(r'^(https?://.*(?:\.(?:png|jpg|jpeg|gif|svg|webp)(?:\?.*)?|/.*)|data:image/[a-z]+;base64,)')
FAVICON_RE = re.compile(r'^(https?://.*(?:\.(?:ico|png|jpg|jpeg|gif|svg)(?:\?.*)?|/.*)|data:image/[a-z]+;base64,)')
SOCIAL_RES = {
    "facebook": re.compile(r'^https?://(www\.)?facebook\.com/.+'),
    "twitter": re.compile(r'^https?://(www\.)?(twitter\.com|x\.com)/.+'),
    "instagram": re.compile(r'^https?://(www\.)?instagram\.com/.+'),
    "linkedin": re.compile(r'^https?://(www\.)?linkedin\.com/.+'),
}
# Admin-only keys, left out of the public settings view
PRIVATE_SETTINGS = ("emailVerificationRequired", "twoFactorEnabled", "maxLoginAttempts", "sessionTimeout")

SETTINGS_SECTIONS = {
    "theme": ("themeColor", "primaryColor", "secondaryColor", "accentColor"),
    "organization": ("organizationName", "organizationImage", "logoUrl", "faviconUrl", "supportEmail",
                     "supportPhone", "address", "websiteUrl", "socialLinks"),
    "ui": ("headerColor", "headerLoginSignupButtonBgColor", "headerLoginSignupButtonTextColor",
           "webMenuBgColor", "webMenuTextColor", "webMenuFontSize", "webMenuHoverColor",
           "mobileMenuLoginSignupButtonBgColor", "mobileMenuLoginSignupButtonTextColor",
           "mobileMenuFontSize", "footerText", "footerSocialLinks"),
    "landing-page/header": ("organizationName", "organizationImage", "logoUrl", "faviconUrl", "headerColor",
                            "headerLoginSignupButtonBgColor", "headerLoginSignupButtonTextColor"),
    "landing-page/navigation": ("webMenuBgColor", "webMenuTextColor", "webMenuFontSize", "webMenuHoverColor",
                                "mobileMenuFontSize", "navigationItems"),
    "landing-page/fonts": ("webMenuFontSize", "mobileMenuFontSize"),
}


def _social_links(key, value, errors):
    if not isinstance(value, dict):
        errors.append(f"{key} must be an object")
        return None
    links = {}
    for network, pattern in SOCIAL_RES.items():
        link = value.get(network) or ""
        if not isinstance(link, str):
            errors.append(f"{key}.{network} must be a string")
        elif link.strip() and not pattern.match(link.strip()):
            errors.append(f"{key}.{network} must be a valid {network} URL")
        else:
            links[network] = link.strip()
    return links


def _navigation_items(value, errors):
    if not isinstance(value, list):
        errors.append("navigationItems must be a list")
        return None
    items = []
    for index, item in enumerate(value):
        where = f"navigationItems[{index}]"
        if not isinstance(item, dict):
            errors.append(f"{where} must be an object")
            continue
        label, url = item.get("label"), item.get("url")
        order = item.get("order")
        if not all(isinstance(v, str) and v.strip() for v in (label, url)):
            errors.append(f"{where} needs a label and url")
            continue
        if isinstance(order, bool) or not isinstance(order, int):
            errors.append(f"{where}.order must be an integer")
            continue
        entry = {"id": str(item.get("id") or index + 1), "label": label.strip(), "url": url.strip(), "order": order}
        submenu = item.get("submenu")
        if submenu is not None:
            if not isinstance(submenu, list) or not all(
                    isinstance(sub, dict) and isinstance(sub.get("name"), str) and isinstance(sub.get("path"), str)
                    for sub in submenu):
                errors.append(f"{where}.submenu entries need a name and path")
                continue
            entry["submenu"] = [{"id": str(sub.get("id") or n + 1), "name": sub["name"].strip(),
                                 "path": sub["path"].strip(), "icon": sub.get("icon") or ""}
                                for n, sub in enumerate(submenu)]
        items.append(entry)
    return sorted(items, key=lambda entry: entry["order"])


def _setting_value(key, value, errors):
    """Check one site setting. Returns the cleaned value, or None after recording an error."""
    default = SITE_SETTINGS_DEFAULTS[key]
    if key in ("socialLinks", "footerSocialLinks"):
        return _social_links(key, value, errors)
    if key == "navigationItems":
        return _navigation_items(value, errors)
    if isinstance(default, bool):
        if not isinstance(value, bool):
            errors.append(f"{key} must be a boolean")
            return None
        return value
    if isinstance(default, int):
        low, high = (3, 10) if key == "maxLoginAttempts" else (15, 1440)
        if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
            errors.append(f"{key} must be an integer between {low} and {high}")
            return None
        return value

    if value is None:
        value = ""
    if not isinstance(value, str):
        errors.append(f"{key} must be a string")
        return None
    value = value.strip()
    if key.endswith("Color"):
        ok = HEX_COLOR_RE.match(value)
    elif key.endswith("FontSize"):
        ok = CSS_SIZE_RE.match(value)
    elif key == "organizationName":
        ok = 0 < len(value) <= 100
    elif key == "organizationImage":
        ok = IMAGE_RE.match(value)
    elif key == "logoUrl":
        ok = not value or IMAGE_RE.match(value)
    elif key == "faviconUrl":
        ok = not value or FAVICON_RE.match(value)
    elif key == "supportEmail":
        value = value.lower()
        ok = validate_email(value)
    elif key == "supportPhone":
        ok = not value or validate_phone(value.replace(" ", ""))
    elif key == "websiteUrl":
        ok = not value or URL_RE.match(value)
    elif key == "address":
        ok = len(value) <= 200
    else:
        ok = len(value) <= 500
    if not ok:
        errors.append(f"{key} has an invalid value")
        return None
    return value


def site_settings_snapshot(row):
    snapshot = copy.deepcopy(SITE_SETTINGS_DEFAULTS)
    snapshot.update({k: v for k, v in (row.values or {}).items() if k in SITE_SETTINGS_DEFAULTS})
    snapshot["id"] = row.id
    snapshot["updatedAt"] = row.updated_at.isoformat() if row.updated_at else None
    return snapshot


def public_site_settings(snapshot):
    return {k: v for k, v in snapshot.items() if k not in PRIVATE_SETTINGS}


def validate_site_settings(data, current):
    if not isinstance(data, dict):
        raise SettingsValidationError(["Request body must be a JSON object"])
    errors = []
    values = {k: copy.deepcopy(current.get(k, default)) for k, default in SITE_SETTINGS_DEFAULTS.items()}
    for key, value in data.items():
        if key not in SITE_SETTINGS_DEFAULTS:
            continue
        cleaned = _setting_value(key, value, errors)
        if cleaned is not None:
            values[key] = cleaned
    if errors:
        raise SettingsValidationError(errors)
    return {"values": values}


def site_settings_defaults():
    return {"values": copy.deepcopy(SITE_SETTINGS_DEFAULTS)}

# =========================
# PROMO SECTION
# =========================
YOUTUBE_RE = re.compile(r'^https?://(www\.)?(youtube\.com|youtu\.be)/.+')


def _is_link(value):
    return bool(URL_RE.match(value) or value.startswith("/") or value.startswith("#"))


def promo_section_snapshot(row):
    stored = row.sections or {}
    snapshot = {}
    for name, defaults in PROMO_SECTION_DEFAULTS.items():
        part = dict(defaults)
        if isinstance(stored.get(name), dict):
            part.update({k: v for k, v in stored[name].items() if k in defaults})
        snapshot[name] = part
    snapshot.update({
        "id": row.id,
        "isActive": row.is_active,
        "updatedAt": row.updated_at.isoformat() if row.updated_at else None,
    })
    return snapshot


def validate_promo_section(data, current):
    if not isinstance(data, dict):
        raise SettingsValidationError(["Request body must be a JSON object"])
    errors = []
    sections = {name: dict(current.get(name, defaults)) for name, defaults in PROMO_SECTION_DEFAULTS.items()}
    for name, defaults in PROMO_SECTION_DEFAULTS.items():
        if name not in data:
            continue
        if not isinstance(data[name], dict):
            errors.append(f"{name} must be an object")
            continue
        for key, value in data[name].items():
            if key not in defaults:
                continue
            if value is None:
                value = ""
            if not isinstance(value, str):
                errors.append(f"{name}.{key} must be a string")
                continue
            sections[name][key] = value.strip()

    if not sections["banner"]["title"]:
        errors.append("banner.title is required")
    if not YOUTUBE_RE.match(sections["video"]["youtubeUrl"]):
        errors.append("video.youtubeUrl must be a valid YouTube URL")
    for name, key in (("banner", "ctaLink"), ("extraBanner", "link")):
        link = sections[name][key]
        if link and not _is_link(link):
            errors.append(f"{name}.{key} must be a URL, a /path or an #anchor")

    changes = {"sections": sections}
    if "isActive" in data:
        if isinstance(data["isActive"], bool):
            changes["is_active"] = data["isActive"]
        else:
            errors.append("isActive must be a boolean")
    if errors:
        raise SettingsValidationError(errors)
    return changes


def promo_section_defaults():
    return {"sections": copy.deepcopy(PROMO_SECTION_DEFAULTS), "is_active": True}


def make_content_stores():
    return {
        "banner": SingletonStore(BannerText, validate_banner),
        "contact": SingletonStore(ContactSettings, validate_contact),
        "theme": SingletonStore(ThemeConfig, validate_theme, serializer=theme_snapshot, defaults=theme_defaults),
        "site": SingletonStore(SiteSettings, validate_site_settings, serializer=site_settings_snapshot,
                               defaults=site_settings_defaults),
        "promo": SingletonStore(PromoSection, validate_promo_section, serializer=promo_section_snapshot,
                                defaults=promo_section_defaults),
    }

# =========================
# PROMOTIONS / SLIDERS / TOP WINNERS
# =========================
STATUSES = ("Active", "Inactive")
SLIDER_STATUSES = ("active", "inactive")


def _string(data, field, errors, required=False, max_length=500):
    value = data.get(field)
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            errors.append(f"{field} is required")
        return None
    if not isinstance(value, str):
        errors.append(f"{field} must be a string")
        return None
    value = value.strip()
    if len(value) > max_length:
        errors.append(f"{field} cannot exceed {max_length} characters")
        return None
    return value


def validate_promotion(data, partial=False, current=None):
    """Returns (column values, errors). ``current`` is the row a partial update applies to."""
    errors = []
    values = {}
    for field, required, limit in (("title_en", True, 200), ("title_bd", False, 200),
                                   ("description_en", False, 5000), ("description_bd", False, 5000),
                                   ("game_type", True, 60), ("promotion_image", False, 500)):
        if partial and field not in data:
            continue
        value = _string(data, field, errors, required=required, max_length=limit)
        if value is not None or (field in data and not required):
            values[field] = value

    if "status" in data:
        if data["status"] not in STATUSES:
            errors.append("status must be 'Active' or 'Inactive'")
        else:
            values["status"] = data["status"]

    if "payment_methods" in data:
        ids = data["payment_methods"]
        if not isinstance(ids, list) or not all(isinstance(i, int) and not isinstance(i, bool) for i in ids):
            errors.append("payment_methods must be a list of payment method ids")
        else:
            known = {m.id for m in PaymentMethod.query.filter(PaymentMethod.id.in_(ids)).all()} if ids else set()
            missing = [i for i in ids if i not in known]
            if missing:
                errors.append(f"Unknown payment methods: {missing}")
            else:
                values["payment_methods"] = ids

    bonus = data.get("bonus_settings") if isinstance(data.get("bonus_settings"), dict) else data
    if "bonus_type" in bonus:
        if bonus["bonus_type"] not in ("percentage", "fixed"):
            errors.append("bonus_type must be 'percentage' or 'fixed'")
        else:
            values["bonus_type"] = bonus["bonus_type"]
    for field in ("bonus_value", "max_bonus_limit"):
        if field in bonus:
            amount = parse_amount(bonus[field])
            if amount is None or amount < 0:
                errors.append(f"{field} must be a non-negative number")
            else:
                values[field] = amount
    bonus_type = values.get("bonus_type", getattr(current, "bonus_type", None))
    bonus_value = values.get("bonus_value", getattr(current, "bonus_value", None)) or 0
    if bonus_type == "percentage" and bonus_value > 100:
        errors.append("bonus_value cannot exceed 100 for percentage bonuses")
    return values, errors


def validate_slider(data, partial=False, current=None):
    errors = []
    values = {}
    if not partial or "title" in data:
        title = _string(data, "title", errors, required=True, max_length=200)
        if title:
            values["title"] = title
    if not partial or "imageUrl" in data:
        image = _string(data, "imageUrl", errors, required=True)
        if image:
            values["image_url"] = image
    if "status" in data:
        if data["status"] not in SLIDER_STATUSES:
            errors.append("status must be 'active' or 'inactive'")
        else:
            values["status"] = data["status"]
    return values, errors


def _parse_time(value, errors, field="winTime"):
    if not isinstance(value, str):
        errors.append(f"{field} must be an ISO-8601 string")
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        errors.append(f"{field} must be an ISO-8601 string")
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def validate_top_winner(data, partial=False, current=None):
    errors = []
    values = {}
    for field, attr, limit in (("gameName", "game_name", 120), ("gameCategory", "game_category", 60),
                               ("username", "username", 80)):
        if partial and field not in data:
            continue
        value = _string(data, field, errors, required=True, max_length=limit)
        if value:
            values[attr] = value

    if not partial or "winAmount" in data:
        amount = parse_amount(data.get("winAmount"))
        if amount is None or amount <= 0:
            errors.append("winAmount must be a positive number")
        else:
            values["win_amount"] = amount

    for field, attr, limit in (("currency", "currency", 10), ("gameImage", "game_image", 500)):
        if field in data:
            value = _string(data, field, errors, max_length=limit)
            values[attr] = value
    if "multiplier" in data and data["multiplier"] is not None:
        multiplier = parse_amount(data["multiplier"])
        if multiplier is None or multiplier < 0:
            errors.append("multiplier must be a non-negative number")
        else:
            values["multiplier"] = multiplier
    if "isLive" in data:
        if isinstance(data["isLive"], bool):
            values["is_live"] = data["isLive"]
        else:
            errors.append("isLive must be a boolean")
    if "winTime" in data:
        parsed = _parse_time(data["winTime"], errors)
        if parsed:
            values["win_time"] = parsed
    return values, errors

# =========================
# GAME CATALOG & UPCOMING MATCHES
# =========================
def _flag(data, field, attr, values, errors):
    if field in data:
        if isinstance(data[field], bool):
            values[attr] = data[field]
        else:
            errors.append(f"{field} must be a boolean")


def _required_strings(data, fields, values, errors, partial):
    for field, attr, limit in fields:
        if partial and field not in data:
            continue
        value = _string(data, field, errors, required=True, max_length=limit)
        if value:
            values[attr] = value


def _row_id(value):
    return value if isinstance(value, int) and not isinstance(value, bool) else None


def validate_provider(data, partial=False, current=None):
    errors = []
    values = {}
    _required_strings(data, (("name", "name", 120), ("logo", "logo", 500)), values, errors, partial)
    _flag(data, "isActive", "is_active", values, errors)
    if "name" in values:
        clash = Provider.query.filter(func.lower(Provider.name) == values["name"].lower())
        if current is not None:
            clash = clash.filter(Provider.id != current.id)
        if clash.first():
            errors.append("A provider with this name already exists")
    return values, errors


def validate_game_category(data, partial=False, current=None):
    errors = []
    values = {}
    _required_strings(data, (("nameEnglish", "name_english", 120), ("nameBangla", "name_bangla", 120),
                             ("icon", "icon", 500)), values, errors, partial)
    if "image" in data:
        values["image"] = _string(data, "image", errors)
    if "displayType" in data:
        if data["displayType"] not in ("providers", "games"):
            errors.append("displayType must be 'providers' or 'games'")
        else:
            values["display_type"] = data["displayType"]

    if "providers" in data:
        ids = data["providers"]
        if not isinstance(ids, list) or any(_row_id(i) is None for i in ids):
            errors.append("providers must be a list of provider ids")
        else:
            known = {p.id for p in Provider.query.filter(Provider.id.in_(ids)).all()} if ids else set()
            missing = [i for i in ids if i not in known]
            if missing:
                errors.append(f"Unknown providers: {missing}")
            else:
                values["providers"] = ids

    if "subCategories" in data:
        subs = data["subCategories"]
        names = [s.get("name") if isinstance(s, dict) else s for s in subs] if isinstance(subs, list) else None
        if names is None or not all(isinstance(n, str) and n.strip() for n in names):
            errors.append("subCategories must be a list of names")
        else:
            values["sub_categories"] = [{"id": n + 1, "name": name.strip()} for n, name in enumerate(names)]
    return values, errors


def validate_game(data, partial=False, current=None):
    errors = []
    values = {}
    _required_strings(data, (("gameUuid", "game_uuid", 120), ("nameEnglish", "name_english", 200),
                             ("nameBangla", "name_bangla", 200), ("image", "image", 500)),
                      values, errors, partial)
    if "game_uuid" in values:
        clash = Game.query.filter_by(game_uuid=values["game_uuid"])
        if current is not None:
            clash = clash.filter(Game.id != current.id)
        if clash.first():
            errors.append("A game with this UUID already exists")

    if not partial or "category" in data:
        category_id = _row_id(data.get("category"))
        if category_id is None or db.session.get(GameCategory, category_id) is None:
            errors.append("category must be an existing game category id")
        else:
            values["category_id"] = category_id
    if "provider" in data:
        if data["provider"] is None:
            values["provider_id"] = None
        else:
            provider_id = _row_id(data["provider"])
            if provider_id is None or db.session.get(Provider, provider_id) is None:
                errors.append("provider must be an existing provider id")
            else:
                values["provider_id"] = provider_id

    for field, attr in (("isHot", "is_hot"), ("isNewGame", "is_new_game"), ("isLobby", "is_lobby")):
        _flag(data, field, attr, values, errors)
    return values, errors


def validate_popular_game(data, partial=False, current=None):
    errors = []
    values = {}
    _required_strings(data, (("image", "image", 500), ("title", "title", 200),
                             ("redirectUrl", "redirect_url", 500)), values, errors, partial)
    _flag(data, "isActive", "is_active", values, errors)
    if "order" in data:
        if _row_id(data["order"]) is None:
            errors.append("order must be an integer")
        else:
            values["position"] = data["order"]
    return values, errors


def _team(data, field, current_team, errors):
    """Merge a team payload over the stored team; name and odds end up required."""
    if not isinstance(data[field], dict):
        errors.append(f"{field} must be an object")
        return None
    team = dict(current_team or {})
    team.update({k: v for k, v in data[field].items() if k in ("name", "flagImage", "odds")})
    name = team.get("name")
    odds = parse_amount(team.get("odds"))
    if not isinstance(name, str) or not name.strip():
        errors.append(f"{field}.name is required")
        return None
    if odds is None or odds <= 0:
        errors.append(f"{field}.odds must be a positive number")
        return None
    flag = team.get("flagImage") or ""
    if not isinstance(flag, str):
        errors.append(f"{field}.flagImage must be a string")
        return None
    return {"name": name.strip(), "flagImage": flag.strip(), "odds": float(odds)}


def validate_upcoming_match(data, partial=False, current=None):
    errors = []
    values = {}
    _required_strings(data, (("matchType", "match_type", 60), ("category", "category", 60)),
                      values, errors, partial)
    if not partial or "matchDate" in data:
        parsed = _parse_time(data.get("matchDate"), errors, field="matchDate")
        if parsed:
            values["match_date"] = parsed
    for field, attr in (("teamA", "team_a"), ("teamB", "team_b")):
        if field not in data:
            if not partial:
                errors.append(f"{field} is required")
            continue
        team = _team(data, field, getattr(current, attr, None), errors)
        if team:
            values[attr] = team
    _flag(data, "isLive", "is_live", values, errors)
    return values, errors
