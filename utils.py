import re
from decimal import Decimal, InvalidOperation
from flask import current_app, jsonify, request


def validate_email(email):
    return re.match(r'^[\w\.+-]+@[\w\.-]+\.\w+$', email or "")

def validate_phone(phone):
    return re.match(r'^\+?[1-9]\d{0,15}$', phone or "")


HEX_COLOR_RE = re.compile(r'^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$')
CSS_SIZE_RE = re.compile(r'^\d+(?:\.\d+)?(?:px|rem|em|%)$')


def clean_text(data, key):
    value = data.get(key)
    return value.strip() if isinstance(value, str) else value


def parse_amount(value):
    """Return a Decimal for a JSON number or numeric string, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount


def get_pagination(default_limit=10, max_limit=100):
    """Read ?page=&limit= from the query string, clamped to sane bounds."""
    try:
        page = max(int(request.args.get("page", 1)), 1)
    except (TypeError, ValueError):
        page = 1
    try:
        limit = int(request.args.get("limit", default_limit))
    except (TypeError, ValueError):
        limit = default_limit
    limit = min(max(limit, 1), max_limit)
    return page, limit


def paginate_query(query, page, limit):
    total = query.count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    pagination = {
        "currentPage": page,
        "totalPages": (total + limit - 1) // limit,
        "totalItems": total,
        "itemsPerPage": limit,
    }
    return items, pagination


#=====================================================================
#      JSON RESPONSE HELPERS
#=====================================================================
def success_response(data=None, message=None, status=200, **extra):
    body = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return jsonify(body), status


def error_response(message, status=400, errors=None, data=None):
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def server_error(exc, message="Server error"):
    """500 body; the exception text is only exposed when DEBUG is on."""
    body = {"success": False, "message": message}
    if current_app.debug:
        body["error"] = str(exc)
    return jsonify(body), 500
