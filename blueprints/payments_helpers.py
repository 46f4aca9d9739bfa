from flask import jsonify
from models import PaymentMethod, WithdrawalMethod, Transaction, TransactionStatus, TransactionType
from referral.processing import REFERRAL_WALLET_PROVIDER
from utils import HEX_COLOR_RE, parse_amount

METHOD_STATUSES = ("Active", "Inactive")
INPUT_TYPES = ("text", "number", "file")

# field -> kind. "str" fields are stored as given; colours are checked as hex.
PAYMENT_METHOD_FIELDS = {
    "method_name_en": "str",
    "method_name_bd": "str",
    "agent_wallet_number": "str",
    "agent_wallet_text": "str",
    "method_image": "str",
    "payment_page_image": "str",
    "gateways": "str_list",
    "text_color": "color",
    "background_color": "color",
    "button_color": "color",
    "instruction_en": "str",
    "instruction_bd": "str",
    "status": "status",
    "user_inputs": "inputs",
}

WITHDRAWAL_METHOD_FIELDS = {
    "method_name_en": "str",
    "method_name_bd": "str",
    "method_image": "str",
    "withdrawal_page_image": "str",
    "min_withdrawal": "amount",
    "max_withdrawal": "amount",
    "processing_time": "str",
    "withdrawal_fee": "amount",
    "fee_type": "fee_type",
    "text_color": "color",
    "background_color": "color",
    "button_color": "color",
    "instruction_en": "str",
    "instruction_bd": "str",
    "status": "status",
    "user_inputs": "inputs",
}

METHOD_MODELS = {
    "payment": (PaymentMethod, PAYMENT_METHOD_FIELDS),
    "withdrawal": (WithdrawalMethod, WITHDRAWAL_METHOD_FIELDS),
}


def _check_inputs(value, errors):
    if not isinstance(value, list):
        errors.append("user_inputs must be a list")
        return
    for index, item in enumerate(value):
        if not isinstance(item, dict):
            errors.append(f"user_inputs[{index}] must be an object")
            continue
        if not item.get("name"):
            errors.append(f"user_inputs[{index}].name is required")
        if item.get("type", "text") not in INPUT_TYPES:
            errors.append(f"user_inputs[{index}].type must be one of {', '.join(INPUT_TYPES)}")


# =========================
# VALIDATE METHOD INPUT
# =========================
def validate_method_input(data, fields, partial=False):
    """
    Validate a payment/withdrawal method payload.
    Returns (values, None) or (None, (response, 400)).
    """
    if not isinstance(data, dict):
        return None, (jsonify({"success": False, "message": "Invalid or missing JSON body"}), 400)

    errors = []
    values = {}
    if not partial and not (isinstance(data.get("method_name_en"), str) and data["method_name_en"].strip()):
        errors.append("method_name_en is required")

    for field, kind in fields.items():
        if field not in data:
            continue
        value = data[field]
        if kind == "str":
            if value is not None and not isinstance(value, str):
                errors.append(f"{field} must be a string")
                continue
            value = value.strip() if value else value
            if field == "method_name_en" and not value:
                errors.append("method_name_en is required")
                continue
        elif kind == "color":
            if not isinstance(value, str) or not HEX_COLOR_RE.match(value):
                errors.append(f"{field} must be a hex colour like #ffffff")
                continue
        elif kind == "status":
            if value not in METHOD_STATUSES:
                errors.append("status must be 'Active' or 'Inactive'")
                continue
        elif kind == "fee_type":
            if value not in ("fixed", "percentage"):
                errors.append("fee_type must be 'fixed' or 'percentage'")
                continue
        elif kind == "amount":
            value = parse_amount(value)
            if value is None or value < 0:
                errors.append(f"{field} must be a non-negative number")
                continue
        elif kind == "str_list":
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                errors.append(f"{field} must be a list of strings")
                continue
        elif kind == "inputs":
            before = len(errors)
            _check_inputs(value, errors)
            if len(errors) != before:
                continue
        values[field] = value

    low, high = values.get("min_withdrawal"), values.get("max_withdrawal")
    if low is not None and high is not None and low > high:
        errors.append("min_withdrawal cannot exceed max_withdrawal")
    if values.get("fee_type", data.get("fee_type")) == "percentage" and values.get("withdrawal_fee", 0) > 100:
        errors.append("withdrawal_fee cannot exceed 100 for percentage fees")

    if errors:
        return None, (jsonify({"success": False, "message": "Validation failed", "errors": errors}), 400)
    return values, None


# =========================
# VALIDATE TRANSACTION INPUT
# =========================
def validate_transaction_input(data):
    """Validate a new deposit/withdrawal bookkeeping record."""
    if not isinstance(data, dict):
        return None, (jsonify({"success": False, "message": "Invalid or missing JSON body"}), 400)

    required = ("amount", "wallet_provider", "transaction_id", "wallet_number")
    if any(not data.get(field) for field in required):
        return None, (jsonify({
            "success": False,
            "message": "amount, wallet_provider, transaction_id, and wallet_number are required",
        }), 400)

    amount = parse_amount(data.get("amount"))
    if amount is None or amount <= 0:
        return None, (jsonify({"success": False, "message": "Amount must be greater than 0"}), 400)

    transaction_type = data.get("transaction_type") or TransactionType.DEPOSIT.value
    if transaction_type not in [t.value for t in TransactionType]:
        return None, (jsonify({"success": False, "message": "Invalid transaction type"}), 400)

    for field in ("wallet_provider", "transaction_id", "wallet_number"):
        if not isinstance(data.get(field), str):
            return None, (jsonify({"success": False, "message": f"{field} must be a string"}), 400)

    if is_referral_transfer_provider(data["wallet_provider"]):
        return None, (jsonify({"success": False, "message": "This wallet provider is reserved"}), 400)

    if Transaction.query.filter_by(transaction_id=data["transaction_id"].strip()).first():
        return None, (jsonify({"success": False, "message": "Transaction ID already exists"}), 400)

    return {
        "amount": amount,
        "wallet_provider": data["wallet_provider"].strip(),
        "transaction_id": data["transaction_id"].strip(),
        "wallet_number": data["wallet_number"].strip(),
        "transaction_type": transaction_type,
        "description": data.get("description") if isinstance(data.get("description"), str) else None,
        "reference_number": data.get("reference_number") if isinstance(data.get("reference_number"), str) else None,
    }, None


def is_referral_transfer_provider(provider):
    return (provider or "").strip().lower() == REFERRAL_WALLET_PROVIDER


def is_referral_transfer(tx):
    """Earnings moved into the main balance by a referral withdrawal."""
    return (is_referral_transfer_provider(tx.wallet_provider)
            and tx.transaction_type == TransactionType.TRANSFER.value)


def valid_transaction_status(status):
    return status in [s.value for s in TransactionStatus]
