#==========================================================================================
#       PAYMENT METHODS, WITHDRAWAL METHODS, TRANSACTIONS & WITHDRAWAL REQUESTS
#==========================================================================================
from flask import Blueprint, abort, request
from flask_login import current_user, login_required
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
import logging
from extensions import db
from logger import payments_logger
from models import Transaction, TransactionStatus, TransactionType, User
from blueprints.auth_helpers import admin_required
from blueprints.payments_helpers import (METHOD_MODELS, is_referral_transfer, validate_method_input,
                                         validate_transaction_input, valid_transaction_status)
from blueprints.withdraw_helpers import WithdrawalException, apply_status_change, create_withdrawal_request
from utils import get_pagination, paginate_query, success_response, error_response, server_error


logger = logging.getLogger(__name__)

bp = Blueprint("payments", __name__, url_prefix="/api")

METHOD_ROUTES = {"payment-methods": "payment", "withdrawal-methods": "withdrawal"}


def _is_admin():
    return current_user.is_authenticated and current_user.is_admin


def _method_kind(route):
    kind = METHOD_ROUTES.get(route)
    if kind is None:
        abort(404)
    return METHOD_MODELS[kind]


def _label(model):
    return "Payment method" if model.__tablename__ == "payment_methods" else "Withdrawal method"


# -------------------------------------------------------------------------
#   Payment / withdrawal method CRUD (shared shape)
# -------------------------------------------------------------------------
@bp.route("/<any('payment-methods','withdrawal-methods'):route>", methods=["GET"])
def list_methods(route):
    model, _fields = _method_kind(route)
    query = model.query
    if _is_admin():
        status = request.args.get("status")
        if status:
            query = query.filter(model.status == status)
    else:
        query = query.filter(model.status == "Active")
    methods = query.order_by(model.created_at.desc(), model.id.desc()).all()
    return success_response([m.to_dict() for m in methods], count=len(methods))


@bp.route("/<any('payment-methods','withdrawal-methods'):route>/<int:method_id>", methods=["GET"])
def get_method(route, method_id):
    model, _fields = _method_kind(route)
    method = db.session.get(model, method_id)
    if method is None or (method.status != "Active" and not _is_admin()):
        return error_response(f"{_label(model)} not found", 404)
    return success_response(method.to_dict())


@bp.route("/<any('payment-methods','withdrawal-methods'):route>", methods=["POST"])
@admin_required
def create_method(route):
    model, fields = _method_kind(route)
    values, error = validate_method_input(request.get_json(silent=True), fields)
    if error:
        return error
    try:
        method = model(**values)
        db.session.add(method)
        db.session.commit()
        payments_logger.info(f"Admin {current_user.id} created {model.__tablename__} {method.id}")
        return success_response(method.to_dict(), f"{_label(model)} created successfully", 201)
    except Exception as e:
        db.session.rollback()
        logger.error(f"Create method error: {e}", exc_info=True)
        return server_error(e)


@bp.route("/<any('payment-methods','withdrawal-methods'):route>/<int:method_id>", methods=["PUT"])
@admin_required
def update_method(route, method_id):
    model, fields = _method_kind(route)
    method = db.session.get(model, method_id)
    if method is None:
        return error_response(f"{_label(model)} not found", 404)

    values, error = validate_method_input(request.get_json(silent=True), fields, partial=True)
    if error:
        return error
    if "min_withdrawal" in values or "max_withdrawal" in values:
        low = values.get("min_withdrawal", method.min_withdrawal)
        high = values.get("max_withdrawal", method.max_withdrawal)
        if low > high:
            return error_response("Validation failed", 400, ["min_withdrawal cannot exceed max_withdrawal"])
    try:
        for field, value in values.items():
            setattr(method, field, value)
        db.session.commit()
        return success_response(method.to_dict(), f"{_label(model)} updated successfully")
    except Exception as e:
        db.session.rollback()
        logger.error(f"Update method error: {e}", exc_info=True)
        return server_error(e)


@bp.route("/<any('payment-methods','withdrawal-methods'):route>/<int:method_id>", methods=["DELETE"])
@admin_required
def delete_method(route, method_id):
    model, _fields = _method_kind(route)
    method = db.session.get(model, method_id)
    if method is None:
        return error_response(f"{_label(model)} not found", 404)
    try:
        db.session.delete(method)
        db.session.commit()
        return success_response(message=f"{_label(model)} deleted successfully")
    except Exception as e:
        db.session.rollback()
        logger.error(f"Delete method error: {e}", exc_info=True)
        return server_error(e)


@bp.route("/<any('payment-methods','withdrawal-methods'):route>/<int:method_id>/toggle-status", methods=["PATCH"])
@admin_required
def toggle_method_status(route, method_id):
    model, _fields = _method_kind(route)
    method = db.session.get(model, method_id)
    if method is None:
        return error_response(f"{_label(model)} not found", 404)
    method.status = "Inactive" if method.status == "Active" else "Active"
    db.session.commit()
    return success_response(method.to_dict(), f"{_label(model)} is now {method.status}")


# -------------------------------------------------------------------------
#   Transactions
# -------------------------------------------------------------------------
@bp.route("/transactions", methods=["POST"])
@login_required
def create_transaction():
    """
    Record a Pending transaction. Users record their own; admins may record
    one for any user. Balances only move when the status becomes Completed.
    """
    data = request.get_json(silent=True)
    values, error = validate_transaction_input(data)
    if error:
        return error

    user_id = current_user.id
    if current_user.is_admin and data.get("user_id"):
        user_id = data["user_id"]
        if not isinstance(user_id, int) or db.session.get(User, user_id) is None:
            return error_response("User not found with the provided user_id", 404)

    try:
        tx = Transaction(user_id=user_id, status=TransactionStatus.PENDING.value, **values)
        db.session.add(tx)
        db.session.commit()
        payments_logger.info(f"Transaction {tx.transaction_id} recorded for user {user_id} ({tx.transaction_type})")
        return success_response(tx.to_dict(), "Transaction created successfully", 201)
    except IntegrityError:
        db.session.rollback()
        return error_response("Transaction ID already exists", 400)
    except Exception as e:
        db.session.rollback()
        logger.error(f"Create transaction error: {e}", exc_info=True)
        return server_error(e, "Failed to create transaction")


def _filtered_transactions(query):
    for field in ("status", "transaction_type", "wallet_provider"):
        value = request.args.get(field)
        if value:
            query = query.filter(getattr(Transaction, field) == value)
    user_id = request.args.get("user_id", type=int)
    if user_id:
        query = query.filter(Transaction.user_id == user_id)
    search = (request.args.get("search") or "").strip()
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Transaction.transaction_id.ilike(pattern),
                                 Transaction.wallet_number.ilike(pattern),
                                 Transaction.reference_number.ilike(pattern)))
    return query.order_by(Transaction.created_at.desc(), Transaction.id.desc())


@bp.route("/transactions", methods=["GET"])
@admin_required
def list_transactions():
    page, limit = get_pagination()
    items, pagination = paginate_query(_filtered_transactions(Transaction.query), page, limit)
    return success_response([t.to_dict() for t in items], pagination=pagination)


@bp.route("/transactions/my", methods=["GET"])
@login_required
def my_transactions():
    page, limit = get_pagination()
    query = _filtered_transactions(Transaction.query.filter(Transaction.user_id == current_user.id))
    items, pagination = paginate_query(query, page, limit)
    return success_response([t.to_dict() for t in items], pagination=pagination)


@bp.route("/transactions/stats", methods=["GET"])
@admin_required
def transaction_stats():
    by_status = (db.session.query(Transaction.status, func.count(Transaction.id),
                                  func.coalesce(func.sum(Transaction.amount), 0))
                 .group_by(Transaction.status).all())
    by_provider = (db.session.query(Transaction.wallet_provider, func.count(Transaction.id),
                                    func.coalesce(func.sum(Transaction.amount), 0))
                   .group_by(Transaction.wallet_provider)
                   .order_by(func.count(Transaction.id).desc()).all())
    total_amount = db.session.query(func.coalesce(func.sum(Transaction.amount), 0)).scalar()
    return success_response({
        "statusStats": [{"status": s, "count": c, "totalAmount": float(a or 0)} for s, c, a in by_status],
        "totalTransactions": Transaction.query.count(),
        "totalAmount": float(total_amount or 0),
        "walletProviderStats": [{"provider": p, "count": c, "totalAmount": float(a or 0)} for p, c, a in by_provider],
    })


@bp.route("/transactions/<int:transaction_id>", methods=["GET"])
@login_required
def get_transaction(transaction_id):
    tx = db.session.get(Transaction, transaction_id)
    if tx is None or (tx.user_id != current_user.id and not current_user.is_admin):
        return error_response("Transaction not found", 404)
    return success_response(tx.to_dict())


@bp.route("/transactions/<int:transaction_id>/status", methods=["PUT", "PATCH"])
@admin_required
def update_transaction_status(transaction_id):
    data = request.get_json(silent=True) or {}
    status = data.get("status")
    if not valid_transaction_status(status):
        return error_response("Invalid status. Must be: Pending, Completed, Failed, or Cancelled", 400)

    tx = db.session.get(Transaction, transaction_id)
    if tx is None:
        return error_response("Transaction not found", 404)
    if is_referral_transfer(tx):
        return error_response("Referral transfers cannot be changed", 400)

    try:
        moved = apply_status_change(tx, status)
    except WithdrawalException as e:
        return error_response(e.message, e.status_code, data=e.data)
    except Exception as e:
        logger.error(f"Update transaction status error: {e}", exc_info=True)
        return server_error(e)

    message = f"Transaction status updated to {status}"
    if moved:
        message += " and user balance updated"
    return success_response(tx.to_dict(), message)


@bp.route("/transactions/<int:transaction_id>", methods=["DELETE"])
@admin_required
def delete_transaction(transaction_id):
    tx = db.session.get(Transaction, transaction_id)
    if tx is None:
        return error_response("Transaction not found", 404)
    if is_referral_transfer(tx):
        return error_response("Referral transfers cannot be deleted", 400)
    db.session.delete(tx)
    db.session.commit()
    return success_response(message="Transaction deleted successfully")


# -------------------------------------------------------------------------
#   Withdrawal requests
# -------------------------------------------------------------------------
@bp.route("/withdrawal-requests", methods=["POST"])
@login_required
def create_withdrawal():
    data = request.get_json(silent=True) or {}
    try:
        tx, details = create_withdrawal_request(current_user._get_current_object(), data)
    except WithdrawalException as e:
        return error_response(e.message, e.status_code, data=e.data)
    except Exception as e:
        logger.error(f"Create withdrawal request error: {e}", exc_info=True)
        return server_error(e, "Failed to create withdrawal request")
    return success_response({"transaction": tx.to_dict(), "withdrawalDetails": details},
                            "Withdrawal request submitted successfully", 201)


@bp.route("/withdrawal-requests/my", methods=["GET"])
@login_required
def my_withdrawals():
    requests_ = (Transaction.query
                 .filter_by(user_id=current_user.id, transaction_type=TransactionType.WITHDRAWAL.value)
                 .order_by(Transaction.created_at.desc(), Transaction.id.desc())
                 .all())
    return success_response([t.to_dict() for t in requests_], count=len(requests_))


@bp.route("/withdrawal-requests", methods=["GET"])
@admin_required
def all_withdrawals():
    page, limit = get_pagination(default_limit=20)
    query = Transaction.query.filter_by(transaction_type=TransactionType.WITHDRAWAL.value)
    status = request.args.get("status")
    if status:
        query = query.filter(Transaction.status == status)
    items, pagination = paginate_query(query.order_by(Transaction.created_at.desc(), Transaction.id.desc()),
                                       page, limit)
    return success_response([t.to_dict() for t in items], pagination=pagination)


@bp.route("/withdrawal-requests/<int:transaction_id>/cancel", methods=["PATCH"])
@login_required
def cancel_withdrawal(transaction_id):
    tx = db.session.get(Transaction, transaction_id)
    if tx is None or tx.transaction_type != TransactionType.WITHDRAWAL.value:
        return error_response("Withdrawal request not found", 404)
    if tx.user_id != current_user.id:
        return error_response("You can only cancel your own withdrawal requests", 403)
    if tx.status != TransactionStatus.PENDING.value:
        return error_response(f"Cannot cancel {tx.status.lower()} withdrawal request", 400)

    tx.status = TransactionStatus.CANCELLED.value
    db.session.commit()
    payments_logger.info(f"Withdrawal request {tx.transaction_id} cancelled by user {current_user.id}")
    return success_response(tx.to_dict(), "Withdrawal request cancelled successfully")
