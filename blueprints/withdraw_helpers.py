from decimal import Decimal, ROUND_HALF_UP
from datetime import datetime, timezone
import secrets
import string
import logging
from typing import Tuple, Dict
from sqlalchemy import update
from extensions import db
from logger import payments_logger
from models import User, Transaction, TransactionStatus, TransactionType, WithdrawalMethod
from utils import parse_amount


logger = logging.getLogger(__name__)

# ==========================================================
#                  CONFIGURATION
# ==========================================================
class WithdrawalConfig:
    FEE_TYPES = ("fixed", "percentage")
    CENTS = Decimal("0.01")

    @staticmethod
    def calculate_fee(method: WithdrawalMethod, amount: Decimal) -> Decimal:
        """Fixed fee, or a percentage of the requested amount"""
        fee_value = Decimal(str(method.withdrawal_fee or 0))
        if method.fee_type == "percentage":
            fee = (amount * fee_value) / Decimal("100")
        else:
            fee = fee_value
        return fee.quantize(WithdrawalConfig.CENTS, rounding=ROUND_HALF_UP)

    @staticmethod
    def _stamp():
        return str(int(datetime.now(timezone.utc).timestamp() * 1000))

    @staticmethod
    def transaction_id() -> str:
        suffix = ''.join(secrets.choice(string.ascii_uppercase + string.digits) for _ in range(4))
        return f"WD{WithdrawalConfig._stamp()}{suffix}"

    @staticmethod
    def reference_number() -> str:
        return f"WR{WithdrawalConfig._stamp()}"

# ==========================================================
#                  EXCEPTIONS
# ==========================================================
class WithdrawalException(Exception):
    """Base withdrawal exception"""
    status_code = 400

    def __init__(self, message, data=None):
        super().__init__(message)
        self.message = message
        self.data = data

class InsufficientBalanceError(WithdrawalException):
    pass

class ValidationError(WithdrawalException):
    pass

class MethodUnavailableError(WithdrawalException):
    pass

class MethodNotFoundError(WithdrawalException):
    status_code = 404

# ==========================================================
#                  WITHDRAWAL VALIDATOR
# ==========================================================
class WithdrawalValidator:
    @staticmethod
    def validate_request_fields(data: Dict) -> Tuple[bool, str]:
        if not data.get("withdrawal_method_id") or not data.get("amount") or not data.get("phone_number"):
            return False, "withdrawal_method_id, amount, and phone_number are required"
        amount = parse_amount(data.get("amount"))
        if amount is None:
            return False, "Invalid amount format"
        if amount <= 0:
            return False, "Amount must be greater than 0"
        if not isinstance(data.get("phone_number"), str):
            return False, "Valid phone number is required"
        return True, "Validation passed"

    @staticmethod
    def check_method(method: WithdrawalMethod, amount: Decimal):
        if method is None:
            raise MethodNotFoundError("Withdrawal method not found")
        if method.status != "Active":
            raise MethodUnavailableError("This withdrawal method is currently inactive")

        minimum = Decimal(str(method.min_withdrawal))
        maximum = Decimal(str(method.max_withdrawal))
        if amount < minimum:
            raise ValidationError(f"Minimum withdrawal amount is {minimum}",
                                  {"minAmount": float(minimum), "requestedAmount": float(amount)})
        if amount > maximum:
            raise ValidationError(f"Maximum withdrawal amount is {maximum}",
                                  {"maxAmount": float(maximum), "requestedAmount": float(amount)})

# ==========================================================
#                  REQUEST CREATION
# ==========================================================
def create_withdrawal_request(user: User, data: Dict):
    """
    Validate and record a Pending Withdrawal transaction.
    The balance is only debited when an admin completes it.
    """
    ok, message = WithdrawalValidator.validate_request_fields(data)
    if not ok:
        raise ValidationError(message)

    amount = parse_amount(data["amount"])
    balance = Decimal(str(user.balance or 0))
    if balance < amount:
        raise InsufficientBalanceError("Insufficient balance", {
            "currentBalance": float(balance),
            "requestedAmount": float(amount),
            "shortfall": float(amount - balance),
        })

    try:
        method_id = int(data["withdrawal_method_id"])
    except (TypeError, ValueError):
        raise MethodNotFoundError("Withdrawal method not found")
    method = db.session.get(WithdrawalMethod, method_id)
    WithdrawalValidator.check_method(method, amount)

    fee = WithdrawalConfig.calculate_fee(method, amount)
    total = amount + fee
    if balance < total:
        raise InsufficientBalanceError("Insufficient balance to cover withdrawal amount and fee", {
            "currentBalance": float(balance),
            "withdrawalAmount": float(amount),
            "fee": float(fee),
            "totalRequired": float(total),
            "shortfall": float(total - balance),
        })

    info = data.get("additional_info")
    description = f"Withdrawal via {method.method_name_en}"
    if info:
        description += f" - {info}"

    tx = Transaction(
        amount=amount,
        wallet_provider=method.method_name_en,
        transaction_id=WithdrawalConfig.transaction_id(),
        wallet_number=data["phone_number"].strip(),
        status=TransactionStatus.PENDING.value,
        user_id=user.id,
        transaction_type=TransactionType.WITHDRAWAL.value,
        description=description,
        reference_number=WithdrawalConfig.reference_number(),
    )
    try:
        db.session.add(tx)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    payments_logger.info(f"Withdrawal request {tx.transaction_id} by user {user.id}: amount={amount} fee={fee}")
    details = {
        "method": method.method_name_en,
        "amount": float(amount),
        "fee": float(fee),
        "totalDeduction": float(total),
        "phoneNumber": tx.wallet_number,
        "processingTime": method.processing_time,
        "currentBalance": float(balance),
        "balanceAfterWithdrawal": float(balance - total),
    }
    return tx, details

# ==========================================================
#                  STATUS TRANSITIONS
# ==========================================================
def apply_status_change(tx: Transaction, status: str):
    """
    Set a transaction's status. The first move to Completed credits a Deposit
    or debits a Withdrawal; the status guard in the UPDATE makes that happen once.
    Returns True when a balance was moved.
    """
    completed = TransactionStatus.COMPLETED.value
    if status != completed or tx.status == completed:
        tx.status = status
        db.session.commit()
        return False

    tx_id, user_id, amount, kind = tx.id, tx.user_id, Decimal(str(tx.amount)), tx.transaction_type
    try:
        claimed = db.session.execute(
            update(Transaction)
            .where(Transaction.id == tx_id, Transaction.status != completed)
            .values(status=completed),
            execution_options={"synchronize_session": False},
        )
        if claimed.rowcount != 1:
            db.session.rollback()
            return False

        moved = False
        if user_id is not None and kind in (TransactionType.DEPOSIT.value, TransactionType.WITHDRAWAL.value):
            stmt = update(User).where(User.id == user_id)
            if kind == TransactionType.DEPOSIT.value:
                stmt = stmt.values(balance=User.balance + amount, deposit=User.deposit + amount)
            else:
                stmt = stmt.where(User.balance >= amount).values(
                    balance=User.balance - amount, withdraw=User.withdraw + amount
                )
            result = db.session.execute(stmt, execution_options={"synchronize_session": False})
            if result.rowcount != 1:
                db.session.rollback()
                user = db.session.get(User, user_id)
                raise InsufficientBalanceError("User has insufficient balance for withdrawal", {
                    "currentBalance": float(user.balance or 0) if user else 0.0,
                    "requestedAmount": float(amount),
                })
            moved = True

        db.session.commit()
    except WithdrawalException:
        raise
    except Exception:
        db.session.rollback()
        raise

    db.session.refresh(tx)
    payments_logger.info(f"Transaction {tx.transaction_id} completed ({kind}, {amount}) balance_moved={moved}")
    return moved
