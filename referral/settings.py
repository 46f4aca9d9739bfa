from dataclasses import dataclass, asdict
from decimal import Decimal
from models import ReferralSettings
from stores import SettingsValidationError, SingletonStore, get_store


# ==========================================================
#                  CANONICAL FIELD SCHEMA
# ==========================================================
# camelCase field -> (global column, individual column, min, max)
FIELD_RULES = {
    "signupBonus": ("signup_bonus", "ind_signup_bonus", Decimal("0"), Decimal("10000")),
    "referralCommission": ("referral_commission", "ind_referral_commission", Decimal("0"), Decimal("100")),
    "referralDepositBonus": ("referral_deposit_bonus", "ind_referral_deposit_bonus", Decimal("0"), Decimal("10000")),
    "minWithdrawAmount": ("min_withdraw_amount", "ind_min_withdraw_amount", Decimal("1"), Decimal("100000")),
    "minTransferAmount": ("min_transfer_amount", "ind_min_transfer_amount", Decimal("1"), Decimal("10000")),
    "maxCommissionLimit": ("max_commission_limit", "ind_max_commission_limit", Decimal("1"), Decimal("1000000")),
}

FIELD_LABELS = {
    "signupBonus": "Signup bonus",
    "referralCommission": "Referral commission",
    "referralDepositBonus": "Referral deposit bonus",
    "minWithdrawAmount": "Minimum withdraw amount",
    "minTransferAmount": "Minimum transfer amount",
    "maxCommissionLimit": "Maximum commission limit",
}


def validate_terms(data, individual=False):
    """
    Validate a partial settings payload against the shared schema.

    Returns a dict of column name -> Decimal (or bool for useGlobalSettings)
    ready to be set on a ReferralSettings row, or on a User when
    ``individual`` is true. Unknown keys are ignored. Raises
    SettingsValidationError listing every problem found.
    """
    if not isinstance(data, dict):
        raise SettingsValidationError(["Request body must be a JSON object"])

    errors = []
    cleaned = {}
    for field, (global_col, ind_col, low, high) in FIELD_RULES.items():
        if field not in data:
            continue
        value = data[field]
        label = FIELD_LABELS[field]
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            errors.append(f"{label} must be a number")
            continue
        amount = Decimal(str(value))
        if not amount.is_finite() or amount < low or amount > high:
            errors.append(f"{label} must be between {low} and {high}")
            continue
        cleaned[ind_col if individual else global_col] = amount

    if individual and "useGlobalSettings" in data:
        if isinstance(data["useGlobalSettings"], bool):
            cleaned["use_global_settings"] = data["useGlobalSettings"]
        else:
            errors.append("Use global settings must be a boolean")

    if errors:
        raise SettingsValidationError(errors)
    return cleaned


# ==========================================================
#                  RESOLVED TERMS
# ==========================================================
@dataclass(frozen=True)
class ReferralTerms:
    signup_bonus: Decimal
    referral_commission: Decimal
    referral_deposit_bonus: Decimal
    min_withdraw_amount: Decimal
    min_transfer_amount: Decimal
    max_commission_limit: Decimal

    @classmethod
    def from_snapshot(cls, snapshot):
        return cls(**{
            global_col: Decimal(str(snapshot[field]))
            for field, (global_col, _ind, _lo, _hi) in FIELD_RULES.items()
        })

    @classmethod
    def from_user(cls, user):
        return cls(**{
            global_col: Decimal(str(getattr(user, ind_col)))
            for field, (global_col, ind_col, _lo, _hi) in FIELD_RULES.items()
        })

    def to_dict(self):
        values = asdict(self)
        return {
            field: float(values[global_col])
            for field, (global_col, _ind, _lo, _hi) in FIELD_RULES.items()
        }


# ==========================================================
#                  GLOBAL SETTINGS STORE
# ==========================================================
def _validate_global(data, _current):
    return validate_terms(data, individual=False)


def make_referral_store():
    return SingletonStore(ReferralSettings, _validate_global)


def global_terms():
    return ReferralTerms.from_snapshot(get_store("referral").get())
