from models import User
from referral.settings import ReferralTerms, global_terms


def effective_settings(referrer, global_settings):
    """
    Terms that apply to users referred by ``referrer``.

    The referrer's individual settings win only when their
    use_global_settings flag is off.
    """
    if referrer is not None and referrer.use_global_settings is False:
        return ReferralTerms.from_user(referrer), "individual"
    return global_settings, "global"


def find_referrer(user):
    if not user.referred_by:
        return None
    return User.query.filter_by(referral_code=user.referred_by).first()


def terms_for_user(user):
    """Terms governing ``user``: their referrer's effective terms, else global."""
    referrer = find_referrer(user)
    if referrer is None:
        return global_terms(), "global"
    return effective_settings(referrer, global_terms())


def login_projection(user):
    """Read-only referral terms returned on login, or None when not referred."""
    referrer = find_referrer(user)
    if referrer is None:
        return None

    terms, source = effective_settings(referrer, global_terms())
    values = terms.to_dict()
    return {
        "referralCommission": values["referralCommission"],
        "referralDepositBonus": values["referralDepositBonus"],
        "minWithdrawAmount": values["minWithdrawAmount"],
        "minTransferAmount": values["minTransferAmount"],
        "maxCommissionLimit": values["maxCommissionLimit"],
        "signupBonusForReferrals": float(user.ind_signup_bonus or 0),
        "referrerName": referrer.name or referrer.username,
        "referrerCode": referrer.referral_code,
        "source": source,
    }
