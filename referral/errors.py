# ==========================================================
#                  REFERRAL EXCEPTIONS
# ==========================================================
class ReferralError(Exception):
    """Base referral exception"""
    pass

class InvalidReferralCode(ReferralError):
    pass

class SelfReferralError(ReferralError):
    pass

class InsufficientEarningsError(ReferralError):

    def __init__(self, message, minimum):
        self.minimum = minimum
        super().__init__(message)
