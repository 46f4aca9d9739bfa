# models.py - Canonical Flask-SQLAlchemy models for the betting panel
from datetime import datetime, timezone
from enum import Enum
from sqlalchemy import UniqueConstraint, Index, text
from extensions import db
from werkzeug.security import check_password_hash, generate_password_hash

# ===========================================================
# ENUM DEFINITIONS
# ===========================================================

class UserStatus(Enum):
    ACTIVE = "active"
    BANNED = "banned"
    DEACTIVATED = "deactivated"


class ReferralTransactionStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"


class TransactionStatus(Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    FAILED = "Failed"
    CANCELLED = "Cancelled"


class TransactionType(Enum):
    DEPOSIT = "Deposit"
    WITHDRAWAL = "Withdrawal"
    TRANSFER = "Transfer"


def _money(value):
    return float(value) if value is not None else 0.0


def _iso(value):
    return value.isoformat() if value else None


# ===========================================================
# BASE MIXIN FOR COMMON FIELDS
# ===========================================================

class BaseMixin:
    """Provides created_at and updated_at timestamps to inheriting models."""
    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(db.DateTime(timezone=True),
                           default=lambda: datetime.now(timezone.utc),
                           onupdate=lambda: datetime.now(timezone.utc))

# ===========================================================
# USER MODEL
# ===========================================================

class User(db.Model, BaseMixin):
    """Player or admin account. Referral links are derived from referred_by."""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    name = db.Column(db.String(120), default="")
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)

    country = db.Column(db.String(60), nullable=False, default="Bangladesh")
    currency = db.Column(db.String(10), nullable=False, default="BDT")
    phone_number = db.Column(db.String(32), nullable=True)
    player_id = db.Column(db.String(40), nullable=False)
    promo_code = db.Column(db.String(40), nullable=True)
    bonus_selection = db.Column(db.String(80), default="")
    birthday = db.Column(db.String(20), default="")
    profile_image = db.Column(db.String(500), default="")

    status = db.Column(db.String(20), nullable=False, default=UserStatus.ACTIVE.value, index=True)
    role = db.Column(db.String(20), nullable=False, default="user", index=True)
    is_verified = db.Column(db.Boolean, default=False)

    balance = db.Column(db.Numeric(18, 2), nullable=False, default=0, server_default=text("0"))
    deposit = db.Column(db.Numeric(18, 2), nullable=False, default=0, server_default=text("0"))
    withdraw = db.Column(db.Numeric(18, 2), nullable=False, default=0, server_default=text("0"))

    # --- Referral system ---
    referral_code = db.Column(db.String(20), unique=True, nullable=True)  # User's own referral code
    referred_by = db.Column(db.String(20), nullable=True, index=True)  # Code of the user who referred this user
    referral_earnings = db.Column(db.Numeric(18, 2), nullable=False, default=0, server_default=text("0"))

    # Individual settings applied when someone signs up with THIS user's code
    ind_signup_bonus = db.Column(db.Numeric(18, 2), nullable=False, default=0)
    ind_referral_commission = db.Column(db.Numeric(18, 2), nullable=False, default=25)
    ind_referral_deposit_bonus = db.Column(db.Numeric(18, 2), nullable=False, default=0)
    ind_min_withdraw_amount = db.Column(db.Numeric(18, 2), nullable=False, default=100)
    ind_min_transfer_amount = db.Column(db.Numeric(18, 2), nullable=False, default=50)
    ind_max_commission_limit = db.Column(db.Numeric(18, 2), nullable=False, default=1000)
    use_global_settings = db.Column(db.Boolean, nullable=False, default=True)

    referred_users = db.relationship(
        'User',
        primaryjoin='User.referral_code == remote(foreign(User.referred_by))',
        lazy='dynamic',
        viewonly=True,
    )
    referrer = db.relationship(
        'User',
        primaryjoin='foreign(User.referred_by) == remote(User.referral_code)',
        uselist=False,
        viewonly=True,
    )

    transactions = db.relationship('Transaction', back_populates='user', lazy='dynamic')

    __table_args__ = (
        Index('idx_user_referral_code', 'referral_code'),
    )

    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    # Flask-Login protocol
    @property
    def is_active(self):
        return self.status == UserStatus.ACTIVE.value

    @property
    def is_authenticated(self):
        return True

    @property
    def is_anonymous(self):
        return False

    def get_id(self):
        return str(self.id)

    @property
    def is_admin(self):
        return self.role == "admin"

    def individual_settings_dict(self):
        return {
            "signupBonus": _money(self.ind_signup_bonus),
            "referralCommission": _money(self.ind_referral_commission),
            "referralDepositBonus": _money(self.ind_referral_deposit_bonus),
            "minWithdrawAmount": _money(self.ind_min_withdraw_amount),
            "minTransferAmount": _money(self.ind_min_transfer_amount),
            "maxCommissionLimit": _money(self.ind_max_commission_limit),
            "useGlobalSettings": bool(self.use_global_settings),
        }

    def to_summary(self):
        """Short form used when a user is embedded in another payload."""
        return {
            "id": self.id,
            "name": self.name,
            "username": self.username,
            "email": self.email,
            "status": self.status,
            "createdAt": _iso(self.created_at),
        }

    def to_dict(self, include_referral=True):
        """Serialize user for JSON responses. Never includes the password hash."""
        result = {
            "id": self.id,
            "name": self.name,
            "username": self.username,
            "email": self.email,
            "country": self.country,
            "currency": self.currency,
            "phoneNumber": self.phone_number,
            "player_id": self.player_id,
            "promoCode": self.promo_code,
            "bonusSelection": self.bonus_selection,
            "birthday": self.birthday,
            "profileImage": self.profile_image,
            "status": self.status,
            "role": self.role,
            "isVerified": self.is_verified,
            "balance": _money(self.balance),
            "deposit": _money(self.deposit),
            "withdraw": _money(self.withdraw),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
        if include_referral:
            result.update({
                "referralCode": self.referral_code,
                "referredBy": self.referred_by,
                "referralEarnings": _money(self.referral_earnings),
                "totalReferrals": self.referred_users.count() if self.referral_code else 0,
                "individualReferralSettings": self.individual_settings_dict(),
            })
        return result

# ===========================================================
# REFERRALS
# ===========================================================

class ReferralSettings(db.Model, BaseMixin):
    """Global referral defaults. One row, served through a process-wide store."""
    __tablename__ = 'referral_settings'

    id = db.Column(db.Integer, primary_key=True)
    signup_bonus = db.Column(db.Numeric(18, 2), nullable=False, default=0)
    referral_commission = db.Column(db.Numeric(18, 2), nullable=False, default=25)
    referral_deposit_bonus = db.Column(db.Numeric(18, 2), nullable=False, default=0)
    max_commission_limit = db.Column(db.Numeric(18, 2), nullable=False, default=1000)
    min_withdraw_amount = db.Column(db.Numeric(18, 2), nullable=False, default=100)
    min_transfer_amount = db.Column(db.Numeric(18, 2), nullable=False, default=50)

    def to_dict(self):
        return {
            "id": self.id,
            "signupBonus": _money(self.signup_bonus),
            "referralCommission": _money(self.referral_commission),
            "referralDepositBonus": _money(self.referral_deposit_bonus),
            "maxCommissionLimit": _money(self.max_commission_limit),
            "minWithdrawAmount": _money(self.min_withdraw_amount),
            "minTransferAmount": _money(self.min_transfer_amount),
            "updatedAt": _iso(self.updated_at),
        }


class ReferralTransaction(db.Model, BaseMixin):
    """Append-only ledger entry, one row per bonus event."""
    __tablename__ = 'referral_transactions'

    id = db.Column(db.Integer, primary_key=True)
    referrer_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    # Null once the referee account is deleted; the credit stays on the ledger
    referee_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True)
    amount = db.Column(db.Numeric(18, 2), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=ReferralTransactionStatus.PENDING.value, index=True)
    kind = db.Column(db.String(30), nullable=False, default="signup")

    referrer = db.relationship('User', foreign_keys=[referrer_id])
    referee = db.relationship('User', foreign_keys=[referee_id])

    __table_args__ = (
        UniqueConstraint('referee_id', 'kind', name='uq_referral_tx_referee_kind'),
        Index('idx_referral_tx_created', 'created_at'),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "referrer": self.referrer.to_summary() if self.referrer else None,
            "referee": self.referee.to_summary() if self.referee else None,
            "amount": _money(self.amount),
            "status": self.status,
            "kind": self.kind,
            "createdAt": _iso(self.created_at),
        }

# ===========================================================
# TRANSACTIONS & PAYMENT METHODS
# ===========================================================

class Transaction(db.Model, BaseMixin):
    __tablename__ = 'transactions'

    id = db.Column(db.Integer, primary_key=True)
    amount = db.Column(db.Numeric(18, 2), nullable=False)
    wallet_provider = db.Column(db.String(100), nullable=False)
    transaction_id = db.Column(db.String(120), unique=True, nullable=False)
    wallet_number = db.Column(db.String(60), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=TransactionStatus.PENDING.value, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True)
    transaction_type = db.Column(db.String(20), nullable=False, default=TransactionType.DEPOSIT.value)
    description = db.Column(db.String(500), nullable=True)
    reference_number = db.Column(db.String(120), nullable=True)

    user = db.relationship('User', back_populates='transactions')

    __table_args__ = (
        db.CheckConstraint('amount >= 0', name='chk_transaction_amount_positive'),
        Index('idx_transaction_provider', 'wallet_provider'),
        Index('idx_transaction_created', 'created_at'),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "amount": _money(self.amount),
            "wallet_provider": self.wallet_provider,
            "transaction_id": self.transaction_id,
            "wallet_number": self.wallet_number,
            "status": self.status,
            "user": self.user.to_summary() if self.user else None,
            "transaction_type": self.transaction_type,
            "description": self.description,
            "reference_number": self.reference_number,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class PaymentMethod(db.Model, BaseMixin):
    __tablename__ = 'payment_methods'

    id = db.Column(db.Integer, primary_key=True)
    method_name_en = db.Column(db.String(120), nullable=False)
    method_name_bd = db.Column(db.String(120), nullable=True)
    agent_wallet_number = db.Column(db.String(60), nullable=True)
    agent_wallet_text = db.Column(db.String(255), nullable=True)
    method_image = db.Column(db.String(500), nullable=True)
    payment_page_image = db.Column(db.String(500), nullable=True)
    gateways = db.Column(db.JSON, nullable=False, default=list)
    text_color = db.Column(db.String(20), default="#000000")
    background_color = db.Column(db.String(20), default="#ffffff")
    button_color = db.Column(db.String(20), default="#000000")
    instruction_en = db.Column(db.Text, default="")
    instruction_bd = db.Column(db.Text, default="")
    status = db.Column(db.String(20), nullable=False, default="Active")
    user_inputs = db.Column(db.JSON, nullable=False, default=list)

    def to_dict(self):
        return {
            "id": self.id,
            "method_name_en": self.method_name_en,
            "method_name_bd": self.method_name_bd,
            "agent_wallet_number": self.agent_wallet_number,
            "agent_wallet_text": self.agent_wallet_text,
            "method_image": self.method_image,
            "payment_page_image": self.payment_page_image,
            "gateways": self.gateways or [],
            "text_color": self.text_color,
            "background_color": self.background_color,
            "button_color": self.button_color,
            "instruction_en": self.instruction_en,
            "instruction_bd": self.instruction_bd,
            "status": self.status,
            "user_inputs": self.user_inputs or [],
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class WithdrawalMethod(db.Model, BaseMixin):
    __tablename__ = 'withdrawal_methods'

    id = db.Column(db.Integer, primary_key=True)
    method_name_en = db.Column(db.String(120), nullable=False)
    method_name_bd = db.Column(db.String(120), nullable=True)
    method_image = db.Column(db.String(500), nullable=True)
    withdrawal_page_image = db.Column(db.String(500), nullable=True)
    min_withdrawal = db.Column(db.Numeric(18, 2), nullable=False, default=100)
    max_withdrawal = db.Column(db.Numeric(18, 2), nullable=False, default=100000)
    processing_time = db.Column(db.String(60), default="24 hours")
    withdrawal_fee = db.Column(db.Numeric(18, 2), nullable=False, default=0)
    fee_type = db.Column(db.String(20), nullable=False, default="fixed")  # fixed, percentage
    text_color = db.Column(db.String(20), default="#000000")
    background_color = db.Column(db.String(20), default="#ffffff")
    button_color = db.Column(db.String(20), default="#000000")
    instruction_en = db.Column(db.Text, default="")
    instruction_bd = db.Column(db.Text, default="")
    status = db.Column(db.String(20), nullable=False, default="Active")
    user_inputs = db.Column(db.JSON, nullable=False, default=list)

    def to_dict(self):
        return {
            "id": self.id,
            "method_name_en": self.method_name_en,
            "method_name_bd": self.method_name_bd,
            "method_image": self.method_image,
            "withdrawal_page_image": self.withdrawal_page_image,
            "min_withdrawal": _money(self.min_withdrawal),
            "max_withdrawal": _money(self.max_withdrawal),
            "processing_time": self.processing_time,
            "withdrawal_fee": _money(self.withdrawal_fee),
            "fee_type": self.fee_type,
            "text_color": self.text_color,
            "background_color": self.background_color,
            "button_color": self.button_color,
            "instruction_en": self.instruction_en,
            "instruction_bd": self.instruction_bd,
            "status": self.status,
            "user_inputs": self.user_inputs or [],
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }

# ===========================================================
# PROMOTIONS & SITE CONTENT
# ===========================================================

class Promotion(db.Model, BaseMixin):
    __tablename__ = 'promotions'

    id = db.Column(db.Integer, primary_key=True)
    promotion_image = db.Column(db.String(500), nullable=True)
    title_en = db.Column(db.String(200), nullable=False)
    title_bd = db.Column(db.String(200), nullable=True)
    description_en = db.Column(db.Text, nullable=True)
    description_bd = db.Column(db.Text, nullable=True)
    game_type = db.Column(db.String(60), nullable=False)
    payment_methods = db.Column(db.JSON, nullable=False, default=list)  # PaymentMethod ids
    bonus_type = db.Column(db.String(20), nullable=False, default="fixed")  # percentage, fixed
    bonus_value = db.Column(db.Numeric(18, 2), nullable=False, default=0)
    max_bonus_limit = db.Column(db.Numeric(18, 2), nullable=False, default=0)
    status = db.Column(db.String(20), nullable=False, default="Active")

    def to_dict(self):
        return {
            "id": self.id,
            "promotion_image": self.promotion_image,
            "title_en": self.title_en,
            "title_bd": self.title_bd,
            "description_en": self.description_en,
            "description_bd": self.description_bd,
            "game_type": self.game_type,
            "payment_methods": self.payment_methods or [],
            "bonus_settings": {
                "bonus_type": self.bonus_type,
                "bonus_value": _money(self.bonus_value),
                "max_bonus_limit": _money(self.max_bonus_limit),
            },
            "status": self.status,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class Slider(db.Model, BaseMixin):
    __tablename__ = 'sliders'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    status = db.Column(db.String(20), nullable=False, default="inactive")  # active, inactive
    image_url = db.Column(db.String(500), nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "imageUrl": self.image_url,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class TopWinner(db.Model, BaseMixin):
    __tablename__ = 'top_winners'

    id = db.Column(db.Integer, primary_key=True)
    game_name = db.Column(db.String(120), nullable=False)
    game_category = db.Column(db.String(60), nullable=False)
    username = db.Column(db.String(80), nullable=False)
    win_amount = db.Column(db.Numeric(18, 2), nullable=False)
    currency = db.Column(db.String(10), default="BDT")
    win_time = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    game_image = db.Column(db.String(500), nullable=True)
    multiplier = db.Column(db.Numeric(10, 2), nullable=True)
    is_live = db.Column(db.Boolean, default=True)

    def to_dict(self):
        return {
            "id": self.id,
            "gameName": self.game_name,
            "gameCategory": self.game_category,
            "username": self.username,
            "winAmount": _money(self.win_amount),
            "currency": self.currency,
            "winTime": _iso(self.win_time),
            "gameImage": self.game_image,
            "multiplier": float(self.multiplier) if self.multiplier is not None else None,
            "isLive": self.is_live,
            "createdAt": _iso(self.created_at),
        }

# ===========================================================
# GAME CATALOG & MATCHES
# ===========================================================

class Provider(db.Model, BaseMixin):
    __tablename__ = 'providers'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False)
    logo = db.Column(db.String(500), nullable=False)
    is_active = db.Column(db.Boolean, default=True)

    def to_summary(self):
        return {"id": self.id, "name": self.name, "logo": self.logo}

    def to_dict(self):
        return {
            **self.to_summary(),
            "isActive": self.is_active,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class GameCategory(db.Model, BaseMixin):
    __tablename__ = 'game_categories'

    id = db.Column(db.Integer, primary_key=True)
    name_english = db.Column(db.String(120), nullable=False)
    name_bangla = db.Column(db.String(120), nullable=False)
    icon = db.Column(db.String(500), nullable=False)
    image = db.Column(db.String(500), nullable=True)
    display_type = db.Column(db.String(20), nullable=False, default="providers")  # providers, games
    providers = db.Column(db.JSON, nullable=False, default=list)  # Provider ids
    sub_categories = db.Column(db.JSON, nullable=False, default=list)  # [{"id", "name"}]

    def to_summary(self):
        return {"id": self.id, "nameEnglish": self.name_english, "nameBangla": self.name_bangla, "icon": self.icon}

    def to_dict(self):
        return {
            **self.to_summary(),
            "image": self.image,
            "displayType": self.display_type,
            "providers": self.providers or [],
            "subCategories": self.sub_categories or [],
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class Game(db.Model, BaseMixin):
    __tablename__ = 'games'

    id = db.Column(db.Integer, primary_key=True)
    game_uuid = db.Column(db.String(120), unique=True, nullable=False)
    name_english = db.Column(db.String(200), nullable=False)
    name_bangla = db.Column(db.String(200), nullable=False)
    image = db.Column(db.String(500), nullable=False)
    provider_id = db.Column(db.Integer, db.ForeignKey('providers.id', ondelete='SET NULL'), nullable=True, index=True)
    category_id = db.Column(db.Integer, db.ForeignKey('game_categories.id'), nullable=False, index=True)
    is_hot = db.Column(db.Boolean, default=False)
    is_new_game = db.Column(db.Boolean, default=False)
    is_lobby = db.Column(db.Boolean, default=False)

    provider = db.relationship('Provider')
    category = db.relationship('GameCategory')

    def to_dict(self):
        return {
            "id": self.id,
            "gameUuid": self.game_uuid,
            "nameEnglish": self.name_english,
            "nameBangla": self.name_bangla,
            "image": self.image,
            "provider": self.provider.to_summary() if self.provider else None,
            "category": self.category.to_summary() if self.category else None,
            "isHot": self.is_hot,
            "isNewGame": self.is_new_game,
            "isLobby": self.is_lobby,
            "createdAt": _iso(self.created_at),
        }


class PopularGame(db.Model, BaseMixin):
    __tablename__ = 'popular_games'

    id = db.Column(db.Integer, primary_key=True)
    image = db.Column(db.String(500), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    redirect_url = db.Column(db.String(500), nullable=False)
    is_active = db.Column(db.Boolean, default=True)
    position = db.Column('sort_order', db.Integer, nullable=False, default=0)

    def to_dict(self):
        return {
            "id": self.id,
            "image": self.image,
            "title": self.title,
            "redirectUrl": self.redirect_url,
            "isActive": self.is_active,
            "order": self.position,
            "createdAt": _iso(self.created_at),
        }


class UpcomingMatch(db.Model, BaseMixin):
    __tablename__ = 'upcoming_matches'

    id = db.Column(db.Integer, primary_key=True)
    match_type = db.Column(db.String(60), nullable=False)  # T20, Test, Football ...
    match_date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    team_a = db.Column(db.JSON, nullable=False)  # {"name", "flagImage", "odds"}
    team_b = db.Column(db.JSON, nullable=False)
    is_live = db.Column(db.Boolean, default=False)
    category = db.Column(db.String(60), nullable=False, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "matchType": self.match_type,
            "matchDate": _iso(self.match_date),
            "teamA": self.team_a,
            "teamB": self.team_b,
            "isLive": self.is_live,
            "category": self.category,
            "createdAt": _iso(self.created_at),
        }

# ===========================================================
# SINGLETON CONFIGURATION ROWS
# ===========================================================

class BannerText(db.Model, BaseMixin):
    __tablename__ = 'banner_text'

    id = db.Column(db.Integer, primary_key=True)
    english_text = db.Column(db.String(500), nullable=False, default="Welcome to our betting platform!")
    bangla_text = db.Column(db.String(500), nullable=False, default="আমাদের বেটিং প্ল্যাটফর্মে স্বাগতম!")

    def to_dict(self):
        return {
            "id": self.id,
            "englishText": self.english_text,
            "banglaText": self.bangla_text,
            "updatedAt": _iso(self.updated_at),
        }


class ContactSettings(db.Model, BaseMixin):
    __tablename__ = 'contact_settings'

    id = db.Column(db.Integer, primary_key=True)
    service247_url = db.Column(db.String(500), nullable=False, default="")
    whatsapp_url = db.Column(db.String(500), nullable=False, default="")
    telegram_url = db.Column(db.String(500), nullable=False, default="")
    facebook_url = db.Column(db.String(500), nullable=False, default="")

    def to_dict(self):
        return {
            "id": self.id,
            "service247Url": self.service247_url,
            "whatsappUrl": self.whatsapp_url,
            "telegramUrl": self.telegram_url,
            "facebookUrl": self.facebook_url,
            "updatedAt": _iso(self.updated_at),
        }


THEME_DEFAULTS = {
    "siteInfo": {"logo": "", "favicon": ""},
    "header": {
        "bgColor": "#001f1f",
        "textColor": "#ffffff",
        "fontSize": "16px",
        "logoWidth": "140px",
        "loginButtonBg": "#09bda2",
        "loginButtonTextColor": "#ffffff",
        "signupButtonBg": "#09bda2",
        "signupButtonTextColor": "#ffffff",
    },
    "webMenu": {
        "bgColor": "#012a2a",
        "textColor": "#ffffff",
        "fontSize": "15px",
        "hoverColor": "#09bda2",
        "activeColor": "#09bda2",
    },
    "mobileMenu": {
        "bgColor": "#001f1f",
        "textColor": "#ffffff",
        "fontSize": "14px",
        "loginButtonBg": "#09bda2",
        "loginButtonTextColor": "#ffffff",
        "signupButtonBg": "#09bda2",
        "signupButtonTextColor": "#ffffff",
    },
    "fontSettings": {
        "globalFontFamily": "Inter, sans-serif",
        "globalTextColor": "#ffffff",
        "headingFontSize": "24px",
        "paragraphFontSize": "16px",
    },
    "footer": {
        "bgColor": "#001f1f",
        "textColor": "#ffffff",
        "linkHoverColor": "#09bda2",
    },
    "customSections": {
        "topWinners": {"cardBgColor": "#012a2a", "cardTextColor": "#ffffff"},
        "upcomingMatches": {"cardBgColor": "#012a2a", "borderColor": "#09bda2"},
    },
}


class ThemeConfig(db.Model, BaseMixin):
    __tablename__ = 'theme_config'

    id = db.Column(db.Integer, primary_key=True)
    sections = db.Column(db.JSON, nullable=False, default=dict)
    is_active = db.Column(db.Boolean, default=True)


SITE_SETTINGS_DEFAULTS = {
    "organizationName": "Betting Platform",
    "organizationImage": "https://via.placeholder.com/200x100?text=Logo",
    "themeColor": "#3B82F6",
    "primaryColor": "#1E40AF",
    "secondaryColor": "#64748B",
    "accentColor": "#F59E0B",
    "logoUrl": "",
    "faviconUrl": "",
    "supportEmail": "support@bettingsite.com",
    "supportPhone": "",
    "address": "",
    "websiteUrl": "",
    "socialLinks": {"facebook": "", "twitter": "", "instagram": "", "linkedin": ""},
    "maintenanceMode": False,
    "registrationEnabled": True,
    "emailVerificationRequired": False,
    "twoFactorEnabled": False,
    "maxLoginAttempts": 5,
    "sessionTimeout": 60,
    "headerColor": "#FFFFFF",
    "headerLoginSignupButtonBgColor": "#3B82F6",
    "headerLoginSignupButtonTextColor": "#FFFFFF",
    "webMenuBgColor": "#F8FAFC",
    "webMenuTextColor": "#0F172A",
    "webMenuFontSize": "16px",
    "webMenuHoverColor": "#3B82F6",
    "mobileMenuLoginSignupButtonBgColor": "#3B82F6",
    "mobileMenuLoginSignupButtonTextColor": "#FFFFFF",
    "mobileMenuFontSize": "16px",
    "footerText": "© 2025 Betting Platform. All rights reserved.",
    "footerSocialLinks": {"facebook": "", "twitter": "", "instagram": "", "linkedin": ""},
    "navigationItems": [
        {"id": "1", "label": "Home", "url": "/", "order": 1},
        {"id": "2", "label": "Sports", "url": "/sports", "order": 2},
        {"id": "3", "label": "Casino", "url": "/casino", "order": 3},
        {"id": "4", "label": "Promotions", "url": "/promotions", "order": 4},
        {"id": "5", "label": "Support", "url": "/support", "order": 5},
    ],
}


class SiteSettings(db.Model, BaseMixin):
    """Organization, branding and landing-page settings, keyed as in SITE_SETTINGS_DEFAULTS."""
    __tablename__ = 'site_settings'

    id = db.Column(db.Integer, primary_key=True)
    values = db.Column(db.JSON, nullable=False, default=dict)


PROMO_SECTION_DEFAULTS = {
    "banner": {
        "title": "খেলা88 অফিসিয়াল বাংলাদেশ নং.১ প্ল্যাটফর্ম",
        "subtitle": "বাংলাদেশের সবচেয়ে বিশ্বস্ত বেটিং প্ল্যাটফর্ম",
        "ctaText": "এখন আমাদের সাথে যোগদিন",
        "ctaLink": "/register",
        "image": "/images/banner-girl.png",
    },
    "video": {
        "title": "Khela88 Sarah",
        "youtubeUrl": "https://www.youtube.com/watch?v=example",
        "thumbnail": "/images/video-thumbnail.png",
    },
    "extraBanner": {
        "image": "/images/extra-banner.png",
        "link": "/promotions",
    },
}


class PromoSection(db.Model, BaseMixin):
    __tablename__ = 'promo_section'

    id = db.Column(db.Integer, primary_key=True)
    sections = db.Column(db.JSON, nullable=False, default=dict)
    is_active = db.Column(db.Boolean, default=True)
