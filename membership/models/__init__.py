from .choices import (
    BenefitType,
    CORE_IDENTITY_FIELDS,
    Emirate,
    MessageStatus,
    NotificationType,
    OPTIONAL_IDENTITY_FIELDS,
    PaymentStatus,
    QuestionType,
    Role,
    SystemField,
    UserStatus,
    YearStatus,
)
from .member import Member, generate_id
from .registration import RegistrationQuestion
from .year import MembershipSequence, YearConfig
from .content import BenefitRecord, CardConfig, Message, News, Notification, Sponsor

__all__ = [
    "BenefitRecord",
    "BenefitType",
    "CORE_IDENTITY_FIELDS",
    "CardConfig",
    "Emirate",
    "Member",
    "MembershipSequence",
    "Message",
    "MessageStatus",
    "News",
    "Notification",
    "NotificationType",
    "OPTIONAL_IDENTITY_FIELDS",
    "PaymentStatus",
    "QuestionType",
    "RegistrationQuestion",
    "Role",
    "Sponsor",
    "SystemField",
    "UserStatus",
    "YearConfig",
    "YearStatus",
    "generate_id",
]
