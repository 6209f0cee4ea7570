from django.db import models


class Role(models.TextChoices):
    MASTER_ADMIN = "MASTER_ADMIN", "Master Admin"
    MANDALAM_ADMIN = "MANDALAM_ADMIN", "Mandalam Admin"
    CUSTOM_ADMIN = "CUSTOM_ADMIN", "Custom Admin"
    USER = "USER", "Member"


class UserStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    APPROVED = "APPROVED", "Approved"
    REJECTED = "REJECTED", "Rejected"


class PaymentStatus(models.TextChoices):
    UNPAID = "UNPAID", "Unpaid"
    PENDING = "PENDING", "Pending Verification"
    PAID = "PAID", "Paid"


class BenefitType(models.TextChoices):
    HOSPITAL = "HOSPITAL", "Hospital"
    DEATH = "DEATH", "Death"
    GULF_RETURNEE = "GULF_RETURNEE", "Gulf Returnee"
    CANCER = "CANCER", "Cancer"


class Emirate(models.TextChoices):
    ABU_DHABI = "ABU_DHABI", "Abu Dhabi"
    DUBAI = "DUBAI", "Dubai"
    SHARJAH = "SHARJAH", "Sharjah"
    AJMAN = "AJMAN", "Ajman"
    UMM_AL_QUWAIN = "UMM_AL_QUWAIN", "Umm Al Quwain"
    RAS_AL_KHAIMAH = "RAS_AL_KHAIMAH", "Ras Al Khaimah"
    FUJAIRAH = "FUJAIRAH", "Fujairah"


class NotificationType(models.TextChoices):
    BROADCAST = "BROADCAST", "Broadcast"
    INDIVIDUAL = "INDIVIDUAL", "Individual"


class MessageStatus(models.TextChoices):
    NEW = "NEW", "New"
    READ = "READ", "Read"
    REPLIED = "REPLIED", "Replied"


class YearStatus(models.TextChoices):
    ACTIVE = "ACTIVE", "Active"
    ARCHIVED = "ARCHIVED", "Archived"


class QuestionType(models.TextChoices):
    TEXT = "TEXT", "Text"
    NUMBER = "NUMBER", "Number"
    EMAIL = "EMAIL", "Email"
    PASSWORD = "PASSWORD", "Password"
    DATE = "DATE", "Date"
    TEXTAREA = "TEXTAREA", "Text Area"
    DROPDOWN = "DROPDOWN", "Dropdown"
    DEPENDENT_DROPDOWN = "DEPENDENT_DROPDOWN", "Dependent Dropdown"
    CHECKBOX = "CHECKBOX", "Checkbox"


class SystemField(models.TextChoices):
    """Member fields a registration question can be mapped onto."""

    FULL_NAME = "full_name", "Full Name"
    MOBILE = "mobile", "Mobile"
    NATIONAL_ID = "national_id", "Emirates ID"
    EMAIL = "email", "Email"
    MANDALAM = "mandalam", "Mandalam"
    EMIRATE = "emirate", "Emirate"
    WHATSAPP = "whatsapp", "WhatsApp"
    ADDRESS_UAE = "address_uae", "Address (UAE)"
    ADDRESS_INDIA = "address_india", "Address (India)"
    NOMINEE = "nominee", "Nominee"
    RELATION = "relation", "Nominee Relation"


CORE_IDENTITY_FIELDS = (
    SystemField.FULL_NAME,
    SystemField.MOBILE,
    SystemField.NATIONAL_ID,
    SystemField.EMAIL,
    SystemField.MANDALAM,
    SystemField.EMIRATE,
)

OPTIONAL_IDENTITY_FIELDS = (
    SystemField.WHATSAPP,
    SystemField.ADDRESS_UAE,
    SystemField.ADDRESS_INDIA,
    SystemField.NOMINEE,
    SystemField.RELATION,
)
