import uuid

from django.contrib.auth import hashers
from django.db import models

from .choices import Emirate, PaymentStatus, Role, UserStatus


def generate_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex}"


def generate_member_id():
    return generate_id("user")


class Member(models.Model):
    """
    A registered member of the organization.

    Administrators are members too; their role decides which console they get.
    The `version` column is bumped on every workflow mutation so concurrent
    admin sessions cannot silently overwrite each other.
    """

    id = models.CharField(max_length=64, primary_key=True, default=generate_member_id)
    full_name = models.CharField(max_length=255)
    email = models.EmailField(blank=True, null=True, unique=True)
    mobile = models.CharField(max_length=32, db_index=True)
    whatsapp = models.CharField(max_length=32, blank=True, default="")
    national_id = models.CharField(
        max_length=32, unique=True, help_text="Emirates ID number, unique per member"
    )
    password = models.CharField(max_length=128)

    role = models.CharField(max_length=20, choices=Role.choices, default=Role.USER, db_index=True)
    permissions = models.JSONField(
        default=list, blank=True, help_text="Admin console tabs granted to a custom admin"
    )
    assigned_mandalams = models.JSONField(
        default=list, blank=True, help_text="Mandalams a regional admin is responsible for"
    )
    mandalam = models.CharField(max_length=100, db_index=True)
    emirate = models.CharField(max_length=32, choices=Emirate.choices, default=Emirate.DUBAI)

    status = models.CharField(
        max_length=20, choices=UserStatus.choices, default=UserStatus.PENDING, db_index=True
    )
    payment_status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.UNPAID, db_index=True
    )
    payment_remarks = models.TextField(blank=True, default="")
    payment_proof = models.TextField(blank=True, default="", help_text="Proof image URL or data URI")
    payment_submitted_at = models.DateTimeField(blank=True, null=True)
    payment_reset_year = models.PositiveIntegerField(
        blank=True, null=True, help_text="Last year rollover applied to this member"
    )

    membership_no = models.CharField(max_length=32, unique=True)
    registration_year = models.PositiveIntegerField(db_index=True)
    registration_date = models.DateField(blank=True, null=True)
    approved_by = models.CharField(max_length=255, blank=True, null=True)
    approved_at = models.DateTimeField(blank=True, null=True)
    is_imported = models.BooleanField(
        default=False, help_text="Bulk imported and still awaiting profile completion"
    )
    custom_data = models.JSONField(
        default=dict, blank=True, help_text="Registration answers keyed by question id"
    )

    photo_url = models.CharField(max_length=500, blank=True, default="")
    address_uae = models.TextField(blank=True, default="")
    address_india = models.TextField(blank=True, default="")
    nominee = models.CharField(max_length=255, blank=True, default="")
    relation = models.CharField(max_length=50, blank=True, default="")
    is_kmcc_member = models.BooleanField(default=False)
    kmcc_no = models.CharField(max_length=50, blank=True, default="")
    is_pratheeksha_member = models.BooleanField(default=False)
    pratheeksha_no = models.CharField(max_length=50, blank=True, default="")
    recommended_by = models.CharField(max_length=255, blank=True, default="")

    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "users"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["mandalam", "status"]),
            models.Index(fields=["registration_year", "payment_status"]),
        ]

    def __str__(self):
        return f"{self.full_name} ({self.membership_no})"

    # DRF permission classes check this on whatever the authenticator returned
    @property
    def is_authenticated(self):
        return True

    @property
    def is_admin(self):
        return self.role != Role.USER

    @property
    def is_master_admin(self):
        return self.role == Role.MASTER_ADMIN

    def set_password(self, raw_password: str):
        self.password = hashers.make_password(raw_password)

    def check_password(self, raw_password: str) -> bool:
        return hashers.check_password(raw_password, self.password)
