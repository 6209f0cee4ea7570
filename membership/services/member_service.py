import logging

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F, Q
from django.utils import timezone

from membership.models import (
    Emirate,
    Member,
    PaymentStatus,
    RegistrationQuestion,
    Role,
    UserStatus,
    YearConfig,
    YearStatus,
)
from membership.rabbitmq import publisher
from membership.services.access_service import ALL_ADMIN_TABS, can_manage_member
from membership.services.registration_form import merge_answers
from membership.services.registration_service import find_duplicate
from membership.services.workflow_service import CONFIRMATION_REQUIRED, not_found

logger = logging.getLogger(__name__)

BOOTSTRAP_MEMBERSHIP_NO = "ADMIN001"

# Fields an admin may edit directly on a member record
ADMIN_EDITABLE_FIELDS = (
    "full_name",
    "email",
    "mobile",
    "whatsapp",
    "national_id",
    "mandalam",
    "emirate",
    "address_uae",
    "address_india",
    "nominee",
    "relation",
    "photo_url",
    "is_kmcc_member",
    "kmcc_no",
    "is_pratheeksha_member",
    "pratheeksha_no",
    "recommended_by",
)

# Fields a member may edit on their own profile
SELF_EDITABLE_FIELDS = (
    "whatsapp",
    "address_uae",
    "address_india",
    "nominee",
    "relation",
    "photo_url",
)


def forbidden(message: str = "You are not allowed to manage this member") -> dict:
    return {"success": False, "message": message, "code": "forbidden"}


def check_new_password(password: str, confirm_password: str = None):
    """Return an error message for an unacceptable new password, or None."""
    if not password:
        return "Password is required"
    if confirm_password is not None and password != confirm_password:
        return "Passwords do not match!"
    if len(password) < settings.MIN_PASSWORD_LENGTH:
        return f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters"
    return None


def authenticate(identifier: str, password: str):
    """
    Find the member matching a login identifier and password.

    The identifier is an email address (case-insensitive) or a mobile number.
    The system administrator may also log in with the configured username.
    """
    identifier = (identifier or "").strip()
    if not identifier or not password:
        return None

    if identifier == settings.BOOTSTRAP_ADMIN_USERNAME:
        candidates = Member.objects.filter(pk=settings.BOOTSTRAP_ADMIN_ID)
    else:
        candidates = Member.objects.filter(Q(email__iexact=identifier) | Q(mobile=identifier))

    for member in candidates.order_by("created_at"):
        if member.check_password(password):
            return member
    return None


def seed_admin() -> tuple:
    """
    Create the reserved system administrator when it does not exist yet.

    Also starts the current registration year if no year was ever started.

    Returns:
        tuple: (member, created)
    """
    if not settings.BOOTSTRAP_ADMIN_PASSWORD:
        raise ValueError("BOOTSTRAP_ADMIN_PASSWORD is not configured")

    year = timezone.localdate().year
    with transaction.atomic():
        member = Member.objects.filter(pk=settings.BOOTSTRAP_ADMIN_ID).first()
        created = member is None
        if created:
            member = Member(
                id=settings.BOOTSTRAP_ADMIN_ID,
                full_name=settings.BOOTSTRAP_ADMIN_NAME,
                mobile="0000000000",
                whatsapp="0000000000",
                national_id="784000000000000",
                mandalam=settings.MANDALAMS[0] if settings.MANDALAMS else "",
                emirate=Emirate.DUBAI,
                status=UserStatus.APPROVED,
                payment_status=PaymentStatus.PAID,
                role=Role.MASTER_ADMIN,
                membership_no=BOOTSTRAP_MEMBERSHIP_NO,
                registration_year=year,
                registration_date=timezone.localdate(),
                payment_reset_year=year,
            )
            member.set_password(settings.BOOTSTRAP_ADMIN_PASSWORD)
            member.save(force_insert=True)

        if not YearConfig.objects.exists():
            YearConfig.objects.create(
                year=year,
                status=YearStatus.ACTIVE,
                started_by=member.full_name,
                rollover_completed_at=timezone.now(),
            )

    if created:
        logger.info(f"Created system administrator {member.pk}")
    return member, created


class MemberService:
    """Profile self-service and admin maintenance of member records."""

    def complete_profile(self, member: Member, data: dict) -> dict:
        """
        Finish the profile of a bulk-imported member.

        Email and a new password are required; afterwards the member logs in
        with that email instead of the Emirates ID.
        """
        email = (data.get("email") or "").strip()
        password = data.get("password") or ""
        if not email or not password:
            return {
                "success": False,
                "message": "Email and Password are required.",
                "code": "invalid",
            }
        try:
            validate_email(email)
        except ValidationError:
            return {"success": False, "message": "Enter a valid email address.", "code": "invalid"}

        password_error = check_new_password(password, data.get("confirm_password"))
        if password_error:
            return {"success": False, "message": password_error, "code": "invalid"}

        duplicate = find_duplicate(email=email, exclude_id=member.pk)
        if duplicate:
            return {"success": False, "message": duplicate, "code": "conflict"}

        member.email = email
        member.set_password(password)
        for field in ("address_uae", "address_india", "nominee", "relation"):
            if field in data:
                setattr(member, field, data.get(field) or "")
        member.is_imported = False
        fields = ["email", "password", "is_imported"]
        fields += [field for field in ("address_uae", "address_india", "nominee", "relation")
                   if field in data]
        return self._save(member, fields, "Profile completed successfully.")

    def change_password(self, member: Member, current_password: str, new_password: str,
                        confirm_password: str = None) -> dict:
        if not member.check_password(current_password or ""):
            return {"success": False, "message": "Current password is incorrect", "code": "invalid"}

        password_error = check_new_password(new_password, confirm_password)
        if password_error:
            return {"success": False, "message": password_error, "code": "invalid"}

        member.set_password(new_password)
        return self._save(member, ["password"], "Password updated successfully")

    def update_profile(self, member: Member, data: dict) -> dict:
        """Member edits the optional parts of their own profile."""
        fields = [field for field in SELF_EDITABLE_FIELDS if field in data]
        for field in fields:
            setattr(member, field, data.get(field) or "")
        return self._save(member, fields, "Profile updated")

    def update_answers(self, member: Member, changes: dict) -> dict:
        """
        Apply edited registration answers.

        Changing a parent answer clears the dependent answers that were not
        resubmitted together with it.
        """
        questions = list(RegistrationQuestion.objects.all())
        member.custom_data = merge_answers(questions, member.custom_data or {}, changes or {})
        return self._save(member, ["custom_data"], "Answers updated")

    def admin_update(self, member_id: str, actor: Member, data: dict) -> dict:
        member = Member.objects.filter(pk=member_id).first()
        if not member:
            return not_found(member_id)
        if not can_manage_member(actor, member):
            return forbidden()

        changes = {field: data[field] for field in ADMIN_EDITABLE_FIELDS if field in data}
        if "email" in changes:
            changes["email"] = (changes["email"] or "").strip() or None
        if "emirate" in changes and changes["emirate"] not in Emirate.values:
            return {"success": False, "message": "Unknown emirate", "code": "invalid"}
        duplicate = find_duplicate(
            changes.get("email"), changes.get("national_id"), exclude_id=member.pk
        )
        if duplicate:
            return {"success": False, "message": duplicate, "code": "conflict"}

        if data.get("password"):
            password_error = check_new_password(data["password"])
            if password_error:
                return {"success": False, "message": password_error, "code": "invalid"}

        for field, value in changes.items():
            setattr(member, field, value)
        fields = list(changes)
        if data.get("password"):
            member.set_password(data["password"])
            fields.append("password")

        result = self._save(member, fields, "Member updated")
        if result["success"]:
            logger.info(f"{actor.full_name} updated member {member.pk}")
        return result

    def assign_role(self, member_id: str, actor: Member, role: str, permissions: list = None,
                    assigned_mandalams: list = None) -> dict:
        """Make a member an admin (or a plain member again). Master admin only."""
        if not actor.is_master_admin:
            return forbidden("Only the master admin can assign admins")
        if role not in Role.values:
            return {"success": False, "message": f"Unknown role {role}", "code": "invalid"}

        member = Member.objects.filter(pk=member_id).first()
        if not member:
            return not_found(member_id)
        if member.pk == settings.BOOTSTRAP_ADMIN_ID:
            return forbidden("The system administrator cannot be changed")

        unknown_tabs = [tab for tab in (permissions or []) if tab not in ALL_ADMIN_TABS]
        if unknown_tabs:
            return {
                "success": False,
                "message": f"Unknown permissions: {', '.join(unknown_tabs)}",
                "code": "invalid",
            }

        member.role = role
        member.permissions = list(permissions or []) if role == Role.CUSTOM_ADMIN else []
        member.assigned_mandalams = [] if role == Role.USER else list(assigned_mandalams or [])
        result = self._save(
            member, ["role", "permissions", "assigned_mandalams"], "Admin access updated"
        )
        if result["success"]:
            logger.info(f"{actor.full_name} set role of {member.pk} to {role}")
        return result

    def delete(self, member_id: str, actor: Member, confirm: bool = False) -> dict:
        if not confirm:
            return {"success": False, "message": CONFIRMATION_REQUIRED, "code": "confirmation"}
        member = Member.objects.filter(pk=member_id).first()
        if not member:
            return not_found(member_id)
        if member.pk == settings.BOOTSTRAP_ADMIN_ID or member.pk == actor.pk:
            return forbidden("This account cannot be deleted")
        if not can_manage_member(actor, member):
            return forbidden()

        try:
            member.delete()
        except DatabaseError as e:
            logger.error(f"Error deleting member {member_id}: {str(e)}")
            return {"success": False, "message": "Failed to delete member", "code": "error"}

        logger.info(f"{actor.full_name} deleted member {member_id}")
        return {"success": True, "message": "Member deleted"}

    def verify_card(self, member_id: str) -> dict:
        """Public check of a scanned membership card."""
        member = Member.objects.filter(pk=member_id).exclude(role=Role.MASTER_ADMIN).first()
        if not member:
            return {
                "success": False,
                "verified": False,
                "message": "Invalid card",
                "code": "not_found",
            }
        verified = (
            member.status == UserStatus.APPROVED and member.payment_status == PaymentStatus.PAID
        )
        return {
            "success": True,
            "verified": verified,
            "message": "Active member" if verified else "Membership not active",
            "member": member,
        }

    def _save(self, member: Member, fields: list, message: str) -> dict:
        """
        Write `fields` of `member` if nobody changed the record since it was loaded.

        The write is conditional on the loaded version, like the workflow
        transitions, so a stale copy never overwrites newer state.
        """
        values = {field: getattr(member, field) for field in fields}
        try:
            with transaction.atomic():
                updated = Member.objects.filter(pk=member.pk, version=member.version).update(
                    version=F("version") + 1, updated_at=timezone.now(), **values
                )
        except IntegrityError as e:
            logger.warning(f"Member {member.pk} update rejected: {str(e)}")
            member.refresh_from_db()
            return {
                "success": False,
                "message": "Email or Emirates ID already belongs to another member",
                "code": "conflict",
            }
        except DatabaseError as e:
            logger.error(f"Error updating member {member.pk}: {str(e)}")
            return {"success": False, "message": "Failed to update user.", "code": "error"}

        if not updated:
            return {
                "success": False,
                "message": "Member was changed by someone else. Reload and try again.",
                "code": "conflict",
            }

        member.refresh_from_db()
        # Queryset updates bypass post_save
        publisher.publish_collection_changed(Member._meta.db_table, str(member.pk), "updated")
        return {"success": True, "message": message, "member": member}
