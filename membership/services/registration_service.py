import logging

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from membership.models import (
    Member,
    PaymentStatus,
    QuestionType,
    RegistrationQuestion,
    Role,
    UserStatus,
    YearConfig,
)
from membership.services.registration_form import (
    RegistrationError,
    merge_answers,
    missing_required,
    resolve_identity,
    schema_coverage,
)
from membership.services.sequence_service import allocate, format_membership_no, with_unique_retry

logger = logging.getLogger(__name__)


def find_duplicate(email=None, national_id=None, exclude_id=None):
    """
    Return a message describing the first clash with an existing member, or None.

    Email is compared case-insensitively and only when present.
    """
    members = Member.objects.all()
    if exclude_id:
        members = members.exclude(pk=exclude_id)
    if email and members.filter(email__iexact=email).exists():
        return f"User with email {email} already exists."
    if national_id and members.filter(national_id=national_id).exists():
        return f"User with Emirates ID {national_id} already exists."
    return None


def create_numbered_member(fields: dict, year: int, password: str) -> Member:
    """Insert a member with a freshly allocated membership number."""

    def _insert():
        with transaction.atomic():
            sequence = allocate(year)
            member = Member(
                membership_no=format_membership_no(year, sequence),
                registration_year=year,
                payment_reset_year=year,
                **fields,
            )
            member.set_password(password)
            member.save(force_insert=True)
            YearConfig.objects.filter(year=year).update(count=F("count") + 1)
            return member

    return with_unique_retry(_insert)


class RegistrationService:
    """Self-registration and manual member creation."""

    def register(self, answers: dict, password: str, confirm_password: str = None) -> dict:
        """
        Register a new member from dynamic form answers.

        Args:
            answers: Registration answers keyed by question id
            password: Chosen password
            confirm_password: Must equal `password` when given

        Returns:
            dict: Contains 'success' boolean, 'message' string and, on success, 'member'
        """
        questions = list(RegistrationQuestion.objects.all())
        try:
            if not password:
                raise RegistrationError("Password is required", {"password": "Required"})
            if confirm_password is not None and password != confirm_password:
                raise RegistrationError(
                    "Passwords do not match!", {"confirmPassword": "Does not match"}
                )
            if len(password) < settings.MIN_PASSWORD_LENGTH:
                raise RegistrationError(
                    "Password too short",
                    {"password": f"Use at least {settings.MIN_PASSWORD_LENGTH} characters"},
                )

            answers = merge_answers(questions, {}, answers or {})
            missing = missing_required(questions, answers)
            if missing:
                raise RegistrationError(
                    "Please answer all required questions",
                    {question_id: "This field is required." for question_id in missing},
                )
            identity = resolve_identity(
                questions,
                answers,
                strict=settings.REGISTRATION_STRICT_IDENTITY,
                mandalams=settings.MANDALAMS,
            )
        except RegistrationError as e:
            return {"success": False, "message": str(e), "errors": e.errors, "code": "invalid"}

        duplicate = find_duplicate(identity["email"], identity["national_id"])
        if duplicate:
            return {"success": False, "message": duplicate, "errors": {}, "code": "conflict"}

        fields = {
            **identity,
            "whatsapp": identity["whatsapp"] or identity["mobile"],
            "status": UserStatus.PENDING,
            "payment_status": PaymentStatus.UNPAID,
            "role": Role.USER,
            "registration_date": timezone.localdate(),
            "custom_data": self._storable_answers(questions, answers),
            "is_imported": False,
        }
        return self._create(fields, password, "Registration successful!")

    def admin_add(self, data: dict, actor: Member) -> dict:
        """
        Add a member directly from the admin console.

        Manually added members skip the approval queue.
        """
        required = ("full_name", "mobile", "national_id", "mandalam")
        missing = [field for field in required if not str(data.get(field) or "").strip()]
        if missing:
            return {
                "success": False,
                "message": "Missing required fields",
                "errors": {field: "This field is required." for field in missing},
                "code": "invalid",
            }

        email = (data.get("email") or "").strip() or None
        national_id = data["national_id"].strip()
        duplicate = find_duplicate(email, national_id)
        if duplicate:
            return {"success": False, "message": duplicate, "errors": {}, "code": "conflict"}

        fields = {
            "full_name": data["full_name"].strip(),
            "mobile": data["mobile"].strip(),
            "whatsapp": (data.get("whatsapp") or data["mobile"]).strip(),
            "national_id": national_id,
            "email": email,
            "mandalam": data["mandalam"].strip(),
            "emirate": data.get("emirate") or settings.IMPORT_DEFAULT_EMIRATE,
            "address_uae": data.get("address_uae", ""),
            "address_india": data.get("address_india", ""),
            "nominee": data.get("nominee", ""),
            "relation": data.get("relation", ""),
            "status": UserStatus.APPROVED,
            "payment_status": PaymentStatus.UNPAID,
            "role": Role.USER,
            "approved_by": actor.full_name,
            "approved_at": timezone.now(),
            "registration_date": timezone.localdate(),
        }
        password = data.get("password") or national_id
        return self._create(fields, password, "Member added successfully")

    def _create(self, fields: dict, password: str, success_message: str) -> dict:
        year = timezone.localdate().year
        try:
            member = create_numbered_member(fields, year, password)
        except IntegrityError as e:
            # A concurrent registration took the same email or Emirates ID
            logger.warning(f"Duplicate member rejected by the database: {str(e)}")
            duplicate = find_duplicate(fields.get("email"), fields.get("national_id"))
            return {
                "success": False,
                "message": duplicate or "Member already exists",
                "errors": {},
                "code": "conflict",
            }
        except DatabaseError as e:
            logger.error(f"Error registering member {fields.get('national_id')}: {str(e)}")
            return {
                "success": False,
                "message": "Registration failed. Please try again later.",
                "code": "error",
            }

        logger.info(f"Registered member {member.id} as {member.membership_no}")
        return {"success": True, "message": success_message, "member": member}

    @staticmethod
    def _storable_answers(questions, answers: dict) -> dict:
        secret_ids = {q.id for q in questions if q.field_type == QuestionType.PASSWORD}
        return {key: value for key, value in answers.items() if key not in secret_ids}


class RegistrationSchemaService:
    """Admin maintenance of the registration question list."""

    def validate(self, data: dict, instance: RegistrationQuestion = None) -> dict:
        """
        Check cross-question rules the serializer cannot see.

        Returns:
            dict: field -> error message, empty when valid
        """
        errors = {}
        field_type = data.get("field_type", instance.field_type if instance else None)
        parent = data.get("parent", instance.parent if instance else None)

        if field_type == QuestionType.DEPENDENT_DROPDOWN:
            if parent is None:
                errors["parent"] = "A dependent dropdown needs a parent question."
            elif instance is not None and (
                parent.pk == instance.pk or parent.pk in self._descendant_ids(instance)
            ):
                errors["parent"] = "A question cannot depend on itself."
        return errors

    def coverage(self) -> dict:
        return schema_coverage(list(RegistrationQuestion.objects.all()))

    def reorder(self, question_ids: list) -> dict:
        """Persist the given display order."""
        known = set(
            RegistrationQuestion.objects.filter(pk__in=question_ids).values_list("pk", flat=True)
        )
        unknown = [question_id for question_id in question_ids if question_id not in known]
        if unknown:
            return {
                "success": False,
                "message": f"Unknown questions: {', '.join(unknown)}",
                "code": "invalid",
            }

        with transaction.atomic():
            for position, question_id in enumerate(question_ids):
                RegistrationQuestion.objects.filter(pk=question_id).update(order=position)
        return {"success": True, "message": "Question order saved"}

    @staticmethod
    def _descendant_ids(instance) -> set:
        found = set()
        pending = [instance.pk]
        while pending:
            current = pending.pop()
            children = RegistrationQuestion.objects.filter(parent_id=current).values_list(
                "pk", flat=True
            )
            for child in children:
                if child not in found:
                    found.add(child)
                    pending.append(child)
        return found
