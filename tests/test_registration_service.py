"""
Tests for self-registration, admin-added members and schema maintenance.
"""

import pytest

from membership.models import (
    Member,
    PaymentStatus,
    QuestionType,
    RegistrationQuestion,
    Role,
    UserStatus,
)
from membership.services.registration_service import (
    RegistrationSchemaService,
    RegistrationService,
    find_duplicate,
)


@pytest.mark.django_db
class TestRegister:
    """Test cases for RegistrationService.register."""

    def test_register_success(
        self, questions, registration_answers, active_year_config, current_year,
        mock_rabbitmq_publisher,
    ):
        result = RegistrationService().register(registration_answers, "secret123", "secret123")

        assert result["success"] is True
        member = result["member"]
        assert member.full_name == "Ahmed Kutty"
        assert member.national_id == "784199012345678"
        assert member.email == "ahmed@example.com"
        assert member.emirate == "DUBAI"
        assert member.whatsapp == "0501234567"
        assert member.status == UserStatus.PENDING
        assert member.payment_status == PaymentStatus.UNPAID
        assert member.role == Role.USER
        assert member.membership_no == f"{current_year}0001"
        assert member.registration_year == current_year
        assert member.custom_data["q-area"] == "Deira"
        assert member.check_password("secret123")

        active_year_config.refresh_from_db()
        assert active_year_config.count == 1
        mock_rabbitmq_publisher["collection_changed"].assert_called_with(
            "users", member.pk, "created"
        )

    def test_consecutive_registrations_get_consecutive_numbers(
        self, questions, registration_answers, current_year
    ):
        first = RegistrationService().register(registration_answers, "secret123")
        second = RegistrationService().register(
            {
                **registration_answers,
                "q-eid": "784199099999999",
                "q-email": "other@example.com",
            },
            "secret123",
        )

        assert first["member"].membership_no == f"{current_year}0001"
        assert second["member"].membership_no == f"{current_year}0002"

    def test_password_mismatch(self, questions, registration_answers):
        result = RegistrationService().register(registration_answers, "secret123", "secret999")

        assert result["success"] is False
        assert result["code"] == "invalid"
        assert result["message"] == "Passwords do not match!"
        assert Member.objects.count() == 0

    def test_short_password(self, questions, registration_answers):
        result = RegistrationService().register(registration_answers, "abc")

        assert result["success"] is False
        assert "password" in result["errors"]

    def test_missing_required_answer(self, questions, registration_answers):
        del registration_answers["q-mobile"]

        result = RegistrationService().register(registration_answers, "secret123")

        assert result["success"] is False
        assert result["code"] == "invalid"
        assert "q-mobile" in result["errors"]

    def test_unmapped_core_field_fails_in_strict_mode(self, questions, registration_answers):
        questions["mandalam"].delete()
        del registration_answers["q-mandalam"]

        result = RegistrationService().register(registration_answers, "secret123")

        assert result["success"] is False
        assert "mandalam" in result["errors"]

    def test_duplicate_emirates_id(self, questions, registration_answers, create_member):
        create_member(national_id="784199012345678")

        result = RegistrationService().register(registration_answers, "secret123")

        assert result["success"] is False
        assert result["code"] == "conflict"
        assert "784199012345678" in result["message"]

    def test_duplicate_email_is_case_insensitive(
        self, questions, registration_answers, create_member
    ):
        create_member(email="Ahmed@Example.com")

        result = RegistrationService().register(registration_answers, "secret123")

        assert result["code"] == "conflict"

    def test_password_answers_are_not_stored(self, questions, registration_answers):
        RegistrationQuestion.objects.create(
            id="q-pin", label="PIN", field_type=QuestionType.PASSWORD, order=20
        )
        registration_answers["q-pin"] = "1234"

        result = RegistrationService().register(registration_answers, "secret123")

        assert "q-pin" not in result["member"].custom_data

    def test_dependent_answer_follows_new_parent(self, questions, registration_answers):
        registration_answers["q-emirate"] = "Sharjah"
        registration_answers["q-area"] = "Rolla"

        result = RegistrationService().register(registration_answers, "secret123")

        assert result["member"].emirate == "SHARJAH"
        assert result["member"].custom_data["q-area"] == "Rolla"


@pytest.mark.django_db
class TestAdminAdd:
    def test_admin_add_is_pre_approved(self, master_admin, current_year):
        result = RegistrationService().admin_add(
            {
                "full_name": "Rashid",
                "mobile": "0509999999",
                "national_id": "784111122223333",
                "mandalam": "Nadapuram",
            },
            master_admin,
        )

        assert result["success"] is True
        member = result["member"]
        assert member.status == UserStatus.APPROVED
        assert member.approved_by == master_admin.full_name
        assert member.email is None
        assert member.membership_no == f"{current_year}0001"
        # Without an explicit password the Emirates ID is the initial password
        assert member.check_password("784111122223333")

    def test_admin_add_missing_fields(self, master_admin):
        result = RegistrationService().admin_add({"full_name": "Rashid"}, master_admin)

        assert result["success"] is False
        assert set(result["errors"]) == {"mobile", "national_id", "mandalam"}

    def test_admin_add_duplicate(self, master_admin, create_member):
        create_member(national_id="784111122223333")

        result = RegistrationService().admin_add(
            {
                "full_name": "Rashid",
                "mobile": "0509999999",
                "national_id": "784111122223333",
                "mandalam": "Nadapuram",
            },
            master_admin,
        )

        assert result["code"] == "conflict"


@pytest.mark.django_db
class TestFindDuplicate:
    def test_exclude_id(self, create_member):
        member = create_member(email="a@example.com")

        assert find_duplicate(email="a@example.com") is not None
        assert find_duplicate(email="a@example.com", exclude_id=member.pk) is None

    def test_blank_email_never_clashes(self, create_member):
        create_member(email=None)

        assert find_duplicate(email=None) is None


@pytest.mark.django_db
class TestRegistrationSchema:
    def test_dependent_dropdown_needs_parent(self):
        errors = RegistrationSchemaService().validate(
            {"field_type": QuestionType.DEPENDENT_DROPDOWN}
        )

        assert "parent" in errors

    def test_parent_cycle_rejected(self, questions):
        area = questions["area"]
        emirate = questions["emirate"]

        errors = RegistrationSchemaService().validate(
            {"field_type": QuestionType.DEPENDENT_DROPDOWN, "parent": area}, instance=emirate
        )

        assert errors == {"parent": "A question cannot depend on itself."}

    def test_reorder(self, questions):
        result = RegistrationSchemaService().reorder(["q-area", "q-name"])

        assert result["success"] is True
        assert RegistrationQuestion.objects.get(pk="q-area").order == 0
        assert RegistrationQuestion.objects.get(pk="q-name").order == 1

    def test_reorder_unknown_question(self, questions):
        result = RegistrationSchemaService().reorder(["q-area", "q-nope"])

        assert result["success"] is False
        assert "q-nope" in result["message"]

    def test_coverage_complete(self, questions):
        assert RegistrationSchemaService().coverage()["missing"] == []
