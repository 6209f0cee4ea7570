"""
Tests for login, the system administrator and member maintenance.
"""

import pytest

from membership.models import Member, PaymentStatus, Role, UserStatus, YearConfig, YearStatus
from membership.services.member_service import (
    BOOTSTRAP_MEMBERSHIP_NO,
    MemberService,
    authenticate,
    seed_admin,
)
from membership.services.workflow_service import WorkflowService


@pytest.mark.django_db
class TestAuthenticate:
    def test_login_with_email_any_case(self, create_member):
        member = create_member(email="ahmed@example.com", password="secret123")

        assert authenticate("AHMED@example.com", "secret123") == member

    def test_login_with_mobile(self, create_member):
        member = create_member(mobile="0501234567", password="secret123")

        assert authenticate("0501234567", "secret123") == member

    def test_wrong_password(self, create_member):
        create_member(email="ahmed@example.com", password="secret123")

        assert authenticate("ahmed@example.com", "wrong") is None
        assert authenticate("", "secret123") is None

    def test_system_administrator_username(self, settings):
        admin, _ = seed_admin()

        assert authenticate(settings.BOOTSTRAP_ADMIN_USERNAME, "bootstrap-secret") == admin


@pytest.mark.django_db
class TestSeedAdmin:
    def test_seed_creates_admin_and_year(self, settings, current_year):
        admin, created = seed_admin()

        assert created is True
        assert admin.pk == settings.BOOTSTRAP_ADMIN_ID
        assert admin.role == Role.MASTER_ADMIN
        assert admin.membership_no == BOOTSTRAP_MEMBERSHIP_NO
        assert admin.status == UserStatus.APPROVED
        assert admin.payment_status == PaymentStatus.PAID
        config = YearConfig.objects.get()
        assert config.year == current_year
        assert config.status == YearStatus.ACTIVE

    def test_seed_is_idempotent(self):
        seed_admin()

        admin, created = seed_admin()

        assert created is False
        assert Member.objects.filter(role=Role.MASTER_ADMIN).count() == 1

    def test_seed_needs_password(self, settings):
        settings.BOOTSTRAP_ADMIN_PASSWORD = ""

        with pytest.raises(ValueError):
            seed_admin()


@pytest.mark.django_db
class TestSelfService:
    def test_complete_profile(self, create_member):
        member = create_member(email=None, is_imported=True, password="784199000000001")

        result = MemberService().complete_profile(
            member,
            {"email": "new@example.com", "password": "secret123", "confirm_password": "secret123"},
        )

        assert result["success"] is True
        member.refresh_from_db()
        assert member.is_imported is False
        assert member.email == "new@example.com"
        assert member.check_password("secret123")
        assert authenticate("new@example.com", "secret123") == member

    def test_complete_profile_requires_email_and_password(self, create_member):
        member = create_member(is_imported=True)

        result = MemberService().complete_profile(member, {"email": "", "password": "x"})

        assert result["code"] == "invalid"
        assert result["message"] == "Email and Password are required."

    def test_complete_profile_email_taken(self, create_member):
        create_member(email="taken@example.com")
        member = create_member(email=None, is_imported=True)

        result = MemberService().complete_profile(
            member, {"email": "taken@example.com", "password": "secret123"}
        )

        assert result["code"] == "conflict"

    def test_change_password(self, create_member):
        member = create_member(password="secret123")

        wrong = MemberService().change_password(member, "nope", "newsecret")
        right = MemberService().change_password(member, "secret123", "newsecret", "newsecret")

        assert wrong["code"] == "invalid"
        assert right["success"] is True
        member.refresh_from_db()
        assert member.check_password("newsecret")

    def test_update_profile_ignores_protected_fields(self, create_member):
        member = create_member(full_name="Original")

        MemberService().update_profile(member, {"nominee": "Fathima", "full_name": "Hacked"})

        member.refresh_from_db()
        assert member.nominee == "Fathima"
        assert member.full_name == "Original"

    def test_save_bumps_version(self, create_member):
        member = create_member()
        version = member.version

        result = MemberService().update_profile(member, {"relation": "Wife"})

        assert result["member"].version == version + 1

    def test_stale_copy_cannot_undo_payment_approval(self, master_admin, create_member):
        member = create_member(status=UserStatus.PENDING, payment_status=PaymentStatus.PENDING)
        stale = Member.objects.get(pk=member.pk)
        WorkflowService().approve_payment(member.pk, master_admin, confirm=True)

        result = MemberService().update_profile(stale, {"nominee": "Wife"})

        assert result["success"] is False
        assert result["code"] == "conflict"
        member.refresh_from_db()
        assert member.payment_status == PaymentStatus.PAID
        assert member.status == UserStatus.APPROVED
        assert member.nominee != "Wife"

    def test_save_writes_only_changed_fields(self, create_member):
        member = create_member(payment_status=PaymentStatus.UNPAID)
        Member.objects.filter(pk=member.pk).update(payment_status=PaymentStatus.PENDING)
        member.payment_status = PaymentStatus.UNPAID

        # Version unchanged by the raw update, so only the named fields are written
        MemberService().update_profile(member, {"relation": "Son"})

        member.refresh_from_db()
        assert member.relation == "Son"
        assert member.payment_status == PaymentStatus.PENDING

    def test_save_publishes_change(self, create_member, mock_rabbitmq_publisher):
        member = create_member()
        mock_rabbitmq_publisher["collection_changed"].reset_mock()

        MemberService().update_profile(member, {"relation": "Son"})

        mock_rabbitmq_publisher["collection_changed"].assert_called_once_with(
            "users", member.pk, "updated"
        )

    def test_update_answers_clears_dependants(self, questions, create_member):
        member = create_member(custom_data={"q-emirate": "Dubai", "q-area": "Deira"})

        MemberService().update_answers(member, {"q-emirate": "Sharjah"})

        member.refresh_from_db()
        assert member.custom_data == {"q-emirate": "Sharjah"}


@pytest.mark.django_db
class TestAdministration:
    def test_admin_update(self, master_admin, create_member):
        member = create_member()

        result = MemberService().admin_update(
            member.pk, master_admin, {"full_name": "Renamed", "emirate": "SHARJAH"}
        )

        assert result["success"] is True
        assert result["member"].full_name == "Renamed"
        assert result["member"].emirate == "SHARJAH"

    def test_admin_update_duplicate_emirates_id(self, master_admin, create_member):
        first = create_member()
        second = create_member()

        result = MemberService().admin_update(
            second.pk, master_admin, {"national_id": first.national_id}
        )

        assert result["code"] == "conflict"

    def test_admin_update_out_of_scope(self, mandalam_admin, create_member):
        remote = create_member(mandalam="Mahe")

        result = MemberService().admin_update(remote.pk, mandalam_admin, {"full_name": "X"})

        assert result["code"] == "forbidden"

    def test_assign_custom_admin(self, master_admin, create_member):
        member = create_member()

        result = MemberService().assign_role(
            member.pk,
            master_admin,
            Role.CUSTOM_ADMIN,
            permissions=["User Approvals"],
            assigned_mandalams=["Vatakara"],
        )

        assert result["member"].role == Role.CUSTOM_ADMIN
        assert result["member"].permissions == ["User Approvals"]
        assert result["member"].assigned_mandalams == ["Vatakara"]

    def test_demote_clears_access(self, master_admin, custom_admin):
        result = MemberService().assign_role(custom_admin.pk, master_admin, Role.USER)

        assert result["member"].permissions == []
        assert result["member"].assigned_mandalams == []

    def test_assign_role_rules(self, master_admin, mandalam_admin, create_member):
        member = create_member()
        service = MemberService()

        assert service.assign_role(member.pk, mandalam_admin, Role.USER)["code"] == "forbidden"
        assert service.assign_role(master_admin.pk, master_admin, Role.USER)["code"] == "forbidden"
        assert service.assign_role(member.pk, master_admin, "KING")["code"] == "invalid"
        assert service.assign_role(
            member.pk, master_admin, Role.CUSTOM_ADMIN, permissions=["Everything"]
        )["code"] == "invalid"

    def test_delete_requires_confirmation(self, master_admin, create_member):
        member = create_member()

        assert MemberService().delete(member.pk, master_admin)["code"] == "confirmation"
        assert MemberService().delete(member.pk, master_admin, confirm=True)["success"] is True
        assert not Member.objects.filter(pk=member.pk).exists()

    def test_system_administrator_cannot_be_deleted(self, master_admin, create_member):
        other_master = create_member(role=Role.MASTER_ADMIN)

        result = MemberService().delete(master_admin.pk, other_master, confirm=True)

        assert result["code"] == "forbidden"

    def test_verify_card(self, create_member, master_admin):
        active = create_member(status=UserStatus.APPROVED, payment_status=PaymentStatus.PAID)
        unpaid = create_member(status=UserStatus.APPROVED)
        service = MemberService()

        assert service.verify_card(active.pk)["verified"] is True
        assert service.verify_card(unpaid.pk)["verified"] is False
        assert service.verify_card(master_admin.pk)["code"] == "not_found"
        assert service.verify_card("user-missing")["code"] == "not_found"
