"""
Tests for dashboard figures, the member export and card layout.
"""

import csv
import io

import pytest

from membership.models import PaymentStatus, Role, UserStatus
from membership.services.content_service import (
    get_card_config,
    invalid_card_fields,
    update_card_config,
)
from membership.services.stats_service import EXPORT_HEADERS, dashboard_stats, export_members_csv


@pytest.mark.django_db
class TestDashboardStats:
    def test_counts(self, master_admin, create_member, settings):
        create_member(registration_year=2025, status=UserStatus.PENDING)
        create_member(registration_year=2025, payment_status=PaymentStatus.PAID)
        create_member(registration_year=2024, payment_status=PaymentStatus.PAID)
        create_member(registration_year=2024, status=UserStatus.REJECTED)
        create_member(registration_year=2025, role=Role.MANDALAM_ADMIN)

        stats = dashboard_stats(master_admin, year=2025)

        assert stats["total"] == 5
        assert stats["new"] == 3
        assert stats["re_reg"] == 1
        assert stats["pending"] == 1
        assert stats["rejected"] == 1
        assert stats["approved"] == 3
        assert stats["paid"] == 2
        assert stats["admins"] == 1
        assert stats["collected"] == 2 * settings.MEMBERSHIP_FEE
        assert stats["year"] == 2025

    def test_counts_are_scoped(self, mandalam_admin, create_member):
        create_member(mandalam="Vatakara")
        create_member(mandalam="Mahe")

        # The regional admin counts themself and the local member
        assert dashboard_stats(mandalam_admin)["total"] == 2


@pytest.mark.django_db
class TestExport:
    def test_export_includes_question_columns(self, master_admin, questions, create_member):
        create_member(
            full_name="Ahmed",
            membership_no="20250001",
            custom_data={"q-area": "Deira"},
            is_kmcc_member=True,
        )

        rows = list(csv.reader(io.StringIO(export_members_csv(master_admin))))

        header = rows[0]
        assert header[: len(EXPORT_HEADERS)] == EXPORT_HEADERS
        assert "Area" in header
        assert "Full Name" in header
        assert len(rows) == 2
        row = dict(zip(header[len(EXPORT_HEADERS):], rows[1][len(EXPORT_HEADERS):]))
        assert row["Area"] == "Deira"
        assert row["Mandalam"] == "Vatakara"
        assert rows[1][1] == "Ahmed"


@pytest.mark.django_db
class TestCardConfig:
    def test_default_layout_is_created_once(self):
        assert get_card_config().pk == get_card_config().pk

    def test_invalid_card_fields(self):
        fields = [{"key": "full_name"}, {"key": "q-blood"}, {"key": "nope"}, "junk"]

        assert invalid_card_fields(fields, {"q-blood"}) == ["nope", "junk"]

    def test_update_layout(self, master_admin, questions):
        result = update_card_config(
            master_admin,
            {
                "front_template_url": "https://example.com/front.png",
                "front_fields": [{"key": "membership_no", "x": 10, "y": 20}],
                "back_fields": [{"key": "q-area", "x": 5, "y": 5}],
            },
        )

        assert result["success"] is True
        card = get_card_config()
        assert card.front_template_url == "https://example.com/front.png"
        assert card.back_fields[0]["key"] == "q-area"

    def test_update_rejects_unknown_keys(self, master_admin):
        result = update_card_config(master_admin, {"front_fields": [{"key": "salary"}]})

        assert result["code"] == "invalid"

    def test_only_master_admin(self, mandalam_admin):
        assert update_card_config(mandalam_admin, {})["code"] == "forbidden"
