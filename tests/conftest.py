"""
Pytest configuration and shared fixtures for the test suite.
"""

import itertools

import pytest
from unittest.mock import MagicMock
from django.utils import timezone
from rest_framework.test import APIClient

from membership.models import (
    Member,
    PaymentStatus,
    QuestionType,
    RegistrationQuestion,
    Role,
    SystemField,
    UserStatus,
    YearConfig,
    YearStatus,
)

_counter = itertools.count(1)


@pytest.fixture
def mock_rabbitmq_publisher(mocker):
    """Mock RabbitMQ publisher to avoid actual message publishing in tests."""
    mock_collection_changed = mocker.patch(
        "membership.rabbitmq.publisher.publish_collection_changed", return_value=True
    )
    mock_rollover_requested = mocker.patch(
        "membership.rabbitmq.publisher.publish_year_rollover_requested", return_value=True
    )

    return {
        "collection_changed": mock_collection_changed,
        "rollover_requested": mock_rollover_requested,
    }


@pytest.fixture
def current_year():
    return timezone.localdate().year


@pytest.fixture
def active_year_config(db, current_year):
    """The current year, started and fully rolled over."""
    return YearConfig.objects.create(
        year=current_year, status=YearStatus.ACTIVE, rollover_completed_at=timezone.now()
    )


@pytest.fixture
def create_member(db, current_year):
    """Factory fixture to create a test member."""

    def _create_member(**kwargs):
        n = next(_counter)
        password = kwargs.pop("password", "secret123")
        year = kwargs.pop("registration_year", current_year)
        data = {
            "full_name": f"Member {n}",
            "email": f"member{n}@example.com",
            "mobile": f"050{n:07d}",
            "national_id": f"784{n:012d}",
            "mandalam": "Vatakara",
            "status": UserStatus.APPROVED,
            "payment_status": PaymentStatus.UNPAID,
            "role": Role.USER,
            "membership_no": f"T{n:06d}",
            "registration_year": year,
            "payment_reset_year": year,
            **kwargs,
        }
        member = Member(**data)
        member.set_password(password)
        member.save(force_insert=True)
        return member

    return _create_member


@pytest.fixture
def master_admin(create_member, settings):
    return create_member(
        id=settings.BOOTSTRAP_ADMIN_ID,
        full_name="System Administrator",
        role=Role.MASTER_ADMIN,
        membership_no="ADMIN001",
        payment_status=PaymentStatus.PAID,
    )


@pytest.fixture
def mandalam_admin(create_member):
    return create_member(
        full_name="Vatakara Admin", role=Role.MANDALAM_ADMIN, assigned_mandalams=["Vatakara"]
    )


@pytest.fixture
def custom_admin(create_member):
    """Custom admin limited to approvals and payments in Vatakara."""
    return create_member(
        full_name="Custom Admin",
        role=Role.CUSTOM_ADMIN,
        permissions=["User Approvals", "Payment Mgmt"],
        assigned_mandalams=["Vatakara"],
    )


@pytest.fixture
def pending_member(create_member):
    return create_member(full_name="Pending Member", status=UserStatus.PENDING)


@pytest.fixture
def questions(db):
    """
    Registration form with every core identity field mapped, plus an
    emirate -> area dependent dropdown.
    """
    created = {}
    for order, (key, label, field_type, mapping) in enumerate(
        [
            ("name", "Full Name", QuestionType.TEXT, SystemField.FULL_NAME),
            ("mobile", "Mobile Number", QuestionType.TEXT, SystemField.MOBILE),
            ("eid", "Emirates ID", QuestionType.TEXT, SystemField.NATIONAL_ID),
            ("email", "Email", QuestionType.EMAIL, SystemField.EMAIL),
            ("mandalam", "Mandalam", QuestionType.DROPDOWN, SystemField.MANDALAM),
            ("emirate", "Emirate", QuestionType.DROPDOWN, SystemField.EMIRATE),
        ]
    ):
        created[key] = RegistrationQuestion.objects.create(
            id=f"q-{key}",
            label=label,
            field_type=field_type,
            order=order,
            required=key != "email",
            system_mapping=mapping,
            options=["Vatakara", "Nadapuram"] if key == "mandalam" else [],
        )
    created["area"] = RegistrationQuestion.objects.create(
        id="q-area",
        label="Area",
        field_type=QuestionType.DEPENDENT_DROPDOWN,
        order=10,
        parent=created["emirate"],
        dependent_options={"Dubai": ["Deira", "Karama"], "Sharjah": ["Rolla"]},
    )
    return created


@pytest.fixture
def registration_answers():
    return {
        "q-name": "Ahmed Kutty",
        "q-mobile": "0501234567",
        "q-eid": "784199012345678",
        "q-email": "ahmed@example.com",
        "q-mandalam": "Vatakara",
        "q-emirate": "Dubai",
        "q-area": "Deira",
    }


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def authenticated_client():
    """Factory fixture returning an APIClient logged in as `member`."""

    def _client(member):
        client = APIClient()
        client.force_authenticate(user=member)
        return client

    return _client


@pytest.fixture
def mock_pika_connection(mocker):
    """Mock pika RabbitMQ connection."""
    mock_connection = MagicMock()
    mock_channel = MagicMock()
    mock_connection.channel.return_value = mock_channel

    mocker.patch("pika.BlockingConnection", return_value=mock_connection)
    return mock_connection, mock_channel
