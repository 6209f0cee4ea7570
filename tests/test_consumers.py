"""
Tests for the RabbitMQ rollover consumer, the publisher and management commands.
"""

import json
from io import StringIO
from unittest.mock import Mock

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import DatabaseError

from membership.models import Member, PaymentStatus, YearConfig
from membership.rabbitmq import publisher
from membership.rabbitmq.consumer import RabbitMQConsumer, create_message_handler
from membership.rabbitmq.rollover_consumer import handle_year_rollover_requested


@pytest.mark.django_db
class TestRolloverConsumer:
    """Test cases for year.rollover.requested event consumer."""

    def test_handle_rollover(self, create_member, current_year):
        YearConfig.objects.create(year=current_year + 1)
        member = create_member(payment_status=PaymentStatus.PAID)

        reset = handle_year_rollover_requested({"year": current_year + 1})

        assert reset == 1
        member.refresh_from_db()
        assert member.payment_status == PaymentStatus.UNPAID
        assert YearConfig.objects.get(year=current_year + 1).rollover_completed_at is not None

    def test_redelivered_message_is_harmless(self, create_member, current_year):
        YearConfig.objects.create(year=current_year + 1)
        create_member(payment_status=PaymentStatus.PAID)

        handle_year_rollover_requested({"year": current_year + 1})

        assert handle_year_rollover_requested({"year": str(current_year + 1)}) == 0

    def test_unknown_year(self):
        with pytest.raises(ValueError):
            handle_year_rollover_requested({"year": 1999})

    def test_missing_year(self):
        with pytest.raises(ValueError):
            handle_year_rollover_requested({})


class TestMessageHandler:
    def _delivery(self):
        channel = Mock()
        method = Mock(delivery_tag=7, routing_key="membership.year.rollover.requested")
        return channel, method

    def test_ack_on_success(self):
        handler = Mock()
        channel, method = self._delivery()

        create_message_handler(handler)(channel, method, None, b'{"year": 2026}')

        handler.assert_called_once_with({"year": 2026})
        channel.basic_ack.assert_called_once_with(delivery_tag=7)

    def test_invalid_json_is_dropped(self):
        channel, method = self._delivery()

        create_message_handler(Mock())(channel, method, None, b"not json")

        channel.basic_nack.assert_called_once_with(delivery_tag=7, requeue=False)

    def test_handler_value_error_is_dropped(self):
        channel, method = self._delivery()
        handler = Mock(side_effect=ValueError("unknown year"))

        create_message_handler(handler)(channel, method, None, json.dumps({}).encode())

        channel.basic_nack.assert_called_once_with(delivery_tag=7, requeue=False)

    def test_database_error_is_requeued(self):
        channel, method = self._delivery()
        handler = Mock(side_effect=DatabaseError("locked"))

        create_message_handler(handler)(channel, method, None, b'{"year": 2026}')

        channel.basic_nack.assert_called_once_with(delivery_tag=7, requeue=True)


class TestRabbitMQConsumer:
    def test_declares_durable_queue(self, mock_pika_connection):
        _, channel = mock_pika_connection

        consumer = RabbitMQConsumer("membership.year.rollover.requested")

        assert consumer.is_connected is True
        channel.queue_declare.assert_called_once_with(
            queue="membership.year.rollover.requested", durable=True
        )
        channel.basic_qos.assert_called_once_with(prefetch_count=1)

    def test_consume_closes_connection(self, mock_pika_connection):
        connection, channel = mock_pika_connection
        connection.is_closed = False
        callback = Mock()

        RabbitMQConsumer("jobs").consume(callback)

        channel.basic_consume.assert_called_once_with(
            queue="jobs", on_message_callback=callback, auto_ack=False
        )
        channel.start_consuming.assert_called_once()
        connection.close.assert_called_once()


class TestPublisher:
    def test_disabled_publisher_never_connects(self, mocker):
        connect = mocker.patch("pika.BlockingConnection")

        assert publisher.publish_collection_changed("users", "user-1", "updated") is False
        assert publisher.publish_year_rollover_requested(2026) is False
        connect.assert_not_called()

    def test_collection_changed_message(self, settings, mock_pika_connection):
        settings.RABBITMQ_ENABLED = True
        _, channel = mock_pika_connection

        assert publisher.RabbitMQPublisher().publish_collection_changed(
            "users", "user-1", "deleted"
        ) is True

        kwargs = channel.basic_publish.call_args.kwargs
        body = json.loads(kwargs["body"])
        assert kwargs["routing_key"] == settings.RABBITMQ_CHANGE_STREAM_QUEUE
        assert body["event"] == "users.changed"
        assert body["id"] == "user-1"
        assert body["action"] == "deleted"


@pytest.mark.django_db
class TestCommands:
    def test_seed_admin(self):
        out = StringIO()

        call_command("seed_admin", stdout=out)
        call_command("seed_admin", stdout=out)

        assert "Created system administrator" in out.getvalue()
        assert "already exists" in out.getvalue()

    def test_seed_admin_without_password(self, settings):
        settings.BOOTSTRAP_ADMIN_PASSWORD = ""

        with pytest.raises(CommandError):
            call_command("seed_admin")

    def test_resume_rollover(self, create_member, current_year):
        YearConfig.objects.create(year=current_year + 1)
        create_member(payment_status=PaymentStatus.PAID)
        out = StringIO()

        call_command("resume_rollover", stdout=out)

        assert f"Year {current_year + 1}: reset" in out.getvalue()
        assert not Member.objects.filter(payment_status=PaymentStatus.PAID).exists()

    def test_resume_rollover_nothing_pending(self):
        out = StringIO()

        call_command("resume_rollover", stdout=out)

        assert "No unfinished rollovers" in out.getvalue()

    def test_resume_rollover_unknown_year(self):
        with pytest.raises(CommandError):
            call_command("resume_rollover", "--year", "1999")

    def test_import_members(self, tmp_path, current_year):
        path = tmp_path / "members.csv"
        path.write_text("Ahmed,784199000000001,0501000001\nFaisal,784199000000003,0501000003\n")
        out = StringIO()

        call_command("import_members", str(path), stdout=out)

        assert "Progress: 100%" in out.getvalue()
        assert Member.objects.filter(membership_no=f"{current_year}0002").exists()

    def test_import_members_missing_file(self, tmp_path):
        with pytest.raises(CommandError):
            call_command("import_members", str(tmp_path / "missing.csv"))
