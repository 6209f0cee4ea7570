"""
RabbitMQ consumer for year.rollover.requested events.

Published when starting a new year could not finish resetting member
payments in the request. The handler re-runs the reset, which skips members
already reset for that year, so redelivered messages are harmless.

Usage:
    python manage.py run_rollover_consumer
"""

import logging

from django.conf import settings

from membership.models import YearConfig
from membership.rabbitmq.consumer import RabbitMQConsumer, create_message_handler
from membership.services.year_service import YearService

logger = logging.getLogger(__name__)


def handle_year_rollover_requested(message: dict) -> int:
    """
    Finish the payment reset for the requested year.

    Expected message format:
    {
        "year": 2026
    }

    Returns:
        int: members reset by this run

    Raises:
        ValueError: the message names no year, or a year that was never started
    """
    try:
        year = int(message.get("year"))
    except (TypeError, ValueError) as e:
        raise ValueError(f"year.rollover.requested without a valid year: {message}") from e

    if not YearConfig.objects.filter(year=year).exists():
        raise ValueError(f"Rollover requested for unknown year {year}")

    reset = YearService().reset_payments(year)
    logger.info(f"Rollover worker reset {reset} members for {year}")
    return reset


def main():
    """Consume the rollover queue until interrupted."""
    consumer = RabbitMQConsumer(settings.RABBITMQ_YEAR_ROLLOVER_QUEUE)
    consumer.consume(create_message_handler(handle_year_rollover_requested))
