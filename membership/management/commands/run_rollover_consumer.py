"""
Django management command to run the year.rollover.requested consumer.

Usage:
    python manage.py run_rollover_consumer
"""

from django.conf import settings
from django.core.management.base import BaseCommand

from membership.rabbitmq.rollover_consumer import main


class Command(BaseCommand):
    help = "Run RabbitMQ consumer for year.rollover.requested events"

    def handle(self, *args, **options):
        self.stdout.write(
            self.style.SUCCESS(
                f"Starting year.rollover.requested consumer "
                f"(queue: {settings.RABBITMQ_YEAR_ROLLOVER_QUEUE})..."
            )
        )
        main()
