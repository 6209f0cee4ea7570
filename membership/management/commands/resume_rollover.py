"""
Finish payment resets that were interrupted.

Usage:
    python manage.py resume_rollover            # every unfinished year
    python manage.py resume_rollover --year 2026
"""

from django.core.management.base import BaseCommand, CommandError

from membership.models import YearConfig
from membership.services.year_service import YearService


class Command(BaseCommand):
    help = "Resume unfinished year rollovers (payment resets)"

    def add_arguments(self, parser):
        parser.add_argument("--year", type=int, help="Only resume this year")
        parser.add_argument("--batch-size", type=int, default=None, help="Members per batch")

    def handle(self, *args, **options):
        service = YearService()
        if options["year"]:
            if not YearConfig.objects.filter(year=options["year"]).exists():
                raise CommandError(f"Year {options['year']} has not been started")
            years = [options["year"]]
        else:
            years = service.pending_rollovers()

        if not years:
            self.stdout.write(self.style.SUCCESS("No unfinished rollovers"))
            return

        for year in years:
            reset = service.reset_payments(year, batch_size=options["batch_size"])
            self.stdout.write(self.style.SUCCESS(f"Year {year}: reset {reset} members"))
