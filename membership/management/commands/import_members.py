"""
Bulk import members from a CSV file.

Usage:
    python manage.py import_members members.csv
"""

from django.core.management.base import BaseCommand, CommandError

from membership.services.import_service import ImportService


class Command(BaseCommand):
    help = "Import pre-approved members from a CSV file (name, Emirates ID, mobile, ...)"

    def add_arguments(self, parser):
        parser.add_argument("path", help="CSV file to import")

    def handle(self, *args, **options):
        try:
            with open(options["path"], "rb") as handle:
                content = handle.read()
        except OSError as e:
            raise CommandError(f"Cannot read {options['path']}: {str(e)}") from e

        reported = set()

        def progress(percent):
            step = percent - percent % 10
            if step not in reported:
                reported.add(step)
                self.stdout.write(f"Progress: {step}%")

        result = ImportService().import_csv(content, progress=progress)
        if not result["success"]:
            raise CommandError(result["message"])
        self.stdout.write(
            self.style.SUCCESS(f"{result['message']} Skipped {result['skipped']} rows.")
        )
