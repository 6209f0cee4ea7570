"""
Create the reserved system administrator.

Usage:
    BOOTSTRAP_ADMIN_PASSWORD=... python manage.py seed_admin
"""

from django.core.management.base import BaseCommand, CommandError

from membership.services.member_service import seed_admin


class Command(BaseCommand):
    help = "Create the system administrator account if it does not exist"

    def handle(self, *args, **options):
        try:
            member, created = seed_admin()
        except ValueError as e:
            raise CommandError(str(e)) from e

        if created:
            self.stdout.write(self.style.SUCCESS(f"Created system administrator {member.pk}"))
        else:
            self.stdout.write(f"System administrator {member.pk} already exists")
