from django.db import models

from .choices import YearStatus
from .member import generate_id


def generate_year_id():
    return generate_id("year")


class YearConfig(models.Model):
    """Registration year. Exactly one year is ACTIVE at a time."""

    id = models.CharField(max_length=64, primary_key=True, default=generate_year_id)
    year = models.PositiveIntegerField(unique=True)
    status = models.CharField(
        max_length=20, choices=YearStatus.choices, default=YearStatus.ACTIVE, db_index=True
    )
    count = models.PositiveIntegerField(default=0, help_text="Members registered in this year")
    started_by = models.CharField(max_length=255, blank=True, default="")
    rollover_completed_at = models.DateTimeField(
        blank=True, null=True, help_text="When the payment reset for this year finished"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "year_configs"
        ordering = ["-year"]

    def __str__(self):
        return f"{self.year} ({self.status})"


class MembershipSequence(models.Model):
    """Last membership sequence handed out for a year."""

    year = models.PositiveIntegerField(primary_key=True)
    last_value = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "membership_sequences"

    def __str__(self):
        return f"{self.year}: {self.last_value}"
