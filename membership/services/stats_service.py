"""
Admin dashboard figures and the member export.
"""

import csv
import io
import logging

from django.conf import settings
from django.db.models import Count, Q

from membership.models import Member, PaymentStatus, RegistrationQuestion, Role, UserStatus
from membership.services.access_service import visible_members
from membership.services.year_service import active_year

logger = logging.getLogger(__name__)

EXPORT_HEADERS = [
    "Reg No",
    "Full Name",
    "Email",
    "Mobile",
    "WhatsApp",
    "Emirates ID",
    "Mandalam",
    "Emirate",
    "Status",
    "Payment Status",
    "Year",
    "Join Date",
    "Approved By",
]


def dashboard_stats(member: Member, year: int = None) -> dict:
    """Counts over the members `member` can see, for the active year."""
    year = year or active_year()
    counts = visible_members(member).aggregate(
        total=Count("pk"),
        new=Count("pk", filter=Q(registration_year=year)),
        re_reg=Count(
            "pk", filter=Q(registration_year__lt=year, payment_status=PaymentStatus.PAID)
        ),
        pending=Count("pk", filter=Q(status=UserStatus.PENDING)),
        approved=Count("pk", filter=Q(status=UserStatus.APPROVED)),
        rejected=Count("pk", filter=Q(status=UserStatus.REJECTED)),
        paid=Count("pk", filter=Q(payment_status=PaymentStatus.PAID)),
        admins=Count("pk", filter=~Q(role=Role.USER)),
    )
    counts["collected"] = counts["paid"] * settings.MEMBERSHIP_FEE
    counts["year"] = year
    return counts


def _export_value(value) -> str:
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value)


def export_members_csv(member: Member) -> str:
    """
    Render the members `member` can see as CSV.

    Every registration question becomes an extra column, read from the mapped
    member field first and from the stored answers otherwise.
    """
    questions = list(RegistrationQuestion.objects.all())
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(EXPORT_HEADERS + [question.label for question in questions])

    rows = 0
    for record in visible_members(member).order_by("membership_no"):
        static = [
            record.membership_no,
            record.full_name,
            record.email or "",
            record.mobile,
            record.whatsapp,
            record.national_id,
            record.mandalam,
            record.emirate,
            record.status,
            record.payment_status,
            record.registration_year,
            record.registration_date.isoformat() if record.registration_date else "",
            record.approved_by or "",
        ]
        answers = []
        for question in questions:
            value = getattr(record, question.system_mapping) if question.system_mapping else None
            if value in (None, ""):
                value = (record.custom_data or {}).get(question.id)
            answers.append(_export_value(value))
        writer.writerow(static + answers)
        rows += 1

    logger.info(f"{member.full_name} exported {rows} members")
    return output.getvalue()
