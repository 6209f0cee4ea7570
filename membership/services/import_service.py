"""
Bulk member import from CSV.

Columns, in order: full name, Emirates ID, mobile, emirate, mandalam,
registration date. The last three are optional. A header row is detected
and skipped. Rows with fewer than three columns, or with a blank name,
Emirates ID or mobile, are skipped, as are members whose Emirates ID is
already registered or repeated within the file.
"""

import csv
import io
import logging
from datetime import datetime

from django.conf import settings
from django.contrib.auth.hashers import make_password
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone
from django.utils.dateparse import parse_date

from membership.models import Member, PaymentStatus, Role, UserStatus, YearConfig
from membership.rabbitmq import publisher
from membership.services.registration_form import normalize_emirate
from membership.services.sequence_service import allocate, format_membership_no, with_unique_retry

logger = logging.getLogger(__name__)

MIN_COLUMNS = 3
DATE_FORMATS = ("%d/%m/%Y", "%d-%m-%Y", "%m/%d/%Y", "%d.%m.%Y")


class CsvImportError(ValueError):
    """Raised when an uploaded file cannot be read as CSV."""


def _clean(value: str) -> str:
    return value.strip().strip('"').strip()


def _parse_registration_date(value: str):
    if not value:
        return None
    try:
        parsed = parse_date(value)
    except ValueError:
        parsed = None
    if parsed:
        return parsed
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def looks_like_header(row: list) -> bool:
    """A header row has no digits where the Emirates ID belongs."""
    if len(row) < 2:
        return False
    return not any(ch.isdigit() for ch in row[1])


def read_rows(content) -> list:
    """Split uploaded CSV text (or bytes) into cleaned rows, header removed."""
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise CsvImportError("File is not UTF-8 encoded CSV") from e

    try:
        rows = [
            [_clean(cell) for cell in row]
            for row in csv.reader(io.StringIO(content))
            if any(cell.strip() for cell in row)
        ]
    except csv.Error as e:
        raise CsvImportError(f"Error parsing CSV: {str(e)}") from e

    if rows and looks_like_header(rows[0]):
        rows = rows[1:]
    return rows


class ImportService:
    """Bulk import of pre-approved members."""

    def import_csv(self, content, actor: Member = None, progress=None) -> dict:
        """
        Create members from a CSV export of the paper register.

        Imported members are APPROVED, UNPAID, flagged for profile completion
        and use their Emirates ID as initial password. Their membership
        numbers are consecutive.

        Args:
            content: CSV text or bytes
            actor: Admin running the import, recorded as approver
            progress: Optional callable receiving a percentage (0-100)

        Returns:
            dict: 'success', 'message', 'created', 'skipped', 'progress'
        """
        try:
            rows = read_rows(content)
        except CsvImportError as e:
            logger.error(f"CSV import rejected: {str(e)}")
            return {
                "success": False,
                "message": str(e),
                "code": "invalid",
                "created": 0,
                "skipped": 0,
                "progress": 0,
            }

        year = timezone.localdate().year
        existing_ids = set(Member.objects.values_list("national_id", flat=True))
        candidates = []
        skipped = 0

        for index, row in enumerate(rows, start=1):
            candidate = self._row_to_fields(row)
            if candidate is None or candidate["national_id"] in existing_ids:
                skipped += 1
            else:
                existing_ids.add(candidate["national_id"])
                candidates.append(candidate)
            if progress and rows:
                # Parsing is half the work, inserting the other half
                progress(int(index * 50 / len(rows)))

        if not candidates:
            if progress:
                progress(100)
            return {
                "success": True,
                "message": "Successfully imported 0 users.",
                "created": 0,
                "skipped": skipped,
                "progress": 100,
            }

        approver = actor.full_name if actor else ""
        try:
            created = with_unique_retry(lambda: self._insert(candidates, year, approver))
        except (IntegrityError, DatabaseError) as e:
            logger.error(f"CSV import failed: {str(e)}")
            return {
                "success": False,
                "message": "Error importing users.",
                "code": "error",
                "created": 0,
                "skipped": skipped,
                "progress": 0,
            }

        if progress:
            progress(100)
        publisher.publish_collection_changed(Member._meta.db_table, "*", "imported")
        logger.info(f"Imported {len(created)} members, skipped {skipped} rows")
        return {
            "success": True,
            "message": f"Successfully imported {len(created)} users.",
            "created": len(created),
            "skipped": skipped,
            "progress": 100,
            "members": created,
        }

    def _row_to_fields(self, row: list):
        if len(row) < MIN_COLUMNS:
            return None
        full_name, national_id, mobile = row[0], row[1], row[2]
        if not (full_name and national_id and mobile):
            return None

        emirate = normalize_emirate(row[3]) if len(row) > 3 and row[3] else None
        mandalam = row[4] if len(row) > 4 and row[4] else settings.IMPORT_DEFAULT_MANDALAM
        for known in settings.MANDALAMS:
            if known.lower() == mandalam.lower():
                mandalam = known
                break

        return {
            "full_name": full_name,
            "national_id": national_id,
            "mobile": mobile,
            "whatsapp": mobile,
            "emirate": emirate or settings.IMPORT_DEFAULT_EMIRATE,
            "mandalam": mandalam,
            "registration_date": _parse_registration_date(row[5]) if len(row) > 5 else None,
        }

    def _insert(self, candidates: list, year: int, approver: str) -> list:
        now = timezone.now()
        with transaction.atomic():
            start = allocate(year, count=len(candidates))
            members = [
                Member(
                    membership_no=format_membership_no(year, start + offset),
                    registration_year=year,
                    registration_date=fields.pop("registration_date") or timezone.localdate(),
                    payment_reset_year=year,
                    password=make_password(fields["national_id"]),
                    status=UserStatus.APPROVED,
                    payment_status=PaymentStatus.UNPAID,
                    role=Role.USER,
                    is_imported=True,
                    approved_by=approver,
                    approved_at=now,
                    **fields,
                )
                for offset, fields in enumerate(dict(c) for c in candidates)
            ]
            Member.objects.bulk_create(members)
            YearConfig.objects.filter(year=year).update(count=F("count") + len(members))
        return members
