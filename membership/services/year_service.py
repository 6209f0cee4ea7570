import logging

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F, Max, Q
from django.utils import timezone

from membership.models import Member, PaymentStatus, YearConfig, YearStatus
from membership.rabbitmq import publisher
from membership.services.workflow_service import CONFIRMATION_REQUIRED

logger = logging.getLogger(__name__)


def active_year() -> int:
    """The ACTIVE registration year, or the calendar year before any year was started."""
    config = YearConfig.objects.filter(status=YearStatus.ACTIVE).order_by("-year").first()
    return config.year if config else timezone.localdate().year


def is_in_renewal(member: Member, current_year: int) -> bool:
    return member.registration_year < current_year


def is_renewal_due(member: Member, current_year: int) -> bool:
    """Registered in an earlier year and the renewal is not paid yet."""
    return is_in_renewal(member, current_year) and member.payment_status != PaymentStatus.PAID


class YearService:
    """Registration years and the yearly rollover."""

    def list_years(self):
        return list(YearConfig.objects.all())

    def start_new_year(self, actor: Member, year: int = None, confirm: bool = False) -> dict:
        """
        Start a new registration year.

        Archives every other year, makes `year` ACTIVE and resets every
        member's payment to UNPAID. Creating a year that already exists, or
        one earlier than the latest year, fails before anything is archived.

        Args:
            actor: Must be the master admin
            year: Year to start; defaults to the latest known year + 1
            confirm: Explicit confirmation of this irreversible action

        Returns:
            dict: Contains 'success', 'message' and on success 'year' and 'reset'
        """
        if not actor.is_master_admin:
            return {
                "success": False,
                "message": "Only the master admin can start a new year",
                "code": "forbidden",
            }
        if not confirm:
            return {"success": False, "message": CONFIRMATION_REQUIRED, "code": "confirmation"}

        if year is None:
            latest = YearConfig.objects.aggregate(latest=Max("year"))["latest"]
            year = (latest or timezone.localdate().year - 1) + 1

        try:
            with transaction.atomic():
                if YearConfig.objects.filter(year=year).exists():
                    return {"success": False, "message": "Year already exists", "code": "conflict"}
                latest = YearConfig.objects.aggregate(latest=Max("year"))["latest"]
                earliest = latest if latest is not None else timezone.localdate().year
                if year < earliest:
                    return {
                        "success": False,
                        "message": f"Cannot start {year}: registration year is already {earliest}",
                        "code": "invalid",
                    }
                archived = list(
                    YearConfig.objects.exclude(status=YearStatus.ARCHIVED)
                    .values_list("pk", flat=True)
                )
                YearConfig.objects.filter(pk__in=archived).update(status=YearStatus.ARCHIVED)
                config = YearConfig.objects.create(
                    year=year, status=YearStatus.ACTIVE, started_by=actor.full_name
                )
        except IntegrityError:
            # Another admin started the same year concurrently
            return {"success": False, "message": "Year already exists", "code": "conflict"}

        # Queryset updates bypass post_save
        for pk in archived:
            publisher.publish_collection_changed(YearConfig._meta.db_table, str(pk), "updated")
        logger.info(f"{actor.full_name} started registration year {year}")

        try:
            reset = self.reset_payments(year)
        except DatabaseError as e:
            logger.error(f"Payment reset for {year} interrupted: {str(e)}")
            if not publisher.publish_year_rollover_requested(year):
                logger.error(f"Could not schedule payment reset for {year}; run resume_rollover")
            return {
                "success": True,
                "message": (
                    f"Year {year} started. Payment reset will be completed in the background."
                ),
                "year": config,
                "reset": None,
            }

        config.refresh_from_db()
        return {
            "success": True,
            "message": f"Year {year} started",
            "year": config,
            "reset": reset,
        }

    def reset_payments(self, year: int, batch_size: int = None) -> int:
        """
        Reset every member's payment to UNPAID for `year`, in batches.

        Safe to run repeatedly and to resume after a crash: members already
        reset for `year` (or a later year) are skipped.

        Returns:
            int: number of members reset by this call
        """
        batch_size = batch_size or settings.ROLLOVER_BATCH_SIZE
        pending = Member.objects.filter(
            Q(payment_reset_year__isnull=True) | Q(payment_reset_year__lt=year)
        )
        total = 0
        while True:
            batch = list(pending.order_by("pk").values_list("pk", flat=True)[:batch_size])
            if not batch:
                break
            with transaction.atomic():
                updated = pending.filter(pk__in=batch).update(
                    payment_status=PaymentStatus.UNPAID,
                    payment_reset_year=year,
                    version=F("version") + 1,
                    updated_at=timezone.now(),
                )
            total += updated
            logger.debug(f"Reset payments for {updated} members ({total} so far) for {year}")

        YearConfig.objects.filter(year=year, rollover_completed_at__isnull=True).update(
            rollover_completed_at=timezone.now()
        )
        if total:
            publisher.publish_collection_changed(Member._meta.db_table, "*", "updated")
        logger.info(f"Payment reset for {year} complete: {total} members reset")
        return total

    def pending_rollovers(self) -> list:
        """Years whose payment reset never finished."""
        return list(
            YearConfig.objects.filter(rollover_completed_at__isnull=True)
            .order_by("year")
            .values_list("year", flat=True)
        )
