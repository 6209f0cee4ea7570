"""
Membership number allocation.

A membership number is the registration year followed by a four digit,
zero-padded sequence (`20250001`). Sequences are handed out from a per-year
counter row locked with SELECT ... FOR UPDATE; the counter never goes below
the highest number already stored, so numbers written by older code or
imported by hand are respected.
"""

import logging

from django.db import IntegrityError, transaction

from membership.models import Member, MembershipSequence, Role

logger = logging.getLogger(__name__)

SEQUENCE_WIDTH = 4
UNIQUE_RETRY_ATTEMPTS = 3


class SequenceError(ValueError):
    """Raised when a membership sequence cannot be produced."""


def format_membership_no(year: int, sequence: int) -> str:
    if sequence < 1:
        raise SequenceError(f"Sequence must be positive, got {sequence}")
    return f"{year}{sequence:0{SEQUENCE_WIDTH}d}"


def scan_max_sequence(year: int) -> int:
    """Highest sequence stored for `year`, 0 when the year has none."""
    prefix = str(year)
    numbers = (
        Member.objects.filter(membership_no__startswith=prefix)
        .exclude(role=Role.MASTER_ADMIN)
        .values_list("membership_no", flat=True)
    )
    highest = 0
    for number in numbers:
        suffix = number[len(prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return highest


def next_sequence(year: int) -> int:
    """Sequence the next registration for `year` would get, without reserving it."""
    counter = MembershipSequence.objects.filter(year=year).first()
    reserved = counter.last_value if counter else 0
    return max(scan_max_sequence(year), reserved) + 1


def next_membership_no(year: int) -> str:
    return format_membership_no(year, next_sequence(year))


def allocate(year: int, count: int = 1) -> int:
    """
    Reserve `count` consecutive sequences for `year`.

    Returns:
        int: the first reserved sequence
    """
    if count < 1:
        raise SequenceError(f"Cannot allocate {count} sequences")

    with transaction.atomic():
        counter, _ = MembershipSequence.objects.select_for_update().get_or_create(
            year=year, defaults={"last_value": 0}
        )
        start = max(scan_max_sequence(year), counter.last_value) + 1
        counter.last_value = start + count - 1
        counter.save(update_fields=["last_value", "updated_at"])

    logger.debug(f"Allocated sequences {start}..{start + count - 1} for {year}")
    return start


def with_unique_retry(operation, attempts: int = UNIQUE_RETRY_ATTEMPTS):
    """
    Run an insert that allocates membership numbers, retrying on unique
    constraint violations.

    `operation` must open its own atomic block so a failed attempt rolls back
    cleanly. The last IntegrityError is re-raised.
    """
    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except IntegrityError as e:
            if attempt >= attempts:
                raise
            logger.warning(f"Unique constraint hit on attempt {attempt}, retrying: {str(e)}")
