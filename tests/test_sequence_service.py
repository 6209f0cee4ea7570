"""
Tests for membership number allocation.
"""

import pytest
from django.db import IntegrityError

from membership.models import Member, MembershipSequence, Role
from membership.services.sequence_service import (
    SequenceError,
    allocate,
    format_membership_no,
    next_membership_no,
    scan_max_sequence,
    with_unique_retry,
)


class TestFormatMembershipNo:
    def test_pads_sequence_to_four_digits(self):
        assert format_membership_no(2025, 1) == "20250001"
        assert format_membership_no(2025, 42) == "20250042"

    def test_sequence_beyond_width_keeps_all_digits(self):
        assert format_membership_no(2025, 12345) == "202512345"

    def test_rejects_non_positive_sequence(self):
        with pytest.raises(SequenceError):
            format_membership_no(2025, 0)


@pytest.mark.django_db
class TestAllocate:
    def test_first_allocation_of_a_year_starts_at_one(self):
        assert allocate(2025) == 1
        assert allocate(2025) == 2
        assert MembershipSequence.objects.get(year=2025).last_value == 2

    def test_years_are_independent(self):
        allocate(2025)
        allocate(2025)
        assert allocate(2026) == 1

    def test_block_allocation_is_consecutive(self):
        assert allocate(2025, count=3) == 1
        assert allocate(2025) == 4

    def test_respects_numbers_already_stored(self, create_member):
        create_member(membership_no="20250007", registration_year=2025)

        assert scan_max_sequence(2025) == 7
        assert allocate(2025) == 8

    def test_master_admin_numbers_are_ignored(self, create_member):
        create_member(membership_no="20259999", role=Role.MASTER_ADMIN)

        assert scan_max_sequence(2025) == 0

    def test_deleted_numbers_are_not_reused(self, create_member):
        for _ in range(3):
            create_member(membership_no=format_membership_no(2025, allocate(2025)))
        Member.objects.filter(membership_no="20250003").delete()

        assert scan_max_sequence(2025) == 2
        assert allocate(2025) == 4

    def test_rejects_empty_block(self):
        with pytest.raises(SequenceError):
            allocate(2025, count=0)

    def test_next_membership_no_does_not_reserve(self):
        assert next_membership_no(2025) == "20250001"
        assert next_membership_no(2025) == "20250001"
        assert not MembershipSequence.objects.filter(year=2025).exists()


class TestWithUniqueRetry:
    def test_retries_after_integrity_error(self):
        calls = []

        def operation():
            calls.append(1)
            if len(calls) == 1:
                raise IntegrityError("duplicate key")
            return "ok"

        assert with_unique_retry(operation) == "ok"
        assert len(calls) == 2

    def test_reraises_after_last_attempt(self):
        def operation():
            raise IntegrityError("duplicate key")

        with pytest.raises(IntegrityError):
            with_unique_retry(operation, attempts=2)
