import datetime
import logging
from decimal import Decimal, InvalidOperation

from django.db import DatabaseError
from django.db.models import Sum
from django.utils.dateparse import parse_date

from membership.models import BenefitRecord, BenefitType, Member
from membership.services.access_service import can_manage_member, scoped_mandalams, visible_members
from membership.services.workflow_service import not_found

logger = logging.getLogger(__name__)


class BenefitService:
    """Benefit payouts recorded by admins."""

    def add(self, actor: Member, member_id: str, data: dict) -> dict:
        """
        Record a benefit for a member.

        The member's name and membership number are copied onto the record so
        it stays readable if the member is later deleted.
        """
        member = Member.objects.filter(pk=member_id).first()
        if not member:
            return not_found(member_id)
        if not can_manage_member(actor, member):
            return {
                "success": False,
                "message": "You are not allowed to manage this member",
                "code": "forbidden",
            }

        errors = {}
        benefit_type = data.get("benefit_type")
        if benefit_type not in BenefitType.values:
            errors["type"] = f"Choose one of {', '.join(BenefitType.values)}"
        try:
            amount = Decimal(str(data.get("amount")))
            if not amount.is_finite() or amount <= 0:
                errors["amount"] = "Amount must be positive"
        except (InvalidOperation, ValueError):
            errors["amount"] = "Enter a valid amount"
        date = data.get("date")
        if isinstance(date, str):
            try:
                date = parse_date(date)
            except ValueError:
                date = None
        if not isinstance(date, datetime.date):
            errors["date"] = "Enter a valid date"
        if errors:
            return {
                "success": False,
                "message": "Invalid benefit",
                "errors": errors,
                "code": "invalid",
            }

        try:
            benefit = BenefitRecord.objects.create(
                member_id=member.pk,
                benefit_type=benefit_type,
                amount=amount,
                date=date,
                remarks=data.get("remarks") or "",
                member_name=member.full_name,
                membership_no=member.membership_no,
                recorded_by=actor.full_name,
            )
        except DatabaseError as e:
            logger.error(f"Error recording benefit for {member.pk}: {str(e)}")
            return {"success": False, "message": "Failed to add benefit", "code": "error"}

        logger.info(f"{actor.full_name} recorded {benefit_type} benefit {amount} for {member.pk}")
        return {"success": True, "message": "Benefit added successfully", "benefit": benefit}

    def list_for_member(self, member: Member):
        return BenefitRecord.objects.filter(member_id=member.pk)

    def list_for(self, member: Member):
        """Own benefits for members, scoped benefits for admins."""
        if not member.is_admin:
            return self.list_for_member(member)
        if scoped_mandalams(member) is None:
            return BenefitRecord.objects.all()
        member_ids = visible_members(member).values_list("pk", flat=True)
        return BenefitRecord.objects.filter(member_id__in=list(member_ids))

    def total_for(self, member: Member) -> Decimal:
        total = BenefitRecord.objects.filter(member_id=member.pk).aggregate(total=Sum("amount"))
        return (total["total"] or Decimal("0")).quantize(Decimal("0.01"))

    def delete(self, benefit_id: str, actor: Member) -> dict:
        benefit = self.list_for(actor).filter(pk=benefit_id).first()
        if not benefit:
            return {"success": False, "message": "Benefit not found", "code": "not_found"}
        benefit.delete()
        logger.info(f"{actor.full_name} deleted benefit {benefit_id}")
        return {"success": True, "message": "Benefit deleted"}
