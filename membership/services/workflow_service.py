import logging

from django.db import DatabaseError
from django.db.models import F
from django.utils import timezone

from membership.models import Member, PaymentStatus, UserStatus
from membership.rabbitmq import publisher
from membership.services.access_service import can_manage_member

logger = logging.getLogger(__name__)

CONFIRMATION_REQUIRED = "Confirmation required"


def not_found(member_id) -> dict:
    return {"success": False, "message": f"Member {member_id} not found", "code": "not_found"}


class WorkflowService:
    """
    Approval and payment state machines for members.

    Approval:  PENDING -> APPROVED | REJECTED
    Payment:   UNPAID -> PENDING -> PAID, PENDING -> UNPAID (rejected),
               PAID -> UNPAID (revoked)

    Every admin transition needs an explicit confirmation. Transitions are
    written as a conditional UPDATE on the expected state and the member's
    version, so a concurrent change makes the second writer fail instead of
    overwriting the first.
    """

    def approve(self, member_id: str, actor: Member, confirm: bool = False) -> dict:
        return self._admin_transition(
            member_id,
            actor,
            confirm,
            action="approve",
            expected={"status": [UserStatus.PENDING]},
            changes=lambda: {
                "status": UserStatus.APPROVED,
                "approved_by": actor.full_name,
                "approved_at": timezone.now(),
            },
            message="Member approved",
        )

    def reject(self, member_id: str, actor: Member, confirm: bool = False) -> dict:
        return self._admin_transition(
            member_id,
            actor,
            confirm,
            action="reject",
            expected={"status": [UserStatus.PENDING]},
            changes=lambda: {"status": UserStatus.REJECTED},
            message="Member rejected",
        )

    def approve_payment(self, member_id: str, actor: Member, confirm: bool = False) -> dict:
        """Confirm a submitted payment. Also approves the membership."""
        return self._admin_transition(
            member_id,
            actor,
            confirm,
            action="approve payment for",
            expected={"payment_status": [PaymentStatus.PENDING]},
            changes=lambda: {
                "payment_status": PaymentStatus.PAID,
                "status": UserStatus.APPROVED,
                "approved_by": actor.full_name,
                "approved_at": timezone.now(),
            },
            message="Payment approved",
        )

    def reject_payment(self, member_id: str, actor: Member, confirm: bool = False) -> dict:
        return self._admin_transition(
            member_id,
            actor,
            confirm,
            action="reject payment for",
            expected={"payment_status": [PaymentStatus.PENDING]},
            changes=lambda: {"payment_status": PaymentStatus.UNPAID},
            message="Payment rejected",
        )

    def revoke_payment(self, member_id: str, actor: Member, confirm: bool = False) -> dict:
        """Send a paid member back to UNPAID to force renewal."""
        return self._admin_transition(
            member_id,
            actor,
            confirm,
            action="revoke payment for",
            expected={"payment_status": [PaymentStatus.PAID]},
            changes=lambda: {"payment_status": PaymentStatus.UNPAID},
            message="Payment revoked",
        )

    def submit_payment(self, member: Member, remarks: str = "", proof: str = "") -> dict:
        """
        Member reports a payment for verification.

        Args:
            member: The member paying
            remarks: Transaction id, bank reference or similar, stored verbatim
            proof: Optional proof image (URL or data URI)
        """
        remarks = remarks or ""
        proof = proof or ""
        if not remarks.strip() and not proof.strip():
            return {
                "success": False,
                "message": "Please enter remarks or attach a payment proof.",
                "code": "invalid",
            }

        return self._transition(
            member.pk,
            action="submit payment for",
            expected={"payment_status": [PaymentStatus.UNPAID]},
            changes={
                "payment_status": PaymentStatus.PENDING,
                "payment_remarks": remarks,
                "payment_proof": proof,
                "payment_submitted_at": timezone.now(),
            },
            message="Payment details submitted for verification.",
        )

    def _admin_transition(
        self, member_id, actor, confirm, action, expected, changes, message
    ) -> dict:
        if not confirm:
            return {"success": False, "message": CONFIRMATION_REQUIRED, "code": "confirmation"}

        member = Member.objects.filter(pk=member_id).first()
        if not member:
            return not_found(member_id)
        if not can_manage_member(actor, member):
            return {
                "success": False,
                "message": "You are not allowed to manage this member",
                "code": "forbidden",
            }

        result = self._transition(member_id, action, expected, changes(), message, current=member)
        if result["success"]:
            logger.info(f"{actor.full_name} ({actor.pk}) did '{action}' on member {member_id}")
        return result

    def _transition(self, member_id, action, expected, changes, message, current=None) -> dict:
        member = current or Member.objects.filter(pk=member_id).first()
        if not member:
            return not_found(member_id)

        for field, allowed in expected.items():
            value = getattr(member, field)
            if value not in allowed:
                return {
                    "success": False,
                    "message": f"Cannot {action} member while {field} is {value}",
                    "code": "invalid_state",
                }

        conditions = {f"{field}__in": allowed for field, allowed in expected.items()}
        try:
            updated = Member.objects.filter(
                pk=member_id, version=member.version, **conditions
            ).update(version=F("version") + 1, updated_at=timezone.now(), **changes)
        except DatabaseError as e:
            logger.error(f"Failed to {action} member {member_id}: {str(e)}")
            return {
                "success": False,
                "message": "Operation failed. Please try again later.",
                "code": "error",
            }

        if not updated:
            return {
                "success": False,
                "message": "Member was changed by someone else. Reload and try again.",
                "code": "conflict",
            }

        member.refresh_from_db()
        # Queryset updates bypass post_save
        publisher.publish_collection_changed(Member._meta.db_table, str(member.pk), "updated")
        return {"success": True, "message": message, "member": member}
