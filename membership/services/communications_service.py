import logging

from django.db import DatabaseError
from django.utils import timezone

from membership.models import Member, Message, MessageStatus, Notification, NotificationType
from membership.services.access_service import scoped_mandalams, visible_members

logger = logging.getLogger(__name__)

AUDIENCE_ALL = "ALL"
ALL_MEMBERS_LABEL = "All Members"


def audience_label(mandalam: str = None) -> str:
    return f"{mandalam} Members" if mandalam else ALL_MEMBERS_LABEL


class NotificationService:
    """Admin notifications and member inboxes."""

    def send(
        self,
        actor: Member,
        title: str,
        message: str,
        audience: str = AUDIENCE_ALL,
        recipients: list = None,
    ) -> dict:
        """
        Send a notification.

        Args:
            actor: Sending admin
            title: Notification title
            message: Notification body
            audience: "ALL", a mandalam name, or "INDIVIDUAL"
            recipients: Member ids, required for INDIVIDUAL

        Returns:
            dict: Contains 'success', 'message' and on success 'notification'
        """
        if not (title or "").strip() or not (message or "").strip():
            return {
                "success": False,
                "message": "Title and message are required",
                "code": "invalid",
            }

        if audience == NotificationType.INDIVIDUAL:
            recipients = [r for r in (recipients or []) if r]
            if not recipients:
                return {
                    "success": False,
                    "message": "Select at least one recipient",
                    "code": "invalid",
                }
            allowed = set(
                visible_members(actor).filter(pk__in=recipients).values_list("pk", flat=True)
            )
            if len(allowed) != len(set(recipients)):
                return {
                    "success": False,
                    "message": "You are not allowed to message some of these members",
                    "code": "forbidden",
                }
            fields = {
                "notification_type": NotificationType.INDIVIDUAL,
                "target_audience": "",
                "recipients": recipients,
            }
        elif audience in (None, "", AUDIENCE_ALL):
            regions = scoped_mandalams(actor)
            if regions is not None:
                return {
                    "success": False,
                    "message": "Regional admins can only notify their own mandalams",
                    "code": "forbidden",
                }
            fields = {
                "notification_type": NotificationType.BROADCAST,
                "target_audience": ALL_MEMBERS_LABEL,
                "recipients": [],
            }
        else:
            regions = scoped_mandalams(actor)
            if regions is not None and audience not in regions:
                return {
                    "success": False,
                    "message": f"You cannot notify members of {audience}",
                    "code": "forbidden",
                }
            member_ids = list(
                Member.objects.filter(mandalam=audience).values_list("pk", flat=True)
            )
            fields = {
                "notification_type": NotificationType.BROADCAST,
                "target_audience": audience_label(audience),
                "recipients": member_ids,
            }

        try:
            notification = Notification.objects.create(
                title=title.strip(), message=message.strip(), sent_by=actor.full_name, **fields
            )
        except DatabaseError as e:
            logger.error(f"Error sending notification '{title}': {str(e)}")
            return {"success": False, "message": "Failed to send notification", "code": "error"}

        logger.info(
            f"{actor.full_name} sent notification {notification.id} "
            f"to {notification.target_audience or len(notification.recipients)}"
        )
        return {"success": True, "message": "Notification sent", "notification": notification}

    def inbox_for(self, member: Member) -> list:
        """
        Notifications addressed to `member`, newest first.

        A non-empty recipient list decides on its own; the audience label is
        only used when there are no recipients.
        """
        labels = {ALL_MEMBERS_LABEL, audience_label(member.mandalam)}
        inbox = []
        for notification in Notification.objects.all():
            if notification.recipients:
                if member.pk in notification.recipients:
                    inbox.append(notification)
            elif notification.target_audience in labels:
                inbox.append(notification)
        return inbox

    def list_sent(self):
        return list(Notification.objects.all())

    def mark_read(self, notification_id: str, member: Member) -> dict:
        notification = Notification.objects.filter(pk=notification_id).first()
        if not notification or notification not in self.inbox_for(member):
            return {"success": False, "message": "Notification not found", "code": "not_found"}
        if not notification.read:
            notification.read = True
            notification.save(update_fields=["read"])
        return {"success": True, "message": "Marked as read", "notification": notification}

    def delete(self, notification_id: str) -> dict:
        deleted, _ = Notification.objects.filter(pk=notification_id).delete()
        if not deleted:
            return {"success": False, "message": "Notification not found", "code": "not_found"}
        return {"success": True, "message": "Notification deleted"}


class MessageService:
    """Member support tickets."""

    def open(self, member: Member, subject: str, body: str) -> dict:
        if not (subject or "").strip() or not (body or "").strip():
            return {
                "success": False,
                "message": "Subject and message are required",
                "code": "invalid",
            }

        try:
            message = Message.objects.create(
                sender_id=member.pk,
                sender_name=member.full_name,
                sender_membership_no=member.membership_no,
                sender_mandalam=member.mandalam,
                subject=subject.strip(),
                body=body.strip(),
            )
        except DatabaseError as e:
            logger.error(f"Error saving message from {member.pk}: {str(e)}")
            return {"success": False, "message": "Failed to send message", "code": "error"}

        return {"success": True, "message": "Message sent", "ticket": message}

    def list_for(self, member: Member):
        """Own tickets for members, scoped tickets for admins."""
        if not member.is_admin:
            return Message.objects.filter(sender_id=member.pk)
        regions = scoped_mandalams(member)
        if regions is None:
            return Message.objects.all()
        return Message.objects.filter(sender_mandalam__in=regions)

    def mark_read(self, message_id: str, actor: Member) -> dict:
        message = self.list_for(actor).filter(pk=message_id).first()
        if not message:
            return {"success": False, "message": "Message not found", "code": "not_found"}
        if message.status == MessageStatus.NEW:
            message.status = MessageStatus.READ
            message.save(update_fields=["status"])
        return {"success": True, "message": "Marked as read", "ticket": message}

    def reply(self, message_id: str, actor: Member, reply: str) -> dict:
        """Store the admin reply. A later reply replaces the earlier one."""
        if not (reply or "").strip():
            return {"success": False, "message": "Reply cannot be empty", "code": "invalid"}

        message = self.list_for(actor).filter(pk=message_id).first()
        if not message:
            return {"success": False, "message": "Message not found", "code": "not_found"}

        message.reply = reply.strip()
        message.replied_by = actor.full_name
        message.replied_at = timezone.now()
        message.status = MessageStatus.REPLIED
        message.save(update_fields=["reply", "replied_by", "replied_at", "status"])
        logger.info(f"{actor.full_name} replied to message {message.pk}")
        return {"success": True, "message": "Reply sent", "ticket": message}
