from django.db import models

from .choices import BenefitType, MessageStatus, NotificationType
from .member import generate_id


def generate_benefit_id():
    return generate_id("benefit")


def generate_notification_id():
    return generate_id("notif")


def generate_message_id():
    return generate_id("msg")


def generate_news_id():
    return generate_id("news")


def generate_sponsor_id():
    return generate_id("sponsor")


class BenefitRecord(models.Model):
    """Financial assistance paid out to a member. Immutable once recorded."""

    id = models.CharField(max_length=64, primary_key=True, default=generate_benefit_id)
    member_id = models.CharField(max_length=64, db_index=True)
    benefit_type = models.CharField(max_length=32, choices=BenefitType.choices)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    date = models.DateField()
    remarks = models.TextField(blank=True, default="")
    member_name = models.CharField(max_length=255, blank=True, default="")
    membership_no = models.CharField(max_length=32, blank=True, default="")
    recorded_by = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "benefits"
        ordering = ["-date", "-created_at"]

    def __str__(self):
        return f"{self.benefit_type} {self.amount} -> {self.member_name}"


class Notification(models.Model):
    """
    Message pushed to members.

    An explicit recipient list always wins over the audience label; the label
    is only consulted for broadcasts without recipients.
    """

    id = models.CharField(max_length=64, primary_key=True, default=generate_notification_id)
    title = models.CharField(max_length=255)
    message = models.TextField()
    date = models.DateTimeField(auto_now_add=True)
    read = models.BooleanField(default=False)
    notification_type = models.CharField(
        max_length=20, choices=NotificationType.choices, default=NotificationType.BROADCAST
    )
    target_audience = models.CharField(max_length=255, blank=True, default="")
    recipients = models.JSONField(default=list, blank=True)
    sent_by = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        db_table = "notifications"
        ordering = ["-date"]

    def __str__(self):
        return self.title


class Message(models.Model):
    """Support ticket opened by a member. Holds a single admin reply."""

    id = models.CharField(max_length=64, primary_key=True, default=generate_message_id)
    sender_id = models.CharField(max_length=64, db_index=True)
    sender_name = models.CharField(max_length=255)
    sender_membership_no = models.CharField(max_length=32, blank=True, default="")
    sender_mandalam = models.CharField(max_length=100, blank=True, default="")
    subject = models.CharField(max_length=255)
    body = models.TextField()
    date = models.DateTimeField(auto_now_add=True)
    status = models.CharField(
        max_length=20, choices=MessageStatus.choices, default=MessageStatus.NEW, db_index=True
    )
    reply = models.TextField(blank=True, null=True)
    replied_by = models.CharField(max_length=255, blank=True, default="")
    replied_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        db_table = "messages"
        ordering = ["-date"]

    def __str__(self):
        return f"{self.subject} ({self.status})"


class News(models.Model):
    id = models.CharField(max_length=64, primary_key=True, default=generate_news_id)
    title = models.CharField(max_length=255)
    body = models.TextField()
    image_url = models.CharField(max_length=500, blank=True, default="")
    is_published = models.BooleanField(default=True)
    published_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "news"
        ordering = ["-published_at"]
        verbose_name_plural = "News"

    def __str__(self):
        return self.title


class Sponsor(models.Model):
    id = models.CharField(max_length=64, primary_key=True, default=generate_sponsor_id)
    name = models.CharField(max_length=255)
    logo_url = models.CharField(max_length=500, blank=True, default="")
    website = models.URLField(max_length=500, blank=True, default="")
    tier = models.CharField(max_length=50, blank=True, default="")
    display_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "sponsors"
        ordering = ["display_order", "name"]

    def __str__(self):
        return self.name


class CardConfig(models.Model):
    """Layout of the digital membership card. Pure presentation data."""

    id = models.CharField(max_length=64, primary_key=True, default="default")
    front_template_url = models.CharField(max_length=500, blank=True, default="")
    back_template_url = models.CharField(max_length=500, blank=True, default="")
    front_fields = models.JSONField(default=list, blank=True)
    back_fields = models.JSONField(default=list, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "card_configs"

    def __str__(self):
        return f"Card layout {self.id}"
