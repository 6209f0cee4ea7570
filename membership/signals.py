import logging

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from membership.models import BenefitRecord, Member, Message, Notification, YearConfig
from membership.rabbitmq import publisher

logger = logging.getLogger(__name__)

# Collections that feed the change stream
STREAMED_MODELS = (Member, BenefitRecord, Notification, Message, YearConfig)


@receiver(post_save)
def record_saved(sender, instance, created, **kwargs):
    """Publish a change-stream event when a streamed record is saved."""
    if sender not in STREAMED_MODELS:
        return
    action = "created" if created else "updated"
    publisher.publish_collection_changed(sender._meta.db_table, str(instance.pk), action)


@receiver(post_delete)
def record_deleted(sender, instance, **kwargs):
    """Publish a change-stream event when a streamed record is deleted."""
    if sender not in STREAMED_MODELS:
        return
    logger.debug(f"{sender._meta.db_table} record {instance.pk} deleted")
    publisher.publish_collection_changed(sender._meta.db_table, str(instance.pk), "deleted")
