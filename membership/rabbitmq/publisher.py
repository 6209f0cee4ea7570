import json
import logging
import pika
from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)


class RabbitMQPublisher:
    """RabbitMQ publisher for membership events."""

    def __init__(self):
        """Initialize RabbitMQ publisher with configuration from settings."""
        self.connection = None
        self.channel = None
        self._initialize_connection()

    def _initialize_connection(self):
        """Initialize the RabbitMQ connection and channel."""
        try:
            credentials = pika.PlainCredentials(settings.RABBITMQ_USER, settings.RABBITMQ_PASSWORD)
            parameters = pika.ConnectionParameters(
                host=settings.RABBITMQ_HOST,
                port=settings.RABBITMQ_PORT,
                virtual_host=settings.RABBITMQ_VHOST,
                credentials=credentials,
                heartbeat=600,
                blocked_connection_timeout=300,
            )
            self.connection = pika.BlockingConnection(parameters)
            self.channel = self.connection.channel()

            # Declare queues to ensure they exist
            self.channel.queue_declare(queue=settings.RABBITMQ_CHANGE_STREAM_QUEUE, durable=True)
            self.channel.queue_declare(queue=settings.RABBITMQ_YEAR_ROLLOVER_QUEUE, durable=True)

            logger.info("RabbitMQ publisher initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize RabbitMQ publisher: {str(e)}")
            self.connection = None
            self.channel = None

    def _publish(self, queue: str, message: dict) -> bool:
        if not self.channel:
            logger.warning("RabbitMQ channel not initialized, attempting to reconnect")
            self._initialize_connection()
            if not self.channel:
                logger.error("Failed to reconnect to RabbitMQ")
                return False

        try:
            self.channel.basic_publish(
                exchange="",
                routing_key=queue,
                body=json.dumps(message),
                properties=pika.BasicProperties(
                    delivery_mode=2, content_type="application/json"  # Make message persistent
                ),
            )
            return True

        except Exception as e:
            logger.error(f"Failed to publish to {queue}: {str(e)}")
            # Try to reconnect for next time
            self._close()
            return False

    def publish_collection_changed(self, collection: str, record_id: str, action: str) -> bool:
        """
        Publish a `{collection}.changed` event on the change stream.

        Subscribers (dashboards, caches) use these to refresh only the
        collection that moved instead of reloading everything.

        Args:
            collection: Table name of the record, e.g. "users"
            record_id: Id of the record that changed, or "*" for bulk changes
            action: created, updated, deleted or imported

        Returns:
            bool: True if successful, False otherwise
        """
        message = {
            "event": f"{collection}.changed",
            "collection": collection,
            "id": record_id,
            "action": action,
            "at": timezone.now().isoformat(),
        }
        published = self._publish(settings.RABBITMQ_CHANGE_STREAM_QUEUE, message)
        if published:
            logger.debug(f"Published {collection}.changed ({action}) for {record_id}")
        return published

    def publish_year_rollover_requested(self, year: int) -> bool:
        """
        Publish a year.rollover.requested event so the rollover worker
        finishes the payment reset for `year`.

        Returns:
            bool: True if successful, False otherwise
        """
        published = self._publish(settings.RABBITMQ_YEAR_ROLLOVER_QUEUE, {"year": year})
        if published:
            logger.info(f"Published year.rollover.requested for {year}")
        return published

    def _close(self):
        """Close the RabbitMQ connection."""
        try:
            if self.connection and not self.connection.is_closed:
                self.connection.close()
        except Exception as e:
            logger.error(f"Error closing RabbitMQ connection: {str(e)}")
        finally:
            self.connection = None
            self.channel = None

    def __del__(self):
        """Cleanup on object destruction."""
        self._close()


# Global publisher instance
_publisher = None


def get_publisher() -> RabbitMQPublisher:
    """Get or create the global publisher instance."""
    global _publisher
    if _publisher is None:
        _publisher = RabbitMQPublisher()
    return _publisher


def publish_collection_changed(collection: str, record_id: str, action: str) -> bool:
    """
    Publish a change-stream event for one record.

    Returns:
        bool: True if successful, False otherwise (always False when disabled)
    """
    if not settings.RABBITMQ_ENABLED:
        return False
    publisher = get_publisher()
    return publisher.publish_collection_changed(collection, record_id, action)


def publish_year_rollover_requested(year: int) -> bool:
    """
    Ask the rollover worker to (re)run the payment reset for a year.

    Returns:
        bool: True if successful, False otherwise (always False when disabled)
    """
    if not settings.RABBITMQ_ENABLED:
        return False
    publisher = get_publisher()
    return publisher.publish_year_rollover_requested(year)
