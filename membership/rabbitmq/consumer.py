import json
import logging

import pika
from django.conf import settings
from django.db import DatabaseError
from pika.exceptions import AMQPError

logger = logging.getLogger(__name__)


class RabbitMQConsumer:
    """Blocking consumer for one durable queue of background membership jobs."""

    def __init__(self, queue_name: str):
        """
        Initialize RabbitMQ consumer.

        Args:
            queue_name: The queue to consume from
        """
        self.queue_name = queue_name
        self.connection = None
        self.channel = None
        self._initialize_connection()

    def _initialize_connection(self):
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
            self.channel.queue_declare(queue=self.queue_name, durable=True)

            # A rollover holds row locks for a while; take one job at a time
            self.channel.basic_qos(prefetch_count=1)

            logger.info(f"RabbitMQ consumer ready on queue {self.queue_name}")
        except AMQPError as e:
            logger.error(f"Failed to connect consumer for {self.queue_name}: {str(e)}")
            self.connection = None
            self.channel = None

    @property
    def is_connected(self) -> bool:
        return self.channel is not None

    def consume(self, callback):
        """
        Block and feed every message of the queue to `callback`.

        Args:
            callback: pika callback taking (ch, method, properties, body)
        """
        if not self.channel:
            logger.error(f"Cannot consume {self.queue_name}: no RabbitMQ channel")
            return

        try:
            self.channel.basic_consume(
                queue=self.queue_name, on_message_callback=callback, auto_ack=False
            )
            logger.info(f"Consuming {self.queue_name}")
            self.channel.start_consuming()
        except KeyboardInterrupt:
            logger.info(f"Consumer for {self.queue_name} interrupted")
        except AMQPError as e:
            logger.error(f"Lost RabbitMQ connection while consuming {self.queue_name}: {str(e)}")
        finally:
            self.stop()

    def stop(self):
        try:
            if self.channel and self.channel.is_open:
                self.channel.stop_consuming()
            if self.connection and not self.connection.is_closed:
                self.connection.close()
                logger.info(f"Consumer for {self.queue_name} closed")
        except AMQPError as e:
            logger.error(f"Error closing consumer for {self.queue_name}: {str(e)}")


def create_message_handler(handler_func):
    """
    Wrap `handler_func(message: dict)` as a pika callback with manual acks.

    Malformed messages (bad JSON, or a ValueError raised by the handler) are
    dropped; database failures are requeued so the job is retried.
    """

    def callback(ch, method, properties, body):
        try:
            message = json.loads(body.decode("utf-8"))
            handler_func(message)
        except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as e:
            logger.error(f"Dropping invalid message from {method.routing_key}: {str(e)}")
            ch.basic_nack(delivery_tag=method.delivery_tag, requeue=False)
            return
        except DatabaseError as e:
            logger.error(f"Database error handling {method.routing_key}, requeueing: {str(e)}")
            ch.basic_nack(delivery_tag=method.delivery_tag, requeue=True)
            return

        ch.basic_ack(delivery_tag=method.delivery_tag)
        logger.debug(f"Acknowledged message {method.delivery_tag} from {method.routing_key}")

    return callback
