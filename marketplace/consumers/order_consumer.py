"""
RabbitMQ Consumer for order events
"""
import json
import logging
import sys

import pika
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from marketplace.config import settings
from marketplace.logging_config import setup_logging
from marketplace.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

ROUTING_KEYS = ("order.created", "order.status.changed", "order.cancelled")

HANDLERS = {
    "OrderCreated": NotificationService.send_order_created_notification,
    "OrderStatusChanged": NotificationService.send_order_status_changed_notification,
    "OrderCancelled": NotificationService.send_order_cancelled_notification,
}


def callback(ch, method, properties, body):
    """
    Deliver one order event to the matching notification
    
    Acks when the notification was handled; malformed JSON, unknown event
    types and handler failures are nacked without requeue.
    """
    try:
        event = json.loads(body)
    except json.JSONDecodeError:
        logger.error("Invalid JSON in order event, rejecting", exc_info=True)
        ch.basic_nack(delivery_tag=method.delivery_tag, requeue=False)
        return
    
    event_id = event.get("event_id")
    event_type = event.get("event_type")
    logger.info("Received event: %s (ID: %s)", event_type, event_id)
    
    handler = HANDLERS.get(event_type)
    if handler is None:
        logger.warning("Unknown event type: %s", event_type)
        success = False
    else:
        try:
            success = handler(NotificationService(), event.get("data", {}))
        except Exception:
            logger.exception("Error processing event %s", event_id)
            success = False
    
    if success:
        ch.basic_ack(delivery_tag=method.delivery_tag)
        logger.info("Event %s processed successfully", event_id)
    else:
        # Reject and don't requeue
        ch.basic_nack(delivery_tag=method.delivery_tag, requeue=False)
        logger.warning("Event %s processing failed", event_id)


@retry(
    stop=stop_after_attempt(settings.MAX_RETRIES),
    wait=wait_exponential(multiplier=settings.RETRY_DELAY, min=1, max=10),
    retry=retry_if_exception_type(pika.exceptions.AMQPConnectionError),
    reraise=True
)
def connect() -> pika.BlockingConnection:
    """Connect to RabbitMQ, retrying while the broker is still starting"""
    return pika.BlockingConnection(pika.URLParameters(settings.RABBITMQ_URL))


def declare_topology(channel) -> None:
    """Declare the orders exchange and the notification queue bound to every order event"""
    channel.exchange_declare(exchange=settings.RABBITMQ_EXCHANGE, exchange_type='topic', durable=True)
    channel.queue_declare(queue=settings.RABBITMQ_QUEUE, durable=True)
    for routing_key in ROUTING_KEYS:
        channel.queue_bind(
            exchange=settings.RABBITMQ_EXCHANGE,
            queue=settings.RABBITMQ_QUEUE,
            routing_key=routing_key
        )
    logger.info(
        "Queue %s bound to %s", settings.RABBITMQ_QUEUE, settings.RABBITMQ_EXCHANGE,
        extra={'extra_fields': {'routing_keys': list(ROUTING_KEYS)}}
    )


def start_consumer():
    """
    Consume order events until interrupted
    
    Messages are acknowledged manually, five in flight at a time.
    """
    setup_logging(f"{settings.SERVICE_NAME}-consumer", settings.LOG_LEVEL)
    logger.info("Connecting to RabbitMQ: %s", settings.RABBITMQ_URL)
    
    connection = None
    try:
        connection = connect()
        channel = connection.channel()
        declare_topology(channel)
        channel.basic_qos(prefetch_count=5)
        channel.basic_consume(queue=settings.RABBITMQ_QUEUE, on_message_callback=callback, auto_ack=False)
        
        logger.info("%s consumer started", settings.SERVICE_NAME)
        channel.start_consuming()
    except KeyboardInterrupt:
        logger.info("Consumer stopped by user")
        if connection is not None and connection.is_open:
            connection.close()
        sys.exit(0)
    except pika.exceptions.AMQPError:
        logger.exception("RabbitMQ consumer failed")
        sys.exit(1)
