"""
RabbitMQ Event Publisher
"""
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict

import pika

from marketplace.config import settings
from marketplace.schemas.order import OrderEvent

logger = logging.getLogger(__name__)

ORDER_CREATED = ("OrderCreated", "order.created")
ORDER_STATUS_CHANGED = ("OrderStatusChanged", "order.status.changed")
ORDER_CANCELLED = ("OrderCancelled", "order.cancelled")


class EventPublisher:
    """Publisher for sending order events to RabbitMQ"""
    
    def __init__(self):
        self.rabbitmq_url = settings.RABBITMQ_URL
        self.exchange = settings.RABBITMQ_EXCHANGE
        self.enabled = settings.EVENTS_ENABLED
        self.connect_timeout = settings.RABBITMQ_CONNECT_TIMEOUT
        # Set after a failed connect; later events of the same request are dropped
        self.broker_unavailable = False
    
    def _connect(self) -> pika.BlockingConnection:
        """Open a connection with a single, time-bounded attempt"""
        parameters = pika.URLParameters(self.rabbitmq_url)
        parameters.connection_attempts = 1
        parameters.socket_timeout = self.connect_timeout
        parameters.stack_timeout = self.connect_timeout
        parameters.blocked_connection_timeout = self.connect_timeout
        return pika.BlockingConnection(parameters)
    
    def build_event(self, event_type: str, data: Dict) -> Dict:
        """Wrap event data in the standard envelope"""
        return OrderEvent(
            event_type=event_type,
            event_id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc).isoformat(),
            source=settings.SERVICE_NAME,
            data=data
        ).model_dump()
    
    def publish(self, event_type: str, routing_key: str, data: Dict) -> bool:
        """
        Publish an event to the orders exchange
        
        Publishing is fire-and-forget: failures are logged and reported
        through the return value, never raised. One connection attempt is
        made; once it fails, this publisher drops its remaining events.
        
        Args:
            event_type: Event name, e.g. OrderCreated
            routing_key: Topic routing key
            data: Event payload
        
        Returns:
            True if published successfully, False otherwise
        """
        if not self.enabled:
            logger.debug("Event publishing disabled, dropping %s", event_type)
            return False
        if self.broker_unavailable:
            logger.debug("Broker unreachable earlier, dropping %s", event_type)
            return False
        
        event = self.build_event(event_type, data)
        try:
            connection = self._connect()
        except pika.exceptions.AMQPConnectionError:
            self.broker_unavailable = True
            logger.warning("RabbitMQ unreachable, dropping %s event", event_type, exc_info=True)
            return False
        except Exception:
            logger.warning("Failed to connect for %s event", event_type, exc_info=True)
            return False
        
        try:
            try:
                channel = connection.channel()
                
                channel.exchange_declare(
                    exchange=self.exchange,
                    exchange_type='topic',
                    durable=True
                )
                
                # Enable publisher confirms
                channel.confirm_delivery()
                
                channel.basic_publish(
                    exchange=self.exchange,
                    routing_key=routing_key,
                    body=json.dumps(event),
                    properties=pika.BasicProperties(
                        delivery_mode=2,  # Persistent message
                        content_type='application/json',
                        correlation_id=event["event_id"]
                    )
                )
            finally:
                connection.close()
        except Exception:
            logger.warning("Failed to publish %s event", event_type, exc_info=True)
            return False
        
        logger.info(
            "Event published: %s", event_type,
            extra={'extra_fields': {'event_id': event["event_id"], 'routing_key': routing_key}}
        )
        return True
    
    def publish_order_created(self, order_data: Dict) -> bool:
        return self.publish(*ORDER_CREATED, order_data)
    
    def publish_order_status_changed(self, order_data: Dict) -> bool:
        return self.publish(*ORDER_STATUS_CHANGED, order_data)
    
    def publish_order_cancelled(self, order_data: Dict) -> bool:
        return self.publish(*ORDER_CANCELLED, order_data)
