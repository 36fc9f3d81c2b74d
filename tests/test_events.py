"""Tests for event publishing, the notification consumer and email rendering."""

import json
from unittest.mock import MagicMock

import pika
import pytest

from marketplace.config import settings
from marketplace.consumers import order_consumer
from marketplace.publishers.event_publisher import EventPublisher
from marketplace.services.notification_service import NotificationService

ORDER_DATA = {
    "order_id": 1,
    "order_number": "ORD-1-ABCDEF",
    "customer_email": "jane.doe@shopmail.com",
    "total": 49.19,
    "items": [{"product_id": 1, "name": "Product A", "quantity": 2, "price": 20.0}]
}


class TestEventPublisher:
    def test_disabled_publisher_drops_events(self):
        publisher = EventPublisher()
        publisher.enabled = False
        assert publisher.publish_order_created(ORDER_DATA) is False

    def test_envelope(self):
        event = EventPublisher().build_event("OrderCreated", ORDER_DATA)
        assert event["event_type"] == "OrderCreated"
        assert event["event_version"] == "1.0"
        assert event["source"] == "marketplace-service"
        assert event["data"] == ORDER_DATA
        assert event["event_id"]

    def test_publishes_persistent_message(self, monkeypatch):
        connection = MagicMock()
        channel = connection.channel.return_value
        monkeypatch.setattr(pika, "BlockingConnection", MagicMock(return_value=connection))

        publisher = EventPublisher()
        publisher.enabled = True
        assert publisher.publish_order_cancelled(ORDER_DATA) is True

        kwargs = channel.basic_publish.call_args.kwargs
        assert kwargs["routing_key"] == "order.cancelled"
        assert kwargs["properties"].delivery_mode == 2
        assert json.loads(kwargs["body"])["event_type"] == "OrderCancelled"
        connection.close.assert_called_once()

    def test_broker_failure_is_reported_not_raised(self, monkeypatch):
        connection = MagicMock()
        connection.channel.side_effect = pika.exceptions.AMQPChannelError("boom")
        monkeypatch.setattr(pika, "BlockingConnection", MagicMock(return_value=connection))

        publisher = EventPublisher()
        publisher.enabled = True
        assert publisher.publish_order_status_changed(ORDER_DATA) is False


    def test_single_bounded_connection_attempt(self, monkeypatch):
        blocking_connection = MagicMock()
        monkeypatch.setattr(pika, "BlockingConnection", blocking_connection)

        EventPublisher()._connect()

        parameters = blocking_connection.call_args.args[0]
        assert parameters.connection_attempts == 1
        assert parameters.socket_timeout == settings.RABBITMQ_CONNECT_TIMEOUT
        assert parameters.stack_timeout == settings.RABBITMQ_CONNECT_TIMEOUT

    def test_unreachable_broker_is_tried_once(self, monkeypatch):
        blocking_connection = MagicMock(side_effect=pika.exceptions.AMQPConnectionError("refused"))
        monkeypatch.setattr(pika, "BlockingConnection", blocking_connection)

        publisher = EventPublisher()
        publisher.enabled = True
        assert publisher.publish_order_created(ORDER_DATA) is False
        assert publisher.publish_order_created(ORDER_DATA) is False
        assert publisher.publish_order_cancelled(ORDER_DATA) is False

        assert blocking_connection.call_count == 1
        assert publisher.broker_unavailable is True


class TestNotificationService:
    def test_console_delivery(self):
        service = NotificationService()
        service.email_service = "console"
        assert service.send_order_created_notification(ORDER_DATA) is True

    def test_missing_recipient_is_skipped(self):
        service = NotificationService()
        service.email_service = "smtp"
        data = dict(ORDER_DATA, customer_email=None)
        assert service.send_order_cancelled_notification(data) is True

    def test_unknown_transport(self):
        service = NotificationService()
        service.email_service = "pigeon"
        assert service.send_order_status_changed_notification(ORDER_DATA) is False


def delivery(event):
    channel = MagicMock()
    method = MagicMock(delivery_tag=7)
    body = event if isinstance(event, bytes) else json.dumps(event).encode()
    order_consumer.callback(channel, method, None, body)
    return channel


class TestConsumerCallback:
    @pytest.mark.parametrize("event_type", ["OrderCreated", "OrderStatusChanged", "OrderCancelled"])
    def test_known_events_are_acked(self, event_type):
        channel = delivery({"event_type": event_type, "event_id": "e1", "data": ORDER_DATA})
        channel.basic_ack.assert_called_once_with(delivery_tag=7)
        channel.basic_nack.assert_not_called()

    def test_unknown_event_is_rejected(self):
        channel = delivery({"event_type": "Mystery", "event_id": "e2", "data": {}})
        channel.basic_nack.assert_called_once_with(delivery_tag=7, requeue=False)

    def test_malformed_body_is_rejected(self):
        channel = delivery(b"{not json")
        channel.basic_nack.assert_called_once_with(delivery_tag=7, requeue=False)
        channel.basic_ack.assert_not_called()


def test_notification_queue_is_bound_to_every_order_event():
    channel = MagicMock()
    order_consumer.declare_topology(channel)
    bound = [call.kwargs["routing_key"] for call in channel.queue_bind.call_args_list]
    assert bound == ["order.created", "order.status.changed", "order.cancelled"]
