"""
Notification Service - customer emails for order events
"""
import logging
import smtplib
from email.message import EmailMessage
from typing import Dict, Optional

from marketplace.config import settings

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for sending order notifications"""
    
    def __init__(self):
        self.email_service = settings.EMAIL_SERVICE
    
    def send_order_created_notification(self, order_data: Dict) -> bool:
        """
        Send notification for OrderCreated event
        
        Args:
            order_data: Order data from event
        
        Returns:
            True if the notification was sent or there was nobody to send it to
        """
        order_number = order_data.get("order_number")
        lines = "\n".join(
            f"  {item.get('name')} x {item.get('quantity')} @ {item.get('price', 0):.2f}"
            for item in order_data.get("items", [])
        )
        
        subject = f"Order Confirmation #{order_number}"
        body = f"""
Hi!

Your order has been placed successfully:

Order: {order_number}
Items:
{lines}
Total: {order_data.get('total', 0):.2f} {settings.CURRENCY}

Thank you for shopping with MarketPlace!
"""
        return self._send(order_data.get("customer_email"), subject, body)
    
    def send_order_status_changed_notification(self, order_data: Dict) -> bool:
        """Send notification for OrderStatusChanged event"""
        order_number = order_data.get("order_number")
        
        subject = f"Order #{order_number} Status Updated"
        body = f"""
Hi!

Your order status has been updated:

Order: {order_number}
Previous Status: {order_data.get('old_status')}
New Status: {order_data.get('new_status')}
"""
        return self._send(order_data.get("customer_email"), subject, body)
    
    def send_order_cancelled_notification(self, order_data: Dict) -> bool:
        """Send notification for OrderCancelled event"""
        order_number = order_data.get("order_number")
        
        subject = f"Order #{order_number} Cancelled"
        body = f"""
Hi!

Your order {order_number} has been cancelled.

Reason: {order_data.get('reason')}
"""
        return self._send(order_data.get("customer_email"), subject, body)
    
    def _send(self, to: Optional[str], subject: str, body: str) -> bool:
        if not to:
            logger.info("No recipient for notification, skipping: %s", subject)
            return True
        
        if self.email_service == "console":
            return self._send_console_notification(to, subject, body)
        elif self.email_service == "smtp":
            return self._send_smtp_notification(to, subject, body)
        elif self.email_service == "disabled":
            return True
        else:
            logger.error("Unknown email service: %s", self.email_service)
            return False
    
    def _send_console_notification(self, to: str, subject: str, body: str) -> bool:
        """Write the email to the log instead of sending it"""
        logger.info(
            "Email notification (console mode)",
            extra={'extra_fields': {'to': to, 'subject': subject, 'body': body}}
        )
        return True
    
    def _send_smtp_notification(self, to: str, subject: str, body: str) -> bool:
        """Send email via SMTP"""
        message = EmailMessage()
        message["From"] = settings.EMAIL_FROM
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        
        try:
            with smtplib.SMTP(settings.EMAIL_HOST, settings.EMAIL_PORT, timeout=10) as server:
                if settings.EMAIL_USER:
                    server.starttls()
                    server.login(settings.EMAIL_USER, settings.EMAIL_PASSWORD)
                server.send_message(message)
        except (smtplib.SMTPException, OSError):
            logger.warning("Failed to send email to %s", to, exc_info=True)
            return False
        
        logger.info("Email sent", extra={'extra_fields': {'to': to, 'subject': subject}})
        return True
