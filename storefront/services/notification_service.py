# storefront/services/notification_service.py
import logging
import smtplib

from storefront.core.email_client import send_email, smtp_configured
from storefront.models.order import Order, OrderItem

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Order emails to customers.

    Sending is best effort: an unconfigured or failing SMTP server is
    logged and never fails the request that triggered it.
    """

    def __init__(self, sender=send_email):
        self.sender = sender

    def _deliver(self, to_email: str, subject: str, text_body: str) -> bool:
        if self.sender is send_email and not smtp_configured():
            logger.debug("SMTP not configured, skipping email to %s", to_email)
            return False
        try:
            self.sender(to_email=to_email, subject=subject, text_body=text_body)
        except (smtplib.SMTPException, OSError, RuntimeError) as exc:
            logger.error("Email service error: %s", exc)
            return False
        return True

    def order_confirmation(
        self,
        to_email: str,
        order: Order,
        items: list[OrderItem],
    ) -> bool:
        lines = [
            f"  {it.quantity} x {it.product_name} @ {it.unit_price:.2f}"
            for it in items
        ]
        body = "\n".join(
            [
                f"Thank you for your order {order.id}.",
                "",
                *lines,
                "",
                f"Items:    {order.items_price:.2f}",
                f"Tax:      {order.tax_price:.2f}",
                f"Shipping: {order.shipping_price:.2f}",
                f"Total:    {order.total_price:.2f}",
            ]
        )
        return self._deliver(to_email, f"Order {order.id} received", body)

    def order_status_update(self, to_email: str, order: Order) -> bool:
        body = f"Your order {order.id} is now {order.status}."
        return self._deliver(to_email, f"Order {order.id}: {order.status}", body)
