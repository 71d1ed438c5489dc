import smtplib
import unittest
import uuid
from types import SimpleNamespace
from unittest import mock

import helpers  # noqa: F401

from storefront.core import email_client
from storefront.models.order import Order, OrderItem
from storefront.services.notification_service import NotificationService


def smtp_settings(**overrides):
    values = dict(
        SMTP_HOST="smtp.example.com",
        SMTP_PORT=587,
        SMTP_USERNAME="shop@example.com",
        SMTP_PASSWORD="pw",
        SMTP_FROM_EMAIL=None,
        SMTP_FROM_NAME="Storefront",
        SMTP_USE_TLS=True,
        SMTP_USE_SSL=False,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def make_order():
    order = Order(
        user_id=uuid.uuid4(),
        address="1 Main St",
        city="Springfield",
        postal_code="12345",
        country="US",
        payment_method="card",
        items_price=15.45,
        tax_rate=0.1,
        tax_price=1.55,
        shipping_price=0.0,
        total_price=17.0,
    )
    items = [
        OrderItem(
            order_id=order.id,
            product_id=uuid.uuid4(),
            product_name="Croissant",
            quantity=2,
            unit_price=3.99,
        )
    ]
    return order, items


class SendEmailTestCase(unittest.TestCase):
    def test_starttls_login_and_send(self):
        with mock.patch.object(email_client, "get_settings", return_value=smtp_settings()), \
                mock.patch.object(email_client.smtplib, "SMTP") as smtp_cls:
            smtp_cls.return_value.__enter__.return_value = smtp_cls.return_value
            email_client.send_email("a@example.com", "Hi", "plain", html_body="<b>hi</b>")

        server = smtp_cls.return_value
        smtp_cls.assert_called_once_with("smtp.example.com", 587, timeout=30)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("shop@example.com", "pw")
        msg = server.send_message.call_args[0][0]
        self.assertEqual(msg["To"], "a@example.com")
        self.assertEqual(msg["From"], "Storefront <shop@example.com>")
        self.assertTrue(msg.is_multipart())
        server.__exit__.assert_called_once()

    def test_ssl_connection(self):
        settings = smtp_settings(SMTP_PORT=465, SMTP_USE_SSL=True)
        with mock.patch.object(email_client, "get_settings", return_value=settings), \
                mock.patch.object(email_client.smtplib, "SMTP_SSL") as ssl_cls:
            email_client.send_email("a@example.com", "Hi", "plain")
        ssl_cls.assert_called_once_with("smtp.example.com", 465, timeout=30)

    def test_not_configured(self):
        settings = smtp_settings(SMTP_HOST=None)
        with mock.patch.object(email_client, "get_settings", return_value=settings):
            self.assertFalse(email_client.smtp_configured())
            with self.assertRaises(RuntimeError):
                email_client.send_email("a@example.com", "Hi", "plain")


class NotificationServiceTestCase(unittest.TestCase):
    def test_confirmation_lists_items_and_totals(self):
        sent = []
        service = NotificationService(sender=lambda **kw: sent.append(kw))
        order, items = make_order()

        self.assertTrue(service.order_confirmation("b@example.com", order, items))
        body = sent[0]["text_body"]
        self.assertIn("2 x Croissant @ 3.99", body)
        self.assertIn("Total:    17.00", body)

    def test_send_failure_is_logged_not_raised(self):
        def broken(**kwargs):
            raise smtplib.SMTPException("mailbox unavailable")

        service = NotificationService(sender=broken)
        order, _ = make_order()
        with self.assertLogs("storefront.services.notification_service", level="ERROR"):
            self.assertFalse(service.order_status_update("b@example.com", order))

    def test_skipped_when_smtp_is_not_configured(self):
        service = NotificationService()
        order, items = make_order()
        with mock.patch(
            "storefront.services.notification_service.smtp_configured", return_value=False
        ):
            self.assertFalse(service.order_confirmation("b@example.com", order, items))


if __name__ == "__main__":
    unittest.main()
