"""SMTP order confirmation sender."""

import logging
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr

import aiosmtplib

from refuel_store.domain.checkout import OrderSnapshot
from refuel_store.services.checkout import OrderNotifier
from refuel_store.services.notifications import render_order_confirmation

_logger = logging.getLogger(__name__)


@dataclass
class SmtpOrderNotifier(OrderNotifier):
    """Order notifier that sends mail through an SMTP relay with STARTTLS."""

    hostname: str
    port: int
    username: str
    password: str
    sender_name: str
    storefront_url: str
    timeout: float = 10.0

    async def send_order_confirmation(
        self, order_reference: str, recipient_email: str, snapshot: OrderSnapshot
    ) -> None:
        """Send the confirmation email for an order."""
        content = render_order_confirmation(
            order_reference, snapshot, self.storefront_url
        )
        message = EmailMessage()
        message["From"] = formataddr((self.sender_name, self.username))
        message["To"] = recipient_email
        message["Subject"] = content.subject
        message.set_content(content.text)
        message.add_alternative(content.html, subtype="html")
        await aiosmtplib.send(
            message,
            hostname=self.hostname,
            port=self.port,
            username=self.username,
            password=self.password,
            start_tls=True,
            timeout=self.timeout,
        )
        _logger.info(
            "Confirmation email sent: order=%s recipient=%s",
            order_reference,
            recipient_email,
        )
