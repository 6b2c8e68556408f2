"""
Notifier component.

Sends an HTML alert email for each payment failure through an authenticated
SMTP relay (Gmail by default).
"""

import asyncio
import html
import smtplib
import ssl
from email.message import EmailMessage
from typing import Optional, Tuple

from payment_monitor.config import Settings
from payment_monitor.models.payment import UNKNOWN, FailureRecord
from payment_monitor.services.errors import NotifierError
from payment_monitor.utils.logging import get_logger
from payment_monitor.utils.metrics import track_api_call

logger = get_logger(__name__, service="smtp")

ALERT_SUBJECT = "🚨 Stripe Payment Failed Alert"


def render_alert(record: FailureRecord) -> Tuple[str, str]:
    """
    Build the subject and HTML body of an alert.
    
    Args:
        record: Normalized failure record
        
    Returns:
        Tuple of (subject, html body)
    """
    fields = [
        ("Payment ID", record.id or UNKNOWN),
        ("Customer", record.email or UNKNOWN),
        ("Amount", record.amount_money),
        ("Reason", record.failure_reason or UNKNOWN),
        ("Date", record.observed_at.strftime("%Y-%m-%d %H:%M:%S %Z")),
    ]
    lines = ["<h2>Payment Failure Alert</h2>"]
    lines.extend(
        f"<p><strong>{label}:</strong> {html.escape(str(value))}</p>"
        for label, value in fields
    )
    return ALERT_SUBJECT, "\n".join(lines)


class EmailNotifier:
    """Emails failure alerts through an SMTP relay."""
    
    def __init__(
        self,
        username: str,
        password: str,
        recipient: Optional[str] = None,
        host: str = "smtp.gmail.com",
        port: int = 465,
        starttls: bool = False,
        timeout: float = 10.0
    ):
        """
        Initialize the notifier.
        
        Args:
            username: SMTP account, also used as sender
            password: SMTP password or app password
            recipient: Alert recipient; defaults to the sender
            host: SMTP host
            port: SMTP port (465 for implicit TLS)
            starttls: Use plain SMTP upgraded with STARTTLS instead of SMTPS
            timeout: Socket timeout in seconds
        """
        self._username = username
        self._password = password
        self._recipient = recipient or username
        self._host = host
        self._port = port
        self._starttls = starttls
        self._timeout = timeout
    
    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailNotifier":
        return cls(
            username=settings.gmail_email,
            password=settings.gmail_password,
            recipient=settings.alert_recipient,
            host=settings.smtp_host,
            port=settings.smtp_port,
            starttls=settings.smtp_starttls,
            timeout=settings.smtp_timeout,
        )
    
    def build_message(self, record: FailureRecord) -> EmailMessage:
        subject, body = render_alert(record)
        message = EmailMessage()
        message["From"] = self._username
        message["To"] = self._recipient
        message["Subject"] = subject
        message.set_content("A Stripe payment failed. View this message as HTML for details.")
        message.add_alternative(body, subtype="html")
        return message
    
    def _send(self, message: EmailMessage) -> None:
        context = ssl.create_default_context()
        if self._starttls:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
                smtp.starttls(context=context)
                smtp.login(self._username, self._password)
                smtp.send_message(message)
        else:
            with smtplib.SMTP_SSL(self._host, self._port, timeout=self._timeout, context=context) as smtp:
                smtp.login(self._username, self._password)
                smtp.send_message(message)
    
    async def notify(self, record: FailureRecord) -> EmailMessage:
        """
        Send the alert email for a failure.
        
        Args:
            record: Normalized failure record
            
        Returns:
            The message that was sent
            
        Raises:
            NotifierError: On connection, authentication or send errors
        """
        message = self.build_message(record)
        
        try:
            async with track_api_call(logger, "smtp", f"{self._host}:{self._port}", "SEND"):
                await asyncio.to_thread(self._send, message)
        except (smtplib.SMTPException, OSError) as e:
            message_text = str(e) or type(e).__name__
            logger.error(f"Error sending Gmail: {message_text}", extra={"payment_id": record.id})
            raise NotifierError(message_text) from e
        
        logger.info(f"Gmail alert sent for payment: {record.id}", extra={"payment_id": record.id})
        return message
