"""Mail Delivery — turns EmailContent into MIME messages and hands them to a transport.

Invariants:
    - Delivery methods: "smtp" (real server), "log" (write to the log), "memory"
      (append to `deliveries`, for tests and local runs)
    - SMTP failures raise MailDeliveryError; nothing is retried here
    - deliver() is blocking; async callers run it in a thread

Design Decisions:
    - stdlib email/smtplib: one message per recipient, no bulk relay API needed
    - get_mailer() is cached like get_settings(): one transport config per process
"""

import logging
import smtplib
from email.message import EmailMessage
from email.utils import formatdate, make_msgid
from functools import lru_cache

from epetitions.config import get_settings
from epetitions.core.errors import MailDeliveryError
from epetitions.core.format_emails import EmailContent

logger = logging.getLogger(__name__)

DELIVERY_METHODS = ("smtp", "log", "memory")

# Messages delivered with the "memory" method, oldest first.
deliveries: list[EmailMessage] = []


def build_message(content: EmailContent) -> EmailMessage:
    message = EmailMessage()
    message["From"] = content.sender
    message["To"] = content.recipient
    message["Subject"] = content.subject
    message["Date"] = formatdate(localtime=False)
    message["Message-ID"] = make_msgid()
    message.set_content(content.body)
    return message


class Mailer:
    """Sends EmailContent using the configured delivery method."""

    def __init__(
        self,
        delivery_method: str = "log",
        smtp_host: str = "localhost",
        smtp_port: int = 25,
        smtp_username: str | None = None,
        smtp_password: str | None = None,
        smtp_use_tls: bool = False,
    ):
        if delivery_method not in DELIVERY_METHODS:
            raise ValueError(
                f"Unknown mail delivery method '{delivery_method}' "
                f"(expected one of {', '.join(DELIVERY_METHODS)})"
            )
        self.delivery_method = delivery_method
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_username = smtp_username
        self.smtp_password = smtp_password
        self.smtp_use_tls = smtp_use_tls

    def deliver(self, content: EmailContent) -> EmailMessage:
        message = build_message(content)
        if self.delivery_method == "memory":
            deliveries.append(message)
        elif self.delivery_method == "log":
            logger.info(
                f"Mail to {content.recipient}: {content.subject}",
                extra={"recipients": content.recipient},
            )
        else:
            self._send_smtp(message)
        return message

    def _send_smtp(self, message: EmailMessage) -> None:
        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=30) as server:
                if self.smtp_use_tls:
                    server.starttls()
                if self.smtp_username and self.smtp_password:
                    server.login(self.smtp_username, self.smtp_password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP delivery to {message['To']} failed: {e}")
            raise MailDeliveryError(str(e))


@lru_cache
def get_mailer() -> Mailer:
    settings = get_settings()
    return Mailer(
        delivery_method=settings.mail_delivery_method,
        smtp_host=settings.smtp_host,
        smtp_port=settings.smtp_port,
        smtp_username=settings.smtp_username,
        smtp_password=settings.smtp_password,
        smtp_use_tls=settings.smtp_use_tls,
    )
