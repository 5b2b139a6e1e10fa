"""Mail delivery for fired reminders."""

import asyncio
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Protocol

from ereminders.config.models import EmailConfig, SMTPConfig
from ereminders.errors import TransportError
from ereminders.jobs.types import Job

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MailMessage:
    """A fully-formed reminder email."""

    recipient: str
    sender: str
    subject: str
    body: str


class MailTransport(Protocol):
    """Sends a MailMessage, raising TransportError on failure."""

    async def send(self, message: MailMessage) -> None: ...


def build_message(job: Job, email: EmailConfig) -> MailMessage:
    """Derive the reminder email for a job."""
    return MailMessage(
        recipient=email.to,
        sender=email.sender,
        subject=f"{email.subject_prefix}{job.message}",
        body=job.message,
    )


def to_email_message(message: MailMessage) -> EmailMessage:
    msg = EmailMessage()
    msg["To"] = message.recipient
    msg["From"] = message.sender
    # Header values cannot contain line breaks
    msg["Subject"] = " ".join(message.subject.split())
    msg.set_content(message.body)
    return msg


class SMTPTransport:
    """Delivers reminders through an SMTP server.

    ``smtplib`` is blocking, so the send runs in a worker thread. The caller
    still awaits it to completion before doing anything else.
    """

    def __init__(self, config: SMTPConfig):
        self._config = config

    async def send(self, message: MailMessage) -> None:
        await asyncio.to_thread(self._send_sync, message)

    def _send_sync(self, message: MailMessage) -> None:
        config = self._config
        try:
            with smtplib.SMTP(config.host, config.port, timeout=config.timeout) as smtp:
                if config.starttls:
                    smtp.starttls()
                if config.username and config.password is not None:
                    smtp.login(config.username, config.password.get_secret_value())
                smtp.send_message(to_email_message(message))
        except (smtplib.SMTPRecipientsRefused, smtplib.SMTPSenderRefused) as e:
            raise TransportError(f"SMTP server refused message: {e}", retryable=False) from e
        except smtplib.SMTPAuthenticationError as e:
            raise TransportError(f"SMTP authentication failed: {e}", retryable=False) from e
        except (smtplib.SMTPException, OSError) as e:
            raise TransportError(
                f"Failed to send via {config.host}:{config.port}: {e}"
            ) from e

        logger.info(
            "mail_sent",
            extra={"mail.to": message.recipient, "smtp.host": config.host},
        )
