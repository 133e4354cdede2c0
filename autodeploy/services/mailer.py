"""Yet another mail services"""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Sequence

from starlette.concurrency import run_in_threadpool

from autodeploy.config import Settings
from autodeploy.services.ansible import DeploymentOutcome
from autodeploy.templating import render

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 15
SUBJECT_PREFIX = "[automated deployment]"


def _normalize_newlines(s: str) -> str:
    return (s or "").replace("\r\n", "\n").replace("\r", "\n")


def _one_line(s: str) -> str:
    # Header values may not carry CR/LF.
    return " ".join(_normalize_newlines(s).split("\n")).strip()


def _decode_output(data: bytes | None) -> str:
    if not data:
        return ""
    return _normalize_newlines(data.decode("utf-8", errors="replace")).strip()


@dataclass(frozen=True)
class NotificationMessage:
    recipients: tuple[str, ...]
    subject: str
    body: str


def build_skip_message(recipients: Sequence[str], repository: str) -> NotificationMessage:
    """Closed-but-not-merged pull request: nothing was deployed."""
    return NotificationMessage(
        recipients=tuple(recipients),
        subject=_one_line(f"{SUBJECT_PREFIX} {repository}: not merged, no deployment attempted"),
        body=render("skipped.txt", repository=repository),
    )


def build_deployment_message(
    recipients: Sequence[str], repository: str, outcome: DeploymentOutcome
) -> NotificationMessage:
    status = outcome.status.value
    return NotificationMessage(
        recipients=tuple(recipients),
        subject=_one_line(f"{SUBJECT_PREFIX} {outcome.target}: {status}"),
        body=render(
            "deployment.txt",
            repository=repository,
            target=outcome.target,
            status=status,
            returncode=outcome.returncode,
            error_detail=outcome.error_detail or "",
            stdout=_decode_output(outcome.stdout),
            stderr=_decode_output(outcome.stderr),
        ),
    )


class Mailer:
    """
    Send notifications through the local mail relay.

    Delivery is best-effort: build and transport errors are logged, never raised.
    """

    def __init__(self, settings: Settings) -> None:
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.sender = settings.mail_from

    def _to_email(self, message: NotificationMessage) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = ", ".join(message.recipients)
        msg["Subject"] = message.subject
        msg.set_content(_normalize_newlines(message.body))
        return msg

    def send(self, message: NotificationMessage) -> bool:
        """
        Send one email to every recipient.

        Returns
        -------
        bool
            True if the relay accepted the message, False otherwise.
        """
        if not message.recipients:
            logger.warning("No notification recipients configured; dropping %r", message.subject)
            return False
        try:
            msg = self._to_email(message)
        except ValueError:
            logger.exception("Unable to build notification %r", message.subject)
            return False
        try:
            with smtplib.SMTP(self.host, self.port, timeout=SMTP_TIMEOUT_SECONDS) as smtp:
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError):
            logger.exception("Unable to send notification %r", message.subject)
            return False
        logger.info("Notification %r sent to %s", message.subject, ", ".join(message.recipients))
        return True

    async def deliver(self, message: NotificationMessage) -> bool:
        return await run_in_threadpool(self.send, message)
