"""
Outbound customer notifications.

The account service only talks to the Notifier protocol. OutboxNotifier is the
development transport: messages land as text files instead of mail.
"""

import logging
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Message:
    """A message to one customer; body may carry an access token or link."""

    kind: str  # "welcome", "recovery"
    subject: str
    body: str


@dataclass(frozen=True)
class NotifyResult:
    """Delivery outcome. Failures are reported here, never raised."""

    ok: bool
    location: Optional[str] = None
    error: Optional[str] = None


class Notifier(Protocol):
    async def notify(self, address: str, message: Message) -> NotifyResult:
        ...


def welcome_message(token: str) -> Message:
    return Message(
        kind="welcome",
        subject="Welcome",
        body=f"Welcome! Your access token: Token: {token}",
    )


def recovery_message(link: str) -> Message:
    return Message(
        kind="recovery",
        subject="Recovery link",
        body=f"Use this link to recover your token: {link}",
    )


class OutboxNotifier:
    """
    File based mailer for local development.

    Each message becomes a text file in the outbox directory; the recipient
    and file path are logged.
    """

    def __init__(self, outbox_dir: Union[str, Path] = "outbox"):
        self.outbox_dir = Path(outbox_dir)

    def _filename(self, message: Message) -> str:
        return f"{message.kind}-{int(time.time() * 1000)}-{secrets.token_hex(3)}.txt"

    async def notify(self, address: str, message: Message) -> NotifyResult:
        content = f"To: {address}\nSubject: {message.subject}\n\n{message.body}"
        try:
            self.outbox_dir.mkdir(parents=True, exist_ok=True)
            path = self.outbox_dir / self._filename(message)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            return NotifyResult(ok=False, error=str(e))

        # Body carries secrets; only the envelope goes to the log
        logger.info(f"Outbox: {message.kind} message for {address} written to {path}")
        return NotifyResult(ok=True, location=str(path))
