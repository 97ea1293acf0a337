"""Transport ports behind the notification channels.

Delivery providers (push gateway, SMTP relay, SMS gateway) live outside this
service; ``LoggingSender`` stands in for all three until one is wired up.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import Protocol, runtime_checkable

log = getLogger(__name__)


@runtime_checkable
class PushSender(Protocol):
    async def push(self, token: str, *, title: str, body: str) -> None: ...


@runtime_checkable
class MailSender(Protocol):
    async def mail(self, to: str, *, subject: str, text: str) -> None: ...


@runtime_checkable
class TextSender(Protocol):
    async def text(self, to: str, *, body: str) -> None: ...


@dataclass(slots=True)
class LoggingSender:
    """Records outgoing notifications and logs them instead of delivering."""

    sent: list[tuple[str, str, str]] = field(default_factory=list[tuple[str, str, str]])

    async def push(self, token: str, *, title: str, body: str) -> None:
        self._record("push", token, f"{title}: {body}")

    async def mail(self, to: str, *, subject: str, text: str) -> None:
        self._record("mail", to, f"{subject}: {text}")

    async def text(self, to: str, *, body: str) -> None:
        self._record("text", to, body)

    def _record(self, kind: str, recipient: str, content: str) -> None:
        self.sent.append((kind, recipient, content))
        log.info("Outgoing %s notification to %s: %s", kind, recipient, content)
