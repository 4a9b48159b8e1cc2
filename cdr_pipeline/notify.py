"""Alert sinks used by the orchestrator when a batch raises an alert."""
from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional, Protocol, Sequence, Union

from .reporting import Alert

LOGGER = logging.getLogger(__name__)

SUBJECT_PREFIX = "CDR System Alert: "


class Notifier(Protocol):
    """Interface for anything that can deliver an :class:`Alert`."""

    def notify(self, alert: Alert) -> None:  # pragma: no cover - runtime protocol
        """Deliver the alert."""


class LoggingNotifier:
    """Writes alerts to the log at ERROR level."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or LOGGER

    def notify(self, alert: Alert) -> None:
        self._logger.error("ALERT: %s\n%s", alert.subject, alert.body)


class SmtpNotifier:
    """Sends alerts as plain-text email."""

    def __init__(
        self,
        host: str,
        to_addrs: Union[str, Sequence[str]],
        *,
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        from_addr: Optional[str] = None,
        use_tls: bool = True,
        timeout: float = 30.0,
    ) -> None:
        if not host:
            raise ValueError("SmtpNotifier requires an SMTP host")
        recipients = [to_addrs] if isinstance(to_addrs, str) else list(to_addrs)
        if not recipients:
            raise ValueError("SmtpNotifier requires at least one recipient")
        self._host = host
        self._port = int(port)
        self._username = username
        self._password = password
        self._from_addr = from_addr or username or f"cdr-pipeline@{host}"
        self._to_addrs = recipients
        self._use_tls = use_tls
        self._timeout = timeout

    def build_message(self, alert: Alert) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = f"{SUBJECT_PREFIX}{alert.subject}"
        message["From"] = self._from_addr
        message["To"] = ", ".join(self._to_addrs)
        message.set_content(alert.body)
        return message

    def notify(self, alert: Alert) -> None:
        message = self.build_message(alert)
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as client:
            if self._use_tls:
                client.starttls()
            if self._username and self._password:
                client.login(self._username, self._password)
            client.send_message(message)
        LOGGER.info("Alert email sent to %s", ", ".join(self._to_addrs))


__all__ = ["LoggingNotifier", "Notifier", "SmtpNotifier"]
