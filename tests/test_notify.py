import logging

import pytest

from cdr_pipeline import notify
from cdr_pipeline.notify import LoggingNotifier, SmtpNotifier
from cdr_pipeline.reporting import Alert


class FakeSMTP:
    instances: list["FakeSMTP"] = []

    def __init__(self, host, port, timeout=None) -> None:
        self.host = host
        self.port = port
        self.started_tls = False
        self.logged_in = None
        self.sent = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def starttls(self) -> None:
        self.started_tls = True

    def login(self, username, password) -> None:
        self.logged_in = (username, password)

    def send_message(self, message) -> None:
        self.sent.append(message)


def test_logging_notifier_logs_at_error(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.ERROR, logger="cdr_pipeline.notify"):
        LoggingNotifier().notify(Alert(subject="High Invalid Phone Number Count: 12", body="details"))

    assert "ALERT: High Invalid Phone Number Count: 12" in caplog.text
    assert "details" in caplog.text


def test_smtp_notifier_sends_plain_text_message(monkeypatch: pytest.MonkeyPatch) -> None:
    FakeSMTP.instances = []
    monkeypatch.setattr(notify.smtplib, "SMTP", FakeSMTP)
    notifier = SmtpNotifier(
        "smtp.example.com",
        ["ops@example.com", "billing@example.com"],
        username="alerts@example.com",
        password="secret",
    )

    notifier.notify(Alert(subject="Test Alert", body="Found 12 invalid phone numbers"))

    client = FakeSMTP.instances[0]
    assert (client.host, client.port) == ("smtp.example.com", 587)
    assert client.started_tls
    assert client.logged_in == ("alerts@example.com", "secret")
    message = client.sent[0]
    assert message["Subject"] == "CDR System Alert: Test Alert"
    assert message["From"] == "alerts@example.com"
    assert message["To"] == "ops@example.com, billing@example.com"
    assert "Found 12 invalid phone numbers" in message.get_content()


def test_smtp_notifier_without_credentials_skips_login(monkeypatch: pytest.MonkeyPatch) -> None:
    FakeSMTP.instances = []
    monkeypatch.setattr(notify.smtplib, "SMTP", FakeSMTP)

    SmtpNotifier("mail.local", "ops@example.com", port=25, use_tls=False).notify(Alert("s", "b"))

    client = FakeSMTP.instances[0]
    assert client.port == 25
    assert not client.started_tls
    assert client.logged_in is None


def test_smtp_notifier_requires_recipients() -> None:
    with pytest.raises(ValueError):
        SmtpNotifier("mail.local", [])


@pytest.mark.parametrize("notifier_class", [LoggingNotifier, SmtpNotifier])
def test_notifiers_carry_no_unused_class_attributes(notifier_class) -> None:
    attributes = {name for name, value in vars(notifier_class).items() if not name.startswith("_") and not callable(value)}

    assert attributes == set()
