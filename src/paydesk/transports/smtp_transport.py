"""SMTP transport (e.g. Gmail with an app password) implementing ITransport."""

from __future__ import annotations

import smtplib
from email.message import EmailMessage
from email.utils import formataddr

from paydesk.core.exceptions import TransportError


class SMTPTransport:
    """ITransport that opens one SMTP session per message."""

    def __init__(self, host: str, port: int = 587, *, username: str = "", password: str = "",
                 sender: str, sender_name: str = "", use_tls: bool = True, timeout: int = 30) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._sender = sender
        self._sender_name = sender_name
        self._use_tls = use_tls
        self._timeout = timeout

    def _build(self, address: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = formataddr((self._sender_name, self._sender)) if self._sender_name else self._sender
        msg["To"] = address
        msg["Subject"] = subject
        msg.set_content(body, subtype="html")
        return msg

    def send(self, address: str, subject: str, body: str) -> None:
        msg = self._build(address, subject, body)
        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
                if self._use_tls:
                    smtp.starttls()
                if self._username:
                    smtp.login(self._username, self._password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise TransportError(f"SMTP send to {address!r} failed: {exc}") from exc
