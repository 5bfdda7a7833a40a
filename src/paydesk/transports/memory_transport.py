"""In-memory transport for local development and testing.

Records messages instead of sending them. No network calls.
"""

from __future__ import annotations

import threading

from pydantic import BaseModel

from paydesk.core.exceptions import TransportError


class SentMessage(BaseModel):
    address: str
    subject: str
    body: str


class MemoryTransport:
    """ITransport implementation that keeps every delivered message."""

    def __init__(self) -> None:
        self.sent: list[SentMessage] = []
        self._failures: dict[str, str] = {}
        self._lock = threading.Lock()

    def fail_for(self, address: str, message: str = "Mailbox unavailable") -> None:
        """Make every send to ``address`` raise TransportError."""
        self._failures[address] = message

    def send(self, address: str, subject: str, body: str) -> None:
        if address in self._failures:
            raise TransportError(self._failures[address])
        with self._lock:
            self.sent.append(SentMessage(address=address, subject=subject, body=body))
