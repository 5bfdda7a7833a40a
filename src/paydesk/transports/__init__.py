"""Outbound mail transports behind the ITransport protocol."""

from __future__ import annotations

from paydesk.core.config import AppSettings
from paydesk.core.protocols import ITransport
from paydesk.transports.memory_transport import MemoryTransport
from paydesk.transports.ses_transport import SESTransport
from paydesk.transports.smtp_transport import SMTPTransport


def create_transport(settings: AppSettings | None = None) -> ITransport:
    """Create the transport selected by ``PAYDESK_MAIL_PROVIDER``."""
    if settings is None:
        settings = AppSettings()
    config = settings.transport

    if config.provider == "ses":
        return SESTransport(
            sender=config.sender_address,
            region=config.region,
            endpoint_url=config.endpoint_url,
        )
    if config.provider == "smtp":
        return SMTPTransport(
            config.smtp_host,
            config.smtp_port,
            username=config.smtp_username,
            password=config.smtp_password,
            sender=config.sender_address,
            sender_name=config.sender_name,
            use_tls=config.smtp_use_tls,
            timeout=config.timeout,
        )
    return MemoryTransport()
