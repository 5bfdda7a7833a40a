"""Amazon SES transport implementing ITransport."""

from __future__ import annotations

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from paydesk.core.exceptions import TransportError


class SESTransport:
    """Production ITransport backed by SES ``SendEmail``."""

    def __init__(self, sender: str, region: str = "ap-northeast-2",
                 endpoint_url: str | None = None) -> None:
        self._sender = sender
        self._region = region
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("ses", **kwargs)

    def send(self, address: str, subject: str, body: str) -> None:
        try:
            self._client.send_email(
                Source=self._sender,
                Destination={"ToAddresses": [address]},
                Message={
                    "Subject": {"Data": subject, "Charset": "UTF-8"},
                    "Body": {"Html": {"Data": body, "Charset": "UTF-8"}},
                },
            )
        except (ClientError, BotoCoreError) as exc:
            raise TransportError(f"SES send to {address!r} failed: {exc}") from exc
