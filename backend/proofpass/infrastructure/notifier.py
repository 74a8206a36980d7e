"""Sign-in Code Notifiers — deliver one-time codes by email (SES) or to the log.

Invariants:
    - send() returns only after the provider accepted the message
    - Provider failures surface as CollaboratorError("email"); never retried here
    - LogNotifier is for local development: it writes the code to the log

Design Decisions:
    - boto3 is synchronous: SES calls run in a worker thread under the caller's deadline
    - Client created once per notifier; boto3 clients are thread-safe
"""

import asyncio
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from proofpass.core.errors import CollaboratorError
from proofpass.infrastructure.deadlines import deadline

logger = logging.getLogger(__name__)

SIGNIN_SUBJECT = "Proof Pass Login Code"


def render_signin_email(code: str) -> tuple[str, str]:
    """(html, text) bodies for a sign-in code."""
    return (
        f"<h1>Your login code is: {code}</h1>",
        f"Your login code is: {code}",
    )


class SesNotifier:
    """Sends sign-in codes through Amazon SES."""

    COLLABORATOR = "email"

    def __init__(self, sender: str, region: str, client=None):
        self._sender = sender
        self._client = client or boto3.client("ses", region_name=region)

    async def send(self, email: str, code: str, timeout: float | None = None) -> None:
        html_body, text_body = render_signin_email(code)
        message = {
            "Source": self._sender,
            "Destination": {"ToAddresses": [email]},
            "Message": {
                "Subject": {"Charset": "UTF-8", "Data": SIGNIN_SUBJECT},
                "Body": {
                    "Html": {"Charset": "UTF-8", "Data": html_body},
                    "Text": {"Charset": "UTF-8", "Data": text_body},
                },
            },
        }
        async with deadline(self.COLLABORATOR, timeout):
            try:
                result = await asyncio.to_thread(self._client.send_email, **message)
            except (BotoCoreError, ClientError) as e:
                logger.error(
                    f"SES send_email failed: {e}",
                    extra={"collaborator": self.COLLABORATOR, "email": email},
                )
                raise CollaboratorError(self.COLLABORATOR, "send_email failed") from e
        logger.info(
            f"Sign-in email sent, message id {result.get('MessageId')}",
            extra={"email": email},
        )


class LogNotifier:
    """Writes sign-in codes to the log instead of sending them."""

    async def send(self, email: str, code: str, timeout: float | None = None) -> None:
        logger.warning(
            f"Login email sending is disabled, code is {code}",
            extra={"email": email},
        )
