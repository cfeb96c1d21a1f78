"""
aiosmtptransport
================

Deliver email over an authenticated, encrypted SMTP session, reporting
full success, partial success or failure per recipient.

Built on the aiosmtplib asyncio SMTP client.
"""

from .api import deliver, deliver_sync
from .config import TransportConfig
from .email import Envelope, quote_address, render_message
from .errors import (
    AllRecipientsRejected,
    ConnectionFailed,
    DeliveryError,
    NoValidRecipients,
    RecipientsRejected,
    SenderRejected,
    SomeRecipientsRejected,
)
from .response import (
    DeliveryResult,
    Failure,
    PartialSuccess,
    RecipientOutcome,
    Success,
)
from .session import SMTPSession
from .transport import SMTPTransport
from .typing import FailureReason


__title__ = "aiosmtptransport"
__version__ = "1.0.0"
__license__ = "MIT"
__all__ = (
    "deliver",
    "deliver_sync",
    "SMTPTransport",
    "SMTPSession",
    "TransportConfig",
    "Envelope",
    "quote_address",
    "render_message",
    "DeliveryResult",
    "Success",
    "PartialSuccess",
    "Failure",
    "FailureReason",
    "RecipientOutcome",
    "DeliveryError",
    "ConnectionFailed",
    "NoValidRecipients",
    "SenderRejected",
    "RecipientsRejected",
    "AllRecipientsRejected",
    "SomeRecipientsRejected",
)
