"""
Main public API.
"""
import asyncio
from collections.abc import Sequence
from typing import Any, Optional, Union

from .config import TransportConfig
from .email import Envelope
from .response import PartialSuccess, Success
from .transport import SMTPTransport


__all__ = ("deliver", "deliver_sync")


async def deliver(
    message: Any,
    envelope: Optional[Envelope] = None,
    /,
    *,
    sender: Optional[str] = None,
    recipients: Optional[Union[str, Sequence[Optional[str]]]] = None,
    **kwargs: Any,
) -> Union[Success, PartialSuccess]:
    """
    Deliver an email message. On await, connects to the SMTP server using the
    details provided, authenticates, sends the message, then disconnects.

    :param message: Message to send. ``bytes``, ``str``, an
        :py:class:`email.message.Message` object, or any object with an
        ``as_bytes()`` method.
    :param envelope: The :class:`.Envelope` to deliver to. Alternatively, pass
        ``sender`` and ``recipients``.
    :keyword sender: Envelope sender (MAIL FROM) address.
    :keyword recipients: Envelope recipient (RCPT TO) addresses.

    All other keyword arguments are passed to :class:`.TransportConfig`
    (``host``, ``port``, ``username``, ``password``, ``helo``,
    ``allow_partial_success``, TLS options and ``timeout``).

    :raises ValueError: required arguments missing or mutually exclusive options
        provided
    :raises DeliveryError: the delivery attempt was aborted
    """
    if envelope is None:
        if sender is None or recipients is None:
            raise ValueError("Either an envelope or sender and recipients are required")
        envelope = Envelope(sender, recipients)
    elif sender is not None or recipients is not None:
        raise ValueError("Provide an envelope or sender and recipients, not both")

    transport = SMTPTransport(TransportConfig(**kwargs))
    return await transport.deliver(message, envelope)


def deliver_sync(*args: Any, **kwargs: Any) -> Union[Success, PartialSuccess]:
    """
    Synchronous version of :func:`deliver`. This starts an event loop to
    connect, send the message, and disconnect.
    """
    return asyncio.run(deliver(*args, **kwargs))
