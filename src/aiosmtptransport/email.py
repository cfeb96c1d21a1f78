"""
Envelope, address quoting and message rendering functions.
"""

import copy
import email.generator
import email.message
import email.policy
import io
import re
from collections.abc import Sequence
from typing import Any, NamedTuple, Optional, Union


__all__ = (
    "Envelope",
    "flatten_message",
    "quote_address",
    "render_message",
)


UNSAFE_LOCALPART_REGEX = re.compile(r"[^A-Za-z0-9_.+-]")
ESCAPES_REGEX = re.compile(r'[\\"]')


class Envelope(NamedTuple):
    """
    SMTP envelope: the MAIL FROM address and the RCPT TO addresses.

    These are independent of the ``From``/``To`` headers of the message.
    A bare string given as ``recipients`` is treated as a single address.
    """

    sender: str
    recipients: Union[str, Sequence[Optional[str]]]

    def valid_recipients(self) -> list[str]:
        """
        Recipient addresses with blank and ``None`` entries dropped, in order.
        """
        if isinstance(self.recipients, str):
            recipients: Sequence[Optional[str]] = [self.recipients]
        else:
            recipients = self.recipients

        return [address for address in recipients if address]


def quote_address(address: str) -> str:
    """
    Quote the local part of an address for use in MAIL FROM or RCPT TO.

    The local part is wrapped in double quotes if it contains anything other
    than letters, digits, ``_``, ``.``, ``+`` and ``-``, or if it starts with
    a dot. If there are several ``@`` characters, the last one separates the
    local part from the domain.

        >>> quote_address("a.b@example.com")
        'a.b@example.com'
        >>> quote_address("a b@example.com")
        '"a b"@example.com'

    Backslashes and double quotes inside a quoted local part are escaped.
    Addresses without an ``@``, or with nothing after the last one, are
    returned unchanged.
    """
    localpart, at, domain = address.rpartition("@")
    if not at or not domain:
        return address

    if UNSAFE_LOCALPART_REGEX.search(localpart) or localpart.startswith("."):
        escaped = ESCAPES_REGEX.sub(r"\\\g<0>", localpart)
        return f'"{escaped}"@{domain}'

    return address


def flatten_message(
    message: Union[email.message.EmailMessage, email.message.Message],
    /,
) -> bytes:
    """
    Serialize a message object to wire format bytes, without Bcc headers.
    """
    # Make a local copy so we can delete the bcc headers.
    message_copy = copy.copy(message)
    del message_copy["Bcc"]
    del message_copy["Resent-Bcc"]

    if isinstance(message_copy, email.message.EmailMessage):
        policy = email.policy.SMTP
    else:
        # Old message class, Compat32 policy. Compat32 cannot use UTF8
        policy = email.policy.compat32

    with io.BytesIO() as messageio:
        generator = email.generator.BytesGenerator(messageio, policy=policy)
        generator.flatten(message_copy)
        flat_message = messageio.getvalue()

    return flat_message


def render_message(message: Any, /) -> bytes:
    """
    Render a message to the bytes sent after DATA.

    Accepts ``bytes``, ``str`` (encoded as UTF-8), :py:class:`email.message.Message`
    objects, or any object with an ``as_bytes()`` method.

    :raises TypeError: the message cannot be rendered
    """
    if isinstance(message, (bytes, bytearray, memoryview)):
        return bytes(message)
    elif isinstance(message, str):
        return message.encode("utf-8")
    elif isinstance(message, email.message.Message):
        return flatten_message(message)

    as_bytes = getattr(message, "as_bytes", None)
    if not callable(as_bytes):
        raise TypeError(
            f"Cannot render message of type {type(message).__name__!r} to bytes"
        )

    rendered = as_bytes()
    if not isinstance(rendered, bytes):
        raise TypeError(
            f"{type(message).__name__}.as_bytes() returned "
            f"{type(rendered).__name__!r}, not bytes"
        )

    return rendered
