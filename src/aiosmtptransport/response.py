"""
Delivery result types: per recipient outcomes and the overall result variants.
"""
from typing import NamedTuple, Optional, Union

from .typing import FailureReason


__all__ = (
    "DeliveryResult",
    "Failure",
    "PartialSuccess",
    "RecipientOutcome",
    "Success",
)


class RecipientOutcome(NamedTuple):
    """
    NamedTuple recording how the server answered RCPT for one address.

        >>> outcome = RecipientOutcome("nobody@example.com", False, "User unknown", 550)
        >>> outcome.accepted
        False
        >>> str(outcome)
        'nobody@example.com: 550 User unknown'

    """

    address: str
    accepted: bool
    server_message: Optional[str] = None
    server_code: Optional[int] = None

    def __str__(self) -> str:
        if self.accepted:
            return f"{self.address}: accepted"

        detail = " ".join(
            str(part)
            for part in (self.server_code, self.server_message)
            if part is not None
        )
        return f"{self.address}: {detail or 'rejected'}"


class Success(NamedTuple):
    """
    Every recipient was accepted and the message was transmitted.

    ``message`` is the server's reply to the end of DATA (often containing a
    queue id), or ``None`` if it could not be read.
    """

    message: Optional[str]


class PartialSuccess(NamedTuple):
    """
    The message was transmitted to the accepted subset of recipients.

    Only returned by transports configured with ``allow_partial_success``.
    This is not an error; check for it explicitly.
    """

    message: Optional[str]
    rejected_recipients: tuple[RecipientOutcome, ...]


class Failure(NamedTuple):
    """
    The delivery attempt was aborted. Nothing was transmitted.
    """

    reason: FailureReason
    message: str
    rejected_recipients: tuple[RecipientOutcome, ...] = ()


DeliveryResult = Union[Success, PartialSuccess, Failure]
