from collections.abc import Sequence
from typing import Optional

from .response import Failure, RecipientOutcome
from .typing import FailureReason


__all__ = (
    "AllRecipientsRejected",
    "ConnectionFailed",
    "DeliveryError",
    "NoValidRecipients",
    "RecipientsRejected",
    "SenderRejected",
    "SomeRecipientsRejected",
)


class DeliveryError(Exception):
    """
    Base class for all delivery failures.

    Every delivery error is fatal for the attempt that raised it: no message
    data was transmitted.
    """

    reason: FailureReason

    def __init__(self, message: str, /) -> None:
        self.message = message
        self.rejected_recipients: tuple[RecipientOutcome, ...] = ()
        self.args = (message,)

    @property
    def result(self) -> Failure:
        """
        The non-raising form of this error.
        """
        return Failure(self.reason, self.message, self.rejected_recipients)


class ConnectionFailed(DeliveryError, ConnectionError):
    """
    Connecting, negotiating TLS or authenticating with the server failed.
    """

    reason = FailureReason.connection_failed


class NoValidRecipients(DeliveryError):
    """
    The envelope had no usable recipient addresses. No connection was made.
    """

    reason = FailureReason.no_valid_recipients


class SenderRejected(DeliveryError):
    """
    The server refused the envelope sender at MAIL FROM.
    """

    reason = FailureReason.sender_rejected

    def __init__(
        self, sender: str, code: Optional[int], server_message: str, /
    ) -> None:
        detail = server_message if code is None else f"{code} {server_message}"
        super().__init__(f"{sender} failed after MAIL FROM: {detail}")
        self.sender = sender
        self.code = code
        self.server_message = server_message
        self.args = (sender, code, server_message)


class RecipientsRejected(DeliveryError):
    """
    Base class for aborts caused by RCPT rejections.

    ``rejected_recipients`` holds every rejected outcome, in submission order.
    When exactly one recipient was rejected it is also available as
    ``primary`` and its detail is used as the error message.
    """

    scope = "some"

    def __init__(self, rejected_recipients: Sequence[RecipientOutcome], /) -> None:
        rejected = tuple(rejected_recipients)
        if len(rejected) == 1:
            message = f"recipient rejected during RCPT: {rejected[0]}"
        else:
            message = f"{self.scope} recipients were rejected during RCPT"

        super().__init__(message)
        self.rejected_recipients = rejected
        self.args = (rejected,)

    @property
    def primary(self) -> Optional[RecipientOutcome]:
        if len(self.rejected_recipients) == 1:
            return self.rejected_recipients[0]

        return None


class AllRecipientsRejected(RecipientsRejected):
    """
    The server refused every recipient.
    """

    reason = FailureReason.all_recipients_rejected
    scope = "all"


class SomeRecipientsRejected(RecipientsRejected):
    """
    The server refused some recipients and partial success is not allowed.
    """

    reason = FailureReason.some_recipients_rejected
    scope = "some"
