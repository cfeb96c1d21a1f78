import enum


__all__ = ("FailureReason",)


@enum.unique
class FailureReason(enum.Enum):
    """
    Why a delivery attempt was aborted before (or instead of) sending DATA.
    """

    connection_failed = "ConnectionFailed"
    no_valid_recipients = "NoValidRecipients"
    sender_rejected = "SenderRejected"
    all_recipients_rejected = "AllRecipientsRejected"
    some_recipients_rejected = "SomeRecipientsRejected"
