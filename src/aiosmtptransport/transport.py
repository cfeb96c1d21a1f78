"""
Delivery orchestrator.

Drives one SMTP dialogue per delivery attempt:

    connect -> MAIL FROM -> RCPT TO (each recipient) -> DATA -> QUIT

Recipient rejections are recorded individually. Whether DATA is sent at all
is decided from those records and the ``allow_partial_success`` policy.
"""
import asyncio
import contextlib
import logging
from typing import Any, Optional, Union

from aiosmtplib import SMTPException, SMTPResponseException

from .config import TransportConfig
from .email import Envelope, quote_address, render_message
from .errors import (
    AllRecipientsRejected,
    ConnectionFailed,
    DeliveryError,
    NoValidRecipients,
    SenderRejected,
    SomeRecipientsRejected,
)
from .response import DeliveryResult, PartialSuccess, RecipientOutcome, Success
from .session import Session, SessionFactory, SMTPSession


__all__ = ("SMTPTransport",)


logger = logging.getLogger(__name__)


class SMTPTransport:
    """
    Sends messages over an authenticated, encrypted SMTP session.

    Basic usage:

        >>> config = TransportConfig(
        ...     host="smtp.example.com", username="me", password="secret"
        ... )
        >>> transport = SMTPTransport(config)
        >>> envelope = Envelope("me@example.com", ["you@example.com"])
        >>> asyncio.run(transport.deliver(message, envelope))
        Success(message='2.0.0 Ok: queued as 4F2A1')

    The transport holds no per-attempt state, so one instance may run any
    number of concurrent deliveries; each opens its own connection.
    """

    def __init__(
        self,
        config: TransportConfig,
        /,
        *,
        session_factory: SessionFactory = SMTPSession,
    ) -> None:
        self.config = config
        self.session_factory = session_factory

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}"
            f"(host={self.config.host!r}, port={self.config.port!r})"
        )

    async def deliver(
        self, message: Any, envelope: Envelope, /
    ) -> Union[Success, PartialSuccess]:
        """
        Deliver a message to the envelope recipients.

        Returns :class:`.Success` if every recipient was accepted, or
        :class:`.PartialSuccess` if some were rejected but
        ``allow_partial_success`` is set and the message was sent to the rest.

        :raises NoValidRecipients: the envelope has no usable recipients
        :raises ConnectionFailed: connection, TLS or authentication failed
        :raises SenderRejected: the server refused MAIL FROM
        :raises AllRecipientsRejected: the server refused every recipient
        :raises SomeRecipientsRejected: the server refused some recipients,
            and partial success is not allowed
        :raises TypeError: the message cannot be rendered to bytes
        """
        recipients = envelope.valid_recipients()
        if not recipients:
            raise NoValidRecipients("no valid addresses in recipient list")

        message_bytes = render_message(message)

        async with contextlib.AsyncExitStack() as stack:
            try:
                session = await stack.enter_async_context(
                    self.session_factory(self.config)
                )
            except (SMTPException, OSError) as exc:
                raise ConnectionFailed(_describe(exc)) from exc

            await self._send_sender(session, envelope.sender)
            outcomes = [
                await self._send_recipient(session, address) for address in recipients
            ]

            rejected = [outcome for outcome in outcomes if not outcome.accepted]
            accepted_count = len(outcomes) - len(rejected)

            if rejected and accepted_count == 0:
                raise AllRecipientsRejected(rejected)
            elif rejected and not self.config.allow_partial_success:
                raise SomeRecipientsRejected(rejected)

            reply = await self._transmit(session, message_bytes)

        if rejected:
            logger.info(
                "Message sent to %d of %d recipients", accepted_count, len(outcomes)
            )
            return PartialSuccess(reply, tuple(rejected))

        logger.info("Message sent to %d recipients", len(outcomes))
        return Success(reply)

    async def attempt(self, message: Any, envelope: Envelope, /) -> DeliveryResult:
        """
        Like :meth:`deliver`, but fatal failures are returned as a
        :class:`.Failure` value instead of raised.
        """
        try:
            return await self.deliver(message, envelope)
        except DeliveryError as exc:
            return exc.result

    def deliver_sync(
        self, message: Any, envelope: Envelope, /
    ) -> Union[Success, PartialSuccess]:
        """
        Synchronous version of :meth:`deliver`. This method starts an event
        loop to connect, send the message, and disconnect.
        """
        return asyncio.run(self.deliver(message, envelope))

    async def _send_sender(self, session: Session, sender: str) -> None:
        try:
            await session.mail_from(quote_address(sender))
        except SMTPResponseException as exc:
            raise SenderRejected(sender, exc.code, exc.message) from exc
        except SMTPException as exc:
            raise SenderRejected(sender, None, exc.message) from exc

        logger.debug("Sender %s accepted", sender)

    async def _send_recipient(self, session: Session, address: str) -> RecipientOutcome:
        try:
            await session.rcpt_to(quote_address(address))
        except SMTPResponseException as exc:
            logger.warning("Recipient %s rejected: %s %s", address, exc.code, exc.message)
            return RecipientOutcome(address, False, exc.message, exc.code)
        except SMTPException as exc:
            logger.warning("Recipient %s rejected: %s", address, exc.message)
            return RecipientOutcome(address, False, exc.message)

        return RecipientOutcome(address, True)

    async def _transmit(self, session: Session, message: bytes) -> Optional[str]:
        """
        Send the message data and say goodbye.

        The outcome was already decided by the RCPT replies, so errors here
        are ignored; the reply text is ``None`` if it was never received.
        """
        reply = None
        try:
            response = await session.send_data(message)
            reply = response.message
            await session.quit()
        except Exception:
            logger.debug("Ignoring error after DATA was committed", exc_info=True)

        return reply


def _describe(exc: BaseException) -> str:
    if isinstance(exc, SMTPResponseException):
        return f"{exc.code} {exc.message}"
    elif isinstance(exc, SMTPException) and exc.message:
        return exc.message

    return str(exc) or "unable to establish SMTP connection"
