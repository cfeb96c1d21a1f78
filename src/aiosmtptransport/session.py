"""
SMTP session adapter.

Wraps an :class:`aiosmtplib.SMTP` client so that one session is one
connected, authenticated dialogue, scoped to a single delivery attempt.
"""
import logging
from types import TracebackType
from typing import Optional, Protocol

import aiosmtplib

from .config import TransportConfig


__all__ = ("SMTPSession", "Session", "SessionFactory")


logger = logging.getLogger(__name__)


class Session(Protocol):
    """
    The verbs a delivery attempt needs from an SMTP session.

    Each command returns the server reply on success and raises
    :exc:`aiosmtplib.SMTPException` (usually an
    :exc:`aiosmtplib.SMTPResponseException` carrying the reply code) on failure.
    """

    async def __aenter__(self) -> "Session": ...

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None: ...

    async def mail_from(self, address: str, /) -> aiosmtplib.SMTPResponse: ...

    async def rcpt_to(self, address: str, /) -> aiosmtplib.SMTPResponse: ...

    async def send_data(self, message: bytes, /) -> aiosmtplib.SMTPResponse: ...

    async def quit(self) -> aiosmtplib.SMTPResponse: ...


class SessionFactory(Protocol):
    def __call__(self, config: TransportConfig, /) -> Session: ...


class SMTPSession:
    """
    One connection to the server configured by a :class:`.TransportConfig`.

    Use as an async context manager: entering connects, negotiates TLS and
    authenticates; leaving closes the connection if it is still open (i.e.
    :meth:`quit` was not reached).
    """

    def __init__(self, config: TransportConfig, /) -> None:
        self.config = config
        self.client = aiosmtplib.SMTP(
            hostname=config.host,
            port=config.port,
            username=config.username,
            password=config.password,
            local_hostname=config.helo,
            timeout=config.timeout,
            use_tls=config.use_tls,
            start_tls=config.upgrade_with_starttls,
            validate_certs=config.validate_certs,
            tls_context=config.tls_context,
            client_cert=config.client_cert,
            client_key=config.client_key,
            cert_bundle=config.cert_bundle,
        )

    async def __aenter__(self) -> "SMTPSession":
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()

    @property
    def is_connected(self) -> bool:
        return self.client.is_connected

    async def open(self) -> None:
        """
        Connect, say EHLO, upgrade to TLS if configured, and log in.

        :raises aiosmtplib.SMTPException: on any connection, TLS or auth error
        :raises OSError: if the socket could not be opened
        """
        logger.debug(
            "Connecting to %s:%s as %s", self.config.host, self.config.port,
            self.config.username,
        )
        try:
            await self.client.connect()
        except BaseException:
            self.close()
            raise

    async def mail_from(self, address: str, /) -> aiosmtplib.SMTPResponse:
        return await self.client.mail(address)

    async def rcpt_to(self, address: str, /) -> aiosmtplib.SMTPResponse:
        return await self.client.rcpt(address)

    async def send_data(self, message: bytes, /) -> aiosmtplib.SMTPResponse:
        """
        Send DATA, the message itself and the end of data marker.

        Returns the server's reply to the end of data.
        """
        return await self.client.data(message)

    async def quit(self) -> aiosmtplib.SMTPResponse:
        return await self.client.quit()

    def close(self) -> None:
        """
        Drop the connection without QUIT, if one is open.
        """
        if self.client.is_connected:
            logger.debug("Closing connection to %s", self.config.host)
            self.client.close()
