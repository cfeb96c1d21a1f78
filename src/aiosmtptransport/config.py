"""
Transport configuration.
"""
import ssl
from dataclasses import dataclass, field
from typing import Optional


__all__ = ("DEFAULT_TIMEOUT", "SMTP_SUBMISSION_PORT", "TransportConfig")


SMTP_SUBMISSION_PORT = 587
DEFAULT_TIMEOUT = 60


@dataclass(frozen=True)
class TransportConfig:
    """
    Immutable connection and policy settings for :class:`.SMTPTransport`.

    :keyword host: Server name (or IP) to connect to. Defaults to "localhost".
    :keyword port: Server port. Defaults to ``587``.
    :keyword username: Username to authenticate as. Required.
    :keyword password: Password to authenticate with. Required.
    :keyword helo: Name to identify as in the EHLO/HELO greeting. If not
        given, the FQDN of the local host is used.
    :keyword allow_partial_success: If True, message data is sent even if some
        (but not all) recipients were rejected during RCPT.
    :keyword use_tls: If True, make the initial connection to the server over
        TLS/SSL. Mutually exclusive with ``start_tls``.
    :keyword start_tls: If True, upgrade the connection with STARTTLS after
        connecting. ``None`` (the default) means True unless ``use_tls`` is set.
        False leaves the session in plaintext.
    :keyword validate_certs: Determines if server certificates are validated.
    :keyword tls_context: An existing :py:class:`ssl.SSLContext`, for TLS.
        Mutually exclusive with ``client_cert``/``client_key``.
    :keyword client_cert: Path to client side certificate, for TLS.
    :keyword client_key: Path to client side key, for TLS.
    :keyword cert_bundle: Path to certificate bundle, for TLS verification.
    :keyword timeout: Timeout for each network operation, in seconds. Defaults
        to 60. ``None`` waits forever.

    :raises ValueError: invalid or mutually exclusive options provided
    """

    username: str
    password: str = field(repr=False)
    host: str = "localhost"
    port: int = SMTP_SUBMISSION_PORT
    helo: Optional[str] = None
    allow_partial_success: bool = False
    use_tls: bool = False
    start_tls: Optional[bool] = None
    validate_certs: bool = True
    tls_context: Optional[ssl.SSLContext] = field(default=None, compare=False)
    client_cert: Optional[str] = None
    client_key: Optional[str] = None
    cert_bundle: Optional[str] = None
    timeout: Optional[float] = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        if self.username is None or self.password is None:
            raise ValueError("Both username and password are required")

        if self.start_tls and self.use_tls:
            raise ValueError("The start_tls and use_tls options are not compatible.")

        if self.tls_context is not None and self.client_cert is not None:
            raise ValueError(
                "Either a TLS context or a certificate/key must be provided"
            )

        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port number: {self.port}")

        if "\r" in self.host or "\n" in self.host:
            raise ValueError("The host param contains prohibited newline characters")

        if self.helo is not None and ("\r" in self.helo or "\n" in self.helo):
            raise ValueError("The helo param contains prohibited newline characters")

    @property
    def upgrade_with_starttls(self) -> bool:
        """
        Whether the session should be upgraded with STARTTLS after connecting.
        """
        if self.start_tls is None:
            return not self.use_tls

        return self.start_tls
