"""
Pytest fixtures and config.
"""

import email.message
import email.mime.multipart
import email.mime.text
import sys
from collections.abc import Callable, Generator
from typing import Any

import hypothesis
import pytest
from aiosmtpd.controller import Controller as SMTPDController
from aiosmtpd.smtp import AuthResult, LoginPassword

from aiosmtptransport import Envelope, TransportConfig

from .mocks import ScriptedServer
from .smtpd import RecordingHandler


IS_PYPY = hasattr(sys, "pypy_version_info")

# pypy can take a while to generate data, so don't fail the test due to health checks.
if IS_PYPY:
    base_settings = hypothesis.settings(
        suppress_health_check=(hypothesis.HealthCheck.too_slow,)
    )
else:
    base_settings = hypothesis.settings()
hypothesis.settings.register_profile("dev", parent=base_settings, max_examples=10)
hypothesis.settings.register_profile("ci", parent=base_settings, max_examples=100)


def pytest_addoption(parser: Any) -> None:
    parser.addoption(
        "--bind-addr",
        action="store",
        default="127.0.0.1",
        help="address to bind on for network tests",
    )


# Session scoped static values #


@pytest.fixture(scope="session")
def bind_address(request: pytest.FixtureRequest) -> str:
    """Server side address for socket binding"""
    return str(request.config.getoption("--bind-addr"))


@pytest.fixture(scope="session")
def hostname(bind_address: str) -> str:
    return bind_address


@pytest.fixture(scope="session")
def recipient_str() -> str:
    return "recipient@example.com"


@pytest.fixture(scope="session")
def sender_str() -> str:
    return "sender@example.com"


@pytest.fixture(scope="session")
def message_str(recipient_str: str, sender_str: str) -> str:
    return (
        "Content-Type: multipart/mixed; "
        'boundary="===============6842273139637972052=="\n'
        "MIME-Version: 1.0\n"
        f"To: {recipient_str}\n"
        f"From: {sender_str}\n"
        "Subject: A message\n\n"
        "--===============6842273139637972052==\n"
        'Content-Type: text/plain; charset="us-ascii"\n'
        "MIME-Version: 1.0\n"
        "Content-Transfer-Encoding: 7bit\n\n"
        "Hello World\n"
        "--===============6842273139637972052==--\n"
    )


@pytest.fixture(scope="session")
def message_bytes(message_str: str) -> bytes:
    return message_str.encode("ascii")


@pytest.fixture(scope="session")
def auth_username() -> str:
    return "test"


@pytest.fixture(scope="session")
def auth_password() -> str:
    return "test"


# Messages #


@pytest.fixture(scope="function")
def mime_message(
    recipient_str: str, sender_str: str
) -> email.mime.multipart.MIMEMultipart:
    message = email.mime.multipart.MIMEMultipart()
    message["To"] = recipient_str
    message["From"] = sender_str
    message["Subject"] = "A message"
    message.attach(email.mime.text.MIMEText("Hello World"))

    return message


@pytest.fixture(scope="function")
def envelope(sender_str: str, recipient_str: str) -> Envelope:
    return Envelope(sender_str, [recipient_str])


# Scripted sessions #


@pytest.fixture(scope="function")
def scripted_server(request: pytest.FixtureRequest) -> ScriptedServer:
    """
    A fake server; configure with ``@pytest.mark.script(...)``.
    """
    script_marker = request.node.get_closest_marker("script")
    script = {} if script_marker is None else script_marker.kwargs

    return ScriptedServer(**script)


@pytest.fixture(scope="function")
def transport_config(auth_username: str, auth_password: str) -> TransportConfig:
    return TransportConfig(
        host="smtp.example.com", username=auth_username, password=auth_password
    )


# Servers #


@pytest.fixture(scope="function")
def received_messages() -> list[email.message.EmailMessage]:
    return []


@pytest.fixture(scope="function")
def received_commands() -> list[tuple[str, tuple[Any, ...]]]:
    return []


@pytest.fixture(scope="function")
def smtpd_handler(
    request: pytest.FixtureRequest,
    received_messages: list[email.message.EmailMessage],
    received_commands: list[tuple[str, tuple[Any, ...]]],
) -> RecordingHandler:
    """
    Handler for the test server; ``@pytest.mark.smtpd_rejects(address=reply)``
    makes RCPT fail for the given addresses.
    """
    rejects_marker = request.node.get_closest_marker("smtpd_rejects")
    rejects = {} if rejects_marker is None else rejects_marker.kwargs.get("rcpt", {})
    sender_reply = None if rejects_marker is None else rejects_marker.kwargs.get("mail")

    return RecordingHandler(
        received_messages,
        received_commands,
        rejected_recipients=rejects,
        sender_reply=sender_reply,
    )


@pytest.fixture(scope="session")
def smtpd_authenticator(
    auth_username: str, auth_password: str
) -> Callable[..., AuthResult]:
    def authenticator(
        server: Any, session: Any, envelope: Any, mechanism: str, auth_data: Any
    ) -> AuthResult:
        success = bool(
            isinstance(auth_data, LoginPassword)
            and auth_data.login.decode("utf-8") == auth_username
            and auth_data.password.decode("utf-8") == auth_password
        )
        return AuthResult(success=success, handled=False)

    return authenticator


@pytest.fixture(scope="function")
def smtpd_controller(
    request: pytest.FixtureRequest,
    bind_address: str,
    unused_tcp_port: int,
    smtpd_handler: RecordingHandler,
    smtpd_authenticator: Callable[..., AuthResult],
) -> Generator[SMTPDController, None, None]:
    smtpd_options_marker = request.node.get_closest_marker("smtpd_options")
    if smtpd_options_marker is None:
        smtpd_options = {}
    else:
        smtpd_options = smtpd_options_marker.kwargs

    controller = SMTPDController(
        smtpd_handler,
        hostname=bind_address,
        port=unused_tcp_port,
        authenticator=smtpd_authenticator,
        auth_require_tls=smtpd_options.get("auth_require_tls", False),
    )
    controller.start()

    yield controller

    controller.stop()


@pytest.fixture(scope="function")
def smtpd_server_port(smtpd_controller: SMTPDController) -> int:
    port: int = smtpd_controller.port
    return port


@pytest.fixture(scope="function")
def smtpd_config(
    hostname: str, smtpd_server_port: int, auth_username: str, auth_password: str
) -> TransportConfig:
    """
    Config for the plaintext test server; TLS is disabled.
    """
    return TransportConfig(
        host=hostname,
        port=smtpd_server_port,
        username=auth_username,
        password=auth_password,
        helo="client.example.org",
        start_tls=False,
        timeout=1.0,
    )
