"""
End-to-end delivery against an in-process SMTP server.

The server is aiosmtpd with STARTTLS required and a throwaway self-signed
certificate. The proxy factory hands out a plain TCP socket, so the real
aiosmtplib client runs over an already-connected socket exactly as it does
behind the SOCKS5 tunnel.
"""

import datetime
import socket
import ssl

import pytest
from aiosmtpd.controller import Controller
from aiosmtpd.smtp import AuthResult, LoginPassword
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from mini_mailer.core import assemble_message
from mini_mailer.smtp import SMTPTransport, Stage, StatusStream, TransportSettings

USERNAME = "alice"
PASSWORD = "hunter2"


def write_self_signed_cert(directory):
    """Write a localhost certificate and key; returns their paths."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "localhost")])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=1))
        .sign(key, hashes.SHA256())
    )

    cert_path = directory / "cert.pem"
    key_path = directory / "key.pem"
    cert_path.write_bytes(cert.public_bytes(serialization.Encoding.PEM))
    key_path.write_bytes(
        key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )
    )
    return cert_path, key_path


def free_port():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class RecordingHandler:
    """Accepts every message and keeps what arrived."""

    def __init__(self):
        self.received = []

    async def handle_DATA(self, server, session, envelope):
        self.received.append({
            "mail_from": envelope.mail_from,
            "rcpt_tos": list(envelope.rcpt_tos),
            "content": envelope.content,
            "authenticated": session.authenticated,
        })
        return "250 Message accepted for delivery"


def authenticate(server, session, envelope, mechanism, auth_data):
    ok = (
        isinstance(auth_data, LoginPassword)
        and auth_data.login == USERNAME.encode()
        and auth_data.password == PASSWORD.encode()
    )
    return AuthResult(success=ok, handled=False)


@pytest.fixture
def smtp_server(temp_dir):
    """Run a STARTTLS-only SMTP server on a free local port."""
    cert_path, key_path = write_self_signed_cert(temp_dir)
    tls_context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    tls_context.load_cert_chain(cert_path, key_path)

    handler = RecordingHandler()
    controller = Controller(
        handler,
        hostname="127.0.0.1",
        port=free_port(),
        tls_context=tls_context,
        require_starttls=True,
        authenticator=authenticate,
        auth_require_tls=True,
    )
    controller.start()
    yield controller, handler
    controller.stop()


def plain_socket(settings):
    sock = socket.socket()
    sock.settimeout(settings.timeout)
    return sock


def local_settings(controller, **overrides):
    options = {
        "host": "127.0.0.1",
        "port": controller.port,
        "socks_port": 9050,
        "local_hostname": "localhost",
        "timeout": 10.0,
    }
    options.update(overrides)
    return TransportSettings(**options)


async def deliver(settings, raw):
    message = assemble_message(raw)
    stream = StatusStream()
    transport = SMTPTransport(settings, proxy_factory=plain_socket)
    result = await transport.deliver(message, stream)
    return message, result, stream


async def test_delivers_over_starttls(smtp_server):
    controller, handler = smtp_server
    raw = "From: a@x.com\nTo: b@y.com\nSubject: hi\n\n.hidden line\nbody"

    message, result, stream = await deliver(local_settings(controller), raw)

    assert result.success, result.status_text
    assert [u.stage for u in stream.history] == [
        Stage.PROXY_CONNECT, Stage.TCP_DIAL, Stage.SMTP_HANDSHAKE,
        Stage.START_TLS, Stage.MAIL_FROM, Stage.RCPT_TO,
        Stage.DATA, Stage.WRITE, Stage.QUIT, Stage.DONE,
    ]

    [received] = handler.received
    assert received["mail_from"] == "a@x.com"
    assert received["rcpt_tos"] == ["b@y.com"]
    assert received["content"].startswith(b"From: a@x.com\r\n")
    assert f"Message-ID: {message.message_id}\r\n".encode() in received["content"]
    assert b"\r\n\r\n.hidden line\r\nbody" in received["content"]


async def test_authenticated_delivery(smtp_server):
    controller, handler = smtp_server
    settings = local_settings(controller, username=USERNAME, password=PASSWORD)

    _, result, stream = await deliver(settings, "From: a@x.com\nTo: b@y.com\n\nbody")

    assert result.success, result.status_text
    assert Stage.AUTH in [u.stage for u in stream.history]
    assert handler.received[0]["authenticated"]


async def test_bad_password_fails_at_auth(smtp_server):
    controller, handler = smtp_server
    settings = local_settings(controller, username=USERNAME, password="wrong")

    _, result, stream = await deliver(settings, "From: a@x.com\nTo: b@y.com\n\nbody")

    assert not result.success
    assert result.failed_stage is Stage.AUTH
    assert result.error.startswith("535")
    assert stream.closed
    assert handler.received == []
