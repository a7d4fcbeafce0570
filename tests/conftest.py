# =============================================================================
# Pytest Configuration and Fixtures
# =============================================================================
# Shared fixtures for the Mini-Mailer test suite.
#
# Nothing here touches the network, the real keyring, or the user's config
# directory:
#   - XDG directories are redirected into a temp dir
#   - keyring is replaced with an in-memory backend
#   - the SOCKS proxy and SMTP client are fakes that record every call
# =============================================================================

import tempfile
from pathlib import Path
from types import SimpleNamespace

import keyring
import pytest
from keyring.backend import KeyringBackend
from keyring.errors import PasswordDeleteError

from mini_mailer.smtp import TransportSettings


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def xdg_dirs(temp_dir, monkeypatch):
    """Point XDG config/state homes at the temp dir."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(temp_dir / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(temp_dir / "state"))
    return temp_dir


class MemoryKeyring(KeyringBackend):
    """Keyring backend that keeps passwords in a dict."""

    priority = 1

    def __init__(self):
        super().__init__()
        self.passwords = {}

    def get_password(self, service, username):
        return self.passwords.get((service, username))

    def set_password(self, service, username, password):
        self.passwords[(service, username)] = password

    def delete_password(self, service, username):
        try:
            del self.passwords[(service, username)]
        except KeyError:
            raise PasswordDeleteError("Password not found") from None


@pytest.fixture
def memory_keyring():
    """Install an in-memory keyring for the duration of a test."""
    original = keyring.get_keyring()
    backend = MemoryKeyring()
    keyring.set_keyring(backend)
    yield backend
    keyring.set_keyring(original)


@pytest.fixture
def sample_settings():
    """Transport settings with credentials."""
    return TransportSettings(
        host="smtp.example.onion",
        port=587,
        socks_port=9050,
        username="alice",
        password="hunter2",
    )


@pytest.fixture
def sample_raw_message():
    """A minimal composed message (LF line endings, as typed)."""
    return "From: a@x.com\nTo: b@y.com\nSubject: hi\n\nbody"


# =============================================================================
# Network Fakes
# =============================================================================

class FakeProxySocket:
    """Stands in for the SOCKS5 socket; records the dial target."""

    def __init__(self, calls, fail=None):
        self.calls = calls
        self.fail = fail
        self.closed = False

    def connect(self, address):
        host, port = address
        self.calls.append(("dial", host, port))
        if self.fail:
            raise self.fail

    def close(self):
        self.closed = True


class FakeProtocol:
    """Stands in for the client's SMTP protocol during message data writes."""

    def __init__(self, client):
        self.client = client

    def write(self, data):
        self.client._record("write")
        self.client.written += data

    async def read_response(self, timeout=None):
        return SimpleNamespace(code=self.client.write_code, message="queued")


class FakeSMTPClient:
    """
    Records SMTP commands in order.

    `fail` maps a command name ("connect", "ehlo", "starttls", "auth",
    "mail", "rcpt", "data", "write", "quit") to the exception it raises.
    `hold` maps a command name to an asyncio.Event the command waits on
    after it is recorded.
    """

    def __init__(self, calls, fail=None, hold=None, data_code=354, write_code=250):
        self.calls = calls
        self.fail = fail or {}
        self.hold = hold or {}
        self.data_code = data_code
        self.write_code = write_code
        self.written = b""
        self.closed = False
        self.protocol = FakeProtocol(self)

    def _record(self, name):
        self.calls.append(name)
        if name in self.fail:
            raise self.fail[name]

    async def _step(self, name):
        self._record(name)
        if name in self.hold:
            await self.hold[name].wait()

    async def connect(self):
        await self._step("connect")

    async def ehlo(self):
        await self._step("ehlo")

    async def starttls(self, server_hostname=None, tls_context=None):
        await self._step("starttls")
        self.tls_context = tls_context

    async def auth_plain(self, username, password):
        await self._step("auth")

    async def mail(self, sender):
        await self._step("mail")
        self.sender = sender

    async def rcpt(self, recipient):
        await self._step("rcpt")
        self.recipient = recipient

    async def execute_command(self, command):
        assert command == b"DATA"
        await self._step("data")
        return SimpleNamespace(code=self.data_code, message="go ahead")

    async def quit(self):
        await self._step("quit")

    def close(self):
        self.closed = True


class FakeNetwork:
    """
    Wires a FakeProxySocket and FakeSMTPClient into SMTPTransport factories.

    Usage:
        net = FakeNetwork()
        transport = SMTPTransport(settings, **net.factories())
        ...
        assert net.calls == [...]
    """

    def __init__(self, proxy_error=None, dial_error=None, smtp_fail=None, **client_options):
        self.calls = []
        self.proxy_error = proxy_error
        self.dial_error = dial_error
        self.smtp_fail = smtp_fail or {}
        self.client_options = client_options
        self.proxy = None
        self.client = None

    def proxy_factory(self, settings):
        self.calls.append("proxy")
        if self.proxy_error:
            raise self.proxy_error
        self.proxy = FakeProxySocket(self.calls, fail=self.dial_error)
        return self.proxy

    def client_factory(self, sock, settings):
        self.client = FakeSMTPClient(self.calls, fail=self.smtp_fail, **self.client_options)
        return self.client

    def factories(self):
        return {
            "proxy_factory": self.proxy_factory,
            "client_factory": self.client_factory,
        }


@pytest.fixture
def fake_network():
    """Factory for FakeNetwork instances."""
    return FakeNetwork
