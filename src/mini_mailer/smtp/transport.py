# =============================================================================
# SMTP Transport Pipeline
# =============================================================================
# Delivers one assembled message through a local SOCKS5 proxy (typically a
# Tor client) to an SMTP server, upgrading to TLS with STARTTLS.
#
# Pipeline (strictly sequential, one attempt per stage):
#
#   ProxyConnect -> TCPDial -> SMTPHandshake -> StartTLS -> [Auth]
#     -> MailFrom -> RcptTo -> Data -> Write -> Quit -> Done
#
# Failure policy:
#   - The first failing stage aborts the rest (no retries)
#   - The result names the failing stage and the underlying error
#   - A failure is reported on the stream before QUIT is attempted
#   - QUIT is always attempted on the way out, best-effort; its own failure
#     is logged but never replaces the original error
#
# Uses PySocks for the SOCKS5 tunnel and aiosmtplib over the tunneled
# socket for the SMTP conversation. The tunnel handshake is blocking, so the
# dial runs in a worker thread.
# =============================================================================

import asyncio
import logging
import re
import socket
import ssl
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

import aiosmtplib
import socks

from mini_mailer.core import AssembledMessage
from mini_mailer.smtp.status import SendResult, Stage, StatusStream

logger = logging.getLogger(__name__)

# SMTP reply codes we check by hand for the DATA phase
START_MAIL_INPUT = 354
ACTION_COMPLETED = 250

# A period at the start of any line must be doubled inside DATA (RFC 5321 4.5.2)
LEADING_PERIOD_RE = re.compile(rb"(?m)^\.")


@dataclass
class TransportSettings:
    """
    Connection settings for one send.

    Attributes:
        host: SMTP server hostname (e.g. an .onion address).
        port: SMTP server port.
        socks_port: Port of the local SOCKS5 proxy.
        username: Login name for AUTH PLAIN. Auth is skipped if empty.
        password: Password for AUTH PLAIN. Auth is skipped if empty.
        socks_host: Address of the SOCKS5 proxy.
        verify_tls: Verify the server certificate during STARTTLS.
                    Off by default: onion-routed servers rarely have
                    certificates that validate.
        local_hostname: Name sent in EHLO. Defaults to `host`.
        timeout: Seconds allowed for the proxy connect and each SMTP
                 round trip.
    """
    host: str
    port: int
    socks_port: int
    username: str = ""
    password: str = field(default="", repr=False)
    socks_host: str = "127.0.0.1"
    verify_tls: bool = False
    local_hostname: str = ""
    timeout: float = 60.0

    @property
    def has_credentials(self) -> bool:
        """True if both username and password are set."""
        return bool(self.username and self.password)

    @property
    def helo_name(self) -> str:
        """Identity claimed in EHLO."""
        return self.local_hostname or self.host


# Injectable factories (tests swap in fakes)
ProxyFactory = Callable[[TransportSettings], Any]
ClientFactory = Callable[[socket.socket, TransportSettings], Any]


def create_socks_proxy(settings: TransportSettings) -> socks.socksocket:
    """
    Build an unconnected SOCKS5 socket (no proxy-side authentication).

    Hostnames are resolved by the proxy (rdns), which is required for
    .onion addresses and avoids leaking DNS lookups.
    """
    if not 0 < settings.socks_port < 65536:
        raise ValueError(f"Invalid SOCKS port: {settings.socks_port}")

    sock = socks.socksocket()
    sock.set_proxy(socks.SOCKS5, settings.socks_host, settings.socks_port, rdns=True)
    sock.settimeout(settings.timeout)
    return sock


def create_smtp_client(sock: socket.socket, settings: TransportSettings) -> aiosmtplib.SMTP:
    """
    Build an aiosmtplib client over an already-connected socket.

    Automatic STARTTLS is disabled; the pipeline upgrades explicitly so the
    TLS stage can be reported on its own.
    """
    return aiosmtplib.SMTP(
        sock=sock,
        local_hostname=settings.helo_name,
        timeout=settings.timeout,
        start_tls=False,
    )


def create_tls_context(verify: bool) -> ssl.SSLContext:
    """
    Build the TLS context used for STARTTLS.

    With verify=False, certificate and hostname checks are disabled.
    """
    context = ssl.create_default_context()
    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def frame_message_data(payload: bytes) -> bytes:
    """
    Apply DATA framing: dot-stuffing plus the terminating "." line.

    The returned bytes are written to the wire as-is, ending in CRLF.CRLF.
    """
    data = LEADING_PERIOD_RE.sub(b"..", payload)
    if not data.endswith(b"\r\n"):
        data += b"\r\n"
    return data + b".\r\n"


def describe_error(exc: BaseException) -> str:
    """Short, human-readable text for an exception."""
    if isinstance(exc, aiosmtplib.SMTPResponseException):
        return f"{exc.code} {exc.message}"
    text = str(exc)
    return text or exc.__class__.__name__


class SMTPTransport:
    """
    Runs the SOCKS5 + STARTTLS SMTP pipeline for a single message.

    Usage:
        >>> transport = SMTPTransport(settings)
        >>> stream = StatusStream()
        >>> result = await transport.deliver(message, stream)
        >>> result.success
        True

    Attributes:
        settings: Connection settings for this send.
    """

    def __init__(
        self,
        settings: TransportSettings,
        *,
        proxy_factory: ProxyFactory = create_socks_proxy,
        client_factory: ClientFactory = create_smtp_client,
    ) -> None:
        self.settings = settings
        self._proxy_factory = proxy_factory
        self._client_factory = client_factory
        self._sock: socket.socket | None = None
        self._client: Any = None

    async def deliver(self, message: AssembledMessage, status: StatusStream) -> SendResult:
        """
        Deliver a message, reporting every stage to `status`.

        Never raises for transport problems: any stage failure is turned into
        a failed SendResult and a terminal status update. If the task is
        cancelled, the stream is closed with a "Send cancelled" update and
        the cancellation propagates.

        Args:
            message: Assembled message (already validated).
            status: Stream that receives the stage updates.

        Returns:
            SendResult describing the outcome.
        """
        settings = self.settings
        logger.info(
            f"Sending to {settings.host}:{settings.port} "
            f"via SOCKS5 {settings.socks_host}:{settings.socks_port}"
        )

        try:
            try:
                await self._run_stages(message, status)
            except TransportStageError as e:
                logger.error(f"Send failed at {e.stage}: {e.cause_text}")
                result = SendResult(
                    success=False,
                    failed_stage=e.stage,
                    error=e.cause_text,
                    message_id=message.message_id,
                )
                # Report the outcome before the best-effort QUIT
                status.finish(result)
                await self._quit()
                return result

            status.emit(Stage.QUIT)
            await self._quit()
        except asyncio.CancelledError:
            logger.warning(f"Send cancelled during {status.last_stage}")
            self._drop_client()
            if not status.closed:
                status.cancel(message.message_id)
            raise
        finally:
            self._close_socket()

        logger.info(f"Email sent successfully to {message.recipient}")
        result = SendResult(success=True, message_id=message.message_id)
        status.finish(result)
        return result

    async def _run_stages(self, message: AssembledMessage, status: StatusStream) -> None:
        """Run every stage up to and including Write."""
        settings = self.settings

        self._sock = await self._stage(status, Stage.PROXY_CONNECT, self._open_proxy)
        await self._stage(
            status,
            Stage.TCP_DIAL,
            lambda: asyncio.to_thread(self._sock.connect, (settings.host, settings.port)),
        )
        await self._stage(status, Stage.SMTP_HANDSHAKE, self._handshake)
        await self._stage(status, Stage.START_TLS, self._starttls)

        if settings.has_credentials:
            await self._stage(
                status,
                Stage.AUTH,
                lambda: self._client.auth_plain(settings.username, settings.password),
            )
        else:
            logger.debug("No credentials configured, skipping AUTH")

        await self._stage(status, Stage.MAIL_FROM, lambda: self._client.mail(message.sender))
        await self._stage(status, Stage.RCPT_TO, lambda: self._client.rcpt(message.recipient))
        await self._stage(status, Stage.DATA, self._open_data)
        await self._stage(status, Stage.WRITE, lambda: self._write_data(message.payload))

    async def _stage(
        self,
        status: StatusStream,
        stage: Stage,
        operation: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Report a stage, run it, and tag any failure with the stage."""
        status.emit(stage)
        logger.debug(f"Stage {stage} started")
        try:
            return await operation()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise TransportStageError(stage, e) from e

    async def _open_proxy(self) -> Any:
        return self._proxy_factory(self.settings)

    async def _handshake(self) -> None:
        self._client = self._client_factory(self._sock, self.settings)
        await self._client.connect()
        await self._client.ehlo()

    async def _starttls(self) -> None:
        if not self.settings.verify_tls:
            logger.debug("TLS certificate verification disabled")
        await self._client.starttls(
            server_hostname=self.settings.host,
            tls_context=create_tls_context(self.settings.verify_tls),
        )
        # Capabilities must be re-read over the encrypted channel
        await self._client.ehlo()

    async def _open_data(self) -> None:
        response = await self._client.execute_command(b"DATA")
        if response.code != START_MAIL_INPUT:
            raise aiosmtplib.SMTPDataError(response.code, response.message)

    async def _write_data(self, payload: bytes) -> None:
        # Message data is not a command; it goes straight to the protocol
        protocol = self._client.protocol
        if protocol is None:
            raise aiosmtplib.SMTPServerDisconnected("Connection lost")
        protocol.write(frame_message_data(payload))
        response = await protocol.read_response(timeout=self.settings.timeout)
        if response.code != ACTION_COMPLETED:
            raise aiosmtplib.SMTPDataError(response.code, response.message)
        logger.debug(f"Server accepted message: {response.message}")

    async def _quit(self) -> None:
        """Best-effort QUIT. Failures are logged, never raised."""
        if self._client is None:
            return
        try:
            await self._client.quit()
        except Exception as e:
            logger.warning(f"Error during SMTP QUIT: {e}")
        finally:
            self._drop_client()

    def _drop_client(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def _close_socket(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None


# =============================================================================
# Exceptions
# =============================================================================

class SMTPError(Exception):
    """Base exception for SMTP operations."""
    pass


class TransportStageError(SMTPError):
    """
    Raised when a pipeline stage fails.

    Attributes:
        stage: The stage that failed.
        cause: The underlying exception.
    """

    def __init__(self, stage: Stage, cause: BaseException) -> None:
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage} failed: {describe_error(cause)}")

    @property
    def cause_text(self) -> str:
        """Error text of the underlying exception."""
        return describe_error(self.cause)
