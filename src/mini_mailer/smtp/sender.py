# =============================================================================
# Mail Sender
# =============================================================================
# The boundary between the compose screen and the transport pipeline.
#
# send() does the cheap, synchronous work up front (line endings, headers,
# From/To validation) so that a bad message is rejected immediately with a
# PreconditionError and never opens a socket. A valid message gets its own
# SendSession whose pipeline runs as a background asyncio task.
#
# Each session is independent: there is no pool and no limit on concurrent
# sends, and sessions never share sockets or status streams.
# =============================================================================

import asyncio
import logging
from typing import AsyncIterator

from mini_mailer.core import AssembledMessage, assemble_message
from mini_mailer.smtp.status import SendResult, StatusStream, StatusUpdate
from mini_mailer.smtp.transport import SMTPTransport, TransportSettings

logger = logging.getLogger(__name__)


class SendSession:
    """
    A single in-flight send.

    Usage:
        >>> session = sender.send(raw_text)
        >>> async for update in session.updates():
        ...     status_label.update(update.text)
        >>> result = await session.wait()

    Attributes:
        message: The assembled message being sent.
        status: The session's ordered status stream.
    """

    def __init__(self, message: AssembledMessage, transport: SMTPTransport) -> None:
        self.message = message
        self.status = StatusStream()
        self._transport = transport
        self._task: asyncio.Task[SendResult] | None = None

    def start(self) -> None:
        """Start the pipeline as a background task."""
        if self._task is not None:
            raise RuntimeError("Session already started")
        self._task = asyncio.create_task(
            self._transport.deliver(self.message, self.status),
            name=f"send-{self.message.recipient}",
        )
        self._task.add_done_callback(self._close_if_cancelled)

    def _close_if_cancelled(self, task: asyncio.Task) -> None:
        # A task cancelled before its first step never reaches deliver()
        if task.cancelled() and not self.status.closed:
            self.status.cancel(self.message.message_id)

    @property
    def done(self) -> bool:
        """True once the pipeline has finished."""
        return self._task is not None and self._task.done()

    def cancel(self) -> None:
        """Cancel the pipeline. The status stream still gets a final update."""
        if self._task is not None:
            self._task.cancel()

    def updates(self) -> AsyncIterator[StatusUpdate]:
        """Iterate status updates in order, ending after the terminal one."""
        return self.status.__aiter__()

    async def wait(self) -> SendResult:
        """Wait for the pipeline to finish and return its result."""
        if self._task is None:
            raise RuntimeError("Session not started")
        return await self._task


class MailSender:
    """
    Starts send sessions for composed messages.

    Attributes:
        settings: Transport settings used for every send.
    """

    def __init__(self, settings: TransportSettings, **transport_options) -> None:
        """
        Initialize the sender.

        Args:
            settings: Connection settings.
            **transport_options: Passed through to SMTPTransport
                (proxy_factory, client_factory).
        """
        self.settings = settings
        self._transport_options = transport_options

    def send(self, raw_text: str) -> SendSession:
        """
        Validate and assemble a message, then start sending it.

        Must be called from a running event loop.

        Args:
            raw_text: Compose buffer contents.

        Returns:
            The started SendSession.

        Raises:
            PreconditionError: If the From or To address is invalid.
                Raised before any network activity.
        """
        message = assemble_message(raw_text)
        logger.info(f"Queuing send from {message.sender} to {message.recipient}")

        transport = SMTPTransport(self.settings, **self._transport_options)
        session = SendSession(message, transport)
        session.start()
        return session
