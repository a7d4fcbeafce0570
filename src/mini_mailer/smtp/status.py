# =============================================================================
# Send Status Stream
# =============================================================================
# Progress reporting for a single send.
#
# The transport runs as a background task while the UI stays responsive.
# Rather than letting the background task poke at widgets, every stage
# transition is appended to a per-session StatusStream. The UI worker reads
# the stream and renders each update in order.
#
# Guarantees:
#   - One writer (the pipeline task), one reader (the UI)
#   - Updates arrive in exactly the order they were emitted
#   - Nothing is coalesced or dropped; the stream ends after the terminal
#     update (success or failure)
# =============================================================================

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator


class Stage(Enum):
    """
    Transport pipeline stages, in execution order.

    The value is the display name used in status text and results.
    """
    PROXY_CONNECT = "ProxyConnect"
    TCP_DIAL = "TCPDial"
    SMTP_HANDSHAKE = "SMTPHandshake"
    START_TLS = "StartTLS"
    AUTH = "Auth"
    MAIL_FROM = "MailFrom"
    RCPT_TO = "RcptTo"
    DATA = "Data"
    WRITE = "Write"
    QUIT = "Quit"
    DONE = "Done"

    def __str__(self) -> str:
        return self.value


# Human-readable text shown when a stage starts
STAGE_MESSAGES = {
    Stage.PROXY_CONNECT: "Connecting to SOCKS proxy...",
    Stage.TCP_DIAL: "Connecting to SMTP server...",
    Stage.SMTP_HANDSHAKE: "Starting SMTP handshake...",
    Stage.START_TLS: "Starting TLS...",
    Stage.AUTH: "Authenticating...",
    Stage.MAIL_FROM: "Sending MAIL FROM...",
    Stage.RCPT_TO: "Sending RCPT TO...",
    Stage.DATA: "Sending DATA...",
    Stage.WRITE: "Writing message...",
    Stage.QUIT: "Closing session...",
}

SUCCESS_MESSAGE = "Email sent successfully"
CANCELLED_MESSAGE = "Send cancelled"


@dataclass(frozen=True)
class StatusUpdate:
    """
    A single entry in the status stream.

    Attributes:
        stage: Stage this update belongs to.
        text: Human-readable status line.
        ok: False only for the terminal failure update.
        final: True for the last update of the session.
    """
    stage: Stage
    text: str
    ok: bool = True
    final: bool = False


@dataclass
class SendResult:
    """
    Outcome of a send.

    Attributes:
        success: True if the server accepted the message.
        failed_stage: Stage that failed (None on success).
        error: Underlying error text (empty on success).
        message_id: Message-ID synthesized for this message, if any.
    """
    success: bool
    failed_stage: Stage | None = None
    error: str = ""
    message_id: str | None = None

    @property
    def status_text(self) -> str:
        """Terminal status line for display."""
        if self.success:
            return SUCCESS_MESSAGE
        return f"{self.failed_stage} Error: {self.error}"


class StatusStream:
    """
    Ordered, append-only channel of StatusUpdates for one session.

    Usage:
        >>> stream = StatusStream()
        >>> stream.emit(Stage.PROXY_CONNECT)
        >>> stream.finish(SendResult(success=True))
        >>> async for update in stream:
        ...     print(update.text)
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[StatusUpdate] = asyncio.Queue()
        self._history: list[StatusUpdate] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        """True once the terminal update has been emitted."""
        return self._closed

    @property
    def history(self) -> list[StatusUpdate]:
        """Every update emitted so far, in order."""
        return list(self._history)

    @property
    def last_stage(self) -> Stage | None:
        """Stage of the most recent update, or None before the first one."""
        return self._history[-1].stage if self._history else None

    def emit(self, stage: Stage, text: str | None = None) -> None:
        """Append a "stage started" update."""
        self._put(StatusUpdate(stage=stage, text=text or STAGE_MESSAGES[stage]))

    def finish(self, result: SendResult) -> None:
        """Append the terminal update and close the stream."""
        stage = Stage.DONE if result.success else result.failed_stage
        self._put(StatusUpdate(
            stage=stage,
            text=result.status_text,
            ok=result.success,
            final=True,
        ))
        self._closed = True

    def cancel(self, message_id: str | None = None) -> SendResult:
        """
        Close the stream after the pipeline was cancelled.

        The failure is reported against the last stage that started
        (ProxyConnect if none did).
        """
        result = SendResult(
            success=False,
            failed_stage=self.last_stage or Stage.PROXY_CONNECT,
            error=CANCELLED_MESSAGE,
            message_id=message_id,
        )
        self.finish(result)
        return result

    def _put(self, update: StatusUpdate) -> None:
        if self._closed:
            raise RuntimeError("Status stream already finished")
        self._history.append(update)
        self._queue.put_nowait(update)

    async def __aiter__(self) -> AsyncIterator[StatusUpdate]:
        while True:
            update = await self._queue.get()
            yield update
            if update.final:
                return
