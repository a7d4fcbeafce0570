"""Tests for the send status stream."""

import pytest

from mini_mailer.smtp import SendResult, Stage, StatusStream


def test_stage_names():
    assert str(Stage.PROXY_CONNECT) == "ProxyConnect"
    assert [str(s) for s in Stage][-2:] == ["Quit", "Done"]


class TestSendResult:
    def test_success_text(self):
        assert SendResult(success=True).status_text == "Email sent successfully"

    def test_failure_text(self):
        result = SendResult(success=False, failed_stage=Stage.RCPT_TO, error="550 no such user")
        assert result.status_text == "RcptTo Error: 550 no such user"


class TestStatusStream:
    async def test_updates_arrive_in_order_and_end(self):
        stream = StatusStream()
        stream.emit(Stage.PROXY_CONNECT)
        stream.emit(Stage.TCP_DIAL)
        stream.emit(Stage.DATA, "custom")
        stream.finish(SendResult(success=True))

        updates = [update async for update in stream]

        assert [u.stage for u in updates] == [
            Stage.PROXY_CONNECT, Stage.TCP_DIAL, Stage.DATA, Stage.DONE,
        ]
        assert updates[0].text == "Connecting to SOCKS proxy..."
        assert updates[2].text == "custom"
        assert updates[-1].final
        assert not any(u.final for u in updates[:-1])

    async def test_failure_update(self):
        stream = StatusStream()
        stream.emit(Stage.AUTH)
        stream.finish(SendResult(success=False, failed_stage=Stage.AUTH, error="535 bad"))

        updates = [update async for update in stream]

        assert updates[-1].stage is Stage.AUTH
        assert updates[-1].text == "Auth Error: 535 bad"
        assert updates[-1].ok is False

    def test_history(self):
        stream = StatusStream()
        stream.emit(Stage.PROXY_CONNECT)
        assert [u.stage for u in stream.history] == [Stage.PROXY_CONNECT]
        assert not stream.closed

    def test_no_updates_after_finish(self):
        stream = StatusStream()
        stream.finish(SendResult(success=True))
        assert stream.closed
        with pytest.raises(RuntimeError):
            stream.emit(Stage.QUIT)

    def test_cancel_reports_last_stage(self):
        stream = StatusStream()
        assert stream.last_stage is None
        stream.emit(Stage.PROXY_CONNECT)
        stream.emit(Stage.TCP_DIAL)

        result = stream.cancel("<id@x.y>")

        assert stream.closed
        assert result.failed_stage is Stage.TCP_DIAL
        assert result.message_id == "<id@x.y>"
        assert stream.history[-1].text == "TCPDial Error: Send cancelled"
        assert stream.history[-1].final

    def test_cancel_before_any_stage(self):
        stream = StatusStream()
        stream.cancel()
        assert stream.history[-1].text == "ProxyConnect Error: Send cancelled"
