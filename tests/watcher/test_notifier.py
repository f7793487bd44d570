"""
Unit tests for notification sinks.
"""

import io
import json

import httpx
import pytest

from utilities.exceptions import NotifyFailed
from watcher.notifier import (
    CompositeNotifier, ConsoleNotifier, WebhookNotifier, build_notifier
)

WEBHOOK_URL = "https://maker.ifttt.com/trigger/release/with/key/secret"


class TestConsoleNotifier:
    """Test cases for ConsoleNotifier."""

    @pytest.mark.asyncio
    async def test_prints_coordinate_and_version(self, coordinate):
        stream = io.StringIO()

        await ConsoleNotifier(stream).notify(coordinate, "1.0")

        assert stream.getvalue() == "com.example:lib:1.0\n"

    @pytest.mark.asyncio
    async def test_defaults_to_stdout(self, coordinate, capsys):
        await ConsoleNotifier().notify(coordinate, "2.0")

        assert "com.example:lib:2.0" in capsys.readouterr().out


class TestWebhookNotifier:
    """Test cases for WebhookNotifier."""

    @pytest.mark.asyncio
    async def test_posts_ifttt_payload(self, coordinate):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, text="Congratulations!")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            await WebhookNotifier(client, WEBHOOK_URL).notify(coordinate, "1.0")

        assert len(requests) == 1
        assert requests[0].method == "POST"
        assert str(requests[0].url) == WEBHOOK_URL
        assert json.loads(requests[0].content) == {
            "value1": "com.example",
            "value2": "lib",
            "value3": "1.0",
        }

    @pytest.mark.asyncio
    async def test_error_status_raises(self, coordinate):
        async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(500))) as client:
            with pytest.raises(NotifyFailed) as exc_info:
                await WebhookNotifier(client, WEBHOOK_URL).notify(coordinate, "1.0")

        assert exc_info.value.sinks == ["webhook"]
        assert exc_info.value.version == "1.0"

    @pytest.mark.asyncio
    async def test_transport_error_raises(self, coordinate):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(NotifyFailed):
                await WebhookNotifier(client, WEBHOOK_URL).notify(coordinate, "1.0")


class TestCompositeNotifier:
    """Test cases for CompositeNotifier fan-out."""

    @pytest.mark.asyncio
    async def test_delivers_to_every_sink(self, coordinate, recording_notifier):
        stream = io.StringIO()
        notifier = CompositeNotifier([ConsoleNotifier(stream), recording_notifier])

        await notifier.notify(coordinate, "1.0")

        assert stream.getvalue() == "com.example:lib:1.0\n"
        assert recording_notifier.events == [(coordinate, "1.0")]

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_other_sinks(
        self, coordinate, recording_notifier, failing_notifier_factory
    ):
        failing = failing_notifier_factory(RuntimeError("sink down"))
        notifier = CompositeNotifier([failing, recording_notifier])

        with pytest.raises(NotifyFailed) as exc_info:
            await notifier.notify(coordinate, "1.0")

        assert recording_notifier.events == [(coordinate, "1.0")]
        assert exc_info.value.sinks == ["recording"]
        assert "sink down" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_no_sinks_is_noop(self, coordinate):
        await CompositeNotifier([]).notify(coordinate, "1.0")


class TestBuildNotifier:
    """Test cases for build_notifier."""

    def test_console_only(self):
        notifier = build_notifier(httpx.AsyncClient())

        assert [sink.name for sink in notifier.notifiers] == ["console"]

    def test_console_and_webhook(self):
        notifier = build_notifier(httpx.AsyncClient(), WEBHOOK_URL)

        assert [sink.name for sink in notifier.notifiers] == ["console", "webhook"]
        assert notifier.notifiers[1].url == WEBHOOK_URL
