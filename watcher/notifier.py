"""
Notification sinks for newly published versions.

This module provides:
- Console notifications on stdout
- IFTTT-style webhook notifications
- Fan-out to several sinks with per-sink failure isolation
"""

import sys
from typing import List, Optional, Sequence, TextIO

import httpx
import structlog

from repository.models import Coordinate
from utilities.exceptions import NotifyFailed

logger = structlog.get_logger(__name__)


class Notifier:
    """Base class for notification sinks."""

    name = "notifier"

    async def notify(self, coordinate: Coordinate, version: str) -> None:
        raise NotImplementedError


class ConsoleNotifier(Notifier):
    """Prints ``group:artifact:version`` for every new version."""

    name = "console"

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    async def notify(self, coordinate: Coordinate, version: str) -> None:
        print(f"{coordinate}:{version}", file=self.stream or sys.stdout, flush=True)


class WebhookNotifier(Notifier):
    """
    Triggers a webhook for every new version.

    The payload follows the IFTTT maker webhook convention of ``value1`` to
    ``value3`` holding group, artifact and version.
    """

    name = "webhook"

    def __init__(self, client: httpx.AsyncClient, url: str):
        """
        Initialize the webhook notifier.

        Args:
            client: Shared HTTP client
            url: Webhook URL to POST to
        """
        self.client = client
        self.url = url

    async def notify(self, coordinate: Coordinate, version: str) -> None:
        payload = {
            "value1": coordinate.group,
            "value2": coordinate.artifact,
            "value3": version,
        }
        try:
            response = await self.client.post(self.url, json=payload)
        except httpx.HTTPError as e:
            raise NotifyFailed(coordinate, version, [self.name], f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            raise NotifyFailed(coordinate, version, [self.name], f"HTTP {response.status_code}")


class CompositeNotifier(Notifier):
    """Delivers each event to every sink, even when some of them fail."""

    name = "composite"

    def __init__(self, notifiers: Sequence[Notifier]):
        self.notifiers = list(notifiers)
        self.logger = logger.bind(component="notifier")

    async def notify(self, coordinate: Coordinate, version: str) -> None:
        failed: List[str] = []
        errors: List[str] = []

        for notifier in self.notifiers:
            try:
                await notifier.notify(coordinate, version)
            except Exception as e:
                failed.append(notifier.name)
                errors.append(str(e))
                self.logger.warning(
                    "Notification sink failed",
                    sink=notifier.name,
                    coordinate=str(coordinate),
                    version=version,
                    error=str(e)
                )

        if failed:
            raise NotifyFailed(coordinate, version, failed, "; ".join(errors))


def build_notifier(client: httpx.AsyncClient, webhook_url: Optional[str] = None) -> CompositeNotifier:
    """Console sink always, plus a webhook sink when a URL is configured."""
    notifiers: List[Notifier] = [ConsoleNotifier()]
    if webhook_url:
        notifiers.append(WebhookNotifier(client, webhook_url))
    return CompositeNotifier(notifiers)
