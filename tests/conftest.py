"""
Pytest configuration and shared fixtures.
"""

from collections import defaultdict
from typing import Dict, List

import pytest

from repository.models import Coordinate, VersionSet
from watcher.notifier import Notifier


class ScriptedRepository:
    """
    Repository double returning a scripted sequence of outcomes per coordinate.
    The last outcome repeats once the script is exhausted. Exceptions are raised.
    """

    name = "Scripted"

    def __init__(self, script: Dict[Coordinate, List]):
        self.script = script
        self.calls = defaultdict(int)

    async def versions(self, coordinate: Coordinate):
        outcomes = self.script[coordinate]
        index = min(self.calls[coordinate], len(outcomes) - 1)
        self.calls[coordinate] += 1
        outcome = outcomes[index]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class RecordingNotifier(Notifier):
    """Notifier double that records events and can be told to fail."""

    name = "recording"

    def __init__(self, fail_with: Exception = None):
        self.events = []
        self.fail_with = fail_with

    async def notify(self, coordinate: Coordinate, version: str) -> None:
        self.events.append((coordinate, version))
        if self.fail_with is not None:
            raise self.fail_with


@pytest.fixture
def coordinate():
    """Coordinate used by most tests."""
    return Coordinate(group="com.example", artifact="lib")


@pytest.fixture
def version_set():
    """Factory for VersionSet instances."""
    def make(*versions, latest=None):
        return VersionSet(latest=latest or versions[-1], versions=versions)
    return make


@pytest.fixture
def scripted_repository():
    """Factory for ScriptedRepository instances."""
    return ScriptedRepository


@pytest.fixture
def recording_notifier():
    return RecordingNotifier()


@pytest.fixture
def failing_notifier_factory():
    """Factory for notifiers that record and then raise."""
    return lambda error: RecordingNotifier(fail_with=error)


@pytest.fixture
def fake_sleep():
    """Zero-delay sleep that records requested durations in ``fake_sleep.calls``."""
    calls = []

    async def sleep(seconds):
        calls.append(seconds)

    sleep.calls = calls
    return sleep


@pytest.fixture
def maven_metadata():
    """Build a maven-metadata.xml document."""
    def build(release="2.0", versions=("1.0", "2.0"), extra=""):
        release_xml = f"<release>{release}</release>" if release is not None else ""
        versions_xml = "".join(f"<version>{v}</version>" for v in versions)
        return f"""<?xml version="1.0" encoding="UTF-8"?>
<metadata>
  <groupId>com.example</groupId>
  <artifactId>lib</artifactId>
  <versioning>
    <latest>{versions[-1] if versions else ''}</latest>
    {release_xml}
    <versions>{versions_xml}</versions>
    <lastUpdated>20240115103000</lastUpdated>
    {extra}
  </versioning>
</metadata>
"""
    return build
