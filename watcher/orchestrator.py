"""
Polling orchestrator for new artifact versions.

This module provides:
- Await mode: poll one coordinate until a specific version appears
- Monitor mode: poll many coordinates concurrently, cycle after cycle
- Per-coordinate failure isolation within a cycle
- Deduplicated notifications backed by a SeenStore
"""

import asyncio
import time
from datetime import datetime
from typing import Awaitable, Callable, Optional, Sequence

import structlog

from repository.models import Coordinate, parse_coordinates
from utilities.exceptions import FetchFailed, InvalidCoordinate
from utilities.logger import WatchLogger
from watcher.models import (
    AwaitResult, AwaitState, CoordinateResult, CoordinateStatus, CycleResult
)
from watcher.notifier import Notifier
from watcher.seen_store import SeenStore

logger = structlog.get_logger(__name__)

DEFAULT_POLL_INTERVAL = 60.0

Sleep = Callable[[float], Awaitable[None]]
CoordinateLoader = Callable[[], Sequence[Coordinate]]


class WatchOrchestrator:
    """Drives the repository, the seen store and the notifier on a fixed cadence."""

    def __init__(
        self,
        repository,
        notifier: Notifier,
        seen_store: Optional[SeenStore] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Sleep = asyncio.sleep,
    ):
        """
        Initialize the orchestrator.

        Args:
            repository: Object with an async ``versions(coordinate)`` method
            notifier: Sink for new-version events
            seen_store: Store of already-notified versions, created empty if omitted
            poll_interval: Seconds to wait between polls
            sleep: Awaitable delay function, replaceable in tests
        """
        self.repository = repository
        self.notifier = notifier
        self.seen_store = seen_store if seen_store is not None else SeenStore()
        self.poll_interval = poll_interval
        self.sleep = sleep

        repository_name = getattr(repository, "name", type(repository).__name__)
        self.logger = logger.bind(component="orchestrator", repository=repository_name)
        self.watch_logger = WatchLogger(__name__).bind_context(repository=repository_name)

    async def await_version(self, coordinates: str) -> AwaitResult:
        """
        Poll until ``group:artifact:version`` is published, then notify once.

        Args:
            coordinates: Coordinate string that must include a version

        Returns:
            AwaitResult in the DONE state

        Raises:
            InvalidCoordinate: if the string is malformed or has no version
            FetchFailed: as soon as any fetch fails
        """
        coordinate, version = parse_coordinates(coordinates)
        if version is None:
            raise InvalidCoordinate(coordinates, "Coordinate version must be present and non-empty")

        result = AwaitResult(coordinate=coordinate, version=version)
        self.logger.info("Awaiting version", coordinate=str(coordinate), version=version)

        while result.state == AwaitState.POLLING:
            result.attempts += 1
            try:
                versions = await self.repository.versions(coordinate)
            except FetchFailed as e:
                result.state = AwaitState.ERROR
                self.watch_logger.log_fetch_error(str(coordinate), str(e))
                raise

            self.watch_logger.log_versions_fetched(
                str(coordinate), list(versions.versions) if versions else None
            )

            if versions and version in versions:
                result.state = AwaitState.FOUND
            else:
                self.watch_logger.log_sleep(self.poll_interval)
                await self.sleep(self.poll_interval)

        result.notified = await self._notify(coordinate, version)
        result.state = AwaitState.DONE
        self.logger.info(
            "Version published",
            coordinate=str(coordinate),
            version=version,
            attempts=result.attempts
        )
        return result

    async def watch(
        self,
        load_coordinates: CoordinateLoader,
        max_cycles: Optional[int] = None,
    ) -> Optional[CycleResult]:
        """
        Run poll cycles until cancelled, or for ``max_cycles`` cycles.

        ``load_coordinates`` is called at the start of every cycle so that
        configuration changes apply without a restart. Errors it raises are
        configuration errors and end the loop.

        Returns:
            The last cycle's result when the loop is bounded
        """
        cycle = 0
        last_result = None

        while max_cycles is None or cycle < max_cycles:
            coordinates = load_coordinates()
            cycle += 1
            last_result = await self.run_cycle(coordinates, cycle=cycle)

            if max_cycles is not None and cycle >= max_cycles:
                break

            self.watch_logger.log_sleep(self.poll_interval)
            await self.sleep(self.poll_interval)

        return last_result

    async def run_cycle(self, coordinates: Sequence[Coordinate], cycle: int = 1) -> CycleResult:
        """
        Fetch and notify every coordinate concurrently.

        A failure in one coordinate's task is recorded in its result and never
        cancels the others.
        """
        coordinates = list(dict.fromkeys(coordinates))
        started_at = datetime.utcnow()
        start = time.monotonic()
        self.watch_logger.log_cycle_start(cycle, len(coordinates))

        outcomes = await asyncio.gather(
            *(self._watch_coordinate(coordinate) for coordinate in coordinates),
            return_exceptions=True
        )

        results = []
        for coordinate, outcome in zip(coordinates, outcomes):
            if isinstance(outcome, BaseException):
                self.logger.error(
                    "Unexpected error while watching coordinate",
                    coordinate=str(coordinate),
                    error=f"{type(outcome).__name__}: {outcome}"
                )
                outcome = CoordinateResult(
                    coordinate=coordinate,
                    status=CoordinateStatus.ERROR,
                    error=f"{type(outcome).__name__}: {outcome}"
                )
            results.append(outcome)

        result = CycleResult(
            cycle=cycle,
            started_at=started_at,
            duration_seconds=time.monotonic() - start,
            results=results
        )
        self.watch_logger.log_cycle_complete(
            cycle, result.new_versions, len(result.errors), result.duration_seconds
        )
        return result

    async def _watch_coordinate(self, coordinate: Coordinate) -> CoordinateResult:
        try:
            versions = await self.repository.versions(coordinate)
        except FetchFailed as e:
            self.watch_logger.log_fetch_error(str(coordinate), str(e))
            return CoordinateResult(
                coordinate=coordinate,
                status=CoordinateStatus.ERROR,
                error=str(e)
            )

        if not versions:
            self.watch_logger.log_versions_fetched(str(coordinate), None)
            return CoordinateResult(coordinate=coordinate, status=CoordinateStatus.ABSENT)

        self.watch_logger.log_versions_fetched(str(coordinate), list(versions.versions))

        new_versions = []
        notify_failures = []
        for version in versions.versions:
            # Marked before delivery; a failed delivery is not retried.
            if not self.seen_store.mark_if_unseen(coordinate, version):
                continue
            new_versions.append(version)
            if not await self._notify(coordinate, version):
                notify_failures.append(version)

        return CoordinateResult(
            coordinate=coordinate,
            status=CoordinateStatus.NEW if new_versions else CoordinateStatus.UNCHANGED,
            new_versions=new_versions,
            notify_failures=notify_failures
        )

    async def _notify(self, coordinate: Coordinate, version: str) -> bool:
        try:
            await self.notifier.notify(coordinate, version)
        except Exception as e:
            self.watch_logger.log_notification(
                str(coordinate), version, delivered=False, error=str(e)
            )
            return False

        self.watch_logger.log_notification(str(coordinate), version)
        return True
