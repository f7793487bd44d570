"""
Error taxonomy for the dependency watcher.

InvalidCoordinate and ConfigError are fatal configuration errors surfaced before
polling begins. FetchFailed is fatal while awaiting a single version and isolated
per coordinate while monitoring. NotifyFailed is always non-fatal.
"""

from typing import Optional, Sequence


class DependencyWatchError(Exception):
    """Base class for all dependency watcher errors."""


class InvalidCoordinate(DependencyWatchError, ValueError):
    """A coordinate string does not match group:artifact[:version]."""

    def __init__(self, coordinates: str, reason: str):
        self.coordinates = coordinates
        self.reason = reason
        super().__init__(f"{reason}: '{coordinates}'")


class ConfigError(DependencyWatchError):
    """A configuration file could not be read or did not match its schema."""


class FetchFailed(DependencyWatchError):
    """Repository metadata could not be fetched or parsed."""

    def __init__(
        self,
        coordinate,
        url: str,
        message: str,
        status_code: Optional[int] = None,
    ):
        self.coordinate = coordinate
        self.url = url
        self.status_code = status_code
        super().__init__(f"Failed to fetch versions for {coordinate} from {url}: {message}")


class NotifyFailed(DependencyWatchError):
    """One or more notification sinks failed to deliver an event."""

    def __init__(self, coordinate, version: str, sinks: Sequence[str], message: str = ""):
        self.coordinate = coordinate
        self.version = version
        self.sinks = list(sinks)
        detail = f": {message}" if message else ""
        super().__init__(
            f"Failed to notify {coordinate}:{version} via {', '.join(self.sinks)}{detail}"
        )
