"""
Models for the watch orchestrator.

This module defines Pydantic models for:
- Await-mode state and results
- Per-coordinate and per-cycle watch results
- The monitor configuration file
"""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from repository.models import Coordinate
from utilities.exceptions import ConfigError


class AwaitState(str, Enum):
    """States of the await-a-version loop."""
    POLLING = "polling"
    FOUND = "found"
    DONE = "done"
    ERROR = "error"


class CoordinateStatus(str, Enum):
    """Outcome of one coordinate's task within a cycle."""
    NEW = "new"
    UNCHANGED = "unchanged"
    ABSENT = "absent"
    ERROR = "error"


class AwaitResult(BaseModel):
    """Result of waiting for a specific version."""
    coordinate: Coordinate
    version: str
    attempts: int = Field(default=0, ge=0, description="Number of metadata fetches")
    state: AwaitState = Field(default=AwaitState.POLLING)
    notified: bool = Field(default=False, description="Whether every sink accepted the notification")


class CoordinateResult(BaseModel):
    """Result of fetching and notifying a single coordinate."""
    coordinate: Coordinate
    status: CoordinateStatus
    new_versions: List[str] = Field(default_factory=list)
    notify_failures: List[str] = Field(default_factory=list, description="Versions whose delivery failed")
    error: Optional[str] = Field(default=None)


class CycleResult(BaseModel):
    """Result of one pass over all configured coordinates."""
    cycle: int = Field(..., ge=1)
    started_at: datetime = Field(default_factory=datetime.utcnow)
    duration_seconds: float = Field(default=0.0)
    results: List[CoordinateResult] = Field(default_factory=list)

    @property
    def new_versions(self) -> int:
        return sum(len(result.new_versions) for result in self.results)

    @property
    def errors(self) -> List[CoordinateResult]:
        return [result for result in self.results if result.status == CoordinateStatus.ERROR]

    def result_for(self, coordinate: Coordinate) -> Optional[CoordinateResult]:
        for result in self.results:
            if result.coordinate == coordinate:
                return result
        return None


class WatchConfig(BaseModel):
    """Contents of the monitor configuration file."""
    model_config = ConfigDict(extra="ignore")

    coordinates: List[str] = Field(default_factory=list, description="group:artifact strings")

    def parse_coordinates(self) -> List[Coordinate]:
        """
        Parse every configured coordinate, dropping duplicates.

        Raises:
            InvalidCoordinate: if any entry is malformed or carries a version
        """
        parsed = [Coordinate.parse(coordinates) for coordinates in self.coordinates]
        return list(dict.fromkeys(parsed))


def load_watch_config(path: Union[str, Path]) -> WatchConfig:
    """
    Read and validate a YAML monitor configuration.

    Raises:
        ConfigError: if the file cannot be read or does not match the schema
    """
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Unable to read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping with a 'coordinates' list")

    try:
        return WatchConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e
