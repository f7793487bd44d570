"""
In-memory record of versions that have already been notified.
"""

from typing import Dict, FrozenSet, Set

from repository.models import Coordinate


class SeenStore:
    """
    Per-coordinate sets of notified versions.

    Each coordinate owns its own bucket, so concurrent tasks for different
    coordinates never mutate the same set. The store only grows and lives as
    long as the orchestrator that owns it.
    """

    def __init__(self):
        self._buckets: Dict[Coordinate, Set[str]] = {}

    def _bucket(self, coordinate: Coordinate) -> Set[str]:
        return self._buckets.setdefault(coordinate, set())

    def has_seen(self, coordinate: Coordinate, version: str) -> bool:
        bucket = self._buckets.get(coordinate)
        return bucket is not None and version in bucket

    def mark_seen(self, coordinate: Coordinate, version: str) -> None:
        self._bucket(coordinate).add(version)

    def mark_if_unseen(self, coordinate: Coordinate, version: str) -> bool:
        """
        Mark a version as seen.

        Returns:
            True if the version was not seen before this call
        """
        bucket = self._bucket(coordinate)
        if version in bucket:
            return False
        bucket.add(version)
        return True

    def seen_versions(self, coordinate: Coordinate) -> FrozenSet[str]:
        return frozenset(self._buckets.get(coordinate, ()))

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())
