"""
Pydantic models for artifact coordinates and repository metadata.
Implements the coordinate parser and the fetch outcomes of a metadata lookup.
"""

from typing import Annotated, FrozenSet, List, Optional, Tuple
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field, field_validator

from utilities.exceptions import InvalidCoordinate

Version = Annotated[str, Field(min_length=1)]


class Coordinate(BaseModel):
    """
    Identity of a published artifact, independent of version.
    Immutable so it can be used as a dictionary key.
    """
    model_config = ConfigDict(frozen=True)

    group: str = Field(..., min_length=1, description="Group identifier, e.g. com.example")
    artifact: str = Field(..., min_length=1, description="Artifact identifier")

    @classmethod
    def parse(cls, coordinates: str) -> "Coordinate":
        """Parse a ``group:artifact`` string, rejecting any version."""
        coordinate, version = parse_coordinates(coordinates)
        if version is not None:
            raise InvalidCoordinate(coordinates, "Coordinate version must not be specified")
        return coordinate

    def metadata_path(self) -> str:
        """Relative path of this artifact's maven-metadata.xml, one escaped segment per name part."""
        segments = self.group.split(".") + [self.artifact, "maven-metadata.xml"]
        return "/".join(quote(segment, safe="") for segment in segments)

    def __str__(self) -> str:
        return f"{self.group}:{self.artifact}"


def parse_coordinates(coordinates: str) -> Tuple[Coordinate, Optional[str]]:
    """
    Parse ``group:artifact`` or ``group:artifact:version``.

    Args:
        coordinates: Coordinate string

    Returns:
        Tuple of the coordinate and the version, or None when no version is given

    Raises:
        InvalidCoordinate: naming the violated rule
    """
    first_colon = coordinates.find(":")
    if first_colon == -1:
        raise InvalidCoordinate(coordinates, "Coordinate ':' separator must be present")
    if first_colon == 0:
        raise InvalidCoordinate(coordinates, "Coordinate groupId must be non-empty")
    group = coordinates[:first_colon]

    second_colon = coordinates.find(":", first_colon + 1)
    if second_colon == -1:
        artifact = coordinates[first_colon + 1:]
        version = None
    else:
        artifact = coordinates[first_colon + 1:second_colon]
        version = coordinates[second_colon + 1:]

    if not artifact:
        raise InvalidCoordinate(coordinates, "Coordinate artifactId must be non-empty")
    if version == "":
        raise InvalidCoordinate(coordinates, "Coordinate version must be non-empty")

    return Coordinate(group=group, artifact=artifact), version


class VersionSet(BaseModel):
    """Published versions of an artifact as reported by its repository."""
    model_config = ConfigDict(frozen=True)

    latest: str = Field(..., min_length=1, description="Repository-designated release version")
    versions: Tuple[Version, ...] = Field(..., min_length=1, description="Versions in repository order")

    @field_validator("versions")
    @classmethod
    def deduplicate_versions(cls, v):
        """Drop repeated versions, keeping the first occurrence."""
        return tuple(dict.fromkeys(v))

    @property
    def all(self) -> FrozenSet[str]:
        return frozenset(self.versions)

    def __contains__(self, version: str) -> bool:
        return version in self.versions


class Absent:
    """
    Fetch outcome for an artifact that has not been published yet.
    Use the ``ABSENT`` singleton.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = Absent()


class ArtifactMetadata(BaseModel):
    """
    Schema of the versioning section of a maven-metadata.xml document.
    Elements outside release and versions are ignored.
    """
    release: str = Field(..., min_length=1, description="The <release> element")
    versions: List[Version] = Field(..., min_length=1, description="The <version> children of <versions>")

    def to_version_set(self) -> VersionSet:
        return VersionSet(latest=self.release, versions=tuple(self.versions))
