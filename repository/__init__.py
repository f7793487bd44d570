"""
Repository package: artifact coordinates and the metadata client.

This package contains:
- Coordinate model and parser
- Version set and absent-artifact outcome
- Maven 2 metadata client
"""

from .models import ABSENT, Absent, Coordinate, VersionSet, parse_coordinates
from .client import Maven2Repository, RepositoryFactory, build_http_client

__all__ = [
    "ABSENT",
    "Absent",
    "Coordinate",
    "VersionSet",
    "parse_coordinates",
    "Maven2Repository",
    "RepositoryFactory",
    "build_http_client",
]
