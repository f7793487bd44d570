"""
Async client for Maven-style repository metadata.

Fetches maven-metadata.xml for a coordinate and maps the response to one of
three outcomes: a VersionSet, ABSENT for HTTP 404, or FetchFailed for
everything else that goes wrong.
"""

from typing import List, Optional, Union

import httpx
import structlog
from bs4 import BeautifulSoup
from pydantic import ValidationError

from .models import ABSENT, Absent, ArtifactMetadata, Coordinate, VersionSet
from utilities.config import WatchSettings
from utilities.exceptions import FetchFailed

logger = structlog.get_logger(__name__)


class Maven2Repository:
    """
    Repository laid out as a Maven 2 tree of maven-metadata.xml files.
    """

    def __init__(self, client: httpx.AsyncClient, name: str, url: str):
        """
        Initialize the repository.

        Args:
            client: Shared HTTP client
            name: Display name used in logs
            url: Base URL of the repository
        """
        self.client = client
        self.name = name
        self.url = url if url.endswith("/") else url + "/"
        self.logger = logger.bind(component="repository", repository=name)

    def metadata_url(self, coordinate: Coordinate) -> str:
        """Build the maven-metadata.xml URL for a coordinate."""
        return str(httpx.URL(self.url).join(coordinate.metadata_path()))

    async def versions(self, coordinate: Coordinate) -> Union[VersionSet, Absent]:
        """
        Fetch the published versions of an artifact.

        Args:
            coordinate: Artifact to look up

        Returns:
            VersionSet, or ABSENT when the repository has no metadata for it

        Raises:
            FetchFailed: on an unusable URL, transport errors, non-404 error statuses
                or bad metadata
        """
        try:
            url = self.metadata_url(coordinate)
        except httpx.InvalidURL as e:
            raise FetchFailed(coordinate, self.url, f"Invalid metadata URL: {e}") from e
        self.logger.debug("Fetching metadata", coordinate=str(coordinate), url=url)

        try:
            response = await self.client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchFailed(coordinate, url, f"{type(e).__name__}: {e}") from e

        if response.status_code == 404:
            self.logger.debug("Metadata not found", coordinate=str(coordinate))
            return ABSENT
        if not response.is_success:
            raise FetchFailed(
                coordinate,
                url,
                f"HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            metadata = parse_metadata(response.text)
        except ValidationError as e:
            raise FetchFailed(coordinate, url, f"Invalid metadata: {e}") from e

        return metadata.to_version_set()

    def __repr__(self) -> str:
        return f"Maven2Repository(name={self.name!r}, url={self.url!r})"


def parse_metadata(body: str) -> ArtifactMetadata:
    """
    Parse a maven-metadata.xml document.

    Raises:
        ValidationError: if the document lacks a release or any versions, or holds
            an empty version
    """
    soup = BeautifulSoup(body, "xml")
    versioning = soup.find("metadata")
    versioning = versioning.find("versioning", recursive=False) if versioning else None

    release: Optional[str] = None
    versions: List[str] = []
    if versioning is not None:
        release_elem = versioning.find("release", recursive=False)
        if release_elem is not None:
            release = release_elem.get_text(strip=True)
        versions_elem = versioning.find("versions", recursive=False)
        if versions_elem is not None:
            versions = [
                elem.get_text(strip=True)
                for elem in versions_elem.find_all("version", recursive=False)
            ]

    return ArtifactMetadata.model_validate({"release": release, "versions": versions})


class RepositoryFactory:
    """Creates repositories that share a single HTTP client."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    def maven2(self, name: str, url: str) -> Maven2Repository:
        return Maven2Repository(self.client, name, url)


async def _log_response(response: httpx.Response) -> None:
    request = response.request
    logger.debug(
        "HTTP response",
        method=request.method,
        url=str(request.url),
        status_code=response.status_code,
    )


def build_http_client(settings: WatchSettings, **kwargs) -> httpx.AsyncClient:
    """
    Create the HTTP client shared by repositories and webhook notifiers.

    Args:
        settings: Watch settings supplying timeout, headers and debug flag
        **kwargs: Extra httpx.AsyncClient arguments (e.g. a test transport)
    """
    client_config = {
        "timeout": settings.request_timeout,
        "headers": settings.get_headers(),
        "follow_redirects": True,
    }
    if settings.debug:
        client_config["event_hooks"] = {"response": [_log_response]}
    client_config.update(kwargs)
    return httpx.AsyncClient(**client_config)
