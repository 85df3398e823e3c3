"""
Errors that abort a listing build.

Soft conditions (no releases, archive without a manifest, no existing
listing) are not errors; they are reported as skips and the build goes on.
"""
from __future__ import annotations


class ListingBuildError(Exception):
    """Base class for every condition that stops the build."""


class SourceNotFound(ListingBuildError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"Could not find Listing Source at {path}")


class InvalidSource(ListingBuildError):
    """The listing source could not be read or has no id."""


class RepositoryReferenceMalformed(ListingBuildError):
    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(
            f"Could not get owner and repository from included repo info '{reference}'"
        )


class RepositoryNotFound(ListingBuildError):
    def __init__(self, owner: str, name: str):
        self.owner = owner
        self.name = name
        super().__init__(f"Could not get remote repo {owner}/{name}")


class ArtifactFetchFailure(ListingBuildError):
    def __init__(self, url: str, status_code: int | None = None):
        self.url = url
        self.status_code = status_code
        detail = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"Could not find valid zip file at {url}{detail}")


class InvalidArtifact(ListingBuildError):
    """The archive was downloaded but is not a readable package."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid package archive at {url}: {reason}")
