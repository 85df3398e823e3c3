"""
Pydantic models for the package listing builder.

This module defines the data models used throughout the build, including:
- The listing-source document that declares where packages come from
- The package manifest extracted from a release archive
- The published listing (both the existing one and the one being built)

All models use Pydantic for validation, serialization, and type safety.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ---------------------------------------------------------------------------
# Listing Source Models
# ---------------------------------------------------------------------------


class Author(BaseModel):
    """
    Author of a listing, shown to users browsing the listing.
    """

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = Field(
        default=None,
        description="Display name of the listing author.",
    )
    url: Optional[str] = Field(
        default=None,
        description="Homepage of the listing author.",
    )
    email: Optional[str] = Field(
        default=None,
        description="Contact email of the listing author.",
    )


class InfoLink(BaseModel):
    """Link to a human-readable page describing the listing."""

    model_config = ConfigDict(extra="ignore")

    text: Optional[str] = None
    url: Optional[str] = None


class PackageInfo(BaseModel):
    """
    An explicitly declared package in the listing source.

    Each entry only carries the release archive URLs; identity and version
    are read from the manifest inside each archive.
    """

    model_config = ConfigDict(extra="ignore")

    releases: List[str] = Field(
        default_factory=list,
        description="Direct download URLs of release zip archives.",
    )

    @model_validator(mode="before")
    @classmethod
    def _null_releases(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("releases") is None:
            data = {**data, "releases": []}
        return data


class ListingSource(BaseModel):
    """
    Declarative description of a listing: its metadata plus the packages
    and upstream GitHub repositories it aggregates.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[str] = Field(
        default=None,
        description="Unique identifier of the listing (e.g. 'com.example.listing'). Required.",
    )
    name: Optional[str] = None
    url: Optional[str] = Field(
        default=None,
        description="Public URL the listing is published at.",
    )
    description: Optional[str] = None
    author: Author = Field(default_factory=Author)
    info_link: Optional[InfoLink] = Field(default=None, alias="infoLink")
    packages: List[PackageInfo] = Field(default_factory=list)
    github_repos: List[str] = Field(
        default_factory=list,
        alias="githubRepos",
        description="Upstream repositories in 'owner/name' form whose releases are scanned for zip assets.",
    )

    @model_validator(mode="before")
    @classmethod
    def _null_collections(cls, data: Any) -> Any:
        # Sources written by hand often carry explicit nulls for empty sections.
        if isinstance(data, dict):
            data = dict(data)
            for key in ("packages", "githubRepos", "github_repos"):
                if key in data and data[key] is None:
                    data[key] = []
            if data.get("author") is None:
                data.pop("author", None)
        return data

    def release_urls(self) -> List[str]:
        """All explicitly declared release URLs, in source order."""
        return [url for package in self.packages for url in package.releases]


class ListingInfo(BaseModel):
    """Summary of the listing metadata, logged once the listing is saved."""

    name: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None
    info_link: InfoLink = Field(default_factory=InfoLink, serialization_alias="infoLink")
    author: Author = Field(default_factory=Author)

    @classmethod
    def from_source(cls, source: ListingSource) -> "ListingInfo":
        return cls(
            name=source.name,
            url=source.url,
            description=source.description,
            info_link=source.info_link or InfoLink(),
            author=source.author,
        )


# ---------------------------------------------------------------------------
# Package Manifest Models
# ---------------------------------------------------------------------------


class PackageManifest(BaseModel):
    """
    Manifest read from the package.json found at the root of a release archive.

    Only identity and the fields the listing owns are modelled; every other
    manifest field (displayName, dependencies, unity, ...) is preserved as-is.
    """

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = Field(
        default=None,
        description="Package identifier. Falls back to 'name', which the manifest format uses as the identifier.",
    )
    name: str
    version: str
    url: Optional[str] = Field(
        default=None,
        description="Location of the archive this manifest was read from.",
    )
    zipSHA256: Optional[str] = Field(
        default=None,
        description="Lowercase hex SHA-256 of the whole release archive.",
    )

    @model_validator(mode="after")
    def _default_id(self) -> "PackageManifest":
        if not self.id:
            self.id = self.name
        return self


# ---------------------------------------------------------------------------
# Listing Models
# ---------------------------------------------------------------------------


class RepoListing(BaseModel):
    """The listing document written by a build."""

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    id: Optional[str] = None
    author: Optional[str] = None
    url: Optional[str] = None
    packages: List[PackageManifest] = Field(default_factory=list)


class PublishedPackage(BaseModel):
    """
    An entry of a previously published listing.

    Only its url is read; every other field is accepted as-is.
    """

    model_config = ConfigDict(extra="allow")

    url: Optional[Any] = None


class PublishedListing(BaseModel):
    """
    The listing already published, read only for the archive URLs it holds.
    """

    model_config = ConfigDict(extra="ignore")

    packages: List[PublishedPackage] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _flatten_packages(cls, data: Any) -> Any:
        """
        Accept the ecosystem's keyed layout,
        ``{"packages": {"<id>": {"versions": {"<version>": {...}}}}}``,
        as well as a plain list, and keep only object entries.
        """
        if not isinstance(data, dict):
            return data

        packages = data.get("packages")
        entries: List[Any] = []
        if isinstance(packages, list):
            entries = packages
        elif isinstance(packages, dict):
            for package in packages.values():
                versions = package.get("versions") if isinstance(package, dict) else None
                if isinstance(versions, dict):
                    entries.extend(versions.values())
        return {"packages": [entry for entry in entries if isinstance(entry, dict)]}

    def get_all_urls(self) -> set[str]:
        return {
            package.url
            for package in self.packages
            if isinstance(package.url, str) and package.url
        }
