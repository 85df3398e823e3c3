from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from listing_builder.domain.listing_utils import github_pages_listing_url

ROOT_ENV_VAR = "LISTING_BUILDER_ROOT"
SERVER_BUILD_ENV_VAR = "GITHUB_ACTIONS"
TOKEN_ENV_VAR = "GITHUB_TOKEN"
REPOSITORY_ENV_VAR = "GITHUB_REPOSITORY"
REPOSITORY_OWNER_ENV_VAR = "GITHUB_REPOSITORY_OWNER"

PACKAGE_MANIFEST_FILENAME = "package.json"
PACKAGE_LISTING_PUBLISH_FILENAME = "index.json"
DEFAULT_SOURCE_FILENAME = "source.json"

# Identifies downloads to hosts serving release archives.
DOWNLOAD_USER_AGENT = "VCCBootstrap/1.0"
API_USER_AGENT = "Package-Listing-Automation"
GITHUB_API_URL = "https://api.github.com"
REQUEST_TIMEOUT_SECONDS = 300.0


class BuildSettings(BaseModel):
    """
    Settings for a single listing build.

    Server builds (running under GitHub Actions) authenticate with the
    workflow token, publish into the checked-out source folder, and compare
    against the listing already published on GitHub Pages.
    """

    root_directory: Path = Field(default_factory=Path.cwd)
    is_server_build: bool = False
    github_token: Optional[str] = None
    repository: Optional[str] = Field(
        default=None,
        description="'owner/name' of the repository the build runs for.",
    )
    repository_owner: Optional[str] = None

    list_publish_directory: Optional[Path] = Field(
        default=None,
        description="Directory to save index into. Defaults to '<root>/docs'.",
    )
    source_filename: str = DEFAULT_SOURCE_FILENAME
    source_folder: Optional[Path] = Field(
        default=None,
        description="Folder holding the listing source. Defaults to the parent of the root on "
        "server builds, and to a sibling 'package-index' checkout locally.",
    )
    current_listing_url_override: Optional[str] = None

    github_api_url: str = GITHUB_API_URL
    timeout: float = REQUEST_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, **overrides) -> "BuildSettings":
        env_root = os.environ.get(ROOT_ENV_VAR)
        values = {
            "root_directory": Path(env_root).expanduser() if env_root else Path.cwd(),
            "is_server_build": os.environ.get(SERVER_BUILD_ENV_VAR, "").lower() == "true",
            "github_token": os.environ.get(TOKEN_ENV_VAR) or None,
            "repository": os.environ.get(REPOSITORY_ENV_VAR) or None,
            "repository_owner": os.environ.get(REPOSITORY_OWNER_ENV_VAR) or None,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def publish_directory(self) -> Path:
        return self.list_publish_directory or self.root_directory / "docs"

    @property
    def listing_source_folder(self) -> Path:
        if self.source_folder is not None:
            return self.source_folder
        if self.is_server_build:
            return self.root_directory.parent
        return self.root_directory.parent / "package-index"

    @property
    def listing_source_path(self) -> Path:
        return self.listing_source_folder / self.source_filename

    @property
    def auth_token(self) -> Optional[str]:
        """Token used for requests; local builds never authenticate."""
        return self.github_token if self.is_server_build else None

    @property
    def current_listing_url(self) -> Optional[str]:
        """
        Where the currently published listing lives, typically
        https://{owner}.github.io/{repo}/index.json.
        """
        if self.current_listing_url_override:
            return self.current_listing_url_override
        if not self.repository:
            return None
        owner = self.repository_owner or self.repository.split("/")[0]
        return github_pages_listing_url(owner, self.repository, PACKAGE_LISTING_PUBLISH_FILENAME)
