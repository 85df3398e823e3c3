"""
Resolve GitHub repositories into the zip assets attached to their releases.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

import httpx

from listing_builder.domain.errors import (
    ListingBuildError,
    RepositoryNotFound,
    RepositoryReferenceMalformed,
)
from listing_builder.domain.listing_utils import split_repo_reference
from listing_builder.domain.results import Outcome

logger = logging.getLogger(__name__)

RELEASES_PER_PAGE = 100
ZIP_SUFFIX = ".zip"


def read_json(response: httpx.Response, what: str) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise ListingBuildError(f"GitHub returned an unreadable {what}: {e}") from e


class ReleaseUrlResolver:
    """
    Lists the zip assets of every release of a GitHub repository.

    URLs come back in the order the API lists releases (newest first),
    and within a release in asset order. That order becomes the listing order.
    """

    def __init__(self, github: httpx.AsyncClient, per_page: int = RELEASES_PER_PAGE):
        self.github = github
        self.per_page = per_page

    async def get_repository(self, owner: str, name: str) -> Dict[str, Any]:
        response = await self.github.get(f"/repos/{owner}/{name}")
        if response.status_code == 404:
            raise RepositoryNotFound(owner, name)
        if not response.is_success:
            raise ListingBuildError(
                f"Could not get remote repo {owner}/{name} (HTTP {response.status_code})"
            )
        return read_json(response, f"repository for {owner}/{name}")

    async def get_all_releases(self, owner: str, name: str) -> List[Dict[str, Any]]:
        releases: List[Dict[str, Any]] = []
        page = 1
        while True:
            response = await self.github.get(
                f"/repos/{owner}/{name}/releases",
                params={"per_page": self.per_page, "page": page},
            )
            if not response.is_success:
                raise ListingBuildError(
                    f"Could not list releases of {owner}/{name} (HTTP {response.status_code})"
                )
            batch = read_json(response, f"release list for {owner}/{name}") or []
            if not isinstance(batch, list):
                raise ListingBuildError(f"Unexpected release list for {owner}/{name}")
            releases.extend(batch)
            if len(batch) < self.per_page:
                return releases
            page += 1

    async def resolve(self, owner_slash_name: str) -> Outcome[List[str]]:
        reference = split_repo_reference(owner_slash_name)
        if reference is None:
            logger.critical(
                f"Could not get owner and repository from included repo info {owner_slash_name!r}"
            )
            return Outcome.fatal(RepositoryReferenceMalformed(owner_slash_name))
        owner, name = reference

        try:
            await self.get_repository(owner, name)
            releases = await self.get_all_releases(owner, name)
        except ListingBuildError as e:
            logger.error(str(e))
            return Outcome.fatal(e)
        except httpx.HTTPError as e:
            logger.error(f"Request to GitHub failed for {owner}/{name}: {e}")
            return Outcome.fatal(ListingBuildError(f"Request to GitHub failed for {owner}/{name}: {e}"))

        if not releases:
            logger.info(f"Found no releases for {owner}/{name}")
            return Outcome.skip(f"no releases for {owner}/{name}")

        urls: List[str] = []
        for release in releases:
            if not isinstance(release, dict):
                continue
            for asset in release.get("assets") or []:
                if not isinstance(asset, dict):
                    continue
                asset_name = asset.get("name") or ""
                download_url = asset.get("browser_download_url")
                if asset_name.endswith(ZIP_SUFFIX) and download_url:
                    urls.append(download_url)

        logger.info(f"Found {len(urls)} zip assets in {len(releases)} releases of {owner}/{name}")
        return Outcome.success(urls)
