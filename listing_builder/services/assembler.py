"""
Assemble a listing from its source: gather candidate archive URLs, skip the
ones already published, and validate the rest one at a time.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Set

from listing_builder.domain.models import ListingSource, PackageManifest, RepoListing
from listing_builder.services.artifact_validator import ArtifactValidator
from listing_builder.services.existing_listing import ExistingListingFetcher
from listing_builder.services.github_releases import ReleaseUrlResolver

logger = logging.getLogger(__name__)


class ListingAssembler:
    def __init__(
        self,
        fetcher: ExistingListingFetcher,
        resolver: ReleaseUrlResolver,
        validator: ArtifactValidator,
        current_listing_url: Optional[str] = None,
    ):
        self.fetcher = fetcher
        self.resolver = resolver
        self.validator = validator
        self.current_listing_url = current_listing_url

    async def collect_candidate_urls(self, source: ListingSource) -> List[str]:
        """
        Explicit release URLs in source order, followed by the zip assets of
        each GitHub repo in declared order.

        Raises the error of the first repo that cannot be resolved.
        """
        candidates: List[str] = list(source.release_urls())

        for owner_slash_name in source.github_repos:
            outcome = await self.resolver.resolve(owner_slash_name)
            urls = outcome.unwrap()
            if urls:
                candidates.extend(urls)

        return candidates

    async def assemble(self, source: ListingSource) -> RepoListing:
        """
        Build the listing for ``source``.

        Package order follows candidate order with skipped URLs removed.
        Any fatal outcome propagates as its ``ListingBuildError``.
        """
        known_urls: Set[str] = await self.fetcher.fetch_known_urls(self.current_listing_url)
        candidates = await self.collect_candidate_urls(source)

        packages: List[PackageManifest] = []
        seen: Set[str] = set()

        for url in candidates:
            logger.info(f"Looking at {url}")
            if url in known_urls:
                logger.info(f"Current listing already contains {url}, skipping")
                continue
            if url in seen:
                logger.info(f"{url} is listed more than once, skipping")
                continue
            seen.add(url)

            outcome = await self.validator.validate(url)
            manifest = outcome.unwrap()
            if manifest is None:
                logger.info(f"Could not find manifest in zip file {url}, skipping")
                continue

            logger.info(f"Found {manifest.id} ({manifest.name}) {manifest.version}, adding to listing")
            packages.append(manifest)

        logger.info("All packages prepared, generating Listing")
        return RepoListing(
            name=source.name,
            id=source.id,
            author=source.author.name,
            url=source.url,
            packages=packages,
        )
