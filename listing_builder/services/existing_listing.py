"""
Fetch the listing that is already published, so packages it contains can be skipped.
"""
from __future__ import annotations

import json
import logging
from typing import Optional, Set

import httpx
from pydantic import ValidationError

from listing_builder.domain.models import PublishedListing

logger = logging.getLogger(__name__)


class ExistingListingFetcher:
    """
    Downloads the published listing and reports the archive URLs it holds.

    The published listing is optional: any failure to download or read it
    means "nothing published yet" and every candidate gets validated.
    """

    def __init__(self, http: httpx.AsyncClient, token: Optional[str] = None):
        self.http = http
        self.token = token

    async def get_authenticated_string(self, url: str) -> Optional[str]:
        headers = {"Accept": "application/octet-stream"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = await self.http.get(url, headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"Could not download listing from {url}: {e}")
            return None

        if not response.is_success:
            logger.warning(f"Could not download listing from {url} (HTTP {response.status_code})")
            return None
        return response.text

    async def fetch_listing(self, url: Optional[str]) -> Optional[PublishedListing]:
        if not url:
            return None

        content = await self.get_authenticated_string(url)
        if not content or not content.strip():
            return None

        try:
            return PublishedListing.model_validate(json.loads(content))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Could not read existing listing at {url}: {e}")
            return None

    async def fetch_known_urls(self, url: Optional[str]) -> Set[str]:
        listing = await self.fetch_listing(url)
        if listing is None:
            logger.info("No existing listing found, all packages will be validated")
            return set()

        known = listing.get_all_urls()
        logger.info(f"Existing listing at {url} contains {len(known)} package urls")
        return known
