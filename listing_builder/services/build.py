"""
The repo listing build target: load the source, assemble the listing and save it.
"""
from __future__ import annotations

import logging
from pathlib import Path

from listing_builder.core.clients import BuildClients, open_clients
from listing_builder.core.settings import BuildSettings
from listing_builder.data.source_loader import load_listing_source
from listing_builder.domain.models import ListingInfo
from listing_builder.services.artifact_validator import ArtifactValidator
from listing_builder.services.assembler import ListingAssembler
from listing_builder.services.existing_listing import ExistingListingFetcher
from listing_builder.services.github_releases import ReleaseUrlResolver
from listing_builder.storage.listing_writer import ListingWriter

logger = logging.getLogger(__name__)


def create_assembler(settings: BuildSettings, clients: BuildClients) -> ListingAssembler:
    token = settings.auth_token
    # The published listing is only consulted on server builds.
    current_listing_url = settings.current_listing_url if settings.is_server_build else None
    return ListingAssembler(
        fetcher=ExistingListingFetcher(clients.http, token=token),
        resolver=ReleaseUrlResolver(clients.github),
        validator=ArtifactValidator(clients.http, token=token),
        current_listing_url=current_listing_url,
    )


async def build_repo_listing(settings: BuildSettings, clients: BuildClients | None = None) -> Path:
    """
    Run the whole build and return the path of the saved index.json.

    Raises ``ListingBuildError`` on any fatal condition; nothing is written then.
    """
    source = load_listing_source(settings.listing_source_path)

    if clients is None:
        async with open_clients(settings) as owned_clients:
            listing = await create_assembler(settings, owned_clients).assemble(source)
    else:
        listing = await create_assembler(settings, clients).assemble(source)

    save_path = await ListingWriter().save(
        listing,
        settings.publish_directory,
        clean=not settings.is_server_build,
    )

    listing_info = ListingInfo.from_source(source)
    logger.info(f"Made listingInfo {listing_info.model_dump_json(by_alias=True, exclude_none=True)}")
    logger.info(f"Saved Listing to {save_path}")
    return save_path
