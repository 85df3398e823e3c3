"""
Persist a built listing as index.json.
"""
from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path

import aiofiles

from listing_builder.core.settings import PACKAGE_LISTING_PUBLISH_FILENAME
from listing_builder.domain.listing_utils import strip_nulls
from listing_builder.domain.models import RepoListing

logger = logging.getLogger(__name__)


def serialize_listing(listing: RepoListing) -> str:
    """
    Render the listing as indented JSON with every null field dropped.

    Field order is the model's declaration order; extra manifest fields
    follow in the order they appeared in the archive's manifest.
    """
    payload = strip_nulls(listing.model_dump(mode="json"))
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def ensure_clean_directory(directory: Path) -> None:
    """Create ``directory`` if needed and remove everything inside it."""
    directory.mkdir(parents=True, exist_ok=True)
    for child in directory.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()


class ListingWriter:
    def __init__(self, filename: str = PACKAGE_LISTING_PUBLISH_FILENAME):
        self.filename = filename

    async def save(self, listing: RepoListing, directory: Path, clean: bool = False) -> Path:
        """
        Write ``listing`` into ``directory``.

        Server builds publish into the source checkout itself, so only
        local builds (``clean=True``) wipe the directory first.
        """
        directory = Path(directory)
        if clean:
            ensure_clean_directory(directory)
        else:
            directory.mkdir(parents=True, exist_ok=True)

        save_path = directory / self.filename
        async with aiofiles.open(save_path, "w", encoding="utf-8") as f:
            await f.write(serialize_listing(listing))

        logger.debug(f"Wrote {len(listing.packages)} packages to {save_path}")
        return save_path
