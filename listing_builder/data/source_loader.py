"""
Load the listing-source document that declares what goes into a listing.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from listing_builder.domain.errors import InvalidSource, SourceNotFound
from listing_builder.domain.models import ListingSource

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}


def _parse_document(path: Path, text: str):
    if path.suffix.lower() in YAML_SUFFIXES:
        return yaml.safe_load(text)
    if not text.strip():
        return None
    return json.loads(text)


def load_listing_source(path: Path) -> ListingSource:
    """
    Read and validate the listing source at ``path``.

    Raises:
        SourceNotFound: the file does not exist.
        InvalidSource: the document is empty, malformed, or has no id.
    """
    path = Path(path)
    if not path.is_file():
        logger.error(f"Could not find Listing Source at {path}")
        raise SourceNotFound(path)

    try:
        raw = _parse_document(path, path.read_text(encoding="utf-8-sig"))
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        logger.error(f"Failed to parse Listing Source {path}: {e}")
        raise InvalidSource(f"Fail to get Listing Source: {e}") from e

    if raw is None:
        logger.error("Fail to get Listing Source")
        raise InvalidSource("Fail to get Listing Source.")
    if not isinstance(raw, dict):
        raise InvalidSource(f"Listing Source at {path} must be an object, got {type(raw).__name__}")

    try:
        source = ListingSource.model_validate(raw)
    except ValidationError as e:
        logger.error(f"Listing Source {path} is not valid: {e}")
        raise InvalidSource(f"Listing Source at {path} is not valid: {e}") from e

    if not source.id or not source.id.strip():
        logger.error(f"You need a id for your list. Add a id on {path}")
        raise InvalidSource(f"You need a id for your list. Add a id on {path}.")

    logger.debug(
        f"Loaded Listing Source '{source.id}' with {len(source.release_urls())} release urls "
        f"and {len(source.github_repos)} GitHub repos"
    )
    return source
