from typing import Any, Optional, Tuple


def strip_nulls(value: Any) -> Any:
    """
    Recursively remove keys with value None from dictionaries.

    Lists are preserved, but their elements are also cleaned.
    """
    if isinstance(value, dict):
        return {k: strip_nulls(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [strip_nulls(v) for v in value]
    return value


def split_repo_reference(owner_slash_name: str) -> Optional[Tuple[str, str]]:
    """
    Split an 'owner/name' repository reference.

    Returns None unless the reference has exactly two non-empty parts.
    """
    parts = (owner_slash_name or "").strip().split("/")
    if len(parts) != 2:
        return None
    owner, name = parts[0].strip(), parts[1].strip()
    if not owner or not name:
        return None
    return owner, name


def github_pages_listing_url(owner: str, repository: str, filename: str) -> str:
    """
    Build the GitHub Pages URL a listing is published at.

    ``repository`` may be given as 'owner/name' (as CI exposes it) or as the bare name.
    """
    repo_name = repository.split("/")[-1]
    return f"https://{owner}.github.io/{repo_name}/{filename}"
