"""
HTTP clients shared by every network call of a build.

Clients are created once per run by ``open_clients`` and closed when the
run ends; nothing is cached at module level.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Dict

import httpx

from listing_builder.core.settings import (
    API_USER_AGENT,
    DOWNLOAD_USER_AGENT,
    BuildSettings,
)

logger = logging.getLogger(__name__)


@dataclass
class BuildClients:
    http: httpx.AsyncClient
    github: httpx.AsyncClient


def create_http_client(settings: BuildSettings) -> httpx.AsyncClient:
    """Client used for archive downloads and the existing listing."""
    return httpx.AsyncClient(
        headers={"User-Agent": DOWNLOAD_USER_AGENT},
        timeout=settings.timeout,
        follow_redirects=True,
    )


def create_github_client(settings: BuildSettings) -> httpx.AsyncClient:
    """Client for the GitHub REST API, authenticated on server builds."""
    headers: Dict[str, str] = {
        "User-Agent": API_USER_AGENT,
        "Accept": "application/vnd.github+json",
    }
    if settings.auth_token:
        headers["Authorization"] = f"Bearer {settings.auth_token}"
    return httpx.AsyncClient(
        base_url=settings.github_api_url,
        headers=headers,
        timeout=settings.timeout,
        follow_redirects=True,
    )


@asynccontextmanager
async def open_clients(settings: BuildSettings) -> AsyncIterator[BuildClients]:
    http = create_http_client(settings)
    github = create_github_client(settings)
    try:
        yield BuildClients(http=http, github=github)
    finally:
        await github.aclose()
        await http.aclose()
        logger.debug("HTTP clients closed")
