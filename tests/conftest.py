"""Shared fixtures for listing builder tests."""

from __future__ import annotations

import io
import json
import zipfile
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
import pytest

from listing_builder.core.clients import BuildClients, create_github_client, create_http_client
from listing_builder.core.settings import BuildSettings


def make_zip(manifest: Optional[Dict[str, Any]] = None, extra_files: Optional[Dict[str, bytes]] = None) -> bytes:
    """Build a release archive in memory, with package.json at the root when given."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        if manifest is not None:
            zf.writestr("package.json", json.dumps(manifest))
        for name, content in (extra_files or {}).items():
            zf.writestr(name, content)
    return buffer.getvalue()


def make_manifest(package_id: str = "com.x.pkg", version: str = "1.0.0", **fields) -> Dict[str, Any]:
    manifest = {"id": package_id, "name": "X", "version": version}
    manifest.update(fields)
    return manifest


@pytest.fixture
def settings(tmp_path: Path) -> BuildSettings:
    """Local (non-server) build rooted in a temporary directory."""
    root = tmp_path / "builder"
    root.mkdir()
    return BuildSettings(
        root_directory=root,
        source_folder=tmp_path / "package-index",
    )


@pytest.fixture
def write_source(settings: BuildSettings):
    def _write(document: Dict[str, Any]) -> Path:
        path = settings.listing_source_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return _write


@pytest.fixture
async def http_client(settings: BuildSettings):
    client = create_http_client(settings)
    yield client
    await client.aclose()


@pytest.fixture
async def github_client(settings: BuildSettings):
    client = create_github_client(settings)
    yield client
    await client.aclose()


@pytest.fixture
def clients(http_client: httpx.AsyncClient, github_client: httpx.AsyncClient) -> BuildClients:
    return BuildClients(http=http_client, github=github_client)
