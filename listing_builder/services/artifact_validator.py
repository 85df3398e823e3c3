"""
Download a release archive and read the package manifest out of it.
"""
from __future__ import annotations

import asyncio
import hashlib
import io
import json
import logging
import zipfile
import zlib
from typing import Optional

import httpx
from pydantic import ValidationError

from listing_builder.core.settings import PACKAGE_MANIFEST_FILENAME, REQUEST_TIMEOUT_SECONDS
from listing_builder.domain.errors import ArtifactFetchFailure, InvalidArtifact
from listing_builder.domain.models import PackageManifest
from listing_builder.domain.results import Outcome

logger = logging.getLogger(__name__)

# Hosts that may receive the workflow token. Release assets on github.com
# redirect elsewhere; httpx drops Authorization on cross-origin redirects.
TOKEN_HOSTS = {"github.com", "api.github.com"}

# Raised by zipfile for entries it cannot decompress.
ZIP_READ_ERRORS = (zipfile.BadZipFile, RuntimeError, NotImplementedError, zlib.error, EOFError)


def get_file_from_zip(data: bytes, filename: str) -> Optional[bytes]:
    """
    Return the bytes of the entry named ``filename`` at the archive root,
    or None when the archive has no such entry.

    Raises:
        zipfile.BadZipFile: ``data`` is not a zip archive.
        RuntimeError, NotImplementedError, zlib.error: the entry cannot be
            decompressed (encrypted, unsupported method, corrupt data).
    """
    with zipfile.ZipFile(io.BytesIO(data), "r") as zip_ref:
        if filename not in zip_ref.namelist():
            return None
        return zip_ref.read(filename)


def get_hash_for_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class ArtifactValidator:
    """
    Validates release archives.

    A download that fails stops the build, since it points at a broken source.
    An archive without a manifest is only skipped.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        token: Optional[str] = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ):
        self.http = http
        self.token = token
        self.timeout = timeout

    def headers_for(self, url: str) -> dict:
        if self.token and httpx.URL(url).host in TOKEN_HOSTS:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    async def download(self, url: str) -> bytes:
        # httpx timeouts apply per phase; the whole download is capped here.
        try:
            response = await asyncio.wait_for(
                self.http.get(url, headers=self.headers_for(url)),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"Download of {url} did not finish within {self.timeout}s")
            raise ArtifactFetchFailure(url) from e
        except httpx.HTTPError as e:
            logger.error(f"Download of {url} failed: {e}")
            raise ArtifactFetchFailure(url) from e

        if not response.is_success:
            logger.error(f"Could not find valid zip file at {url} (HTTP {response.status_code})")
            raise ArtifactFetchFailure(url, response.status_code)
        return response.content

    async def validate(self, url: str) -> Outcome[PackageManifest]:
        try:
            data = await self.download(url)
        except ArtifactFetchFailure as e:
            return Outcome.fatal(e)

        try:
            manifest_bytes = get_file_from_zip(data, PACKAGE_MANIFEST_FILENAME)
        except ZIP_READ_ERRORS as e:
            logger.error(f"{url} is not a readable zip archive: {e}")
            return Outcome.fatal(InvalidArtifact(url, f"not a readable zip archive ({e})"))

        if manifest_bytes is None:
            return Outcome.skip(f"no {PACKAGE_MANIFEST_FILENAME} in {url}")

        try:
            raw = json.loads(manifest_bytes.decode("utf-8-sig"))
            manifest = PackageManifest.model_validate(raw)
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Could not read {PACKAGE_MANIFEST_FILENAME} in {url}: {e}")
            return Outcome.fatal(InvalidArtifact(url, f"unreadable {PACKAGE_MANIFEST_FILENAME} ({e})"))

        manifest.zipSHA256 = get_hash_for_bytes(data)
        # The listing always points at the archive that was actually hashed.
        manifest.url = url
        return Outcome.success(manifest)
