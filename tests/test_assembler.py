"""Tests for assembling a listing from candidate URLs."""

from typing import Dict, List, Set

import pytest
import respx
from httpx import Response

from conftest import make_manifest, make_zip
from listing_builder.domain.errors import (
    ArtifactFetchFailure,
    RepositoryNotFound,
    RepositoryReferenceMalformed,
)
from listing_builder.domain.models import Author, ListingSource, PackageInfo, PackageManifest
from listing_builder.domain.results import Outcome
from listing_builder.services.artifact_validator import ArtifactValidator
from listing_builder.services.assembler import ListingAssembler
from listing_builder.services.existing_listing import ExistingListingFetcher
from listing_builder.services.github_releases import ReleaseUrlResolver

pytestmark = pytest.mark.unit


class StubFetcher:
    def __init__(self, known: Set[str]):
        self.known = known
        self.requested = []

    async def fetch_known_urls(self, url):
        self.requested.append(url)
        return set(self.known)


class StubResolver:
    def __init__(self, outcomes: Dict[str, Outcome]):
        self.outcomes = outcomes
        self.resolved: List[str] = []

    async def resolve(self, owner_slash_name):
        self.resolved.append(owner_slash_name)
        return self.outcomes[owner_slash_name]


class StubValidator:
    def __init__(self, outcomes: Dict[str, Outcome]):
        self.outcomes = outcomes
        self.validated: List[str] = []

    async def validate(self, url):
        self.validated.append(url)
        return self.outcomes[url]


def ok(url: str, package_id: str) -> Outcome:
    return Outcome.success(PackageManifest(id=package_id, name=package_id, version="1.0.0", url=url))


def source(releases=(), repos=()) -> ListingSource:
    return ListingSource(
        id="com.acme.listing",
        name="Acme Listing",
        url="https://acme.github.io/listing/index.json",
        author=Author(name="Acme", email="hi@acme.dev"),
        packages=[PackageInfo(releases=list(releases))],
        github_repos=list(repos),
    )


@pytest.mark.asyncio
async def test_explicit_releases_come_before_repo_assets():
    validator = StubValidator(
        {
            "https://x/explicit.zip": ok("https://x/explicit.zip", "com.x.explicit"),
            "https://gh/one.zip": ok("https://gh/one.zip", "com.x.one"),
            "https://gh/two.zip": ok("https://gh/two.zip", "com.x.two"),
        }
    )
    resolver = StubResolver(
        {
            "acme/one": Outcome.success(["https://gh/one.zip"]),
            "acme/two": Outcome.success(["https://gh/two.zip"]),
        }
    )
    assembler = ListingAssembler(StubFetcher(set()), resolver, validator)

    listing = await assembler.assemble(source(["https://x/explicit.zip"], ["acme/one", "acme/two"]))

    assert [p.id for p in listing.packages] == ["com.x.explicit", "com.x.one", "com.x.two"]
    assert (listing.name, listing.id, listing.author, listing.url) == (
        "Acme Listing",
        "com.acme.listing",
        "Acme",
        "https://acme.github.io/listing/index.json",
    )


@pytest.mark.asyncio
async def test_known_urls_are_never_validated():
    validator = StubValidator({"https://x/v.zip": ok("https://x/v.zip", "com.x.v")})
    fetcher = StubFetcher({"https://x/u.zip"})
    assembler = ListingAssembler(
        fetcher, StubResolver({}), validator, current_listing_url="https://acme.github.io/listing/index.json"
    )

    listing = await assembler.assemble(source(["https://x/u.zip", "https://x/v.zip"]))

    assert validator.validated == ["https://x/v.zip"]
    assert [p.url for p in listing.packages] == ["https://x/v.zip"]
    assert fetcher.requested == ["https://acme.github.io/listing/index.json"]


@pytest.mark.asyncio
async def test_dedup_is_case_sensitive():
    validator = StubValidator({"https://x/U.zip": ok("https://x/U.zip", "com.x.u")})
    assembler = ListingAssembler(StubFetcher({"https://x/u.zip"}), StubResolver({}), validator)

    listing = await assembler.assemble(source(["https://x/U.zip"]))

    assert validator.validated == ["https://x/U.zip"]
    assert len(listing.packages) == 1


@pytest.mark.asyncio
async def test_skips_contribute_nothing():
    validator = StubValidator(
        {
            "https://x/empty.zip": Outcome.skip("no package.json"),
            "https://x/good.zip": ok("https://x/good.zip", "com.x.good"),
        }
    )
    resolver = StubResolver({"acme/quiet": Outcome.skip("no releases")})
    assembler = ListingAssembler(StubFetcher(set()), resolver, validator)

    listing = await assembler.assemble(source(["https://x/empty.zip", "https://x/good.zip"], ["acme/quiet"]))

    assert [p.id for p in listing.packages] == ["com.x.good"]


@pytest.mark.asyncio
async def test_repeated_candidate_is_validated_once():
    validator = StubValidator({"https://x/a.zip": ok("https://x/a.zip", "com.x.a")})
    assembler = ListingAssembler(StubFetcher(set()), StubResolver({}), validator)

    listing = await assembler.assemble(source(["https://x/a.zip", "https://x/a.zip"]))

    assert validator.validated == ["https://x/a.zip"]
    assert len(listing.packages) == 1


@pytest.mark.asyncio
async def test_fetch_failure_aborts_remaining_candidates():
    validator = StubValidator(
        {
            "https://x/broken.zip": Outcome.fatal(ArtifactFetchFailure("https://x/broken.zip", 404)),
            "https://x/after.zip": ok("https://x/after.zip", "com.x.after"),
        }
    )
    assembler = ListingAssembler(StubFetcher(set()), StubResolver({}), validator)

    with pytest.raises(ArtifactFetchFailure):
        await assembler.assemble(source(["https://x/broken.zip", "https://x/after.zip"]))

    assert validator.validated == ["https://x/broken.zip"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [RepositoryReferenceMalformed("acme"), RepositoryNotFound("acme", "ghost")],
)
async def test_unresolvable_repo_aborts_before_validation(error):
    validator = StubValidator({})
    resolver = StubResolver({"bad": Outcome.fatal(error)})
    assembler = ListingAssembler(StubFetcher(set()), resolver, validator)

    with pytest.raises(type(error)):
        await assembler.assemble(source(["https://x/a.zip"], ["bad"]))

    assert validator.validated == []


@pytest.mark.asyncio
@respx.mock
async def test_two_releases_end_to_end(http_client, github_client):
    first = make_zip(make_manifest("com.acme.widget", "2.0.0"))
    second = make_zip(make_manifest("com.acme.widget", "1.0.0"))
    respx.get("https://api.github.com/repos/acme/widget").mock(return_value=Response(200, json={}))
    respx.get("https://api.github.com/repos/acme/widget/releases").mock(
        return_value=Response(
            200,
            json=[
                {"assets": [{"name": "widget-2.0.0.zip", "browser_download_url": "https://dl/widget-2.0.0.zip"}]},
                {"assets": [{"name": "widget-1.0.0.zip", "browser_download_url": "https://dl/widget-1.0.0.zip"}]},
            ],
        )
    )
    respx.get("https://dl/widget-2.0.0.zip").mock(return_value=Response(200, content=first))
    respx.get("https://dl/widget-1.0.0.zip").mock(return_value=Response(200, content=second))

    assembler = ListingAssembler(
        ExistingListingFetcher(http_client),
        ReleaseUrlResolver(github_client),
        ArtifactValidator(http_client),
    )
    listing = await assembler.assemble(source(repos=["acme/widget"]))

    assert [(p.version, p.url) for p in listing.packages] == [
        ("2.0.0", "https://dl/widget-2.0.0.zip"),
        ("1.0.0", "https://dl/widget-1.0.0.zip"),
    ]
