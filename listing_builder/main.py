"""
Command-line entry point for building a package listing.

Usage:
    listing-builder build-repo-listing --source-folder ../package-index
    listing-builder build-multi-package-listing
"""
import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer

from listing_builder.core.settings import DEFAULT_SOURCE_FILENAME, BuildSettings
from listing_builder.domain.errors import ListingBuildError
from listing_builder.services.build import build_repo_listing

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="listing-builder",
    help="Build a package listing (index.json) from a listing source and GitHub releases.",
    add_completion=False,
)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def run_build(settings: BuildSettings) -> Path:
    try:
        return asyncio.run(build_repo_listing(settings))
    except ListingBuildError as e:
        logger.error(f"Listing build failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command(name="build-repo-listing")
def build_repo_listing_command(
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", help="Directory to save index into (default: ./docs)."
    ),
    source_filename: str = typer.Option(
        DEFAULT_SOURCE_FILENAME, "--source-filename", help="Filename of source json."
    ),
    source_folder: Optional[Path] = typer.Option(
        None, "--source-folder", help="Path to Target Listing Root."
    ),
    current_listing_url: Optional[str] = typer.Option(
        None,
        "--current-listing-url",
        help="URL of the existing index.json, typically https://{owner}.github.io/{repo}/index.json.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    """Build index.json from the listing source.

    Examples:

        listing-builder build-repo-listing --source-folder ../package-index
    """
    configure_logging(verbose)
    settings = BuildSettings.from_env(
        list_publish_directory=output_dir,
        source_filename=source_filename,
        source_folder=source_folder,
        current_listing_url_override=current_listing_url,
    )
    save_path = run_build(settings)
    typer.echo(f"Saved Listing to {save_path}")


@app.command(name="build-multi-package-listing")
def build_multi_package_listing_command(
    output_dir: Optional[Path] = typer.Option(None, "--output-dir"),
    source_filename: str = typer.Option(DEFAULT_SOURCE_FILENAME, "--source-filename"),
    source_folder: Optional[Path] = typer.Option(None, "--source-folder"),
    current_listing_url: Optional[str] = typer.Option(None, "--current-listing-url"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Alias of build-repo-listing, kept so existing workflows keep working."""
    build_repo_listing_command(
        output_dir=output_dir,
        source_filename=source_filename,
        source_folder=source_folder,
        current_listing_url=current_listing_url,
        verbose=verbose,
    )


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
