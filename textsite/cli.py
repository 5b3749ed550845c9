"""Command-line interface for textsite.

This module defines the CLI commands using the Click framework.

Commands:
- build: Build the site, optionally watching for changes.
- clean: Remove the output directory.
- validate: Check the configuration file.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import NoReturn

import click

from . import __version__
from .config import DEFAULT_CONFIG_FILE, SiteConfig, load_config
from .errors import SiteError

config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=DEFAULT_CONFIG_FILE,
    show_default=True,
    help="Path to the configuration file",
)


def _fail(exc: Exception) -> NoReturn:
    click.echo(click.style(f"Error: {exc}", fg="red", bold=True), err=True)
    raise SystemExit(1)


def _load(config_path: Path) -> SiteConfig:
    try:
        return load_config(config_path)
    except (SiteError, OSError) as exc:
        _fail(exc)


@click.group()
@click.version_option(version=__version__, prog_name="textsite")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def cli(verbose: bool):
    """textsite: build static sites from plain-text files."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option("--clean", is_flag=True, help="Clean output directory before building")
@click.option("--watch", "-w", is_flag=True, help="Watch for changes and rebuild")
@click.option("--minify", "-m", is_flag=True, help="Minify HTML output")
@click.option("--drafts", "-d", is_flag=True, help="Include draft content")
@config_option
def build(clean: bool, watch: bool, minify: bool, drafts: bool, config_path: Path):
    """Build the static site."""
    from .build import build_site

    def run_build() -> None:
        # Each call reloads the config and builds a fresh orchestrator, so
        # watch-mode rebuilds pick up template edits.
        config = load_config(config_path).with_overrides(
            clean=clean or None, minify=minify or None, drafts=drafts or None
        )
        result = build_site(config)
        click.echo(f"Built {len(result.pages)} pages into {result.output_dir}")

    config = _load(config_path)
    try:
        run_build()
    except (SiteError, OSError) as exc:
        if not watch:
            _fail(exc)
        click.echo(click.style(f"Build failed: {exc}", fg="red"), err=True)

    if watch:
        from .watcher import ChangeWatcher

        watcher = ChangeWatcher(ignored=[config.output_dir])
        watcher.watch(config.content_dir)
        watcher.watch(config.template_dir)
        watcher.watch(config_path)
        click.echo("Watching for changes... (Press Ctrl+C to stop)")
        try:
            watcher.run(run_build)
        except KeyboardInterrupt:
            watcher.stop()


@cli.command()
@config_option
def clean(config_path: Path):
    """Remove the output directory."""
    config = _load(config_path)
    output_dir = config.output_dir
    if output_dir.exists():
        shutil.rmtree(output_dir)
        click.echo(f"Cleaned output directory: {output_dir}")
    else:
        click.echo(f"Output directory does not exist: {output_dir}")


@cli.command()
@config_option
def validate(config_path: Path):
    """Validate the configuration file."""
    config = _load(config_path)
    click.echo("Configuration is valid:")
    click.echo(f"  Version: {config.version}")
    click.echo(f"  Title: {config.title}")
    click.echo(f"  Output directory: {config.build.output_dir}")
    click.echo(f"  Content directory: {config.content.dir}")
    if config.build.strict:
        click.echo("  Strict mode: enabled")


def main():
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
