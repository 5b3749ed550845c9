"""Artifact generation for textsite.

This module produces the files written next to the rendered pages: the
sitemap, the RSS feed, robots.txt and the build metadata document. Every
generator needs the configured base URL except the build metadata, and a
missing base URL is a configuration error rather than a silent skip.

Classes:
    ArtifactGenerator: Abstract base class for artifact generators.
    SitemapGenerator: Generates sitemap.xml.
    RSSGenerator: Generates feed.xml (RSS 2.0).
    RobotsGenerator: Generates robots.txt.
    BuildInfoGenerator: Generates build-info.json.
    ArtifactRegistry: Runs the generators a build has enabled.

Functions:
    create_artifact_registry: Create a registry from configuration flags.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from datetime import datetime, time, timezone
from pathlib import Path

from . import __version__
from .config import SiteConfig
from .content import Content
from .helpers import parse_iso_date
from .html_utils import escape_html, join_root_url

logger = logging.getLogger(__name__)

GENERATOR_NAME = "textsite"
FEED_ITEM_LIMIT = 10
FEED_DESCRIPTION_LENGTH = 200
RFC822_FORMAT = "%a, %d %b %Y %H:%M:%S +0000"


def published(pages: Iterable[Content]) -> list[Content]:
    """Return the pages not flagged as drafts, preserving order."""
    return [page for page in pages if page.frontmatter.draft is not True]


def rfc822(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime(RFC822_FORMAT)


class ArtifactGenerator(ABC):
    """Abstract base class for artifact generators.

    Subclasses implement one output file each.

    Attributes:
        config: Site configuration.
        build_time: Timestamp of the build being written.
    """

    def __init__(self, config: SiteConfig, build_time: datetime):
        self.config = config
        self.build_time = build_time

    @property
    @abstractmethod
    def filename(self) -> str:
        """Return the output filename, such as 'sitemap.xml'."""
        ...

    @abstractmethod
    def generate(self, pages: Sequence[Content]) -> str:
        """Generate the artifact content.

        Args:
            pages: Rendered pages in build order.

        Returns:
            File content.

        Raises:
            ConfigError: If a required setting is missing.
        """
        ...

    def write(self, output_dir: Path, pages: Sequence[Content]) -> Path:
        """Generate and write the artifact.

        Args:
            output_dir: Output root directory.
            pages: Rendered pages in build order.

        Returns:
            Path of the written file.
        """
        content = self.generate(pages)
        output_path = output_dir / self.filename
        output_path.write_text(content, encoding="utf-8")
        logger.info("Generated: %s", self.filename)
        return output_path

    def page_url(self, base_url: str, page: Content) -> str:
        return join_root_url(base_url, page.url)


class SitemapGenerator(ArtifactGenerator):
    """Generates sitemap.xml following the sitemaps.org protocol."""

    @property
    def filename(self) -> str:
        return "sitemap.xml"

    def generate(self, pages: Sequence[Content]) -> str:
        base_url = self.config.require_base_url("sitemap")
        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
        ]
        for page in published(pages):
            lines.append("  <url>")
            lines.append(f"    <loc>{escape_html(self.page_url(base_url, page))}</loc>")
            lastmod = parse_iso_date(page.frontmatter.date or "")
            if lastmod is not None:
                lines.append(f"    <lastmod>{lastmod.isoformat()}</lastmod>")
            lines.append("  </url>")
        lines.append("</urlset>")
        return "\n".join(lines)


class RSSGenerator(ArtifactGenerator):
    """Generates an RSS 2.0 feed of the newest pages.

    Channel metadata comes from the configuration; items follow build order,
    which is already newest first.
    """

    @property
    def filename(self) -> str:
        return "feed.xml"

    def generate(self, pages: Sequence[Content]) -> str:
        base_url = self.config.require_base_url("feed")
        feed = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<rss version="2.0">',
            "  <channel>",
            f"    <title>{escape_html(self.config.title)}</title>",
        ]
        if self.config.description:
            feed.append(f"    <description>{escape_html(self.config.description)}</description>")
        feed.append(f"    <link>{escape_html(base_url)}/</link>")
        feed.append(f"    <lastBuildDate>{rfc822(self.build_time)}</lastBuildDate>")
        for page in published(pages)[:FEED_ITEM_LIMIT]:
            feed.append("    <item>")
            feed.append(f"      <title>{escape_html(page.title)}</title>")
            feed.append(f"      <link>{escape_html(self.page_url(base_url, page))}</link>")
            day = parse_iso_date(page.frontmatter.date or "")
            if day is not None:
                published_at = datetime.combine(day, time.min, tzinfo=timezone.utc)
                feed.append(f"      <pubDate>{rfc822(published_at)}</pubDate>")
            # Slicing a str counts code points, never splitting a character.
            description = page.body[:FEED_DESCRIPTION_LENGTH]
            feed.append(f"      <description>{escape_html(description)}</description>")
            feed.append("    </item>")
        feed.append("  </channel>")
        feed.append("</rss>")
        return "\n".join(feed)


class RobotsGenerator(ArtifactGenerator):
    """Generates robots.txt allowing everything and pointing at the sitemap."""

    @property
    def filename(self) -> str:
        return "robots.txt"

    def generate(self, pages: Sequence[Content]) -> str:
        base_url = self.config.require_base_url("robots.txt")
        return f"User-agent: *\nAllow: /\n\nSitemap: {base_url}/sitemap.xml"


class BuildInfoGenerator(ArtifactGenerator):
    """Generates build-info.json describing the build."""

    @property
    def filename(self) -> str:
        return "build-info.json"

    def generate(self, pages: Sequence[Content]) -> str:
        info = {
            "generator": GENERATOR_NAME,
            "version": __version__,
            "build_time": self.build_time.isoformat(),
            "config_version": self.config.version,
            "pages_count": len(pages),
        }
        return json.dumps(info, indent=2)


class ArtifactRegistry:
    """Ordered list of generators run after all pages are written.

    Attributes:
        _generators: Registered generators, run in registration order.
    """

    def __init__(self) -> None:
        self._generators: list[ArtifactGenerator] = []

    def register(self, generator: ArtifactGenerator) -> None:
        self._generators.append(generator)

    @property
    def filenames(self) -> list[str]:
        return [generator.filename for generator in self._generators]

    def generate_all(self, output_dir: Path, pages: Iterable[Content]) -> list[Path]:
        """Write every registered artifact.

        Args:
            output_dir: Output root directory.
            pages: Rendered pages in build order.

        Returns:
            Paths of the written files.
        """
        pages_list = list(pages)
        return [generator.write(output_dir, pages_list) for generator in self._generators]


def create_artifact_registry(config: SiteConfig, build_time: datetime) -> ArtifactRegistry:
    """Create a registry for the artifacts enabled in configuration.

    Sitemap, robots.txt and feed follow build.generate; build metadata is
    always written last.
    """
    registry = ArtifactRegistry()
    generate = config.build.generate
    if generate.sitemap:
        registry.register(SitemapGenerator(config, build_time))
    if generate.robots:
        registry.register(RobotsGenerator(config, build_time))
    if generate.feed:
        registry.register(RSSGenerator(config, build_time))
    registry.register(BuildInfoGenerator(config, build_time))
    return registry
