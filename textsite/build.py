"""Site building for textsite.

This module sequences one deterministic build pass: prepare the output
directory, load and order the content, render every page, copy static assets
and write the artifacts. The first failure aborts the build; files written by
earlier steps are left in place.

Key names:
- BuildOrchestrator: Runs build passes for one configuration.
- BuildResult: What a successful build produced.
- build_site: One-call convenience wrapper.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from .config import SiteConfig
from .content import Content, ContentRepository, sort_pages
from .errors import BuildError
from .feeds import create_artifact_registry
from .renderers import GlobalContext, Renderer
from .templates import STATIC_DIR, TemplateRegistry
from .utils import copy_tree, prepare_output_dir

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class BuildResult:
    """Result of a site build.

    Attributes:
        pages: Rendered pages in build order.
        output_dir: Directory the site was written to.
        build_time: Timestamp shared by every artifact of the build.
        written: Every file written, in write order.
    """

    pages: list[Content]
    output_dir: Path
    build_time: datetime
    written: list[Path] = field(default_factory=list)


class BuildOrchestrator:
    """Builds a site from one configuration.

    The template registry is loaded once, at construction, and reused by
    every build() call, so template edits need a new orchestrator.

    Attributes:
        config: Site configuration, including CLI overrides.
        registry: Loaded template registry.
        renderer: Page renderer.
        clock: Source of the per-build timestamp.
    """

    def __init__(
        self,
        config: SiteConfig,
        registry: TemplateRegistry | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.config = config
        self.registry = registry or TemplateRegistry.load(config.template_dir)
        self.renderer = Renderer(
            self.registry,
            default_layout=config.template.default_layout,
            minify_html=config.build.minify.html,
        )
        self.repository = ContentRepository(
            config.content_dir,
            extensions=config.content.extensions,
            ignore_patterns=config.content.ignore,
        )
        self.clock = clock

    def load_pages(self) -> list[Content]:
        """Discover, parse, filter and sort the site's pages.

        Raises:
            BuildError: If no page survives filtering.
            FrontmatterError: If a content file is malformed.
        """
        pages = self.repository.load(show_drafts=self.config.content.drafts)
        if not pages:
            raise BuildError(f"No content files found in {self.config.content_dir}")
        return sort_pages(pages)

    def build(self) -> BuildResult:
        """Run one full build pass.

        Returns:
            BuildResult describing the written site.

        Raises:
            SiteError: On content, template, configuration or build failures.
            OSError: On filesystem failures.
        """
        build_time = self.clock()
        output_dir = self.config.output_dir
        prepare_output_dir(output_dir, clean=self.config.build.clean_build)

        pages = self.load_pages()
        context = GlobalContext.create(self.config.as_dict(), build_time, pages)
        result = BuildResult(pages=pages, output_dir=output_dir, build_time=build_time)

        for page in pages:
            result.written.append(self._write_page(page, context, output_dir))

        static_dir = self.registry.directory / STATIC_DIR
        result.written.extend(copy_tree(static_dir, output_dir))

        artifacts = create_artifact_registry(self.config, build_time)
        result.written.extend(artifacts.generate_all(output_dir, pages))
        logger.info("Build completed at %s: %d pages", build_time.isoformat(), len(pages))
        return result

    def _write_page(self, page: Content, context: GlobalContext, output_dir: Path) -> Path:
        output_path = page.output_path(output_dir)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        extra = {"current_url": page.url, "slug": page.slug}
        html = self.renderer.render_content(page, context, extra)
        html = self.renderer.minify(html)
        output_path.write_text(html, encoding="utf-8")
        logger.info("Generated: %s", output_path)
        return output_path


def build_site(config: SiteConfig) -> BuildResult:
    """Build the site described by a configuration."""
    return BuildOrchestrator(config).build()
