"""Page rendering for textsite.

The Renderer merges one page's data with the build-wide GlobalContext,
executes the template the registry resolves for the page, and optionally
minifies the result.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .content import Content
from .minify import HtmlMinifier
from .templates import TemplateRegistry


@dataclass(frozen=True)
class PageSummary:
    """Lightweight page entry for templates that list pages."""

    title: str
    slug: str
    url: str
    date: str | None = None

    def as_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"title": self.title, "slug": self.slug, "url": self.url}
        if self.date is not None:
            data["date"] = self.date
        return data


@dataclass(frozen=True)
class GlobalContext:
    """Build-wide snapshot shared read-only by every page render.

    Attributes:
        config: Plain mapping of the site configuration.
        build_time: Timezone-aware timestamp captured once per build.
        pages: Summaries of the non-draft pages, in build order.
    """

    config: Mapping[str, Any]
    build_time: datetime
    pages: tuple[PageSummary, ...]

    @classmethod
    def create(
        cls,
        config: Mapping[str, Any],
        build_time: datetime,
        pages: list[Content],
    ) -> GlobalContext:
        summaries = tuple(
            PageSummary(
                title=page.title,
                slug=page.slug,
                url=page.url,
                date=page.frontmatter.date,
            )
            for page in pages
            if page.frontmatter.draft is not True
        )
        return cls(config=config, build_time=build_time, pages=summaries)

    def as_dict(self) -> dict[str, Any]:
        return {
            "config": self.config,
            "build_time": self.build_time.isoformat(),
            "pages": [summary.as_dict() for summary in self.pages],
        }


class Renderer:
    """Renders pages through a TemplateRegistry.

    Attributes:
        registry: Template registry used to resolve and execute templates.
        default_layout: Template used when a page names none.
        minify_html: Whether render output is minified.
    """

    def __init__(
        self,
        registry: TemplateRegistry,
        default_layout: str,
        minify_html: bool = False,
    ):
        self.registry = registry
        self.default_layout = default_layout
        self.minify_html = minify_html
        self._minifier = HtmlMinifier()

    def page_data(
        self,
        content: Content,
        context: GlobalContext,
        extra: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Build the template data for one page.

        Later sources win: body and scalar metadata, then custom frontmatter
        keys, then the global context, then caller-supplied keys.

        Args:
            content: Page being rendered.
            context: Build-wide context.
            extra: Page-specific keys such as ``current_url``.

        Returns:
            Template data dictionary.
        """
        data: dict[str, Any] = {"content": content.body}
        if content.frontmatter.title is not None:
            data["title"] = content.frontmatter.title
        if content.frontmatter.date is not None:
            data["date"] = content.frontmatter.date
        data.update(content.frontmatter.custom)
        data.update(context.as_dict())
        if extra:
            data.update(extra)
        return data

    def render_content(
        self,
        content: Content,
        context: GlobalContext,
        extra: Mapping[str, Any] | None = None,
    ) -> str:
        """Render a page with its resolved template.

        Raises:
            TemplateError: If the template cannot be rendered.
        """
        name = self.registry.resolve(content, self.default_layout)
        return self.registry.render(name, self.page_data(content, context, extra))

    def minify(self, markup: str) -> str:
        """Minify markup when HTML minification is enabled."""
        if not self.minify_html:
            return markup
        return self._minifier.minify(markup)
