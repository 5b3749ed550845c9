"""Content discovery and parsing for textsite.

This module finds content files on disk and turns each into a Content object
(frontmatter plus body text). It also owns the draft filter and the page
ordering used by every later build step.

Key classes:
- Content: Immutable parsed content file.
- ContentRepository: Discovers, parses and filters the content of a site.

Key functions:
- discover: Walk a directory for content files.
- parse_content: Parse one file into a Content.
- should_skip: Draft filter.
- sort_pages: Newest-first ordering by date string.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from .errors import FrontmatterError
from .frontmatter import Frontmatter, split_frontmatter

logger = logging.getLogger(__name__)

INDEX_SLUG = "index"


@dataclass(frozen=True)
class Content:
    """A parsed content file.

    Attributes:
        path: Path to the source file.
        frontmatter: Parsed metadata block.
        body: Text after the metadata block, or the whole file without one.
    """

    path: Path
    frontmatter: Frontmatter
    body: str

    @property
    def slug(self) -> str:
        """Declared slug, or the filename stem."""
        return self.frontmatter.slug or self.path.stem

    @property
    def title(self) -> str:
        """Declared title, or the filename stem."""
        return self.frontmatter.title or self.path.stem

    @property
    def url(self) -> str:
        """Root-relative URL with a trailing slash."""
        if self.slug == INDEX_SLUG:
            return "/"
        return f"/{self.slug}/"

    def output_path(self, base: Path) -> Path:
        """Return the index.html path this page is written to.

        Args:
            base: Output root directory.
        """
        if self.slug == INDEX_SLUG:
            return base / "index.html"
        return base / self.slug / "index.html"


def discover(
    root: Path,
    extensions: Iterable[str],
    ignore_patterns: Iterable[str],
) -> list[Path]:
    """Recursively find content files below a directory.

    Symlinks are followed. A file is kept when its extension is allowed and
    no ignore pattern occurs anywhere in its full path.

    Args:
        root: Directory to walk.
        extensions: Allowed extensions, with or without a leading dot.
        ignore_patterns: Substrings that exclude a path.

    Returns:
        Paths in filesystem traversal order.
    """
    allowed = {ext.lstrip(".") for ext in extensions}
    ignored = tuple(ignore_patterns)
    files: list[Path] = []
    for dirpath, _dirnames, filenames in os.walk(root, followlinks=True):
        for name in filenames:
            path = Path(dirpath) / name
            if path.suffix.lstrip(".") not in allowed:
                continue
            full = path.as_posix()
            if any(pattern in full for pattern in ignored):
                continue
            files.append(path)
    return files


def parse_content(path: Path) -> Content:
    """Read and parse a content file.

    Args:
        path: Path to the content file.

    Returns:
        Content instance.

    Raises:
        FrontmatterError: If the file is not UTF-8 or its frontmatter block
            is malformed.
        OSError: If the file cannot be read.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise FrontmatterError(path, "File is not valid UTF-8") from exc
    frontmatter, body = split_frontmatter(path, text)
    return Content(path=path, frontmatter=frontmatter, body=body)


def should_skip(content: Content, show_drafts: bool) -> bool:
    """Return True when a page is an explicit draft and drafts are hidden."""
    return content.frontmatter.draft is True and not show_drafts


def sort_pages(pages: Iterable[Content]) -> list[Content]:
    """Sort pages newest first by their date string.

    The comparison is lexical, not calendar-aware. Pages without a date
    compare as the empty string and therefore end up last. Ties keep their
    discovery order.
    """
    return sorted(pages, key=lambda page: page.frontmatter.date or "", reverse=True)


class ContentRepository:
    """Discovers and parses the content files of a site.

    Attributes:
        root: Content root directory.
        extensions: Allowed file extensions.
        ignore_patterns: Path substrings that exclude files.
    """

    def __init__(
        self,
        root: Path,
        extensions: Sequence[str],
        ignore_patterns: Sequence[str],
    ):
        self.root = root
        self.extensions = tuple(extensions)
        self.ignore_patterns = tuple(ignore_patterns)

    def discover(self) -> list[Path]:
        return discover(self.root, self.extensions, self.ignore_patterns)

    def load(self, show_drafts: bool = False) -> list[Content]:
        """Parse every discovered file and drop skipped drafts.

        Args:
            show_drafts: Whether draft pages are kept.

        Returns:
            Parsed pages in discovery order.
        """
        pages: list[Content] = []
        for path in self.discover():
            content = parse_content(path)
            if should_skip(content, show_drafts):
                logger.debug("Skipping draft %s", path)
                continue
            pages.append(content)
        return pages
