"""Frontmatter parsing for textsite.

A content file may start with a YAML block fenced by two ``---`` marker
lines. Recognized keys become typed fields on Frontmatter; every other key is
kept in ``custom`` with its decoded YAML value so nothing the author wrote is
lost on the way to the templates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml

from .errors import FrontmatterError

FRONTMATTER_DELIMITER = "---"

_KNOWN_KEYS = ("title", "slug", "layout", "template", "date", "draft", "tags", "categories")


@dataclass(frozen=True)
class Frontmatter:
    """Metadata block of a content file.

    Attributes:
        title: Page title.
        slug: Explicit URL slug; the filename stem is used when absent.
        layout: Layout template name.
        template: Template name; wins over layout.
        date: Free-form date string, ISO dates sort and render best.
        draft: Draft flag; None when the key is absent.
        tags: Tag names.
        categories: Category names.
        custom: Every unrecognized key with its decoded YAML value.
    """

    title: str | None = None
    slug: str | None = None
    layout: str | None = None
    template: str | None = None
    date: str | None = None
    draft: bool | None = None
    tags: tuple[str, ...] | None = None
    categories: tuple[str, ...] | None = None
    custom: dict[str, Any] = field(default_factory=dict)


def _plain(value: Any) -> Any:
    """Convert YAML timestamps back to ISO strings, recursively."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(_plain(value))


def _optional_seq(path: Path, key: str, value: Any) -> tuple[str, ...] | None:
    if value is None:
        return None
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list):
        raise FrontmatterError(path, f"'{key}' must be a list")
    return tuple(str(_plain(item)) for item in value)


def parse_frontmatter(path: Path, block: str) -> Frontmatter:
    """Decode a frontmatter block into a Frontmatter instance.

    Args:
        path: Source file, for error messages.
        block: Text between the two delimiter lines.

    Returns:
        Frontmatter with typed fields and the catch-all mapping.

    Raises:
        FrontmatterError: If the block is not valid YAML or not a mapping.
    """
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        raise FrontmatterError(path, f"Invalid frontmatter: {exc}") from exc
    if data is None:
        return Frontmatter()
    if not isinstance(data, dict):
        raise FrontmatterError(path, "Frontmatter must be a mapping of keys to values")

    draft = data.get("draft")
    if draft is not None and not isinstance(draft, bool):
        raise FrontmatterError(path, "'draft' must be true or false")

    return Frontmatter(
        title=_optional_str(data.get("title")),
        slug=_optional_str(data.get("slug")),
        layout=_optional_str(data.get("layout")),
        template=_optional_str(data.get("template")),
        date=_optional_str(data.get("date")),
        draft=draft,
        tags=_optional_seq(path, "tags", data.get("tags")),
        categories=_optional_seq(path, "categories", data.get("categories")),
        custom={
            str(key): _plain(value)
            for key, value in data.items()
            if key not in _KNOWN_KEYS
        },
    )


def split_frontmatter(path: Path, text: str) -> tuple[Frontmatter, str]:
    """Split raw file text into frontmatter and body.

    Args:
        path: Source file, for error messages.
        text: Raw file contents.

    Returns:
        Tuple of (frontmatter, body). Without a leading delimiter the
        frontmatter is all defaults and the body is the whole text.

    Raises:
        FrontmatterError: If the delimiter occurs fewer than two times or the
            block cannot be decoded.
    """
    if not text.startswith(FRONTMATTER_DELIMITER):
        return Frontmatter(), text
    parts = text.split(FRONTMATTER_DELIMITER, 2)
    if len(parts) < 3:
        raise FrontmatterError(path, "Invalid frontmatter format: missing closing delimiter")
    frontmatter = parse_frontmatter(path, parts[1].strip())
    return frontmatter, parts[2].lstrip()
