"""Template registry for textsite.

This module uses Jinja2 to compile the templates and partials of a template
directory. It materializes the bundled theme when essential templates are
missing, installs the fixed helper functions, and decides which template
renders a given page.

Key class:
- TemplateRegistry: Loads, resolves and renders named templates.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from jinja2 import Environment, TemplateNotFound
from jinja2 import TemplateError as JinjaTemplateError
from jinja2.loaders import BaseLoader

from .content import Content
from .errors import TemplateError
from .helpers import HELPERS

__all__ = ["BASE_TEMPLATE", "ESSENTIAL_TEMPLATES", "TemplateRegistry", "extract_theme"]

logger = logging.getLogger(__name__)

# Bundled theme shipped with the package
THEME_DIR = Path(__file__).parent / "theme"

BASE_TEMPLATE = "base.html"
ESSENTIAL_TEMPLATES = ("base.html", "_sidebar.html", "_content.html", "_footer.html")
STATIC_DIR = "static"
_STATIC_SUBDIRS = ("static/css", "static/js")
_MARKUP_SUFFIX = ".html"


def extract_theme(source: Path, dest: Path) -> list[Path]:
    """Copy the bundled theme into a template directory without overwriting.

    A file is written only when the destination does not exist yet; user
    edits to an existing file always survive.

    Args:
        source: Bundled theme directory.
        dest: Template directory to fill.

    Returns:
        Paths of the files that were created.
    """
    created: list[Path] = []
    for item in sorted(source.rglob("*")):
        target = dest / item.relative_to(source)
        if item.is_dir():
            target.mkdir(parents=True, exist_ok=True)
            continue
        if target.exists():
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(item, target)
        logger.info("Created template: %s", target)
        created.append(target)
    return created


class _RegistryLoader(BaseLoader):
    """Serves registered template and partial sources to Jinja2 includes."""

    def __init__(self, sources: Mapping[str, tuple[str, Path]]):
        self.sources = sources

    def get_source(self, environment: Environment, template: str):
        try:
            source, path = self.sources[template]
        except KeyError:
            raise TemplateNotFound(template) from None
        return source, str(path), lambda: True


class TemplateRegistry:
    """Named templates, partials and helpers for one template directory.

    Templates are keyed by their POSIX path relative to the directory
    (``base.html``, ``blog/post.html``). Partials are files whose name starts
    with an underscore and are keyed without it or the extension
    (``_footer.html`` becomes ``footer``); templates include them with
    ``{% include "footer" %}``.

    Attributes:
        directory: Template directory.
        env: Jinja2 environment holding the helpers.
        templates: Template name to compiled template.
        partials: Partial name to compiled template.
        helpers: Helper name to implementation.
    """

    def __init__(self, directory: Path):
        """Create an empty registry; call load() to populate it."""
        self.directory = directory
        self._sources: dict[str, tuple[str, Path]] = {}
        self.env = Environment(
            loader=_RegistryLoader(self._sources),
            autoescape=True,
            keep_trailing_newline=True,
        )
        self.templates: dict[str, Any] = {}
        self.partials: dict[str, Any] = {}
        self.helpers = dict(HELPERS)
        self._install_helpers()

    @classmethod
    def load(cls, directory: Path) -> TemplateRegistry:
        """Ensure the directory is usable and register everything in it.

        Args:
            directory: Template directory.

        Returns:
            Populated registry.

        Raises:
            TemplateError: If a template fails to compile.
        """
        registry = cls(directory)
        registry.ensure_templates()
        registry.register()
        return registry

    def _install_helpers(self) -> None:
        """Install helper functions as Jinja globals and filters."""
        for name, helper in self.helpers.items():
            self.env.globals[name] = helper
            self.env.filters[name] = helper

    def ensure_templates(self) -> None:
        """Extract the bundled theme when an essential template is missing."""
        self.directory.mkdir(parents=True, exist_ok=True)
        missing = [
            name for name in ESSENTIAL_TEMPLATES if not (self.directory / name).exists()
        ]
        if missing:
            logger.info("Missing templates %s; extracting bundled theme", ", ".join(missing))
            extract_theme(THEME_DIR, self.directory)
        for subdir in _STATIC_SUBDIRS:
            (self.directory / subdir).mkdir(parents=True, exist_ok=True)

    def register(self) -> None:
        """Compile every markup file in the directory.

        The static asset subtree is skipped.

        Raises:
            TemplateError: If a template has a syntax error.
        """
        for dirpath, dirnames, filenames in os.walk(self.directory):
            current = Path(dirpath)
            if current == self.directory and STATIC_DIR in dirnames:
                dirnames.remove(STATIC_DIR)
            dirnames.sort()
            for filename in sorted(filenames):
                if not filename.endswith(_MARKUP_SUFFIX):
                    continue
                path = current / filename
                source = path.read_text(encoding="utf-8")
                if filename.startswith("_"):
                    name = filename[1 : -len(_MARKUP_SUFFIX)]
                    self._sources[name] = (source, path)
                    self.partials[name] = self._compile(name, source)
                    logger.info("Registered partial: %s", name)
                else:
                    name = path.relative_to(self.directory).as_posix()
                    self._sources[name] = (source, path)
                    self.templates[name] = self._compile(name, source)
                    logger.info("Registered template: %s", name)

    def _compile(self, name: str, source: str):
        try:
            return self.env.from_string(source)
        except JinjaTemplateError as exc:
            lineno = getattr(exc, "lineno", None)
            where = f" on line {lineno}" if lineno else ""
            raise TemplateError(f"Syntax error{where}: {exc}", name, exc) from exc

    def has_template(self, name: str) -> bool:
        return name in self.templates

    def resolve(self, content: Content, default_layout: str) -> str:
        """Choose the template that renders a page.

        The page's template field wins, then its layout field, then the
        configured default. Unregistered names fall back to base.html.

        Args:
            content: Page being rendered.
            default_layout: Configured default layout name.

        Returns:
            Template name.
        """
        name = content.frontmatter.template or content.frontmatter.layout or default_layout
        if self.has_template(name):
            return name
        if name != BASE_TEMPLATE:
            logger.debug("Template %s not registered; using %s", name, BASE_TEMPLATE)
        return BASE_TEMPLATE

    def render(self, name: str, data: Mapping[str, Any]) -> str:
        """Render a registered template.

        Args:
            name: Template name.
            data: Template context.

        Returns:
            Rendered markup.

        Raises:
            TemplateError: If the template is unknown or rendering fails.
        """
        template = self.templates.get(name)
        if template is None:
            raise TemplateError("Template not registered", name)
        try:
            return template.render(data)
        except TemplateNotFound as exc:
            raise TemplateError(f"Partial not registered: {exc.name}", name, exc) from exc
        except JinjaTemplateError as exc:
            raise TemplateError(f"Render failed: {exc}", name, exc) from exc
