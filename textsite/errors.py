"""Error types raised by textsite.

Every failure that aborts a build surfaces as a subclass of SiteError, except
plain I/O problems which propagate as the usual OSError subclasses.
"""

from __future__ import annotations

from pathlib import Path


class SiteError(Exception):
    """Base class for all textsite errors.

    Attributes:
        message: Human-readable error message.
    """

    label = "Site error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.label}: {self.message}"


class ConfigError(SiteError):
    """Configuration is missing a required value or fails validation."""

    label = "Config error"


class BuildError(SiteError):
    """Build-level failure, such as an empty content set after filtering."""

    label = "Build error"


class FrontmatterError(SiteError):
    """A content file has a malformed frontmatter block.

    Attributes:
        source_path: Path to the offending content file.
    """

    label = "Frontmatter error"

    def __init__(self, source_path: Path, message: str):
        self.source_path = source_path
        super().__init__(f"{source_path}: {message}")


class TemplateError(SiteError):
    """A template, partial or helper could not be compiled or rendered.

    Attributes:
        template_name: Name of the template involved, when known.
        original_error: The underlying Jinja2 exception, if any.
    """

    label = "Template error"

    def __init__(
        self,
        message: str,
        template_name: str | None = None,
        original_error: Exception | None = None,
    ):
        self.template_name = template_name
        self.original_error = original_error
        if template_name:
            message = f"{template_name}: {message}"
        super().__init__(message)
