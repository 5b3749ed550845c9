"""Site configuration for textsite.

This module loads the project configuration file (textsite.yaml by default)
into a tree of frozen dataclasses. The file is parsed with PyYAML, which also
accepts JSON documents, and keys may be written kebab-case or snake_case.

Key functions:
- load_config: Load and validate a configuration file.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

CONFIG_VERSION = "0.0.2"
DEFAULT_CONFIG_FILE = "textsite.yaml"

DEFAULT_EXTENSIONS = ("rw", "md")
DEFAULT_IGNORE = ("drafts/",)


@dataclass(frozen=True)
class NavItem:
    title: str
    url: str
    items: tuple[NavItem, ...] = ()


@dataclass(frozen=True)
class FooterConfig:
    text: str | None = None
    links: tuple[NavItem, ...] = ()
    copyright: str | None = None


@dataclass(frozen=True)
class ContentConfig:
    """Where content lives and which files count as content.

    Attributes:
        dir: Content root, relative to the project root.
        extensions: Allowed file extensions, without the leading dot.
        ignore: Substrings that exclude a path when found anywhere in it.
        drafts: Whether draft pages are rendered.
    """

    dir: str = "content"
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    ignore: tuple[str, ...] = DEFAULT_IGNORE
    drafts: bool = False


@dataclass(frozen=True)
class MinifyConfig:
    html: bool = False
    css: bool = False
    js: bool = False


@dataclass(frozen=True)
class GenerateConfig:
    sitemap: bool = False
    robots: bool = False
    feed: bool = False


@dataclass(frozen=True)
class BuildConfig:
    output_dir: str = "dist"
    clean_build: bool = False
    minify: MinifyConfig = field(default_factory=MinifyConfig)
    generate: GenerateConfig = field(default_factory=GenerateConfig)
    strict: bool = False


@dataclass(frozen=True)
class TemplateConfig:
    dir: str = "templates"
    default_layout: str = "base.html"


@dataclass(frozen=True)
class SiteConfig:
    """Validated site configuration.

    Attributes:
        version: Configuration schema version; must equal CONFIG_VERSION.
        title: Site title, used for the feed channel and templates.
        description: Optional site description.
        favicon: Optional favicon path.
        base_url: Absolute site URL, required for sitemap, feed and robots.txt.
        content: Content discovery settings.
        build: Output settings.
        template: Template directory settings.
        nav: Navigation entries exposed to templates.
        footer: Footer structure exposed to templates.
        custom: Arbitrary values exposed to templates as-is.
        root: Directory relative paths are resolved against.
    """

    version: str = CONFIG_VERSION
    title: str = "textsite"
    description: str | None = None
    favicon: str | None = None
    base_url: str | None = None
    content: ContentConfig = field(default_factory=ContentConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    template: TemplateConfig = field(default_factory=TemplateConfig)
    nav: tuple[NavItem, ...] = ()
    footer: FooterConfig = field(default_factory=FooterConfig)
    custom: dict[str, Any] = field(default_factory=dict)
    root: Path = field(default_factory=Path.cwd, compare=False)

    @property
    def content_dir(self) -> Path:
        return self.root / self.content.dir

    @property
    def output_dir(self) -> Path:
        return self.root / self.build.output_dir

    @property
    def template_dir(self) -> Path:
        return self.root / self.template.dir

    def validate(self) -> None:
        """Check version and, in strict mode, required fields.

        Raises:
            ConfigError: If validation fails.
        """
        if self.version != CONFIG_VERSION:
            raise ConfigError(
                f"Config version {self.version} does not match expected version {CONFIG_VERSION}"
            )
        if self.build.strict:
            if not self.title:
                raise ConfigError("Title is required in strict mode")
            for index, item in enumerate(self.nav):
                if not item.url:
                    raise ConfigError(f"Navigation item {index} has empty URL")

    def require_base_url(self, purpose: str) -> str:
        """Return the base URL without a trailing slash.

        Args:
            purpose: What the URL is needed for, used in the error message.

        Raises:
            ConfigError: If no base URL is configured.
        """
        if not self.base_url:
            raise ConfigError(f"Base URL required for {purpose}")
        return self.base_url.rstrip("/")

    def with_overrides(
        self,
        clean: bool | None = None,
        minify: bool | None = None,
        drafts: bool | None = None,
    ) -> SiteConfig:
        """Return a copy with per-invocation overrides applied.

        Args:
            clean: Override for build.clean_build.
            minify: Override for every build.minify toggle.
            drafts: Override for content.drafts.

        Returns:
            A new SiteConfig; the receiver is unchanged.
        """
        build = self.build
        content = self.content
        if clean is not None:
            build = replace(build, clean_build=clean)
        if minify is not None:
            build = replace(build, minify=MinifyConfig(html=minify, css=minify, js=minify))
        if drafts is not None:
            content = replace(content, drafts=drafts)
        return replace(self, build=build, content=content)

    def as_dict(self) -> dict[str, Any]:
        """Return a plain mapping snapshot for template contexts."""
        data = asdict(self)
        data.pop("root", None)
        return data


def _normalize_keys(data: Any) -> Any:
    if isinstance(data, dict):
        return {str(k).replace("-", "_"): v for k, v in data.items()}
    return {}


def _nav_items(raw: Any) -> tuple[NavItem, ...]:
    items = []
    for entry in raw or []:
        entry = _normalize_keys(entry)
        items.append(
            NavItem(
                title=str(entry.get("title", "")),
                url=str(entry.get("url", "")),
                items=_nav_items(entry.get("items")),
            )
        )
    return tuple(items)


def _optional_str(raw: Any) -> str | None:
    if raw is None:
        return None
    return str(raw)


def _flag(section: dict[str, Any], key: str, default: bool = False) -> bool:
    value = section.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ConfigError(f"'{key.replace('_', '-')}' must be true or false")
    return value


def _string_tuple(raw: Any, default: tuple[str, ...]) -> tuple[str, ...]:
    if raw is None:
        return default
    if isinstance(raw, str):
        return (raw,)
    return tuple(str(item) for item in raw)


def config_from_mapping(data: dict[str, Any], root: Path | None = None) -> SiteConfig:
    """Build a SiteConfig from a decoded configuration mapping.

    Args:
        data: Decoded YAML/JSON mapping.
        root: Directory relative paths resolve against.

    Returns:
        SiteConfig instance (not yet validated).

    Raises:
        ConfigError: If a section has the wrong shape.
    """
    data = _normalize_keys(data)
    try:
        content = _normalize_keys(data.get("content") or {})
        build = _normalize_keys(data.get("build") or {})
        minify = _normalize_keys(build.get("minify") or {})
        generate = _normalize_keys(build.get("generate") or {})
        template = _normalize_keys(data.get("template") or {})
        footer = _normalize_keys(data.get("footer") or {})
        custom = data.get("custom") or {}
        if not isinstance(custom, dict):
            raise ConfigError("'custom' must be a mapping")

        return SiteConfig(
            version=_optional_str(data.get("version")) or "",
            title=_optional_str(data.get("title")) or "",
            description=_optional_str(data.get("description")),
            favicon=_optional_str(data.get("favicon")),
            base_url=_optional_str(data.get("base_url")),
            content=ContentConfig(
                dir=str(content.get("dir", "content")),
                extensions=_string_tuple(content.get("extensions"), DEFAULT_EXTENSIONS),
                ignore=_string_tuple(content.get("ignore"), DEFAULT_IGNORE),
                drafts=_flag(content, "drafts"),
            ),
            build=BuildConfig(
                output_dir=str(build.get("output_dir", "dist")),
                clean_build=_flag(build, "clean_build"),
                minify=MinifyConfig(
                    html=_flag(minify, "html"),
                    css=_flag(minify, "css"),
                    js=_flag(minify, "js"),
                ),
                generate=GenerateConfig(
                    sitemap=_flag(generate, "sitemap"),
                    robots=_flag(generate, "robots"),
                    feed=_flag(generate, "feed"),
                ),
                strict=_flag(build, "strict"),
            ),
            template=TemplateConfig(
                dir=str(template.get("dir", "templates")),
                default_layout=str(template.get("default_layout", "base.html")),
            ),
            nav=_nav_items(data.get("nav")),
            footer=FooterConfig(
                text=_optional_str(footer.get("text")),
                links=_nav_items(footer.get("links")),
                copyright=_optional_str(footer.get("copyright")),
            ),
            custom=dict(custom),
            root=root or Path.cwd(),
        )
    except (AttributeError, TypeError) as exc:
        raise ConfigError(f"Malformed configuration: {exc}") from exc


def load_config(config_path: Path) -> SiteConfig:
    """Load and validate the site configuration.

    Args:
        config_path: Path to the configuration file.

    Returns:
        Validated SiteConfig whose relative paths resolve against the
        configuration file's directory.

    Raises:
        ConfigError: If the file cannot be parsed or fails validation.
        FileNotFoundError: If the file does not exist.
    """
    with open(config_path, encoding="utf-8") as f:
        try:
            loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Cannot parse {config_path}: {exc}") from exc
    if not isinstance(loaded, dict):
        raise ConfigError(f"{config_path} must contain a mapping")
    config = config_from_mapping(loaded, root=config_path.resolve().parent)
    config.validate()
    return config
