from pathlib import Path

import pytest

from textsite.config import CONFIG_VERSION, SiteConfig, config_from_mapping, load_config
from textsite.errors import ConfigError


def write_config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "textsite.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_kebab_case_config(tmp_path):
    path = write_config(
        tmp_path,
        """
version: 0.0.2
title: My Site
base-url: https://example.com/
content:
  dir: pages
  extensions: [txt]
  ignore: [private/]
build:
  output-dir: public
  clean-build: true
  minify:
    html: true
  generate:
    sitemap: true
    feed: true
template:
  default-layout: page.html
nav:
  - title: Home
    url: /
  - title: Docs
    url: /docs/
    items:
      - title: Intro
        url: /docs/intro/
footer:
  copyright: 2024 Me
custom:
  analytics-id: abc
""",
    )
    config = load_config(path)
    assert config.title == "My Site"
    assert config.base_url == "https://example.com/"
    assert config.require_base_url("feed") == "https://example.com"
    assert config.content_dir == tmp_path.resolve() / "pages"
    assert config.output_dir == tmp_path.resolve() / "public"
    assert config.template_dir == tmp_path.resolve() / "templates"
    assert config.content.extensions == ("txt",)
    assert config.content.ignore == ("private/",)
    assert config.build.clean_build is True
    assert config.build.minify.html is True
    assert config.build.minify.css is False
    assert config.build.generate.sitemap is True
    assert config.build.generate.robots is False
    assert config.template.default_layout == "page.html"
    assert config.nav[1].items[0].url == "/docs/intro/"
    assert config.footer.copyright == "2024 Me"
    # Custom values are passed through untouched.
    assert config.custom == {"analytics-id": "abc"}


def test_snake_case_json_config(tmp_path):
    path = write_config(
        tmp_path,
        '{"version": "0.0.2", "title": "J", "build": {"output_dir": "out"}}',
    )
    config = load_config(path)
    assert config.build.output_dir == "out"
    assert config.content.extensions == ("rw", "md")
    assert config.content.ignore == ("drafts/",)


def test_version_mismatch(tmp_path):
    path = write_config(tmp_path, "version: 0.0.1\ntitle: Old\n")
    with pytest.raises(ConfigError, match="does not match expected version 0.0.2"):
        load_config(path)


def test_missing_version_is_rejected(tmp_path):
    with pytest.raises(ConfigError):
        load_config(write_config(tmp_path, "title: x\n"))


def test_invalid_yaml_and_non_mapping(tmp_path):
    with pytest.raises(ConfigError, match="Cannot parse"):
        load_config(write_config(tmp_path, "title: [oops\n"))
    with pytest.raises(ConfigError, match="must contain a mapping"):
        load_config(write_config(tmp_path, "- a\n- b\n"))


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_strict_mode_requires_title_and_nav_urls(tmp_path):
    strict = {"version": CONFIG_VERSION, "build": {"strict": True}}
    with pytest.raises(ConfigError, match="Title is required"):
        config_from_mapping(dict(strict), tmp_path).validate()

    with pytest.raises(ConfigError, match="Navigation item 1 has empty URL"):
        config_from_mapping(
            dict(strict, title="T", nav=[{"title": "a", "url": "/"}, {"title": "b"}]),
            tmp_path,
        ).validate()

    # Outside strict mode the same values pass.
    config_from_mapping({"version": CONFIG_VERSION, "nav": [{"title": "b"}]}, tmp_path).validate()


def test_custom_must_be_mapping(tmp_path):
    with pytest.raises(ConfigError):
        config_from_mapping({"version": CONFIG_VERSION, "custom": [1, 2]}, tmp_path)


def test_require_base_url_missing():
    with pytest.raises(ConfigError, match="Base URL required for sitemap"):
        SiteConfig().require_base_url("sitemap")


def test_with_overrides_returns_new_config():
    config = SiteConfig()
    updated = config.with_overrides(clean=True, minify=True, drafts=True)
    assert updated.build.clean_build is True
    assert updated.build.minify.html and updated.build.minify.css and updated.build.minify.js
    assert updated.content.drafts is True
    assert config.build.clean_build is False
    assert config.content.drafts is False
    assert config.with_overrides() == config


def test_as_dict_omits_root(tmp_path):
    data = SiteConfig(title="T", root=tmp_path).as_dict()
    assert "root" not in data
    assert data["title"] == "T"
    assert data["build"]["output_dir"] == "dist"


def test_scalar_values_are_coerced(tmp_path):
    config = config_from_mapping(
        {
            "version": CONFIG_VERSION,
            "title": None,
            "description": 123,
            "favicon": None,
            "footer": {"copyright": 2024},
        },
        tmp_path,
    )
    assert config.title == ""
    assert config.description == "123"
    assert config.favicon is None
    assert config.footer.copyright == "2024"


def test_non_boolean_flags_are_rejected(tmp_path):
    with pytest.raises(ConfigError, match="'drafts' must be true or false"):
        config_from_mapping({"version": CONFIG_VERSION, "content": {"drafts": "false"}}, tmp_path)
    with pytest.raises(ConfigError, match="'clean-build' must be true or false"):
        config_from_mapping({"version": CONFIG_VERSION, "build": {"clean-build": 1}}, tmp_path)
