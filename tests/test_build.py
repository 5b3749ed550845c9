from datetime import datetime, timezone
from pathlib import Path

import pytest

from textsite.build import BuildOrchestrator, build_site
from textsite.config import BuildConfig, GenerateConfig, MinifyConfig, NavItem, SiteConfig
from textsite.errors import BuildError, ConfigError

BUILD_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def create_site(root: Path) -> None:
    content = root / "content"
    content.mkdir(parents=True)
    (content / "index.rw").write_text(
        "---\ntitle: Home\nslug: index\ndate: 2024-01-01\n---\nWelcome!", encoding="utf-8"
    )
    (content / "about.rw").write_text(
        "---\ntitle: About\ndate: 2024-02-01\n---\nAbout    us", encoding="utf-8"
    )


def make_config(root: Path, **build) -> SiteConfig:
    return SiteConfig(
        title="My Site",
        base_url="https://example.com",
        build=BuildConfig(**build),
        root=root,
    )


def all_artifacts() -> GenerateConfig:
    return GenerateConfig(sitemap=True, robots=True, feed=True)


def test_build_writes_pages_and_artifacts(tmp_path):
    create_site(tmp_path)
    config = make_config(tmp_path, generate=all_artifacts())
    result = BuildOrchestrator(config, clock=lambda: BUILD_TIME).build()

    dist = tmp_path / "dist"
    assert result.output_dir == dist
    assert [page.slug for page in result.pages] == ["about", "index"]

    home = (dist / "index.html").read_text(encoding="utf-8")
    about = (dist / "about" / "index.html").read_text(encoding="utf-8")
    assert "Welcome!" in home
    assert "<title>Home | My Site</title>" in home
    assert "About    us" in about
    assert "February 1, 2024" in about
    assert "2024-05-01T12:00:00+00:00" in home

    sitemap = (dist / "sitemap.xml").read_text(encoding="utf-8")
    feed = (dist / "feed.xml").read_text(encoding="utf-8")
    robots = (dist / "robots.txt").read_text(encoding="utf-8")
    assert sitemap.count("<url>") == 2
    assert feed.count("<item>") == 2
    assert "Sitemap: https://example.com/sitemap.xml" in robots
    assert (dist / "build-info.json").exists()

    assert (dist / "css" / "style.css").exists()
    assert (dist / "js" / "scripts.js").exists()
    assert (tmp_path / "templates" / "base.html").exists()


def test_build_marks_active_navigation(tmp_path):
    create_site(tmp_path)
    config = SiteConfig(
        title="My Site",
        nav=(NavItem(title="Home", url="/"), NavItem(title="About", url="/about/")),
        root=tmp_path,
    )
    build_site(config)
    about = (tmp_path / "dist" / "about" / "index.html").read_text(encoding="utf-8")
    assert about.count('class="active"') == 1
    active = about.split('class="active"')[1]
    assert '<a href="/about/">About</a>' in active.split("</li>")[0]


def test_build_uses_page_template(tmp_path):
    create_site(tmp_path)
    (tmp_path / "content" / "post.rw").write_text(
        "---\ntemplate: post.html\nauthor: Sam\n---\nPost body", encoding="utf-8"
    )
    templates = tmp_path / "templates"
    templates.mkdir()
    for name in ("base.html", "_sidebar.html", "_content.html", "_footer.html"):
        (templates / name).write_text("base:{{ content }}", encoding="utf-8")
    (templates / "post.html").write_text(
        "post:{{ content }}:{{ author }}:{{ current_url }}:{{ pages | length }}",
        encoding="utf-8",
    )
    build_site(make_config(tmp_path))
    assert (tmp_path / "dist" / "post" / "index.html").read_text(encoding="utf-8") == (
        "post:Post body:Sam:/post/:3"
    )
    assert (tmp_path / "dist" / "index.html").read_text(encoding="utf-8") == "base:Welcome!"


def test_build_without_content_fails(tmp_path):
    (tmp_path / "content").mkdir()
    with pytest.raises(BuildError, match="No content files found"):
        build_site(make_config(tmp_path))


def test_build_with_only_drafts_fails(tmp_path):
    content = tmp_path / "content"
    content.mkdir()
    (content / "wip.rw").write_text("---\ndraft: true\n---\nwip", encoding="utf-8")
    with pytest.raises(BuildError):
        build_site(make_config(tmp_path))

    drafts = make_config(tmp_path).with_overrides(drafts=True)
    result = build_site(drafts)
    assert [page.slug for page in result.pages] == ["wip"]


def test_missing_base_url_aborts_artifacts(tmp_path):
    create_site(tmp_path)
    config = SiteConfig(
        title="My Site",
        build=BuildConfig(generate=GenerateConfig(sitemap=True)),
        root=tmp_path,
    )
    with pytest.raises(ConfigError):
        build_site(config)
    # Pages written before the failure stay in place.
    assert (tmp_path / "dist" / "index.html").exists()


def test_clean_build_removes_stale_files(tmp_path):
    create_site(tmp_path)
    dist = tmp_path / "dist"
    dist.mkdir()
    (dist / "stale.txt").write_text("old", encoding="utf-8")

    build_site(make_config(tmp_path))
    assert (dist / "stale.txt").exists()

    build_site(make_config(tmp_path, clean_build=True))
    assert not (dist / "stale.txt").exists()
    assert (dist / "index.html").exists()


def test_minified_build_output(tmp_path):
    create_site(tmp_path)
    build_site(make_config(tmp_path, minify=MinifyConfig(html=True)))
    home = (tmp_path / "dist" / "index.html").read_text(encoding="utf-8")
    about = (tmp_path / "dist" / "about" / "index.html").read_text(encoding="utf-8")
    assert "<!--" not in home
    assert "\n  " not in home.split("<pre")[0]
    # Page bodies sit in <pre> and survive minification untouched.
    assert "About    us" in about


def test_user_static_files_are_copied(tmp_path):
    create_site(tmp_path)
    static = tmp_path / "templates" / "static" / "img"
    static.mkdir(parents=True)
    (static / "logo.svg").write_text("<svg/>", encoding="utf-8")
    result = build_site(make_config(tmp_path))
    assert (tmp_path / "dist" / "img" / "logo.svg").read_text(encoding="utf-8") == "<svg/>"
    assert tmp_path / "dist" / "img" / "logo.svg" in result.written


def test_custom_key_named_self_renders(tmp_path):
    content = tmp_path / "content"
    content.mkdir()
    (content / "index.rw").write_text("---\nslug: index\nself: 1\n---\nhi", encoding="utf-8")
    templates = tmp_path / "templates"
    templates.mkdir()
    for name in ("base.html", "_sidebar.html", "_content.html", "_footer.html"):
        (templates / name).write_text("{{ content }}", encoding="utf-8")
    result = build_site(make_config(tmp_path))
    assert result.pages[0].frontmatter.custom == {"self": 1}
    assert (tmp_path / "dist" / "index.html").read_text(encoding="utf-8") == "hi"
