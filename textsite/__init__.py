"""textsite static site generator.

This package turns a directory of plain-text content files with optional YAML
frontmatter into a static HTML site, using Jinja2 templates.

The build pipeline is split into small modules:
- content / frontmatter: discover and parse content files
- templates / helpers: template registry and the fixed helper functions
- renderers / minify: page rendering and the HTML minifier
- feeds: sitemap, RSS feed, robots.txt and build metadata
- build: the build orchestrator
- watcher: debounced rebuilds on filesystem changes
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
