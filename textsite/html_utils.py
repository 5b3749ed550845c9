"""HTML and URL string helpers for textsite.

Functions:
    escape_html: Escape special HTML/XML characters in a string.
    join_root_url: Join a base URL with a path.
"""

from __future__ import annotations


def escape_html(text: str) -> str:
    """Escape special HTML characters in a string.

    Converts the following characters to their entity equivalents:
    - & becomes &amp;
    - < becomes &lt;
    - > becomes &gt;
    - " becomes &quot;

    Args:
        text: The string to escape.

    Returns:
        The escaped string, safe for HTML and XML text content.

    Examples:
        >>> escape_html('<b>"Tom" & Jerry</b>')
        '&lt;b&gt;&quot;Tom&quot; &amp; Jerry&lt;/b&gt;'
    """
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def join_root_url(root_url: str, path: str) -> str:
    """Safely join a root URL and a path, avoiding double slashes.

    Args:
        root_url: Base URL (e.g., https://example.com/blog).
        path: Path beginning with or without a leading slash.

    Returns:
        Combined URL with proper slash handling.

    Examples:
        >>> join_root_url('https://example.com/', '/about/')
        'https://example.com/about/'

        >>> join_root_url('https://example.com', 'about/')
        'https://example.com/about/'
    """
    if not root_url:
        return path
    base = root_url.rstrip("/")
    suffix = path if path.startswith("/") else f"/{path}"
    return f"{base}{suffix}"
