"""HTML minification for textsite.

HtmlMinifier is a best-effort lexical pass, not an HTML parser. It walks the
markup once, front to back, switching between mutually exclusive modes:

- TEXT: character data between tags.
- TAG: between ``<`` and the matching ``>``.
- QUOTE: inside a quoted attribute value; the opening quote is remembered.
- COMMENT: between ``<!--`` and ``-->``; everything is dropped.
- VERBATIM: inside ``pre``, ``script`` or ``style``; everything is kept.

Whitespace runs in TEXT and TAG modes collapse to a single space, and no
space is emitted right after another whitespace character. Lookahead is
limited to tag names and comment delimiters, so the output is never longer
than the input and minifying twice gives the same result as minifying once.
"""

from __future__ import annotations

from enum import Enum

VERBATIM_ELEMENTS = frozenset({"pre", "script", "style"})

COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"


class Mode(Enum):
    TEXT = "text"
    TAG = "tag"
    QUOTE = "quote"
    COMMENT = "comment"
    VERBATIM = "verbatim"


def _tag_name(markup: str, start: int) -> str:
    """Return the lowercased alphanumeric run starting at ``start``."""
    end = start
    length = len(markup)
    while end < length and markup[end].isalnum():
        end += 1
    return markup[start:end].lower()


class HtmlMinifier:
    """Single-pass, whitespace-collapsing HTML minifier.

    An instance carries the scan state of one minify() call; the state is
    reset at the start of every call.
    """

    def __init__(self) -> None:
        self._reset("")

    def _reset(self, markup: str) -> None:
        self.markup = markup
        self.pos = 0
        self.mode = Mode.TEXT
        self.out: list[str] = []
        self.quote_char = ""
        # Verbatim element whose opening tag is being scanned, then whose body is.
        self.verbatim_tag = ""

    def minify(self, markup: str) -> str:
        """Minify markup.

        Args:
            markup: HTML document or fragment.

        Returns:
            Minified markup with leading and trailing whitespace removed.
        """
        self._reset(markup)
        handlers = {
            Mode.TEXT: self._text,
            Mode.TAG: self._tag,
            Mode.QUOTE: self._quote,
            Mode.COMMENT: self._comment,
            Mode.VERBATIM: self._verbatim,
        }
        length = len(markup)
        while self.pos < length:
            handlers[self.mode](markup[self.pos])
        return "".join(self.out).strip()

    def _emit(self, char: str) -> None:
        self.out.append(char)
        self.pos += 1

    def _whitespace(self) -> None:
        if not self.out or not self.out[-1].isspace():
            self.out.append(" ")
        self.pos += 1

    def _text(self, char: str) -> None:
        if self.markup.startswith(COMMENT_OPEN, self.pos):
            self.mode = Mode.COMMENT
            self.pos += len(COMMENT_OPEN)
            return
        if char == "<":
            name = _tag_name(self.markup, self.pos + 1)
            if name in VERBATIM_ELEMENTS:
                self.verbatim_tag = name
            self.mode = Mode.TAG
            self._emit(char)
            return
        if char.isspace():
            self._whitespace()
            return
        self._emit(char)

    def _tag(self, char: str) -> None:
        if char in "\"'":
            self.quote_char = char
            self.mode = Mode.QUOTE
            self._emit(char)
            return
        if char == ">":
            # A self-closing opening tag has no body to protect.
            if self.verbatim_tag and self.out[-1] != "/":
                self.mode = Mode.VERBATIM
            else:
                self.verbatim_tag = ""
                self.mode = Mode.TEXT
            self._emit(char)
            return
        if char.isspace():
            self._whitespace()
            return
        self._emit(char)

    def _quote(self, char: str) -> None:
        if char == self.quote_char:
            self.quote_char = ""
            self.mode = Mode.TAG
        self._emit(char)

    def _comment(self, char: str) -> None:
        if self.markup.startswith(COMMENT_CLOSE, self.pos):
            self.pos += len(COMMENT_CLOSE)
            self.mode = Mode.TEXT
            return
        self.pos += 1

    def _verbatim(self, char: str) -> None:
        if char == "<" and self.markup.startswith("/", self.pos + 1):
            if _tag_name(self.markup, self.pos + 2) == self.verbatim_tag:
                self.verbatim_tag = ""
                self.mode = Mode.TAG
        self._emit(char)


def minify_html(markup: str) -> str:
    """Minify markup with a fresh HtmlMinifier."""
    return HtmlMinifier().minify(markup)
