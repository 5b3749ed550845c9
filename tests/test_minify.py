import pytest

from textsite.minify import HtmlMinifier, minify_html


def test_collapses_whitespace_and_strips():
    markup = "\n  <div>\n    <p>Hello    world</p>\n  </div>\n"
    assert minify_html(markup) == "<div> <p>Hello world</p> </div>"


def test_drops_comments():
    markup = "<p>a<!-- hidden -->b</p><!--\nmultiline\n-->"
    assert minify_html(markup) == "<p>ab</p>"


def test_preserves_verbatim_elements():
    markup = (
        "<pre>\n  keep   this\n</pre>\n"
        "<script>\n  if (a  <  b) { x = '<!-- no -->'; }\n</script>\n"
        "<style>\n  p  { color: red; }\n</style>"
    )
    result = minify_html(markup)
    assert "<pre>\n  keep   this\n</pre>" in result
    assert "if (a  <  b) { x = '<!-- no -->'; }" in result
    assert "p  { color: red; }" in result


def test_verbatim_attributes_are_scanned_as_tag():
    markup = '<pre class="code"   id="x">  a  b  </pre>'
    assert minify_html(markup) == '<pre class="code" id="x">  a  b  </pre>'


def test_self_closing_verbatim_tag_has_no_body():
    markup = '<script src="a.js"/>\n   <p>  x  </p>'
    assert minify_html(markup) == '<script src="a.js"/> <p> x </p>'


def test_preserves_quoted_attribute_values():
    markup = '<a title="two   spaces  >"   href=\'/x  y\'>link</a>'
    assert minify_html(markup) == '<a title="two   spaces  >" href=\'/x  y\'>link</a>'


def test_comment_marker_inside_quotes_is_kept():
    markup = '<img alt="<!-- not a comment -->">'
    assert minify_html(markup) == markup


@pytest.mark.parametrize(
    "markup",
    [
        "<html>\n<head>\n<title> T </title>\n</head>\n<body>\n<p>a  b</p></body></html>",
        "<!-- a --><!-- b -->  <p>x</p>",
        "<pre>  x  </pre>  <script>  y  </script>",
        "<div\n  class=\"a   b\"\n>\n\n</div>",
        "<!--<!-- nested -->-->text",
        "   ",
        "",
    ],
)
def test_idempotent_and_never_longer(markup):
    once = minify_html(markup)
    assert minify_html(once) == once
    assert len(once) <= len(markup)


def test_minifier_instance_is_reusable():
    minifier = HtmlMinifier()
    assert minifier.minify("<pre>  a") == "<pre>  a"
    assert minifier.minify("<p>  b  </p>") == "<p> b </p>"
