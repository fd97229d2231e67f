"""Unit tests for core/html.py"""

import pytest

from mdblocks.core.html import (
    decode_entities,
    looks_like_html,
    normalize_html,
    protect_code_blocks,
    restore_code_blocks,
)
from mdblocks.core.models import ElementType
from mdblocks.core.parse import parse_markdown


TABLE_HTML = (
    "<table><thead><tr><th>H1</th><th>H2</th></tr></thead>"
    "<tbody><tr><td>a</td><td>b</td></tr><tr><td>c</td><td>d</td></tr></tbody></table>"
)


@pytest.mark.parametrize("text,expected", [
    ("<p>x</p>", True),
    ("  <div>x</div>", True),
    ("text with <br/> inside", True),
    ("plain *markdown*", False),
    ("a < b and c > d", False),
    ("see <https://example.com>", False),
])
def test_looks_like_html(text, expected):
    """Only a leading < or a real tag pattern triggers normalization."""
    assert looks_like_html(text) is expected


def test_markdown_returned_unchanged():
    """Documents without HTML pass through byte for byte."""
    md = "# Title\n\n  indented   text\n\n\n\nmore\n"
    assert normalize_html(md) == md


def test_html_only_inside_fence_does_not_trigger():
    """Tags inside a fenced block alone do not trigger normalization."""
    md = "text\n\n```\n<div>x</div>\n```\n"
    assert normalize_html(md) == md


def test_protect_and_restore_round_trip():
    """Placeholders restore the exact fenced text."""
    md = "a\n```py\n<b>x</b>\n```\nb"
    protected, blocks = protect_code_blocks(md)
    assert "<b>" not in protected
    assert blocks == ["```py\n<b>x</b>\n```"]
    assert restore_code_blocks(protected, blocks) == md


def test_fenced_code_untouched_by_rewrites():
    """HTML and entities inside fences survive normalization of the rest."""
    md = "<p>x</p>\n\n```\n<b>keep</b> &amp;   spaced\n```"
    assert normalize_html(md) == "x\n\n```\n<b>keep</b> &amp;   spaced\n```"


@pytest.mark.parametrize("html,expected", [
    ("<h2>Title</h2>", "## Title"),
    ("<h1 class='x'>A <em>big</em> one</h1>", "# A *big* one"),
    ("<p><strong>a</strong> and <em>b</em></p>", "**a** and *b*"),
    ("<p><b>a</b> <i>b</i> <del>c</del> <s>d</s></p>", "**a** *b* ~~c~~ ~~d~~"),
    ("<p>use <code>x()</code></p>", "use `x()`"),
    ('<a href="http://x.io">X</a>', "[X](http://x.io)"),
    ('<img src="a.png" alt="A">', "![A](a.png)"),
    ("<div><span>a</span></div>", "a"),
    ("<p>a<br>b</p><hr>", "a\nb\n\n---"),
    ("<script>alert(1)</script><style>p{}</style><p>ok</p>", "ok"),
    ("<p>a</p><!-- note --><p>b</p>", "a\n\nb"),
    ("<blockquote><p>a</p><p>b</p></blockquote>", "> a\n> b"),
])
def test_rewrites(html, expected):
    """Each tag family maps to its markdown form."""
    assert normalize_html(html) == expected


def test_pre_code_becomes_fence():
    """pre/code becomes a fenced block with the language from the class attribute."""
    html = '<pre><code class="language-python">x = 1 &lt; 2\nprint(x)</code></pre>'
    assert normalize_html(html) == "```python\nx = 1 < 2\nprint(x)\n```"


def test_pre_code_parses_as_code_block():
    """Converted pre blocks keep their whitespace through parsing."""
    html = "<p>Intro</p><pre>  a  =  1</pre>"
    elements = parse_markdown(html)
    assert [e.type for e in elements] == [ElementType.paragraph, ElementType.code_block]
    assert elements[1].content == "  a  =  1"


def test_unordered_and_ordered_lists():
    """ul/ol items become bullet and numbered lines."""
    assert normalize_html("<ul><li>a</li><li>b</li></ul>") == "- a\n- b"
    assert normalize_html("<ol><li>a</li><li>b</li></ol>") == "1. a\n2. b"


def test_nested_list_indentation():
    """Nested lists are indented two spaces per level and parse to indent levels."""
    html = "<ul><li>a<ul><li>b</li></ul></li><li>c</li></ul>"
    assert normalize_html(html) == "- a\n  - b\n- c"
    [element] = parse_markdown(html)
    assert element.items == ["a", "b", "c"]
    assert element.indent_levels == [0, 1, 0]


def test_list_items_wrapping_paragraphs():
    """Paragraph-wrapped item text stays on the item line."""
    html = "<ul><li><p>A</p></li><li><p>B</p><p>more</p><ul><li><p>C</p></li></ul></li></ul>"
    assert normalize_html(html) == "- A\n- B more\n  - C"
    [element] = parse_markdown("<ul><li><p>A</p></li><li><p>B</p></li></ul>")
    assert element.type == ElementType.list
    assert element.items == ["A", "B"]


def test_definition_list():
    """dt/dd pairs become a bold term and a colon-prefixed definition."""
    assert normalize_html("<dl><dt>Term</dt><dd>Meaning</dd></dl>") == "**Term**\n: Meaning"


def test_table_to_pipe_table():
    """thead/tbody tables become pipe tables with a separator row."""
    assert normalize_html(TABLE_HTML) == "| H1 | H2 |\n| --- | --- |\n| a | b |\n| c | d |"


def test_html_table_parses_like_markdown_table():
    """A converted table yields the same headers and rows as the markdown form."""
    [from_html] = parse_markdown(TABLE_HTML)
    [from_md] = parse_markdown("| H1 | H2 |\n|---|---|\n| a | b |\n| c | d |")
    assert from_html.type == ElementType.table
    assert from_html.headers == from_md.headers == ["H1", "H2"]
    assert from_html.rows == from_md.rows == [["a", "b"], ["c", "d"]]


def test_table_without_thead_uses_th_row():
    """Without thead, the th row supplies headers and td rows the data."""
    html = "<table><tr><th>k</th></tr><tr><td>v</td></tr></table>"
    assert normalize_html(html) == "| k |\n| --- |\n| v |"


def test_empty_table_dropped():
    """A table with neither headers nor rows disappears."""
    assert normalize_html("<table></table><p>x</p>") == "x"


def test_entities_decoded_once():
    """Named, decimal, and hex entities decode; double-escaped text decodes one level."""
    assert normalize_html("<p>a &amp; b &lt;c&gt; &#65;&#x42; &amp;lt;</p>") == "a & b <c> AB &lt;"


def test_unknown_entity_kept():
    """Entities outside the fixed table are left as written."""
    assert decode_entities("&bogus; &nbsp;") == "&bogus;  "


def test_whitespace_collapsed():
    """Runs of blank lines and inner spaces collapse."""
    assert normalize_html("<p>a    b</p>\n\n\n\n<p>c</p>") == "a b\n\nc"


def test_unterminated_fence_protected():
    """An unclosed fence is protected through to the end of the document."""
    assert normalize_html("<p>x</p>\n```\n<b>y</b>  &amp;") == "x\n\n```\n<b>y</b>  &amp;"


def test_placeholder_lookalike_left_as_written():
    """Placeholder-shaped text with no matching block is kept, not looked up."""
    text = "<p>a</p>\n\x00CODEBLOCK3\x00"
    assert normalize_html(text) == "a\n\n\x00CODEBLOCK3\x00"
    assert restore_code_blocks("\x00CODEBLOCK1\x00", ["```x```"]) == "\x00CODEBLOCK1\x00"
    assert parse_markdown(text)[0].content == "a"
