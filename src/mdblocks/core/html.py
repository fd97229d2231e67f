"""HTML-to-markdown normalization with fenced code protection.

Rewrites are ordered and non-recursive: each pass runs once over the whole
document, except nested lists which are folded innermost-first. Fenced code
blocks are swapped out for placeholders before any rewrite and restored
verbatim at the end, so their content never sees tag stripping or entity
decoding.
"""

import re
from typing import Callable


_FLAGS = re.IGNORECASE | re.DOTALL

FENCE_RE = re.compile(r'```.*?```|```.*\Z', re.DOTALL)
HTML_TAG_RE = re.compile(r'</?[a-zA-Z][a-zA-Z0-9]*(?:\s[^>]*)?/?>')
PLACEHOLDER = "\x00CODEBLOCK{}\x00"
_PLACEHOLDER_RE = re.compile(r'\x00CODEBLOCK(\d+)\x00')

ENTITIES: dict[str, str] = {
    'nbsp': ' ', 'amp': '&', 'lt': '<', 'gt': '>', 'quot': '"', 'apos': "'",
    'mdash': '—', 'ndash': '–', 'hellip': '…', 'bull': '•',
    'middot': '·', 'copy': '©', 'reg': '®', 'trade': '™',
    'laquo': '«', 'raquo': '»', 'lsquo': '‘', 'rsquo': '’',
    'ldquo': '“', 'rdquo': '”', 'times': '×', 'deg': '°',
}
_ENTITY_RE = re.compile(r'&(#\d+|#[xX][0-9a-fA-F]+|[a-zA-Z]+);')

_ATTR_RE = r'\b{}\s*=\s*["\']([^"\']*)["\']'
_LIST_ITEM_RE = re.compile(r'\s*(?:[-*+]|\d+\.)\s')


# --- code protection ---

def protect_code_blocks(text: str) -> tuple[str, list[str]]:
    """Replace every fenced code block with a placeholder; return (text, blocks)."""
    blocks: list[str] = []

    def _stash(m: re.Match) -> str:
        blocks.append(m.group(0))
        return PLACEHOLDER.format(len(blocks) - 1)

    return FENCE_RE.sub(_stash, text), blocks


def restore_code_blocks(text: str, blocks: list[str]) -> str:
    """Substitute placeholders back with their original fenced text; unknown indexes stay as written."""
    def _restore(m: re.Match) -> str:
        n = int(m.group(1))
        return blocks[n] if n < len(blocks) else m.group(0)
    return _PLACEHOLDER_RE.sub(_restore, text)


def looks_like_html(text: str) -> bool:
    return text.lstrip().startswith('<') or HTML_TAG_RE.search(text) is not None


# --- helpers ---

def decode_entities(text: str) -> str:
    """Decode the fixed table of named entities plus decimal/hex numeric ones."""
    def _decode(m: re.Match) -> str:
        ref = m.group(1)
        if ref[0] != '#':
            return ENTITIES.get(ref.lower(), m.group(0))
        try:
            code = int(ref[2:], 16) if ref[1] in 'xX' else int(ref[1:])
            return chr(code)
        except (ValueError, OverflowError):
            return m.group(0)

    return _ENTITY_RE.sub(_decode, text)


def _attr(tag: str, name: str) -> str:
    m = re.search(_ATTR_RE.format(name), tag, re.IGNORECASE)
    return m.group(1) if m else ''


def _strip_tags(text: str) -> str:
    return re.sub(r'<[^>]+>', '', text)


def _cell_text(cell: str) -> str:
    return ' '.join(_strip_tags(cell).split())


def _block(text: str) -> str:
    """Surround text with blank lines so it stands as its own block."""
    return f"\n\n{text}\n\n"


# --- individual rewrites ---

def _headings(text: str) -> str:
    def _h(m: re.Match) -> str:
        inner = ' '.join(m.group(2).split())
        return _block(f"{'#' * int(m.group(1))} {inner}") if _strip_tags(inner).strip() else ''
    return re.sub(r'<h([1-6])\b[^>]*>(.*?)</h\1\s*>', _h, text, flags=_FLAGS)


def _preformatted(text: str, blocks: list[str]) -> str:
    """Turn pre/code into fenced blocks (stashed like source fences) and inline code into backticks."""
    def _fence(language: str, body: str) -> str:
        body = decode_entities(_strip_tags(body)).strip('\n')
        blocks.append(f"```{language}\n{body}\n```")
        return _block(PLACEHOLDER.format(len(blocks) - 1))

    def _pre_code(m: re.Match) -> str:
        language = re.sub(r'^(?:language-|lang-)', '', _attr(m.group(1), 'class').split(' ')[0])
        return _fence(language, m.group(2))

    text = re.sub(r'<pre\b[^>]*>\s*<code\b([^>]*)>(.*?)</code>\s*</pre>', _pre_code, text, flags=_FLAGS)
    text = re.sub(r'<pre\b[^>]*>(.*?)</pre>', lambda m: _fence('', m.group(1)), text, flags=_FLAGS)
    return re.sub(r'<code\b[^>]*>(.*?)</code>', r'`\1`', text, flags=_FLAGS)


def _blockquotes(text: str) -> str:
    def _quote(m: re.Match) -> str:
        inner = re.sub(r'</?p\b[^>]*>|<br\s*/?>', '\n', m.group(1), flags=re.IGNORECASE)
        lines = [line.strip() for line in inner.split('\n') if line.strip()]
        return _block('\n'.join(f"> {line}" for line in lines)) if lines else ''
    return re.sub(r'<blockquote\b[^>]*>(.*?)</blockquote>', _quote, text, flags=_FLAGS)


def _emphasis(text: str) -> str:
    for tags, marker in (('strong|b', '**'), ('em|i', '*'), ('del|s|strike', '~~')):
        text = re.sub(
            rf'<({tags})(?:\s[^>]*)?>(.*?)</\1\s*>',
            lambda m, mk=marker: f"{mk}{m.group(2)}{mk}",
            text, flags=_FLAGS,
        )
    return text


def _links_and_images(text: str) -> str:
    def _img(m: re.Match) -> str:
        src = _attr(m.group(0), 'src')
        return _block(f"![{_attr(m.group(0), 'alt')}]({src})") if src else ''

    def _link(m: re.Match) -> str:
        label = m.group(2).strip()
        return f"[{label}]({m.group(1)})" if label else ''

    text = re.sub(r'<img\b[^>]*>', _img, text, flags=_FLAGS)
    return re.sub(
        r'<a\b[^>]*?\bhref\s*=\s*["\']([^"\']*)["\'][^>]*>(.*?)</a\s*>', _link, text, flags=_FLAGS,
    )


def _list_item_lines(body: str) -> list[str]:
    """Item text (paragraphs joined) on the first line, then nested list lines kept indented."""
    body = re.sub(r'</?p\b[^>]*>', '\n', body, flags=re.IGNORECASE)
    lines = [line.rstrip() for line in body.split('\n') if line.strip()]
    if not lines:
        return ['']
    out = [lines[0].strip()]
    for line in lines[1:]:
        if _LIST_ITEM_RE.match(line):
            out.append('  ' + line)
        elif len(out) == 1:
            out[0] += ' ' + line.strip()
        else:
            out.append(line.strip())
    return out


def _lists(text: str) -> str:
    """Fold ul/ol into markdown lists, innermost first so nesting becomes indentation."""
    innermost = re.compile(r'<(ul|ol)\b[^>]*>((?:(?!<(?:ul|ol)\b).)*?)</\1\s*>', _FLAGS)

    def _list(m: re.Match) -> str:
        ordered = m.group(1).lower() == 'ol'
        items = re.findall(r'<li\b[^>]*>(.*?)(?:</li\s*>|(?=<li\b)|$)', m.group(2), _FLAGS)
        out = []
        for n, item in enumerate(items, start=1):
            first, *rest = _list_item_lines(item)
            marker = f"{n}." if ordered else '-'
            out.append(f"{marker} {first}")
            out.extend(rest)
        return _block('\n'.join(out)) if out else ''

    while True:
        text, count = innermost.subn(_list, text)
        if not count:
            return text


def _definition_lists(text: str) -> str:
    def _dl(m: re.Match) -> str:
        parts = re.findall(r'<(dt|dd)\b[^>]*>(.*?)(?=<d[td]\b|$)', m.group(1), _FLAGS)
        out = []
        for tag, body in parts:
            body = _cell_text(re.sub(r'</d[td]\s*>', '', body, flags=re.IGNORECASE))
            if not body:
                continue
            out.append(f"**{body}**" if tag.lower() == 'dt' else f": {body}")
        return _block('\n'.join(out)) if out else ''
    return re.sub(r'<dl\b[^>]*>(.*?)</dl\s*>', _dl, text, flags=_FLAGS)


def _table_rows(html: str, cell_tag: str) -> list[list[str]]:
    rows = []
    for tr in re.findall(r'<tr\b[^>]*>(.*?)</tr\s*>', html, _FLAGS):
        cells = re.findall(rf'<({cell_tag})\b[^>]*>(.*?)</\1\s*>', tr, _FLAGS)
        if cells:
            rows.append([_cell_text(body) for _, body in cells])
    return rows


def _tables(text: str) -> str:
    def _table(m: re.Match) -> str:
        body = m.group(1)
        thead = re.search(r'<thead\b[^>]*>(.*?)</thead\s*>', body, _FLAGS)
        header_rows = _table_rows(thead.group(1), 'th|td') if thead else _table_rows(body, 'th')
        headers = header_rows[0] if header_rows else []

        tbody = re.findall(r'<tbody\b[^>]*>(.*?)</tbody\s*>', body, _FLAGS)
        rows = _table_rows(''.join(tbody) if tbody else body, 'td')
        if not headers and not rows:
            return ''
        if not headers:
            headers = [''] * max(len(r) for r in rows)

        lines = [
            '| ' + ' | '.join(headers) + ' |',
            '| ' + ' | '.join('---' for _ in headers) + ' |',
        ]
        lines.extend('| ' + ' | '.join(row) + ' |' for row in rows)
        return _block('\n'.join(lines))
    return re.sub(r'<table\b[^>]*>(.*?)</table\s*>', _table, text, flags=_FLAGS)


def _structure(text: str) -> str:
    text = re.sub(r'</?div\b[^>]*>', '\n', text, flags=re.IGNORECASE)
    text = re.sub(r'</?span\b[^>]*>', '', text, flags=re.IGNORECASE)
    text = re.sub(r'</?p\b[^>]*>', '\n\n', text, flags=re.IGNORECASE)
    text = re.sub(r'<br\s*/?>', '\n', text, flags=re.IGNORECASE)
    return re.sub(r'<hr\b[^>]*>', _block('---'), text, flags=re.IGNORECASE)


def _collapse_whitespace(text: str) -> str:
    """Blank out whitespace-only lines, squeeze inner runs, and cap blank runs at one."""
    text = re.sub(r'^[ \t]+$', '', text, flags=re.MULTILINE)
    text = re.sub(r'(?<=\S)[ \t]+', ' ', text)
    return re.sub(r'\n{3,}', '\n\n', text)


# --- entry point ---

def normalize_html(document: str) -> str:
    """Rewrite HTML in document as markdown; documents without HTML are returned unchanged."""
    text, blocks = protect_code_blocks(document)
    if not looks_like_html(text):
        return document

    rewrites: list[Callable[[str], str]] = [
        lambda t: re.sub(r'<(script|style)\b[^>]*>.*?</\1\s*>', '', t, flags=_FLAGS),
        lambda t: re.sub(r'<!--.*?-->', '', t, flags=re.DOTALL),
        _headings,
        lambda t: _preformatted(t, blocks),
        _blockquotes,
        _emphasis,
        _links_and_images,
        _lists,
        _definition_lists,
        _tables,
        _structure,
        _strip_tags,
        decode_entities,
        _collapse_whitespace,
    ]
    for rewrite in rewrites:
        text = rewrite(text)
    return restore_code_blocks(text, blocks).strip()
