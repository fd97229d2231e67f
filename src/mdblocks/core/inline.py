"""Inline span tokenization: links, code, strike, bold, italic, and hard line breaks.

Every span family is matched independently over the whole string, then all
candidates are sorted by start offset (longer first on ties) and filtered
greedily so that no two kept spans share a character. Text between kept
spans is emitted as plain text, split into text/lineBreak spans wherever a
hard break was written.
"""

import re
from dataclasses import dataclass
from typing import Optional

from mdblocks.core.models import InlineSpan, InlineType


# Private-use character standing in for a hard break while patterns run.
BREAK = "\ue000"

_HARD_BREAK_RE = re.compile(r'(?:\\|  )\n')

# Fixed priority order; character classes exclude BREAK so no span crosses one.
PATTERNS: list[tuple[InlineType, re.Pattern]] = [
    (InlineType.link,   re.compile(r"\[([^\]\ue000]+)\]\(([^)\ue000]+)\)")),
    (InlineType.code,   re.compile(r"`([^`\ue000]+)`")),
    (InlineType.strike, re.compile(r"~~([^~\ue000]+)~~")),
    (InlineType.bold,   re.compile(r"\*\*([^*\ue000]+)\*\*")),
    (InlineType.bold,   re.compile(r"__([^_\ue000]+)__")),
    (InlineType.italic, re.compile(r"\*([^*\ue000]+)\*")),
    (InlineType.italic, re.compile(r"_([^_\ue000]+)_")),
]


@dataclass(frozen=True)
class _Match:
    type: InlineType
    start: int
    end: int
    content: str
    href: Optional[str] = None


def _collect(text: str) -> list[_Match]:
    """Return every match of every family, unfiltered."""
    found: list[_Match] = []
    for span_type, pattern in PATTERNS:
        for m in pattern.finditer(text):
            href = m.group(2) if span_type == InlineType.link else None
            found.append(_Match(span_type, m.start(), m.end(), m.group(1), href))
    return found


def _select(matches: list[_Match]) -> list[_Match]:
    """Sort by start (longer span first on ties) and keep non-overlapping matches."""
    kept: list[_Match] = []
    for cand in sorted(matches, key=lambda m: (m.start, -(m.end - m.start))):
        if all(cand.end <= k.start or cand.start >= k.end for k in kept):
            kept.append(cand)
    return kept


def _text_spans(segment: str) -> list[InlineSpan]:
    """Split a plain segment on hard-break placeholders into text/lineBreak spans."""
    spans: list[InlineSpan] = []
    for i, part in enumerate(segment.split(BREAK)):
        if i:
            spans.append(InlineSpan(type=InlineType.line_break))
        if part:
            spans.append(InlineSpan(type=InlineType.text, content=part))
    return spans


def protect_breaks(text: str) -> str:
    """Replace backslash-newline and two-space-newline sequences with BREAK."""
    return _HARD_BREAK_RE.sub(BREAK, text)


def format_inline(text: str) -> list[InlineSpan]:
    """Tokenize text into an ordered list of non-overlapping inline spans."""
    text = protect_breaks(text)
    kept = _select(_collect(text))
    if not kept:
        return _text_spans(text) or [InlineSpan(type=InlineType.text, content=text)]

    spans: list[InlineSpan] = []
    last_end = 0
    for m in kept:
        if m.start > last_end:
            spans.extend(_text_spans(text[last_end:m.start]))
        spans.append(InlineSpan(type=m.type, content=m.content, href=m.href))
        last_end = m.end
    if last_end < len(text):
        spans.extend(_text_spans(text[last_end:]))
    return spans


def plain_text(spans: list[InlineSpan]) -> str:
    """Concatenate span content, rendering line breaks as spaces."""
    return "".join(" " if s.type == InlineType.line_break else s.content for s in spans)
