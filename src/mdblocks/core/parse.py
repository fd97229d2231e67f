"""Line-oriented block parser: markdown (or HTML-tainted markdown) to typed elements"""

import logging
import re
from typing import Callable, Optional

from mdblocks.core.html import normalize_html
from mdblocks.core.images import ImageResolver, is_data_uri, resolve_image
from mdblocks.core.inline import format_inline, plain_text
from mdblocks.core.models import (
    Blockquote,
    Checklist,
    CodeBlock,
    Diagnostic,
    Element,
    Heading,
    HorizontalRule,
    Image,
    ListBlock,
    PageBreak,
    Paragraph,
    Table,
)
from mdblocks.core.utils.anchor import generate_unique_anchor_id


log = logging.getLogger(__name__)

PAGE_BREAK = '---PAGE_BREAK---'
FENCE = '```'
DEFAULT_LANGUAGE = 'text'

HR_RE = re.compile(r'^([-*_])\1{2,}$')
IMAGE_RE = re.compile(r'^!\[([^\]]*)\]\(\s*(\S+?)(?:\s+"([^"]*)")?\s*\)$')
HEADING_RE = re.compile(r'^(#{1,6})\s+(.+)$')
CHECKLIST_RE = re.compile(r'^(\s*)[-*+]\s+\[([ xX])\]\s+(.*)$')
BULLET_RE = re.compile(r'^(\s*)[-*+]\s+(.*)$')
ORDERED_RE = re.compile(r'^(\s*)\d+\.\s+(.*)$')

_LOG_LEVELS = {'debug': logging.DEBUG, 'info': logging.INFO, 'warning': logging.WARNING}


# --- block-start predicates, in priority order ---

def is_page_break(line: str) -> bool:
    return line.strip() == PAGE_BREAK


def is_horizontal_rule(line: str) -> bool:
    return HR_RE.match(line.strip()) is not None


def is_image(line: str) -> bool:
    return IMAGE_RE.match(line.strip()) is not None


def is_heading(line: str) -> bool:
    return HEADING_RE.match(line) is not None


def is_table_row(line: str) -> bool:
    return line.strip().startswith('|')


def is_fence(line: str) -> bool:
    return line.strip().startswith(FENCE)


def is_quote(line: str) -> bool:
    return line.strip().startswith('>')


def is_checklist_item(line: str) -> bool:
    return CHECKLIST_RE.match(line) is not None


def is_bullet_item(line: str) -> bool:
    return BULLET_RE.match(line) is not None and not is_checklist_item(line)


def is_ordered_item(line: str) -> bool:
    return ORDERED_RE.match(line) is not None


def is_block_start(line: str) -> bool:
    """True if line opens any construct that interrupts a paragraph."""
    return any(predicate(line) for predicate, _ in _RULES)


def _indent_level(indent: str) -> int:
    return len(indent) // 2


def _table_cells(line: str) -> list[str]:
    return [cell.strip() for cell in line.strip().split('|')[1:-1]]


class _Scanner:
    """Walks a line array with an explicit cursor; each handler returns the next cursor."""

    def __init__(
        self,
        lines: list[str],
        base_dir: Optional[str],
        resolver: ImageResolver,
        diagnostics: Optional[list[Diagnostic]],
        ):
        self.lines = lines
        self.base_dir = base_dir
        self.resolver = resolver
        self.diagnostics = diagnostics
        self.elements: list[Element] = []
        self.anchor_ids: set[str] = set()

    def run(self) -> list[Element]:
        i = 0
        while i < len(self.lines):
            i = self._step(i)
        return self.elements

    def _step(self, i: int) -> int:
        line = self.lines[i]
        if not line.strip():
            return i + 1
        for predicate, handler in _RULES:
            if predicate(line):
                return handler(self, i)
        return self._paragraph(i)

    def _note(self, diag: Diagnostic, i: int) -> None:
        diag = diag.model_copy(update={'line': i + 1})
        log.log(_LOG_LEVELS[diag.level], "%s (line %d)", diag.message, diag.line)
        if self.diagnostics is not None:
            self.diagnostics.append(diag)

    def _absorb(self, i: int, accept: Callable[[str], bool]) -> tuple[list[str], int]:
        """Collect accepted lines from i, skipping blanks, until another kind of line."""
        taken = []
        while i < len(self.lines):
            line = self.lines[i]
            if line.strip():
                if not accept(line):
                    break
                taken.append(line)
            i += 1
        return taken, i

    # --- handlers ---

    def _page_break(self, i: int) -> int:
        self.elements.append(PageBreak())
        return i + 1

    def _horizontal_rule(self, i: int) -> int:
        self.elements.append(HorizontalRule())
        return i + 1

    def _image(self, i: int) -> int:
        alt, src, title = IMAGE_RE.match(self.lines[i].strip()).groups()
        if is_data_uri(src):
            self._note(Diagnostic(
                code='embedded-image-rejected',
                message=f"Embedded base64 image '{alt}' was not saved as a file",
            ), i)
            note = f"[Image not saved: {alt}]" if alt else "[Image not saved]"
            self.elements.append(Paragraph(content=note, inline=format_inline(note)))
            return i + 1

        resolved = self.resolver(src, self.base_dir)
        for diag in resolved.diagnostics:
            self._note(diag, i)
        self.elements.append(Image(src=resolved.src, alt=alt, title=title))
        return i + 1

    def _heading(self, i: int) -> int:
        hashes, content = HEADING_RE.match(self.lines[i]).groups()
        content = content.strip()
        inline = format_inline(content)
        self.elements.append(Heading(
            level=len(hashes),
            content=content,
            inline=inline,
            anchor_id=generate_unique_anchor_id(plain_text(inline), self.anchor_ids),
        ))
        return i + 1

    def _table(self, i: int) -> int:
        grid = []
        while i < len(self.lines) and is_table_row(self.lines[i]):
            grid.append(_table_cells(self.lines[i]))
            i += 1
        self.elements.append(Table(headers=grid[0], rows=grid[2:]))
        return i

    def _code_block(self, i: int) -> int:
        language = self.lines[i].strip()[len(FENCE):].strip() or DEFAULT_LANGUAGE
        i += 1
        body = []
        while i < len(self.lines) and not is_fence(self.lines[i]):
            body.append(self.lines[i])
            i += 1
        self.elements.append(CodeBlock(language=language, content='\n'.join(body)))
        return i + 1    # past the closing fence (or the end of the document)

    def _blockquote(self, i: int) -> int:
        parts = []
        while i < len(self.lines) and is_quote(self.lines[i]):
            parts.append(self.lines[i].strip()[1:].strip())
            i += 1
        content = ' '.join(parts)
        self.elements.append(Blockquote(content=content, inline=format_inline(content)))
        return i

    def _checklist(self, i: int) -> int:
        lines, i = self._absorb(i, is_checklist_item)
        items, checked = [], []
        for line in lines:
            _, box, text = CHECKLIST_RE.match(line).groups()
            items.append(text.strip())
            checked.append(box in 'xX')
        self.elements.append(Checklist(items=items, checked=checked))
        return i

    def _list(self, i: int, accept: Callable[[str], bool], pattern: re.Pattern, ordered: bool) -> int:
        lines, i = self._absorb(i, accept)
        items, levels = [], []
        for line in lines:
            indent, text = pattern.match(line).groups()
            items.append(text.strip())
            levels.append(_indent_level(indent))
        self.elements.append(ListBlock(ordered=ordered, items=items, indent_levels=levels))
        return i

    def _bullet_list(self, i: int) -> int:
        return self._list(i, is_bullet_item, BULLET_RE, ordered=False)

    def _ordered_list(self, i: int) -> int:
        return self._list(i, is_ordered_item, ORDERED_RE, ordered=True)

    def _paragraph(self, i: int) -> int:
        content = ''
        start = i
        while i < len(self.lines) and self.lines[i].strip():
            if i > start and is_block_start(self.lines[i]):
                break
            line = self.lines[i].strip()
            if content and not content.endswith('\n'):
                content += ' '
            content += line
            if line.endswith('\\'):
                content += '\n'     # hard break; next line joins without indentation
            i += 1
        content = content.rstrip('\n')
        self.elements.append(Paragraph(content=content, inline=format_inline(content)))
        return i


_RULES: list[tuple[Callable[[str], bool], Callable[[_Scanner, int], int]]] = [
    (is_page_break,      _Scanner._page_break),
    (is_horizontal_rule, _Scanner._horizontal_rule),
    (is_image,           _Scanner._image),
    (is_heading,         _Scanner._heading),
    (is_table_row,       _Scanner._table),
    (is_fence,           _Scanner._code_block),
    (is_quote,           _Scanner._blockquote),
    (is_checklist_item,  _Scanner._checklist),
    (is_bullet_item,     _Scanner._bullet_list),
    (is_ordered_item,    _Scanner._ordered_list),
]


def parse_markdown(
    document: str,
    base_dir: Optional[str] = None,
    *,
    resolver: ImageResolver = resolve_image,
    diagnostics: Optional[list[Diagnostic]] = None,
    normalize: bool = True,
    ) -> list[Element]:
    """Parse a document into an ordered list of block elements.

    Never raises on document content: anything unrecognised becomes a
    paragraph. Non-fatal events (missing images, rejected data URIs) are
    logged and, when a diagnostics list is passed, appended to it.
    Relative image sources are resolved against base_dir by resolver.
    """
    document = document.replace('\r\n', '\n')
    if normalize:
        document = normalize_html(document)
    return _Scanner(document.split('\n'), base_dir, resolver, diagnostics).run()
