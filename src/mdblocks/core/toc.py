"""Table-of-contents extraction from parsed elements"""

from mdblocks.core.models import Element, ElementType, TOCEntry


def extract_toc(elements: list[Element]) -> list[TOCEntry]:
    """Return one entry per heading, in document order.

    Headings without a level or anchor id are skipped; the parser always
    assigns both, so this only matters for hand-built element lists.
    """
    entries: list[TOCEntry] = []
    for element in elements:
        if element.type != ElementType.heading:
            continue
        if element.level and element.anchor_id:
            entries.append(TOCEntry(text=element.content, level=element.level, anchor_id=element.anchor_id))
    return entries


extract_table_of_contents = extract_toc


def filter_toc_by_level(entries: list[TOCEntry], min_level: int = 1, max_level: int = 6) -> list[TOCEntry]:
    """Keep entries with min_level <= level <= max_level, preserving order."""
    return [e for e in entries if min_level <= e.level <= max_level]


def format_outline(entries: list[TOCEntry], indent: str = "  ") -> str:
    """Render entries as an indented outline, relative to the shallowest level present."""
    if not entries:
        return ""
    base = min(e.level for e in entries)
    return "\n".join(f"{indent * (e.level - base)}- {e.text} (#{e.anchor_id})" for e in entries)
