"""Anchor id generation and internal-link resolution for headings"""

import re
import unicodedata
from typing import Iterable, Optional


_SEPARATORS_RE = re.compile(r'[\s_]+')
_HYPHENS_RE = re.compile(r'-+')


def _keep(ch: str) -> bool:
    """True for letters, digits, combining marks, and hyphens."""
    return ch == '-' or unicodedata.category(ch)[0] in ('L', 'N', 'M')


def generate_anchor_id(text: str) -> str:
    """Convert heading text to a lowercase, hyphen-separated anchor id (unicode letters kept)."""
    slug = unicodedata.normalize('NFD', text).lower()
    slug = _SEPARATORS_RE.sub('-', slug)
    slug = ''.join(ch for ch in slug if _keep(ch))
    slug = unicodedata.normalize('NFC', slug)
    slug = _HYPHENS_RE.sub('-', slug).strip('-')
    return slug or 'heading'


def generate_unique_anchor_id(text: str, used_ids: set[str]) -> str:
    """Return an anchor id not yet in used_ids, suffixing -1, -2, ... on collision.

    The chosen id is added to used_ids.
    """
    base = generate_anchor_id(text)
    anchor_id = base
    counter = 1
    while anchor_id in used_ids:
        anchor_id = f"{base}-{counter}"
        counter += 1
    used_ids.add(anchor_id)
    return anchor_id


def resolve_anchor_link(href: str, anchor_ids: Iterable[str]) -> Optional[str]:
    """Match an internal link like '#My Heading' to one of anchor_ids, else None."""
    target = href[1:] if href.startswith('#') else href
    if not target:
        return None
    anchors = set(anchor_ids)
    expected = generate_anchor_id(target)
    if expected in anchors:
        return expected
    lowered = expected.lower()
    for anchor_id in sorted(anchors):
        if anchor_id.lower() == lowered:
            return anchor_id
    return None
