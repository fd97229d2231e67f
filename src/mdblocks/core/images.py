"""Image source resolution: relative paths to base64 data URIs"""

import base64
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from mdblocks.core.models import Diagnostic


MIME_TYPES: dict[str, str] = {
    '.png':  'image/png',
    '.jpg':  'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.gif':  'image/gif',
    '.webp': 'image/webp',
    '.svg':  'image/svg+xml',
}
DEFAULT_MIME = 'image/png'


@dataclass
class ResolvedImage:
    """Outcome of resolving one image source; diagnostics describe any fallback."""
    src: str
    diagnostics: list[Diagnostic] = field(default_factory=list)


ImageResolver = Callable[[str, Optional[str]], ResolvedImage]


def is_remote(src: str) -> bool:
    return src.startswith(('http://', 'https://'))


def is_data_uri(src: str) -> bool:
    return src.startswith('data:')


def mime_type(path: Path) -> str:
    """Return the MIME type for an image path by extension, defaulting to PNG."""
    return MIME_TYPES.get(path.suffix.lower(), DEFAULT_MIME)


def to_data_uri(path: Path) -> str:
    """Read an image file and encode it as a base64 data URI."""
    encoded = base64.b64encode(path.read_bytes()).decode('ascii')
    return f"data:{mime_type(path)};base64,{encoded}"


def resolve_image(src: str, base_dir: Optional[str] = None) -> ResolvedImage:
    """Resolve src against base_dir and embed the file; keep src unchanged if it cannot be read."""
    if is_remote(src) or is_data_uri(src):
        return ResolvedImage(src=src)

    path = Path(src)
    if not path.is_absolute():
        path = Path(base_dir or '.') / path
    path = path.resolve()

    if not path.is_file():
        return ResolvedImage(src=src, diagnostics=[Diagnostic(
            code='image-not-found', message=f"Image not found: {path}",
        )])
    try:
        return ResolvedImage(src=to_data_uri(path))
    except OSError as e:
        return ResolvedImage(src=src, diagnostics=[Diagnostic(
            code='image-unreadable', message=f"Failed to read image {path}: {e}",
        )])


def resolve_path(src: str, base_dir: Optional[str] = None) -> ResolvedImage:
    """Resolver that makes relative sources absolute without reading the file."""
    if is_remote(src) or is_data_uri(src) or Path(src).is_absolute():
        return ResolvedImage(src=src)
    return ResolvedImage(src=str((Path(base_dir or '.') / src).resolve()))
