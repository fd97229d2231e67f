"""File-level parsing: discovery, per-document parse, and JSON output"""

import hashlib
import logging
from pathlib import Path

from mdblocks.config import Settings
from mdblocks.core.images import resolve_image, resolve_path
from mdblocks.core.models import Diagnostic, ParsedDoc
from mdblocks.core.parse import parse_markdown
from mdblocks.core.toc import extract_toc, filter_toc_by_level
from mdblocks.core.utils.anchor import generate_anchor_id


log = logging.getLogger(__name__)

MD_EXTENSIONS = {'.md', '.markdown'}


def discover_files(path: Path) -> list[Path]:
    """Return sorted markdown files under path, or [path] if a single markdown file."""
    if path.is_file():
        return [path] if path.suffix.lower() in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.suffix.lower() in MD_EXTENSIONS)


def parse_file(path: Path, settings: Settings) -> ParsedDoc:
    """Parse one file; images resolve relative to the file's directory."""
    raw = path.read_text(encoding='utf-8')
    diagnostics: list[Diagnostic] = []
    elements = parse_markdown(
        raw,
        base_dir=str(path.parent),
        resolver=resolve_image if settings.embed_images else resolve_path,
        diagnostics=diagnostics,
        normalize=settings.normalize_html,
    )
    toc = filter_toc_by_level(extract_toc(elements), settings.toc_min_level, settings.toc_max_level)
    return ParsedDoc(
        slug=generate_anchor_id(path.stem),
        path=path,
        hash=hashlib.sha256(raw.encode('utf-8')).hexdigest(),
        elements=elements,
        toc=toc,
        diagnostics=diagnostics,
    )


def run_parse(path: str, settings: Settings, output_dir: Path) -> list[tuple[Path, Path]]:
    """Parse path and write one JSON document per file. Returns (source_path, output_file) pairs."""
    output_dir.mkdir(parents=True, exist_ok=True)
    results = []
    for p in discover_files(Path(path)):
        try:
            doc = parse_file(p, settings)
            out_file = output_dir / f"{doc.slug}.json"
            out_file.write_text(doc.model_dump_json(indent=2, by_alias=True), encoding='utf-8')
        except Exception as e:
            raise RuntimeError(f"Failed to parse {p}: {e}") from e
        log.debug("parsed %s: %d elements, %d diagnostics", p, len(doc.elements), len(doc.diagnostics))
        results.append((p, out_file))
    return results
