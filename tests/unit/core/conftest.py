"""Shared fixtures for core unit tests"""

import pytest

from mdblocks.core.images import resolve_path


SAMPLE_MD = """\
# Heading 1

A paragraph with **bold** text.

## Heading 2

- item one
- item two

- [ ] todo
- [x] done

```python
print("<b>hello</b>")
```

> quoted
> text

| A | B |
|---|---|
| 1 | 2 |

---PAGE_BREAK---

---

1. first
2. second
"""

# 1x1 transparent PNG
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00"
    b"\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01\x01\x00\x05\x18\xd8N\x00"
    b"\x00\x00\x00IEND\xaeB`\x82"
)


@pytest.fixture(name="sample_md")
def sample_md_fixture():
    return SAMPLE_MD


@pytest.fixture(name="png_file")
def png_file_fixture(tmp_path):
    path = tmp_path / "pic.png"
    path.write_bytes(PNG_BYTES)
    return path


@pytest.fixture(name="path_resolver")
def path_resolver_fixture():
    """Resolver that makes sources absolute without reading image files."""
    return resolve_path
