"""Element, inline span, and table-of-contents data models"""

from enum import Enum
from pathlib import Path
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ElementType(str, Enum):
    """Restrict block elements to a predefined set of kinds"""
    heading = "heading"
    paragraph = "paragraph"
    list = "list"
    checklist = "checklist"
    code_block = "codeBlock"
    blockquote = "blockquote"
    table = "table"
    image = "image"
    horizontal_rule = "horizontalRule"
    page_break = "pageBreak"


class InlineType(str, Enum):
    """Formatting treatment applied to a run of inline text"""
    text = "text"
    bold = "bold"
    italic = "italic"
    strike = "strike"
    code = "code"
    link = "link"
    line_break = "lineBreak"


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InlineSpan(_Model):
    """A run of text within a block carrying one formatting treatment."""
    type: InlineType
    content: str = ""
    href: Optional[str] = None      # links only


class Heading(_Model):
    type: Literal[ElementType.heading] = ElementType.heading
    level: int = Field(..., ge=1, le=6)
    content: str
    inline: list[InlineSpan] = []
    anchor_id: Optional[str] = None


class Paragraph(_Model):
    type: Literal[ElementType.paragraph] = ElementType.paragraph
    content: str
    inline: list[InlineSpan] = []


class ListBlock(_Model):
    type: Literal[ElementType.list] = ElementType.list
    ordered: bool
    items: list[str]
    indent_levels: list[int]        # 0-based nesting depth, parallel to items


class Checklist(_Model):
    type: Literal[ElementType.checklist] = ElementType.checklist
    items: list[str]
    checked: list[bool]


class CodeBlock(_Model):
    type: Literal[ElementType.code_block] = ElementType.code_block
    language: str
    content: str                    # verbatim fence interior


class Blockquote(_Model):
    type: Literal[ElementType.blockquote] = ElementType.blockquote
    content: str
    inline: list[InlineSpan] = []


class Table(_Model):
    type: Literal[ElementType.table] = ElementType.table
    headers: list[str]
    rows: list[list[str]]           # as observed; short rows are not padded


class Image(_Model):
    type: Literal[ElementType.image] = ElementType.image
    src: str
    alt: str = ""
    title: Optional[str] = None


class HorizontalRule(_Model):
    type: Literal[ElementType.horizontal_rule] = ElementType.horizontal_rule


class PageBreak(_Model):
    type: Literal[ElementType.page_break] = ElementType.page_break


Element = Annotated[
    Union[
        Heading, Paragraph, ListBlock, Checklist, CodeBlock,
        Blockquote, Table, Image, HorizontalRule, PageBreak,
    ],
    Field(discriminator="type"),
]


class TOCEntry(_Model):
    """One heading in the table of contents; immutable once built."""
    model_config = ConfigDict(frozen=True)
    text: str
    level: int
    anchor_id: str


class Diagnostic(_Model):
    """A non-fatal event recorded while parsing (missing image, rejected data URI, ...)."""
    level: Literal["debug", "info", "warning"] = "warning"
    code: str
    message: str
    line: Optional[int] = None      # 1-based source line, when known


class ParsedDoc(_Model):
    """Parse result for one file, as written by the pipeline."""
    slug: str
    path: Path
    hash: str
    elements: list[Element]
    toc: list[TOCEntry] = []
    diagnostics: list[Diagnostic] = []
