"""Document tree nodes consumed by the HTML renderer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

__all__ = [
    "Text",
    "Bold",
    "Italic",
    "Styled",
    "InlineMath",
    "LineBreak",
    "RawHTMLInline",
    "Link",
    "Cite",
    "Ref",
    "Footnote",
    "Section",
    "Paragraph",
    "AbstractBlock",
    "KeywordsBlock",
    "EnvironmentBlock",
    "References",
    "DisplayMath",
    "Image",
    "Subfigure",
    "Figure",
    "Subtable",
    "Table",
    "ListItem",
    "List",
    "StyledBlock",
    "TCB",
    "CodeBlock",
    "RawHTML",
    "ComplexHTML",
    "Author",
    "Institution",
    "ReferenceEntry",
    "Document",
    "Inline",
    "Block",
]


# Inline nodes


@dataclass
class Text:
    value: str = ""


@dataclass
class Bold:
    children: list[Inline] = field(default_factory=list)


@dataclass
class Italic:
    children: list[Inline] = field(default_factory=list)


@dataclass
class Styled:
    children: list[Inline] = field(default_factory=list)
    color: str = ""
    background: str = ""
    font_size: str = ""
    font_family: str = ""
    font_style: str = ""
    font_weight: str = ""
    font_variant: str = ""
    underline: bool = False
    bold: bool = False
    italic: bool = False
    mono: bool = False


@dataclass
class InlineMath:
    tex: str = ""


@dataclass
class LineBreak:
    pass


@dataclass
class RawHTMLInline:
    html: str = ""


@dataclass
class Link:
    url: str = ""
    children: list[Inline] = field(default_factory=list)


@dataclass
class Cite:
    keys: list[str] = field(default_factory=list)


@dataclass
class Ref:
    key: str = ""


@dataclass
class Footnote:
    children: list[Inline] = field(default_factory=list)


# Block nodes


@dataclass
class Section:
    level: int = 1
    title: list[Inline] = field(default_factory=list)
    label: str = ""
    children: list[Block] = field(default_factory=list)
    appendix: bool = False
    title_align: str = ""
    number: str = ""
    anchor_id: str = ""


@dataclass
class Paragraph:
    inlines: list[Inline] = field(default_factory=list)
    align: str = ""


@dataclass
class AbstractBlock:
    children: list[Block] = field(default_factory=list)


@dataclass
class KeywordsBlock:
    inlines: list[Inline] = field(default_factory=list)


@dataclass
class EnvironmentBlock:
    name: str = ""
    children: list[Block] = field(default_factory=list)


@dataclass
class References:
    pass


@dataclass
class DisplayMath:
    tex: str = ""
    numbered: bool = False
    label: str = ""
    number: str = ""
    anchor_id: str = ""


@dataclass
class Image:
    source_path: str = ""
    output_path: str = ""
    options: dict[str, str] = field(default_factory=dict)


@dataclass
class Subfigure:
    image_index: int = 0
    label: str = ""
    caption: list[Inline] = field(default_factory=list)
    break_after: bool = False
    number: str = ""
    anchor_id: str = ""


@dataclass
class Figure:
    label: str = ""
    image: Image | None = None
    images: list[Image | None] = field(default_factory=list)
    subfigures: list[Subfigure | None] = field(default_factory=list)
    caption: list[Inline] = field(default_factory=list)
    caption_align: str = ""
    number: str = ""
    anchor_id: str = ""


@dataclass
class Subtable:
    blocks: list[Block] = field(default_factory=list)
    label: str = ""
    caption: list[Inline] = field(default_factory=list)
    break_after: bool = False
    number: str = ""
    anchor_id: str = ""


@dataclass
class Table:
    label: str = ""
    children: list[Block] = field(default_factory=list)
    subtables: list[Subtable | None] = field(default_factory=list)
    caption: list[Inline] = field(default_factory=list)
    caption_align: str = ""
    number: str = ""
    anchor_id: str = ""


@dataclass
class ListItem:
    label: list[Inline] = field(default_factory=list)
    blocks: list[Block] = field(default_factory=list)


@dataclass
class List:
    kind: str = ""
    ordered: bool = False
    items: list[ListItem] = field(default_factory=list)


@dataclass
class StyledBlock:
    children: list[Block] = field(default_factory=list)
    color: str = ""
    background: str = ""
    font_size: str = ""
    align: str = ""
    font_family: str = ""
    font_style: str = ""
    font_weight: str = ""
    font_variant: str = ""
    underline: bool = False
    bold: bool = False
    italic: bool = False
    mono: bool = False


@dataclass
class TCB:
    title: list[Inline] = field(default_factory=list)
    children: list[Block] = field(default_factory=list)
    title_align: str = ""
    title_background: str = ""
    border_color: str = ""
    body_background: str = ""


@dataclass
class CodeBlock:
    env_name: str = ""
    language: str = ""
    text: str = ""


@dataclass
class RawHTML:
    html: str = ""


@dataclass
class ComplexHTML:
    env_name: str = ""
    raw_tex: str = ""
    html: str = ""
    label: str = ""
    number: str = ""
    anchor_id: str = ""


# Document metadata


@dataclass
class Author:
    name: list[Inline] = field(default_factory=list)
    email: str = ""
    institution_codes: list[str] = field(default_factory=list)
    attributes: list[str] = field(default_factory=list)


@dataclass
class Institution:
    code: str = ""
    number: int = 0
    info: list[Inline] = field(default_factory=list)
    aliases: list[str] = field(default_factory=list)


@dataclass
class ReferenceEntry:
    key: str = ""
    type: str = ""
    fields: dict[str, str] = field(default_factory=dict)


@dataclass
class Document:
    title: list[Inline] = field(default_factory=list)
    title_align: str = ""
    authors: list[Author] = field(default_factory=list)
    institutions: list[Institution] = field(default_factory=list)
    abstract: list[Block] = field(default_factory=list)
    keywords: list[Inline] = field(default_factory=list)
    children: list[Block] = field(default_factory=list)
    # None means no bibliography was loaded, which differs from an empty one.
    references: dict[str, ReferenceEntry] | None = None
    warnings: list[str] = field(default_factory=list)


Inline = Union[
    Text,
    Bold,
    Italic,
    Styled,
    InlineMath,
    LineBreak,
    RawHTMLInline,
    Link,
    Cite,
    Ref,
    Footnote,
]

Block = Union[
    Section,
    Paragraph,
    AbstractBlock,
    KeywordsBlock,
    EnvironmentBlock,
    References,
    DisplayMath,
    Figure,
    Table,
    List,
    StyledBlock,
    TCB,
    CodeBlock,
    RawHTML,
    ComplexHTML,
]