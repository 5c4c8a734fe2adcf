"""Plain-text extraction and math detection over the document tree."""

from __future__ import annotations

import html
from collections.abc import Iterable

from metablog.render.highlight_code import strip_html_tags
from metablog.render.nodes import (
    TCB,
    AbstractBlock,
    Block,
    Bold,
    Cite,
    ComplexHTML,
    DisplayMath,
    Document,
    EnvironmentBlock,
    Figure,
    Footnote,
    Inline,
    InlineMath,
    Italic,
    KeywordsBlock,
    LineBreak,
    Link,
    List,
    Paragraph,
    RawHTML,
    RawHTMLInline,
    Ref,
    Section,
    Styled,
    StyledBlock,
    Table,
    Text,
)

__all__ = [
    "inline_text",
    "visible_inline_text",
    "needs_space_between",
    "html_has_math_class",
    "inlines_have_math",
    "blocks_have_math",
    "document_has_math",
]

_NO_SPACE_AFTER = "([{"
_NO_SPACE_BEFORE = ",.;:!?)]}"


def _inline_text_of(node: Inline) -> str:
    if isinstance(node, Text):
        return node.value
    if isinstance(node, (Bold, Italic, Styled, Link, Footnote)):
        return inline_text(node.children)
    if isinstance(node, InlineMath):
        return node.tex
    if isinstance(node, LineBreak):
        return "\n"
    if isinstance(node, RawHTMLInline):
        return html.unescape(strip_html_tags(node.html))
    if isinstance(node, Cite):
        return ", ".join(node.keys)
    if isinstance(node, Ref):
        return node.key
    return ""


def inline_text(inlines: Iterable[Inline]) -> str:
    """Return the plain text of a run of inline nodes."""
    return "".join(_inline_text_of(node) for node in inlines)


def visible_inline_text(node: Inline) -> str:
    """Return the text used to decide spacing around a node; math counts as ``x``."""
    if isinstance(node, InlineMath):
        return "x"
    if isinstance(node, RawHTMLInline):
        return ""
    return _inline_text_of(node)


def needs_space_between(left: Inline, right: Inline) -> bool:
    """Report whether a space must separate inline math from its neighbour."""
    if not isinstance(left, InlineMath) and not isinstance(right, InlineMath):
        return False
    left_text = visible_inline_text(left)
    right_text = visible_inline_text(right)
    if not left_text or not right_text:
        return False
    last, first = left_text[-1], right_text[0]
    if last.isspace() or first.isspace():
        return False
    if last in _NO_SPACE_AFTER or first in _NO_SPACE_BEFORE:
        return False
    return True


def html_has_math_class(html_text: str) -> bool:
    """Report whether HTML contains inline or display math targets."""
    return "math inline" in html_text or "math display" in html_text


def inlines_have_math(inlines: Iterable[Inline]) -> bool:
    """Report whether any inline node, however nested, is math."""
    for node in inlines:
        if isinstance(node, InlineMath):
            return True
        if isinstance(node, (Bold, Italic, Styled, Link, Footnote)):
            if inlines_have_math(node.children):
                return True
    return False


def _block_has_math(block: Block) -> bool:
    if isinstance(block, DisplayMath):
        return True
    if isinstance(block, (ComplexHTML, RawHTML)):
        return html_has_math_class(block.html)
    if isinstance(block, (Section, TCB)):
        return inlines_have_math(block.title) or blocks_have_math(block.children)
    if isinstance(block, (Paragraph, KeywordsBlock)):
        return inlines_have_math(block.inlines)
    if isinstance(block, (StyledBlock, AbstractBlock, EnvironmentBlock)):
        return blocks_have_math(block.children)
    if isinstance(block, List):
        return any(
            inlines_have_math(item.label) or blocks_have_math(item.blocks)
            for item in block.items
        )
    if isinstance(block, Figure):
        return inlines_have_math(block.caption) or any(
            sub is not None and inlines_have_math(sub.caption)
            for sub in block.subfigures
        )
    if isinstance(block, Table):
        if inlines_have_math(block.caption) or blocks_have_math(block.children):
            return True
        return any(
            sub is not None
            and (inlines_have_math(sub.caption) or blocks_have_math(sub.blocks))
            for sub in block.subtables
        )
    return False


def blocks_have_math(blocks: Iterable[Block]) -> bool:
    """Report whether any block, however nested, contains math."""
    return any(_block_has_math(block) for block in blocks)


def document_has_math(doc: Document | None) -> bool:
    """Report whether the document needs the math renderer."""
    if doc is None:
        return False
    if inlines_have_math(doc.title) or inlines_have_math(doc.keywords):
        return True
    if any(inlines_have_math(author.name) for author in doc.authors):
        return True
    if any(inlines_have_math(inst.info) for inst in doc.institutions):
        return True
    return blocks_have_math(doc.abstract) or blocks_have_math(doc.children)