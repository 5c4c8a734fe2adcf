"""Syntax-highlighted code blocks with line numbers and toolbar buttons."""

from __future__ import annotations

import re

from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.lexers.special import TextLexer
from pygments.token import STANDARD_TYPES, _TokenType
from pygments.util import ClassNotFound

__all__ = ["highlight", "split_chroma_lines", "strip_html_tags", "render_code_block"]

_CLASS_PREFIX = "ch"
_LINE_OPEN = '<span class="chline"><span class="chcl">'
_LINE_CLOSE = "</span></span>"
_TAG_RE = re.compile(r"<[^>]*>?|>")
_ESCAPES = str.maketrans(
    {"&": "&amp;", "'": "&#39;", "<": "&lt;", ">": "&gt;", '"': "&#34;"}
)

_WRAP_BUTTON = (
    '<button class="code-block-btn code-block-wrap-btn" title="Toggle word wrap" '
    'aria-label="Toggle word wrap"><svg width="20" height="20" viewBox="0 0 24 24" '
    'focusable="false"><path d="M4 19h6v-2H4v2zM20 5H4v2h16V5zm-3 6H4v2h13.25c1.1 0 2 '
    '.9 2 2s-.9 2-2 2H15v-2l-3 3 3 3v-2h2c2.21 0 4-1.79 4-4s-1.79-4-4-4z" '
    'fill="currentColor"/></svg></button>'
)
_COPY_BUTTON = (
    '<button class="code-block-btn code-block-copy-btn" title="Copy code" '
    'aria-label="Copy code"><svg width="20" height="20" viewBox="0 0 24 24" '
    'focusable="false"><path d="M16 1H4c-1.1 0-2 .9-2 2v14h2V3h12V1zm3 4H8c-1.1 0-2 '
    ".9-2 2v14c0 1.1.9 2 2 2h11c1.1 0 2-.9 2-2V7c0-1.1-.9-2-2-2zm0 16H8V7h11v14z\" "
    'fill="currentColor"/></svg></button>'
)
_COLLAPSE_BUTTON = (
    '<button class="code-block-btn code-block-collapse-btn" title="Collapse code" '
    'aria-label="Collapse code"><svg width="20" height="20" viewBox="0 0 24 24" '
    'focusable="false"><path d="M12 8l-6 6 1.41 1.41L12 10.83l4.59 4.58L18 14z" '
    'fill="currentColor"/></svg></button>'
)


def _escape(text: str) -> str:
    return text.translate(_ESCAPES)


def _lexer_for(language: str) -> Lexer:
    options = {"stripnl": False, "ensurenl": True}
    try:
        return get_lexer_by_name(language, **options)
    except ClassNotFound:
        return TextLexer(**options)


def _css_class(ttype: _TokenType) -> str:
    while ttype not in STANDARD_TYPES:
        ttype = ttype.parent
    short = STANDARD_TYPES[ttype]
    return _CLASS_PREFIX + short if short else ""


def _token_html(css_class: str, text: str) -> str:
    escaped = _escape(text)
    if not css_class:
        return escaped
    return f'<span class="{css_class}">{escaped}</span>'


def highlight(code: str, language: str) -> str:
    """Highlight ``code`` as HTML, one ``chline`` span per source line.

    Unknown languages are rendered as plain text.
    """
    lines: list[str] = []
    current: list[str] = []
    for ttype, value in _lexer_for(language).get_tokens(code):
        css_class = _css_class(ttype)
        for index, piece in enumerate(value.split("\n")):
            if index:
                lines.append("".join(current))
                current = []
            if piece:
                current.append(_token_html(css_class, piece))
    if current or not lines:
        lines.append("".join(current))
    return "".join(_LINE_OPEN + line + _LINE_CLOSE for line in lines)


def split_chroma_lines(html_text: str) -> list[str]:
    """Split highlighted HTML into per-line fragments with balanced spans."""
    delim = '</span></span><span class="chline">'
    parts = html_text.split(delim)
    if len(parts) <= 1:
        if not html_text.strip():
            return [""]
        return html_text.split("\n")
    open_tag = '<span class="chline">'
    close_tag = "</span></span>"
    last = len(parts) - 1
    lines = []
    for index, part in enumerate(parts):
        if index == 0:
            lines.append(part + close_tag)
        elif index == last:
            lines.append(open_tag + part)
        else:
            lines.append(open_tag + part + close_tag)
    return lines


def strip_html_tags(s: str) -> str:
    """Remove everything between ``<`` and ``>``, returning only text content."""
    return _TAG_RE.sub("", s)


def render_code_block(text: str, language: str) -> str:
    """Render a code block with source copy, toolbar and numbered lines."""
    lang = language or "text"
    highlighted = highlight(text, lang) or _escape(text)
    parts = [
        '<div class="code-block chchroma" data-wrap="false">',
        '<textarea class="code-block-source" hidden readonly>',
        _escape(text),
        "</textarea>",
        '<div class="code-block-header">',
        '<span class="code-block-lang">',
        _escape(lang),
        "</span>",
        '<div class="code-block-actions">',
        _WRAP_BUTTON,
        _COPY_BUTTON,
        _COLLAPSE_BUTTON,
        "</div></div>",
        '<div class="code-block-body"><table class="code-block-table"><tbody>',
    ]
    for number, line in enumerate(split_chroma_lines(highlighted), start=1):
        cleaned = line.replace("\n", "")
        if not cleaned.strip() or not strip_html_tags(cleaned).strip():
            cleaned = " "
        parts.append(
            '<tr class="code-block-row"><td class="code-block-line-no">'
            f"{_escape(str(number))}</td>"
            f'<td class="code-block-line-code">{cleaned}</td></tr>'
        )
    parts.append("</tbody></table></div></div>")
    return "".join(parts)