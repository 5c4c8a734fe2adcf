"""Cleanup of LaTeXML HTML output into safe, KaTeX-ready fragments."""

from __future__ import annotations

import html
import re
import string

__all__ = [
    "extract_body",
    "strip_tag_blocks",
    "wrap_fragment",
    "sanitize_fragment",
    "sanitize_style_value",
    "is_safe_css_color",
    "repair_aligned_math_from_raw",
    "annotate_algorithm_lines",
    "normalize_alt_tex",
    "inline_math_html",
    "display_math_html",
    "parse_attrs",
]

_ESCAPES = str.maketrans(
    {"&": "&amp;", "'": "&#39;", "<": "&lt;", ">": "&gt;", '"': "&#34;"}
)
_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)
_HTML_SPACES = " \t\r\n\f\u00a0\ufeff"

_GENERATED_ID_ATTR_RE = re.compile(r"""\sid=("[^"]*"|'[^']*')""", re.I)
_STYLE_ATTR_RE = re.compile(r"""\sstyle=("[^"]*"|'[^']*')""", re.I | re.S)
_MATH_TAG_RE = re.compile(r"<math\b([^>]*)>.*?</math>", re.I | re.S)
_HTML_ATTR_RE = re.compile(r"""([a-z_:][-a-z0-9_:.]*)=("[^"]*"|'[^']*')""", re.I)
_CSS_HEX_COLOR_RE = re.compile(r"#[0-9a-f]{3}([0-9a-f]{3})?([0-9a-f]{2})?", re.I)
_CSS_NAMED_COLOR_RE = re.compile(r"[a-z]+", re.I | re.A)
_CSS_RGB_COLOR_RE = re.compile(
    r"rgba?\(\s*(\d{1,3}%?\s*,\s*){2}\d{1,3}%?(\s*,\s*(0|1|0?\.\d+|\d{1,3}%))?\s*\)",
    re.I | re.A,
)
_RAW_INLINE_ALIGNED_MATH_RE = re.compile(
    r"\\\((\\begin\{aligned\}.*?\\end\{aligned\})\\\)", re.S
)
_RENDERED_INLINE_ALIGNED_MATH_RE = re.compile(
    r'<span class="math inline">\\\((\\begin\{aligned\}.*?\\end\{aligned\})\\\)</span>',
    re.S,
)
_ALGORITHM_FIGURE_RE = re.compile(
    r'<figure\s+class="[^"]*\bltx_algorithm\b[^"]*"[^>]*>.*?</figure>', re.I | re.S
)
_LISTING_LINE_RE = re.compile(
    r'<div\s+class="([^"]*\bltx_listingline\b[^"]*)"([^>]*)>(.*?)</div>', re.I | re.S
)
_LISTING_LINE_ADORNMENT_RE = re.compile(
    r'<span\s+class="[^"]*\b(?:ltx_tag_listingline|ltx_rule)\b[^"]*"[^>]*>.*?</span>',
    re.I | re.S,
)
_LISTING_RULE_RE = re.compile(
    r'<span\s+class="[^"]*\bltx_rule\b[^"]*"[^>]*>.*?</span>', re.I | re.S
)
_ALGORITHM_IO_LABEL_RE = re.compile(
    r"<span\b[^>]*\bltx_font_bold\b[^>]*>\s*(Input:|Output:)\s*</span>", re.I | re.S
)
_SPAN_TAG_RE = re.compile(r"<span\b[^>]*>|</span>", re.I | re.S)
_HTML_TAG_RE = re.compile(r"<[^>]+>", re.S)


def _escape(text: str) -> str:
    return text.translate(_ESCAPES)


def _lower(text: str) -> str:
    # ASCII-only lowering keeps indices aligned with the original string.
    return text.translate(_ASCII_LOWER)


def extract_body(s: str) -> str:
    """Return the sanitized content of the ``<body>`` element of LaTeXML output."""
    s = strip_tag_blocks(s, "style")
    s = strip_tag_blocks(s, "script")
    lower = _lower(s)
    start = lower.find("<body")
    if start < 0:
        return sanitize_fragment(s)
    close_start = lower.find(">", start)
    if close_start < 0:
        return s
    start = close_start + 1
    end = lower.rfind("</body>")
    if end < start:
        return sanitize_fragment(s[start:])
    return sanitize_fragment(s[start:end])


def strip_tag_blocks(s: str, tag: str) -> str:
    """Remove every complete ``<tag ...>...</tag>`` block from ``s``."""
    open_tag = "<" + tag
    close_tag = "</" + tag + ">"
    lower = _lower(s)
    while True:
        start = lower.find(open_tag)
        if start < 0:
            return s
        open_end = lower.find(">", start)
        if open_end < 0:
            return s
        end = lower.find(close_tag, open_end + 1)
        if end < 0:
            return s
        s = s[:start] + s[end + len(close_tag):]
        lower = _lower(s)


def wrap_fragment(fragment: str) -> str:
    """Wrap a non-empty fragment in the fragment container div."""
    fragment = fragment.strip()
    if not fragment:
        return ""
    return '<div class="metablog-latexml-fragment">' + fragment + "</div>"


def sanitize_fragment(s: str) -> str:
    """Convert math tags, drop generated ids, filter styles and tidy algorithms."""
    s = _MATH_TAG_RE.sub(lambda m: _replace_math_tag(m.group(0)), s)
    s = _GENERATED_ID_ATTR_RE.sub("", s)
    s = _sanitize_style_attrs(s)
    s = annotate_algorithm_lines(s)
    return s.strip()


def _sanitize_style_attr(match: re.Match[str]) -> str:
    attr = match.group(0)
    eq = attr.find("=")
    if eq < 0:
        return ""
    raw = attr[eq + 1:].strip()
    if len(raw) < 2:
        return ""
    quote = raw[0]
    if quote not in "\"'" or raw[-1] != quote:
        return ""
    style = sanitize_style_value(html.unescape(raw[1:-1]))
    if not style:
        return ""
    return ' style="' + _escape(style) + '"'


def _sanitize_style_attrs(s: str) -> str:
    return _STYLE_ATTR_RE.sub(_sanitize_style_attr, s)


def sanitize_style_value(style: str) -> str:
    """Keep only colour declarations whose values are safe."""
    kept = []
    for decl in style.split(";"):
        prop, sep, val = decl.partition(":")
        if not sep:
            continue
        prop = prop.strip().lower()
        val = val.strip()
        if prop not in ("color", "background-color") or not is_safe_css_color(val):
            continue
        kept.append(f"{prop}:{val}")
    return ";".join(kept)


def is_safe_css_color(val: str) -> bool:
    """Report whether ``val`` is a plain hex, named or rgb(a) colour."""
    val = val.strip()
    if not val or any(ch in val for ch in ";\"'<>\\"):
        return False
    return any(
        pattern.fullmatch(val)
        for pattern in (_CSS_HEX_COLOR_RE, _CSS_NAMED_COLOR_RE, _CSS_RGB_COLOR_RE)
    )


def repair_aligned_math_from_raw(html_text: str, raw_tex: str) -> str:
    """Replace rendered inline aligned math with the matching source TeX, in order."""
    raw_matches = _RAW_INLINE_ALIGNED_MATH_RE.findall(raw_tex)
    if not raw_matches:
        return html_text
    pending = iter(raw_matches)

    def replace(match: re.Match[str]) -> str:
        raw = next(pending, None)
        if raw is None:
            return match.group(0)
        raw = normalize_alt_tex(raw)
        if not raw:
            return match.group(0)
        return inline_math_html(raw)

    return _RENDERED_INLINE_ALIGNED_MATH_RE.sub(replace, html_text)


def annotate_algorithm_lines(s: str) -> str:
    """Add depth, numbering and I/O classes to algorithm listing lines."""
    return _ALGORITHM_FIGURE_RE.sub(
        lambda fig: _LISTING_LINE_RE.sub(_annotate_line, fig.group(0)), s
    )


def _annotate_line(match: re.Match[str]) -> str:
    class_name, attrs, body = match.group(1, 2, 3)
    line_text = _algorithm_line_text(body)
    if not line_text:
        return ""
    if "ltx_tag_listingline" in body:
        class_name += " metablog-algorithm-numbered"
    rule_depth = min(len(_LISTING_RULE_RE.findall(body)), 6)
    if rule_depth > 0:
        class_name += f" metablog-algorithm-depth-{rule_depth}"
    if line_text.startswith(("input:", "output:")):
        class_name += " metablog-algorithm-io"
        body = _wrap_algorithm_io(body)
    body = _strip_algorithm_line_indentation(body)
    return f'<div class="{class_name}"{attrs}>{body}</div>'


def _algorithm_line_text(body: str) -> str:
    body = _LISTING_LINE_ADORNMENT_RE.sub("", body)
    text = html.unescape(_HTML_TAG_RE.sub("", body)).replace("\u00a0", " ")
    return text.strip().lower()


def _strip_algorithm_line_indentation(body: str) -> str:
    prefix = ""
    rest = body.lstrip(_HTML_SPACES)
    if rest.lower().startswith("<span") and _span_has_class(rest, "ltx_tag_listingline"):
        end = _consume_leading_span(rest)
        if end is not None:
            prefix, rest = rest[:end], rest[end:]
    while True:
        rest = rest.lstrip(_HTML_SPACES)
        if not rest.lower().startswith("<span"):
            break
        end = _consume_leading_span(rest)
        if end is None:
            break
        span = rest[:end]
        if _span_has_class(span, "ltx_rule"):
            rest = rest[end:]
        elif _span_has_class(span, "ltx_text") and _span_text_is_whitespace(span):
            rest = rest[end:]
        else:
            break
    return prefix + rest


def _wrap_algorithm_io(body: str) -> str:
    match = _ALGORITHM_IO_LABEL_RE.search(body)
    if match is None:
        return body
    label = match.group(1).strip()
    content = _strip_algorithm_line_indentation(body[: match.start()] + body[match.end():])
    return (
        '<span class="metablog-algorithm-io-label">' + _escape(label) + "</span>"
        '<span class="metablog-algorithm-io-content">' + content + "</span>"
    )


def _consume_leading_span(s: str) -> int | None:
    """Return the end offset of the balanced span starting at offset 0."""
    depth = 0
    for index, match in enumerate(_SPAN_TAG_RE.finditer(s)):
        if index == 0 and match.start() != 0:
            return None
        if match.group(0).lower().startswith("</span"):
            depth -= 1
            if depth == 0:
                return match.end()
            continue
        depth += 1
    return None


def _span_has_class(span: str, class_name: str) -> bool:
    return class_name in span.lower()


def _span_text_is_whitespace(span: str) -> bool:
    text = html.unescape(_HTML_TAG_RE.sub("", span))
    return text.lstrip(_HTML_SPACES) == ""


def _replace_math_tag(tag: str) -> str:
    attrs = parse_attrs(tag)
    tex = attrs.get("alttext", "").strip()
    if not tex:
        return tag
    tex = normalize_alt_tex(tex)
    if attrs.get("display", "") in ("inline", ""):
        return inline_math_html(tex)
    return display_math_html(tex)


def inline_math_html(tex: str) -> str:
    """Return an inline KaTeX render target for ``tex``."""
    escaped = _escape(tex)
    return f'<span class="math inline" data-tex="{escaped}">\\({escaped}\\)</span>'


def display_math_html(tex: str) -> str:
    """Return a display KaTeX render target for ``tex``."""
    escaped = _escape(tex)
    return (
        '<div class="math display"><span class="math-render-target" '
        f'data-tex="{escaped}">\\[{escaped}\\]</span></div>'
    )


def parse_attrs(tag: str) -> dict[str, str]:
    """Parse quoted attributes of an HTML tag into a lower-cased-key dict."""
    out: dict[str, str] = {}
    for match in _HTML_ATTR_RE.finditer(tag):
        value = match.group(2)
        if len(value) >= 2:
            value = value[1:-1]
        out[match.group(1).lower()] = html.unescape(value)
    return out


def normalize_alt_tex(tex: str) -> str:
    """Join TeX onto one line, dropping comment line-continuations."""
    tex = tex.replace("\r\n", "\n").replace("\r", "\n")
    tex = tex.replace("%\n", "").replace("\n", " ")
    return " ".join(tex.split())