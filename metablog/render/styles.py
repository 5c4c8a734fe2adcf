"""Inline CSS, anchors, numbering labels and URL helpers for the renderer."""

from __future__ import annotations

import math
import re
from collections.abc import Sequence

from metablog.render.nodes import TCB, Image, Styled, StyledBlock

__all__ = [
    "style_string",
    "inline_style",
    "block_style",
    "tcb_style",
    "font_family_style",
    "align_style",
    "safe_link_url",
    "image_width_style",
    "subfigure_width_style",
    "latex_width_to_css",
    "format_percent",
    "anchor",
    "subfigure_letter",
    "appendix_letter",
    "appendix_number",
    "join_numbers",
    "subfigure_display_number",
    "join_url",
]

_FONT_FAMILIES = {
    "serif": '"TeX Gyre Pagella", "Source Han Serif SC", "Noto Serif CJK SC", '
    '"Source Han Serif CN", "Noto Serif SC", "Songti SC", SimSun, Georgia, serif',
    "sans": '"HarmonyOS Sans", "HarmonyOS Sans SC", "Source Han Sans SC", '
    '"Noto Sans CJK SC", "Microsoft YaHei", Arial, sans-serif',
    "mono": '"Source Code Pro", Consolas, "Liberation Mono", "Courier New", monospace',
}
_ALIGNMENTS = frozenset({"left", "center", "right", "justify"})
_SAFE_URL_PREFIXES = ("http://", "https://", "mailto:", "ftp://")
_RELATIVE_URL_PREFIXES = ("#", "/", "./", "../")
_WIDTH_UNITS = (r"\textwidth", r"\linewidth", r"\columnwidth")
_ANCHOR_RE = re.compile(r"[^a-zA-Z0-9_-]+")


def style_string(
    color: str,
    background: str,
    font_size: str,
    align: str,
    font_family: str,
    font_style: str,
    font_weight: str,
    font_variant: str,
    underline: bool,
    bold: bool,
    italic: bool,
    mono: bool,
) -> str:
    """Build a CSS declaration list; empty when nothing is set."""
    parts: list[str] = []
    if color:
        parts.append("color: " + color)
    if background:
        parts += ["background-color: " + background, "padding: 0 0.16em"]
    if font_size:
        parts.append("font-size: " + font_size)
    if align:
        parts.append("text-align: " + align)
    if underline:
        parts.append("text-decoration: underline")
    if bold and not font_weight:
        font_weight = "700"
    if font_weight:
        parts.append("font-weight: " + font_weight)
    if italic and not font_style:
        font_style = "italic"
    if font_style:
        parts.append("font-style: " + font_style)
    if mono and not font_family:
        font_family = "mono"
    family = font_family_style(font_family)
    if family:
        parts.append("font-family: " + family)
    if font_variant:
        parts.append("font-variant: " + font_variant)
    if not parts:
        return ""
    return "; ".join(parts) + ";"


def inline_style(node: Styled | None) -> str:
    """Return the CSS for a styled inline span."""
    if node is None:
        return ""
    return style_string(
        node.color, node.background, node.font_size, "", node.font_family,
        node.font_style, node.font_weight, node.font_variant,
        node.underline, node.bold, node.italic, node.mono,
    )


def block_style(node: StyledBlock | None) -> str:
    """Return the CSS for a styled block."""
    if node is None:
        return ""
    return style_string(
        node.color, node.background, node.font_size, node.align, node.font_family,
        node.font_style, node.font_weight, node.font_variant,
        node.underline, node.bold, node.italic, node.mono,
    )


def tcb_style(node: TCB) -> str:
    """Return the CSS custom properties of a coloured box."""
    title_bg = node.title_background or "color-mix(in srgb, gray 70%, white)"
    border = node.border_color or "black"
    body_bg = node.body_background or f"color-mix(in srgb, {title_bg} 20%, white)"
    align = node.title_align or "left"
    return (
        f"--tcb-title-bg: {title_bg}; --tcb-border: {border}; "
        f"--tcb-title-color: {border}; --tcb-body-bg: {body_bg}; "
        f"--tcb-title-align: {align};"
    )


def font_family_style(font_family: str) -> str:
    """Return the font stack for ``serif``, ``sans`` or ``mono``, else empty."""
    return _FONT_FAMILIES.get(font_family, "")


def align_style(align: str) -> str:
    """Return a text-align declaration for a known alignment, else empty."""
    if align in _ALIGNMENTS:
        return f"text-align: {align};"
    return ""


def safe_link_url(raw: str) -> str:
    """Return ``raw`` if its scheme is safe or it is relative, else ``#``."""
    url = raw.strip()
    if url.lower().startswith(_SAFE_URL_PREFIXES) or url.startswith(_RELATIVE_URL_PREFIXES):
        return url
    if ":" in url:
        return "#"
    return url


def image_width_style(image: Image | None) -> str:
    """Return a width declaration for an image's LaTeX width option."""
    if image is None or not image.options:
        return ""
    width = image.options.get("width", "").strip()
    if not width:
        return ""
    css_width = latex_width_to_css(width)
    if css_width is None:
        return ""
    return f"width: {css_width}; max-width: 100%;"


def subfigure_width_style(image_style: str) -> str:
    """Turn an image width style into a flex basis for a subfigure box."""
    width = image_style
    if width.startswith("width:"):
        width = width[len("width:"):]
    width = width.strip()
    width = width.split(";", 1)[0].strip()
    if not width:
        return image_style
    return f"flex: 0 0 {width}; max-width: {width};"


def _parse_float(text: str) -> float | None:
    if not text or text != text.strip() or "_" in text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def latex_width_to_css(width: str) -> str | None:
    """Convert a LaTeX width such as ``0.5\\textwidth`` to CSS, or return None."""
    width = width.replace(" ", "").replace("{", "").replace("}", "")
    if width.endswith("%") and _parse_float(width[:-1]) is not None:
        return width
    for unit in _WIDTH_UNITS:
        if unit not in width:
            continue
        factor = width[: -len(unit)] if width.endswith(unit) else width
        factor = factor.strip()
        if not factor:
            return "100%"
        if factor.endswith("*"):
            factor = factor[:-1]
        value = _parse_float(factor)
        if value is None:
            return None
        return format_percent(value * 100)
    return None


def format_percent(value: float) -> str:
    """Format ``value`` as a percentage with at most four decimals."""
    if math.isnan(value):
        return "NaN%"
    if math.isinf(value):
        return ("+Inf" if value > 0 else "-Inf") + "%"
    return f"{value:.4f}".rstrip("0").rstrip(".") + "%"


def anchor(label: str, fallback: str) -> str:
    """Derive an HTML id from a label, or from ``fallback`` when it is empty."""
    base = (label or fallback).replace(":", "-")
    base = _ANCHOR_RE.sub("-", base).strip("-")
    return base or "item"


def _bijective_letters(index: int, first: str) -> str:
    letters: list[str] = []
    while True:
        letters.append(chr(ord(first) + index % 26))
        index = index // 26 - 1
        if index < 0:
            return "".join(reversed(letters))


def subfigure_letter(index: int) -> str:
    """Return ``a``..``z``, ``aa``.. for a zero-based index; ``?`` if negative."""
    if index < 0:
        return "?"
    return _bijective_letters(index, "a")


def appendix_letter(index: int) -> str:
    """Return ``A``..``Z``, ``AA``.. for a zero-based index; ``A`` if negative."""
    if index < 0:
        return "A"
    return _bijective_letters(index, "A")


def appendix_number(nums: Sequence[int]) -> str:
    """Format appendix counters, the first as a letter."""
    if not nums:
        return ""
    return ".".join([appendix_letter(nums[0] - 1), *(str(n) for n in nums[1:])])


def join_numbers(nums: Sequence[int]) -> str:
    """Join section counters with dots."""
    return ".".join(str(n) for n in nums)


def subfigure_display_number(number: str) -> str:
    """Return the part of ``number`` after its last dot, if any."""
    head, dot, tail = number.rpartition(".")
    if dot and tail:
        return tail
    return number


def join_url(prefix: str, path: str) -> str:
    """Join an asset prefix and a relative path with exactly one slash."""
    prefix = prefix.rstrip("/")
    path = path.lstrip("/")
    if not prefix:
        return path
    return prefix + "/" + path