"""IEEE-style formatting of bibliography entries."""

from __future__ import annotations

from metablog.render.nodes import ReferenceEntry

__all__ = ["format_ieee", "format_authors", "format_author", "initials", "trim_period"]


def _first_non_empty(*values: str) -> str:
    for value in values:
        if value.strip():
            return value
    return ""


def format_ieee(entry: ReferenceEntry | None, key: str) -> str:
    """Format a reference entry in IEEE style; fall back to ``key.``."""
    if entry is None or not entry.key:
        return key + "."
    f = entry.fields
    authors = format_authors(f.get("author", ""))
    title = trim_period(f.get("title", ""))
    year = f.get("year", "")
    parts: list[str] = []
    if authors:
        parts.append(authors)
    if title:
        parts.append(f'"{title}"')
    kind = entry.type.lower()
    if kind == "article":
        if journal := f.get("journal", ""):
            parts.append(journal)
        if volume := f.get("volume", ""):
            parts.append("vol. " + volume)
        if number := f.get("number", ""):
            parts.append("no. " + number)
        if pages := f.get("pages", ""):
            parts.append("pp. " + pages)
    elif kind in ("inproceedings", "conference"):
        if booktitle := f.get("booktitle", ""):
            parts.append("in " + booktitle)
        if pages := f.get("pages", ""):
            parts.append("pp. " + pages)
    elif kind == "book":
        if publisher := f.get("publisher", ""):
            parts.append(publisher)
    else:
        venue = _first_non_empty(f.get("journal", ""), f.get("booktitle", ""))
        if venue:
            parts.append(venue)
    if year:
        parts.append(year)
    if not parts:
        return key + "."
    return ", ".join(parts).strip() + "."


def format_authors(s: str) -> str:
    """Format a BibTeX ``and``-separated author list."""
    s = s.strip()
    if not s:
        return ""
    names = (author.strip() for author in s.split(" and "))
    return ", ".join(format_author(name) for name in names if name)


def format_author(author: str) -> str:
    """Format one author as initials followed by the last name."""
    if "," in author:
        last, _, first = author.partition(",")
        last, first = last.strip(), first.strip()
        if not first:
            return last
        return initials(first) + " " + last
    words = author.split()
    if len(words) <= 1:
        return author
    return initials(" ".join(words[:-1])) + " " + words[-1]


def initials(s: str) -> str:
    """Return the upper-cased initials of each word, each followed by a dot."""
    return " ".join(word[0].upper() + "." for word in s.split())


def trim_period(s: str) -> str:
    """Strip surrounding whitespace and trailing dots."""
    return s.strip().rstrip(".")