"""Cache records, an in-memory LRU store and hit statistics for LaTeXML output."""

from __future__ import annotations

import hashlib
import json
import re
import threading
from collections import OrderedDict
from dataclasses import asdict, dataclass, field, fields

__all__ = [
    "CACHE_SCHEMA",
    "DEFAULT_MAX_ENTRIES",
    "LATEXML_WRAPPER_PREFIX",
    "LATEXML_WRAPPER_SUFFIX",
    "LATEXML_ARGS",
    "CacheEntry",
    "CacheMeta",
    "CacheStore",
    "CacheStats",
    "CacheStatsSnapshot",
    "cache_entry_matches",
    "sha256_hex",
    "external_dependency_command",
    "has_external_dependency_command",
]

CACHE_SCHEMA = 1
DEFAULT_MAX_ENTRIES = 256

LATEXML_WRAPPER_PREFIX = r"""\documentclass{article}
\usepackage{amsmath,amsfonts}
\usepackage{algorithmic}
\usepackage{array}
\usepackage[caption=false,font=normalsize,labelfont=sf,textfont=sf]{subfig}
\usepackage{textcomp}
\usepackage{stfloats}
\usepackage{url}
\usepackage{hyperref}
\usepackage{verbatim}
\usepackage{graphicx}
\usepackage{cite}
\usepackage{multirow}
\usepackage{makecell}
\usepackage{booktabs}
\usepackage{tabularx}
\usepackage{amssymb}
\usepackage{ulem}
\usepackage[table]{xcolor}
\usepackage[ruled,linesnumbered]{algorithm2e}
\begin{document}
"""

LATEXML_WRAPPER_SUFFIX = "\n\\end{document}\n"

LATEXML_ARGS = (
    "--format=html5",
    "--whatsout=fragment",
    "--nodefaultresources",
    "--destination=fragment.html",
    "fragment.tex",
)

_EXTERNAL_DEPENDENCY_RE = re.compile(
    r"\\(input|include|includegraphics|bibliography|addbibresource)\b", re.A
)

# Characters escaped in string values so the files stay safe to embed in HTML.
_JSON_HTML_ESCAPES = str.maketrans(
    {
        "<": "\\u003c",
        ">": "\\u003e",
        "&": "\\u0026",
        "\u2028": "\\u2028",
        "\u2029": "\\u2029",
    }
)
_INT_FIELDS = frozenset({"schema"})


@dataclass
class CacheEntry:
    """One cached LaTeXML conversion, as stored on disk."""

    schema: int = 0
    key: str = ""
    raw_tex: str = ""
    raw_tex_sha256: str = ""
    wrapper_sha256: str = ""
    args_sha256: str = ""
    latexml_bin: str = ""
    latexml_version: str = ""
    raw_html: str = ""

    def to_json(self) -> str:
        """Serialise the entry as indented JSON."""
        return json.dumps(asdict(self), indent=2, ensure_ascii=False).translate(
            _JSON_HTML_ESCAPES
        )

    @classmethod
    def from_json(cls, text: str | bytes) -> CacheEntry:
        """Parse an entry; raise ValueError if the JSON is malformed."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("cache entry must be a JSON object")
        values: dict[str, object] = {}
        for entry_field in fields(cls):
            value = data.get(entry_field.name)
            if value is None:
                continue
            if entry_field.name in _INT_FIELDS:
                if isinstance(value, bool) or not isinstance(value, int):
                    raise ValueError(f"cache entry field {entry_field.name} must be an integer")
            elif not isinstance(value, str):
                raise ValueError(f"cache entry field {entry_field.name} must be a string")
            values[entry_field.name] = value
        return cls(**values)


@dataclass(frozen=True)
class CacheMeta:
    """The identity a cache entry must carry to be reused."""

    key: str = ""
    raw_tex_sha256: str = ""
    wrapper_sha256: str = ""
    args_sha256: str = ""
    latexml_bin: str = ""
    latexml_version: str = ""


def cache_entry_matches(entry: CacheEntry, meta: CacheMeta, raw: str) -> bool:
    """Report whether ``entry`` is a usable conversion of ``raw`` under ``meta``."""
    return (
        entry.schema == CACHE_SCHEMA
        and entry.key == meta.key
        and entry.raw_tex == raw
        and entry.raw_tex_sha256 == meta.raw_tex_sha256
        and entry.wrapper_sha256 == meta.wrapper_sha256
        and entry.args_sha256 == meta.args_sha256
        and entry.latexml_bin == meta.latexml_bin
        and entry.latexml_version == meta.latexml_version
        and entry.raw_html.strip() != ""
    )


class CacheStore:
    """Bounded, thread-safe, least-recently-used in-memory cache of entries."""

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        self.max_entries = max_entries if max_entries > 0 else DEFAULT_MAX_ENTRIES
        self._data: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, meta: CacheMeta, raw: str) -> str | None:
        """Return the cached HTML for ``raw``, promoting the entry, or None."""
        with self._lock:
            entry = self._data.get(meta.key)
            if entry is None or not cache_entry_matches(entry, meta, raw):
                return None
            self._data.move_to_end(meta.key)
            return entry.raw_html

    def set(self, entry: CacheEntry) -> None:
        """Store ``entry``, evicting the oldest entries beyond the bound."""
        with self._lock:
            # Updating an existing key keeps its place in the eviction order.
            self._data[entry.key] = entry
            while len(self._data) > self.max_entries:
                self._data.popitem(last=False)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data


@dataclass(frozen=True)
class CacheStatsSnapshot:
    """A point-in-time copy of cache statistics."""

    hits: int = 0
    misses: int = 0
    bypassed: int = 0
    bypass_reasons: dict[str, int] = field(default_factory=dict)


@dataclass
class CacheStats:
    """Thread-safe counters of cache hits, misses and bypasses."""

    hits: int = 0
    misses: int = 0
    bypassed: int = 0
    bypass_reasons: dict[str, int] = field(default_factory=dict)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def record_hit(self) -> None:
        with self._lock:
            self.hits += 1

    def record_miss(self) -> None:
        with self._lock:
            self.misses += 1

    def record_bypass(self, reason: str) -> None:
        with self._lock:
            self.bypassed += 1
            reason = reason or "unknown"
            self.bypass_reasons[reason] = self.bypass_reasons.get(reason, 0) + 1

    def snapshot(self) -> CacheStatsSnapshot:
        with self._lock:
            return CacheStatsSnapshot(
                hits=self.hits,
                misses=self.misses,
                bypassed=self.bypassed,
                bypass_reasons=dict(self.bypass_reasons),
            )


def sha256_hex(s: str) -> str:
    """Return the hex SHA-256 digest of the UTF-8 encoding of ``s``."""
    return hashlib.sha256(s.encode("utf-8")).hexdigest()


def external_dependency_command(raw: str) -> str | None:
    """Return the first command in ``raw`` that reads another file, or None."""
    match = _EXTERNAL_DEPENDENCY_RE.search(raw)
    if match is None:
        return None
    return "\\" + match.group(1)


def has_external_dependency_command(raw: str) -> bool:
    """Report whether ``raw`` uses a command that reads another file."""
    return _EXTERNAL_DEPENDENCY_RE.search(raw) is not None