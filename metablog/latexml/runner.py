"""Conversion of complex LaTeX blocks to HTML through the LaTeXML command."""

from __future__ import annotations

import errno
import os
import shutil
import subprocess
import sys
import tempfile
import threading
from dataclasses import dataclass, field
from typing import TextIO

from metablog.latexml.cache import (
    CACHE_SCHEMA,
    LATEXML_ARGS,
    LATEXML_WRAPPER_PREFIX,
    LATEXML_WRAPPER_SUFFIX,
    CacheEntry,
    CacheMeta,
    CacheStats,
    CacheStore,
    cache_entry_matches,
    external_dependency_command,
    sha256_hex,
)
from metablog.latexml.sanitize import (
    extract_body,
    repair_aligned_math_from_raw,
    wrap_fragment,
)

__all__ = [
    "ComplexBlock",
    "CacheIdentity",
    "LateXMLError",
    "Runner",
    "latexml_version",
    "fallback",
]

_DEFAULT_BIN = "latexmlc"
_ESCAPES = str.maketrans(
    {"&": "&amp;", "'": "&#39;", "<": "&lt;", ">": "&gt;", '"': "&#34;"}
)


def _escape(text: str) -> str:
    return text.translate(_ESCAPES)


class LateXMLError(RuntimeError):
    """Raised when the LaTeXML command fails."""


@dataclass
class ComplexBlock:
    """A LaTeX environment that is rendered through LaTeXML."""

    id: str = ""
    env_name: str = ""
    raw_tex: str = ""
    caption: str = ""
    html: str = ""


def _command(bin_path: str, *args: str) -> list[str]:
    ext = os.path.splitext(bin_path)[1].lower()
    if sys.platform == "win32" and ext in (".bat", ".cmd"):
        return ["cmd", "/C", bin_path, *args]
    return [bin_path, *args]


def latexml_version(bin_path: str) -> str | None:
    """Return the version text the command prints, or None if it prints none."""
    for arg in ("--VERSION", "--version"):
        try:
            proc = subprocess.run(
                _command(bin_path, arg),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
            )
        except OSError:
            continue
        if proc.returncode != 0:
            continue
        version = proc.stdout.decode("utf-8", errors="replace").strip()
        if version:
            return version
    return None


def _probe_identity(runner: Runner) -> tuple[str, str] | None:
    try:
        bin_path = runner.resolve_bin()
    except OSError:
        return None
    version = latexml_version(bin_path)
    if version is None:
        return None
    return os.path.normpath(bin_path), version


class CacheIdentity:
    """Resolves the LaTeXML binary and version once and remembers the result."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._done = False
        self._value: tuple[str, str] | None = None

    def resolve(self, runner: Runner) -> tuple[str, str] | None:
        """Return ``(bin, version)`` or None, probing only on the first call."""
        with self._lock:
            if not self._done:
                self._done = True
                self._value = _probe_identity(runner)
            return self._value


def _read_entry_file(path: str, meta: CacheMeta, raw: str) -> CacheEntry | None:
    try:
        with open(path, "rb") as fh:
            entry = CacheEntry.from_json(fh.read())
    except (OSError, ValueError):
        return None
    if not cache_entry_matches(entry, meta, raw):
        return None
    return entry


def _remove_quietly(path: str) -> None:
    try:
        os.remove(path)
    except OSError:
        pass


@dataclass
class Runner:
    """Runs LaTeXML on complex blocks, with an optional on-disk cache."""

    bin: str = ""
    cache_dir: str | os.PathLike[str] = ""
    keep_temp: bool = False
    identity: CacheIdentity | None = None
    warnings: list[str] | None = None
    log: TextIO | None = None
    stats: CacheStats | None = None
    cache_store: CacheStore | None = None
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def _cache_dir(self) -> str:
        return os.fspath(self.cache_dir) if self.cache_dir else ""

    def convert(self, block: ComplexBlock) -> None:
        """Fill ``block.html``, falling back to escaped source on failure."""
        try:
            raw_html = self._convert_raw_html(block.raw_tex)
        except (OSError, LateXMLError, subprocess.SubprocessError) as err:
            self._warn(f"latexml fallback for {block.id}: {err}")
            block.html = fallback(block)
            return
        html_text = extract_body(raw_html)
        html_text = repair_aligned_math_from_raw(html_text, block.raw_tex)
        block.html = wrap_fragment(html_text)

    def _convert_raw_html(self, raw: str) -> str:
        enabled, reason = self.cache_status(raw)
        if not enabled:
            if self.stats is not None:
                self.stats.record_bypass(reason)
            return self._run_latexml(raw)
        cached = self.read_cache(raw)
        if cached is not None:
            if self.stats is not None:
                self.stats.record_hit()
            return cached
        if self.stats is not None:
            self.stats.record_miss()
        raw_html = self._run_latexml(raw)
        self.write_cache(raw, raw_html)
        return raw_html

    def _run_latexml(self, raw: str) -> str:
        bin_path = self.resolve_bin()
        temp_dir = tempfile.mkdtemp(prefix="metablog-latexml-")
        try:
            if self.keep_temp:
                self._logf(f"LaTeXML temp kept: {temp_dir.replace(os.sep, '/')}\n")
            tex_path = os.path.join(temp_dir, "fragment.tex")
            html_path = os.path.join(temp_dir, "fragment.html")
            with open(tex_path, "w", encoding="utf-8", newline="") as fh:
                fh.write(LATEXML_WRAPPER_PREFIX + raw + LATEXML_WRAPPER_SUFFIX)
            proc = subprocess.run(
                _command(bin_path, *LATEXML_ARGS),
                cwd=temp_dir,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
            )
            if proc.returncode != 0:
                stderr = proc.stderr.decode("utf-8", errors="replace").strip()
                raise LateXMLError(f"exit status {proc.returncode}: {stderr}")
            with open(html_path, encoding="utf-8", errors="replace", newline="") as fh:
                return fh.read()
        finally:
            if not self.keep_temp:
                shutil.rmtree(temp_dir, ignore_errors=True)

    def cache_status(self, raw: str) -> tuple[bool, str]:
        """Return whether the cache may be used for ``raw`` and, if not, why."""
        if not self._cache_dir:
            return False, "cache disabled"
        if self.keep_temp:
            return False, "-keep-temp enabled"
        command = external_dependency_command(raw)
        if command is not None:
            return False, "external dependency command " + command
        return True, ""

    def cache_enabled(self, raw: str) -> bool:
        """Report whether the cache may be used for ``raw``."""
        return self.cache_status(raw)[0]

    def read_cache(self, raw: str) -> str | None:
        """Return cached raw HTML for ``raw`` from memory or disk, or None."""
        meta = self.cache_meta(raw)
        if meta is None:
            return None
        if self.cache_store is not None:
            cached = self.cache_store.get(meta, raw)
            if cached is not None:
                return cached
        entry = _read_entry_file(
            os.path.join(self._cache_dir, meta.key + ".json"), meta, raw
        )
        if entry is None:
            return None
        self._store(entry)
        return entry.raw_html

    def write_cache(self, raw: str, raw_html: str) -> None:
        """Store a conversion on disk; a valid existing entry is kept as it is."""
        if not raw_html.strip():
            return
        meta = self.cache_meta(raw)
        if meta is None:
            return
        cache_dir = self._cache_dir
        try:
            os.makedirs(cache_dir, exist_ok=True)
        except OSError:
            return
        entry = CacheEntry(
            schema=CACHE_SCHEMA,
            key=meta.key,
            raw_tex=raw,
            raw_tex_sha256=meta.raw_tex_sha256,
            wrapper_sha256=meta.wrapper_sha256,
            args_sha256=meta.args_sha256,
            latexml_bin=meta.latexml_bin,
            latexml_version=meta.latexml_version,
            raw_html=raw_html,
        )
        self._store(entry)
        target = os.path.join(cache_dir, meta.key + ".json")
        existing = _read_entry_file(target, meta, raw)
        if existing is not None:
            self._store(existing)
            return
        data = entry.to_json().encode("utf-8")
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=cache_dir, prefix=meta.key + ".", suffix=".tmp"
            )
        except OSError:
            return
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
        except OSError:
            _remove_quietly(tmp_path)
            return
        if os.path.exists(target):
            existing = _read_entry_file(target, meta, raw)
            if existing is not None:
                self._store(existing)
                _remove_quietly(tmp_path)
                return
            _remove_quietly(target)
        try:
            os.replace(tmp_path, target)
        except OSError:
            existing = _read_entry_file(target, meta, raw)
            if existing is not None:
                self._store(existing)
            _remove_quietly(tmp_path)

    def cache_meta(self, raw: str) -> CacheMeta | None:
        """Return the cache identity for ``raw``, or None without a usable LaTeXML."""
        identity = self._cache_identity()
        if identity is None:
            return None
        bin_path, version = identity
        raw_sha = sha256_hex(raw)
        wrapper_sha = sha256_hex(LATEXML_WRAPPER_PREFIX + LATEXML_WRAPPER_SUFFIX)
        args_sha = sha256_hex("\x00".join(LATEXML_ARGS))
        clean_bin = os.path.normpath(bin_path)
        key_material = "\x00".join(
            [str(CACHE_SCHEMA), raw_sha, wrapper_sha, args_sha, clean_bin, version]
        )
        return CacheMeta(
            key=sha256_hex(key_material),
            raw_tex_sha256=raw_sha,
            wrapper_sha256=wrapper_sha,
            args_sha256=args_sha,
            latexml_bin=clean_bin,
            latexml_version=version,
        )

    def _cache_identity(self) -> tuple[str, str] | None:
        if self.identity is not None:
            return self.identity.resolve(self)
        return _probe_identity(self)

    def prepare_cache_identity(self) -> tuple[str, str] | None:
        """Resolve ``(bin, version)`` ahead of time, or return None."""
        return self._cache_identity()

    def resolve_bin(self) -> str:
        """Return the path of the LaTeXML command; raise FileNotFoundError if absent."""
        name = self.bin
        if name:
            if os.path.isabs(name):
                return os.path.normpath(name)
            if "/" in name or "\\" in name:
                return os.path.abspath(name)
        else:
            name = _DEFAULT_BIN
        found = shutil.which(name)
        if found is None:
            raise FileNotFoundError(
                errno.ENOENT, "executable file not found in $PATH", name
            )
        return found

    def _store(self, entry: CacheEntry) -> None:
        if self.cache_store is not None:
            self.cache_store.set(entry)

    def _logf(self, message: str) -> None:
        if self.log is None:
            return
        with self.lock:
            self.log.write(message)

    def _warn(self, message: str) -> None:
        if self.warnings is None:
            return
        with self.lock:
            self.warnings.append(message)


def fallback(block: ComplexBlock) -> str:
    """Return escaped source markup used when LaTeXML cannot convert a block."""
    parts = [f'<figure class="complex-block complex-{_escape(block.env_name)}">']
    if block.caption:
        parts.append(f"<figcaption>{_escape(block.caption)}</figcaption>")
    parts.append(f"<pre><code>{_escape(block.raw_tex)}</code></pre></figure>")
    return "".join(parts)