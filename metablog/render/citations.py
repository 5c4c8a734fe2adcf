"""Citation numbering in order of first use and IEEE range compression."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from metablog.render.nodes import (
    TCB,
    AbstractBlock,
    Block,
    Bold,
    Cite,
    Document,
    EnvironmentBlock,
    Figure,
    Footnote,
    Inline,
    Italic,
    KeywordsBlock,
    Link,
    List,
    Paragraph,
    Section,
    Styled,
    StyledBlock,
    Table,
)

__all__ = ["CitationPart", "CitationIndex"]

_MIN_RANGE = 3


@dataclass(frozen=True)
class CitationPart:
    """One printed piece of a citation: a single number, a range, or a miss."""

    start: int = 0
    end: int = 0
    start_key: str = ""
    end_key: str = ""
    missing: bool = False


class CitationIndex:
    """Numbers citation keys by first appearance and records missing entries.

    Warnings go to ``doc.warnings`` when a document is given.
    """

    def __init__(self, doc: Document | None = None) -> None:
        self.doc = doc
        self.numbers: dict[str, int] = {}
        self.order: list[str] = []
        self._missing: set[str] = set()

    def collect(self, blocks: Iterable[Block]) -> None:
        """Assign numbers to every cited key in ``blocks``, in reading order."""
        for block in blocks:
            self._collect_block(block)

    def _collect_block(self, block: Block) -> None:
        if isinstance(block, (Section, TCB)):
            self._collect_inlines(block.title)
            self.collect(block.children)
        elif isinstance(block, (Paragraph, KeywordsBlock)):
            self._collect_inlines(block.inlines)
        elif isinstance(block, Figure):
            self._collect_inlines(block.caption)
        elif isinstance(block, Table):
            self._collect_inlines(block.caption)
            self.collect(block.children)
            for sub in block.subtables:
                if sub is not None:
                    self._collect_inlines(sub.caption)
                    self.collect(sub.blocks)
        elif isinstance(block, (StyledBlock, AbstractBlock, EnvironmentBlock)):
            self.collect(block.children)
        elif isinstance(block, List):
            for item in block.items:
                self.collect(item.blocks)

    def _collect_inlines(self, inlines: Iterable[Inline]) -> None:
        for node in inlines:
            if isinstance(node, Cite):
                for key in node.keys:
                    key = key.strip()
                    if not key or key in self.numbers:
                        continue
                    self.order.append(key)
                    self.numbers[key] = len(self.order)
            elif isinstance(node, (Bold, Italic, Styled, Link, Footnote)):
                self._collect_inlines(node.children)

    def warn_missing(self, key: str) -> None:
        """Record once that ``key`` has no bibliography entry."""
        if self.doc is None or not key or key in self._missing:
            return
        self._missing.add(key)
        self.doc.warnings.append("missing bibliography entry: " + key)

    def _check_reference(self, key: str) -> None:
        refs = self.doc.references if self.doc is not None else None
        if refs is not None and key not in refs:
            self.warn_missing(key)

    def parts(self, keys: Iterable[str]) -> list[CitationPart]:
        """Split cited keys into sorted numbers, compressing runs of three or more."""
        parts: list[CitationPart] = []
        refs: list[tuple[int, str]] = []
        seen: set[int] = set()
        for key in keys:
            number = self.numbers.get(key, 0)
            if number == 0:
                self.warn_missing(key)
                parts.append(CitationPart(missing=True))
                continue
            self._check_reference(key)
            if number in seen:
                continue
            seen.add(number)
            refs.append((number, key))
        refs.sort()

        runs: list[list[tuple[int, str]]] = []
        for ref in refs:
            if runs and ref[0] == runs[-1][-1][0] + 1:
                runs[-1].append(ref)
            else:
                runs.append([ref])
        for run in runs:
            if len(run) >= _MIN_RANGE:
                (start, start_key), (end, end_key) = run[0], run[-1]
                parts.append(CitationPart(start, end, start_key, end_key))
            else:
                parts.extend(CitationPart(no, no, key, key) for no, key in run)
        return parts

    def text(self, keys: Iterable[str]) -> str:
        """Return the plain-text form of a citation, such as ``[1],[3]-[5]``."""
        out = []
        for part in self.parts(keys):
            if part.missing:
                out.append("[?]")
            elif part.start == part.end:
                out.append(f"[{part.start}]")
            else:
                out.append(f"[{part.start}]-[{part.end}]")
        return ",".join(out)