"""Numbering of sections, floats and equations, and collection of label targets."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from metablog.render.nodes import (
    TCB,
    AbstractBlock,
    Block,
    ComplexHTML,
    DisplayMath,
    Document,
    EnvironmentBlock,
    Figure,
    List,
    Section,
    StyledBlock,
    Table,
)
from metablog.render.styles import (
    anchor,
    appendix_number,
    join_numbers,
    subfigure_letter,
)

__all__ = ["LabelTarget", "number_document", "is_tabular_complex", "section_number_label"]


@dataclass(frozen=True)
class LabelTarget:
    """Where a label points: the element id and its printed number."""

    anchor_id: str = ""
    number: str = ""


def is_tabular_complex(node: object) -> bool:
    """Report whether ``node`` is a bare tabular rendered through LaTeXML."""
    return isinstance(node, ComplexHTML) and node.env_name in ("tabular", "tabularx")


def section_number_label(section: Section | None) -> str:
    """Return the printed number of a section, with ``App.`` for appendices."""
    if section is None:
        return ""
    if section.appendix:
        return "App. " + section.number
    return section.number


def _bump(counters: list[int], level: int) -> None:
    if level < 1:
        raise ValueError(f"section level must be at least 1, got {level}")
    del counters[level:]
    counters.extend([0] * (level - len(counters)))
    counters[level - 1] += 1


class _Numberer:
    def __init__(self) -> None:
        self.labels: dict[str, LabelTarget] = {}
        self.sections: list[int] = []
        self.appendices: list[int] = []
        self.figures = 0
        self.equations = 0
        self.tables = 0
        self.algorithms = 0

    def _register(self, label: str, anchor_id: str, number: str) -> None:
        if label:
            self.labels[label] = LabelTarget(anchor_id, number)

    def walk(self, blocks: Iterable[Block]) -> None:
        for block in blocks:
            self._block(block)

    def walk_table_content(self, blocks: Iterable[Block]) -> None:
        for block in blocks:
            if is_tabular_complex(block):
                continue
            self._block(block)

    def _block(self, n: Block) -> None:
        if isinstance(n, Section):
            if n.appendix:
                _bump(self.appendices, n.level)
                n.number = appendix_number(self.appendices)
            else:
                _bump(self.sections, n.level)
                n.number = join_numbers(self.sections)
            n.anchor_id = anchor(n.label, "section-" + n.number)
            self._register(n.label, n.anchor_id, n.number)
            self.walk(n.children)
        elif isinstance(n, Figure):
            self.figures += 1
            n.number = str(self.figures)
            n.anchor_id = anchor(n.label, "figure-" + n.number)
            self._register(n.label, n.anchor_id, n.number)
            for i, sub in enumerate(n.subfigures):
                if sub is None:
                    continue
                sub.number = n.number + "." + subfigure_letter(i)
                sub.anchor_id = anchor(sub.label, "figure-" + sub.number)
                self._register(sub.label, sub.anchor_id, sub.number)
        elif isinstance(n, Table):
            self.tables += 1
            n.number = str(self.tables)
            n.anchor_id = anchor(n.label, "table-" + n.number)
            self._register(n.label, n.anchor_id, n.number)
            self.walk_table_content(n.children)
            for i, sub in enumerate(n.subtables):
                if sub is None:
                    continue
                sub.number = n.number + "." + subfigure_letter(i)
                sub.anchor_id = anchor(sub.label, "table-" + sub.number)
                self._register(sub.label, sub.anchor_id, sub.number)
                self.walk_table_content(sub.blocks)
        elif isinstance(n, DisplayMath):
            if not n.numbered:
                n.number = ""
                n.anchor_id = anchor(n.label, "equation")
                self._register(n.label, n.anchor_id, "")
                return
            self.equations += 1
            n.number = str(self.equations)
            n.anchor_id = anchor(n.label, "equation-" + n.number)
            self._register(n.label, n.anchor_id, n.number)
        elif isinstance(n, ComplexHTML):
            if "algorithm" in n.env_name:
                self.algorithms += 1
                n.number = str(self.algorithms)
                n.anchor_id = anchor(n.label, "algorithm-" + n.number)
            else:
                self.tables += 1
                n.number = str(self.tables)
                n.anchor_id = anchor(n.label, "table-" + n.number)
            self._register(n.label, n.anchor_id, n.number)
        elif isinstance(n, (StyledBlock, AbstractBlock, EnvironmentBlock, TCB)):
            self.walk(n.children)
        elif isinstance(n, List):
            for item in n.items:
                self.walk(item.blocks)


def number_document(doc: Document) -> dict[str, LabelTarget]:
    """Number every element of ``doc`` in place and return its label targets.

    Raises ValueError for a section whose level is below 1.
    """
    numberer = _Numberer()
    numberer.walk(doc.children)
    return numberer.labels