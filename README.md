# metablog

metablog is a library of building blocks for turning a parsed LaTeX article
into HTML. It provides a document tree, numbering of sections, floats and
equations, citation numbering with IEEE range compression, IEEE-style
reference formatting, syntax-highlighted code blocks, and conversion of
intricate blocks (tabulars, algorithms) through the LaTeXML program, with
cleanup of its output and a result cache.

## Installation

```
pip install metablog
```

Code highlighting uses Pygments. Converting blocks through LaTeXML needs the
`latexmlc` program on your `PATH`, or a path given to the runner.

## Modules

- `metablog.render.nodes` – dataclasses for the document tree: inline nodes
  (`Text`, `Bold`, `Italic`, `Styled`, `InlineMath`, `LineBreak`,
  `RawHTMLInline`, `Link`, `Cite`, `Ref`, `Footnote`), block nodes
  (`Section`, `Paragraph`, `DisplayMath`, `Figure`, `Table`, `List`,
  `StyledBlock`, `TCB`, `CodeBlock`, `RawHTML`, `ComplexHTML`, and others)
  and `Document`.
- `metablog.render.numbering` – `number_document(doc)` numbers sections,
  appendices, figures, subfigures, tables, subtables, equations and
  algorithms in place, and returns a dict of label to `LabelTarget`.
- `metablog.render.citations` – `CitationIndex` numbers cited keys by first
  appearance; `parts(keys)` and `text(keys)` compress runs of three or more
  consecutive numbers into ranges.
- `metablog.render.bibliography` – `format_ieee(entry, key)` and the author
  helpers format a `ReferenceEntry` in IEEE style.
- `metablog.render.text` – plain-text extraction of inline runs and math
  detection (`document_has_math`, `blocks_have_math`, `inlines_have_math`).
- `metablog.render.styles` – inline CSS for styled spans and blocks, anchor
  ids, subfigure and appendix letters, safe link URLs, LaTeX width to CSS.
- `metablog.render.highlight_code` – `render_code_block(text, language)`
  returns a code block with a hidden source textarea, a toolbar and one
  numbered table row per line. Unknown languages are shown as plain text.
- `metablog.latexml.runner` – `Runner` runs LaTeXML on a `ComplexBlock`.
- `metablog.latexml.sanitize` – cleans LaTeXML HTML: strips styles and
  scripts, turns `<math>` elements into KaTeX targets, drops generated ids,
  keeps only safe colour styles and tidies algorithm listings.
- `metablog.latexml.cache` – `CacheEntry`, the bounded LRU `CacheStore`
  and `CacheStats`.
- `metablog.pathutil` – `clean_relative_path` and `is_within_dir`.

## Examples

Numbering and references:

```python
from metablog.render.nodes import Document, Section, Text
from metablog.render.numbering import number_document

doc = Document(children=[
    Section(level=1, title=[Text("Intro")], label="sec:intro"),
    Section(level=2, title=[Text("Detail")]),
])
labels = number_document(doc)
labels["sec:intro"].number      # "1"
doc.children[1].number          # "1.1"
```

Citations and references:

```python
from metablog.render.nodes import Cite, Paragraph, ReferenceEntry
from metablog.render.citations import CitationIndex
from metablog.render.bibliography import format_ieee

index = CitationIndex()
index.collect([Paragraph(inlines=[Cite(keys=["a", "b", "c", "d"])])])
index.text(["a", "b", "c"])     # "[1]-[3]"

entry = ReferenceEntry(key="k", type="article", fields={
    "author": "Jane Doe", "title": "A Study.", "journal": "J. Ex.", "year": "2020",
})
format_ieee(entry, "k")         # 'J. Doe, "A Study", J. Ex., 2020.'
```

Code blocks:

```python
from metablog.render.highlight_code import render_code_block

html_block = render_code_block("print('hi')\n", "python")
```

Cleaning LaTeXML output:

```python
from metablog.latexml.sanitize import sanitize_fragment

sanitize_fragment('<math display="inline" alttext="x+y"></math>')
# '<span class="math inline" data-tex="x+y">\\(x+y\\)</span>'
```

Converting a block with LaTeXML:

```python
from metablog.latexml.runner import Runner, ComplexBlock
from metablog.latexml.cache import CacheStore, CacheStats

warnings = []
runner = Runner(cache_dir=".cache/latexml", cache_store=CacheStore(256),
                stats=CacheStats(), warnings=warnings)
block = ComplexBlock(id="t1", env_name="tabular",
                     raw_tex=r"\begin{tabular}{c}A\end{tabular}")
runner.convert(block)
print(block.html)
```

If LaTeXML is missing or fails, `block.html` becomes a `<figure>` holding
the escaped TeX source and a message is appended to `warnings`. Blocks that
use `\input`, `\include`, `\includegraphics`, `\bibliography` or
`\addbibresource` are never cached. An existing valid cache file is never
overwritten.

Paths:

```python
from metablog.pathutil import clean_relative_path

clean_relative_path("./figs/../logo.svg")   # "logo.svg"
clean_relative_path("../secret")            # raises ValueError
```

## What this package does not do

metablog does not parse LaTeX source into the document tree; you build the
`Document` yourself. It does not assemble a complete HTML page: there is no
page template, table of contents, reference list output or the browser
scripts that render math and drive the code-block buttons. It has no
command-line program.