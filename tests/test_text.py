import pytest

from metablog.render.nodes import (
    TCB,
    AbstractBlock,
    Author,
    Bold,
    Cite,
    CodeBlock,
    ComplexHTML,
    DisplayMath,
    Document,
    Figure,
    Footnote,
    Image,
    InlineMath,
    Institution,
    Italic,
    LineBreak,
    Link,
    List,
    ListItem,
    Paragraph,
    RawHTML,
    RawHTMLInline,
    Ref,
    Section,
    Styled,
    Subfigure,
    Subtable,
    Table,
    Text,
)
from metablog.render.text import (
    blocks_have_math,
    document_has_math,
    html_has_math_class,
    inline_text,
    inlines_have_math,
    needs_space_between,
    visible_inline_text,
)


def test_inline_text_concatenates_nested_nodes():
    inlines = [
        Text("a"),
        Bold([Text("b"), Italic([Text("c")])]),
        Styled(children=[Text("d")]),
        Link(url="#", children=[Text("e")]),
        Footnote([Text("f")]),
    ]
    assert inline_text(inlines) == "abcdef"


def test_inline_text_of_math_break_cite_and_ref():
    inlines = [InlineMath("x+y"), LineBreak(), Cite(["a", "b"]), Ref("sec")]
    assert inline_text(inlines) == "x+y\n" + "a, b" + "sec"


def test_inline_text_strips_and_unescapes_raw_html():
    assert inline_text([RawHTMLInline("<b>x &amp; y</b>")]) == "x & y"


def test_visible_inline_text():
    assert visible_inline_text(InlineMath("\\alpha")) == "x"
    assert visible_inline_text(RawHTMLInline("<i>hi</i>")) == ""
    assert visible_inline_text(Text("word")) == "word"


@pytest.mark.parametrize(
    "left, right, expected",
    [
        (Text("a"), Text("b"), False),
        (Text("see"), InlineMath("x"), True),
        (Text("see "), InlineMath("x"), False),
        (Text("("), InlineMath("x"), False),
        (InlineMath("x"), Text(","), False),
        (InlineMath("x"), Text(" and"), False),
        (InlineMath("x"), InlineMath("y"), True),
        (RawHTMLInline("<b>z</b>"), InlineMath("x"), False),
        (InlineMath("x"), Bold([Text("bold")]), True),
    ],
)
def test_needs_space_between(left, right, expected):
    assert needs_space_between(left, right) is expected


def test_html_has_math_class():
    assert html_has_math_class('<span class="math inline">\\(x\\)</span>')
    assert html_has_math_class('<div class="math display"></div>')
    assert not html_has_math_class("<p>plain</p>")


def test_inlines_have_math_nested():
    assert inlines_have_math([Text("a"), Footnote([Bold([InlineMath("x")])])])
    assert not inlines_have_math([Text("a"), Cite(["k"]), Ref("r")])


@pytest.mark.parametrize(
    "block",
    [
        DisplayMath("x"),
        ComplexHTML(html='<span class="math inline">x</span>'),
        RawHTML('<div class="math display">x</div>'),
        Section(title=[InlineMath("x")]),
        Section(children=[Paragraph([InlineMath("x")])]),
        AbstractBlock([DisplayMath("y")]),
        List(items=[ListItem(label=[InlineMath("x")])]),
        Figure(images=[Image()], subfigures=[None, Subfigure(caption=[InlineMath("x")])]),
        Table(subtables=[None, Subtable(blocks=[DisplayMath("x")])]),
        TCB(title=[InlineMath("x")]),
    ],
)
def test_blocks_have_math_detects(block):
    assert blocks_have_math([block])


def test_blocks_without_math():
    blocks = [
        Paragraph([Text("plain")]),
        CodeBlock(text="$x$"),
        ComplexHTML(html="<table></table>"),
        Figure(subfigures=[None]),
    ]
    assert not blocks_have_math(blocks)


def test_document_has_math():
    assert not document_has_math(None)
    assert not document_has_math(Document(title=[Text("T")]))
    assert document_has_math(Document(authors=[Author(name=[InlineMath("x")])]))
    assert document_has_math(
        Document(institutions=[Institution(info=[InlineMath("x")])])
    )
    assert document_has_math(Document(abstract=[DisplayMath("x")]))
    assert document_has_math(Document(keywords=[InlineMath("x")]))