import pytest

from metablog.render.nodes import TCB, Image, Styled, StyledBlock
from metablog.render.styles import (
    align_style,
    anchor,
    appendix_letter,
    appendix_number,
    block_style,
    font_family_style,
    format_percent,
    image_width_style,
    inline_style,
    join_numbers,
    join_url,
    latex_width_to_css,
    safe_link_url,
    style_string,
    subfigure_display_number,
    subfigure_letter,
    subfigure_width_style,
    tcb_style,
)


def test_inline_font_size():
    assert inline_style(Styled(font_size="0.9em")) == "font-size: 0.9em;"


def test_block_font_size():
    assert block_style(StyledBlock(font_size="1.44em")) == "font-size: 1.44em;"


def test_mono_uses_source_code_pro():
    style = inline_style(Styled(mono=True))
    assert style == "font-family: " + font_family_style("mono") + ";"
    assert font_family_style("mono").startswith('"Source Code Pro", Consolas')


def test_sans_family_and_other_font_properties():
    assert inline_style(Styled(font_family="sans")).startswith(
        'font-family: "HarmonyOS Sans", "HarmonyOS Sans SC", "Source Han Sans SC"'
    )
    assert "font-variant: small-caps;" in inline_style(Styled(font_variant="small-caps"))
    assert "font-style: oblique;" in inline_style(Styled(font_style="oblique"))
    assert "font-weight: 400;" in inline_style(Styled(font_weight="400"))


def test_empty_style_is_empty():
    assert style_string("", "", "", "", "", "", "", "", False, False, False, False) == ""
    assert inline_style(None) == ""
    assert block_style(StyledBlock()) == ""


def test_explicit_weight_overrides_bold():
    style = style_string("", "", "", "", "", "", "400", "", False, True, False, False)
    assert "font-weight: 400" in style
    assert "700" not in style


def test_background_adds_padding():
    style = inline_style(Styled(background="yellow"))
    assert "background-color: yellow" in style
    assert "padding: 0 0.16em" in style


def test_tcb_style_matches_source_case():
    node = TCB(
        title_align="center",
        title_background="color-mix(in srgb, gray 70%, white)",
        border_color="black",
        body_background="color-mix(in srgb, gray 20%, white)",
    )
    assert tcb_style(node) == (
        "--tcb-title-bg: color-mix(in srgb, gray 70%, white); --tcb-border: black; "
        "--tcb-title-color: black; --tcb-body-bg: color-mix(in srgb, gray 20%, white); "
        "--tcb-title-align: center;"
    )


def test_tcb_style_defaults_derive_body_from_title():
    style = tcb_style(TCB(title_background="red"))
    assert "--tcb-border: black" in style
    assert "--tcb-title-align: left;" in style
    assert "color-mix(in srgb, red 20%, white)" in style


@pytest.mark.parametrize("align", ["left", "center", "right", "justify"])
def test_align_style_known(align):
    assert align_style(align) == "text-align: " + align + ";"


def test_align_style_unknown():
    assert align_style("middle") == ""
    assert align_style("") == ""


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://example.com?a=1&b=2", "https://example.com?a=1&b=2"),
        ("javascript:alert(1)", "#"),
        ("  #section ", "#section"),
        ("../page.html", "../page.html"),
        ("page.html", "page.html"),
    ],
)
def test_safe_link_url(url, expected):
    assert safe_link_url(url) == expected


def test_latex_width_to_css():
    assert latex_width_to_css(r"\textwidth") == "100%"
    assert latex_width_to_css("40%") == "40%"
    assert latex_width_to_css(r"{0.5}\linewidth") == latex_width_to_css(r"0.5\columnwidth")
    assert latex_width_to_css("3cm") is None
    assert latex_width_to_css(r"x\textwidth") is None


def test_format_percent_trims_trailing_zeros():
    assert format_percent(100.0) == "100%"
    assert not format_percent(12.5).rstrip("%").endswith("0")


def test_image_width_style_and_subfigure():
    image = Image(options={"width": r"\textwidth"})
    style = image_width_style(image)
    assert style == "width: 100%; max-width: 100%;"
    sub = subfigure_width_style(style)
    assert sub.startswith("flex: 0 0 " + latex_width_to_css(r"\textwidth"))
    assert image_width_style(Image()) == ""
    assert image_width_style(None) == ""
    assert image_width_style(Image(options={"width": "3cm"})) == ""


def test_subfigure_width_style_without_width_passes_through():
    assert subfigure_width_style("") == ""


def test_anchor():
    assert anchor("fig:first", "x") == "fig-first"
    assert anchor("", "section-1") == "section-1"
    assert anchor("!!!", "") == "item"


def test_subfigure_letters():
    assert subfigure_letter(0) == "a"
    assert subfigure_letter(26) == "aa"
    assert subfigure_letter(-1) == "?"
    letters = [subfigure_letter(i) for i in range(1000)]
    assert len(set(letters)) == len(letters)


def test_appendix_letters_mirror_subfigure_letters():
    assert all(appendix_letter(i) == subfigure_letter(i).upper() for i in range(800))
    assert appendix_letter(-1) == "A"


def test_appendix_number():
    assert appendix_number([]) == ""
    assert appendix_number([1, 2, 3]).split(".") == [appendix_letter(0), "2", "3"]


def test_join_numbers():
    assert join_numbers([1, 0, 1]) == "1.0.1"
    assert join_numbers([]) == ""


def test_subfigure_display_number():
    assert subfigure_display_number("1.aa") == "aa"
    assert subfigure_display_number("1.") == "1."
    assert subfigure_display_number("3") == "3"


def test_join_url():
    assert (
        join_url("../..", "assets/site/figs/metaron_logo.svg")
        == "../../assets/site/figs/metaron_logo.svg"
    )
    assert join_url("", "/static/style.css") == "static/style.css"