from metablog.latexml.sanitize import (
    annotate_algorithm_lines,
    display_math_html,
    extract_body,
    inline_math_html,
    is_safe_css_color,
    normalize_alt_tex,
    parse_attrs,
    repair_aligned_math_from_raw,
    sanitize_fragment,
    sanitize_style_value,
    strip_tag_blocks,
    wrap_fragment,
)


def test_repair_aligned_math_from_raw_restores_first_rows():
    raw = (
        "\\begin{tabular}{cc}\n"
        "CIMP & \\(\\begin{aligned} [1, 156, 22, 0.42, T]\\\\ [29, 35, 13, 0.39, T]\\\\ "
        "[29, 29, 2, 0.27, T]\\\\ [21, 27, 4, 0.56, F]\\end{aligned}\\) \\\\\n"
        "CAOP & \\(\\begin{aligned} [7, 33, 14, 0.44, T]\\\\ [1, 54, 24, 0.57, T]\\\\ "
        "[2, 31, 40, 0.79, F]\\\\ [5, 159, 27, 0.79, F]\\end{aligned}\\)\n"
        "\\end{tabular}"
    )
    html_text = (
        '<td><span class="math inline">\\(\\begin{aligned} \\\\ [29,35,13,0.39,T]\\\\ '
        "[29,29,2,0.27,T]\\\\ [21,27,4,0.56,F]\\end{aligned}\\)</span></td>"
        '<td><span class="math inline">\\(\\begin{aligned} \\\\ [1,54,24,0.57,T]\\\\ '
        "[2,31,40,0.79,F]\\\\ [5,159,27,0.79,F]\\end{aligned}\\)</span></td>"
    )
    got = repair_aligned_math_from_raw(html_text, raw)
    assert "[1, 156, 22, 0.42, T]" in got
    assert "[7, 33, 14, 0.44, T]" in got
    assert "\\begin{aligned} \\\\" not in got
    assert 'class="math inline" data-tex="\\begin{aligned}' in got


def test_repair_without_raw_matches_is_identity():
    html_text = '<span class="math inline">\\(x\\)</span>'
    assert repair_aligned_math_from_raw(html_text, "plain text") == html_text


def test_sanitize_fragment_converts_math_tags():
    got = sanitize_fragment(
        '<article><math display="inline" alttext="x+y"></math>'
        '<math display="block" alttext="a+b"></math></article>'
    )
    assert '<span class="math inline" data-tex="x+y">\\(x+y\\)</span>' in got
    assert (
        '<div class="math display"><span class="math-render-target" '
        'data-tex="a+b">\\[a+b\\]</span></div>'
    ) in got
    assert "<math" not in got


def test_sanitize_fragment_preserves_safe_color_styles():
    got = sanitize_fragment(
        '<article id="latexml"><figcaption><span class="ltx_text" '
        'style="background-color:#A6A6A6;">Gray</span></figcaption>'
        '<td class="ltx_td" style="background-color:#A6A6A6; position:absolute; left:0;">B</td>'
        '<span style="color:blue;">text</span></article>'
    )
    assert 'id="latexml"' not in got
    assert got.count("background-color:#A6A6A6") == 2
    assert 'style="color:blue"' in got
    assert "position" not in got
    assert "left:0" not in got


def test_sanitize_fragment_strips_algorithm_indent_adornments():
    got = sanitize_fragment(
        '<figure class="ltx_algorithm"><div class="ltx_listing">'
        '<div class="ltx_listingline"><span class="ltx_tag ltx_tag_listingline">'
        '<span class="ltx_text">5</span></span>'
        '<span class="ltx_text">&nbsp;&nbsp;</span><span class="ltx_rule">&nbsp;</span>'
        '<span class="ltx_text">&nbsp;&nbsp;&nbsp;</span>'
        '<span class="ltx_text">Find a long line that may wrap</span></div>'
        "</div></figure>"
    )
    assert "metablog-algorithm-numbered metablog-algorithm-depth-1" in got
    assert (
        '<span class="ltx_tag ltx_tag_listingline"><span class="ltx_text">5</span></span>'
        '<span class="ltx_text">Find a long line that may wrap</span>'
    ) in got
    assert "ltx_rule" not in got
    assert "&nbsp;&nbsp;&nbsp;" not in got


def test_sanitize_fragment_wraps_algorithm_io_as_two_columns():
    got = sanitize_fragment(
        '<figure class="ltx_algorithm"><div class="ltx_listing">'
        '<div class="ltx_listingline"><span class="ltx_text">'
        '<span class="ltx_text ltx_font_bold">Input:</span> Problem '
        '<span class="math inline" data-tex="m">\\(m\\)</span>.</span></div>'
        "</div></figure>"
    )
    assert "metablog-algorithm-io" in got
    assert '<span class="metablog-algorithm-io-label">Input:</span>' in got
    assert (
        '<span class="metablog-algorithm-io-content"><span class="ltx_text"> Problem '
        '<span class="math inline" data-tex="m">\\(m\\)</span>.</span></span>'
    ) in got
    assert 'ltx_font_bold">Input:' not in got


def test_annotate_drops_empty_listing_lines():
    fig = (
        '<figure class="ltx_algorithm"><div class="ltx_listingline">'
        '<span class="ltx_rule">&nbsp;</span></div></figure>'
    )
    assert annotate_algorithm_lines(fig) == '<figure class="ltx_algorithm"></figure>'


def test_extract_body_strips_styles_and_scripts():
    raw = (
        "<html><head><style>p{}</style></head><body class=\"x\">"
        "<p>Hi</p><script>bad()</script></body></html>"
    )
    assert extract_body(raw) == "<p>Hi</p>"


def test_strip_tag_blocks_removes_all_blocks():
    assert strip_tag_blocks("a<style>x</style>b<STYLE t>y</STYLE>c", "style") == "abc"


def test_strip_tag_blocks_keeps_unclosed_block():
    assert strip_tag_blocks("a<style>x", "style") == "a<style>x"


def test_wrap_fragment():
    assert wrap_fragment("  <p>x</p> ") == '<div class="metablog-latexml-fragment"><p>x</p></div>'
    assert wrap_fragment("   ") == ""


def test_style_value_keeps_only_safe_colors():
    assert sanitize_style_value("color: red; position:absolute") == "color:red"
    assert sanitize_style_value("background-image:url(x)") == ""


def test_is_safe_css_color():
    assert is_safe_css_color("#fff")
    assert is_safe_css_color("rgba(1, 2, 3, 0.5)")
    assert is_safe_css_color("blue")
    assert not is_safe_css_color("")
    assert not is_safe_css_color("red;x")
    assert not is_safe_css_color("url(x)")


def test_normalize_alt_tex():
    assert normalize_alt_tex("a%\nb\r\nc  d") == "ab c d"


def test_parse_attrs():
    attrs = parse_attrs('<math display="block" alttext="a&amp;b">')
    assert attrs == {"display": "block", "alttext": "a&b"}


def test_math_html_escapes_tex():
    assert inline_math_html("a<b") == '<span class="math inline" data-tex="a&lt;b">\\(a&lt;b\\)</span>'
    assert 'data-tex="x&#34;"' in display_math_html('x"')