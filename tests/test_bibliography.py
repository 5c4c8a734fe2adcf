from metablog.render.bibliography import (
    format_author,
    format_authors,
    format_ieee,
    initials,
    trim_period,
)
from metablog.render.nodes import ReferenceEntry


def test_missing_entry_falls_back_to_key():
    assert format_ieee(None, "k1") == "k1."
    assert format_ieee(ReferenceEntry(), "k2") == "k2."


def test_entry_without_fields_falls_back_to_key():
    assert format_ieee(ReferenceEntry(key="k", type="article"), "k") == "k."


def test_title_only_entry_quotes_title():
    entry = ReferenceEntry(key="k1", fields={"title": "k1"})
    assert format_ieee(entry, "k1") == '"k1".'


def test_article_fields_in_order():
    entry = ReferenceEntry(
        key="smith",
        type="Article",
        fields={
            "author": "John Smith",
            "title": "Deep Nets.",
            "journal": "Journal of Things",
            "volume": "3",
            "number": "7",
            "pages": "10-20",
            "year": "2020",
        },
    )
    got = format_ieee(entry, "smith")
    assert got.endswith(".")
    assert '"Deep Nets"' in got
    pieces = [
        format_author("John Smith"),
        '"Deep Nets"',
        "Journal of Things",
        "vol. 3",
        "no. 7",
        "pp. 10-20",
        "2020",
    ]
    positions = [got.index(piece) for piece in pieces]
    assert positions == sorted(positions)


def test_inproceedings_uses_booktitle_and_pages():
    entry = ReferenceEntry(
        key="c",
        type="inproceedings",
        fields={"title": "T", "booktitle": "Proc. Conf", "pages": "1-2", "journal": "J"},
    )
    got = format_ieee(entry, "c")
    assert "in Proc. Conf" in got
    assert "pp. 1-2" in got
    assert "J," not in got


def test_book_uses_publisher_only():
    entry = ReferenceEntry(
        key="b", type="book", fields={"title": "T", "publisher": "Pub", "journal": "Jour"}
    )
    got = format_ieee(entry, "b")
    assert "Pub" in got
    assert "Jour" not in got


def test_other_type_prefers_journal_then_booktitle():
    with_journal = ReferenceEntry(
        key="m", type="misc", fields={"journal": "Jour", "booktitle": "Book"}
    )
    assert "Jour" in format_ieee(with_journal, "m")
    assert "Book" not in format_ieee(with_journal, "m")
    only_book = ReferenceEntry(
        key="m", type="misc", fields={"journal": "  ", "booktitle": "Book"}
    )
    assert "Book" in format_ieee(only_book, "m")


def test_comma_and_space_author_forms_agree():
    assert format_author("Smith, John Paul") == format_author("John Paul Smith")
    assert format_author("Smith, John").endswith(" Smith")


def test_single_name_and_empty_first_name():
    assert format_author("Plato") == "Plato"
    assert format_author("Smith,") == "Smith"


def test_initials_upper_cases_first_letters():
    assert initials("john paul") == "J. P."
    assert initials("") == ""


def test_format_authors_joins_each_author():
    joined = format_authors("Ann Lee and  Bob Ray ")
    assert joined == ", ".join([format_author("Ann Lee"), format_author("Bob Ray")])
    assert format_authors("   ") == ""


def test_trim_period():
    assert trim_period("  Title.. ") == "Title"
    assert trim_period("A.B") == "A.B"