from __future__ import annotations

from zephyr.template.markup import find_element_end, iter_tags, parse_attributes, rewrite_tag


def test_iter_tags_skips_comments() -> None:
    tags = list(iter_tags("<!-- <b> --><i>x</i>"))
    assert [(tag.name, tag.closing) for tag in tags] == [("i", False), ("i", True)]


def test_parse_attributes() -> None:
    attributes = parse_attributes("<input type=\"text\" disabled value='a'>")
    assert [(item.name, item.value) for item in attributes] == [
        ("type", "text"),
        ("disabled", None),
        ("value", "a"),
    ]


def test_find_element_end_handles_nesting() -> None:
    markup = "<div><div></div></div>tail"
    tag = next(iter_tags(markup))
    assert markup[find_element_end(markup, tag) :] == "tail"


def test_rewrite_tag_variants() -> None:
    assert rewrite_tag('<img src="a.png" />', add={"alt": "x"}) == '<img src="a.png" alt="x" />'
    assert rewrite_tag('<p @if="x" class="a">', remove=["@if"]) == '<p class="a">'
    assert rewrite_tag('<a href="#">', replace={"href": "/home"}) == '<a href="/home">'
    assert rewrite_tag("<p>", add={"hidden": None}) == "<p hidden>"
