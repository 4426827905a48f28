"""Tests for the preview reconciler and the highlight overlay."""

import pytest
from bs4 import BeautifulSoup

from app.models.content import PreviewChange, Section, WebsiteContent
from app.services.preview import (
    CHANGE_ID_ATTR,
    HIGHLIGHT_CLASS,
    OVERLAY_ATTR,
    add_highlights,
    apply_changes,
    has_highlights,
    render_for_publish,
    strip_highlights,
)
from app.services.sanitizer import parse

_HTML = """
<!DOCTYPE html>
<html>
<head><title>Old title</title></head>
<body>
  <header><h1>Welcome</h1><p>Subtitle here</p></header>
  <section id="about" class="intro"><h2>About</h2><p>We bake.</p></section>
  <p id="notice">Closed on Monday</p>
  <span id="badge">New</span>
  <div class="next-event-banner"><p>Next event: soon</p></div>
</body>
</html>
"""

_NO_HEAD_HTML = "<body><section id='about'><h2>About</h2></section></body>"


def _change(section_id, field, value, change_type="update", current=None):
    return PreviewChange(
        section_id=section_id,
        field=field,
        change_type=change_type,
        current_value=current,
        proposed_value=value,
    )


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


class TestApplyChanges:
    def test_no_changes_returns_input(self):
        assert apply_changes(_HTML, []) == _HTML

    def test_update_by_id(self):
        soup = _soup(apply_changes(_HTML, [_change("about", "heading", "Who we are")]))
        assert soup.find(id="about").h2.get_text() == "Who we are"

    def test_section_hint_selector_is_tried_first(self):
        hints = [Section(id="hero", selector="header")]
        soup = _soup(apply_changes(_HTML, [_change("hero", "title", "Hello")], hints))
        assert soup.find("h1").get_text() == "Hello"

    def test_semantic_fallback_without_hints(self):
        soup = _soup(apply_changes(_HTML, [_change("hero", "subtitle", "Fresh daily")]))
        assert soup.find("header").p.get_text() == "Fresh daily"

    def test_auxiliary_id(self):
        soup = _soup(apply_changes(_HTML, [_change("next-event", "text", "Tomorrow")]))
        assert soup.find(class_="next-event-banner").p.get_text() == "Tomorrow"

    def test_simple_text_element_receives_value_directly(self):
        soup = _soup(
            apply_changes(
                _HTML,
                [_change("notice", "text", "Open every day"), _change("badge", "label", "Hot")],
            )
        )
        assert soup.find(id="notice").get_text() == "Open every day"
        assert soup.find(id="badge").get_text() == "Hot"

    def test_link_change_survives_paragraph_rewrite(self):
        html = (
            '<section id="promo"><p>See <a href="/docs">docs</a> now</p>'
            '<a class="btn" href="/buy">Buy</a></section>'
        )
        changes = [
            _change("promo", "paragraphs", ["See the docs later"]),
            _change("promo", "links", [{"text": "docs", "href": "/docs"}, {"text": "Order", "href": "/order"}]),
        ]
        soup = _soup(apply_changes(html, changes))
        button = soup.find("a", class_="btn")
        assert button["href"] == "/order"
        assert button.get_text() == "Order"
        assert soup.find("p").get_text() == "See the docs later"

    def test_orphan_div_with_inline_markup(self):
        html = "<div>Hello <b>world</b> again</div>"
        soup = _soup(apply_changes(html, [_change("div-1", "text", "Bye")]))
        assert soup.find("div").get_text() == "Bye"

    def test_unresolvable_change_does_not_block_others(self):
        changes = [
            _change("nowhere", "heading", "x"),
            _change("about", "heading", "Applied"),
        ]
        soup = _soup(apply_changes(_HTML, changes))
        assert soup.find(id="about").h2.get_text() == "Applied"

    def test_metadata_changes(self):
        changes = [
            _change("metadata", "title", "New title"),
            _change("metadata", "description", "Described"),
        ]
        soup = _soup(apply_changes(_HTML, changes))
        assert soup.title.get_text() == "New title"
        assert soup.find("meta", attrs={"name": "description"})["content"] == "Described"

    def test_whole_section_add_applies_every_field(self):
        change = _change("about", "*", {"heading": "A", "paragraphs": ["B"]}, change_type="add")
        section = _soup(apply_changes(_HTML, [change])).find(id="about")
        assert section.h2.get_text() == "A"
        assert section.p.get_text() == "B"

    def test_whole_section_remove_is_ignored(self):
        change = _change("about", "*", None, change_type="remove", current={"heading": "About"})
        soup = _soup(apply_changes(_HTML, [change]))
        assert soup.find(id="about").h2.get_text() == "About"

    def test_empty_html_is_rejected(self):
        with pytest.raises(ValueError):
            apply_changes("", [_change("about", "heading", "x")])


class TestHighlights:
    def test_marks_resolved_elements(self):
        changes = [_change("about", "heading", "x"), _change("nowhere", "heading", "y")]
        soup = _soup(add_highlights(_HTML, changes))

        about = soup.find(id="about")
        assert about["class"] == ["intro", HIGHLIGHT_CLASS]
        assert about[CHANGE_ID_ATTR] == "about-heading"
        assert len(soup.find_all(class_=HIGHLIGHT_CLASS)) == 1
        assert len(soup.find_all("style", attrs={OVERLAY_ATTR: True})) == 1

    def test_is_idempotent(self):
        changes = [_change("about", "heading", "x")]
        once = add_highlights(_HTML, changes)
        twice = _soup(add_highlights(once, changes))
        assert len(twice.find_all("style", attrs={OVERLAY_ATTR: True})) == 1
        assert twice.find(id="about")["class"] == ["intro", HIGHLIGHT_CLASS]
        assert twice.find(id="about")[CHANGE_ID_ATTR] == "about-heading"

    def test_multiple_changes_on_one_element(self):
        changes = [_change("about", "heading", "x"), _change("about", "paragraphs", ["y"])]
        soup = _soup(add_highlights(_HTML, changes))
        assert soup.find(id="about")[CHANGE_ID_ATTR] == "about-heading about-paragraphs"

    def test_metadata_changes_are_not_highlighted(self):
        soup = _soup(add_highlights(_HTML, [_change("metadata", "title", "x")]))
        assert soup.find(class_=HIGHLIGHT_CLASS) is None

    def test_no_changes_returns_input(self):
        assert add_highlights(_HTML, []) == _HTML

    @pytest.mark.parametrize("html", [_HTML, _NO_HEAD_HTML])
    def test_strip_reverses_highlighting(self, html):
        changes = [
            _change("about", "heading", "Changed"),
            _change("metadata", "title", "Other"),
            _change("badge", "label", "Hot"),
        ]
        applied = apply_changes(html, changes)
        highlighted = add_highlights(applied, changes)
        stripped = strip_highlights(highlighted)

        assert not has_highlights(stripped)
        assert parse(stripped) == parse(applied)

    def test_strip_removes_head_created_by_overlay(self):
        changes = [_change("about", "heading", "Changed")]
        applied = apply_changes(_NO_HEAD_HTML, changes)
        highlighted = add_highlights(applied, changes)
        assert _soup(highlighted).find("head", attrs={OVERLAY_ATTR: True}) is not None

        stripped = strip_highlights(highlighted)
        assert _soup(stripped).find(attrs={OVERLAY_ATTR: True}) is None
        assert parse(stripped) == parse(applied)

    def test_strip_without_overlay_returns_input(self):
        assert strip_highlights(_HTML) == _HTML

    def test_strip_keeps_unrelated_classes(self):
        highlighted = add_highlights(_HTML, [_change("about", "heading", "x")])
        soup = _soup(strip_highlights(highlighted))
        assert soup.find(id="about")["class"] == ["intro"]

    def test_has_highlights(self):
        assert not has_highlights(_HTML)
        assert not has_highlights("")
        assert has_highlights(add_highlights(_HTML, [_change("about", "heading", "x")]))


class TestRenderForPublish:
    def test_edited_html_is_stripped(self):
        highlighted = add_highlights(_HTML, [_change("about", "heading", "x")])
        result = render_for_publish(WebsiteContent(), html=highlighted)
        assert not has_highlights(result)

    def test_falls_back_to_generation(self):
        content = WebsiteContent(sections=[Section(id="about", content={"heading": "Generated"})])
        soup = _soup(render_for_publish(content, base_html=_HTML))
        assert soup.find(id="about").h2.get_text() == "Generated"

    def test_requires_some_html(self):
        with pytest.raises(ValueError):
            render_for_publish(WebsiteContent())
