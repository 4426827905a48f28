"""Tests for generator.generate and the field writers it dispatches to."""

import pytest
from bs4 import BeautifulSoup

from app.models.content import Section, WebsiteContent, WebsiteMetadata
from app.services.extractor import extract
from app.services.generator import generate
from app.services.page_definitions import LANDING_PAGE_DEFINITION
from app.services.writer import apply_field

_BASE_HTML = """
<!DOCTYPE html>
<html>
<head><title>Site</title></head>
<body>
  <header><h1>Site</h1><p>Tagline</p></header>
  <section id="about">
    <h2>Why</h2>
    <p>First <a href="/x">link</a> here</p>
    <p>Second</p>
    <ul><li>A</li><li>B</li></ul>
    <a href="/old">Old link</a>
  </section>
  <div class="untouched">Keep me</div>
</body>
</html>
"""


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


class TestGenerate:
    def test_heading_edit_round_trips(self):
        content = extract(_BASE_HTML).with_field("header-1", "heading", "New Title")
        soup = _soup(generate(_BASE_HTML, content))
        assert soup.find("h1").get_text() == "New Title"
        assert soup.find(class_="untouched").get_text() == "Keep me"

    def test_unchanged_model_keeps_inline_markup(self):
        soup = _soup(generate(_BASE_HTML, extract(_BASE_HTML)))
        assert soup.find("a", href="/x") is not None
        assert [li.get_text() for li in soup.find_all("li")] == ["A", "B"]

    def test_regenerated_html_extracts_to_same_content(self):
        content = extract(_BASE_HTML)
        again = extract(generate(_BASE_HTML, content))
        assert [(s.id, s.content) for s in again.sections] == [(s.id, s.content) for s in content.sections]

    def test_metadata_is_written_and_description_upserted(self):
        content = WebsiteContent(metadata=WebsiteMetadata(title="Fresh", description="Now described"))
        soup = _soup(generate(_BASE_HTML, content))
        assert soup.title.get_text() == "Fresh"
        assert soup.find("meta", attrs={"name": "description"})["content"] == "Now described"

    def test_head_is_created_when_missing(self):
        content = WebsiteContent(metadata=WebsiteMetadata(title="T", description="D"))
        soup = _soup(generate("<p>Body only</p>", content))
        assert soup.head.title.get_text() == "T"
        assert soup.find("p").get_text() == "Body only"

    def test_paragraphs_zip_and_append(self):
        content = WebsiteContent(
            sections=[Section(id="about", content={"paragraphs": ["One", "Two", "Three"]})]
        )
        soup = _soup(generate(_BASE_HTML, content))
        section = soup.find(id="about")
        assert [p.get_text() for p in section.find_all("p")] == ["One", "Two", "Three"]
        assert section.find_all("p")[-1].find_previous_sibling("p").get_text() == "Two"

    def test_lists_are_rebuilt(self):
        content = WebsiteContent(sections=[Section(id="about", content={"lists": [["X", "Y", "Z"]]})])
        soup = _soup(generate(_BASE_HTML, content))
        assert [li.get_text() for li in soup.find("ul").find_all("li")] == ["X", "Y", "Z"]

    def test_links_update_text_and_href_independently(self):
        content = WebsiteContent(
            sections=[Section(id="about", content={"links": [{"href": "/new"}, {"text": "Renamed"}]})]
        )
        soup = _soup(generate(_BASE_HTML, content))
        first, second = soup.find(id="about").find_all("a")
        assert first["href"] == "/new"
        assert first.get_text() == "link"
        assert second.get_text() == "Renamed"
        assert second["href"] == "/old"

    def test_inline_link_in_rewritten_paragraph_leaves_other_links_alone(self):
        html = (
            '<section id="promo"><h2>Deals</h2>'
            '<p>See <a href="/docs">docs</a> now</p><a class="btn" href="/buy">Buy</a></section>'
        )
        content = extract(html).with_field("promo", "paragraphs", ["See the docs later"])
        soup = _soup(generate(html, content))
        button = soup.find("a", class_="btn")
        assert button["href"] == "/buy"
        assert button.get_text() == "Buy"
        assert soup.find("p").get_text() == "See the docs later"

    def test_links_and_paragraphs_edited_together(self):
        html = (
            '<section id="promo"><p>See <a href="/docs">docs</a> now</p>'
            '<a class="btn" href="/buy">Buy</a></section>'
        )
        content = WebsiteContent(
            sections=[
                Section(
                    id="promo",
                    content={
                        "paragraphs": ["Plain text now"],
                        "links": [{"text": "docs", "href": "/docs"}, {"text": "Order", "href": "/order"}],
                    },
                )
            ]
        )
        button = _soup(generate(html, content)).find("a", class_="btn")
        assert button["href"] == "/order"
        assert button.get_text() == "Order"

    def test_orphan_text_with_inline_markup_is_written(self):
        html = "<div>Hello <b>world</b> again</div>"
        content = extract(html)
        assert content.sections[0].content == {"text": "Hello world again"}

        soup = _soup(generate(html, content.with_field(content.sections[0].id, "text", "Bye")))
        assert soup.find("div").get_text() == "Bye"
        assert soup.find("b") is None

    def test_resolved_element_without_marker_is_stamped(self):
        content = WebsiteContent(sections=[Section(id="footer", content={"text": "x"})])
        html = "<div><p>a</p></div><footer>old</footer>"
        soup = _soup(generate(html, content))
        footer = soup.find("footer")
        assert footer["data-section"] == "footer"
        assert footer.get_text() == "x"

    def test_marked_element_is_not_stamped(self):
        content = WebsiteContent(sections=[Section(id="about", content={"heading": "Hi"})])
        soup = _soup(generate(_BASE_HTML, content))
        assert not soup.find(id="about").has_attr("data-section")


class TestGenerateFailSoft:
    def test_zero_resolvable_sections(self):
        content = WebsiteContent(
            sections=[
                Section(id="ghost", content={"heading": "x"}),
                Section(id="bad", selector="div[", content={"heading": "y"}),
            ]
        )
        html = "<div><p>Only this</p></div>"
        result = generate(html, content)
        assert _soup(result).find("p").get_text() == "Only this"

    def test_odd_values_are_skipped(self):
        content = WebsiteContent(
            sections=[
                Section(
                    id="about",
                    content={
                        "heading": "Kept",
                        "weird": {"nested": True},
                        "lists": "not-a-list",
                        "paragraphs": [1, None],
                        "fragments": ["read only"],
                    },
                )
            ]
        )
        soup = _soup(generate(_BASE_HTML, content))
        assert soup.find("h2").get_text() == "Kept"
        assert "read only" not in str(soup)

    def test_one_failing_section_does_not_stop_the_rest(self, monkeypatch):
        from app.services import generator

        real = generator._apply_section

        def flaky(soup, section, page_definition):
            if section.id == "boom":
                raise RuntimeError("boom")
            return real(soup, section, page_definition)

        monkeypatch.setattr(generator, "_apply_section", flaky)
        content = WebsiteContent(
            sections=[Section(id="boom"), Section(id="about", content={"heading": "Still"})]
        )
        assert _soup(generate(_BASE_HTML, content)).find("h2").get_text() == "Still"

    def test_empty_base_html_is_rejected(self):
        with pytest.raises(ValueError):
            generate("  ", WebsiteContent())


class TestGenerateWithDefinition:
    _HTML = """
    <html><head><title>Acme</title></head><body>
      <header class="hero"><h1>Widgets</h1><p>Fast</p><a class="btn-primary" href="#buy">Buy</a></header>
      <section id="features"><h2>Features</h2><ul><li>One</li></ul></section>
    </body></html>
    """

    def test_configured_selectors_are_used(self):
        content = extract(self._HTML, LANDING_PAGE_DEFINITION)
        content = content.with_field("hero", "primaryCtaHref", "#checkout")
        content = content.with_field("features", "items", ["Alpha", "Beta"])
        soup = _soup(generate(self._HTML, content, LANDING_PAGE_DEFINITION))
        assert soup.find("a", class_="btn-primary")["href"] == "#checkout"
        assert soup.find("a", class_="btn-primary").get_text() == "Buy"
        assert [li.get_text() for li in soup.find("ul").find_all("li")] == ["Alpha", "Beta"]


class TestApplyField:
    def test_form_controls_receive_values(self):
        soup = _soup('<form><input data-field="email" value="a@b.c"></form>')
        assert apply_field(soup.find("form"), "email", "x@y.z")
        assert soup.find("input")["value"] == "x@y.z"

    def test_simple_text_element_fallback(self):
        soup = _soup("<span>Old</span>")
        span = soup.find("span")
        assert not apply_field(span, "badge", "New")
        assert apply_field(span, "badge", "New", fallback_to_self=True)
        assert span.get_text() == "New"

    def test_numbers_are_written_as_text(self):
        soup = _soup('<div><span data-field="price">1</span></div>')
        assert apply_field(soup.find("div"), "price", 42)
        assert soup.find("span").get_text() == "42"
