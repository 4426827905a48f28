"""Tests for the claim registry and the field extractor."""

from app.services.claims import ClaimRegistry
from app.services.fields import extract_fields
from app.services.sanitizer import parse


def _first(html: str, name: str):
    return parse(html).find(name)


class TestClaimRegistry:
    def test_claim_is_identity_based(self):
        soup = parse("<div><p>Same</p><p>Same</p></div>")
        first, second = soup.find_all("p")
        claims = ClaimRegistry()
        claims.claim(first)
        assert first in claims
        assert second not in claims
        assert len(claims) == 1

    def test_descendant_of_claimed_element_is_covered(self):
        soup = parse("<div id='a'><span><b>x</b></span></div>")
        claims = ClaimRegistry()
        claims.claim(soup.find(id="a"))
        assert claims.is_covered(soup.find("b"))

    def test_nested_boundary_is_not_covered(self):
        soup = parse("<main><div><section><p>x</p></section></div></main>")
        claims = ClaimRegistry()
        claims.claim(soup.find("main"))
        assert not claims.is_covered(soup.find("section"))
        assert not claims.is_covered(soup.find("p"))

    def test_unclaimed_tree_is_not_covered(self):
        soup = parse("<div><p>x</p></div>")
        assert not ClaimRegistry().is_covered(soup.find("p"))


class TestExtractFields:
    def test_basic_fields(self):
        section = _first(
            """
            <section>
              <h2>Why</h2>
              <p>First</p>
              <p>   </p>
              <p>Second</p>
              <ul><li>One</li><li>Two</li></ul>
              <a href="/more">More</a>
              <img src="/a.png" alt="A">
            </section>
            """,
            "section",
        )
        content = extract_fields(section)
        assert content["heading"] == "Why"
        assert content["paragraphs"] == ["First", "Second"]
        assert content["lists"] == [["One", "Two"]]
        assert content["links"] == [{"text": "More", "href": "/more"}]
        assert content["images"] == [{"src": "/a.png", "alt": "A"}]
        assert "text" not in content
        assert "fragments" not in content

    def test_lazy_image_uses_data_src(self):
        div = _first('<div><img data-src="/lazy.png"></div>', "div")
        assert extract_fields(div)["images"] == [{"src": "/lazy.png", "alt": ""}]

    def test_nested_boundary_content_is_excluded(self):
        main = _first(
            "<main><p>Main text</p><section><h2>Inner</h2><p>Inner text</p></section></main>",
            "main",
        )
        content = extract_fields(main)
        assert content == {"paragraphs": ["Main text"]}

    def test_claimed_descendant_is_excluded(self):
        soup = parse("<div><p>Outer</p><div id='inner'><p>Claimed</p></div></div>")
        claims = ClaimRegistry()
        claims.claim(soup.find(id="inner"))
        content = extract_fields(soup.find("div"), claims)
        assert content["paragraphs"] == ["Outer"]

    def test_own_claim_does_not_hide_content(self):
        soup = parse("<section><h2>Title</h2></section>")
        claims = ClaimRegistry()
        section = soup.find("section")
        claims.claim(section)
        assert extract_fields(section, claims) == {"heading": "Title"}

    def test_sub_lists_fold_into_their_item(self):
        ul = _first("<div><ul><li>A<ul><li>A1</li></ul></li><li>B</li></ul></div>", "div")
        assert extract_fields(ul)["lists"] == [["A A1", "B"]]

    def test_text_fallback_when_no_structured_field(self):
        section = _first("<section>Hello   <b>there</b>\n friend</section>", "section")
        assert extract_fields(section) == {"text": "Hello there friend"}

    def test_leftover_text_is_kept_as_fragments(self):
        section = _first(
            """
            <section>
              <h2>Main</h2>
              <h3>Secondary</h3>
              <table><tr><td>Cell</td></tr></table>
              <div>Loose <em>words</em></div>
            </section>
            """,
            "section",
        )
        content = extract_fields(section)
        assert content["heading"] == "Main"
        assert content["fragments"] == ["Secondary", "Cell", "Loose words"]

    def test_empty_element_yields_nothing(self):
        div = _first("<div>   <span> </span></div>", "div")
        assert extract_fields(div) == {}
