"""Tests for page definition validation and the definition registry."""

import pytest
from pydantic import ValidationError

from app.models.page_definition import (
    FieldDefinition,
    PageDefinition,
    SectionDefinition,
    SiteDefinitionConfig,
)
from app.services.page_definitions import (
    LANDING_PAGE_DEFINITION,
    get_page_definition,
    list_page_definitions,
    resolve_page_definition,
)


def _page(page_id: str, html_path=None) -> PageDefinition:
    return PageDefinition(
        id=page_id,
        label=page_id.title(),
        html_path=html_path,
        sections=[SectionDefinition(id="main", label="Main", absolute_selector="main")],
    )


class TestValidation:
    def test_field_needs_a_selector(self):
        with pytest.raises(ValidationError):
            FieldDefinition(key="title", label="Title")

    def test_field_rejects_both_selectors(self):
        with pytest.raises(ValidationError):
            FieldDefinition(key="title", label="Title", absolute_selector="h1", relative_selector="h1")

    def test_duplicate_field_keys(self):
        with pytest.raises(ValidationError, match="title"):
            SectionDefinition(
                id="hero",
                label="Hero",
                absolute_selector="header",
                fields=[
                    FieldDefinition(key="title", label="A", relative_selector="h1"),
                    FieldDefinition(key="title", label="B", relative_selector="h2"),
                ],
            )

    def test_duplicate_section_ids(self):
        section = SectionDefinition(id="hero", label="Hero", absolute_selector="header")
        with pytest.raises(ValidationError, match="hero"):
            PageDefinition(id="home", label="Home", sections=[section, section])

    def test_default_page_must_be_registered(self):
        with pytest.raises(ValidationError):
            SiteDefinitionConfig(pages={}, default_page_id="home")

    def test_landing_definition_is_valid(self):
        assert LANDING_PAGE_DEFINITION.section("hero").field("headline").relative_selector == "h1"
        assert LANDING_PAGE_DEFINITION.section("missing") is None


class TestRegistry:
    def test_get_and_list(self):
        assert get_page_definition("landing-home") is LANDING_PAGE_DEFINITION
        assert get_page_definition("missing") is None
        assert LANDING_PAGE_DEFINITION in list_page_definitions()


class TestResolvePageDefinition:
    _CONFIG = SiteDefinitionConfig(
        pages={
            "home": _page("home", html_path="index.html"),
            "about": _page("about", html_path="about.html"),
        },
        default_page_id="home",
    )

    def test_inline_definition_wins(self):
        inline = _page("inline")
        found = resolve_page_definition(
            html_path="about.html", page_definition_id="about", page_definition=inline, config=self._CONFIG
        )
        assert found is inline

    def test_id_before_path(self):
        found = resolve_page_definition(html_path="index.html", page_definition_id="about", config=self._CONFIG)
        assert found.id == "about"

    def test_unknown_id_falls_through_to_path(self):
        found = resolve_page_definition(html_path="about.html", page_definition_id="missing", config=self._CONFIG)
        assert found.id == "about"

    def test_default_when_nothing_matches(self):
        assert resolve_page_definition(html_path="blog.html", config=self._CONFIG).id == "home"

    def test_no_default_means_heuristics(self):
        config = SiteDefinitionConfig(pages={"about": _page("about", html_path="about.html")})
        assert resolve_page_definition(html_path="blog.html", config=config) is None

    def test_shipped_registry_matches_landing_path(self):
        assert resolve_page_definition(html_path="index.html") is LANDING_PAGE_DEFINITION
        assert resolve_page_definition() is None
