"""Registry of page definitions for known pages.

Definitions are opt-in: when nothing resolves, extraction falls back to the
heuristic passes.  New pages are registered in :data:`SITE_DEFINITIONS`
without touching any call site.
"""

import logging
from typing import List, Optional

from app.models.page_definition import PageDefinition, SiteDefinitionConfig

logger = logging.getLogger(__name__)

LANDING_PAGE_DEFINITION = PageDefinition.model_validate(
    {
        "id": "landing-home",
        "label": "Landing Page",
        "description": "Schema-driven mapping for a single-page marketing site (index.html).",
        "html_path": "index.html",
        "enable_heuristic_fallback": True,
        "metadata": [
            {
                "metadata_key": "title",
                "label": "Page Title",
                "description": "Primary document title shown in the browser tab.",
                "group": "seo",
                "absolute_selector": "title",
            },
            {
                "metadata_key": "description",
                "label": "Meta Description",
                "description": "Short summary used by search engines and previews.",
                "group": "seo",
                "type": "longtext",
                "absolute_selector": "head > meta[name='description']",
                "attribute_name": "content",
            },
            {
                "metadata_key": "lastModified",
                "label": "Last Modified",
                "description": "Timestamp of the last extraction; managed automatically.",
                "group": "technical",
            },
        ],
        "sections": [
            {
                "id": "hero",
                "label": "Hero",
                "type": "hero",
                "absolute_selector": "header[data-section='hero'], header.hero, header",
                "fields": [
                    {"key": "headline", "label": "Headline", "relative_selector": "h1"},
                    {
                        "key": "subheading",
                        "label": "Subheading",
                        "type": "longtext",
                        "relative_selector": "p",
                    },
                    {
                        "key": "primaryCtaLabel",
                        "label": "Primary CTA Label",
                        "relative_selector": "a.btn-primary, button.btn-primary, .hero-cta-primary",
                    },
                    {
                        "key": "primaryCtaHref",
                        "label": "Primary CTA Link",
                        "type": "url",
                        "relative_selector": "a.btn-primary, .hero-cta-primary",
                        "attribute_name": "href",
                    },
                ],
            },
            {
                "id": "features",
                "label": "Core Features",
                "type": "list",
                "absolute_selector": (
                    "section[data-section='features'], section.features, section#features"
                ),
                "fields": [
                    {"key": "title", "label": "Section Title", "relative_selector": "h2, h3"},
                    {
                        "key": "description",
                        "label": "Section Description",
                        "type": "longtext",
                        "relative_selector": "p",
                    },
                    {
                        "key": "items",
                        "label": "Feature Items",
                        "type": "list",
                        "relative_selector": "ul, ol, .feature-list",
                    },
                ],
            },
            {
                "id": "faq",
                "label": "FAQ",
                "type": "list",
                "absolute_selector": "section[data-section='faq'], section.faq, section#faq",
                "fields": [
                    {"key": "title", "label": "Section Title", "relative_selector": "h2, h3"},
                    {
                        "key": "items",
                        "label": "FAQ Items",
                        "type": "faq",
                        "relative_selector": ".faq-item, dl",
                    },
                ],
            },
            {
                "id": "cta",
                "label": "Final Call To Action",
                "type": "hero",
                "absolute_selector": "section[data-section='cta'], section.cta, section#cta",
                "fields": [
                    {"key": "headline", "label": "CTA Headline", "relative_selector": "h2, h3"},
                    {
                        "key": "body",
                        "label": "CTA Body",
                        "type": "longtext",
                        "relative_selector": "p",
                    },
                    {"key": "ctaLabel", "label": "CTA Button Label", "relative_selector": "a, button"},
                    {
                        "key": "ctaHref",
                        "label": "CTA Button Link",
                        "type": "url",
                        "relative_selector": "a",
                        "attribute_name": "href",
                    },
                ],
            },
            {
                "id": "footer",
                "label": "Footer",
                "type": "footer",
                "absolute_selector": "footer",
                "fields": [
                    {
                        "key": "copyright",
                        "label": "Copyright Text",
                        "relative_selector": "p, .copyright, small",
                    },
                    {
                        "key": "links",
                        "label": "Footer Links",
                        "type": "list",
                        "relative_selector": "a",
                    },
                ],
            },
        ],
    }
)

# Central registry; no default page, so unknown documents use heuristics only
SITE_DEFINITIONS = SiteDefinitionConfig(
    pages={LANDING_PAGE_DEFINITION.id: LANDING_PAGE_DEFINITION},
)


def get_page_definition(
    page_definition_id: str, config: SiteDefinitionConfig = SITE_DEFINITIONS
) -> Optional[PageDefinition]:
    return config.pages.get(page_definition_id)


def list_page_definitions(config: SiteDefinitionConfig = SITE_DEFINITIONS) -> List[PageDefinition]:
    return list(config.pages.values())


def resolve_page_definition(
    html_path: Optional[str] = None,
    page_definition_id: Optional[str] = None,
    page_definition: Optional[PageDefinition] = None,
    config: SiteDefinitionConfig = SITE_DEFINITIONS,
) -> Optional[PageDefinition]:
    """Pick the definition for a document, or *None* for heuristic extraction.

    Order: inline *page_definition* → *page_definition_id* in the registry →
    a registered page whose ``html_path`` equals *html_path* → the registry
    default.  An unknown id falls through to the next step.
    """
    if page_definition is not None:
        return page_definition

    if page_definition_id:
        found = config.pages.get(page_definition_id)
        if found is not None:
            return found
        logger.warning("Unknown page definition id '%s'", page_definition_id)

    if html_path:
        for page in config.pages.values():
            if page.html_path and page.html_path == html_path:
                return page

    if config.default_page_id:
        return config.pages.get(config.default_page_id)

    return None
