"""Help Center bucket: portals, articles and categories.

Portals are addressed by slug, so ``portal_id`` is a string everywhere.
"""

from __future__ import annotations

from functools import partial
from typing import Any, FrozenSet, Iterable, Mapping, Tuple

from mcp_chatwoot.backend.account import ChatwootClient
from mcp_chatwoot.tools.base import (
    ACCOUNT,
    REMAINING,
    BucketDispatcher,
    Handler,
    ToolSpec,
    boolean,
    number,
    obj,
    rest,
    string,
    tool,
)
from mcp_chatwoot.tools.enterprise import ACCOUNT_ID, SAFE_MODE_MESSAGE

BUCKET = "helpcenter"

PORTAL_ID = {"portal_id": string("Portal slug identifier (string, not numeric)")}

UNKNOWN_MESSAGE = "Unknown help center tool: {tool}"

DESTRUCTIVE_TOOLS: FrozenSet[str] = frozenset({
    "helpcenter_delete_portal",
    "helpcenter_delete_article",
    "helpcenter_delete_category",
})

_acct = partial(rest, scope=ACCOUNT)

_ARTICLE_STATUS = [0, 1, 2]
_PORTAL = "/portals/{portal_id}"
_ARTICLE = _PORTAL + "/articles/{article_id}"
_CATEGORY = _PORTAL + "/categories/{category_id}"


def _tool(
    name: str,
    description: str,
    properties: Mapping[str, Any],
    required: Iterable[str] = (),
    *,
    handler: Handler,
    portal: bool = True,
) -> ToolSpec:
    head = PORTAL_ID if portal else {}
    required = ("portal_id", *required) if portal else tuple(required)
    return tool(
        name,
        description,
        {**head, **properties, **ACCOUNT_ID},
        required,
        handler=handler,
    )


TOOLS: Tuple[ToolSpec, ...] = (
    # Portals
    _tool(
        "helpcenter_list_portals",
        "List all Help Center portals in the account.",
        {},
        handler=_acct("GET", "/portals"),
        portal=False,
    ),
    _tool(
        "helpcenter_create_portal",
        "Create a new Help Center portal.",
        {
            "name": string("Portal name"),
            "slug": string("Portal slug (URL-friendly identifier)"),
            "color": string('Theme color (hex, e.g. "#1F93FF")'),
            "header_text": string("Header text shown on portal"),
            "page_title": string("HTML page title"),
            "homepage_link": string("Homepage link URL"),
            "custom_domain": string("Custom domain for the portal"),
            "archived": boolean("Whether the portal is archived"),
            "config": obj("Portal config (allowed_locales, default_locale)"),
        },
        ["name", "slug"],
        handler=_acct("POST", "/portals", body=REMAINING),
        portal=False,
    ),
    _tool(
        "helpcenter_get_portal",
        "Get details of a Help Center portal by its slug.",
        {},
        handler=_acct("GET", _PORTAL),
    ),
    _tool(
        "helpcenter_update_portal",
        "Update a Help Center portal.",
        {
            "name": string("Updated portal name"),
            "slug": string("Updated slug"),
            "color": string("Updated color"),
            "header_text": string("Updated header text"),
            "page_title": string("Updated page title"),
            "homepage_link": string("Updated homepage link"),
            "custom_domain": string("Updated custom domain"),
            "archived": boolean("Archive status"),
            "config": obj("Updated config"),
        },
        handler=_acct("PATCH", _PORTAL, body=REMAINING),
    ),
    _tool(
        "helpcenter_delete_portal",
        "Delete a Help Center portal. Destructive.",
        {},
        handler=_acct("DELETE", _PORTAL),
    ),
    # Articles
    _tool(
        "helpcenter_list_articles",
        "List articles in a Help Center portal.",
        {
            "page": number("Page number"),
            "locale": string("Filter by locale"),
            "category_id": number("Filter by category ID"),
        },
        handler=_acct("GET", _PORTAL + "/articles", query=("page", "locale", "category_id")),
    ),
    _tool(
        "helpcenter_create_article",
        "Create a new article in a Help Center portal.",
        {
            "title": string("Article title"),
            "slug": string("Article slug"),
            "content": string("Article content (HTML or markdown)"),
            "description": string("Short description / excerpt"),
            "category_id": number("Category ID to place article in"),
            "author_id": number("Author user ID"),
            "position": number("Sort position"),
            "status": number("Article status: 0=draft, 1=published, 2=archived", _ARTICLE_STATUS),
            "locale": string("Article locale"),
            "associated_article_id": number("Associated article ID (translations)"),
            "meta": obj("Metadata object"),
        },
        ["title", "slug"],
        handler=_acct("POST", _PORTAL + "/articles", body=REMAINING),
    ),
    _tool(
        "helpcenter_get_article",
        "Get a specific article from a Help Center portal.",
        {"article_id": number("The article ID")},
        ["article_id"],
        handler=_acct("GET", _ARTICLE),
    ),
    _tool(
        "helpcenter_update_article",
        "Update an article in a Help Center portal.",
        {
            "article_id": number("The article ID"),
            "title": string("Updated title"),
            "slug": string("Updated slug"),
            "content": string("Updated content"),
            "description": string("Updated description"),
            "category_id": number("Updated category ID"),
            "position": number("Updated position"),
            "status": number(
                "Updated status (0=draft, 1=published, 2=archived)", _ARTICLE_STATUS
            ),
            "locale": string("Updated locale"),
            "meta": obj("Updated metadata"),
        },
        ["article_id"],
        handler=_acct("PATCH", _ARTICLE, body=REMAINING),
    ),
    _tool(
        "helpcenter_delete_article",
        "Delete an article from a Help Center portal. Destructive.",
        {"article_id": number("The article ID to delete")},
        ["article_id"],
        handler=_acct("DELETE", _ARTICLE),
    ),
    # Categories
    _tool(
        "helpcenter_list_categories",
        "List categories in a Help Center portal.",
        {"locale": string("Filter by locale")},
        handler=_acct("GET", _PORTAL + "/categories", query=("locale",)),
    ),
    _tool(
        "helpcenter_create_category",
        "Create a new category in a Help Center portal.",
        {
            "name": string("Category name"),
            "description": string("Category description"),
            "slug": string("Category slug"),
            "position": number("Sort position"),
            "locale": string("Category locale"),
            "icon": string("Category icon (emoji)"),
            "parent_category_id": number("Parent category ID (for nesting)"),
            "associated_category_id": number("Associated category ID (translations)"),
        },
        handler=_acct("POST", _PORTAL + "/categories", body=REMAINING),
    ),
    _tool(
        "helpcenter_get_category",
        "Get a specific category from a Help Center portal.",
        {"category_id": number("The category ID")},
        ["category_id"],
        handler=_acct("GET", _CATEGORY),
    ),
    _tool(
        "helpcenter_update_category",
        "Update a category in a Help Center portal.",
        {
            "category_id": number("The category ID"),
            "name": string("Updated name"),
            "description": string("Updated description"),
            "slug": string("Updated slug"),
            "position": number("Updated position"),
            "locale": string("Updated locale"),
            "icon": string("Updated icon (emoji)"),
            "parent_category_id": number("Updated parent category ID"),
        },
        ["category_id"],
        handler=_acct("PATCH", _CATEGORY, body=REMAINING),
    ),
    _tool(
        "helpcenter_delete_category",
        "Delete a category from a Help Center portal. Destructive.",
        {"category_id": number("The category ID to delete")},
        ["category_id"],
        handler=_acct("DELETE", _CATEGORY),
    ),
)


def create_dispatcher(client: ChatwootClient, safe_mode: bool) -> BucketDispatcher:
    return BucketDispatcher(
        BUCKET,
        client,
        TOOLS,
        destructive=DESTRUCTIVE_TOOLS,
        safe_mode=safe_mode,
        blocked_template=SAFE_MODE_MESSAGE,
        unknown_template=UNKNOWN_MESSAGE,
    )
