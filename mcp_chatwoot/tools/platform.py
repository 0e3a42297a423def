"""Platform bucket: cross-tenant administration through the platform API.

Requires a platform app token.  Writes and deletes are blocked unless
``MCP_PLATFORM_SAFE_MODE=false``.
"""

from __future__ import annotations

from functools import partial
from typing import FrozenSet, Tuple

from mcp_chatwoot.backend.platform import PlatformClient
from mcp_chatwoot.tools.base import (
    PLATFORM,
    BucketDispatcher,
    ToolSpec,
    number,
    obj,
    rest,
    string,
    tool,
)

BUCKET = "platform"

SAFE_MODE_MESSAGE = (
    'Blocked by MCP_PLATFORM_SAFE_MODE: "{tool}" is a write/delete operation. '
    "Set MCP_PLATFORM_SAFE_MODE=false to use this tool."
)
UNKNOWN_MESSAGE = "Unknown platform tool: {tool}"

DESTRUCTIVE_TOOLS: FrozenSet[str] = frozenset({
    "platform_create_account",
    "platform_update_account",
    "platform_delete_account",
    "platform_create_agent_bot",
    "platform_update_agent_bot",
    "platform_delete_agent_bot",
    "platform_create_user",
    "platform_update_user",
    "platform_delete_user",
    "platform_create_account_user",
    "platform_delete_account_user",
})

_plat = partial(rest, scope=PLATFORM)

_BOT_FIELDS = ("name", "description", "outgoing_url", "avatar_url")
_USER_FIELDS = ("name", "email", "password", "custom_attributes")

TOOLS: Tuple[ToolSpec, ...] = (
    # Accounts
    tool(
        "platform_create_account",
        "Create a new Chatwoot account via the Platform API. Requires "
        "CHATWOOT_PLATFORM_API_TOKEN.",
        {
            "name": string("Account name"),
            "locale": string('Account locale (e.g. "en")'),
        },
        ["name"],
        handler=_plat("POST", "/accounts", body=("name", "locale")),
    ),
    tool(
        "platform_get_account",
        "Get account details via the Platform API.",
        {"account_id": number("The account ID")},
        ["account_id"],
        handler=_plat("GET", "/accounts/{account_id}"),
    ),
    tool(
        "platform_update_account",
        "Update an account via the Platform API.",
        {
            "account_id": number("The account ID"),
            "name": string("Updated account name"),
            "locale": string("Updated locale"),
        },
        ["account_id"],
        handler=_plat("PATCH", "/accounts/{account_id}", body=("name", "locale")),
    ),
    tool(
        "platform_delete_account",
        "Delete an account via the Platform API. Destructive: permanently removes the account.",
        {"account_id": number("The account ID to delete")},
        ["account_id"],
        handler=_plat("DELETE", "/accounts/{account_id}"),
    ),
    # Global agent bots
    tool(
        "platform_list_agent_bots",
        "List all global agent bots via the Platform API.",
        {},
        handler=_plat("GET", "/agent_bots"),
    ),
    tool(
        "platform_create_agent_bot",
        "Create a global agent bot via the Platform API.",
        {
            "name": string("Bot name"),
            "description": string("Bot description"),
            "outgoing_url": string("Webhook URL for the bot"),
            "avatar_url": string("Bot avatar URL"),
        },
        ["name", "outgoing_url"],
        handler=_plat("POST", "/agent_bots", body=_BOT_FIELDS),
    ),
    tool(
        "platform_get_agent_bot",
        "Get a global agent bot by ID via the Platform API.",
        {"id": number("The agent bot ID")},
        ["id"],
        handler=_plat("GET", "/agent_bots/{id}"),
    ),
    tool(
        "platform_update_agent_bot",
        "Update a global agent bot via the Platform API.",
        {
            "id": number("The agent bot ID"),
            "name": string("Updated bot name"),
            "description": string("Updated description"),
            "outgoing_url": string("Updated webhook URL"),
            "avatar_url": string("Updated avatar URL"),
        },
        ["id"],
        handler=_plat("PATCH", "/agent_bots/{id}", body=_BOT_FIELDS),
    ),
    tool(
        "platform_delete_agent_bot",
        "Delete a global agent bot via the Platform API. Destructive.",
        {"id": number("The agent bot ID to delete")},
        ["id"],
        handler=_plat("DELETE", "/agent_bots/{id}"),
    ),
    # Users
    tool(
        "platform_create_user",
        "Create a new user via the Platform API.",
        {
            "name": string("User name"),
            "email": string("User email"),
            "password": string("User password"),
            "custom_attributes": obj("Custom attributes"),
        },
        ["name", "email"],
        handler=_plat("POST", "/users", body=_USER_FIELDS),
    ),
    tool(
        "platform_get_user",
        "Get a user by ID via the Platform API.",
        {"id": number("The user ID")},
        ["id"],
        handler=_plat("GET", "/users/{id}"),
    ),
    tool(
        "platform_update_user",
        "Update a user via the Platform API.",
        {
            "id": number("The user ID"),
            "name": string("Updated name"),
            "email": string("Updated email"),
            "password": string("Updated password"),
            "custom_attributes": obj("Updated custom attributes"),
        },
        ["id"],
        handler=_plat("PATCH", "/users/{id}", body=_USER_FIELDS),
    ),
    tool(
        "platform_delete_user",
        "Delete a user via the Platform API. Destructive: permanently removes the user.",
        {"id": number("The user ID to delete")},
        ["id"],
        handler=_plat("DELETE", "/users/{id}"),
    ),
    tool(
        "platform_get_user_sso_link",
        "Get a single sign-on login link for a user via the Platform API.",
        {"id": number("The user ID")},
        ["id"],
        handler=_plat("GET", "/users/{id}/login"),
    ),
    # Account users
    tool(
        "platform_list_account_users",
        "List all users in an account via the Platform API.",
        {"account_id": number("The account ID")},
        ["account_id"],
        handler=_plat("GET", "/accounts/{account_id}/account_users"),
    ),
    tool(
        "platform_create_account_user",
        "Add a user to an account via the Platform API.",
        {
            "account_id": number("The account ID"),
            "user_id": number("The user ID to add"),
            "role": string("User role in the account", ["agent", "administrator"]),
        },
        ["account_id", "user_id", "role"],
        handler=_plat("POST", "/accounts/{account_id}/account_users", body=("user_id", "role")),
    ),
    tool(
        "platform_delete_account_user",
        "Remove a user from an account via the Platform API. Destructive.",
        {
            "account_id": number("The account ID"),
            "user_id": number("The user ID to remove"),
        },
        ["account_id", "user_id"],
        handler=_plat("DELETE", "/accounts/{account_id}/account_users", body=("user_id",)),
    ),
)


def create_dispatcher(client: PlatformClient, safe_mode: bool) -> BucketDispatcher:
    return BucketDispatcher(
        BUCKET,
        client,
        TOOLS,
        destructive=DESTRUCTIVE_TOOLS,
        safe_mode=safe_mode,
        blocked_template=SAFE_MODE_MESSAGE,
        unknown_template=UNKNOWN_MESSAGE,
    )
