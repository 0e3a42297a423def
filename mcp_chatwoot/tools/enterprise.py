"""Enterprise bucket: audit logs, reporting events and account-scoped bots."""

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
    number,
    obj,
    rest,
    string,
    tool,
)

BUCKET = "enterprise"

ACCOUNT_ID = {
    "account_id": number(
        "Chatwoot account ID. If omitted, uses default from CHATWOOT_ACCOUNT_ID env var."
    ),
}

SAFE_MODE_MESSAGE = (
    'Blocked by MCP_SAFE_MODE: "{tool}" is a destructive operation. '
    "Set MCP_SAFE_MODE=false to use this tool."
)
UNKNOWN_MESSAGE = "Unknown enterprise tool: {tool}"

DESTRUCTIVE_TOOLS: FrozenSet[str] = frozenset({
    "enterprise_create_agent_bot",
    "enterprise_update_agent_bot",
    "enterprise_delete_agent_bot",
})

_acct = partial(rest, scope=ACCOUNT)


def _tool(
    name: str,
    description: str,
    properties: Mapping[str, Any],
    required: Iterable[str] = (),
    *,
    handler: Handler,
) -> ToolSpec:
    return tool(name, description, {**properties, **ACCOUNT_ID}, required, handler=handler)


TOOLS: Tuple[ToolSpec, ...] = (
    _tool(
        "enterprise_list_audit_logs",
        "List audit log entries for the account. Enterprise-only feature, requires "
        "audit_logs to be enabled.",
        {"page": number("Page number (default: 1)")},
        handler=_acct("GET", "/audit_logs", query=("page",), defaults={"page": 1}),
    ),
    _tool(
        "enterprise_get_account_reporting_events",
        "Get raw reporting events (first_response, resolution, etc.) for the account. "
        "Admin-only.",
        {
            "page": number("Page number (default: 1)"),
            "since": string("Unix timestamp (seconds), start of range"),
            "until": string("Unix timestamp (seconds), end of range"),
            "inbox_id": number("Filter by inbox ID"),
            "user_id": number("Filter by user/agent ID"),
            "name": string('Event name filter (e.g. "first_response", "resolution")'),
        },
        handler=_acct(
            "GET",
            "/reporting_events",
            query=("page", "since", "until", "inbox_id", "user_id", "name"),
        ),
    ),
    _tool(
        "enterprise_get_conversation_reporting_events",
        "Get reporting events (first response time, resolution time, etc.) for a "
        "specific conversation.",
        {"conversation_id": number("The conversation ID")},
        ["conversation_id"],
        handler=_acct("GET", "/conversations/{conversation_id}/reporting_events"),
    ),
    _tool(
        "enterprise_list_agent_bots",
        "List all agent bots scoped to the account (not global platform bots).",
        {},
        handler=_acct("GET", "/agent_bots"),
    ),
    _tool(
        "enterprise_get_agent_bot",
        "Get details of an account-scoped agent bot by ID.",
        {"bot_id": number("The agent bot ID")},
        ["bot_id"],
        handler=_acct("GET", "/agent_bots/{bot_id}"),
    ),
    _tool(
        "enterprise_create_agent_bot",
        "Create a new account-scoped agent bot.",
        {
            "name": string("Bot name"),
            "description": string("Bot description"),
            "outgoing_url": string("Webhook URL for the bot"),
            "avatar_url": string("Bot avatar URL"),
            "bot_type": number("Bot type (0 = webhook)"),
            "bot_config": obj("Bot configuration object"),
        },
        ["name", "outgoing_url"],
        handler=_acct("POST", "/agent_bots", body=REMAINING),
    ),
    _tool(
        "enterprise_update_agent_bot",
        "Update an account-scoped agent bot.",
        {
            "bot_id": number("The agent bot ID"),
            "name": string("Updated bot name"),
            "description": string("Updated description"),
            "outgoing_url": string("Updated webhook URL"),
            "avatar_url": string("Updated avatar URL"),
            "bot_type": number("Updated bot type"),
            "bot_config": obj("Updated bot configuration"),
        },
        ["bot_id"],
        handler=_acct("PATCH", "/agent_bots/{bot_id}", body=REMAINING),
    ),
    _tool(
        "enterprise_delete_agent_bot",
        "Delete an account-scoped agent bot. Destructive.",
        {"bot_id": number("The agent bot ID to delete")},
        ["bot_id"],
        handler=_acct("DELETE", "/agent_bots/{bot_id}"),
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
