"""Core bucket: the account-scoped application API.

Always enabled.  Every tool accepts an optional ``account_id`` that
overrides the configured default account for that call.
"""

from __future__ import annotations

from functools import partial
from typing import Any, FrozenSet, Iterable, Mapping, Tuple

from mcp_chatwoot.backend.account import ChatwootClient
from mcp_chatwoot.tools.base import (
    ACCOUNT,
    REMAINING,
    REPORTS,
    BucketDispatcher,
    Handler,
    TextReply,
    ToolArgs,
    ToolSpec,
    anything,
    array,
    boolean,
    compact,
    number,
    obj,
    path_segment,
    require,
    rest,
    string,
    tool,
)

BUCKET = "core"

ACCOUNT_ID = {
    "account_id": number(
        "Chatwoot account ID to use. If omitted, uses the default account "
        "from CHATWOOT_ACCOUNT_ID env var."
    ),
}

SAFE_MODE_MESSAGE = (
    'Blocked by MCP_SAFE_MODE: "{tool}" is a destructive operation. '
    "Set MCP_SAFE_MODE=false or remove it to use this tool."
)
UNKNOWN_MESSAGE = "Unknown tool: {tool}"

DESTRUCTIVE_TOOLS: FrozenSet[str] = frozenset({
    "delete_contact",
    "delete_message",
    "delete_team",
    "delete_label",
    "delete_canned_response",
    "delete_webhook",
    "delete_custom_attribute",
    "delete_automation_rule",
    "delete_custom_filter",
    "remove_inbox_agents",
    "remove_team_members",
    "merge_contacts",
    "create_webhook",
    "update_webhook",
})

_v1 = partial(rest, scope=ACCOUNT)
_v2 = partial(rest, scope=REPORTS)


def _tool(
    name: str,
    description: str,
    properties: Mapping[str, Any],
    required: Iterable[str] = (),
    *,
    handler: Handler,
) -> ToolSpec:
    return tool(name, description, {**properties, **ACCOUNT_ID}, required, handler=handler)


# ── Handlers with extra shaping ──────────────────────────────────────────


async def _health(client: ChatwootClient, args: ToolArgs) -> TextReply:
    account_id = client.resolve_account_id(args.get("account_id"))
    account = await client.for_account(args.get("account_id")).get("/")
    name = account.get("name") if isinstance(account, dict) else None
    return TextReply(
        "Connected to Chatwoot successfully.\n"
        f"Account ID: {account_id}\n"
        f"Account: {name or 'OK'}"
    )


async def _create_conversation(client: ChatwootClient, args: ToolArgs) -> Any:
    message = args.get("message")
    body = compact({
        "inbox_id": require(args, "inbox_id"),
        "contact_id": args.get("contact_id"),
        "status": args.get("status"),
        "assignee_id": args.get("assignee_id"),
        "team_id": args.get("team_id"),
        "message": {"content": message} if message else None,
    })
    return await client.for_account(args.get("account_id")).post("/conversations", body)


async def _add_labels_to_conversation(client: ChatwootClient, args: ToolArgs) -> Any:
    """Merge new labels into the conversation's current ones.

    The labels endpoint replaces the whole set, so the current labels are
    read first.
    """
    http = client.for_account(args.get("account_id"))
    path = f"/conversations/{path_segment(require(args, 'conversation_id'))}"
    current = await http.get(path)
    existing = current.get("labels") if isinstance(current, dict) else None
    merged = list(dict.fromkeys([*(existing or []), *require(args, "labels")]))
    return await http.post(f"{path}/labels", {"labels": merged})


# ── Catalog ──────────────────────────────────────────────────────────────

_STATUS_FILTER = ["open", "resolved", "pending", "snoozed", "all"]
_REPORT_TYPES = ["account", "agent", "inbox", "label", "team"]
_RULE_EVENTS = ["conversation_created", "conversation_updated", "message_created"]
_ATTRIBUTE_MODELS = ["contact_attribute", "conversation_attribute"]
_FILTER_TYPES = ["conversation", "contact", "report"]

TOOLS: Tuple[ToolSpec, ...] = (
    # Health
    _tool(
        "chatwoot_health",
        "Test connection to the Chatwoot instance and return account information. "
        "Use this to verify the MCP server is properly configured.",
        {},
        handler=_health,
    ),
    # Contacts
    _tool(
        "list_contacts",
        "List contacts in the Chatwoot account with pagination. Returns contact name, "
        "email, phone, and metadata.",
        {
            "page": number("Page number (default: 1)"),
            "sort": string(
                "Sort field",
                ["name", "email", "phone_number", "last_activity_at", "created_at"],
            ),
        },
        handler=_v1("GET", "/contacts", query=("page", "sort"), defaults={"page": 1, "sort": "name"}),
    ),
    _tool(
        "get_contact",
        "Get detailed information about a specific contact by their ID.",
        {"contact_id": number("The contact ID")},
        ["contact_id"],
        handler=_v1("GET", "/contacts/{contact_id}"),
    ),
    _tool(
        "create_contact",
        "Create a new contact in Chatwoot. At least one of name, email, or phone_number "
        "is recommended.",
        {
            "name": string("Contact name"),
            "email": string("Contact email address"),
            "phone_number": string("Phone number with country code (e.g., +5212345678)"),
            "identifier": string("Custom unique identifier"),
            "inbox_id": number("Inbox to associate the contact with"),
            "custom_attributes": anything("Custom attributes as key-value pairs"),
        },
        handler=_v1(
            "POST",
            "/contacts",
            body=("name", "email", "phone_number", "identifier", "inbox_id", "custom_attributes"),
        ),
    ),
    _tool(
        "update_contact",
        "Update an existing contact. Only provided fields will be updated.",
        {
            "contact_id": number("The contact ID to update"),
            "name": string("New name"),
            "email": string("New email"),
            "phone_number": string("New phone number"),
            "custom_attributes": obj("Custom attributes to set"),
        },
        ["contact_id"],
        handler=_v1(
            "PATCH",
            "/contacts/{contact_id}",
            body=("name", "email", "phone_number", "custom_attributes"),
        ),
    ),
    _tool(
        "search_contacts",
        "Search contacts by name, email, phone number, or identifier. Returns matching contacts.",
        {
            "query": string("Search query (name, email, phone, or identifier)"),
            "page": number("Page number (default: 1)"),
        },
        ["query"],
        handler=_v1(
            "GET",
            "/contacts/search",
            query=("query", "page"),
            defaults={"page": 1},
            rename={"query": "q"},
        ),
    ),
    _tool(
        "get_contact_conversations",
        "Get all conversations associated with a specific contact.",
        {"contact_id": number("The contact ID")},
        ["contact_id"],
        handler=_v1("GET", "/contacts/{contact_id}/conversations"),
    ),
    # Conversations
    _tool(
        "list_conversations",
        "List conversations with optional filters for status, assignee, inbox, team, and labels.",
        {
            "status": string("Filter by status", _STATUS_FILTER),
            "assignee_type": string(
                "Filter by assignee type", ["me", "unassigned", "all", "assigned"]
            ),
            "inbox_id": number("Filter by inbox ID"),
            "team_id": number("Filter by team ID"),
            "labels": array("Filter by label names"),
            "page": number("Page number (default: 1)"),
        },
        handler=_v1(
            "GET",
            "/conversations",
            query=("status", "assignee_type", "inbox_id", "team_id", "labels", "page"),
        ),
    ),
    _tool(
        "get_conversation",
        "Get detailed information about a specific conversation, including contact info, "
        "assignee, labels, and recent messages.",
        {"conversation_id": number("The conversation ID")},
        ["conversation_id"],
        handler=_v1("GET", "/conversations/{conversation_id}"),
    ),
    _tool(
        "create_conversation",
        "Create a new conversation. Requires an inbox_id. Optionally link to a contact "
        "and send an initial message.",
        {
            "inbox_id": number("Inbox ID for the conversation"),
            "contact_id": number("Contact ID to associate"),
            "message": string("Initial message content"),
            "status": string("Initial status", ["open", "pending"]),
            "assignee_id": number("Agent ID to assign"),
            "team_id": number("Team ID to assign"),
        },
        ["inbox_id"],
        handler=_create_conversation,
    ),
    _tool(
        "update_conversation_status",
        "Change the status of a conversation (open, resolved, pending, or snoozed).",
        {
            "conversation_id": number("The conversation ID"),
            "status": string("New status", ["open", "resolved", "pending", "snoozed"]),
        },
        ["conversation_id", "status"],
        handler=_v1("POST", "/conversations/{conversation_id}/toggle_status", body=("status",)),
    ),
    _tool(
        "assign_conversation",
        "Assign a conversation to a specific agent, team, or both. Omit both to unassign.",
        {
            "conversation_id": number("The conversation ID"),
            "assignee_id": number("Agent ID to assign (omit to unassign agent)"),
            "team_id": number("Team ID to assign (omit to unassign team)"),
        },
        ["conversation_id"],
        handler=_v1(
            "POST",
            "/conversations/{conversation_id}/assignments",
            body=("assignee_id", "team_id"),
        ),
    ),
    _tool(
        "add_labels_to_conversation",
        "Add one or more labels to a conversation. Existing labels are preserved.",
        {
            "conversation_id": number("The conversation ID"),
            "labels": array("Label names to add"),
        },
        ["conversation_id", "labels"],
        handler=_add_labels_to_conversation,
    ),
    _tool(
        "set_conversation_priority",
        "Set the priority level of a conversation.",
        {
            "conversation_id": number("The conversation ID"),
            "priority": string("Priority level", ["urgent", "high", "medium", "low", "none"]),
        },
        ["conversation_id", "priority"],
        handler=_v1("PATCH", "/conversations/{conversation_id}", body=("priority",)),
    ),
    # Messages
    _tool(
        "send_message",
        "Send a message in a conversation. Can be a regular reply or a private note "
        "(visible only to agents).",
        {
            "conversation_id": number("The conversation ID"),
            "content": string("Message content"),
            "private": boolean(
                "If true, sends as a private note (only visible to agents). Default: false"
            ),
            "message_type": string("Message type", ["outgoing", "incoming"]),
        },
        ["conversation_id", "content"],
        handler=_v1(
            "POST",
            "/conversations/{conversation_id}/messages",
            body=("content", "message_type", "private", "content_type", "content_attributes"),
            defaults={"message_type": "outgoing", "private": False, "content_type": "text"},
        ),
    ),
    _tool(
        "list_messages",
        "Get all messages in a conversation, ordered chronologically.",
        {"conversation_id": number("The conversation ID")},
        ["conversation_id"],
        handler=_v1("GET", "/conversations/{conversation_id}/messages"),
    ),
    # Agents, teams, inboxes
    _tool(
        "list_agents",
        "List all agents in the Chatwoot account with their roles and availability status.",
        {},
        handler=_v1("GET", "/agents"),
    ),
    _tool(
        "list_teams",
        "List all teams in the Chatwoot account.",
        {},
        handler=_v1("GET", "/teams"),
    ),
    _tool(
        "get_team_members",
        "Get the list of agents in a specific team.",
        {"team_id": number("The team ID")},
        ["team_id"],
        handler=_v1("GET", "/teams/{team_id}/team_members"),
    ),
    _tool(
        "list_inboxes",
        "List all inboxes (channels) in the Chatwoot account. Shows channel type, name, "
        "and configuration.",
        {},
        handler=_v1("GET", "/inboxes"),
    ),
    # Labels
    _tool(
        "list_labels",
        "List all labels available in the Chatwoot account.",
        {},
        handler=_v1("GET", "/labels"),
    ),
    _tool(
        "create_label",
        "Create a new label for categorizing conversations and contacts.",
        {
            "title": string("Label name"),
            "description": string("Label description"),
            "color": string("Hex color code (e.g., #FF0000)"),
            "show_on_sidebar": boolean("Show label on sidebar (default: true)"),
        },
        ["title"],
        handler=_v1("POST", "/labels", body=("title", "description", "color", "show_on_sidebar")),
    ),
    # Canned responses
    _tool(
        "list_canned_responses",
        "List all canned (pre-written) responses. These are quick reply templates for agents.",
        {},
        handler=_v1("GET", "/canned_responses"),
    ),
    _tool(
        "create_canned_response",
        "Create a new canned response template for quick replies.",
        {
            "short_code": string('Short code to trigger this response (e.g., "greeting")'),
            "content": string("The response content text"),
        },
        ["short_code", "content"],
        handler=_v1("POST", "/canned_responses", body=("short_code", "content")),
    ),
    # Reports (v2)
    _tool(
        "get_account_report",
        "Get account-level reports and metrics (via API v2). Includes conversation counts, "
        "response times, and resolution metrics.",
        {
            "metric": string(
                "The metric to retrieve",
                [
                    "conversations_count",
                    "incoming_messages_count",
                    "outgoing_messages_count",
                    "avg_first_response_time",
                    "avg_resolution_time",
                    "resolutions_count",
                ],
            ),
            "type": string("Report scope", _REPORT_TYPES),
            "id": string("Entity ID when type is agent/inbox/label/team"),
            "since": string("Start timestamp (Unix timestamp or ISO 8601)"),
            "until": string("End timestamp (Unix timestamp or ISO 8601)"),
        },
        ["metric", "type"],
        handler=_v2("GET", "/reports", query=("metric", "type", "id", "since", "until")),
    ),
    # Contacts (additional)
    _tool(
        "delete_contact",
        "Permanently delete a contact and all associated data.",
        {"contact_id": number("The contact ID to delete")},
        ["contact_id"],
        handler=_v1("DELETE", "/contacts/{contact_id}", done="Contact deleted successfully."),
    ),
    _tool(
        "filter_contacts",
        "Filter contacts using advanced query conditions. Each filter has field, operator, "
        "and value.",
        {
            "filters": array(
                "Array of filter objects with field, filter_operator, and values (e.g., "
                '[{"attribute_key":"city","filter_operator":"equal_to","values":["Paris"]}])',
                items="object",
            ),
            "page": number("Page number (default: 1)"),
        },
        ["filters"],
        handler=_v1(
            "POST",
            "/contacts/filter",
            body=("filters", "page"),
            defaults={"page": 1},
            rename={"filters": "payload"},
        ),
    ),
    # Conversations (additional)
    _tool(
        "get_conversation_labels",
        "Get all labels currently applied to a conversation.",
        {"conversation_id": number("The conversation ID")},
        ["conversation_id"],
        handler=_v1("GET", "/conversations/{conversation_id}/labels"),
    ),
    _tool(
        "get_conversation_counts",
        "Get conversation count statistics grouped by status (open, pending, resolved, etc.).",
        {"status": string("Optional status filter", _STATUS_FILTER)},
        handler=_v1("GET", "/conversations/counts", query=("status",)),
    ),
    # Messages (additional)
    _tool(
        "delete_message",
        "Delete a specific message from a conversation.",
        {
            "conversation_id": number("The conversation ID"),
            "message_id": number("The message ID to delete"),
        },
        ["conversation_id", "message_id"],
        handler=_v1(
            "DELETE",
            "/conversations/{conversation_id}/messages/{message_id}",
            done="Message deleted successfully.",
        ),
    ),
    # Agents (additional)
    _tool(
        "get_agent",
        "Get detailed information about a specific agent by their ID.",
        {"agent_id": number("The agent ID")},
        ["agent_id"],
        handler=_v1("GET", "/agents/{agent_id}"),
    ),
    # Teams (additional)
    _tool(
        "get_team",
        "Get detailed information about a specific team.",
        {"team_id": number("The team ID")},
        ["team_id"],
        handler=_v1("GET", "/teams/{team_id}"),
    ),
    _tool(
        "create_team",
        "Create a new team in the Chatwoot account.",
        {
            "name": string("Team name"),
            "description": string("Team description"),
            "allow_auto_assign": boolean(
                "Allow automatic assignment of conversations (default: true)"
            ),
        },
        ["name"],
        handler=_v1("POST", "/teams", body=("name", "description", "allow_auto_assign")),
    ),
    _tool(
        "update_team",
        "Update an existing team. Only provided fields will be updated.",
        {
            "team_id": number("The team ID to update"),
            "name": string("New team name"),
            "description": string("New description"),
            "allow_auto_assign": boolean("Allow auto-assign"),
        },
        ["team_id"],
        handler=_v1(
            "PATCH", "/teams/{team_id}", body=("name", "description", "allow_auto_assign")
        ),
    ),
    _tool(
        "delete_team",
        "Delete a team from the Chatwoot account.",
        {"team_id": number("The team ID to delete")},
        ["team_id"],
        handler=_v1("DELETE", "/teams/{team_id}", done="Team deleted successfully."),
    ),
    # Inboxes (additional)
    _tool(
        "get_inbox",
        "Get detailed information about a specific inbox including channel configuration.",
        {"inbox_id": number("The inbox ID")},
        ["inbox_id"],
        handler=_v1("GET", "/inboxes/{inbox_id}"),
    ),
    # Labels (additional)
    _tool(
        "update_label",
        "Update an existing label. Only provided fields will be updated.",
        {
            "label_id": number("The label ID to update"),
            "title": string("New label title"),
            "description": string("New description"),
            "color": string("New hex color code (e.g., #FF0000)"),
            "show_on_sidebar": boolean("Show on sidebar"),
        },
        ["label_id"],
        handler=_v1(
            "PATCH",
            "/labels/{label_id}",
            body=("title", "description", "color", "show_on_sidebar"),
        ),
    ),
    _tool(
        "delete_label",
        "Delete a label from the Chatwoot account.",
        {"label_id": number("The label ID to delete")},
        ["label_id"],
        handler=_v1("DELETE", "/labels/{label_id}", done="Label deleted successfully."),
    ),
    # Canned responses (additional)
    _tool(
        "update_canned_response",
        "Update an existing canned response template.",
        {
            "canned_response_id": number("The canned response ID"),
            "short_code": string("New short code"),
            "content": string("New response content"),
        },
        ["canned_response_id"],
        handler=_v1(
            "PATCH",
            "/canned_responses/{canned_response_id}",
            body=("short_code", "content"),
        ),
    ),
    _tool(
        "delete_canned_response",
        "Delete a canned response template.",
        {"canned_response_id": number("The canned response ID to delete")},
        ["canned_response_id"],
        handler=_v1(
            "DELETE",
            "/canned_responses/{canned_response_id}",
            done="Canned response deleted successfully.",
        ),
    ),
    # Webhooks
    _tool(
        "list_webhooks",
        "List all registered webhooks in the Chatwoot account.",
        {},
        handler=_v1("GET", "/webhooks"),
    ),
    _tool(
        "create_webhook",
        "Register a new webhook endpoint to receive event notifications from Chatwoot.",
        {
            "url": string("The webhook endpoint URL"),
            "subscriptions": array(
                'Events to subscribe to (e.g., ["conversation_created", "message_created", '
                '"conversation_status_changed"])'
            ),
        },
        ["url", "subscriptions"],
        handler=_v1("POST", "/webhooks", body=("url", "subscriptions")),
    ),
    _tool(
        "update_webhook",
        "Update an existing webhook URL or subscriptions.",
        {
            "webhook_id": number("The webhook ID to update"),
            "url": string("New webhook URL"),
            "subscriptions": array("Updated event subscriptions"),
        },
        ["webhook_id"],
        handler=_v1("PATCH", "/webhooks/{webhook_id}", body=("url", "subscriptions")),
    ),
    _tool(
        "delete_webhook",
        "Remove a webhook subscription.",
        {"webhook_id": number("The webhook ID to delete")},
        ["webhook_id"],
        handler=_v1("DELETE", "/webhooks/{webhook_id}", done="Webhook deleted successfully."),
    ),
    # Reports (additional)
    _tool(
        "get_report_summary",
        "Get a summary report with aggregated metrics for a time period (via API v2). "
        "Includes conversations_count, incoming/outgoing messages, avg response/resolution "
        "times.",
        {
            "since": string("Start timestamp (Unix timestamp or ISO 8601)"),
            "until": string("End timestamp (Unix timestamp or ISO 8601)"),
            "type": string("Report scope", _REPORT_TYPES),
            "id": string("Entity ID when type is agent/inbox/label/team"),
            "group_by": string("Group results by period", ["day", "week", "month", "year"]),
            "business_hours": boolean("Calculate metrics using business hours only"),
        },
        handler=_v2(
            "GET",
            "/reports/summary",
            query=("since", "until", "type", "id", "group_by", "business_hours"),
        ),
    ),
    # Custom attributes
    _tool(
        "list_custom_attributes",
        "List all custom attribute definitions. Can filter by model type (contact or "
        "conversation).",
        {"model": string("Filter by model type", _ATTRIBUTE_MODELS)},
        handler=_v1(
            "GET",
            "/custom_attribute_definitions",
            query=("model",),
            rename={"model": "attribute_model"},
        ),
    ),
    _tool(
        "create_custom_attribute",
        "Create a new custom attribute definition for contacts or conversations.",
        {
            "attribute_display_name": string("Display name for the attribute"),
            "attribute_display_type": string(
                "UI display type",
                ["text", "number", "currency", "percent", "link", "date", "list", "checkbox"],
            ),
            "attribute_description": string("Description of the attribute"),
            "attribute_key": string("Unique key identifier (snake_case)"),
            "attribute_model": string("Model to apply attribute to", _ATTRIBUTE_MODELS),
            "attribute_values": array("Possible values (for list type)"),
            "default_value": string("Default value"),
        },
        ["attribute_display_name", "attribute_display_type", "attribute_key", "attribute_model"],
        handler=_v1("POST", "/custom_attribute_definitions", body=REMAINING),
    ),
    _tool(
        "update_custom_attribute",
        "Update an existing custom attribute definition.",
        {
            "attribute_id": number("The custom attribute ID"),
            "attribute_display_name": string("New display name"),
            "attribute_description": string("New description"),
            "attribute_values": array("Updated possible values (for list type)"),
            "default_value": string("New default value"),
        },
        ["attribute_id"],
        handler=_v1("PATCH", "/custom_attribute_definitions/{attribute_id}", body=REMAINING),
    ),
    _tool(
        "delete_custom_attribute",
        "Delete a custom attribute definition.",
        {"attribute_id": number("The custom attribute ID to delete")},
        ["attribute_id"],
        handler=_v1(
            "DELETE",
            "/custom_attribute_definitions/{attribute_id}",
            done="Custom attribute deleted successfully.",
        ),
    ),
    # Automation rules
    _tool(
        "list_automation_rules",
        "List all automation rules in the Chatwoot account.",
        {},
        handler=_v1("GET", "/automation_rules"),
    ),
    _tool(
        "get_automation_rule",
        "Get detailed information about a specific automation rule.",
        {"rule_id": number("The automation rule ID")},
        ["rule_id"],
        handler=_v1("GET", "/automation_rules/{rule_id}"),
    ),
    _tool(
        "create_automation_rule",
        "Create a new automation rule with event trigger, conditions, and actions.",
        {
            "name": string("Rule name"),
            "description": string("Rule description"),
            "event_name": string("Event that triggers the rule", _RULE_EVENTS),
            "conditions": array(
                "Array of condition objects (e.g., "
                '[{"attribute_key":"status","filter_operator":"equal_to","values":["open"]}])',
                items="object",
            ),
            "actions": array(
                "Array of action objects (e.g., "
                '[{"action_name":"assign_agent","action_params":[1]}])',
                items="object",
            ),
        },
        ["name", "event_name", "conditions", "actions"],
        handler=_v1("POST", "/automation_rules", body=REMAINING),
    ),
    _tool(
        "update_automation_rule",
        "Update an existing automation rule.",
        {
            "rule_id": number("The automation rule ID"),
            "name": string("New rule name"),
            "description": string("New description"),
            "event_name": string("New event trigger", _RULE_EVENTS),
            "conditions": array("Updated conditions", items="object"),
            "actions": array("Updated actions", items="object"),
        },
        ["rule_id"],
        handler=_v1("PATCH", "/automation_rules/{rule_id}", body=REMAINING),
    ),
    _tool(
        "delete_automation_rule",
        "Delete an automation rule.",
        {"rule_id": number("The automation rule ID to delete")},
        ["rule_id"],
        handler=_v1(
            "DELETE",
            "/automation_rules/{rule_id}",
            done="Automation rule deleted successfully.",
        ),
    ),
    # Custom filters
    _tool(
        "list_custom_filters",
        "List all saved custom filters. Can filter by type (conversation, contact, or report).",
        {"filter_type": string("Filter type", _FILTER_TYPES)},
        handler=_v1("GET", "/custom_filters", query=("filter_type",)),
    ),
    _tool(
        "get_custom_filter",
        "Get a specific custom filter by its ID.",
        {"filter_id": number("The custom filter ID")},
        ["filter_id"],
        handler=_v1("GET", "/custom_filters/{filter_id}"),
    ),
    _tool(
        "create_custom_filter",
        "Create a new custom filter for conversations, contacts, or reports.",
        {
            "name": string("Filter name"),
            "filter_type": string("Filter type", _FILTER_TYPES),
            "query": anything(
                "Filter query object with conditions (e.g., "
                '{"attribute_key":"status","filter_operator":"equal_to","values":["open"]})'
            ),
        },
        ["name", "filter_type", "query"],
        handler=_v1("POST", "/custom_filters", body=("name", "filter_type", "query")),
    ),
    _tool(
        "update_custom_filter",
        "Update an existing custom filter.",
        {
            "filter_id": number("The custom filter ID"),
            "name": string("New filter name"),
            "query": obj("Updated filter query"),
        },
        ["filter_id"],
        handler=_v1("PATCH", "/custom_filters/{filter_id}", body=("name", "query")),
    ),
    _tool(
        "delete_custom_filter",
        "Delete a custom filter.",
        {"filter_id": number("The custom filter ID to delete")},
        ["filter_id"],
        handler=_v1(
            "DELETE", "/custom_filters/{filter_id}", done="Custom filter deleted successfully."
        ),
    ),
    _tool(
        "filter_conversations",
        "Filter conversations using advanced query conditions. Each filter has "
        "attribute_key, filter_operator, values, and optional query_operator (AND/OR).",
        {
            "filters": array(
                "Array of filter objects (e.g., "
                '[{"attribute_key":"status","filter_operator":"equal_to","values":["open"],'
                '"query_operator":"AND"}])',
                items="object",
            ),
            "page": number("Page number (default: 1)"),
        },
        ["filters"],
        handler=_v1(
            "POST",
            "/conversations/filter",
            body=("filters", "page"),
            defaults={"page": 1},
            rename={"filters": "payload"},
        ),
    ),
    # Contact merge
    _tool(
        "merge_contacts",
        "Merge two contacts into one. The base contact remains and receives all data "
        "(conversations, labels, custom attributes) from the mergee contact. The mergee "
        "contact is permanently deleted.",
        {
            "base_contact_id": number("The contact ID that will remain after the merge"),
            "mergee_contact_id": number("The contact ID that will be merged and deleted"),
        },
        ["base_contact_id", "mergee_contact_id"],
        handler=_v1(
            "POST", "/actions/contact_merge", body=("base_contact_id", "mergee_contact_id")
        ),
    ),
    # Inbox members
    _tool(
        "list_inbox_agents",
        "List all agents assigned to a specific inbox.",
        {"inbox_id": number("The inbox ID")},
        ["inbox_id"],
        handler=_v1("GET", "/inbox_members/{inbox_id}"),
    ),
    _tool(
        "add_inbox_agents",
        "Add one or more agents to an inbox by their user IDs.",
        {
            "inbox_id": number("The inbox ID"),
            "user_ids": array("Array of agent user IDs to add", items="number"),
        },
        ["inbox_id", "user_ids"],
        handler=_v1("POST", "/inbox_members", body=("inbox_id", "user_ids")),
    ),
    _tool(
        "update_inbox_agents",
        "Replace the agent list for an inbox. All agents except those in user_ids will "
        "be removed.",
        {
            "inbox_id": number("The inbox ID"),
            "user_ids": array(
                "Array of agent user IDs that should be in the inbox", items="number"
            ),
        },
        ["inbox_id", "user_ids"],
        handler=_v1("PATCH", "/inbox_members", body=("inbox_id", "user_ids")),
    ),
    _tool(
        "remove_inbox_agents",
        "Remove one or more agents from an inbox.",
        {
            "inbox_id": number("The inbox ID"),
            "user_ids": array("Array of agent user IDs to remove", items="number"),
        },
        ["inbox_id", "user_ids"],
        handler=_v1("DELETE", "/inbox_members", body=("inbox_id", "user_ids")),
    ),
    # Team members
    _tool(
        "add_team_members",
        "Add one or more agents to a team by their user IDs.",
        {
            "team_id": number("The team ID"),
            "user_ids": array("Array of agent user IDs to add to the team", items="number"),
        },
        ["team_id", "user_ids"],
        handler=_v1("POST", "/teams/{team_id}/team_members", body=("user_ids",)),
    ),
    _tool(
        "remove_team_members",
        "Remove one or more agents from a team.",
        {
            "team_id": number("The team ID"),
            "user_ids": array(
                "Array of agent user IDs to remove from the team", items="number"
            ),
        },
        ["team_id", "user_ids"],
        handler=_v1("DELETE", "/teams/{team_id}/team_members", body=("user_ids",)),
    ),
    # Contact labels
    _tool(
        "get_contact_labels",
        "Get all labels currently applied to a specific contact.",
        {"contact_id": number("The contact ID")},
        ["contact_id"],
        handler=_v1("GET", "/contacts/{contact_id}/labels"),
    ),
    _tool(
        "add_labels_to_contact",
        "Set labels on a contact. Provide the full list of labels that should be applied "
        "(replaces existing labels).",
        {
            "contact_id": number("The contact ID"),
            "labels": array("Label names to apply to the contact"),
        },
        ["contact_id", "labels"],
        handler=_v1("POST", "/contacts/{contact_id}/labels", body=("labels",)),
    ),
    # Conversation custom attributes
    _tool(
        "set_conversation_custom_attributes",
        "Set custom attributes on a conversation. Useful for tagging conversations with "
        "metadata like order IDs, categories, etc.",
        {
            "conversation_id": number("The conversation ID"),
            "custom_attributes": anything(
                'Custom attributes as key-value pairs (e.g., {"order_id": "12345", '
                '"priority_tier": "gold"})'
            ),
        },
        ["conversation_id", "custom_attributes"],
        handler=_v1(
            "POST",
            "/conversations/{conversation_id}/custom_attributes",
            body=("custom_attributes",),
        ),
    ),
    _tool(
        "get_custom_attribute",
        "Get details of a specific custom attribute definition by its ID.",
        {"attribute_id": number("The custom attribute definition ID")},
        ["attribute_id"],
        handler=_v1("GET", "/custom_attribute_definitions/{attribute_id}"),
    ),
    # Integrations and inbox bots
    _tool(
        "list_integrations",
        "List all available integrations (apps) in the Chatwoot account.",
        {},
        handler=_v1("GET", "/integrations/apps"),
    ),
    _tool(
        "get_inbox_agent_bot",
        "Get the agent bot associated with a specific inbox, if any.",
        {"inbox_id": number("The inbox ID")},
        ["inbox_id"],
        handler=_v1("GET", "/inboxes/{inbox_id}/agent_bot"),
    ),
    _tool(
        "get_contactable_inboxes",
        "Get the list of inboxes through which a contact can be reached. Useful for "
        "determining available channels for a contact.",
        {"contact_id": number("The contact ID")},
        ["contact_id"],
        handler=_v1("GET", "/contacts/{contact_id}/contactable_inboxes"),
    ),
    _tool(
        "update_team_members",
        "Replace the agent list for a team. Sets exactly the provided user IDs as team "
        "members.",
        {
            "team_id": number("The team ID"),
            "user_ids": array("Array of agent user IDs that should be in the team", items="number"),
        },
        ["team_id", "user_ids"],
        handler=_v1("PATCH", "/teams/{team_id}/team_members", body=("user_ids",)),
    ),
    # Reports v2 (additional)
    _tool(
        "get_conversation_statistics",
        "Get conversation statistics grouped by entity (via API v2). Returns metrics like "
        "conversations_count, avg_first_response_time, avg_resolution_time per entity.",
        {
            "entity_type": string(
                "Entity to group statistics by", ["agent", "team", "inbox", "channel"]
            ),
            "since": string("Start timestamp (Unix timestamp)"),
            "until": string("End timestamp (Unix timestamp)"),
            "business_hours": boolean("Calculate metrics using business hours only"),
        },
        ["entity_type"],
        handler=_v2(
            "GET",
            "/summary_reports/{entity_type}",
            query=("since", "until", "business_hours"),
        ),
    ),
    _tool(
        "get_conversation_metrics",
        "Get conversation metrics for the account or a specific agent (via API v2). "
        "Returns open, unattended, and unassigned conversation counts.",
        {
            "type": string("Metric scope", ["account", "agent"]),
            "user_id": string('Agent user ID (required when type is "agent")'),
        },
        ["type"],
        handler=_v2("GET", "/reports/conversations", query=("type", "user_id")),
    ),
    _tool(
        "get_first_response_time_report",
        "Get first response time distribution grouped by channel (via API v2). Shows how "
        "quickly agents respond across different channels.",
        {
            "since": string("Start timestamp (Unix timestamp)"),
            "until": string("End timestamp (Unix timestamp)"),
        },
        handler=_v2(
            "GET", "/reports/first_response_time_distribution", query=("since", "until")
        ),
    ),
    _tool(
        "get_inbox_label_matrix_report",
        "Get a matrix report of conversations grouped by inbox and label (via API v2). "
        "Useful for understanding label distribution across inboxes.",
        {
            "since": string("Start timestamp (Unix timestamp)"),
            "until": string("End timestamp (Unix timestamp)"),
            "inbox_ids": array("Filter by specific inbox IDs", items="number"),
            "label_ids": array("Filter by specific label IDs", items="number"),
        },
        handler=_v2(
            "GET",
            "/reports/inbox_label_matrix",
            query=("since", "until", "inbox_ids", "label_ids"),
        ),
    ),
    _tool(
        "get_outgoing_messages_report",
        "Get outgoing messages count grouped by entity (via API v2). Shows message volume "
        "per agent, team, inbox, or label.",
        {
            "group_by": string("Entity to group messages by", ["agent", "team", "inbox", "label"]),
            "since": string("Start timestamp (Unix timestamp)"),
            "until": string("End timestamp (Unix timestamp)"),
        },
        ["group_by"],
        handler=_v2(
            "GET", "/reports/outgoing_messages_count", query=("group_by", "since", "until")
        ),
    ),
    # Profile
    _tool(
        "get_profile",
        "Get the profile information of the authenticated user/agent.",
        {},
        handler=_v1("GET", "/profile"),
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
