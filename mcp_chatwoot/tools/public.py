"""Public bucket: the unauthenticated client (widget) API.

Every call is scoped by an inbox identifier, which is the only credential.
Nothing here is destructive, so there is no safe-mode gate.
"""

from __future__ import annotations

from functools import partial
from typing import Any, FrozenSet, Iterable, Mapping, Tuple

from mcp_chatwoot.backend.public import PublicClient
from mcp_chatwoot.tools.base import (
    INBOX,
    BucketDispatcher,
    Handler,
    ToolSpec,
    anything,
    number,
    obj,
    rest,
    string,
    tool,
)

BUCKET = "public"

INBOX_IDENTIFIER = {
    "inbox_identifier": string("The unique identifier of the inbox (widget token)"),
}

UNKNOWN_MESSAGE = "Unknown public tool: {tool}"

DESTRUCTIVE_TOOLS: FrozenSet[str] = frozenset()

_pub = partial(rest, scope=INBOX)


def _tool(
    name: str,
    description: str,
    properties: Mapping[str, Any],
    required: Iterable[str] = (),
    *,
    handler: Handler,
) -> ToolSpec:
    return tool(
        name,
        description,
        {**INBOX_IDENTIFIER, **properties},
        ("inbox_identifier", *required),
        handler=handler,
    )


_CONTACT_ID = string("The contact identifier (source_id returned on contact creation)")

TOOLS: Tuple[ToolSpec, ...] = (
    _tool(
        "public_create_contact",
        "Create a contact through the public inbox API. Returns the contact with its "
        "source_id (contact_identifier) and pubsub_token.",
        {
            "identifier": string("External identifier for the contact"),
            "identifier_hash": string("HMAC hash of the identifier (for identity validation)"),
            "email": string("Contact email"),
            "name": string("Contact name"),
            "phone_number": string("Contact phone number"),
            "avatar_url": string("URL of the contact avatar"),
            "custom_attributes": anything("Custom attributes as key-value pairs"),
        },
        handler=_pub(
            "POST",
            "/contacts",
            body=(
                "identifier",
                "identifier_hash",
                "email",
                "name",
                "phone_number",
                "avatar_url",
                "custom_attributes",
            ),
        ),
    ),
    _tool(
        "public_get_contact",
        "Get a contact through the public inbox API.",
        {"contact_identifier": _CONTACT_ID},
        ["contact_identifier"],
        handler=_pub("GET", "/contacts/{contact_identifier}"),
    ),
    _tool(
        "public_update_contact",
        "Update a contact through the public inbox API.",
        {
            "contact_identifier": _CONTACT_ID,
            "name": string("Contact name"),
            "email": string("Contact email"),
            "phone_number": string("Contact phone number"),
            "avatar_url": string("URL of the contact avatar"),
            "custom_attributes": anything("Custom attributes as key-value pairs"),
        },
        ["contact_identifier"],
        handler=_pub(
            "PATCH",
            "/contacts/{contact_identifier}",
            body=("name", "email", "phone_number", "avatar_url", "custom_attributes"),
        ),
    ),
    _tool(
        "public_create_conversation",
        "Create a conversation for a contact through the public inbox API.",
        {
            "contact_identifier": _CONTACT_ID,
            "custom_attributes": obj("Custom attributes for the conversation"),
        },
        ["contact_identifier"],
        handler=_pub("POST", "/conversations", body=("contact_identifier", "custom_attributes")),
    ),
    _tool(
        "public_list_conversations",
        "List the conversations of a contact through the public inbox API.",
        {"contact_identifier": _CONTACT_ID},
        ["contact_identifier"],
        handler=_pub("GET", "/conversations", query=("contact_identifier",)),
    ),
    _tool(
        "public_get_conversation",
        "Get a single conversation through the public inbox API.",
        {"conversation_id": number("The conversation ID")},
        ["conversation_id"],
        handler=_pub("GET", "/conversations/{conversation_id}"),
    ),
    _tool(
        "public_resolve_conversation",
        "Resolve a conversation through the public inbox API.",
        {"conversation_id": number("The conversation ID")},
        ["conversation_id"],
        handler=_pub("POST", "/conversations/{conversation_id}/toggle_status"),
    ),
    _tool(
        "public_toggle_typing",
        "Toggle the contact typing indicator in a conversation.",
        {
            "conversation_id": number("The conversation ID"),
            "typing_status": string("Typing status", ["on", "off"]),
            "contact_identifier": _CONTACT_ID,
        },
        ["conversation_id", "typing_status", "contact_identifier"],
        handler=_pub(
            "POST",
            "/conversations/{conversation_id}/toggle_typing",
            body=("typing_status", "contact_identifier"),
        ),
    ),
    _tool(
        "public_update_last_seen",
        "Update the contact's last seen timestamp for a conversation.",
        {
            "conversation_id": number("The conversation ID"),
            "contact_identifier": _CONTACT_ID,
        },
        ["conversation_id", "contact_identifier"],
        handler=_pub(
            "POST",
            "/conversations/{conversation_id}/update_last_seen",
            body=("contact_identifier",),
        ),
    ),
    _tool(
        "public_create_message",
        "Send a message as the contact through the public inbox API.",
        {
            "conversation_id": number("The conversation ID"),
            "content": string("Message content"),
            "echo_id": string("Client-side temporary ID echoed back in the response"),
            "contact_identifier": _CONTACT_ID,
        },
        ["conversation_id", "contact_identifier", "content"],
        handler=_pub(
            "POST",
            "/conversations/{conversation_id}/messages",
            body=("content", "echo_id", "contact_identifier"),
        ),
    ),
    _tool(
        "public_list_messages",
        "List the messages of a conversation through the public inbox API.",
        {"conversation_id": number("The conversation ID")},
        ["conversation_id"],
        handler=_pub("GET", "/conversations/{conversation_id}/messages"),
    ),
    _tool(
        "public_update_message",
        "Update a message (e.g. submit form or input_select values) through the public "
        "inbox API.",
        {
            "conversation_id": number("The conversation ID"),
            "message_id": number("The message ID"),
            "submitted_values": anything("Values submitted for an interactive message"),
        },
        ["conversation_id", "message_id"],
        handler=_pub(
            "PATCH",
            "/conversations/{conversation_id}/messages/{message_id}",
            body=("submitted_values",),
        ),
    ),
)


def create_dispatcher(client: PublicClient, safe_mode: bool = False) -> BucketDispatcher:
    return BucketDispatcher(
        BUCKET,
        client,
        TOOLS,
        destructive=DESTRUCTIVE_TOOLS,
        safe_mode=safe_mode,
        blocked_template="",
        unknown_template=UNKNOWN_MESSAGE,
    )
