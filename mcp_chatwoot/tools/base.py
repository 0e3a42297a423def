"""Building blocks shared by every tool bucket.

A bucket is a static catalog of :class:`ToolSpec` entries (MCP tool
descriptor plus the coroutine that performs the REST call) and a
:class:`BucketDispatcher` that gates, runs and shapes those calls.

Most handlers are declared with :func:`rest`, which maps tool arguments
onto path placeholders, query parameters and a JSON body.  Handlers with
extra shaping are written as plain coroutines.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from string import Formatter
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)
from urllib.parse import quote

from mcp import types as mcp_types

from mcp_chatwoot.backend.http import ApiScope
from mcp_chatwoot.errors import AccountRequiredError, BackendApiError, ToolArgumentError

logger = logging.getLogger(__name__)

ToolArgs = Dict[str, Any]
Handler = Callable[[Any, ToolArgs], Awaitable[Any]]


class TextReply(str):
    """Handler return value rendered verbatim instead of as JSON."""


# ── Results ──────────────────────────────────────────────────────────────


def text_result(text: str, is_error: bool = False) -> mcp_types.CallToolResult:
    return mcp_types.CallToolResult(
        content=[mcp_types.TextContent(type="text", text=text)],
        isError=is_error,
    )


def json_result(data: Any) -> mcp_types.CallToolResult:
    return text_result(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def error_result(exc: Exception) -> mcp_types.CallToolResult:
    """Render an expected failure as an ``isError`` text result."""
    if isinstance(exc, BackendApiError):
        return text_result(exc.describe(), is_error=True)
    return text_result(f"Error: {exc}", is_error=True)


# ── Schema helpers ───────────────────────────────────────────────────────


def _prop(type_: Optional[str], description: str, enum: Optional[Sequence[Any]] = None) -> Dict[str, Any]:
    prop: Dict[str, Any] = {}
    if type_ is not None:
        prop["type"] = type_
    prop["description"] = description
    if enum is not None:
        prop["enum"] = list(enum)
    return prop


def string(description: str, enum: Optional[Sequence[str]] = None) -> Dict[str, Any]:
    return _prop("string", description, enum)


def number(description: str, enum: Optional[Sequence[int]] = None) -> Dict[str, Any]:
    return _prop("number", description, enum)


def boolean(description: str) -> Dict[str, Any]:
    return _prop("boolean", description)


def obj(description: str) -> Dict[str, Any]:
    return _prop("object", description)


def anything(description: str) -> Dict[str, Any]:
    """Untyped property (free-form JSON value)."""
    return _prop(None, description)


def array(description: str, items: str = "string") -> Dict[str, Any]:
    prop = _prop("array", description)
    prop["items"] = {"type": items}
    return prop


def input_schema(properties: Mapping[str, Any], required: Iterable[str] = ()) -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": "object", "properties": dict(properties)}
    required = list(required)
    if required:
        schema["required"] = required
    return schema


# ── Tool specs ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ToolSpec:
    """A tool descriptor together with the handler that implements it."""

    tool: mcp_types.Tool
    handler: Handler

    @property
    def name(self) -> str:
        return self.tool.name


def tool(
    name: str,
    description: str,
    properties: Mapping[str, Any],
    required: Iterable[str] = (),
    *,
    handler: Handler,
) -> ToolSpec:
    return ToolSpec(
        tool=mcp_types.Tool(
            name=name,
            description=description,
            inputSchema=input_schema(properties, required),
        ),
        handler=handler,
    )


# ── Argument helpers ─────────────────────────────────────────────────────


def require(args: Mapping[str, Any], name: str) -> Any:
    value = args.get(name)
    if value is None or value == "":
        raise ToolArgumentError(name)
    return value


def compact(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Drop ``None`` values (absent optional arguments)."""
    return {k: v for k, v in data.items() if v is not None}


def path_segment(value: Any) -> str:
    # JSON numbers may arrive as floats (``5.0``)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return quote(str(value), safe="")


@dataclass(frozen=True)
class ScopeRule:
    """How a bucket picks its :class:`ApiScope` from the call arguments.

    ``consumes`` lists argument names that select the scope and are never
    forwarded in query strings or bodies.
    """

    resolve: Callable[[Any, ToolArgs], ApiScope]
    consumes: FrozenSet[str] = frozenset()


ACCOUNT = ScopeRule(lambda c, a: c.for_account(a.get("account_id")), frozenset({"account_id"}))
REPORTS = ScopeRule(lambda c, a: c.for_reports(a.get("account_id")), frozenset({"account_id"}))
INBOX = ScopeRule(
    lambda c, a: c.for_inbox(path_segment(require(a, "inbox_identifier"))),
    frozenset({"inbox_identifier"}),
)
PLATFORM = ScopeRule(lambda c, a: c.root)

REMAINING = "*"
"""``body=REMAINING`` forwards every argument not used by the path or scope."""


def rest(
    method: str,
    path: str,
    *,
    scope: ScopeRule,
    query: Union[Sequence[str], str] = (),
    body: Union[Sequence[str], str] = (),
    defaults: Optional[Mapping[str, Any]] = None,
    rename: Optional[Mapping[str, str]] = None,
    done: Optional[str] = None,
) -> Handler:
    """Declare a handler that performs a single REST call.

    Parameters
    ----------
    method, path:
        HTTP method and path template; ``{name}`` placeholders are filled
        from (required) arguments of the same name.
    scope:
        The :class:`ScopeRule` that picks the caller.
    query, body:
        Argument names forwarded as query parameters / JSON body fields,
        or :data:`REMAINING`.  Absent arguments are omitted.
    defaults:
        Values used when an argument is absent.
    rename:
        ``argument name → wire name`` for query or body fields.
    done:
        Fixed confirmation text returned instead of the response body.
    """
    placeholders = tuple(
        field for _, field, _, _ in Formatter().parse(path) if field
    )
    reserved = frozenset(placeholders) | scope.consumes
    defaults = dict(defaults or {})
    rename = dict(rename or {})

    def _select(names: Union[Sequence[str], str], args: ToolArgs) -> Dict[str, Any]:
        if names == REMAINING:
            names = [k for k in args if k not in reserved]
        picked: Dict[str, Any] = {}
        for name in names:
            value = args.get(name, defaults.get(name))
            if value is not None:
                picked[rename.get(name, name)] = value
        return picked

    async def handler(client: Any, args: ToolArgs) -> Any:
        url = path.format(**{p: path_segment(require(args, p)) for p in placeholders})
        caller = scope.resolve(client, args)
        params = _select(query, args) if query else None
        payload = _select(body, args) if body else None
        result = await caller.request(method, url, params=params, json=payload)
        if done is not None:
            return TextReply(done)
        return result

    handler.__name__ = f"{method.lower()}_{path.strip('/').replace('/', '_') or 'root'}"
    return handler


# ── Dispatcher ───────────────────────────────────────────────────────────


class BucketDispatcher:
    """Gate, run and shape tool calls for one bucket.

    Parameters
    ----------
    bucket:
        Bucket name used in log lines.
    client:
        Backend client handed to every handler.
    specs:
        The bucket's catalog.
    destructive:
        Names blocked while *safe_mode* is on; must all be in *specs*.
    safe_mode:
        Whether the gate is active.
    blocked_template:
        Message for blocked calls, formatted with ``tool``.
    unknown_template:
        Message for names outside the catalog, formatted with ``tool``.
    """

    def __init__(
        self,
        bucket: str,
        client: Any,
        specs: Sequence[ToolSpec],
        *,
        destructive: FrozenSet[str],
        safe_mode: bool,
        blocked_template: str,
        unknown_template: str,
    ) -> None:
        self._bucket = bucket
        self._client = client
        self._handlers: Dict[str, Handler] = {s.name: s.handler for s in specs}
        unknown = destructive - self._handlers.keys()
        if unknown:
            raise ValueError(f"Destructive tools not in the {bucket} catalog: {sorted(unknown)}")
        self._destructive = destructive
        self._safe_mode = safe_mode
        self._blocked_template = blocked_template
        self._unknown_template = unknown_template

    @property
    def bucket(self) -> str:
        return self._bucket

    @property
    def safe_mode(self) -> bool:
        return self._safe_mode

    def is_blocked(self, tool_name: str) -> bool:
        return self._safe_mode and tool_name in self._destructive

    async def __call__(self, tool_name: str, arguments: Optional[ToolArgs] = None) -> mcp_types.CallToolResult:
        args = dict(arguments or {})
        if self.is_blocked(tool_name):
            logger.warning("Safe mode blocked: %s (bucket=%s)", tool_name, self._bucket)
            return text_result(self._blocked_template.format(tool=tool_name), is_error=True)

        handler = self._handlers.get(tool_name)
        if handler is None:
            return text_result(self._unknown_template.format(tool=tool_name), is_error=True)

        logger.debug("Tool call: %s (bucket=%s) args=%s", tool_name, self._bucket, sorted(args))
        try:
            result = await handler(self._client, args)
        except (BackendApiError, AccountRequiredError, ToolArgumentError) as exc:
            logger.error("Tool error: %s: %s", tool_name, exc)
            return error_result(exc)

        if isinstance(result, TextReply):
            return text_result(str(result))
        return json_result(result)


def names_of(specs: Iterable[ToolSpec]) -> List[str]:
    return [s.name for s in specs]


def catalog(specs: Iterable[ToolSpec]) -> Tuple[mcp_types.Tool, ...]:
    return tuple(s.tool for s in specs)
