"""Configuration loading and validation.

Configuration comes from process environment variables, optionally
layered over a YAML file.  The file may use ``${ENV_VAR}`` placeholders;
environment variables always win over values from the file.

The public API is :func:`load_gateway_config`, which returns a validated
:class:`~mcp_chatwoot.config.schema.GatewayConfig`.
"""

import logging
import os
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import yaml
from pydantic import ValidationError

from mcp_chatwoot.config.schema import GatewayConfig
from mcp_chatwoot.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV_VAR = "MCP_CHATWOOT_CONFIG"

# Recognised config file extensions.
_YAML_EXTS = frozenset({".yaml", ".yml"})

_ENV_VAR_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


def _is_true(raw: str) -> bool:
    return raw.strip().lower() == "true"


def _is_not_false(raw: str) -> bool:
    return raw.strip().lower() != "false"


def _as_is(raw: str) -> str:
    return raw


# env var → (section, field, converter)
_ENV_MAP: Tuple[Tuple[str, str, str, Callable[[str], Any]], ...] = (
    ("CHATWOOT_BASE_URL", "chatwoot", "base_url", _as_is),
    ("CHATWOOT_API_TOKEN", "chatwoot", "api_token", _as_is),
    ("CHATWOOT_ACCOUNT_ID", "chatwoot", "account_id", _as_is),
    ("CHATWOOT_PLATFORM_API_TOKEN", "platform", "api_token", _as_is),
    ("MCP_ENABLE_PUBLIC_API", "buckets", "public_api", _is_true),
    ("MCP_ENABLE_PLATFORM_API", "buckets", "platform_api", _is_true),
    ("MCP_ENABLE_ENTERPRISE", "buckets", "enterprise", _is_true),
    ("MCP_ENABLE_HELP_CENTER", "buckets", "help_center", _is_true),
    ("MCP_SAFE_MODE", "safety", "safe_mode", _is_true),
    ("MCP_PLATFORM_SAFE_MODE", "safety", "platform_safe_mode", _is_not_false),
    ("MCP_MODE", "server", "mode", _as_is),
    ("HOST", "server", "host", _as_is),
    ("PORT", "server", "port", _as_is),
    ("AUTH_TOKEN", "server", "auth_token", _as_is),
    ("LOG_LEVEL", "server", "log_level", _as_is),
    ("MCP_SESSION_TIMEOUT", "server", "session_timeout", _as_is),
    ("MCP_SESSION_SWEEP_INTERVAL", "server", "sweep_interval", _as_is),
    ("MCP_JSON_RESPONSE", "server", "json_response", _is_true),
)


def expand_env_vars(value: Any, environ: Optional[Mapping[str, str]] = None) -> Any:
    """Recursively expand ``${VAR}`` references in string values.

    - If the env var is not set, the placeholder is left unchanged.
    - Non-string leaves are returned as-is.
    - Dicts and lists are walked recursively.
    """
    env = os.environ if environ is None else environ
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: env.get(m.group(1), m.group(0)), value)
    if isinstance(value, dict):
        return {k: expand_env_vars(v, env) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item, env) for item in value]
    return value


def _read_config_file(cfg_fpath: str) -> Dict[str, Any]:
    """Read and parse a YAML config file from *cfg_fpath*.

    Raises :class:`ConfigurationError` on I/O or parse errors.
    """
    ext = os.path.splitext(cfg_fpath)[1].lower()
    if ext not in _YAML_EXTS:
        raise ConfigurationError(
            f"Unsupported config file extension '{ext}'. "
            "Only YAML files (.yaml, .yml) are supported."
        )

    try:
        with open(cfg_fpath, "r", encoding="utf-8") as f:
            raw_data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Error reading configuration file: {cfg_fpath}\n  {exc}") from exc

    if raw_data is None:
        return {}
    if not isinstance(raw_data, dict):
        raise ConfigurationError(
            "Top-level configuration content must be a YAML mapping (dictionary)."
        )
    return raw_data


def _overlay_environment(raw: Dict[str, Any], environ: Mapping[str, str]) -> Dict[str, Any]:
    """Apply recognised environment variables on top of *raw*."""
    merged: Dict[str, Any] = {k: (dict(v) if isinstance(v, dict) else v) for k, v in raw.items()}
    for env_name, section, key, convert in _ENV_MAP:
        value = environ.get(env_name)
        if value is None:
            continue
        target = merged.get(section)
        if not isinstance(target, dict):
            target = {}
            merged[section] = target
        target[key] = convert(value)
    return merged


def _format_validation_errors(exc: ValidationError) -> str:
    """Format Pydantic validation errors into a readable multi-line string."""
    lines: List[str] = []
    for err in exc.errors():
        loc = " → ".join(str(part) for part in err["loc"])
        lines.append(f"  • {loc}: {err['msg']}")
    return "\n".join(lines)


def load_gateway_config(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> GatewayConfig:
    """Build and validate the gateway configuration.

    Parameters
    ----------
    config_path:
        Optional YAML file.  Falls back to the ``MCP_CHATWOOT_CONFIG``
        environment variable; with neither, only the environment is used.
    environ:
        Environment mapping (defaults to :data:`os.environ`).
    """
    env = os.environ if environ is None else environ
    if config_path is None:
        config_path = env.get(CONFIG_PATH_ENV_VAR) or None

    raw: Dict[str, Any] = {}
    if config_path:
        logger.info("Loading configuration file: %s", config_path)
        raw = expand_env_vars(_read_config_file(config_path), env)

    merged = _overlay_environment(raw, env)
    if "chatwoot" not in merged:
        raise ConfigurationError(
            "Missing Chatwoot settings. Set CHATWOOT_BASE_URL and CHATWOOT_API_TOKEN."
        )

    try:
        config = GatewayConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid configuration:\n{_format_validation_errors(exc)}"
        ) from exc

    logger.debug(
        "Configuration loaded: base_url=%s account_id=%s mode=%s",
        config.chatwoot.base_url,
        config.chatwoot.account_id,
        config.server.mode,
    )
    return config
