"""Tests for configuration loading (environment, YAML file, validation)."""

from __future__ import annotations

import pytest

from mcp_chatwoot.config.loader import expand_env_vars, load_gateway_config
from mcp_chatwoot.errors import ConfigurationError

BASE_ENV = {
    "CHATWOOT_BASE_URL": "https://chat.example.com/",
    "CHATWOOT_API_TOKEN": "tok-abcdef",
}


class TestEnvironmentConfig:
    def test_minimal_environment(self) -> None:
        cfg = load_gateway_config(environ=BASE_ENV)
        assert cfg.chatwoot.base_url == "https://chat.example.com"
        assert cfg.chatwoot.account_id is None
        assert cfg.server.mode == "stdio"
        assert cfg.server.port == 3000
        assert cfg.server.auth_token is None

    def test_bucket_flags_default_off(self) -> None:
        cfg = load_gateway_config(environ=BASE_ENV)
        assert not cfg.buckets.public_api
        assert not cfg.buckets.platform_api
        assert not cfg.buckets.enterprise
        assert not cfg.buckets.help_center

    def test_flags_require_literal_true(self) -> None:
        env = {**BASE_ENV, "MCP_ENABLE_PUBLIC_API": "true", "MCP_ENABLE_ENTERPRISE": "1"}
        cfg = load_gateway_config(environ=env)
        assert cfg.buckets.public_api is True
        assert cfg.buckets.enterprise is False

    def test_safe_mode_polarity(self) -> None:
        cfg = load_gateway_config(environ=BASE_ENV)
        assert cfg.safety.safe_mode is False
        assert cfg.safety.platform_safe_mode is True

        env = {**BASE_ENV, "MCP_SAFE_MODE": "TRUE", "MCP_PLATFORM_SAFE_MODE": "false"}
        cfg = load_gateway_config(environ=env)
        assert cfg.safety.safe_mode is True
        assert cfg.safety.platform_safe_mode is False

    def test_platform_safe_mode_stays_on_for_other_values(self) -> None:
        env = {**BASE_ENV, "MCP_PLATFORM_SAFE_MODE": "no"}
        assert load_gateway_config(environ=env).safety.platform_safe_mode is True

    def test_account_and_server_settings(self) -> None:
        env = {
            **BASE_ENV,
            "CHATWOOT_ACCOUNT_ID": "7",
            "MCP_MODE": "http",
            "PORT": "8080",
            "AUTH_TOKEN": "s3cret-token",
        }
        cfg = load_gateway_config(environ=env)
        assert cfg.chatwoot.account_id == 7
        assert cfg.server.mode == "http"
        assert cfg.server.port == 8080
        assert cfg.server.auth_token == "s3cret-token"

    def test_blank_values_are_unset(self) -> None:
        env = {**BASE_ENV, "CHATWOOT_ACCOUNT_ID": "", "AUTH_TOKEN": "  "}
        cfg = load_gateway_config(environ=env)
        assert cfg.chatwoot.account_id is None
        assert cfg.server.auth_token is None

    def test_streamable_http_alias(self) -> None:
        cfg = load_gateway_config(environ={**BASE_ENV, "MCP_MODE": "streamable-http"})
        assert cfg.server.mode == "http"

    def test_missing_credentials(self) -> None:
        with pytest.raises(ConfigurationError, match="CHATWOOT_BASE_URL"):
            load_gateway_config(environ={})

    def test_missing_token(self) -> None:
        with pytest.raises(ConfigurationError, match="api_token"):
            load_gateway_config(environ={"CHATWOOT_BASE_URL": "https://x.test"})

    def test_invalid_account_id(self) -> None:
        with pytest.raises(ConfigurationError, match="account_id"):
            load_gateway_config(environ={**BASE_ENV, "CHATWOOT_ACCOUNT_ID": "abc"})

    def test_invalid_port(self) -> None:
        with pytest.raises(ConfigurationError, match="port"):
            load_gateway_config(environ={**BASE_ENV, "PORT": "70000"})


class TestFileConfig:
    def test_yaml_with_placeholders(self, tmp_path) -> None:
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text(
            "chatwoot:\n"
            "  base_url: https://file.example.com\n"
            "  api_token: ${CW_TOKEN}\n"
            "  account_id: 3\n"
            "buckets:\n"
            "  help_center: true\n"
        )
        cfg = load_gateway_config(str(cfg_file), environ={"CW_TOKEN": "from-env-var"})
        assert cfg.chatwoot.api_token == "from-env-var"
        assert cfg.chatwoot.account_id == 3
        assert cfg.buckets.help_center is True

    def test_environment_wins_over_file(self, tmp_path) -> None:
        cfg_file = tmp_path / "config.yml"
        cfg_file.write_text(
            "chatwoot:\n  base_url: https://file.example.com\n  api_token: file-token\n"
        )
        cfg = load_gateway_config(
            str(cfg_file), environ={"CHATWOOT_API_TOKEN": "env-token"}
        )
        assert cfg.chatwoot.api_token == "env-token"
        assert cfg.chatwoot.base_url == "https://file.example.com"

    def test_path_from_environment_variable(self, tmp_path) -> None:
        cfg_file = tmp_path / "gateway.yaml"
        cfg_file.write_text("chatwoot:\n  base_url: https://a.test\n  api_token: abcd\n")
        cfg = load_gateway_config(environ={"MCP_CHATWOOT_CONFIG": str(cfg_file)})
        assert cfg.chatwoot.base_url == "https://a.test"

    def test_unsupported_extension(self, tmp_path) -> None:
        cfg_file = tmp_path / "config.json"
        cfg_file.write_text("{}")
        with pytest.raises(ConfigurationError, match="Unsupported"):
            load_gateway_config(str(cfg_file), environ=BASE_ENV)

    def test_non_mapping_top_level(self, tmp_path) -> None:
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text("- just\n- a list\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_gateway_config(str(cfg_file), environ=BASE_ENV)

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(ConfigurationError, match="Error reading"):
            load_gateway_config(str(tmp_path / "absent.yaml"), environ=BASE_ENV)


class TestExpandEnvVars:
    def test_nested_structures(self) -> None:
        data = {"a": "${X}", "b": ["${X}-suffix", 5], "c": {"d": "${X}"}}
        out = expand_env_vars(data, {"X": "val"})
        assert out == {"a": "val", "b": ["val-suffix", 5], "c": {"d": "val"}}

    def test_unset_variable_left_unchanged(self) -> None:
        assert expand_env_vars("${NOT_SET}", {}) == "${NOT_SET}"
