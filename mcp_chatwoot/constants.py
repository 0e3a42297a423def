"""Shared constants for the Chatwoot MCP gateway."""

SERVER_NAME = "mcp-chatwoot"
SERVER_VERSION = "0.6.0"

# Network defaults
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000

# HTTP front paths
HEALTH_PATH = "/health"
STREAMABLE_HTTP_PATH = "/mcp"
SESSION_ID_HEADER = "mcp-session-id"

# Session lifecycle
SESSION_TIMEOUT = 300.0  # idle seconds before a session is swept
SESSION_SWEEP_INTERVAL = 60.0  # seconds between sweeps

# Backend
BACKEND_TIMEOUT = 30.0  # seconds per outbound REST call

# Logging defaults
LOG_DIR = "logs"
DEFAULT_LOG_LEVEL = "INFO"
