"""Allow ``python -m mcp_chatwoot``."""

from mcp_chatwoot.cli import main

if __name__ == "__main__":
    main()
