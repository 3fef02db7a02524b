"""gitea-mcp: Gitea/Forgejo REST API exposed as MCP tools."""

__version__ = "0.1.0"
