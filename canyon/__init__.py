"""MCP server components over JSON-RPC and Humanitec platform tools for LLM clients."""

__version__ = "0.1.0"