"""MCP tools backed by the Humanitec API."""