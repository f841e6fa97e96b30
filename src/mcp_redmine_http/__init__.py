"""MCP server exposing Redmine projects and issues, configured per request."""
