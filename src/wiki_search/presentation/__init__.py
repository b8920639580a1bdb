"""
Presentation layer: MCP server exposing encyclopedia search to agents.
"""
