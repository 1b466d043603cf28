"""MCP server exposing TipTrack summaries."""
