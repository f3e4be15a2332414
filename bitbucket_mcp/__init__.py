"""MCP server exposing Bitbucket pull requests, comments and pipelines."""

__version__ = "0.1.0"
