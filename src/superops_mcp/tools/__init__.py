"""MCP tool modules. Each registers its tools on the shared app when imported."""
