"""HTTP controllers for the MCP gateway."""
