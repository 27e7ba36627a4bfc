"""Domain services used by HTTP routes, socket handlers and the CLI."""
