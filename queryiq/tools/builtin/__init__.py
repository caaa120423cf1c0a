"""Built-in tools, registered on import."""
