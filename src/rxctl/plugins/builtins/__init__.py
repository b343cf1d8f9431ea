"""Built-in plugins registered by the Store at startup."""
