"""Container check execution."""
