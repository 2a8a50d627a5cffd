"""Resume builder backend."""
