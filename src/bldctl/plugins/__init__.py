"""Plugin system: pluggy hooks for the packaging pipeline."""
