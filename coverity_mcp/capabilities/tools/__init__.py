"""Query tools."""
