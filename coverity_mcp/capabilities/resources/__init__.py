"""Context resources."""
