"""Canned payloads for tests."""
