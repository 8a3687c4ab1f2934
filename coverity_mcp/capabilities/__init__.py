"""
Capability units.

Every module under tools/, resources/ and prompts/ exports a ``capability``
descriptor and is picked up by the registry at startup. Adding a capability
means adding a file; nothing else needs to change.
"""
