"""
Coverity MCP Modules

- client: talks to Coverity Connect; knows nothing about MCP
- host: speaks MCP; knows nothing about Coverity
- registry: connects capability units to the host at startup

Capability units in coverity_mcp.capabilities are the only code that sees
both a client and a host.
"""
