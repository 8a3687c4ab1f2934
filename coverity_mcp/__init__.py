"""
Coverity MCP - Coverity Connect query surface for MCP hosts

Exposes Coverity Connect defect data (projects, streams, issues, issue
details) as Model Context Protocol tools, resources and prompts.

Architecture:
- Each module is self-contained with clear interfaces
- Capability units are discovered from the filesystem at startup
- A broken capability never prevents the others from loading
- All communication through defined interfaces

Modules:
- client: Coverity Connect v2 REST client and issue-detail aggregation
- registry: Capability discovery, validation and registration
- host: MCP JSON-RPC server and its stdio/HTTP transports
- capabilities: Tool, resource and prompt units
"""

__version__ = "1.0.0"
