"""Helpers shared by capability units (not itself a unit)."""

import json
from typing import Any

from coverity_mcp.modules.client import CoverityClient


def get_client(host: Any) -> CoverityClient:
    """The Coverity client attached to the host at boot."""
    client = getattr(host.state, "client", None)
    if client is None:
        raise RuntimeError("Coverity client is not configured on this server")
    return client


def pretty(data: Any) -> str:
    return json.dumps(data, indent=2)
