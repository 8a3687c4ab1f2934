"""coverity://server-info: connection settings, without the auth key."""

from coverity_mcp.capabilities._common import pretty
from coverity_mcp.config import EnvConfigProvider
from coverity_mcp.modules.registry import CapabilityKind, CapabilityUnit

URI = "coverity://server-info"


def register(server) -> None:
    async def handler() -> str:
        provider = getattr(server.state, "config_provider", None) or EnvConfigProvider()
        return pretty(provider.get_connection_status().to_dict())

    server.register_resource(
        URI,
        name="server-info",
        description="Coverity server connection info",
        mime_type="application/json",
        handler=handler,
    )


capability = CapabilityUnit(
    kind=CapabilityKind.RESOURCE,
    name="server-info",
    description="Coverity server connection information",
    register=register,
)
