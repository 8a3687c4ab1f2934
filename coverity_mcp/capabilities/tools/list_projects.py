"""list_projects: every Coverity project the authenticated user can access."""

from coverity_mcp.capabilities._common import get_client, pretty
from coverity_mcp.modules.host import text_result
from coverity_mcp.modules.registry import CapabilityKind, CapabilityUnit


def register(server) -> None:
    async def handler(_params):
        projects = await get_client(server).list_projects()

        if not projects:
            return text_result("No projects found.")

        summary = [
            {
                "name": p.name,
                "key": p.project_key,
                "description": p.description or "",
                "streams": [s.name for s in p.streams],
            }
            for p in projects
        ]
        return text_result(pretty(summary))

    server.register_tool(
        "list_projects",
        description="List all Coverity projects the authenticated user can access",
        handler=handler,
    )


capability = CapabilityUnit(
    kind=CapabilityKind.TOOL,
    name="list-projects",
    description="List all accessible Coverity projects",
    register=register,
)
