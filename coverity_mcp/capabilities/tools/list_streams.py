"""list_streams: Coverity streams, globally or for one project."""

import logging
from typing import Optional

from pydantic import BaseModel, Field

from coverity_mcp.capabilities._common import get_client, pretty
from coverity_mcp.modules.host import text_result
from coverity_mcp.modules.registry import CapabilityKind, CapabilityUnit

logger = logging.getLogger("coverity_mcp.tools.list_streams")


class ListStreamsInput(BaseModel):
    project: Optional[str] = Field(
        None,
        description="Only list the streams of this project (all streams when omitted)",
    )


def register(server) -> None:
    async def handler(params: ListStreamsInput):
        logger.info(f"invoked (project={params.project!r})")
        streams = await get_client(server).list_streams(params.project)

        if not streams:
            logger.info("returned 0 streams")
            if params.project:
                return text_result(f'No streams found for project "{params.project}".')
            return text_result("No streams found.")

        summary = [
            {
                "name": s.name,
                "language": s.language or "unknown",
                "description": s.description or "",
                "project": s.primary_project_name or "",
            }
            for s in streams
        ]
        logger.info(f"returning {len(summary)} stream(s)")
        return text_result(pretty(summary))

    server.register_tool(
        "list_streams",
        description=(
            "List Coverity streams. Pass a project name to list only that "
            "project's streams."
        ),
        input_model=ListStreamsInput,
        handler=handler,
    )


capability = CapabilityUnit(
    kind=CapabilityKind.TOOL,
    name="list-streams",
    description="List Coverity streams, optionally for one project",
    register=register,
)
