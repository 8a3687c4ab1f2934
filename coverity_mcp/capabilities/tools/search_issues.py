"""search_issues: defects in a project, filtered and paginated."""

from typing import Optional

from pydantic import BaseModel, Field

from coverity_mcp.capabilities._common import get_client, pretty
from coverity_mcp.modules.client import (
    DEFAULT_SEARCH_LIMIT,
    DEFAULT_SEARCH_OFFSET,
    MAX_SEARCH_LIMIT,
)
from coverity_mcp.modules.host import text_result
from coverity_mcp.modules.registry import CapabilityKind, CapabilityUnit


class SearchIssuesInput(BaseModel):
    project: Optional[str] = Field(
        None,
        description="Project to search (defaults to COVERITY_PROJECT when configured)",
    )
    checker: Optional[str] = Field(
        None, description="Filter by checker name (e.g. RESOURCE_LEAK, NULL_RETURNS)"
    )
    impact: Optional[str] = Field(None, description="Filter by impact: High, Medium, or Low")
    status: Optional[str] = Field(
        None, description="Filter by status: New, Triaged, Fixed, Dismissed"
    )
    cid: Optional[int] = Field(None, description="Filter by Coverity Issue ID (CID)")
    limit: int = Field(
        DEFAULT_SEARCH_LIMIT,
        ge=1,
        le=MAX_SEARCH_LIMIT,
        description=f"Maximum number of results (default {DEFAULT_SEARCH_LIMIT}, max {MAX_SEARCH_LIMIT})",
    )
    offset: int = Field(
        DEFAULT_SEARCH_OFFSET, ge=0, description="Pagination offset (default 0)"
    )


def register(server) -> None:
    async def handler(params: SearchIssuesInput):
        client = get_client(server)
        project = params.project or client.default_project
        if not project:
            raise ValueError("No project given and COVERITY_PROJECT is not set")

        issues = await client.search_issues(
            project,
            checker=params.checker,
            impact=params.impact,
            status=params.status,
            cid=params.cid,
            limit=params.limit,
            offset=params.offset,
        )

        if not issues:
            return text_result(f'No issues found in project "{project}" with the given filters.')

        summary = [
            {
                "cid": i.cid,
                "checker": i.checker_name,
                "type": i.display_type,
                "impact": i.display_impact,
                "status": i.display_status,
                "file": i.display_file,
                "function": i.display_function,
            }
            for i in issues
        ]
        return text_result(
            f'Found {len(issues)} issue(s) in project "{project}":\n\n{pretty(summary)}'
        )

    server.register_tool(
        "search_issues",
        description=(
            "Search for static analysis defects in a Coverity project. Returns CID, "
            "checker, file, function, impact, and status for each issue."
        ),
        input_model=SearchIssuesInput,
        handler=handler,
    )


capability = CapabilityUnit(
    kind=CapabilityKind.TOOL,
    name="search-issues",
    description="Search for defects in a Coverity project",
    register=register,
)
