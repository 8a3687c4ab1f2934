"""get_issue_details: one defect with its event trace and triage state."""

from pydantic import BaseModel, ConfigDict, Field

from coverity_mcp.capabilities._common import get_client, pretty
from coverity_mcp.modules.client import IssueDetail
from coverity_mcp.modules.host import text_result
from coverity_mcp.modules.registry import CapabilityKind, CapabilityUnit


class GetIssueDetailsInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cid: int = Field(..., description="The Coverity Issue ID (CID)")
    stream_id: str = Field(
        ..., alias="streamId", description="The stream name or ID containing the issue"
    )


def format_detail(detail: IssueDetail) -> dict:
    """Output shape of get_issue_details."""
    triage = detail.triage
    return {
        "cid": detail.cid,
        "checker": detail.checker_name,
        "type": detail.display_type,
        "impact": detail.display_impact,
        "status": detail.display_status,
        "file": detail.display_file,
        "function": detail.display_function,
        "firstDetected": detail.first_detected,
        "lastDetected": detail.last_detected,
        "occurrenceCount": detail.occurrence_count,
        "triage": {
            "action": triage.action,
            "classification": triage.classification,
            "severity": triage.severity,
            "owner": triage.owner,
            "comment": triage.comment,
        },
        "events": [
            {
                "step": e.event_number,
                "tag": e.event_tag,
                "description": e.event_description,
                "file": e.file_pathname,
                "line": e.line_number,
            }
            for e in detail.events
        ],
    }


def register(server) -> None:
    async def handler(params: GetIssueDetailsInput):
        detail = await get_client(server).get_issue_details(params.cid, params.stream_id)

        if detail is None:
            return text_result(
                f'No issue found with CID {params.cid} in stream "{params.stream_id}".'
            )
        return text_result(pretty(format_detail(detail)))

    server.register_tool(
        "get_issue_details",
        description=(
            "Get full details for a Coverity defect by CID, including the event trace "
            "(code path that leads to the defect), triage information, and file/line "
            "details useful for resolving the issue."
        ),
        input_model=GetIssueDetailsInput,
        handler=handler,
    )


capability = CapabilityUnit(
    kind=CapabilityKind.TOOL,
    name="get-issue-details",
    description=(
        "Get detailed information about a specific Coverity defect including "
        "event path and triage data"
    ),
    register=register,
)
