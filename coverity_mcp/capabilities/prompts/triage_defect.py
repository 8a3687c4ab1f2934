"""triage_defect: prompt template walking a model through one defect."""

from pydantic import BaseModel, ConfigDict, Field

from coverity_mcp.modules.registry import CapabilityKind, CapabilityUnit

TEMPLATE = """\
Review Coverity defect CID {cid} in stream "{stream}".

1. Call get_issue_details with cid={cid} and streamId="{stream}".
2. Follow the event trace step by step and explain how the code reaches the
   defect. The event tagged as the main event is where Coverity reports it.
3. Decide whether this is a real bug or a false positive, and say why.
4. If it is real, propose a minimal fix for the file and line involved.
5. Suggest a triage classification, severity and action for the issue.
"""


class TriageDefectInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cid: int = Field(..., description="The Coverity Issue ID (CID)")
    stream_id: str = Field(..., alias="streamId", description="Stream containing the issue")


def register(server) -> None:
    async def handler(params: TriageDefectInput):
        text = TEMPLATE.format(cid=params.cid, stream=params.stream_id)
        return [{"role": "user", "content": {"type": "text", "text": text}}]

    server.register_prompt(
        "triage_defect",
        description="Investigate a Coverity defect and propose a triage decision and fix",
        input_model=TriageDefectInput,
        handler=handler,
    )


capability = CapabilityUnit(
    kind=CapabilityKind.PROMPT,
    name="triage-defect",
    description="Prompt template for reviewing a single defect",
    register=register,
)
