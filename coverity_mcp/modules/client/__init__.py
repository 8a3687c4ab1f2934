"""
Client Module - Black Box Interface

Purpose: Typed access to the Coverity Connect v2 REST API
Interface: list_projects(), list_streams(), search_issues(), get_issue_details()
Hidden: HTTP transport, credentials, payload parsing, multi-source merge

get_issue_details degrades gracefully: secondary sources failing never
raise, and a missing primary source reads as "not found".
"""

from .aggregation import UNDECIDED_TRIAGE, Err, Ok, Outcome, merge_issue_detail, settle
from .client import (
    DEFAULT_SEARCH_LIMIT,
    DEFAULT_SEARCH_OFFSET,
    MAX_SEARCH_LIMIT,
    CoverityAPIError,
    CoverityClient,
)
from .models import Event, Issue, IssueDetail, Project, Stream, Triage

__all__ = [
    "CoverityAPIError",
    "CoverityClient",
    "DEFAULT_SEARCH_LIMIT",
    "DEFAULT_SEARCH_OFFSET",
    "MAX_SEARCH_LIMIT",
    "UNDECIDED_TRIAGE",
    "Err",
    "Event",
    "Issue",
    "IssueDetail",
    "Ok",
    "Outcome",
    "Project",
    "Stream",
    "Triage",
    "merge_issue_detail",
    "settle",
]
