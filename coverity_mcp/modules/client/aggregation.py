"""
Issue-detail aggregation.

get_issue_details fans out to three independent Coverity endpoints. Each
sub-call settles into an Outcome (Ok or Err) and merge_issue_detail combines
the three outcomes into one record. The merge does no I/O and depends only on
the outcomes, never on the order in which they completed.

Precedence:
- sourceCodeInfo is primary: Err, or Ok without a checker name, means the
  issue is reported as not found (None).
- triageHistory Err or empty falls back to UNDECIDED_TRIAGE.
- search row values win for display fields; checker and occurrence count fall
  back to sourceCodeInfo; displayFile falls back to the main event's file,
  then the first event's file, then "".
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Generic, Optional, TypeVar, Union

from .models import (
    Event,
    IssueDetail,
    IssueSearchResponse,
    SourceCodeInfoResponse,
    Triage,
    TriageHistoryResponse,
    flatten_row,
    to_int,
    to_str,
)

logger = logging.getLogger("coverity_mcp.client.aggregation")

T = TypeVar("T")

UNDECIDED_TRIAGE = Triage(
    action="Undecided",
    classification="Unclassified",
    severity="Unspecified",
    owner="",
)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: BaseException

    @property
    def ok(self) -> bool:
        return False


Outcome = Union[Ok[T], Err]


async def settle(awaitable: Awaitable[T], label: str = "request") -> "Outcome[T]":
    """
    Await ``awaitable`` and wrap its result.

    Exceptions become Err so that sibling requests gathered alongside this one
    are never cancelled by its failure.
    """
    try:
        return Ok(await awaitable)
    except Exception as e:
        logger.warning(f"{label} failed: {e!r}")
        return Err(e)


def parse_triage(outcome: "Outcome[TriageHistoryResponse]") -> Triage:
    """Most recent triage entry (index 0), or the sentinel."""
    if not isinstance(outcome, Ok) or not outcome.value.triage_histories:
        return UNDECIDED_TRIAGE

    attrs = outcome.value.triage_histories[0].attributes()
    return Triage(
        action=attrs.get("action") or UNDECIDED_TRIAGE.action,
        classification=attrs.get("classification") or UNDECIDED_TRIAGE.classification,
        severity=attrs.get("severity") or UNDECIDED_TRIAGE.severity,
        owner=attrs.get("owner") or UNDECIDED_TRIAGE.owner,
        comment=attrs.get("comment"),
    )


def _display_row(outcome: "Outcome[IssueSearchResponse]") -> Optional[dict]:
    if not isinstance(outcome, Ok) or not outcome.value.rows:
        return None
    return flatten_row(outcome.value.rows[0])


def merge_issue_detail(
    cid: int,
    source: "Outcome[SourceCodeInfoResponse]",
    triage: "Outcome[TriageHistoryResponse]",
    display: "Outcome[IssueSearchResponse]",
) -> Optional[IssueDetail]:
    """
    Combine the three sub-call outcomes into one IssueDetail.

    Args:
        cid: Issue identifier requested by the caller
        source: sourceCodeInfo outcome (primary)
        triage: triageHistory outcome
        display: single-row issue search outcome

    Returns:
        The merged record, or None when the primary source has nothing usable
    """
    if not isinstance(source, Ok) or not source.value.checker_name:
        return None
    info = source.value

    raw_events = info.first_occurrence_events()
    events = tuple(e.to_event() for e in raw_events)

    main_event = next((e for e in raw_events if e.main), None)
    fallback_file = ""
    if main_event is not None:
        fallback_file = main_event.file.file_pathname
    elif raw_events:
        fallback_file = raw_events[0].file.file_pathname

    row = _display_row(display)
    if row is None:
        row = {}

    def column(key: str) -> str:
        return to_str(row.get(key))

    occurrence_count = to_int(row.get("occurrenceCount"), default=-1)
    if occurrence_count < 0:
        occurrence_count = info.issue_occurrences_count or 0

    return IssueDetail(
        cid=cid,
        checker_name=column("checker") or info.checker_name,
        display_type=column("displayType"),
        display_impact=column("displayImpact"),
        display_status=column("status"),
        display_file=column("displayFile") or fallback_file,
        display_function=column("displayFunction"),
        first_detected=column("firstDetected"),
        last_detected=column("lastDetected"),
        occurrence_count=occurrence_count,
        events=events,
        triage=parse_triage(triage),
    )


def describe(outcome: "Outcome[Any]") -> str:
    """Short status string for debug logging."""
    if isinstance(outcome, Ok):
        return "ok"
    return f"failed ({type(outcome.error).__name__})"
