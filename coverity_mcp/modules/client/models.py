"""
Coverity data models.

Two families live here:
- Domain records handed to capability units (Project, Stream, Issue,
  IssueDetail, Event, Triage). Immutable once constructed.
- Wire models mirroring the Coverity Connect v2 response payloads that the
  client parses before turning them into domain records.

Attribute names are snake_case; the camelCase wire/output names are aliases,
so ``model_dump(by_alias=True)`` yields the Coverity spelling.

Wire models are lenient: a JSON null where a list is expected reads as an
empty list, and event fields that are null or unparsable fall back to "" or 0.
Issue occurrences are kept raw; only the first one's events are parsed.
"""

from typing import Annotated, Any, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Columns requested from /api/v2/issues/search, in request order.
ISSUE_COLUMNS: Tuple[str, ...] = (
    "cid",
    "checker",
    "displayType",
    "displayImpact",
    "status",
    "displayFile",
    "displayFunction",
    "firstDetected",
    "lastDetected",
    "occurrenceCount",
)


def to_int(value: Any, default: int = 0) -> int:
    """Parse an integer column value, falling back to ``default``."""
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def to_str(value: Any) -> str:
    return "" if value is None else str(value)


def _int_or_zero(value: Any) -> int:
    return to_int(value)


def _empty_if_none(value: Any) -> Any:
    return [] if value is None else value


def _optional_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _flag(value: Any) -> bool:
    return value is True or str(value).lower() == "true"


LooseInt = Annotated[int, BeforeValidator(_int_or_zero)]
LooseStr = Annotated[str, BeforeValidator(to_str)]
OptionalInt = Annotated[Optional[int], BeforeValidator(_optional_int)]
OptionalStr = Annotated[Optional[str], BeforeValidator(_optional_str)]
Flag = Annotated[bool, BeforeValidator(_flag)]


class CoverityModel(BaseModel):
    """Base for all Coverity models: frozen, camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# Domain records


class Stream(CoverityModel):
    """A named defect-collection scope within a project."""

    name: str
    language: Optional[str] = None
    description: Optional[str] = None
    primary_project_name: Optional[str] = None
    triage_store_name: Optional[str] = None
    outdated: Optional[bool] = None


class Project(CoverityModel):
    """A Coverity project with its embedded streams."""

    name: str
    project_key: Optional[int] = None
    description: Optional[str] = None
    streams: Annotated[Tuple[Stream, ...], BeforeValidator(_empty_if_none)] = ()


class Event(CoverityModel):
    """One step in a defect's code-path narrative."""

    event_number: int
    event_tag: str = ""
    event_description: str = ""
    file_pathname: str = ""
    line_number: int = 0


class Triage(CoverityModel):
    """Human-assigned disposition of a defect."""

    action: str
    classification: str
    severity: str
    owner: str = ""
    comment: Optional[str] = None


class Issue(CoverityModel):
    """Summary view of a defect, as returned by issue search."""

    cid: int
    checker_name: str = ""
    display_type: str = ""
    display_impact: str = ""
    display_status: str = ""
    display_file: str = ""
    display_function: str = ""
    first_detected: str = ""
    last_detected: str = ""
    occurrence_count: int = 0


class IssueDetail(Issue):
    """Summary fields plus the first occurrence's event trace and triage state."""

    events: Tuple[Event, ...] = ()
    triage: Triage


# Wire models


class SourceFile(CoverityModel):
    file_pathname: LooseStr = ""


def _file_or_empty(value: Any) -> Any:
    return value if isinstance(value, (dict, SourceFile)) else {}


class SourceEvent(CoverityModel):
    event_number: LooseInt = 0
    event_tag: LooseStr = ""
    event_description: LooseStr = ""
    line_number: LooseInt = 0
    main: Flag = False
    file: Annotated[SourceFile, BeforeValidator(_file_or_empty)] = Field(
        default_factory=SourceFile
    )

    def to_event(self) -> Event:
        return Event(
            event_number=self.event_number,
            event_tag=self.event_tag,
            event_description=self.event_description,
            file_pathname=self.file.file_pathname,
            line_number=self.line_number,
        )


class SourceCodeInfoResponse(CoverityModel):
    """GET /api/v2/issues/sourceCodeInfo"""

    checker_name: OptionalStr = None
    domain: OptionalStr = None
    issue_occurrences: Annotated[List[Any], BeforeValidator(_empty_if_none)] = Field(
        default_factory=list
    )
    issue_occurrences_count: OptionalInt = None

    def first_occurrence_events(self) -> List[SourceEvent]:
        """Events of the first occurrence, in server order; later occurrences are not read."""
        if not self.issue_occurrences or not isinstance(self.issue_occurrences[0], dict):
            return []
        raw_events = self.issue_occurrences[0].get("events") or []
        if not isinstance(raw_events, list):
            return []
        return [SourceEvent.model_validate(e) for e in raw_events if isinstance(e, dict)]


class AttributeValue(CoverityModel):
    attribute_name: LooseStr
    attribute_value: OptionalStr = None


class TriageHistory(CoverityModel):
    id: OptionalInt = None
    attribute_values_list: Annotated[
        List[AttributeValue], BeforeValidator(_empty_if_none)
    ] = Field(default_factory=list)

    def attributes(self) -> Dict[str, Optional[str]]:
        return {a.attribute_name: a.attribute_value for a in self.attribute_values_list}


class TriageHistoryResponse(CoverityModel):
    """GET /api/v2/issues/triageHistory"""

    triage_histories: Annotated[List[TriageHistory], BeforeValidator(_empty_if_none)] = Field(
        default_factory=list
    )


class ColumnValue(CoverityModel):
    key: str
    value: Any = None


class IssueSearchResponse(CoverityModel):
    """POST /api/v2/issues/search"""

    offset: LooseInt = 0
    total_rows: LooseInt = 0
    columns: Annotated[List[str], BeforeValidator(_empty_if_none)] = Field(default_factory=list)
    rows: Annotated[List[List[ColumnValue]], BeforeValidator(_empty_if_none)] = Field(
        default_factory=list
    )


class ProjectsResponse(CoverityModel):
    """GET /api/v2/projects and /api/v2/projects/{name}"""

    projects: Annotated[List[Project], BeforeValidator(_empty_if_none)] = Field(
        default_factory=list
    )


class StreamsResponse(CoverityModel):
    """GET /api/v2/streams"""

    streams: Annotated[List[Stream], BeforeValidator(_empty_if_none)] = Field(
        default_factory=list
    )


# Row helpers


def flatten_row(row: Sequence[ColumnValue]) -> Dict[str, Any]:
    """Turn a search row (list of key/value pairs) into a dict."""
    return {column.key: column.value for column in row}


def issue_from_row(row: Sequence[ColumnValue]) -> Issue:
    """Build a summary record from a search row; missing columns become "" or 0."""
    flat = flatten_row(row)
    return Issue(
        cid=to_int(flat.get("cid")),
        checker_name=to_str(flat.get("checker")),
        display_type=to_str(flat.get("displayType")),
        display_impact=to_str(flat.get("displayImpact")),
        display_status=to_str(flat.get("status")),
        display_file=to_str(flat.get("displayFile")),
        display_function=to_str(flat.get("displayFunction")),
        first_detected=to_str(flat.get("firstDetected")),
        last_detected=to_str(flat.get("lastDetected")),
        occurrence_count=to_int(flat.get("occurrenceCount")),
    )
