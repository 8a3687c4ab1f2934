"""
Coverity Connect v2 REST client.

One instance is built at boot from CoverityConfig and shared read-only by all
capability handlers. It owns a single httpx.AsyncClient carrying the Basic
credentials; self-signed certificates are accepted when TLS is on.

No timeout, retry or caching is applied to remote calls.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from coverity_mcp.config.provider import CoverityConfig

from .aggregation import describe, merge_issue_detail, settle
from .models import (
    ISSUE_COLUMNS,
    IssueDetail,
    Issue,
    IssueSearchResponse,
    Project,
    ProjectsResponse,
    SourceCodeInfoResponse,
    Stream,
    StreamsResponse,
    TriageHistoryResponse,
    issue_from_row,
)

logger = logging.getLogger("coverity_mcp.client")

DEFAULT_SEARCH_LIMIT = 25
DEFAULT_SEARCH_OFFSET = 0
MAX_SEARCH_LIMIT = 200

MATCH_MODE = "oneOrMoreMatch"


class CoverityAPIError(Exception):
    """Non-success HTTP response from Coverity Connect."""

    def __init__(self, status_code: int, reason: str, body: str = ""):
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(f"Coverity API error {status_code} {reason}: {body}")


def key_filter(column_key: str, key: str) -> Dict[str, Any]:
    """Exact-key match clause for an issue search."""
    return {
        "columnKey": column_key,
        "matchMode": MATCH_MODE,
        "matchers": [{"key": key, "type": "keyMatcher"}],
    }


def project_filter(project_name: str) -> Dict[str, Any]:
    """Mandatory project clause for an issue search."""
    return {
        "columnKey": "project",
        "matchMode": MATCH_MODE,
        "matchers": [{"class": "Project", "name": project_name, "type": "nameMatcher"}],
    }


class CoverityClient:
    """Typed request layer over the Coverity Connect v2 API."""

    def __init__(
        self,
        config: CoverityConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Connection settings and credentials
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self.config = config
        self._http = httpx.AsyncClient(
            base_url=config.base_url,
            auth=httpx.BasicAuth(config.user, config.auth_key),
            headers={"Accept": "application/json"},
            verify=not config.ssl,
            timeout=None,
            transport=transport,
        )
        logger.debug(f"Coverity client initialized for {config.base_url} as {config.user}")

    @property
    def default_project(self) -> Optional[str]:
        return self.config.project

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "CoverityClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # Transport helpers

    @staticmethod
    def _clean_params(params: Optional[Dict[str, Any]]) -> Dict[str, str]:
        if not params:
            return {}
        return {k: str(v) for k, v in params.items() if v is not None and v != ""}

    async def _send(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        body: Any = None,
    ) -> Any:
        response = await self._http.request(
            method,
            path,
            params=self._clean_params(params),
            json=body,
        )
        logger.debug(f"{method} {path} -> {response.status_code}")

        if not response.is_success:
            raise CoverityAPIError(response.status_code, response.reason_phrase, response.text)

        return response.json()

    async def _get(self, path: str, model: type, params: Optional[Dict[str, Any]] = None) -> Any:
        data = await self._send("GET", path, params=params)
        return model.model_validate(data)

    async def _post(
        self,
        path: str,
        model: type,
        body: Any,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        data = await self._send("POST", path, params=params, body=body)
        return model.model_validate(data)

    # Operations

    async def list_projects(self) -> List[Project]:
        """GET /api/v2/projects with embedded streams, in server order."""
        data: ProjectsResponse = await self._get(
            "/api/v2/projects", ProjectsResponse, {"includeStreams": "true"}
        )
        return list(data.projects)

    async def list_streams(self, project_name: Optional[str] = None) -> List[Stream]:
        """
        List streams.

        With a project name, returns the streams embedded in that project's
        response; otherwise returns the global stream listing.
        """
        if project_name:
            data: ProjectsResponse = await self._get(
                f"/api/v2/projects/{quote(project_name, safe='')}",
                ProjectsResponse,
                {"includeStreams": "true"},
            )
            if not data.projects:
                return []
            return list(data.projects[0].streams)

        streams: StreamsResponse = await self._get("/api/v2/streams", StreamsResponse)
        return list(streams.streams)

    async def search_issues(
        self,
        project_name: str,
        checker: Optional[str] = None,
        impact: Optional[str] = None,
        status: Optional[str] = None,
        cid: Optional[int] = None,
        limit: int = DEFAULT_SEARCH_LIMIT,
        offset: int = DEFAULT_SEARCH_OFFSET,
    ) -> List[Issue]:
        """
        Search issues within a project.

        Args:
            project_name: Project to search (mandatory filter)
            checker: Exact checker name, e.g. RESOURCE_LEAK
            impact: Exact impact level (High, Medium, Low)
            status: Exact status (New, Triaged, Fixed, Dismissed)
            cid: Exact CID
            limit: Server-side row count
            offset: Server-side offset

        Returns:
            Summary records in server order; empty when nothing matches
        """
        filters = [project_filter(project_name)]
        if checker:
            filters.append(key_filter("checker", checker))
        if impact:
            filters.append(key_filter("displayImpact", impact))
        if status:
            filters.append(key_filter("status", status))
        if cid is not None:
            filters.append(key_filter("cid", str(cid)))

        data: IssueSearchResponse = await self._post(
            "/api/v2/issues/search",
            IssueSearchResponse,
            {"filters": filters, "columns": list(ISSUE_COLUMNS)},
            {
                "rowCount": limit,
                "offset": offset,
                "queryType": "byProject",
                "sortOrder": "asc",
            },
        )
        return [issue_from_row(row) for row in data.rows]

    async def fetch_source_code_info(self, cid: int, stream_name: str) -> SourceCodeInfoResponse:
        return await self._get(
            "/api/v2/issues/sourceCodeInfo",
            SourceCodeInfoResponse,
            {
                "cid": cid,
                "streamName": stream_name,
                "includeTotalIssueOccurrencesCount": "true",
            },
        )

    async def fetch_triage_history(self, cid: int) -> TriageHistoryResponse:
        return await self._get(
            "/api/v2/issues/triageHistory",
            TriageHistoryResponse,
            {"cid": cid, "triageStoreNames": self.config.triage_store},
        )

    async def fetch_display_row(self, cid: int) -> IssueSearchResponse:
        return await self._post(
            "/api/v2/issues/search",
            IssueSearchResponse,
            {"filters": [key_filter("cid", str(cid))], "columns": list(ISSUE_COLUMNS)},
            {"rowCount": 1, "queryType": "byProject"},
        )

    async def get_issue_details(self, cid: int, stream_name: str) -> Optional[IssueDetail]:
        """
        Fetch a defect's detail from three sources concurrently and merge them.

        Partial failures never raise: a missing triage history or display row
        degrades to defaults, and a failed primary lookup returns None.
        """
        source, triage, display = await asyncio.gather(
            settle(self.fetch_source_code_info(cid, stream_name), "sourceCodeInfo"),
            settle(self.fetch_triage_history(cid), "triageHistory"),
            settle(self.fetch_display_row(cid), "issue search"),
        )
        logger.debug(
            f"CID {cid} in {stream_name!r}: source {describe(source)}, "
            f"triage {describe(triage)}, display {describe(display)}"
        )
        return merge_issue_detail(cid, source, triage, display)
