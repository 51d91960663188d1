"""
Linear Client

Async GraphQL client for reading open Linear issues.
"""

import logging
from typing import Any, Dict, List, Optional

import aiohttp

logger = logging.getLogger(__name__)

LINEAR_API_URL = "https://api.linear.app/graphql"

ISSUES_QUERY = """
query($cursor: String, $filter: IssueFilter) {
    issues(first: 50, after: $cursor, filter: $filter, orderBy: updatedAt) {
        pageInfo { hasNextPage endCursor }
        nodes {
            identifier
            title
            description
            url
            priority
            createdAt
            team { key name }
            state { name type }
            assignee { name displayName }
            labels { nodes { name } }
        }
    }
}
"""

# Linear workflow state types that mean the work is no longer open
CLOSED_STATE_TYPES = ["started", "completed", "canceled", "cancelled"]


class LinearClient:
    """
    Async client for the Linear GraphQL API.

    Use as an async context manager:

        async with LinearClient(api_key) as client:
            issues = await client.list_open_issues(team="ENG")
    """

    def __init__(
        self,
        api_key: str,
        api_url: str = LINEAR_API_URL,
        timeout: float = 30.0,
        max_pages: int = 20,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self.max_pages = max_pages
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "LinearClient":
        self._session = aiohttp.ClientSession(
            headers={"Authorization": self.api_key, "Content-Type": "application/json"},
            timeout=aiohttp.ClientTimeout(total=self.timeout),
        )
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    async def _post(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        if not self._session:
            raise RuntimeError("Client not connected. Use async with context.")

        async with self._session.post(
            self.api_url, json={"query": query, "variables": variables}
        ) as resp:
            if resp.status != 200:
                text = await resp.text()
                raise RuntimeError(f"Linear API returned {resp.status}: {text[:500]}")
            data = await resp.json()

        if data.get("errors"):
            raise RuntimeError(f"Linear API returned errors: {data['errors']}")
        return data["data"]

    async def list_open_issues(self, team: Optional[str] = None) -> List[Dict[str, Any]]:
        """Fetch issues that are not started, completed, or cancelled"""
        issue_filter: Dict[str, Any] = {
            "state": {"type": {"nin": CLOSED_STATE_TYPES}},
        }
        if team:
            issue_filter["team"] = {"key": {"eq": team}}

        issues: List[Dict[str, Any]] = []
        cursor = None

        for _ in range(self.max_pages):
            data = await self._post(ISSUES_QUERY, {"cursor": cursor, "filter": issue_filter})
            page = data["issues"]
            issues.extend(page["nodes"])
            if not page["pageInfo"]["hasNextPage"]:
                break
            cursor = page["pageInfo"]["endCursor"]
        else:
            logger.warning(f"Stopped after {self.max_pages} pages of Linear issues")

        logger.debug(f"Fetched {len(issues)} Linear issues")
        return issues
