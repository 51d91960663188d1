"""
Linear Issues Source
"""

import asyncio
import logging
import os
from typing import Any, Callable, Dict, List, Optional

import aiohttp

from ..exceptions import SourceFetchError
from ..integrations.linear import LinearClient
from ..models import Task, Tracker, parse_timestamp
from .base import TaskSource

logger = logging.getLogger(__name__)

# Linear priority (1 urgent .. 4 low, 0 none) expressed as priority labels
PRIORITY_LABELS = {1: "P0", 2: "P1", 3: "P2"}


def node_to_task(node: Dict[str, Any]) -> Task:
    labels = {l["name"] for l in (node.get("labels") or {}).get("nodes", [])}
    priority_label = PRIORITY_LABELS.get(node.get("priority") or 0)
    if priority_label:
        labels.add(priority_label)

    assignees = set()
    assignee = node.get("assignee")
    if assignee:
        assignees.add(assignee.get("displayName") or assignee.get("name"))

    return Task(
        id=node["identifier"],
        title=node["title"],
        source=Tracker.LINEAR,
        body=node.get("description") or "",
        labels=labels,
        assignees=assignees,
        created_at=parse_timestamp(node.get("createdAt")),
        url=node.get("url"),
        state=(node.get("state") or {}).get("name"),
    )


class LinearIssueSource(TaskSource):
    """Open issues from Linear, optionally restricted to one team"""

    tracker = Tracker.LINEAR

    def __init__(
        self,
        team: Optional[str] = None,
        api_key_env: str = "LINEAR_API_KEY",
        primary: bool = False,
        timeout: float = 30.0,
        client_factory: Optional[Callable[[str], LinearClient]] = None,
    ):
        super().__init__(name=f"linear:{team}" if team else "linear", primary=primary)
        self.team = team
        self.api_key_env = api_key_env
        self.timeout = timeout
        self.client_factory = client_factory or (
            lambda key: LinearClient(key, timeout=self.timeout)
        )

    async def fetch(self) -> List[Task]:
        api_key = os.environ.get(self.api_key_env)
        if not api_key:
            raise SourceFetchError(self.name, f"{self.api_key_env} is not set")

        try:
            async with self.client_factory(api_key) as client:
                nodes = await client.list_open_issues(team=self.team)
        except (aiohttp.ClientError, asyncio.TimeoutError, RuntimeError, KeyError) as e:
            raise SourceFetchError(self.name, f"could not list issues: {e}")

        try:
            tasks = [node_to_task(node) for node in nodes]
        except (KeyError, TypeError, AttributeError) as e:
            raise SourceFetchError(self.name, f"unexpected issue payload: {e!r}")

        logger.info(f"📥 Fetched {len(tasks)} open issues from {self.name}")
        return tasks
