"""
GitHub Issues Source
"""

import logging
import re
from typing import List, Optional

from ..exceptions import SourceFetchError, ToolUnavailableError
from ..integrations.github import GitHubClient, GitHubIssue
from ..models import Task, Tracker, parse_timestamp
from .base import TaskSource

logger = logging.getLogger(__name__)

# Links to a Linear issue in the body, e.g. https://linear.app/acme/issue/ENG-42/...
LINEAR_LINK = re.compile(r"linear\.app/[\w-]+/issue/([A-Z][A-Z0-9]*-\d+)")


def issue_to_task(issue: GitHubIssue) -> Task:
    secondary_ref = None
    link = LINEAR_LINK.search(issue.body)
    if link:
        secondary_ref = f"{Tracker.LINEAR.value}:{link.group(1)}"

    return Task(
        id=str(issue.number),
        title=issue.title,
        source=Tracker.GITHUB,
        body=issue.body,
        labels=set(issue.label_names),
        assignees={a.login for a in issue.assignees},
        created_at=parse_timestamp(issue.created_at),
        secondary_ref=secondary_ref,
        url=issue.html_url or None,
        state=issue.state or None,
    )


class GitHubIssueSource(TaskSource):
    """Open issues of a GitHub repository, read through the gh CLI"""

    tracker = Tracker.GITHUB

    def __init__(
        self,
        repo: Optional[str] = None,
        labels: Optional[List[str]] = None,
        limit: int = 100,
        primary: bool = True,
        client: Optional[GitHubClient] = None,
    ):
        super().__init__(name=f"github:{repo}" if repo else "github", primary=primary)
        self.labels = labels or []
        self.limit = limit
        self.client = client or GitHubClient(repo=repo)

    async def fetch(self) -> List[Task]:
        try:
            issues = self.client.list_issues(
                state="open", labels=self.labels, limit=self.limit
            )
        except ToolUnavailableError as e:
            raise SourceFetchError(self.name, str(e))
        except (RuntimeError, ValueError) as e:
            raise SourceFetchError(self.name, f"could not list issues: {e}")

        tasks = [issue_to_task(issue) for issue in issues]
        logger.info(f"📥 Fetched {len(tasks)} open issues from {self.name}")
        return tasks
