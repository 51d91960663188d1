"""
GitHub Client

Thin wrapper over the `gh` CLI for reading issues.
Authentication is whatever `gh` is logged in with, or GITHUB_TOKEN.
"""

import json
import logging
import os
import subprocess
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..exceptions import ToolUnavailableError

logger = logging.getLogger(__name__)

ISSUE_FIELDS = "number,title,body,state,author,labels,assignees,createdAt,updatedAt,url"


@dataclass
class GitHubUser:
    login: str
    id: int = 0
    type: str = "User"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GitHubUser":
        return cls(
            login=data.get("login", "unknown"),
            id=data.get("id", 0),
            type=data.get("type", "User"),
        )


@dataclass
class GitHubLabel:
    name: str
    color: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GitHubLabel":
        return cls(
            name=data.get("name", ""),
            color=data.get("color", ""),
            description=data.get("description") or "",
        )


@dataclass
class GitHubIssue:
    number: int
    title: str
    body: str
    state: str
    user: GitHubUser
    labels: List[GitHubLabel] = field(default_factory=list)
    assignees: List[GitHubUser] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""
    html_url: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GitHubIssue":
        """Build from either `gh --json` output or REST API payloads"""
        author = data.get("author") or data.get("user") or {}
        return cls(
            number=data.get("number", 0),
            title=data.get("title", ""),
            body=data.get("body") or "",
            state=(data.get("state") or "").lower(),
            user=GitHubUser.from_dict(author),
            labels=[GitHubLabel.from_dict(l) for l in data.get("labels") or []],
            assignees=[GitHubUser.from_dict(a) for a in data.get("assignees") or []],
            created_at=data.get("createdAt") or data.get("created_at") or "",
            updated_at=data.get("updatedAt") or data.get("updated_at") or "",
            html_url=data.get("url") or data.get("html_url") or "",
        )

    @property
    def label_names(self) -> List[str]:
        return [label.name for label in self.labels]


class GitHubClient:
    """Reads issues through the `gh` CLI"""

    def __init__(self, repo: Optional[str] = None, token: Optional[str] = None):
        """
        Args:
            repo: "owner/name"; None lets gh infer it from the current checkout
            token: API token; falls back to GITHUB_TOKEN
        """
        self.repo = repo
        self.token = token or os.environ.get("GITHUB_TOKEN")

    def _run_gh(self, args: List[str]) -> str:
        cmd = ["gh"] + args
        if self.repo:
            cmd.extend(["--repo", self.repo])

        env = os.environ.copy()
        if self.token:
            env["GH_TOKEN"] = self.token

        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, env=env)
        except FileNotFoundError:
            raise ToolUnavailableError("gh", "GitHub CLI (gh) is not installed")

        if result.returncode != 0:
            raise RuntimeError(f"gh command failed: {result.stderr.strip()}")
        return result.stdout

    def list_issues(
        self,
        state: str = "open",
        labels: Optional[List[str]] = None,
        limit: int = 100,
    ) -> List[GitHubIssue]:
        args = [
            "issue",
            "list",
            "--state",
            state,
            "--limit",
            str(limit),
            "--json",
            ISSUE_FIELDS,
        ]
        if labels:
            args.extend(["--label", ",".join(labels)])

        output = self._run_gh(args)
        if not output.strip():
            return []
        return [GitHubIssue.from_dict(item) for item in json.loads(output)]
