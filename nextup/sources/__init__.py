"""
Task sources: trackers that open tasks are fetched from
"""

from .base import TaskSource
from .github_source import GitHubIssueSource
from .json_file import JsonFileSource
from .linear_source import LinearIssueSource
from .planning_doc import PlanningDocSource

__all__ = [
    "TaskSource",
    "GitHubIssueSource",
    "JsonFileSource",
    "LinearIssueSource",
    "PlanningDocSource",
]
