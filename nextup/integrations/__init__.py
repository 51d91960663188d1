"""
Tracker integrations (GitHub via the gh CLI, Linear via GraphQL)
"""

from .github import GitHubClient, GitHubIssue, GitHubLabel, GitHubUser
from .linear import LinearClient

__all__ = [
    "GitHubClient",
    "GitHubIssue",
    "GitHubLabel",
    "GitHubUser",
    "LinearClient",
]
