"""
Git Operations

Read-only repository queries used as scoring context.
"""

import logging
import subprocess
from typing import List, Optional

logger = logging.getLogger(__name__)


class GitOperations:
    def __init__(self, repo_path: str = "."):
        self.repo_path = repo_path

    def _run_git(self, args: List[str]) -> Optional[str]:
        """Run a git command, returning stdout or None on failure"""
        try:
            result = subprocess.run(
                ["git"] + args,
                cwd=self.repo_path,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError:
            logger.warning("git is not installed; recent-work scoring disabled")
            return None

        if result.returncode != 0:
            logger.warning(f"git {args[0]} failed: {result.stderr.strip()}")
            return None
        return result.stdout

    def recently_changed_files(
        self, since_days: int = 14, max_commits: int = 50
    ) -> List[str]:
        """
        Files touched by recent commits plus uncommitted changes.

        Args:
            since_days: Only consider commits newer than this
            max_commits: Upper bound on commits inspected

        Returns:
            De-duplicated paths, most recent first; empty if git is unavailable
        """
        files: List[str] = []

        status = self._run_git(["status", "--porcelain"])
        if status is None:
            return []
        for line in status.splitlines():
            path = line[3:].strip()
            if " -> " in path:
                path = path.split(" -> ", 1)[1]
            path = path.strip('"')
            if path and path not in files:
                files.append(path)

        log = self._run_git(
            [
                "log",
                f"--since={since_days}.days",
                f"--max-count={max_commits}",
                "--name-only",
                "--pretty=format:",
            ]
        )
        for line in (log or "").splitlines():
            path = line.strip()
            if path and path not in files:
                files.append(path)

        logger.debug(f"Found {len(files)} recently changed files")
        return files
