"""
Code Search Backends

Read-only keyword search over a source tree. Two backends share one
interface: a pure-Python walker and a ripgrep wrapper.
"""

import logging
import os
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import PurePath
from typing import Iterable, List, Optional, Sequence

from ..exceptions import ConfigurationError, SearchError, ToolUnavailableError

logger = logging.getLogger(__name__)

# Directories to exclude from searching
DEFAULT_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    "venv",
    ".venv",
    "env",
    ".env",
    "dist",
    "build",
    ".tox",
    ".eggs",
    ".mypy_cache",
    ".ruff_cache",
    "coverage",
    ".coverage",
    "htmlcov",
    ".nextup",
}

DEFAULT_FILE_EXTENSIONS = [
    ".py",
    ".js",
    ".jsx",
    ".ts",
    ".tsx",
    ".go",
    ".rs",
    ".java",
    ".kt",
    ".rb",
    ".php",
    ".cs",
    ".swift",
    ".c",
    ".h",
    ".cpp",
    ".vue",
    ".svelte",
]

DEFAULT_MAX_FILE_SIZE = 1024 * 1024

SEARCH_BACKENDS = ("auto", "python", "ripgrep")


def _to_posix(path: str) -> str:
    return PurePath(path).as_posix()


class CodeSearcher(ABC):
    """Finds files under a root that contain any of a set of keywords"""

    def __init__(
        self,
        root_path: str,
        file_extensions: Optional[Sequence[str]] = None,
        excluded_dirs: Optional[Iterable[str]] = None,
    ):
        self.root_path = os.path.abspath(root_path)
        self.file_extensions = [
            ext if ext.startswith(".") else f".{ext}"
            for ext in (file_extensions or DEFAULT_FILE_EXTENSIONS)
        ]
        self.excluded_dirs = set(excluded_dirs or DEFAULT_EXCLUDED_DIRS)

    @abstractmethod
    def search(self, keywords: Sequence[str], case_sensitive: bool = True) -> List[str]:
        """Return sorted paths (relative to root) of files containing any keyword"""

    @abstractmethod
    def list_files(self) -> List[str]:
        """Return sorted paths (relative to root) of every searchable file"""


class PythonCodeSearcher(CodeSearcher):
    """Walks the tree with os.walk and scans file contents in-process"""

    def __init__(
        self,
        root_path: str,
        file_extensions: Optional[Sequence[str]] = None,
        excluded_dirs: Optional[Iterable[str]] = None,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    ):
        super().__init__(root_path, file_extensions, excluded_dirs)
        self.max_file_size = max_file_size

    def list_files(self) -> List[str]:
        files = []
        for dirpath, dirnames, filenames in os.walk(self.root_path):
            dirnames[:] = [d for d in dirnames if d not in self.excluded_dirs]
            for filename in filenames:
                if not filename.endswith(tuple(self.file_extensions)):
                    continue
                full_path = os.path.join(dirpath, filename)
                files.append(_to_posix(os.path.relpath(full_path, self.root_path)))
        return sorted(files)

    def search(self, keywords: Sequence[str], case_sensitive: bool = True) -> List[str]:
        if not keywords:
            return []

        needles = list(keywords) if case_sensitive else [k.lower() for k in keywords]
        matches = []

        for rel_path in self.list_files():
            content = self._read(rel_path)
            if content is None:
                continue
            haystack = content if case_sensitive else content.lower()
            if any(needle in haystack for needle in needles):
                matches.append(rel_path)

        return matches

    def _read(self, rel_path: str) -> Optional[str]:
        full_path = os.path.join(self.root_path, rel_path)
        try:
            if os.path.getsize(full_path) > self.max_file_size:
                logger.debug(f"Skipping large file: {rel_path}")
                return None
            with open(full_path, "r", encoding="utf-8") as f:
                return f.read()
        except UnicodeDecodeError:
            logger.debug(f"Skipping undecodable file: {rel_path}")
            return None
        except OSError as e:
            logger.warning(f"Could not read {rel_path}: {e}")
            return None


class RipgrepCodeSearcher(CodeSearcher):
    """
    Delegates the search to the `rg` binary.

    .gitignore and .ignore files are not honored; excluded_dirs alone decides
    what is skipped, the same as PythonCodeSearcher.
    """

    def __init__(
        self,
        root_path: str,
        file_extensions: Optional[Sequence[str]] = None,
        excluded_dirs: Optional[Iterable[str]] = None,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        rg_path: Optional[str] = None,
    ):
        super().__init__(root_path, file_extensions, excluded_dirs)
        self.max_file_size = max_file_size
        self.rg_path = rg_path or shutil.which("rg")
        if not self.rg_path:
            raise ToolUnavailableError(
                "rg", "ripgrep (rg) is required for the 'ripgrep' search backend"
            )

    def _globs(self) -> List[str]:
        args = []
        for ext in self.file_extensions:
            args.extend(["-g", f"*{ext}"])
        for dirname in sorted(self.excluded_dirs):
            args.extend(["-g", f"!{dirname}/"])
        return args

    def _run(self, args: List[str]) -> List[str]:
        cmd = [self.rg_path] + args
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                cwd=self.root_path,
                capture_output=True,
                text=True,
                stdin=subprocess.DEVNULL,
            )
        except FileNotFoundError:
            raise ToolUnavailableError("rg")

        # rg exits 1 when nothing matched
        if result.returncode == 1:
            return []
        if result.returncode != 0:
            raise SearchError(f"rg failed ({result.returncode}): {result.stderr.strip()}")

        paths = set()
        for line in result.stdout.splitlines():
            line = line.strip()
            if not line:
                continue
            if line.startswith("./"):
                line = line[2:]
            paths.add(_to_posix(line))
        return sorted(paths)

    def list_files(self) -> List[str]:
        return self._run(["--files", "--hidden", "--no-ignore"] + self._globs() + ["."])

    def search(self, keywords: Sequence[str], case_sensitive: bool = True) -> List[str]:
        if not keywords:
            return []

        args = [
            "--files-with-matches",
            "--fixed-strings",
            "--hidden",
            "--no-messages",
            "--no-ignore",
            f"--max-filesize={self.max_file_size}",
        ]
        if not case_sensitive:
            args.append("--ignore-case")
        for keyword in keywords:
            args.extend(["-e", keyword])
        return self._run(args + self._globs() + ["."])


def create_searcher(
    root_path: str,
    backend: str = "auto",
    file_extensions: Optional[Sequence[str]] = None,
    excluded_dirs: Optional[Iterable[str]] = None,
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
) -> CodeSearcher:
    """
    Build the search backend named by `backend`.

    "auto" picks ripgrep when `rg` is on PATH and falls back to the Python
    walker otherwise. An explicit "ripgrep" never falls back.
    """
    if backend not in SEARCH_BACKENDS:
        raise ConfigurationError(
            f"Unknown search backend '{backend}' (choose from {', '.join(SEARCH_BACKENDS)})"
        )

    if backend == "auto":
        backend = "ripgrep" if shutil.which("rg") else "python"
        logger.debug(f"Auto-selected search backend: {backend}")

    if backend == "ripgrep":
        return RipgrepCodeSearcher(
            root_path, file_extensions, excluded_dirs, max_file_size
        )
    return PythonCodeSearcher(root_path, file_extensions, excluded_dirs, max_file_size)
