"""
Code-Presence Validator

Heuristically decides whether a task has already been implemented by
searching the source tree for keywords taken from its title.

Classification:
- pending: no file mentions any keyword
- partially-done: some files match, but no test file backs them up
- appears-done: files match and at least one matching test file exists
"""

import logging
import os
import re
from typing import Iterable, List, Optional, Sequence

from ..exceptions import ConfigurationError
from ..models import Task, ValidationResult, ValidationStatus
from .code_search import (
    DEFAULT_MAX_FILE_SIZE,
    CodeSearcher,
    create_searcher,
)
from .keywords import KeywordSet, extract_keywords

logger = logging.getLogger(__name__)

TEST_DIRECTORIES = {"tests", "test", "__tests__", "spec", "specs"}

TEST_FILE_PATTERNS = [
    re.compile(r"^test_.+\.py$"),
    re.compile(r"^.+_test\.(py|go)$"),
    re.compile(r"^.+\.(test|spec)\.(js|jsx|ts|tsx|mjs|cjs)$"),
    re.compile(r"^.+Tests?\.(java|kt|cs|swift)$"),
    re.compile(r"^.+_spec\.rb$"),
]


def is_test_file(path: str) -> bool:
    """True if the relative path looks like a test file"""
    parts = path.replace("\\", "/").split("/")
    if any(part in TEST_DIRECTORIES for part in parts[:-1]):
        return True
    filename = parts[-1]
    return any(pattern.match(filename) for pattern in TEST_FILE_PATTERNS)


class CodePresenceValidator:
    """
    Checks a source tree for evidence that a task is already done.

    The validator never writes to the tree, so running it twice against an
    unchanged tree yields identical results.
    """

    def __init__(
        self,
        root_path: Optional[str],
        searcher: Optional[CodeSearcher] = None,
        backend: str = "auto",
        file_extensions: Optional[Sequence[str]] = None,
        excluded_dirs: Optional[Iterable[str]] = None,
        case_sensitive: bool = True,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        min_keyword_length: int = 3,
        extra_stop_words: Iterable[str] = (),
    ):
        """
        Initialize the validator.

        Args:
            root_path: Source tree to search
            searcher: Pre-built search backend (overrides backend options)
            backend: "auto", "python" or "ripgrep"
            file_extensions: File types to search
            excluded_dirs: Directory names to skip
            case_sensitive: Match keywords exactly (fewer false positives)
            max_file_size: Skip files larger than this many bytes
            min_keyword_length: Drop shorter title tokens
            extra_stop_words: Words to ignore on top of the built-in list

        Raises:
            ConfigurationError: root_path is missing or not a directory
            ToolUnavailableError: the requested search backend is not installed
        """
        if not root_path:
            raise ConfigurationError("No source tree path configured for validation")
        if not os.path.isdir(root_path):
            raise ConfigurationError(f"Source tree path is not a directory: {root_path}")

        self.root_path = os.path.abspath(root_path)
        self.case_sensitive = case_sensitive
        self.min_keyword_length = min_keyword_length
        self.extra_stop_words = list(extra_stop_words)
        self.searcher = searcher or create_searcher(
            self.root_path,
            backend=backend,
            file_extensions=file_extensions,
            excluded_dirs=excluded_dirs,
            max_file_size=max_file_size,
        )

    def keywords_for(self, task: Task) -> KeywordSet:
        return extract_keywords(
            task.title,
            min_length=self.min_keyword_length,
            extra_stop_words=self.extra_stop_words,
        )

    def validate(self, task: Task) -> ValidationResult:
        """
        Classify a task as pending, partially-done, or appears-done.

        Args:
            task: Task to look for

        Returns:
            ValidationResult with the matched files as evidence
        """
        keywords = self.keywords_for(task)

        if not keywords:
            logger.debug(f"No searchable keywords in '{task.title}'")
            return ValidationResult(
                task_key=task.key,
                status=ValidationStatus.PENDING,
                notes=["No searchable keywords in title"],
            )

        evidence = self.searcher.search(keywords.all, case_sensitive=self.case_sensitive)
        test_evidence = self._find_test_evidence(keywords, evidence)

        notes = []
        if not evidence:
            status = ValidationStatus.PENDING
            notes.append("No files mention the task keywords")
        elif test_evidence:
            status = ValidationStatus.APPEARS_DONE
            notes.append(
                f"{len(evidence)} file(s) match and {len(test_evidence)} test file(s) cover them"
            )
        else:
            status = ValidationStatus.PARTIALLY_DONE
            notes.append(f"{len(evidence)} file(s) match but no test file was found")

        logger.debug(f"Validated {task.key}: {status.value} ({len(evidence)} matches)")

        return ValidationResult(
            task_key=task.key,
            status=status,
            evidence=evidence,
            test_evidence=test_evidence,
            keywords=keywords.all,
            notes=notes,
        )

    def validate_many(self, tasks: Iterable[Task]) -> List[ValidationResult]:
        return [self.validate(task) for task in tasks]

    def _find_test_evidence(self, keywords: KeywordSet, evidence: List[str]) -> List[str]:
        """Test files among the matches, plus test files named after a keyword"""
        if not evidence:
            return []

        found = {path for path in evidence if is_test_file(path)}

        lowered = [k.lower() for k in keywords.all]
        for path in self.searcher.list_files():
            if path in found or not is_test_file(path):
                continue
            filename = path.rsplit("/", 1)[-1].lower()
            if any(keyword in filename for keyword in lowered):
                found.add(path)

        return sorted(found)
