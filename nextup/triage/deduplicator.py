"""
Task Deduplicator

Merges records of the same logical task fetched from different trackers.
Identity is heuristic: normalized-title equality, one title's words all
appearing in the other, or a token overlap (Jaccard) ratio at or above a
configurable threshold.
"""

import logging
import re
from typing import List, Optional, Set

from ..exceptions import ConfigurationError
from ..models import Task, Tracker

logger = logging.getLogger(__name__)

_BRACKET_PREFIX = re.compile(r"^\s*(\[[^\]]*\]\s*)+")
_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_title(title: str) -> str:
    """Lowercase, drop "[tag]" prefixes and punctuation, collapse whitespace"""
    text = _BRACKET_PREFIX.sub("", title or "")
    text = _PUNCTUATION.sub(" ", text.lower())
    return _WHITESPACE.sub(" ", text).strip()


def token_overlap(a: str, b: str) -> float:
    """Jaccard ratio of the token sets of two normalized titles"""
    tokens_a: Set[str] = set(a.split())
    tokens_b: Set[str] = set(b.split())
    if not tokens_a or not tokens_b:
        return 0.0
    return len(tokens_a & tokens_b) / len(tokens_a | tokens_b)


class TaskDeduplicator:
    """Collapses cross-source duplicates into one canonical record each"""

    def __init__(
        self,
        primary: Tracker = Tracker.GITHUB,
        similarity_threshold: float = 0.6,
    ):
        if not 0.0 < similarity_threshold <= 1.0:
            raise ConfigurationError(
                "similarity_threshold must be greater than 0.0 and at most 1.0"
            )
        self.primary = primary
        self.similarity_threshold = similarity_threshold

    def is_duplicate(self, a: Task, b: Task) -> bool:
        """True if two records from different sources describe the same task"""
        if a.source == b.source:
            return False

        title_a = normalize_title(a.title)
        title_b = normalize_title(b.title)
        if not title_a or not title_b:
            return False
        if title_a == title_b:
            return True
        tokens_a = set(title_a.split())
        tokens_b = set(title_b.split())
        if tokens_a <= tokens_b or tokens_b <= tokens_a:
            return True
        return token_overlap(title_a, title_b) >= self.similarity_threshold

    def merge(self, tasks: List[Task]) -> List[Task]:
        """
        Merge duplicates, keeping first-seen order of the groups.

        Args:
            tasks: Records from all sources, primary source first

        Returns:
            One canonical Task per logical task
        """
        groups: List[List[Task]] = []

        for task in tasks:
            group = self._find_group(groups, task)
            if group is None:
                groups.append([task])
            else:
                group.append(task)

        merged = [self._merge_group(group) for group in groups]
        if len(merged) < len(tasks):
            logger.info(f"Merged {len(tasks)} task records into {len(merged)} tasks")
        return merged

    def _find_group(self, groups: List[List[Task]], task: Task) -> Optional[List[Task]]:
        for group in groups:
            # one record per source within a group
            if any(member.source == task.source for member in group):
                continue
            if any(self.is_duplicate(member, task) for member in group):
                return group
        return None

    def _merge_group(self, group: List[Task]) -> Task:
        if len(group) == 1:
            return group[0]

        canonical = next((t for t in group if t.source == self.primary), group[0])
        others = [t for t in group if t is not canonical]

        labels = set(canonical.labels)
        assignees = set(canonical.assignees)
        for other in others:
            labels |= other.labels
            assignees |= other.assignees

        body = canonical.body
        if not body.strip():
            body = max((t.body for t in others), key=len, default="")

        dated = [t.created_at for t in group if t.created_at is not None]
        created_at = min(dated) if dated else None

        aliases = list(canonical.aliases)
        for other in others:
            for key in [other.key] + other.aliases:
                if key not in aliases:
                    aliases.append(key)

        logger.debug(f"Merged {[t.key for t in others]} into {canonical.key}")

        return Task(
            id=canonical.id,
            title=canonical.title,
            source=canonical.source,
            body=body,
            labels=labels,
            assignees=assignees,
            created_at=created_at,
            secondary_ref=canonical.secondary_ref or others[0].key,
            url=canonical.url,
            state=canonical.state,
            aliases=aliases,
        )
