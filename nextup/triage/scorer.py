"""
Priority Scorer

Deterministic weighted scoring over task metadata. Every signal is an
independent additive contribution; nothing is mutually exclusive, so a task
carrying both priority/critical and priority/high gets +150.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from ..exceptions import ConfigurationError
from ..models import ScoreContribution, ScoredTask, Task, ValidationResult
from .keywords import extract_keywords

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS: Dict[str, int] = {
    "priority_critical": 100,
    "priority_high": 50,
    "priority_medium": 25,
    "blocker": 30,
    "effort_small": 20,
    "effort_medium": 10,
    "effort_large": -10,
    "recent_work": 15,
    "aged_bug": 10,
    "high_impact": 25,
}

# signal -> labels that trigger it
LABEL_SIGNALS = [
    ("priority_critical", ("priority/critical", "P0")),
    ("priority_high", ("priority/high", "P1")),
    ("priority_medium", ("priority/medium", "P2")),
]

EFFORT_SIGNALS = [
    ("effort_small", ("effort/small",)),
    ("effort_medium", ("effort/medium",)),
    ("effort_large", ("effort/large",)),
]

BLOCKER_PATTERN = re.compile(r"\bblocks\s+#(\d+)", re.IGNORECASE)

BLOCKER_MODES = ("once", "per_reference")

_FAR_FUTURE = datetime.max.replace(tzinfo=timezone.utc)


class PriorityScorer:
    """Scores tasks with a fixed, explainable weighting table"""

    def __init__(
        self,
        weights: Optional[Dict[str, int]] = None,
        aged_bug_days: int = 30,
        blocker_mode: str = "once",
        now: Optional[datetime] = None,
        min_keyword_length: int = 3,
    ):
        """
        Initialize the scorer.

        Args:
            weights: Per-signal overrides of DEFAULT_WEIGHTS
            aged_bug_days: Bugs older than this earn the aged_bug bonus
            blocker_mode: "once" adds the blocker bonus a single time,
                "per_reference" adds it for each distinct issue number
            now: Reference time for age calculations (defaults to current time)
            min_keyword_length: Passed through to keyword extraction
        """
        unknown = set(weights or {}) - set(DEFAULT_WEIGHTS)
        if unknown:
            raise ConfigurationError(
                f"Unknown scoring signal(s): {', '.join(sorted(unknown))}"
            )
        if blocker_mode not in BLOCKER_MODES:
            raise ConfigurationError(
                f"Invalid blocker_mode '{blocker_mode}' (choose from {', '.join(BLOCKER_MODES)})"
            )

        self.weights = {**DEFAULT_WEIGHTS, **(weights or {})}
        self.aged_bug_days = aged_bug_days
        self.blocker_mode = blocker_mode
        self.now = now
        self.min_keyword_length = min_keyword_length

    def score(
        self,
        task: Task,
        validation: Optional[ValidationResult] = None,
        recent_files: Sequence[str] = (),
    ) -> ScoredTask:
        """
        Score a task.

        Args:
            task: Task to score
            validation: Validator outcome, carried through for presentation
            recent_files: Recently changed file paths in the repository

        Returns:
            ScoredTask with one contribution per triggered signal
        """
        contributions: List[ScoreContribution] = []

        for signal, labels in LABEL_SIGNALS:
            if task.has_label(*labels):
                contributions.append(
                    self._contribution(signal, f"{' or '.join(labels)} label")
                )

        contributions.extend(self._blocker_contributions(task.body))

        for signal, labels in EFFORT_SIGNALS:
            if task.has_label(*labels):
                contributions.append(self._contribution(signal, f"{labels[0]} label"))

        recent_hit = self._recent_work_hit(task, recent_files)
        if recent_hit:
            keyword, path = recent_hit
            contributions.append(
                self._contribution(
                    "recent_work", f"'{keyword}' touches recently changed {path}"
                )
            )

        if task.has_label("bug"):
            age = task.age_days(self.now or datetime.now(timezone.utc))
            if age is not None and age > self.aged_bug_days:
                contributions.append(
                    self._contribution("aged_bug", f"bug open for {int(age)} days")
                )

        if task.has_label("impact/high"):
            contributions.append(self._contribution("high_impact", "impact/high label"))

        scored = ScoredTask(task=task, contributions=contributions, validation=validation)
        logger.debug(f"Scored {task.key}: {scored.score} ({len(contributions)} signals)")
        return scored

    def score_many(
        self,
        tasks: Iterable[Task],
        validations: Optional[Dict[str, ValidationResult]] = None,
        recent_files: Sequence[str] = (),
    ) -> List[ScoredTask]:
        validations = validations or {}
        return [
            self.score(task, validations.get(task.key), recent_files) for task in tasks
        ]

    @staticmethod
    def rank(scored: Iterable[ScoredTask]) -> List[ScoredTask]:
        """Highest score first; equal scores ordered by older creation date"""
        return sorted(
            scored,
            key=lambda s: (-s.score, s.task.created_at or _FAR_FUTURE),
        )

    def _contribution(self, signal: str, detail: str) -> ScoreContribution:
        return ScoreContribution(signal=signal, points=self.weights[signal], detail=detail)

    def _blocker_contributions(self, body: str) -> List[ScoreContribution]:
        numbers = []
        for match in BLOCKER_PATTERN.finditer(body or ""):
            if match.group(1) not in numbers:
                numbers.append(match.group(1))

        if not numbers:
            return []
        if self.blocker_mode == "once":
            refs = ", ".join(f"#{n}" for n in numbers)
            return [self._contribution("blocker", f"blocks {refs}")]
        return [self._contribution("blocker", f"blocks #{n}") for n in numbers]

    def _recent_work_hit(self, task: Task, recent_files: Sequence[str]):
        if not recent_files:
            return None
        keywords = extract_keywords(task.title, min_length=self.min_keyword_length)
        lowered_paths = [(path, path.lower()) for path in recent_files]
        for keyword in keywords.all:
            needle = keyword.lower()
            for path, lowered in lowered_paths:
                if needle in lowered:
                    return keyword, path
        return None
