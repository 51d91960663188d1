"""
Review Loop

The multi-agent review of a change set happens outside nextup. This module
only models it as a black-box collaborator and bounds how many revision
rounds are attempted.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Protocol, Sequence

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 3


@dataclass
class ReviewVerdict:
    """One review pass: approved, or a list of requested revisions"""

    approved: bool
    revision_requests: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"approved": self.approved, "revision_requests": self.revision_requests}


@dataclass
class ReviewOutcome:
    approved: bool
    iterations: int
    verdicts: List[ReviewVerdict] = field(default_factory=list)
    change_set: Any = None

    @property
    def outstanding_requests(self) -> List[str]:
        if self.approved or not self.verdicts:
            return []
        return self.verdicts[-1].revision_requests

    def to_dict(self) -> Dict[str, Any]:
        return {
            "approved": self.approved,
            "iterations": self.iterations,
            "verdicts": [v.to_dict() for v in self.verdicts],
        }


class ReviewCollaborator(Protocol):
    def review(self, change_set: Any, criteria: Sequence[str]) -> ReviewVerdict: ...


Reviser = Callable[[Any, List[str]], Any]


class ReviewLoop:
    """Review, revise, and re-review until approved or out of iterations"""

    def __init__(
        self,
        collaborator: ReviewCollaborator,
        reviser: Reviser,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ):
        if max_iterations < 1:
            raise ConfigurationError("max_iterations must be at least 1")
        self.collaborator = collaborator
        self.reviser = reviser
        self.max_iterations = max_iterations

    def run(self, change_set: Any, criteria: Sequence[str]) -> ReviewOutcome:
        verdicts: List[ReviewVerdict] = []

        for iteration in range(1, self.max_iterations + 1):
            verdict = self.collaborator.review(change_set, criteria)
            verdicts.append(verdict)

            if verdict.approved:
                logger.info(f"✅ Change set approved after {iteration} review(s)")
                return ReviewOutcome(True, iteration, verdicts, change_set)

            logger.info(
                f"🔁 Review {iteration}/{self.max_iterations}: "
                f"{len(verdict.revision_requests)} revision request(s)"
            )
            if iteration < self.max_iterations:
                change_set = self.reviser(change_set, verdict.revision_requests)

        logger.warning(f"⚠️ Not approved after {self.max_iterations} review(s)")
        return ReviewOutcome(False, self.max_iterations, verdicts, change_set)
