"""
Recommendation Presenter

Turns a ranked list of scored tasks into the top-N explained summary.
Tasks the validator resolved as appears-done are dropped before the cut.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from ..models import ScoredTask, ValidationStatus

MAX_EVIDENCE_SHOWN = 5

STATUS_ICONS = {
    ValidationStatus.PENDING: "⏳",
    ValidationStatus.PARTIALLY_DONE: "🚧",
    ValidationStatus.APPEARS_DONE: "✅",
}


@dataclass
class Recommendation:
    """A ranked, explained candidate task"""

    rank: int
    scored: ScoredTask

    def to_dict(self) -> Dict[str, Any]:
        return {"rank": self.rank, **self.scored.to_dict()}


class RecommendationPresenter:
    def __init__(self, top_n: int = 5):
        self.top_n = top_n

    def select(self, ranked: Sequence[ScoredTask]) -> List[Recommendation]:
        """Drop appears-done tasks and keep the first top_n"""
        candidates = [
            s
            for s in ranked
            if not (s.validation and s.validation.status == ValidationStatus.APPEARS_DONE)
        ]
        return [
            Recommendation(rank=i, scored=s)
            for i, s in enumerate(candidates[: self.top_n], start=1)
        ]

    def render_text(
        self, recommendations: Sequence[Recommendation], warnings: Sequence[str] = ()
    ) -> str:
        lines = []

        for warning in warnings:
            lines.append(f"⚠️  {warning}")
        if warnings:
            lines.append("")

        if not recommendations:
            lines.append("No open tasks to recommend.")
            return "\n".join(lines)

        lines.append(f"🎯 Top {len(recommendations)} recommended task(s)")
        lines.append("=" * 60)

        for rec in recommendations:
            task = rec.scored.task
            lines.append("")
            lines.append(f"{rec.rank}. [{task.key}] {task.title}")
            lines.append(f"   Score: {rec.scored.score}")
            if task.url:
                lines.append(f"   Link: {task.url}")
            if task.aliases:
                lines.append(f"   Also tracked as: {', '.join(task.aliases)}")

            if rec.scored.contributions:
                lines.append("   Why:")
                for contribution in rec.scored.contributions:
                    lines.append(f"     {contribution.points:+4d}  {contribution.detail}")
            else:
                lines.append("   Why: no scoring signals")

            validation = rec.scored.validation
            if validation:
                icon = STATUS_ICONS.get(validation.status, "")
                lines.append(f"   Status: {icon} {validation.status.value}")
                for path in validation.evidence[:MAX_EVIDENCE_SHOWN]:
                    lines.append(f"     - {path}")
                hidden = len(validation.evidence) - MAX_EVIDENCE_SHOWN
                if hidden > 0:
                    lines.append(f"     ... and {hidden} more")

        return "\n".join(lines)

    def render_json(
        self, recommendations: Sequence[Recommendation], warnings: Sequence[str] = ()
    ) -> str:
        return json.dumps(
            {
                "recommendations": [r.to_dict() for r in recommendations],
                "warnings": list(warnings),
            },
            indent=2,
            ensure_ascii=False,
        )
