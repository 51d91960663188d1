#!/usr/bin/env python3
"""
Triage Example

Demonstrates nextup's building blocks without any tracker access:
scoring hand-written tasks, checking one against a source tree, and
running the bounded review loop with a scripted reviewer.
"""

import asyncio
from datetime import datetime, timedelta, timezone

from nextup.config import NextupConfig
from nextup.core.recommender import TaskRecommender
from nextup.models import Task, Tracker
from nextup.review import ReviewLoop, ReviewVerdict
from nextup.sources.base import TaskSource
from nextup.triage import PriorityScorer


def example_scoring():
    """Example: Explaining a priority score"""
    print("=" * 60)
    print("Example 1: Priority Scoring")
    print("=" * 60)

    now = datetime.now(timezone.utc)
    task = Task(
        id="77",
        title="Login crashes on expired session",
        source=Tracker.GITHUB,
        body="blocks #80",
        labels={"bug", "priority/critical", "effort/small"},
        created_at=now - timedelta(days=40),
    )

    scored = PriorityScorer(now=now).score(task)
    print(f"\n[{task.key}] {task.title}")
    print(f"  score: {scored.score}")
    for reason in scored.reasons:
        print(f"  {reason}")


class InlineSource(TaskSource):
    """Serves a fixed list of tasks"""

    tracker = Tracker.MANUAL

    def __init__(self, tasks):
        super().__init__(name="inline", primary=True)
        self.tasks = tasks

    async def fetch(self):
        return list(self.tasks)


async def example_recommend():
    """Example: Recommending against this checkout"""
    print("\n" + "=" * 60)
    print("Example 2: Recommendations for the current directory")
    print("=" * 60)

    config = NextupConfig()
    config.validation.backend = "python"

    source = InlineSource(
        [
            Task(id="1", title="Add PriorityScorer weights table", source=Tracker.MANUAL),
            Task(
                id="2",
                title="Export recommendations as CSV",
                source=Tracker.MANUAL,
                labels={"effort/small"},
            ),
        ]
    )

    recommender = TaskRecommender(config, sources=[source])
    report = await recommender.recommend()
    print()
    print(recommender.render(report))


def example_review_loop():
    """Example: Bounded review of a change set"""
    print("\n" + "=" * 60)
    print("Example 3: Review Loop")
    print("=" * 60)

    class PickyReviewer:
        def __init__(self):
            self.rounds = 0

        def review(self, change_set, criteria):
            self.rounds += 1
            if self.rounds < 2:
                return ReviewVerdict(approved=False, revision_requests=["add tests"])
            return ReviewVerdict(approved=True)

    def revise(change_set, requests):
        return change_set + requests

    outcome = ReviewLoop(PickyReviewer(), revise).run(["initial diff"], ["tests pass"])
    print(f"\n  approved: {outcome.approved}")
    print(f"  iterations: {outcome.iterations}")
    print(f"  change set: {outcome.change_set}")


if __name__ == "__main__":
    example_scoring()
    asyncio.run(example_recommend())
    example_review_loop()
