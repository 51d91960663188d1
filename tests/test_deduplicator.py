"""
Tests for cross-source task deduplication
"""

from datetime import datetime, timezone

import pytest

from nextup.exceptions import ConfigurationError
from nextup.models import Tracker
from nextup.triage import TaskDeduplicator, normalize_title, token_overlap


class TestNormalization:
    def test_normalize_title(self):
        assert normalize_title("[Bug] Login  fails on Safari!") == "login fails on safari"
        assert normalize_title("[ui][p1] Dark-mode toggle") == "dark mode toggle"
        assert normalize_title("") == ""

    def test_token_overlap(self):
        assert token_overlap("a b c", "a b c") == 1.0
        assert token_overlap("a b", "c d") == 0.0
        assert token_overlap("a b c d", "a b c e") == pytest.approx(3 / 5)
        assert token_overlap("", "a") == 0.0


class TestIsDuplicate:
    def setup_method(self):
        self.dedup = TaskDeduplicator()

    def test_equal_titles(self, task_factory):
        a = task_factory(title="Add dark mode toggle", source=Tracker.GITHUB)
        b = task_factory(title="add dark mode toggle.", source=Tracker.LINEAR)
        assert self.dedup.is_duplicate(a, b)

    def test_containment(self, task_factory):
        a = task_factory(title="Dark mode", source=Tracker.GITHUB)
        b = task_factory(title="Dark mode toggle in settings", source=Tracker.PLANNING_DOC)
        assert self.dedup.is_duplicate(a, b)

    def test_containment_is_by_whole_words(self, task_factory):
        a = task_factory(title="Add log", source=Tracker.GITHUB)
        b = task_factory(title="Add login page", source=Tracker.LINEAR)
        assert not self.dedup.is_duplicate(a, b)
        assert len(self.dedup.merge([a, b])) == 2

    def test_overlap_threshold(self, task_factory):
        a = task_factory(title="Export report as CSV file", source=Tracker.GITHUB)
        b = task_factory(title="Export report as PDF file", source=Tracker.LINEAR)
        # 4 shared of 6 distinct tokens
        assert self.dedup.is_duplicate(a, b)
        assert not TaskDeduplicator(similarity_threshold=0.7).is_duplicate(a, b)

    def test_unrelated(self, task_factory):
        a = task_factory(title="Add dark mode toggle", source=Tracker.GITHUB)
        b = task_factory(title="Fix login crash", source=Tracker.LINEAR)
        assert not self.dedup.is_duplicate(a, b)

    def test_same_source_never_merges(self, task_factory):
        a = task_factory(id="1", title="Dark mode", source=Tracker.GITHUB)
        b = task_factory(id="2", title="Dark mode", source=Tracker.GITHUB)
        assert not self.dedup.is_duplicate(a, b)


class TestMerge:
    def test_primary_record_is_canonical(self, task_factory):
        planning = task_factory(
            id="12",
            title="Dark mode toggle",
            source=Tracker.PLANNING_DOC,
            labels=["effort/small"],
            state="open",
        )
        github = task_factory(
            id="42",
            title="Add dark mode toggle",
            source=Tracker.GITHUB,
            labels=["priority/high"],
            body="Users keep asking",
            created_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
            state="open",
            url="https://github.com/o/r/issues/42",
        )
        linear = task_factory(
            id="ENG-7",
            title="Dark mode toggle",
            source=Tracker.LINEAR,
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
            state="Backlog",
        )
        linear.assignees = {"sam"}

        merged = TaskDeduplicator(primary=Tracker.GITHUB).merge([planning, github, linear])

        assert len(merged) == 1
        task = merged[0]
        assert task.key == "github:42"
        assert task.state == "open"
        assert task.url == "https://github.com/o/r/issues/42"
        assert task.labels == {"priority/high", "effort/small"}
        assert task.assignees == {"sam"}
        assert task.body == "Users keep asking"
        assert task.created_at == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert task.aliases == ["planning_doc:12", "linear:ENG-7"]
        assert task.secondary_ref == "planning_doc:12"

    def test_keeps_existing_secondary_ref(self, task_factory):
        github = task_factory(
            id="1", title="Dark mode", source=Tracker.GITHUB, secondary_ref="linear:ENG-1"
        )
        planning = task_factory(id="3", title="Dark mode", source=Tracker.PLANNING_DOC)
        merged = TaskDeduplicator().merge([github, planning])
        assert merged[0].secondary_ref == "linear:ENG-1"

    def test_first_seen_wins_without_primary(self, task_factory):
        linear = task_factory(id="ENG-1", title="Dark mode", source=Tracker.LINEAR)
        planning = task_factory(id="3", title="Dark mode", source=Tracker.PLANNING_DOC,
                                body="details")
        merged = TaskDeduplicator(primary=Tracker.GITHUB).merge([linear, planning])
        assert merged[0].key == "linear:ENG-1"
        assert merged[0].body == "details"

    def test_order_and_unrelated_tasks_preserved(self, task_factory):
        tasks = [
            task_factory(id="1", title="Login crash", source=Tracker.GITHUB),
            task_factory(id="2", title="Dark mode", source=Tracker.GITHUB),
            task_factory(id="ENG-9", title="Dark mode", source=Tracker.LINEAR),
            task_factory(id="ENG-10", title="Rate limiting", source=Tracker.LINEAR),
        ]
        merged = TaskDeduplicator().merge(tasks)
        assert [t.key for t in merged] == ["github:1", "github:2", "linear:ENG-10"]

    def test_duplicates_within_one_source_kept(self, task_factory):
        tasks = [
            task_factory(id="1", title="Dark mode", source=Tracker.GITHUB),
            task_factory(id="2", title="Dark mode", source=Tracker.GITHUB),
        ]
        assert len(TaskDeduplicator().merge(tasks)) == 2

    def test_invalid_threshold(self):
        with pytest.raises(ConfigurationError):
            TaskDeduplicator(similarity_threshold=0)
        with pytest.raises(ConfigurationError):
            TaskDeduplicator(similarity_threshold=1.5)
