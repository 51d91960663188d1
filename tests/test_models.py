"""
Tests for task data models
"""

from datetime import datetime, timezone

import pytest

from nextup.models import (
    ScoreContribution,
    ScoredTask,
    Task,
    Tracker,
    ValidationResult,
    ValidationStatus,
    parse_timestamp,
)


class TestParseTimestamp:
    def test_zulu(self):
        assert parse_timestamp("2024-05-01T10:00:00Z") == datetime(
            2024, 5, 1, 10, tzinfo=timezone.utc
        )

    def test_naive_is_utc(self):
        assert parse_timestamp("2024-05-01T10:00:00").tzinfo == timezone.utc

    @pytest.mark.parametrize("value", [None, "", "yesterday"])
    def test_unparseable(self, value):
        assert parse_timestamp(value) is None


class TestTask:
    def test_key_and_labels(self, task_factory):
        task = task_factory(id=42, title="Crash", labels=["Bug", "P1"])
        assert task.key == "github:42"
        assert task.has_label("bug")
        assert task.has_label("p0", "p1")
        assert not task.has_label("p2")

    def test_age_days(self, task_factory, now):
        task = task_factory(created_at=datetime(2024, 5, 22, 12, tzinfo=timezone.utc))
        assert task.age_days(now) == pytest.approx(10.0)
        assert task_factory().age_days(now) is None

    def test_dict_round_trip(self, task_factory, now):
        task = task_factory(
            id="ENG-7",
            title="Dark mode",
            source=Tracker.LINEAR,
            labels=["ui", "P1"],
            created_at=now,
            secondary_ref="github:42",
            aliases=["planning_doc:12"],
        )

        data = task.to_dict()
        assert data["labels"] == ["P1", "ui"]
        assert Task.from_dict(data) == task

    def test_from_dict_default_source(self):
        task = Task.from_dict({"id": 3, "title": "Write docs"}, Tracker.PLANNING_DOC)
        assert task.key == "planning_doc:3"

    def test_from_dict_requires_title(self):
        with pytest.raises(ValueError):
            Task.from_dict({"id": 3})

    def test_from_dict_bare_string_labels(self):
        task = Task.from_dict({"id": 3, "title": "x", "labels": "bug", "assignees": "sam"})
        assert task.labels == {"bug"}
        assert task.assignees == {"sam"}

    def test_from_dict_rejects_mapping_labels(self):
        with pytest.raises(ValueError, match="labels"):
            Task.from_dict({"id": 3, "title": "x", "labels": {"bug": True}})

    def test_from_dict_unknown_source(self):
        with pytest.raises(ValueError):
            Task.from_dict({"id": 3, "title": "x", "source": "jira"})


class TestScoredTask:
    def test_score_is_sum_of_contributions(self, task_factory):
        scored = ScoredTask(
            task=task_factory(),
            contributions=[
                ScoreContribution("priority_high", 50, "priority/high"),
                ScoreContribution("effort_large", -10, "effort/large"),
            ],
            validation=ValidationResult("github:1", ValidationStatus.PENDING),
        )

        assert scored.score == 40
        assert scored.reasons == ["+50 priority/high", "-10 effort/large"]
        data = scored.to_dict()
        assert data["score"] == 40
        assert data["validation"]["status"] == "pending"

    def test_no_contributions(self, task_factory):
        assert ScoredTask(task=task_factory()).score == 0
