"""
Task Data Models

Normalized task records and the results derived from them during triage.
Nothing here is persisted: records are rebuilt on every invocation.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Set


class Tracker(Enum):
    """Systems of record a task can come from"""

    GITHUB = "github"
    LINEAR = "linear"
    PLANNING_DOC = "planning_doc"
    MANUAL = "manual"


class ValidationStatus(Enum):
    """Whether a task's implementation appears to exist already"""

    PENDING = "pending"
    APPEARS_DONE = "appears-done"
    PARTIALLY_DONE = "partially-done"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string (or datetime) into an aware UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _string_set(data: Dict[str, Any], key: str) -> Set[str]:
    """Read a list-of-strings field; a bare string counts as one item"""
    value = data.get(key)
    if value is None or value == "":
        return set()
    if isinstance(value, str):
        return {value}
    if not isinstance(value, (list, tuple, set)):
        raise ValueError(f"task field '{key}' must be a list, got {type(value).__name__}")
    return {str(item) for item in value}


@dataclass
class Task:
    """A unit of work normalized from any tracker"""

    id: str
    title: str
    source: Tracker
    body: str = ""
    labels: Set[str] = field(default_factory=set)
    assignees: Set[str] = field(default_factory=set)
    created_at: Optional[datetime] = None

    # Cross-referenced entry in another tracker ("linear:ENG-12")
    secondary_ref: Optional[str] = None

    url: Optional[str] = None
    state: Optional[str] = None

    # Keys of records merged into this one by the deduplicator
    aliases: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.id = str(self.id)
        self.labels = set(self.labels)
        self.assignees = set(self.assignees)
        if self.created_at is not None and self.created_at.tzinfo is None:
            self.created_at = self.created_at.replace(tzinfo=timezone.utc)

    @property
    def key(self) -> str:
        return f"{self.source.value}:{self.id}"

    def has_label(self, *names: str) -> bool:
        """Case-insensitive check for any of the given labels"""
        lowered = {label.lower() for label in self.labels}
        return any(name.lower() in lowered for name in names)

    def age_days(self, now: Optional[datetime] = None) -> Optional[float]:
        if self.created_at is None:
            return None
        now = now or datetime.now(timezone.utc)
        return (now - self.created_at).total_seconds() / 86400

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "key": self.key,
            "title": self.title,
            "source": self.source.value,
            "body": self.body,
            "labels": sorted(self.labels),
            "assignees": sorted(self.assignees),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "secondary_ref": self.secondary_ref,
            "url": self.url,
            "state": self.state,
            "aliases": list(self.aliases),
        }

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], default_source: Tracker = Tracker.MANUAL
    ) -> "Task":
        if "id" not in data or "title" not in data:
            raise ValueError("task record requires 'id' and 'title'")
        source = data.get("source")
        return cls(
            id=str(data["id"]),
            title=data["title"],
            source=Tracker(source) if source else default_source,
            body=data.get("body") or "",
            labels=_string_set(data, "labels"),
            assignees=_string_set(data, "assignees"),
            created_at=parse_timestamp(data.get("created_at")),
            secondary_ref=data.get("secondary_ref"),
            url=data.get("url"),
            state=data.get("state"),
            aliases=list(data.get("aliases") or []),
        )


@dataclass
class ValidationResult:
    """Outcome of searching the codebase for a task's implementation"""

    task_key: str
    status: ValidationStatus

    # Files containing at least one keyword, relative to the search root
    evidence: List[str] = field(default_factory=list)

    # Test files that back up the evidence
    test_evidence: List[str] = field(default_factory=list)

    keywords: List[str] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task_key": self.task_key,
            "status": self.status.value,
            "evidence": self.evidence,
            "test_evidence": self.test_evidence,
            "keywords": self.keywords,
            "notes": self.notes,
        }


@dataclass
class ScoreContribution:
    """One additive term of the priority score"""

    signal: str
    points: int
    detail: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"signal": self.signal, "points": self.points, "detail": self.detail}


@dataclass
class ScoredTask:
    """A task with its priority score and the reasons behind it"""

    task: Task
    contributions: List[ScoreContribution] = field(default_factory=list)
    validation: Optional[ValidationResult] = None

    @property
    def score(self) -> int:
        return sum(c.points for c in self.contributions)

    @property
    def reasons(self) -> List[str]:
        return [f"{c.points:+d} {c.detail or c.signal}" for c in self.contributions]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task": self.task.to_dict(),
            "score": self.score,
            "contributions": [c.to_dict() for c in self.contributions],
            "validation": self.validation.to_dict() if self.validation else None,
        }
