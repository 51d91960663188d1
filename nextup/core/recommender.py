"""
Task Recommender

Main orchestrator for a single triage run: aggregate tasks from all sources,
merge duplicates, check each against the codebase, score, rank, and keep the
top candidates.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from ..config import NextupConfig
from ..models import ScoredTask, Tracker, ValidationStatus
from ..sources import (
    GitHubIssueSource,
    JsonFileSource,
    LinearIssueSource,
    PlanningDocSource,
    TaskSource,
)
from ..triage.aggregator import TaskAggregator
from ..triage.deduplicator import TaskDeduplicator
from ..triage.presenter import Recommendation, RecommendationPresenter
from ..triage.scorer import PriorityScorer
from ..triage.validator import CodePresenceValidator
from ..utils.git_operations import GitOperations

logger = logging.getLogger(__name__)


@dataclass
class RecommendationReport:
    """Everything produced by one recommendation run"""

    recommendations: List[Recommendation] = field(default_factory=list)

    # All scored tasks, best first, including those dropped as appears-done
    ranked: List[ScoredTask] = field(default_factory=list)

    warnings: List[str] = field(default_factory=list)
    failed_sources: List[str] = field(default_factory=list)
    fetched_count: int = 0
    recent_files: List[str] = field(default_factory=list)
    generated_at: Optional[datetime] = None

    @property
    def done_count(self) -> int:
        return sum(
            1
            for s in self.ranked
            if s.validation and s.validation.status == ValidationStatus.APPEARS_DONE
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recommendations": [r.to_dict() for r in self.recommendations],
            "ranked": [s.to_dict() for s in self.ranked],
            "warnings": self.warnings,
            "failed_sources": self.failed_sources,
            "fetched_count": self.fetched_count,
            "done_count": self.done_count,
            "recent_files": self.recent_files,
            "generated_at": self.generated_at.isoformat() if self.generated_at else None,
        }


def build_sources(
    config: NextupConfig,
    tasks_file: Optional[str] = None,
    use_github: bool = True,
    use_linear: bool = True,
    use_planning: bool = True,
) -> List[TaskSource]:
    """
    Create task sources from configuration, primary source first.

    The source matching `sources.primary` is the primary one. When no enabled
    source matches it, the first enabled source is treated as primary.
    """
    sources_config = config.sources
    sources: List[TaskSource] = []

    tasks_file = tasks_file or sources_config.tasks_file
    if tasks_file:
        sources.append(JsonFileSource(tasks_file, primary=False))

    if use_github and sources_config.github.enabled:
        sources.append(
            GitHubIssueSource(
                repo=sources_config.github.repo,
                labels=sources_config.github.labels,
                limit=sources_config.github.limit,
                primary=False,
            )
        )

    if use_linear and sources_config.linear.enabled:
        sources.append(
            LinearIssueSource(
                team=sources_config.linear.team,
                api_key_env=sources_config.linear.api_key_env,
                timeout=sources_config.linear.timeout,
                primary=False,
            )
        )

    if use_planning and sources_config.planning.enabled:
        sources.append(PlanningDocSource(sources_config.planning.path, primary=False))

    if not sources:
        return sources

    primary = next(
        (s for s in sources if s.tracker == sources_config.primary_tracker), sources[0]
    )
    primary.primary = True
    sources.remove(primary)
    return [primary] + sources


class TaskRecommender:
    """
    Produces ranked, explained task recommendations.

    Each collaborator can be injected; anything not supplied is built from the
    configuration. Nothing is cached between runs.
    """

    def __init__(
        self,
        config: Optional[NextupConfig] = None,
        sources: Optional[Sequence[TaskSource]] = None,
        validator: Optional[CodePresenceValidator] = None,
        scorer: Optional[PriorityScorer] = None,
        deduplicator: Optional[TaskDeduplicator] = None,
        presenter: Optional[RecommendationPresenter] = None,
        git_ops: Optional[GitOperations] = None,
    ):
        """
        Raises:
            ConfigurationError: the validation root is invalid
            ToolUnavailableError: the configured search backend is missing
        """
        self.config = config or NextupConfig()
        validation = self.config.validation
        scoring = self.config.scoring

        self.sources = list(sources) if sources is not None else build_sources(self.config)

        self.validator = validator or CodePresenceValidator(
            validation.root_path,
            backend=validation.backend,
            file_extensions=validation.file_extensions,
            excluded_dirs=validation.excluded_dirs,
            case_sensitive=validation.case_sensitive,
            max_file_size=validation.max_file_size,
            min_keyword_length=validation.min_keyword_length,
            extra_stop_words=validation.extra_stop_words,
        )
        self.scorer = scorer or PriorityScorer(
            weights=scoring.weights,
            aged_bug_days=scoring.aged_bug_days,
            blocker_mode=scoring.blocker_mode,
            min_keyword_length=validation.min_keyword_length,
        )

        primary = next((s.tracker for s in self.sources if s.primary), Tracker.GITHUB)
        self.deduplicator = deduplicator or TaskDeduplicator(
            primary=primary,
            similarity_threshold=self.config.dedup.similarity_threshold,
        )
        self.presenter = presenter or RecommendationPresenter(
            top_n=self.config.presentation.top_n
        )
        self.git_ops = git_ops or GitOperations(validation.root_path)

    async def recommend(self) -> RecommendationReport:
        """
        Run the full pipeline once.

        Raises:
            SourceFetchError: the primary source could not be read
            ToolUnavailableError: code search could not run
        """
        aggregation = await TaskAggregator(self.sources).collect()
        tasks = self.deduplicator.merge(aggregation.tasks)
        logger.info(f"🔍 Validating {len(tasks)} task(s) against the codebase")

        validations = {task.key: self.validator.validate(task) for task in tasks}

        recent_files = self.git_ops.recently_changed_files(
            since_days=self.config.scoring.recent_days,
            max_commits=self.config.scoring.recent_max_commits,
        )

        scored = self.scorer.score_many(tasks, validations, recent_files)
        ranked = self.scorer.rank(scored)
        recommendations = self.presenter.select(ranked)

        report = RecommendationReport(
            recommendations=recommendations,
            ranked=ranked,
            warnings=aggregation.warnings,
            failed_sources=aggregation.failed_sources,
            fetched_count=len(aggregation.tasks),
            recent_files=recent_files,
            generated_at=datetime.now(timezone.utc),
        )

        logger.info(
            f"🎯 {len(recommendations)} recommendation(s) from {len(tasks)} task(s), "
            f"{report.done_count} already done"
        )
        return report

    def render(self, report: RecommendationReport, output_format: Optional[str] = None) -> str:
        output_format = output_format or self.config.presentation.format
        if output_format == "json":
            return self.presenter.render_json(report.recommendations, report.warnings)
        return self.presenter.render_text(report.recommendations, report.warnings)
