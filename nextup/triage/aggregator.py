"""
Task Aggregator

Fetches tasks from every configured source, in order. A failing optional
source is reported and skipped; a failing primary source aborts the run.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from ..exceptions import ConfigurationError, SourceFetchError
from ..models import Task
from ..sources.base import TaskSource

logger = logging.getLogger(__name__)


@dataclass
class AggregationResult:
    tasks: List[Task] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    failed_sources: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tasks": [t.to_dict() for t in self.tasks],
            "warnings": self.warnings,
            "failed_sources": self.failed_sources,
        }


class TaskAggregator:
    def __init__(self, sources: Sequence[TaskSource]):
        self.sources = list(sources)

    async def collect(self) -> AggregationResult:
        """
        Fetch tasks from all sources.

        Returns:
            AggregationResult with tasks in source order

        Raises:
            ConfigurationError: no sources are configured
            SourceFetchError: the primary source could not be read
        """
        if not self.sources:
            raise ConfigurationError("No task sources configured")

        result = AggregationResult()

        for source in self.sources:
            try:
                tasks = await source.fetch()
            except SourceFetchError as e:
                if source.primary:
                    logger.error(f"❌ Primary source failed: {e}")
                    raise
                warning = f"{source.name}: source unavailable, continuing with remaining sources"
                logger.warning(f"⚠️ {warning} ({e})")
                result.warnings.append(warning)
                result.failed_sources.append(source.name)
                continue

            result.tasks.extend(tasks)

        logger.debug(
            f"Collected {len(result.tasks)} tasks from "
            f"{len(self.sources) - len(result.failed_sources)} source(s)"
        )
        return result
