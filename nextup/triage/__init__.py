"""
Task Triage Module

Provides the building blocks of a recommendation:
- Keyword extraction from task titles
- Code-presence validation (is the task already implemented?)
- Priority scoring with an explainable weighting table
- Cross-source deduplication and aggregation
- Top-N presentation
- Environment probing (platform, git, gh, rg)
"""

from .aggregator import AggregationResult, TaskAggregator
from .capability_scanner import (
    EnvironmentCapabilities,
    EnvironmentScanner,
    ToolCapability,
)
from .code_search import (
    CodeSearcher,
    PythonCodeSearcher,
    RipgrepCodeSearcher,
    create_searcher,
)
from .deduplicator import TaskDeduplicator, normalize_title, token_overlap
from .keywords import KeywordSet, extract_keywords
from .presenter import Recommendation, RecommendationPresenter
from .scorer import DEFAULT_WEIGHTS, PriorityScorer
from .validator import CodePresenceValidator, is_test_file

__all__ = [
    # Validation
    "CodePresenceValidator",
    "is_test_file",
    "KeywordSet",
    "extract_keywords",
    "CodeSearcher",
    "PythonCodeSearcher",
    "RipgrepCodeSearcher",
    "create_searcher",
    # Scoring
    "PriorityScorer",
    "DEFAULT_WEIGHTS",
    # Aggregation
    "TaskAggregator",
    "AggregationResult",
    "TaskDeduplicator",
    "normalize_title",
    "token_overlap",
    # Presentation
    "Recommendation",
    "RecommendationPresenter",
    # Environment
    "EnvironmentScanner",
    "EnvironmentCapabilities",
    "ToolCapability",
]
