"""
nextup Configuration

Loaded from `.nextup/config.yaml` (root key `nextup:`). Every section falls
back to defaults, so a missing file is a valid configuration.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .exceptions import ConfigurationError
from .models import Tracker
from .triage.code_search import (
    DEFAULT_EXCLUDED_DIRS,
    DEFAULT_FILE_EXTENSIONS,
    DEFAULT_MAX_FILE_SIZE,
    SEARCH_BACKENDS,
)
from .triage.scorer import BLOCKER_MODES, DEFAULT_WEIGHTS

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = ".nextup/config.yaml"

OUTPUT_FORMATS = ("text", "json")


@dataclass
class GitHubSourceConfig:
    enabled: bool = True
    repo: Optional[str] = None
    labels: List[str] = field(default_factory=list)
    limit: int = 100

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GitHubSourceConfig":
        return cls(
            enabled=data.get("enabled", True),
            repo=data.get("repo"),
            labels=list(data.get("labels") or []),
            limit=data.get("limit", 100),
        )


@dataclass
class LinearSourceConfig:
    enabled: bool = False
    team: Optional[str] = None
    api_key_env: str = "LINEAR_API_KEY"
    timeout: float = 30.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LinearSourceConfig":
        return cls(
            enabled=data.get("enabled", False),
            team=data.get("team"),
            api_key_env=data.get("api_key_env", "LINEAR_API_KEY"),
            timeout=data.get("timeout", 30.0),
        )


@dataclass
class PlanningSourceConfig:
    enabled: bool = False
    path: str = "PLAN.md"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlanningSourceConfig":
        return cls(
            enabled=data.get("enabled", False),
            path=data.get("path", "PLAN.md"),
        )


@dataclass
class SourcesConfig:
    """Which trackers to read, and which one is authoritative"""

    primary: str = Tracker.GITHUB.value
    github: GitHubSourceConfig = field(default_factory=GitHubSourceConfig)
    linear: LinearSourceConfig = field(default_factory=LinearSourceConfig)
    planning: PlanningSourceConfig = field(default_factory=PlanningSourceConfig)
    tasks_file: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SourcesConfig":
        return cls(
            primary=data.get("primary", Tracker.GITHUB.value),
            github=GitHubSourceConfig.from_dict(data.get("github") or {}),
            linear=LinearSourceConfig.from_dict(data.get("linear") or {}),
            planning=PlanningSourceConfig.from_dict(data.get("planning") or {}),
            tasks_file=data.get("tasks_file"),
        )

    @property
    def primary_tracker(self) -> Tracker:
        return Tracker(self.primary)

    def validate(self) -> List[str]:
        errors = []
        valid = [t.value for t in Tracker]
        if self.primary not in valid:
            errors.append(f"sources.primary must be one of {', '.join(valid)}")
        if self.github.limit < 1:
            errors.append("sources.github.limit must be at least 1")
        return errors


@dataclass
class ValidationConfig:
    """Code-presence search settings"""

    root_path: str = "."
    backend: str = "auto"
    file_extensions: List[str] = field(
        default_factory=lambda: list(DEFAULT_FILE_EXTENSIONS)
    )
    excluded_dirs: List[str] = field(
        default_factory=lambda: sorted(DEFAULT_EXCLUDED_DIRS)
    )
    case_sensitive: bool = True
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    min_keyword_length: int = 3
    extra_stop_words: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ValidationConfig":
        defaults = cls()
        return cls(
            root_path=data.get("root_path", "."),
            backend=data.get("backend", "auto"),
            file_extensions=list(data.get("file_extensions") or defaults.file_extensions),
            excluded_dirs=list(data.get("excluded_dirs") or defaults.excluded_dirs),
            case_sensitive=data.get("case_sensitive", True),
            max_file_size=data.get("max_file_size", DEFAULT_MAX_FILE_SIZE),
            min_keyword_length=data.get("min_keyword_length", 3),
            extra_stop_words=list(data.get("extra_stop_words") or []),
        )

    def validate(self) -> List[str]:
        errors = []
        if self.backend not in SEARCH_BACKENDS:
            errors.append(
                f"validation.backend must be one of {', '.join(SEARCH_BACKENDS)}"
            )
        if self.min_keyword_length < 1:
            errors.append("validation.min_keyword_length must be at least 1")
        if self.max_file_size < 1:
            errors.append("validation.max_file_size must be positive")
        return errors


@dataclass
class ScoringConfig:
    weights: Dict[str, int] = field(default_factory=dict)
    aged_bug_days: int = 30
    blocker_mode: str = "once"
    recent_days: int = 14
    recent_max_commits: int = 50

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScoringConfig":
        return cls(
            weights=dict(data.get("weights") or {}),
            aged_bug_days=data.get("aged_bug_days", 30),
            blocker_mode=data.get("blocker_mode", "once"),
            recent_days=data.get("recent_days", 14),
            recent_max_commits=data.get("recent_max_commits", 50),
        )

    def validate(self) -> List[str]:
        errors = []
        unknown = set(self.weights) - set(DEFAULT_WEIGHTS)
        if unknown:
            errors.append(f"scoring.weights has unknown signal(s): {', '.join(sorted(unknown))}")
        if self.blocker_mode not in BLOCKER_MODES:
            errors.append(f"scoring.blocker_mode must be one of {', '.join(BLOCKER_MODES)}")
        if self.aged_bug_days < 0:
            errors.append("scoring.aged_bug_days must not be negative")
        return errors


@dataclass
class DedupConfig:
    similarity_threshold: float = 0.6

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DedupConfig":
        return cls(similarity_threshold=data.get("similarity_threshold", 0.6))

    def validate(self) -> List[str]:
        if not 0.0 < self.similarity_threshold <= 1.0:
            return ["dedup.similarity_threshold must be in (0.0, 1.0]"]
        return []


@dataclass
class PresentationConfig:
    top_n: int = 5
    format: str = "text"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PresentationConfig":
        return cls(top_n=data.get("top_n", 5), format=data.get("format", "text"))

    def validate(self) -> List[str]:
        errors = []
        if self.top_n < 1:
            errors.append("presentation.top_n must be at least 1")
        if self.format not in OUTPUT_FORMATS:
            errors.append(f"presentation.format must be one of {', '.join(OUTPUT_FORMATS)}")
        return errors


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: str = ".nextup/nextup.log"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingConfig":
        return cls(
            level=data.get("level", "INFO"),
            file=data.get("file", ".nextup/nextup.log"),
        )


@dataclass
class NextupConfig:
    sources: SourcesConfig = field(default_factory=SourcesConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    dedup: DedupConfig = field(default_factory=DedupConfig)
    presentation: PresentationConfig = field(default_factory=PresentationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NextupConfig":
        section = data.get("nextup", data) or {}
        if not isinstance(section, dict):
            raise ConfigurationError("'nextup' configuration must be a mapping")
        return cls(
            sources=SourcesConfig.from_dict(section.get("sources") or {}),
            validation=ValidationConfig.from_dict(section.get("validation") or {}),
            scoring=ScoringConfig.from_dict(section.get("scoring") or {}),
            dedup=DedupConfig.from_dict(section.get("dedup") or {}),
            presentation=PresentationConfig.from_dict(section.get("presentation") or {}),
            logging=LoggingConfig.from_dict(section.get("logging") or {}),
        )

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors"""
        return (
            self.sources.validate()
            + self.validation.validate()
            + self.scoring.validate()
            + self.dedup.validate()
            + self.presentation.validate()
        )


def resolve_config_path(config_path: Optional[str] = None) -> str:
    return config_path or os.environ.get("NEXTUP_CONFIG") or DEFAULT_CONFIG_PATH


def load_config(config_path: Optional[str] = None) -> NextupConfig:
    """
    Load and validate configuration.

    Args:
        config_path: YAML file; defaults to $NEXTUP_CONFIG, then .nextup/config.yaml

    Raises:
        ConfigurationError: the file is not valid YAML or fails validation
    """
    path = Path(resolve_config_path(config_path))

    if not path.exists():
        logger.debug(f"No config file at {path}, using defaults")
        data: Dict[str, Any] = {}
    else:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML config {path}: {e}")
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

    config = NextupConfig.from_dict(data)
    errors = config.validate()
    if errors:
        raise ConfigurationError("Invalid configuration:\n  " + "\n  ".join(errors))
    return config


DEFAULT_CONFIG_TEMPLATE = """\
# nextup configuration
nextup:
  sources:
    # Tracker whose status fields win when duplicates are merged
    primary: github
    github:
      enabled: true
      # repo: owner/name   (defaults to the current checkout)
      labels: []
      limit: 100
    linear:
      enabled: false
      team: null
      api_key_env: LINEAR_API_KEY
    planning:
      enabled: false
      path: PLAN.md
    # tasks_file: tasks.json

  validation:
    root_path: "."
    backend: auto          # auto | python | ripgrep
    case_sensitive: true
    min_keyword_length: 3
    extra_stop_words: []

  scoring:
    aged_bug_days: 30
    blocker_mode: once     # once | per_reference
    recent_days: 14
    recent_max_commits: 50
    weights: {}            # e.g. {effort_large: -20}

  dedup:
    similarity_threshold: 0.6

  presentation:
    top_n: 5
    format: text

  logging:
    level: INFO
    file: .nextup/nextup.log
"""
