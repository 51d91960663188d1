"""
Environment Capability Scanner

Detects the platform, the primary language of the source tree, and which
external tools (git, gh, rg) nextup can rely on. Backs `nextup doctor`.
"""

import logging
import os
import platform
import shutil
import subprocess
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .code_search import DEFAULT_EXCLUDED_DIRS
from .validator import TEST_DIRECTORIES

logger = logging.getLogger(__name__)


@dataclass
class ToolCapability:
    """An external tool and whether it is usable"""

    name: str
    purpose: str
    available: bool = False
    path: Optional[str] = None
    version: Optional[str] = None
    required: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "purpose": self.purpose,
            "available": self.available,
            "path": self.path,
            "version": self.version,
            "required": self.required,
        }


@dataclass
class EnvironmentCapabilities:
    """What the current machine and source tree offer"""

    project_root: str
    platform: str
    platform_release: str = ""
    python_version: str = ""
    language: str = "unknown"

    tools: List[ToolCapability] = field(default_factory=list)
    test_dirs: List[str] = field(default_factory=list)

    scan_timestamp: Optional[datetime] = None
    scan_duration_ms: int = 0
    warnings: List[str] = field(default_factory=list)

    def tool(self, name: str) -> Optional[ToolCapability]:
        return next((t for t in self.tools if t.name == name), None)

    def has_tool(self, name: str) -> bool:
        tool = self.tool(name)
        return bool(tool and tool.available)

    @property
    def missing_required(self) -> List[str]:
        return [t.name for t in self.tools if t.required and not t.available]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_root": self.project_root,
            "platform": self.platform,
            "platform_release": self.platform_release,
            "python_version": self.python_version,
            "language": self.language,
            "tools": [t.to_dict() for t in self.tools],
            "test_dirs": self.test_dirs,
            "scan_timestamp": (
                self.scan_timestamp.isoformat() if self.scan_timestamp else None
            ),
            "scan_duration_ms": self.scan_duration_ms,
            "warnings": self.warnings,
        }


class EnvironmentScanner:
    """
    Probes the environment nextup runs in.

    Detects:
    - Operating system and Python version
    - Primary language of the project (from manifest files)
    - git (recent-work context), gh (GitHub issues), rg (fast code search)
    - Test directories used to back up validation evidence
    """

    TOOLS = {
        "git": {"purpose": "recent-work context", "required": True},
        "gh": {"purpose": "GitHub issue source", "required": False},
        "rg": {"purpose": "ripgrep search backend", "required": False},
    }

    LANGUAGE_INDICATORS = {
        "Cargo.toml": "rust",
        "go.mod": "go",
        "tsconfig.json": "typescript",
        "package.json": "javascript",
        "pyproject.toml": "python",
        "setup.py": "python",
        "requirements.txt": "python",
        "pom.xml": "java",
        "build.gradle": "java",
        "Gemfile": "ruby",
    }

    def __init__(self, root_path: Optional[str] = None):
        self.root_path = os.path.abspath(root_path or ".")
        self._file_cache: Dict[str, bool] = {}

    async def scan(self) -> EnvironmentCapabilities:
        start_time = datetime.now(timezone.utc)
        warnings = []

        if not os.path.isdir(self.root_path):
            warnings.append(f"Project root does not exist: {self.root_path}")

        tools = [self._detect_tool(name, info) for name, info in self.TOOLS.items()]
        for tool in tools:
            if not tool.available:
                level = "required" if tool.required else "optional"
                warnings.append(f"{tool.name} not found ({level}: {tool.purpose})")

        scan_duration = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000

        return EnvironmentCapabilities(
            project_root=self.root_path,
            platform=platform.system().lower() or "unknown",
            platform_release=platform.release(),
            python_version=platform.python_version(),
            language=await self._detect_primary_language(),
            tools=tools,
            test_dirs=self._find_test_dirs(),
            scan_timestamp=start_time,
            scan_duration_ms=int(scan_duration),
            warnings=warnings,
        )

    def _detect_tool(self, name: str, info: Dict[str, Any]) -> ToolCapability:
        tool = ToolCapability(
            name=name, purpose=info["purpose"], required=info["required"]
        )
        tool.path = shutil.which(name)
        tool.available = tool.path is not None
        if tool.available:
            tool.version = self._tool_version(tool.path)
        return tool

    def _tool_version(self, path: str) -> Optional[str]:
        try:
            result = subprocess.run(
                [path, "--version"], capture_output=True, text=True, timeout=10
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug(f"Could not read version of {path}: {e}")
            return None
        first_line = (result.stdout or "").strip().splitlines()
        return first_line[0] if first_line else None

    async def _detect_primary_language(self) -> str:
        detected = []
        for file, lang in self.LANGUAGE_INDICATORS.items():
            if await self._file_exists(file) and lang not in detected:
                detected.append(lang)

        # typescript projects also carry package.json
        if "typescript" in detected and "javascript" in detected:
            detected.remove("javascript")

        if not detected:
            return "unknown"
        if len(detected) > 1:
            return "mixed"
        return detected[0]

    def _find_test_dirs(self) -> List[str]:
        found = []
        for dirpath, dirnames, _ in os.walk(self.root_path):
            dirnames[:] = sorted(d for d in dirnames if d not in DEFAULT_EXCLUDED_DIRS)
            for dirname in dirnames:
                if dirname in TEST_DIRECTORIES:
                    rel = os.path.relpath(os.path.join(dirpath, dirname), self.root_path)
                    found.append(rel.replace(os.sep, "/"))
        return found

    async def _file_exists(self, filename: str) -> bool:
        """Check if a file exists (with caching)."""
        if filename in self._file_cache:
            return self._file_cache[filename]

        exists = os.path.isfile(os.path.join(self.root_path, filename))
        self._file_cache[filename] = exists
        return exists

    def get_summary(self, capabilities: EnvironmentCapabilities) -> str:
        """Get a human-readable summary of the environment."""
        lines = [
            f"Platform: {capabilities.platform} {capabilities.platform_release}".rstrip(),
            f"Python: {capabilities.python_version}",
            f"Project: {capabilities.project_root} ({capabilities.language})",
            "",
            "Tools:",
        ]

        for tool in capabilities.tools:
            mark = "✅" if tool.available else ("❌" if tool.required else "➖")
            detail = tool.version or tool.path or "not found"
            lines.append(f"  {mark} {tool.name:<4} {detail}  [{tool.purpose}]")

        if capabilities.test_dirs:
            lines.append("")
            lines.append(f"Test directories: {', '.join(capabilities.test_dirs)}")

        return "\n".join(lines)
