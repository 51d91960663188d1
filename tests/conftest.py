"""
Pytest configuration and fixtures for nextup tests
"""

import json
import logging
import shutil
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from nextup.models import Task, Tracker

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests"""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path

    # Close logging handlers that might be holding files open
    for handler in logging.root.handlers[:]:
        handler.close()
        logging.root.removeHandler(handler)

    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def source_tree(temp_dir):
    """A small project with source, tests, and ignored directories"""
    root = temp_dir / "project"
    (root / "src" / "auth").mkdir(parents=True)
    (root / "src" / "ui").mkdir(parents=True)
    (root / "tests").mkdir()
    (root / "node_modules" / "lib").mkdir(parents=True)

    (root / "src" / "auth" / "session.py").write_text(
        "class SessionManager:\n    def refresh_token(self):\n        pass\n"
    )
    (root / "src" / "ui" / "theme.ts").write_text(
        "export const palette = { primary: '#fff' };\n"
    )
    (root / "src" / "export.py").write_text("def export_csv(rows):\n    return rows\n")
    (root / "tests" / "test_session.py").write_text(
        "from src.auth.session import SessionManager\n"
    )
    (root / "node_modules" / "lib" / "index.js").write_text("// SessionManager toggle\n")
    (root / "README.md").write_text("# SessionManager docs\n")

    return root


def make_task(
    id="1",
    title="Untitled",
    labels=(),
    body="",
    source=Tracker.GITHUB,
    created_at=None,
    **kwargs,
):
    return Task(
        id=id,
        title=title,
        source=source,
        body=body,
        labels=set(labels),
        created_at=created_at,
        **kwargs,
    )


@pytest.fixture
def task_factory():
    return make_task


@pytest.fixture
def sample_tasks(now):
    """Sample task records as they appear in a task file"""
    return [
        {
            "id": "101",
            "title": "Fix crash in SessionManager refresh",
            "body": "Crashes when the token expires. blocks #77",
            "labels": ["bug", "priority/high"],
            "created_at": (now - timedelta(days=45)).isoformat(),
            "source": "github",
        },
        {
            "id": "102",
            "title": "Add dark mode toggle",
            "body": "",
            "labels": ["effort/medium"],
            "created_at": (now - timedelta(days=5)).isoformat(),
            "source": "github",
        },
        {
            "id": "103",
            "title": "Document release process",
            "body": "",
            "labels": ["effort/small"],
            "created_at": (now - timedelta(days=2)).isoformat(),
            "source": "github",
        },
    ]


@pytest.fixture
def tasks_file(temp_dir, sample_tasks):
    path = temp_dir / "tasks.json"
    path.write_text(json.dumps(sample_tasks))
    return path


@pytest.fixture
def nextup_config():
    """Sample nextup configuration for testing"""
    return {
        "nextup": {
            "sources": {
                "primary": "manual",
                "github": {"enabled": False},
                "linear": {"enabled": False},
                "planning": {"enabled": False},
            },
            "validation": {"root_path": ".", "backend": "python"},
            "scoring": {"aged_bug_days": 30, "blocker_mode": "once"},
            "dedup": {"similarity_threshold": 0.6},
            "presentation": {"top_n": 5, "format": "text"},
            "logging": {"level": "INFO", "file": ".nextup/nextup.log"},
        }
    }


@pytest.fixture
def nextup_config_file(temp_dir, nextup_config):
    """Write the sample configuration to disk"""
    config_dir = temp_dir / ".nextup"
    config_dir.mkdir()
    config_file = config_dir / "config.yaml"
    nextup_config["nextup"]["logging"]["file"] = str(config_dir / "nextup.log")
    with open(config_file, "w") as f:
        yaml.dump(nextup_config, f)
    return config_file


@pytest.fixture
def cli_runner():
    """Click CLI test runner"""
    return CliRunner()
