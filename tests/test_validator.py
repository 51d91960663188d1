"""
Tests for the Code-Presence Validator and its search backends
"""

from subprocess import CompletedProcess
from unittest.mock import patch

import pytest

from nextup.exceptions import ConfigurationError, SearchError, ToolUnavailableError
from nextup.models import ValidationStatus
from nextup.triage import (
    CodePresenceValidator,
    PythonCodeSearcher,
    RipgrepCodeSearcher,
    create_searcher,
    is_test_file,
)


@pytest.fixture
def validator(source_tree):
    return CodePresenceValidator(str(source_tree), backend="python")


class TestValidationStatus:
    def test_matches_with_test_file_appear_done(self, validator, task_factory):
        task = task_factory(title="Fix crash in SessionManager")
        result = validator.validate(task)

        assert result.status == ValidationStatus.APPEARS_DONE
        assert result.evidence == ["src/auth/session.py", "tests/test_session.py"]
        assert result.test_evidence == ["tests/test_session.py"]
        assert result.keywords == ["SessionManager", "crash"]
        assert result.task_key == "github:1"

    def test_matches_without_tests_partially_done(self, validator, task_factory):
        result = validator.validate(task_factory(title="Add CSV export"))

        assert result.status == ValidationStatus.PARTIALLY_DONE
        assert result.evidence == ["src/export.py", "src/ui/theme.ts"]
        assert result.test_evidence == []

    def test_no_matches_pending(self, validator, task_factory):
        result = validator.validate(task_factory(title="Add dark mode toggle"))

        assert result.status == ValidationStatus.PENDING
        assert result.evidence == []

    def test_test_file_named_after_keyword(self, source_tree, task_factory):
        (source_tree / "tests" / "test_palette.py").write_text("def test_it():\n    pass\n")
        validator = CodePresenceValidator(str(source_tree), backend="python")

        result = validator.validate(task_factory(title="Palette colors"))

        assert result.status == ValidationStatus.APPEARS_DONE
        assert result.evidence == ["src/ui/theme.ts"]
        assert result.test_evidence == ["tests/test_palette.py"]

    def test_title_without_keywords_is_pending(self, validator, task_factory):
        result = validator.validate(task_factory(title="Fix it"))

        assert result.status == ValidationStatus.PENDING
        assert result.keywords == []
        assert "No searchable keywords in title" in result.notes

    def test_excluded_dirs_and_other_extensions_ignored(self, validator, task_factory):
        # node_modules and README.md both mention SessionManager
        result = validator.validate(task_factory(title="SessionManager"))
        assert "README.md" not in result.evidence
        assert not any(p.startswith("node_modules") for p in result.evidence)

    def test_case_sensitive_by_default(self, source_tree, task_factory):
        task = task_factory(title="sessionmanager cleanup")

        strict = CodePresenceValidator(str(source_tree), backend="python")
        assert strict.validate(task).status == ValidationStatus.PENDING

        loose = CodePresenceValidator(
            str(source_tree), backend="python", case_sensitive=False
        )
        assert loose.validate(task).status == ValidationStatus.APPEARS_DONE

    def test_idempotent(self, validator, task_factory):
        task = task_factory(title="Fix crash in SessionManager")
        assert validator.validate(task) == validator.validate(task)

    def test_validate_many_preserves_order(self, validator, task_factory):
        tasks = [
            task_factory(id="a", title="Add dark mode toggle"),
            task_factory(id="b", title="SessionManager crash"),
        ]
        results = validator.validate_many(tasks)
        assert [r.task_key for r in results] == ["github:a", "github:b"]


class TestValidatorConfiguration:
    def test_missing_root(self, temp_dir):
        with pytest.raises(ConfigurationError):
            CodePresenceValidator(str(temp_dir / "does-not-exist"))

    def test_root_is_a_file(self, temp_dir):
        path = temp_dir / "file.txt"
        path.write_text("x")
        with pytest.raises(ConfigurationError):
            CodePresenceValidator(str(path))

    def test_empty_root(self):
        with pytest.raises(ConfigurationError):
            CodePresenceValidator(None)

    def test_ripgrep_missing_is_not_silently_pending(self, source_tree):
        with patch("nextup.triage.code_search.shutil.which", return_value=None):
            with pytest.raises(ToolUnavailableError) as exc_info:
                CodePresenceValidator(str(source_tree), backend="ripgrep")
        assert exc_info.value.tool == "rg"

    def test_unknown_backend(self, source_tree):
        with pytest.raises(ConfigurationError):
            CodePresenceValidator(str(source_tree), backend="grep")


class TestSearchBackends:
    def test_auto_prefers_ripgrep(self, source_tree):
        with patch("nextup.triage.code_search.shutil.which", return_value="/usr/bin/rg"):
            searcher = create_searcher(str(source_tree), backend="auto")
        assert isinstance(searcher, RipgrepCodeSearcher)

    def test_auto_falls_back_to_python(self, source_tree):
        with patch("nextup.triage.code_search.shutil.which", return_value=None):
            searcher = create_searcher(str(source_tree), backend="auto")
        assert isinstance(searcher, PythonCodeSearcher)

    def test_python_skips_large_files(self, source_tree):
        searcher = PythonCodeSearcher(str(source_tree), max_file_size=10)
        assert searcher.search(["SessionManager"]) == []

    def test_python_extension_filter(self, source_tree):
        searcher = PythonCodeSearcher(str(source_tree), file_extensions=["ts"])
        assert searcher.list_files() == ["src/ui/theme.ts"]

    @patch("nextup.triage.code_search.subprocess.run")
    def test_ripgrep_parses_paths(self, mock_run, source_tree):
        mock_run.return_value = CompletedProcess(
            args=[], returncode=0, stdout="./src/b.py\n./src/a.py\n", stderr=""
        )
        searcher = RipgrepCodeSearcher(str(source_tree), rg_path="/usr/bin/rg")

        assert searcher.search(["SessionManager"]) == ["src/a.py", "src/b.py"]

        cmd = mock_run.call_args[0][0]
        assert cmd[0] == "/usr/bin/rg"
        assert "--files-with-matches" in cmd
        assert "--fixed-strings" in cmd
        assert "--no-ignore" in cmd
        assert "--ignore-case" not in cmd
        assert cmd[cmd.index("-e") + 1] == "SessionManager"
        assert "!node_modules/" in cmd

    @patch("nextup.triage.code_search.subprocess.run")
    def test_ripgrep_list_files_ignores_gitignore(self, mock_run, source_tree):
        mock_run.return_value = CompletedProcess(
            args=[], returncode=0, stdout="src/export.py\n", stderr=""
        )
        searcher = RipgrepCodeSearcher(str(source_tree), rg_path="/usr/bin/rg")

        assert searcher.list_files() == ["src/export.py"]
        assert "--no-ignore" in mock_run.call_args[0][0]

    def test_python_does_not_honor_gitignore(self, source_tree):
        (source_tree / ".gitignore").write_text("src/\n")
        searcher = PythonCodeSearcher(str(source_tree))
        assert "src/auth/session.py" in searcher.search(["SessionManager"])

    @patch("nextup.triage.code_search.subprocess.run")
    def test_ripgrep_case_insensitive_flag(self, mock_run, source_tree):
        mock_run.return_value = CompletedProcess(args=[], returncode=1, stdout="", stderr="")
        searcher = RipgrepCodeSearcher(str(source_tree), rg_path="/usr/bin/rg")

        assert searcher.search(["toggle"], case_sensitive=False) == []
        assert "--ignore-case" in mock_run.call_args[0][0]

    @patch("nextup.triage.code_search.subprocess.run")
    def test_ripgrep_error_raises(self, mock_run, source_tree):
        mock_run.return_value = CompletedProcess(
            args=[], returncode=2, stdout="", stderr="bad regex"
        )
        searcher = RipgrepCodeSearcher(str(source_tree), rg_path="/usr/bin/rg")

        with pytest.raises(SearchError, match="bad regex"):
            searcher.search(["x"])

    @patch("nextup.triage.code_search.subprocess.run")
    def test_ripgrep_empty_keywords_skip_search(self, mock_run, source_tree):
        searcher = RipgrepCodeSearcher(str(source_tree), rg_path="/usr/bin/rg")
        assert searcher.search([]) == []
        mock_run.assert_not_called()


class TestIsTestFile:
    @pytest.mark.parametrize(
        "path",
        [
            "tests/helpers.py",
            "pkg/test_models.py",
            "pkg/models_test.py",
            "cmd/server_test.go",
            "src/Button.test.tsx",
            "src/api.spec.js",
            "src/__tests__/Button.jsx",
            "src/main/java/UserServiceTest.java",
        ],
    )
    def test_recognized(self, path):
        assert is_test_file(path)

    @pytest.mark.parametrize(
        "path", ["src/models.py", "src/contest.py", "src/testing_utils.ts"]
    )
    def test_not_test_files(self, path):
        assert not is_test_file(path)
