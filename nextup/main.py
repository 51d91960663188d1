#!/usr/bin/env python3
"""
nextup Main Entry Point - recommend the next task worth picking up
"""
import asyncio
import logging
import shutil
import sys
from pathlib import Path

import click

from .__version__ import get_version_info
from .config import (
    DEFAULT_CONFIG_TEMPLATE,
    OUTPUT_FORMATS,
    NextupConfig,
    load_config,
    resolve_config_path,
)
from .exceptions import ConfigurationError, NextupError
from .models import Task, Tracker
from .sources.json_file import JsonFileSource
from .triage.capability_scanner import EnvironmentScanner
from .triage.scorer import PriorityScorer
from .triage.validator import CodePresenceValidator


def setup_logging(log_file_path=".nextup/nextup.log", debug=False, level="INFO"):
    """Setup logging with proper file path from configuration"""
    Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)

    if debug:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, str(level).upper(), logging.INFO)

    logging.getLogger().handlers.clear()

    # Console gets warnings only so command output stays readable
    console = logging.StreamHandler()
    console.setLevel(logging.DEBUG if debug else logging.WARNING)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            console,
            logging.FileHandler(log_file_path, encoding="utf-8", errors="replace"),
        ],
    )


logger = logging.getLogger(__name__)


def _load_config(ctx) -> NextupConfig:
    try:
        return load_config(ctx.obj["config"])
    except ConfigurationError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)


def _apply_root(config: NextupConfig, root) -> NextupConfig:
    if root:
        config.validation.root_path = root
    return config


@click.group(invoke_without_command=True)
@click.option("--config", default=None, help="Configuration file path")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--version", is_flag=True, help="Show version information")
@click.pass_context
def cli(ctx, config, debug, version):
    """nextup 🎯 - find, validate, and rank the next task to work on"""
    if version:
        click.echo(get_version_info())
        ctx.exit()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        return

    config_path = resolve_config_path(config)

    log_file_path = ".nextup/nextup.log"
    log_level = "INFO"
    try:
        logging_config = load_config(config_path).logging
        log_file_path = logging_config.file
        log_level = logging_config.level
    except ConfigurationError:
        pass  # reported by the subcommand that loads the config

    setup_logging(log_file_path, debug, log_level)

    if debug:
        logger.debug("🐛 Debug logging enabled")

    ctx.ensure_object(dict)
    ctx.obj["config"] = config_path


@cli.command()
@click.option("--project-dir", default=".", help="Project directory to initialize")
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
def init(project_dir, force):
    """Create a default .nextup/config.yaml"""
    project_path = Path(project_dir).resolve()
    config_path = project_path / ".nextup" / "config.yaml"

    click.echo(f"🚀 Initializing {get_version_info()} in {project_path}")

    if config_path.exists() and not force:
        click.echo(f"⚠️ Config already exists: {config_path} (use --force to overwrite)")
        sys.exit(1)

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(DEFAULT_CONFIG_TEMPLATE, encoding="utf-8")

    if shutil.which("gh"):
        click.echo("✅ Found GitHub CLI")
    else:
        click.echo("ℹ️ GitHub CLI not found. Install it to read GitHub issues.")

    click.echo("✅ nextup initialized successfully!")
    click.echo(f"📁 Config: {config_path}")
    click.echo("\n🎯 Next steps:")
    click.echo("1. Review the config: .nextup/config.yaml")
    click.echo("2. Check your environment: nextup doctor")
    click.echo("3. Get recommendations: nextup recommend")


@cli.command()
@click.option("--tasks-file", help="JSON/YAML file with task records")
@click.option("--root", help="Source tree to validate against")
@click.option("--top", type=click.IntRange(min=1), help="Number of tasks to show")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS),
    help="Output format",
)
@click.option("--no-github", is_flag=True, help="Skip GitHub issues")
@click.option("--no-linear", is_flag=True, help="Skip Linear issues")
@click.option("--no-planning", is_flag=True, help="Skip the planning document")
@click.pass_context
def recommend(ctx, tasks_file, root, top, output_format, no_github, no_linear, no_planning):
    """Recommend the top tasks to pick up next"""
    from .core.recommender import TaskRecommender, build_sources

    config = _apply_root(_load_config(ctx), root)
    if top:
        config.presentation.top_n = top

    sources = build_sources(
        config,
        tasks_file=tasks_file,
        use_github=not no_github,
        use_linear=not no_linear,
        use_planning=not no_planning,
    )

    try:
        recommender = TaskRecommender(config, sources=sources)
        report = asyncio.run(recommender.recommend())
    except NextupError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)

    click.echo(recommender.render(report, output_format))


@cli.command()
@click.argument("title")
@click.option("--root", help="Source tree to search")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS),
    default="text",
    help="Output format",
)
@click.pass_context
def validate(ctx, title, root, output_format):
    """Check whether TITLE already appears to be implemented"""
    import json

    config = _apply_root(_load_config(ctx), root)
    validation = config.validation

    try:
        validator = CodePresenceValidator(
            validation.root_path,
            backend=validation.backend,
            file_extensions=validation.file_extensions,
            excluded_dirs=validation.excluded_dirs,
            case_sensitive=validation.case_sensitive,
            max_file_size=validation.max_file_size,
            min_keyword_length=validation.min_keyword_length,
            extra_stop_words=validation.extra_stop_words,
        )
        result = validator.validate(Task(id="adhoc", title=title, source=Tracker.MANUAL))
    except NextupError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)

    if output_format == "json":
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    click.echo(f"Status: {result.status.value}")
    click.echo(f"Keywords: {', '.join(result.keywords) or '(none)'}")
    for note in result.notes:
        click.echo(f"  {note}")
    for path in result.evidence:
        marker = " (test)" if path in result.test_evidence else ""
        click.echo(f"  - {path}{marker}")


@cli.command()
@click.option("--tasks-file", required=True, help="JSON/YAML file with task records")
@click.option(
    "--recent-file",
    "recent_files",
    multiple=True,
    help="Recently changed file path (repeatable)",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS),
    default="text",
    help="Output format",
)
@click.pass_context
def score(ctx, tasks_file, recent_files, output_format):
    """Show the score breakdown for tasks in a file (no code search)"""
    import json

    config = _load_config(ctx)
    scoring = config.scoring

    try:
        tasks = asyncio.run(JsonFileSource(tasks_file, primary=True).fetch())
        scorer = PriorityScorer(
            weights=scoring.weights,
            aged_bug_days=scoring.aged_bug_days,
            blocker_mode=scoring.blocker_mode,
            min_keyword_length=config.validation.min_keyword_length,
        )
    except NextupError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)

    ranked = scorer.rank(scorer.score_many(tasks, recent_files=list(recent_files)))

    if output_format == "json":
        click.echo(json.dumps([s.to_dict() for s in ranked], indent=2))
        return

    for scored in ranked:
        click.echo(f"{scored.score:>5}  [{scored.task.key}] {scored.task.title}")
        for reason in scored.reasons:
            click.echo(f"         {reason}")


@cli.command()
@click.option("--root", default=".", help="Project root to inspect")
def doctor(root):
    """Check the platform and required tools"""
    scanner = EnvironmentScanner(root)
    capabilities = asyncio.run(scanner.scan())

    click.echo(scanner.get_summary(capabilities))

    if capabilities.warnings:
        click.echo("")
        for warning in capabilities.warnings:
            click.echo(f"⚠️ {warning}")

    if capabilities.missing_required:
        click.echo(
            f"\n❌ Missing required tool(s): {', '.join(capabilities.missing_required)}",
            err=True,
        )
        sys.exit(1)

    click.echo("\n✅ Environment ready")


def main():
    """Entry point for the nextup CLI"""
    cli()


if __name__ == "__main__":
    main()
