# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_pr_conventions

import os
import re
import sys
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from pydantic import ValidationError

from coreason_pr_conventions.ci.git import GitInterface
from coreason_pr_conventions.ci.github import GitHubInterface
from coreason_pr_conventions.collector import MetadataCollector, MetadataRequest
from coreason_pr_conventions.config import ALL_CHECKS, Settings, get_settings
from coreason_pr_conventions.domain.models import PullRequestMetadata, RuleMessage, Severity, ValidationResult
from coreason_pr_conventions.events import EventType, LoguruEmitter, ValidationEvent
from coreason_pr_conventions.exceptions import ConventionsError
from coreason_pr_conventions.reporters.console import ConsoleReporter
from coreason_pr_conventions.reporters.markdown import MarkdownReporter
from coreason_pr_conventions.rules.checks import commit_message_problems, title_problems
from coreason_pr_conventions.utils.logger import configure_logging, logger
from coreason_pr_conventions.utils.shell import ShellExecutor
from coreason_pr_conventions.validator import ConventionValidator

EXIT_OK = 0
EXIT_VIOLATIONS = 1
EXIT_ERROR = 3

# Everything below this line is removed by git when committing with --verbose
SCISSORS = re.compile(r"^# -+ >8 -+$", re.MULTILINE)

app = typer.Typer(
    name="coreason-pr-conventions",
    help="Coreason PR Conventions: validates pull request titles, descriptions, branches and commits",
    add_completion=False,
)


def _fail(
    error: Exception,
    message: str,
    headline: str = "Could not collect pull request metadata",
    hint: str = "Please re-run the job.",
) -> NoReturn:
    LoguruEmitter().emit(
        ValidationEvent(
            type=EventType.ERROR,
            message=message,
            payload={"error": str(error), "error_type": type(error).__name__},
        )
    )
    ConsoleReporter().render_error(error, headline=headline, hint=hint)
    sys.exit(EXIT_ERROR)


def _load_settings(only: Optional[List[str]]) -> Settings:
    try:
        settings = get_settings()
    except ValidationError as e:
        _fail(e, "Invalid configuration", "Invalid configuration", "Fix the PRC_ settings and re-run the job.")
    configure_logging(settings.log_level)
    if not only:
        return settings
    unknown = [name for name in only if name not in ALL_CHECKS]
    if unknown:
        raise typer.BadParameter(f"Unknown checks: {', '.join(unknown)}. Known checks: {', '.join(ALL_CHECKS)}")
    return settings.model_copy(update={"checks_enabled": list(only)})


def _shell(settings: Settings) -> ShellExecutor:
    env = None
    if settings.GITHUB_TOKEN:
        env = {"GH_TOKEN": settings.GITHUB_TOKEN.get_secret_value()}
    return ShellExecutor(timeout=settings.command_timeout, env=env)


def _summary_path(settings: Settings, summary_file: Optional[Path]) -> Optional[Path]:
    if summary_file:
        return summary_file
    step_summary = os.environ.get("GITHUB_STEP_SUMMARY")
    if settings.write_step_summary and step_summary:
        return Path(step_summary)
    return None


def _write_summary(result: ValidationResult, metadata: PullRequestMetadata, path: Path) -> None:
    try:
        MarkdownReporter().write(result, metadata, path)
        logger.info(f"Summary written to {path}")
    except Exception as e:
        logger.error(f"Failed to write summary: {e}")


def _report_single(check: str, passed_text: str, failed_text: str, problems: List[str]) -> None:
    if problems:
        message = RuleMessage(check=check, severity=Severity.FAIL, text=failed_text, details=problems)
    else:
        message = RuleMessage(check=check, severity=Severity.PASS, text=passed_text)
    ConsoleReporter().render_message(message)
    sys.exit(EXIT_VIOLATIONS if problems else EXIT_OK)


@app.command(name="check")
def check(
    pr_number: Optional[int] = typer.Option(None, "--pr-number", "-n", help="Pull request number to query with gh."),
    repo: Optional[str] = typer.Option(None, "--repo", "-R", help="Repository as owner/name."),
    base: Optional[str] = typer.Option(None, "--base", "-b", help="Base branch the pull request targets."),
    head: Optional[str] = typer.Option(None, "--head", help="Pull request head commit or ref."),
    title: Optional[str] = typer.Option(None, "--title", help="Pull request title."),
    body: Optional[str] = typer.Option(None, "--body", help="Pull request description."),
    body_file: Optional[Path] = typer.Option(
        None, "--body-file", exists=True, dir_okay=False, readable=True, help="Read the description from a file."
    ),
    branch: Optional[str] = typer.Option(None, "--branch", help="Head branch name."),
    label: Optional[List[str]] = typer.Option(None, "--label", help="Pull request label, repeatable."),
    assignee: Optional[List[str]] = typer.Option(None, "--assignee", help="Pull request assignee, repeatable."),
    event_path: Optional[Path] = typer.Option(
        None, "--event-path", help="GitHub Actions event payload, defaults to GITHUB_EVENT_PATH."
    ),
    no_fetch: bool = typer.Option(False, "--no-fetch", help="Do not call gh or fetch the base branch."),
    summary_file: Optional[Path] = typer.Option(None, "--summary-file", help="Append a Markdown summary here."),
    only: Optional[List[str]] = typer.Option(None, "--only", help="Run only these checks, repeatable."),
) -> None:
    """
    Validates a pull request against the repository conventions.
    """
    settings = _load_settings(only)
    reporter = ConsoleReporter()

    try:
        if body_file is not None:
            body = body_file.read_text(encoding="utf-8")

        shell = _shell(settings)
        fetch = not no_fetch
        collector = MetadataCollector(
            settings,
            git=GitInterface(shell_executor=shell),
            github=GitHubInterface(shell_executor=shell) if fetch and settings.fetch_pull_request else None,
        )
        request = MetadataRequest(
            number=pr_number,
            repo=repo,
            title=title,
            body=body,
            branch=branch,
            labels=list(label) if label else None,
            assignees=list(assignee) if assignee else None,
            base=base,
            head=head,
            event_path=event_path,
            fetch=fetch,
        )
        metadata = collector.collect(request)
    except ConventionsError as e:
        _fail(e, "Metadata acquisition failed")
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        _fail(e, "Unexpected error")

    result = ConventionValidator(settings).validate(metadata)
    reporter.render(result)

    path = _summary_path(settings, summary_file)
    if path is not None:
        _write_summary(result, metadata, path)

    if result.passed:
        logger.info("All conventions passed.")
        sys.exit(EXIT_OK)
    logger.error("Convention violations found.")
    sys.exit(EXIT_VIOLATIONS)


@app.command(name="check-message")
def check_message(
    message: Optional[str] = typer.Argument(None, help="Commit message to validate."),
    file: Optional[Path] = typer.Option(
        None, "--file", "-f", exists=True, dir_okay=False, readable=True, help="Read the message from a file."
    ),
) -> None:
    """
    Validates one commit message. Usable as a commit-msg hook with --file.
    """
    settings = _load_settings(None)
    if file is not None:
        text = SCISSORS.split(file.read_text(encoding="utf-8"))[0]
        message = "\n".join(line for line in text.splitlines() if not line.startswith("#"))
    if message is None:
        raise typer.BadParameter("Pass a commit message or --file.")

    _report_single(
        "commit-message",
        "Commit message looks good",
        "Commit message does not follow the conventions",
        [f"Commit message {problem}" for problem in commit_message_problems(message, settings)],
    )


@app.command(name="check-title")
def check_title(title: str = typer.Argument(..., help="Pull request title to validate.")) -> None:
    """
    Validates a pull request title.
    """
    settings = _load_settings(None)
    _report_single(
        "title",
        "The pull request title looks valid",
        "The pull request title does not follow the conventions",
        title_problems(title, settings),
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
