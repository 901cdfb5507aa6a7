# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_pr_conventions

"""
Assembles PullRequestMetadata from the GitHub Actions event payload, the gh
CLI, the git history and explicit overrides. Every failure here is raised as a
ConventionsError before any rule is evaluated.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError
from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from coreason_pr_conventions.ci.git import GitInterface
from coreason_pr_conventions.ci.github import GitHubInterface
from coreason_pr_conventions.config import Settings
from coreason_pr_conventions.domain.models import BaseBranchState, CommitInfo, PullRequestMetadata
from coreason_pr_conventions.exceptions import MetadataError, NetworkError
from coreason_pr_conventions.utils.logger import logger


class MetadataRequest(BaseModel):
    """Values supplied on the command line. None means "not given"."""

    number: Optional[int] = None
    repo: Optional[str] = None
    title: Optional[str] = None
    body: Optional[str] = None
    branch: Optional[str] = None
    labels: Optional[List[str]] = None
    assignees: Optional[List[str]] = None
    base: Optional[str] = None
    head: Optional[str] = None
    event_path: Optional[Path] = None
    fetch: bool = True


class EventPayload(BaseModel):
    """The parts of a `pull_request` event the checks care about."""

    number: Optional[int] = None
    title: Optional[str] = None
    body: Optional[str] = None
    author: Optional[str] = None
    labels: Optional[List[str]] = None
    assignees: Optional[List[str]] = None
    head_ref: Optional[str] = None
    head_sha: Optional[str] = None
    base_ref: Optional[str] = None
    repo: Optional[str] = Field(None, description="owner/name of the base repository")


def load_event_payload(path: Path) -> EventPayload:
    """
    Reads a GitHub Actions event file and extracts the pull request fields.
    """
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise MetadataError(f"Failed to read event payload {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise MetadataError(f"Event payload {path} is not valid JSON: {e}") from e

    pr = data.get("pull_request") if isinstance(data, dict) else None
    if not isinstance(pr, dict):
        logger.warning(f"Event payload {path} has no pull_request object")
        return EventPayload()

    head: Dict[str, Any] = pr.get("head") or {}
    base: Dict[str, Any] = pr.get("base") or {}
    try:
        return EventPayload(
            number=pr.get("number"),
            title=pr.get("title"),
            body=pr.get("body"),
            author=(pr.get("user") or {}).get("login"),
            labels=[label["name"] for label in pr["labels"]] if "labels" in pr else None,
            assignees=[assignee["login"] for assignee in pr["assignees"]] if "assignees" in pr else None,
            head_ref=head.get("ref"),
            head_sha=head.get("sha"),
            base_ref=base.get("ref"),
            repo=(data.get("repository") or {}).get("full_name"),
        )
    except (KeyError, TypeError, ValidationError) as e:
        raise MetadataError(f"Event payload {path} has an unexpected shape: {e}") from e


def _log_retry(state: RetryCallState) -> None:
    error = state.outcome.exception() if state.outcome else None
    logger.warning(f"Attempt {state.attempt_number} failed: {error}. Retrying...")


def _first(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


class MetadataCollector:
    """
    Builds the read-only metadata the validator runs against.
    """

    def __init__(
        self,
        settings: Settings,
        git: Optional[GitInterface] = None,
        github: Optional[GitHubInterface] = None,
        environ: Optional[Dict[str, str]] = None,
    ) -> None:
        self.settings = settings
        self.git = git or GitInterface()
        self.github = github
        self.environ = environ if environ is not None else dict(os.environ)

    def _event(self, request: MetadataRequest) -> EventPayload:
        path = request.event_path
        if path is None and self.environ.get("GITHUB_EVENT_PATH"):
            path = Path(self.environ["GITHUB_EVENT_PATH"])
        if path is None:
            return EventPayload()
        logger.info(f"Reading event payload from {path}")
        return load_event_payload(path)

    def _retrying(self) -> Retrying:
        """
        Retries calls that failed on a network error, such as a transient GitHub outage.
        """
        return Retrying(
            stop=stop_after_attempt(self.settings.network_attempts),
            wait=wait_exponential(multiplier=self.settings.network_retry_wait, max=30),
            retry=retry_if_exception_type(NetworkError),
            before_sleep=_log_retry,
            reraise=True,
        )

    def collect(self, request: MetadataRequest) -> PullRequestMetadata:
        """
        Merges the sources, later ones winning: event payload, gh, explicit values.

        Raises:
            MetadataError: A required field is missing or a source could not be read.
            ScmError: A git or gh command failed.
        """
        event = self._event(request)
        number = _first(request.number, event.number)
        repo = _first(request.repo, event.repo, self.environ.get("GITHUB_REPOSITORY") or None)

        title = event.title
        body = event.body
        labels = event.labels
        assignees = event.assignees
        author = event.author
        head_ref = event.head_ref
        base_name = event.base_ref

        if number is not None and request.fetch and self.settings.fetch_pull_request:
            if self.github is None:
                self.github = GitHubInterface()
            pr = self._retrying()(self.github.get_pull_request, number, repo)
            title, body, author = pr.title, pr.body, pr.author
            labels, assignees = pr.labels, pr.assignees
            head_ref = _first(pr.head_ref, head_ref)
            base_name = _first(pr.base_ref, base_name)

        title = _first(request.title, title)
        if title is None:
            raise MetadataError("Pull request title is unknown: pass --title, --pr-number or an event payload")

        branch = _first(request.branch, head_ref, self.environ.get("GITHUB_HEAD_REF") or None)
        if not branch:
            raise MetadataError("Branch name is unknown: pass --branch or run on a pull_request event")

        base_name = _first(request.base, base_name, self.settings.base_branch)
        head = _first(request.head, event.head_sha)
        commits: List[CommitInfo] = []
        base_state: Optional[BaseBranchState] = None
        if head:
            base_state, commits = self._history(base_name, head, request.fetch)
        else:
            logger.warning("No head commit given, history checks cannot be evaluated")

        return PullRequestMetadata(
            number=number,
            author=author,
            title=title,
            description=_first(request.body, body) or None,
            labels=frozenset(_first(request.labels, labels) or []),
            assignees=frozenset(_first(request.assignees, assignees) or []),
            branch_name=branch,
            commits=tuple(commits),
            base=base_state,
        )

    def _history(self, base_name: str, head: str, fetch: bool) -> Tuple[BaseBranchState, List[CommitInfo]]:
        if fetch and self.settings.remote:
            base_ref = self._retrying()(self.git.fetch_branch, self.settings.remote, base_name)
        elif self.settings.remote:
            base_ref = f"{self.settings.remote}/{base_name}"
        else:
            base_ref = base_name

        base_state = self.git.get_base_state(base_name, base_ref, head)
        commits = self.git.list_commits(base_ref, head)
        logger.info(f"Inspecting {len(commits)} commits between {base_ref} and {head}")
        return base_state, commits
