# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_pr_conventions

import re
from typing import Callable, List, Tuple

from coreason_pr_conventions.config import Settings
from coreason_pr_conventions.domain.models import CommitInfo, PullRequestMetadata, RuleMessage, Severity
from coreason_pr_conventions.rules.text import (
    ends_with_period,
    exemptions_for,
    has_multiple_sentences,
    is_multi_line,
    lacks_leading_capital,
    looks_like_default_branch_name,
    mentions_pull_request,
)

Check = Callable[[PullRequestMetadata, Settings], RuleMessage]


def _passed(check: str, text: str) -> RuleMessage:
    return RuleMessage(check=check, severity=Severity.PASS, text=text)


def title_problems(title: str, settings: Settings) -> List[str]:
    """
    Returns the title violations in evaluation order.
    """
    problems: List[str] = []
    if lacks_leading_capital(title):
        problems.append("Pull request title does not start with a capital letter")
    if ends_with_period(title, settings.terminal_abbreviations):
        problems.append("Pull request title ends with a period")
    if has_multiple_sentences(title, settings.sentence_abbreviations):
        problems.append("Pull request title contains multiple sentences")
    if looks_like_default_branch_name(title):
        problems.append(
            "Pull request title cannot be a default branch name format like 'Pp ###', 'Dev ###', 'M42 ###', etc. "
            "Please update the title to describe the changes being made"
        )
    return problems


def check_title(metadata: PullRequestMetadata, settings: Settings) -> RuleMessage:
    problems = title_problems(metadata.title, settings)
    if not problems:
        return _passed("title", "The pull request title looks valid")
    return RuleMessage(
        check="title",
        severity=Severity.FAIL,
        text="The pull request title does not follow the conventions",
        details=problems + [f"Title: {metadata.title}"],
    )


def check_description(metadata: PullRequestMetadata, settings: Settings) -> RuleMessage:
    description = metadata.description or ""
    problems: List[str] = []

    if mentions_pull_request(description):
        problems.append("Pull request description should not contain the phrase 'pull request' or 'pull-request'")

    for text in settings.forbidden_description_text:
        if text in description:
            problems.append(f"Pull request description contains template text that should be removed: '{text}'")

    for item in settings.required_checklist_items:
        if item not in description:
            box = re.sub(r"^- \[x\] ", "", item)
            problems.append(f"Please check the box: '{box}'")

    if not problems:
        return _passed("description", "The pull request description looks valid")
    return RuleMessage(
        check="description",
        severity=Severity.FAIL,
        text="The pull request description does not follow the conventions",
        details=problems,
    )


def check_metadata(metadata: PullRequestMetadata, settings: Settings) -> RuleMessage:
    problems: List[str] = []
    if not metadata.labels:
        problems.append("Pull request must have at least one label")
    if not metadata.assignees:
        problems.append("Pull request must have at least one assignee")

    if not problems:
        return _passed("metadata", "Pull request metadata is valid")
    return RuleMessage(
        check="metadata",
        severity=Severity.FAIL,
        text="Pull request metadata is incomplete",
        details=problems,
    )


def check_branch_name(metadata: PullRequestMetadata, settings: Settings) -> RuleMessage:
    if re.fullmatch(settings.branch_name_pattern, metadata.branch_name):
        return _passed("branch", "Branch name is valid")
    return RuleMessage(
        check="branch",
        severity=Severity.FAIL,
        text=f"Branch name '{metadata.branch_name}' does not follow the convention",
        details=["Expected format: lowercase letters, numbers, and hyphens only"],
    )


def _history_missing(check: str) -> RuleMessage:
    return RuleMessage(
        check=check,
        severity=Severity.FAIL,
        text="Branch history was not supplied",
        details=["Pass the pull request head commit so the history can be inspected"],
    )


def check_merge_commits(metadata: PullRequestMetadata, settings: Settings) -> RuleMessage:
    if metadata.base is None:
        return _history_missing("merge-commits")

    merges = [commit for commit in metadata.commits if commit.is_merge]
    if not merges:
        return _passed("merge-commits", "No merge commits found")
    return RuleMessage(
        check="merge-commits",
        severity=Severity.FAIL,
        text="Branch must not contain merge commits. The following were found:",
        details=[f"{commit.short_sha} {commit.subject}" for commit in merges]
        + [
            f"Please remove these commits by rebasing on the latest {metadata.base.name} branch "
            "and force pushing your changes"
        ],
    )


def check_up_to_date(metadata: PullRequestMetadata, settings: Settings) -> RuleMessage:
    base = metadata.base
    if base is None:
        return _history_missing("up-to-date")

    if base.is_up_to_date:
        return _passed("up-to-date", f"Branch is up to date with the {base.name} branch")
    return RuleMessage(
        check="up-to-date",
        severity=Severity.FAIL,
        text=f"Branch must be up to date with the {base.name} branch before merging",
        details=[
            f"Your branch diverged from {base.name} at commit: {base.merge_base_summary or base.merge_base_sha}",
            f"The current {base.name} branch is at: {base.head_summary or base.head_sha}",
            f"Please rebase on the latest {base.name} branch and force push your changes",
        ],
    )


def commit_message_problems(message: str, settings: Settings) -> List[str]:
    """
    Returns the violations of a single commit message.
    """
    message = message.rstrip()
    exemptions = exemptions_for(message, settings.cherry_pick_prefix, settings.co_author_trailer)
    problems: List[str] = []

    if is_multi_line(message) and not exemptions.multi_line_allowed:
        problems.append("has multiple lines")
    if lacks_leading_capital(message):
        problems.append("does not start with a capital letter")
    # Cherry-picked messages keep their upstream wording, so a body like
    # "PlatformPlatform PR 123: Refactor login flow\n\nDetails here." passes
    if not exemptions.structure_exempt:
        if ends_with_period(message, settings.terminal_abbreviations):
            problems.append("ends with a period")
        if has_multiple_sentences(message, settings.sentence_abbreviations):
            problems.append("contains multiple sentences")
    return problems


def _commit_lines(commit: CommitInfo, settings: Settings) -> List[str]:
    message = commit.message.rstrip()
    return [
        f"Commit {commit.short_sha} {problem}. Message: {message}"
        for problem in commit_message_problems(message, settings)
    ]


def check_commit_messages(metadata: PullRequestMetadata, settings: Settings) -> RuleMessage:
    problems: List[str] = []
    for commit in metadata.commits:
        problems.extend(_commit_lines(commit, settings))

    if not problems:
        return _passed("commit-messages", "All commit messages look good")
    return RuleMessage(
        check="commit-messages",
        severity=Severity.FAIL,
        text="Commit messages do not follow the conventions",
        details=problems,
    )


DEFAULT_CHECKS: List[Tuple[str, Check]] = [
    ("title", check_title),
    ("description", check_description),
    ("metadata", check_metadata),
    ("branch", check_branch_name),
    ("merge-commits", check_merge_commits),
    ("up-to-date", check_up_to_date),
    ("commit-messages", check_commit_messages),
]
