from typing import Any, Callable

import pytest

from coreason_pr_conventions.config import Settings
from coreason_pr_conventions.domain.models import BaseBranchState, CommitInfo, PullRequestMetadata

VALID_DESCRIPTION = """### Summary & Motivation

Adds upload of profile images to the account page.

### Checklist

- [x] I have added tests, or done manual regression tests
- [x] I have updated the documentation, if necessary
"""

BASE_SHA = "c" * 40


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def make_metadata() -> Callable[..., PullRequestMetadata]:
    """Factory for metadata that passes every check unless overridden."""

    def _make(**overrides: Any) -> PullRequestMetadata:
        values: dict[str, Any] = {
            "number": 42,
            "title": "Add user profile image upload functionality",
            "description": VALID_DESCRIPTION,
            "labels": {"enhancement"},
            "assignees": {"octocat"},
            "branch_name": "add-profile-image-upload",
            "commits": (
                CommitInfo(sha="a" * 40, parents=[BASE_SHA], message="Add profile image upload endpoint"),
                CommitInfo(sha="b" * 40, parents=["a" * 40], message="Show profile image on the account page"),
            ),
            "base": BaseBranchState(name="main", head_sha=BASE_SHA, merge_base_sha=BASE_SHA),
        }
        values.update(overrides)
        return PullRequestMetadata(**values)

    return _make
