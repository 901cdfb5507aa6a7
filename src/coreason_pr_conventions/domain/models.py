from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, Field


class CommitInfo(BaseModel):
    """A commit unique to the pull request branch."""

    sha: str = Field(..., description="Full commit hash")
    message: str = Field(..., description="The raw commit message")
    parents: List[str] = Field(default_factory=list, description="Parent commit hashes")

    model_config = {"frozen": True}

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    @property
    def short_sha(self) -> str:
        return self.sha[:8]

    @property
    def subject(self) -> str:
        return self.message.splitlines()[0] if self.message else ""


class BaseBranchState(BaseModel):
    """Where the pull request head sits relative to the base branch."""

    name: str = Field(..., description="Base branch name")
    head_sha: str = Field(..., description="Current tip of the base branch")
    merge_base_sha: str = Field(..., description="Merge-base of the base branch and the pull request head")
    head_summary: Optional[str] = Field(None, description="One-line log entry of the base tip")
    merge_base_summary: Optional[str] = Field(None, description="One-line log entry of the merge-base")

    model_config = {"frozen": True}

    @property
    def is_up_to_date(self) -> bool:
        return self.head_sha == self.merge_base_sha


class PullRequestMetadata(BaseModel):
    """
    Everything the convention checks look at for one pull request.
    Built once per run and never mutated.
    """

    number: Optional[int] = Field(None, description="Pull request number")
    author: Optional[str] = Field(None, description="Login of the pull request author")
    title: str = Field(..., description="Pull request title")
    description: Optional[str] = Field(None, description="Pull request body, absent when empty")
    labels: FrozenSet[str] = Field(default_factory=frozenset)
    assignees: FrozenSet[str] = Field(default_factory=frozenset)
    branch_name: str = Field(..., description="Head branch name")
    commits: Tuple[CommitInfo, ...] = Field(default=(), description="Branch commits, oldest first")
    base: Optional[BaseBranchState] = Field(None, description="Base branch state, required by history checks")

    model_config = {"frozen": True}


class Severity(str, Enum):
    PASS = "pass"
    FAIL = "fail"


class RuleMessage(BaseModel):
    """Outcome of one rule group."""

    check: str = Field(..., description="Rule group id")
    severity: Severity
    text: str = Field(..., description="One-line summary")
    details: List[str] = Field(default_factory=list, description="Offending values and explanations")

    @property
    def passed(self) -> bool:
        return self.severity == Severity.PASS


class ValidationResult(BaseModel):
    """
    Aggregate verdict of a validation run.
    `passed` is derived from the messages so it can never disagree with them.
    """

    messages: List[RuleMessage] = Field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(message.passed for message in self.messages)

    @property
    def failures(self) -> List[RuleMessage]:
        return [message for message in self.messages if not message.passed]
