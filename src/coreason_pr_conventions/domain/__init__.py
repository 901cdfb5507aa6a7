from .models import (
    BaseBranchState,
    CommitInfo,
    PullRequestMetadata,
    RuleMessage,
    Severity,
    ValidationResult,
)

__all__ = [
    "BaseBranchState",
    "CommitInfo",
    "PullRequestMetadata",
    "RuleMessage",
    "Severity",
    "ValidationResult",
]
