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
Configuration management for the pull request convention checks.
"""

import re
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ALL_CHECKS = [
    "title",
    "description",
    "metadata",
    "branch",
    "merge-commits",
    "up-to-date",
    "commit-messages",
]


class Settings(BaseSettings):
    """
    Application configuration using environment variables.
    """

    model_config = SettingsConfigDict(
        env_prefix="PRC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Repository
    base_branch: str = Field(default="main", description="Branch pull requests must be rebased on.")
    remote: str = Field(default="origin", description="Remote the base branch is fetched from.")

    # Runtime
    log_level: str = Field(default="INFO", description="Loguru level for the stderr log stream.")
    command_timeout: float = Field(default=120, description="Timeout in seconds for git and gh commands.")
    fetch_pull_request: bool = Field(default=True, description="Query gh for labels, assignees and body.")
    write_step_summary: bool = Field(default=True, description="Append a Markdown summary to GITHUB_STEP_SUMMARY.")
    network_attempts: int = Field(default=3, ge=1, description="Attempts for network-bound git and gh calls.")
    network_retry_wait: float = Field(default=2.0, ge=0, description="Exponential backoff multiplier in seconds.")

    # Rules
    checks_enabled: List[str] = Field(default=list(ALL_CHECKS), description="Rule groups to evaluate.")
    cherry_pick_prefix: str = Field(default="PlatformPlatform PR", description="Marker of cherry-picked commits.")
    co_author_trailer: str = Field(default="Co-authored-by: ", description="Trailer of co-authored commits.")
    sentence_abbreviations: List[str] = Field(
        default=["incl.", "e.g.", "etc.", "i.e."],
        description="Abbreviations allowed before a period-space-capital sequence.",
    )
    terminal_abbreviations: List[str] = Field(
        default=["etc."], description="Abbreviations allowed to end a title or commit message."
    )
    required_checklist_items: List[str] = Field(
        default=[
            "- [x] I have added tests, or done manual regression tests",
            "- [x] I have updated the documentation, if necessary",
        ],
        description="Checklist lines that must be checked in the description.",
    )
    forbidden_description_text: List[str] = Field(
        default=["Please delete this paragraph"], description="Template text that must be removed."
    )
    branch_name_pattern: str = Field(default=r"^[a-z0-9-]+$", description="Pattern branch names must match.")

    # Optional Secrets
    GITHUB_TOKEN: Optional[SecretStr] = Field(default=None, validation_alias="GITHUB_TOKEN")

    @field_validator("checks_enabled")
    @classmethod
    def validate_checks(cls, v: List[str]) -> List[str]:
        """
        Reject unknown rule group ids.
        """
        unknown = [name for name in v if name not in ALL_CHECKS]
        if unknown:
            raise ValueError(f"Unknown checks: {', '.join(unknown)}. Known checks: {', '.join(ALL_CHECKS)}")
        return v

    @field_validator("branch_name_pattern")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"branch_name_pattern is not a valid regular expression: {e}") from e
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Returns a cached instance of the Settings class.
    """
    return Settings()
