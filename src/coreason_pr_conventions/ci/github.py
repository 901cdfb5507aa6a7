import json
import shutil
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError

from coreason_pr_conventions.ci.git import handle_shell_error
from coreason_pr_conventions.exceptions import MetadataError
from coreason_pr_conventions.utils.logger import logger
from coreason_pr_conventions.utils.shell import ShellError, ShellExecutor

PR_FIELDS = "number,title,body,labels,assignees,headRefName,baseRefName,author"


class PullRequestData(BaseModel):
    """Pull request fields as reported by `gh pr view --json`."""

    number: int
    title: str
    body: Optional[str] = None
    labels: List[str] = Field(default_factory=list)
    assignees: List[str] = Field(default_factory=list)
    head_ref: Optional[str] = None
    base_ref: Optional[str] = None
    author: Optional[str] = None

    @classmethod
    def from_gh(cls, data: Any) -> "PullRequestData":
        if not isinstance(data, dict):
            raise MetadataError(f"Unexpected format from gh: expected object, got {type(data).__name__}")
        try:
            return cls(
                number=data["number"],
                title=data["title"],
                body=data.get("body") or None,
                labels=[label["name"] for label in data.get("labels") or []],
                assignees=[assignee["login"] for assignee in data.get("assignees") or []],
                head_ref=data.get("headRefName"),
                base_ref=data.get("baseRefName"),
                author=(data.get("author") or {}).get("login"),
            )
        except (KeyError, TypeError, ValidationError) as e:
            raise MetadataError(f"Incomplete pull request data from gh: {e}") from e


class GitHubInterface:
    """
    Interface for querying pull request details with the GitHub CLI (gh).
    """

    def __init__(self, shell_executor: Optional[ShellExecutor] = None) -> None:
        self.executable = "gh"
        self.shell = shell_executor or ShellExecutor()
        if not shutil.which(self.executable):
            logger.warning(f"GitHub CLI executable '{self.executable}' not found in PATH.")

    def _run_command(self, args: List[str]) -> str:
        """
        Executes a gh command.

        Args:
            args: List of arguments to pass to the gh command.

        Returns:
            The standard output of the command if successful.

        Raises:
            ScmError: If the command fails (non-zero exit code).
        """
        command = [self.executable] + args
        try:
            result = self.shell.run(command, check=True)
        except ShellError as e:
            logger.error(str(e))
            handle_shell_error(e, "gh command failed")
        return result.stdout.strip()

    def get_pull_request(self, number: int, repo: Optional[str] = None) -> PullRequestData:
        """
        Fetches title, body, labels, assignees and branch names of a pull request.
        """
        logger.info(f"Fetching pull request #{number}" + (f" from {repo}" if repo else ""))
        args = ["pr", "view", str(number), "--json", PR_FIELDS]
        if repo:
            args += ["--repo", repo]
        output = self._run_command(args)
        try:
            parsed: Any = json.loads(output)
        except json.JSONDecodeError as e:
            raise MetadataError(f"Failed to parse gh output: {output}") from e
        return PullRequestData.from_gh(parsed)
