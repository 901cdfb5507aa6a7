from typing import List, NoReturn, Optional

from coreason_pr_conventions.domain.models import BaseBranchState, CommitInfo
from coreason_pr_conventions.exceptions import AuthError, NetworkError, ScmError
from coreason_pr_conventions.utils.logger import logger
from coreason_pr_conventions.utils.shell import ShellError, ShellExecutor

FIELD_SEP = "\x00"
RECORD_SEP = "\x1e"
# git expands %x00 and %x1e to the separators above
LOG_FORMAT = "--format=%H%x00%P%x00%B%x1e"


def handle_shell_error(e: ShellError, context: str) -> NoReturn:
    """Helper to map ShellError to specific domain exceptions."""
    msg = (str(e) + " " + e.result.stderr).lower()
    if any(x in msg for x in ["timed out", "could not resolve host", "failed to connect", "connection refused"]):
        raise NetworkError(f"{context}: {e}") from e
    if any(x in msg for x in ["permission denied", "403", "authentication failed", "could not read username"]):
        raise AuthError(f"{context}: {e}") from e
    raise ScmError(f"{context}: {e}") from e


class GitInterface:
    """
    Interface for reading branch history from the git CLI.
    """

    def __init__(self, shell_executor: Optional[ShellExecutor] = None) -> None:
        self.shell = shell_executor or ShellExecutor()

    def _run(self, args: List[str], context: str) -> str:
        try:
            result = self.shell.run(["git"] + args, check=True)
        except ShellError as e:
            logger.error(f"{context}: {e}")
            handle_shell_error(e, context)
        return result.stdout.strip()

    def fetch_branch(self, remote: str, branch: str) -> str:
        """
        Fetches a branch into its remote-tracking ref.

        Returns:
            The remote-tracking ref, e.g. "origin/main".
        """
        logger.info(f"Fetching {branch} from {remote}")
        self._run(
            ["fetch", "--no-tags", remote, f"+refs/heads/{branch}:refs/remotes/{remote}/{branch}"],
            f"Failed to fetch {branch} from {remote}",
        )
        return f"{remote}/{branch}"

    def rev_parse(self, ref: str) -> str:
        return self._run(["rev-parse", "--verify", f"{ref}^{{commit}}"], f"Failed to resolve {ref}")

    def merge_base(self, base: str, head: str) -> str:
        return self._run(["merge-base", base, head], f"Failed to find merge-base of {base} and {head}")

    def describe_commit(self, sha: str) -> str:
        """
        Returns the one-line log entry of a commit.
        """
        return self._run(["log", "--oneline", "-n", "1", sha], f"Failed to describe commit {sha}")

    def list_commits(self, base: str, head: str) -> List[CommitInfo]:
        """
        Returns the commits reachable from head but not from base, oldest first.
        """
        output = self._run(
            ["log", "--reverse", LOG_FORMAT, f"{base}..{head}"],
            "Failed to get commit log",
        )
        commits: List[CommitInfo] = []
        for record in output.split(RECORD_SEP):
            record = record.strip("\n")
            if not record:
                continue
            sha, parents, message = record.split(FIELD_SEP, 2)
            commits.append(CommitInfo(sha=sha, parents=parents.split(), message=message.rstrip()))
        logger.debug(f"Found {len(commits)} commits in {base}..{head}")
        return commits

    def get_base_state(self, base_name: str, base_ref: str, head: str) -> BaseBranchState:
        """
        Resolves the base tip and the merge-base of the base branch and head.
        """
        head_sha = self.rev_parse(base_ref)
        merge_base_sha = self.merge_base(base_ref, head)
        return BaseBranchState(
            name=base_name,
            head_sha=head_sha,
            merge_base_sha=merge_base_sha,
            head_summary=self.describe_commit(head_sha),
            merge_base_summary=self.describe_commit(merge_base_sha),
        )
