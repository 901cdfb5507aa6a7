import os
import shutil
import subprocess
from pathlib import Path
from typing import Dict
from unittest.mock import MagicMock

import pytest

from coreason_pr_conventions.ci.git import GitInterface, handle_shell_error
from coreason_pr_conventions.exceptions import AuthError, ConventionsError, NetworkError, ScmError
from coreason_pr_conventions.utils.shell import CommandResult, ShellError

HEAD = "h" * 40


@pytest.fixture
def mock_shell() -> MagicMock:
    return MagicMock()


@pytest.fixture
def git(mock_shell: MagicMock) -> GitInterface:
    return GitInterface(shell_executor=mock_shell)


def test_fetch_branch(git: GitInterface, mock_shell: MagicMock) -> None:
    """Test fetch_branch updates the remote-tracking ref and returns it."""
    mock_shell.run.return_value = CommandResult(0, "", "")
    assert git.fetch_branch("origin", "main") == "origin/main"
    mock_shell.run.assert_called_with(
        ["git", "fetch", "--no-tags", "origin", "+refs/heads/main:refs/remotes/origin/main"], check=True
    )


def test_rev_parse(git: GitInterface, mock_shell: MagicMock) -> None:
    mock_shell.run.return_value = CommandResult(0, "abc123\n", "")
    assert git.rev_parse("origin/main") == "abc123"
    mock_shell.run.assert_called_with(["git", "rev-parse", "--verify", "origin/main^{commit}"], check=True)


def test_merge_base(git: GitInterface, mock_shell: MagicMock) -> None:
    mock_shell.run.return_value = CommandResult(0, "def456\n", "")
    assert git.merge_base("origin/main", HEAD) == "def456"
    mock_shell.run.assert_called_with(["git", "merge-base", "origin/main", HEAD], check=True)


def test_list_commits(git: GitInterface, mock_shell: MagicMock) -> None:
    """Test list_commits parses hashes, parents and raw messages."""
    stdout = (
        f"{'a' * 40}\x00{'c' * 40}\x00Add login flow\n\x1e\n"
        f"{'b' * 40}\x00{'a' * 40} {'d' * 40}\x00Merge branch 'main'\n\nConflicts resolved\n\n\x1e\n"
    )
    mock_shell.run.return_value = CommandResult(0, stdout, "")

    commits = git.list_commits("origin/main", HEAD)

    assert [c.sha for c in commits] == ["a" * 40, "b" * 40]
    assert commits[0].message == "Add login flow"
    assert commits[0].is_merge is False
    assert commits[1].message == "Merge branch 'main'\n\nConflicts resolved"
    assert commits[1].is_merge is True
    mock_shell.run.assert_called_with(
        ["git", "log", "--reverse", "--format=%H%x00%P%x00%B%x1e", f"origin/main..{HEAD}"], check=True
    )


def test_list_commits_empty_range(git: GitInterface, mock_shell: MagicMock) -> None:
    mock_shell.run.return_value = CommandResult(0, "", "")
    assert git.list_commits("origin/main", HEAD) == []


def test_get_base_state(git: GitInterface, mock_shell: MagicMock) -> None:
    mock_shell.run.side_effect = [
        CommandResult(0, "f" * 40 + "\n", ""),
        CommandResult(0, "c" * 40 + "\n", ""),
        CommandResult(0, "fffffff Latest on main\n", ""),
        CommandResult(0, "ccccccc Older on main\n", ""),
    ]

    state = git.get_base_state("main", "origin/main", HEAD)

    assert state.name == "main"
    assert state.head_sha == "f" * 40
    assert state.merge_base_sha == "c" * 40
    assert state.head_summary == "fffffff Latest on main"
    assert state.merge_base_summary == "ccccccc Older on main"
    assert state.is_up_to_date is False


def test_unresolved_ref_raises(git: GitInterface, mock_shell: MagicMock) -> None:
    """Test a failing git command aborts acquisition with an ScmError."""
    mock_shell.run.side_effect = ShellError(
        "Command failed with exit code 128", CommandResult(128, "", "fatal: Needed a single revision")
    )
    with pytest.raises(ScmError) as excinfo:
        git.rev_parse("origin/missing")
    assert "Failed to resolve origin/missing" in str(excinfo.value)


@pytest.mark.parametrize(
    "stderr, expected",
    [
        ("fatal: unable to access: Could not resolve host: github.com", NetworkError),
        ("Command timed out after 120s", NetworkError),
        ("remote: Permission denied to octocat", AuthError),
        ("fatal: bad object", ScmError),
    ],
)
def test_handle_shell_error_classification(stderr: str, expected: type) -> None:
    error = ShellError("Command failed", CommandResult(1, "", stderr))
    with pytest.raises(expected) as excinfo:
        handle_shell_error(error, "Context")
    assert isinstance(excinfo.value, ConventionsError)
    assert str(excinfo.value).startswith("Context: ")


def _commit_date(offset: int) -> Dict[str, str]:
    stamp = f"{1700000000 + offset} +0000"
    return {"GIT_AUTHOR_DATE": stamp, "GIT_COMMITTER_DATE": stamp}


def _git(repo: Path, *args: str, offset: int = 0) -> None:
    env = {**os.environ, **_commit_date(offset)}
    subprocess.run(["git", *args], cwd=repo, env=env, check=True, capture_output=True)


@pytest.fixture
def repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A base branch plus a feature branch with a multi-line commit and a merge commit."""
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Jane Doe")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "jane@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Jane Doe")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "jane@example.com")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", os.devnull)
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")

    _git(tmp_path, "init", "-q")
    _git(tmp_path, "symbolic-ref", "HEAD", "refs/heads/main")
    _git(tmp_path, "commit", "-q", "--allow-empty", "-m", "Initial commit", offset=1)
    _git(tmp_path, "checkout", "-q", "-b", "add-login-flow")
    _git(tmp_path, "commit", "-q", "--allow-empty", "-m", "Add login flow", offset=2)
    _git(tmp_path, "commit", "-q", "--allow-empty", "-m", "Add logout\n\nExplains the change", offset=3)
    _git(tmp_path, "checkout", "-q", "-b", "fix-typo", "main")
    _git(tmp_path, "commit", "-q", "--allow-empty", "-m", "Fix typo", offset=4)
    _git(tmp_path, "checkout", "-q", "add-login-flow")
    _git(tmp_path, "merge", "-q", "--no-ff", "fix-typo", "-m", "Merge branch 'fix-typo'", offset=5)

    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_list_commits_real_repository(repo: Path) -> None:
    git = GitInterface()

    commits = git.list_commits("main", "add-login-flow")

    assert [c.message for c in commits] == [
        "Add login flow",
        "Add logout\n\nExplains the change",
        "Fix typo",
        "Merge branch 'fix-typo'",
    ]
    assert [c.is_merge for c in commits] == [False, False, False, True]
    assert all(len(c.sha) == 40 for c in commits)
    assert commits[3].parents[0] == commits[1].sha
    assert commits[3].parents[1] == commits[2].sha


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_get_base_state_real_repository(repo: Path) -> None:
    git = GitInterface()

    state = git.get_base_state("main", "main", "add-login-flow")

    assert state.is_up_to_date is True
    assert state.head_summary is not None
    assert state.head_summary.endswith("Initial commit")
