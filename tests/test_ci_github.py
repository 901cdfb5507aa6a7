import json
from unittest.mock import MagicMock, patch

import pytest

from coreason_pr_conventions.ci.github import PR_FIELDS, GitHubInterface, PullRequestData
from coreason_pr_conventions.exceptions import MetadataError, ScmError

PR_JSON = {
    "number": 5,
    "title": "Add user profile image upload functionality",
    "body": "",
    "labels": [{"id": "L1", "name": "enhancement"}, {"id": "L2", "name": "frontend"}],
    "assignees": [{"id": "U1", "login": "octocat", "name": "Octo Cat"}],
    "headRefName": "add-profile-image-upload",
    "baseRefName": "main",
    "author": {"login": "octocat"},
}


@pytest.fixture
def gh() -> GitHubInterface:
    with patch("shutil.which", return_value="/usr/bin/gh"):
        return GitHubInterface()


def test_init_checks_executable() -> None:
    """Test that init checks for executable."""
    with patch("shutil.which", return_value=None):
        with patch("coreason_pr_conventions.ci.github.logger") as mock_logger:
            GitHubInterface()
            mock_logger.warning.assert_called_with("GitHub CLI executable 'gh' not found in PATH.")

    with patch("shutil.which", return_value="/usr/bin/gh"):
        with patch("coreason_pr_conventions.ci.github.logger") as mock_logger:
            GitHubInterface()
            mock_logger.warning.assert_not_called()


def test_run_command_success(gh: GitHubInterface) -> None:
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = MagicMock(returncode=0, stdout="output\n", stderr="")
        assert gh._run_command(["test"]) == "output"
        mock_run.assert_called_once()


def test_run_command_failure_exit_code(gh: GitHubInterface) -> None:
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = MagicMock(returncode=1, stdout="", stderr="no pull requests found")
        with pytest.raises(ScmError) as excinfo:
            gh._run_command(["test"])
        assert "gh command failed" in str(excinfo.value)


def test_run_command_missing_executable(gh: GitHubInterface) -> None:
    with patch("subprocess.run", side_effect=FileNotFoundError("gh")):
        with pytest.raises(ScmError):
            gh._run_command(["test"])


def test_get_pull_request(gh: GitHubInterface) -> None:
    with patch.object(gh, "_run_command", return_value=json.dumps(PR_JSON)) as mock_run:
        pr = gh.get_pull_request(5, "octo/repo")

    mock_run.assert_called_with(["pr", "view", "5", "--json", PR_FIELDS, "--repo", "octo/repo"])
    assert pr == PullRequestData(
        number=5,
        title="Add user profile image upload functionality",
        body=None,
        labels=["enhancement", "frontend"],
        assignees=["octocat"],
        head_ref="add-profile-image-upload",
        base_ref="main",
        author="octocat",
    )


def test_get_pull_request_without_repo(gh: GitHubInterface) -> None:
    with patch.object(gh, "_run_command", return_value=json.dumps(PR_JSON)) as mock_run:
        gh.get_pull_request(5)
    mock_run.assert_called_with(["pr", "view", "5", "--json", PR_FIELDS])


def test_get_pull_request_invalid_json(gh: GitHubInterface) -> None:
    with patch.object(gh, "_run_command", return_value="invalid json"):
        with pytest.raises(MetadataError) as excinfo:
            gh.get_pull_request(5)
        assert "Failed to parse gh output" in str(excinfo.value)


def test_get_pull_request_unexpected_format(gh: GitHubInterface) -> None:
    with patch.object(gh, "_run_command", return_value="[]"):
        with pytest.raises(MetadataError) as excinfo:
            gh.get_pull_request(5)
        assert "expected object" in str(excinfo.value)


def test_get_pull_request_missing_title(gh: GitHubInterface) -> None:
    data = {key: value for key, value in PR_JSON.items() if key != "title"}
    with patch.object(gh, "_run_command", return_value=json.dumps(data)):
        with pytest.raises(MetadataError):
            gh.get_pull_request(5)
