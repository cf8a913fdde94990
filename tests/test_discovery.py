"""Tests for local override discovery."""

import shutil
import subprocess
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from evans.config import (
    ConfigDecodeError,
    DiscoveryError,
    find_local,
    lookup_project_root,
)
from evans.config.validation import ConfigValidationError

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def _completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(
        args=["git", "rev-parse", "--show-cdup"],
        returncode=returncode,
        stdout=stdout,
        stderr=stderr,
    )


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def git_repo(temp_dir):
    """A git working tree with a nested subdirectory."""
    subprocess.run(["git", "init", "-q", str(temp_dir)], check=True, capture_output=True)
    nested = temp_dir / "pkg" / "service"
    nested.mkdir(parents=True)
    return temp_dir, nested


class TestLookupProjectRoot:
    """Tests for the git working tree root lookup."""

    def test_not_a_working_tree(self, temp_dir):
        with patch(
            "evans.config.discovery.subprocess.run",
            return_value=_completed(128, stderr="fatal: not a git repository"),
        ):
            assert lookup_project_root(temp_dir) is None

    def test_git_missing(self, temp_dir):
        with patch(
            "evans.config.discovery.subprocess.run", side_effect=FileNotFoundError
        ):
            assert lookup_project_root(temp_dir) is None

    def test_timeout(self, temp_dir):
        with patch(
            "evans.config.discovery.subprocess.run",
            side_effect=subprocess.TimeoutExpired(["git"], 0.5),
        ) as run:
            assert lookup_project_root(temp_dir, timeout=0.5) is None
        assert run.call_args.kwargs["timeout"] == 0.5

    def test_stderr_is_an_error(self, temp_dir):
        with patch(
            "evans.config.discovery.subprocess.run",
            return_value=_completed(0, stdout="../\n", stderr="warning: odd\n"),
        ):
            with pytest.raises(DiscoveryError, match="warning: odd"):
                lookup_project_root(temp_dir)

    def test_relative_prefix_joined(self, temp_dir):
        with patch(
            "evans.config.discovery.subprocess.run",
            return_value=_completed(0, stdout="../../\n"),
        ) as run:
            root = lookup_project_root(temp_dir)
        assert root == temp_dir / "../.."
        assert run.call_args.args[0] == ["git", "rev-parse", "--show-cdup"]
        assert run.call_args.kwargs["cwd"] == temp_dir

    @requires_git
    def test_real_repository(self, git_repo):
        root, nested = git_repo
        found = lookup_project_root(nested)
        assert found.resolve() == root.resolve()


class TestFindLocal:
    """Tests for find_local."""

    def test_file_in_cwd(self, temp_dir):
        (temp_dir / ".evans.toml").write_text('[server]\nhost = "example.com"\n')
        with patch("evans.config.discovery.subprocess.run") as run:
            local = find_local(temp_dir)
        assert local.path == temp_dir / ".evans.toml"
        assert local.data == {"server": {"host": "example.com"}}
        run.assert_not_called()

    def test_nothing_found(self, temp_dir):
        with patch(
            "evans.config.discovery.subprocess.run",
            return_value=_completed(128, stderr="fatal: not a git repository"),
        ):
            assert find_local(temp_dir) is None

    def test_root_without_file(self, temp_dir):
        nested = temp_dir / "sub"
        nested.mkdir()
        with patch(
            "evans.config.discovery.subprocess.run",
            return_value=_completed(0, stdout="../\n"),
        ):
            assert find_local(nested) is None

    def test_stderr_propagates(self, temp_dir):
        with patch(
            "evans.config.discovery.subprocess.run",
            return_value=_completed(0, stdout="", stderr="error: boom"),
        ):
            with pytest.raises(DiscoveryError):
                find_local(temp_dir)

    def test_malformed_file(self, temp_dir):
        (temp_dir / ".evans.toml").write_text("server = [")
        with pytest.raises(ConfigDecodeError):
            find_local(temp_dir)

    def test_wrong_schema(self, temp_dir):
        (temp_dir / ".evans.toml").write_text("[request]\nweb = \"yes\"\n")
        with pytest.raises(ConfigValidationError) as exc_info:
            find_local(temp_dir)
        assert exc_info.value.errors[0].key == "request.web"

    def test_unknown_keys_kept_out_of_errors(self, temp_dir):
        (temp_dir / ".evans.toml").write_text("[server]\nhots = \"typo\"\n")
        local = find_local(temp_dir)
        assert local.data == {"server": {"hots": "typo"}}

    @requires_git
    def test_falls_back_to_git_root(self, git_repo):
        root, nested = git_repo
        (root / ".evans.toml").write_text('[server]\nport = "6000"\n')

        local = find_local(nested)

        assert local is not None
        assert local.path.resolve() == (root / ".evans.toml").resolve()
        assert local.data == {"server": {"port": "6000"}}

    @requires_git
    def test_cwd_file_wins_over_root(self, git_repo):
        root, nested = git_repo
        (root / ".evans.toml").write_text('[server]\nport = "6000"\n')
        (nested / ".evans.toml").write_text('[server]\nport = "7000"\n')

        local = find_local(nested)

        assert local.data == {"server": {"port": "7000"}}

    @requires_git
    def test_git_root_without_file(self, git_repo):
        _, nested = git_repo
        assert find_local(nested) is None
