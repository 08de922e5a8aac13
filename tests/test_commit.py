"""Tests for gitdesk.git.commit module."""

from pathlib import Path
from unittest.mock import patch

from conftest import git
from gitdesk.git.commit import (
    CommitMessage,
    commit,
    discard_file,
    get_last_commit_message,
    stage_file,
    unstage_file,
)
from gitdesk.git.runner import GitResult


class TestStageFile:
    """Whole files into the index."""

    def test_stage_modified(self, repo_with_file):
        (repo_with_file / "a.txt").write_text("changed\n")
        result = stage_file(repo_with_file, "a.txt")
        assert result.message == "Staged a.txt"
        assert git(repo_with_file, "show", ":a.txt") == "changed\n"

    def test_stage_untracked(self, repo_with_file):
        (repo_with_file / "b.txt").write_text("new\n")
        stage_file(repo_with_file, "b.txt")
        assert git(repo_with_file, "ls-files", "--", "b.txt").strip() == "b.txt"

    def test_stage_deleted(self, repo_with_file):
        (repo_with_file / "a.txt").unlink()
        result = stage_file(repo_with_file, "a.txt")
        assert result.success
        assert git(repo_with_file, "ls-files", "--", "a.txt") == ""

    def test_stage_unknown_path(self, repo_with_file):
        result = stage_file(repo_with_file, "ghost.txt")
        assert not result.success
        assert "did not match" in result.message


class TestUnstageFile:
    """Index back to HEAD."""

    def test_unstage_keeps_working_tree(self, repo_with_file):
        (repo_with_file / "a.txt").write_text("changed\n")
        git(repo_with_file, "add", "a.txt")

        result = unstage_file(repo_with_file, "a.txt")

        assert result.message == "Unstaged a.txt"
        assert git(repo_with_file, "diff", "--cached", "--name-only") == ""
        assert (repo_with_file / "a.txt").read_text() == "changed\n"

    def test_unstage_before_first_commit(self, repo):
        (repo / "new.txt").write_text("x\n")
        git(repo, "add", "new.txt")

        result = unstage_file(repo, "new.txt")

        assert result.success
        assert git(repo, "ls-files") == ""
        assert (repo / "new.txt").exists()


class TestDiscardFile:
    """Working-tree changes thrown away."""

    def test_restore_tracked(self, repo_with_file):
        (repo_with_file / "a.txt").write_text("changed\n")
        result = discard_file(repo_with_file, "a.txt")
        assert result.message == "Discarded changes in a.txt"
        assert (repo_with_file / "a.txt").read_text() == "one\ntwo\nthree\nfour\nfive\n"

    def test_restore_deleted(self, repo_with_file):
        (repo_with_file / "a.txt").unlink()
        assert discard_file(repo_with_file, "a.txt").success
        assert (repo_with_file / "a.txt").exists()

    def test_remove_untracked_file(self, repo_with_file):
        (repo_with_file / "junk.txt").write_text("junk\n")
        result = discard_file(repo_with_file, "junk.txt", is_untracked=True)
        assert result.message == "Removed junk.txt"
        assert not (repo_with_file / "junk.txt").exists()

    def test_remove_untracked_directory(self, repo_with_file):
        (repo_with_file / "build").mkdir()
        (repo_with_file / "build" / "out.o").write_text("obj\n")
        assert discard_file(repo_with_file, "build", is_untracked=True).success
        assert not (repo_with_file / "build").exists()

    def test_remove_missing_untracked(self, repo_with_file):
        result = discard_file(repo_with_file, "ghost.txt", is_untracked=True)
        assert not result.success
        assert result.message.startswith("Failed to remove ghost.txt:")

    def test_tracked_failure_message(self, repo_with_file):
        result = discard_file(repo_with_file, "ghost.txt")
        assert not result.success
        assert result.message.startswith("Failed to discard changes:")


class TestCommit:
    """Commits and the last message."""

    def test_commit_with_new_file(self, repo_with_file):
        (repo_with_file / "b.txt").write_text("new\n")
        git(repo_with_file, "add", "b.txt")

        result = commit(repo_with_file, "Add b")

        assert result.success
        assert result.message.startswith("[main ")
        assert "\n" not in result.message
        assert git(repo_with_file, "log", "-1", "--format=%s").strip() == "Add b"

    def test_commit_modification_keeps_full_output(self, repo_with_file):
        (repo_with_file / "a.txt").write_text("changed\n")
        git(repo_with_file, "add", "a.txt")

        result = commit(repo_with_file, "Change a")

        assert result.success
        assert "1 file changed" in result.message

    def test_amend(self, repo_with_file):
        result = commit(repo_with_file, "Reworded", amend=True)
        assert result.success
        assert git(repo_with_file, "rev-list", "--count", "HEAD").strip() == "1"
        assert git(repo_with_file, "log", "-1", "--format=%s").strip() == "Reworded"

    def test_nothing_to_commit(self, repo_with_file):
        result = commit(repo_with_file, "Empty")
        assert not result.success
        assert "nothing to commit" in result.message

    @patch("gitdesk.git.invocation.run_git")
    def test_args_and_env(self, mock_run):
        mock_run.return_value = GitResult(0, "", "")

        result = commit(Path("/repo"), "msg", amend=True)

        assert mock_run.call_args[0][0] == ["commit", "-m", "msg", "--amend"]
        assert mock_run.call_args[1]["env"]["GIT_TERMINAL_PROMPT"] == "0"
        assert result.message == "Commit created successfully"

    def test_last_commit_message(self, repo_with_file):
        (repo_with_file / "a.txt").write_text("changed\n")
        git(repo_with_file, "add", "a.txt")
        git(repo_with_file, "commit", "-q", "-m", "Subject line\n\nBody one\nBody two\n")

        assert get_last_commit_message(repo_with_file) == CommitMessage(
            subject="Subject line", body="Body one\nBody two"
        )

    def test_last_commit_message_no_body(self, repo_with_file):
        message = get_last_commit_message(repo_with_file)
        assert message.subject == "initial"
        assert message.body == ""

    def test_last_commit_message_empty_repo(self, repo):
        assert get_last_commit_message(repo) is None
