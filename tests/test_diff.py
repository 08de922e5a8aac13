"""Tests for gitdesk.git.diff module.

Most tests run real git against a throwaway repository (see conftest.py).
"""

import subprocess

import pytest

from conftest import commit_all, git
from gitdesk.git.diff import (
    binary_kind_for,
    build_diff,
    get_conflicted_files,
    get_diff_names,
    is_binary_content,
    parse_hunks,
    split_lines,
)
from gitdesk.git.errors import DiffParseError, NotFoundError
from gitdesk.git.models import BinaryKind, ComparisonMode, LineType


def _kinds(hunk):
    return [line.line_type for line in hunk.lines]


class TestHelpers:
    """Pure helpers."""

    @pytest.mark.parametrize("path,kind", [
        ("logo.PNG", BinaryKind.IMAGE),
        ("img/photo.jpeg", BinaryKind.IMAGE),
        ("icon.svg", BinaryKind.IMAGE),
        ("manual.pdf", BinaryKind.PDF),
        ("archive.zip", BinaryKind.OTHER),
        ("noext", BinaryKind.OTHER),
    ])
    def test_binary_kind_for(self, path, kind):
        assert binary_kind_for(path) is kind

    def test_is_binary_content(self):
        assert is_binary_content(b"abc\0def")
        assert not is_binary_content(b"plain text\n")

    def test_nul_after_sniff_window_is_text(self):
        assert not is_binary_content(b"a" * 8000 + b"\0")

    @pytest.mark.parametrize("text,lines", [
        ("", []),
        ("a\nb\n", ["a", "b"]),
        ("a\nb", ["a", "b"]),
        ("a\r\nb\r\n", ["a", "b"]),
        ("\n", [""]),
    ])
    def test_split_lines(self, text, lines):
        assert split_lines(text) == lines


class TestParseHunks:
    """Walking git diff output with unidiff."""

    def test_parses_numbers_and_types(self):
        diff_text = (
            "diff --git a/f.txt b/f.txt\n"
            "--- a/f.txt\n"
            "+++ b/f.txt\n"
            "@@ -1,3 +1,3 @@\n"
            " a\n"
            "-b\n"
            "+B\n"
            " c\n"
        )
        hunks, is_binary = parse_hunks(diff_text)
        assert not is_binary
        assert len(hunks) == 1
        lines = hunks[0].lines
        assert [(l.old_line_no, l.new_line_no) for l in lines] == [(1, 1), (2, None), (None, 2), (3, 3)]
        assert lines[2].content == "B\n"

    def test_no_newline_marker_flags_previous_line(self):
        diff_text = (
            "--- a/f.txt\n"
            "+++ b/f.txt\n"
            "@@ -1 +1 @@\n"
            "-a\n"
            "\\ No newline at end of file\n"
            "+b\n"
            "\\ No newline at end of file\n"
        )
        hunks, _ = parse_hunks(diff_text)
        assert [l.no_newline_at_eof for l in hunks[0].lines] == [True, True]
        assert len(hunks[0].lines) == 2

    def test_binary_report(self):
        diff_text = (
            "diff --git a/x.bin b/x.bin\n"
            "index 1111111..2222222 100644\n"
            "Binary files a/x.bin and b/x.bin differ\n"
        )
        hunks, is_binary = parse_hunks(diff_text)
        assert is_binary
        assert hunks == []

    def test_empty(self):
        assert parse_hunks("") == ([], False)

    def test_hunk_without_file_header(self):
        with pytest.raises(DiffParseError):
            parse_hunks("@@ -1 +1 @@\n-a\n+b\n")


class TestWorkingTreeDiff:
    """Index -> working tree."""

    def test_modified_line(self, repo_with_file):
        (repo_with_file / "a.txt").write_text("one\ntwo\nTHREE\nfour\nfive\n")
        info = build_diff(repo_with_file, ComparisonMode.WORKING_TREE, "a.txt")

        assert not info.is_binary
        assert len(info.hunks) == 1
        hunk = info.hunks[0]
        assert (hunk.old_start, hunk.old_lines, hunk.new_start, hunk.new_lines) == (1, 5, 1, 5)
        assert _kinds(hunk) == [
            LineType.CONTEXT, LineType.CONTEXT, LineType.DELETE,
            LineType.ADD, LineType.CONTEXT, LineType.CONTEXT,
        ]
        assert hunk.lines[3].content == "THREE\n"
        assert hunk.lines[3].new_line_no == 3

    def test_unchanged_file_has_no_hunks(self, repo_with_file):
        info = build_diff(repo_with_file, ComparisonMode.WORKING_TREE, "a.txt")
        assert info.hunks == []

    def test_two_separate_hunks(self, repo):
        (repo / "long.txt").write_text("".join(f"line {i}\n" for i in range(1, 21)))
        commit_all(repo)
        lines = [f"line {i}\n" for i in range(1, 21)]
        lines[1] = "changed 2\n"
        lines[17] = "changed 18\n"
        (repo / "long.txt").write_text("".join(lines))

        info = build_diff(repo, ComparisonMode.WORKING_TREE, "long.txt")
        assert len(info.hunks) == 2
        assert info.hunks[1].old_start > info.hunks[0].old_start

    def test_missing_trailing_newline(self, repo_with_file):
        (repo_with_file / "a.txt").write_text("one\ntwo\nthree\nfour\nfive")
        info = build_diff(repo_with_file, ComparisonMode.WORKING_TREE, "a.txt")
        lines = info.hunks[0].lines
        assert lines[-1].line_type is LineType.ADD
        assert lines[-1].no_newline_at_eof
        assert not lines[-2].no_newline_at_eof

    def test_with_content(self, repo_with_file):
        (repo_with_file / "a.txt").write_text("one\n")
        info = build_diff(repo_with_file, ComparisonMode.WORKING_TREE, "a.txt", with_content=True)
        assert info.old_content == "one\ntwo\nthree\nfour\nfive\n"
        assert info.new_content == "one\n"

    def test_content_omitted_by_default(self, repo_with_file):
        (repo_with_file / "a.txt").write_text("one\n")
        info = build_diff(repo_with_file, ComparisonMode.WORKING_TREE, "a.txt")
        assert info.old_content is None
        assert info.new_content is None

    def test_unknown_path(self, repo_with_file):
        with pytest.raises(NotFoundError):
            build_diff(repo_with_file, ComparisonMode.WORKING_TREE, "nope.txt")

    def test_binary_by_content(self, repo):
        (repo / "data.bin").write_bytes(b"\x00\x01\x02")
        commit_all(repo)
        (repo / "data.bin").write_bytes(b"\x00\x01\x02\x03")

        info = build_diff(repo, ComparisonMode.WORKING_TREE, "data.bin")
        assert info.is_binary
        assert info.hunks == []
        assert info.binary_kind is BinaryKind.OTHER
        assert info.file_size == 4

    def test_space_in_path(self, repo):
        (repo / "my file.txt").write_text("a\n")
        commit_all(repo)
        (repo / "my file.txt").write_text("b\n")
        info = build_diff(repo, ComparisonMode.WORKING_TREE, "my file.txt")
        assert len(info.hunks) == 1


class TestStagedDiff:
    """HEAD -> index."""

    def test_staged_change(self, repo_with_file):
        (repo_with_file / "a.txt").write_text("zero\none\ntwo\nthree\nfour\nfive\n")
        git(repo_with_file, "add", "a.txt")

        staged = build_diff(repo_with_file, ComparisonMode.STAGED, "a.txt")
        assert len(staged.hunks) == 1
        assert staged.hunks[0].added == 1
        assert staged.hunks[0].lines[0].content == "zero\n"

        unstaged = build_diff(repo_with_file, ComparisonMode.WORKING_TREE, "a.txt")
        assert unstaged.hunks == []

    def test_newly_added_file(self, repo_with_file):
        (repo_with_file / "b.txt").write_text("x\ny\n")
        git(repo_with_file, "add", "b.txt")
        info = build_diff(repo_with_file, ComparisonMode.STAGED, "b.txt")
        hunk = info.hunks[0]
        assert (hunk.old_start, hunk.old_lines, hunk.new_start, hunk.new_lines) == (0, 0, 1, 2)

    def test_not_staged_anywhere(self, repo_with_file):
        with pytest.raises(NotFoundError):
            build_diff(repo_with_file, ComparisonMode.STAGED, "nope.txt")

    def test_binary_staged(self, repo):
        (repo / "data.bin").write_bytes(b"\x00\x01")
        commit_all(repo)
        (repo / "data.bin").write_bytes(b"\x00\x01\x02")
        git(repo, "add", "data.bin")

        info = build_diff(repo, ComparisonMode.STAGED, "data.bin")
        assert info.is_binary
        assert info.hunks == []


class TestCommitDiff:
    """First parent -> commit."""

    def test_commit_against_parent(self, repo_with_file):
        (repo_with_file / "a.txt").write_text("one\ntwo\nthree\nfour\nfive\nsix\n")
        commit_all(repo_with_file, "add six")
        sha = git(repo_with_file, "rev-parse", "HEAD").strip()

        info = build_diff(repo_with_file, ComparisonMode.COMMIT, "a.txt", commit=sha)
        assert len(info.hunks) == 1
        assert info.hunks[0].added == 1
        assert info.hunks[0].removed == 0

    def test_root_commit_diffs_against_empty_tree(self, repo_with_file):
        sha = git(repo_with_file, "rev-parse", "HEAD").strip()
        info = build_diff(repo_with_file, ComparisonMode.COMMIT, "a.txt", commit=sha, with_content=True)
        hunk = info.hunks[0]
        assert (hunk.old_start, hunk.old_lines, hunk.new_start, hunk.new_lines) == (0, 0, 1, 5)
        assert info.old_content is None
        assert info.new_content == "one\ntwo\nthree\nfour\nfive\n"

    def test_unknown_commit(self, repo_with_file):
        with pytest.raises(NotFoundError):
            build_diff(repo_with_file, ComparisonMode.COMMIT, "a.txt", commit="deadbeef" * 5)

    def test_path_not_in_commit(self, repo_with_file):
        with pytest.raises(NotFoundError):
            build_diff(repo_with_file, ComparisonMode.COMMIT, "nope.txt", commit="HEAD")

    def test_commit_required(self, repo_with_file):
        with pytest.raises(ValueError):
            build_diff(repo_with_file, ComparisonMode.COMMIT, "a.txt")

    def test_binary_commit(self, repo):
        (repo / "data.bin").write_bytes(b"\x00\x01")
        commit_all(repo)
        (repo / "data.bin").write_bytes(b"\x00\x01\x02")
        commit_all(repo, "grow blob")

        info = build_diff(repo, ComparisonMode.COMMIT, "data.bin", commit="HEAD")
        assert info.is_binary
        assert info.hunks == []


class TestUntrackedDiff:
    """Whole file as one added hunk."""

    def test_lines_numbered_from_one(self, repo):
        (repo / "new.txt").write_text("x\ny\nz\n")
        info = build_diff(repo, ComparisonMode.UNTRACKED, "new.txt")

        hunk = info.hunks[0]
        assert (hunk.old_start, hunk.old_lines, hunk.new_start, hunk.new_lines) == (0, 0, 1, 3)
        assert all(line.line_type is LineType.ADD for line in hunk.lines)
        assert [line.new_line_no for line in hunk.lines] == [1, 2, 3]
        assert all(line.old_line_no is None for line in hunk.lines)
        assert info.new_content == "x\ny\nz\n"

    def test_trailing_newline_is_not_a_line(self, repo):
        (repo / "new.txt").write_text("x\n")
        info = build_diff(repo, ComparisonMode.UNTRACKED, "new.txt")
        assert info.hunks[0].new_lines == 1

    def test_missing_final_newline(self, repo):
        (repo / "new.txt").write_text("x\ny")
        info = build_diff(repo, ComparisonMode.UNTRACKED, "new.txt")
        assert info.hunks[0].new_lines == 2
        assert info.hunks[0].lines[-1].no_newline_at_eof

    def test_empty_file(self, repo):
        (repo / "empty.txt").write_text("")
        info = build_diff(repo, ComparisonMode.UNTRACKED, "empty.txt")
        assert info.hunks == []
        assert info.file_size == 0

    def test_binary_image(self, repo):
        (repo / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00")
        info = build_diff(repo, ComparisonMode.UNTRACKED, "logo.png")
        assert info.is_binary
        assert info.binary_kind is BinaryKind.IMAGE
        assert info.file_size == 10
        assert info.hunks == []

    def test_missing_file(self, repo):
        with pytest.raises(NotFoundError):
            build_diff(repo, ComparisonMode.UNTRACKED, "ghost.txt")


class TestDeletedDiff:
    """Whole HEAD blob as one deleted hunk."""

    def test_all_lines_deleted(self, repo_with_file):
        (repo_with_file / "a.txt").unlink()
        info = build_diff(repo_with_file, ComparisonMode.DELETED, "a.txt")

        hunk = info.hunks[0]
        assert (hunk.old_start, hunk.old_lines, hunk.new_start, hunk.new_lines) == (1, 5, 0, 0)
        assert all(line.line_type is LineType.DELETE for line in hunk.lines)
        assert [line.old_line_no for line in hunk.lines] == [1, 2, 3, 4, 5]
        assert info.old_content == "one\ntwo\nthree\nfour\nfive\n"

    def test_not_in_head(self, repo_with_file):
        with pytest.raises(NotFoundError):
            build_diff(repo_with_file, ComparisonMode.DELETED, "never.txt")

    def test_binary_deleted(self, repo):
        (repo / "data.bin").write_bytes(b"text first\x00then binary")
        commit_all(repo)
        (repo / "data.bin").unlink()

        info = build_diff(repo, ComparisonMode.DELETED, "data.bin")
        assert info.is_binary
        assert info.hunks == []


class TestFileQueries:
    """Name listings."""

    def test_get_diff_names(self, repo_with_file):
        (repo_with_file / "a.txt").write_text("changed\n")
        assert get_diff_names(repo_with_file) == ["a.txt"]

    def test_get_conflicted_files_clean(self, repo_with_file):
        assert get_conflicted_files(repo_with_file) == []

    def test_get_conflicted_files_after_merge_conflict(self, repo_with_file):
        git(repo_with_file, "checkout", "-q", "-b", "topic")
        (repo_with_file / "a.txt").write_text("topic\n")
        commit_all(repo_with_file, "topic")
        git(repo_with_file, "checkout", "-q", "main")
        (repo_with_file / "a.txt").write_text("main\n")
        commit_all(repo_with_file, "main")
        # merge exits non-zero on conflict; the git() helper would fail the test
        subprocess.run(["git", "-C", str(repo_with_file), "merge", "topic"], capture_output=True)

        assert get_conflicted_files(repo_with_file) == ["a.txt"]
