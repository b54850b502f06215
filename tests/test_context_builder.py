# tests/test_context_builder.py
"""Tests for assembling a RepositoryContext from a directory tree."""

import os
import pytest
from pathlib import Path

from repoprompt.core.context_builder import (
    ContextBuilderConfig, RepositoryContext, build_context, build_minimal_context,
)
from repoprompt.config.settings import RepositorySettings
from repoprompt.exceptions import InvalidRootError, WalkError


@pytest.fixture
def sample_repo(tmp_path: Path) -> Path:
    """Creates a small repository with sources, build output and vendored deps."""
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.py").write_text("def main():\n    return 0\n")
    (tmp_path / "src" / "util.rs").write_text("fn util() {}\n")
    (tmp_path / "README.md").write_text("# Sample\n")
    (tmp_path / "target").mkdir()
    (tmp_path / "target" / "build.o").write_bytes(b"\x7fELF")
    (tmp_path / "node_modules" / "pkg").mkdir(parents=True)
    (tmp_path / "node_modules" / "pkg" / "index.js").write_text("module.exports = {}\n")
    return tmp_path


class TestBuildContext:

    def test_excluded_build_output_is_dropped(self, tmp_path):
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "main.ext").write_bytes(b"a" * 50)
        (tmp_path / "target").mkdir()
        (tmp_path / "target" / "build.o").write_bytes(b"b" * 10)

        config = ContextBuilderConfig(exclude_patterns=["target/"], max_files=10, max_file_size=1024)
        context = build_context(tmp_path, "main", config)

        assert len(context.files) == 1
        assert context.files[0].path == Path("src/main.ext")
        assert context.files[0].content == "a" * 50
        assert context.files[0].language == "unknown"

    def test_default_exclusions(self, sample_repo):
        context = build_context(sample_repo, "main")
        paths = sorted(rec.path.as_posix() for rec in context.files)
        assert paths == ["README.md", "src/main.py", "src/util.rs"]

    def test_records_carry_language_and_content(self, sample_repo):
        context = build_context(sample_repo, "develop")
        by_path = {rec.path.as_posix(): rec for rec in context.files}
        assert by_path["src/main.py"].language == "python"
        assert by_path["src/util.rs"].language == "rust"
        assert by_path["README.md"].language == "markdown"
        assert by_path["src/main.py"].content.startswith("def main()")
        assert context.branch == "develop"
        assert context.repository_path == sample_repo

    def test_paths_are_relative_and_unique(self, sample_repo):
        context = build_context(sample_repo, "main")
        paths = [rec.path for rec in context.files]
        assert all(not p.is_absolute() for p in paths)
        assert len(paths) == len(set(paths))

    def test_max_files_caps_result(self, tmp_path):
        for i in range(5):
            (tmp_path / f"f{i}.txt").write_text(str(i))
        context = build_context(tmp_path, "main", ContextBuilderConfig(max_files=3))
        assert len(context.files) == 3

    def test_max_files_zero_returns_nothing(self, sample_repo):
        context = build_context(sample_repo, "main", ContextBuilderConfig(max_files=0))
        assert context.files == ()

    def test_oversized_and_binary_files_are_skipped(self, tmp_path):
        (tmp_path / "small.txt").write_text("ok")
        (tmp_path / "large.txt").write_text("x" * 100)
        (tmp_path / "blob.bin").write_bytes(b"\xff\xfe\xfd")
        context = build_context(tmp_path, "main", ContextBuilderConfig(max_file_size=10))
        assert [rec.path.as_posix() for rec in context.files] == ["small.txt"]

    def test_skipped_files_do_not_count_toward_max_files(self, tmp_path):
        (tmp_path / "big1.txt").write_text("x" * 100)
        (tmp_path / "big2.txt").write_text("x" * 100)
        (tmp_path / "ok.txt").write_text("ok")
        context = build_context(tmp_path, "main", ContextBuilderConfig(max_files=1, max_file_size=10))
        assert [rec.path.as_posix() for rec in context.files] == ["ok.txt"]

    def test_include_extensions(self, sample_repo):
        config = ContextBuilderConfig(include_extensions=["py", ".rs"])
        context = build_context(sample_repo, "main", config)
        assert sorted(rec.path.as_posix() for rec in context.files) == ["src/main.py", "src/util.rs"]

    def test_root_location_does_not_trigger_exclusion(self, tmp_path):
        """Only the path below the scan root is matched against patterns."""
        root = tmp_path / "target" / "checkout"
        root.mkdir(parents=True)
        (root / "lib.py").write_text("x = 1\n")
        context = build_context(root, "main", ContextBuilderConfig(exclude_patterns=["target/"]))
        assert [rec.path.as_posix() for rec in context.files] == ["lib.py"]

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(InvalidRootError):
            build_context(tmp_path / "nope", "main")

    @pytest.mark.skipif(not hasattr(os, "geteuid") or os.geteuid() == 0, reason="root can read any directory")
    def test_unreadable_subdirectory_aborts_the_scan(self, tmp_path):
        (tmp_path / "ok.py").write_text("x = 1\n")
        locked = tmp_path / "locked"
        locked.mkdir()
        (locked / "hidden.py").write_text("y = 2\n")
        locked.chmod(0o000)
        try:
            with pytest.raises(WalkError):
                build_context(tmp_path, "main", ContextBuilderConfig(exclude_patterns=[]))
        finally:
            locked.chmod(0o755)

    def test_file_root_raises(self, tmp_path):
        f = tmp_path / "file.txt"
        f.write_text("x")
        with pytest.raises(InvalidRootError):
            build_context(f, "main")

    def test_config_from_settings(self):
        settings = RepositorySettings(exclude_patterns=["dist/"], max_file_size=5, max_files=2, include_extensions=["py"])
        config = ContextBuilderConfig.from_settings(settings)
        assert config.exclude_patterns == ["dist/"]
        assert config.max_file_size == 5
        assert config.max_files == 2
        assert config.include_extensions == ["py"]
        assert config.follow_symlinks is False


class TestRepositoryContext:

    def test_minimal_context_does_not_touch_disk(self):
        context = build_minimal_context("/repo", "main")
        assert context.repository_path == Path("/repo")
        assert context.branch == "main"
        assert context.files == ()
        assert dict(context.metadata) == {}

    def test_with_metadata_returns_copy(self):
        context = build_minimal_context("/repo", "main")
        annotated = context.with_metadata(commit="abc123")
        assert annotated.metadata == {"commit": "abc123"}
        assert dict(context.metadata) == {}
        assert isinstance(annotated, RepositoryContext)

    def test_to_file_contexts(self, sample_repo):
        context = build_context(sample_repo, "main", ContextBuilderConfig(include_extensions=["py"]))
        file_contexts = context.to_file_contexts()
        assert [(fc.path, fc.language) for fc in file_contexts] == [("src/main.py", "python")]
