# tests/test_render_context.py
"""Tests for RenderContext constructors, validation and flattening."""

import pytest

from repoprompt.config.settings import TaskKind
from repoprompt.core.templating import FileContext, RenderContext
from repoprompt.exceptions import ContextValidationError
from repoprompt.util import feature_id_from_name


class TestNamedConstructors:

    def test_planning(self):
        ctx = RenderContext.for_planning("/repo", "main", "user-auth", feature_description="Add login")
        assert ctx.task_kind == "planning"
        assert ctx.feature_name == "user-auth"
        assert ctx.feature_id == feature_id_from_name("user-auth")
        assert ctx.feature_description == "Add login"
        assert ctx.user_message == "Add login"

    def test_default_user_message(self):
        ctx = RenderContext.for_implementation("/repo", "main", "search")
        assert ctx.user_message == "implementation for feature: search"

    def test_explicit_user_message_wins(self):
        ctx = RenderContext.for_review("/repo", "main", "search", user_message="look closely")
        assert ctx.user_message == "look closely"

    def test_verification_lineage(self):
        ctx = RenderContext.for_verification(
            "/repo", "main", "search", implementation_summary="done", diff_content="+x", worktree_branch="feat/search",
        )
        assert ctx.task_kind == "verification"
        assert ctx.implementation_summary == "done"
        assert ctx.diff_content == "+x"
        assert ctx.worktree_branch == "feat/search"

    def test_resume(self):
        ctx = RenderContext.for_resume("/repo", "main", "search", current_phase="verify", turns_so_far=3, cost_so_far=0.25)
        assert ctx.task_kind == "resume"
        assert ctx.current_phase == "verify"
        assert ctx.turns_so_far == 3
        assert ctx.cost_so_far == 0.25

    def test_init_has_no_feature(self):
        ctx = RenderContext.for_init("/repo", "trunk")
        assert ctx.task_kind == "init"
        assert ctx.feature_name is None
        assert ctx.main_branch == "trunk"

    def test_for_task_dispatch_ignores_unused_fields(self):
        ctx = RenderContext.for_task(TaskKind.PLANNING, "/repo", "main", "f", diff_content="ignored", feature_description="d")
        assert ctx.task_kind == "planning"
        assert ctx.diff_content is None
        assert ctx.feature_description == "d"

    def test_for_task_resume_defaults_phase(self):
        ctx = RenderContext.for_task(TaskKind.RESUME, "/repo", "main", "f")
        assert ctx.current_phase == "unknown"

    @pytest.mark.parametrize("kind", list(TaskKind))
    def test_for_task_sets_kind(self, kind):
        ctx = RenderContext.for_task(kind, "/repo", "main", "f")
        assert ctx.task_kind == kind.value


class TestFeatureId:

    def test_four_digits_and_stable(self):
        first = feature_id_from_name("user-auth")
        assert len(first) == 4
        assert first.isdigit()
        assert feature_id_from_name("user-auth") == first


class TestValidateAndFlatten:

    def test_validate_requires_main_branch(self):
        with pytest.raises(ContextValidationError):
            RenderContext(repo_path="/repo", main_branch="").validate()

    def test_validate_required_names(self):
        ctx = RenderContext(repo_path="/repo")
        with pytest.raises(ContextValidationError) as excinfo:
            ctx.validate(["feature_name", "ticket"])
        assert "feature_name" in str(excinfo.value)
        ctx.add_extra("ticket", "T-1")
        ctx.feature_name = "f"
        ctx.validate(["feature_name", "ticket"])

    def test_template_dict_drops_unset_fields(self):
        data = RenderContext(repo_path="/repo", main_branch="main").to_template_dict()
        assert data["repo_path"] == "/repo"
        assert data["main_branch"] == "main"
        assert data["files"] == []
        assert "feature_name" not in data
        assert "extra" not in data

    def test_template_dict_flattens_files_and_extra(self):
        ctx = RenderContext(repo_path="/repo")
        ctx.add_file(FileContext("a.py", "print()", "python"))
        ctx.add_extra("custom", {"k": 1})
        data = ctx.to_template_dict()
        assert data["files"] == [{"path": "a.py", "content": "print()", "language": "python"}]
        assert data["custom"] == {"k": 1}
