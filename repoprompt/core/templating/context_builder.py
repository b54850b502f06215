# repoprompt/core/templating/context_builder.py
"""
Builds the render context passed to Handlebars templates.

A RenderContext carries the core repository fields, the task-lineage fields
each template kind uses, and an open-ended `extra` map. Use the named
constructors (for_planning, for_implementation, ...) rather than filling
fields by hand.
"""
import inspect
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Iterable, List, Optional, Sequence
import structlog

from repoprompt.config.settings import DEFAULT_MAIN_BRANCH, TaskKind
from repoprompt.exceptions import ContextValidationError
from repoprompt.util import feature_id_from_name

log = structlog.get_logger(__name__)

@dataclass
class FileContext:
    path: str
    content: str
    language: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "content": self.content, "language": self.language}

@dataclass
class RenderContext:
    repo_path: str = ""
    main_branch: str = DEFAULT_MAIN_BRANCH
    user_message: str = ""
    files: List[FileContext] = field(default_factory=list)

    # task lineage
    feature_name: Optional[str] = None
    feature_id: Optional[str] = None
    feature_description: Optional[str] = None
    worktree_path: Optional[str] = None
    worktree_branch: Optional[str] = None
    implementation_plan: Optional[str] = None
    implementation_summary: Optional[str] = None
    diff_content: Optional[str] = None
    task_kind: Optional[str] = None

    # resume state, read-only snapshot supplied by the caller
    current_phase: Optional[str] = None
    current_step: Optional[str] = None
    turns_so_far: Optional[int] = None
    cost_so_far: Optional[float] = None

    extra: Dict[str, Any] = field(default_factory=dict)

    # --- named constructors ---

    @classmethod
    def _for_feature(
        cls, kind: TaskKind, repo_path: str, main_branch: str, feature_name: str,
        user_message: Optional[str] = None, **lineage: Any,
    ) -> "RenderContext":
        return cls(
            repo_path=str(repo_path),
            main_branch=main_branch,
            user_message=user_message or f"{kind.value} for feature: {feature_name}",
            feature_name=feature_name,
            feature_id=feature_id_from_name(feature_name),
            task_kind=kind.value,
            **lineage,
        )

    @classmethod
    def for_init(cls, repo_path: str, main_branch: str = DEFAULT_MAIN_BRANCH, user_message: str = "") -> "RenderContext":
        return cls(repo_path=str(repo_path), main_branch=main_branch, user_message=user_message, task_kind=TaskKind.INIT.value)

    @classmethod
    def for_planning(
        cls, repo_path: str, main_branch: str, feature_name: str,
        feature_description: Optional[str] = None, user_message: Optional[str] = None,
    ) -> "RenderContext":
        return cls._for_feature(
            TaskKind.PLANNING, repo_path, main_branch, feature_name,
            user_message or feature_description, feature_description=feature_description,
        )

    @classmethod
    def for_implementation(
        cls, repo_path: str, main_branch: str, feature_name: str, implementation_plan: Optional[str] = None,
        worktree_path: Optional[str] = None, worktree_branch: Optional[str] = None,
        feature_description: Optional[str] = None, user_message: Optional[str] = None,
    ) -> "RenderContext":
        return cls._for_feature(
            TaskKind.IMPLEMENTATION, repo_path, main_branch, feature_name, user_message,
            implementation_plan=implementation_plan, worktree_path=worktree_path,
            worktree_branch=worktree_branch, feature_description=feature_description,
        )

    @classmethod
    def for_verification(
        cls, repo_path: str, main_branch: str, feature_name: str, implementation_summary: Optional[str] = None,
        diff_content: Optional[str] = None, worktree_path: Optional[str] = None,
        worktree_branch: Optional[str] = None, user_message: Optional[str] = None,
    ) -> "RenderContext":
        return cls._for_feature(
            TaskKind.VERIFICATION, repo_path, main_branch, feature_name, user_message,
            implementation_summary=implementation_summary, diff_content=diff_content,
            worktree_path=worktree_path, worktree_branch=worktree_branch,
        )

    @classmethod
    def for_review(
        cls, repo_path: str, main_branch: str, feature_name: str, diff_content: Optional[str] = None,
        implementation_summary: Optional[str] = None, worktree_branch: Optional[str] = None,
        user_message: Optional[str] = None,
    ) -> "RenderContext":
        return cls._for_feature(
            TaskKind.REVIEW, repo_path, main_branch, feature_name, user_message,
            diff_content=diff_content, implementation_summary=implementation_summary,
            worktree_branch=worktree_branch,
        )

    @classmethod
    def for_resume(
        cls, repo_path: str, main_branch: str, feature_name: str, current_phase: str,
        current_step: Optional[str] = None, turns_so_far: int = 0, cost_so_far: float = 0.0,
        implementation_plan: Optional[str] = None, worktree_path: Optional[str] = None,
        worktree_branch: Optional[str] = None, user_message: Optional[str] = None,
    ) -> "RenderContext":
        return cls._for_feature(
            TaskKind.RESUME, repo_path, main_branch, feature_name, user_message,
            current_phase=current_phase, current_step=current_step, turns_so_far=turns_so_far,
            cost_so_far=cost_so_far, implementation_plan=implementation_plan,
            worktree_path=worktree_path, worktree_branch=worktree_branch,
        )

    @classmethod
    def for_task(cls, kind: TaskKind, repo_path: str, main_branch: str, feature_name: str = "", **kwargs: Any) -> "RenderContext":
        # dispatches to the named constructor for `kind`.
        if kind == TaskKind.INIT:
            return cls.for_init(repo_path, main_branch, user_message=kwargs.get("user_message") or "")
        constructors = {
            TaskKind.PLANNING: cls.for_planning,
            TaskKind.IMPLEMENTATION: cls.for_implementation,
            TaskKind.VERIFICATION: cls.for_verification,
            TaskKind.REVIEW: cls.for_review,
            TaskKind.RESUME: cls.for_resume,
        }
        constructor = constructors[kind]
        if kind == TaskKind.RESUME:
            kwargs.setdefault("current_phase", "unknown")
        # drop lineage fields the chosen task kind does not use.
        accepted = inspect.signature(constructor).parameters
        dropped = sorted(k for k in kwargs if k not in accepted)
        if dropped:
            log.debug("render_context_ignoring_fields", task_kind=kind.value, fields=dropped)
        return constructor(repo_path, main_branch, feature_name, **{k: v for k, v in kwargs.items() if k in accepted})

    # --- mutation ---

    def add_file(self, file: FileContext) -> None:
        self.files.append(file)

    def add_files(self, files: Iterable[FileContext]) -> None:
        self.files.extend(files)

    def add_extra(self, key: str, value: Any) -> None:
        self.extra[key] = value

    # --- validation & flattening ---

    def validate(self, required: Sequence[str] = ()) -> None:
        """
        Checks values a template declares required. Not called automatically;
        callers run it before rendering. Raises ContextValidationError.
        """
        if not self.main_branch:
            raise ContextValidationError("main_branch must not be empty")
        data = self.to_template_dict()
        missing = [name for name in required if data.get(name) in (None, "", [])]
        if missing:
            raise ContextValidationError(f"missing required template variables: {', '.join(missing)}")

    def to_template_dict(self) -> Dict[str, Any]:
        """Flattens the context: named fields, then `extra` merged at top level."""
        data: Dict[str, Any] = {}
        for f in fields(self):
            if f.name in ("files", "extra"):
                continue
            value = getattr(self, f.name)
            if value is not None:
                data[f.name] = value
        data["files"] = [file.to_dict() for file in self.files]
        data.update(self.extra)
        return data
