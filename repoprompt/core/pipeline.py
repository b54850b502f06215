# repoprompt/core/pipeline.py
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Union

from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn
from rich.console import Console as RichConsole
import structlog
import logging as stdlib_logging

from repoprompt.config.settings import ProjectSettings, TaskKind
from repoprompt.core.context_builder import ContextBuilderConfig, RepositoryContext, build_context
from repoprompt.core.templating.context_builder import RenderContext
from repoprompt.core.templating.front_matter import TemplateConfig
from repoprompt.core.templating.registry import PromptRegistry

log = structlog.get_logger(__name__)

@dataclass
class RenderedPrompt:
    # the rendered prompt text plus the agent budget it should run under.
    template_name: str
    text: str
    system_prompt: str = ""
    use_preset: bool = True
    tools: List[str] = field(default_factory=list)
    max_turns: int = 0
    max_cost_usd: float = 0.0
    file_count: int = 0

    def to_dict(self) -> dict:
        return {
            "template_name": self.template_name,
            "prompt": self.text,
            "system_prompt": self.system_prompt,
            "use_preset": self.use_preset,
            "tools": list(self.tools),
            "max_turns": self.max_turns,
            "max_cost_usd": self.max_cost_usd,
            "file_count": self.file_count,
        }

class PromptGenerator:
    # orchestrates scanning, context assembly and rendering for one project.
    def __init__(self, settings: ProjectSettings, registry: PromptRegistry, project_root: Union[str, Path] = "."):
        self.settings = settings
        self.registry = registry
        self.project_root = Path(project_root)
        self.log = structlog.get_logger(f"{__name__}.{self.__class__.__name__}")
        self.repository_context: Optional[RepositoryContext] = None

    @property
    def main_branch(self) -> str:
        return self.settings.project.main_branch

    def scan_repository(self) -> RepositoryContext:
        # builds the file snapshot, with a spinner when stderr is an interactive terminal.
        app_log_level = stdlib_logging.getLogger("repoprompt").getEffectiveLevel()
        progress_disabled = app_log_level > stdlib_logging.INFO or not sys.stderr.isatty()
        stderr_console = RichConsole(file=sys.stderr)

        with Progress(
            SpinnerColumn(), TextColumn("[bold blue]{task.description}"), BarColumn(),
            transient=True, disable=progress_disabled, console=stderr_console
        ) as progress:
            scan_task = progress.add_task("scanning repository...", total=None)
            context = build_context(
                self.project_root, self.main_branch,
                ContextBuilderConfig.from_settings(self.settings.repository),
            )
            progress.update(scan_task, completed=True, description=f"collected {len(context.files)} files.")

        self.repository_context = context
        return context

    def _bundle(self, template_name: str, text: str, config: TemplateConfig, file_count: int) -> RenderedPrompt:
        limits = self.settings.limits
        return RenderedPrompt(
            template_name=template_name,
            text=text,
            system_prompt=config.system_prompt,
            use_preset=config.use_preset,
            tools=list(config.tools),
            max_turns=min(config.max_turns, limits.max_turns),
            max_cost_usd=limits.max_cost_usd,
            file_count=file_count,
        )

    def generate(
        self, kind: TaskKind, feature_name: str = "", include_files: bool = True, **lineage: Any
    ) -> RenderedPrompt:
        """
        Renders the prompt for one task. Raises TemplateNotFoundError when the
        task's template is not registered and ContextValidationError when a
        value the template requires is missing.
        """
        template_name = kind.template_name
        config = self.registry.get_config(template_name)

        render_context = RenderContext.for_task(
            kind, str(self.project_root), self.main_branch, feature_name, **lineage
        )
        if include_files:
            render_context.add_files(self.scan_repository().to_file_contexts())

        render_context.validate(config.required)
        self.log.info(
            "rendering_task_prompt", task_kind=kind.value, template=template_name,
            feature=feature_name or None, file_count=len(render_context.files),
        )
        text = self.registry.render(template_name, render_context)
        return self._bundle(template_name, text, config, len(render_context.files))

    def generate_for_template(self, template_name: str, user_message: str = "") -> RenderedPrompt:
        # renders any registered template with the core fields only.
        render_context = RenderContext(
            repo_path=str(self.project_root), main_branch=self.main_branch, user_message=user_message
        )
        entry = self.registry.get_entry(template_name)
        config = entry.config or TemplateConfig()
        render_context.validate(config.required)
        text = self.registry.render(template_name, render_context)
        return self._bundle(template_name, text, config, 0)
