# repoprompt/cli/interface.py
import sys
import json
import functools
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Tuple

import click
from click_option_group import optgroup
import structlog

from repoprompt import __version__ as app_version
from repoprompt.config.loader import load_project_settings, save_project_settings, PROJECT_CONFIG_DIR
from repoprompt.config.settings import ProjectSettings, TaskKind, DEFAULT_MAIN_BRANCH
from repoprompt.logging_setup import configure_logging
from repoprompt.core.context_builder import ContextBuilderConfig, build_context
from repoprompt.core.git_utils import current_branch, detect_repo_url
from repoprompt.core.output import write_to_stdout, write_to_file
from repoprompt.core.pipeline import PromptGenerator, RenderedPrompt
from repoprompt.core.templating.default_templates import BUILTIN_TEMPLATES
from repoprompt.core.templating.registry import PromptRegistry, TEMPLATE_FILE_SUFFIX
from repoprompt.exceptions import RepoPromptError, ConfigError
from repoprompt.cli.console_output import print_context_table, print_prompt_summary, print_template_list

log = structlog.get_logger(__name__)

TASK_KIND_CHOICES = sorted({k.value for k in TaskKind} | {k.template_name for k in TaskKind})

@dataclass
class CliState:
    project_root: Path
    settings: ProjectSettings

    def registry(self) -> PromptRegistry:
        return PromptRegistry.from_settings(self.project_root, self.settings.prompts)

def _verbosity_to_level(verbosity_level: int) -> Optional[str]:
    if verbosity_level == 1: return "info"
    if verbosity_level >= 2: return "debug"
    return None

def handle_cli_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    # maps application errors to a red message and exit code 1.
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except click.exceptions.Exit: raise
        except click.ClickException: raise
        except RepoPromptError as e:
            log.error("handled_application_error_in_cli", error_type=type(e).__name__, message=str(e))
            click.secho(f"Error: {e}", fg="red", err=True)
            sys.exit(1)
        except Exception as e:
            log.critical("unexpected_critical_error_in_cli", message=str(e), exc_info=True)
            click.secho(f"Unexpected critical error: {e}. Please report this.", fg="red", err=True)
            sys.exit(1)
    return wrapper

def _emit(rendered: RenderedPrompt, output_file: Optional[Path], as_json: bool, show_summary: bool):
    output_to_write = json.dumps(rendered.to_dict(), indent=2) + "\n" if as_json else rendered.text
    if output_file:
        write_to_file(output_file, output_to_write)
        click.echo(f"Info: Output written to: {output_file}", err=True)
    else:
        log.info("writing_final_output_to_stdout")
        write_to_stdout(output_to_write)
    if show_summary:
        print_prompt_summary(rendered)

def _read_optional_file(path: Optional[Path]) -> Optional[str]:
    if not path:
        return None
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        log.error("input_file_unreadable", path=str(path), error=str(e))
        raise ConfigError(f"Cannot read '{path}' as UTF-8 text: {e}") from e


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option("-p", "--project-root", "project_root", type=click.Path(exists=True, file_okay=False, path_type=Path), default=".", help="Repository root. Default: current directory.")
@click.option("--verbose", "-v", "verbosity_level", count=True, help="Verbosity: -v info, -vv debug.")
@click.option("--force-json-logs", "force_json_logs_cli", is_flag=True, default=False, help="Force JSON logs.")
@click.version_option(version=app_version, package_name="repoprompt", prog_name="repoprompt", help="Show version and exit.")
@click.pass_context
@handle_cli_errors
def main_cli_group(ctx: click.Context, project_root: Path, verbosity_level: int, force_json_logs_cli: bool):
    """repoprompt: Build agent task prompts from a repository snapshot
    and Handlebars templates with YAML front matter."""
    cli_level = _verbosity_to_level(verbosity_level)
    configure_logging(log_level_str=cli_level or "warning", force_json_logs=force_json_logs_cli)

    project_root = project_root.resolve()
    settings = load_project_settings(project_root)
    if cli_level is None and settings.logging.level != "warning":
        configure_logging(log_level_str=settings.logging.level, force_json_logs=force_json_logs_cli)

    log.debug("cli_command_invoked", project_root=str(project_root), subcommand=ctx.invoked_subcommand)
    ctx.obj = CliState(project_root=project_root, settings=settings)


@main_cli_group.command("init")
@click.option("--main-branch", default=None, help="Main branch name. Default: the checked-out branch, else 'main'.")
@click.option("--repo-url", default=None, help="Repository URL. Default: the 'origin' remote, if any.")
@click.option("--name", "project_name", default=None, help="Project name. Default: the directory name.")
@click.option("--with-templates", is_flag=True, default=False, help="Copy the bundled templates into the templates directory for editing.")
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing project configuration.")
@click.pass_obj
@handle_cli_errors
def init_command(state: CliState, main_branch: Optional[str], repo_url: Optional[str], project_name: Optional[str], with_templates: bool, force: bool):
    """Create .repoprompt/config.toml and the templates directory."""
    config_path = state.project_root / PROJECT_CONFIG_DIR / "config.toml"
    if config_path.exists() and not force:
        raise ConfigError(f"{config_path} already exists; use --force to overwrite")

    settings = state.settings
    settings.project.name = project_name or settings.project.name or state.project_root.name
    settings.project.main_branch = main_branch or current_branch(state.project_root) or DEFAULT_MAIN_BRANCH
    settings.project.repository_url = repo_url or detect_repo_url(state.project_root) or settings.project.repository_url

    saved_path = save_project_settings(settings, state.project_root)
    templates_dir = state.project_root / settings.prompts.directory
    templates_dir.mkdir(parents=True, exist_ok=True)

    if with_templates:
        for name, source in BUILTIN_TEMPLATES.items():
            target = templates_dir / f"{name}{TEMPLATE_FILE_SUFFIX}"
            if target.exists():
                log.info("template_file_exists_skipping", path=str(target))
                continue
            target.write_text(source, encoding="utf-8")

    click.secho(f"Initialized repoprompt in {saved_path.parent}", fg="green", err=True)
    click.echo(f"Main branch: {settings.project.main_branch}", err=True)
    if settings.project.repository_url:
        click.echo(f"Repository: {settings.project.repository_url}", err=True)


@main_cli_group.command("run")
@optgroup.group("Task", help="Which task prompt to render.")
@optgroup.option("-k", "--kind", "kind_str", type=click.Choice(TASK_KIND_CHOICES), required=True, help="Task kind (or its template name).")
@optgroup.option("-f", "--feature", "feature_name", default="", help="Feature name.")
@optgroup.option("-d", "--description", "feature_description", default=None, help="Feature description.")
@optgroup.option("-m", "--message", "user_message", default=None, help="Request text. Default: derived from the task kind and feature.")
@optgroup.group("Task Lineage", help="Results of earlier tasks for the same feature.")
@optgroup.option("--plan-file", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None, help="File holding the implementation plan.")
@optgroup.option("--summary-file", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None, help="File holding the implementation summary.")
@optgroup.option("--diff-file", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None, help="File holding the diff to verify or review.")
@optgroup.option("--worktree-path", default=None, help="Worktree the task runs in.")
@optgroup.option("--worktree-branch", default=None, help="Branch checked out in the worktree.")
@optgroup.option("--phase", "current_phase", default=None, help="Phase a resumed task stopped in.")
@optgroup.option("--step", "current_step", default=None, help="Step a resumed task stopped at.")
@optgroup.option("--turns", "turns_so_far", type=click.IntRange(min=0), default=None, help="Turns used so far by a resumed task.")
@optgroup.option("--cost", "cost_so_far", type=click.FloatRange(min=0), default=None, help="Cost in USD spent so far by a resumed task.")
@optgroup.group("Output", help="Where and how to write the prompt.")
@optgroup.option("--no-files", is_flag=True, default=False, help="Do not scan the repository; render without file contents.")
@optgroup.option("-o", "--output", "output_file", type=click.Path(dir_okay=False, writable=True, path_type=Path), default=None, help="Path to write the output to.")
@optgroup.option("--json", "as_json", is_flag=True, default=False, help="Write the prompt and its agent budget as JSON.")
@optgroup.option("--summary/--no-summary", "show_summary", default=False, help="Print the agent budget to stderr.")
@click.pass_obj
@handle_cli_errors
def run_command(
    state: CliState, kind_str: str, feature_name: str, feature_description: Optional[str], user_message: Optional[str],
    plan_file: Optional[Path], summary_file: Optional[Path], diff_file: Optional[Path],
    worktree_path: Optional[str], worktree_branch: Optional[str], current_phase: Optional[str],
    current_step: Optional[str], turns_so_far: Optional[int], cost_so_far: Optional[float],
    no_files: bool, output_file: Optional[Path], as_json: bool, show_summary: bool,
):
    """Render the prompt for one task on a feature."""
    kind = TaskKind.from_string(kind_str)
    if kind is None:
        raise click.BadParameter(f"unknown task kind: {kind_str}", param_hint="--kind")

    lineage = {
        "feature_description": feature_description,
        "user_message": user_message,
        "implementation_plan": _read_optional_file(plan_file),
        "implementation_summary": _read_optional_file(summary_file),
        "diff_content": _read_optional_file(diff_file),
        "worktree_path": worktree_path,
        "worktree_branch": worktree_branch,
        "current_phase": current_phase,
        "current_step": current_step,
        "turns_so_far": turns_so_far,
        "cost_so_far": cost_so_far,
    }
    lineage = {k: v for k, v in lineage.items() if v is not None}

    generator = PromptGenerator(state.settings, state.registry(), project_root=state.project_root)
    rendered = generator.generate(kind, feature_name, include_files=not no_files, **lineage)
    _emit(rendered, output_file, as_json, show_summary)


@main_cli_group.command("list-prompts")
@click.option("--verbose", "-v", "verbose", is_flag=True, default=False, help="Show each template's configuration.")
@click.pass_obj
@handle_cli_errors
def list_prompts_command(state: CliState, verbose: bool):
    """List the available prompt templates."""
    print_template_list(state.registry(), verbose=verbose)


@main_cli_group.command("prompt")
@click.option("-t", "--template", "template_name", required=True, help="Template name.")
@click.option("-m", "--message", "user_message", default="", help="Request text passed as user_message.")
@click.option("-o", "--output", "output_file", type=click.Path(dir_okay=False, writable=True, path_type=Path), default=None, help="Path to write the output to.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Write the prompt and its agent budget as JSON.")
@click.pass_obj
@handle_cli_errors
def prompt_command(state: CliState, template_name: str, user_message: str, output_file: Optional[Path], as_json: bool):
    """Render a single template with the core repository fields."""
    generator = PromptGenerator(state.settings, state.registry(), project_root=state.project_root)
    rendered = generator.generate_for_template(template_name, user_message)
    _emit(rendered, output_file, as_json, show_summary=False)


@main_cli_group.command("context")
@click.option("--max-files", type=click.IntRange(min=0), default=None, help="Maximum number of files to collect.")
@click.option("-e", "--exclude", "exclude_patterns", multiple=True, help="Additional exclusion patterns.")
@click.option("-x", "--ext", "include_extensions", multiple=True, help="Only collect files with these extensions.")
@click.option("-L", "--follow-symlinks", is_flag=True, default=False, help="Follow symbolic links.")
@click.pass_obj
@handle_cli_errors
def context_command(state: CliState, max_files: Optional[int], exclude_patterns: Tuple[str, ...], include_extensions: Tuple[str, ...], follow_symlinks: bool):
    """Scan the repository and print the files that would be included."""
    config = ContextBuilderConfig.from_settings(state.settings.repository)
    if max_files is not None: config.max_files = max_files
    if exclude_patterns: config.exclude_patterns.extend(exclude_patterns)
    if include_extensions: config.include_extensions = list(include_extensions)
    if follow_symlinks: config.follow_symlinks = True

    context = build_context(state.project_root, state.settings.project.main_branch, config)
    print_context_table(context)
