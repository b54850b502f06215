# repoprompt/cli/console_output.py
"""
Handles printing tables and summary information to the console during CLI execution.
"""
import click
import structlog
from rich.console import Console as RichConsole
from rich.table import Table

from repoprompt.core.context_builder import RepositoryContext
from repoprompt.core.pipeline import RenderedPrompt
from repoprompt.core.templating.registry import EntryKind, PromptRegistry

log = structlog.get_logger(__name__)

def print_prompt_summary(rendered: RenderedPrompt):
    """Prints the agent budget attached to a rendered prompt to stderr."""
    log.debug("console_prompt_summary_requested", template=rendered.template_name)
    click.secho("--- Prompt Summary ---", fg="cyan", err=True)
    click.echo(f"Template: {rendered.template_name}", err=True)
    click.echo(f"Files included: {rendered.file_count}", err=True)
    click.echo(f"Max turns: {rendered.max_turns}", err=True)
    click.echo(f"Max cost (USD): {rendered.max_cost_usd:.2f}", err=True)
    tools_display = ", ".join(rendered.tools) if rendered.tools else "(unrestricted)"
    click.echo(f"Tools: {tools_display}", err=True)

def print_template_list(registry: PromptRegistry, verbose: bool = False):
    names = registry.list()
    if not verbose:
        for name in names:
            click.echo(name)
        return

    table = Table(title="Prompt templates")
    table.add_column("Name", style="bold")
    table.add_column("Origin")
    table.add_column("Max turns", justify="right")
    table.add_column("Tools")
    table.add_column("Required")
    for name in names:
        entry = registry.get_entry(name)
        if entry.kind == EntryKind.ENGINE_ONLY or entry.config is None:
            table.add_row(name, entry.origin.value, "-", "-", "-")
            continue
        config = entry.config
        table.add_row(
            name,
            entry.origin.value,
            str(config.max_turns),
            ", ".join(config.tools) or "(all)",
            ", ".join(config.required) or "-",
        )
    RichConsole().print(table)

def print_context_table(context: RepositoryContext):
    table = Table(title=f"{context.repository_path} ({context.branch})")
    table.add_column("Path", overflow="fold")
    table.add_column("Language")
    table.add_column("Chars", justify="right")
    for record in context.files:
        table.add_row(record.path.as_posix(), record.language, f"{len(record.content):,}")
    RichConsole().print(table)
    click.secho(f"{len(context.files)} files collected.", fg="yellow", err=True)
