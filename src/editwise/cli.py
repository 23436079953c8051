"""CLI for editwise - all commands in one module.

Provides commands: edit, analyze, status.

editwise/src/editwise/cli.py
"""

from __future__ import annotations

import asyncio
import logging
import signal
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, TypeVar

import click
from rich.markup import escape
from rich.table import Table

from editwise import __version__
from editwise.analyzer import analyze_codebase, apply_auto_fixes
from editwise.config import (
    Config,
    EditSettings,
    LLMConfig,
    SessionSettings,
    get_edit_settings,
    get_llm_config,
    load_config,
    load_env_files,
)
from editwise.console_utils import console
from editwise.editor import EditOptions, execute_edit, prepare_edit
from editwise.errors import ConfigurationError, GitOperationError, TargetNotFoundError
from editwise.gitops import commit_file, create_branch, push
from editwise.hitl import confirm_proceed
from editwise.llm_client import create_llm_client
from editwise.reporting import (
    render_analysis_report,
    render_auto_fix,
    render_edit_outcome,
    render_edit_plan,
    results_to_json,
)
from editwise.utils import find_project_root

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class EditwiseContext:
    """Shared context for CLI commands."""

    working_directory: Path | None = None
    config: Config | None = None
    verbose: bool = False


def _run_cancellable(work: Callable[[asyncio.Event], Awaitable[T]]) -> T:
    """Run work on a fresh event loop; Ctrl-C sets the abort signal it receives."""

    async def runner() -> T:
        abort_signal = asyncio.Event()
        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGINT, abort_signal.set)
            installed = True
        except (NotImplementedError, RuntimeError, ValueError):
            # Not on the main thread, or no signal support on this platform
            installed = False
        try:
            return await work(abort_signal)
        finally:
            if installed:
                loop.remove_signal_handler(signal.SIGINT)

    return asyncio.run(runner())


def _settings_or_exit(ctx: click.Context) -> tuple[LLMConfig, EditSettings, SessionSettings]:
    editwise_ctx: EditwiseContext = ctx.obj
    config = editwise_ctx.config or Config(None, {})
    try:
        llm_config = get_llm_config(config)
        edit_settings = get_edit_settings(config)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        ctx.exit(1)

    if not llm_config.is_configured:
        console.print(
            "[yellow]No LLM endpoint configured. Set EDITWISE_LLM_API_URL or "
            "[tool.editwise.llm] api_url; results will be fallbacks.[/yellow]"
        )

    session = SessionSettings(
        model=llm_config.model,
        working_directory=editwise_ctx.working_directory or Path.cwd(),
    )
    return llm_config, edit_settings, session


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.version_option(__version__, prog_name="editwise")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """editwise: AI-assisted file editing and code analysis."""
    # WARNING by default so log lines do not interleave with console output
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)

    current = Path.cwd()
    load_env_files(current)
    ctx.obj = EditwiseContext(
        working_directory=find_project_root(current) or current,
        config=load_config(current),
        verbose=verbose,
    )


@cli.command("edit")
@click.argument("file", type=click.Path(path_type=Path))
@click.argument("instruction")
@click.option("--dry-run", is_flag=True, help="Show suggested changes without applying them")
@click.option("--no-backup", is_flag=True, help="Do not write a backup before overwriting")
@click.option("--yes", "-y", is_flag=True, help="Apply without asking for confirmation")
@click.option(
    "--context",
    "context_files",
    multiple=True,
    type=click.Path(path_type=Path),
    help="Extra file to include as context (repeatable)",
)
@click.option("--branch", help="Create and switch to this git branch before editing")
@click.option("--commit-message", help="Commit the edited file with this message")
@click.option("--push", "push_remote", is_flag=True, help="Push after committing")
@click.pass_context
def edit(
    ctx: click.Context,
    file: Path,
    instruction: str,
    dry_run: bool,
    no_backup: bool,
    yes: bool,
    context_files: tuple[Path, ...],
    branch: str | None,
    commit_message: str | None,
    push_remote: bool,
) -> None:
    """Edit FILE according to INSTRUCTION."""
    if push_remote and not commit_message:
        console.print("[red]--push requires --commit-message[/red]")
        ctx.exit(1)
    if not file.is_file():
        console.print(f"[red]{escape(str(TargetNotFoundError(file)))}[/red]")
        ctx.exit(1)

    llm_config, edit_settings, session = _settings_or_exit(ctx)

    console.print("[bold]editwise file editor[/bold]")
    console.print(f"Analyzing and editing: {escape(str(file))}")
    console.print(f"Edit request: {escape(instruction)}\n")

    if branch:
        try:
            create_branch(branch)
        except GitOperationError as e:
            console.print(f"[red]Failed to create branch: {escape(str(e))}[/red]")
            ctx.exit(1)
        console.print(f"Created and switched to branch: {branch}")

    options = EditOptions(
        dry_run=dry_run,
        backup=edit_settings.backup and not no_backup,
        auto_apply=yes,
        context_files=list(context_files),
        confidence_threshold=edit_settings.confidence_threshold,
    )
    oracle = create_llm_client(llm_config)

    try:
        plan = _run_cancellable(
            lambda abort: prepare_edit(file, instruction, oracle, options, abort)
        )
    except TargetNotFoundError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        ctx.exit(1)
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Could not read {escape(str(file))}: {escape(str(e))}[/red]")
        ctx.exit(1)

    render_edit_plan(plan)

    try:
        outcome = execute_edit(
            plan, options, lambda prompt: confirm_proceed(prompt, assume_yes=yes), session
        )
    except OSError as e:
        console.print(f"[red]Could not write changes: {escape(str(e))}[/red]")
        ctx.exit(1)

    render_edit_outcome(outcome)

    if commit_message and outcome.written:
        try:
            commit_file(file, commit_message)
            console.print(f"Committed changes: {escape(commit_message)}")
            if push_remote:
                push(ref=branch)
                console.print("Pushed changes to remote repository")
        except GitOperationError as e:
            console.print(f"[red]Failed to commit changes: {escape(str(e))}[/red]")
            ctx.exit(1)


@cli.command("analyze")
@click.argument("target", default=".", type=click.Path(path_type=Path))
@click.option("--full", "full_analysis", is_flag=True, help="Include architecture and testing")
@click.option("--fix", "auto_fix", is_flag=True, help="Offer to fix style and maintainability issues")
@click.option("--yes", "-y", is_flag=True, help="Skip the auto-fix confirmation")
@click.option(
    "--format", "-f", "output_format", type=click.Choice(["human", "json"]), default="human",
    help="Output format",
)
@click.pass_context
def analyze(
    ctx: click.Context,
    target: Path,
    full_analysis: bool,
    auto_fix: bool,
    yes: bool,
    output_format: str,
) -> None:
    """Analyze code quality of TARGET (a file or directory)."""
    llm_config, edit_settings, session = _settings_or_exit(ctx)
    human = output_format == "human"

    if human:
        console.print("[bold]editwise code analyzer[/bold]")
        console.print(f"Analyzing: {escape(str(target))}")

    def announce(file_path: Path) -> None:
        if human:
            console.print(f"  Analyzing {escape(file_path.name)}...")

    oracle = create_llm_client(llm_config)
    try:
        report = _run_cancellable(
            lambda abort: analyze_codebase(
                target,
                oracle,
                full_analysis=full_analysis,
                exclude_dirs=edit_settings.exclude_dirs,
                settings=session,
                abort_signal=abort,
                on_file=announce,
            )
        )
    except TargetNotFoundError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        ctx.exit(1)

    if not report.results:
        if human:
            console.print("No code files found to analyze.")
        else:
            click.echo(results_to_json(report))
        return

    if not human:
        click.echo(results_to_json(report))
        return

    render_analysis_report(report)

    if auto_fix:
        fix_outcome = apply_auto_fixes(
            report.results, lambda prompt: confirm_proceed(prompt, assume_yes=yes)
        )
        render_auto_fix(fix_outcome)
    elif report.summary.total_issues > 0:
        console.print("\nTip: Use --fix to automatically apply suggested fixes")


@cli.command("status")
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the resolved configuration."""
    llm_config, edit_settings, session = _settings_or_exit(ctx)
    editwise_ctx: EditwiseContext = ctx.obj
    config = editwise_ctx.config

    table = Table(title="editwise configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="magenta")
    table.add_row("Project root", str(config.project_root) if config and config.project_root else "-")
    table.add_row("API URL", llm_config.api_url or "[red]not set[/red]")
    table.add_row("Model", llm_config.model)
    table.add_row("API key", "set" if llm_config.api_key else "not set")
    table.add_row("Temperature", str(llm_config.temperature))
    table.add_row("Max tokens", str(llm_config.max_tokens))
    table.add_row("Timeout (s)", str(llm_config.timeout_seconds))
    table.add_row("Confidence threshold", str(edit_settings.confidence_threshold))
    table.add_row("Backups", "on" if edit_settings.backup else "off")
    table.add_row("Extra excluded dirs", ", ".join(edit_settings.exclude_dirs) or "-")
    table.add_row("Working directory", str(session.working_directory))
    console.print(table)


def main() -> None:
    """Entry point for editwise CLI."""
    import sys

    try:
        cli(prog_name="editwise")
    except SystemExit as e:
        sys.exit(e.code)
    except Exception as e:
        console.print(f"[bold red]Error: {escape(str(e))}[/bold red]")
        logger.error("CLI error", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
