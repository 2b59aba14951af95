"""svnbridge CLI — Typer application over SvnClient."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from svnbridge import __version__

app = typer.Typer(
    name="svnbridge",
    help="Typed Subversion status, locks, update and commit.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)

# Exit codes
EXIT_OUTCOME = 1  # svn ran, but the typed outcome is a failure
EXIT_ERROR = 2  # config error or critical svn error

_state = {"config": None}


def _client():
    """Build an SvnClient for the current directory, exit 2 on config errors."""
    from svnbridge.client import SvnClient
    from svnbridge.config.loader import ConfigError, load_config
    from svnbridge.rules.registry import RuleError

    project_root = Path.cwd()
    try:
        cfg = load_config(project_root, _state["config"])
        return SvnClient(cfg, project_root)
    except ConfigError as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        raise typer.Exit(code=EXIT_ERROR) from exc
    except RuleError as exc:
        console.print(f"[bold red]Rule error:[/bold red] {exc}")
        raise typer.Exit(code=EXIT_ERROR) from exc


def _finish(operation: str, outcome, success_values, json_output: bool) -> None:
    from svnbridge.output import json_report

    if json_output:
        print(json_report.render_outcome(operation, outcome))
    elif outcome in success_values:
        console.print(f"[green]✓[/green] {operation}: {outcome.value}")
    else:
        console.print(f"[red]✗[/red] {operation}: {outcome.value}")

    if outcome not in success_values:
        raise typer.Exit(code=EXIT_OUTCOME)


# ── status ────────────────────────────────────────────────────────────────────


@app.command()
def status(
    path: str = typer.Argument(".", help="Working-copy path"),
    recursive: bool = typer.Option(False, "--recursive", "-r", help="Report the whole tree"),
    online: bool = typer.Option(False, "--online", "-u", help="Contact the repository (svn status -u)"),
    locks: bool = typer.Option(False, "--locks", help="Fetch lock owners (online only)"),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: terminal | json"),
) -> None:
    """Show typed status records for PATH."""
    from svnbridge.output import json_report, terminal
    from svnbridge.svn.adapter import SvnError
    from svnbridge.svn.models import SearchDepth, StatusOptions

    client = _client()
    fmt = format or client.config.output.format
    if fmt not in ("terminal", "json"):
        console.print(f"[bold red]Invalid format:[/bold red] {fmt}")
        raise typer.Exit(code=EXIT_ERROR)

    options = StatusOptions(
        depth=SearchDepth.INFINITY if recursive else SearchDepth.EMPTY,
        offline=not online,
        fetch_lock_owner=locks,
        timeout_ms=client.timeout_ms * (2 if online else 1),
    )
    try:
        records = list(client.get_statuses(path, options))
    except SvnError as exc:
        console.print(f"[bold red]SVN error:[/bold red] {exc}")
        raise typer.Exit(code=EXIT_ERROR) from exc

    if fmt == "json":
        print(json_report.render(records))
    else:
        terminal.render_statuses(records, console=console)


# ── locks ─────────────────────────────────────────────────────────────────────


@app.command("lock-info")
def lock_info(
    path: str = typer.Argument(..., help="Working-copy path"),
    json_output: bool = typer.Option(False, "--json", help="Print JSON"),
) -> None:
    """Ask the repository who holds the lock on PATH."""
    import json

    from svnbridge.output import json_report, terminal

    client = _client()
    details = client.fetch_lock_details(path, raise_error=True)
    if json_output:
        print(json.dumps(json_report.lock_details_to_dict(details), indent=2))
    else:
        terminal.render_lock_details(details, console=console)
    if details.is_empty:
        raise typer.Exit(code=EXIT_OUTCOME)


@app.command()
def lock(
    path: str = typer.Argument(..., help="Working-copy path"),
    force: bool = typer.Option(False, "--force", help="Steal the lock if someone else holds it"),
    message: str = typer.Option("", "--message", "-m", help="Lock comment"),
    encoding: str = typer.Option("", "--encoding", help="Encoding of the lock comment"),
    json_output: bool = typer.Option(False, "--json", help="Print JSON"),
) -> None:
    """Lock PATH in the repository."""
    from svnbridge.svn.models import LockOutcome

    outcome = _client().lock_file(path, force, message, encoding)
    _finish("lock", outcome, (LockOutcome.SUCCESS,), json_output)


@app.command()
def unlock(
    path: str = typer.Argument(..., help="Working-copy path"),
    force: bool = typer.Option(False, "--force", help="Break a lock held elsewhere"),
    json_output: bool = typer.Option(False, "--json", help="Print JSON"),
) -> None:
    """Release the lock on PATH."""
    from svnbridge.svn.models import LockOutcome

    outcome = _client().unlock_file(path, force)
    _finish("unlock", outcome, (LockOutcome.SUCCESS,), json_output)


# ── update / commit / add ─────────────────────────────────────────────────────


@app.command()
def update(
    path: str = typer.Argument(".", help="Working-copy path"),
    force: bool = typer.Option(False, "--force", help="Take incoming adds over unversioned files"),
    revision: int = typer.Option(-1, "--revision", help="Revision to update to (default HEAD)"),
    json_output: bool = typer.Option(False, "--json", help="Print JSON"),
) -> None:
    """Update PATH recursively."""
    from svnbridge.svn.models import UpdateOutcome

    outcome = _client().update(path, force=force, revision=revision)
    # conflicts still mean the working copy moved forward
    _finish(
        "update",
        outcome,
        (UpdateOutcome.SUCCESS, UpdateOutcome.SUCCESS_WITH_CONFLICTS),
        json_output,
    )


@app.command()
def commit(
    paths: List[str] = typer.Argument(..., help="Paths to commit"),
    message: str = typer.Option(..., "--message", "-m", help="Commit message"),
    meta: bool = typer.Option(False, "--meta", help="Also commit the .meta companions"),
    recursive: bool = typer.Option(False, "--recursive", "-r", help="Commit folder contents"),
    keep_locks: bool = typer.Option(False, "--keep-locks", help="Do not release locks"),
    encoding: str = typer.Option("", "--encoding", help="Encoding of the message"),
    json_output: bool = typer.Option(False, "--json", help="Print JSON"),
) -> None:
    """Commit PATHS."""
    from svnbridge.svn.models import CommitOutcome

    outcome = _client().commit(
        paths,
        include_meta=meta,
        recursive=recursive,
        message=message,
        encoding=encoding,
        keep_locks=keep_locks,
    )
    _finish("commit", outcome, (CommitOutcome.SUCCESS,), json_output)


@app.command()
def add(
    path: str = typer.Argument(..., help="Path to add"),
    meta: bool = typer.Option(False, "--meta", help="Also add the .meta companion"),
    recursive: bool = typer.Option(False, "--recursive", "-r", help="Add folder contents"),
) -> None:
    """Add PATH and any unversioned parent folders."""
    if _client().add(path, include_meta=meta, recursive=recursive):
        console.print(f"[green]✓[/green] Added {path}")
    else:
        console.print(f"[red]✗[/red] Failed to add {path}")
        raise typer.Exit(code=EXIT_OUTCOME)


# ── rules ─────────────────────────────────────────────────────────────────────


@app.command()
def rules() -> None:
    """List the error classification tables in evaluation order."""
    from svnbridge.rules.builtin import RULESET_VERSION

    client = _client()
    table = Table(title=f"Error rules (ruleset {RULESET_VERSION})", border_style="dim")
    table.add_column("Family", style="cyan")
    table.add_column("Rule")
    table.add_column("Codes", style="magenta")
    table.add_column("Outcome", style="green")
    table.add_column("Enabled", justify="center")

    for family, classifier in client.classifiers.items():
        for rule in classifier.all_rules:
            table.add_row(
                family.value,
                rule.id,
                ", ".join(rule.patterns),
                getattr(rule.outcome, "value", rule.outcome),
                "✓" if rule.enabled else "✗",
            )
        table.add_row(family.value, "[dim](fallback)[/dim]", "", classifier.fallback.value, "")
    console.print(table)


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init() -> None:
    """Generate a starter .svnbridge.toml in the current directory."""
    from svnbridge.config.defaults import DEFAULT_TOML
    from svnbridge.config.loader import CONFIG_FILENAME

    config_path = Path.cwd() / CONFIG_FILENAME
    if config_path.exists():
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILENAME} already exists at {config_path}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {config_path}")


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"svnbridge {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .svnbridge.toml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log operation transcripts"),
    debug: bool = typer.Option(False, "--debug", help="Log every svn invocation"),
) -> None:
    """svnbridge — typed results from the Subversion CLI."""
    from svnbridge.logging_config import setup_logging

    setup_logging(verbose=verbose, debug=debug)
    _state["config"] = config
