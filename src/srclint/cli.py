import asyncio
import logging
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from srclint.engine import Engine
from srclint.errors import SrclintError, show_error_help
from srclint.options import RunOptions

app = typer.Typer(help="srclint: lint Python sources, honoring .srclintignore files")
console = Console()

EXIT_OK = 0
EXIT_LINT_ERRORS = 1
EXIT_ENGINE_ERROR = 2


def _parse_rules(values: List[str]) -> dict[str, str]:
    rules: dict[str, str] = {}
    for value in values:
        rule_id, sep, severity = value.partition("=")
        if not sep or not rule_id.strip():
            raise typer.BadParameter(f"expected RULE=SEVERITY, got '{value}'", param_hint="--rule")
        rules[rule_id.strip()] = severity.strip()
    return rules


@app.command()
def lint(
    paths: Optional[List[str]] = typer.Argument(None, help="Files and directories to lint (default: .)"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Config file layered over .srclintrc.toml files"),
    no_rc: bool = typer.Option(False, "--no-rc", help="Don't look up .srclintrc.toml files"),
    reset: bool = typer.Option(False, "--reset", help="Disable all builtin rule defaults"),
    rulesdir: Optional[List[str]] = typer.Option(None, "--rulesdir", help="Load rules from this directory (repeatable)"),
    env: Optional[List[str]] = typer.Option(None, "--env", help="Enable an environment's globals (repeatable)"),
    global_: Optional[List[str]] = typer.Option(None, "--global", help="Declare a global name (repeatable)"),
    rule: Optional[List[str]] = typer.Option(None, "--rule", help="Set a rule severity, e.g. no-print=off (repeatable)"),
    no_ignore: bool = typer.Option(False, "--no-ignore", help="Disable .srclintignore handling"),
    ignore_path: Optional[str] = typer.Option(None, "--ignore-path", help="Ignore file to use instead of .srclintignore"),
    ext: Optional[List[str]] = typer.Option(None, "--ext", help="File suffix to lint in directories (repeatable)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="List clean files too"),
    debug: bool = typer.Option(False, "--debug", help="Log engine activity to stderr"),
):
    """
    Lint files and directories.
    """
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(name)s: %(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )

    targets = paths or ["."]

    try:
        options = RunOptions(
            config_file=config,
            reset=reset,
            rule_paths=tuple(rulesdir or ()),
            use_config_files=not no_rc,
            envs=tuple(env or ()),
            globals=tuple(global_ or ()),
            rules=_parse_rules(rule or []),
            ignore=not no_ignore,
            ignore_path=ignore_path,
            extensions=tuple(ext) if ext else (".py",),
        )
        engine = Engine(options)
        results = asyncio.run(engine.execute_on_files(targets))
    except ValidationError as e:
        console.print(f"[bold red]Error:[/bold red] invalid options\n{escape(str(e))}")
        raise typer.Exit(code=EXIT_ENGINE_ERROR)
    except SrclintError as e:
        show_error_help(e)
        raise typer.Exit(code=EXIT_ENGINE_ERROR)

    total_errors = 0
    total_warnings = 0

    for result in results:
        total_errors += result.error_count
        total_warnings += result.warning_count

        if not result.messages:
            if verbose:
                console.print(f"[dim]{escape(result.file_path)}: clean[/dim]")
            continue

        console.print(f"\n[bold]{escape(result.file_path)}[/bold]")
        for message in result.messages:
            color = "red" if message.fatal or message.severity == 2 else "yellow"
            loc = f"{message.line or 0}:{message.column or 0}"
            rule_id = f"  [dim]{escape(message.rule_id)}[/dim]" if message.rule_id else ""
            console.print(f"  {loc:>8}  [{color}]{message.label}[/{color}]  {escape(message.message)}{rule_id}")

    console.print(f"\n[bold cyan]Lint Complete![/bold cyan]")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Files Linted", str(len(results)))
    table.add_row("Files With Problems", str(sum(1 for r in results if r.messages)))
    table.add_row("  • Errors", f"[red]{total_errors}[/red]")
    table.add_row("  • Warnings", f"[yellow]{total_warnings}[/yellow]")

    console.print(table)

    if total_errors:
        raise typer.Exit(code=EXIT_LINT_ERRORS)


if __name__ == "__main__":
    app()
