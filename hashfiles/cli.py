"""CLI entry point for hashfiles."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from hashfiles.checksum import ChecksumRunner, HashReport, VerifyReport
from hashfiles.checksum.sumfile import display_path
from hashfiles.config import HashfilesConfig, load_config
from hashfiles.config.loader import DEFAULT_CONFIG_TEMPLATE
from hashfiles.errors import HashfilesError
from hashfiles.log import setup_logging

logger = logging.getLogger(__name__)
console = Console()

app = typer.Typer(
    name="hashfiles",
    help="Recursively generate checksum of all files in a directory.",
)

config_app = typer.Typer(help="Manage hashfiles configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: HashfilesConfig | None = None


def _get_config() -> HashfilesConfig:
    if _config is None:
        return load_config()
    return _config


def _error(err: Exception) -> typer.Exit:
    logger.debug("Fatal error", exc_info=err)
    console.print(f"[red]Error:[/red] {escape(display_path(str(err)))}", soft_wrap=True)
    return typer.Exit(1)


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to hashfiles.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except HashfilesError as e:
        raise _error(e)


def _effective_config(
    parallel: int | None,
    strategy: str | None,
    keep_going: bool,
    verbose: bool,
) -> HashfilesConfig:
    """Overlay command-line flags on the loaded config."""
    cfg = _get_config()
    overrides: dict[str, object] = {}
    if parallel is not None:
        overrides["parallel"] = parallel
    if strategy is not None:
        overrides["strategy"] = strategy
    if keep_going:
        overrides["error_policy"] = "collect"
    hashing = cfg.hashing.model_copy(update=overrides)
    return cfg.model_copy(update={"hashing": hashing, "verbose": verbose or cfg.verbose})


def _setup_logging(cfg: HashfilesConfig) -> None:
    # --verbose shows per-file lines whatever log_level says
    setup_logging("debug" if cfg.verbose else cfg.log_level, cfg.log_format)


def _display_hash_report(report: HashReport) -> None:
    table = Table(title="Hashed")
    table.add_column("Algorithm", style="cyan")
    table.add_column("Files", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Seconds", justify="right")
    for r in report.results:
        table.add_row(r.algorithm, str(r.file_count), str(len(r.failures)), f"{r.elapsed:.2f}")
    rprint(table)
    for r in report.results:
        for failure in r.failures:
            console.print(
                f"  [red]failed:[/red] {r.algorithm} {escape(failure.path)}: {escape(failure.error)}",
                soft_wrap=True,
            )
    rprint(f"[dim]All files hashed, {report.elapsed:.2f} seconds[/dim]")


def _display_verify_report(report: VerifyReport) -> None:
    table = Table(title="Verified")
    table.add_column("Algorithm", style="cyan")
    table.add_column("Files", justify="right")
    table.add_column("UnMatched", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Seconds", justify="right")
    for r in report.results:
        unmatched = f"[red]{r.unmatched}[/red]" if r.unmatched else "0"
        table.add_row(
            r.algorithm, str(r.total), unmatched, str(len(r.failures)), f"{r.elapsed:.2f}"
        )
    rprint(table)
    for r in report.results:
        for failure in r.failures:
            console.print(
                f"  [red]failed:[/red] {r.algorithm} {escape(failure.path)}: {escape(failure.error)}",
                soft_wrap=True,
            )
    rprint(f"[dim]All files verified, {report.elapsed:.2f} seconds[/dim]")


DirOption = Annotated[
    Path, typer.Option("--dir", "-d", help="The directory to be hashed")
]
AlgoOption = Annotated[
    str | None,
    typer.Option(
        "--algo",
        "-a",
        help="The hash algorithm to use, multiple algorithms can be specified by comma separated",
    ),
]
ParallelOption = Annotated[
    int | None,
    typer.Option("--parallel", "-n", help="The number of parallel workers [default: CPU count]"),
]
VerboseOption = Annotated[bool, typer.Option("--verbose", help="Verbose output log")]
KeepGoingOption = Annotated[
    bool,
    typer.Option("--keep-going", help="Report unreadable files at the end instead of aborting"),
]
StrategyOption = Annotated[
    str | None,
    typer.Option("--strategy", help="Worker admission: gate | chunked"),
]


@app.command("hash")
def hash_cmd(
    dir_path: DirOption = Path("."),
    algo: AlgoOption = None,
    parallel: ParallelOption = None,
    verbose: VerboseOption = False,
    keep_going: KeepGoingOption = False,
    strategy: StrategyOption = None,
) -> None:
    """Hash files."""
    cfg = _effective_config(parallel, strategy, keep_going, verbose)
    _setup_logging(cfg)

    try:
        runner = ChecksumRunner(cfg)
        report = runner.hash_tree(dir_path, algo)
    except HashfilesError as e:
        raise _error(e)

    _display_hash_report(report)
    if report.failure_count:
        raise typer.Exit(code=1)


@app.command("verify")
def verify_cmd(
    dir_path: DirOption = Path("."),
    algo: AlgoOption = None,
    parallel: ParallelOption = None,
    verbose: VerboseOption = False,
    keep_going: KeepGoingOption = False,
    strategy: StrategyOption = None,
    fail_on_mismatch: Annotated[
        bool | None,
        typer.Option(
            "--fail-on-mismatch/--no-fail-on-mismatch",
            help="Exit 1 if any digest does not match",
        ),
    ] = None,
) -> None:
    """Verify files."""
    cfg = _effective_config(parallel, strategy, keep_going, verbose)
    _setup_logging(cfg)
    if fail_on_mismatch is None:
        fail_on_mismatch = cfg.verify.fail_on_mismatch

    try:
        runner = ChecksumRunner(cfg)
        report = runner.verify_tree(dir_path, algo)
    except HashfilesError as e:
        raise _error(e)

    _display_verify_report(report)
    if report.failure_count or (fail_on_mismatch and report.unmatched):
        raise typer.Exit(code=1)


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default hashfiles.yaml in current directory."""
    target = Path("hashfiles.yaml")
    if target.exists() and not force:
        rprint("[yellow]hashfiles.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")


if __name__ == "__main__":
    app()
