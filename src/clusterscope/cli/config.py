"""
Config command for inspecting clustering configuration.

Provides subcommands:
- show: Print the effective configuration as YAML
"""
from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from clusterscope.cli.utils import report_error
from clusterscope.core.exceptions import ClusterscopeError
from clusterscope.models.config import ClusteringConfig

app = typer.Typer(
    name="config",
    help="Inspect clustering configuration",
    no_args_is_help=True,
)

console = Console()


@app.command(name="show")
def show(
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML configuration file to validate and print",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """
    Print the effective clustering configuration.

    Without --config the built-in defaults are shown; use the output as a
    starting point for a configuration file.
    """
    try:
        cfg = ClusteringConfig.from_yaml(config) if config else ClusteringConfig()
    except ClusterscopeError as e:
        report_error(console, e)
        raise typer.Exit(code=1) from None
    except ValueError as e:
        console.print(f"[red]Error loading config: {e}[/red]")
        raise typer.Exit(code=1) from None

    console.print(cfg.to_yaml_str(), highlight=False, markup=False)
