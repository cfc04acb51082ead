"""
Cluster commands for building dendrogram merge trees.

Provides subcommands:
- run: Cluster a CSV dataset and print the merge tree
- columns: Show which columns qualify as numeric
- distances: Print the pairwise distance matrix
"""
from __future__ import annotations

import json
from enum import Enum
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from clusterscope.cli.utils import (
    QuietConsole,
    configure_logging,
    load_dataset_or_exit,
    report_error,
    spinner_progress,
)
from clusterscope.core.distance import DistanceMetric
from clusterscope.core.exceptions import ClusterscopeError
from clusterscope.core.linkage import LinkageMethod
from clusterscope.models.config import ClusteringConfig

app = typer.Typer(
    name="cluster",
    help="Hierarchical clustering of tabular datasets",
    no_args_is_help=True,
)

console = Console()


class OutputFormat(str, Enum):
    """Output format of the run command."""

    SUMMARY = "summary"
    NEWICK = "newick"
    JSON = "json"


def _resolve_config(
    config_path: Path | None,
    metric: DistanceMetric | None,
    linkage: LinkageMethod | None,
    workers: int | None,
) -> ClusteringConfig:
    """Merge a YAML config file with explicit CLI options (options win)."""
    base = ClusteringConfig.from_yaml(config_path) if config_path else ClusteringConfig()
    updates: dict[str, object] = {}
    if metric is not None:
        updates["metric"] = metric
    if linkage is not None:
        updates["linkage"] = linkage
    if workers is not None:
        updates["num_workers"] = workers
    return base.with_selectors(**updates)


@app.command(name="run")
def run(
    data: Path = typer.Argument(
        ...,
        help="CSV/TSV dataset; the first line holds the column names",
        exists=True,
        dir_okay=False,
    ),
    metric: DistanceMetric | None = typer.Option(
        None,
        "--metric",
        "-m",
        help="Distance metric: euclidean or manhattan [default: euclidean]",
    ),
    linkage: LinkageMethod | None = typer.Option(
        None,
        "--linkage",
        "-l",
        help="Linkage method: ward, complete or single [default: ward]",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML configuration file",
        exists=True,
        dir_okay=False,
    ),
    workers: int | None = typer.Option(
        None,
        "--workers",
        "-w",
        help="Threads used to build the distance matrix",
        min=1,
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.SUMMARY,
        "--format",
        "-f",
        help="Output: summary table, newick string or json hierarchy",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress progress output",
    ),
) -> None:
    """
    Cluster the rows of a dataset and print the merge tree.

    Only columns in which every row is a finite number are used.

    Examples:

        # Ward linkage on euclidean distances (the defaults)
        clusterscope cluster run iris.csv

        # Single linkage, Newick output
        clusterscope cluster run iris.csv --linkage single --format newick
    """
    from clusterscope.core.pipeline import run_clustering
    from clusterscope.core.tree import merge_table, to_newick

    configure_logging(verbose)
    out = QuietConsole(console, quiet=quiet or output_format is not OutputFormat.SUMMARY)

    try:
        cfg = _resolve_config(config, metric, linkage, workers)
    except (ClusterscopeError, ValueError) as e:
        if isinstance(e, ClusterscopeError):
            report_error(console, e)
        else:
            console.print(f"[red]Error loading config: {e}[/red]")
        raise typer.Exit(code=1) from None

    dataset = load_dataset_or_exit(data, console)

    out.print("\n[bold blue]Clusterscope[/bold blue]\n")
    out.print(f"[bold]Dataset:[/bold] {data} ({len(dataset)} rows)")
    out.print(f"[bold]Metric:[/bold] {cfg.metric.value}")
    out.print(f"[bold]Linkage:[/bold] {cfg.linkage.value}")
    if dataset.dropped_rows:
        out.print(f"[yellow]Dropped {dataset.dropped_rows} malformed row(s)[/yellow]")

    try:
        with spinner_progress(
            f"Clustering {len(dataset)} rows...",
            console,
            quiet or output_format is not OutputFormat.SUMMARY,
        ):
            result = run_clustering(dataset.headers, dataset.rows, cfg)
    except ClusterscopeError as e:
        report_error(console, e)
        raise typer.Exit(code=1) from None

    if result.is_empty:
        console.print("[yellow]No numeric columns found; nothing to cluster.[/yellow]")
        return

    if output_format is OutputFormat.NEWICK:
        console.print(to_newick(result.tree), soft_wrap=True, highlight=False)
        return
    if output_format is OutputFormat.JSON:
        console.print_json(json.dumps(result.hierarchy()))
        return

    summary = result.summary()
    out.print(f"[bold]Numeric columns:[/bold] {', '.join(summary.numeric_headers)}")

    table = Table(title="Merge history")
    table.add_column("Step", justify="right")
    table.add_column("Left")
    table.add_column("Right")
    table.add_column("Height", justify="right")
    table.add_column("Size", justify="right")
    for row in merge_table(result.steps).iter_rows(named=True):
        table.add_row(
            str(row["step"]),
            ", ".join(map(str, row["left"])),
            ", ".join(map(str, row["right"])),
            f"{row['height']:.4f}",
            str(row["size"]),
        )
    console.print(table)
    console.print(
        f"\n[green]{summary.n_merges} merges over {summary.n_rows} rows; "
        f"root height {summary.root_height:.4f}[/green]"
    )


@app.command(name="columns")
def columns(
    data: Path = typer.Argument(
        ...,
        help="CSV/TSV dataset; the first line holds the column names",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """
    List the dataset columns and whether each one is numeric.
    """
    from clusterscope.core.projection import project_numeric

    dataset = load_dataset_or_exit(data, console)
    projection = project_numeric(dataset.headers, dataset.rows)
    numeric = set(projection.column_indices)

    table = Table(title=f"Columns of {data.name}")
    table.add_column("#", justify="right")
    table.add_column("Column")
    table.add_column("Numeric")
    for idx, name in enumerate(dataset.headers):
        table.add_row(str(idx), name, "yes" if idx in numeric else "[dim]no[/dim]")
    console.print(table)

    if projection.is_empty:
        console.print("[yellow]No numeric columns found.[/yellow]")


@app.command(name="distances")
def distances(
    data: Path = typer.Argument(
        ...,
        help="CSV/TSV dataset; the first line holds the column names",
        exists=True,
        dir_okay=False,
    ),
    metric: DistanceMetric = typer.Option(
        DistanceMetric.EUCLIDEAN,
        "--metric",
        "-m",
        help="Distance metric: euclidean or manhattan",
    ),
    precision: int = typer.Option(
        3,
        "--precision",
        "-p",
        help="Decimal places shown",
        min=0,
    ),
) -> None:
    """
    Print the pairwise row distance matrix over the numeric columns.
    """
    from clusterscope.core.distance import build_distance_matrix
    from clusterscope.core.projection import project_numeric

    dataset = load_dataset_or_exit(data, console)
    projection = project_numeric(dataset.headers, dataset.rows)
    if projection.is_empty:
        console.print("[yellow]No numeric columns found; nothing to compare.[/yellow]")
        return

    matrix = build_distance_matrix(projection.matrix, metric)
    frame = matrix.to_polars()

    table = Table(title=f"{metric.value.capitalize()} distances")
    for name in frame.columns:
        table.add_column(name, justify="right")
    for row in frame.iter_rows():
        table.add_row(str(row[0]), *(f"{v:.{precision}f}" for v in row[1:]))
    console.print(table)
