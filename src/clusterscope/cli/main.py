"""
Main CLI entry point for clusterscope.

Provides subcommands:
- cluster: Cluster datasets, inspect numeric columns and distances
- config: Inspect clustering configuration
"""

from __future__ import annotations

import typer
from rich import print as rprint
from rich.console import Console

from clusterscope import __version__

app = typer.Typer(
    name="clusterscope",
    help="Agglomerative hierarchical clustering for tabular datasets",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        rprint(f"clusterscope version {__version__}")
        raise typer.Exit


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """
    Clusterscope: agglomerative hierarchical clustering for tabular datasets.

    Builds the merge tree behind a dendrogram from the numeric columns of a
    CSV file, with euclidean or manhattan distances and ward, complete or
    single linkage.
    """


# Import subcommands
from clusterscope.cli import cluster, config

# Register subcommands
app.add_typer(cluster.app, name="cluster")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
