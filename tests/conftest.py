"""
Shared pytest fixtures for clusterscope tests.

Provides reusable datasets, numeric matrices and temporary files
for unit and integration testing.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest


# =============================================================================
# Numeric Matrix Fixtures
# =============================================================================


@pytest.fixture
def four_points() -> np.ndarray:
    """Two tight pairs far apart: (0,1) and (2,3) are each 1.0 apart."""
    return np.array(
        [
            [0.0, 0.0],
            [0.0, 1.0],
            [5.0, 5.0],
            [5.0, 6.0],
        ]
    )


@pytest.fixture
def random_points() -> np.ndarray:
    """30 rows x 4 columns of reproducible random data."""
    rng = np.random.default_rng(42)
    return rng.normal(size=(30, 4))


# =============================================================================
# Raw Dataset Fixtures
# =============================================================================


@pytest.fixture
def iris_headers() -> list[str]:
    """Column names of a small iris-like dataset."""
    return ["sepal_length", "sepal_width", "petal_length", "petal_width", "species"]


@pytest.fixture
def iris_rows() -> list[list[str]]:
    """Six iris-like rows, two per species, as raw strings."""
    return [
        ["5.1", "3.5", "1.4", "0.2", "setosa"],
        ["4.9", "3.0", "1.4", "0.2", "setosa"],
        ["7.0", "3.2", "4.7", "1.4", "versicolor"],
        ["6.4", "3.2", "4.5", "1.5", "versicolor"],
        ["6.3", "3.3", "6.0", "2.5", "virginica"],
        ["5.8", "2.7", "5.1", "1.9", "virginica"],
    ]


@pytest.fixture
def text_only_rows() -> list[list[str]]:
    """Rows in which every column holds at least one non-numeric value."""
    return [
        ["1.0", "red", "n/a"],
        ["abc", "blue", "2.0"],
        ["3.0", "green", ""],
    ]


# =============================================================================
# Temporary File Fixtures
# =============================================================================


@pytest.fixture
def iris_csv(tmp_path: Path, iris_headers: list[str], iris_rows: list[list[str]]) -> Path:
    """Iris-like dataset written as CSV."""
    path = tmp_path / "iris.csv"
    lines = [",".join(iris_headers)] + [",".join(row) for row in iris_rows]
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def text_only_csv(tmp_path: Path, text_only_rows: list[list[str]]) -> Path:
    """CSV without any numeric column."""
    path = tmp_path / "text.csv"
    lines = ["a,b,c"] + [",".join(row) for row in text_only_rows]
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def ragged_csv(tmp_path: Path) -> Path:
    """CSV with one short and one long row among valid rows."""
    path = tmp_path / "ragged.csv"
    path.write_text(
        "x,y,label\n"
        "0,0,a\n"
        "0,1\n"  # Too few fields
        "5,5,b\n"
        "5,6,b,extra\n"  # Too many fields
        "9,9,c\n"
    )
    return path
