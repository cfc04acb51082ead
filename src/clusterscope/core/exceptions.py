"""
Custom exceptions with actionable guidance.

Provides specific error types for the failure scenarios of the clustering
pipeline, each with a helpful suggestion for resolution.
"""

from __future__ import annotations

from collections.abc import Iterable


class ClusterscopeError(Exception):
    """Base exception for clusterscope errors."""

    def __init__(self, message: str, suggestion: str | None = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self.full_message)

    @property
    def full_message(self) -> str:
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class InputError(ClusterscopeError):
    """Base class for dataset and matrix input errors."""


class EmptyInputError(InputError):
    """Raised when there is nothing to cluster (no rows or no numeric columns)."""

    NO_ROWS = "no_rows"
    NO_NUMERIC_COLUMNS = "no_numeric_columns"

    def __init__(self, reason: str):
        if reason == self.NO_NUMERIC_COLUMNS:
            message = "No numeric columns found"
            suggestion = (
                "A column is numeric only if every row parses as a finite number. "
                "Check for text, blank cells or NaN/Infinity values in the columns "
                "you expect to cluster on."
            )
        else:
            message = "Dataset contains no rows"
            suggestion = "Load a dataset with at least one data row below the header."
        super().__init__(message=message, suggestion=suggestion)
        self.reason = reason


class InvalidInputError(InputError):
    """Raised when an engine component receives input it cannot process."""


class MalformedRowError(InputError):
    """Raised when a row length disagrees with the header count."""

    def __init__(self, row_index: int, expected: int, actual: int):
        super().__init__(
            message=(
                f"Malformed row {row_index}: expected {expected} values, got {actual}"
            ),
            suggestion=(
                "Rows must have exactly one value per header. Filter out ragged "
                "rows before clustering (load_dataset() does this for CSV files)."
            ),
        )
        self.row_index = row_index
        self.expected = expected
        self.actual = actual


class EmptyDatasetError(InputError):
    """Raised when a dataset file has a header but no data rows."""

    def __init__(self, path: str):
        super().__init__(
            message=f"Dataset file contains no data rows: {path}",
            suggestion=(
                "The first line is read as the header. Make sure the file has at "
                "least one more line with the same number of fields."
            ),
        )


class ConfigurationError(ClusterscopeError):
    """Raised when configuration is invalid."""


class InvalidMetricError(ConfigurationError):
    """Raised when the distance metric selector is not recognized."""

    def __init__(self, value: object, choices: Iterable[str]):
        options = ", ".join(choices)
        super().__init__(
            message=f"Unknown distance metric: {value!r}",
            suggestion=f"Choose one of: {options}.",
        )
        self.value = value


class InvalidLinkageError(ConfigurationError):
    """Raised when the linkage selector is not recognized."""

    def __init__(self, value: object, choices: Iterable[str]):
        options = ", ".join(choices)
        super().__init__(
            message=f"Unknown linkage method: {value!r}",
            suggestion=f"Choose one of: {options}.",
        )
        self.value = value
