"""
Pydantic result models for clustering runs.

Defines the merge history record and the compact run summary shown by the
CLI. The tree and distance matrix themselves stay as plain Python/NumPy
objects (see clusterscope.core).
"""

from __future__ import annotations

from pydantic import BaseModel, Field, computed_field


class MergeStep(BaseModel):
    """One merge of the agglomeration, in execution order."""

    step: int = Field(ge=1, description="1-based merge number")
    left: tuple[int, ...] = Field(description="Sorted row indices of the left cluster")
    right: tuple[int, ...] = Field(description="Sorted row indices of the right cluster")
    height: float = Field(ge=0, description="Linkage distance of the merge")

    @computed_field
    @property
    def size(self) -> int:
        """Number of rows in the merged cluster."""
        return len(self.left) + len(self.right)

    model_config = {"frozen": True}


class ClusteringSummary(BaseModel):
    """Headline numbers of a finished clustering run."""

    metric: str = Field(description="Distance metric used")
    linkage: str = Field(description="Linkage method used")
    n_rows: int = Field(ge=0, description="Rows clustered")
    n_columns: int = Field(ge=0, description="Numeric columns used")
    numeric_headers: list[str] = Field(description="Names of the numeric columns")
    n_merges: int = Field(ge=0, description="Internal nodes in the merge tree")
    root_height: float = Field(ge=0, description="Height of the final merge")

    model_config = {"frozen": True}
