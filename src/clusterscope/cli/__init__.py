"""
CLI commands for clusterscope.

Provides the command-line interface for clustering datasets and
inspecting configuration.
"""

__all__ = ["cluster", "config", "main"]
