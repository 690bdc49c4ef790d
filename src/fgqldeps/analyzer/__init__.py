"""Dependency analysis of federated GraphQL schemas."""

from .analysis import analyze_document, analyze_schema, analyze_schema_file
from .query import TypeNotFoundError, query_dependencies, reduce_to_leaf_dependencies

__all__ = [
    "analyze_document",
    "analyze_schema",
    "analyze_schema_file",
    "TypeNotFoundError",
    "query_dependencies",
    "reduce_to_leaf_dependencies",
]
