from datetime import UTC, datetime
from pathlib import Path

from graphql import DocumentNode

from fgqldeps import log
from fgqldeps.analyzer.models import AnalysisMetadata, AnalysisResult
from fgqldeps.analyzer.recorder import record_dependencies
from fgqldeps.analyzer.registry import build_type_registry
from fgqldeps.schema.loader import extract_subgraph, load_schema_source, parse_schema_source


def analyze_document(document: DocumentNode, schema_identifier: str, subgraph: str) -> AnalysisResult:
    """
    Compute the dependency graph of a parsed federated schema.

    Args:
        document: The parsed schema.
        schema_identifier: Path or logical name the result is stored under.
        subgraph: Ambient subgraph label for directives that do not name a graph.

    Returns:
        AnalysisResult: Registry, interface implementations, dependencies and metadata.
    """
    registry = build_type_registry(document)
    dependencies = record_dependencies(registry, subgraph)

    log.debug(f"Analyzed {schema_identifier}: {len(registry.types)} types, {len(dependencies)} dependencies")

    return AnalysisResult(
        types=registry.types,
        implementations=registry.implementations,
        dependencies=dependencies,
        metadata=AnalysisMetadata(
            analyzed_at=datetime.now(UTC),
            schema_identifier=schema_identifier,
            subgraph=subgraph,
            total_types=len(registry.types),
            total_dependencies=len(dependencies),
        ),
    )


def analyze_schema(schema_source: str, schema_identifier: str, subgraph: str | None = None) -> AnalysisResult:
    """Parse and analyze SDL, inferring the subgraph from the source when none is given."""
    document = parse_schema_source(schema_source)
    return analyze_document(document, schema_identifier, subgraph or extract_subgraph(schema_source, schema_identifier))


def analyze_schema_file(path: Path, subgraph: str | None = None) -> AnalysisResult:
    """Analyze a schema file or directory, identified by its resolved path."""
    resolved = path.resolve()
    schema_source = load_schema_source(resolved)
    log.info(f"Analyzing schema: {resolved}")
    return analyze_schema(schema_source, str(resolved), subgraph)
