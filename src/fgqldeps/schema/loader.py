import re
from pathlib import Path

from ariadne import load_schema_from_path
from ariadne.exceptions import GraphQLFileSyntaxError
from graphql import DocumentNode, GraphQLSyntaxError, parse

from fgqldeps import log

GRAPHQL_FILE_SUFFIXES = (".graphql", ".graphqls", ".gql")
SUBGRAPH_COMMENT_PATTERN = re.compile(r"#\s*Subgraph:\s*(\S+)", re.IGNORECASE)
FILE_NAME_PREFIX_PATTERN = re.compile(r"^([^.-]+)")
UNKNOWN_SUBGRAPH = "unknown"


class SchemaFileSyntaxError(ValueError):
    """Raised when a schema file is not valid GraphQL SDL."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"Could not parse {path}: {message}")
        self.path = path
        self.message = message


def resolve_graphql_files(path: Path) -> list[Path]:
    """Resolve a file or directory into a sorted list of GraphQL schema files.

    Args:
        path: A schema file, or a directory searched recursively

    Returns:
        Sorted list of GraphQL file paths
    """
    if path.is_dir():
        return sorted(file for file in path.rglob("*") if file.suffix in GRAPHQL_FILE_SUFFIXES)
    return [path]


def parse_schema_source(source: str, path: Path | None = None) -> DocumentNode:
    """Parse SDL into a document; federation directives need no declarations to parse."""
    try:
        return parse(source)
    except GraphQLSyntaxError as e:
        raise SchemaFileSyntaxError(path or Path("<string>"), e.message) from e


def load_schema_source(path: Path) -> str:
    """
    Read the SDL of a schema file, or of every schema file in a directory.

    Each file goes through `load_schema_from_path` on its own, which syntax-checks it, so that
    errors point at the offending file.

    Args:
        path: Schema file or directory.

    Returns:
        str: The concatenated SDL.

    Raises:
        SchemaFileSyntaxError: If a file is not valid SDL.
        FileNotFoundError: If a directory holds no schema file.
    """
    files = resolve_graphql_files(path)
    if not files:
        raise FileNotFoundError(f"No GraphQL schema files found in {path}")

    schema_str = ""
    for graphql_file in files:
        try:
            schema_str += load_schema_from_path(graphql_file) + "\n"
        except GraphQLFileSyntaxError as e:
            raise SchemaFileSyntaxError(graphql_file, str(e.__cause__ or e)) from e
        log.debug(f"Loaded schema file {graphql_file}")
    return schema_str


def extract_subgraph(schema_source: str, schema_identifier: str) -> str:
    """
    Infer the subgraph a schema belongs to.

    A `# Subgraph: <name>` comment wins; otherwise the schema file name up to its first `.` or `-`
    is used (`products-schema.graphql` -> `products`).

    Args:
        schema_source: The SDL text.
        schema_identifier: Path or logical name of the schema.

    Returns:
        str: The subgraph name, `unknown` when nothing matches.
    """
    comment = SUBGRAPH_COMMENT_PATTERN.search(schema_source)
    if comment:
        return comment.group(1)

    file_name = re.split(r"[/\\]", schema_identifier)[-1]
    match = FILE_NAME_PREFIX_PATTERN.match(file_name)
    if match:
        return match.group(1)

    return UNKNOWN_SUBGRAPH
