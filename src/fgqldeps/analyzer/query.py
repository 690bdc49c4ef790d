from collections.abc import Iterable
from typing import Any

from fgqldeps.analyzer.models import AnalysisResult, Dependency


class TypeNotFoundError(LookupError):
    """Raised when a query names a type that is not in the analyzed schema."""

    def __init__(self, type_name: str) -> None:
        super().__init__(f'Type "{type_name}" not found in schema')
        self.type_name = type_name


def filter_dependencies(
    dependencies: Iterable[Dependency],
    type_name: str,
    field: str | None = None,
    direct: bool = False,
    include_same_type: bool = False,
) -> list[Dependency]:
    """
    Selects the dependencies on a type.

    A dependency is on `type_name` only when its resolved depended type is that type; field names
    alone are never matched, since unrelated types often share them.

    Args:
        dependencies: Dependencies to filter.
        type_name: The queried type.
        field: Only keep dependencies on this field of the type.
        direct: Only keep dependencies whose field path has a single segment.
        include_same_type: Keep dependencies declared on the queried type itself.

    Returns:
        list[Dependency]: Matching dependencies, in input order.
    """
    return [
        dependency
        for dependency in dependencies
        if dependency.depended_type == type_name
        and (field is None or dependency.depended_field == field)
        and (not direct or dependency.is_direct)
        and (include_same_type or dependency.depending_type != type_name)
    ]


def _is_path_prefix(prefix: str, path: str) -> bool:
    return path.startswith(prefix + ".")


def reduce_to_leaf_dependencies(dependencies: Iterable[Dependency]) -> list[Dependency]:
    """
    Deduplicates dependencies and keeps only leaf paths per depending field.

    Dependencies are grouped by depending type, field and subgraph. Within a group, records that
    differ only by field path collapse into the one with the longest path, and a record whose path
    is a strict dot-prefix of another surviving path is dropped. Applying it twice changes nothing.

    Args:
        dependencies: Dependencies to reduce.

    Returns:
        list[Dependency]: Surviving dependencies, in input order.
    """
    dependencies = list(dependencies)
    groups: dict[tuple[str, str, str], dict[tuple[Any, ...], Dependency]] = {}
    for dependency in dependencies:
        group = groups.setdefault(dependency.group_key, {})
        existing = group.get(dependency.identity_key)
        if existing is None or len(dependency.field_path) > len(existing.field_path):
            group[dependency.identity_key] = dependency

    survivors: set[int] = set()
    for group in groups.values():
        paths = {dependency.field_path for dependency in group.values()}
        for dependency in group.values():
            if not any(_is_path_prefix(dependency.field_path, path) for path in paths):
                survivors.add(id(dependency))

    ordered: list[Dependency] = []
    for dependency in dependencies:
        if id(dependency) in survivors:
            survivors.discard(id(dependency))
            ordered.append(dependency)
    return ordered


def _require_type(result: AnalysisResult, type_name: str) -> None:
    if type_name not in result.types:
        raise TypeNotFoundError(type_name)


def query_dependencies(
    result: AnalysisResult,
    type_name: str,
    field: str | None = None,
    direct: bool = False,
    include_same_type: bool = False,
) -> list[Dependency]:
    """Leaf dependencies on a type (or one of its fields) of an analyzed schema.

    Raises:
        TypeNotFoundError: If the type is not part of the analyzed schema.
    """
    _require_type(result, type_name)
    matching = filter_dependencies(result.dependencies, type_name, field, direct, include_same_type)
    return reduce_to_leaf_dependencies(matching)


def query_all_dependencies(result: AnalysisResult) -> list[Dependency]:
    return list(result.dependencies)


def query_types(result: AnalysisResult) -> list[str]:
    return list(result.types)


def query_type_details(result: AnalysisResult, type_name: str) -> dict[str, Any]:
    """
    Serialized type definition with every dependency the type takes part in.

    Args:
        result: The analysis to query.
        type_name: Name of the type.

    Returns:
        dict[str, Any]: The camelCase type definition plus a `dependencies` list holding the
        dependencies where the type is the depending or the depended side.

    Raises:
        TypeNotFoundError: If the type is not part of the analyzed schema.
    """
    _require_type(result, type_name)
    details = result.types[type_name].to_json_dict()
    details["dependencies"] = [
        dependency.to_json_dict()
        for dependency in result.dependencies
        if type_name in (dependency.depending_type, dependency.depended_type)
    ]
    return details
