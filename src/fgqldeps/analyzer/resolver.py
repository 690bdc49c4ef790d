from dataclasses import dataclass

from fgqldeps import log
from fgqldeps.analyzer.registry import TypeRegistry


@dataclass(frozen=True)
class Resolution:
    """The type that owns the last segment of a field path, and that field's named type."""

    parent_type: str
    field_name: str
    field_type: str


def find_field_owners(registry: TypeRegistry, type_name: str, field_name: str) -> list[str]:
    """
    Names of the types that own `field_name` when it is selected on `type_name`.

    An interface fans out to its implementations that define the field, in registration order.
    The interface itself owns the field only when no implementation defines it.

    Args:
        registry: The type registry.
        type_name: The type the field is selected on.
        field_name: The selected field.

    Returns:
        list[str]: Owning type names, empty when the field cannot be resolved.
    """
    type_def = registry.get(type_name)
    if type_def is None:
        return []

    if type_def.is_interface:
        owners = [
            implementation
            for implementation in registry.implementations_of(type_name)
            if (implementation_def := registry.get(implementation)) is not None
            and implementation_def.has_field(field_name)
        ]
        if owners:
            return owners

    return [type_name] if type_def.has_field(field_name) else []


def resolve_field_path(registry: TypeRegistry, path: str, starting_type: str) -> list[Resolution]:
    """
    Walks a dotted field path from a starting type and resolves its last segment.

    Each interface on the way may fork the walk into one branch per implementation; every branch
    keeps its own cursor. A branch that hits an unknown type or a missing field is dropped.

    Args:
        registry: The type registry.
        path: Dotted field path, e.g. `dimensions.length`.
        starting_type: Type the first segment is selected on.

    Returns:
        list[Resolution]: One resolution per surviving branch, duplicate-free, in a deterministic
        order. An empty list means the path does not resolve.
    """
    segments = path.split(".")
    cursors = [starting_type]

    for segment in segments[:-1]:
        next_cursors: list[str] = []
        for cursor in cursors:
            for owner in find_field_owners(registry, cursor, segment):
                field_type = registry.types[owner].fields[segment].named_type
                if field_type not in next_cursors:
                    next_cursors.append(field_type)
        cursors = next_cursors
        if not cursors:
            log.debug(f"Cannot resolve '{path}' from {starting_type}: no owner for '{segment}'")
            return []

    last_segment = segments[-1]
    resolutions: list[Resolution] = []
    for cursor in cursors:
        for owner in find_field_owners(registry, cursor, last_segment):
            resolution = Resolution(owner, last_segment, registry.types[owner].fields[last_segment].named_type)
            if resolution not in resolutions:
                resolutions.append(resolution)

    if not resolutions:
        log.debug(f"Cannot resolve '{path}' from {starting_type}: no owner for '{last_segment}'")
    return resolutions
