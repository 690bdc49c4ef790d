from fgqldeps import log
from fgqldeps.analyzer.models import ENTITY_FIELD, Dependency, DependencyKind, FieldDef, TypeDef
from fgqldeps.analyzer.registry import TypeRegistry
from fgqldeps.analyzer.resolver import resolve_field_path
from fgqldeps.analyzer.selection import parse_field_spec
from fgqldeps.schema.directive import (
    ExternalDirective,
    JoinFieldDirective,
    JoinTypeDirective,
    KeyDirective,
    ProvidesDirective,
    RequiresDirective,
    is_external,
)


class DependencyRecorder:
    """Turns the federation directives of a registry into Dependency records.

    Args:
        registry: The type registry built from the schema.
        subgraph: Ambient subgraph label, used unless a directive names its own graph.
    """

    def __init__(self, registry: TypeRegistry, subgraph: str) -> None:
        self.registry = registry
        self.subgraph = subgraph
        self.dependencies: list[Dependency] = []

    def record_all(self) -> list[Dependency]:
        for type_def in self.registry.types.values():
            self.record_type(type_def)
        return self.dependencies

    def record_type(self, type_def: TypeDef) -> None:
        self.record_key_dependencies(type_def)
        for field_def in type_def.fields.values():
            self.record_field_type_dependency(type_def, field_def)
            self.record_field_directives(type_def, field_def)

    def record_key_dependencies(self, type_def: TypeDef) -> None:
        for key_field in type_def.key_fields:
            # nested key paths are kept on the type but not walked
            if "." in key_field:
                continue

            if type_def.is_extension:
                self._append(
                    type_def.name, ENTITY_FIELD, self.subgraph, type_def.name, key_field, DependencyKind.KEY, key_field
                )

            field_def = type_def.fields.get(key_field)
            if field_def is not None and is_external(field_def.federation_directives):
                self._append(
                    type_def.name, key_field, self.subgraph, type_def.name, key_field, DependencyKind.EXTERNAL, key_field
                )

    def record_field_type_dependency(self, type_def: TypeDef, field_def: FieldDef) -> None:
        if field_def.named_type not in self.registry:
            return
        self._append(
            type_def.name,
            field_def.name,
            self.subgraph,
            field_def.named_type,
            field_def.name,
            DependencyKind.FIELD_TYPE,
            field_def.name,
        )

    def record_field_directives(self, type_def: TypeDef, field_def: FieldDef) -> None:
        for directive in field_def.federation_directives:
            match directive:
                case RequiresDirective(fields=fields):
                    self.record_field_set(type_def, field_def, fields, DependencyKind.REQUIRES, self.subgraph)
                case ProvidesDirective(fields=fields):
                    self.record_field_set(type_def, field_def, fields, DependencyKind.PROVIDES, self.subgraph)
                case JoinFieldDirective(graph=graph, requires=requires, provides=provides):
                    subgraph = graph or self.subgraph
                    if requires:
                        self.record_field_set(type_def, field_def, requires, DependencyKind.REQUIRES, subgraph)
                    if provides:
                        self.record_field_set(type_def, field_def, provides, DependencyKind.PROVIDES, subgraph)
                case KeyDirective() | ExternalDirective() | JoinTypeDirective():
                    pass

    def record_field_set(
        self,
        type_def: TypeDef,
        field_def: FieldDef,
        field_spec: str,
        kind: DependencyKind,
        subgraph: str,
    ) -> None:
        """
        Records one dependency per resolution of every path of a requires/provides field set.

        `requires` paths start at the type declaring the field; `provides` paths start at the field's
        own return type. A resolved field that is a key of its owning type is recorded as `key`.

        Args:
            type_def: Type declaring the field.
            field_def: Field carrying the directive.
            field_spec: The field set string.
            kind: REQUIRES or PROVIDES.
            subgraph: Subgraph the directive belongs to.
        """
        starting_type = field_def.named_type if kind is DependencyKind.PROVIDES else type_def.name

        for selection in parse_field_spec(field_spec):
            resolutions = resolve_field_path(self.registry, selection.path, starting_type)
            if not resolutions:
                log.debug(
                    f"Dropping @{kind.value} path '{selection.path}' of {type_def.name}.{field_def.name}: unresolved"
                )
            for resolution in resolutions:
                directive = (
                    DependencyKind.KEY
                    if self.registry.is_key_field(resolution.parent_type, resolution.field_name)
                    else kind
                )
                self._append(
                    type_def.name,
                    field_def.name,
                    subgraph,
                    resolution.parent_type,
                    resolution.field_name,
                    directive,
                    selection.path,
                )

    def _append(
        self,
        depending_type: str,
        depending_field: str,
        depending_subgraph: str,
        depended_type: str,
        depended_field: str,
        directive: DependencyKind,
        field_path: str,
    ) -> None:
        self.dependencies.append(
            Dependency(
                depending_type=depending_type,
                depending_field=depending_field,
                depending_subgraph=depending_subgraph,
                depended_type=depended_type,
                depended_field=depended_field,
                directive=directive,
                field_path=field_path,
            )
        )


def record_dependencies(registry: TypeRegistry, subgraph: str) -> list[Dependency]:
    """Collect every dependency declared in a registry, attributed to `subgraph` by default."""
    return DependencyRecorder(registry, subgraph).record_all()
