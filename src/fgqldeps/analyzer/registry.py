from dataclasses import dataclass, field

from graphql import (
    DocumentNode,
    FieldDefinitionNode,
    InterfaceTypeDefinitionNode,
    InterfaceTypeExtensionNode,
    ListTypeNode,
    NamedTypeNode,
    NonNullTypeNode,
    ObjectTypeDefinitionNode,
    ObjectTypeExtensionNode,
    TypeNode,
)

from fgqldeps import log
from fgqldeps.analyzer.models import FieldDef, TypeDef
from fgqldeps.analyzer.selection import parse_field_spec
from fgqldeps.schema.directive import (
    FederationDirective,
    JoinTypeDirective,
    KeyDirective,
    decode_directives,
    to_directive_usage,
)

TypeFragmentNode = (
    ObjectTypeDefinitionNode | ObjectTypeExtensionNode | InterfaceTypeDefinitionNode | InterfaceTypeExtensionNode
)
TYPE_FRAGMENT_NODES = (
    ObjectTypeDefinitionNode,
    ObjectTypeExtensionNode,
    InterfaceTypeDefinitionNode,
    InterfaceTypeExtensionNode,
)


@dataclass
class TypeRegistry:
    """Object and interface types of a schema, with interface name -> implementing type names."""

    types: dict[str, TypeDef] = field(default_factory=dict)
    implementations: dict[str, list[str]] = field(default_factory=dict)

    def __contains__(self, type_name: object) -> bool:
        return type_name in self.types

    def get(self, type_name: str) -> TypeDef | None:
        return self.types.get(type_name)

    def implementations_of(self, interface_name: str) -> list[str]:
        return self.implementations.get(interface_name, [])

    def is_key_field(self, type_name: str, field_name: str) -> bool:
        type_def = self.types.get(type_name)
        return type_def is not None and field_name in type_def.key_fields


def get_named_type_name(type_node: TypeNode) -> str:
    """Innermost named type of a type reference, e.g. `[String!]!` -> `String`."""
    while isinstance(type_node, NonNullTypeNode | ListTypeNode):
        type_node = type_node.type
    if not isinstance(type_node, NamedTypeNode):
        raise TypeError(f"Unexpected type node: {type(type_node).__name__}")
    return type_node.name.value


def is_list_type_node(type_node: TypeNode) -> bool:
    if isinstance(type_node, NonNullTypeNode):
        type_node = type_node.type
    return isinstance(type_node, ListTypeNode)


def build_field_def(node: FieldDefinitionNode) -> FieldDef:
    usages = [to_directive_usage(directive) for directive in node.directives or ()]
    return FieldDef(
        name=node.name.value,
        named_type=get_named_type_name(node.type),
        is_list=is_list_type_node(node.type),
        is_non_null=isinstance(node.type, NonNullTypeNode),
        directives=usages,
        federation_directives=decode_directives(usages),
    )


def extract_key_fields(directives: list[FederationDirective]) -> list[str]:
    """
    Collects the key fields declared by `@key(fields: ...)` and `@join__type(key: ...)`.

    Every declaration is parsed as a field set and all of its paths are kept, in order and
    without deduplication: `@key(fields: "id") @key(fields: "buyer { id }")` gives
    `["id", "buyer", "buyer.id"]`.

    Args:
        directives: Decoded type-level directives.
    Returns:
        list[str]: Key field paths.
    """
    key_fields: list[str] = []
    for directive in directives:
        if isinstance(directive, KeyDirective):
            spec = directive.fields
        elif isinstance(directive, JoinTypeDirective) and directive.key is not None:
            spec = directive.key
        else:
            continue
        key_fields.extend(selection.path for selection in parse_field_spec(spec))
    return key_fields


class TypeRegistryBuilder:
    """Merges type definitions and extensions, visited in any order, into a TypeRegistry."""

    def __init__(self) -> None:
        self.registry = TypeRegistry()

    def add_document(self, document: DocumentNode) -> "TypeRegistryBuilder":
        for definition in document.definitions:
            if isinstance(definition, TYPE_FRAGMENT_NODES):
                self.add_fragment(definition)
        return self

    def add_fragment(self, node: TypeFragmentNode) -> None:
        type_name = node.name.value
        is_extension = isinstance(node, ObjectTypeExtensionNode | InterfaceTypeExtensionNode)

        type_def = self.registry.types.get(type_name)
        if type_def is None:
            type_def = TypeDef(name=type_name, is_extension=is_extension)
            self.registry.types[type_name] = type_def
            log.debug(f"Registered {'extension of ' if is_extension else ''}type {type_name}")

        if not is_extension:
            type_def.is_extension = False
        if isinstance(node, InterfaceTypeDefinitionNode | InterfaceTypeExtensionNode):
            type_def.is_interface = True

        for field_node in node.fields or ():
            type_def.fields[field_node.name.value] = build_field_def(field_node)

        usages = [to_directive_usage(directive) for directive in node.directives or ()]
        type_def.directives.extend(usages)
        type_def.key_fields.extend(extract_key_fields(decode_directives(usages)))

        for interface_node in node.interfaces or ():
            self._link_implementation(interface_node.name.value, type_def)

    def _link_implementation(self, interface_name: str, type_def: TypeDef) -> None:
        if interface_name not in type_def.interfaces:
            type_def.interfaces.append(interface_name)
        implementors = self.registry.implementations.setdefault(interface_name, [])
        # interfaces may implement other interfaces; only object types resolve fields
        if not type_def.is_interface and type_def.name not in implementors:
            implementors.append(type_def.name)

    def build(self) -> TypeRegistry:
        provisional = [name for name, type_def in self.registry.types.items() if type_def.is_extension]
        if provisional:
            log.debug(f"Types only seen as extensions: {', '.join(provisional)}")

        # implementors follow type registration order, not the order `implements` clauses were seen
        position = {type_name: index for index, type_name in enumerate(self.registry.types)}
        for implementors in self.registry.implementations.values():
            implementors.sort(key=position.__getitem__)
        return self.registry


def build_type_registry(document: DocumentNode) -> TypeRegistry:
    """Build the TypeRegistry of a parsed schema document."""
    return TypeRegistryBuilder().add_document(document).build()
