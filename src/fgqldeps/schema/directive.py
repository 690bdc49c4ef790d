import json
from typing import Any, Literal

from graphql import value_from_ast_untyped
from graphql.language.ast import DirectiveNode
from pydantic import BaseModel, ConfigDict, Field

from fgqldeps import log


class DirectiveUsage(BaseModel):
    """A directive application kept verbatim: its name and its untyped argument values."""

    model_config = ConfigDict(frozen=True)

    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class KeyDirective(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["key"] = "key"
    fields: str


class ExternalDirective(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["external"] = "external"


class RequiresDirective(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["requires"] = "requires"
    fields: str


class ProvidesDirective(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["provides"] = "provides"
    fields: str


class JoinFieldDirective(BaseModel):
    """Federation v2 supergraph form of requires/provides/external on a field."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["join__field"] = "join__field"
    graph: str | None = None
    requires: str | None = None
    provides: str | None = None
    external: bool = False


class JoinTypeDirective(BaseModel):
    """Federation v2 supergraph form of an entity key on a type."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["join__type"] = "join__type"
    graph: str | None = None
    key: str | None = None


FederationDirective = (
    KeyDirective
    | ExternalDirective
    | RequiresDirective
    | ProvidesDirective
    | JoinFieldDirective
    | JoinTypeDirective
)


def get_directive_arguments(directive_node: DirectiveNode) -> dict[str, Any]:
    """
    Extracts the arguments of a directive node as plain Python values.

    Args:
        directive_node: The directive as it appears in the parsed document.
    Returns:
        dict[str, Any]: Argument name to value. Enum values become their names, lists and objects
        are converted recursively.
    """
    return {arg.name.value: value_from_ast_untyped(arg.value) for arg in directive_node.arguments or ()}


def to_directive_usage(directive_node: DirectiveNode) -> DirectiveUsage:
    return DirectiveUsage(name=directive_node.name.value, arguments=get_directive_arguments(directive_node))


def _string_argument(usage: DirectiveUsage, argument_name: str) -> str | None:
    value = usage.arguments.get(argument_name)
    return value if isinstance(value, str) else None


def decode_directive(usage: DirectiveUsage) -> FederationDirective | None:
    """Decode a directive into its federation variant.

    Returns None for directives that play no part in dependency analysis and for
    federation directives missing their mandatory string argument.
    """
    match usage.name:
        case "key" | "requires" | "provides":
            fields = _string_argument(usage, "fields")
            if fields is None:
                log.debug(f"Skipping @{usage.name} without a string 'fields' argument")
                return None
            if usage.name == "key":
                return KeyDirective(fields=fields)
            if usage.name == "requires":
                return RequiresDirective(fields=fields)
            return ProvidesDirective(fields=fields)
        case "external":
            return ExternalDirective()
        case "join__field":
            return JoinFieldDirective(
                graph=_string_argument(usage, "graph"),
                requires=_string_argument(usage, "requires"),
                provides=_string_argument(usage, "provides"),
                external=usage.arguments.get("external") is True,
            )
        case "join__type":
            return JoinTypeDirective(graph=_string_argument(usage, "graph"), key=_string_argument(usage, "key"))
        case _:
            return None


def decode_directives(usages: list[DirectiveUsage]) -> list[FederationDirective]:
    decoded = (decode_directive(usage) for usage in usages)
    return [directive for directive in decoded if directive is not None]


def is_external(directives: list[FederationDirective]) -> bool:
    """Whether a field is supplied by another subgraph (@external or @join__field(external: true))."""
    return any(
        isinstance(directive, ExternalDirective)
        or (isinstance(directive, JoinFieldDirective) and directive.external)
        for directive in directives
    )


def format_directive(usage: DirectiveUsage) -> str:
    """Render a directive back to SDL-like text, e.g. `@requires(fields: "weight price")`."""
    if not usage.arguments:
        return f"@{usage.name}"

    args_list = []
    for arg_name, arg_value in usage.arguments.items():
        if isinstance(arg_value, str):
            args_list.append(f"{arg_name}: {json.dumps(arg_value)}")
        elif isinstance(arg_value, bool):
            args_list.append(f"{arg_name}: {str(arg_value).lower()}")
        else:
            args_list.append(f"{arg_name}: {arg_value}")
    return f"@{usage.name}({', '.join(args_list)})"
