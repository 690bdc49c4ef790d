"""Parsing of the field-set strings found in `fields`, `requires`, `provides` and `key` arguments.

A field set is a GraphQL selection set without its outer braces, restricted to field names:

    "weight price"
    "dimensions { length width height }"

Fragment spreads (`...Name`, `... on Type { ... }`) are not expanded; the fragment name and the
type condition are dropped and the fields of an inline fragment are attributed to the enclosing
field.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass

FRAGMENT_SPREAD = "..."
TYPE_CONDITION = "on"

_TOKEN_RE = re.compile(r"[{}]|[^\s,{}]+")


@dataclass(frozen=True)
class FieldSelection:
    field: str
    path: str

    @property
    def segments(self) -> list[str]:
        return self.path.split(".")


def _raw_tokens(field_spec: str) -> list[str]:
    return _TOKEN_RE.findall(field_spec)


def tokenize_field_spec(field_spec: str) -> list[str]:
    """Split a field set into field names and standalone `{` / `}` tokens, without fragment spreads."""
    raw = _raw_tokens(field_spec)
    tokens: list[str] = []
    index = 0
    while index < len(raw):
        token = raw[index]
        index += 1
        if token == FRAGMENT_SPREAD:
            # bare "..." is followed by a fragment name or by "on <Type>"
            if index < len(raw) and raw[index] not in ("{", "}"):
                index += 2 if raw[index] == TYPE_CONDITION else 1
            continue
        if token == FRAGMENT_SPREAD + TYPE_CONDITION:
            # "...on <Type>" written without a space
            if index < len(raw) and raw[index] not in ("{", "}"):
                index += 1
            continue
        if token.startswith(FRAGMENT_SPREAD):
            continue
        tokens.append(token)
    return tokens


def iter_field_selections(field_spec: str) -> Iterator[FieldSelection]:
    tokens = tokenize_field_spec(field_spec)
    path: list[str] = []
    # one entry per open brace: True when it opened the sub-selection of the field on top of `path`
    scopes: list[bool] = []
    keep_open = False

    for index, token in enumerate(tokens):
        if token == "{":
            scopes.append(keep_open)
            keep_open = False
        elif token == "}":
            if scopes and scopes.pop():
                path.pop()
        else:
            path.append(token)
            yield FieldSelection(field=token, path=".".join(path))

            keep_open = index + 1 < len(tokens) and tokens[index + 1] == "{"
            if not keep_open:
                path.pop()


def parse_field_spec(field_spec: str) -> list[FieldSelection]:
    """
    Parse a field set into one selection per field token, in document order.

    Container fields are emitted too, before their children, so the resulting paths are
    prefix-closed: `"a { b }"` gives `a` and `a.b`.

    Args:
        field_spec: The field set string, e.g. `"id dimensions { length }"`.

    Returns:
        list[FieldSelection]: `(field, dotted path)` pairs.
    """
    return list(iter_field_selections(field_spec))
