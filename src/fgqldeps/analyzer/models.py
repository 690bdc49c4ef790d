from datetime import datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fgqldeps.schema.directive import DirectiveUsage, FederationDirective

ENTITY_FIELD = "_entity"
"""Sentinel depending field standing for the federation entity lookup of a type."""


class DependencyKind(str, Enum):
    REQUIRES = "requires"
    PROVIDES = "provides"
    KEY = "key"
    EXTERNAL = "external"
    FIELD_TYPE = "field_type"


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys (`isExtension`, `dependedType`, ...)."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class FieldDef(CamelModel):
    name: str
    named_type: str
    is_list: bool = False
    is_non_null: bool = False
    directives: list[DirectiveUsage] = Field(default_factory=list)
    federation_directives: list[Annotated[FederationDirective, Field(discriminator="kind")]] = Field(
        default_factory=list
    )


class TypeDef(CamelModel):
    """A registered object or interface type, merged from all its definition and extension fragments."""

    name: str
    fields: dict[str, FieldDef] = Field(default_factory=dict)
    is_interface: bool = False
    is_extension: bool = False
    interfaces: list[str] = Field(default_factory=list)
    key_fields: list[str] = Field(default_factory=list)
    directives: list[DirectiveUsage] = Field(default_factory=list)

    def has_field(self, field_name: str) -> bool:
        return field_name in self.fields


class Dependency(CamelModel):
    """One dependency edge: `depending_type.depending_field` needs `depended_type.depended_field`."""

    model_config = ConfigDict(frozen=True)

    depending_type: str
    depending_field: str
    depending_subgraph: str
    depended_type: str
    depended_field: str
    directive: DependencyKind
    field_path: str

    @property
    def group_key(self) -> tuple[str, str, str]:
        """Attribution group used by leaf reduction."""
        return (self.depending_type, self.depending_field, self.depending_subgraph)

    @property
    def identity_key(self) -> tuple[str, str, str, str, str, DependencyKind]:
        """Everything but the field path; equal keys mark duplicates."""
        return (
            self.depending_type,
            self.depending_field,
            self.depending_subgraph,
            self.depended_type,
            self.depended_field,
            self.directive,
        )

    @property
    def is_direct(self) -> bool:
        return "." not in self.field_path


class AnalysisMetadata(CamelModel):
    analyzed_at: datetime
    schema_identifier: str
    subgraph: str
    total_types: int = 0
    total_dependencies: int = 0


class AnalysisResult(CamelModel):
    types: dict[str, TypeDef] = Field(default_factory=dict)
    implementations: dict[str, list[str]] = Field(default_factory=dict)
    dependencies: list[Dependency] = Field(default_factory=list)
    metadata: AnalysisMetadata
