from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from hypothesis import strategies as st
from hypothesis.strategies import composite

from fgqldeps.analyzer.analysis import analyze_schema
from fgqldeps.analyzer.models import AnalysisResult, Dependency, DependencyKind
from fgqldeps.analyzer.registry import TypeRegistry, build_type_registry
from fgqldeps.schema.loader import parse_schema_source


class TestSchemaData:
    TESTS_DATA_DIR: Path = Path(__file__).parent / "data"
    INVENTORY: Path = TESTS_DATA_DIR / "inventory.graphql"
    SUPERGRAPH: Path = TESTS_DATA_DIR / "supergraph.graphql"
    BROKEN: Path = TESTS_DATA_DIR / "broken.graphql"
    CONFIG: Path = TESTS_DATA_DIR / "config.yaml"


def analyze_sdl(sdl: str, subgraph: str = "test") -> AnalysisResult:
    """Analyze an inline schema under a fixed identifier and subgraph."""
    return analyze_schema(sdl, "test.graphql", subgraph)


def build_registry(sdl: str) -> TypeRegistry:
    return build_type_registry(parse_schema_source(sdl))


def dependencies_of(result: AnalysisResult, type_name: str, field_name: str) -> list[Dependency]:
    return [
        dependency
        for dependency in result.dependencies
        if dependency.depending_type == type_name and dependency.depending_field == field_name
    ]


def make_dependency(
    depended_type: str,
    depended_field: str,
    field_path: str | None = None,
    directive: DependencyKind = DependencyKind.REQUIRES,
    depending_type: str = "Product",
    depending_field: str = "shippingCost",
    depending_subgraph: str = "inventory",
) -> Dependency:
    return Dependency(
        depending_type=depending_type,
        depending_field=depending_field,
        depending_subgraph=depending_subgraph,
        depended_type=depended_type,
        depended_field=depended_field,
        directive=directive,
        field_path=field_path or depended_field,
    )


@pytest.fixture(scope="module")
def inventory_result() -> AnalysisResult:
    assert TestSchemaData.INVENTORY.exists(), f"Missing test file: {TestSchemaData.INVENTORY}"
    return analyze_schema(TestSchemaData.INVENTORY.read_text(), str(TestSchemaData.INVENTORY))


@pytest.fixture(scope="module")
def supergraph_result() -> AnalysisResult:
    assert TestSchemaData.SUPERGRAPH.exists(), f"Missing test file: {TestSchemaData.SUPERGRAPH}"
    return analyze_schema(TestSchemaData.SUPERGRAPH.read_text(), str(TestSchemaData.SUPERGRAPH))


TYPE_NAMES = ["Product", "Listing", "Item"]
FIELD_NAMES = ["id", "listing", "items", "price"]
SUBGRAPHS = ["products", "listings"]


@composite
def field_path_strategy(draw: Callable[[st.SearchStrategy[Any]], Any]) -> str:
    segments = draw(st.lists(st.sampled_from(FIELD_NAMES), min_size=1, max_size=4))
    return ".".join(segments)


@composite
def dependency_strategy(draw: Callable[[st.SearchStrategy[Any]], Any]) -> Dependency:
    field_path = draw(field_path_strategy())
    return Dependency(
        depending_type=draw(st.sampled_from(TYPE_NAMES)),
        depending_field=draw(st.sampled_from(FIELD_NAMES)),
        depending_subgraph=draw(st.sampled_from(SUBGRAPHS)),
        depended_type=draw(st.sampled_from(TYPE_NAMES)),
        depended_field=field_path.rsplit(".", 1)[-1],
        directive=draw(st.sampled_from(list(DependencyKind))),
        field_path=field_path,
    )


@composite
def dependency_list_strategy(draw: Callable[[st.SearchStrategy[Any]], Any]) -> list[Dependency]:
    return draw(st.lists(dependency_strategy(), max_size=25))
