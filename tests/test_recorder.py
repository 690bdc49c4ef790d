from fgqldeps.analyzer.models import ENTITY_FIELD, AnalysisResult, Dependency, DependencyKind
from fgqldeps.analyzer.recorder import DependencyRecorder, record_dependencies
from tests.conftest import analyze_sdl, build_registry, dependencies_of, make_dependency

PRODUCT_EXTENSION = """
extend type Product @key(fields: "id") {
  id: ID! @external
  weight: Float @external
  price: Float! @external
  dimensions: Dimensions @external
  shippingCost: Float! @requires(fields: "weight price")
  shippingVolume: Float @requires(fields: "dimensions { length width height }")
}

type Dimensions {
  length: Float
  width: Float
  height: Float
}
"""


def edges(dependencies: list[Dependency]) -> list[tuple[str, str, str, str]]:
    return [
        (dependency.depended_type, dependency.depended_field, dependency.directive.value, dependency.field_path)
        for dependency in dependencies
    ]


def test_flat_requires_records_one_edge_per_field() -> None:
    result = analyze_sdl(PRODUCT_EXTENSION, subgraph="inventory")

    assert dependencies_of(result, "Product", "shippingCost") == [
        make_dependency("Product", "weight"),
        make_dependency("Product", "price"),
    ]


def test_nested_requires_records_container_and_children() -> None:
    result = analyze_sdl(PRODUCT_EXTENSION)

    assert edges(dependencies_of(result, "Product", "shippingVolume")) == [
        ("Product", "dimensions", "requires", "dimensions"),
        ("Dimensions", "length", "requires", "dimensions.length"),
        ("Dimensions", "width", "requires", "dimensions.width"),
        ("Dimensions", "height", "requires", "dimensions.height"),
    ]


def test_entity_and_external_key_edges() -> None:
    result = analyze_sdl(PRODUCT_EXTENSION)

    assert edges(dependencies_of(result, "Product", ENTITY_FIELD)) == [("Product", "id", "key", "id")]
    assert edges(dependencies_of(result, "Product", "id")) == [("Product", "id", "external", "id")]


def test_no_entity_edge_for_type_definitions() -> None:
    result = analyze_sdl('type Product @key(fields: "id") { id: ID! @external }')

    assert dependencies_of(result, "Product", ENTITY_FIELD) == []
    assert edges(dependencies_of(result, "Product", "id")) == [("Product", "id", "external", "id")]


def test_nested_key_paths_are_not_walked() -> None:
    result = analyze_sdl("""
        extend type Order @key(fields: "buyer { id }") { buyer: Buyer @external }
        type Buyer { id: ID! }
    """)

    assert result.types["Order"].key_fields == ["buyer", "buyer.id"]
    assert edges(dependencies_of(result, "Order", ENTITY_FIELD)) == [("Order", "buyer", "key", "buyer")]


def test_field_type_edges_for_registered_types_only() -> None:
    result = analyze_sdl(PRODUCT_EXTENSION)

    field_type_edges = [
        dependency for dependency in result.dependencies if dependency.directive is DependencyKind.FIELD_TYPE
    ]
    assert field_type_edges == [
        make_dependency(
            "Dimensions",
            "dimensions",
            directive=DependencyKind.FIELD_TYPE,
            depending_field="dimensions",
            depending_subgraph="test",
        )
    ]


def test_provides_starts_at_return_type() -> None:
    result = analyze_sdl("""
        type Warehouse {
          id: ID!
          inventory: [Product!]! @provides(fields: "name")
        }
        type Product {
          name: String @external
        }
    """)

    assert edges(dependencies_of(result, "Warehouse", "inventory")) == [
        ("Product", "inventory", "field_type", "inventory"),
        ("Product", "name", "provides", "name"),
    ]


def test_interface_fan_out_records_one_edge_per_implementation() -> None:
    result = analyze_sdl("""
        type Reference {
          listing: Listing
          summary: String @requires(fields: "listing { title }")
        }
        interface Listing { title: String }
        type A implements Listing { title: String }
        type B implements Listing { title: String }
    """)

    requires = [
        dependency
        for dependency in dependencies_of(result, "Reference", "summary")
        if dependency.depended_field == "title"
    ]
    assert [dependency.depended_type for dependency in requires] == ["A", "B"]
    assert {dependency.field_path for dependency in requires} == {"listing.title"}


def test_same_field_through_two_paths_is_recorded_twice() -> None:
    result = analyze_sdl("""
        type Item {
          listing: Listing
          label: String @requires(fields: "listing { id } listing { parentListing { id } }")
        }
        type Listing {
          id: ID!
          parentListing: Listing
        }
    """)

    listing_ids = [
        dependency
        for dependency in dependencies_of(result, "Item", "label")
        if (dependency.depended_type, dependency.depended_field) == ("Listing", "id")
    ]
    assert [dependency.field_path for dependency in listing_ids] == ["listing.id", "listing.parentListing.id"]


def test_key_fields_reached_through_requires_become_key_edges() -> None:
    result = analyze_sdl("""
        type CartItem {
          product: Product
          listing: String @requires(fields: "product { id name }")
        }
        type Product @key(fields: "id") {
          id: ID!
          name: String
        }
    """)

    assert edges(dependencies_of(result, "CartItem", "listing")) == [
        ("CartItem", "product", "requires", "product"),
        ("Product", "id", "key", "product.id"),
        ("Product", "name", "requires", "product.name"),
    ]


def test_unresolved_paths_are_dropped() -> None:
    result = analyze_sdl("""
        type Product {
          weight: Float
          shippingCost: Float @requires(fields: "weight volume dimensions { depth }")
        }
    """)

    assert edges(dependencies_of(result, "Product", "shippingCost")) == [("Product", "weight", "requires", "weight")]


def test_directive_without_fields_argument_is_skipped() -> None:
    result = analyze_sdl("""
        type Product {
          weight: Float
          shippingCost: Float @requires
        }
    """)

    assert dependencies_of(result, "Product", "shippingCost") == []


def test_join_field_graph_overrides_subgraph() -> None:
    result = analyze_sdl(
        """
        type CartItem @join__type(graph: CART, key: "id") {
          id: ID!
          quantity: Int
          total: Float @join__field(graph: CART, requires: "quantity")
          note: String @join__field(requires: "quantity")
        }
        """,
        subgraph="supergraph",
    )

    assert [dependency.depending_subgraph for dependency in dependencies_of(result, "CartItem", "total")] == ["CART"]
    assert [dependency.depending_subgraph for dependency in dependencies_of(result, "CartItem", "note")] == [
        "supergraph"
    ]


def test_join_field_external_key() -> None:
    result = analyze_sdl("""
        extend type Item @join__type(graph: ITEMSVC, key: "id") {
          id: ID! @join__field(graph: ITEMSVC, external: true)
        }
    """)

    assert edges(dependencies_of(result, "Item", ENTITY_FIELD)) == [("Item", "id", "key", "id")]
    assert edges(dependencies_of(result, "Item", "id")) == [("Item", "id", "external", "id")]


def test_record_dependencies_matches_recorder() -> None:
    registry = build_registry(PRODUCT_EXTENSION)

    assert record_dependencies(registry, "inventory") == DependencyRecorder(registry, "inventory").record_all()


def test_inventory_schema(inventory_result: AnalysisResult) -> None:
    assert inventory_result.metadata.subgraph == "inventory"
    assert inventory_result.metadata.total_types == 3
    assert inventory_result.metadata.total_dependencies == len(inventory_result.dependencies) == 12
    product_dependencies = [
        dependency for dependency in inventory_result.dependencies if dependency.depending_type == "Product"
    ]
    assert len(product_dependencies) == 9


def test_supergraph_deep_requires_through_interface(supergraph_result: AnalysisResult) -> None:
    dependencies = dependencies_of(supergraph_result, "RealtimeSellingListingDetails", "adsSecondaryDisplayMessages")

    assert {dependency.depending_subgraph for dependency in dependencies} == {"ADSCONTENTHUB"}
    assert [(dependency.depended_type, dependency.depended_field) for dependency in dependencies] == [
        ("RealtimeSellingListingDetails", "listingReference"),
        ("ListingReference", "listing"),
        ("SingleSkuListing", "items"),
        ("VariationListing", "items"),
        ("Item", "sellerPrice"),
        ("SellerPrice", "fixedPrice"),
        ("Money", "amount"),
        ("Money", "currency"),
    ]


def test_supergraph_key_reclassification(supergraph_result: AnalysisResult) -> None:
    assert edges(dependencies_of(supergraph_result, "CartItem", "listing")) == [
        ("ListingReference", "listing", "field_type", "listing"),
        ("CartItem", "product", "requires", "product"),
        ("Product", "id", "key", "product.id"),
    ]
