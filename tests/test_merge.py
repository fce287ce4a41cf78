from api_doc_builder.engine.merge import merge_operations, merge_parameter
from api_doc_builder.engine.paths import add_operation, build_path_item, get_existing_operation, operations_map
from api_doc_builder.models.openapi import ApiResponse, MediaType, Operation, Parameter, PathItem
from api_doc_builder.models.route import RequestMethod

JSON = "application/json"


def _response(schema: dict) -> ApiResponse:
    return ApiResponse(description="OK", content={JSON: MediaType(schema_=schema)})


class TestMergeOperations:
    def test_neither_gives_empty_operation(self):
        assert merge_operations(None, None) == Operation()

    def test_single_side_returned_as_is(self):
        existing = Operation(summary="a")
        incoming = Operation(summary="b")
        assert merge_operations(existing, None) is existing
        assert merge_operations(None, incoming) is incoming

    def test_both_present_enriches_existing(self):
        existing = Operation(
            operation_id="get",
            summary="kept",
            tags=["orders"],
            parameters=[Parameter(name="id", in_="path")],
            responses={"200": _response({"type": "string"})},
        )
        incoming = Operation(
            operation_id="getOrders",
            summary="ignored",
            description="filled",
            tags=["admin"],
            parameters=[Parameter(name="id", in_="path"), Parameter(name="page", in_="query")],
            responses={"200": _response({"type": "integer"}), "404": ApiResponse(description="Not Found")},
        )

        merged = merge_operations(existing, incoming)

        assert merged is existing
        assert merged.operation_id == "getOrders"
        assert merged.summary == "kept"
        assert merged.description == "filled"
        assert merged.tags == ["orders", "admin"]
        assert [p.name for p in merged.parameters] == ["id", "page"]
        assert set(merged.responses) == {"200", "404"}
        assert merged.responses["200"].content[JSON].schema_ == {"oneOf": [{"type": "string"}, {"type": "integer"}]}

    def test_shorter_operation_id_does_not_replace(self):
        merged = merge_operations(Operation(operation_id="listOrders"), Operation(operation_id="list"))
        assert merged.operation_id == "listOrders"

    def test_merge_parameter_fills_unset_fields(self):
        documented = Parameter(name="page", in_="query", description="Page number")
        parameters = [documented]
        merge_parameter(parameters, Parameter(name="page", in_="query", required=True, schema_={"type": "integer"}))
        assert parameters == [documented]
        assert documented.description == "Page number"
        assert documented.required is True
        assert documented.schema_ == {"type": "integer"}

    def test_merge_parameter_appends_other_location(self):
        parameters = [Parameter(name="id", in_="path")]
        merge_parameter(parameters, Parameter(name="id", in_="query"))
        assert len(parameters) == 2


class TestPathAggregation:
    def test_missing_path_variable_prunes_parameter(self):
        op = Operation(parameters=[Parameter(name="id", in_="path"), Parameter(name="q", in_="query")])
        item = build_path_item(RequestMethod.GET, op, "/items", {})
        assert [p.name for p in item.get.parameters] == ["q"]

    def test_catch_all_variable_kept(self):
        op = Operation(parameters=[Parameter(name="rest", in_="path")])
        build_path_item(RequestMethod.GET, op, "/files/{*rest}", {})
        assert [p.name for p in op.parameters] == ["rest"]

    def test_add_operation_reuses_path_item(self):
        paths: dict[str, PathItem] = {}
        get_op, post_op = Operation(summary="get"), Operation(summary="post")
        add_operation(paths, RequestMethod.GET, get_op, "/orders")
        add_operation(paths, RequestMethod.POST, post_op, "/orders")
        assert paths["/orders"].get is get_op
        assert paths["/orders"].post is post_op

    def test_existing_operation_lookup(self):
        paths: dict[str, PathItem] = {}
        op = Operation()
        add_operation(paths, RequestMethod.PUT, op, "/orders")
        assert get_existing_operation(operations_map(paths, "/orders"), RequestMethod.PUT) is op
        assert get_existing_operation(operations_map(paths, "/orders"), RequestMethod.GET) is None
        assert get_existing_operation(operations_map(paths, "/missing"), RequestMethod.PUT) is None

    def test_trace_is_never_looked_up(self):
        paths: dict[str, PathItem] = {}
        add_operation(paths, RequestMethod.TRACE, Operation(), "/orders")
        assert get_existing_operation(operations_map(paths, "/orders"), RequestMethod.TRACE) is None
