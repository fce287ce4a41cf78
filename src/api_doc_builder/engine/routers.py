"""Pairing of declared router operations with raw functional routes.

A functional router exposes raw (path, methods, consumes, produces, headers,
query params) tuples; its documentation is declared separately. When several
tuples share a path, the pairing narrows on path, then methods, then produces,
then consumes, each level adding to the previous ones, until exactly one tuple
is left. An ambiguous or empty result leaves the declaration untouched.
"""

from api_doc_builder.models.route import (
    RequestMethod,
    RouterFunctionBean,
    RouterFunctionData,
    RouterOperation,
    sort_methods,
)


def is_equal_arrays(array1: list[str] | None, array2: list[str] | None) -> bool:
    """Sorted-list equality; duplicates count."""
    return sorted(array1 or []) == sorted(array2 or [])


def is_equal_methods(methods1: list[RequestMethod] | None, methods2: list[RequestMethod] | None) -> bool:
    order = list(RequestMethod)
    return sorted(methods1 or [], key=order.index) == sorted(methods2 or [], key=order.index)


_NARROWING = (
    ("methods", is_equal_methods),
    ("produces", is_equal_arrays),
    ("consumes", is_equal_arrays),
)


def fill_router_operation(data: RouterFunctionData, router_operation: RouterOperation) -> None:
    """Copy route attributes into every field the declaration left unset."""
    if not router_operation.consumes:
        router_operation.consumes = list(data.consumes)
    if not router_operation.produces:
        router_operation.produces = list(data.produces)
    if not router_operation.headers:
        router_operation.headers = list(data.headers)
    if not router_operation.methods:
        router_operation.methods = list(data.methods)
    if not router_operation.query_params:
        router_operation.query_params = dict(data.query_params)


def merge_routers(datas: list[RouterFunctionData], router_operations: list[RouterOperation]) -> None:
    for router_operation in router_operations:
        if not router_operation.path.strip():
            continue
        matches = [d for d in datas if d.path == router_operation.path]
        for attribute, is_equal in _NARROWING:
            if len(matches) < 2:
                break
            declared = getattr(router_operation, attribute)
            if declared:
                matches = [d for d in matches if is_equal(declared, getattr(d, attribute))]
        if len(matches) == 1:
            fill_router_operation(matches[0], router_operation)


def router_function_operations(bean: RouterFunctionBean) -> list[RouterOperation]:
    """The router operations documenting one functional router."""
    if any(data.operation_model is not None for data in bean.datas):
        return [RouterOperation.from_router_function_data(data) for data in bean.datas]

    declared = [router_operation.model_copy(deep=True) for router_operation in bean.router_operations]
    if len(declared) == 1 and bean.datas:
        first = bean.datas[0]
        if not declared[0].path:
            declared[0].path = first.path
        fill_router_operation(first, declared[0])
    else:
        merge_routers(bean.datas, declared)
    return declared


def sorted_router_operations(router_operations: list[RouterOperation]) -> list[RouterOperation]:
    """Natural order; methods of each operation are normalised first."""
    for router_operation in router_operations:
        router_operation.methods = sort_methods(router_operation.methods)
    return sorted(router_operations)
