"""Accumulation of operations into the document's paths."""

from api_doc_builder.models.openapi import HttpMethod, Operation, PathItem
from api_doc_builder.models.route import RequestMethod

# TRACE has no lookup: a trace operation is always rebuilt.
_EXISTING_LOOKUP = {
    RequestMethod.GET: HttpMethod.GET,
    RequestMethod.POST: HttpMethod.POST,
    RequestMethod.PUT: HttpMethod.PUT,
    RequestMethod.DELETE: HttpMethod.DELETE,
    RequestMethod.PATCH: HttpMethod.PATCH,
    RequestMethod.HEAD: HttpMethod.HEAD,
    RequestMethod.OPTIONS: HttpMethod.OPTIONS,
}


def operations_map(paths: dict[str, PathItem], operation_path: str) -> dict[HttpMethod, Operation] | None:
    path_item = paths.get(operation_path)
    return path_item.operations_map() if path_item is not None else None


def get_existing_operation(
    operation_map: dict[HttpMethod, Operation] | None, request_method: RequestMethod
) -> Operation | None:
    if not operation_map:
        return None
    http_method = _EXISTING_LOOKUP.get(request_method)
    return operation_map.get(http_method) if http_method is not None else None


def prune_path_parameters(operation: Operation, operation_path: str) -> None:
    """Drop path parameters that do not appear in the path template."""
    if not operation.parameters:
        return
    operation.parameters = [
        p
        for p in operation.parameters
        if p.in_ != "path" or "{" + str(p.name) + "}" in operation_path or "{*" + str(p.name) + "}" in operation_path
    ] or None


def build_path_item(
    request_method: RequestMethod, operation: Operation | None, operation_path: str, paths: dict[str, PathItem]
) -> PathItem:
    """Fetch or create the path item for ``operation_path`` and attach ``operation``."""
    if operation is not None:
        prune_path_parameters(operation, operation_path)
    path_item = paths.get(operation_path) or PathItem()
    path_item.set_operation(request_method.value, operation)
    return path_item


def add_operation(
    paths: dict[str, PathItem], request_method: RequestMethod, operation: Operation, operation_path: str
) -> None:
    paths[operation_path] = build_path_item(request_method, operation, operation_path, paths)
